"""Tab navigation and state shared between the dashboard views."""
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from editors import (
    AppointmentEditor,
    EditorState,
    IncentiveEditor,
    RecordEditor,
    StatisticsEditor,
    WeeklyMeetingEditor,
)
from notifications import Notifier
from schemas import AppointmentView
from store import RecordStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Tab:
    id: str
    label: str


TABS = (
    Tab("appointments", "Appointments"),
    Tab("spiff", "SPIFF Tracker"),
    Tab("weekly", "Weekly Reports"),
    Tab("stats", "Statistics"),
)
DEFAULT_TAB = "appointments"


class AppointmentStore:
    """The loaded appointments, shared by reference between views.

    ``replace_all`` is the only way to change the contents.
    """

    def __init__(self):
        self._rows: list[AppointmentView] = []
        self._subscribers: list[Callable[[list[AppointmentView]], None]] = []

    def all(self) -> list[AppointmentView]:
        return list(self._rows)

    def replace_all(self, rows: Iterable[AppointmentView]) -> None:
        self._rows = list(rows)
        for callback in self._subscribers:
            callback(self.all())

    def subscribe(self, callback: Callable[[list[AppointmentView]], None]) -> None:
        self._subscribers.append(callback)

    def __len__(self):
        return len(self._rows)


class ViewShell:
    def __init__(self, store: RecordStore, notifier: Notifier, appointments: AppointmentStore | None = None):
        self.appointments = appointments or AppointmentStore()
        self.editors: dict[str, RecordEditor] = {
            "appointments": AppointmentEditor(store, notifier, shared=self.appointments),
            "spiff": IncentiveEditor(store, notifier),
            "weekly": WeeklyMeetingEditor(store, notifier, appointments=self.appointments),
            "stats": StatisticsEditor(store, notifier),
        }
        self.active_tab = DEFAULT_TAB

    def activate(self, tab_id: str) -> str:
        """Mark a tab active without loading it. Unknown tabs fall back to appointments."""
        if tab_id not in self.editors:
            logger.info(f"Unknown tab {tab_id!r}, showing {DEFAULT_TAB}")
            tab_id = DEFAULT_TAB
        self.active_tab = tab_id
        return tab_id

    def select(self, tab_id: str) -> RecordEditor:
        """Activate a tab, loading its editor on first use."""
        tab_id = self.activate(tab_id)
        editor = self.editors[tab_id]
        if tab_id == "weekly" and self.editors["appointments"].state == EditorState.IDLE:
            # Weekly reports merge in appointment rows
            self.editors["appointments"].load()
        if editor.state == EditorState.IDLE:
            editor.load()
        return editor

    @property
    def active_editor(self) -> RecordEditor:
        return self.editors[self.active_tab]

    def tabs(self) -> list[tuple[Tab, bool]]:
        return [(tab, tab.id == self.active_tab) for tab in TABS]
