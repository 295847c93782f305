"""Load / edit / save / reload cycles for the four dashboard collections.

Each editor owns the rows of one collection as view models. Writes go through
the record store and are always followed by a full reload; nothing is patched
locally. Failures never propagate out of ``load``, ``submit``,
``confirm_delete`` or ``import_csv``: they are logged, reported through the
notifier, and left on ``last_error`` for callers that need the cause.
"""
import logging
from datetime import date
from enum import Enum

from pydantic import BaseModel

from aggregation import (
    group_by_representative,
    summarize_appointments,
    summarize_incentives,
    total_statistics,
)
from csv_import import CsvImportError, parse_appointments_csv
from filters import FilterSpec, apply_filter, representative_options
from meetings import MONTHS, AppointmentMeeting, ManualMeeting, meetings_for_period
from notifications import Notification, Notifier
from schemas import (
    AppointmentForm,
    IncentiveForm,
    StatisticForm,
    WeeklyMeetingForm,
    WeeklyMeetingView,
    appointment_form,
    appointment_row,
    appointment_view,
    incentive_form,
    incentive_row,
    incentive_view,
    statistic_form,
    statistic_row,
    statistic_view,
    weekly_meeting_form,
    weekly_meeting_row,
    weekly_meeting_view,
)
from store import RecordStore, RecordStoreError

logger = logging.getLogger(__name__)


class EditorState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"


class FormState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    SUBMITTING = "submitting"


class FormMode(str, Enum):
    CREATE = "create"
    EDIT = "edit"


class EditorError(Exception):
    """Raised when an editor action is not allowed in its current state."""


class RecordEditor:
    collection: str = ""
    order_by: str = "created_at"
    label: str = "Record"
    plural: str = "records"
    # (form attribute, display name) pairs that must be non-empty on save
    required_fields: tuple[tuple[str, str], ...] = ()
    form_class: type[BaseModel] = BaseModel

    def __init__(self, store: RecordStore, notifier: Notifier):
        self.store = store
        self.notifier = notifier
        self.records: list = []
        self.state = EditorState.IDLE
        self.form_state = FormState.CLOSED
        self.form_mode: FormMode | None = None
        self.form: BaseModel | None = None
        self.editing_id: int | None = None
        self.pending_delete_id: int | None = None
        self.last_saved_id: int | None = None
        self.last_error: Exception | None = None

    # storage <-> view mapping, provided per collection
    def to_view(self, row):
        raise NotImplementedError

    def to_form(self, view) -> BaseModel:
        raise NotImplementedError

    def to_row(self, form, creating: bool) -> dict:
        raise NotImplementedError

    def new_form(self) -> BaseModel:
        return self.form_class()

    def on_loaded(self) -> None:
        """Hook run after every successful load."""

    def _fail(self, title: str, error: Exception, description: str = "Please try again.") -> None:
        self.last_error = error
        self.notifier.notify(Notification(title=title, description=description, is_error=True))

    def find(self, record_id: int):
        for record in self.records:
            if record.id == record_id:
                return record
        return None

    def load(self) -> bool:
        self.state = EditorState.LOADING
        try:
            rows = self.store.list(self.collection, order_by=self.order_by, direction="desc")
        except RecordStoreError as e:
            logger.error(f"Error loading {self.plural}: {str(e)}")
            self.state = EditorState.READY
            self._fail(f"Error loading {self.plural}", e)
            return False
        self.records = [self.to_view(row) for row in rows]
        self.state = EditorState.READY
        logger.info(f"Loaded {len(self.records)} {self.plural}")
        self.on_loaded()
        return True

    def open_form(self, record=None) -> BaseModel:
        if self.form_state == FormState.SUBMITTING:
            raise EditorError(f"{self.label} is still being saved")
        if record is None:
            self.form_mode = FormMode.CREATE
            self.editing_id = None
            self.form = self.new_form()
        else:
            self.form_mode = FormMode.EDIT
            self.editing_id = record.id
            self.form = self.to_form(record)
        self.form_state = FormState.OPEN
        return self.form

    def close_form(self) -> None:
        self.form_state = FormState.CLOSED
        self.form_mode = None
        self.form = None
        self.editing_id = None

    def missing_fields(self, form) -> list[str]:
        missing = []
        for attribute, name in self.required_fields:
            value = getattr(form, attribute, None)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(name)
        return missing

    def submit(self, form: BaseModel | None = None) -> bool:
        """Save the open form. On failure the form stays open with its input."""
        if self.form_state == FormState.SUBMITTING:
            raise EditorError(f"{self.label} is already being saved")
        if self.form_state == FormState.CLOSED:
            raise EditorError("No form is open")
        if form is not None:
            self.form = form

        missing = self.missing_fields(self.form)
        if missing:
            self._fail(
                f"Error saving {self.label.lower()}",
                ValueError(f"Missing required fields: {', '.join(missing)}"),
                description=f"Required: {', '.join(missing)}",
            )
            return False

        creating = self.form_mode == FormMode.CREATE
        self.form_state = FormState.SUBMITTING
        try:
            row = self.to_row(self.form, creating)
            if creating:
                self.last_saved_id = self.store.insert(self.collection, row).id
            else:
                self.store.update(self.collection, self.editing_id, row)
                self.last_saved_id = self.editing_id
        except RecordStoreError as e:
            logger.error(f"Error saving {self.label.lower()}: {str(e)}")
            self.form_state = FormState.OPEN
            self._fail(f"Error saving {self.label.lower()}", e)
            return False

        self.load()
        self.close_form()
        action = "added" if creating else "updated"
        self.notifier.notify(Notification(title=f"{self.label} {action} successfully"))
        return True

    def request_delete(self, record_id: int) -> None:
        self.pending_delete_id = record_id

    def cancel_delete(self) -> None:
        self.pending_delete_id = None

    def confirm_delete(self) -> bool:
        if self.pending_delete_id is None:
            raise EditorError("No delete is awaiting confirmation")
        record_id, self.pending_delete_id = self.pending_delete_id, None
        try:
            self.store.delete(self.collection, record_id)
        except RecordStoreError as e:
            logger.error(f"Error deleting {self.label.lower()} {record_id}: {str(e)}")
            self._fail(f"Error deleting {self.label.lower()}", e)
            return False
        self.load()
        self.notifier.notify(Notification(title=f"{self.label} deleted successfully"))
        return True


class AppointmentEditor(RecordEditor):
    collection = "appointments"
    label = "Appointment"
    plural = "appointments"
    required_fields = (("first_name", "First Name"), ("last_name", "Last Name"), ("sdr_name", "SDR Name"))
    form_class = AppointmentForm

    def __init__(self, store: RecordStore, notifier: Notifier, shared=None):
        super().__init__(store, notifier)
        self.shared = shared
        self.importing = False

    def to_view(self, row):
        return appointment_view(row)

    def to_form(self, view):
        return appointment_form(view)

    def to_row(self, form, creating):
        return appointment_row(form, creating)

    def on_loaded(self) -> None:
        if self.shared is not None:
            self.shared.replace_all(self.records)

    def filtered(self, spec: FilterSpec) -> list:
        return apply_filter(self.records, spec)

    def representatives(self) -> list[str]:
        return representative_options(self.records)

    def summary(self):
        return summarize_appointments(self.records)

    def import_csv(self, text: str) -> int | None:
        """Parse and batch-insert a CSV export; returns the imported count or None on failure."""
        if self.importing:
            raise EditorError("An import is already in progress")
        self.importing = True
        try:
            result = parse_appointments_csv(text)
            count = self.store.insert_many(self.collection, result.rows)
        except (CsvImportError, RecordStoreError) as e:
            logger.error(f"Error importing appointments CSV: {str(e)}")
            self._fail("Error importing CSV", e, description=str(e))
            return None
        finally:
            self.importing = False
        self.load()
        self.notifier.notify(
            Notification(title="Import successful", description=f"Imported {count} appointments")
        )
        return count

    def import_file(self, data: bytes) -> int | None:
        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            logger.error(f"Could not read uploaded CSV: {str(e)}")
            self._fail("Error importing CSV", e, description="The file could not be read as UTF-8 text.")
            return None
        return self.import_csv(text)


class StatisticsEditor(RecordEditor):
    collection = "daily_statistics"
    order_by = "date"
    label = "Statistics"
    plural = "statistics"
    required_fields = (("sdr_name", "SDR Name"), ("date", "Date"))
    form_class = StatisticForm

    def to_view(self, row):
        return statistic_view(row)

    def to_form(self, view):
        return statistic_form(view)

    def to_row(self, form, creating):
        return statistic_row(form, creating)

    def totals(self):
        return total_statistics(self.records)

    def by_representative(self):
        return group_by_representative(self.records)


class IncentiveEditor(RecordEditor):
    collection = "incentives"
    order_by = "date_announced"
    label = "SPIFF"
    plural = "SPIFFs"
    required_fields = (
        ("date_announced", "Date Announced"),
        ("announced_by", "Announced By"),
        ("bdr_name", "BDR Name"),
        ("reason", "Reason"),
    )
    form_class = IncentiveForm

    def to_view(self, row):
        return incentive_view(row)

    def to_form(self, view):
        return incentive_form(view)

    def to_row(self, form, creating):
        return incentive_row(form, creating)

    def summary(self):
        return summarize_incentives(self.records)


class WeeklyMeetingEditor(RecordEditor):
    collection = "weekly_meetings"
    label = "Meeting"
    plural = "meetings"
    required_fields = (("first_name", "First Name"), ("last_name", "Last Name"), ("company_name", "Company Name"))
    form_class = WeeklyMeetingForm

    def __init__(self, store: RecordStore, notifier: Notifier, appointments=None):
        super().__init__(store, notifier)
        self.appointments = appointments
        today = date.today()
        self.selected_month = MONTHS[today.month - 1]
        self.selected_year = str(today.year)

    def to_view(self, row):
        return weekly_meeting_view(row)

    def to_form(self, view):
        return weekly_meeting_form(view)

    def to_row(self, form, creating):
        return weekly_meeting_row(form, creating)

    def new_form(self):
        return WeeklyMeetingForm(month=self.selected_month, year=self.selected_year)

    def select_period(self, month: str, year: str) -> None:
        if month not in MONTHS:
            raise EditorError(f"Unknown month: {month}")
        self.selected_month = month
        self.selected_year = str(year)

    def open_form(self, record=None):
        if isinstance(record, AppointmentMeeting):
            raise EditorError("Meetings derived from appointments can only be changed on the appointment")
        if isinstance(record, ManualMeeting):
            record = record.meeting
        if isinstance(record, WeeklyMeetingView) and record.id is None:
            raise EditorError("Meeting has no stored id")
        return super().open_form(record)

    def rows(self):
        appointments = self.appointments.all() if self.appointments is not None else []
        return meetings_for_period(self.records, appointments, self.selected_month, self.selected_year)
