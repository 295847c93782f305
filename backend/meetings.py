"""Weekly meeting rows, both entered by hand and derived from appointments.

Week buckets follow the calendar day of the month only (1-7 is week 1, 8-14
is week 2, and so on up to week 5 for days 29-31); actual weekday boundaries
are ignored.
"""
import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from typing import Literal

from schemas import AppointmentView, WeeklyMeetingView

WEEK_OPTIONS = [
    "Week 1 (1-7th)",
    "Week 2 (8-14th)",
    "Week 3 (15-21st)",
    "Week 4 (22-28th)",
    "Week 5 (29-31st)",
]

MONTHS = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

YEARS = ["2024", "2025", "2026"]

_WEEK_NUMBER = re.compile(r"^\s*Week\s+(\d+)", re.IGNORECASE)


def week_bucket(day: int) -> int:
    if not 1 <= day <= 31:
        raise ValueError(f"Day of month must be between 1 and 31, got {day}")
    return (day - 1) // 7 + 1


def week_label(day: int) -> str:
    return f"Week {week_bucket(day)}"


def week_number(label: str) -> int | None:
    """Week number from a label such as "Week 2" or "Week 2 (8-14th)"."""
    match = _WEEK_NUMBER.match(label or "")
    return int(match.group(1)) if match else None


@dataclass(frozen=True)
class ManualMeeting:
    meeting: WeeklyMeetingView
    source: Literal["manual"] = "manual"

    @property
    def editable(self) -> bool:
        return True


@dataclass(frozen=True)
class AppointmentMeeting:
    appointment_id: int
    meeting: WeeklyMeetingView
    source: Literal["appointment"] = "appointment"

    @property
    def editable(self) -> bool:
        return False


MeetingRow = ManualMeeting | AppointmentMeeting


def meeting_from_appointment(appointment: AppointmentView) -> AppointmentMeeting | None:
    """Project an appointment onto a weekly meeting row; None without a meeting date."""
    if not appointment.scheduled_for:
        return None
    meeting_date = date.fromisoformat(appointment.scheduled_for)
    return AppointmentMeeting(
        appointment_id=appointment.id,
        meeting=WeeklyMeetingView(
            week=week_label(meeting_date.day),
            month=MONTHS[meeting_date.month - 1],
            year=str(meeting_date.year),
            first_name=appointment.first_name,
            last_name=appointment.last_name,
            company_name=appointment.company,
            title=appointment.title,
            email=appointment.email,
            contact_no=appointment.number,
            assigned_to=appointment.sdr_name,
            location=appointment.country,
        ),
    )


def _week_sort_key(row: MeetingRow) -> int:
    number = week_number(row.meeting.week)
    return number if number is not None else len(WEEK_OPTIONS) + 1


def meetings_for_period(
    manual: Iterable[WeeklyMeetingView],
    appointments: Iterable[AppointmentView],
    month: str,
    year: str,
) -> list[MeetingRow]:
    """Manual rows then appointment-derived rows for one month, each ordered by week."""
    manual_rows = [
        ManualMeeting(meeting=m) for m in manual if m.month == month and m.year == year
    ]
    derived_rows = []
    for appointment in appointments:
        row = meeting_from_appointment(appointment)
        if row and row.meeting.month == month and row.meeting.year == year:
            derived_rows.append(row)
    return sorted(manual_rows, key=_week_sort_key) + sorted(derived_rows, key=_week_sort_key)
