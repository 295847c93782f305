"""View models, form payloads and the storage <-> view mapping.

Storage rows (``models.py``) use snake_case column names and allow NULLs; the
view models here are what editors hold and what the API returns. JSON uses
camelCase keys (``sdrName``, ``potentialAppt``) through the alias generator,
while Python code keeps snake_case attribute names.
"""
import datetime as dt
from datetime import UTC, datetime, time

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel

from models import Appointment, AppointmentStatus, DailyStatistic, Incentive, WeeklyMeeting
from notifications import Notification


class ViewModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _day(value: datetime | dt.date | None) -> str:
    """Render a stored date/datetime as YYYY-MM-DD, empty when missing."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


def _midnight(value: dt.date | None, default: datetime | None = None) -> datetime | None:
    if value is None:
        return default
    return datetime.combine(value, time.min, tzinfo=UTC)


# ---------------------------------------------------------------------------
# Appointments
# ---------------------------------------------------------------------------


class AppointmentView(ViewModel):
    id: int
    first_name: str
    last_name: str
    title: str = ""
    email: str = ""
    company: str = ""
    number: str = ""
    linkedin: str = ""
    country: str = ""
    scheduled_on: str = ""
    scheduled_for: str = ""
    status: AppointmentStatus = AppointmentStatus.PENDING
    opportunity: bool = False
    notes: str = ""
    reschedule_comments: str = ""
    meeting_notes: str = ""
    sdr_name: str = ""

    @computed_field
    @property
    def conducted(self) -> bool:
        return self.status == AppointmentStatus.CONDUCTED

    @computed_field
    @property
    def no_show(self) -> bool:
        return self.status == AppointmentStatus.NO_SHOW


class AppointmentForm(ViewModel):
    first_name: str = ""
    last_name: str = ""
    title: str = ""
    email: str = ""
    company: str = ""
    number: str = ""
    linkedin: str = ""
    country: str = ""
    scheduled_on: dt.date | None = None
    scheduled_for: dt.date | None = None
    # Either send ``status`` or the legacy conducted/noShow flags
    status: AppointmentStatus | None = None
    conducted: bool = False
    no_show: bool = False
    opportunity: bool = False
    notes: str = ""
    reschedule_comments: str = ""
    meeting_notes: str = ""
    sdr_name: str = ""

    def resolved_status(self) -> AppointmentStatus:
        if self.status is not None:
            return self.status
        return AppointmentStatus.from_flags(self.conducted, self.no_show)


def appointment_view(row: Appointment) -> AppointmentView:
    return AppointmentView(
        id=row.id,
        first_name=row.first_name or "",
        last_name=row.last_name or "",
        title=row.title or "",
        email=row.email or "",
        company=row.company or "",
        number=row.number or "",
        linkedin=row.linkedin or "",
        country=row.country or "",
        scheduled_on=_day(row.scheduled_on),
        scheduled_for=_day(row.scheduled_for),
        status=row.status or AppointmentStatus.PENDING,
        opportunity=bool(row.opportunity),
        notes=row.notes or "",
        reschedule_comments=row.reschedule_comments or "",
        meeting_notes=row.meeting_notes or "",
        sdr_name=row.sdr_name or "",
    )


def appointment_form(view: AppointmentView) -> AppointmentForm:
    """Pre-populate an edit form from a loaded appointment."""
    return AppointmentForm(
        first_name=view.first_name,
        last_name=view.last_name,
        title=view.title,
        email=view.email,
        company=view.company,
        number=view.number,
        linkedin=view.linkedin,
        country=view.country,
        scheduled_on=dt.date.fromisoformat(view.scheduled_on) if view.scheduled_on else None,
        scheduled_for=dt.date.fromisoformat(view.scheduled_for) if view.scheduled_for else None,
        status=view.status,
        opportunity=view.opportunity,
        notes=view.notes,
        reschedule_comments=view.reschedule_comments,
        meeting_notes=view.meeting_notes,
        sdr_name=view.sdr_name,
    )


def appointment_row(form: AppointmentForm, creating: bool) -> dict:
    """Map a form to storage columns.

    On create both dates fall back to now; on update a missing booking date is
    stored as NULL and a missing meeting date still falls back to now.
    """
    now = datetime.now(UTC)
    return {
        "first_name": form.first_name,
        "last_name": form.last_name,
        "title": form.title,
        "email": form.email,
        "company": form.company,
        "number": form.number,
        "linkedin": form.linkedin,
        "country": form.country,
        "scheduled_on": _midnight(form.scheduled_on, now if creating else None),
        "scheduled_for": _midnight(form.scheduled_for, now),
        "status": form.resolved_status(),
        "opportunity": form.opportunity,
        "notes": form.notes,
        "reschedule_comments": form.reschedule_comments,
        "meeting_notes": form.meeting_notes,
        "sdr_name": form.sdr_name,
    }


# ---------------------------------------------------------------------------
# Daily statistics
# ---------------------------------------------------------------------------


class StatisticView(ViewModel):
    id: int
    sdr_name: str
    date: str
    calls: int = 0
    connected: int = 0
    emails: int = 0
    potential_appt: int = 0


class StatisticForm(ViewModel):
    sdr_name: str = ""
    date: dt.date | None = None
    calls: int = Field(default=0, ge=0)
    connected: int = Field(default=0, ge=0)
    emails: int = Field(default=0, ge=0)
    potential_appt: int = Field(default=0, ge=0)


def statistic_view(row: DailyStatistic) -> StatisticView:
    return StatisticView(
        id=row.id,
        sdr_name=row.sdr_name or "",
        date=_day(row.date),
        calls=row.calls or 0,
        connected=row.connected or 0,
        emails=row.emails or 0,
        potential_appt=row.potential_appointments or 0,
    )


def statistic_form(view: StatisticView) -> StatisticForm:
    return StatisticForm(
        sdr_name=view.sdr_name,
        date=dt.date.fromisoformat(view.date) if view.date else None,
        calls=view.calls,
        connected=view.connected,
        emails=view.emails,
        potential_appt=view.potential_appt,
    )


def statistic_row(form: StatisticForm, creating: bool) -> dict:
    return {
        "sdr_name": form.sdr_name,
        "date": form.date,
        "calls": form.calls,
        "connected": form.connected,
        "emails": form.emails,
        "potential_appointments": form.potential_appt,
    }


# ---------------------------------------------------------------------------
# Incentives (SPIFFs)
# ---------------------------------------------------------------------------

CURRENCIES = ("USD", "EUR", "GBP", "INR", "AED", "PKR")


class IncentiveView(ViewModel):
    id: int
    approved: bool = False
    date_announced: str = ""
    announced_by: str = ""
    bdr_name: str = ""
    amount: float = 0
    currency: str = "USD"
    reason: str = ""
    additional_notes: str = ""


class IncentiveForm(ViewModel):
    approved: bool = False
    date_announced: dt.date | None = None
    announced_by: str = ""
    bdr_name: str = ""
    amount: float = Field(default=0, ge=0)
    currency: str = "USD"
    reason: str = ""
    additional_notes: str = ""

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v):
        normalized = (v or "USD").strip().upper()
        if normalized not in CURRENCIES:
            raise ValueError(f"Currency must be one of: {CURRENCIES}")
        return normalized


def incentive_view(row: Incentive) -> IncentiveView:
    return IncentiveView(
        id=row.id,
        approved=bool(row.approved),
        date_announced=_day(row.date_announced),
        announced_by=row.announced_by or "",
        bdr_name=row.bdr_name or "",
        amount=row.amount or 0,
        currency=row.currency or "USD",
        reason=row.reason or "",
        additional_notes=row.additional_notes or "",
    )


def incentive_form(view: IncentiveView) -> IncentiveForm:
    return IncentiveForm(
        approved=view.approved,
        date_announced=dt.date.fromisoformat(view.date_announced) if view.date_announced else None,
        announced_by=view.announced_by,
        bdr_name=view.bdr_name,
        amount=view.amount,
        currency=view.currency,
        reason=view.reason,
        additional_notes=view.additional_notes,
    )


def incentive_row(form: IncentiveForm, creating: bool) -> dict:
    return {
        "approved": form.approved,
        "date_announced": form.date_announced,
        "announced_by": form.announced_by,
        "bdr_name": form.bdr_name,
        "amount": form.amount,
        "currency": form.currency,
        "reason": form.reason,
        "additional_notes": form.additional_notes,
    }


# ---------------------------------------------------------------------------
# Weekly meetings
# ---------------------------------------------------------------------------


class WeeklyMeetingView(ViewModel):
    id: int | None = None
    week: str = ""
    month: str = ""
    year: str = ""
    first_name: str = ""
    last_name: str = ""
    company_name: str = ""
    title: str = ""
    email: str = ""
    contact_no: str = ""
    assigned_to: str = ""
    location: str = ""


class WeeklyMeetingForm(ViewModel):
    week: str = ""
    month: str = ""
    year: str = ""
    first_name: str = ""
    last_name: str = ""
    company_name: str = ""
    title: str = ""
    email: str = ""
    contact_no: str = ""
    assigned_to: str = ""
    location: str = ""


def weekly_meeting_view(row: WeeklyMeeting) -> WeeklyMeetingView:
    return WeeklyMeetingView(
        id=row.id,
        week=row.week or "",
        month=row.month or "",
        year=row.year or "",
        first_name=row.first_name or "",
        last_name=row.last_name or "",
        company_name=row.company_name or "",
        title=row.title or "",
        email=row.email or "",
        contact_no=row.contact_no or "",
        assigned_to=row.assigned_to or "",
        location=row.location or "",
    )


def weekly_meeting_form(view: WeeklyMeetingView) -> WeeklyMeetingForm:
    return WeeklyMeetingForm(**view.model_dump(exclude={"id"}))


def weekly_meeting_row(form: WeeklyMeetingForm, creating: bool) -> dict:
    return {
        "week": form.week,
        "month": form.month,
        "year": form.year,
        "first_name": form.first_name,
        "last_name": form.last_name,
        "company_name": form.company_name,
        "title": form.title,
        "email": form.email,
        "contact_no": form.contact_no,
        "assigned_to": form.assigned_to,
        "location": form.location,
    }


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class OperationResponse(ViewModel):
    ok: bool
    id: int | None = None
    count: int | None = None
    notifications: list[Notification] = []


class StatTotalsResponse(ViewModel):
    calls: int
    connected: int
    emails: int
    potential_appt: int
    connection_rate: str


class RepresentativeRollup(StatTotalsResponse):
    sdr_name: str


class StatisticsSummaryResponse(ViewModel):
    totals: StatTotalsResponse
    by_representative: list[RepresentativeRollup]


class AppointmentSummaryResponse(ViewModel):
    total: int
    conducted: int
    no_shows: int
    pending: int
    opportunities: int
    companies: int
    representatives: int


class IncentiveSummaryResponse(ViewModel):
    count: int
    approved_total: float
    pending_total: float
    recipients: int


class MeetingRowResponse(ViewModel):
    source: str  # "manual" or "appointment"
    editable: bool
    appointment_id: int | None = None
    meeting: WeeklyMeetingView


class MeetingOptionsResponse(ViewModel):
    weeks: list[str]
    months: list[str]
    years: list[str]


class TabResponse(ViewModel):
    id: str
    label: str
    active: bool = False
