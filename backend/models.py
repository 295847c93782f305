import datetime as dt
from datetime import UTC, datetime
from enum import Enum

from sqlmodel import Field, SQLModel


class AppointmentStatus(str, Enum):
    PENDING = "pending"
    CONDUCTED = "conducted"
    NO_SHOW = "no-show"

    @classmethod
    def from_flags(cls, conducted: bool, no_show: bool) -> "AppointmentStatus":
        """Collapse the legacy conducted/no-show flags; conducted wins over no-show."""
        if conducted:
            return cls.CONDUCTED
        if no_show:
            return cls.NO_SHOW
        return cls.PENDING


class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"

    id: int | None = Field(default=None, primary_key=True)
    first_name: str
    last_name: str
    title: str | None = Field(default=None)
    email: str = Field(default="")
    company: str = Field(default="", index=True)
    number: str | None = Field(default=None)
    linkedin: str | None = Field(default=None)
    country: str | None = Field(default=None)
    scheduled_on: datetime | None = Field(default=None)  # booking date
    scheduled_for: datetime = Field(default_factory=lambda: datetime.now(UTC))  # meeting date
    status: AppointmentStatus = Field(default=AppointmentStatus.PENDING, index=True)
    opportunity: bool = Field(default=False)
    notes: str | None = Field(default=None)
    reschedule_comments: str | None = Field(default=None)
    meeting_notes: str | None = Field(default=None)
    sdr_name: str = Field(index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime | None = Field(default=None)


class DailyStatistic(SQLModel, table=True):
    __tablename__ = "daily_statistics"

    # (sdr_name, date) is not unique; duplicate rows are both counted
    id: int | None = Field(default=None, primary_key=True)
    sdr_name: str = Field(index=True)
    date: dt.date = Field(index=True)
    calls: int = Field(default=0)
    connected: int = Field(default=0)
    emails: int = Field(default=0)
    potential_appointments: int = Field(default=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime | None = Field(default=None)


class Incentive(SQLModel, table=True):
    __tablename__ = "incentives"

    id: int | None = Field(default=None, primary_key=True)
    approved: bool = Field(default=False, index=True)
    date_announced: dt.date
    announced_by: str
    bdr_name: str = Field(index=True)  # recipient
    amount: float = Field(default=0)
    currency: str = Field(default="USD")
    reason: str
    additional_notes: str | None = Field(default=None)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime | None = Field(default=None)


class WeeklyMeeting(SQLModel, table=True):
    __tablename__ = "weekly_meetings"

    id: int | None = Field(default=None, primary_key=True)
    week: str = Field(default="")
    month: str = Field(index=True)
    year: str = Field(index=True)
    first_name: str
    last_name: str
    company_name: str
    title: str | None = Field(default=None)
    email: str | None = Field(default=None)
    contact_no: str | None = Field(default=None)
    assigned_to: str | None = Field(default=None)  # AE
    location: str | None = Field(default=None)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime | None = Field(default=None)
