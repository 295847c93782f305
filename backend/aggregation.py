"""Summary statistics for the dashboard cards."""
from collections.abc import Iterable
from dataclasses import dataclass

from models import AppointmentStatus


def connection_rate(total_calls: int, total_connected: int) -> str:
    """Connected calls as a percentage of calls, one decimal place; "0" when there were no calls."""
    if total_calls <= 0:
        return "0"
    return f"{total_connected / total_calls * 100:.1f}"


@dataclass
class StatTotals:
    calls: int = 0
    connected: int = 0
    emails: int = 0
    potential_appointments: int = 0

    @property
    def connection_rate(self) -> str:
        return connection_rate(self.calls, self.connected)

    def add(self, record) -> None:
        self.calls += record.calls or 0
        self.connected += record.connected or 0
        self.emails += record.emails or 0
        self.potential_appointments += _potential(record)


def _potential(record) -> int:
    # Storage rows and view rows name this counter differently
    value = getattr(record, "potential_appointments", None)
    if value is None:
        value = getattr(record, "potential_appt", 0)
    return value or 0


def total_statistics(records: Iterable) -> StatTotals:
    totals = StatTotals()
    for record in records:
        totals.add(record)
    return totals


def group_by_representative(records: Iterable) -> dict[str, StatTotals]:
    """Sum counters per SDR name.

    Names are compared exactly, so "Ashar" and "ashar " are separate groups.
    Groups come out in the order their SDR first appears.
    """
    groups: dict[str, StatTotals] = {}
    for record in records:
        groups.setdefault(record.sdr_name, StatTotals()).add(record)
    return groups


@dataclass
class AppointmentSummary:
    total: int = 0
    conducted: int = 0
    no_shows: int = 0
    pending: int = 0
    opportunities: int = 0
    companies: int = 0
    representatives: int = 0


def summarize_appointments(records: Iterable) -> AppointmentSummary:
    summary = AppointmentSummary()
    companies = set()
    representatives = set()
    for record in records:
        summary.total += 1
        if record.status == AppointmentStatus.CONDUCTED:
            summary.conducted += 1
        elif record.status == AppointmentStatus.NO_SHOW:
            summary.no_shows += 1
        else:
            summary.pending += 1
        if record.opportunity:
            summary.opportunities += 1
        if record.company:
            companies.add(record.company)
        if record.sdr_name:
            representatives.add(record.sdr_name)
    summary.companies = len(companies)
    summary.representatives = len(representatives)
    return summary


@dataclass
class IncentiveSummary:
    count: int = 0
    approved_total: float = 0
    pending_total: float = 0
    recipients: int = 0


def summarize_incentives(records: Iterable) -> IncentiveSummary:
    """Approved vs. pending SPIFF totals. Amounts are summed regardless of currency."""
    summary = IncentiveSummary()
    recipients = set()
    for record in records:
        summary.count += 1
        if record.approved:
            summary.approved_total += record.amount or 0
        else:
            summary.pending_total += record.amount or 0
        if record.bdr_name:
            recipients.add(record.bdr_name)
    summary.recipients = len(recipients)
    return summary
