"""Search, status and SDR filters for appointment lists."""
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from models import AppointmentStatus

ALL = "all"


class StatusFilter(str, Enum):
    ALL = "all"
    CONDUCTED = "conducted"
    NO_SHOW = "no-show"
    PENDING = "pending"


@dataclass(frozen=True)
class FilterSpec:
    search_text: str = ""
    status: StatusFilter = StatusFilter.ALL
    representative: str = ALL


def matches_search(record, search_text: str) -> bool:
    if not search_text:
        return True
    needle = search_text.lower()
    full_name = f"{record.first_name} {record.last_name}".lower()
    return (
        needle in full_name
        or needle in (record.company or "").lower()
        or needle in (record.email or "").lower()
    )


def matches_status(record, status: StatusFilter) -> bool:
    if status == StatusFilter.ALL:
        return True
    return record.status == AppointmentStatus(status.value)


def matches_representative(record, representative: str) -> bool:
    return representative == ALL or record.sdr_name == representative


def matches(record, spec: FilterSpec) -> bool:
    return (
        matches_search(record, spec.search_text)
        and matches_status(record, spec.status)
        and matches_representative(record, spec.representative)
    )


def apply_filter(records: Iterable, spec: FilterSpec) -> list:
    """Keep the records matching every active predicate, in input order."""
    return [record for record in records if matches(record, spec)]


def representative_options(records: Iterable) -> list[str]:
    """Distinct non-empty SDR names in first-seen order."""
    seen = {}
    for record in records:
        if record.sdr_name:
            seen.setdefault(record.sdr_name, None)
    return list(seen)
