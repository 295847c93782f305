"""Appointment CSV import.

The parser is deliberately simple: lines are split on ``\\n`` and fields on
``,``. Quotes are stripped from tokens but are not interpreted, so a comma
inside a quoted field still splits it. Columns are located by header name, and
a missing column or token falls back to a default rather than failing the row.
"""
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime

from models import AppointmentStatus

logger = logging.getLogger(__name__)

# storage column -> expected CSV header
TEXT_COLUMNS = {
    "first_name": "First Name",
    "last_name": "Last Name",
    "title": "Title",
    "email": "Email",
    "company": "Company",
    "number": "Number",
    "linkedin": "LinkedIn",
    "country": "Country",
    "notes": "Notes",
    "reschedule_comments": "Reschedule Comments",
    "meeting_notes": "Meeting Notes",
    "sdr_name": "SDR Name",
}
DATE_COLUMNS = {
    "scheduled_on": "Appointment Scheduled on",
    "scheduled_for": "Appointment Scheduled for",
}
BOOLEAN_COLUMNS = {
    "conducted": "Conducted",
    "opportunity": "Opportunity",
}

TRUTHY_TOKENS = {"true", "yes"}
DATE_FORMATS = ("%m/%d/%Y", "%Y/%m/%d")


class CsvImportError(ValueError):
    """Raised when a CSV file cannot be turned into appointment rows."""


@dataclass
class ImportResult:
    rows: list[dict] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.rows)


def parse_boolean(token: str) -> bool:
    return token.strip().lower() in TRUTHY_TOKENS


def parse_date(token: str, default: datetime) -> datetime:
    token = token.strip()
    if not token:
        return default
    try:
        parsed = datetime.fromisoformat(token)
    except ValueError:
        parsed = None
        for fmt in DATE_FORMATS:
            try:
                parsed = datetime.strptime(token, fmt)
                break
            except ValueError:
                continue
    if parsed is None:
        raise ValueError(f"Unrecognized date {token!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def clean_token(token: str) -> str:
    return token.replace('"', "").strip()


def build_header_index(header_line: str) -> dict[str, int]:
    """Map each header name to its column; the first occurrence of a name wins."""
    index: dict[str, int] = {}
    for position, name in enumerate(header_line.split(",")):
        index.setdefault(name.strip(), position)
    return index


def parse_appointments_csv(text: str, now: datetime | None = None) -> ImportResult:
    """Parse CSV text into appointment storage rows ready for a batch insert."""
    now = now or datetime.now(UTC)
    lines = text.split("\n")
    if not lines or not lines[0].strip():
        raise CsvImportError("CSV file is empty or has no header row")

    header = build_header_index(lines[0])
    missing = [name for name in (*TEXT_COLUMNS.values(), *DATE_COLUMNS.values(), *BOOLEAN_COLUMNS.values())
               if name not in header]
    if missing:
        logger.info(f"CSV header is missing columns, defaults will be used: {missing}")

    def lookup(tokens: list[str], name: str) -> str:
        position = header.get(name)
        if position is None or position >= len(tokens):
            return ""
        return tokens[position]

    result = ImportResult()
    for line_number, line in enumerate(lines[1:], start=2):
        if not line.strip():
            continue
        tokens = [clean_token(t) for t in line.split(",")]

        row = {column: lookup(tokens, name) for column, name in TEXT_COLUMNS.items()}
        for column, name in DATE_COLUMNS.items():
            try:
                row[column] = parse_date(lookup(tokens, name), now)
            except ValueError as e:
                raise CsvImportError(f"Line {line_number}: {e} in column '{name}'") from e
        conducted = parse_boolean(lookup(tokens, BOOLEAN_COLUMNS["conducted"]))
        row["opportunity"] = parse_boolean(lookup(tokens, BOOLEAN_COLUMNS["opportunity"]))
        # No-show is never imported
        row["status"] = AppointmentStatus.from_flags(conducted, False)
        result.rows.append(row)

    logger.info(f"Parsed {result.count} appointment rows from CSV")
    return result
