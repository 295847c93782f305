import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, File, HTTPException, Query, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import Session

from db import CORS_ORIGINS, MAX_IMPORT_BYTES, create_db_and_tables, get_session
from editors import EditorError, RecordEditor
from filters import FilterSpec, StatusFilter
from meetings import MONTHS, WEEK_OPTIONS, YEARS
from notifications import CollectingNotifier
from schemas import (
    AppointmentForm,
    AppointmentSummaryResponse,
    AppointmentView,
    IncentiveForm,
    IncentiveSummaryResponse,
    IncentiveView,
    MeetingOptionsResponse,
    MeetingRowResponse,
    OperationResponse,
    RepresentativeRollup,
    StatisticForm,
    StatisticsSummaryResponse,
    StatisticView,
    StatTotalsResponse,
    TabResponse,
    WeeklyMeetingForm,
)
from shell import ViewShell
from store import RecordNotFoundError, RecordStore, RecordStoreError

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database on startup."""
    create_db_and_tables()
    logger.info("Database initialized")
    yield


# Create FastAPI app
app = FastAPI(title="SDR Dashboard API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_notifier() -> CollectingNotifier:
    return CollectingNotifier()


def get_shell(
    session: Session = Depends(get_session),
    notifier: CollectingNotifier = Depends(get_notifier),
) -> ViewShell:
    return ViewShell(RecordStore(session), notifier)


def raise_editor_failure(editor: RecordEditor, notifier: CollectingNotifier):
    """Turn the editor's last failure into an HTTP error carrying its notification."""
    error = editor.last_error
    if isinstance(error, RecordNotFoundError):
        status_code = 404
    elif isinstance(error, RecordStoreError):
        status_code = 500
    else:
        status_code = 400
    notification = notifier.last_error()
    detail = (notification.description or notification.title) if notification else str(error)
    raise HTTPException(status_code=status_code, detail=detail)


def load_or_fail(shell: ViewShell, tab: str, notifier: CollectingNotifier) -> RecordEditor:
    editor = shell.select(tab)
    if editor.last_error is not None:
        raise_editor_failure(editor, notifier)
    return editor


def create_record(editor: RecordEditor, form, notifier: CollectingNotifier) -> OperationResponse:
    try:
        editor.open_form()
        saved = editor.submit(form)
    except EditorError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    if not saved:
        raise_editor_failure(editor, notifier)
    return OperationResponse(ok=True, id=editor.last_saved_id, notifications=notifier.notifications)


def update_record(editor: RecordEditor, record_id: int, form, notifier: CollectingNotifier) -> OperationResponse:
    existing = editor.find(record_id)
    if existing is None:
        raise HTTPException(status_code=404, detail=f"{editor.label} not found")
    try:
        editor.open_form(existing)
        saved = editor.submit(form)
    except EditorError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    if not saved:
        raise_editor_failure(editor, notifier)
    return OperationResponse(ok=True, id=record_id, notifications=notifier.notifications)


def delete_record(editor: RecordEditor, record_id: int, confirm: bool, notifier: CollectingNotifier) -> OperationResponse:
    if not confirm:
        raise HTTPException(status_code=409, detail="Deletion must be confirmed with confirm=true")
    editor.request_delete(record_id)
    if not editor.confirm_delete():
        raise_editor_failure(editor, notifier)
    return OperationResponse(ok=True, id=record_id, notifications=notifier.notifications)


# ---------------------------------------------------------------------------
# Appointments
# ---------------------------------------------------------------------------


@app.get("/appointments", response_model=list[AppointmentView])
def list_appointments(
    search: str = Query("", description="Matches name, company or email"),
    status: StatusFilter = Query(StatusFilter.ALL),
    sdr: str = Query("all", description="SDR name or 'all'"),
    shell: ViewShell = Depends(get_shell),
    notifier: CollectingNotifier = Depends(get_notifier),
):
    """List appointments, newest first, narrowed by the given filters."""
    logger.info(f"Appointments request - search: {search!r}, status: {status.value}, sdr: {sdr}")
    editor = load_or_fail(shell, "appointments", notifier)
    return editor.filtered(FilterSpec(search_text=search, status=status, representative=sdr))


@app.get("/appointments/summary", response_model=AppointmentSummaryResponse)
def appointment_summary(
    shell: ViewShell = Depends(get_shell),
    notifier: CollectingNotifier = Depends(get_notifier),
):
    editor = load_or_fail(shell, "appointments", notifier)
    summary = editor.summary()
    return AppointmentSummaryResponse(
        total=summary.total,
        conducted=summary.conducted,
        no_shows=summary.no_shows,
        pending=summary.pending,
        opportunities=summary.opportunities,
        companies=summary.companies,
        representatives=summary.representatives,
    )


@app.get("/appointments/representatives")
def appointment_representatives(
    shell: ViewShell = Depends(get_shell),
    notifier: CollectingNotifier = Depends(get_notifier),
):
    """SDR names available to the representative filter."""
    editor = load_or_fail(shell, "appointments", notifier)
    return {"representatives": editor.representatives()}


@app.post("/appointments", response_model=OperationResponse)
def create_appointment(
    form: AppointmentForm,
    shell: ViewShell = Depends(get_shell),
    notifier: CollectingNotifier = Depends(get_notifier),
):
    return create_record(shell.editors["appointments"], form, notifier)


@app.put("/appointments/{appointment_id}", response_model=OperationResponse)
def update_appointment(
    appointment_id: int,
    form: AppointmentForm,
    shell: ViewShell = Depends(get_shell),
    notifier: CollectingNotifier = Depends(get_notifier),
):
    editor = load_or_fail(shell, "appointments", notifier)
    return update_record(editor, appointment_id, form, notifier)


@app.delete("/appointments/{appointment_id}", response_model=OperationResponse)
def delete_appointment(
    appointment_id: int,
    confirm: bool = Query(False, description="Must be true to delete"),
    shell: ViewShell = Depends(get_shell),
    notifier: CollectingNotifier = Depends(get_notifier),
):
    logger.info(f"Delete appointment request for ID: {appointment_id}")
    return delete_record(shell.editors["appointments"], appointment_id, confirm, notifier)


@app.post("/appointments/import", response_model=OperationResponse)
def import_appointments(
    file: UploadFile = File(...),
    shell: ViewShell = Depends(get_shell),
    notifier: CollectingNotifier = Depends(get_notifier),
):
    """Bulk-create appointments from a CSV export. The whole file is committed or none of it."""
    filename = file.filename or ""
    logger.info(f"CSV import request: {filename}")
    if not filename.lower().endswith(".csv"):
        raise HTTPException(status_code=400, detail="Only .csv files are supported")
    # One byte past the limit is enough to tell the upload is too large
    data = file.file.read(MAX_IMPORT_BYTES + 1)
    if len(data) > MAX_IMPORT_BYTES:
        raise HTTPException(status_code=413, detail=f"File exceeds {MAX_IMPORT_BYTES} bytes")

    editor = shell.editors["appointments"]
    try:
        count = editor.import_file(data)
    except EditorError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    if count is None:
        raise_editor_failure(editor, notifier)
    return OperationResponse(ok=True, count=count, notifications=notifier.notifications)


# ---------------------------------------------------------------------------
# Daily statistics
# ---------------------------------------------------------------------------


@app.get("/statistics", response_model=list[StatisticView])
def list_statistics(
    shell: ViewShell = Depends(get_shell),
    notifier: CollectingNotifier = Depends(get_notifier),
):
    """Daily statistics, most recent day first."""
    return load_or_fail(shell, "stats", notifier).records


@app.get("/statistics/summary", response_model=StatisticsSummaryResponse)
def statistics_summary(
    shell: ViewShell = Depends(get_shell),
    notifier: CollectingNotifier = Depends(get_notifier),
):
    editor = load_or_fail(shell, "stats", notifier)
    totals = editor.totals()
    return StatisticsSummaryResponse(
        totals=StatTotalsResponse(
            calls=totals.calls,
            connected=totals.connected,
            emails=totals.emails,
            potential_appt=totals.potential_appointments,
            connection_rate=totals.connection_rate,
        ),
        by_representative=[
            RepresentativeRollup(
                sdr_name=sdr_name,
                calls=group.calls,
                connected=group.connected,
                emails=group.emails,
                potential_appt=group.potential_appointments,
                connection_rate=group.connection_rate,
            )
            for sdr_name, group in editor.by_representative().items()
        ],
    )


@app.post("/statistics", response_model=OperationResponse)
def create_statistic(
    form: StatisticForm,
    shell: ViewShell = Depends(get_shell),
    notifier: CollectingNotifier = Depends(get_notifier),
):
    return create_record(shell.editors["stats"], form, notifier)


@app.put("/statistics/{statistic_id}", response_model=OperationResponse)
def update_statistic(
    statistic_id: int,
    form: StatisticForm,
    shell: ViewShell = Depends(get_shell),
    notifier: CollectingNotifier = Depends(get_notifier),
):
    editor = load_or_fail(shell, "stats", notifier)
    return update_record(editor, statistic_id, form, notifier)


@app.delete("/statistics/{statistic_id}", response_model=OperationResponse)
def delete_statistic(
    statistic_id: int,
    confirm: bool = Query(False, description="Must be true to delete"),
    shell: ViewShell = Depends(get_shell),
    notifier: CollectingNotifier = Depends(get_notifier),
):
    logger.info(f"Delete statistics request for ID: {statistic_id}")
    return delete_record(shell.editors["stats"], statistic_id, confirm, notifier)


# ---------------------------------------------------------------------------
# Incentives (SPIFFs)
# ---------------------------------------------------------------------------


@app.get("/incentives", response_model=list[IncentiveView])
def list_incentives(
    shell: ViewShell = Depends(get_shell),
    notifier: CollectingNotifier = Depends(get_notifier),
):
    return load_or_fail(shell, "spiff", notifier).records


@app.get("/incentives/summary", response_model=IncentiveSummaryResponse)
def incentive_summary(
    shell: ViewShell = Depends(get_shell),
    notifier: CollectingNotifier = Depends(get_notifier),
):
    summary = load_or_fail(shell, "spiff", notifier).summary()
    return IncentiveSummaryResponse(
        count=summary.count,
        approved_total=summary.approved_total,
        pending_total=summary.pending_total,
        recipients=summary.recipients,
    )


@app.post("/incentives", response_model=OperationResponse)
def create_incentive(
    form: IncentiveForm,
    shell: ViewShell = Depends(get_shell),
    notifier: CollectingNotifier = Depends(get_notifier),
):
    return create_record(shell.editors["spiff"], form, notifier)


@app.put("/incentives/{incentive_id}", response_model=OperationResponse)
def update_incentive(
    incentive_id: int,
    form: IncentiveForm,
    shell: ViewShell = Depends(get_shell),
    notifier: CollectingNotifier = Depends(get_notifier),
):
    editor = load_or_fail(shell, "spiff", notifier)
    return update_record(editor, incentive_id, form, notifier)


@app.delete("/incentives/{incentive_id}", response_model=OperationResponse)
def delete_incentive(
    incentive_id: int,
    confirm: bool = Query(False, description="Must be true to delete"),
    shell: ViewShell = Depends(get_shell),
    notifier: CollectingNotifier = Depends(get_notifier),
):
    logger.info(f"Delete SPIFF request for ID: {incentive_id}")
    return delete_record(shell.editors["spiff"], incentive_id, confirm, notifier)


# ---------------------------------------------------------------------------
# Weekly meetings
# ---------------------------------------------------------------------------


@app.get("/weekly-meetings/options", response_model=MeetingOptionsResponse)
def weekly_meeting_options():
    return MeetingOptionsResponse(weeks=WEEK_OPTIONS, months=MONTHS, years=YEARS)


@app.get("/weekly-meetings", response_model=list[MeetingRowResponse])
def list_weekly_meetings(
    month: str | None = Query(None, description="Month name, e.g. January"),
    year: str | None = Query(None, description="Four digit year"),
    shell: ViewShell = Depends(get_shell),
    notifier: CollectingNotifier = Depends(get_notifier),
):
    """Meetings for one month: manual rows plus rows derived from appointments."""
    editor = load_or_fail(shell, "weekly", notifier)
    if shell.editors["appointments"].last_error is not None:
        raise_editor_failure(shell.editors["appointments"], notifier)
    try:
        editor.select_period(month or editor.selected_month, year or editor.selected_year)
    except EditorError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    logger.info(f"Weekly meetings request for {editor.selected_month} {editor.selected_year}")
    return [
        MeetingRowResponse(
            source=row.source,
            editable=row.editable,
            appointment_id=getattr(row, "appointment_id", None),
            meeting=row.meeting,
        )
        for row in editor.rows()
    ]


@app.post("/weekly-meetings", response_model=OperationResponse)
def create_weekly_meeting(
    form: WeeklyMeetingForm,
    shell: ViewShell = Depends(get_shell),
    notifier: CollectingNotifier = Depends(get_notifier),
):
    return create_record(shell.editors["weekly"], form, notifier)


@app.put("/weekly-meetings/{meeting_id}", response_model=OperationResponse)
def update_weekly_meeting(
    meeting_id: int,
    form: WeeklyMeetingForm,
    shell: ViewShell = Depends(get_shell),
    notifier: CollectingNotifier = Depends(get_notifier),
):
    editor = load_or_fail(shell, "weekly", notifier)
    return update_record(editor, meeting_id, form, notifier)


@app.delete("/weekly-meetings/{meeting_id}", response_model=OperationResponse)
def delete_weekly_meeting(
    meeting_id: int,
    confirm: bool = Query(False, description="Must be true to delete"),
    shell: ViewShell = Depends(get_shell),
    notifier: CollectingNotifier = Depends(get_notifier),
):
    logger.info(f"Delete meeting request for ID: {meeting_id}")
    return delete_record(shell.editors["weekly"], meeting_id, confirm, notifier)


# ---------------------------------------------------------------------------
# Shell
# ---------------------------------------------------------------------------


@app.get("/tabs", response_model=list[TabResponse])
def list_tabs(active: str = Query("appointments"), shell: ViewShell = Depends(get_shell)):
    """Navigation tabs; an unknown ``active`` value falls back to appointments."""
    shell.activate(active)
    return [TabResponse(id=tab.id, label=tab.label, active=is_active) for tab, is_active in shell.tabs()]


@app.get("/")
def root():
    """Root endpoint."""
    return {"message": "SDR Dashboard API", "docs": "/docs"}
