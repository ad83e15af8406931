"""FastAPI webhook application for timeblock."""

import logging
from datetime import datetime, timedelta

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .config import load_config
from .core.errors import SchedulingError
from .core.outcome import ScheduleUpdate, SchedulingOutcome, SchedulingStatus
from .core.tasks import DayPart, Domain, FocusCategory, Priority
from .service import SchedulingService, build_service

logger = logging.getLogger(__name__)

SERVICE_NAME = "timeblock"


class DebugUpdatePayload(BaseModel):
    """Test write against the task store."""

    task_id: str = Field(..., min_length=1, description="Task page ID in the task store")
    test: str = Field("", description="Text appended to the test Scheduling Message")


class TaskPayload(BaseModel):
    """Webhook payload sent by the task store automation."""

    task_id: str = Field(..., min_length=1, description="Task page ID in the task store")
    task_name: str = Field(..., min_length=1, description="Task title")
    estimated_duration: int = Field(..., ge=1, description="Estimated duration in minutes")
    priority: Priority = Field(..., description="High, Medium or Low")
    focus_type: FocusCategory = Field(..., description="Deep Work, Admin, Calls or Creative")
    domain: Domain | None = Field(None, description="Work, Personal or School")
    preferred_times: list[DayPart] = Field(..., min_length=1, description="Preferred parts of the day")
    due_date: str = Field(..., description="ISO due date")
    buffer_before: int = Field(15, ge=0, description="Buffer before the task in minutes")
    buffer_after: int = Field(15, ge=0, description="Buffer after the task in minutes")
    flexible: bool = Field(True, description="Allow slots outside the focus category's preferred hours")
    created_at: datetime | None = Field(None, description="When the task was created")
    last_edited_time: datetime | None = Field(None, description="When the task was last modified")

    def to_payload(self) -> dict:
        return self.model_dump(exclude_none=True)


def status_code_for(outcome: SchedulingOutcome) -> int:
    """Map an outcome onto an HTTP status code."""
    match outcome.status:
        case SchedulingStatus.SCHEDULED:
            return 200
        case SchedulingStatus.CONFLICT | SchedulingStatus.NO_SLOTS:
            return 400
        case SchedulingStatus.ERROR:
            return _error_code(outcome.reason)


def _error_code(reason: str | None) -> int:
    if reason in ("upstream", "unavailable"):
        return 503
    if reason == "internal":
        return 500
    return 400


def _unavailable() -> JSONResponse:
    logger.error("Scheduling service not available")
    return JSONResponse(
        status_code=503,
        content={
            "success": False,
            "error": "Service unavailable",
            "message": "Scheduling service is not properly initialized. Please check configuration.",
        },
    )


def create_app(service: SchedulingService | None = None, configure: bool = True) -> FastAPI:
    """Build the webhook app.

    Without an explicit service, one is wired from configuration; if that
    fails the app still starts and answers 503 on scheduling routes.
    """
    if service is None and configure:
        try:
            service = build_service(load_config())
            logger.info("Services initialized successfully")
        except ValueError as e:
            logger.error(f"Failed to initialize services: {e}")

    app = FastAPI(
        title="timeblock API",
        description="Schedules tasks into free calendar slots",
        version="0.1.0",
    )

    @app.exception_handler(RequestValidationError)
    async def invalid_payload(request: Request, exc: RequestValidationError):
        details = [f"{'.'.join(str(p) for p in err['loc'][1:])}: {err['msg']}" for err in exc.errors()]
        logger.warning(f"Invalid request payload: {details}")
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "Invalid request payload", "details": details},
        )

    @app.get("/")
    def root():
        return {
            "message": "timeblock scheduling API",
            "version": "0.1.0",
            "status": "running",
            "endpoints": {
                "health": "/webhook/health",
                "schedule": "/webhook/schedule",
                "slots": "/webhook/slots",
            },
        }

    @app.get("/webhook/health")
    def health():
        return {
            "status": "healthy",
            "timestamp": datetime.now().astimezone().isoformat(),
            "service": SERVICE_NAME,
        }

    @app.post("/webhook/schedule")
    def schedule(payload: TaskPayload):
        logger.info(f"Received scheduling request for {payload.task_id}")
        if service is None:
            return _unavailable()

        outcome = service.schedule_payload(payload.to_payload())
        logger.info(f"Scheduling completed for {payload.task_id}: {outcome.status.value}")
        return JSONResponse(status_code=status_code_for(outcome), content=outcome.to_dict())

    @app.post("/webhook/slots")
    def slots(payload: TaskPayload, limit: int = Query(10, ge=1)):
        if service is None:
            return _unavailable()
        try:
            candidates = service.preview_slots(payload.to_payload(), limit=limit)
        except SchedulingError as e:
            return JSONResponse(
                status_code=_error_code(e.reason),
                content={"success": False, "status": e.status.value, "message": e.message},
            )
        return {"success": True, "count": len(candidates), "slots": [s.to_dict() for s in candidates]}

    @app.get("/webhook/debug/task/{task_id}")
    def debug_task(task_id: str):
        if service is None:
            return _unavailable()
        try:
            task = service.task_store.fetch_task(task_id)
        except SchedulingError as e:
            return JSONResponse(
                status_code=_error_code(e.reason),
                content={"success": False, "error": e.message, "task_id": task_id},
            )
        return {"success": True, "task": task}

    @app.post("/webhook/debug/update")
    def debug_update(payload: DebugUpdatePayload):
        if service is None:
            return _unavailable()
        update = ScheduleUpdate(message=f"Test update: {payload.test}")
        ok = service.task_store.apply_schedule_update(payload.task_id, update)
        return {"success": ok, "message": "Update successful" if ok else "Update failed"}

    @app.get("/webhook/test/calendar")
    def test_calendar():
        if service is None:
            return _unavailable()
        now = service.now()
        try:
            today = service.calendar.list_busy_intervals(now, now + timedelta(days=1))
            week = service.calendar.list_busy_intervals(now, now + timedelta(days=7))
        except SchedulingError as e:
            return JSONResponse(
                status_code=_error_code(e.reason),
                content={"success": False, "error": "Calendar connection failed", "message": e.message},
            )
        return {
            "success": True,
            "message": "Calendar connection successful",
            "events_summary": {"today_tomorrow": len(today), "next_week": len(week)},
            "events": [
                {
                    "summary": b.summary,
                    "start": b.start.isoformat(),
                    "end": b.end.isoformat(),
                    "all_day": b.all_day,
                }
                for b in week[:5]
            ],
        }

    return app
