"""
FastAPI Vessel Routes
Fleet data, the live stream and per-terminal forecasts
"""
import asyncio
import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import StreamingResponse

from config import settings
from ferrywatch.dependencies import get_schedule_service, get_store
from ferrywatch.models.vessel import FerrySchedule, QueueEstimate, QueueSnapshot, SafetyResult, Terminal
from ferrywatch.prediction.geo import estimate_drive_minutes
from ferrywatch.prediction.queue_estimate import estimate_queue_severity
from ferrywatch.prediction.safety import predict_terminal_safety
from ferrywatch.schemas import FleetResponse, LikelyFerryResponse, QueueReading, TerminalSummary
from ferrywatch.services import forecast_service
from ferrywatch.services.schedule_service import ScheduleService
from ferrywatch.services.vessel_store import VesselStore

logger = logging.getLogger(__name__)

router = APIRouter()


# ==================== HELPERS ====================

def resolve_drive_time(
    terminal: Terminal,
    drive_time: Optional[float] = Query(None, ge=0, le=600, description="Minutes to reach the terminal"),
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lon: Optional[float] = Query(None, ge=-180, le=180),
) -> Optional[float]:
    """Explicit drive time wins; otherwise estimate it from the caller's position"""
    if drive_time is not None:
        return drive_time
    if lat is None and lon is None:
        return None
    if lat is None or lon is None:
        raise HTTPException(status_code=400, detail="Provide both lat and lon")
    return round(estimate_drive_minutes(lat, lon, terminal), 1)


def current_schedule(service: ScheduleService = Depends(get_schedule_service)) -> Optional[FerrySchedule]:
    return service.get_schedule()


# ==================== FLEET ====================

@router.get("/vessels", response_model=FleetResponse)
async def get_vessels(store: VesselStore = Depends(get_store)):
    """Latest position and state of every ferry"""
    return store.stream_message()


@router.get("/vessels/stream")
async def stream_vessels(request: Request, store: VesselStore = Depends(get_store)):
    """
    Server-sent events feed of fleet updates

    Each event is the same payload as GET /api/vessels. A comment line is
    sent every SSE_KEEPALIVE_INTERVAL seconds while nothing changes.
    """
    queue = store.subscribe()
    logger.info("New SSE connection")

    async def event_stream():
        try:
            initial = store.stream_message()
            if initial["vessels"]:
                yield f"data: {json.dumps(initial)}\n\n"

            while True:
                if await request.is_disconnected():
                    break
                try:
                    message = await asyncio.wait_for(queue.get(), timeout=settings.SSE_KEEPALIVE_INTERVAL)
                    yield f"data: {json.dumps(message)}\n\n"
                except asyncio.TimeoutError:
                    yield ": keepalive\n\n"
        finally:
            store.unsubscribe(queue)
            logger.info("SSE connection closed")

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive", "X-Accel-Buffering": "no"},
    )


@router.get("/schedule", response_model=FerrySchedule)
def get_schedule(schedule: Optional[FerrySchedule] = Depends(current_schedule)):
    """Today's published departures"""
    if schedule is None:
        raise HTTPException(status_code=404, detail="Schedule not available for today")
    return schedule


# ==================== TERMINAL FORECASTS ====================

@router.get("/terminals/{terminal}/safety", response_model=SafetyResult)
def get_terminal_safety(
    terminal: Terminal,
    drive_time: Optional[float] = Depends(resolve_drive_time),
    store: VesselStore = Depends(get_store),
    schedule: Optional[FerrySchedule] = Depends(current_schedule),
):
    """Will Nikolaos be at this terminal when you get there?"""
    return predict_terminal_safety(store.distinguished(), terminal, drive_time, schedule)


@router.get("/terminals/{terminal}/likely-ferry", response_model=LikelyFerryResponse)
def get_likely_ferry(
    terminal: Terminal,
    drive_time: Optional[float] = Depends(resolve_drive_time),
    store: VesselStore = Depends(get_store),
    schedule: Optional[FerrySchedule] = Depends(current_schedule),
):
    """Which ferry and departure you will most likely catch"""
    return forecast_service.likely_ferry(store, terminal, drive_time, schedule)


@router.get("/terminals/{terminal}/summary", response_model=TerminalSummary)
def get_terminal_summary(
    terminal: Terminal,
    drive_time: Optional[float] = Depends(resolve_drive_time),
    store: VesselStore = Depends(get_store),
    schedule: Optional[FerrySchedule] = Depends(current_schedule),
):
    return forecast_service.terminal_summary(store, terminal, drive_time, schedule)


@router.get("/terminals/{terminal}/queue", response_model=QueueEstimate)
def get_terminal_queue(
    terminal: Terminal,
    ferry_name: Optional[str] = Query(None, description="Compare against this ferry's capacity"),
    store: VesselStore = Depends(get_store),
):
    """Severity of the current vehicle queue"""
    queue = store.queue(terminal)
    if queue is None:
        raise HTTPException(status_code=404, detail=f"No queue data for {terminal.value}")
    return estimate_queue_severity(queue, ferry_name)


@router.post("/terminals/{terminal}/queue", response_model=QueueEstimate)
async def report_terminal_queue(
    terminal: Terminal,
    reading: QueueReading,
    store: VesselStore = Depends(get_store),
):
    """Ingest a queue sensor reading"""
    queue = QueueSnapshot(**reading.model_dump())
    store.update_queue(terminal, queue)
    return estimate_queue_severity(queue, None)
