"""
Terminal forecast service
Feeds the current store contents and schedule through the prediction core
"""
import logging
from datetime import datetime
from typing import Optional

from ferrywatch.models.vessel import FerrySchedule, Terminal
from ferrywatch.prediction.clock import resolve_now
from ferrywatch.prediction.ferry_prediction import (
    get_next_departure,
    predict_likely_ferry,
    predict_vessel_position,
)
from ferrywatch.prediction.queue_estimate import estimate_queue_severity
from ferrywatch.prediction.safety import predict_terminal_safety
from ferrywatch.schemas import LikelyFerryResponse, TerminalSummary
from ferrywatch.services.vessel_store import VesselStore

logger = logging.getLogger(__name__)


def likely_ferry(
    store: VesselStore,
    terminal: Terminal,
    drive_time: Optional[float],
    schedule: Optional[FerrySchedule],
    now: Optional[datetime] = None,
) -> LikelyFerryResponse:
    now = resolve_now(now)
    prediction = predict_likely_ferry(
        store.vessels(now), terminal, drive_time, schedule, store.queue(terminal), now=now
    )
    return LikelyFerryResponse(
        terminal=terminal,
        drive_time=drive_time,
        prediction=prediction,
        next_departure=get_next_departure(terminal, schedule, drive_time, prediction.departure_time, now=now),
    )


def terminal_summary(
    store: VesselStore,
    terminal: Terminal,
    drive_time: Optional[float],
    schedule: Optional[FerrySchedule],
    now: Optional[datetime] = None,
) -> TerminalSummary:
    """Everything a client needs to decide whether and when to drive to a terminal"""
    now = resolve_now(now)
    distinguished = store.distinguished(now)
    ferry = likely_ferry(store, terminal, drive_time, schedule, now)

    queue = store.queue(terminal)
    queue_estimate = None
    if queue is not None:
        ferry_name = ferry.prediction.ferry.name if ferry.prediction.ferry else None
        queue_estimate = estimate_queue_severity(queue, ferry_name)

    summary = TerminalSummary(
        terminal=terminal,
        drive_time=drive_time,
        safety=predict_terminal_safety(distinguished, terminal, drive_time, schedule, now=now),
        likely_ferry=ferry.prediction,
        next_departure=ferry.next_departure,
        queue=queue_estimate,
        distinguished_position=predict_vessel_position(distinguished, drive_time),
    )
    logger.debug(f"{terminal.value}: {summary.safety.status.value}, likely {summary.likely_ferry.reason}")
    return summary
