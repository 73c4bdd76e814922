"""
Terminal Safety Predictor
Will the distinguished vessel be at a terminal when the user gets there?
"""
import logging
import math
from datetime import datetime
from typing import Optional

from ferrywatch.models.vessel import (
    FerrySchedule,
    SafetyResult,
    SafetyStatus,
    Terminal,
    Vessel,
    VesselState,
)
from ferrywatch.prediction.clock import minutes_of_day, resolve_now, upcoming_departures
from ferrywatch.prediction.constants import (
    AVERAGE_CROSSING_TIME,
    BUFFER_TIME,
    DISTINGUISHED_SHORT_NAME,
    TERMINAL_LABELS,
    TURNAROUND_TIME,
)
from ferrywatch.prediction.geo import distance_to_terminal, estimate_arrival_minutes

logger = logging.getLogger(__name__)

# Slack after the expected departure before we call it gone
DEPARTURE_GRACE = 10
# Slack after the expected turnaround on an inbound arrival
INBOUND_GRACE = 30


def departure_estimate(terminal: Terminal, schedule: Optional[FerrySchedule], now: datetime) -> int:
    """Minutes until a docked vessel leaves: next listed departure, else turnaround"""
    now_minutes = minutes_of_day(now)
    departures = upcoming_departures(schedule, terminal, now_minutes)
    if departures:
        return departures[0] - now_minutes
    return TURNAROUND_TIME


def _safety_message(status: SafetyStatus, safe_minutes: Optional[int]) -> str:
    if status is SafetyStatus.ALL_CLEAR:
        if safe_minutes is not None:
            return f"Safe to head over - window of ~{safe_minutes} min"
        return "Safe to head over now"
    if status is SafetyStatus.DOCKED_HERE:
        return "Wait for it to leave or use the other terminal"
    return "Check again before you leave"


def _result(
    terminal: Terminal,
    status: SafetyStatus,
    reason: str,
    vessel_state: VesselState,
    drive_time: Optional[float],
    vessel_eta: Optional[int] = None,
    safe_minutes: Optional[float] = None,
) -> SafetyResult:
    if safe_minutes is not None:
        safe_minutes = max(int(round(safe_minutes)), 0)

    return SafetyResult(
        terminal=terminal,
        status=status,
        reason=reason,
        vessel_state=vessel_state,
        vessel_eta=vessel_eta,
        drive_time=drive_time,
        safe_to_cross_now=status is SafetyStatus.ALL_CLEAR,
        safe_minutes=safe_minutes,
        safety_message=_safety_message(status, safe_minutes),
    )


def predict_terminal_safety(
    vessel: Optional[Vessel],
    terminal: Terminal,
    drive_time: Optional[float],
    schedule: Optional[FerrySchedule] = None,
    now: Optional[datetime] = None,
) -> SafetyResult:
    """
    Three-level verdict for one terminal.

    Without a drive time the user is treated as arriving immediately. A
    missing vessel means it is not in service.
    """
    name = DISTINGUISHED_SHORT_NAME

    if vessel is None:
        return _result(
            terminal,
            SafetyStatus.ALL_CLEAR,
            f"{name} location unknown - likely not in service",
            VesselState.UNKNOWN,
            drive_time,
        )

    now = resolve_now(now)
    state = vessel.state
    other_label = TERMINAL_LABELS[terminal.other]
    user_arrival = drive_time + BUFFER_TIME if drive_time is not None else 0

    if state is VesselState.docked_at(terminal):
        leaves_in = departure_estimate(terminal, schedule, now)
        logger.debug(f"{name} docked at {terminal.value}, departs in ~{leaves_in} min, user in {user_arrival}")

        if user_arrival > leaves_in + DEPARTURE_GRACE:
            return _result(terminal, SafetyStatus.ALL_CLEAR, f"{name} should depart before you arrive", state, drive_time)
        if user_arrival > leaves_in:
            return _result(terminal, SafetyStatus.HEADS_UP, f"{name} is docked here - timing uncertain", state, drive_time)
        return _result(
            terminal,
            SafetyStatus.DOCKED_HERE,
            f"{name} is currently docked here and likely next to depart",
            state,
            drive_time,
        )

    if state is VesselState.en_route_to(terminal):
        distance = distance_to_terminal(vessel.latitude, vessel.longitude, terminal)
        eta = estimate_arrival_minutes(distance, vessel.speed_tenths_knot)

        if math.isinf(eta):
            return _result(terminal, SafetyStatus.HEADS_UP, f"{name} en route here (ETA: ~? min)", state, drive_time)

        rounded_eta = int(round(eta))
        if user_arrival < eta:
            return _result(
                terminal,
                SafetyStatus.ALL_CLEAR,
                f"You should arrive before {name} (ETA: {rounded_eta} min)",
                state,
                drive_time,
                vessel_eta=rounded_eta,
                safe_minutes=eta - (drive_time or 0),
            )
        if user_arrival > eta + TURNAROUND_TIME + INBOUND_GRACE:
            return _result(
                terminal,
                SafetyStatus.ALL_CLEAR,
                f"{name} should depart before you arrive",
                state,
                drive_time,
                vessel_eta=rounded_eta,
            )
        return _result(
            terminal,
            SafetyStatus.HEADS_UP,
            f"{name} arriving in ~{rounded_eta} min - timing uncertain",
            state,
            drive_time,
            vessel_eta=rounded_eta,
        )

    if state is VesselState.docked_at(terminal.other):
        return _result(
            terminal,
            SafetyStatus.ALL_CLEAR,
            f"{name} is docked at {other_label}",
            state,
            drive_time,
            safe_minutes=TURNAROUND_TIME + AVERAGE_CROSSING_TIME,
        )

    if state is VesselState.en_route_to(terminal.other):
        return _result(
            terminal,
            SafetyStatus.ALL_CLEAR,
            f"{name} is heading to {other_label}",
            state,
            drive_time,
            safe_minutes=2 * AVERAGE_CROSSING_TIME + TURNAROUND_TIME,
        )

    return _result(terminal, SafetyStatus.HEADS_UP, f"{name} location uncertain", state, drive_time)
