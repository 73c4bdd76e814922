"""
Likely-Ferry Predictor

Works out which vessel, and which departure, a user driving to a terminal
will most likely board:

1. readiness timeline - earliest minute-of-day each vessel could leave the
   target terminal given where it is now
2. departure slots - the timeline itself, or a greedy match of scheduled
   departures to vessels when a schedule is known
3. queue drain - vehicles already waiting take the first sailings; the user
   boards the first sailing with room left once they are there

Confidence is advisory only: high when the vessel is docked at the terminal
now, medium when derived from a live en-route fix, low for fallbacks.
"""
import logging
import math
from datetime import datetime
from typing import List, Optional, Tuple

from ferrywatch.models.vessel import (
    Confidence,
    DepartureSlot,
    FerryPrediction,
    FerrySchedule,
    NextDeparture,
    PositionPrediction,
    QueueSnapshot,
    ReadinessEntry,
    Terminal,
    Vessel,
    VesselState,
)
from ferrywatch.prediction.clock import (
    format_hhmm,
    minutes_of_day,
    parse_hhmm,
    resolve_now,
    upcoming_departures,
)
from ferrywatch.prediction.constants import (
    AVERAGE_CROSSING_TIME,
    BUFFER_TIME,
    ROUND_TRIP_TIME,
    TERMINAL_LABELS,
    TERMINALS,
    TURNAROUND_TIME,
)
from ferrywatch.prediction.geo import distance_to_terminal, estimate_arrival_minutes, interpolate
from ferrywatch.prediction.queue_estimate import car_equivalent, ferry_capacity

logger = logging.getLogger(__name__)


def _user_arrival(now_minutes: int, drive_time: Optional[float]) -> float:
    if drive_time is None:
        return now_minutes
    return now_minutes + drive_time + BUFFER_TIME


def _eta(vessel: Vessel, terminal: Terminal) -> float:
    distance = distance_to_terminal(vessel.latitude, vessel.longitude, terminal)
    return estimate_arrival_minutes(distance, vessel.speed_tenths_knot)


def build_readiness_timeline(vessels: List[Vessel], terminal: Terminal, now_minutes: int) -> List[ReadinessEntry]:
    """
    Earliest departure from `terminal` for every vessel, sorted ascending.

    Vessels with no computable ETA (stopped mid-channel) and vessels in an
    unknown state are left out.
    """
    other = terminal.other
    entries = []

    for vessel in vessels:
        state = vessel.state

        if state is VesselState.docked_at(terminal):
            entries.append(ReadinessEntry(vessel=vessel, ready_minutes=now_minutes, detail="docked", docked=True))

        elif state is VesselState.en_route_to(terminal):
            eta = _eta(vessel, terminal)
            if math.isinf(eta):
                continue
            entries.append(ReadinessEntry(
                vessel=vessel,
                ready_minutes=now_minutes + eta + TURNAROUND_TIME,
                detail=f"arriving in ~{round(eta)} min",
            ))

        elif state is VesselState.docked_at(other):
            entries.append(ReadinessEntry(
                vessel=vessel,
                ready_minutes=now_minutes + TURNAROUND_TIME + AVERAGE_CROSSING_TIME + TURNAROUND_TIME,
                detail=f"docked at {TERMINAL_LABELS[other]}",
            ))

        elif state is VesselState.en_route_to(other):
            eta_other = _eta(vessel, other)
            if math.isinf(eta_other):
                continue
            entries.append(ReadinessEntry(
                vessel=vessel,
                ready_minutes=now_minutes + eta_other + TURNAROUND_TIME + AVERAGE_CROSSING_TIME + TURNAROUND_TIME,
                detail=f"heading to {TERMINAL_LABELS[other]}",
            ))

    entries.sort(key=lambda entry: entry.ready_minutes)
    return entries


def unscheduled_slots(timeline: List[ReadinessEntry]) -> List[DepartureSlot]:
    """Each vessel leaves as soon as it is ready"""
    return [
        DepartureSlot(
            vessel=entry.vessel,
            ready_minutes=entry.ready_minutes,
            departure_minutes=entry.ready_minutes,
            docked=entry.docked,
        )
        for entry in timeline
    ]


def assign_departures(timeline: List[ReadinessEntry], departures: List[int]) -> List[DepartureSlot]:
    """
    Greedy match of scheduled departures to vessels.

    Each departure goes to the earliest-ready vessel that is ready by then
    (ties keep timeline order). That vessel is ready again one round trip
    after it sails. Departures no vessel can reach are skipped. This is not
    an optimal assignment, and with four vessels it does not need to be.
    """
    # [ready_minutes, rotation, entry]
    pool = [[entry.ready_minutes, 0, entry] for entry in timeline]
    slots = []

    for departure in departures:
        candidates = [item for item in pool if item[0] <= departure]
        if not candidates:
            logger.debug(f"No vessel ready for {format_hhmm(departure)}")
            continue

        chosen = candidates[0]
        for item in candidates[1:]:
            if item[0] < chosen[0]:
                chosen = item

        ready, rotation, entry = chosen
        slots.append(DepartureSlot(
            vessel=entry.vessel,
            ready_minutes=ready,
            departure_minutes=departure,
            scheduled=True,
            docked=entry.docked and rotation == 0,
        ))
        chosen[0] = departure + ROUND_TRIP_TIME
        chosen[1] = rotation + 1

    return slots


def plan_departures(
    timeline: List[ReadinessEntry],
    schedule: Optional[FerrySchedule],
    terminal: Terminal,
    now_minutes: int,
) -> List[DepartureSlot]:
    if schedule is not None:
        slots = assign_departures(timeline, upcoming_departures(schedule, terminal, now_minutes))
        if slots:
            return slots
    return unscheduled_slots(timeline)


def _boards_user(slot: DepartureSlot, user_arrival: float) -> bool:
    # An unscheduled vessel waits until it has loaded, so it is still there
    if not slot.scheduled:
        return True
    return slot.departure_minutes >= user_arrival


def _departure_label(slot: DepartureSlot, user_arrival: float) -> Optional[str]:
    if slot.scheduled:
        return format_hhmm(slot.departure_minutes)
    if slot.ready_minutes <= user_arrival:
        return None
    return format_hhmm(slot.ready_minutes)


def _confidence(slot: DepartureSlot) -> Confidence:
    return Confidence.HIGH if slot.docked else Confidence.MEDIUM


def _first_available(slots: List[DepartureSlot], user_arrival: float) -> FerryPrediction:
    for slot in slots:
        if not _boards_user(slot, user_arrival):
            continue

        name = slot.vessel.name
        if slot.scheduled:
            reason = f"{name} is due to take the {format_hhmm(slot.departure_minutes)} departure"
        elif slot.ready_minutes <= user_arrival:
            reason = f"{name} is docked and boarding" if slot.docked else f"{name} should be waiting when you arrive"
        else:
            reason = f"{name} should arrive by then"

        return FerryPrediction(
            ferry=slot.vessel,
            confidence=_confidence(slot),
            reason=reason,
            departure_time=_departure_label(slot, user_arrival),
        )

    last = slots[-1]
    return FerryPrediction(
        ferry=last.vessel,
        confidence=Confidence.LOW,
        reason="Last listed departure leaves before you arrive",
        departure_time=_departure_label(last, user_arrival),
    )


def _drain_queue(slots: List[DepartureSlot], user_arrival: float, queue: QueueSnapshot) -> FerryPrediction:
    """
    Walk the sailings, loading the waiting queue first.

    Sailings that leave before the user arrives still shrink the queue, but
    leftover space on them is not carried to later sailings. Unscheduled
    vessels count as the user's ferry even when ready before the user
    arrives, since they wait until loaded.
    """
    queue_size = car_equivalent(queue)
    remaining = queue_size
    sailings = 0

    for slot in slots:
        remaining -= ferry_capacity(slot.vessel.name)
        sailings += 1

        if not _boards_user(slot, user_arrival):
            remaining = max(remaining, 0)
            continue

        if remaining <= 0:
            name = slot.vessel.name
            if remaining < 0:
                reason = f"{name} - queue of ~{queue_size} cars should clear by this departure"
            else:
                reason = f"{name} - queue only just clears on this departure"
            if sailings > 1:
                reason += f" ({sailings} sailings needed)"

            return FerryPrediction(
                ferry=slot.vessel,
                confidence=_confidence(slot),
                reason=reason,
                departure_time=_departure_label(slot, user_arrival),
            )

    last = slots[-1]
    if not any(_boards_user(slot, user_arrival) for slot in slots):
        reason = "Last listed departure leaves before you arrive"
    else:
        logger.debug(f"Queue of {queue_size} cars never drains, {remaining} left after {sailings} sailings")
        reason = "Heavy queue — expect delays"

    return FerryPrediction(
        ferry=last.vessel,
        confidence=Confidence.LOW,
        reason=reason,
        departure_time=_departure_label(last, user_arrival),
    )


def predict_likely_ferry(
    vessels: List[Vessel],
    terminal: Terminal,
    drive_time: Optional[float],
    schedule: Optional[FerrySchedule] = None,
    queue: Optional[QueueSnapshot] = None,
    now: Optional[datetime] = None,
) -> FerryPrediction:
    if not vessels:
        return FerryPrediction(confidence=Confidence.LOW, reason="No ferry data available")

    now_minutes = minutes_of_day(resolve_now(now))
    user_arrival = _user_arrival(now_minutes, drive_time)

    timeline = build_readiness_timeline(vessels, terminal, now_minutes)
    if not timeline:
        return FerryPrediction(confidence=Confidence.LOW, reason="No ferries heading to this terminal")

    slots = plan_departures(timeline, schedule, terminal, now_minutes)

    if queue is None:
        return _first_available(slots, user_arrival)
    return _drain_queue(slots, user_arrival, queue)


def get_next_departure(
    terminal: Terminal,
    schedule: Optional[FerrySchedule],
    drive_time: Optional[float],
    predicted_departure: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Optional[NextDeparture]:
    """First listed departure the user can make, no earlier than the predicted one"""
    now_minutes = minutes_of_day(resolve_now(now))
    earliest = _user_arrival(now_minutes, drive_time)

    if predicted_departure:
        predicted = parse_hhmm(predicted_departure)
        if predicted is not None:
            earliest = max(earliest, predicted)

    for departure in upcoming_departures(schedule, terminal, now_minutes):
        if departure >= earliest:
            return NextDeparture(time=format_hhmm(departure), minutes_until=departure - now_minutes)
    return None


def _coords(terminal: Terminal) -> Tuple[float, float]:
    coords = TERMINALS[terminal]
    return coords.lat, coords.lon


def _position(point: Tuple[float, float], state: VesselState) -> PositionPrediction:
    return PositionPrediction(latitude=point[0], longitude=point[1], state=state)


def predict_vessel_position(vessel: Optional[Vessel], drive_time: Optional[float]) -> Optional[PositionPrediction]:
    """Where a vessel will be when the user reaches the terminal"""
    if vessel is None or drive_time is None:
        return None

    user_arrival = drive_time + BUFFER_TIME
    state = vessel.state

    for terminal in Terminal:
        destination = terminal.other

        if state is VesselState.docked_at(terminal):
            if user_arrival < TURNAROUND_TIME:
                return _position((vessel.latitude, vessel.longitude), state)
            if user_arrival > TURNAROUND_TIME + AVERAGE_CROSSING_TIME:
                return _position(_coords(destination), VesselState.docked_at(destination))

            progress = (user_arrival - TURNAROUND_TIME) / AVERAGE_CROSSING_TIME
            point = interpolate(_coords(terminal), _coords(destination), progress)
            return _position(point, VesselState.en_route_to(destination))

        if state is VesselState.en_route_to(terminal):
            eta = _eta(vessel, terminal)
            if math.isinf(eta):
                return None

            if 0 < user_arrival < eta:
                point = interpolate((vessel.latitude, vessel.longitude), _coords(terminal), user_arrival / eta)
                return _position(point, state)
            if user_arrival < eta + TURNAROUND_TIME:
                return _position(_coords(terminal), VesselState.docked_at(terminal))

            progress = min((user_arrival - eta - TURNAROUND_TIME) / AVERAGE_CROSSING_TIME, 1)
            if progress >= 1:
                return _position(_coords(destination), VesselState.docked_at(destination))
            point = interpolate(_coords(terminal), _coords(destination), progress)
            return _position(point, VesselState.en_route_to(destination))

    return None
