"""
Vessel State Classifier
Geofence and heading based state for a single position report
"""
from typing import Optional

from ferrywatch.models.vessel import Terminal, Vessel, VesselSnapshot, VesselState
from ferrywatch.prediction.constants import (
    DISTINGUISHED_MMSI,
    DOCKED_RADIUS_KM,
    HEADING_TO_CIRKEWWA_MAX,
    HEADING_TO_CIRKEWWA_MIN,
    MOVING_SPEED_THRESHOLD,
    VESSEL_NAMES,
)
from ferrywatch.prediction.geo import distance_to_terminal


def classify_vessel_state(snapshot: VesselSnapshot) -> VesselState:
    """
    Assign exactly one state to a snapshot.

    Stationary within DOCKED_RADIUS_KM of a terminal is docked (Ċirkewwa
    checked first). Moving vessels are split by direction: course when set,
    otherwise heading; [90, 180] inclusive is toward Ċirkewwa. Stationary
    anywhere else is UNKNOWN. No memory between ticks, so a vessel idling on
    the radius boundary can flip state from one report to the next.
    """
    dist_to_cirkewwa = distance_to_terminal(snapshot.latitude, snapshot.longitude, Terminal.CIRKEWWA)
    dist_to_mgarr = distance_to_terminal(snapshot.latitude, snapshot.longitude, Terminal.MGARR)

    is_moving = snapshot.speed_tenths_knot >= MOVING_SPEED_THRESHOLD

    if not is_moving and dist_to_cirkewwa <= DOCKED_RADIUS_KM:
        return VesselState.DOCKED_CIRKEWWA
    if not is_moving and dist_to_mgarr <= DOCKED_RADIUS_KM:
        return VesselState.DOCKED_MGARR

    if is_moving:
        direction = snapshot.course if snapshot.course > 0 else snapshot.heading
        direction = direction % 360

        if HEADING_TO_CIRKEWWA_MIN <= direction <= HEADING_TO_CIRKEWWA_MAX:
            return VesselState.EN_ROUTE_TO_CIRKEWWA
        return VesselState.EN_ROUTE_TO_MGARR

    # Idle away from both terminals, e.g. maintenance in Grand Harbour
    return VesselState.UNKNOWN


def build_vessel(snapshot: VesselSnapshot) -> Optional[Vessel]:
    """Resolve name and state; None for vessels outside the fleet table"""
    name = VESSEL_NAMES.get(snapshot.mmsi)
    if name is None:
        return None

    return Vessel(
        **snapshot.model_dump(),
        name=name,
        is_distinguished=snapshot.mmsi == DISTINGUISHED_MMSI,
        state=classify_vessel_state(snapshot),
    )
