"""
Geo primitives: great-circle distance, bearing and naive travel times
"""
import math
from typing import Tuple

from ferrywatch.models.vessel import Terminal
from ferrywatch.prediction.constants import (
    AVERAGE_DRIVE_SPEED_KMH,
    DOCKED_RADIUS_KM,
    ROAD_WINDING_FACTOR,
    TERMINALS,
)

EARTH_RADIUS_KM = 6371.0
KNOT_TO_KMH = 1.852


def haversine_distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def bearing_degrees(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Initial bearing from point 1 to point 2, in [0, 360)"""
    d_lon = math.radians(lon2 - lon1)
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)

    y = math.sin(d_lon) * math.cos(lat2_rad)
    x = math.cos(lat1_rad) * math.sin(lat2_rad) - math.sin(lat1_rad) * math.cos(lat2_rad) * math.cos(d_lon)

    bearing = math.degrees(math.atan2(y, x)) % 360
    # -1e-19 % 360 rounds up to 360.0
    return bearing if bearing < 360 else 0.0


def distance_to_terminal(lat: float, lon: float, terminal: Terminal) -> float:
    coords = TERMINALS[terminal]
    return haversine_distance_km(lat, lon, coords.lat, coords.lon)


def is_near_terminal(lat: float, lon: float, terminal: Terminal) -> bool:
    return distance_to_terminal(lat, lon, terminal) <= DOCKED_RADIUS_KM


def estimate_arrival_minutes(distance_km: float, speed_tenths_knot: float) -> float:
    """
    Minutes to cover a distance at the given speed.

    Returns math.inf when the speed is zero or negative (no ETA possible).
    """
    if speed_tenths_knot <= 0:
        return math.inf

    speed_kmh = (speed_tenths_knot / 10) * KNOT_TO_KMH
    return max(distance_km, 0.0) / speed_kmh * 60


def estimate_drive_minutes(lat: float, lon: float, terminal: Terminal) -> float:
    """Straight-line drive time to a terminal, padded for winding roads"""
    distance_km = distance_to_terminal(lat, lon, terminal)
    return distance_km * ROAD_WINDING_FACTOR / AVERAGE_DRIVE_SPEED_KMH * 60


def interpolate(start: Tuple[float, float], end: Tuple[float, float], progress: float) -> Tuple[float, float]:
    return (
        start[0] + (end[0] - start[0]) * progress,
        start[1] + (end[1] - start[1]) * progress,
    )
