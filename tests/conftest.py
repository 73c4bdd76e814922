"""Shared fixtures for the Ferry Watch test suite."""

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from ferrywatch.models.vessel import FerrySchedule, Vessel, VesselState

# Tuesday afternoon, Malta time
NOW = datetime(2026, 2, 10, 13, 0, tzinfo=ZoneInfo("Europe/Malta"))

MALITA = 215145000
NIKOLAOS = 237593100
TA_PINU = 248692000
GAUDOS = 248928000


def make_vessel(**overrides) -> Vessel:
    data = {
        "mmsi": MALITA,
        "latitude": 35.989,
        "longitude": 14.329,
        "speed_tenths_knot": 0,
        "heading": 0,
        "course": 0,
        "timestamp": NOW,
        "name": "MV Malita",
        "is_distinguished": False,
        "state": VesselState.DOCKED_CIRKEWWA,
    }
    data.update(overrides)
    return Vessel(**data)


def make_nikolaos(**overrides) -> Vessel:
    data = {"mmsi": NIKOLAOS, "name": "MV Nikolaos", "is_distinguished": True}
    data.update(overrides)
    return make_vessel(**data)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def schedule():
    return FerrySchedule(
        date="2026-02-10",
        cirkewwa=["06:00", "12:30", "13:30", "14:00", "14:45"],
        mgarr=["06:00", "12:45", "13:15", "14:15"],
    )
