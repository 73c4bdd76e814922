"""
Ferry Data Models
Vessel snapshots, schedules, queue readings and prediction results
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Terminal(str, Enum):
    """The two terminals of the channel"""
    CIRKEWWA = "cirkewwa"
    MGARR = "mgarr"

    @property
    def other(self) -> "Terminal":
        return Terminal.MGARR if self is Terminal.CIRKEWWA else Terminal.CIRKEWWA


class VesselState(str, Enum):
    DOCKED_CIRKEWWA = "DOCKED_CIRKEWWA"
    DOCKED_MGARR = "DOCKED_MGARR"
    EN_ROUTE_TO_CIRKEWWA = "EN_ROUTE_TO_CIRKEWWA"
    EN_ROUTE_TO_MGARR = "EN_ROUTE_TO_MGARR"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def docked_at(cls, terminal: Terminal) -> "VesselState":
        return cls.DOCKED_CIRKEWWA if terminal is Terminal.CIRKEWWA else cls.DOCKED_MGARR

    @classmethod
    def en_route_to(cls, terminal: Terminal) -> "VesselState":
        return cls.EN_ROUTE_TO_CIRKEWWA if terminal is Terminal.CIRKEWWA else cls.EN_ROUTE_TO_MGARR


class SafetyStatus(str, Enum):
    ALL_CLEAR = "ALL_CLEAR"
    HEADS_UP = "HEADS_UP"
    DOCKED_HERE = "DOCKED_HERE"


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class QueueSeverity(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


class TerminalCoordinates(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float
    lon: float


class VesselSnapshot(BaseModel):
    """One position report for one vessel, as delivered by the feed"""
    model_config = ConfigDict(frozen=True)

    mmsi: int
    latitude: float
    longitude: float
    speed_tenths_knot: int = 0  # tenths of a knot
    heading: float = 0  # Degrees
    course: float = 0  # Course over ground, 0 when unset
    timestamp: datetime
    nav_status: int = 0


class Vessel(VesselSnapshot):
    """Snapshot plus the fields derived from it"""
    name: str
    is_distinguished: bool = False
    state: VesselState = VesselState.UNKNOWN


class FerrySchedule(BaseModel):
    """One calendar day of published departures, "HH:MM" per terminal"""
    date: str
    cirkewwa: List[str] = Field(default_factory=list)
    mgarr: List[str] = Field(default_factory=list)

    def departures(self, terminal: Terminal) -> List[str]:
        return self.cirkewwa if terminal is Terminal.CIRKEWWA else self.mgarr


class QueueSnapshot(BaseModel):
    """Vehicles currently waiting at a terminal"""
    car: int = 0
    truck: int = 0
    motorbike: int = 0


class SafetyResult(BaseModel):
    terminal: Terminal
    status: SafetyStatus
    reason: str
    vessel_state: VesselState
    vessel_eta: Optional[int] = None  # minutes
    drive_time: Optional[float] = None  # minutes
    safe_to_cross_now: bool
    safe_minutes: Optional[int] = None
    safety_message: str


class ReadinessEntry(BaseModel):
    """Earliest minute-of-day a vessel could leave the target terminal"""
    vessel: Vessel
    ready_minutes: float
    detail: str
    docked: bool = False


class DepartureSlot(BaseModel):
    vessel: Vessel
    ready_minutes: float
    departure_minutes: float
    scheduled: bool = False
    docked: bool = False


class FerryPrediction(BaseModel):
    ferry: Optional[Vessel] = None
    confidence: Confidence
    reason: str
    departure_time: Optional[str] = None  # "HH:MM", None when already waiting


class QueueEstimate(BaseModel):
    car_equivalent: int
    ferry_capacity: Optional[int] = None
    loads_needed: Optional[int] = None
    severity: QueueSeverity
    message: str


class PositionPrediction(BaseModel):
    latitude: float
    longitude: float
    state: VesselState


class NextDeparture(BaseModel):
    time: str
    minutes_until: int
