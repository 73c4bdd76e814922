from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ferrywatch.models.vessel import (
    FerryPrediction,
    NextDeparture,
    PositionPrediction,
    QueueEstimate,
    QueueSnapshot,
    SafetyResult,
    Terminal,
    Vessel,
)


# Fleet Schemas
class FleetResponse(BaseModel):
    vessels: List[Vessel]
    queues: Dict[str, Optional[QueueSnapshot]]
    timestamp: datetime


# Queue Schemas
class QueueReading(BaseModel):
    """Vehicle counts reported by a terminal's queue sensor"""
    car: int = Field(0, ge=0)
    truck: int = Field(0, ge=0)
    motorbike: int = Field(0, ge=0)


# Forecast Schemas
class LikelyFerryResponse(BaseModel):
    terminal: Terminal
    drive_time: Optional[float] = None
    prediction: FerryPrediction
    next_departure: Optional[NextDeparture] = None


class TerminalSummary(BaseModel):
    terminal: Terminal
    drive_time: Optional[float] = None
    safety: SafetyResult
    likely_ferry: FerryPrediction
    next_departure: Optional[NextDeparture] = None
    queue: Optional[QueueEstimate] = None
    distinguished_position: Optional[PositionPrediction] = None


# Feedback Schemas
class FeedbackCreate(BaseModel):
    terminal: Terminal
    ferry_name: str = Field(..., min_length=1, max_length=64)
    correct: bool


class FeedbackResponse(BaseModel):
    id: int
    terminal: Terminal
    ferry_name: str
    correct: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FeedbackStats(BaseModel):
    terminal: Terminal
    total: int
    correct: int
    accuracy: Optional[float] = None


class ErrorReport(BaseModel):
    source: str = Field(..., min_length=1)
    error: str = Field(..., min_length=1)
    stack: Optional[str] = None
    url: Optional[str] = None
    user_agent: Optional[str] = None
    screen: Optional[str] = None
    timestamp: Optional[str] = None
