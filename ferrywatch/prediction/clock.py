"""
Wall-clock helpers: minutes-of-day arithmetic and schedule time parsing
"""
import logging
from datetime import datetime
from typing import List, Optional
from zoneinfo import ZoneInfo

from ferrywatch.models.vessel import FerrySchedule, Terminal
from ferrywatch.prediction.constants import LOCAL_TIMEZONE, MINUTES_PER_DAY

logger = logging.getLogger(__name__)


def resolve_now(now: Optional[datetime] = None) -> datetime:
    if now is not None:
        return now
    return datetime.now(ZoneInfo(LOCAL_TIMEZONE))


def minutes_of_day(moment: datetime) -> int:
    return moment.hour * 60 + moment.minute


def parse_hhmm(value: str) -> Optional[int]:
    """"09:05" -> 545. Returns None for anything that is not a clock time."""
    try:
        hours, minutes = value.strip().split(":")
        hours, minutes = int(hours), int(minutes)
    except (AttributeError, ValueError):
        return None
    if not (0 <= hours < 24 and 0 <= minutes < 60):
        return None
    return hours * 60 + minutes


def format_hhmm(minutes: float) -> str:
    # No day rollover: 25:10 wraps to 01:10
    total = int(round(minutes)) % MINUTES_PER_DAY
    return f"{total // 60:02d}:{total % 60:02d}"


def upcoming_departures(schedule: Optional[FerrySchedule], terminal: Terminal, now_minutes: int) -> List[int]:
    """Listed departures for a terminal at or after now, in schedule order"""
    if schedule is None:
        return []

    departures = []
    for value in schedule.departures(terminal):
        parsed = parse_hhmm(value)
        if parsed is None:
            logger.debug(f"Skipping malformed departure time {value!r}")
            continue
        if parsed >= now_minutes:
            departures.append(parsed)
    return departures
