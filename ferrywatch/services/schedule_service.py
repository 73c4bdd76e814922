"""
Ferry Schedule Service
Fetches the day's published passenger departures and caches them on disk
"""
import json
import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional
from zoneinfo import ZoneInfo

import requests

from ferrywatch.models.vessel import FerrySchedule
from ferrywatch.services.telegram_service import TelegramNotifier

logger = logging.getLogger(__name__)


class ScheduleService:
    """Daily departure schedule, one fetch per calendar day"""

    RETRY_INTERVAL = 300  # seconds between failed fetch attempts

    def __init__(
        self,
        base_url: str,
        cache_dir: Path,
        timezone: str = "Europe/Malta",
        notifier: Optional[TelegramNotifier] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.cache_dir = Path(cache_dir)
        self.timezone = ZoneInfo(timezone)
        self.notifier = notifier
        self.cached_schedule: Optional[FerrySchedule] = None
        self.last_attempt: Optional[float] = None

    def today_string(self, now: Optional[datetime] = None) -> str:
        now = now or datetime.now(self.timezone)
        return now.strftime("%Y-%m-%d")

    def cache_path(self, date_str: str) -> Path:
        return self.cache_dir / f"schedule-{date_str}.json"

    @staticmethod
    def deduplicate_times(entries: List[Dict]) -> List[str]:
        seen = set()
        times = []
        for entry in entries:
            name = entry.get("name")
            if name and name not in seen:
                seen.add(name)
                times.append(name)
        return times

    def parse_schedule(self, data: Dict) -> FerrySchedule:
        times = data.get("times", {})
        return FerrySchedule(
            date=data["date"],
            cirkewwa=self.deduplicate_times(times.get("cirkewwa", [])),
            mgarr=self.deduplicate_times(times.get("mgarr", [])),
        )

    def load_from_cache(self, date_str: str) -> Optional[FerrySchedule]:
        path = self.cache_path(date_str)
        if not path.exists():
            return None
        try:
            return FerrySchedule.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable schedule cache {path}: {e}")
            return None

    def save_to_cache(self, date_str: str, schedule: FerrySchedule):
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self.cache_path(date_str).write_text(json.dumps(schedule.model_dump(), indent=2), encoding="utf-8")

    def _alert(self, message: str):
        if self.notifier:
            self.notifier.send_alert(message)

    def fetch_from_api(self, date_str: str) -> Optional[FerrySchedule]:
        year, month, day = date_str.split("-")
        url = f"{self.base_url}/{year}/{month}/{day}/passenger.json"
        logger.info(f"📅 Fetching ferry schedule from {url}")

        try:
            response = requests.get(url, timeout=10)
            response.raise_for_status()
            return self.parse_schedule(response.json())
        except requests.exceptions.RequestException as e:
            logger.error(f"Schedule fetch failed: {e}")
            self._alert(f"Schedule fetch error: {e}")
            return None
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Schedule response could not be parsed: {e}")
            self._alert(f"Schedule parse error: {e}")
            return None

    def refresh(self, now: Optional[datetime] = None) -> Optional[FerrySchedule]:
        """Load today's schedule from the cache, or fetch and cache it"""
        date_str = self.today_string(now)

        cached = self.load_from_cache(date_str)
        if cached:
            logger.info(f"Loaded ferry schedule from cache for {date_str}")
            self.cached_schedule = cached
            return cached

        schedule = self.fetch_from_api(date_str)
        if schedule and schedule.date != date_str:
            logger.warning(f"Schedule API answered with {schedule.date} for {date_str}, discarding")
            schedule = None

        if schedule:
            self.save_to_cache(date_str, schedule)
            self.cached_schedule = schedule
            logger.info(
                f"Fetched ferry schedule for {date_str}: {len(schedule.cirkewwa)} Cirkewwa departures, "
                f"{len(schedule.mgarr)} Mgarr departures"
            )
        else:
            logger.warning("⚠️ Could not load ferry schedule")
        return schedule

    def get_schedule(self, now: Optional[datetime] = None) -> Optional[FerrySchedule]:
        """Today's schedule; a schedule for any other day is never returned"""
        today = self.today_string(now)
        if self.cached_schedule is not None and self.cached_schedule.date == today:
            return self.cached_schedule

        self.cached_schedule = None
        if self.last_attempt is not None and time.monotonic() - self.last_attempt < self.RETRY_INTERVAL:
            return None

        self.last_attempt = time.monotonic()
        self.refresh(now)
        if self.cached_schedule is not None and self.cached_schedule.date != today:
            logger.warning(f"Schedule is for {self.cached_schedule.date}, not {today}")
            self.cached_schedule = None
        return self.cached_schedule
