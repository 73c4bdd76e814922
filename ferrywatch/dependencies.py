"""
Shared service instances, injected into routes with Depends
"""
from ferrywatch.services.schedule_service import ScheduleService
from ferrywatch.services.telegram_service import TelegramNotifier
from ferrywatch.services.vessel_store import VesselStore
from config import settings

notifier = TelegramNotifier(settings.TELEGRAM_BOT_TOKEN, settings.TELEGRAM_CHAT_ID)
store = VesselStore(max_age=settings.VESSEL_MAX_AGE)
schedule_service = ScheduleService(
    settings.SCHEDULE_BASE_URL,
    settings.SCHEDULE_CACHE_DIR,
    timezone=settings.TIMEZONE,
    notifier=notifier,
)


def get_store() -> VesselStore:
    return store


def get_schedule_service() -> ScheduleService:
    return schedule_service


def get_notifier() -> TelegramNotifier:
    return notifier
