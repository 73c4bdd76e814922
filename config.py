"""
FastAPI Application Configuration
"""
import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent


class Settings:
    """Application Settings"""

    # Environment
    ENV = os.getenv("ENV", "development")
    DEBUG = ENV == "development"

    # API Configuration
    API_TITLE = "Ferry Watch API"
    API_VERSION = "1.0.0"
    API_DESCRIPTION = "Live Gozo Channel ferry positions, terminal safety and likely-ferry predictions"

    # CORS Configuration
    CORS_ORIGINS: List[str] = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000").split(",")
    ]
    CORS_ALLOW_CREDENTIALS = True
    CORS_ALLOW_METHODS = ["GET", "POST"]
    CORS_ALLOW_HEADERS = ["*"]

    # Server Configuration
    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = int(os.getenv("PORT", "3001"))
    WORKERS = int(os.getenv("WORKERS", "1"))

    # AIS Data Configuration
    AISSTREAM_API_KEY = os.getenv("AISSTREAM_API_KEY", "")

    # Database Configuration (prediction feedback)
    DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR / 'ferrywatch.db'}")
    SQLALCHEMY_ECHO = os.getenv("SQLALCHEMY_ECHO", "false").lower() == "true"

    # Ferry schedule
    SCHEDULE_BASE_URL = os.getenv("SCHEDULE_BASE_URL", "https://static.gozochannel.com/schedules")
    SCHEDULE_CACHE_DIR = Path(os.getenv("SCHEDULE_CACHE_DIR", str(BASE_DIR / "cache")))
    TIMEZONE = os.getenv("TIMEZONE", "Europe/Malta")

    # Alerting
    TELEGRAM_BOT_TOKEN = os.getenv("TELEGRAM_BOT_TOKEN", "")
    TELEGRAM_CHAT_ID = os.getenv("TELEGRAM_CHAT_ID", "")

    # Streaming Configuration
    SSE_KEEPALIVE_INTERVAL = 30  # seconds

    # Logging Configuration
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Vessel Data Configuration
    VESSEL_MAX_AGE = int(os.getenv("VESSEL_MAX_AGE", "600"))  # seconds


# Create settings instance
settings = Settings()
