"""
AIS Stream Feed Service
Connects to AISStream.io, keeps the fleet store current and forwards updates
"""
import asyncio
import inspect
import json
import logging
from datetime import datetime, timezone
from typing import Optional

import websockets

from ferrywatch.models.vessel import VesselSnapshot
from ferrywatch.prediction.constants import VESSEL_NAMES
from ferrywatch.services.vessel_store import VesselStore

logger = logging.getLogger(__name__)

# Gozo Channel, with some slack around both harbours
CHANNEL_BOUNDING_BOX = [[[35.95, 14.25], [36.07, 14.40]]]

# TrueHeading value meaning "not available"
HEADING_UNAVAILABLE = 511
RECONNECT_DELAY = 5  # seconds


class AISFeedService:
    """Live position feed for the ferry fleet"""

    WS_URL = "wss://stream.aisstream.io/v0/stream"

    def __init__(self, api_key: str, store: VesselStore, message_callback=None):
        self.api_key = api_key
        self.store = store
        self.message_callback = message_callback
        self.ais_websocket = None
        self.is_running = False

    def _parse_timestamp(self, value) -> datetime:
        # AISStream sends "2024-02-10 13:00:05.123456 +0000 UTC"
        try:
            return datetime.strptime(str(value)[:19], "%Y-%m-%d %H:%M:%S").replace(tzinfo=timezone.utc)
        except (TypeError, ValueError):
            return datetime.now(timezone.utc)

    def parse_position_report(self, data: dict) -> Optional[VesselSnapshot]:
        """Turn an AISStream PositionReport message into a snapshot"""
        if data.get("MessageType") != "PositionReport":
            return None

        try:
            report = data["Message"]["PositionReport"]
            meta_data = data.get("MetaData", {})
            mmsi = int(meta_data.get("MMSI") or report.get("UserID"))

            heading = report.get("TrueHeading") or 0
            if heading == HEADING_UNAVAILABLE:
                heading = 0

            return VesselSnapshot(
                mmsi=mmsi,
                latitude=float(report.get("Latitude", meta_data.get("latitude"))),
                longitude=float(report.get("Longitude", meta_data.get("longitude"))),
                speed_tenths_knot=int(round(float(report.get("Sog") or 0) * 10)),
                heading=float(heading),
                course=float(report.get("Cog") or 0),
                timestamp=self._parse_timestamp(meta_data.get("time_utc")),
                nav_status=int(report.get("NavigationalStatus") or 0),
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping malformed position report: {e}")
            return None

    async def connect_to_aisstream(self):
        """Connect to AISStream.io WebSocket"""
        try:
            logger.info("🔌 Connecting to AISStream.io...")
            self.ais_websocket = await websockets.connect(self.WS_URL)
            logger.info("✅ Connected to AISStream.io")

            subscription = {
                "APIKey": self.api_key,
                "BoundingBoxes": CHANNEL_BOUNDING_BOX,
                "FiltersShipMMSI": [str(mmsi) for mmsi in VESSEL_NAMES],
                "FilterMessageTypes": ["PositionReport"],
            }

            await self.ais_websocket.send(json.dumps(subscription))
            logger.info(f"📡 Subscribed to {len(VESSEL_NAMES)} ferries")

            return True

        except Exception as e:
            logger.error(f"❌ Failed to connect to AISStream: {e}")
            return False

    async def handle_message(self, message):
        try:
            data = json.loads(message)
        except (TypeError, ValueError):
            logger.warning("Received non-JSON message from AISStream")
            return

        snapshot = self.parse_position_report(data)
        if snapshot is None:
            return

        vessel = self.store.update_snapshot(snapshot)
        if vessel is None or not self.message_callback:
            return

        try:
            if inspect.iscoroutinefunction(self.message_callback):
                await self.message_callback(vessel)
            else:
                self.message_callback(vessel)
        except Exception as e:
            logger.error(f"Error in message callback: {e}")

    async def consume(self):
        """Receive position reports until the connection drops"""
        try:
            async for message in self.ais_websocket:
                await self.handle_message(message)
        except websockets.exceptions.ConnectionClosed:
            logger.warning("🔌 AISStream connection closed")
        except Exception as e:
            logger.error(f"❌ Error reading AIS data: {e}")

    async def start(self):
        """Start the feed, reconnecting whenever the connection is lost"""
        if self.is_running:
            logger.warning("Feed already running")
            return

        self.is_running = True

        while self.is_running:
            try:
                if await self.connect_to_aisstream():
                    await self.consume()

                if self.is_running:
                    logger.info(f"🔄 Reconnecting in {RECONNECT_DELAY} seconds...")
                    await asyncio.sleep(RECONNECT_DELAY)

            except Exception as e:
                logger.error(f"❌ Feed error: {e}")
                await asyncio.sleep(RECONNECT_DELAY)

    async def stop(self):
        """Stop the feed"""
        self.is_running = False
        if self.ais_websocket:
            await self.ais_websocket.close()
        logger.info("🛑 AIS feed stopped")
