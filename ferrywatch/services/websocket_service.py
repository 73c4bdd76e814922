"""
FastAPI WebSocket Service
Pushes fleet updates and per-terminal forecasts to subscribed clients
"""
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, Optional, Tuple

from fastapi import WebSocket

from ferrywatch.models.vessel import Terminal, Vessel
from ferrywatch.schemas import TerminalSummary

logger = logging.getLogger(__name__)

SummaryBuilder = Callable[[Terminal, Optional[float]], Awaitable[TerminalSummary]]


class WebSocketManager:
    """Manage WebSocket connections and broadcasts"""

    def __init__(self, summary_builder: Optional[SummaryBuilder] = None):
        self.active_connections: Dict[str, WebSocket] = {}
        self.subscriptions: Dict[str, Tuple[Terminal, Optional[float]]] = {}  # client_id -> (terminal, drive_time)
        self.summary_builder = summary_builder

    @staticmethod
    def _timestamp() -> str:
        return datetime.now(timezone.utc).isoformat()

    def _client_id(self, websocket: WebSocket) -> Optional[str]:
        for client_id, conn in self.active_connections.items():
            if conn == websocket:
                return client_id
        return None

    async def connect(self, websocket: WebSocket, client_id: str, initial: Optional[dict] = None):
        """Accept and register a new WebSocket connection"""
        await websocket.accept()
        self.active_connections[client_id] = websocket
        logger.info(f"✅ Client connected: {client_id}")

        await websocket.send_json({
            "type": "connection",
            "message": "Connected to Ferry Watch",
            "fleet": initial,
            "timestamp": self._timestamp(),
        })

    async def disconnect(self, websocket: WebSocket):
        """Unregister a disconnected client"""
        client_id = self._client_id(websocket)
        if client_id is None:
            return
        del self.active_connections[client_id]
        self.subscriptions.pop(client_id, None)
        logger.info(f"❌ Client disconnected: {client_id}")

    async def disconnect_all(self):
        """Close all connections"""
        for websocket in self.active_connections.values():
            try:
                await websocket.close()
            except Exception as e:
                logger.error(f"Error closing connection: {e}")
        self.active_connections.clear()
        self.subscriptions.clear()

    async def subscribe_to_terminal(self, websocket: WebSocket, terminal: str, drive_time: Optional[float] = None):
        """Attach a terminal forecast to every update this client receives"""
        client_id = self._client_id(websocket)
        if client_id is None:
            return

        try:
            selected = Terminal(terminal)
            drive_time = float(drive_time) if drive_time is not None else None
        except (TypeError, ValueError):
            await websocket.send_json({"type": "error", "message": f"Invalid subscription: {terminal}, {drive_time}"})
            return

        self.subscriptions[client_id] = (selected, drive_time)
        logger.info(f"📍 Client {client_id} subscribed to {selected.value} (drive {drive_time} min)")

        await websocket.send_json({
            "type": "subscribed",
            "terminal": selected.value,
            "forecast": await self._forecast(client_id),
        })

    async def unsubscribe(self, websocket: WebSocket):
        client_id = self._client_id(websocket)
        if client_id is None:
            return
        self.subscriptions.pop(client_id, None)
        await websocket.send_json({"type": "unsubscribed", "message": "Unsubscribed from forecasts"})
        logger.info(f"Unsubscribed: {client_id}")

    async def _forecast(self, client_id: str) -> Optional[dict]:
        subscription = self.subscriptions.get(client_id)
        if subscription is None or self.summary_builder is None:
            return None
        terminal, drive_time = subscription
        summary = await self.summary_builder(terminal, drive_time)
        return summary.model_dump(mode="json")

    async def broadcast_vessel(self, vessel: Vessel):
        """Broadcast one ferry update to all connected clients"""
        disconnected = []
        vessel_data = vessel.model_dump(mode="json")

        for client_id, connection in list(self.active_connections.items()):
            try:
                await connection.send_json({
                    "type": "vessel_update",
                    "vessel": vessel_data,
                    "forecast": await self._forecast(client_id),
                    "timestamp": self._timestamp(),
                })
            except Exception as e:
                logger.error(f"Error sending to {client_id}: {e}")
                disconnected.append(connection)

        for connection in disconnected:
            await self.disconnect(connection)

    def get_connection_count(self) -> int:
        return len(self.active_connections)
