"""
Latest fleet snapshot cache
Holds the newest position per ferry, the newest queue reading per terminal
and the stream subscribers waiting for updates
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Set

from ferrywatch.models.vessel import QueueSnapshot, Terminal, Vessel, VesselSnapshot
from ferrywatch.prediction.constants import DISTINGUISHED_MMSI
from ferrywatch.prediction.vessel_state import build_vessel

logger = logging.getLogger(__name__)


class VesselStore:
    """In-memory store fed by the AIS feed and the queue sensors"""

    SUBSCRIBER_BUFFER = 10

    def __init__(self, max_age: Optional[int] = None):
        self.max_age = max_age  # seconds, None keeps everything
        self.snapshots: Dict[int, VesselSnapshot] = {}
        self.queues: Dict[Terminal, QueueSnapshot] = {}
        self.subscribers: Set[asyncio.Queue] = set()
        self.last_update: Optional[datetime] = None

    def update_snapshot(self, snapshot: VesselSnapshot) -> Optional[Vessel]:
        """Replace the stored snapshot for a ferry; ignores vessels outside the fleet"""
        vessel = build_vessel(snapshot)
        if vessel is None:
            logger.debug(f"Ignoring non-fleet MMSI {snapshot.mmsi}")
            return None

        self.snapshots[snapshot.mmsi] = snapshot
        self.last_update = datetime.now(timezone.utc)
        logger.debug(f"🚢 {vessel.name}: {vessel.state.value} at {vessel.latitude:.4f},{vessel.longitude:.4f}")

        self.publish()
        return vessel

    def vessels(self, now: Optional[datetime] = None) -> List[Vessel]:
        """Current fleet, oldest reports past max_age dropped, sorted by name"""
        now = now or datetime.now(timezone.utc)
        fleet = []
        for snapshot in list(self.snapshots.values()):
            if self.max_age is not None and self._age(snapshot, now) > self.max_age:
                continue
            vessel = build_vessel(snapshot)
            if vessel is not None:
                fleet.append(vessel)
        return sorted(fleet, key=lambda v: v.name)

    @staticmethod
    def _age(snapshot: VesselSnapshot, now: datetime) -> float:
        timestamp = snapshot.timestamp
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        return (now - timestamp).total_seconds()

    def distinguished(self, now: Optional[datetime] = None) -> Optional[Vessel]:
        for vessel in self.vessels(now):
            if vessel.mmsi == DISTINGUISHED_MMSI:
                return vessel
        return None

    def update_queue(self, terminal: Terminal, queue: QueueSnapshot):
        self.queues[terminal] = queue
        logger.info(f"🚗 Queue at {terminal.value}: {queue.car} cars, {queue.truck} trucks, {queue.motorbike} motorbikes")
        self.publish()

    def queue(self, terminal: Terminal) -> Optional[QueueSnapshot]:
        return self.queues.get(terminal)

    def stream_message(self) -> dict:
        return {
            "vessels": [vessel.model_dump(mode="json") for vessel in self.vessels()],
            "queues": {
                terminal.value: (queue.model_dump() if queue else None)
                for terminal, queue in ((t, self.queues.get(t)) for t in Terminal)
            },
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    # ==================== SUBSCRIBERS ====================

    def subscribe(self) -> asyncio.Queue:
        queue = asyncio.Queue(maxsize=self.SUBSCRIBER_BUFFER)
        self.subscribers.add(queue)
        logger.info(f"📱 Stream subscriber added. Total: {len(self.subscribers)}")
        return queue

    def unsubscribe(self, queue: asyncio.Queue):
        self.subscribers.discard(queue)
        logger.info(f"📱 Stream subscriber removed. Total: {len(self.subscribers)}")

    def publish(self):
        if not self.subscribers:
            return

        message = self.stream_message()
        for queue in self.subscribers:
            if queue.full():
                # Slow consumer: drop its oldest pending update
                queue.get_nowait()
            queue.put_nowait(message)
