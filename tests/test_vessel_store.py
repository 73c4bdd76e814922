"""Tests for the in-memory fleet store."""

import asyncio
from datetime import datetime, timedelta, timezone

from ferrywatch.models.vessel import QueueSnapshot, Terminal, VesselSnapshot, VesselState
from ferrywatch.services.vessel_store import VesselStore
from tests.conftest import MALITA, NIKOLAOS

RECENT = datetime(2026, 2, 10, 12, 0, tzinfo=timezone.utc)


def snapshot(mmsi=MALITA, **overrides):
    data = {
        "mmsi": mmsi,
        "latitude": 35.989,
        "longitude": 14.329,
        "speed_tenths_knot": 0,
        "timestamp": RECENT,
    }
    data.update(overrides)
    return VesselSnapshot(**data)


def test_update_snapshot_classifies_fleet_vessel():
    store = VesselStore()
    vessel = store.update_snapshot(snapshot())

    assert vessel.name == "MV Malita"
    assert vessel.state == VesselState.DOCKED_CIRKEWWA
    assert store.last_update is not None


def test_update_snapshot_ignores_other_vessels():
    store = VesselStore()
    assert store.update_snapshot(snapshot(mmsi=123456789)) is None
    assert store.vessels() == []


def test_newest_snapshot_wins():
    store = VesselStore()
    store.update_snapshot(snapshot())
    store.update_snapshot(snapshot(latitude=36.025, longitude=14.299))

    [vessel] = store.vessels()
    assert vessel.state == VesselState.DOCKED_MGARR


def test_stale_vessels_are_dropped():
    store = VesselStore(max_age=600)
    store.update_snapshot(snapshot())
    store.update_snapshot(snapshot(mmsi=NIKOLAOS, timestamp=RECENT - timedelta(hours=1)))

    names = [vessel.name for vessel in store.vessels(now=RECENT + timedelta(minutes=5))]
    assert names == ["MV Malita"]


def test_naive_timestamps_are_utc():
    store = VesselStore(max_age=600)
    store.update_snapshot(snapshot(timestamp=RECENT.replace(tzinfo=None)))
    assert len(store.vessels(now=RECENT + timedelta(minutes=1))) == 1


def test_fleet_sorted_by_name():
    store = VesselStore()
    store.update_snapshot(snapshot(mmsi=NIKOLAOS))
    store.update_snapshot(snapshot())
    assert [vessel.name for vessel in store.vessels()] == ["MV Malita", "MV Nikolaos"]


def test_distinguished():
    store = VesselStore()
    store.update_snapshot(snapshot())
    assert store.distinguished() is None

    store.update_snapshot(snapshot(mmsi=NIKOLAOS))
    assert store.distinguished().is_distinguished is True


def test_queue_readings():
    store = VesselStore()
    assert store.queue(Terminal.MGARR) is None

    store.update_queue(Terminal.MGARR, QueueSnapshot(car=12, truck=1))
    assert store.queue(Terminal.MGARR).car == 12

    message = store.stream_message()
    assert message["queues"] == {"cirkewwa": None, "mgarr": {"car": 12, "truck": 1, "motorbike": 0}}
    assert message["vessels"] == []


def test_subscribers_receive_updates():
    async def scenario():
        store = VesselStore()
        queue = store.subscribe()
        store.update_snapshot(snapshot())
        message = await asyncio.wait_for(queue.get(), timeout=1)
        store.unsubscribe(queue)
        store.update_snapshot(snapshot(mmsi=NIKOLAOS))
        return message, queue.qsize(), len(store.subscribers)

    message, pending, subscribers = asyncio.run(scenario())
    assert message["vessels"][0]["name"] == "MV Malita"
    assert pending == 0
    assert subscribers == 0


def test_slow_subscriber_keeps_latest_updates():
    async def scenario():
        store = VesselStore()
        queue = store.subscribe()
        for car in range(VesselStore.SUBSCRIBER_BUFFER + 5):
            store.update_queue(Terminal.CIRKEWWA, QueueSnapshot(car=car))
        messages = [queue.get_nowait() for _ in range(queue.qsize())]
        return messages

    messages = asyncio.run(scenario())
    assert len(messages) == VesselStore.SUBSCRIBER_BUFFER
    assert messages[-1]["queues"]["cirkewwa"]["car"] == VesselStore.SUBSCRIBER_BUFFER + 4
