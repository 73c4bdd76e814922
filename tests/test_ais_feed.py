"""Tests for AISStream message handling."""

import asyncio
import json
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

from ferrywatch.models.vessel import VesselState
from ferrywatch.services.ais_feed import AISFeedService
from ferrywatch.services.vessel_store import VesselStore
from tests.conftest import MALITA, NIKOLAOS


def position_report(mmsi=NIKOLAOS, **report_overrides):
    report = {
        "UserID": mmsi,
        "Latitude": 36.01,
        "Longitude": 14.31,
        "Sog": 12.3,
        "Cog": 135.0,
        "TrueHeading": 134,
        "NavigationalStatus": 0,
    }
    report.update(report_overrides)
    return {
        "MessageType": "PositionReport",
        "MetaData": {"MMSI": mmsi, "ShipName": "NIKOLAOS", "time_utc": "2026-02-10 12:00:05.123456 +0000 UTC"},
        "Message": {"PositionReport": report},
    }


def make_feed(callback=None):
    return AISFeedService("test-key", VesselStore(), message_callback=callback)


def test_parse_position_report():
    snapshot = make_feed().parse_position_report(position_report())

    assert snapshot.mmsi == NIKOLAOS
    assert snapshot.latitude == 36.01
    assert snapshot.speed_tenths_knot == 123
    assert snapshot.course == 135.0
    assert snapshot.heading == 134
    assert snapshot.timestamp == datetime(2026, 2, 10, 12, 0, 5, tzinfo=timezone.utc)


def test_unavailable_heading_becomes_zero():
    snapshot = make_feed().parse_position_report(position_report(TrueHeading=511))
    assert snapshot.heading == 0


def test_other_message_types_are_ignored():
    assert make_feed().parse_position_report({"MessageType": "ShipStaticData"}) is None


def test_malformed_report_is_skipped():
    data = position_report()
    data["Message"]["PositionReport"]["Latitude"] = "north-ish"
    assert make_feed().parse_position_report(data) is None


def test_handle_message_updates_store_and_calls_back():
    callback = AsyncMock()
    feed = make_feed(callback)

    asyncio.run(feed.handle_message(json.dumps(position_report())))

    [vessel] = feed.store.vessels()
    assert vessel.name == "MV Nikolaos"
    assert vessel.state == VesselState.EN_ROUTE_TO_CIRKEWWA
    callback.assert_awaited_once()
    assert callback.await_args.args[0].mmsi == NIKOLAOS


def test_handle_message_accepts_plain_callback():
    callback = MagicMock()
    feed = make_feed(callback)

    asyncio.run(feed.handle_message(json.dumps(position_report(mmsi=MALITA, Sog=0, Latitude=35.989, Longitude=14.329))))

    assert callback.call_args.args[0].state == VesselState.DOCKED_CIRKEWWA


def test_handle_message_ignores_non_fleet_and_garbage():
    callback = MagicMock()
    feed = make_feed(callback)

    asyncio.run(feed.handle_message("not json"))
    asyncio.run(feed.handle_message(json.dumps(position_report(mmsi=123456789))))

    callback.assert_not_called()
    assert feed.store.vessels() == []


def test_callback_errors_do_not_escape():
    feed = make_feed(MagicMock(side_effect=RuntimeError("boom")))
    asyncio.run(feed.handle_message(json.dumps(position_report())))
    assert len(feed.store.vessels()) == 1
