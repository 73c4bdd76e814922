"""Tests for the Telegram notifier."""

from unittest.mock import MagicMock, patch

import requests

from ferrywatch.services.telegram_service import TelegramNotifier


def test_unconfigured_notifier_sends_nothing():
    notifier = TelegramNotifier(None, "123")
    with patch("ferrywatch.services.telegram_service.requests.post") as post:
        assert notifier.send_message("hello") is False
        assert notifier.send_alert("hello") is False
    post.assert_not_called()


def test_send_message_posts_to_bot_api():
    notifier = TelegramNotifier("token", "123")
    with patch("ferrywatch.services.telegram_service.requests.post") as post:
        post.return_value = MagicMock(status_code=200)
        assert notifier.send_message("hello") is True

    url = post.call_args.args[0]
    assert url == "https://api.telegram.org/bottoken/sendMessage"
    assert post.call_args.kwargs["json"] == {"chat_id": "123", "text": "hello"}


def test_send_message_reports_failure():
    notifier = TelegramNotifier("token", "123")
    with patch("ferrywatch.services.telegram_service.requests.post", side_effect=requests.exceptions.ConnectionError("down")):
        assert notifier.send_message("hello") is False


def test_duplicate_alerts_are_suppressed():
    notifier = TelegramNotifier("token", "123")
    with patch("ferrywatch.services.telegram_service.requests.post") as post:
        assert notifier.send_alert("schedule down") is True
        assert notifier.send_alert("schedule down") is False
        assert notifier.send_alert("feed down") is True
    assert post.call_count == 2


def test_alert_repeats_after_interval():
    notifier = TelegramNotifier("token", "123")
    with patch("ferrywatch.services.telegram_service.requests.post") as post, \
            patch("ferrywatch.services.telegram_service.time.monotonic", side_effect=[1000.0, 1061.0]):
        notifier.send_alert("schedule down")
        notifier.send_alert("schedule down")
    assert post.call_count == 2


def test_expired_alerts_are_forgotten():
    notifier = TelegramNotifier("token", "123")
    with patch("ferrywatch.services.telegram_service.requests.post"), \
            patch("ferrywatch.services.telegram_service.time.monotonic", side_effect=[1000.0, 1030.0, 1100.0]):
        notifier.send_alert("error from 10.0.0.1")
        notifier.send_alert("error from 10.0.0.2")
        notifier.send_alert("error from 10.0.0.3")
    assert list(notifier.recent_messages) == ["error from 10.0.0.3"]
