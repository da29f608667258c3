# tests/test_background.py

"""
Notification publishing and the cache prune job.
"""

from unittest.mock import MagicMock, patch

import requests

from core import scheduler
from core.guard import Caller
from core.notifications import NotificationEvent, NotificationPublisher

from fakes import FakeAPIError, FakeSupabase


def _event(**overrides):
    data = {
        "recipient_id": "owner-1",
        "sender_id": "tenant-1",
        "type": "maintenance_request_created",
        "title": "New maintenance request",
        "message": "Leaking tap",
    }
    data.update(overrides)
    return NotificationEvent(**data)


# -----------------------------------------------------
# NotificationPublisher
# -----------------------------------------------------
def test_publish_stores_unread_notification():
    db = FakeSupabase()

    assert NotificationPublisher(db).publish(_event()) is True

    [row] = db.rows("notifications")
    assert row["recipient_id"] == "owner-1"
    assert row["is_read"] is False
    assert row["priority"] == "normal"


def test_publish_store_failure_is_reported_not_raised():
    db = FakeSupabase()
    db.fail("notifications", FakeAPIError("permission denied for table notifications"))

    assert NotificationPublisher(db).publish(_event()) is False


@patch("core.notifications.requests.post")
def test_publish_forwards_to_webhook(mock_post):
    mock_post.return_value = MagicMock(status_code=204)
    publisher = NotificationPublisher(FakeSupabase(), webhook_url="https://hooks.example.com/x")

    publisher.publish(_event(priority="high"))

    mock_post.assert_called_once()
    args, kwargs = mock_post.call_args
    assert args[0] == "https://hooks.example.com/x"
    assert kwargs["json"]["content"].startswith("[high] New maintenance request")


@patch("core.notifications.requests.post", side_effect=requests.ConnectionError("down"))
def test_webhook_failure_does_not_undo_stored_notification(mock_post):
    db = FakeSupabase()
    publisher = NotificationPublisher(db, webhook_url="https://hooks.example.com/x")

    assert publisher.publish(_event()) is True
    assert len(db.rows("notifications")) == 1


@patch("core.notifications.requests.post")
def test_no_webhook_configured(mock_post):
    NotificationPublisher(FakeSupabase()).publish(_event())
    mock_post.assert_not_called()


def test_caller_notify_swallows_publisher_errors():
    publisher = MagicMock()
    publisher.publish.side_effect = RuntimeError("boom")
    caller = Caller(client=None, session=MagicMock(), resolver=MagicMock(), publisher=publisher)

    caller.notify(_event())

    publisher.publish.assert_called_once()


# -----------------------------------------------------
# Scheduler
# -----------------------------------------------------
def test_prune_context_cache_returns_removed_count():
    fake_cache = MagicMock()
    fake_cache.cleanup_expired.return_value = 3

    with patch("core.scheduler.get_context_cache", return_value=fake_cache):
        assert scheduler.prune_context_cache() == 3


def test_prune_context_cache_survives_errors():
    fake_cache = MagicMock()
    fake_cache.cleanup_expired.side_effect = RuntimeError("boom")

    with patch("core.scheduler.get_context_cache", return_value=fake_cache):
        assert scheduler.prune_context_cache() == 0


@patch("core.scheduler.BackgroundScheduler")
def test_start_and_shutdown_scheduler(mock_scheduler_cls):
    instance = mock_scheduler_cls.return_value
    instance.running = True

    try:
        started = scheduler.start_scheduler()

        assert started is instance
        instance.add_job.assert_called_once()
        assert instance.add_job.call_args.kwargs["id"] == "context_cache_prune"
        instance.start.assert_called_once()

        # Already running: no second scheduler
        assert scheduler.start_scheduler() is instance
        assert mock_scheduler_cls.call_count == 1
    finally:
        scheduler.shutdown_scheduler()

    instance.shutdown.assert_called_once_with(wait=False)
    assert scheduler._scheduler is None
