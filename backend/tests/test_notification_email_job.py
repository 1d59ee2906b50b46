from datetime import datetime, timedelta

import pytest

from conftest import FakeEmailSender
from bridge_lfu.models.notification import Notification
from bridge_lfu.services.alert_settings import get_alert_settings, update_alert_settings
from bridge_lfu.services.notification_email_job import NotificationEmailJob
from bridge_lfu.services.notification_store import create_notification


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def make_job(sleeps):
    def factory(sender, batch_size=50, send_delay_ms=200):
        return NotificationEmailJob(
            sender=sender,
            batch_size=batch_size,
            send_delay_ms=send_delay_ms,
            sleep=sleeps.append,
        )

    return factory


def _pending(db, user, title="Heads up"):
    return create_notification(
        db,
        user_id=user.id,
        notification_type="general",
        title=title,
        message="Something happened",
    )


def test_successful_send_marks_notification(db, make_profile, make_job):
    user = make_profile(first_name="Grace", last_name="Hopper", email="grace@example.com")
    notification = _pending(db, user)
    sender = FakeEmailSender()

    stats = make_job(sender).process_unsent(db)

    assert stats == {"processed": 1, "sent": 1, "failed": 0, "skipped": 0}
    assert sender.calls == [(notification.id, "grace@example.com", "Grace Hopper")]
    db.refresh(notification)
    assert notification.email_sent is True


def test_failed_send_stays_pending_for_retry(db, make_profile, make_job):
    user = make_profile()
    notification = _pending(db, user)

    stats = make_job(FakeEmailSender(result=False)).process_unsent(db)

    assert stats == {"processed": 1, "sent": 0, "failed": 1, "skipped": 0}
    db.refresh(notification)
    assert notification.email_sent is False

    retry = make_job(FakeEmailSender()).process_unsent(db)
    assert retry["sent"] == 1


def test_sender_exception_counts_as_failure(db, make_profile, make_job):
    user = make_profile()
    first = _pending(db, user, "first")
    second = _pending(db, user, "second")
    sender = FakeEmailSender(error=ConnectionError("smtp down"))

    stats = make_job(sender).process_unsent(db)

    assert stats == {"processed": 2, "sent": 0, "failed": 2, "skipped": 0}
    assert len(sender.calls) == 2
    for notification in (first, second):
        db.refresh(notification)
        assert notification.email_sent is False


def test_email_disabled_is_skipped_without_sending(db, make_profile, make_job):
    user = make_profile()
    notification = _pending(db, user)
    update_alert_settings(db, user.id, {"email_enabled": False})
    sender = FakeEmailSender()

    stats = make_job(sender).process_unsent(db)

    assert stats == {"processed": 1, "sent": 0, "failed": 0, "skipped": 1}
    assert sender.calls == []
    db.refresh(notification)
    assert notification.email_sent is True


def test_missing_recipient_fails_without_sending(db, make_job):
    orphan = create_notification(
        db,
        user_id="00000000-0000-0000-0000-000000000000",
        notification_type="general",
        title="Lost",
        message="Nobody home",
    )
    sender = FakeEmailSender()

    stats = make_job(sender).process_unsent(db)

    assert stats["failed"] == 1
    assert sender.calls == []
    db.refresh(orphan)
    assert orphan.email_sent is False


def test_missing_settings_are_created_with_defaults(db, make_profile, make_job):
    user = make_profile()
    _pending(db, user)

    make_job(FakeEmailSender()).process_unsent(db)

    assert get_alert_settings(db, user.id).email_enabled is True


def test_batch_size_limits_one_run(db, make_profile, make_job):
    user = make_profile()
    for index in range(5):
        _pending(db, user, f"n{index}")

    stats = make_job(FakeEmailSender(), batch_size=3).process_unsent(db)

    assert stats["processed"] == 3
    assert db.query(Notification).filter_by(email_sent=False).count() == 2


def test_batch_takes_oldest_first(db, make_profile, make_job):
    user = make_profile()
    base = datetime(2026, 1, 1, 8, 0)
    newest = create_notification(db, user.id, "general", "newest", "m", created_at=base + timedelta(hours=2))
    oldest = create_notification(db, user.id, "general", "oldest", "m", created_at=base)
    sender = FakeEmailSender()

    make_job(sender, batch_size=1).process_unsent(db)

    assert [call[0] for call in sender.calls] == [oldest.id]
    db.refresh(newest)
    assert newest.email_sent is False


def test_pauses_between_deliveries(db, make_profile, make_job, sleeps):
    user = make_profile()
    for index in range(3):
        _pending(db, user, f"n{index}")

    make_job(FakeEmailSender()).process_unsent(db)

    assert sleeps == [0.2, 0.2]


def test_skipped_deliveries_do_not_pause(db, make_profile, make_job, sleeps):
    user = make_profile()
    update_alert_settings(db, user.id, {"email_enabled": False})
    for index in range(3):
        _pending(db, user, f"n{index}")

    make_job(FakeEmailSender()).process_unsent(db)

    assert sleeps == []


def test_empty_queue_returns_zero_stats(db, make_job):
    stats = make_job(FakeEmailSender()).process_unsent(db)

    assert stats == {"processed": 0, "sent": 0, "failed": 0, "skipped": 0}


def test_overlapping_run_returns_zero_stats(db, make_profile, make_job):
    user = make_profile()
    _pending(db, user)
    nested = {}

    class ReentrantSender(FakeEmailSender):
        def send(self, notification, recipient_address, display_name):
            nested["running"] = job.is_running
            nested["stats"] = job.process_unsent(db)
            return super().send(notification, recipient_address, display_name)

    job = make_job(ReentrantSender())
    stats = job.process_unsent(db)

    assert nested["running"] is True
    assert nested["stats"] == {"processed": 0, "sent": 0, "failed": 0, "skipped": 0}
    assert stats["sent"] == 1
    assert job.is_running is False


def test_display_name_falls_back_to_user(db, make_profile, make_job):
    user = make_profile(first_name=None, last_name=None)
    _pending(db, user)
    sender = FakeEmailSender()

    make_job(sender).process_unsent(db)

    assert sender.calls[0][2] == "User"


@pytest.mark.parametrize(
    "email_enabled, sender_result, expected_sent, expected_calls",
    [
        (True, True, True, 1),
        (True, False, False, 1),
        (False, True, True, 0),
        (False, False, True, 0),
    ],
)
def test_immediate_send_matches_batch_outcome(
    db, make_profile, make_job, email_enabled, sender_result, expected_sent, expected_calls
):
    immediate_user = make_profile()
    batch_user = make_profile()
    for user in (immediate_user, batch_user):
        update_alert_settings(db, user.id, {"email_enabled": email_enabled})

    batched = _pending(db, batch_user)
    batch_sender = FakeEmailSender(result=sender_result)
    batch_stats = make_job(batch_sender).process_unsent(db)
    db.refresh(batched)

    immediate_sender = FakeEmailSender(result=sender_result)
    immediate = make_job(immediate_sender).create_and_send_notification(
        db, immediate_user.id, "general", "Now", "Sent right away"
    )

    assert batched.email_sent is expected_sent
    assert immediate.email_sent is expected_sent
    assert batch_stats["processed"] == 1
    assert len(batch_sender.calls) == expected_calls
    assert len(immediate_sender.calls) == expected_calls


def test_immediate_send_returns_none_when_creation_fails(db, make_job, monkeypatch):
    from bridge_lfu.services import notification_email_job

    def broken_create(*args, **kwargs):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(notification_email_job, "create_notification", broken_create)
    sender = FakeEmailSender()

    result = make_job(sender).create_and_send_notification(db, "u-1", "general", "t", "m")

    assert result is None
    assert sender.calls == []
