import pytest

from bridge_lfu.models.alert_settings import AlertSettings
from bridge_lfu.services import alert_settings
from bridge_lfu.services.alert_settings import get_alert_settings, update_alert_settings


def test_missing_settings_are_created_with_defaults(db, make_profile):
    user = make_profile()

    settings = get_alert_settings(db, user.id)

    assert settings.license_alert_days == [7, 30]
    assert settings.equipment_alert_days == [30, 90]
    assert settings.email_enabled is True
    assert db.query(AlertSettings).filter_by(user_id=user.id).count() == 1


def test_existing_settings_are_reused(db, make_profile):
    user = make_profile()

    first = get_alert_settings(db, user.id)
    second = get_alert_settings(db, user.id)

    assert first.id == second.id
    assert db.query(AlertSettings).count() == 1


def test_concurrent_creation_rereads_existing_row(db, make_profile, monkeypatch):
    user = make_profile()
    winner = get_alert_settings(db, user.id)
    update_alert_settings(db, user.id, {"license_alert_days": [3]})

    real_find = alert_settings._find_settings
    calls = {"n": 0}

    def stale_find(session, user_id):
        calls["n"] += 1
        if calls["n"] == 1:
            return None
        return real_find(session, user_id)

    monkeypatch.setattr(alert_settings, "_find_settings", stale_find)

    settings = get_alert_settings(db, user.id)

    assert settings.id == winner.id
    assert settings.license_alert_days == [3]
    assert db.query(AlertSettings).count() == 1


def test_partial_update_only_changes_given_fields(db, make_profile):
    user = make_profile()
    get_alert_settings(db, user.id)

    updated = update_alert_settings(db, user.id, {"email_enabled": False})

    assert updated.email_enabled is False
    assert updated.license_alert_days == [7, 30]
    assert updated.equipment_alert_days == [30, 90]

    updated = update_alert_settings(db, user.id, {"equipment_alert_days": [180, 60, 60]})

    assert updated.email_enabled is False
    assert updated.equipment_alert_days == [60, 180]


def test_update_creates_defaults_first(db, make_profile):
    user = make_profile()

    updated = update_alert_settings(db, user.id, {"license_alert_days": [1]})

    assert updated.license_alert_days == [1]
    assert updated.equipment_alert_days == [30, 90]


def test_update_rejects_non_positive_days(db, make_profile):
    user = make_profile()

    with pytest.raises(ValueError):
        update_alert_settings(db, user.id, {"license_alert_days": [0, 7]})
