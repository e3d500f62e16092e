import json

import pytest

from backend import settings


@pytest.fixture(autouse=True)
def settings_file(tmp_path, monkeypatch):
    path = tmp_path / "settings.json"
    monkeypatch.setattr(settings, "SETTINGS_PATH", path)
    settings.reset_cache()
    yield path
    settings.reset_cache()


def test_defaults_written_on_first_load(settings_file):
    assert settings.get_value("rest_timer_duration") == 90
    assert settings.get_value("notification_time") == "18:00"
    stored = json.loads(settings_file.read_text(encoding="utf-8"))
    assert [item["key"] for item in stored] == [
        "rest_timer_duration",
        "notifications_enabled",
        "notification_time",
        "sound_on",
    ]


def test_set_value_persists(settings_file):
    settings.set_value("rest_timer_duration", 120)
    settings.reset_cache()
    assert settings.get_value("rest_timer_duration") == 120


def test_missing_key_falls_back_to_default(settings_file):
    settings_file.write_text(json.dumps([{"key": "sound_on", "value": False, "type": "bool"}]))
    assert settings.get_value("sound_on") is False
    assert settings.get_value("rest_timer_duration") == 90
    assert settings.get_value("unknown") is None


def test_unreadable_file_is_replaced_with_defaults(settings_file):
    settings_file.write_text("not json")
    assert settings.get_value("notifications_enabled") is False
    assert json.loads(settings_file.read_text(encoding="utf-8"))


def test_load_config_validates_values():
    settings.set_value("rest_timer_duration", 45)
    settings.set_value("notification_time", "25:99")
    settings.set_value("notifications_enabled", True)
    config = settings.load_config()
    assert config.rest_duration == 90
    assert (config.notification_hour, config.notification_minute) == (18, 0)
    assert config.notifications_enabled


def test_load_config_reads_time():
    settings.set_value("notification_time", "07:30")
    settings.set_value("rest_timer_duration", 180)
    config = settings.load_config()
    assert (config.notification_hour, config.notification_minute) == (7, 30)
    assert config.rest_duration == 180


@pytest.mark.parametrize("text", ["", "ab:cd", "24:00", "12:60"])
def test_parse_time_rejects_bad_input(text):
    with pytest.raises(ValueError):
        settings.parse_time(text)
