from datetime import datetime, timezone

import pytest

from winwork.repositories.settings import SettingKind, format_value, parse_value
from winwork.services.settings import DEFAULTS, SettingsService


@pytest.fixture()
def service(settings_repo):
    return SettingsService(settings_repo)


def test_integer_round_trip(settings_repo):
    settings_repo.set_int("Window.Opacity", 55)

    assert settings_repo.get_value("Window.Opacity") == "55"
    assert settings_repo.get_int("Window.Opacity") == 55


def test_canonical_text_forms(settings_repo):
    settings_repo.set_bool("MinimizeToTray", True)
    settings_repo.set_float("Scale", 1.25)
    stamp = datetime(2024, 3, 1, 12, 30, 15, 250000, tzinfo=timezone.utc)
    settings_repo.set_datetime("LastBackup", stamp)

    assert settings_repo.get_value("MinimizeToTray") == "true"
    assert settings_repo.get_value("Scale") == "1.25"
    assert settings_repo.get_bool("MinimizeToTray") is True
    assert settings_repo.get_float("Scale") == 1.25
    assert settings_repo.get_datetime("LastBackup") == stamp


@pytest.mark.parametrize(
    "kind, raw",
    [
        (SettingKind.BOOL, "yes"),
        (SettingKind.INT, "12.5"),
        (SettingKind.INT, "0x10"),
        (SettingKind.INT, "\u0665\u0665"),
        (SettingKind.FLOAT, "one"),
        (SettingKind.DATETIME, "next tuesday"),
        (SettingKind.INT, ""),
        (SettingKind.INT, None),
    ],
)
def test_unreadable_values_are_absent(kind, raw):
    assert parse_value(kind, raw) is None


def test_parsing_is_lenient_about_case_and_whitespace():
    assert parse_value(SettingKind.BOOL, " TRUE ") is True
    assert parse_value(SettingKind.INT, " -7 ") == -7
    assert parse_value(SettingKind.DATETIME, "2024-01-01T00:00:00Z") == datetime(
        2024, 1, 1, tzinfo=timezone.utc
    )
    assert format_value(SettingKind.BOOL, False) == "false"


def test_typed_read_of_garbage_does_not_raise(settings_repo):
    settings_repo.set_value("Window.Opacity", "opaque")

    assert settings_repo.get_int("Window.Opacity") is None
    assert settings_repo.get_int("Missing") is None


def test_set_value_upserts(settings_repo):
    settings_repo.set_value("Theme", "Light", "Application theme")
    settings_repo.set_value("Theme", "Dark")

    rows = settings_repo.get_all()
    assert [(row.key, row.value, row.description) for row in rows] == [
        ("Theme", "Dark", "Application theme")
    ]
    assert settings_repo.delete("Theme") is True
    assert settings_repo.delete("Theme") is False


def test_missing_known_key_writes_default(service, settings_repo):
    assert settings_repo.get_by_key("Theme") is None

    assert service.get("Theme") == "Dark"
    assert settings_repo.get_value("Theme") == "Dark"
    assert service.get_typed("BackupInterval", SettingKind.INT) == 7
    assert service.get("Unknown.Key") is None
    assert settings_repo.get_by_key("Unknown.Key") is None


def test_theme_and_hotkey_validation(service):
    assert service.set_theme("light") is True
    assert service.get_theme() == "Light"
    assert service.set_theme("Purple") is False
    assert service.get_theme() == "Light"

    assert service.set_global_hotkey("Ctrl+Shift+K") is True
    assert service.set_global_hotkey("K") is False
    assert service.get_global_hotkey() == "Ctrl+Shift+K"


def test_window_styling_settings(service):
    assert service.get_window_opacity() == 100
    assert service.set_window_opacity(55) is True
    assert service.get_window_opacity() == 55
    assert service.set_window_opacity(140) is False
    assert service.get_window_opacity() == 55

    assert service.set_background_color("#222") is True
    assert service.get_background_color() == "#222222"
    assert service.set_background_color("dark") is False


def test_reset_restores_every_default(service, settings_repo):
    service.set("Theme", "Light")
    service.set_minimize_to_tray(False)
    assert service.get_minimize_to_tray() is False

    service.reset_to_defaults()

    assert {row.key: row.value for row in settings_repo.get_all()} == {
        key: value for key, (value, _) in DEFAULTS.items()
    }
    assert service.get_minimize_to_tray() is True
    assert service.set("  ", "x") is False
