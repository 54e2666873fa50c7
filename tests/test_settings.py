import json

import pytest
from pydantic import ValidationError

from lifttrack import settings
from lifttrack.settings import LocalProfile


def test_defaults_are_written_on_first_load(settings_path):
    assert settings.get_value("units", path=settings_path) == "lb"
    assert settings.get_value("default_rest_timer", path=settings_path) == 90
    data = json.loads(settings_path.read_text())
    assert [item["key"] for item in data] == [
        "units",
        "default_rest_timer",
        "display_name",
        "email",
    ]


def test_set_value_persists(settings_path):
    settings.set_value("units", "kg", settings_path)
    settings.set_value("theme", "dark", settings_path)
    settings.clear_cache()
    assert settings.get_value("units", path=settings_path) == "kg"
    assert settings.get_value("theme", path=settings_path) == "dark"
    assert settings.get_value("missing", "fallback", settings_path) == "fallback"


def test_malformed_file_is_replaced_with_defaults(settings_path):
    settings_path.write_text("{broken")
    assert settings.get_value("units", path=settings_path) == "lb"


def test_local_profile_keeps_user_id(settings_path):
    profile = LocalProfile(settings_path)
    user = profile.current_user()
    assert user.id
    assert user.display_name == "Lifter"
    settings.clear_cache()
    assert LocalProfile(settings_path).current_user().id == user.id


def test_update_profile(settings_path):
    profile = LocalProfile(settings_path)
    updated = profile.update_profile(units="kg", default_rest_timer=120)
    assert updated.units == "kg"
    assert profile.user_profile().default_rest_timer == 120


def test_update_profile_rejects_bad_values(settings_path):
    profile = LocalProfile(settings_path)
    with pytest.raises(ValidationError):
        profile.update_profile(units="stone")
    with pytest.raises(KeyError):
        profile.update_profile(user_id="other")
    assert profile.user_profile().units == "lb"
