# tests/test_config.py
from __future__ import annotations

import pytest

from sievelab import config as CONFIG
from sievelab.engine import SieveEngine
from sievelab.runtime import APPLY, CFG
from sievelab.runtime import current as _rt_current
from sievelab.utility import UserInputError, parse_bound, parse_int, speed_to_delay
from sievelab.workspace import ensure_workspace_seeded, workspace_dir

# ---------- workspace / profiles ---------------------------------------------


def test_workspace_follows_environment(tmp_path):
    assert workspace_dir() == (tmp_path / "workspace").resolve()


def test_seeding_copies_packaged_profiles():
    root, seeded, copied = ensure_workspace_seeded()
    assert seeded
    assert copied["profiles"] >= 3
    assert {"default", "classroom", "legacy"} <= set(CONFIG.list_all_profiles())
    # second run copies nothing new
    _, seeded_again, _ = ensure_workspace_seeded()
    assert not seeded_again


def test_seeding_keeps_user_edits():
    ensure_workspace_seeded()
    path = workspace_dir() / "profiles" / "default.toml"
    path.write_text('[SIEVE]\nDEFAULT_BOUND = 77\n', encoding="utf-8")
    ensure_workspace_seeded()
    assert CONFIG.load_settings("default").data["SIEVE"]["DEFAULT_BOUND"] == 77


def test_load_default_profile():
    ensure_workspace_seeded()
    s = CONFIG.load_settings(None)
    assert s.name == "default"
    assert s.description != "(no description)"
    assert "_PROFILE_" not in s.data
    assert s.data["SIEVE"]["ONE_IS_PRIME"] is False


def test_legacy_profile_drives_the_engine():
    ensure_workspace_seeded()
    APPLY(CONFIG.load_settings("legacy"))
    assert _rt_current().profile_name == "legacy"
    assert CFG("SIEVE.ONE_IS_PRIME") is True
    eng = SieveEngine(10)
    eng.run_to_completion()
    assert eng.get_table().primes() == [1, 2, 3, 5, 7]


def test_missing_profile():
    ensure_workspace_seeded()
    assert not CONFIG.has_profile("nope")
    with pytest.raises(FileNotFoundError):
        CONFIG.load_settings("nope")


def test_broken_toml_is_a_user_error():
    ensure_workspace_seeded()
    (workspace_dir() / "profiles" / "broken.toml").write_text("[SIEVE\nX = 1\n", encoding="utf-8")
    with pytest.raises(UserInputError, match="broken.toml"):
        CONFIG.load_settings("broken")
    names = dict(CONFIG.list_profiles_with_descriptions())
    assert names["broken"] == "(unreadable profile)"


@pytest.mark.parametrize("data", [
    {"SIEVE": {"MAX_BOUND": "lots"}},
    {"SIEVE": {"MIN_BOUND": 0}},
    {"SIEVE": {"MIN_BOUND": 50, "MAX_BOUND": 10}},
    {"SIEVE": {"DEFAULT_BOUND": 20000}},
    {"SIEVE": {"SPEED": 301}},
    {"SIEVE": {"ONE_IS_PRIME": "yes"}},
    {"DISPLAY": {"FAMILY": "cousin"}},
])
def test_invalid_settings_rejected(data):
    with pytest.raises(UserInputError):
        CONFIG.normalize_settings(data)


def test_normalize_fills_defaults_and_keeps_extras():
    out = CONFIG.normalize_settings({"DISPLAY": {"FAMILY": "TWIN"}, "EXTRA": {"A": 1}})
    assert out["DISPLAY"]["FAMILY"] == "twin"
    assert out["SIEVE"]["MAX_BOUND"] == 10_000
    assert out["EXTRA"] == {"A": 1}


def test_current_profile_roundtrip():
    ensure_workspace_seeded()
    assert CONFIG.read_current_profile() is None
    CONFIG.write_current_profile("legacy.toml")
    assert CONFIG.read_current_profile() == "legacy"


def test_runtime_dotted_lookup():
    APPLY({"SIEVE": {"SPEED": 42}, "BEHAVIOUR": {"DEBUG": True}})
    assert CFG("SIEVE.SPEED") == 42
    assert CFG("SIEVE.MISSING", "x") == "x"
    assert CFG("NOPE.SPEED", 7) == 7
    assert _rt_current().debug is True


def test_runtime_accepts_settings_or_dict_only():
    APPLY(CONFIG.default_settings())
    assert _rt_current().profile_name == "builtin"
    assert CFG("SIEVE.MAX_BOUND") == 10_000
    with pytest.raises(AttributeError):
        APPLY(CONFIG)


# ---------- input helpers -----------------------------------------------------


@pytest.mark.parametrize("text,expected", [("42", 42), (" 1_000 ", 1000), ("-3", -3), ("+7", 7), ("x1", None), ("", None)])
def test_parse_int(text, expected):
    assert parse_int(text) == expected


def test_parse_bound_range():
    assert parse_bound("500", lo=10, hi=500) == 500
    for bad in ("9", "501", "0", "abc"):
        with pytest.raises(UserInputError):
            parse_bound(bad, lo=10, hi=500)


def test_speed_to_delay():
    assert speed_to_delay(100) == pytest.approx(0.1)
    assert speed_to_delay(1) == pytest.approx(0.991)
    assert speed_to_delay(300) == 0
    assert speed_to_delay(1000) == 0
