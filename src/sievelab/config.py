from __future__ import annotations

import tomllib as toml
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from sievelab.table import FAMILY_ORDER
from sievelab.utility import UserInputError
from sievelab.workspace import ensure_workspace_seeded, workspace_dir

FAMILY_CHOICES = ("all", *FAMILY_ORDER)

# Fallbacks for keys a profile leaves out
DEFAULTS: dict[str, dict[str, Any]] = {
    "SIEVE": {
        "DEFAULT_BOUND": 100,
        "MIN_BOUND": 1,
        "MAX_BOUND": 10_000,
        "ONE_IS_PRIME": False,
        "SPEED": 100,
    },
    "DISPLAY": {
        "FAMILY": "all",
        "COLUMNS": 0,
        "SHOW_CURSOR": True,
        "CHART_WIDTH": 40,
    },
    "STATS": {"HOLD_OVER_UNKNOWN": True},
    "BEHAVIOUR": {"DEBUG": False},
    "OUTPUT": {"OUTPUT_FILE": ""},
}


@dataclass
class Settings:
    """
    Wrap the full TOML dict (without the [_PROFILE_] section).
    .as_dict() feeds runtime.apply().

      - name:        resolved profile name (FILE.stem if not provided in [_PROFILE_])
      - description: one-line description from [_PROFILE_] or "(no description)"
    """
    data: dict[str, Any]
    name: str
    description: str
    _source: Path | None = None

    def as_dict(self) -> dict[str, Any]:
        return self.data


# --- Paths -----------------------------------------------------------------

def _profiles_dir() -> Path:
    return workspace_dir() / "profiles"


def _profile_path(name: str) -> Path:
    return _profiles_dir() / f"{name}.toml"


# --- I/O -------------------------------------------------------------------

def _load_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as f:
            return toml.load(f)
    except toml.TOMLDecodeError as e:
        lineno = getattr(e, "lineno", None)
        colno = getattr(e, "colno", None)
        msg = getattr(e, "msg", str(e))
        where = []
        if lineno is not None:
            where.append(f"line {lineno}")
        if colno is not None:
            where.append(f"column {colno}")
        loc = f" (at {', '.join(where)})" if where else ""
        # No traceback chaining
        raise UserInputError(f"reading {path.name}: {msg}{loc}.") from None


# --- Normalization ---------------------------------------------------------

def _sanitize_oneline(s: str) -> str:
    return " ".join(str(s).split()) or "(no description)"


def _split_profile_data(raw: dict[str, Any], fallback_name: str) -> tuple[dict[str, Any], str, str]:
    """
    Extract [_PROFILE_] meta (name, description) and return:
      (settings_without_profile, resolved_name, resolved_description)
    """
    meta = raw.get("_PROFILE_") or {}
    data = {k: v for k, v in raw.items() if k != "_PROFILE_"}
    name = str(meta.get("name") or fallback_name)
    description = _sanitize_oneline(str(meta.get("description") or ""))
    return data, name, description


def normalize_settings(data: dict[str, Any], *, source: str = "profile") -> dict[str, Any]:
    """
    Merge over DEFAULTS and check the values the sieve depends on.
    Unknown sections/keys are kept as written.
    """
    out: dict[str, Any] = {sec: dict(vals) for sec, vals in DEFAULTS.items()}
    for sec, vals in data.items():
        if isinstance(vals, dict) and isinstance(out.get(sec), dict):
            out[sec].update(vals)
        else:
            out[sec] = vals

    sieve = out["SIEVE"]
    for key in ("DEFAULT_BOUND", "MIN_BOUND", "MAX_BOUND", "SPEED"):
        v = sieve[key]
        if isinstance(v, bool) or not isinstance(v, int):
            raise UserInputError(f"{source}: SIEVE.{key} must be an integer, got {v!r}.")
    if sieve["MIN_BOUND"] < 1 or sieve["MAX_BOUND"] < sieve["MIN_BOUND"]:
        raise UserInputError(
            f"{source}: need 1 <= SIEVE.MIN_BOUND <= SIEVE.MAX_BOUND "
            f"(got {sieve['MIN_BOUND']}..{sieve['MAX_BOUND']})."
        )
    if not sieve["MIN_BOUND"] <= sieve["DEFAULT_BOUND"] <= sieve["MAX_BOUND"]:
        raise UserInputError(f"{source}: SIEVE.DEFAULT_BOUND {sieve['DEFAULT_BOUND']} is outside MIN_BOUND..MAX_BOUND.")
    if not 1 <= sieve["SPEED"] <= 300:
        raise UserInputError(f"{source}: SIEVE.SPEED must be within 1..300, got {sieve['SPEED']}.")

    fam = str(out["DISPLAY"]["FAMILY"]).lower()
    if fam not in FAMILY_CHOICES:
        raise UserInputError(f"{source}: DISPLAY.FAMILY must be one of {', '.join(FAMILY_CHOICES)}, got {fam!r}.")
    out["DISPLAY"]["FAMILY"] = fam

    for sec, key in (("SIEVE", "ONE_IS_PRIME"), ("DISPLAY", "SHOW_CURSOR"),
                     ("STATS", "HOLD_OVER_UNKNOWN"), ("BEHAVIOUR", "DEBUG")):
        if not isinstance(out[sec][key], bool):
            raise UserInputError(f"{source}: {sec}.{key} must be true or false.")
    return out


# --- Public API ------------------------------------------------------------

def list_all_profiles() -> list[str]:
    """
    Return the list of available profile *names* (filename stems).
    """
    ensure_workspace_seeded()
    pdir = _profiles_dir()
    if not pdir.exists():
        return []
    return sorted(p.stem for p in pdir.glob("*.toml"))


def list_profiles_with_descriptions() -> list[tuple[str, str]]:
    """
    Return [(name, description), ...] for all profiles.
    Profiles lacking [_PROFILE_] get "(no description)".
    """
    items: list[tuple[str, str]] = []
    for p in _profiles_dir().glob("*.toml"):
        try:
            raw = _load_toml(p)
        except UserInputError:
            # Best-effort listing; fall back to filename
            items.append((p.stem, "(unreadable profile)"))
            continue
        _, nm, desc = _split_profile_data(raw, p.stem)
        items.append((nm, desc))
    return sorted(items, key=lambda t: t[0].lower())


def has_profile(name: str) -> bool:
    return _profile_path(name).exists()


def load_settings(name: str | None) -> Settings:
    """
    Load a profile by name (default 'default'), strip the [_PROFILE_]
    metadata, merge defaults and validate, and return Settings.
    """
    if not name:
        name = "default"

    path = _profile_path(name)
    if not path.exists():
        raise FileNotFoundError(f"Profile '{name}' not found at {path}")

    raw = _load_toml(path)
    data, resolved_name, description = _split_profile_data(raw, path.stem)
    data = normalize_settings(data, source=path.name)

    return Settings(
        data=data,
        name=resolved_name,
        description=description,
        _source=path,
    )


def default_settings() -> Settings:
    """Settings built from DEFAULTS only (no workspace access)."""
    return Settings(data=normalize_settings({}), name="builtin", description="Built-in defaults")


def _current_profile_path() -> Path:
    p = _profiles_dir()
    p.mkdir(parents=True, exist_ok=True)
    return p / ".current"


def read_current_profile() -> str | None:
    try:
        s = _current_profile_path().read_text(encoding="utf-8").strip()
    except OSError:
        return None
    return s[:-5] if s.lower().endswith(".toml") else (s or None)


def write_current_profile(name: str) -> None:
    nm = (name or "").strip()
    if nm.lower().endswith(".toml"):
        nm = nm[:-5]
    _current_profile_path().write_text(nm, encoding="utf-8")
