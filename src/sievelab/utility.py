# -----------------------------------------------------------------------------
#  Utility functions
# -----------------------------------------------------------------------------

from __future__ import annotations

import os
import shutil
import sys


class UserInputError(Exception):
    pass


class InvalidBound(UserInputError, ValueError):
    """Sieve bound N is not an integer >= 1."""


class InvalidInput(UserInputError, ValueError):
    """Query value is not an integer >= 1."""


def check_bound(n: object) -> int:
    """Return n as a sieve bound or raise InvalidBound."""
    if isinstance(n, bool) or not isinstance(n, int):
        raise InvalidBound(f"Invalid input: bound must be an integer, got {n!r}.")
    if n < 1:
        raise InvalidBound(f"Invalid input: bound must be at least 1, got {n}.")
    return n


def parse_int(text: str) -> int | None:
    """
    Parse a plain integer, allowing '_' separators and surrounding spaces.
    Returns None when text is not an integer.
    """
    s = (text or "").strip().replace("_", "")
    if not s:
        return None
    if s[0] in "+-":
        sign, digits = s[0], s[1:]
    else:
        sign, digits = "", s
    if not digits.isdigit():
        return None
    return int(sign + digits)


def parse_bound(text: str, *, lo: int = 1, hi: int | None = None) -> int:
    """
    Parse and range-check a bound typed by the user (CLI / REPL).
    The core only needs n >= 1; lo/hi come from the active profile.
    """
    n = parse_int(text)
    if n is None:
        raise InvalidBound(f"Invalid input: '{text}' is not an integer.")
    check_bound(n)
    if n < lo or (hi is not None and n > hi):
        rng = f"{lo}..{hi}" if hi is not None else f">= {lo}"
        raise InvalidBound(f"Invalid input: bound {n} outside the allowed range {rng}.")
    return n


def speed_to_delay(speed: int) -> float:
    """Animation delay in seconds for speed 1..300 (faster = shorter)."""
    s = min(max(int(speed), 1), 300)
    return max(0, 1000 - s * 9) / 1000.0


def clear_screen(keep_scrollback: bool = False) -> None:
    if not sys.stdout.isatty():
        return
    if os.name == "nt":
        os.system("cls")
        return
    seq = "\x1b[H\x1b[2J" if keep_scrollback else "\x1b[H\x1b[2J\x1b[3J"
    sys.stdout.write(seq)
    sys.stdout.flush()


def get_terminal_width(default=80):
    """
    Return the terminal's character width if detected, else the default
    value (80 by default).
    """
    try:
        return shutil.get_terminal_size().columns
    except Exception:
        return default


def typename(v: object) -> str:
    return type(v).__name__


def flatten_dotted(d: dict, prefix: str = "") -> dict[str, object]:
    """Flatten nested dicts into {'A.B': value} form (used by --debug)."""
    out: dict[str, object] = {}
    for k, v in d.items():
        key = f"{prefix}.{k}" if prefix else str(k)
        if isinstance(v, dict):
            out.update(flatten_dotted(v, key))
        else:
            out[key] = v
    return out
