# src/sievelab/fmt.py
from __future__ import annotations

import re
from collections.abc import Mapping

from colorama import Fore, Style

# Single source of truth for ANSI stripping
ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


def strip_ansi(s: str | None) -> str:
    """Return s with ANSI escape sequences removed."""
    return "" if s is None else ANSI_RE.sub("", s)


def visible_len(s: str | None) -> int:
    """Printable length (without ANSI)."""
    return len(strip_ansi(s))


def pad_visible(s: str, width: int, *, align: str = "right") -> str:
    """Pad a possibly colored string to a visible width."""
    fill = " " * max(0, width - visible_len(s))
    return fill + s if align == "right" else s + fill


def format_factorization(fac: Mapping[int, int]) -> str:
    """
    Turn {p: e, ...} into a tidy string like: 2^3 × 3 × 5^2
    """
    parts: list[str] = []
    for p, e in sorted(fac.items()):
        parts.append(f"{p}^{e}" if e > 1 else f"{p}")
    return " × ".join(parts) if parts else "1"


def format_duration(seconds: float) -> str:
    """ms if <1s; s with millis if <60s; else mm:ss.mmm."""
    MAX_SECONDS = 60
    if seconds < 1:
        return f"{round(seconds * 1000)} ms"
    if seconds < MAX_SECONDS:
        return f"{seconds:.3f} s"
    m, s = divmod(seconds, MAX_SECONDS)
    return f"{int(m)}:{s:06.3f}"


def format_percent(x: float, digits: int = 2) -> str:
    return f"{x * 100:.{digits}f}%"


def label(text: str, width: int = 22) -> str:
    """Bold label padded to the label column."""
    return f"{Style.BRIGHT}{text:<{width}}{Style.RESET_ALL}"


def heading(text: str) -> str:
    return f"{Fore.YELLOW}{Style.BRIGHT}{text}{Style.RESET_ALL}"
