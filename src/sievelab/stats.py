# -----------------------------------------------------------------------------
#  stats.py
#  Summary statistics and the actual-vs-estimated prime count series
# -----------------------------------------------------------------------------

from __future__ import annotations

from dataclasses import dataclass, field
from math import floor, log
from typing import TYPE_CHECKING

from sievelab.runtime import CFG
from sievelab.table import FAMILY_ORDER, PRIME, NumberTable

if TYPE_CHECKING:
    from sievelab.engine import Cursor

SERIES_START = 10
SERIES_POINTS = 20


@dataclass(frozen=True)
class SeriesPoint:
    n: int
    actual: int | None       # None only when hold-over is disabled
    estimated: float


@dataclass(frozen=True)
class Stats:
    n: int
    prime_count: int
    estimated_count: int
    density: float
    gaps: tuple[int, ...]
    avg_gap: float
    max_gap: int
    highest_processed: int
    complete: bool
    series: tuple[SeriesPoint, ...] = ()
    family_counts: dict[str, int] = field(default_factory=dict)


def _round_half_up(x: float, digits: int = 0) -> float:
    q = 10 ** digits
    return floor(x * q + 0.5) / q


def pnt_estimate(n: int) -> float:
    """n / ln(n), the Prime Number Theorem estimate of π(n); 0 for n <= 1."""
    return n / log(n) if n > 1 else 0.0


def highest_processed(n: int, cursor: Cursor) -> int:
    """Largest value whose classification the sieve has settled so far."""
    if cursor.complete:
        return n
    m = cursor.current_multiple
    return max(cursor.current_prime, m - cursor.current_prime if m > 0 else 0)


def _prime_prefix_counts(table: NumberTable) -> list[int]:
    # counts[v] = primes <= v
    counts = [0] * (len(table) + 1)
    for e in table:
        counts[e.value] = counts[e.value - 1] + (1 if e.state == PRIME else 0)
    return counts


def build_series(
    table: NumberTable,
    cursor: Cursor,
    *,
    hold_over: bool = True,
) -> tuple[SeriesPoint, ...]:
    """
    Checkpoints 10, 10+s, 10+2s, ... <= N (s = max(1, N // 20)) plus N itself.

    Checkpoints the sieve has not reached yet repeat the last computed
    count (or carry None when hold_over is False).
    """
    n = len(table)
    hp = highest_processed(n, cursor)
    counts = _prime_prefix_counts(table)
    stride = max(1, n // SERIES_POINTS)

    points: list[SeriesPoint] = []
    actual: int | None = 0
    i = SERIES_START
    while i <= n:
        if i <= hp:
            actual = counts[i]
        elif points:
            actual = points[-1].actual if hold_over else None
        elif not hold_over:
            actual = None
        points.append(SeriesPoint(i, actual, _round_half_up(pnt_estimate(i), 2)))
        i += stride

    if not points or points[-1].n != n:
        if cursor.complete or hp >= n:
            final = counts[n]
        elif not hold_over:
            final = None
        else:
            final = points[-1].actual if points else 0
        points.append(SeriesPoint(n, final, _round_half_up(pnt_estimate(n), 2)))

    return tuple(points)


def summarize(table: NumberTable, cursor: Cursor, *, hold_over: bool | None = None) -> Stats:
    """Derive statistics from a table and cursor snapshot. Never mutates either."""
    if hold_over is None:
        hold_over = bool(CFG("STATS.HOLD_OVER_UNKNOWN", True))

    n = len(table)
    prime_count = table.count_state(PRIME)
    gaps = tuple(e.gap for e in table if e.state == PRIME and e.gap is not None)

    family_counts = {tag: 0 for tag in FAMILY_ORDER}
    for e in table:
        for tag in e.families:
            family_counts[tag] = family_counts.get(tag, 0) + 1

    return Stats(
        n=n,
        prime_count=prime_count,
        estimated_count=int(_round_half_up(pnt_estimate(n))),
        density=prime_count / n if n else 0.0,
        gaps=gaps,
        avg_gap=sum(gaps) / len(gaps) if gaps else 0.0,
        max_gap=max(gaps) if gaps else 0,
        highest_processed=highest_processed(n, cursor),
        complete=cursor.complete,
        series=build_series(table, cursor, hold_over=hold_over),
        family_counts=family_counts,
    )
