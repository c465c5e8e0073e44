# -----------------------------------------------------------------------------
#  factors.py
#  On-demand factor lookup for inspecting a single entry
# -----------------------------------------------------------------------------

from __future__ import annotations

from math import isqrt

from sympy import factorint

from sievelab.utility import InvalidInput


def _check_query(n: object) -> int:
    if isinstance(n, bool) or not isinstance(n, int):
        raise InvalidInput(f"Invalid input: expected an integer, got {n!r}.")
    if n < 1:
        raise InvalidInput(f"Invalid input: n must be at least 1, got {n}.")
    return n


def smallest_divisor(n: int) -> int | None:
    """Smallest d in [2, isqrt(n)] dividing n, or None."""
    for d in range(2, isqrt(n) + 1):
        if n % d == 0:
            return d
    return None


def factors_of(n: int) -> list[int]:
    """
    Factor list shown when inspecting an entry, independent of sieve state.

      1          -> [1]
      prime p    -> [1, p]
      composite  -> sorted {1, d, n/d, n}, d = smallest divisor
    """
    n = _check_query(n)
    if n == 1:
        return [1]
    d = smallest_divisor(n)
    if d is None:
        return [1, n]
    return sorted({1, d, n // d, n})


def prime_factorization(n: int) -> dict[int, int]:
    """Full {p: e} factorization (empty for 1)."""
    n = _check_query(n)
    return {int(p): int(e) for p, e in factorint(n).items()}
