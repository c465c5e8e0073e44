# -----------------------------------------------------------------------------
#  families.py
#  Prime family tests and the classifier applied once the sieve completes
# -----------------------------------------------------------------------------

from __future__ import annotations

from collections.abc import Callable, Set
from dataclasses import replace

from sievelab.table import (
    FERMAT,
    MERSENNE,
    PRIME,
    SOPHIE_GERMAIN,
    TWIN,
    UNMARKED,
    NumberTable,
)

"""
Each family test receives a prime p and the complete set of primes the
sieve computed, and returns (ok, detail). Membership is decided against
that set only: a partner outside 1..N does not count.
"""

FamilyTest = Callable[[int, Set[int]], tuple[bool, str | None]]

FAMILIES: dict[str, FamilyTest] = {}


def family(*, tag: str, label: str, description: str = "", oeis: str | None = None):
    """Register a family test under its tag."""
    def deco(fn: FamilyTest) -> FamilyTest:
        fn.tag = tag
        fn.label = label
        fn.description = description
        fn.oeis = oeis
        FAMILIES[tag] = fn
        return fn
    return deco


def _is_power_of_two(n: int) -> bool:
    return n > 0 and (n & (n - 1)) == 0


@family(
    tag=TWIN,
    label="Twin prime",
    description="Pairs of primes that differ by 2 (p, p+2).",
    oeis="A001097",
)
def is_twin(p: int, primes: Set[int]) -> tuple[bool, str | None]:
    """
    Returns (True, details) if p or its partner two away is prime.
    Tagging is symmetric: both members of a pair are twins.
    """
    if p + 2 in primes:
        return True, f"{p} and {p + 2} are twin primes (differ by 2)."
    if p - 2 in primes:
        return True, f"{p - 2} and {p} are twin primes (differ by 2)."
    return False, None


@family(
    tag=MERSENNE,
    label="Mersenne prime",
    description="Primes of the form 2^k - 1.",
    oeis="A000668",
)
def is_mersenne(p: int, primes: Set[int]) -> tuple[bool, str | None]:
    if _is_power_of_two(p + 1):
        k = (p + 1).bit_length() - 1
        return True, f"{p} = 2^{k} - 1."
    return False, None


FERMAT_PRIMES = (3, 5, 17, 257, 65537)  # Only 5 known, F5 through F32 are composite


@family(
    tag=FERMAT,
    label="Fermat prime",
    description="Primes of the form 2^(2^k) + 1.",
    oeis="A019434",
)
def is_fermat(p: int, primes: Set[int]) -> tuple[bool, str | None]:
    if p in FERMAT_PRIMES:
        k = FERMAT_PRIMES.index(p)
        return True, f"{p} = 2^(2^{k}) + 1, one of the 5 known Fermat primes."
    return False, None


@family(
    tag=SOPHIE_GERMAIN,
    label="Sophie Germain prime",
    description="Primes p where 2p+1 is also prime.",
    oeis="A005384",
)
def is_sophie_germain(p: int, primes: Set[int]) -> tuple[bool, str | None]:
    q = 2 * p + 1
    if q in primes:
        return True, f"{p} is prime and 2×{p} + 1 = {q} is also prime."
    return False, None


def classify(table: NumberTable) -> NumberTable:
    """
    Tag every prime with its families and fill in prime gaps.
    Returns a new table; the input is left untouched.
    """
    if any(e.state == UNMARKED for e in table):
        raise ValueError("classify() needs a completed sieve (unmarked entries remain)")

    primes = frozenset(table.primes())
    out = []
    prev: int | None = None
    for e in table:
        if e.state != PRIME:
            out.append(e)
            continue
        tags = frozenset(tag for tag, test in FAMILIES.items() if test(e.value, primes)[0])
        gap = e.value - prev if prev is not None else None
        out.append(replace(e, families=tags, gap=gap))
        prev = e.value
    return NumberTable(out)


def describe_families(value: int, table: NumberTable) -> list[tuple[str, str]]:
    """
    (label, detail) for each family the entry belongs to, in display order.
    Empty before completion or for non-primes.
    """
    e = table.entry(value)
    if not e.families:
        return []
    primes = frozenset(table.primes())
    out: list[tuple[str, str]] = []
    for tag, test in FAMILIES.items():
        if tag in e.families:
            _, detail = test(value, primes)
            out.append((test.label, detail or ""))
    return out
