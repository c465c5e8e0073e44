# -----------------------------------------------------------------------------
#  table.py
#  Per-integer records of the sieve (one Entry per value 1..N)
# -----------------------------------------------------------------------------

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field, replace
from typing import Literal, overload

UNMARKED = "unmarked"
PRIME = "prime"
COMPOSITE = "composite"
UNIT = "unit"  # value 1: neither prime nor composite

State = Literal["unmarked", "prime", "composite", "unit"]

TWIN = "twin"
MERSENNE = "mersenne"
FERMAT = "fermat"
SOPHIE_GERMAIN = "sophie-germain"

# Display order; tags themselves are an unordered set
FAMILY_ORDER: tuple[str, ...] = (TWIN, MERSENNE, FERMAT, SOPHIE_GERMAIN)


@dataclass(frozen=True)
class Entry:
    value: int
    state: State = UNMARKED
    families: frozenset[str] = field(default_factory=frozenset)
    gap: int | None = None        # None unless prime with a previous prime


class NumberTable(Sequence[Entry]):
    """
    Ordered entries for 1..N, index i <-> value i+1.

    Read-only through its public interface; the owning SieveEngine
    mutates it through the underscore methods.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Sequence[Entry]):
        self._entries: list[Entry] = list(entries)
        for i, e in enumerate(self._entries):
            if e.value != i + 1:
                raise ValueError(f"entry at index {i} has value {e.value}, expected {i + 1}")

    @classmethod
    def fresh(cls, n: int, *, one_is_prime: bool = False) -> NumberTable:
        """All values unmarked except 1 (unit, or prime in legacy mode)."""
        entries = [Entry(value=v) for v in range(1, n + 1)]
        if entries:
            entries[0] = Entry(value=1, state=PRIME if one_is_prime else UNIT)
        return cls(entries)

    # --- Sequence protocol ---

    def __len__(self) -> int:
        return len(self._entries)

    @overload
    def __getitem__(self, i: int) -> Entry: ...
    @overload
    def __getitem__(self, i: slice) -> Sequence[Entry]: ...

    def __getitem__(self, i):
        if isinstance(i, slice):
            return tuple(self._entries[i])
        return self._entries[i]

    def __iter__(self) -> Iterator[Entry]:
        return iter(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NumberTable):
            return NotImplemented
        return self._entries == other._entries

    __hash__ = None  # mutable container

    def __repr__(self) -> str:
        return f"NumberTable(n={len(self)}, primes={self.count_state(PRIME)})"

    # --- queries ---

    @property
    def n(self) -> int:
        return len(self._entries)

    def entry(self, value: int) -> Entry:
        """Entry for a 1-based value."""
        if not 1 <= value <= len(self._entries):
            raise IndexError(f"value {value} outside 1..{len(self._entries)}")
        return self._entries[value - 1]

    def primes(self) -> list[int]:
        return [e.value for e in self._entries if e.state == PRIME]

    def count_state(self, state: str) -> int:
        return sum(1 for e in self._entries if e.state == state)

    def next_unmarked(self, after: int) -> int | None:
        """First unmarked value strictly greater than `after`, or None."""
        for i in range(max(after, 0), len(self._entries)):
            if self._entries[i].state == UNMARKED:
                return self._entries[i].value
        return None

    def snapshot(self) -> tuple[Entry, ...]:
        return tuple(self._entries)

    # --- owner-only mutation ---

    def _mark(self, value: int, state: State) -> None:
        e = self._entries[value - 1]
        if e.state not in (UNMARKED, state):
            raise RuntimeError(f"{value} is already {e.state}; cannot mark {state}")
        if e.state != state:
            self._entries[value - 1] = replace(e, state=state)
