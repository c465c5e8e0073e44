# -----------------------------------------------------------------------------
#  engine.py
#  Stepwise Sieve of Eratosthenes: one discrete action per step()
# -----------------------------------------------------------------------------

from __future__ import annotations

from dataclasses import dataclass

from sievelab.factors import factors_of
from sievelab.families import classify
from sievelab.runtime import CFG, debug_line
from sievelab.stats import Stats, summarize
from sievelab.table import COMPOSITE, PRIME, UNMARKED, NumberTable
from sievelab.utility import check_bound


@dataclass(frozen=True)
class Cursor:
    current_prime: int = 2
    current_multiple: int = 0   # 0 = multiples of current_prime not started yet
    complete: bool = False


class SieveEngine:
    """
    Owns a NumberTable and its cursor and advances them one step at a time.

    Each step does one of:
      * mark current_prime as prime and start at its double,
      * mark current_multiple as composite and move to the next multiple,
      * move on to the next unmarked value, or finish the sieve when none
        is left (remaining unmarked values become prime, families tagged).

    Not safe for concurrent use; callers serialize step()/reset().
    """

    def __init__(self, n: int | None = None, *, one_is_prime: bool | None = None):
        if n is None:
            n = int(CFG("SIEVE.DEFAULT_BOUND", 100))
        if one_is_prime is None:
            one_is_prime = bool(CFG("SIEVE.ONE_IS_PRIME", False))
        self.one_is_prime = one_is_prime
        self.reset(n)

    # --- lifecycle ---

    def reset(self, n: int | None = None) -> None:
        """Discard all progress and start over with bound n (default: current n)."""
        n = check_bound(self._n if n is None else n)
        self._n = n
        self._table = NumberTable.fresh(n, one_is_prime=self.one_is_prime)
        self._current_prime = 2
        self._current_multiple = 0
        self._complete = False
        self._steps = 0

    def step(self) -> bool:
        """Advance by one action. Returns False (and does nothing) once complete."""
        check_bound(self._n)
        if self._complete:
            return False

        p, m, n = self._current_prime, self._current_multiple, self._n
        if m == 0 and p <= n:
            self._table._mark(p, PRIME)
            self._current_multiple = 2 * p
        elif 0 < m <= n:
            self._table._mark(m, COMPOSITE)
            self._current_multiple = m + p
        else:
            nxt = self._table.next_unmarked(p)
            if nxt is not None:
                self._current_prime = nxt
                self._current_multiple = 0
            else:
                self._finish()
        self._steps += 1
        return True

    def run_to_completion(self) -> int:
        """Step until complete; returns the number of steps taken here."""
        taken = 0
        while self.step():
            taken += 1
        return taken

    def _finish(self) -> None:
        # no smaller factor was found for anything still unmarked
        for e in self._table:
            if e.state == UNMARKED:
                self._table._mark(e.value, PRIME)
        self._table = classify(self._table)
        self._complete = True
        debug_line(
            f"sieve complete: N={self._n}, steps={self._steps + 1}, "
            f"primes={self._table.count_state(PRIME)}"
        )

    # --- read-only views ---

    @property
    def n(self) -> int:
        return self._n

    @property
    def steps(self) -> int:
        """Steps taken since the last reset()."""
        return self._steps

    @property
    def complete(self) -> bool:
        return self._complete

    def get_table(self) -> NumberTable:
        return self._table

    def get_cursor(self) -> Cursor:
        return Cursor(self._current_prime, self._current_multiple, self._complete)

    def summarize(self, *, hold_over: bool | None = None) -> Stats:
        return summarize(self._table, self.get_cursor(), hold_over=hold_over)

    @staticmethod
    def factors_of(n: int) -> list[int]:
        return factors_of(n)

    def __repr__(self) -> str:
        c = self.get_cursor()
        return (f"SieveEngine(n={self._n}, current_prime={c.current_prime}, "
                f"current_multiple={c.current_multiple}, complete={c.complete}, steps={self._steps})")
