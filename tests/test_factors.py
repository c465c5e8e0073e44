# tests/test_factors.py
from __future__ import annotations

import pytest
from sympy import isprime

from sievelab.engine import SieveEngine
from sievelab.factors import factors_of, prime_factorization
from sievelab.utility import InvalidInput

TEST_CASES = [
    (1, [1]),
    (2, [1, 2]),
    (4, [1, 2, 4]),
    (9, [1, 3, 9]),
    (12, [1, 2, 6, 12]),
    (13, [1, 13]),
    (15, [1, 3, 5, 15]),
    (49, [1, 7, 49]),
    (91, [1, 7, 13, 91]),
    (97, [1, 97]),
    (100, [1, 2, 50, 100]),
]


@pytest.mark.parametrize("n,expected", TEST_CASES, ids=[str(n) for n, _ in TEST_CASES])
def test_factors_of(n, expected):
    assert factors_of(n) == expected


def test_prime_iff_two_factors():
    for n in range(2, 300):
        f = factors_of(n)
        assert f[0] == 1 and f[-1] == n
        assert (f == [1, n]) == isprime(n), n
        assert f == sorted(set(f))


@pytest.mark.parametrize("bad", [0, -1, -12, 2.0, "12", False])
def test_invalid_input(bad):
    with pytest.raises(InvalidInput):
        factors_of(bad)


def test_engine_exposes_factors_independent_of_progress():
    eng = SieveEngine(20)
    assert eng.factors_of(18) == [1, 2, 9, 18]
    eng.run_to_completion()
    assert eng.factors_of(18) == [1, 2, 9, 18]


def test_prime_factorization():
    assert prime_factorization(360) == {2: 3, 3: 2, 5: 1}
    assert prime_factorization(97) == {97: 1}
    assert prime_factorization(1) == {}
    with pytest.raises(InvalidInput):
        prime_factorization(0)
