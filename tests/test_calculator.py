"""Tests for the Calculator accumulator.

Covers the seed/add/subtract contract, the identity property, sequential
composition, the concrete calculator scenarios, and both integer policies.
"""

import pytest

from stepcalc.calculator import Calculator, IntegerPolicy

INT32_MAX = 2**31 - 1
INT32_MIN = -(2**31)


@pytest.fixture
def calc():
    """A fresh calculator for every test."""
    return Calculator()


# --- Seeding ---

def test_starts_at_zero(calc):
    assert calc.value == 0


def test_starting_value(calc):
    assert Calculator(7).value == 7


def test_set_value_returns_none(calc):
    assert calc.set_value(12) is None
    assert calc.value == 12


def test_value_attribute_is_settable(calc):
    calc.value = -3
    assert calc.value == -3


# --- Add / subtract ---

@pytest.mark.parametrize("a, b", [(0, 0), (3, 4), (-8, 5), (100, -250), (10**30, 1)])
def test_add(calc, a, b):
    calc.set_value(a)
    assert calc.add(b) == a + b
    assert calc.value == a + b


@pytest.mark.parametrize("a, b", [(0, 0), (3, 4), (-8, 5), (100, -250), (-(10**30), 1)])
def test_subtract(calc, a, b):
    calc.set_value(a)
    assert calc.subtract(b) == a - b
    assert calc.value == a - b


def test_sequential_composition(calc):
    calc.set_value(7)
    calc.add(11)
    assert calc.subtract(20) == 7 + 11 - 20


@pytest.mark.parametrize("start", [0, 1, -1, 999])
def test_zero_is_identity(calc, start):
    calc.set_value(start)
    assert calc.add(0) == start
    assert calc.subtract(0) == start


def test_operations_accumulate(calc):
    """Each operation starts from the previous result, not the seed."""
    calc.set_value(1)
    calc.add(1)
    calc.add(1)
    assert calc.value == 3


# --- Concrete scenarios ---

@pytest.mark.parametrize("seed, op, n, expected", [
    (50, "add", 70, 120),
    (10, "add", 50, 60),
    (20, "subtract", 15, 5),
    (0, "add", -5, -5),
])
def test_concrete_scenarios(calc, seed, op, n, expected):
    calc.set_value(seed)
    assert getattr(calc, op)(n) == expected


# --- Integer policy ---

def test_unbounded_never_wraps(calc):
    calc.set_value(INT32_MAX)
    assert calc.add(1) == INT32_MAX + 1


def test_wrap32_overflow():
    calc = Calculator(INT32_MAX, policy=IntegerPolicy.WRAP32)
    assert calc.add(1) == INT32_MIN


def test_wrap32_underflow():
    calc = Calculator(INT32_MIN, policy=IntegerPolicy.WRAP32)
    assert calc.subtract(1) == INT32_MAX


def test_wrap32_applies_to_seed():
    calc = Calculator(policy="wrap32")
    calc.set_value(2**32 + 5)
    assert calc.value == 5


def test_wrap32_in_range_matches_unbounded():
    calc = Calculator(policy=IntegerPolicy.WRAP32)
    calc.set_value(20)
    assert calc.subtract(15) == 5


def test_invalid_policy():
    with pytest.raises(ValueError):
        Calculator(policy="saturate")
