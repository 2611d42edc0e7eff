"""Integer accumulator driven by the calculator scenarios.

A Calculator holds one value. set_value() seeds it, add()/subtract() move it
and return the new value. Nothing here raises: overflow handling is an
explicit IntegerPolicy chosen when the calculator is built.
"""

from __future__ import annotations

from enum import Enum


class IntegerPolicy(str, Enum):
    """How stored values behave at the edge of the integer range."""

    UNBOUNDED = "unbounded"
    WRAP32 = "wrap32"


_INT32_SPAN = 1 << 32
_INT32_MIN = -(1 << 31)


def _wrap32(n: int) -> int:
    """Two's complement wraparound into the signed 32-bit range."""
    return (n - _INT32_MIN) % _INT32_SPAN + _INT32_MIN


class Calculator:
    """Single-value calculator. One instance per scenario."""

    def __init__(self, value: int = 0, policy: IntegerPolicy = IntegerPolicy.UNBOUNDED) -> None:
        self.policy = IntegerPolicy(policy)
        self._value = 0
        self.set_value(value)

    @property
    def value(self) -> int:
        return self._value

    @value.setter
    def value(self, n: int) -> None:
        self.set_value(n)

    def _store(self, n: int) -> int:
        if self.policy is IntegerPolicy.WRAP32:
            n = _wrap32(n)
        self._value = n
        return n

    def set_value(self, n: int) -> None:
        self._store(n)

    def add(self, n: int) -> int:
        return self._store(self._value + n)

    def subtract(self, n: int) -> int:
        return self._store(self._value - n)

    def __repr__(self) -> str:
        return f"Calculator(value={self._value}, policy={self.policy.value!r})"
