"""Checked integer arithmetic for reserves, fees and amounts.

Reserves on NEAR exchanges are u128 values and liquidity scores multiply two
of them, so everything is a plain Python int wrapped in SafeInt. Operations
that would hide a bug (a negative amount, a zero divisor, a score that no
longer fits in 256 bits) raise instead of returning a wrong number.

Most callers only need the two helpers at the bottom:
    net_of_bps(amount, fee_bps)      # amount * (10000 - bps) // 10000
    mul_div(a, b, c)                 # a * b // c, floor
"""

from __future__ import annotations

from refquote.constants import FEE_DIVISOR

UINT256_MAX = (1 << 256) - 1


class SafeIntError(ArithmeticError):
    """Base class for checked arithmetic failures."""


class DivisionByZero(SafeIntError):
    pass


class Underflow(SafeIntError):
    """An amount would go negative."""


class Uint256Overflow(SafeIntError):
    pass


def _raw(x: SafeInt | int) -> int:
    return x.value if isinstance(x, SafeInt) else x


class SafeInt:
    """Non-negative-by-subtraction integer with floor-only division."""

    __slots__ = ("value",)

    def __init__(self, value: SafeInt | int) -> None:
        if isinstance(value, bool) or not isinstance(value, (int, SafeInt)):
            raise TypeError(f"SafeInt needs an int, got {type(value).__name__}")
        self.value = _raw(value)

    def __repr__(self) -> str:
        return f"S({self.value})"

    def __int__(self) -> int:
        return self.value

    def __bool__(self) -> bool:
        return bool(self.value)

    def __hash__(self) -> int:
        return hash(self.value)

    # Arithmetic

    def __add__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self.value + _raw(other))

    __radd__ = __add__

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self.value * _raw(other))

    __rmul__ = __mul__

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        rhs = _raw(other)
        if rhs > self.value:
            raise Underflow(f"{self.value} - {rhs} is negative")
        return SafeInt(self.value - rhs)

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        divisor = _raw(other)
        if divisor == 0:
            raise DivisionByZero(f"{self.value} // 0")
        return SafeInt(self.value // divisor)

    # Comparison

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (SafeInt, int)):
            return self.value == _raw(other)
        return NotImplemented

    def __lt__(self, other: SafeInt | int) -> bool:
        return self.value < _raw(other)

    def __le__(self, other: SafeInt | int) -> bool:
        return self.value <= _raw(other)

    def __gt__(self, other: SafeInt | int) -> bool:
        return self.value > _raw(other)

    def __ge__(self, other: SafeInt | int) -> bool:
        return self.value >= _raw(other)

    # Bounds

    def is_uint256(self) -> bool:
        return 0 <= self.value <= UINT256_MAX

    def to_uint256(self) -> int:
        """Unwrap, requiring the value to fit an unsigned 256-bit word.

        Raises:
            Uint256Overflow: Negative or above 2**256 - 1
        """
        if not self.is_uint256():
            raise Uint256Overflow(f"{self.value} is outside uint256")
        return self.value


S = SafeInt


def mul_div(a: SafeInt | int, b: SafeInt | int, c: SafeInt | int) -> int:
    """a * b // c with exact intermediate precision."""
    return ((S(a) * b) // c).value


def net_of_bps(amount: SafeInt | int, bps: int) -> int:
    """Amount left after removing bps basis points, rounded down."""
    return mul_div(amount, FEE_DIVISOR - bps, FEE_DIVISOR)


__all__ = [
    "DivisionByZero",
    "S",
    "SafeInt",
    "SafeIntError",
    "UINT256_MAX",
    "Uint256Overflow",
    "Underflow",
    "mul_div",
    "net_of_bps",
]
