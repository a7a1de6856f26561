"""Bonding curves: spot price, reserve integral and its inverse."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import (
    ROUND_DOWN,
    ROUND_FLOOR,
    ROUND_HALF_EVEN,
    Context,
    Decimal,
    DivisionByZero,
    InvalidOperation,
    Overflow,
)
from functools import reduce

# Fixed-point decimals hold a 96-bit mantissa with at most 28 fractional digits.
_MAX_MANTISSA = 2**96 - 1
_MAX_SCALE = 28
_CTX = Context(
    prec=28,
    rounding=ROUND_HALF_EVEN,
    traps=[InvalidOperation, DivisionByZero, Overflow],
)
_STD_PLACES = Decimal(1).scaleb(-18)
_STD_CTX = Context(prec=80)

_SQRT_EXTRA_DIGITS = 12
_CBRT_EXTRA_DIGITS = 9


def decimal(num: int, scale: int) -> Decimal:
    """Return ``num * 10 ** -scale`` as an exact decimal."""
    if abs(num) > _MAX_MANTISSA:
        raise ValueError(f"{num} does not fit in a 96-bit decimal mantissa")
    if not 0 <= scale <= _MAX_SCALE:
        raise ValueError(f"scale {scale} out of range 0..{_MAX_SCALE}")
    return Decimal(f"{num}E-{scale}")


def _mul(*values: Decimal) -> Decimal:
    return reduce(_CTX.multiply, values)


def _div(numerator: Decimal, denominator: Decimal) -> Decimal:
    return _CTX.divide(numerator, denominator)


def _floor_uint(value: Decimal) -> int:
    if value < 0:
        raise ValueError(f"{value} cannot be represented as an unsigned integer")
    return int(value.to_integral_value(rounding=ROUND_FLOOR))


def _to_std(value: Decimal) -> Decimal:
    """Reduce to the 18 fractional digits of an on-chain decimal."""
    return value.quantize(_STD_PLACES, rounding=ROUND_DOWN, context=_STD_CTX)


def _integer_cbrt(n: int) -> int:
    if n < 0:
        raise ValueError("cube root of a negative number")
    if n == 0:
        return 0
    x = 1 << ((n.bit_length() + 2) // 3)
    while True:
        y = (2 * x + n // (x * x)) // 3
        if y >= x:
            return x
        x = y


def _square_root(square: Decimal) -> Decimal:
    extended = _floor_uint(_mul(square, decimal(10**_SQRT_EXTRA_DIGITS, 0)))
    return decimal(math.isqrt(extended), _SQRT_EXTRA_DIGITS // 2)


def _cube_root(cube: Decimal) -> Decimal:
    extended = _floor_uint(_mul(cube, decimal(10**_CBRT_EXTRA_DIGITS, 0)))
    return decimal(_integer_cbrt(extended), _CBRT_EXTRA_DIGITS // 3)


@dataclass(frozen=True)
class DecimalPlaces:
    """Decimal places of the supply token and of the reserve token."""

    supply: int = 0
    reserve: int = 0

    def from_supply(self, supply: int) -> Decimal:
        return decimal(supply, self.supply)

    def from_reserve(self, reserve: int) -> Decimal:
        return decimal(reserve, self.reserve)

    def to_supply(self, supply: Decimal) -> int:
        return _floor_uint(_mul(supply, decimal(10**self.supply, 0)))

    def to_reserve(self, reserve: Decimal) -> int:
        return _floor_uint(_mul(reserve, decimal(10**self.reserve, 0)))


class Curve(ABC):
    """A bonding curve relating token supply to the reserve paid for it."""

    @abstractmethod
    def spot_price(self, supply: int) -> Decimal:
        """Price of the next token at the given supply."""

    @abstractmethod
    def reserve(self, supply: int) -> int:
        """Total reserve paid to reach the given supply."""

    @abstractmethod
    def supply(self, reserve: int) -> int:
        """Supply issued for a total paid reserve; inverse of ``reserve``."""


@dataclass(frozen=True)
class Constant(Curve):
    """Spot price is always ``value``."""

    value: Decimal
    normalize: DecimalPlaces

    def spot_price(self, supply: int) -> Decimal:
        return _to_std(self.value)

    def reserve(self, supply: int) -> int:
        return self.normalize.to_reserve(_mul(self.normalize.from_supply(supply), self.value))

    def supply(self, reserve: int) -> int:
        return self.normalize.to_supply(_div(self.normalize.from_reserve(reserve), self.value))


@dataclass(frozen=True)
class Linear(Curve):
    """Spot price is ``slope * supply``."""

    slope: Decimal
    normalize: DecimalPlaces

    def spot_price(self, supply: int) -> Decimal:
        return _to_std(_mul(self.normalize.from_supply(supply), self.slope))

    def reserve(self, supply: int) -> int:
        normalized = self.normalize.from_supply(supply)
        square = _mul(normalized, normalized)
        return self.normalize.to_reserve(_mul(square, self.slope, decimal(5, 1)))

    def supply(self, reserve: int) -> int:
        square = _div(self.normalize.from_reserve(reserve + reserve), self.slope)
        return self.normalize.to_supply(_square_root(square))


@dataclass(frozen=True)
class SquareRoot(Curve):
    """Spot price is ``slope * supply ** 0.5``."""

    slope: Decimal
    normalize: DecimalPlaces

    def spot_price(self, supply: int) -> Decimal:
        root = _square_root(self.normalize.from_supply(supply))
        return _to_std(_mul(root, self.slope))

    def reserve(self, supply: int) -> int:
        normalized = self.normalize.from_supply(supply)
        root = _square_root(normalized)
        total = _div(_mul(self.slope, normalized, root), decimal(15, 1))
        return self.normalize.to_reserve(total)

    def supply(self, reserve: int) -> int:
        base = _div(_mul(self.normalize.from_reserve(reserve), decimal(15, 1)), self.slope)
        return self.normalize.to_supply(_cube_root(_mul(base, base)))