"""Bonding contract settings and state: curve parameters, messages and errors."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from cwtokens.curves import Constant, Curve, DecimalPlaces, Linear, SquareRoot, decimal

CurveFn = Callable[[DecimalPlaces], Curve]


class CurveKind(str, Enum):
    """The shape of a bonding curve."""

    CONSTANT = "constant"
    LINEAR = "linear"
    SQUARE_ROOT = "square_root"


_CURVE_CLASSES: dict[CurveKind, type] = {
    CurveKind.CONSTANT: Constant,
    CurveKind.LINEAR: Linear,
    CurveKind.SQUARE_ROOT: SquareRoot,
}


@dataclass(frozen=True)
class CurveType:
    """Curve parameters as stored by the contract.

    ``value`` is the constant price for a constant curve and the slope for the
    others; the effective parameter is ``value * 10 ** -scale``.
    """

    kind: CurveKind
    value: int
    scale: int

    def to_curve_fn(self) -> CurveFn:
        """A function building the curve for the given decimal places."""
        parameter = decimal(self.value, self.scale)
        curve_class = _CURVE_CLASSES[CurveKind(self.kind)]

        def build(places: DecimalPlaces) -> Curve:
            return curve_class(parameter, places)

        return build


@dataclass
class InstantiateMsg:
    """Settings of a new bonding contract and its supply token."""

    name: str
    symbol: str
    decimals: int
    reserve_denom: str
    reserve_decimals: int
    curve_type: CurveType


@dataclass
class CurveState:
    """Current reserve and supply of the curve, with the reserve denom."""

    reserve_denom: str
    decimals: DecimalPlaces
    reserve: int = 0
    supply: int = 0


@dataclass
class CurveInfoResponse:
    """Public view of the curve state with the current spot price."""

    reserve: int
    supply: int
    spot_price: Decimal
    reserve_denom: str


class BondingError(Exception):
    """Base error of the bonding contract; equal to another of the same type and arguments."""

    message = "Bonding error"

    def __str__(self) -> str:
        return self.message

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self.args == other.args

    def __hash__(self) -> int:
        return hash((type(self), self.args))


class Unauthorized(BondingError):
    message = "Unauthorized"