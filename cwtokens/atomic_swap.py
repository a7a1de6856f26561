"""Hash-locked atomic swaps: stored swaps, their messages and errors."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from cwtokens.chain import BlockInfo, Coin, Cw20Coin, Expiration

_MIN_NAME_BYTES = 3
_MAX_NAME_BYTES = 20


class SwapError(Exception):
    """Base error of the atomic swap contract; equal to another of the same type and arguments."""

    message = "Atomic swap error"

    def __str__(self) -> str:
        return self.message

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self.args == other.args

    def __hash__(self) -> int:
        return hash((type(self), self.args))


class ParseError(SwapError):
    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail

    def __str__(self) -> str:
        return f"Hash parse error: {self.detail}"


class InvalidId(SwapError):
    message = "Invalid atomic swap id"


class InvalidPreimage(SwapError):
    message = "Invalid preimage"


class InvalidHash(SwapError):
    def __init__(self, length: int) -> None:
        super().__init__(length)
        self.length = length

    def __str__(self) -> str:
        return f"Invalid hash ({self.length} chars): must be 64 characters"


class EmptyBalance(SwapError):
    message = "Send some coins to create an atomic swap"


class NotExpired(SwapError):
    message = "Atomic swap not yet expired"


class Expired(SwapError):
    message = "Expired atomic swap"


class AlreadyExists(SwapError):
    message = "Atomic swap already exists"


Balance = list[Coin] | Cw20Coin


@dataclass
class CreateMsg:
    """Request to create a swap; ``hash`` is the hex sha-256 of the preimage."""

    id: str
    hash: str
    recipient: str
    expires: Expiration


@dataclass
class AtomicSwap:
    """A stored swap holding native coins or a cw20 amount."""

    hash: bytes
    recipient: str
    source: str
    expires: Expiration = field(default_factory=Expiration.never)
    balance: Balance = field(default_factory=list)

    def is_expired(self, block: BlockInfo) -> bool:
        return self.expires.is_expired(block)


@dataclass
class DetailsResponse:
    """Public view of a swap."""

    id: str
    hash: str
    recipient: str
    source: str
    expires: Expiration
    balance: Balance


def is_valid_name(name: str) -> bool:
    """An id must be 3 to 20 bytes of UTF-8 text."""
    return _MIN_NAME_BYTES <= len(name.encode("utf-8")) <= _MAX_NAME_BYTES


def all_swap_ids(
    swaps: Mapping[str, AtomicSwap],
    start_after: str | None = None,
    limit: int = 10,
) -> list[str]:
    """Ids of open swaps in ascending order, after ``start_after``, at most ``limit``."""
    ids = (key for key in sorted(swaps) if start_after is None or key > start_after)
    return [key for _, key in zip(range(limit), ids)]