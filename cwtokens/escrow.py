"""Escrow records, the messages that create them, and escrow errors."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from cwtokens.chain import NANOS_PER_SECOND, Coin, Cw20Coin, Env, addr_validate

_MIN_NAME_BYTES = 3
_MAX_NAME_BYTES = 20


class EscrowError(Exception):
    """Base error of the escrow contract; equal to another of the same type and arguments."""

    message = "Escrow error"

    def __init__(self, *args: object) -> None:
        super().__init__(*args)

    def __str__(self) -> str:
        return self.message

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self.args == other.args

    def __hash__(self) -> int:
        return hash((type(self), self.args))


class Unauthorized(EscrowError):
    message = "Unauthorized"


class NotInWhitelist(EscrowError):
    message = "Only accepts tokens in the cw20_whitelist"


class Expired(EscrowError):
    message = "Escrow is expired"


class EmptyBalance(EscrowError):
    message = "Send some coins to create an escrow"


class AlreadyInUse(EscrowError):
    message = "Escrow id already in use"


class RecipientNotSet(EscrowError):
    message = "Recipient is not set"


@dataclass
class GenericBalance:
    """Native coins and cw20 tokens held together."""

    native: list[Coin] = field(default_factory=list)
    cw20: list[Cw20Coin] = field(default_factory=list)

    def add_tokens(self, balance: Iterable[Coin] | Cw20Coin) -> None:
        """Add native coins or a cw20 amount, merging with what is already held."""
        if isinstance(balance, Cw20Coin):
            existing = next((c for c in self.cw20 if c.address == balance.address), None)
            if existing is None:
                self.cw20.append(Cw20Coin(balance.address, balance.amount))
            else:
                existing.amount += balance.amount
            return
        for token in balance:
            existing = next((c for c in self.native if c.denom == token.denom), None)
            if existing is None:
                self.native.append(Coin(token.amount, token.denom))
            else:
                existing.amount += token.amount


@dataclass
class Escrow:
    """A stored escrow: who may release it, where funds go, and what it holds."""

    arbiter: str
    source: str
    title: str
    description: str
    recipient: str | None = None
    end_height: int | None = None
    end_time: int | None = None
    balance: GenericBalance = field(default_factory=GenericBalance)
    cw20_whitelist: list[str] = field(default_factory=list)

    def is_expired(self, env: Env) -> bool:
        """True once the block is past the end height or the end time (in seconds)."""
        if self.end_height is not None and env.block.height > self.end_height:
            return True
        if self.end_time is not None and env.block.time > self.end_time * NANOS_PER_SECOND:
            return True
        return False

    def human_whitelist(self) -> list[str]:
        return [str(address) for address in self.cw20_whitelist]


@dataclass
class CreateMsg:
    """Request to create a new escrow."""

    id: str
    arbiter: str
    title: str
    description: str
    recipient: str | None = None
    end_height: int | None = None
    end_time: int | None = None
    cw20_whitelist: list[str] | None = None

    def addr_whitelist(self) -> list[str]:
        """Validated addresses of the accepted cw20 tokens."""
        return [addr_validate(address) for address in self.cw20_whitelist or ()]


@dataclass
class DetailsResponse:
    """Public view of an escrow."""

    id: str
    arbiter: str
    recipient: str | None
    source: str
    title: str
    description: str
    end_height: int | None
    end_time: int | None
    native_balance: list[Coin]
    cw20_balance: list[Cw20Coin]
    cw20_whitelist: list[str]


def is_valid_name(name: str) -> bool:
    """An id must be 3 to 20 bytes of UTF-8 text."""
    return _MIN_NAME_BYTES <= len(name.encode("utf-8")) <= _MAX_NAME_BYTES


def all_escrow_ids(escrows: Mapping[str, Escrow]) -> list[str]:
    """All registered escrow ids in ascending order."""
    return sorted(escrows)