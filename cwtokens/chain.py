"""Blockchain primitives shared by the contracts: blocks, funds, messages and errors."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

NANOS_PER_SECOND = 1_000_000_000

_MIN_ADDRESS_LENGTH = 3
_MAX_ADDRESS_LENGTH = 54


@dataclass
class BlockInfo:
    """The block a message is executed in; ``time`` is in nanoseconds since the epoch."""

    height: int
    time: int
    chain_id: str = ""


@dataclass
class Env:
    """Execution environment: the current block and the contract's own address."""

    block: BlockInfo
    contract_address: str


@dataclass
class Coin:
    """An amount of a native token."""

    amount: int
    denom: str


@dataclass
class Cw20Coin:
    """An amount of a cw20 token, identified by its contract address."""

    address: str
    amount: int


@dataclass
class MessageInfo:
    """Who sent a message and which native funds came with it."""

    sender: str
    funds: list[Coin] = field(default_factory=list)


def _format_timestamp(nanos: int) -> str:
    seconds, rest = divmod(nanos, NANOS_PER_SECOND)
    return f"{seconds}.{rest:09d}"


@dataclass(frozen=True)
class Expiration:
    """A point after which something is no longer valid."""

    kind: Literal["at_height", "at_time", "never"] = "never"
    value: int | None = None

    @classmethod
    def at_height(cls, height: int) -> Expiration:
        return cls("at_height", height)

    @classmethod
    def at_time(cls, seconds: int) -> Expiration:
        return cls("at_time", seconds * NANOS_PER_SECOND)

    @classmethod
    def never(cls) -> Expiration:
        return cls("never", None)

    def is_expired(self, block: BlockInfo) -> bool:
        """True once the block has reached the expiration point."""
        if self.kind == "at_height":
            return block.height >= self.value
        if self.kind == "at_time":
            return block.time >= self.value
        return False

    def __str__(self) -> str:
        if self.kind == "at_height":
            return f"expiration height: {self.value}"
        if self.kind == "at_time":
            return f"expiration time: {_format_timestamp(self.value)}"
        return "expiration: never"


@dataclass(frozen=True)
class Scheduled:
    """A point from which something becomes active."""

    kind: Literal["at_height", "at_time"]
    value: int

    @classmethod
    def at_height(cls, height: int) -> Scheduled:
        return cls("at_height", height)

    @classmethod
    def at_time(cls, seconds: int) -> Scheduled:
        return cls("at_time", seconds * NANOS_PER_SECOND)

    def is_triggered(self, block: BlockInfo) -> bool:
        """True once the block has reached the scheduled point."""
        if self.kind == "at_height":
            return block.height >= self.value
        return block.time >= self.value

    def __str__(self) -> str:
        if self.kind == "at_height":
            return f"scheduled height: {self.value}"
        return f"scheduled time: {_format_timestamp(self.value)}"


@dataclass
class BankSend:
    """Send native coins to an address."""

    to_address: str
    amount: list[Coin]


@dataclass
class WasmExecute:
    """Execute a message on another contract."""

    contract_addr: str
    msg: dict[str, Any]
    funds: list[Coin] = field(default_factory=list)


@dataclass
class Response:
    """Outcome of an executed message: messages to dispatch and event attributes."""

    messages: list[Any] = field(default_factory=list)
    attributes: list[tuple[str, str]] = field(default_factory=list)

    def add_attribute(self, key: str, value: Any) -> Response:
        self.attributes.append((key, str(value)))
        return self

    def add_message(self, message: Any) -> Response:
        self.messages.append(message)
        return self


class StdError(Exception):
    """Standard contract error; equal to another of the same type and arguments."""

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self.args == other.args

    def __hash__(self) -> int:
        return hash((type(self), self.args))


class OverflowError(StdError):  # noqa: A001 - mirrors the chain's error name
    """Integer arithmetic left the range of unsigned 128-bit values."""

    def __init__(self, operation: str, operand1: int, operand2: int) -> None:
        super().__init__(operation, operand1, operand2)
        self.operation = operation
        self.operand1 = operand1
        self.operand2 = operand2

    def __str__(self) -> str:
        return f"Cannot {self.operation} with {self.operand1} and {self.operand2}"


class NotFoundError(StdError):
    """A stored item was looked up but does not exist."""

    def __init__(self, kind: str) -> None:
        super().__init__(kind)
        self.kind = kind

    def __str__(self) -> str:
        return f"{self.kind} not found"


class PaymentError(Exception):
    """The funds sent with a message do not match what it requires."""

    def __init__(self, message: str, denom: str | None = None) -> None:
        super().__init__(message, denom)
        self.message = message
        self.denom = denom

    def __str__(self) -> str:
        return self.message

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self.args == other.args

    def __hash__(self) -> int:
        return hash((type(self), self.args))

    @classmethod
    def no_funds(cls) -> PaymentError:
        return cls("No funds sent")

    @classmethod
    def missing_denom(cls, denom: str) -> PaymentError:
        return cls(f"Must send '{denom}'", denom)

    @classmethod
    def extra_denom(cls, denom: str) -> PaymentError:
        return cls(f"Received unsupported denom '{denom}'", denom)

    @classmethod
    def multiple_denoms(cls) -> PaymentError:
        return cls("Sent more than one denomination")

    @classmethod
    def non_payable(cls) -> PaymentError:
        return cls("This message does no accept funds")


def addr_validate(address: str) -> str:
    """Check that an address is well formed and normalized, and return it."""
    if len(address) < _MIN_ADDRESS_LENGTH:
        raise StdError("Invalid input: human address too short")
    if len(address) > _MAX_ADDRESS_LENGTH:
        raise StdError("Invalid input: human address too long")
    if address != address.lower():
        raise StdError("Invalid input: address not normalized")
    return address


def coins(amount: int, denom: str) -> list[Coin]:
    """A list holding a single coin."""
    return [Coin(amount, denom)]


def mock_env() -> Env:
    """A fresh environment as used in tests of contracts."""
    return Env(
        block=BlockInfo(
            height=12_345,
            time=1_571_797_419_879_305_533,
            chain_id="cosmos-testnet-14002",
        ),
        contract_address="cosmos2contract",
    )


def mock_info(sender: str, funds: list[Coin] | tuple[Coin, ...] = ()) -> MessageInfo:
    """Message info for the given sender and funds."""
    return MessageInfo(sender=sender, funds=list(funds))


def must_pay(info: MessageInfo, denom: str) -> int:
    """Return the amount paid, requiring exactly one coin of the given denom."""
    if not info.funds:
        raise PaymentError.no_funds()
    if len(info.funds) > 1:
        raise PaymentError.multiple_denoms()
    (coin,) = info.funds
    if coin.amount == 0:
        raise PaymentError.no_funds()
    if coin.denom != denom:
        raise PaymentError.missing_denom(denom)
    return coin.amount


def nonpayable(info: MessageInfo) -> None:
    """Reject a message that carries any funds."""
    if info.funds:
        raise PaymentError.non_payable()