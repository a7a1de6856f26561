"""Fungible token ledger: balances, supply, minting, sending and allowances."""

from __future__ import annotations

import base64
from dataclasses import dataclass, field, replace

from cwtokens.chain import (
    BlockInfo,
    Expiration,
    OverflowError,
    Response,
    WasmExecute,
    addr_validate,
)

UINT128_MAX = 2**128 - 1


class TokenError(Exception):
    """Base error of the token ledger; equal to another of the same type and arguments."""

    message = "Token error"

    def __str__(self) -> str:
        return self.message

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self.args == other.args

    def __hash__(self) -> int:
        return hash((type(self), self.args))


class TokenUnauthorized(TokenError):
    message = "Unauthorized"


class InvalidZeroAmount(TokenError):
    message = "Invalid zero amount"


class CannotSetOwnAccount(TokenError):
    message = "Cannot set to own account"


class CannotExceedCap(TokenError):
    message = "Minting cannot exceed the cap"


class AllowanceExpired(TokenError):
    message = "Allowance is expired"


class NoAllowance(TokenError):
    message = "No allowance for this account"


class InvalidExpiration(TokenError):
    message = "Invalid expiration value"


def _checked_add(left: int, right: int) -> int:
    total = left + right
    if total > UINT128_MAX:
        raise OverflowError("Add", left, right)
    return total


def _checked_sub(left: int, right: int) -> int:
    if right > left:
        raise OverflowError("Sub", left, right)
    return left - right


def _require_nonzero(amount: int) -> None:
    if amount == 0:
        raise InvalidZeroAmount()


@dataclass
class TokenInfo:
    """Token metadata, total supply and who may mint."""

    name: str
    symbol: str
    decimals: int
    total_supply: int = 0
    minter: str | None = None
    cap: int | None = None


@dataclass
class Allowance:
    """How much a spender may still take from an owner, and until when."""

    allowance: int = 0
    expires: Expiration = field(default_factory=Expiration.never)


class Cw20Ledger:
    """Balances and allowances of one fungible token."""

    def __init__(self, info: TokenInfo) -> None:
        self.info = info
        self._balances: dict[str, int] = {}
        self._allowances: dict[tuple[str, str], Allowance] = {}

    def _credit(self, address: str, amount: int) -> int:
        return _checked_add(self._balances.get(address, 0), amount)

    def _debit(self, address: str, amount: int) -> int:
        return _checked_sub(self._balances.get(address, 0), amount)

    def _move(self, sender: str, recipient: str, amount: int) -> None:
        sender_balance = self._debit(sender, amount)
        self._balances[sender] = sender_balance
        self._balances[recipient] = self._credit(recipient, amount)

    def _check_move(self, sender: str, recipient: str, amount: int) -> None:
        self._debit(sender, amount)
        if sender != recipient:
            self._credit(recipient, amount)

    def _receive_message(self, contract: str, sender: str, amount: int, msg: bytes) -> WasmExecute:
        return WasmExecute(
            contract_addr=contract,
            msg={
                "receive": {
                    "sender": sender,
                    "amount": str(amount),
                    "msg": base64.b64encode(msg).decode("ascii"),
                }
            },
        )

    def mint(self, sender: str, recipient: str, amount: int) -> Response:
        """Create new tokens for the recipient; only the minter may do this."""
        _require_nonzero(amount)
        if self.info.minter is None or sender != self.info.minter:
            raise TokenUnauthorized()
        new_supply = _checked_add(self.info.total_supply, amount)
        if self.info.cap is not None and new_supply > self.info.cap:
            raise CannotExceedCap()
        recipient = addr_validate(recipient)
        self._balances[recipient] = self._credit(recipient, amount)
        self.info.total_supply = new_supply
        return (
            Response()
            .add_attribute("action", "mint")
            .add_attribute("to", recipient)
            .add_attribute("amount", amount)
        )

    def burn(self, sender: str, amount: int) -> Response:
        """Destroy tokens of the sender, lowering the total supply."""
        _require_nonzero(amount)
        new_balance = self._debit(sender, amount)
        new_supply = _checked_sub(self.info.total_supply, amount)
        self._balances[sender] = new_balance
        self.info.total_supply = new_supply
        return (
            Response()
            .add_attribute("action", "burn")
            .add_attribute("from", sender)
            .add_attribute("amount", amount)
        )

    def transfer(self, sender: str, recipient: str, amount: int) -> Response:
        """Move tokens from the sender to the recipient."""
        _require_nonzero(amount)
        recipient = addr_validate(recipient)
        self._check_move(sender, recipient, amount)
        self._move(sender, recipient, amount)
        return (
            Response()
            .add_attribute("action", "transfer")
            .add_attribute("from", sender)
            .add_attribute("to", recipient)
            .add_attribute("amount", amount)
        )

    def send(self, sender: str, contract: str, amount: int, msg: bytes) -> Response:
        """Move tokens to a contract and notify it with a receive message."""
        _require_nonzero(amount)
        contract = addr_validate(contract)
        self._check_move(sender, contract, amount)
        self._move(sender, contract, amount)
        return (
            Response()
            .add_attribute("action", "send")
            .add_attribute("from", sender)
            .add_attribute("to", contract)
            .add_attribute("amount", amount)
            .add_message(self._receive_message(contract, sender, amount, msg))
        )

    def _check_allowance_change(
        self, block: BlockInfo, owner: str, spender: str, expires: Expiration | None
    ) -> str:
        spender = addr_validate(spender)
        if spender == owner:
            raise CannotSetOwnAccount()
        if expires is not None and expires.is_expired(block):
            raise InvalidExpiration()
        return spender

    def increase_allowance(
        self,
        block: BlockInfo,
        owner: str,
        spender: str,
        amount: int,
        expires: Expiration | None = None,
    ) -> Response:
        """Let the spender take more of the owner's tokens; ``expires`` replaces the old one."""
        spender = self._check_allowance_change(block, owner, spender, expires)
        current = self._allowances.get((owner, spender), Allowance())
        self._allowances[(owner, spender)] = Allowance(
            _checked_add(current.allowance, amount),
            current.expires if expires is None else expires,
        )
        return (
            Response()
            .add_attribute("action", "increase_allowance")
            .add_attribute("owner", owner)
            .add_attribute("spender", spender)
            .add_attribute("amount", amount)
        )

    def decrease_allowance(
        self,
        block: BlockInfo,
        owner: str,
        spender: str,
        amount: int,
        expires: Expiration | None = None,
    ) -> Response:
        """Lower the spender's allowance, removing it when it would reach zero."""
        spender = self._check_allowance_change(block, owner, spender, expires)
        key = (owner, spender)
        current = self._allowances.get(key)
        if current is None:
            raise NoAllowance()
        if amount < current.allowance:
            self._allowances[key] = Allowance(
                current.allowance - amount,
                current.expires if expires is None else expires,
            )
        else:
            del self._allowances[key]
        return (
            Response()
            .add_attribute("action", "decrease_allowance")
            .add_attribute("owner", owner)
            .add_attribute("spender", spender)
            .add_attribute("amount", amount)
        )

    def _deducted(self, block: BlockInfo, owner: str, spender: str, amount: int) -> Allowance:
        current = self._allowances.get((owner, spender))
        if current is None:
            raise NoAllowance()
        if current.expires.is_expired(block):
            raise AllowanceExpired()
        return Allowance(_checked_sub(current.allowance, amount), current.expires)

    def deduct_allowance(self, block: BlockInfo, owner: str, spender: str, amount: int) -> Allowance:
        """Use up part of an unexpired allowance and return what remains."""
        remaining = self._deducted(block, owner, spender, amount)
        self._allowances[(owner, spender)] = remaining
        return replace(remaining)

    def transfer_from(
        self, block: BlockInfo, spender: str, owner: str, recipient: str, amount: int
    ) -> Response:
        """Move the owner's tokens to the recipient, drawing on the spender's allowance."""
        recipient = addr_validate(recipient)
        owner = addr_validate(owner)
        remaining = self._deducted(block, owner, spender, amount)
        self._check_move(owner, recipient, amount)
        self._allowances[(owner, spender)] = remaining
        self._move(owner, recipient, amount)
        return (
            Response()
            .add_attribute("action", "transfer_from")
            .add_attribute("from", owner)
            .add_attribute("to", recipient)
            .add_attribute("by", spender)
            .add_attribute("amount", amount)
        )

    def send_from(
        self,
        block: BlockInfo,
        spender: str,
        owner: str,
        contract: str,
        amount: int,
        msg: bytes,
    ) -> Response:
        """Send the owner's tokens to a contract, drawing on the spender's allowance."""
        contract = addr_validate(contract)
        owner = addr_validate(owner)
        remaining = self._deducted(block, owner, spender, amount)
        self._check_move(owner, contract, amount)
        self._allowances[(owner, spender)] = remaining
        self._move(owner, contract, amount)
        return (
            Response()
            .add_attribute("action", "send_from")
            .add_attribute("from", owner)
            .add_attribute("to", contract)
            .add_attribute("by", spender)
            .add_attribute("amount", amount)
            .add_message(self._receive_message(contract, spender, amount, msg))
        )

    def balance(self, address: str) -> int:
        """Balance of an address, zero if it never held tokens."""
        return self._balances.get(addr_validate(address), 0)

    def allowance(self, owner: str, spender: str) -> Allowance:
        """Current allowance of the spender over the owner's tokens."""
        owner = addr_validate(owner)
        spender = addr_validate(spender)
        return replace(self._allowances.get((owner, spender), Allowance()))