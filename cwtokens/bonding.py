"""A token whose supply is bought and sold against a reserve along a bonding curve."""

from __future__ import annotations

import copy
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace

from cwtokens.bonding_state import CurveFn, CurveInfoResponse, CurveState, CurveType, InstantiateMsg
from cwtokens.chain import (
    BankSend,
    Env,
    Expiration,
    MessageInfo,
    NotFoundError,
    OverflowError,
    Response,
    addr_validate,
    coins,
    must_pay,
    nonpayable,
)
from cwtokens.curves import DecimalPlaces
from cwtokens.token import UINT128_MAX, Allowance, Cw20Ledger, TokenInfo


def _checked_add(left: int, right: int) -> int:
    total = left + right
    if total > UINT128_MAX:
        raise OverflowError("Add", left, right)
    return total


def _checked_sub(left: int, right: int) -> int:
    if right > left:
        raise OverflowError("Sub", left, right)
    return left - right


class BondingContract:
    """Issues supply tokens for a native reserve and buys them back along a curve.

    The curve is built from the stored ``CurveType`` unless a custom curve
    function is given, which then takes its place for every calculation.
    Every executed message either succeeds whole or leaves the state untouched.
    """

    def __init__(self, curve_fn: CurveFn | None = None) -> None:
        self._custom_curve_fn = curve_fn
        self._ledger: Cw20Ledger | None = None
        self._state: CurveState | None = None
        self._curve_type: CurveType | None = None

    @property
    def curve_type(self) -> CurveType:
        """The curve parameters stored at instantiation."""
        if self._curve_type is None:
            raise NotFoundError("CurveType")
        return self._curve_type

    def _curve_fn(self) -> CurveFn:
        if self._custom_curve_fn is not None:
            return self._custom_curve_fn
        return self.curve_type.to_curve_fn()

    def _require_state(self) -> CurveState:
        if self._state is None:
            raise NotFoundError("CurveState")
        return self._state

    def _require_ledger(self) -> Cw20Ledger:
        if self._ledger is None:
            raise NotFoundError("TokenInfo")
        return self._ledger

    @contextmanager
    def _atomic(self) -> Iterator[None]:
        saved = copy.deepcopy((self._ledger, self._state))
        try:
            yield
        except BaseException:
            self._ledger, self._state = saved
            raise

    def instantiate(self, env: Env, info: MessageInfo, msg: InstantiateMsg) -> Response:
        """Set up the supply token, with this contract as its only minter, and the curve."""
        nonpayable(info)
        token = TokenInfo(
            name=msg.name,
            symbol=msg.symbol,
            decimals=msg.decimals,
            total_supply=0,
            minter=env.contract_address,
            cap=None,
        )
        self._ledger = Cw20Ledger(token)
        places = DecimalPlaces(msg.decimals, msg.reserve_decimals)
        self._state = CurveState(reserve_denom=msg.reserve_denom, decimals=places)
        self._curve_type = msg.curve_type
        return Response()

    def buy(self, env: Env, info: MessageInfo) -> Response:
        """Mint as many supply tokens as the reserve payment buys."""
        curve_fn = self._curve_fn()
        self._require_ledger()
        state = self._require_state()
        payment = must_pay(info, state.reserve_denom)
        curve = curve_fn(state.decimals)
        reserve = _checked_add(state.reserve, payment)
        new_supply = curve.supply(reserve)
        minted = _checked_sub(new_supply, state.supply)
        with self._atomic():
            self._require_ledger().mint(env.contract_address, info.sender, minted)
            state = self._require_state()
            state.reserve = reserve
            state.supply = new_supply
        return (
            Response()
            .add_attribute("action", "buy")
            .add_attribute("from", info.sender)
            .add_attribute("reserve", payment)
            .add_attribute("supply", minted)
        )

    def _do_sell(self, owner: str, receiver: str, amount: int) -> Response:
        curve_fn = self._curve_fn()
        self._require_ledger().burn(owner, amount)
        state = self._require_state()
        curve = curve_fn(state.decimals)
        supply = _checked_sub(state.supply, amount)
        new_reserve = curve.reserve(supply)
        released = _checked_sub(state.reserve, new_reserve)
        state.supply = supply
        state.reserve = new_reserve
        return (
            Response()
            .add_message(BankSend(to_address=receiver, amount=coins(released, state.reserve_denom)))
            .add_attribute("from", owner)
            .add_attribute("supply", amount)
            .add_attribute("reserve", released)
        )

    def burn(self, env: Env, info: MessageInfo, amount: int) -> Response:
        """Burn the sender's tokens and pay the released reserve back to the sender."""
        nonpayable(info)
        with self._atomic():
            response = self._do_sell(info.sender, info.sender, amount)
        return response.add_attribute("action", "burn")

    def burn_from(self, env: Env, info: MessageInfo, owner: str, amount: int) -> Response:
        """Burn the owner's tokens under an allowance; the sender receives the reserve."""
        nonpayable(info)
        owner = addr_validate(owner)
        with self._atomic():
            self._require_ledger().deduct_allowance(env.block, owner, info.sender, amount)
            response = self._do_sell(owner, info.sender, amount)
        return response.add_attribute("action", "burn_from").add_attribute("by", info.sender)

    def transfer(self, env: Env, info: MessageInfo, recipient: str, amount: int) -> Response:
        with self._atomic():
            return self._require_ledger().transfer(info.sender, recipient, amount)

    def send(self, env: Env, info: MessageInfo, contract: str, amount: int, msg: bytes) -> Response:
        with self._atomic():
            return self._require_ledger().send(info.sender, contract, amount, msg)

    def increase_allowance(
        self,
        env: Env,
        info: MessageInfo,
        spender: str,
        amount: int,
        expires: Expiration | None = None,
    ) -> Response:
        with self._atomic():
            return self._require_ledger().increase_allowance(
                env.block, info.sender, spender, amount, expires
            )

    def decrease_allowance(
        self,
        env: Env,
        info: MessageInfo,
        spender: str,
        amount: int,
        expires: Expiration | None = None,
    ) -> Response:
        with self._atomic():
            return self._require_ledger().decrease_allowance(
                env.block, info.sender, spender, amount, expires
            )

    def transfer_from(
        self, env: Env, info: MessageInfo, owner: str, recipient: str, amount: int
    ) -> Response:
        with self._atomic():
            return self._require_ledger().transfer_from(
                env.block, info.sender, owner, recipient, amount
            )

    def send_from(
        self,
        env: Env,
        info: MessageInfo,
        owner: str,
        contract: str,
        amount: int,
        msg: bytes,
    ) -> Response:
        with self._atomic():
            return self._require_ledger().send_from(
                env.block, info.sender, owner, contract, amount, msg
            )

    def curve_info(self) -> CurveInfoResponse:
        """Reserve, supply and spot price of the curve."""
        curve_fn = self._curve_fn()
        state = self._require_state()
        curve = curve_fn(state.decimals)
        return CurveInfoResponse(
            reserve=state.reserve,
            supply=state.supply,
            spot_price=curve.spot_price(state.supply),
            reserve_denom=state.reserve_denom,
        )

    def token_info(self) -> TokenInfo:
        return replace(self._require_ledger().info)

    def balance(self, address: str) -> int:
        return self._require_ledger().balance(address)

    def allowance(self, owner: str, spender: str) -> Allowance:
        return self._require_ledger().allowance(owner, spender)