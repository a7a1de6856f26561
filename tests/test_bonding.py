from decimal import Decimal

import pytest

from cwtokens.bonding import BondingContract
from cwtokens.bonding_state import CurveKind, CurveType, InstantiateMsg
from cwtokens.chain import BankSend, Coin, NotFoundError, PaymentError, coins, mock_env, mock_info
from cwtokens.chain import OverflowError as ChainOverflow
from cwtokens.curves import Constant, decimal

DENOM = "satoshi"
CREATOR = "creator"
INVESTOR = "investor"
BUYER = "buyer"


def default_instantiate(decimals, reserve_decimals, curve_type):
    return InstantiateMsg(
        name="Bonded",
        symbol="EPOXY",
        decimals=decimals,
        reserve_denom=DENOM,
        reserve_decimals=reserve_decimals,
        curve_type=curve_type,
    )


def setup_contract(decimals, reserve_decimals, curve_type, curve_fn=None):
    contract = BondingContract(curve_fn)
    msg = default_instantiate(decimals, reserve_decimals, curve_type)
    res = contract.instantiate(mock_env(), mock_info(CREATOR, []), msg)
    assert res.messages == []
    return contract


def linear():
    return CurveType(CurveKind.LINEAR, 1, 1)


def test_proper_instantiation():
    curve_type = CurveType(CurveKind.SQUARE_ROOT, 1, 1)
    contract = setup_contract(2, 8, curve_type)

    token = contract.token_info()
    assert token.name == "Bonded"
    assert token.symbol == "EPOXY"
    assert token.decimals == 2
    assert token.total_supply == 0

    state = contract.curve_info()
    assert state.reserve == 0
    assert state.supply == 0
    assert state.reserve_denom == DENOM
    assert state.spot_price == Decimal(0)

    assert contract.curve_type == curve_type
    assert contract.balance(CREATOR) == 0


def test_instantiate_rejects_funds():
    contract = BondingContract()
    msg = default_instantiate(2, 8, linear())
    with pytest.raises(PaymentError) as err:
        contract.instantiate(mock_env(), mock_info(CREATOR, coins(5, DENOM)), msg)
    assert err.value == PaymentError.non_payable()


def test_buy_issues_tokens():
    contract = setup_contract(2, 8, linear())

    contract.buy(mock_env(), mock_info(INVESTOR, coins(500_000_000, DENOM)))
    assert contract.balance(INVESTOR) == 1000
    assert contract.balance(BUYER) == 0

    contract.transfer(mock_env(), mock_info(INVESTOR, []), BUYER, 1000)
    assert contract.balance(INVESTOR) == 0
    assert contract.balance(BUYER) == 1000

    contract.buy(mock_env(), mock_info(INVESTOR, coins(1_500_000_000, DENOM)))
    assert contract.balance(INVESTOR) == 1000
    assert contract.balance(BUYER) == 1000

    curve = contract.curve_info()
    assert curve.reserve == 2_000_000_000
    assert curve.supply == 2000
    assert curve.spot_price == Decimal("2.00")

    token = contract.token_info()
    assert token.decimals == 2
    assert token.total_supply == 2000


def test_buy_attributes():
    contract = setup_contract(2, 8, linear())
    res = contract.buy(mock_env(), mock_info(INVESTOR, coins(500_000_000, DENOM)))
    assert res.attributes == [
        ("action", "buy"),
        ("from", INVESTOR),
        ("reserve", "500000000"),
        ("supply", "1000"),
    ]


def test_bonding_fails_with_wrong_denom():
    contract = setup_contract(2, 8, linear())

    with pytest.raises(PaymentError) as err:
        contract.buy(mock_env(), mock_info(INVESTOR, []))
    assert err.value == PaymentError.no_funds()

    with pytest.raises(PaymentError) as err:
        contract.buy(mock_env(), mock_info(INVESTOR, coins(1234567, "wei")))
    assert err.value == PaymentError.missing_denom(DENOM)

    with pytest.raises(PaymentError) as err:
        contract.buy(
            mock_env(), mock_info(INVESTOR, [Coin(3400022, DENOM), Coin(1234567, "wei")])
        )
    assert err.value == PaymentError.multiple_denoms()

    assert contract.curve_info().reserve == 0


def test_burning_sends_reserve():
    contract = setup_contract(2, 8, linear())

    contract.buy(mock_env(), mock_info(INVESTOR, coins(2_000_000_000, DENOM)))
    assert contract.balance(INVESTOR) == 2000

    with pytest.raises(ChainOverflow) as err:
        contract.burn(mock_env(), mock_info(INVESTOR, []), 3000)
    assert err.value == ChainOverflow("Sub", 2000, 3000)

    res = contract.burn(mock_env(), mock_info(INVESTOR, []), 1000)
    assert contract.balance(INVESTOR) == 1000
    assert res.messages == [BankSend(to_address=INVESTOR, amount=coins(1_500_000_000, DENOM))]
    assert res.attributes[-1] == ("action", "burn")

    curve = contract.curve_info()
    assert curve.reserve == 500_000_000
    assert curve.supply == 1000
    assert curve.spot_price == Decimal(1)

    token = contract.token_info()
    assert token.decimals == 2
    assert token.total_supply == 1000


def test_burn_rejects_funds():
    contract = setup_contract(2, 8, linear())
    contract.buy(mock_env(), mock_info(INVESTOR, coins(2_000_000_000, DENOM)))
    with pytest.raises(PaymentError):
        contract.burn(mock_env(), mock_info(INVESTOR, coins(1, DENOM)), 1000)
    assert contract.balance(INVESTOR) == 2000


def test_burning_everything_returns_whole_reserve():
    contract = setup_contract(2, 8, linear())
    contract.buy(mock_env(), mock_info(INVESTOR, coins(2_000_000_000, DENOM)))
    held = contract.balance(INVESTOR)
    res = contract.burn(mock_env(), mock_info(INVESTOR, []), held)
    assert res.messages == [BankSend(to_address=INVESTOR, amount=coins(2_000_000_000, DENOM))]
    curve = contract.curve_info()
    assert (curve.reserve, curve.supply) == (0, 0)
    assert contract.token_info().total_supply == 0


def test_cw20_imports_work():
    contract = setup_contract(9, 6, CurveType(CurveKind.CONSTANT, 15, 1))
    alice, bob, carl = "alice", "bobby", "carl"

    contract.buy(mock_env(), mock_info(bob, coins(45_000, DENOM)))
    assert contract.balance(bob) == 30_000_000
    assert contract.balance(carl) == 0

    bob_info = mock_info(bob, [])
    contract.transfer(mock_env(), bob_info, carl, 2_000_000)
    assert contract.balance(bob) == 28_000_000
    assert contract.balance(carl) == 2_000_000

    contract.increase_allowance(mock_env(), bob_info, alice, 35_000_000, None)
    assert contract.balance(bob) == 28_000_000
    assert contract.balance(alice) == 0
    assert contract.allowance(bob, alice).allowance == 35_000_000

    alice_info = mock_info(alice, [])
    contract.transfer_from(mock_env(), alice_info, bob, alice, 25_000_000)
    assert contract.balance(bob) == 3_000_000
    assert contract.balance(alice) == 25_000_000
    assert contract.balance(carl) == 2_000_000
    assert contract.allowance(bob, alice).allowance == 10_000_000

    with pytest.raises(ChainOverflow) as err:
        contract.burn_from(mock_env(), mock_info(alice, []), bob, 3_300_000)
    assert err.value == ChainOverflow("Sub", 3000000, 3300000)
    # a failed burn leaves the allowance untouched
    assert contract.allowance(bob, alice).allowance == 10_000_000

    res = contract.burn_from(mock_env(), mock_info(alice, []), bob, 1_000_000)
    assert contract.balance(alice) == 25_000_000
    assert contract.balance(bob) == 2_000_000
    assert res.messages == [BankSend(to_address=alice, amount=coins(1_500, DENOM))]
    assert res.attributes[-2:] == [("action", "burn_from"), ("by", alice)]


def test_custom_curve_fn_overrides_stored_curve():
    def custom(places):
        return Constant(decimal(15, 1), places)

    overridden = setup_contract(9, 6, linear(), curve_fn=custom)
    reference = setup_contract(9, 6, CurveType(CurveKind.CONSTANT, 15, 1))
    for contract in (overridden, reference):
        contract.buy(mock_env(), mock_info("bobby", coins(45_000, DENOM)))
    assert overridden.balance("bobby") == reference.balance("bobby")
    assert overridden.curve_info() == reference.curve_info()


def test_uninstantiated_contract_raises_not_found():
    contract = BondingContract()
    with pytest.raises(NotFoundError):
        contract.buy(mock_env(), mock_info(INVESTOR, coins(100, DENOM)))
    with pytest.raises(NotFoundError):
        contract.curve_info()


def test_send_moves_tokens_to_contract():
    contract = setup_contract(2, 8, linear())
    contract.buy(mock_env(), mock_info(INVESTOR, coins(500_000_000, DENOM)))
    res = contract.send(mock_env(), mock_info(INVESTOR, []), "receiver", 400, b"{}")
    assert contract.balance("receiver") == 400
    assert contract.balance(INVESTOR) == 600
    assert res.messages[0].contract_addr == "receiver"