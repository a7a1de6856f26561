# cwtokens

In-memory models of token contract logic, driven from plain Python. No chain
and no network are involved.

- `cwtokens.chain`: blocks, environments, coins, message info, `Expiration`
  and `Scheduled` points, `Response` objects with messages and attributes,
  payment checks (`must_pay`, `nonpayable`), `addr_validate`, and the errors
  `StdError`, `OverflowError`, `NotFoundError` and `PaymentError`.
- `cwtokens.curves`: bonding curves `Constant`, `Linear` and `SquareRoot`,
  with `DecimalPlaces` to convert between integer token amounts and decimals.
- `cwtokens.token`: `Cw20Ledger`, a fungible token ledger with minting,
  burning, transfers, sends and allowances.
- `cwtokens.bonding_state` and `cwtokens.bonding`: `BondingContract`, a token
  bought with a reserve coin along a curve and burned to get the reserve back.
- `cwtokens.escrow`: escrow records (`Escrow`, `GenericBalance`, `CreateMsg`,
  `DetailsResponse`), id checks and escrow errors.
- `cwtokens.atomic_swap`: hash-locked swap records (`AtomicSwap`,
  `CreateMsg`, `DetailsResponse`), id listing and swap errors.

## Installation

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Bonding curves

```python
from cwtokens.curves import DecimalPlaces, Linear, decimal

# the supply token has 2 decimals and the reserve token has 8
curve = Linear(decimal(1, 1), DecimalPlaces(2, 8))
curve.reserve(1000)        # 500_000_000: 10.00 tokens cost 5 reserve coins
curve.supply(125_000_000)  # 500
```

A full contract:

```python
from cwtokens.bonding import BondingContract
from cwtokens.bonding_state import CurveKind, CurveType, InstantiateMsg
from cwtokens.chain import coins, mock_env, mock_info

contract = BondingContract()
contract.instantiate(
    mock_env(),
    mock_info("creator", []),
    InstantiateMsg(
        name="Bonded",
        symbol="EPOXY",
        decimals=2,
        reserve_denom="satoshi",
        reserve_decimals=8,
        curve_type=CurveType(CurveKind.LINEAR, 1, 1),
    ),
)
contract.buy(mock_env(), mock_info("investor", coins(500_000_000, "satoshi")))
contract.balance("investor")   # 1000
contract.curve_info()          # reserve, supply, spot price, reserve denom

response = contract.burn(mock_env(), mock_info("investor", []), 1000)
response.messages              # [BankSend(to_address="investor", ...)]
```

`BondingContract` also offers `transfer`, `send`, `increase_allowance`,
`decrease_allowance`, `transfer_from`, `send_from`, `burn_from`,
`token_info` and `allowance`. A custom curve function can be passed to
`BondingContract(curve_fn=...)` to replace the stored curve type. Each
executed message either succeeds whole or leaves the state unchanged.

## Escrows and swaps

```python
from cwtokens.atomic_swap import AtomicSwap, all_swap_ids
from cwtokens.chain import Coin, Cw20Coin
from cwtokens.escrow import GenericBalance

balance = GenericBalance()
balance.add_tokens([Coin(100, "btc")])
balance.add_tokens([Coin(50, "btc")])
balance.add_tokens(Cw20Coin("cash", 7))
# native=[Coin(150, "btc")], cw20=[Cw20Coin("cash", 7)]

swaps = {name: AtomicSwap(b"hash", "recip", "source") for name in ("lazy", "assign", "zen")}
all_swap_ids(swaps)                       # ["assign", "lazy", "zen"]
all_swap_ids(swaps, start_after="assign", limit=1)  # ["lazy"]
```

## Errors

Failures raise exceptions: `PaymentError`, `OverflowError` and `StdError`
from `cwtokens.chain`; `TokenError` subclasses such as `NoAllowance` or
`InvalidZeroAmount` from `cwtokens.token`; `EscrowError` and `SwapError`
subclasses from `cwtokens.escrow` and `cwtokens.atomic_swap`. Errors of the
same type and arguments compare equal.

## What this package does not do

- Nothing is stored on disk; all state lives in Python objects.
- Messages in a `Response` (bank sends, contract executions) are returned,
  never dispatched.
- Escrows and atomic swaps come as records, checks and listings only; there
  is no contract that creates, approves, releases or refunds them.
- There is no command-line tool.