"""Token contract logic: bonding-curve tokens, a fungible token ledger, escrow and atomic swap records."""

__version__ = "0.1.0"