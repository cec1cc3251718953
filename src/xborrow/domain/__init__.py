"""Domain models for cross-chain borrowing plans."""

from __future__ import annotations

from .actions import (
    PERMIT_PARAMS,
    BorrowParams,
    DepositParams,
    PaybackParams,
    PermitBorrowParams,
    PermitParams,
    PermitSignature,
    PermitWithdrawParams,
    RouterAction,
    RouterActionParams,
    WithdrawParams,
    XTransferParams,
    XTransferWithCallParams,
)
from .addresses import short_address, to_address
from .currencies import Currency, NativeCurrency, Token
from .vaults import Chain, Vault

__all__ = [
    "PERMIT_PARAMS",
    "BorrowParams",
    "Chain",
    "Currency",
    "DepositParams",
    "NativeCurrency",
    "PaybackParams",
    "PermitBorrowParams",
    "PermitParams",
    "PermitSignature",
    "PermitWithdrawParams",
    "RouterAction",
    "RouterActionParams",
    "Token",
    "Vault",
    "WithdrawParams",
    "XTransferParams",
    "XTransferWithCallParams",
    "short_address",
    "to_address",
]
