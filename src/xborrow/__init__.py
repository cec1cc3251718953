"""Off-chain planning and calldata encoding for cross-chain borrowing."""

from .domain import (
    Chain,
    NativeCurrency,
    PermitSignature,
    RouterAction,
    Token,
    Vault,
)
from .encoding import TxDetails
from .errors import XBorrowError
from .registry import Registry
from .sdk import Sdk
from .settings import XBorrowSettings

__version__ = "0.1.0"

__all__ = [
    "Chain",
    "NativeCurrency",
    "PermitSignature",
    "Registry",
    "RouterAction",
    "Sdk",
    "Token",
    "TxDetails",
    "Vault",
    "XBorrowError",
    "XBorrowSettings",
    "__version__",
]
