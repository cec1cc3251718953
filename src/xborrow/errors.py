"""Exceptions raised by the planning and encoding layer."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .domain import Vault


class XBorrowError(Exception):
    """Base class for every error raised by xborrow."""


class RegistryError(XBorrowError):
    """Raised when the registry is malformed or a lookup misses."""


class UnsupportedRouteError(XBorrowError):
    """Raised when a request would need more than one bridge hop."""


class MissingSignatureError(XBorrowError):
    """Raised when a plan containing a permit is encoded without a signature."""


class InvalidNestingError(XBorrowError):
    """Raised when an X_TRANSFER_WITH_CALL appears inside inner actions."""


class UnsupportedActionError(XBorrowError):
    """Raised when an action has no encoding on the router."""


class RateQueryError(XBorrowError):
    """Base class for borrow rate query failures."""


class RateQueryFailedError(RateQueryError):
    """Raised when the borrow rate of a candidate vault could not be fetched."""

    def __init__(self, vault: Vault, message: str):
        super().__init__(
            f"Borrow rate query failed for vault {vault.address} "
            f"on chain {vault.chain_id}: {message}"
        )
        self.vault = vault


class RateQueryTimeoutError(RateQueryError, TimeoutError):
    """Raised when the rate queries do not resolve within the timeout."""
