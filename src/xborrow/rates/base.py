from __future__ import annotations

from abc import ABC, abstractmethod

from ..domain import Vault


class BaseRateProvider(ABC):
    """Abstract base class for borrow rate sources."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the name of this provider."""
        ...

    @abstractmethod
    async def get_borrow_rate(self, vault: Vault) -> int:
        """Return the current borrow APR of ``vault``, in ray (27 decimals)."""
        ...

    async def close(self) -> None:
        """Release any connection held by the provider."""
        return None
