"""Entry point tying the registry, rate source, planner and encoder together."""

from __future__ import annotations

import logging
from typing import Sequence

from .domain import Currency, PermitSignature, RouterActionParams, Vault
from .encoding import TxDetails, build_tx_details
from .planning import (
    needs_signature,
    plan_deposit_and_borrow,
    plan_payback_and_withdraw,
)
from .ranking import rank_vaults_with_rates
from .rates import BaseRateProvider, OnchainRateProvider
from .registry import Registry
from .settings import XBorrowSettings

logger = logging.getLogger(__name__)


class Sdk:
    """Plans and encodes cross-chain borrow and repay operations.

    All collaborators are passed in explicitly; nothing is read from global state.
    Planning and encoding work without a rate provider, ranking needs one.
    """

    def __init__(
        self,
        registry: Registry,
        rate_provider: BaseRateProvider | None = None,
        settings: XBorrowSettings | None = None,
    ):
        self.registry = registry
        self.rate_provider = rate_provider
        self.settings = settings or XBorrowSettings()

    @classmethod
    def from_settings(cls, settings: XBorrowSettings) -> Sdk:
        """Build an Sdk reading the registry file and on-chain rates from ``settings``."""
        registry = Registry.from_toml(settings.registry_path_required)
        return cls(registry, OnchainRateProvider(settings), settings)

    async def close(self) -> None:
        if self.rate_provider is not None:
            await self.rate_provider.close()

    def _require_rate_provider(self) -> BaseRateProvider:
        if self.rate_provider is None:
            raise ValueError("A rate provider is required to rank vaults")
        return self.rate_provider

    async def get_borrowing_vaults_with_rates_for(
        self, collateral: Currency, debt: Currency
    ) -> list[tuple[Vault, int]]:
        """Return candidate vaults for the pair with their borrow rates, best first."""
        rate_provider = self._require_rate_provider()
        candidates = self.registry.find_vaults_by_currencies(collateral, debt)
        logger.debug(
            "Found %d candidate vault(s) for %s -> %s", len(candidates), collateral, debt
        )
        return await rank_vaults_with_rates(
            candidates,
            collateral.chain_id,
            debt.chain_id,
            rate_provider,
            timeout=self.settings.rate_query_timeout,
        )

    async def get_borrowing_vaults_for(
        self, collateral: Currency, debt: Currency
    ) -> list[Vault]:
        """Return candidate vaults for the pair, best first.

        An empty list means no vault supports the pair on either chain.
        """
        ranked = await self.get_borrowing_vaults_with_rates_for(collateral, debt)
        return [vault for vault, _ in ranked]

    def preview_deposit_and_borrow(
        self,
        vault: Vault,
        collateral_amount: int,
        debt_amount: int,
        collateral: Currency,
        debt: Currency,
        owner: str,
        deadline: int,
    ) -> list[RouterActionParams]:
        return plan_deposit_and_borrow(
            self.registry,
            vault,
            collateral_amount,
            debt_amount,
            collateral,
            debt,
            owner,
            deadline,
        )

    def preview_payback_and_withdraw(
        self,
        vault: Vault,
        payback_amount: int,
        withdraw_amount: int,
        debt: Currency,
        collateral: Currency,
        owner: str,
        deadline: int,
    ) -> list[RouterActionParams]:
        return plan_payback_and_withdraw(
            self.registry,
            vault,
            payback_amount,
            withdraw_amount,
            debt,
            collateral,
            owner,
            deadline,
        )

    @staticmethod
    def needs_signature(actions: Sequence[RouterActionParams]) -> bool:
        return needs_signature(actions)

    def get_tx_details(
        self,
        actions: Sequence[RouterActionParams],
        origin_chain_id: int,
        sender: str,
        signature: PermitSignature | None = None,
    ) -> TxDetails:
        """Encode ``actions`` into a transaction for the router on ``origin_chain_id``."""
        return build_tx_details(
            actions, self.registry.chain(origin_chain_id), sender, signature
        )
