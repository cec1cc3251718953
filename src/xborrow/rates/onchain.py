"""Borrow rates read from the vault's active lending provider."""

from __future__ import annotations

import logging

from web3 import AsyncWeb3

from ..abi import load_borrowing_vault_abi, load_lending_provider_abi
from ..domain import Vault
from ..settings import XBorrowSettings
from .base import BaseRateProvider

logger = logging.getLogger(__name__)


class OnchainRateProvider(BaseRateProvider):
    """Queries ``activeProvider().getBorrowRateFor(vault)`` over JSON-RPC."""

    def __init__(self, settings: XBorrowSettings):
        self._settings = settings
        self._clients: dict[int, AsyncWeb3] = {}
        self._vault_abi = load_borrowing_vault_abi()
        self._provider_abi = load_lending_provider_abi()

    @property
    def name(self) -> str:
        return "onchain"

    def _client(self, chain_id: int) -> AsyncWeb3:
        w3 = self._clients.get(chain_id)
        if w3 is None:
            rpc_url = self._settings.rpc_url_for(chain_id)
            w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc_url))
            self._clients[chain_id] = w3
        return w3

    async def get_borrow_rate(self, vault: Vault) -> int:
        w3 = self._client(vault.chain_id)
        vault_contract = w3.eth.contract(address=vault.address, abi=self._vault_abi)

        provider_address = await vault_contract.functions.activeProvider().call()
        logger.debug(
            "Vault %s uses lending provider %s", vault.address, provider_address
        )

        provider_contract = w3.eth.contract(
            address=w3.to_checksum_address(provider_address), abi=self._provider_abi
        )
        rate = await provider_contract.functions.getBorrowRateFor(vault.address).call()
        return int(rate)

    async def close(self) -> None:
        """Safely disconnect Web3 providers."""
        for w3 in self._clients.values():
            try:
                await w3.provider.disconnect()  # type: ignore[union-attr]
            except AttributeError as e:
                logger.debug(
                    f"Provider disconnect expected (no disconnect method): {e}"
                )
        self._clients.clear()
