from __future__ import annotations

import asyncio
from typing import Callable, Iterable

import pytest

from xborrow.domain import Vault
from xborrow.rates import BaseRateProvider
from xborrow.registry import Registry

OWNER = "0x7F45CD7792C32bAcF461D02D110D9025655Fb6b7"

GOERLI_ROUTER = "0x58Ec012028925E0A9eb8136e1037a1be683558B6"
GOERLI_WETH = "0x7ea6eA49B0b0Ae9c5db7907d139D9Cd3439862a1"
GOERLI_USDC = "0x5FfbaC75EFc9547FBc822166feD19B05Cd5890bb"
GOERLI_VAULT = "0xfF4606Aa93e576E61b473f4B11D3e32BB9ec63BB"

OPG_ROUTER = "0xdA1a42056BcBDd35b8E1C4f55773f0f11c171634"
OPG_WETH = "0x4200000000000000000000000000000000000006"
OPG_USDC = "0x2222222222222222222222222222222222222222"
OPG_VAULT = "0x62fd5C9A82991CDc522e4E748A9188E7B3DC7872"

MUMBAI_ROUTER = "0x3333333333333333333333333333333333333333"
MUMBAI_WETH = "0x4444444444444444444444444444444444444444"
MUMBAI_USDC = "0x5555555555555555555555555555555555555555"
MUMBAI_VAULT = "0x6666666666666666666666666666666666666666"

DEADLINE = 123456789


def _chain(chain_id, name, router, weth, usdc, vault):
    return {
        "chain_id": chain_id,
        "name": name,
        "router": router,
        "native": {"symbol": "ETH", "wrapped": "WETH"},
        "tokens": [
            {"symbol": "WETH", "address": weth, "decimals": 18},
            {"symbol": "USDC", "address": usdc, "decimals": 6},
        ],
        "vaults": [{"address": vault, "collateral": "WETH", "debt": "USDC"}],
    }


REGISTRY_DOCUMENT = {
    "chains": [
        _chain(5, "goerli", GOERLI_ROUTER, GOERLI_WETH, GOERLI_USDC, GOERLI_VAULT),
        _chain(420, "optimism-goerli", OPG_ROUTER, OPG_WETH, OPG_USDC, OPG_VAULT),
        _chain(80001, "mumbai", MUMBAI_ROUTER, MUMBAI_WETH, MUMBAI_USDC, MUMBAI_VAULT),
    ]
}


class FakeRateProvider(BaseRateProvider):
    """In-memory rate source keyed by (chain_id, address)."""

    def __init__(
        self,
        rates: dict[tuple[int, str], int],
        delay: float = 0.0,
        failing: Iterable[tuple[int, str]] = (),
        delays: dict[tuple[int, str], float] | None = None,
    ):
        self.rates = rates
        self.delay = delay
        self.failing = set(failing)
        self.delays = delays or {}
        self.calls: list[Vault] = []
        self.completed: list[Vault] = []
        self.closed = False

    @property
    def name(self) -> str:
        return "fake"

    async def get_borrow_rate(self, vault: Vault) -> int:
        self.calls.append(vault)
        key = (vault.chain_id, vault.address)
        delay = self.delays.get(key, self.delay)
        if delay:
            await asyncio.sleep(delay)
        if key in self.failing:
            raise ConnectionError("execution reverted")
        self.completed.append(vault)
        return self.rates[key]

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def registry() -> Registry:
    return Registry.from_dict(REGISTRY_DOCUMENT)


@pytest.fixture
def rate_provider_factory() -> Callable[..., FakeRateProvider]:
    return FakeRateProvider
