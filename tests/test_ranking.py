import asyncio
import random

import pytest
from conftest import GOERLI_VAULT, MUMBAI_VAULT, OPG_VAULT

from xborrow.domain import Token, Vault
from xborrow.errors import RateQueryFailedError, RateQueryTimeoutError
from xborrow.ranking import (
    fetch_borrow_rates,
    rank_vaults,
    rank_vaults_with_rates,
    sort_by_rate,
)


def _vault(index: int, chain_id: int) -> Vault:
    weth = Token(chain_id, f"0x{1000 + index:040x}", 18, "WETH")
    usdc = Token(chain_id, f"0x{2000 + index:040x}", 6, "USDC")
    return Vault.of(f"0x{index + 1:040x}", weth, usdc)


def _rates(vaults, values):
    return {(v.chain_id, v.address): r for v, r in zip(vaults, values)}


@pytest.mark.asyncio
async def test_cross_chain_request_picks_cheapest(registry, rate_provider_factory):
    goerli = registry.vault(5, GOERLI_VAULT)
    opg = registry.vault(420, OPG_VAULT)
    provider = rate_provider_factory(_rates([goerli, opg], [5 * 10**25, 3 * 10**25]))

    ranked = await rank_vaults([goerli, opg], 5, 420, provider)

    assert ranked == [opg, goerli]


@pytest.mark.asyncio
@pytest.mark.parametrize("rates", [[1, 2, 3], [2, 1, 3], [2, 3, 1]])
async def test_cross_chain_request_ignores_vault_chain(rates, rate_provider_factory):
    vaults = [_vault(0, 5), _vault(1, 5), _vault(2, 420)]
    provider = rate_provider_factory(_rates(vaults, rates))

    ranked = await rank_vaults(vaults, 5, 420, provider)

    assert ranked[0] == vaults[rates.index(1)]
    assert [rates[vaults.index(v)] for v in ranked] == [1, 2, 3]


@pytest.mark.asyncio
async def test_ranking_keeps_each_vault_rate(registry, rate_provider_factory):
    goerli = registry.vault(5, GOERLI_VAULT)
    opg = registry.vault(420, OPG_VAULT)
    provider = rate_provider_factory(_rates([goerli, opg], [5 * 10**25, 3 * 10**25]))

    ranked = await rank_vaults_with_rates([goerli, opg], 5, 420, provider)

    assert ranked == [(opg, 3 * 10**25), (goerli, 5 * 10**25)]


@pytest.mark.asyncio
async def test_same_chain_vault_wins_despite_higher_rate(
    registry, rate_provider_factory
):
    goerli = registry.vault(5, GOERLI_VAULT)
    opg = registry.vault(420, OPG_VAULT)
    mumbai = registry.vault(80001, MUMBAI_VAULT)
    provider = rate_provider_factory(_rates([opg, goerli, mumbai], [1, 9, 2]))

    ranked = await rank_vaults([opg, goerli, mumbai], 5, 5, provider)

    assert ranked == [goerli, opg, mumbai]


@pytest.mark.asyncio
async def test_empty_candidates_query_nothing(rate_provider_factory):
    provider = rate_provider_factory({})

    assert await rank_vaults([], 5, 420, provider) == []
    assert provider.calls == []


@pytest.mark.asyncio
async def test_every_candidate_is_queried_once(rate_provider_factory):
    vaults = [_vault(i, 5) for i in range(6)]
    provider = rate_provider_factory(_rates(vaults, [7, 3, 5, 1, 8, 2]))

    ranked = await rank_vaults(vaults, 5, 420, provider)

    assert sorted(provider.calls, key=vaults.index) == vaults
    assert [vaults.index(v) for v in ranked] == [3, 5, 1, 2, 0, 4]


@pytest.mark.asyncio
async def test_single_failure_fails_the_ranking(registry, rate_provider_factory):
    goerli = registry.vault(5, GOERLI_VAULT)
    opg = registry.vault(420, OPG_VAULT)
    provider = rate_provider_factory(
        _rates([goerli, opg], [1, 2]), failing=[(420, OPG_VAULT)]
    )

    with pytest.raises(RateQueryFailedError) as exc_info:
        await rank_vaults([goerli, opg], 5, 420, provider)

    assert exc_info.value.vault == opg
    assert "execution reverted" in str(exc_info.value)
    assert isinstance(exc_info.value.__cause__, ConnectionError)


@pytest.mark.asyncio
async def test_failure_cancels_queries_in_flight(registry, rate_provider_factory):
    goerli = registry.vault(5, GOERLI_VAULT)
    opg = registry.vault(420, OPG_VAULT)
    provider = rate_provider_factory(
        _rates([goerli, opg], [1, 2]),
        failing=[(5, GOERLI_VAULT)],
        delays={(420, OPG_VAULT): 0.2},
    )

    with pytest.raises(RateQueryFailedError) as exc_info:
        await rank_vaults([goerli, opg], 5, 420, provider)
    assert exc_info.value.vault == goerli

    await asyncio.sleep(0.3)
    assert provider.completed == []


@pytest.mark.asyncio
async def test_slow_queries_time_out(registry, rate_provider_factory):
    goerli = registry.vault(5, GOERLI_VAULT)
    provider = rate_provider_factory(_rates([goerli], [1]), delay=0.5)

    with pytest.raises(RateQueryTimeoutError):
        await rank_vaults([goerli], 5, 420, provider, timeout=0.05)


@pytest.mark.asyncio
async def test_timeout_error_is_a_builtin_timeout(registry, rate_provider_factory):
    goerli = registry.vault(5, GOERLI_VAULT)
    provider = rate_provider_factory(_rates([goerli], [1]), delay=0.5)

    with pytest.raises(TimeoutError):
        await fetch_borrow_rates([goerli], provider, timeout=0.05)


@pytest.mark.asyncio
async def test_fast_queries_finish_within_timeout(registry, rate_provider_factory):
    goerli = registry.vault(5, GOERLI_VAULT)
    provider = rate_provider_factory(_rates([goerli], [42]), delay=0.01)

    assert await fetch_borrow_rates([goerli], provider, timeout=1.0) == [42]


def test_ranking_is_a_permutation_ordered_by_rate():
    rng = random.Random(1234)
    for _ in range(200):
        chains = [5, 420, 80001]
        vaults = [_vault(i, rng.choice(chains)) for i in range(rng.randint(1, 8))]
        rates = [rng.randint(0, 4) for _ in vaults]
        collateral_chain, debt_chain = rng.sample(chains, 2)

        ranked = sort_by_rate(vaults, rates, collateral_chain, debt_chain)

        assert sorted(ranked, key=vaults.index) == vaults
        ranked_rates = [rates[vaults.index(v)] for v in ranked]
        assert ranked_rates == sorted(ranked_rates)


def test_same_chain_ranking_puts_local_vaults_first():
    rng = random.Random(99)
    for _ in range(200):
        chains = [5, 420, 80001]
        vaults = [_vault(i, rng.choice(chains)) for i in range(rng.randint(1, 8))]
        rates = [rng.randint(0, 4) for _ in vaults]
        chain = rng.choice(chains)

        ranked = sort_by_rate(vaults, rates, chain, chain)

        local = [v.chain_id == chain for v in ranked]
        assert local == sorted(local, reverse=True)
        for is_local in (True, False):
            group = [
                rates[vaults.index(v)] for v in ranked if (v.chain_id == chain) is is_local
            ]
            assert group == sorted(group)


def test_equal_rates_keep_input_order():
    vaults = [_vault(i, 5) for i in range(5)]

    assert sort_by_rate(vaults, [1] * 5, 5, 420) == vaults
    assert sort_by_rate(vaults, [1] * 5, 5, 5) == vaults
