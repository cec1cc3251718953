"""Vault selection by borrow rate and chain locality."""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence

from .domain import Vault
from .errors import RateQueryFailedError, RateQueryTimeoutError
from .rates import BaseRateProvider

logger = logging.getLogger(__name__)


async def _query_rate(rate_provider: BaseRateProvider, vault: Vault) -> int:
    try:
        return await rate_provider.get_borrow_rate(vault)
    except asyncio.CancelledError:
        raise
    except Exception as e:
        raise RateQueryFailedError(vault, str(e) or type(e).__name__) from e


async def fetch_borrow_rates(
    vaults: Sequence[Vault],
    rate_provider: BaseRateProvider,
    timeout: float | None = None,
) -> list[int]:
    """Fetch the borrow rate of every vault concurrently.

    The first failing query cancels the ones still in flight.

    Args:
        vaults: Vaults to query
        rate_provider: Source of borrow rates
        timeout: Seconds to wait for all queries; ``None`` or ``<= 0`` waits forever

    Returns:
        Rates in the same order as ``vaults``

    Raises:
        RateQueryFailedError: If any single query fails
        RateQueryTimeoutError: If the queries do not complete within ``timeout``
    """

    async def _gather() -> list[int]:
        try:
            async with asyncio.TaskGroup() as tg:
                tasks = [
                    tg.create_task(_query_rate(rate_provider, vault)) for vault in vaults
                ]
        except ExceptionGroup as eg:
            # Only RateQueryFailedError reaches the group
            raise eg.exceptions[0]
        return [task.result() for task in tasks]

    if timeout is None or timeout <= 0:
        return await _gather()

    try:
        async with asyncio.timeout(timeout):
            return await _gather()
    except TimeoutError as exc:
        logger.error(
            "Borrow rate queries timed out",
            extra={"vaults": len(vaults), "timeout_seconds": timeout},
        )
        raise RateQueryTimeoutError(
            f"Borrow rate queries for {len(vaults)} vault(s) exceeded {timeout}s "
            f"using provider '{rate_provider.name}'"
        ) from exc


def sort_by_rate(
    vaults: Sequence[Vault],
    rates: Sequence[int],
    collateral_chain: int,
    debt_chain: int,
) -> list[Vault]:
    """Order vaults from best to worst.

    When collateral and debt live on the same chain, vaults on that chain come
    first whatever their rate; otherwise the cheapest rate wins. Equal keys
    keep their input order.
    """
    if collateral_chain == debt_chain:
        ranked = sorted(
            zip(vaults, rates),
            key=lambda pair: (pair[0].chain_id != collateral_chain, pair[1]),
        )
    else:
        ranked = sorted(zip(vaults, rates), key=lambda pair: pair[1])
    return [vault for vault, _ in ranked]


async def rank_vaults_with_rates(
    vaults: Sequence[Vault],
    collateral_chain: int,
    debt_chain: int,
    rate_provider: BaseRateProvider,
    timeout: float | None = None,
) -> list[tuple[Vault, int]]:
    """Rank candidate vaults for a borrow request, keeping each vault's rate.

    An empty candidate set yields an empty list without querying any rate.
    """
    if not vaults:
        logger.info(
            "No vault found for collateral chain %s and debt chain %s",
            collateral_chain,
            debt_chain,
        )
        return []

    rates = await fetch_borrow_rates(vaults, rate_provider, timeout)
    rate_of: dict[Vault, int] = {}
    for vault, rate in zip(vaults, rates):
        logger.debug("Borrow rate of %s: %d", vault, rate)
        rate_of[vault] = rate

    ranked = sort_by_rate(vaults, rates, collateral_chain, debt_chain)
    logger.info("Selected %s out of %d candidate(s)", ranked[0], len(ranked))
    return [(vault, rate_of[vault]) for vault in ranked]


async def rank_vaults(
    vaults: Sequence[Vault],
    collateral_chain: int,
    debt_chain: int,
    rate_provider: BaseRateProvider,
    timeout: float | None = None,
) -> list[Vault]:
    """Rank candidate vaults for a borrow request, best first."""
    ranked = await rank_vaults_with_rates(
        vaults, collateral_chain, debt_chain, rate_provider, timeout
    )
    return [vault for vault, _ in ranked]
