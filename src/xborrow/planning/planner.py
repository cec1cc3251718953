"""Route planning: which router actions to run, where, and in which order.

A request touches up to three chains: where the user's funds are, where the
vault is, and where the output must be delivered. Only routes that cross a
bridge at most once are planned:

- everything on the vault's chain: run the local actions;
- funds on the vault's chain, output elsewhere: run the local actions and
  bridge the output out with X_TRANSFER;
- funds elsewhere, output on the vault's chain: bridge the funds in with
  X_TRANSFER_WITH_CALL and run the local actions on arrival.
"""

from __future__ import annotations

import logging
from typing import Callable

from eth_typing import ChecksumAddress

from ..constants import MAX_UINT256
from ..domain import (
    BorrowParams,
    Currency,
    DepositParams,
    PaybackParams,
    PermitBorrowParams,
    PermitWithdrawParams,
    RouterActionParams,
    Token,
    Vault,
    WithdrawParams,
    XTransferParams,
    XTransferWithCallParams,
    to_address,
)
from ..errors import UnsupportedRouteError
from ..registry import Registry

logger = logging.getLogger(__name__)

# Builds the vault-chain actions given the address funds are pulled from
LocalActions = Callable[[ChecksumAddress], list[RouterActionParams]]


def _check_amount(name: str, amount: int) -> None:
    if not isinstance(amount, int) or not 0 <= amount <= MAX_UINT256:
        raise ValueError(f"{name} must be an integer in the uint256 range, got {amount!r}")


def _check_deadline(deadline: int) -> None:
    if not isinstance(deadline, int) or not 0 < deadline <= MAX_UINT256:
        raise ValueError(f"deadline must be a positive timestamp, got {deadline!r}")


def _check_asset(role: str, currency: Currency, vault_asset: Token) -> None:
    if currency.asset_kind != vault_asset.asset_kind:
        raise ValueError(
            f"{role} {currency} does not match vault {role} {vault_asset.symbol}"
        )


def _route(
    registry: Registry,
    vault: Vault,
    source: Currency,
    source_amount: int,
    output: Token,
    output_amount: int,
    output_chain: int,
    owner: ChecksumAddress,
    local_actions: LocalActions,
) -> list[RouterActionParams]:
    """Place ``local_actions`` on the vault's chain, bridging at most once."""
    source_chain = source.chain_id
    vault_chain = vault.chain_id

    if source_chain == vault_chain == output_chain:
        logger.info("Planning same-chain route on chain %s", vault_chain)
        return local_actions(owner)

    if source_chain == vault_chain:
        logger.info(
            "Planning route on chain %s, bridging %s out to chain %s",
            vault_chain,
            output.symbol,
            output_chain,
        )
        return local_actions(owner) + [
            XTransferParams(
                dest_domain=registry.connext_domain(output_chain),
                asset=output.address,
                amount=output_amount,
                receiver=owner,
            )
        ]

    if output_chain == vault_chain:
        logger.info(
            "Planning route bridging %s in from chain %s to chain %s",
            source.symbol,
            source_chain,
            vault_chain,
        )
        # Bridged funds land in the destination router, which then acts as depositor
        router = to_address(registry.router(vault_chain))
        return [
            XTransferWithCallParams(
                dest_domain=registry.connext_domain(vault_chain),
                asset=source.wrapped.address,
                amount=source_amount,
                receiver=owner,
                inner_actions=tuple(local_actions(router)),
            )
        ]

    raise UnsupportedRouteError(
        f"Route from chain {source_chain} through vault chain {vault_chain} "
        f"to chain {output_chain} needs more than one bridge hop"
    )


def plan_deposit_and_borrow(
    registry: Registry,
    vault: Vault,
    collateral_amount: int,
    debt_amount: int,
    collateral: Currency,
    debt: Currency,
    owner: str,
    deadline: int,
) -> list[RouterActionParams]:
    """Plan depositing collateral and borrowing debt through ``vault``.

    Args:
        registry: Chain registry providing routers and bridge domains
        vault: The vault to deposit into and borrow from
        collateral_amount: Collateral to deposit, in smallest units
        debt_amount: Debt to borrow, in smallest units
        collateral: Currency the user holds, on the chain where they hold it
        debt: Currency to borrow, on the chain where it must be delivered
        owner: Account owning the position and receiving the debt
        deadline: Unix timestamp after which the borrow permit expires

    Returns:
        The ordered router actions to submit on the collateral chain

    Raises:
        UnsupportedRouteError: If the route would need two bridge hops
        ValueError: If amounts, deadline or currencies are invalid
    """
    _check_amount("collateral_amount", collateral_amount)
    _check_amount("debt_amount", debt_amount)
    _check_deadline(deadline)
    _check_asset("collateral", collateral, vault.collateral)
    _check_asset("debt", debt, vault.debt)
    owner = to_address(owner)
    router = to_address(registry.router(vault.chain_id))

    def local_actions(depositor: ChecksumAddress) -> list[RouterActionParams]:
        return [
            DepositParams(
                vault=vault.address,
                amount=collateral_amount,
                receiver=owner,
                sender=depositor,
            ),
            PermitBorrowParams(
                vault=vault.address,
                owner=owner,
                spender=router,
                amount=debt_amount,
                deadline=deadline,
            ),
            BorrowParams(
                vault=vault.address,
                amount=debt_amount,
                receiver=owner,
                owner=owner,
            ),
        ]

    return _route(
        registry,
        vault,
        source=collateral,
        source_amount=collateral_amount,
        output=vault.debt,
        output_amount=debt_amount,
        output_chain=debt.chain_id,
        owner=owner,
        local_actions=local_actions,
    )


def plan_payback_and_withdraw(
    registry: Registry,
    vault: Vault,
    payback_amount: int,
    withdraw_amount: int,
    debt: Currency,
    collateral: Currency,
    owner: str,
    deadline: int,
) -> list[RouterActionParams]:
    """Plan repaying debt and withdrawing collateral from ``vault``.

    ``debt`` is the currency the user repays with, on the chain where they
    hold it; ``collateral`` is the currency to withdraw, on the chain where it
    must be delivered. Mirrors :func:`plan_deposit_and_borrow`.
    """
    _check_amount("payback_amount", payback_amount)
    _check_amount("withdraw_amount", withdraw_amount)
    _check_deadline(deadline)
    _check_asset("debt", debt, vault.debt)
    _check_asset("collateral", collateral, vault.collateral)
    owner = to_address(owner)
    router = to_address(registry.router(vault.chain_id))

    def local_actions(payer: ChecksumAddress) -> list[RouterActionParams]:
        return [
            PaybackParams(
                vault=vault.address,
                amount=payback_amount,
                receiver=owner,
                sender=payer,
            ),
            PermitWithdrawParams(
                vault=vault.address,
                owner=owner,
                spender=router,
                amount=withdraw_amount,
                deadline=deadline,
            ),
            WithdrawParams(
                vault=vault.address,
                amount=withdraw_amount,
                receiver=owner,
                owner=owner,
            ),
        ]

    return _route(
        registry,
        vault,
        source=debt,
        source_amount=payback_amount,
        output=vault.collateral,
        output_amount=withdraw_amount,
        output_chain=collateral.chain_id,
        owner=owner,
        local_actions=local_actions,
    )
