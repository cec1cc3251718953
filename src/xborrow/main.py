"""CLI entrypoint for xborrow."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import time
from decimal import Decimal, InvalidOperation
from enum import Enum
from pathlib import Path
from typing import Annotated, Any

import typer

from .domain import Currency, PermitSignature, RouterActionParams, Vault
from .errors import XBorrowError
from .formatter import action_to_dict, format_plan, format_vaults_table
from .logger import setup_logging
from .planning import find_permits, needs_signature
from .rates import OnchainRateProvider
from .registry import Registry
from .sdk import Sdk
from .settings import OutputFormat, XBorrowSettings
from .state import AppState

app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    add_help_option=True,
    pretty_exceptions_enable=True,
    pretty_exceptions_short=True,
    pretty_exceptions_show_locals=False,
    rich_markup_mode="rich",
    help="Plan and encode cross-chain borrow and repay operations.",
)


class Flow(str, Enum):
    BORROW = "borrow"
    REPAY = "repay"


# Amount options as (source, output) per flow
AMOUNT_OPTIONS = {
    Flow.BORROW: ("--collateral-amount", "--debt-amount"),
    Flow.REPAY: ("--payback-amount", "--withdraw-amount"),
}


def _fail(message: str) -> typer.Exit:
    typer.secho(message, fg=typer.colors.RED, err=True)
    return typer.Exit(code=1)


def _load_registry(state: AppState) -> Registry:
    try:
        path = state.settings.registry_path_required
    except ValueError:
        raise typer.BadParameter(
            "registry_path must be configured.",
            param_hint=["--config", "XBORROW_REGISTRY_PATH"],
        ) from None
    return Registry.from_toml(path)


def _parse_amount(value: str, currency: Currency, option: str) -> int:
    """Convert a human amount such as ``1.5`` to smallest units of ``currency``."""
    try:
        scaled = Decimal(value) * (Decimal(10) ** currency.decimals)
    except InvalidOperation:
        raise typer.BadParameter(f"{value!r} is not a number", param_hint=option) from None
    if not scaled.is_finite():
        raise typer.BadParameter(f"{value!r} is not a finite number", param_hint=option)
    if scaled != scaled.to_integral_value() or scaled < 0:
        raise typer.BadParameter(
            f"{value!r} is not a valid {currency.symbol} amount "
            f"({currency.decimals} decimals)",
            param_hint=option,
        )
    return int(scaled)


def _parse_signature(value: str | None) -> PermitSignature | None:
    if value is None:
        return None
    try:
        return PermitSignature.from_hex(value)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--signature") from None


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to a TOML config file (can include [xborrow] table).",
        ),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            help="Override logging verbosity (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL).",
        ),
    ] = None,
    output_format: Annotated[
        OutputFormat | None,
        typer.Option("--format", "-f", help="Output format (table or json)."),
    ] = None,
    show_config: Annotated[
        bool,
        typer.Option(
            "--show-config",
            help="Print effective config (with secrets redacted) and exit.",
        ),
    ] = False,
):
    """Load configuration and logging shared by every command."""
    if config_path:
        os.environ["XBORROW_CONFIG"] = str(config_path)

    init_kwargs: dict[str, Any] = {}
    if log_level is not None:
        init_kwargs["log_level"] = log_level.upper()
    if output_format is not None:
        init_kwargs["output_format"] = output_format

    settings = XBorrowSettings(**init_kwargs)

    setup_logging(settings.log_level)
    ctx.obj = AppState(settings=settings, logger=logging.getLogger("xborrow"))

    if show_config:
        typer.echo(json.dumps(settings.as_safe_dict(), indent=2))
        raise typer.Exit(code=0)

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


async def _rank_with_rates(
    state: AppState, registry: Registry, collateral: Currency, debt: Currency
) -> list[tuple[Vault, int]]:
    sdk = Sdk(registry, OnchainRateProvider(state.settings), state.settings)
    try:
        return await sdk.get_borrowing_vaults_with_rates_for(collateral, debt)
    finally:
        await sdk.close()


@app.command()
def vaults(
    ctx: typer.Context,
    collateral: Annotated[str, typer.Argument(help="Collateral symbol, e.g. WETH.")],
    debt: Annotated[str, typer.Argument(help="Debt symbol, e.g. USDC.")],
    collateral_chain: Annotated[
        int, typer.Option("--collateral-chain", help="Chain id holding the collateral.")
    ],
    debt_chain: Annotated[
        int, typer.Option("--debt-chain", help="Chain id to receive the debt on.")
    ],
):
    """Rank the vaults able to lend DEBT against COLLATERAL."""
    state: AppState = ctx.obj
    try:
        registry = _load_registry(state)
        collateral_currency = registry.currency(collateral_chain, collateral)
        debt_currency = registry.currency(debt_chain, debt)
        ranked = asyncio.run(
            _rank_with_rates(state, registry, collateral_currency, debt_currency)
        )
    except XBorrowError as e:
        state.logger.debug("vaults command failed", exc_info=True)
        raise _fail(str(e)) from e

    if state.settings.output_format == OutputFormat.JSON:
        typer.echo(
            json.dumps(
                [
                    {
                        "address": vault.address,
                        "chain_id": vault.chain_id,
                        "collateral": vault.collateral.symbol,
                        "debt": vault.debt.symbol,
                        "borrow_rate": str(rate),
                    }
                    for vault, rate in ranked
                ],
                indent=2,
            )
        )
    else:
        format_vaults_table([vault for vault, _ in ranked], dict(ranked))


def _plan(
    state: AppState,
    flow: Flow,
    vault_address: str,
    vault_chain: int,
    source_symbol: str,
    source_chain: int,
    source_amount: str,
    output_symbol: str,
    output_chain: int,
    output_amount: str,
    owner: str,
    deadline: int | None,
    signature_hex: str | None,
) -> None:
    signature = _parse_signature(signature_hex)
    if deadline is None:
        deadline = int(time.time()) + state.settings.permit_deadline_seconds

    try:
        registry = _load_registry(state)
        sdk = Sdk(registry, settings=state.settings)
        vault = registry.vault(vault_chain, vault_address)
        source = registry.currency(source_chain, source_symbol)
        output = registry.currency(output_chain, output_symbol)
        source_option, output_option = AMOUNT_OPTIONS[flow]
        source_units = _parse_amount(source_amount, source, source_option)
        output_units = _parse_amount(output_amount, output, output_option)

        actions: list[RouterActionParams]
        if flow == Flow.BORROW:
            actions = sdk.preview_deposit_and_borrow(
                vault, source_units, output_units, source, output, owner, deadline
            )
        else:
            actions = sdk.preview_payback_and_withdraw(
                vault, source_units, output_units, source, output, owner, deadline
            )

        signature_required = needs_signature(actions)
        permits = find_permits(actions)
        tx = None
        if not signature_required or signature is not None:
            tx = sdk.get_tx_details(actions, source_chain, owner, signature)
    except XBorrowError as e:
        state.logger.debug("%s command failed", flow.value, exc_info=True)
        raise _fail(str(e)) from e
    except ValueError as e:
        raise _fail(f"Invalid request: {e}") from e

    if state.settings.output_format == OutputFormat.JSON:
        typer.echo(
            json.dumps(
                {
                    "actions": [action_to_dict(a) for a in actions],
                    "needs_signature": signature_required,
                    "permits": [action_to_dict(p) for p in permits],
                    "tx": tx.to_dict() if tx is not None else None,
                },
                indent=2,
                default=str,
            )
        )
    else:
        format_plan(actions, signature_required, permits, tx)


@app.command()
def borrow(
    ctx: typer.Context,
    vault: Annotated[str, typer.Option("--vault", help="Vault address.")],
    vault_chain: Annotated[int, typer.Option("--vault-chain", help="Vault chain id.")],
    collateral: Annotated[str, typer.Option("--collateral", help="Collateral symbol.")],
    collateral_chain: Annotated[
        int, typer.Option("--collateral-chain", help="Chain id holding the collateral.")
    ],
    debt: Annotated[str, typer.Option("--debt", help="Debt symbol.")],
    debt_chain: Annotated[
        int, typer.Option("--debt-chain", help="Chain id to receive the debt on.")
    ],
    collateral_amount: Annotated[
        str, typer.Option("--collateral-amount", help="Collateral to deposit, e.g. 1.5.")
    ],
    debt_amount: Annotated[
        str, typer.Option("--debt-amount", help="Debt to borrow, e.g. 1000.")
    ],
    owner: Annotated[str, typer.Option("--owner", help="Position owner and sender.")],
    deadline: Annotated[
        int | None,
        typer.Option(
            "--deadline",
            help="Permit expiry (unix seconds). Defaults to now + permit_deadline_seconds.",
        ),
    ] = None,
    signature: Annotated[
        str | None,
        typer.Option("--signature", help="65-byte permit signature (r || s || v) in hex."),
    ] = None,
):
    """Plan depositing collateral and borrowing debt, then encode the router call."""
    _plan(
        ctx.obj,
        Flow.BORROW,
        vault,
        vault_chain,
        collateral,
        collateral_chain,
        collateral_amount,
        debt,
        debt_chain,
        debt_amount,
        owner,
        deadline,
        signature,
    )


@app.command()
def repay(
    ctx: typer.Context,
    vault: Annotated[str, typer.Option("--vault", help="Vault address.")],
    vault_chain: Annotated[int, typer.Option("--vault-chain", help="Vault chain id.")],
    debt: Annotated[str, typer.Option("--debt", help="Symbol repaid with.")],
    debt_chain: Annotated[
        int, typer.Option("--debt-chain", help="Chain id holding the repayment.")
    ],
    collateral: Annotated[str, typer.Option("--collateral", help="Collateral symbol.")],
    collateral_chain: Annotated[
        int,
        typer.Option("--collateral-chain", help="Chain id to receive the collateral on."),
    ],
    payback_amount: Annotated[
        str, typer.Option("--payback-amount", help="Debt to repay, e.g. 1000.")
    ],
    withdraw_amount: Annotated[
        str, typer.Option("--withdraw-amount", help="Collateral to withdraw, e.g. 1.5.")
    ],
    owner: Annotated[str, typer.Option("--owner", help="Position owner and sender.")],
    deadline: Annotated[
        int | None,
        typer.Option(
            "--deadline",
            help="Permit expiry (unix seconds). Defaults to now + permit_deadline_seconds.",
        ),
    ] = None,
    signature: Annotated[
        str | None,
        typer.Option("--signature", help="65-byte permit signature (r || s || v) in hex."),
    ] = None,
):
    """Plan repaying debt and withdrawing collateral, then encode the router call."""
    _plan(
        ctx.obj,
        Flow.REPAY,
        vault,
        vault_chain,
        debt,
        debt_chain,
        payback_amount,
        collateral,
        collateral_chain,
        withdraw_amount,
        owner,
        deadline,
        signature,
    )


def run() -> None:
    """Entrypoint used by the console script."""
    app()


if __name__ == "__main__":
    run()
