"""Rich console rendering of ranked vaults and action plans."""

from __future__ import annotations

from dataclasses import fields
from decimal import Decimal
from typing import Any, Mapping, Sequence

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .constants import RATE_DECIMALS
from .domain import (
    PermitParams,
    RouterActionParams,
    Vault,
    XTransferWithCallParams,
    short_address,
)
from .encoding import TxDetails


def _format_rate(rate: int) -> str:
    """Format a ray-scaled APR as a percentage."""
    apr = Decimal(rate) / Decimal(10**RATE_DECIMALS) * 100
    return f"{apr:.4f}%"


def _describe(action: RouterActionParams) -> str:
    parts = []
    for f in fields(action):
        if f.name == "inner_actions":
            continue
        value = getattr(action, f.name)
        if isinstance(value, str) and value.startswith("0x"):
            value = short_address(value)
        elif isinstance(value, int):
            value = f"{value:,}"
        parts.append(f"{f.name}={value}")
    return ", ".join(parts)


def action_to_dict(action: RouterActionParams) -> dict[str, Any]:
    """JSON-friendly view of an action, nested actions included."""
    data: dict[str, Any] = {"action": action.action.name}
    for f in fields(action):
        value = getattr(action, f.name)
        if f.name == "inner_actions":
            value = [action_to_dict(inner) for inner in value]
        data[f.name] = value
    return data


def format_vaults_table(vaults: Sequence[Vault], rates: Mapping[Vault, int]) -> None:
    """Print ranked vaults, best first."""
    console = Console()

    if not vaults:
        console.print("[yellow]No vault found for this pair.[/]")
        return

    table = Table(expand=True)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Vault", style="cyan", no_wrap=True)
    table.add_column("Chain", justify="right")
    table.add_column("Collateral")
    table.add_column("Debt")
    table.add_column("Borrow APR", justify="right", style="yellow")

    for rank, vault in enumerate(vaults, start=1):
        rate = rates.get(vault)
        table.add_row(
            str(rank),
            short_address(vault.address),
            str(vault.chain_id),
            vault.collateral.symbol,
            vault.debt.symbol,
            _format_rate(rate) if rate is not None else "-",
            style="bold" if rank == 1 else None,
        )

    console.print(Panel(table, title="[bold]Ranked Vaults[/]", border_style="blue"))


def format_plan(
    actions: Sequence[RouterActionParams],
    signature_required: bool,
    permits: Sequence[PermitParams],
    tx: TxDetails | None,
) -> None:
    """Print the action plan, its permit requirements and the encoded transaction."""
    console = Console()

    plan_table = Table(expand=True, show_lines=False)
    plan_table.add_column("#", justify="right", style="dim")
    plan_table.add_column("Action", style="cyan", no_wrap=True)
    plan_table.add_column("Arguments")

    for index, action in enumerate(actions):
        plan_table.add_row(str(index), action.action.name, _describe(action))
        if isinstance(action, XTransferWithCallParams):
            for inner_index, inner in enumerate(action.inner_actions):
                plan_table.add_row(
                    f"{index}.{inner_index}",
                    f"  └ {inner.action.name}",
                    _describe(inner),
                    style="dim",
                )

    plan_panel = Panel(plan_table, title="[bold]Action Plan[/]", border_style="cyan")

    if signature_required:
        lines = [f"[yellow]Signature required for {len(permits)} permit(s):[/]"]
        lines.extend(
            f"  {p.action.name} vault={p.vault} owner={p.owner} "
            f"spender={p.spender} amount={p.amount} deadline={p.deadline}"
            for p in permits
        )
        signature_text = "\n".join(lines)
    else:
        signature_text = "[green]No signature required[/]"
    signature_panel = Panel(signature_text, title="[bold]Permits[/]", border_style="yellow")

    if tx is None:
        tx_body: Group | Text = Text(
            "Provide --signature to encode the transaction.", style="dim"
        )
    else:
        tx_table = Table(show_header=False, box=None, padding=(0, 1))
        tx_table.add_column("Key", style="dim")
        tx_table.add_column("Value", style="cyan")
        tx_table.add_row("Chain", str(tx.chain_id))
        tx_table.add_row("To", tx.to)
        tx_table.add_row("From", tx.from_)
        tx_body = Group(tx_table, "", Text(tx.data, style="dim", overflow="fold"))
    tx_panel = Panel(tx_body, title="[bold]Transaction[/]", border_style="dim")

    console.print()
    console.print(
        Panel(
            Group(plan_panel, "", signature_panel, "", tx_panel),
            title="[bold white]xborrow[/]",
            border_style="white",
            padding=(1, 2),
        )
    )
    console.print()
