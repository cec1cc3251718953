from __future__ import annotations

import json
from pathlib import Path

ABIS_DIR = Path(__file__).parent / "abis"

ROUTER_ABI_PATH = ABIS_DIR / "Router.json"
BORROWING_VAULT_ABI_PATH = ABIS_DIR / "BorrowingVault.json"
LENDING_PROVIDER_ABI_PATH = ABIS_DIR / "ILendingProvider.json"


def load_abi(path: str | Path) -> list[dict]:
    """Load an ABI from a JSON file and return its "abi" field.

    Args:
        path: Path to the JSON file containing an "abi" field.

    Returns:
        ABI as a list of dictionaries.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
        KeyError: If the JSON does not contain an "abi" field.
    """
    p = Path(path)
    with p.open() as f:
        data = json.load(f)
    return data["abi"]


def load_router_abi() -> list[dict]:
    """Load the router ABI (``xBundle`` entry point)."""
    return load_abi(ROUTER_ABI_PATH)


def load_borrowing_vault_abi() -> list[dict]:
    """Load the BorrowingVault ABI."""
    return load_abi(BORROWING_VAULT_ABI_PATH)


def load_lending_provider_abi() -> list[dict]:
    """Load the ILendingProvider ABI."""
    return load_abi(LENDING_PROVIDER_ABI_PATH)
