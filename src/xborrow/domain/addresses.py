from __future__ import annotations

from eth_typing import ChecksumAddress
from web3 import Web3


def to_address(value: str) -> ChecksumAddress:
    """Normalize a hex address to its EIP-55 checksum form.

    Raises:
        ValueError: If ``value`` is not a 20-byte hex address
    """
    if not isinstance(value, str) or not Web3.is_address(value.lower()):
        raise ValueError(f"Invalid address: {value!r}")
    return Web3.to_checksum_address(value.lower())


def short_address(address: str) -> str:
    """Truncate an address for display."""
    return f"{address[:6]}...{address[-4:]}"
