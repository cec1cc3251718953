from __future__ import annotations

from dataclasses import dataclass

from eth_typing import ChecksumAddress

from .addresses import to_address
from .currencies import Token


@dataclass(frozen=True)
class Chain:
    """A network the router is deployed on."""

    chain_id: int
    name: str
    router: ChecksumAddress
    connext_domain: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "router", to_address(self.router))


@dataclass(frozen=True)
class Vault:
    """A lending market pairing one collateral and one debt asset on a single chain."""

    address: ChecksumAddress
    chain_id: int
    collateral: Token
    debt: Token

    def __post_init__(self) -> None:
        object.__setattr__(self, "address", to_address(self.address))
        if not (self.collateral.chain_id == self.debt.chain_id == self.chain_id):
            raise ValueError(
                f"Vault {self.address} on chain {self.chain_id} must hold "
                f"collateral and debt on its own chain "
                f"(got {self.collateral}, {self.debt})"
            )

    @classmethod
    def of(cls, address: str, collateral: Token, debt: Token) -> Vault:
        """Build a vault living on the collateral's chain."""
        return cls(
            address=to_address(address),
            chain_id=collateral.chain_id,
            collateral=collateral,
            debt=debt,
        )

    def __str__(self) -> str:
        return (
            f"{self.collateral.symbol}/{self.debt.symbol} vault "
            f"{self.address} (chain {self.chain_id})"
        )
