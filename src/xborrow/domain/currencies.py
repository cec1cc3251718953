"""Currency value objects: chain-native currencies and ERC20 tokens."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from eth_typing import ChecksumAddress

from .addresses import to_address


def _check_decimals(decimals: int) -> None:
    if not isinstance(decimals, int) or not 0 <= decimals < 255:
        raise ValueError(f"Invalid decimals: {decimals!r}")


@dataclass(frozen=True, eq=False)
class Token:
    """An ERC20 token identified by chain and address."""

    chain_id: int
    address: ChecksumAddress
    decimals: int
    symbol: str
    name: str | None = None

    def __post_init__(self) -> None:
        _check_decimals(self.decimals)
        object.__setattr__(self, "address", to_address(self.address))

    @property
    def is_native(self) -> bool:
        return False

    @property
    def wrapped(self) -> Token:
        return self

    @property
    def asset_kind(self) -> str:
        """Chain-independent identity used to match the same asset across chains."""
        return self.symbol

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Token):
            return NotImplemented
        return self.chain_id == other.chain_id and self.address == other.address

    def __hash__(self) -> int:
        return hash((Token, self.chain_id, self.address))

    def __str__(self) -> str:
        return f"{self.symbol}@{self.chain_id}"


@dataclass(frozen=True, eq=False)
class NativeCurrency:
    """The gas currency of a chain (e.g. Ether), usable through its wrapped token."""

    chain_id: int
    decimals: int
    symbol: str
    wrapped: Token
    name: str | None = None

    def __post_init__(self) -> None:
        _check_decimals(self.decimals)
        if self.wrapped.chain_id != self.chain_id:
            raise ValueError(
                f"Wrapped token {self.wrapped} is not on chain {self.chain_id}"
            )

    @property
    def is_native(self) -> bool:
        return True

    @property
    def asset_kind(self) -> str:
        return self.wrapped.symbol

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NativeCurrency):
            return NotImplemented
        return self.chain_id == other.chain_id

    def __hash__(self) -> int:
        return hash((NativeCurrency, self.chain_id))

    def __str__(self) -> str:
        return f"{self.symbol}@{self.chain_id}"


Currency = Union[NativeCurrency, Token]
