"""Per-chain catalog of routers, tokens and vaults.

The registry is built once from a TOML document and is read-only afterwards.
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any, Iterable, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .constants import CONNEXT_DOMAINS
from .domain import Chain, Currency, NativeCurrency, Token, Vault, to_address
from .errors import RegistryError

logger = logging.getLogger(__name__)


class TokenEntry(BaseModel):
    symbol: str
    address: str
    decimals: int = Field(ge=0, lt=255)
    name: str | None = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("address")
    @classmethod
    def checksum_address(cls, v: str) -> str:
        return to_address(v)


class NativeEntry(BaseModel):
    symbol: str
    wrapped: str
    decimals: int = Field(default=18, ge=0, lt=255)
    name: str | None = None

    model_config = ConfigDict(extra="forbid")


class VaultEntry(BaseModel):
    address: str
    collateral: str
    debt: str

    model_config = ConfigDict(extra="forbid")

    @field_validator("address")
    @classmethod
    def checksum_address(cls, v: str) -> str:
        return to_address(v)


class ChainEntry(BaseModel):
    chain_id: int
    name: str
    router: str
    connext_domain: int | None = None
    native: NativeEntry | None = None
    tokens: list[TokenEntry] = Field(default_factory=list)
    vaults: list[VaultEntry] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @field_validator("router")
    @classmethod
    def checksum_router(cls, v: str) -> str:
        return to_address(v)


class RegistryDocument(BaseModel):
    chains: list[ChainEntry] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")


class Registry:
    """Immutable lookup tables of chains, currencies and vaults."""

    def __init__(
        self,
        chains: Iterable[Chain],
        tokens: Iterable[Token] = (),
        natives: Iterable[NativeCurrency] = (),
        vaults: Iterable[Vault] = (),
    ):
        self._chains: dict[int, Chain] = {}
        for chain in chains:
            if chain.chain_id in self._chains:
                raise RegistryError(f"Duplicate chain {chain.chain_id} in registry")
            self._chains[chain.chain_id] = chain

        self._tokens: dict[int, tuple[Token, ...]] = {cid: () for cid in self._chains}
        for token in tokens:
            self._require_chain(token.chain_id)
            self._tokens[token.chain_id] += (token,)

        self._natives: dict[int, NativeCurrency] = {}
        for native in natives:
            self._require_chain(native.chain_id)
            self._natives[native.chain_id] = native

        self._vaults: dict[int, tuple[Vault, ...]] = {cid: () for cid in self._chains}
        for vault in vaults:
            self._require_chain(vault.chain_id)
            self._vaults[vault.chain_id] += (vault,)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Registry:
        """Build a registry from a parsed ``[[chains]]`` document."""
        try:
            document = RegistryDocument.model_validate(data)
        except ValidationError as e:
            raise RegistryError(f"Invalid registry document: {e}") from e

        chains: list[Chain] = []
        tokens: list[Token] = []
        natives: list[NativeCurrency] = []
        vaults: list[Vault] = []

        for entry in document.chains:
            domain = entry.connext_domain
            if domain is None:
                domain = CONNEXT_DOMAINS.get(entry.chain_id)
            if domain is None:
                raise RegistryError(
                    f"connext_domain is required for chain {entry.chain_id} ({entry.name})"
                )
            chains.append(
                Chain(
                    chain_id=entry.chain_id,
                    name=entry.name,
                    router=to_address(entry.router),
                    connext_domain=domain,
                )
            )

            by_symbol: dict[str, Token] = {}
            for token_entry in entry.tokens:
                if token_entry.symbol in by_symbol:
                    raise RegistryError(
                        f"Duplicate token {token_entry.symbol} on chain {entry.chain_id}"
                    )
                token = Token(
                    chain_id=entry.chain_id,
                    address=to_address(token_entry.address),
                    decimals=token_entry.decimals,
                    symbol=token_entry.symbol,
                    name=token_entry.name,
                )
                by_symbol[token.symbol] = token
                tokens.append(token)

            def _resolve(symbol: str) -> Token:
                try:
                    return by_symbol[symbol]
                except KeyError:
                    raise RegistryError(
                        f"Unknown token {symbol!r} referenced on chain {entry.chain_id}"
                    ) from None

            if entry.native is not None:
                natives.append(
                    NativeCurrency(
                        chain_id=entry.chain_id,
                        decimals=entry.native.decimals,
                        symbol=entry.native.symbol,
                        wrapped=_resolve(entry.native.wrapped),
                        name=entry.native.name,
                    )
                )

            for vault_entry in entry.vaults:
                vaults.append(
                    Vault.of(
                        vault_entry.address,
                        collateral=_resolve(vault_entry.collateral),
                        debt=_resolve(vault_entry.debt),
                    )
                )

        registry = cls(chains, tokens=tokens, natives=natives, vaults=vaults)
        logger.debug(
            "Loaded registry with %d chain(s), %d token(s), %d vault(s)",
            len(chains),
            len(tokens),
            len(vaults),
        )
        return registry

    @classmethod
    def from_toml(cls, path: str | Path) -> Registry:
        """Load a registry from a TOML file.

        Raises:
            RegistryError: If the file is missing, unparsable or inconsistent
        """
        p = Path(path)
        try:
            with p.open("rb") as f:
                data = tomllib.load(f)
        except FileNotFoundError as e:
            raise RegistryError(f"Registry file not found: {p}") from e
        except tomllib.TOMLDecodeError as e:
            raise RegistryError(f"Registry file {p} is not valid TOML: {e}") from e
        return cls.from_dict(data)

    def _require_chain(self, chain_id: int) -> Chain:
        try:
            return self._chains[chain_id]
        except KeyError:
            raise RegistryError(f"Chain {chain_id} is not in the registry") from None

    @property
    def chain_ids(self) -> tuple[int, ...]:
        return tuple(self._chains)

    def chain(self, chain_id: int) -> Chain:
        return self._require_chain(chain_id)

    def router(self, chain_id: int) -> str:
        return self._require_chain(chain_id).router

    def connext_domain(self, chain_id: int) -> int:
        return self._require_chain(chain_id).connext_domain

    def tokens(self, chain_id: int) -> tuple[Token, ...]:
        self._require_chain(chain_id)
        return self._tokens[chain_id]

    def token(self, chain_id: int, symbol: str) -> Token:
        for token in self.tokens(chain_id):
            if token.symbol == symbol:
                return token
        raise RegistryError(f"Token {symbol!r} not found on chain {chain_id}")

    def native(self, chain_id: int) -> NativeCurrency:
        self._require_chain(chain_id)
        try:
            return self._natives[chain_id]
        except KeyError:
            raise RegistryError(
                f"No native currency configured for chain {chain_id}"
            ) from None

    def currency(self, chain_id: int, symbol: str) -> Currency:
        """Look up a currency by symbol, native currency first."""
        native = self._natives.get(chain_id)
        if native is not None and native.symbol == symbol:
            return native
        return self.token(chain_id, symbol)

    def vaults(self, chain_id: int) -> tuple[Vault, ...]:
        self._require_chain(chain_id)
        return self._vaults[chain_id]

    def vault(self, chain_id: int, address: str) -> Vault:
        normalized = to_address(address)
        for vault in self.vaults(chain_id):
            if vault.address == normalized:
                return vault
        raise RegistryError(f"Vault {normalized} not found on chain {chain_id}")

    def find_vaults_by_currencies(
        self, collateral: Currency, debt: Currency
    ) -> list[Vault]:
        """Return candidate vaults for a collateral/debt pair.

        Vaults native to the collateral chain come first, followed by vaults
        native to the debt chain when it differs. A vault matches when its
        collateral and debt are the same assets as requested, whichever chain
        the request's currencies live on.
        """
        chain_ids = [collateral.chain_id]
        if debt.chain_id != collateral.chain_id:
            chain_ids.append(debt.chain_id)

        candidates: list[Vault] = []
        for chain_id in chain_ids:
            if chain_id not in self._chains:
                logger.debug("Chain %s not in registry, no vaults considered", chain_id)
                continue
            candidates.extend(
                vault
                for vault in self._vaults[chain_id]
                if vault.collateral.asset_kind == collateral.asset_kind
                and vault.debt.asset_kind == debt.asset_kind
            )
        return candidates
