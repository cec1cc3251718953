"""Settings module with unified configuration precedence: CLI > ENV > CONFIG FILE."""

from __future__ import annotations

import os
import tomllib
from enum import Enum
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit, urlunsplit

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

load_dotenv()


class OutputFormat(str, Enum):
    TABLE = "table"
    JSON = "json"


class XBorrowSettings(BaseSettings):
    """Single source of truth for configuration. Values may come from:
    - CLI (init kwargs)
    - ENV / .env (prefixed with XBORROW_)
    - Config file (TOML), lowest precedence

    Do not read os.environ or files elsewhere in the codebase.
    """

    # --- catalog ---
    registry_path: Path | None = None

    # --- RPC settings ---
    rpc_urls: dict[int, str] = Field(default_factory=dict)
    rate_query_timeout: float = Field(
        default=15.0,
        gt=0,
        description="Seconds to wait for all borrow rate queries before giving up.",
    )

    # --- planning ---
    permit_deadline_seconds: int = Field(
        default=86_400,
        gt=0,
        description="Validity window of permits when no explicit deadline is given.",
    )

    # --- output ---
    output_format: OutputFormat = OutputFormat.TABLE
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="XBORROW_",
        env_file=".env",
        extra="ignore",  # ignore unknown keys in env/config file
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Custom config-file source with explicit precedence: CLI > ENV > FILE."""
        env_cfg = os.environ.get("XBORROW_CONFIG")
        cfg_path = Path(env_cfg) if env_cfg else None

        class TomlConfigSource(PydanticBaseSettingsSource):
            def __init__(self, settings_cls: type[BaseSettings], path: Path | None):
                super().__init__(settings_cls)
                self._path = path

            def get_field_value(
                self, field: Any, field_name: str
            ) -> tuple[Any, str, bool]:
                return None, "", False

            def __call__(self) -> dict[str, Any]:
                if not self._path:
                    # Try default locations
                    local_config = Path("xborrow.toml")
                    user_config = Path.home() / ".config" / "xborrow" / "config.toml"
                    if local_config.exists():
                        self._path = local_config
                    elif user_config.exists():
                        self._path = user_config
                    else:
                        return {}

                if not self._path.exists():
                    return {}

                with self._path.open("rb") as f:
                    data = tomllib.load(f)  # supports top-level or [xborrow]
                body = data.get("xborrow", data)
                if not isinstance(body, dict):
                    return {}

                # TOML keys are always strings; chain ids are ints
                rpc_urls = body.get("rpc_urls")
                if isinstance(rpc_urls, dict):
                    body["rpc_urls"] = {int(k): v for k, v in rpc_urls.items()}

                registry_path = body.get("registry_path")
                if isinstance(registry_path, str) and not Path(registry_path).is_absolute():
                    body["registry_path"] = str(self._path.parent / registry_path)

                return body

        return (
            init_settings,  # CLI (highest)
            env_settings,  # ENV
            dotenv_settings,  # .env
            TomlConfigSource(settings_cls, cfg_path),  # CONFIG (lowest)
            file_secret_settings,  # optional secrets dir
        )

    def as_safe_dict(self) -> dict[str, Any]:
        """Return the config as a dict with RPC credentials redacted.

        Hosted RPC URLs usually embed an API key in their path or query.
        """
        data = self.model_dump(mode="json")
        data["rpc_urls"] = {
            chain_id: _redact_url(url) for chain_id, url in self.rpc_urls.items()
        }
        return data

    @property
    def registry_path_required(self) -> Path:
        """Get registry_path, raising ValueError if not set."""
        if self.registry_path is None:
            raise ValueError("registry_path must be configured")
        return self.registry_path

    def rpc_url_for(self, chain_id: int) -> str:
        """Get the RPC endpoint of a chain, raising ValueError if not set."""
        try:
            return self.rpc_urls[chain_id]
        except KeyError:
            raise ValueError(f"No RPC URL configured for chain {chain_id}") from None


def _redact_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.path.strip("/") and not parts.query:
        return url
    return urlunsplit((parts.scheme, parts.netloc, "/***redacted***", "", ""))
