"""Client configuration via dataclass (no pydantic -- instant construction)."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from ensres.protocol.name import DEFAULT_MANAGED_TLD

logger = logging.getLogger(__name__)

_DEFAULT_RPC_URL = "https://ethereum-rpc.publicnode.com"
_DEFAULT_CHAIN_ID = 1
_DEFAULT_CCIP_READ = True
_DEFAULT_MAX_CCIP_REDIRECTS = 4
_DEFAULT_REQUEST_TIMEOUT = 30.0


@dataclass
class ClientConfig:
    """Configuration for an :class:`~ensres.sdk.client.EnsClient`.

    ``rpc_url``, ``chain_id`` and ``managed_tld`` can be overridden via
    environment variables (``ENSRES_RPC_URL``, ``ENSRES_CHAIN_ID``,
    ``ENSRES_MANAGED_TLD``), a ``config.toml`` in ``ENSRES_HOME`` (default
    ``~/.ensres``), or constructor arguments.

    Priority (highest wins): constructor arg > env var > config.toml > default.

    ``contracts`` overrides entries of the built-in chain address table; it
    must be complete for chains without a built-in table.
    """

    rpc_url: str | None = None
    chain_id: int | None = None
    managed_tld: str | None = None
    ccip_read: bool | None = None
    max_ccip_redirects: int | None = None
    request_timeout: float | None = None
    contracts: dict[str, str] = field(default_factory=dict)
    config_dir: Path | str | None = None

    def __post_init__(self) -> None:
        ensres_home = os.getenv("ENSRES_HOME")
        if self.config_dir is None:
            self.config_dir = Path(ensres_home) if ensres_home else Path.home() / ".ensres"
        else:
            self.config_dir = Path(self.config_dir)

        # Env vars fill in whatever the constructor left unset
        if self.rpc_url is None:
            self.rpc_url = os.getenv("ENSRES_RPC_URL")
        if self.chain_id is None:
            env_chain = os.getenv("ENSRES_CHAIN_ID")
            if env_chain:
                self.chain_id = _parse_chain_id(env_chain)
        if self.managed_tld is None:
            self.managed_tld = os.getenv("ENSRES_MANAGED_TLD")

        # Load optional config.toml (lowest priority -- only fills gaps)
        config_path = Path(self.config_dir) / "config.toml"
        if config_path.exists():
            self._load_config_file(config_path)

        if self.rpc_url is None:
            self.rpc_url = _DEFAULT_RPC_URL
        if self.chain_id is None:
            self.chain_id = _DEFAULT_CHAIN_ID
        if self.managed_tld is None:
            self.managed_tld = DEFAULT_MANAGED_TLD
        if self.ccip_read is None:
            self.ccip_read = _DEFAULT_CCIP_READ
        if self.max_ccip_redirects is None:
            self.max_ccip_redirects = _DEFAULT_MAX_CCIP_REDIRECTS
        if self.request_timeout is None:
            self.request_timeout = _DEFAULT_REQUEST_TIMEOUT

        self._validate()

    def _validate(self) -> None:
        if not isinstance(self.chain_id, int) or self.chain_id <= 0:
            raise ValueError(f"Invalid chain_id {self.chain_id!r}: must be a positive integer")
        if not self.managed_tld or "." in self.managed_tld:
            raise ValueError(
                f"Invalid managed_tld {self.managed_tld!r}: must be a single label"
            )
        self.managed_tld = self.managed_tld.lower()
        if self.max_ccip_redirects < 0:
            raise ValueError("max_ccip_redirects must not be negative")
        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be positive")

    def _load_config_file(self, path: Path) -> None:
        """Load optional config.toml, applying values for fields still unset."""
        try:
            import tomllib
        except ModuleNotFoundError:
            import tomli as tomllib  # type: ignore[no-redef]  # Python 3.10 fallback

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except Exception:
            logger.warning("Failed to load config file %s", path, exc_info=True)
            return

        section = data.get("client", {})

        if self.rpc_url is None and "rpc_url" in section:
            self.rpc_url = section["rpc_url"]
        if self.chain_id is None and "chain_id" in section:
            self.chain_id = _parse_chain_id(section["chain_id"])
        if self.managed_tld is None and "managed_tld" in section:
            self.managed_tld = section["managed_tld"]
        if self.ccip_read is None and "ccip_read" in section:
            self.ccip_read = bool(section["ccip_read"])
        if self.max_ccip_redirects is None and "max_ccip_redirects" in section:
            self.max_ccip_redirects = int(section["max_ccip_redirects"])
        if self.request_timeout is None and "request_timeout" in section:
            self.request_timeout = float(section["request_timeout"])

        # Explicit contracts win over the file's entries
        file_contracts = data.get("contracts", {})
        self.contracts = {**file_contracts, **self.contracts}


def _parse_chain_id(value: str | int) -> int:
    try:
        return int(value, 0) if isinstance(value, str) else int(value)
    except ValueError:
        raise ValueError(f"Invalid chain_id {value!r}: must be an integer") from None
