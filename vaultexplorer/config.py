"""
Centralized configuration for Vault Explorer.

All configuration is loaded from environment variables with sensible defaults.
Vault aliases (which vaults to open together, and which kinds of secrets they
hold) come from a JSON file.

Usage:
    from vaultexplorer.config import get_config, load_vault_aliases
    cfg = get_config()
    print(cfg.changed_by)        # "HOST\\user" or $VAULTEXPLORER_CHANGED_BY
    aliases = load_vault_aliases(cfg.aliases_file)
"""

from __future__ import annotations

import getpass
import json
import logging
import os
import socket
from dataclasses import dataclass, field
from pathlib import Path

from vaultexplorer.secrets.content import MAX_VALUE_SIZE

logger = logging.getLogger(__name__)


def _default_changed_by() -> str:
    try:
        user = getpass.getuser()
    except (OSError, KeyError):
        user = "unknown"
    return f"{socket.gethostname()}\\{user}"


@dataclass(frozen=True)
class SecretKind:
    """A family of secrets within a vault alias, with its own naming rule."""

    alias: str
    name_regex: str = r"^[0-9a-zA-Z-]{1,127}$"
    description: str = ""


@dataclass(frozen=True)
class VaultAlias:
    """A named group of vaults shown together."""

    alias: str
    vault_names: tuple[str, ...] = ()
    secret_kinds: tuple[SecretKind, ...] = ()

    def secret_kind(self, alias: str) -> SecretKind | None:
        return next((k for k in self.secret_kinds if k.alias == alias), None)


@dataclass(frozen=True)
class Config:
    """Top-level Vault Explorer configuration."""

    workspace: Path = field(default_factory=lambda: Path.home() / ".vaultexplorer")
    aliases_file: Path = field(
        default_factory=lambda: Path.home() / ".vaultexplorer" / "VaultAliases.json"
    )

    # Stamped into the ChangedBy tag of every write
    changed_by: str = field(default_factory=_default_changed_by)

    # Largest raw value accepted for a secret, in bytes
    max_value_bytes: int = MAX_VALUE_SIZE


# Singleton
_config: Config | None = None


def get_config() -> Config:
    """Get or create the singleton config from environment variables."""
    global _config
    if _config is not None:
        return _config
    _config = _load_from_env()
    return _config


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {value}")
    return value


def _load_from_env() -> Config:
    """Load configuration from environment variables."""
    workspace = Path(
        os.environ.get("VAULTEXPLORER_WORKSPACE", Path.home() / ".vaultexplorer")
    )
    aliases_file = Path(
        os.environ.get("VAULTEXPLORER_ALIASES_FILE", workspace / "VaultAliases.json")
    )

    return Config(
        workspace=workspace,
        aliases_file=aliases_file,
        changed_by=os.environ.get("VAULTEXPLORER_CHANGED_BY") or _default_changed_by(),
        max_value_bytes=_int_env("VAULTEXPLORER_MAX_VALUE_BYTES", MAX_VALUE_SIZE),
    )


def reset_config() -> None:
    """Reset the singleton config (for testing)."""
    global _config
    _config = None


def load_vault_aliases(path: Path | str) -> list[VaultAlias]:
    """Read vault aliases from a JSON file.

    Expected layout:
        [{"alias": "Prod", "vaultNames": ["kv-prod"],
          "secretKinds": [{"alias": "Service.Secret", "nameRegex": "^svc-[a-z0-9-]+$"}]}]

    Raises:
        FileNotFoundError: the file does not exist.
        ValueError: the file is not valid JSON or an entry is missing ``alias``.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Vault aliases file not found at {path}")
    try:
        entries = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Vault aliases file {path} is not valid JSON: {e}") from e
    if not isinstance(entries, list):
        raise ValueError(f"Vault aliases file {path} must contain a JSON list")

    aliases: list[VaultAlias] = []
    for i, entry in enumerate(entries):
        if not isinstance(entry, dict) or not entry.get("alias"):
            raise ValueError(f"Vault alias #{i} in {path} has no 'alias'")
        kinds = tuple(
            SecretKind(
                alias=k["alias"],
                name_regex=k.get("nameRegex") or SecretKind.name_regex,
                description=k.get("description", ""),
            )
            for k in entry.get("secretKinds", [])
        )
        aliases.append(
            VaultAlias(
                alias=entry["alias"],
                vault_names=tuple(entry.get("vaultNames", [])),
                secret_kinds=kinds,
            )
        )
    logger.debug("Loaded %d vault alias(es) from %s", len(aliases), path)
    return aliases
