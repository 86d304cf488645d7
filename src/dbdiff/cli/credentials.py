"""
Snapshot connection settings from arguments, environment or Vault.

Precedence per field: command-line argument, then ``DBDIFF_<SIDE>_<FIELD>``
environment variable, then default. With ``--use-vault`` everything comes
from Vault.
"""

import argparse
import logging
import os

import requests

from utils.database_types import DatabaseType
from utils.sql_safety import validate_identifier
from utils.vault_client import VaultClient

from ..catalog.connection import ConnectionConfig
from .parser import SNAPSHOT_SIDES

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Raised when the command line and environment do not describe a usable run."""

    pass


def resolve_db_type(args: argparse.Namespace) -> DatabaseType:
    value = args.db_type or os.getenv("DBDIFF_DB_TYPE", DatabaseType.POSTGRESQL.value)
    try:
        return DatabaseType(value.lower())
    except ValueError as e:
        raise ConfigurationError(f"Unsupported database type: {value}") from e


def resolve_schema(args: argparse.Namespace, db_type: DatabaseType) -> str:
    schema = args.schema or os.getenv("DBDIFF_SCHEMA") or db_type.default_schema
    try:
        validate_identifier(schema)
    except ValueError as e:
        raise ConfigurationError(str(e)) from e
    return schema


def resolve_tables(args: argparse.Namespace) -> list[str] | None:
    """Table allow-list from --tables/--tables-file, or None for all tables."""
    if args.tables_file:
        with open(args.tables_file) as f:
            names = (line.strip() for line in f)
            return [name for name in names if name and not name.startswith("#")]
    if args.tables:
        return [name.strip() for name in args.tables.split(",") if name.strip()]
    return None


def _config_from_env(args: argparse.Namespace, side: str) -> ConnectionConfig:
    env_prefix = f"DBDIFF_{side.upper()}"

    def setting(field: str, default: str | None = None) -> str | None:
        return getattr(args, f"{side}_{field}") or os.getenv(f"{env_prefix}_{field.upper()}", default)

    password = setting("password")
    if not password:
        raise ConfigurationError(f"{side} database password not provided")

    port = setting("port")
    return ConnectionConfig(
        host=setting("host", "localhost"),
        database=setting("database") or "",
        user=setting("user") or "",
        password=password,
        port=int(port) if port else None,
    )


def _config_from_vault(client: VaultClient, side: str) -> ConnectionConfig:
    creds = client.get_snapshot_credentials(side)
    return ConnectionConfig(
        host=creds["host"],
        database=creds["database"],
        user=creds["username"],
        password=creds["password"],
        port=int(creds["port"]) if creds.get("port") else None,
    )


def get_snapshot_configs(args: argparse.Namespace) -> tuple[ConnectionConfig, ConnectionConfig]:
    """
    Build the connection settings of both snapshots

    Args:
        args: Parsed command-line arguments

    Returns:
        Tuple of (before_config, after_config)

    Raises:
        ConfigurationError: If a password is missing or Vault cannot be read
    """
    if args.use_vault:
        try:
            client = VaultClient()
            configs = tuple(_config_from_vault(client, side) for side in SNAPSHOT_SIDES)
        except (ValueError, requests.RequestException) as e:
            raise ConfigurationError(f"Failed to fetch credentials from Vault: {e}") from e
        logger.info("Successfully fetched credentials from Vault")
        return configs

    before_config = _config_from_env(args, "before")
    after_config = _config_from_env(args, "after")
    for side, config in zip(SNAPSHOT_SIDES, (before_config, after_config)):
        if not config.database:
            raise ConfigurationError(f"{side} database name not provided")
    return before_config, after_config
