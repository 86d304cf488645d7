"""
HashiCorp Vault client for fetching snapshot credentials

Reads from the KV v2 secrets engine. Each snapshot ("before", "after") has
its own secret under ``secret/dbdiff/<side>``.
"""

import logging
import os
import re
from typing import Any

import requests

logger = logging.getLogger(__name__)

SAFE_SECRET_PATH = re.compile(r"^[a-zA-Z0-9/_-]+$")
SNAPSHOT_SIDES = ("before", "after")
REQUIRED_FIELDS = ("host", "database", "username", "password")


class VaultClient:
    """
    HashiCorp Vault client for secrets management
    """

    def __init__(
        self,
        vault_addr: str | None = None,
        vault_token: str | None = None,
        namespace: str | None = None,
        mount_point: str = "secret",
    ):
        """
        Initialize Vault client

        Args:
            vault_addr: Vault server address (default: VAULT_ADDR env var)
            vault_token: Vault authentication token (default: VAULT_TOKEN env var)
            namespace: Vault namespace (Vault Enterprise only)
            mount_point: KV v2 mount point

        Raises:
            ValueError: If vault_addr or vault_token are not provided
        """
        self.vault_addr = vault_addr or os.getenv("VAULT_ADDR")
        self.vault_token = vault_token or os.getenv("VAULT_TOKEN")
        self.mount_point = mount_point

        if not self.vault_addr:
            raise ValueError(
                "Vault address not provided. Set VAULT_ADDR environment variable "
                "or pass vault_addr parameter."
            )
        if not self.vault_token:
            raise ValueError(
                "Vault token not provided. Set VAULT_TOKEN environment variable "
                "or pass vault_token parameter."
            )

        self.vault_addr = self.vault_addr.rstrip("/")
        self.headers = {"X-Vault-Token": self.vault_token}
        if namespace:
            self.headers["X-Vault-Namespace"] = namespace

        logger.debug(f"Initialized Vault client for {self.vault_addr}")

    def get_secret(self, secret_path: str) -> dict[str, Any]:
        """
        Fetch secret data from the KV v2 engine

        Args:
            secret_path: Path below the mount point (e.g., "dbdiff/before")

        Returns:
            Dictionary containing secret data

        Raises:
            ValueError: If secret_path is invalid or the secret is empty/missing
            requests.RequestException: If the Vault request fails
        """
        if not secret_path or ".." in secret_path or not SAFE_SECRET_PATH.match(secret_path):
            raise ValueError(
                f"Invalid secret_path: {secret_path!r}. "
                "Only alphanumeric characters, slashes, underscores, and hyphens are allowed."
            )

        url = f"{self.vault_addr}/v1/{self.mount_point}/data/{secret_path.strip('/')}"
        logger.debug(f"Fetching secret from: {url}")

        response = requests.get(url, headers=self.headers, timeout=10)
        if response.status_code == 404:
            raise ValueError(f"Secret not found at path: {secret_path}")
        response.raise_for_status()

        secret_data = response.json().get("data", {}).get("data", {})
        if not secret_data:
            raise ValueError(f"No data found in secret at path: {secret_path}")

        return secret_data

    def get_snapshot_credentials(self, side: str) -> dict[str, Any]:
        """
        Fetch connection settings for one snapshot

        Args:
            side: "before" or "after"

        Returns:
            Dictionary with host, port (optional), database, username, password

        Raises:
            ValueError: If side is unknown or required fields are missing
        """
        if side not in SNAPSHOT_SIDES:
            raise ValueError(f"Unknown snapshot side: {side!r}")

        secret_data = self.get_secret(f"dbdiff/{side}")

        missing = [field for field in REQUIRED_FIELDS if field not in secret_data]
        if missing:
            raise ValueError(
                f"Missing required fields in {side} secret: {', '.join(missing)}"
            )

        logger.info(f"Fetched {side} snapshot credentials from Vault")
        return secret_data
