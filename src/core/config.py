"""Runtime configuration model for the indexer.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import (
    DEFAULT_CHECKPOINT_DIR,
    DEFAULT_IPFS_GATEWAY,
    DEFAULT_LOOKUP_MAX_RETRIES,
    DEFAULT_LOOKUP_TIMEOUT_SECONDS,
)
from core.errors import IndexerConfigError


@dataclass(frozen=True)
class IndexerConfig:
    """Validated runtime configuration.

    Attributes:
        ipfs_gateway: Base URL that metadata pointers are appended to.
        database_url: Optional SQLAlchemy URL of the target store.
        lookup_timeout_seconds: Per-request timeout for metadata lookups.
        lookup_max_retries: Retries after the first failed lookup attempt.
        checkpoint_dir: Local directory for resume checkpoints.
    """

    ipfs_gateway: str
    database_url: str | None
    lookup_timeout_seconds: float
    lookup_max_retries: int
    checkpoint_dir: Path

    @classmethod
    def from_env(cls) -> "IndexerConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            IndexerConfigError: If environment values are invalid.
        """
        ipfs_gateway = os.getenv("INDEXER_IPFS_GATEWAY", DEFAULT_IPFS_GATEWAY)
        database_url = os.getenv("INDEXER_DATABASE_URL") or None
        timeout_value = os.getenv(
            "INDEXER_LOOKUP_TIMEOUT_SECONDS", str(DEFAULT_LOOKUP_TIMEOUT_SECONDS)
        )
        retries_value = os.getenv("INDEXER_LOOKUP_MAX_RETRIES", str(DEFAULT_LOOKUP_MAX_RETRIES))
        checkpoint_dir_value = os.getenv("INDEXER_CHECKPOINT_DIR", str(DEFAULT_CHECKPOINT_DIR))
        return cls(
            ipfs_gateway=_normalize_gateway(ipfs_gateway),
            database_url=database_url,
            lookup_timeout_seconds=_parse_timeout(timeout_value),
            lookup_max_retries=_parse_max_retries(retries_value),
            checkpoint_dir=Path(checkpoint_dir_value).expanduser().resolve(),
        )


def _normalize_gateway(raw_value: str) -> str:
    """Validate the gateway URL and ensure a trailing slash.

    Raises:
        IndexerConfigError: If value is not an http(s) URL.
    """
    if not raw_value.startswith(("http://", "https://")):
        raise IndexerConfigError(
            "Invalid INDEXER_IPFS_GATEWAY value: "
            f"expected http(s) URL, got '{raw_value}'. "
            "Set INDEXER_IPFS_GATEWAY to a gateway base URL."
        )
    return raw_value if raw_value.endswith("/") else raw_value + "/"


def _parse_timeout(raw_value: str) -> float:
    """Parse the lookup timeout environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Positive timeout in seconds.

    Raises:
        IndexerConfigError: If value is not a positive number.
    """
    try:
        timeout = float(raw_value)
    except ValueError as error:
        raise IndexerConfigError(
            "Invalid INDEXER_LOOKUP_TIMEOUT_SECONDS value: "
            f"expected number, got '{raw_value}'. "
            "Set INDEXER_LOOKUP_TIMEOUT_SECONDS to a numeric value."
        ) from error
    if timeout <= 0:
        raise IndexerConfigError(
            "Invalid INDEXER_LOOKUP_TIMEOUT_SECONDS value: "
            f"expected positive number, got '{raw_value}'."
        )
    return timeout


def _parse_max_retries(raw_value: str) -> int:
    """Parse the lookup retry count environment value.

    Raises:
        IndexerConfigError: If value is not a non-negative integer.
    """
    try:
        retries = int(raw_value)
    except ValueError as error:
        raise IndexerConfigError(
            "Invalid INDEXER_LOOKUP_MAX_RETRIES value: "
            f"expected integer, got '{raw_value}'. "
            "Set INDEXER_LOOKUP_MAX_RETRIES to a numeric value."
        ) from error
    if retries < 0:
        raise IndexerConfigError(
            "Invalid INDEXER_LOOKUP_MAX_RETRIES value: "
            f"expected zero or more, got '{raw_value}'."
        )
    return retries
