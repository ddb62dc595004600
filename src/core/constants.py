"""Core constants used across indexer modules.

This module centralizes non-domain-specific constants.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_IPFS_GATEWAY = "https://d16c97c2np8a2o.cloudfront.net/ipfs/"
DEFAULT_LOOKUP_TIMEOUT_SECONDS = 30.0
DEFAULT_LOOKUP_MAX_RETRIES = 3
DEFAULT_CHECKPOINT_DIR = Path(".indexer")
DEFAULT_STREAM_NAME = "stdin"
CHECKPOINTS_DIR_NAME = "checkpoints"
CHECKPOINT_STATE_FILE_NAME = "state.json"
PROJECT_TABLE_NAME = "project"
ROUND_TABLE_NAME = "round"
LOOKUP_FAILURE_ABORT = "abort"
LOOKUP_FAILURE_SKIP = "skip"
SUPPORTED_LOOKUP_FAILURE_POLICIES = (LOOKUP_FAILURE_ABORT, LOOKUP_FAILURE_SKIP)
PARSE_WARNING_TEMPLATE = "Warning: skipping event due to parse error: {error}. Data: {data}"
