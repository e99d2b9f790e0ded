"""
Centralized configuration for the courseware data layer.

Settings come from the environment. The entry point (and the root
conftest) load .env.local / .env through python-dotenv before anything
here is read, so every getter reads os.environ lazily.
"""

import os

DEFAULT_LMS_BASE_URL = "http://localhost:18000"
DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_BLOCKS_DEPTH = 3


def is_dev_mode() -> bool:
    """Check if running in development mode (DEV_MODE env)."""
    return os.getenv("DEV_MODE", "").lower() in ("true", "1", "yes")


def get_lms_base_url() -> str:
    """Get the LMS base URL, without a trailing slash."""
    return os.getenv("LMS_BASE_URL", DEFAULT_LMS_BASE_URL).rstrip("/")


def get_access_token() -> str | None:
    """Get optional JWT used to authenticate against the LMS."""
    return os.getenv("LMS_ACCESS_TOKEN") or None


def get_username() -> str | None:
    """Get the username the block tree is filtered for."""
    return os.getenv("LMS_USERNAME") or None


def get_request_timeout() -> float:
    """Get per-request timeout in seconds."""
    return float(os.getenv("LMS_REQUEST_TIMEOUT", str(DEFAULT_REQUEST_TIMEOUT)))


def get_block_tree_depth() -> int:
    """Get how deep the course block tree request descends."""
    return int(os.getenv("LMS_BLOCKS_DEPTH", str(DEFAULT_BLOCKS_DEPTH)))


def get_sentry_dsn() -> str | None:
    """Get Sentry DSN; error reporting stays local when unset."""
    return os.getenv("SENTRY_DSN") or None
