"""Utility modules."""

from .logging_config import (
    get_logger,
    setup_logging,
    ensure_logging,
    MeasureFormatter,
    FileFormatter,
)
from .retry import (
    retry_with_backoff,
    download_file,
    RetryConfig,
)

__all__ = [
    # Logging
    "get_logger",
    "setup_logging",
    "ensure_logging",
    "MeasureFormatter",
    "FileFormatter",
    # Retry
    "retry_with_backoff",
    "download_file",
    "RetryConfig",
]
