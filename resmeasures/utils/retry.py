"""
Retried HTTP downloads.

Weather archives are fetched before a batch starts. Connection errors,
timeouts and throttling/server status codes are retried with capped
exponential backoff; anything else fails the download at once.

Usage:
    from resmeasures.utils.retry import download_file, RetryConfig

    download_file(url, Path("weather.zip"), config=RetryConfig(max_retries=5))
"""

import functools
import logging
import random
import time
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Callable, Optional, Tuple, Type

import requests

logger = logging.getLogger(__name__)

DOWNLOAD_CHUNK_BYTES = 1 << 20

TRANSIENT_ERRORS: Tuple[Type[Exception], ...] = (
    requests.ConnectionError,
    requests.Timeout,
    ConnectionError,
    TimeoutError,
)


@dataclass
class RetryConfig:
    max_retries: int = 3
    base_delay: float = 1.0  # s
    max_delay: float = 30.0  # s
    exponential_base: float = 2.0
    jitter: bool = True
    retryable_exceptions: Tuple[Type[Exception], ...] = TRANSIENT_ERRORS
    retryable_status_codes: Tuple[int, ...] = (429, 500, 502, 503, 504)


def calculate_delay(attempt: int, config: RetryConfig) -> float:
    """Seconds to wait after the 0-indexed failed `attempt`."""
    delay = min(config.base_delay * config.exponential_base ** attempt, config.max_delay)
    if config.jitter:
        delay *= 1.0 + random.uniform(0.0, 0.25)
    return delay


def should_retry_exception(exc: Exception, config: RetryConfig) -> bool:
    """
    HTTP errors are judged by status code, everything else by exception
    type.
    """
    status = getattr(getattr(exc, "response", None), "status_code", None)
    if status is not None:
        return status in config.retryable_status_codes
    return isinstance(exc, config.retryable_exceptions)


def retry_with_backoff(
    func: Optional[Callable] = None,
    *,
    config: Optional[RetryConfig] = None,
    max_retries: Optional[int] = None,
) -> Callable:
    """
    Retry a function on transient errors. Usable bare or with arguments:

        @retry_with_backoff(max_retries=3)
        def fetch():
            ...

    Raises:
        The first non-transient error, or the last transient one once
        `max_retries` retries have been used
    """
    cfg = config or RetryConfig()
    if max_retries is not None:
        cfg = replace(cfg, max_retries=max_retries)

    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            attempt = 0
            while True:
                try:
                    return fn(*args, **kwargs)
                except Exception as exc:
                    if not should_retry_exception(exc, cfg):
                        raise
                    if attempt >= cfg.max_retries:
                        logger.error(f"{fn.__name__} failed after {cfg.max_retries} retries: {exc}")
                        raise
                    delay = calculate_delay(attempt, cfg)
                    attempt += 1
                    logger.warning(f"{fn.__name__} failed ({exc}), retry {attempt}/{cfg.max_retries} "
                                   f"in {delay:.1f}s")
                    time.sleep(delay)

        return wrapper

    return decorator(func) if func is not None else decorator


def download_file(url: str, dest: Path, timeout: int = 600, config: Optional[RetryConfig] = None) -> Path:
    """
    Stream `url` to `dest`.

    Args:
        timeout: Per-request timeout in seconds

    Returns:
        dest
    """

    @retry_with_backoff(config=config)
    def fetch() -> Path:
        with requests.get(url, stream=True, timeout=timeout) as response:
            response.raise_for_status()
            with open(dest, "wb") as f:
                for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_BYTES):
                    if chunk:
                        f.write(chunk)
        return dest

    logger.info(f"Downloading {url} -> {dest}")
    return fetch()
