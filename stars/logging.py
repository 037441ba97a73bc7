"""
Logging utilities for stars.

Provides configurable loggers for the bulk pipelines and for HTTP
requests/responses. Tokens and Authorization headers are never logged.
"""

import logging
import re
from typing import Any

_root_logger = logging.getLogger("stars")
_http_logger = logging.getLogger("stars.http")
_pipeline_logger = logging.getLogger("stars.pipeline")

# Patterns for credentials that should be masked
_SENSITIVE_PATTERNS = [
    # Authorization header values
    (re.compile(r"((?:token|bearer)\s+)[A-Za-z0-9_\-.]+", re.IGNORECASE), r"\1[REDACTED]"),
    # GitHub token formats (classic, fine-grained, app tokens)
    (re.compile(r"\b(?:ghp|gho|ghu|ghs|ghr)_[A-Za-z0-9]{20,}\b"), "[TOKEN_REDACTED]"),
    (re.compile(r"\bgithub_pat_[A-Za-z0-9_]{20,}\b"), "[TOKEN_REDACTED]"),
    # key=value / "key": "value" secrets
    (re.compile(r"(secret|token|password|api_key)['\"]?\s*[:=]\s*['\"][^'\"]+['\"]", re.IGNORECASE), r"\1: [REDACTED]"),
]

_SENSITIVE_KEYS = {"authorization", "token", "password", "secret", "api_key"}

LOG_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


def configure_logging(
    level: int = logging.INFO,
    http_level: int | None = None,
    handler: logging.Handler | None = None,
    format_string: str | None = None,
) -> None:
    """
    Configure stars logging.

    Args:
        level: Default log level for all stars loggers (default: INFO)
        http_level: Log level for HTTP request/response logging
            (default: WARNING, so request lines only show when asked for)
        handler: Custom handler to use (default: StreamHandler to stderr)
        format_string: Custom format string

    Example:
        ```python
        import logging
        from stars.logging import configure_logging

        configure_logging(level=logging.DEBUG, http_level=logging.DEBUG)
        ```
    """
    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    if handler is None:
        handler = logging.StreamHandler()

    handler.setFormatter(logging.Formatter(format_string))

    for existing in list(_root_logger.handlers):
        _root_logger.removeHandler(existing)

    _root_logger.setLevel(level)
    _root_logger.addHandler(handler)
    _pipeline_logger.setLevel(level)
    _http_logger.setLevel(http_level if http_level is not None else logging.WARNING)


def parse_level(name: str) -> int:
    """
    Map a CLI level name onto a logging level.

    Raises:
        ValueError: If the name is not a known level
    """
    try:
        return LOG_LEVELS[name.lower()]
    except KeyError:
        raise ValueError(
            f"unknown log level {name!r}; expected one of {', '.join(sorted(LOG_LEVELS))}"
        ) from None


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get a stars logger.

    Args:
        name: Logger name suffix (e.g., "http", "pipeline"). If None, returns
            the package logger.
    """
    if name is None:
        return _root_logger
    return logging.getLogger(f"stars.{name}")


def mask_sensitive_data(text: str) -> str:
    """Replace tokens and other credentials in a string with placeholders."""
    result = text
    for pattern, replacement in _SENSITIVE_PATTERNS:
        result = pattern.sub(replacement, result)
    return result


def safe_log_dict(data: dict[str, Any], sensitive_keys: set[str] | None = None) -> dict[str, Any]:
    """
    Create a copy of a dictionary with sensitive values masked.

    Args:
        data: Dictionary that may contain sensitive values
        sensitive_keys: Keys to mask (default: authorization, token, password,
            secret, api_key)
    """
    if sensitive_keys is None:
        sensitive_keys = _SENSITIVE_KEYS

    result: dict[str, Any] = {}
    for key, value in data.items():
        key_lower = key.lower()
        if any(sk in key_lower for sk in sensitive_keys):
            result[key] = "[REDACTED]"
        elif isinstance(value, dict):
            result[key] = safe_log_dict(value, sensitive_keys)
        elif isinstance(value, str):
            result[key] = mask_sensitive_data(value)
        else:
            result[key] = value
    return result


def log_http_request(
    method: str,
    url: str,
    headers: dict[str, Any] | None = None,
    params: dict[str, Any] | None = None,
) -> None:
    """Log an HTTP request at DEBUG level with credentials masked."""
    if not _http_logger.isEnabledFor(logging.DEBUG):
        return

    log_parts = [f"{method} {url}"]

    if headers:
        log_parts.append(f"headers={safe_log_dict(headers)}")

    if params:
        log_parts.append(f"params={safe_log_dict(params)}")

    _http_logger.debug(" | ".join(log_parts))


def log_http_response(
    status_code: int,
    url: str,
    elapsed_ms: float | None = None,
) -> None:
    """Log an HTTP response at DEBUG level."""
    if not _http_logger.isEnabledFor(logging.DEBUG):
        return

    log_parts = [f"Response {status_code} from {url}"]

    if elapsed_ms is not None:
        log_parts.append(f"elapsed={elapsed_ms:.2f}ms")

    _http_logger.debug(" | ".join(log_parts))


__all__ = [
    "LOG_LEVELS",
    "configure_logging",
    "parse_level",
    "get_logger",
    "mask_sensitive_data",
    "safe_log_dict",
    "log_http_request",
    "log_http_response",
]
