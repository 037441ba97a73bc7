"""stars - command-line manager for your GitHub stars."""

from stars.auth import CredentialSource, EnvAuth, NetrcAuth
from stars.client import GitHubClient
from stars.exceptions import (
    AggregateError,
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    ConflictError,
    InvalidTargetError,
    NoResultsError,
    NotFoundError,
    RateLimitedError,
    ServerError,
    StarsError,
    StoreError,
    ValidationError,
)
from stars.logging import configure_logging, get_logger
from stars.manager import StarManager
from stars.pool import Outcome, WorkerPool
from stars.store import StarStore
from stars.transport import HTTPTransport, RetryConfig
from stars.types import BatchResult, Page, Repository, StarRecord, StarredRepository

__version__ = "0.5.0"

__all__ = [
    "__version__",
    # Main objects
    "StarManager",
    "GitHubClient",
    "StarStore",
    # Credentials
    "CredentialSource",
    "NetrcAuth",
    "EnvAuth",
    # Concurrency
    "WorkerPool",
    "Outcome",
    # Types
    "StarRecord",
    "Repository",
    "StarredRepository",
    "Page",
    "BatchResult",
    # Exceptions
    "StarsError",
    "AggregateError",
    "AuthenticationError",
    "AuthorizationError",
    "ConfigurationError",
    "ConflictError",
    "InvalidTargetError",
    "NoResultsError",
    "NotFoundError",
    "RateLimitedError",
    "ServerError",
    "StoreError",
    "ValidationError",
    # Transport
    "HTTPTransport",
    "RetryConfig",
    # Logging
    "configure_logging",
    "get_logger",
]
