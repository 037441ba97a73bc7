"""GitHub resource clients."""

from stars.clients.activity import ActivityClient
from stars.clients.repos import ReposClient

__all__ = [
    "ActivityClient",
    "ReposClient",
]
