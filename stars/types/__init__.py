"""Data model types used by stars."""

from stars.types.repos import Page, Repository, StarredRepository, parse_timestamp
from stars.types.stars import BatchResult, StarRecord

__all__ = [
    # Remote types
    "Repository",
    "StarredRepository",
    "Page",
    "parse_timestamp",
    # Local types
    "StarRecord",
    "BatchResult",
]
