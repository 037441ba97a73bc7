"""stars testing utilities.

Provides an in-memory GitHub and factories for testing code that uses stars.
"""

from stars.testing.fake import FakeCall, FakeFailure, FakeGitHub
from stars.testing.fixtures import (
    create_repository,
    create_star_record,
    populate_stars,
)

__all__ = [
    # Fake remote
    "FakeGitHub",
    "FakeCall",
    "FakeFailure",
    # Helper functions
    "create_repository",
    "create_star_record",
    "populate_stars",
]
