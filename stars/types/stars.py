"""Star-related data models."""

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from stars.exceptions import AggregateError
from stars.types.repos import EPOCH, StarredRepository, parse_timestamp


@dataclass
class StarRecord:
    """A starred repository as cached locally, keyed by URL."""

    url: str
    language: str = ""
    description: str = ""
    topics: list[str] = field(default_factory=list)
    stargazers: int = 0
    pushed_at: datetime = EPOCH
    starred_at: datetime = EPOCH
    archived: bool = False

    @classmethod
    def from_starred(cls, star: StarredRepository) -> "StarRecord":
        repo = star.repository
        return cls(
            url=repo.html_url,
            language=(repo.language or "").lower(),
            description=repo.description or "",
            topics=list(repo.topics),
            stargazers=repo.stargazers,
            pushed_at=repo.pushed_at,
            starred_at=star.starred_at,
            archived=repo.archived,
        )

    def to_row(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "language": self.language,
            "description": self.description,
            "topics": json.dumps(self.topics),
            "stargazers": self.stargazers,
            "pushed_at": self.pushed_at.isoformat(),
            "starred_at": self.starred_at.isoformat(),
            "archived": int(self.archived),
        }

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "StarRecord":
        topics = row.get("topics") or "[]"
        return cls(
            url=row["url"],
            language=row.get("language") or "",
            description=row.get("description") or "",
            topics=json.loads(topics) if isinstance(topics, str) else list(topics),
            stargazers=row.get("stargazers") or 0,
            pushed_at=parse_timestamp(row.get("pushed_at")),
            starred_at=parse_timestamp(row.get("starred_at")),
            archived=bool(row.get("archived")),
        )


@dataclass
class BatchResult:
    """Outcome of a bulk operation: successes counted, failures collected."""

    count: int = 0
    errors: list[Exception] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def error(self) -> AggregateError | None:
        """All failures as one AggregateError, or None when there were none."""
        if not self.errors:
            return None
        return AggregateError(self.errors)

    def merge(self, other: "BatchResult") -> "BatchResult":
        return BatchResult(self.count + other.count, self.errors + other.errors)
