"""Repository-related data models."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

T = TypeVar("T")

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def parse_timestamp(value: str | None) -> datetime:
    """Parse a GitHub ISO-8601 timestamp into an aware UTC datetime."""
    if not value:
        return EPOCH
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass
class Repository:
    """Remote repository metadata."""

    html_url: str
    name: str
    owner: str
    language: str | None = None
    description: str | None = None
    topics: list[str] = field(default_factory=list)
    stargazers: int = 0
    pushed_at: datetime = EPOCH
    archived: bool = False
    fork: bool = False

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Repository":
        return cls(
            html_url=data["html_url"],
            name=data["name"],
            owner=(data.get("owner") or {}).get("login", ""),
            language=data.get("language"),
            description=data.get("description"),
            topics=list(data.get("topics") or []),
            stargazers=data.get("stargazers_count", 0),
            pushed_at=parse_timestamp(data.get("pushed_at")),
            archived=bool(data.get("archived", False)),
            fork=bool(data.get("fork", False)),
        )


@dataclass
class StarredRepository:
    """A repository together with the time the user starred it."""

    starred_at: datetime
    repository: Repository

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "StarredRepository":
        # star+json media type wraps the repository; the default type does not
        if "repo" in data:
            return cls(
                starred_at=parse_timestamp(data.get("starred_at")),
                repository=Repository.from_api(data["repo"]),
            )
        return cls(starred_at=EPOCH, repository=Repository.from_api(data))


@dataclass
class Page(Generic[T]):
    """One page of a paginated collection."""

    items: list[T]
    page: int = 1
    last_page: int = 1
