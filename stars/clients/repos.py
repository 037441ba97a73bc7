"""Repository resource client."""

from typing import TYPE_CHECKING

from stars.types.repos import Page, Repository

if TYPE_CHECKING:
    from stars.transport import HTTPTransport


class ReposClient:
    """Client for repository lookups and listings."""

    def __init__(self, transport: "HTTPTransport") -> None:
        """
        Initialize the repos client.

        Args:
            transport: HTTP transport for making requests
        """
        self.transport = transport

    def get(self, owner: str, name: str) -> Repository:
        """
        Get a repository's current metadata.

        Raises:
            NotFoundError: If the repository is not found
        """
        return Repository.from_api(self.transport.get_json(f"/repos/{owner}/{name}"))

    def list_by_org(
        self,
        org: str,
        page: int = 1,
        per_page: int = 100,
        type: str = "sources",
    ) -> Page[Repository]:
        """
        List one page of an organization's repositories.

        Args:
            org: Organization login
            page: 1-based page number
            per_page: Page size (GitHub caps this at 100)
            type: Repository type filter; "sources" excludes forks

        Raises:
            NotFoundError: If the organization does not exist
        """
        items, last_page = self.transport.get_page(
            f"/orgs/{org}/repos",
            page=page,
            per_page=per_page,
            params={"type": type},
        )
        return Page(
            items=[Repository.from_api(item) for item in items],
            page=page,
            last_page=last_page,
        )
