"""Activity (starring) resource client."""

from typing import TYPE_CHECKING

from stars.exceptions import NotFoundError
from stars.types.repos import Page, StarredRepository

if TYPE_CHECKING:
    from stars.transport import HTTPTransport

STAR_MEDIA_TYPE = "application/vnd.github.star+json"


class ActivityClient:
    """Client for listing, adding and removing stars."""

    def __init__(self, transport: "HTTPTransport") -> None:
        """
        Initialize the activity client.

        Args:
            transport: HTTP transport for making requests
        """
        self.transport = transport

    def list_starred(
        self, user: str, page: int = 1, per_page: int = 100
    ) -> Page[StarredRepository]:
        """
        List one page of the repositories a user has starred.

        Uses the star+json media type so each item carries ``starred_at``.

        Args:
            user: GitHub login
            page: 1-based page number
            per_page: Page size (GitHub caps this at 100)

        Returns:
            Page of StarredRepository with the collection's last page number

        Raises:
            NotFoundError: If the user does not exist
        """
        items, last_page = self.transport.get_page(
            f"/users/{user}/starred",
            page=page,
            per_page=per_page,
            accept=STAR_MEDIA_TYPE,
        )
        return Page(
            items=[StarredRepository.from_api(item) for item in items],
            page=page,
            last_page=last_page,
        )

    def is_starred(self, owner: str, name: str) -> bool:
        """Check whether the authenticated user has starred a repository."""
        try:
            self.transport.request("GET", f"/user/starred/{owner}/{name}")
        except NotFoundError:
            return False
        return True

    def star(self, owner: str, name: str) -> None:
        """
        Star a repository as the authenticated user.

        Raises:
            AuthenticationError: If the token is rejected
            NotFoundError: If the repository is not found
        """
        self.transport.request("PUT", f"/user/starred/{owner}/{name}")

    def unstar(self, owner: str, name: str) -> None:
        """
        Unstar a repository as the authenticated user.

        Raises:
            AuthenticationError: If the token is rejected
            NotFoundError: If the repository is not found
        """
        self.transport.request("DELETE", f"/user/starred/{owner}/{name}")
