"""
Main GitHub client.

Aggregates the resource clients used by StarManager and handles
authentication.
"""

import os
from typing import Any

from stars.auth import CredentialSource, EnvAuth, NetrcAuth
from stars.clients import ActivityClient, ReposClient
from stars.config import GITHUB_API_HOST
from stars.exceptions import ConfigurationError
from stars.transport import HTTPTransport, RetryConfig


class GitHubClient:
    """
    Client for the parts of the GitHub REST API that stars needs.

    Example:
        ```python
        from stars.client import GitHubClient

        client = GitHubClient.from_netrc()
        page = client.activity.list_starred(client.username, page=1)
        client.activity.star("psf", "requests")
        ```
    """

    DEFAULT_BASE_URL = "https://" + GITHUB_API_HOST
    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        username: str,
        token: str | None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        retry_config: RetryConfig | None = None,
        transport: HTTPTransport | None = None,
    ) -> None:
        """
        Initialize the GitHub client.

        Args:
            username: Login whose stars are managed
            token: Personal access token
            base_url: Base URL for API requests (default: https://api.github.com)
            timeout: Request timeout in seconds (default: 30.0)
            retry_config: Configuration for retry behavior (optional)
            transport: Prebuilt transport, replacing the default one
        """
        self.username = username
        self.base_url = base_url

        self._transport = transport or HTTPTransport(
            base_url=base_url,
            token=token,
            timeout=timeout,
            retry_config=retry_config,
        )

        self.activity = ActivityClient(self._transport)
        self.repos = ReposClient(self._transport)

    @classmethod
    def from_credentials(
        cls,
        source: CredentialSource,
        host: str = GITHUB_API_HOST,
        **kwargs: Any,
    ) -> "GitHubClient":
        """Create a client from any credential source."""
        username, token = source.get_auth(host)
        kwargs.setdefault("base_url", os.environ.get("STARS_BASE_URL", cls.DEFAULT_BASE_URL))
        return cls(username=username, token=token, **kwargs)

    @classmethod
    def from_netrc(cls, path: str | None = None, **kwargs: Any) -> "GitHubClient":
        """
        Create a client from the api.github.com entry of ~/.netrc.

        Raises:
            ConfigurationError: If the file or the entry is missing
        """
        return cls.from_credentials(NetrcAuth(path), **kwargs)

    @classmethod
    def from_env(cls, **kwargs: Any) -> "GitHubClient":
        """
        Create a client from environment variables.

        Environment variables:
            GITHUB_USER: Login whose stars are managed (required)
            GITHUB_TOKEN: Personal access token (required)
            STARS_BASE_URL: API base URL (optional)

        Raises:
            ConfigurationError: If required environment variables are missing
        """
        return cls.from_credentials(EnvAuth(), **kwargs)

    @classmethod
    def resolve(cls, **kwargs: Any) -> "GitHubClient":
        """Use ~/.netrc, falling back to the environment when it has no entry."""
        try:
            return cls.from_netrc(**kwargs)
        except ConfigurationError as netrc_error:
            try:
                return cls.from_env(**kwargs)
            except ConfigurationError:
                raise netrc_error from None

    @property
    def transport(self) -> HTTPTransport:
        """Get the underlying HTTP transport."""
        return self._transport

    def close(self) -> None:
        """Close the client and release resources."""
        self._transport.close()

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
