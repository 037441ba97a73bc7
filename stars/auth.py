"""
Credential loading for the GitHub API.

Credentials come from the conventional ``~/.netrc`` file: the ``login`` of
the API host's machine entry is the GitHub username and its ``password`` is
a personal access token.
"""

import netrc
import os
from pathlib import Path
from typing import Protocol

from stars.exceptions import ConfigurationError

NETRC_DEFAULT_FILENAME = ".netrc"


class CredentialSource(Protocol):
    """Anything that can resolve (username, token) for a host."""

    def get_auth(self, host: str) -> tuple[str, str]:
        ...


class NetrcAuth:
    """Resolves credentials from a netrc file."""

    def __init__(self, path: str | Path | None = None) -> None:
        """
        Parse the netrc file.

        Args:
            path: netrc file to read (default: $NETRC or ~/.netrc)

        Raises:
            ConfigurationError: If the file is missing or cannot be parsed
        """
        if path is None:
            path = os.environ.get("NETRC") or Path.home() / NETRC_DEFAULT_FILENAME
        self.path = Path(path).expanduser()

        if not self.path.exists():
            raise ConfigurationError(f"{self.path} does not exist")

        try:
            self._netrc = netrc.netrc(str(self.path))
        except (netrc.NetrcParseError, OSError) as e:
            raise ConfigurationError(f"Could not parse {self.path}: {e}") from e

    def get_auth(self, host: str) -> tuple[str, str]:
        """
        Return the (login, password) pair configured for a host.

        Raises:
            ConfigurationError: If the host has no complete entry
        """
        entry = self._netrc.authenticators(host)
        if entry is None:
            raise ConfigurationError(f"no auth for {host} configured in {self.path}")

        login, _, password = entry
        if not login or not password:
            raise ConfigurationError(
                f"{host} entry in {self.path} needs both login and password"
            )
        return login, password


class EnvAuth:
    """Resolves credentials from GITHUB_USER / GITHUB_TOKEN."""

    def get_auth(self, host: str) -> tuple[str, str]:
        username = os.environ.get("GITHUB_USER")
        token = os.environ.get("GITHUB_TOKEN")
        if not username:
            raise ConfigurationError("GITHUB_USER environment variable not set")
        if not token:
            raise ConfigurationError("GITHUB_TOKEN environment variable not set")
        return username, token
