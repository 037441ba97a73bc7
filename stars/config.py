"""Configuration constants for stars."""

from pathlib import Path

# The main public GitHub and its API host
GITHUB_HOST = "github.com"
GITHUB_API_HOST = "api." + GITHUB_HOST

# GitHub's maximum page size
PAGE_SIZE = 100

# Worker threads per bulk operation unless told otherwise
DEFAULT_CONCURRENCY = 10

# Months a repository may go without a push before it stops qualifying
DEFAULT_MONTHS = 2

CACHE_PATH = Path.home() / ".cache" / "stars.db"
