"""Shared fixtures for the stars test-suite."""

from stars.testing.fixtures import fake_github, manager, store  # noqa: F401
