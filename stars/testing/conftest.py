"""
Pytest plugin for stars testing fixtures.

To use these fixtures in your tests, add this to your conftest.py:

    pytest_plugins = ["stars.testing.conftest"]
"""

from stars.testing.fixtures import fake_github, manager, store

__all__ = [
    "fake_github",
    "store",
    "manager",
]
