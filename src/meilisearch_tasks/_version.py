"""Version information for meilisearch-tasks."""

from __future__ import annotations


__all__ = ["__version__", "qualified_version"]

__version__ = "0.1.0"


def qualified_version() -> str:
    """Return the client identifier sent in the ``User-Agent`` header.

    Returns:
        A string such as ``"Meilisearch Python (v0.1.0)"``.
    """
    return f"Meilisearch Python (v{__version__})"
