"""Errors raised while loading meilisearch-tasks configuration."""

from __future__ import annotations


__all__ = [
    "ConfigurationError",
    "ConfigurationFileNotFoundError",
    "ConfigurationValidationError",
]


class ConfigurationError(Exception):
    """Base class for configuration problems.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
        """
        super().__init__(message)
        self.message = message


class ConfigurationFileNotFoundError(ConfigurationError):
    """Raised when a required YAML configuration file is missing.

    Attributes:
        path: The explicitly requested path, if any.
        searched_paths: Default locations that were tried.
    """

    def __init__(
        self,
        path: str | None = None,
        searched_paths: list[str] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            path: The explicitly requested path, if any.
            searched_paths: Default locations that were tried.
        """
        self.path = path
        self.searched_paths = searched_paths or []
        if path:
            message = f"Configuration file not found: {path}"
        elif self.searched_paths:
            message = "Configuration file not found. Searched: " + ", ".join(
                self.searched_paths,
            )
        else:
            message = "Configuration file not found"
        super().__init__(message)


class ConfigurationValidationError(ConfigurationError):
    """Raised when configuration values fail validation.

    Attributes:
        errors: Pydantic error details, when available.
    """

    def __init__(
        self,
        message: str,
        errors: list[dict[str, object]] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Summary of the validation failure.
            errors: Pydantic error details.
        """
        super().__init__(message)
        self.errors = errors or []
