"""Infrastructure exceptions for document storage and outbound notifications.

Storage errors extend PortfolioException so the API layer maps them to
HTTP responses the same way as domain errors.
"""

from portfolio.domain.exceptions import PortfolioException


class StorageException(PortfolioException):
    """Base exception for document store operations."""


class StorageReadError(StorageException):
    """Stored document could not be read or decoded."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(
            f"Failed to read document: {key}",
            "STORAGE_READ_ERROR",
            {"key": key, "reason": reason},
        )


class StorageWriteError(StorageException):
    """Document could not be written."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(
            f"Failed to write document: {key}",
            "STORAGE_WRITE_ERROR",
            {"key": key, "reason": reason},
        )


class StoragePermissionError(StorageException):
    """Document key resolves outside the storage root."""

    def __init__(self, key: str) -> None:
        super().__init__(
            f"Invalid document key: {key}",
            "STORAGE_PERMISSION_ERROR",
            {"key": key},
        )


class DocumentDecodeError(StorageException):
    """Stored document has an unexpected shape."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(
            f"Malformed document: {key}",
            "STORAGE_READ_ERROR",
            {"key": key, "reason": reason},
        )
