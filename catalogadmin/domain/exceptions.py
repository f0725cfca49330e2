"""Domain exceptions.

All catalog-level errors raised by the converters, repositories, pagination
engine and import orchestrator. API handlers catch ``DomainError`` and map
each subclass to an HTTP status.
"""

from typing import Any


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching catalog-specific errors at the API layer.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Record Errors
# ============================================================================


class ValidationError(DomainError):
    """Raised when a record fails required-field or structural checks.

    Recoverable and reported per record: bulk imports count it as a
    failure for the bucket, interactive saves surface it directly.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize validation error.

        Args:
            message: Explanation of the failed check.
            field: Name of the offending field, if any.
        """
        super().__init__(message, details={"field": field} if field else {})
        self.field = field


class NotFoundError(DomainError):
    """Raised when a document id does not exist in a collection."""

    def __init__(self, collection: str, doc_id: str) -> None:
        """Initialize not found error.

        Args:
            collection: Collection that was searched.
            doc_id: Missing document id.
        """
        super().__init__(
            f"Document {doc_id} not found in {collection}",
            details={"collection": collection, "id": doc_id},
        )
        self.collection = collection
        self.doc_id = doc_id


# ============================================================================
# Store Errors
# ============================================================================


class FetchError(DomainError):
    """Raised when the store is unreachable or a read query fails.

    Always retryable: the caller may repeat the same page request.
    """

    retryable = True

    def __init__(self, message: str, collection: str | None = None) -> None:
        """Initialize fetch error.

        Args:
            message: Underlying failure description.
            collection: Collection being read.
        """
        super().__init__(
            message,
            details={"collection": collection, "retryable": self.retryable},
        )


class WriteError(DomainError):
    """Raised when the store rejects a write.

    Recovered per record during bulk import; fatal for a single
    interactive save.
    """

    def __init__(self, message: str, collection: str | None = None) -> None:
        """Initialize write error.

        Args:
            message: Underlying failure description.
            collection: Collection being written.
        """
        super().__init__(message, details={"collection": collection})


# ============================================================================
# Import Source Errors
# ============================================================================


class SourceReadError(DomainError):
    """Raised when an import source file or directory cannot be read."""

    def __init__(self, path: str, reason: str) -> None:
        """Initialize source read error.

        Args:
            path: File or directory that failed.
            reason: Why it could not be read.
        """
        super().__init__(
            f"Cannot read import source {path}: {reason}",
            details={"path": path, "reason": reason},
        )
        self.path = path
        self.reason = reason


class SourceUnavailableError(SourceReadError):
    """Raised when the import data directory itself cannot be listed."""
