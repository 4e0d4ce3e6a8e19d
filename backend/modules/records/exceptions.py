"""
Records module exceptions.
"""

from shared.exceptions import AuthenticationError, ExternalServiceError

STORE_SERVICE = "document_store"


class NotAuthenticatedError(AuthenticationError):
    """Raised locally when a record is created with nobody signed in."""

    def __init__(self, operation: str = "add"):
        super().__init__(
            "User not authenticated",
            code="NOT_AUTHENTICATED",
            details={"operation": operation},
        )


class RemoteWriteError(ExternalServiceError):
    """Raised when the store rejects or fails an add, update or delete."""

    def __init__(self, operation: str, collection: str, message: str):
        super().__init__(
            f"Failed to {operation} {collection} record: {message}",
            service=STORE_SERVICE,
            code="REMOTE_WRITE_FAILED",
            details={"operation": operation, "collection": collection},
        )


class RemoteSubscriptionError(ExternalServiceError):
    """Raised when a live query cannot be established or breaks."""

    def __init__(self, collection: str, message: str):
        super().__init__(
            f"Live query on {collection} failed: {message}",
            service=STORE_SERVICE,
            code="REMOTE_SUBSCRIPTION_FAILED",
            details={"collection": collection},
        )
