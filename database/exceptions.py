"""Exceptions raised by the marketplace document store."""

class DatabaseError(Exception):
    """Base exception for store operations."""
    pass

class PersistenceError(DatabaseError):
    """Raised when a document cannot be written to disk.

    The store logs these and keeps serving from memory; they never reach
    API callers.
    """
    def __init__(self, document: str, reason: str):
        self.document = document
        self.reason = reason
        super().__init__(f"Failed to save {document}: {reason}")
