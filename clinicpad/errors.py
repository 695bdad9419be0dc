"""Error types shared by the storage layer, forms and the console front end."""


class RecordsError(Exception):
    """Base class for clinical record errors."""
    pass


class ValidationError(RecordsError):
    """Raised when required form fields are missing or blank."""

    def __init__(self, fields: list[str], message: str | None = None):
        self.fields = list(fields)
        super().__init__(message or f"Missing required fields: {', '.join(self.fields)}")


class StorageError(RecordsError):
    """Raised when a storage operation fails."""

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"{operation} failed: {reason}")


class ConstraintError(StorageError):
    """Raised when the database rejects a row (NOT NULL, UNIQUE, CHECK)."""
    pass


class NotFoundError(RecordsError):
    """Raised when a required record does not exist."""
    pass
