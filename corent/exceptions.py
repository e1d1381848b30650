"""Custom exception hierarchy for corent."""


class CorentError(Exception):
    """Base exception for all corent errors."""


class InvalidInputError(CorentError):
    """Raised when a caller passes arguments that break a function contract."""


class InvalidRecordError(CorentError):
    """Raised when a stored record cannot be parsed into a domain entity."""

    def __init__(self, collection: str, field: str, message: str) -> None:
        super().__init__(f"{collection}.{field}: {message}")
        self.collection = collection
        self.field = field


class EntityNotFoundError(CorentError):
    """Raised when a referenced entity does not exist."""


class ReferentialIntegrityError(EntityNotFoundError):
    """Raised when a foreign key reference is violated."""


class StoreError(CorentError):
    """Raised when a store query or insert fails."""


class ConfigurationError(CorentError):
    """Raised when configuration is invalid or missing."""


class SinkError(CorentError):
    """Raised when a sink operation fails."""
