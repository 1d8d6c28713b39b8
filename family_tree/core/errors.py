"""Domain-level errors for the family tree service."""


class FamilyTreeError(Exception):
    """Base class for errors raised by the member service."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(FamilyTreeError):
    """Raised when input is malformed or references a member that does not exist."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class NotFoundError(FamilyTreeError):
    """Raised when an operation targets a member id that is not stored."""


class StoreError(FamilyTreeError):
    """Raised when the underlying database rejects a read or write."""
