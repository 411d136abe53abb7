"""
Exception classes raised by schema provisioning.

This module provides:
- Error codes for programmatic error handling
- A base exception carrying a structured, loggable payload
- Specific exceptions for the failure modes of collection and index creation

An already existing collection or index is not an error: provisioning is
idempotent and reports it as an ``exists`` outcome instead.
"""

from typing import Any


class ErrorCode:
    """Error codes for programmatic error handling."""

    # General errors (1xxx)
    INTERNAL_ERROR = "ERR_1000"
    UNKNOWN_CONTEXT = "ERR_1001"

    # Store errors (5xxx)
    DATABASE_ERROR = "ERR_5001"
    DATABASE_CONNECTION_ERROR = "ERR_5002"

    # Schema errors (6xxx)
    CONSTRAINT_VIOLATION = "ERR_6001"
    INDEX_CONFLICT = "ERR_6002"


class MigrationError(Exception):
    """Base exception for schema provisioning errors."""

    code: str = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary for structured output."""
        return {
            "error": type(self).__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class StoreConnectionError(MigrationError):
    """Raised when the MongoDB server cannot be reached."""

    code = ErrorCode.DATABASE_CONNECTION_ERROR


class SchemaOperationError(MigrationError):
    """Raised when the store rejects a collection or index operation."""

    code = ErrorCode.DATABASE_ERROR


class ConstraintViolationError(SchemaOperationError):
    """Raised when existing documents prevent a unique index from being built."""

    code = ErrorCode.CONSTRAINT_VIOLATION

    def __init__(self, database: str, collection: str, field: str, reason: str = ""):
        message = (
            f"Cannot create unique index on {collection}.{field} in {database}: "
            "duplicate values already present"
        )
        super().__init__(
            message,
            details={
                "database": database,
                "collection": collection,
                "field": field,
                "reason": reason,
            },
        )
        self.database = database
        self.collection = collection
        self.field = field


class IndexConflictError(SchemaOperationError):
    """Raised when an incompatible index already occupies the key or name."""

    code = ErrorCode.INDEX_CONFLICT

    def __init__(self, database: str, collection: str, field: str, reason: str = ""):
        message = (
            f"Index on {collection}.{field} in {database} conflicts with an existing index"
        )
        super().__init__(
            message,
            details={
                "database": database,
                "collection": collection,
                "field": field,
                "reason": reason,
            },
        )
        self.database = database
        self.collection = collection
        self.field = field


class UnknownContextError(MigrationError):
    """Raised when a database context alias is not configured."""

    code = ErrorCode.UNKNOWN_CONTEXT

    def __init__(self, alias: str, known: list[str]):
        super().__init__(
            f"Unknown database context: {alias}",
            details={"alias": alias, "known": known},
        )
        self.alias = alias
