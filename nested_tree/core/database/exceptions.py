"""Database repository exceptions.

Custom exceptions for repository and tree operations that provide better
error messages and typing than raw SQLAlchemy exceptions. Storage failures
raised by SQLAlchemy itself are never wrapped; they propagate unchanged
after the transaction guard has rolled back.
"""

from __future__ import annotations

from typing import Any


class RepositoryError(Exception):
    """Base exception for repository operations.

    Raised when a repository operation fails due to programming
    errors, configuration issues, or unexpected states.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize repository error.

        Args:
            message: Error description
            details: Additional context about the error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Format error message with details."""
        if self.details:
            details_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class NotFoundError(RepositoryError):
    """Entity not found in database.

    Attributes:
        model_name: Name of the model class that wasn't found
        identifier: The key/value that was searched for
    """

    def __init__(self, model_name: str, identifier: dict[str, Any]):
        self.model_name = model_name
        self.identifier = identifier

        id_str = ", ".join(f"{k}={v!r}" for k, v in identifier.items())
        message = f"{model_name} not found with {id_str}"

        super().__init__(message, details={"model": model_name, **identifier})

    def __repr__(self) -> str:
        """Repr for debugging."""
        return f"NotFoundError(model={self.model_name!r}, identifier={self.identifier!r})"


class InvalidFilterError(RepositoryError):
    """Invalid filter or query parameters.

    Raised when filter parameters are malformed, reference non-existent
    fields, or contain invalid values.
    """

    def __init__(self, message: str, filter_name: str | None = None):
        details = {"filter": filter_name} if filter_name else {}
        super().__init__(message, details=details)


class InvalidSortError(InvalidFilterError):
    """Child listing was asked to sort by an unknown field or direction.

    Attributes:
        field: The requested sort field
        direction: The requested sort direction
    """

    def __init__(self, field: str | None, direction: str | None):
        self.field = field
        self.direction = direction
        super().__init__(
            f"Invalid sort options specified: field - {field}, direction - {direction}",
            filter_name="order_by",
        )


class TreeConfigurationError(RepositoryError):
    """A model's nested-set configuration does not match its mapping.

    Raised once, when the node accessor for a model is resolved, if a
    configured field name is not a mapped column of the model.
    """

    def __init__(self, model_name: str, field: str, role: str):
        self.model_name = model_name
        self.field = field
        self.role = role
        super().__init__(
            f"{model_name} has no mapped column {field!r} for the {role} field",
            details={"model": model_name, "field": field, "role": role},
        )


class TreeIntegrityError(RepositoryError):
    """A tree mutation met a state it cannot safely work on.

    Examples are a parent reference that does not resolve during recovery,
    or an attempt to move a node that was never attached to the tree.
    """


class InvalidTreeOperationError(RepositoryError):
    """A tree mutation was requested with semantically invalid arguments.

    Examples are reparenting a node under itself or one of its descendants,
    or asking for a negative number of sibling moves.
    """


__all__ = [
    "InvalidFilterError",
    "InvalidSortError",
    "InvalidTreeOperationError",
    "NotFoundError",
    "RepositoryError",
    "TreeConfigurationError",
    "TreeIntegrityError",
]
