"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class InvalidDate(ValidationError):
    """Date string does not describe a real calendar date."""


class InvalidAmount(ValidationError):
    """Amount string is not numeric or is zero."""


class UnparseableLine(ValidationError):
    """Export line could not be decoded for the bound bank format."""


class MalformedCandidate(ValidationError):
    """Transaction candidate was rejected by the sanitizer."""


class Unauthorized(DomainError):
    """Missing or unknown user context."""


class UpstreamExtractionFailure(DomainError):
    """The text extraction service produced no usable response."""


def user_not_found(user_id: int) -> str:
    """Return message for missing user."""
    return f"User {user_id} not found"


def file_too_large(size: int, limit: int) -> str:
    """Return message for uploads over the size ceiling."""
    return (
        f"File too large ({size} bytes). "
        f"Please use files smaller than {limit // (1024 * 1024)}MB"
    )


def too_many_transactions(count: int, limit: int) -> str:
    """Return message for batches over the transaction ceiling."""
    return (
        f"Too many transactions ({count}). "
        f"Please split into smaller files of max {limit} transactions."
    )
