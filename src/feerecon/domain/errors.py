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


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class PermissionDeniedError(DomainError):
    """Caller does not own the entity it tries to change."""


class MalformedInputError(DomainError):
    """Statement file cannot be decoded or parsed; aborts the whole batch."""


class ExtractionFailure(DomainError):
    """A row or line carries no usable reference or no positive amount.

    Bank statements routinely contain non-payment lines, so this is
    collected as a diagnostic and never reported as a hard error.
    """


class PersistenceFailure(DomainError):
    """Database failure inside an atomic reconciliation unit."""


def invoice_not_found(invoice_id: int) -> str:
    """Return message for missing invoice."""
    return f"Invoice {invoice_id} not found"


def profile_not_found(name: str) -> str:
    """Return message for missing mapping profile."""
    return f"Mapping profile '{name}' not found"


def duplicate_invoice_reference(reference_number: str) -> str:
    """Return message for duplicate invoice reference."""
    return f"Invoice with reference '{reference_number}' already exists"


def profile_delete_denied(name: str, owner_id: int) -> str:
    """Return message when a non-creator tries to delete a profile."""
    return (
        f"Mapping profile '{name}' was not created by user {owner_id}; "
        "only its creator can delete it"
    )
