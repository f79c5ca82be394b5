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


class StorageError(RuntimeError):
    """The underlying record store failed to complete an operation."""


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def category_not_found(category_id: int) -> str:
    """Return message for missing category by ID."""
    return f"Category {category_id} not found"


def practice_not_found(practice_id: int) -> str:
    """Return message for missing practice."""
    return f"Practice {practice_id} not found"


def production_not_found(production_id: int) -> str:
    """Return message for missing production entry."""
    return f"Production {production_id} not found"


def duplicate_name(kind: str, name: str) -> str:
    """Return message for a name that is already taken."""
    return f"{kind} with name '{name}' already exists"


def practice_mismatch(production_id: int, production_practice_id: int, practice_id: int) -> str:
    """Return message when a collection names a different practice than its production."""
    return (
        f"Production {production_id} belongs to practice {production_practice_id}, "
        f"not practice {practice_id}"
    )
