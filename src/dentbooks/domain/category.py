"""Category domain service."""

from typing import Optional

import structlog

from dentbooks.database.base import Database
from dentbooks.domain.entities import Category, TransactionType
from dentbooks.domain.errors import ConflictError, ValidationError, duplicate_name

logger = structlog.get_logger(__name__)

# Seeded on first run, in order. The first entry gets ID 1 and doubles as
# the fallback category for imports.
DEFAULT_CATEGORIES = [
    ("Clinical Income", TransactionType.INCOME),
    ("Consulting Income", TransactionType.INCOME),
    ("Other Income", TransactionType.INCOME),
    ("Lab Fees", TransactionType.EXPENSE),
    ("Dental Supplies", TransactionType.EXPENSE),
    ("Continuing Education", TransactionType.EXPENSE),
    ("S-Corp Payroll", TransactionType.EXPENSE),
    ("Rent", TransactionType.EXPENSE),
    ("Utilities", TransactionType.EXPENSE),
    ("Professional Fees", TransactionType.EXPENSE),
    ("Insurance", TransactionType.EXPENSE),
    ("Other Expense", TransactionType.EXPENSE),
]

DEFAULT_CATEGORY_ID = 1


def coerce_type(value: str | TransactionType) -> TransactionType:
    """Convert a string to TransactionType, raising ValidationError if invalid."""
    try:
        return TransactionType(str(getattr(value, "value", value)).strip().lower())
    except ValueError:
        raise ValidationError(
            f"Invalid type '{value}'. Must be one of: income, expense"
        )


class CategoryService:
    """Service for managing categories."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_category(self, name: str, type: str | TransactionType) -> int:
        """Create a category.

        Args:
            name: Category name (unique)
            type: income or expense

        Returns:
            Category ID

        Raises:
            ValidationError: If name is empty or type invalid
            ConflictError: If a category with the name already exists
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Category name is required")
        category_type = coerce_type(type)

        if self.db.get_category_by_name(name) is not None:
            raise ConflictError(duplicate_name("Category", name))

        return self.db.create_category(name=name, type=category_type.value)

    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        return self.db.get_category(category_id)

    def get_category_by_name(self, name: str) -> Optional[Category]:
        """Get category by exact name."""
        return self.db.get_category_by_name(name)

    def list_categories(self, type: Optional[str | TransactionType] = None) -> list[Category]:
        """List categories, optionally filtered by type."""
        type_value = coerce_type(type).value if type is not None else None
        return self.db.list_categories(type=type_value)

    def seed_defaults(self) -> int:
        """Create the default category chart if no categories exist.

        Returns:
            Number of categories created (0 if categories already existed)
        """
        if self.db.list_categories():
            return 0

        for name, category_type in DEFAULT_CATEGORIES:
            self.db.create_category(name=name, type=category_type.value)

        logger.info("categories_seeded", count=len(DEFAULT_CATEGORIES))
        return len(DEFAULT_CATEGORIES)
