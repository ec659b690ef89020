"""Built-in transaction categories."""

from dataclasses import dataclass
from typing import Optional

from pocketledger.domain.errors import NotFoundError


@dataclass(frozen=True)
class Category:
    """Category domain entity."""

    key: str
    label: str
    type: str  # "income" or "expense"


CATEGORIES: tuple[Category, ...] = (
    Category("cat_salary", "Salary", "income"),
    Category("cat_freelance", "Freelance", "income"),
    Category("cat_gift", "Gift", "income"),
    Category("cat_investment", "Investment", "income"),
    Category("cat_food", "Food", "expense"),
    Category("cat_transport", "Transport", "expense"),
    Category("cat_utilities", "Utilities", "expense"),
    Category("cat_entertainment", "Entertainment", "expense"),
    Category("cat_shopping", "Shopping", "expense"),
    Category("cat_health", "Health", "expense"),
    Category("cat_education", "Education", "expense"),
    Category("cat_housing", "Housing", "expense"),
    Category("cat_other", "Other", "expense"),
)

DEFAULT_CATEGORY = "cat_other"
TRANSFER_CATEGORY = "transfer"


def get_category(key: str) -> Optional[Category]:
    """Get a built-in category by key."""
    for category in CATEGORIES:
        if category.key == key:
            return category
    return None


def resolve_category(name: str) -> str:
    """Resolve a category key, short name ("food") or label to its key.

    Raises:
        NotFoundError: If no category matches
    """
    wanted = name.strip().lower()
    for category in CATEGORIES:
        if wanted in (category.key, category.key.removeprefix("cat_"), category.label.lower()):
            return category.key
    if wanted == TRANSFER_CATEGORY:
        return TRANSFER_CATEGORY
    raise NotFoundError(f"Category '{name}' not found")


def category_label(key: str) -> str:
    """Display label for a category key, falling back to the key itself."""
    category = get_category(key)
    return category.label if category is not None else key
