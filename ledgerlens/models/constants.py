"""Domain constants and reference data.

The category list mirrors the default expense categories of the ledger; user
defined categories are allowed, so it is used for display names only, never for
validation.
"""

from typing import Dict, Tuple

BASE_REPORTING_CURRENCY = "USD"

DEFAULT_BUDGET_CATEGORIES: Tuple[str, ...] = (
    "food_and_drink",
    "housing",
    "utilities",
    "transportation",
    "clothing",
    "leisure_travel",
    "technology",
    "pets",
    "health_and_wellness",
    "education",
    "entertainment",
    "gifts_and_donations",
    "personal_care",
    "debt_payments",
    "savings_and_investments",
    "miscellaneous",
)

# code -> (name, symbol, decimal_digits)
DEFAULT_CURRENCIES: Dict[str, Tuple[str, str, int]] = {
    "USD": ("US Dollar", "$", 2),
    "EUR": ("Euro", "€", 2),
    "GBP": ("British Pound", "£", 2),
    "JPY": ("Japanese Yen", "¥", 0),
    "CAD": ("Canadian Dollar", "CA$", 2),
    "AUD": ("Australian Dollar", "AU$", 2),
    "BRL": ("Brazilian Real", "R$", 2),
    "GEL": ("Georgian Lari", "₾", 2),
}


def display_category_name(slug: str) -> str:
    """'food_and_drink' -> 'Food And Drink'."""
    return " ".join(word[:1].upper() + word[1:] for word in slug.split("_") if word)
