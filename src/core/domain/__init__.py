"""
Domain models and value objects.

Contains fundamental domain entities like Denomination, Product, Round.
"""

from src.core.domain.denomination import (
    Denomination,
    DenominationKind,
    sort_by_value_desc,
    total_value,
)
from src.core.domain.product import PriceRange, Product, filter_products_by_range
from src.core.domain.round import Round, TransactionSnapshot

__all__ = [
    # Denomination model
    "Denomination",
    "DenominationKind",
    "sort_by_value_desc",
    "total_value",
    # Product model
    "Product",
    "PriceRange",
    "filter_products_by_range",
    # Round model
    "Round",
    "TransactionSnapshot",
]
