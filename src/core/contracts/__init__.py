"""
Contract Validation Module

Модуль для валидации JSON контрактов внешней конфигурации (каталог, фразы).
"""

from .validators import (
    ContractValidator,
    SchemaLoader,
    ShopCatalogValidator,
    validate_shop_catalog,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "ShopCatalogValidator",
    # Functions
    "validate_shop_catalog",
]
