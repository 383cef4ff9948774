"""
Tests for JSON Schema Contract Validators and catalog loading

Комплексное тестирование JSON Schema валидаторов:
- Валидность самих схем
- Валидация правильных данных
- Детекция нарушений required полей и типов
- Детекция нарушений constraints (minimum/enum/additionalProperties)
- Интеграция с Pydantic моделями каталога
"""

import json

import pytest
from jsonschema import ValidationError
from pydantic import ValidationError as PydanticValidationError

from src.core.contracts import (
    SchemaLoader,
    ShopCatalogValidator,
    validate_shop_catalog,
)
from src.shop.catalog import (
    DEFAULT_PRICE_RANGES,
    CatalogConfigurationError,
    default_catalog,
    load_catalog,
    load_catalog_file,
)


# =============================================================================
# FIXTURES - VALID DATA SAMPLES
# =============================================================================


@pytest.fixture
def valid_catalog():
    """Валидный shop_catalog для тестирования."""
    return {
        "schema_version": "1",
        "denominations": [
            {"value": 1, "kind": "coin", "label": "1元", "color_description": "銅黃色"},
            {"value": 5, "kind": "coin", "label": "5元"},
            {"value": 10, "kind": "coin", "label": "10元"},
            {"value": 50, "kind": "coin", "label": "50元"},
            {"value": 100, "kind": "note", "label": "100元"},
        ],
        "products": [
            {"id": "p1", "name": "漢堡", "price": 45},
            {"id": "p2", "name": "牛奶", "price": 32, "image": "milk.png", "is_custom": True},
        ],
        "price_ranges": [
            {"id": "31-40", "label": "31-40元", "min_price": 31, "max_price": 40},
            {"id": "41-50", "label": "41-50元", "min_price": 41, "max_price": 50},
        ],
        "voice": {
            "shop_welcome": "I want {name}, {price} dollars",
        },
    }


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class TestSchemaLoader:
    """Тесты загрузчика схем."""

    def test_schema_exists_and_is_valid(self):
        loader = SchemaLoader()
        schema = loader.load_schema("shop_catalog")
        assert schema["$schema"].startswith("https://json-schema.org/draft/2020-12")

    def test_schema_cached(self):
        loader = SchemaLoader()
        assert loader.load_schema("shop_catalog") is loader.load_schema("shop_catalog")

    def test_missing_schema(self):
        with pytest.raises(FileNotFoundError):
            SchemaLoader().load_schema("does_not_exist")


# =============================================================================
# SHOP CATALOG CONTRACT
# =============================================================================


class TestShopCatalogContract:
    """Тесты контракта shop_catalog."""

    def test_valid(self, valid_catalog):
        validate_shop_catalog(valid_catalog)
        assert ShopCatalogValidator().is_valid(valid_catalog)

    def test_missing_required(self, valid_catalog):
        del valid_catalog["denominations"]
        with pytest.raises(ValidationError):
            validate_shop_catalog(valid_catalog)

    def test_wrong_schema_version(self, valid_catalog):
        valid_catalog["schema_version"] = "2"
        with pytest.raises(ValidationError):
            validate_shop_catalog(valid_catalog)

    def test_non_integer_price(self, valid_catalog):
        valid_catalog["products"][0]["price"] = 45.5
        with pytest.raises(ValidationError):
            validate_shop_catalog(valid_catalog)

    def test_zero_denomination(self, valid_catalog):
        valid_catalog["denominations"][0]["value"] = 0
        with pytest.raises(ValidationError):
            validate_shop_catalog(valid_catalog)

    def test_unknown_kind(self, valid_catalog):
        valid_catalog["denominations"][0]["kind"] = "bill"
        with pytest.raises(ValidationError):
            validate_shop_catalog(valid_catalog)

    def test_empty_denominations(self, valid_catalog):
        valid_catalog["denominations"] = []
        with pytest.raises(ValidationError):
            validate_shop_catalog(valid_catalog)

    def test_unknown_voice_key(self, valid_catalog):
        valid_catalog["voice"]["shop_goodbye"] = "bye"
        with pytest.raises(ValidationError):
            validate_shop_catalog(valid_catalog)

    def test_iter_errors_collects_all(self, valid_catalog):
        valid_catalog["products"][0]["price"] = -1
        valid_catalog["denominations"][1]["kind"] = "bill"
        errors = list(ShopCatalogValidator().iter_errors(valid_catalog))
        assert len(errors) == 2


class TestVoicePhrasesContract:
    """Тесты фраз внутри shop_catalog ($defs/voice_phrases)."""

    def test_partial_phrases_valid(self, valid_catalog):
        valid_catalog["voice"] = {"correct": "Great!", "shop_total": "{total} dollars"}
        assert ShopCatalogValidator().is_valid(valid_catalog)

    def test_non_string_phrase(self, valid_catalog):
        valid_catalog["voice"]["correct"] = 1
        assert not ShopCatalogValidator().is_valid(valid_catalog)
        with pytest.raises(ValidationError):
            validate_shop_catalog(valid_catalog)


# =============================================================================
# CATALOG LOADING
# =============================================================================


class TestLoadCatalog:
    """Тесты загрузки каталога: schema → pydantic → канонические номиналы."""

    def test_load_valid(self, valid_catalog):
        catalog = load_catalog(valid_catalog)

        assert [d.value for d in catalog.denominations] == [1, 5, 10, 50, 100]
        assert catalog.products[1].is_custom is True
        assert catalog.price_range("41-50").max_price == 50
        assert catalog.voice.shop_welcome == "I want {name}, {price} dollars"
        # Незаданные фразы берутся по умолчанию
        assert catalog.voice.shop_total == "{total}元"

    def test_default_price_ranges(self, valid_catalog):
        del valid_catalog["price_ranges"]
        catalog = load_catalog(valid_catalog)
        assert catalog.price_ranges == DEFAULT_PRICE_RANGES

    def test_schema_violation_first(self, valid_catalog):
        valid_catalog["products"][0]["price"] = 0
        with pytest.raises(ValidationError):
            load_catalog(valid_catalog)

    def test_duplicate_denomination_rejected(self, valid_catalog):
        valid_catalog["denominations"].append({"value": 5, "kind": "coin"})
        with pytest.raises(PydanticValidationError, match="Duplicate denomination"):
            load_catalog(valid_catalog)

    def test_duplicate_product_id_rejected(self, valid_catalog):
        valid_catalog["products"].append({"id": "p1", "name": "again", "price": 5})
        with pytest.raises(PydanticValidationError, match="Duplicate product"):
            load_catalog(valid_catalog)

    def test_inverted_range_rejected(self, valid_catalog):
        valid_catalog["price_ranges"][0]["min_price"] = 99
        with pytest.raises(PydanticValidationError):
            load_catalog(valid_catalog)

    def test_missing_canonical_denomination_rejected(self, valid_catalog):
        """Без номинала 1 каталог отклоняется при загрузке."""
        valid_catalog["denominations"] = [
            d for d in valid_catalog["denominations"] if d["value"] != 1
        ]
        with pytest.raises(CatalogConfigurationError, match=r"\[1\]"):
            load_catalog(valid_catalog)

    def test_custom_canonical_values(self, valid_catalog):
        catalog = load_catalog(valid_catalog, canonical_values=(100, 10, 1))
        assert catalog.denomination_for(100).is_note

    def test_load_from_file(self, valid_catalog, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps(valid_catalog, ensure_ascii=False), encoding="utf-8")

        catalog = load_catalog_file(path)
        assert catalog.products[0].name == "漢堡"


class TestDefaultCatalog:
    """Тесты каталога по умолчанию."""

    def test_denominations(self):
        catalog = default_catalog()
        assert [d.value for d in catalog.denominations] == [1, 5, 10, 50, 100, 500, 1000]
        assert [d.value for d in catalog.denominations if d.is_note] == [100, 500, 1000]

    def test_price_ranges(self):
        ids = [r.id for r in default_catalog().price_ranges]
        assert ids[:2] == ["1-10", "11-20"]
        assert "91-100" in ids
        assert ids[-3:] == ["100-500", "500-1000", "all"]
        assert len(ids) == 13

    def test_canonical_values_present(self):
        default_catalog().ensure_canonical_values()

    def test_unknown_lookups(self):
        catalog = default_catalog()
        with pytest.raises(ValueError, match="Unknown denomination"):
            catalog.denomination_for(20)
        with pytest.raises(ValueError, match="Unknown price range"):
            catalog.price_range("2000-3000")
