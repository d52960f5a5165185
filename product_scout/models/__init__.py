"""Models package initialization."""
from product_scout.models.product import (
    DESCRIPTION_NOT_FOUND,
    FEATURES_NOT_FOUND,
    PRICE_NOT_FOUND,
    ParsedBy,
    PriceInfo,
    ProductRecord,
)

__all__ = [
    "DESCRIPTION_NOT_FOUND",
    "FEATURES_NOT_FOUND",
    "PRICE_NOT_FOUND",
    "ParsedBy",
    "PriceInfo",
    "ProductRecord",
]
