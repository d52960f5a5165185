"""
Product Record Model for the Product Scout extraction engine.
This model represents the standardized output of every extraction,
regardless of which extractor (retailer-specific or generic) produced it.
"""
from typing import Any, Dict, List
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field

PRICE_NOT_FOUND = "Price not found"
DESCRIPTION_NOT_FOUND = "No description found"
FEATURES_NOT_FOUND = "No features found"


class ParsedBy(str, Enum):
    """Provenance tag indicating which extractor produced a record."""
    AMAZON = "amazon"
    WALMART = "walmart"
    TARGET = "target"
    BESTBUY = "bestbuy"
    GENERIC = "generic"
    UNKNOWN = "unknown"


class PriceInfo(BaseModel):
    """Best-effort price with its cleaned display string and currency glyph."""
    model_config = ConfigDict(populate_by_name=True)

    value: float = 0.0
    display_value: str = Field(default=PRICE_NOT_FOUND, alias="displayValue")
    currency: str = "$"

    @classmethod
    def not_found(cls) -> "PriceInfo":
        """Return the sentinel price used when no price was located."""
        return cls(value=0.0, display_value=PRICE_NOT_FOUND, currency="$")

    @property
    def found(self) -> bool:
        return not (self.value == 0 and self.display_value == PRICE_NOT_FOUND)


class ProductRecord(BaseModel):
    """
    Product record - the single output shape of the extraction engine.

    Created fresh per extraction call. SiteExtractor results additionally carry
    category path, rating and review count; GenericExtractor leaves those empty.
    """
    model_config = ConfigDict(populate_by_name=True)

    # Core fields
    title: str = ""
    price: PriceInfo = Field(default_factory=PriceInfo.not_found)
    description: str = ""
    features: List[str] = Field(default_factory=list)
    image: str = ""

    # Provenance
    url: str = ""
    site_name: str = Field(default="", alias="siteName")
    parsed_by: ParsedBy = Field(default=ParsedBy.UNKNOWN, alias="parsedBy")

    # Retailer-only fields
    category_path: List[str] = Field(default_factory=list, alias="categoryPath")
    rating: float = Field(default=0.0, ge=0.0)
    reviews: int = Field(default=0, ge=0)

    def to_payload(self) -> Dict[str, Any]:
        """Serialize with the camelCase keys consumers expect."""
        return self.model_dump(by_alias=True, mode="json")

    def get_present_fields(self) -> List[str]:
        """Return list of non-empty fields."""
        present = ["url", "parsed_by"]
        if self.title:
            present.append("title")
        if self.price.found:
            present.append("price")
        if self.description and self.description != DESCRIPTION_NOT_FOUND:
            present.append("description")
        if self.features:
            present.append("features")
        if self.image:
            present.append("image")
        if self.category_path:
            present.append("category_path")
        if self.rating:
            present.append("rating")
        if self.reviews:
            present.append("reviews")
        return present

    def get_missing_fields(self) -> List[str]:
        """Return list of empty optional fields."""
        all_optional = [
            "title", "price", "description", "features", "image",
            "category_path", "rating", "reviews",
        ]
        present = self.get_present_fields()
        return [f for f in all_optional if f not in present]
