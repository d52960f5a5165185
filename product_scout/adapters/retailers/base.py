"""
Base class for retailer-specific extractors.

A retailer extractor trades recall for precision: each field reads from a
short, ordered list of selectors calibrated to that retailer's markup and
stops there. Subclasses override selector tuples and, where a retailer
needs it, individual field methods.
"""
import re
from typing import List, Optional, Tuple

from bs4 import Tag

from product_scout.adapters.document import ProductDocument
from product_scout.layers.candidates import CandidateLocator, FieldKind
from product_scout.layers.relevance import RelevanceFilter
from product_scout.layers.structured_data import StructuredDataReader
from product_scout.models.product import ParsedBy, PriceInfo, ProductRecord
from product_scout.utils.logger import LayerLogger
from product_scout.utils.text_normalizer import (
    first_number,
    format_display,
    iso_to_symbol,
    parse_amount,
    price_info_from_text,
)

_REVIEW_COUNT_RE = re.compile(r"\d[\d,]*")


class SiteExtractor:
    """
    Site Extractor - field chains over retailer-specific selectors.

    Attributes:
        parsed_by: Provenance tag written into every record.
        site_name: Display name for the retailer.
        version: Bumped whenever the selector tables are recalibrated.
    """

    parsed_by: ParsedBy = ParsedBy.UNKNOWN
    site_name: str = ""
    version: str = "1"

    title_selectors: Tuple[str, ...] = ()
    price_selectors: Tuple[str, ...] = ()
    description_selectors: Tuple[str, ...] = ()
    feature_container_selectors: Tuple[str, ...] = ()
    feature_item_selector: str = "li"
    image_selectors: Tuple[str, ...] = ()
    breadcrumb_selectors: Tuple[str, ...] = ()
    breadcrumb_item_selector: str = "a"
    rating_selectors: Tuple[str, ...] = ()
    review_selectors: Tuple[str, ...] = ()

    def __init__(
        self,
        reader: Optional[StructuredDataReader] = None,
        relevance: Optional[RelevanceFilter] = None,
        locator: Optional[CandidateLocator] = None,
    ):
        self.reader = reader or StructuredDataReader()
        self.relevance = relevance or RelevanceFilter()
        self.locator = locator or CandidateLocator()
        self.logger = LayerLogger(f"retailer_{self.parsed_by.value}")

    # =========================================================================
    # FIELDS
    # =========================================================================

    def extract_title(self, document: ProductDocument) -> str:
        """Empty when every title selector misses; no generic fallback."""
        for selector in self.title_selectors:
            element = document.select_one(selector)
            if element is not None:
                text = document.text_of(element, single_line=True)
                if text:
                    return text
        return ""

    def extract_price(self, document: ProductDocument) -> PriceInfo:
        """Visible price selectors, then JSON-LD offers, then the sentinel."""
        visible = self._extract_visible_price(document)
        if visible is not None:
            return visible

        structured = self._extract_jsonld_price(document)
        if structured is not None:
            return structured

        self.logger.log_decision(
            decision="price_not_found",
            reason="Retailer price selectors and structured data exhausted",
            url=document.url,
            version=self.version,
        )
        return PriceInfo.not_found()

    def _extract_visible_price(
        self,
        document: ProductDocument,
        selectors: Optional[Tuple[str, ...]] = None,
    ) -> Optional[PriceInfo]:
        candidates = self.locator.iter_candidates(
            document, FieldKind.PRICE, selectors=selectors or self.price_selectors
        )
        scan = self.relevance.scan_prices(document, candidates)
        display = scan.primary or scan.secondary
        if display:
            return price_info_from_text(display)
        return None

    def _extract_jsonld_price(self, document: ProductDocument) -> Optional[PriceInfo]:
        offer = self.reader.read_offer(document, product_only=False)
        if offer is None:
            return None
        value = parse_amount(offer.price)
        symbol = iso_to_symbol(offer.currency_code)
        return PriceInfo(value=value, display_value=format_display(symbol, value), currency=symbol)

    def extract_description(self, document: ProductDocument) -> str:
        element = document.select_first(self.description_selectors)
        return document.text_of(element) if element is not None else ""

    def extract_features(self, document: ProductDocument) -> List[str]:
        container = document.select_first(self.feature_container_selectors)
        if container is None:
            return []
        items = document.select(self.feature_item_selector, container)
        return [text for text in (document.text_of(item, single_line=True) for item in items) if text]

    def extract_image(self, document: ProductDocument) -> str:
        for selector in self.image_selectors:
            element = document.select_one(selector)
            if element is not None:
                source = document.image_source(element)
                if source:
                    return source
        return ""

    def extract_category_path(self, document: ProductDocument) -> List[str]:
        container = document.select_first(self.breadcrumb_selectors)
        if container is None:
            return []
        items = document.select(self.breadcrumb_item_selector, container)
        return [text for text in (document.text_of(item, single_line=True) for item in items) if text]

    def extract_rating(self, document: ProductDocument) -> float:
        element = document.select_first(self.rating_selectors)
        if element is None:
            return 0.0
        return self._parse_rating(self._rating_text(document, element))

    def _rating_text(self, document: ProductDocument, element: Tag) -> str:
        return (
            document.text_of(element, single_line=True)
            or element.get("aria-label")
            or element.get("title")
            or ""
        )

    def _parse_rating(self, text: str) -> float:
        value = first_number(text)
        return value if value is not None and value >= 0 else 0.0

    def extract_review_count(self, document: ProductDocument) -> int:
        element = document.select_first(self.review_selectors)
        if element is None:
            return 0
        text = document.text_of(element, single_line=True) or element.get("aria-label") or ""
        return self._parse_review_count(text)

    def _parse_review_count(self, text: str) -> int:
        match = _REVIEW_COUNT_RE.search(text or "")
        return int(match.group(0).replace(",", "")) if match else 0

    # =========================================================================
    # RECORD
    # =========================================================================

    def get_product(self, document: ProductDocument) -> ProductRecord:
        """Run every field chain and assemble the record."""
        record = ProductRecord(
            title=self.extract_title(document),
            price=self.extract_price(document),
            description=self.extract_description(document),
            features=self.extract_features(document),
            image=self.extract_image(document),
            url=document.url,
            site_name=self.site_name,
            parsed_by=self.parsed_by,
            category_path=self.extract_category_path(document),
            rating=self.extract_rating(document),
            reviews=self.extract_review_count(document),
        )
        self.logger.log_extraction(
            parsed_by=record.parsed_by.value,
            fields_present=record.get_present_fields(),
            fields_missing=record.get_missing_fields(),
            version=self.version,
        )
        return record
