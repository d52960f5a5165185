"""
Page Classification Layer for the Product Scout extraction engine.

Decides whether a document is a single product detail page rather than a
search, category or home page. Classification is deterministic and never
raises: a missing signal is a negative vote.
"""
import re
from dataclasses import dataclass, field
from typing import List, Optional

from product_scout.adapters.document import ProductDocument
from product_scout.adapters.generic import GenericExtractor
from product_scout.config import config
from product_scout.layers.candidates import CandidateLocator
from product_scout.layers.relevance import RelevanceFilter
from product_scout.layers.site_detection import (
    RetailerId,
    SiteDetector,
    is_fast_path,
    is_product_path,
)
from product_scout.layers.structured_data import StructuredDataReader
from product_scout.models.product import PRICE_NOT_FOUND
from product_scout.utils.logger import LayerLogger

ADD_TO_CART_SELECTORS = (
    'button[data-test*="add-to-cart"]',
    'button[id*="add-to-cart"]',
    'button[class*="add-to-cart"]',
    'button[aria-label*="add to cart" i]',
    'input[type="submit"][value*="Add to Cart" i]',
    'button:-soup-contains("Add to Cart")',
    'button:-soup-contains("Add to Basket")',
    'button:-soup-contains("Buy Now")',
)
BUTTON_SELECTOR = 'button, input[type="submit"], a[role="button"]'
ADD_TO_CART_RE = re.compile(r"add to cart|add to basket|buy now", re.IGNORECASE)
DESCRIPTION_MARKER_SELECTOR = "#productDescription, .product-description, #feature-bullets"

# Retailers that must show a product marker before the generic checks apply.
STRUCTURED_RELAXATION_RETAILERS = (RetailerId.WALMART,)


@dataclass
class PageClassification:
    """A product-page decision plus the signals that produced it."""
    is_product_page: bool
    retailer: RetailerId = RetailerId.UNKNOWN
    signals: List[str] = field(default_factory=list)
    rejected_by: Optional[str] = None


class PageClassifier:
    """
    Page Classifier - is this a product detail page?

    PRIORITY ORDER:
    1. Reject without a title
    2. Accept a fast-path retailer URL with a title
    3. Reject without a price
    4. Relaxed retailers need a structured Product marker or a product path
    5. Everyone else needs an add-to-cart affordance
    6. Require a description or feature-bullet element
    7. Reject dense listings without an identified product container
    """

    def __init__(
        self,
        generic: Optional[GenericExtractor] = None,
        detector: Optional[SiteDetector] = None,
        reader: Optional[StructuredDataReader] = None,
        locator: Optional[CandidateLocator] = None,
        relevance: Optional[RelevanceFilter] = None,
        listing_threshold: Optional[int] = None,
    ):
        self.reader = reader or StructuredDataReader()
        self.locator = locator or CandidateLocator()
        self.relevance = relevance or RelevanceFilter()
        self.generic = generic or GenericExtractor(self.reader, self.locator, self.relevance)
        self.detector = detector or SiteDetector()
        self.listing_threshold = (
            listing_threshold if listing_threshold is not None else config.LISTING_DENSITY_THRESHOLD
        )
        self.logger = LayerLogger("page_classifier")

    def is_product_detail_page(self, document: ProductDocument) -> bool:
        return self.classify(document).is_product_page

    def classify(self, document: ProductDocument) -> PageClassification:
        """Classify a document; unexpected errors yield a negative result."""
        try:
            return self._classify(document)
        except Exception as e:
            self.logger.log_error(
                error=str(e),
                error_type=type(e).__name__,
                url=document.url,
                stage="classification",
            )
            return PageClassification(is_product_page=False, rejected_by="error")

    def _classify(self, document: ProductDocument) -> PageClassification:
        signals: List[str] = []
        retailer = self.detector.detect(document).retailer
        path = document.path

        # PRIORITY 1: Title
        if not self.generic.extract_title(document):
            return self._reject(document, retailer, signals, "no_title")
        signals.append("title")

        # PRIORITY 2: Fast-path retailer URL
        if is_fast_path(retailer, path):
            signals.append(f"fast_path:{retailer.value}")
            return self._accept(document, retailer, signals, "fast_path_url")

        # PRIORITY 3: Price
        price = self.generic.extract_price(document)
        if not price or price == PRICE_NOT_FOUND:
            return self._reject(document, retailer, signals, "no_price")
        signals.append("price")

        # PRIORITY 4: Retailer relaxation
        if retailer in STRUCTURED_RELAXATION_RETAILERS:
            if self.reader.has_product_type_marker(document):
                signals.append("jsonld_product")
                return self._accept(document, retailer, signals, "structured_product_marker")
            if is_product_path(retailer, path):
                signals.append("product_path")
                return self._accept(document, retailer, signals, "product_path")
            return self._reject(document, retailer, signals, "no_product_marker")

        # PRIORITY 5: Add-to-cart affordance
        if not self.has_add_to_cart(document):
            return self._reject(document, retailer, signals, "no_add_to_cart")
        signals.append("add_to_cart")

        # PRIORITY 6: Description or feature bullets
        if document.select_one(DESCRIPTION_MARKER_SELECTOR) is None:
            return self._reject(document, retailer, signals, "no_description")
        signals.append("description")

        # PRIORITY 7: Listing density
        listing_items = self.locator.count_listing_items(document)
        if listing_items > self.listing_threshold:
            if not self.locator.has_identified_container(document):
                return self._reject(document, retailer, signals, "listing_density")
            signals.append("main_container")

        return self._accept(document, retailer, signals, "all_signals_present")

    def has_add_to_cart(self, document: ProductDocument) -> bool:
        """Fixed selectors first, then button/link text outside cross-sell regions."""
        for selector in ADD_TO_CART_SELECTORS:
            if document.select_one(selector) is not None:
                return True

        for button in document.select(BUTTON_SELECTOR):
            text = document.text_of(button, single_line=True) or button.get_text(" ", strip=True) or button.get("value", "")
            if ADD_TO_CART_RE.search(text) and not self.relevance.is_recommendation_region(button):
                return True
        return False

    def _accept(self, document, retailer, signals, reason) -> PageClassification:
        self._log_classification(document, "product_page", reason, signals, None)
        return PageClassification(is_product_page=True, retailer=retailer, signals=signals)

    def _reject(self, document, retailer, signals, rejected_by) -> PageClassification:
        self._log_classification(document, "not_product_page", rejected_by, signals, rejected_by)
        return PageClassification(
            is_product_page=False,
            retailer=retailer,
            signals=signals,
            rejected_by=rejected_by,
        )

    def _log_classification(self, document, decision: str, reason: str, signals: List[str], blocked_by):
        """Log classification decision with the blocking rule."""
        self.logger.log_classification(
            result=decision,
            reason=reason,
            signals_used=list(signals),
            signals_blocked=[blocked_by] if blocked_by else [],
            url=document.url,
        )
