"""
Relevance Filter for the Product Scout extraction engine.

Separates the primary product from cross-sell regions, and the current
price from reference ("was", list, strikethrough) prices.
"""
import re
from dataclasses import dataclass
from typing import Iterable, Optional

from bs4 import Tag

from product_scout.adapters.document import ProductDocument
from product_scout.config import config
from product_scout.layers.candidates import Candidate
from product_scout.utils.logger import LayerLogger
from product_scout.utils.text_normalizer import clean_price_text, is_price_format, parse_amount

RECOMMENDATION_KEYWORDS = (
    "recommendation",
    "carousel",
    "similar",
    "also-bought",
    "related",
    "suggestion",
    "you-may-like",
    "sponsored",
    "also-viewed",
    "accessory",
    "upsell",
    "slider",
    "other-product",
    "people-also",
)

SECONDARY_PRICE_KEYWORDS = ("was", "original", "regular", "list", "msrp", "rrp", "retail", "before", "old")
SECONDARY_PRICE_RE = re.compile(r"\b(?:" + "|".join(SECONDARY_PRICE_KEYWORDS) + r")\b", re.IGNORECASE)


@dataclass
class PriceScanResult:
    """Outcome of one selector scan over price candidates."""
    primary: Optional[str] = None
    secondary: Optional[str] = None
    selector: Optional[str] = None
    from_attribute: bool = False


class RelevanceFilter:
    """
    Relevance Filter - primary product vs. everything else.

    Ancestor walks are bounded by `depth` so deeply nested pages stay cheap.
    """

    def __init__(self, depth: Optional[int] = None):
        self.depth = depth if depth is not None else config.RECOMMENDATION_DEPTH
        self.logger = LayerLogger("relevance")

    def is_recommendation_region(self, element: Optional[Tag]) -> bool:
        """True if the element or one of its nearest ancestors looks like a cross-sell region."""
        if element is None:
            return True

        node = element
        for _ in range(self.depth + 1):
            if node is None or not isinstance(node, Tag) or node.name == "[document]":
                return False
            if self.is_recommendation_marker(node):
                return True
            node = node.parent
        return False

    def is_recommendation_marker(self, node: Tag) -> bool:
        """True if this element's own class or id names a cross-sell region."""
        classes = node.get("class") or []
        if isinstance(classes, str):
            classes = [classes]
        marker = (" ".join(classes) + " " + (node.get("id") or "")).lower()
        return any(keyword in marker for keyword in RECOMMENDATION_KEYWORDS)

    def is_secondary_price(self, document: ProductDocument, element: Optional[Tag]) -> bool:
        """
        True if the element reads as a reference price.

        Checks the element's text and its parent's text for secondary-price
        keywords, then strikethrough styling.
        """
        if element is None:
            return False

        if SECONDARY_PRICE_RE.search(document.text_of(element)):
            return True
        parent = element.parent
        if isinstance(parent, Tag) and parent.name != "[document]":
            if SECONDARY_PRICE_RE.search(document.text_of(parent)):
                return True

        return document.is_struck_through(element)

    def scan_prices(
        self,
        document: ProductDocument,
        candidates: Iterable[Candidate],
        skip_recommendations: bool = True,
    ) -> PriceScanResult:
        """
        Walk price candidates in order and pick the current price.

        Returns as soon as a non-secondary price is seen. The first secondary
        price is remembered as a last resort. A positive data-price attribute
        on a scanned element short-circuits.
        """
        result = PriceScanResult()

        for candidate in candidates:
            element = candidate.element
            if skip_recommendations and self.is_recommendation_region(element):
                continue

            text = candidate.text.strip()
            if text and is_price_format(text):
                cleaned = clean_price_text(text)
                if not self.is_secondary_price(document, element):
                    result.primary = cleaned
                    result.selector = candidate.selector
                    return result
                if result.secondary is None:
                    result.secondary = cleaned
                    self.logger.log_decision(
                        decision="secondary_price_deferred",
                        reason="reference price marker",
                        selector=candidate.selector,
                        value=cleaned,
                    )

            data_price = element.get("data-price")
            if data_price and parse_amount(data_price) > 0:
                result.primary = clean_price_text(data_price)
                result.selector = candidate.selector
                result.from_attribute = True
                return result

        return result
