"""Target product pages."""
import re
from dataclasses import dataclass
from typing import List, Optional

from product_scout.adapters.document import ProductDocument
from product_scout.adapters.retailers.base import SiteExtractor
from product_scout.config import config
from product_scout.models.product import ParsedBy, PriceInfo
from product_scout.utils.text_normalizer import parse_amount

# Quotes may be backslash-escaped when the blob sits inside a JS string.
_Q = r'\\?"'
PRICE_BLOB_RE = re.compile(
    _Q + "price" + _Q + r"\s*:\s*\{\s*"
    + _Q + "current_retail" + _Q + r"\s*:\s*(\d+(?:\.\d+)?)"
    + r"[^}]*?"
    + _Q + "formatted_current_price" + _Q + r"\s*:\s*"
    + _Q + r"(\$\d[\d,]*(?:\.\d{2})?)"
)
CONTEXT_KEYWORDS = ("tcin", "product_description", "item", "primaryBarcode")


@dataclass
class PriceBlobMatch:
    """A serialized price object found in the page source."""
    value: float
    display_value: str
    index: int
    contextual: bool = False


class TargetExtractor(SiteExtractor):
    """
    Target product pages (/p/...).

    Target always serializes the price server-side into the page source, so
    the raw HTML is scanned before any DOM selector.
    """

    parsed_by = ParsedBy.TARGET
    site_name = "Target"
    version = "4"

    title_selectors = (
        'h1[data-test="product-title"]',
        '[data-test="product-title"]',
        ".Heading__StyledHeading-sc-1mp23s9-0",
    )
    price_selectors = (
        '[data-test="product-price"]',
        '[data-test="current-price"]',
        '[data-test="price-value"]',
        ".merchandising-price h2",
        '[class*="price"]',
        '[class*="Price"]',
    )
    description_selectors = ('[data-test="item-details-description"]',)
    # Styled-component class names are the fallback when data-test hooks are missing.
    feature_container_selectors = ('[data-test="item-details-specifications"]', ".h-padding-h-default")
    image_selectors = (
        '[data-test="product-image"] img',
        ".styles__StyledImageZoomContainer-sc-1lp110x-0 img",
    )
    breadcrumb_selectors = ('[data-test="breadcrumb"]', ".Breadcrumb__BCWrapper-sc-1s3fz3w-0")
    rating_selectors = (
        '[data-test="reviews-rating"]',
        ".RatingsReviewsAggregate__RatingCount-sc-1qr1ubs-0",
    )
    review_selectors = (
        '[data-test="reviews-count"]',
        ".RatingsReviewsAggregate__ReviewCount-sc-1qr1ubs-1",
    )

    def __init__(self, *args, context_window: Optional[int] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.context_window = context_window if context_window is not None else config.PRICE_CONTEXT_WINDOW

    def extract_price(self, document: ProductDocument) -> PriceInfo:
        """
        PRIORITY ORDER:
        1. Serialized price blob in the raw HTML, preferring product context
        2. Visible price selectors (currency glyph required)
        3. JSON-LD offers
        """
        # PRIORITY 1: Raw HTML price blob
        blob = self.find_price_blob(document.raw_html)
        if blob is not None:
            self.logger.log_action(
                "price_blob",
                "found",
                contextual=blob.contextual,
                display_value=blob.display_value,
            )
            return PriceInfo(value=blob.value, display_value=blob.display_value, currency="$")

        self.logger.log_fallback(
            from_source="price_blob",
            to_source="dom_selectors",
            reason="No serialized price object in page source",
            url=document.url,
        )
        # PRIORITY 2-3: Shared visible-selector and JSON-LD chain
        return super().extract_price(document)

    def find_price_blobs(self, html: str) -> List[PriceBlobMatch]:
        """All serialized price objects in source order, flagged by context."""
        matches = []
        for match in PRICE_BLOB_RE.finditer(html or ""):
            start = max(0, match.start() - self.context_window)
            end = min(len(html), match.start() + self.context_window)
            context = html[start:end]
            matches.append(
                PriceBlobMatch(
                    value=float(match.group(1)),
                    display_value=match.group(2),
                    index=match.start(),
                    contextual=any(keyword in context for keyword in CONTEXT_KEYWORDS),
                )
            )
        return matches

    def find_price_blob(self, html: str) -> Optional[PriceBlobMatch]:
        """First contextually relevant blob, else the first blob found."""
        matches = self.find_price_blobs(html)
        if not matches:
            return None
        for match in matches:
            if match.contextual:
                return match
        return matches[0]

    def _extract_jsonld_price(self, document: ProductDocument) -> Optional[PriceInfo]:
        offer = self.reader.read_offer(document, product_only=False)
        if offer is None:
            return None
        return PriceInfo(value=parse_amount(offer.price), display_value=f"${offer.price}", currency="$")
