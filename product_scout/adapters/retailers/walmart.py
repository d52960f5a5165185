"""Walmart product pages."""
import re
from typing import Optional

from product_scout.adapters.document import ProductDocument
from product_scout.adapters.retailers.base import SiteExtractor
from product_scout.layers.candidates import FieldKind
from product_scout.models.product import ParsedBy, PriceInfo
from product_scout.utils.text_normalizer import (
    detect_currency,
    format_display,
    iso_to_symbol,
    normalize_whitespace,
    parse_amount,
)

WAS_PRICE_RE = re.compile(r"was\s*\$", re.IGNORECASE)
NOW_RE = re.compile(r"\b(?:now|current)\b", re.IGNORECASE)
DOLLAR_AMOUNT_RE = re.compile(r"\$\s*\d")
AMOUNT_RE = re.compile(r"\d[\d,]*(?:\.\d{1,2})?")
STARS_RE = re.compile(r"(\d+(?:\.\d+)?)(?=\s*(?:out of \d+\s*)?stars)", re.IGNORECASE)
REVIEWS_RE = re.compile(r"(\d[\d,]*)\s*(?:reviews|ratings)", re.IGNORECASE)


class WalmartExtractor(SiteExtractor):
    """
    Walmart item pages (/ip/...).

    Price renders late and often appears several times on the page, so
    visible candidates are scored instead of taken in selector order.
    """

    parsed_by = ParsedBy.WALMART
    site_name = "Walmart"
    version = "3"

    title_selectors = (
        "#main-title",
        '[data-fs-element="name"]',
        '[data-testid="product-title"]',
        'h1[itemprop="name"]',
        "h1.prod-ProductTitle",
    )
    price_selectors = (
        '[itemprop="price"]',
        '[data-seo-id="hero-price"]',
        '[data-fs-element="price"]',
        '[data-testid="price"]',
        ".price-characteristic",
        ".prod-PriceSection .price-group",
        ".price",
    )
    description_selectors = (
        '[data-testid="product-description-content"]',
        ".about-desc",
        '[itemprop="description"]',
    )
    feature_container_selectors = (".prod-ProductHighlights",)
    image_selectors = (
        ".prod-HeroImage img",
        '[data-testid="hero-image"]',
        'img[itemprop="image"]',
    )
    breadcrumb_selectors = (".breadcrumb",)
    breadcrumb_item_selector = "li a"
    rating_selectors = ('[itemprop="ratingValue"]', '[aria-label*="stars"]', '[data-testid="rating"]')
    review_selectors = ('[itemprop="reviewCount"]', '[data-testid="review-count"]', '[aria-label*="reviews"]')

    def extract_price(self, document: ProductDocument) -> PriceInfo:
        """
        PRIORITY ORDER:
        1. Microdata price content with ISO currency
        2. Scored visible candidates
        3. JSON-LD offers
        """
        # PRIORITY 1: Microdata
        attr_node = document.select_one('[itemprop="price"][content]')
        if attr_node is not None and attr_node.get("content", "").strip():
            value = parse_amount(attr_node["content"])
            currency_node = document.select_one('[itemprop="priceCurrency"][content]')
            symbol = iso_to_symbol(currency_node.get("content")) if currency_node is not None else "$"
            return PriceInfo(value=value, display_value=format_display(symbol, value), currency=symbol)

        # PRIORITY 2: Visible candidates
        scored = self._extract_scored_price(document)
        if scored is not None:
            return scored

        # PRIORITY 3: JSON-LD
        structured = self._extract_jsonld_price(document)
        if structured is not None:
            return structured

        self.logger.log_decision(
            decision="price_not_found",
            reason="Microdata, visible candidates and JSON-LD exhausted",
            url=document.url,
            version=self.version,
        )
        return PriceInfo.not_found()

    def _extract_scored_price(self, document: ProductDocument) -> Optional[PriceInfo]:
        """Score visible candidates: 'now'/'current' +2, a dollar amount +1."""
        scored = []
        seen = set()
        for candidate in self.locator.iter_candidates(document, FieldKind.PRICE, selectors=self.price_selectors):
            element = candidate.element
            text = normalize_whitespace(candidate.text)
            if id(element) in seen or not text:
                continue
            seen.add(id(element))
            if self.relevance.is_recommendation_region(element) or WAS_PRICE_RE.search(text):
                continue

            score = 0
            if NOW_RE.search(text):
                score += 2
            if DOLLAR_AMOUNT_RE.search(text):
                score += 1
            primary = not self.relevance.is_secondary_price(document, element)
            scored.append((primary, score, candidate.rank, text))

        scored.sort(key=lambda item: (not item[0], -item[1], item[2]))
        for _, _, _, text in scored:
            parsed = self._parse_price_from_text(text)
            if parsed is not None:
                return parsed
        return None

    def _parse_price_from_text(self, text: str) -> Optional[PriceInfo]:
        """Read the amount after 'now' when present, else the first amount."""
        currency = detect_currency(text)
        now_match = re.search(r"\bnow\b", text, re.IGNORECASE)
        region = text[now_match.start():] if now_match else text
        match = AMOUNT_RE.search(region) or AMOUNT_RE.search(text)
        if not match:
            return None
        value = parse_amount(match.group(0))
        return PriceInfo(value=value, display_value=format_display(currency, value), currency=currency)

    def _parse_rating(self, text: str) -> float:
        match = STARS_RE.search(text or "")
        if match:
            return float(match.group(1))
        return super()._parse_rating(text)

    def _parse_review_count(self, text: str) -> int:
        match = REVIEWS_RE.search(text or "")
        if match:
            return int(match.group(1).replace(",", ""))
        return super()._parse_review_count(text)
