"""
Structured Data Layer for the Product Scout extraction engine.

Reads machine-readable product metadata embedded in a document:
JSON-LD blocks first, then attribute-based microdata and OpenGraph price tags.
A malformed block is skipped, never fatal.
"""
import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from product_scout.adapters.document import ProductDocument
from product_scout.models.product import PriceInfo
from product_scout.utils.logger import LayerLogger
from product_scout.utils.text_normalizer import (
    clean_price_text,
    detect_currency,
    iso_to_symbol,
    parse_amount,
)

# Splits "http://schema.org/Product" or "schema:Product" down to the bare type.
TYPE_IRI_SEPARATORS_RE = re.compile(r"[/#:]")

JSONLD_SELECTOR = 'script[type="application/ld+json"]'


@dataclass
class StructuredOffer:
    """A raw offer price read from structured data, before display formatting."""
    price: str
    currency_code: Optional[str]
    source: str


class StructuredDataReader:
    """
    Structured Data Reader - embedded product metadata.

    Every JSON-LD block on the page is parsed once per call and flattened
    (arrays and @graph containers) into a list of schema nodes. Nothing is
    cached between calls; the reader holds no per-document state.
    """

    def __init__(self):
        self.logger = LayerLogger("structured_data")

    # =========================================================================
    # JSON-LD PARSING
    # =========================================================================

    def parse_all_jsonld(self, document: ProductDocument) -> List[Dict[str, Any]]:
        """
        Parse ALL JSON-LD scripts into a flat list of schema nodes.

        Blocks that fail to parse are logged and skipped; scanning continues
        with the next block.
        """
        all_nodes: List[Dict[str, Any]] = []
        skipped = 0

        for script in document.select(JSONLD_SELECTOR):
            text = script.string or script.get_text()
            if not text or not text.strip():
                continue
            try:
                data = json.loads(text)
            except (json.JSONDecodeError, TypeError, ValueError):
                skipped += 1
                continue
            all_nodes.extend(self._flatten_jsonld(data))

        if skipped:
            self.logger.log_action(
                "jsonld_parse",
                "malformed_blocks_skipped",
                skipped=skipped,
                nodes_found=len(all_nodes),
            )
        return all_nodes

    def _flatten_jsonld(self, data: Any) -> List[Dict[str, Any]]:
        """
        Flatten JSON-LD structure into a list of schema nodes.

        Handles:
        - Single object with @type
        - @graph containers
        - Arrays of objects
        """
        nodes = []

        if isinstance(data, dict):
            if "@graph" in data and isinstance(data["@graph"], list):
                for item in data["@graph"]:
                    nodes.extend(self._flatten_jsonld(item))

            if "@type" in data:
                nodes.append(data)

        elif isinstance(data, list):
            for item in data:
                nodes.extend(self._flatten_jsonld(item))

        return nodes

    def _type_names(self, node: Dict[str, Any]) -> List[str]:
        schema_type = node.get("@type")
        if isinstance(schema_type, list):
            return [str(t) for t in schema_type]
        if schema_type:
            return [str(schema_type)]
        return []

    def _is_product(self, node: Dict[str, Any]) -> bool:
        return any(
            TYPE_IRI_SEPARATORS_RE.split(t.strip())[-1].lower() == "product"
            for t in self._type_names(node)
        )

    def product_nodes(self, document: ProductDocument) -> List[Dict[str, Any]]:
        """Return all JSON-LD nodes whose @type is Product."""
        return [n for n in self.parse_all_jsonld(document) if self._is_product(n)]

    def has_product_type_marker(self, document: ProductDocument) -> bool:
        """True if any JSON-LD node declares a type containing 'product'."""
        for node in self.parse_all_jsonld(document):
            if any("product" in t.lower() for t in self._type_names(node)):
                return True
        return False

    # =========================================================================
    # OFFERS
    # =========================================================================

    def read_offer(self, document: ProductDocument, product_only: bool = True) -> Optional[StructuredOffer]:
        """
        Return the first offer price found in JSON-LD.

        With product_only=False any node carrying offers is considered, which
        some retailers need because their blocks omit or misspell @type.
        """
        nodes = self.parse_all_jsonld(document)
        if product_only:
            nodes = [n for n in nodes if self._is_product(n)]

        for node in nodes:
            offers = node.get("offers") or node.get("Offers")
            if not offers:
                continue
            if not isinstance(offers, list):
                offers = [offers]
            for offer in offers:
                offer_price = self._offer_price(offer)
                if offer_price is not None:
                    return StructuredOffer(
                        price=offer_price,
                        currency_code=offer.get("priceCurrency") or offer.get("PriceCurrency"),
                        source="jsonld",
                    )
        return None

    def _offer_price(self, offer: Any) -> Optional[str]:
        """Read price, AggregateOffer.lowPrice or priceSpecification.price."""
        if not isinstance(offer, dict):
            return None

        for key in ("price", "Price", "lowPrice"):
            value = offer.get(key)
            if value not in (None, ""):
                return str(value)

        price_spec = offer.get("priceSpecification")
        if isinstance(price_spec, list):
            price_spec = price_spec[0] if price_spec else None
        if isinstance(price_spec, dict) and price_spec.get("price") not in (None, ""):
            return str(price_spec["price"])

        return None

    def read_embedded_price(self, document: ProductDocument) -> Optional[PriceInfo]:
        """Return the first Product offer price from JSON-LD, or None."""
        offer = self.read_offer(document)
        if offer is None:
            return None

        display = clean_price_text(offer.price)
        currency = iso_to_symbol(offer.currency_code) if offer.currency_code else detect_currency(display)
        self.logger.log_action(
            "structured_price",
            "found",
            source=offer.source,
            display_value=display,
        )
        return PriceInfo(value=parse_amount(display), display_value=display, currency=currency)

    def read_microdata_price(self, document: ProductDocument) -> Optional[PriceInfo]:
        """
        Return a price from attribute-based metadata, or None.

        Checks `[itemprop=price][content]` first, then the OpenGraph
        `product:price:amount` meta tag.
        """
        source = None
        raw = None
        currency_code = None

        element = document.select_one('[itemprop="price"][content]')
        if element is not None and element.get("content", "").strip():
            raw = element["content"].strip()
            source = "microdata"
            currency_element = document.select_one('[itemprop="priceCurrency"][content]')
            if currency_element is not None:
                currency_code = currency_element.get("content")
        else:
            raw = document.meta_content(property="product:price:amount")
            if raw:
                source = "opengraph"
                currency_code = document.meta_content(property="product:price:currency")

        if not raw:
            return None

        display = clean_price_text(raw)
        currency = iso_to_symbol(currency_code) if currency_code else detect_currency(display)
        self.logger.log_action("structured_price", "found", source=source, display_value=display)
        return PriceInfo(value=parse_amount(display), display_value=display, currency=currency)

    def read_price(self, document: ProductDocument) -> Optional[PriceInfo]:
        """JSON-LD price, falling back to microdata."""
        return self.read_embedded_price(document) or self.read_microdata_price(document)
