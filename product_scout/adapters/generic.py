"""
Generic product extractor for unknown sites.

Each field is an independent fallback chain over structured data, scoped and
whole-document selector scans, proximity to the title and a regex pass over
visible container text. Nothing here raises for a missing field; each chain
ends in a typed default.
"""
import re
from typing import List, Optional

from product_scout.adapters.document import ProductDocument
from product_scout.layers.candidates import SELECTORS, CandidateLocator, ContainerMatch, FieldKind
from product_scout.layers.relevance import RelevanceFilter
from product_scout.layers.structured_data import StructuredDataReader
from product_scout.models.product import (
    DESCRIPTION_NOT_FOUND,
    FEATURES_NOT_FOUND,
    PRICE_NOT_FOUND,
    ParsedBy,
    PriceInfo,
    ProductRecord,
)
from product_scout.utils.logger import LayerLogger
from product_scout.utils.text_normalizer import (
    clean_price_text,
    find_currency_amount,
    is_price_format,
    normalize_whitespace,
    price_info_from_text,
)

TITLE_SEPARATORS = "|-–—:·"
_EDGE_SEPARATORS_RE = re.compile(rf"^[\s{re.escape(TITLE_SEPARATORS)}]+|[\s{re.escape(TITLE_SEPARATORS)}]+$")
PROXIMITY_SIBLINGS = 3


class GenericExtractor:
    """
    Generic Extractor - heuristic extraction for any product page.

    Stateless: every method takes the document it works on, so one instance
    can serve any number of documents.
    """

    def __init__(
        self,
        reader: Optional[StructuredDataReader] = None,
        locator: Optional[CandidateLocator] = None,
        relevance: Optional[RelevanceFilter] = None,
    ):
        self.reader = reader or StructuredDataReader()
        self.locator = locator or CandidateLocator()
        self.relevance = relevance or RelevanceFilter()
        self.logger = LayerLogger("generic_extractor")

    # =========================================================================
    # TITLE
    # =========================================================================

    def extract_title(self, document: ProductDocument) -> str:
        """First non-empty title candidate, else the cleaned document title."""
        for candidate in self.locator.iter_candidates(document, FieldKind.TITLE):
            text = document.text_of(candidate.element, single_line=True)
            if text:
                return text

        doc_title = normalize_whitespace(document.title)
        site_name = self.extract_site_name(document)
        if site_name and site_name in doc_title:
            doc_title = doc_title.replace(site_name, "")
        title = _EDGE_SEPARATORS_RE.sub("", doc_title).strip()

        self.logger.log_fallback(
            from_source="title_selectors",
            to_source="document_title",
            reason="No title selector matched",
            url=document.url,
        )
        return title

    def extract_site_name(self, document: ProductDocument) -> str:
        """og:site_name, then meta author, then the bare hostname."""
        site_name = document.meta_content(property="og:site_name") or document.meta_content(name="author")
        if site_name:
            return site_name
        hostname = document.hostname
        return hostname[4:] if hostname.startswith("www.") else hostname

    # =========================================================================
    # PRICE
    # =========================================================================

    def extract_price(self, document: ProductDocument) -> str:
        """Cleaned display price, or the 'Price not found' sentinel."""
        return self.extract_price_info(document).display_value

    def extract_price_info(self, document: ProductDocument) -> PriceInfo:
        """
        Price fallback chain.

        PRIORITY ORDER:
        1. Structured data (JSON-LD, then microdata / OpenGraph)
        2. Main-container selector scan, current prices only
        3. Whole-document selector scan, current prices only
        4. Current price next to the title
        5. First reference price seen by either scan
        6. Currency amount in the container's visible text
        """
        # PRIORITY 1: Structured data
        structured = self.reader.read_price(document)
        if structured is not None and structured.display_value:
            return structured

        container = self.locator.find_main_container(document)
        secondary: Optional[str] = None

        # PRIORITY 2-3: Selector scans, scoped then whole document
        scopes = [container.element, None] if container.is_scoping else [None]
        for scope in scopes:
            scan = self.relevance.scan_prices(
                document,
                self.locator.iter_candidates(document, FieldKind.PRICE, scope),
            )
            if scan.primary:
                self.logger.log_action(
                    "price_scan",
                    "found",
                    selector=scan.selector,
                    scoped=scope is not None,
                    from_attribute=scan.from_attribute,
                )
                return price_info_from_text(scan.primary)
            if secondary is None:
                secondary = scan.secondary

        # PRIORITY 4: Proximity to the title
        near_title = self._find_price_near_title(document)
        if near_title:
            return price_info_from_text(near_title)

        # PRIORITY 5: Reference price as a last selector-based resort
        if secondary:
            self.logger.log_fallback(
                from_source="primary_price",
                to_source="secondary_price",
                reason="Only reference prices matched",
                url=document.url,
            )
            return price_info_from_text(secondary)

        # PRIORITY 6: Regex over visible container text
        regex_price = self._extract_price_with_regex(document, container)
        if regex_price:
            return price_info_from_text(regex_price)

        self.logger.log_decision(
            decision="price_not_found",
            reason="All price sources exhausted",
            url=document.url,
        )
        return PriceInfo.not_found()

    def _find_price_near_title(self, document: ProductDocument) -> Optional[str]:
        """Check the h1's next siblings and the rest of its parent's children."""
        heading = document.select_one("h1")
        if heading is None:
            return None

        nearby = heading.find_next_siblings(True, limit=PROXIMITY_SIBLINGS)
        if heading.parent is not None:
            for child in heading.parent.find_all(True, recursive=False):
                if child is not heading and not any(child is n for n in nearby):
                    nearby.append(child)

        for element in nearby:
            text = document.text_of(element)
            if not text or not is_price_format(text):
                continue
            if self.relevance.is_recommendation_region(element):
                continue
            if not self.relevance.is_secondary_price(document, element):
                return clean_price_text(text)
        return None

    def _extract_price_with_regex(self, document: ProductDocument, container: ContainerMatch) -> Optional[str]:
        if self.relevance.is_recommendation_region(container.element):
            return None
        text = document.text_of(container.element, skip=self.relevance.is_recommendation_marker)
        return find_currency_amount(text)

    # =========================================================================
    # DESCRIPTION AND FEATURES
    # =========================================================================

    def extract_description(self, document: ProductDocument) -> str:
        """First non-empty description element, scoped then whole document."""
        for candidate in self.locator.locate(document, FieldKind.DESCRIPTION):
            if candidate.text:
                return candidate.text
        return DESCRIPTION_NOT_FOUND

    def extract_feature_list(self, document: ProductDocument) -> List[str]:
        """
        Feature items from the first selector that yields any text.

        Recommendation regions are only filtered in the whole-document pass.
        """
        container = self.locator.find_main_container(document)
        scopes = [container.element, None] if container.is_scoping else [None]

        for scope in scopes:
            for selector in SELECTORS[FieldKind.FEATURES]:
                features = []
                for candidate in self.locator.iter_candidates(document, FieldKind.FEATURES, scope, (selector,)):
                    if not candidate.text:
                        continue
                    if scope is None and self.relevance.is_recommendation_region(candidate.element):
                        continue
                    features.append(candidate.text)
                if features:
                    return features
        return []

    def extract_features(self, document: ProductDocument) -> str:
        """Feature items joined by newlines, or the 'No features found' sentinel."""
        features = self.extract_feature_list(document)
        return "\n".join(features) if features else FEATURES_NOT_FOUND

    # =========================================================================
    # IMAGE
    # =========================================================================

    def extract_main_image(self, document: ProductDocument) -> str:
        """First image candidate with a source, else the largest non-recommendation <img>."""
        for candidate in self.locator.locate(document, FieldKind.IMAGE):
            if candidate.text:
                return candidate.text

        largest = ""
        largest_area = 0
        for img in document.select("img"):
            width, height = document.image_size(img)
            area = width * height
            if area > largest_area and not self.relevance.is_recommendation_region(img):
                source = document.image_source(img)
                if source:
                    largest, largest_area = source, area
        return largest

    # =========================================================================
    # RECORD
    # =========================================================================

    def get_product(self, document: ProductDocument) -> ProductRecord:
        """Run every field chain and assemble the record."""
        price = self.extract_price_info(document)
        record = ProductRecord(
            title=self.extract_title(document),
            price=price,
            description=self.extract_description(document),
            features=self.extract_feature_list(document),
            image=self.extract_main_image(document),
            url=document.url,
            site_name=self.extract_site_name(document),
            parsed_by=ParsedBy.GENERIC,
        )
        self.logger.log_extraction(
            parsed_by=record.parsed_by.value,
            fields_present=record.get_present_fields(),
            fields_missing=record.get_missing_fields(),
            price_found=price.display_value != PRICE_NOT_FOUND,
        )
        return record
