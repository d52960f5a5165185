"""
Candidate Location Layer for the Product Scout extraction engine.

Turns a field kind (title, price, description, features, image) into an
ordered list of candidate elements using fixed selector tables, and locates
the main product container used to scope those queries.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from bs4 import Tag

from product_scout.adapters.document import ProductDocument, Scope
from product_scout.config import config
from product_scout.utils.logger import LayerLogger


class FieldKind(str, Enum):
    """Product field a candidate is located for."""
    TITLE = "title"
    PRICE = "price"
    DESCRIPTION = "description"
    FEATURES = "features"
    IMAGE = "image"


class ContainerSource(str, Enum):
    """How the main product container was located."""
    SELECTOR = "selector"
    HEADING = "heading"
    MAIN = "main"
    BODY = "body"


# Ordered: semantic markers, then naming conventions, then broad patterns.
SELECTORS: Dict[FieldKind, Tuple[str, ...]] = {
    FieldKind.TITLE: (
        "h1.product-title",
        "h1.product_title",
        "h1.productTitle",
        'h1[itemprop="name"]',
        ".product-title h1",
        ".product-name h1",
        "h1",
        '[data-testid="product-title"]',
        '[class*="product-title"]',
        '[class*="productTitle"]',
        "#product-title",
        "#productTitle",
        ".product-title",
        ".product-name",
    ),
    FieldKind.PRICE: (
        '[itemprop="price"]',
        '[property="product:price:amount"]',
        '[aria-label*="price" i]',
        '[aria-label*="cost" i]',
        ".product-price",
        ".price-current",
        ".current-price",
        ".offer-price",
        ".sale-price",
        ".product__price",
        "[data-price]",
        '[class*="price"]',
        '[class*="Price"]',
        ".price",
        "#price",
        ".a-price .a-offscreen",
        ".price-view-price",
        ".priceView-customer-price",
    ),
    FieldKind.DESCRIPTION: (
        '[itemprop="description"]',
        ".product-description",
        ".product__description",
        "#description",
        ".description",
        '[class*="description"]',
        '[class*="Description"]',
        '[data-testid="product-description"]',
        "#productDescription",
        "#product-description",
        "#product_description",
        "#feature-bullets",
        ".feature-bullets",
        ".product-features",
    ),
    FieldKind.FEATURES: (
        ".product-features li",
        ".features li",
        ".specifications li",
        ".tech-specs li",
        "#feature-bullets ul li",
        '[class*="feature"] li',
        ".specifications tr",
        ".tech-specs tr",
        ".product-specs tr",
        "#productDetails tr",
        '[class*="specification"] tr',
    ),
    FieldKind.IMAGE: (
        '[itemprop="image"]',
        ".product-image-main img",
        ".product-image img",
        ".main-image img",
        ".product__image img",
        ".gallery-image img",
        '[class*="product"] img',
        '[class*="gallery"] img:first-of-type',
        '[data-testid="product-image"] img',
        "#product-image img",
        "#productImage",
        "#main-image",
    ),
}

CONTAINER_SELECTORS = (
    '[itemtype*="Product"]',
    '[itemscope][itemtype*="Product"]',
    ".product-main",
    ".product-container",
    ".product-detail",
    ".product-page",
    ".product-content",
    ".product-info",
    "#product-container",
    "#product-main",
    '[class*="product-detail"]',
    '[class*="productDetail"]',
    '[class*="ProductDetail"]',
)

LISTING_ITEM_SELECTOR = '[itemtype*="Product"], .product-item, .s-result-item'


@dataclass
class Candidate:
    """An element located for a field, with the text or URL it carries."""
    element: Tag
    selector: str
    text: str
    scoped: bool
    rank: int


@dataclass
class ContainerMatch:
    """The main product container and how it was found."""
    element: Scope
    source: ContainerSource
    selector: Optional[str] = None

    @property
    def is_scoping(self) -> bool:
        """False when the container is just the page body."""
        return self.source != ContainerSource.BODY


class CandidateLocator:
    """
    Candidate Locator - ordered selector-based candidates per field.

    Scoped queries run inside the main product container before the whole
    document is queried. Each element is reported once, in priority order.
    """

    def __init__(self, heading_depth: Optional[int] = None):
        self.heading_depth = heading_depth if heading_depth is not None else config.CONTAINER_HEADING_DEPTH
        self.logger = LayerLogger("candidates")

    # =========================================================================
    # MAIN CONTAINER
    # =========================================================================

    def find_main_container(self, document: ProductDocument) -> ContainerMatch:
        """
        Locate the primary product region.

        PRIORITY ORDER:
        1. Structural product-region selectors
        2. Ancestor of the first <h1>, a bounded number of levels up
        3. <main>
        4. <body>
        """
        # PRIORITY 1: Structural selectors
        for selector in CONTAINER_SELECTORS:
            element = document.select_one(selector)
            if element is not None:
                return ContainerMatch(element, ContainerSource.SELECTOR, selector)

        # PRIORITY 2: Infer from the first heading
        heading = document.select_one("h1")
        if heading is not None:
            container = heading.parent
            for _ in range(self.heading_depth):
                if container is None or not isinstance(container, Tag) or container.name in ("body", "html", "[document]"):
                    break
                if container.parent is None or container.parent.name in ("body", "html", "[document]"):
                    break
                container = container.parent
            if container is not None and container.name not in ("html", "[document]"):
                return ContainerMatch(container, ContainerSource.HEADING)

        # PRIORITY 3-4: main content region, then body
        main = document.select_one("main")
        if main is not None:
            return ContainerMatch(main, ContainerSource.MAIN, "main")
        return ContainerMatch(document.body, ContainerSource.BODY)

    def has_identified_container(self, document: ProductDocument) -> bool:
        """
        True when a structural product region exists that is neither a
        listing card nor nested inside one.
        """
        match = self.find_main_container(document)
        if match.source != ContainerSource.SELECTOR:
            return False
        return document.closest(match.element, LISTING_ITEM_SELECTOR) is None

    def count_listing_items(self, document: ProductDocument) -> int:
        return len(document.select(LISTING_ITEM_SELECTOR))

    # =========================================================================
    # CANDIDATES
    # =========================================================================

    def iter_candidates(
        self,
        document: ProductDocument,
        kind: FieldKind,
        scope: Optional[Scope] = None,
        selectors: Optional[Tuple[str, ...]] = None,
    ) -> Iterator[Candidate]:
        """Yield candidates for one scope in selector priority order."""
        scoped = scope is not None
        rank = 0
        for selector in selectors or SELECTORS[kind]:
            for element in document.select(selector, scope):
                if kind == FieldKind.IMAGE:
                    text = document.image_source(element)
                else:
                    text = document.text_of(element)
                yield Candidate(element, selector, text, scoped, rank)
                rank += 1

    def locate(
        self,
        document: ProductDocument,
        kind: FieldKind,
        container: Optional[ContainerMatch] = None,
    ) -> List[Candidate]:
        """
        Return ALL candidates for a field, scoped container matches first.

        Titles are never scoped: many sites render the product name outside
        any product wrapper.
        """
        candidates: List[Candidate] = []
        seen = set()

        scopes: List[Optional[Scope]] = []
        if kind != FieldKind.TITLE:
            if container is None:
                container = self.find_main_container(document)
            if container.is_scoping:
                scopes.append(container.element)
        scopes.append(None)

        for scope in scopes:
            for candidate in self.iter_candidates(document, kind, scope):
                if id(candidate.element) in seen:
                    continue
                seen.add(id(candidate.element))
                candidate.rank = len(candidates)
                candidates.append(candidate)

        self.logger.log_action(
            "locate_candidates",
            "completed",
            field=kind.value,
            candidate_count=len(candidates),
        )
        return candidates
