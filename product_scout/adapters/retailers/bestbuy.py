"""Best Buy product pages."""
from product_scout.adapters.retailers.base import SiteExtractor
from product_scout.models.product import ParsedBy


class BestBuyExtractor(SiteExtractor):
    """Best Buy SKU pages (/site/...skuId=...)."""

    parsed_by = ParsedBy.BESTBUY
    site_name = "Best Buy"
    version = "2"

    title_selectors = (".sku-title h1", ".heading-5.v-fw-regular")
    price_selectors = (
        ".priceView-customer-price span",
        '.priceView-hero-price span[aria-hidden="true"]',
        ".pricing-price__current-price",
        '.sr-only[data-automation="current-price"]',
        ".current-price",
        ".price-box",
        '[data-testid="customer-price"]',
    )
    description_selectors = (".product-description", '[data-testid="product-description"]')
    feature_container_selectors = (".features-list", ".product-data-value")
    image_selectors = (".primary-image", '[data-testid="carousel-main-image"]')
    breadcrumb_selectors = (".container-v3 .breadcrumb-list", '[data-track="Breadcrumb"]')
    rating_selectors = (".c-review-average", '[data-testid="customer-rating"]')
    review_selectors = (".c-review-count", '[data-testid="review-count"]')
