"""Amazon product pages."""
from product_scout.adapters.retailers.base import SiteExtractor
from product_scout.models.product import ParsedBy


class AmazonExtractor(SiteExtractor):
    """Amazon detail pages (#dp layout)."""

    parsed_by = ParsedBy.AMAZON
    site_name = "Amazon"
    version = "2"

    title_selectors = ("#productTitle",)
    price_selectors = (
        "#corePrice_feature_div .a-offscreen",
        "#price_inside_buybox",
        "#priceblock_ourprice",
        ".a-price .a-offscreen",
        "#price",
        ".price",
        ".offer-price",
        ".deal-price",
    )
    description_selectors = ("#productDescription",)
    feature_container_selectors = ("#feature-bullets",)
    feature_item_selector = "li:not(.aok-hidden)"
    image_selectors = ("#imgTagWrapperId img", "#landingImage")
    breadcrumb_selectors = ("#wayfinding-breadcrumbs_container", ".a-breadcrumb")
    rating_selectors = ("#acrPopover", "#averageCustomerReviews .a-icon-alt")
    review_selectors = ("#acrCustomerReviewText", '[data-hook="total-review-count"]')

    def _rating_text(self, document, element) -> str:
        # The popover text is decorative; the rating lives in its title.
        return element.get("title") or document.text_of(element, single_line=True)
