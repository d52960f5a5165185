"""Tests for the retailer-specific extractors and their registry."""
import pytest

from product_scout.adapters.retailers import (
    AmazonExtractor,
    BestBuyExtractor,
    TargetExtractor,
    WalmartExtractor,
    get_site_extractor,
)
from product_scout.layers.site_detection import RetailerId
from product_scout.models.product import PRICE_NOT_FOUND, ParsedBy

ESCAPED_BLOB = r'{\"price\":{\"current_retail\":24.99,\"formatted_current_price\":\"$24.99\"}}'
PLAIN_BLOB = '"price": {"current_retail": 5, "reg_retail": 9, "formatted_current_price": "$5.00"}'
CONTEXT_BLOB = '"tcin":"81114595","price":{"current_retail":64.99,"formatted_current_price":"$64.99"}'


class TestAmazon:
    """Amazon detail page."""

    def test_full_record(self, amazon_document):
        record = AmazonExtractor().get_product(amazon_document)
        assert record.title == "Echo Dot (5th Gen)"
        assert record.price.display_value == "$49.99"
        assert record.price.value == pytest.approx(49.99)
        assert record.description == "Our best sounding Echo Dot yet."
        assert record.features == ["Bigger sound", "Smart home hub"]
        assert record.image == "https://m.media-amazon.com/images/echo.jpg"
        assert record.category_path == ["Electronics", "Smart Home"]
        assert record.rating == pytest.approx(4.7)
        assert record.reviews == 12345
        assert record.parsed_by == ParsedBy.AMAZON
        assert record.site_name == "Amazon"

    def test_missing_title_is_empty(self, make_document):
        doc = make_document("<h1>Not the Amazon title</h1>", url="https://www.amazon.com/dp/1")
        assert AmazonExtractor().extract_title(doc) == ""

    def test_jsonld_price_when_selectors_miss(self, make_document):
        doc = make_document(
            '<script type="application/ld+json">{"@type": "ItemPage", "offers": {"price": "12.5", "priceCurrency": "GBP"}}</script>',
            url="https://www.amazon.co.uk/dp/1",
        )
        price = AmazonExtractor().extract_price(doc)
        assert price.display_value == "£12.50"
        assert price.currency == "£"

    def test_price_sentinel(self, make_document):
        doc = make_document("<p>unavailable</p>", url="https://www.amazon.com/dp/1")
        assert AmazonExtractor().extract_price(doc).display_value == PRICE_NOT_FOUND

    def test_fallback_selectors(self, make_document):
        doc = make_document(
            """
            <ul class="a-breadcrumb"><li><a href="/k">Kitchen</a></li><li><a href="/kt">Kettles</a></li></ul>
            <div id="averageCustomerReviews">
              <i class="a-icon a-icon-star"><span class="a-icon-alt">4.6 out of 5 stars</span></i>
            </div>
            <span data-hook="total-review-count">2,418 global ratings</span>
            """,
            url="https://www.amazon.com/dp/B0KETTLE",
        )
        extractor = AmazonExtractor()
        assert extractor.extract_category_path(doc) == ["Kitchen", "Kettles"]
        assert extractor.extract_rating(doc) == pytest.approx(4.6)
        assert extractor.extract_review_count(doc) == 2418


class TestWalmart:
    """Walmart item page."""

    def test_full_record(self, walmart_document):
        record = WalmartExtractor().get_product(walmart_document)
        assert record.title == "Electric Kettle"
        assert record.price.display_value == "$24.50"
        assert record.price.value == pytest.approx(24.5)
        assert record.features == ["1.7 L", "Auto shut-off"]
        assert record.image == "https://i5.walmartimages.com/kettle.jpg"
        assert record.category_path == ["Home", "Kitchen"]
        assert record.rating == pytest.approx(4.5)
        assert record.reviews == 1024
        assert record.description == ""

    def test_microdata_price_with_iso_currency(self, make_document):
        doc = make_document(
            '<span itemprop="price" content="1299"></span><meta itemprop="priceCurrency" content="EUR">'
            '<span data-testid="price">Now $5.00</span>',
            url="https://www.walmart.com/ip/1",
        )
        price = WalmartExtractor().extract_price(doc)
        assert price.display_value == "€1299.00"
        assert price.currency == "€"

    def test_now_price_outranks_earlier_candidate(self, make_document):
        doc = make_document(
            '<div class="a"><span class="price">$19.00</span></div>'
            '<div class="b"><span class="price">Now $15.00</span></div>',
            url="https://www.walmart.com/ip/1",
        )
        assert WalmartExtractor().extract_price(doc).display_value == "$15.00"

    def test_recommendation_candidates_skipped(self, make_document):
        doc = make_document(
            '<div class="carousel"><span data-testid="price">Now $1.00</span></div>'
            '<span class="price">$22.00</span>',
            url="https://www.walmart.com/ip/1",
        )
        assert WalmartExtractor().extract_price(doc).display_value == "$22.00"


class TestTarget:
    """Serialized price blobs in the page source."""

    def test_escaped_blob(self):
        blob = TargetExtractor().find_price_blob(f"<script>window.__STATE__ = \"{ESCAPED_BLOB}\"</script>")
        assert blob.value == pytest.approx(24.99)
        assert blob.display_value == "$24.99"

    def test_contextual_blob_preferred(self):
        html = PLAIN_BLOB + "x" * 2500 + CONTEXT_BLOB
        extractor = TargetExtractor()
        blobs = extractor.find_price_blobs(html)
        assert [b.contextual for b in blobs] == [False, True]
        assert extractor.find_price_blob(html).display_value == "$64.99"

    def test_first_blob_without_context(self):
        html = PLAIN_BLOB + "x" * 2500 + PLAIN_BLOB.replace("$5.00", "$6.00")
        assert TargetExtractor().find_price_blob(html).display_value == "$5.00"

    def test_extract_price_from_blob(self, make_document):
        doc = make_document(
            f"<html><body><h1 data-test='product-title'>Mug</h1><script>var s = {{{CONTEXT_BLOB}}};</script></body></html>",
            url="https://www.target.com/p/mug/-/A-81114595",
        )
        price = TargetExtractor().extract_price(doc)
        assert price.display_value == "$64.99"
        assert price.value == pytest.approx(64.99)

    def test_dom_fallback(self, make_document):
        doc = make_document(
            '<span data-test="product-price">$12.00</span>',
            url="https://www.target.com/p/mug/-/A-1",
        )
        assert TargetExtractor().extract_price(doc).display_value == "$12.00"

    def test_jsonld_display_keeps_raw_amount(self, make_document):
        doc = make_document(
            '<script type="application/ld+json">{"@type": "Product", "offers": {"price": "7.5"}}</script>',
            url="https://www.target.com/p/mug/-/A-1",
        )
        assert TargetExtractor().extract_price(doc).display_value == "$7.5"

    def test_styled_component_fallbacks(self, make_document):
        doc = make_document(
            """
            <div class="Breadcrumb__BCWrapper-sc-1s3fz3w-0"><a href="/c/home">Home</a><a href="/c/mugs">Mugs</a></div>
            <h1 class="Heading__StyledHeading-sc-1mp23s9-0">Stoneware Mug</h1>
            <div class="styles__StyledImageZoomContainer-sc-1lp110x-0"><img src="https://target.scene7.com/mug.jpg"></div>
            <span class="RatingsReviewsAggregate__RatingCount-sc-1qr1ubs-0">4.5 out of 5 stars</span>
            <span class="RatingsReviewsAggregate__ReviewCount-sc-1qr1ubs-1">1,234 ratings</span>
            <div class="h-padding-h-default"><ul><li>Dishwasher safe</li><li>12 oz</li></ul></div>
            """,
            url="https://www.target.com/p/mug/-/A-1",
        )
        extractor = TargetExtractor()
        assert extractor.extract_title(doc) == "Stoneware Mug"
        assert extractor.extract_image(doc) == "https://target.scene7.com/mug.jpg"
        assert extractor.extract_category_path(doc) == ["Home", "Mugs"]
        assert extractor.extract_rating(doc) == pytest.approx(4.5)
        assert extractor.extract_review_count(doc) == 1234
        assert extractor.extract_features(doc) == ["Dishwasher safe", "12 oz"]


class TestBestBuy:
    """Best Buy SKU page."""

    def test_full_record(self, bestbuy_document):
        record = BestBuyExtractor().get_product(bestbuy_document)
        assert record.title == "Sony WH-1000XM5"
        assert record.price.display_value == "$399.99"
        assert record.category_path == ["Audio", "Headphones"]
        assert record.features == ["Noise cancelling", "30-hour battery"]
        assert record.image == "https://pisces.bbystatic.com/sony.jpg"
        assert record.rating == pytest.approx(4.8)
        assert record.reviews == 2311
        assert record.site_name == "Best Buy"


class TestRegistry:
    """Retailer id to extractor lookup."""

    @pytest.mark.parametrize("retailer,cls", [
        (RetailerId.AMAZON, AmazonExtractor),
        (RetailerId.WALMART, WalmartExtractor),
        (RetailerId.TARGET, TargetExtractor),
        (RetailerId.BESTBUY, BestBuyExtractor),
    ])
    def test_known_retailers(self, retailer, cls):
        assert isinstance(get_site_extractor(retailer), cls)

    def test_unknown_retailer(self):
        assert get_site_extractor(RetailerId.UNKNOWN) is None
