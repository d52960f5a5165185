"""Tests for the generic heuristic extractor."""
import pytest

from product_scout.adapters.generic import GenericExtractor
from product_scout.models.product import (
    DESCRIPTION_NOT_FOUND,
    FEATURES_NOT_FOUND,
    PRICE_NOT_FOUND,
    ParsedBy,
)


@pytest.fixture
def extractor():
    return GenericExtractor()


class TestGenericRecord:
    """Full record assembly."""

    def test_generic_product_page(self, extractor, generic_document):
        record = extractor.get_product(generic_document)
        assert record.title == "Trail Runner 2"
        assert record.price.display_value == "$49.99"
        assert record.price.value == pytest.approx(49.99)
        assert record.description == "Lightweight trail shoe.\nGrippy sole."
        assert record.features == ["Waterproof", "Vibram sole"]
        assert record.image == "https://shop.example.com/img/runner.jpg"
        assert record.site_name == "Example Shop"
        assert record.parsed_by == ParsedBy.GENERIC

    def test_sentinels_on_empty_page(self, extractor, make_document):
        doc = make_document("<p>hello</p>")
        assert extractor.extract_price(doc) == PRICE_NOT_FOUND
        assert extractor.extract_description(doc) == DESCRIPTION_NOT_FOUND
        assert extractor.extract_features(doc) == FEATURES_NOT_FOUND
        assert extractor.extract_main_image(doc) == ""

    def test_features_joined(self, extractor, generic_document):
        assert extractor.extract_features(generic_document) == "Waterproof\nVibram sole"


class TestTitle:
    """Title fallback to the document title."""

    def test_document_title_without_site_name(self, extractor, make_document):
        doc = make_document(
            "<html><head><title>Blue Mug | Mug Store</title>"
            '<meta property="og:site_name" content="Mug Store"></head><body><p>x</p></body></html>'
        )
        assert extractor.extract_title(doc) == "Blue Mug"

    def test_document_title_without_hostname(self, extractor, make_document):
        doc = make_document(
            "<html><head><title>Blue Mug - mugs.example.com</title></head><body></body></html>",
            url="https://www.mugs.example.com/p/1",
        )
        assert extractor.extract_site_name(doc) == "mugs.example.com"
        assert extractor.extract_title(doc) == "Blue Mug"


class TestPrice:
    """Price fallback chain."""

    def test_current_price_beats_struck_reference(self, extractor, generic_document):
        assert extractor.extract_price(generic_document) == "$49.99"

    def test_structured_price_first(self, extractor, make_document):
        doc = make_document(
            '<script type="application/ld+json">'
            '{"@type": "Product", "offers": {"price": "30.00", "priceCurrency": "USD"}}</script>'
            '<span class="price">$49.99</span>'
        )
        info = extractor.extract_price_info(doc)
        assert info.display_value == "30.00"
        assert info.value == pytest.approx(30.0)

    def test_recommendation_prices_ignored(self, extractor, make_document):
        doc = make_document(
            "<body><h1>Kettle</h1>"
            '<div class="sponsored"><span class="price">$5.00</span></div>'
            '<p class="price-now">$25.00</p></body>'
        )
        assert extractor.extract_price(doc) == "$25.00"

    def test_price_next_to_title_before_reference_price(self, extractor, make_document):
        doc = make_document(
            '<div class="product-detail"><h1>Lamp</h1><div id="n"><b>$30.00</b></div></div>'
            '<div class="footer-info"><s><span class="price">$45.00</span></s></div>'
        )
        assert extractor.extract_price(doc) == "$30.00"

    def test_reference_price_as_last_resort(self, extractor, make_document):
        doc = make_document(
            '<div class="product-detail"><h1>Lamp</h1></div>'
            '<div><s><span class="price">$79.99</span></s></div>'
        )
        assert extractor.extract_price(doc) == "$79.99"

    def test_regex_over_container_text(self, extractor, make_document):
        doc = make_document('<div class="product-detail"><p>Unser Preis: 19,99 € inkl. MwSt.</p></div>')
        info = extractor.extract_price_info(doc)
        assert info.display_value == "19,99 €"
        assert info.value == pytest.approx(19.99)
        assert info.currency == "€"

    def test_regex_skips_sponsored_region(self, extractor, make_document):
        doc = make_document('<body><h1>Kettle</h1><div class="sponsored"><p>Deal $5.00</p></div></body>')
        assert extractor.extract_price(doc) == PRICE_NOT_FOUND

    def test_regex_reads_past_carousel_inside_container(self, extractor, make_document):
        doc = make_document(
            '<div class="product-detail">'
            '<div class="carousel"><p>From $5.00</p></div>'
            "<div><div><p>Only 25,00 € today</p></div></div>"
            "</div>"
        )
        assert extractor.extract_price(doc) == "25,00 €"

    def test_structured_price_with_schema_iri_type(self, extractor, make_document):
        doc = make_document(
            '<script type="application/ld+json">'
            '{"@type": "http://schema.org/Product", "offers": {"price": "9.99"}}</script>'
            '<span class="price">$49.99</span>'
        )
        assert extractor.extract_price(doc) == "9.99"


class TestImage:
    """Main image selection."""

    def test_largest_image_outside_carousels(self, extractor, make_document):
        doc = make_document(
            '<div class="carousel"><img src="/big.jpg" width="2000" height="2000"></div>'
            '<img src="/a.jpg" width="100" height="100">'
            '<img src="/b.jpg" width="600" height="400">'
        )
        assert extractor.extract_main_image(doc) == "https://shop.example.com/b.jpg"
