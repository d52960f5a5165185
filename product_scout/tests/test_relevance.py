"""Tests for recommendation and secondary-price filtering."""
from product_scout.layers.candidates import CandidateLocator, FieldKind
from product_scout.layers.relevance import RelevanceFilter

NESTED_SPONSORED = (
    '<div class="sponsored-products"><div><div><div><div>'
    '<span id="deep" class="price">$3.00</span>'
    "</div></div></div></div></div>"
)


def _price_candidates(document):
    return CandidateLocator().locate(document, FieldKind.PRICE)


class TestRecommendationRegion:
    """Cross-sell detection through bounded ancestor walks."""

    def test_missing_element_counts_as_recommendation(self):
        assert RelevanceFilter().is_recommendation_region(None)

    def test_keyword_in_class_or_id(self, make_document):
        doc = make_document(
            '<div id="customers-also-viewed-list"><span id="a">$1</span></div>'
            '<div class="Carousel-track"><span id="b">$2</span></div>'
            '<div class="buy-box"><span id="c">$3</span></div>'
        )
        relevance = RelevanceFilter()
        assert relevance.is_recommendation_region(doc.select_one("#a"))
        assert relevance.is_recommendation_region(doc.select_one("#b"))
        assert not relevance.is_recommendation_region(doc.select_one("#c"))

    def test_walk_depth_is_bounded(self, make_document):
        doc = make_document(NESTED_SPONSORED)
        deep = doc.select_one("#deep")
        assert not RelevanceFilter(depth=4).is_recommendation_region(deep)
        assert RelevanceFilter(depth=5).is_recommendation_region(deep)

    def test_marker_checks_only_the_element(self, make_document):
        doc = make_document(NESTED_SPONSORED)
        relevance = RelevanceFilter()
        assert relevance.is_recommendation_marker(doc.select_one(".sponsored-products"))
        assert not relevance.is_recommendation_marker(doc.select_one("#deep"))


class TestSecondaryPrice:
    """Reference price markers."""

    def test_keyword_in_own_text(self, make_document):
        doc = make_document("<span id='p'>List Price: $80.00</span>")
        assert RelevanceFilter().is_secondary_price(doc, doc.select_one("#p"))

    def test_keyword_in_parent_text(self, make_document):
        doc = make_document("<div>MSRP <span id='p'>$80.00</span></div>")
        assert RelevanceFilter().is_secondary_price(doc, doc.select_one("#p"))

    def test_keyword_needs_word_boundary(self, make_document):
        doc = make_document("<div>Bold Colors <span id='p'>$80.00</span></div>")
        assert not RelevanceFilter().is_secondary_price(doc, doc.select_one("#p"))

    def test_strikethrough(self, make_document):
        doc = make_document("<div><del><span id='p'>$80.00</span></del></div>")
        assert RelevanceFilter().is_secondary_price(doc, doc.select_one("#p"))


class TestScanPrices:
    """Primary price selection over ordered candidates."""

    def test_struck_price_before_current_price(self, make_document):
        doc = make_document(
            '<div class="product-detail">'
            '<div><span class="price" style="text-decoration: line-through">$79.99</span></div>'
            '<div><span class="price">$49.99</span></div>'
            "</div>"
        )
        result = RelevanceFilter().scan_prices(doc, _price_candidates(doc))
        assert result.primary == "$49.99"
        assert result.secondary == "$79.99"

    def test_only_secondary_prices(self, make_document):
        doc = make_document("<div><s><span class='price'>$79.99</span></s></div>")
        result = RelevanceFilter().scan_prices(doc, _price_candidates(doc))
        assert result.primary is None
        assert result.secondary == "$79.99"

    def test_recommendation_prices_skipped(self, make_document):
        doc = make_document('<div class="related-items"><span class="price">$9.99</span></div>')
        result = RelevanceFilter().scan_prices(doc, _price_candidates(doc))
        assert result.primary is None
        assert result.secondary is None

    def test_data_price_attribute(self, make_document):
        doc = make_document('<div class="buy"><span data-price="1234.50">Price TBD</span></div>')
        result = RelevanceFilter().scan_prices(doc, _price_candidates(doc))
        assert result.primary == "1234.50"
        assert result.from_attribute
