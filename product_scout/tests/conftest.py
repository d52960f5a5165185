"""Shared HTML fixtures for the extraction tests."""
import pytest

from product_scout.adapters.document import ProductDocument

GENERIC_PRODUCT_HTML = """
<html>
<head>
  <title>Trail Runner 2 | Example Shop</title>
  <meta property="og:site_name" content="Example Shop">
</head>
<body>
  <header><a href="/">Example Shop</a></header>
  <div class="product-detail">
    <h1 class="product-title">Trail Runner 2</h1>
    <div class="price-block">
      <div><span class="price">$49.99</span></div>
      <div class="was"><s>Was $79.99</s></div>
    </div>
    <div class="product-description"><p>Lightweight trail shoe.</p><p>Grippy sole.</p></div>
    <ul class="product-features"><li>Waterproof</li><li>Vibram sole</li></ul>
    <div class="product-image"><img src="/img/runner.jpg" width="800" height="800"></div>
    <button class="btn add-to-cart">Add to Cart</button>
  </div>
  <div class="recommendations">
    <div class="product-item"><span class="price">$9.99</span></div>
  </div>
</body>
</html>
"""

SCENARIO_A_HTML = """
<html>
<head>
  <title>Widget - Walmart.com</title>
  <script type="application/ld+json">{"@type": "Product", "offers": {"price": "19.99"}}</script>
</head>
<body><h1 id="productTitle">Widget</h1></body>
</html>
"""

LISTING_ITEM = '<div class="product-item"><a href="/p/{n}">Lamp {n}</a><span class="price">$1{n}.00</span></div>'

SCENARIO_B_HTML = (
    "<html><head><title>Search results</title></head><body>"
    '<h1>Results for "lamp"</h1>'
    '<div class="product-description">Browse our lamps.</div>'
    "<button>Add to Cart</button>"
    + "".join(LISTING_ITEM.format(n=n) for n in range(20))
    + "</body></html>"
)

AMAZON_HTML = """
<html><body>
  <span id="productTitle">  Echo Dot (5th Gen)  </span>
  <div id="corePrice_feature_div"><span class="a-price"><span class="a-offscreen">$49.99</span></span></div>
  <div id="wayfinding-breadcrumbs_container">
    <ul><li><a href="/electronics">Electronics</a></li><li><a href="/smart-home">Smart Home</a></li></ul>
  </div>
  <div id="feature-bullets"><ul><li>Bigger sound</li><li class="aok-hidden">Hidden bullet</li><li>Smart home hub</li></ul></div>
  <div id="imgTagWrapperId"><img data-old-hires="https://m.media-amazon.com/images/echo.jpg"></div>
  <span id="acrPopover" title="4.7 out of 5 stars"><span>4.7</span></span>
  <span id="acrCustomerReviewText">12,345 ratings</span>
  <div id="productDescription"><p>Our best sounding Echo Dot yet.</p></div>
</body></html>
"""

WALMART_HTML = """
<html><body>
  <h1 itemprop="name">Electric Kettle</h1>
  <div class="price-wrap"><span class="price">Was $30.00</span></div>
  <div class="hero"><span data-testid="price">Now $24.50</span></div>
  <ol class="breadcrumb"><li><a href="/home">Home</a></li><li><a href="/kitchen">Kitchen</a></li></ol>
  <div class="prod-HeroImage"><img src="https://i5.walmartimages.com/kettle.jpg"></div>
  <div class="prod-ProductHighlights"><ul><li>1.7 L</li><li>Auto shut-off</li></ul></div>
  <span aria-label="4.5 out of 5 stars"></span>
  <span data-testid="review-count">1,024 reviews</span>
</body></html>
"""

BESTBUY_HTML = """
<html><body>
  <div class="sku-title"><h1>Sony WH-1000XM5</h1></div>
  <div class="priceView-hero-price priceView-customer-price"><span aria-hidden="true">$399.99</span></div>
  <div class="container-v3"><ol class="breadcrumb-list"><li><a>Audio</a></li><li><a>Headphones</a></li></ol></div>
  <img class="primary-image" src="https://pisces.bbystatic.com/sony.jpg">
  <ul class="features-list"><li>Noise cancelling</li><li>30-hour battery</li></ul>
  <span class="c-review-average">4.8</span>
  <span class="c-review-count">(2,311 reviews)</span>
</body></html>
"""


@pytest.fixture
def make_document():
    """Build a ProductDocument from inline HTML."""
    def _make(html: str, url: str = "https://shop.example.com/p/trail-runner") -> ProductDocument:
        return ProductDocument(html, url=url)
    return _make


@pytest.fixture
def generic_document(make_document):
    return make_document(GENERIC_PRODUCT_HTML)


@pytest.fixture
def scenario_a_document(make_document):
    return make_document(SCENARIO_A_HTML, url="https://www.walmart.com/ip/123")


@pytest.fixture
def scenario_b_document(make_document):
    return make_document(SCENARIO_B_HTML, url="https://shop.example.com/search?q=lamp")


@pytest.fixture
def amazon_document(make_document):
    return make_document(AMAZON_HTML, url="https://www.amazon.com/dp/B09B8V1LZ3")


@pytest.fixture
def walmart_document(make_document):
    return make_document(WALMART_HTML, url="https://www.walmart.com/ip/kettle/555")


@pytest.fixture
def bestbuy_document(make_document):
    return make_document(BESTBUY_HTML, url="https://www.bestbuy.com/site/sony/6505727.p")


@pytest.fixture
def crowded_product_document(make_document):
    """The generic product page with a long cross-sell strip under it."""
    cards = "".join(LISTING_ITEM.format(n=n) for n in range(8))
    html = GENERIC_PRODUCT_HTML.replace(
        '<div class="recommendations">',
        '<div class="recommendations">' + cards,
    )
    return make_document(html)
