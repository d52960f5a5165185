"""
Product Scout - FastAPI Application
Main entry point with REST API endpoints.

Extraction goes through ExtractionCoordinator.extract_async. The module-level
coordinator has no site-parser boundary; an embedder that can run retailer
parsers elsewhere replaces it with one built around a SiteParserBoundary.
"""
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from product_scout.adapters.document import ProductDocument
from product_scout.adapters.fetcher import FetchError, HtmlFetcher
from product_scout.config import config
from product_scout.layers.coordinator import ExtractionCoordinator
from product_scout.layers.page_classifier import PageClassification, PageClassifier
from product_scout.utils.logger import get_logger, set_trace_id

VERSION = "1.0.0"

# Initialize FastAPI app
app = FastAPI(
    title="Product Scout",
    description="Heuristic product data extraction from e-commerce HTML",
    version=VERSION,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize layers
coordinator = ExtractionCoordinator()
classifier = PageClassifier()
fetcher = HtmlFetcher()

logger = get_logger("main")
logger.info("engine_configured", version=VERSION, parser=config.HTML_PARSER, **config.heuristic_bounds())


# Request/Response models
class DocumentRequest(BaseModel):
    """Request model for extraction and classification."""
    html: str
    url: str = ""


class ClassificationResponse(BaseModel):
    """Response model for page classification."""
    is_product_page: bool
    retailer: str
    signals: List[str]
    rejected_by: Optional[str] = None
    trace_id: str


class ExtractionResponse(BaseModel):
    """Response model for product extraction."""
    product: dict
    classification: ClassificationResponse
    trace_id: str


def _classification_response(result: PageClassification, trace_id: str) -> ClassificationResponse:
    return ClassificationResponse(
        is_product_page=result.is_product_page,
        retailer=result.retailer.value,
        signals=result.signals,
        rejected_by=result.rejected_by,
        trace_id=trace_id,
    )


async def _run_extraction(document: ProductDocument, trace_id: str) -> ExtractionResponse:
    classification = classifier.classify(document)
    record = await coordinator.extract_async(document)

    logger.info(
        "product_extraction_completed",
        url=document.url,
        parsed_by=record.parsed_by.value,
        is_product_page=classification.is_product_page,
        title=record.title[:120],
        price=record.price.display_value,
    )
    return ExtractionResponse(
        product=record.to_payload(),
        classification=_classification_response(classification, trace_id),
        trace_id=trace_id,
    )


# API Routes
@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": VERSION}


@app.post("/api/extract")
async def extract_product(request: DocumentRequest):
    """
    Extract a product record from submitted HTML.

    Returns the record plus the product-page classification.
    """
    trace_id = set_trace_id()
    logger.info("extraction_request", url=request.url, html_length=len(request.html), trace_id=trace_id)

    try:
        document = ProductDocument(request.html, url=request.url)
        return await _run_extraction(document, trace_id)
    except Exception as e:
        logger.error("extraction_error", error=str(e), url=request.url)
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/api/classify")
async def classify_page(request: DocumentRequest):
    """Decide whether submitted HTML is a product detail page."""
    trace_id = set_trace_id()
    logger.info("classification_request", url=request.url, trace_id=trace_id)

    try:
        document = ProductDocument(request.html, url=request.url)
        return _classification_response(classifier.classify(document), trace_id)
    except Exception as e:
        logger.error("classification_error", error=str(e), url=request.url)
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/api/extract-url")
async def extract_from_url(url: str = Query(..., description="Product page URL to fetch")):
    """
    Fetch a live page and extract its product record.

    Fetch failures map to 502; anything else to 500.
    """
    trace_id = set_trace_id()
    logger.info("extract_url_request", url=url, trace_id=trace_id)

    try:
        document = await fetcher.fetch(url)
    except FetchError as e:
        logger.error("fetch_error", error=str(e), url=url)
        raise HTTPException(status_code=502, detail=f"Failed to fetch URL: {e}")

    try:
        return await _run_extraction(document, trace_id)
    except Exception as e:
        logger.error("extraction_error", error=str(e), url=url)
        raise HTTPException(status_code=500, detail=str(e))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.HOST, port=config.PORT)
