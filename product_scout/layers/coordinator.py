"""
Extraction Coordinator for the Product Scout extraction engine.

Top-level entry point: detects the site, runs the retailer extractor when
one is available and falls back to the generic extractor otherwise. Always
returns a structurally valid ProductRecord.
"""
from typing import Dict, Optional, Type

from product_scout.adapters.document import ProductDocument
from product_scout.adapters.generic import GenericExtractor
from product_scout.adapters.retailers import RETAILER_EXTRACTORS, SiteExtractor
from product_scout.layers.site_detection import RetailerId, SiteDetectionResult, SiteDetector
from product_scout.layers.site_parser import SiteParserBoundary, SiteParserError
from product_scout.models.product import ParsedBy, ProductRecord
from product_scout.utils.logger import LayerLogger


class ExtractionCoordinator:
    """
    Extraction Coordinator - routes a document to the right extractor.

    Routing:
    - Known retailer with a resident extractor -> retailer extractor
    - Known retailer without one, boundary configured -> external site parser
    - Everything else, or a retailer result without a title -> generic

    Holds no per-document state, so one instance can be shared.
    """

    def __init__(
        self,
        detector: Optional[SiteDetector] = None,
        generic: Optional[GenericExtractor] = None,
        registry: Optional[Dict[RetailerId, Type[SiteExtractor]]] = None,
        site_parser: Optional[SiteParserBoundary] = None,
    ):
        self.detector = detector or SiteDetector()
        self.generic = generic or GenericExtractor()
        self.registry = RETAILER_EXTRACTORS if registry is None else registry
        self.site_parser = site_parser
        self.logger = LayerLogger("coordinator")

    def extract(self, document: ProductDocument) -> ProductRecord:
        """Synchronous extraction over resident extractors only."""
        detection = self.detector.detect(document)
        record = self._extract_resident(document, detection)
        if record is not None:
            return record
        return self._extract_generic(document, detection)

    async def extract_async(self, document: ProductDocument) -> ProductRecord:
        """Extraction that may await the external site-parser boundary."""
        detection = self.detector.detect(document)

        if detection.is_known and detection.retailer not in self.registry and self.site_parser is not None:
            record = await self._extract_remote(document, detection)
            if record is not None:
                return record
            return self._extract_generic(document, detection)

        return self.extract(document)

    # =========================================================================
    # ROUTES
    # =========================================================================

    def _extract_resident(
        self,
        document: ProductDocument,
        detection: SiteDetectionResult,
    ) -> Optional[ProductRecord]:
        extractor_cls = self.registry.get(detection.retailer)
        if extractor_cls is None:
            return None

        self.logger.log_decision(
            decision="use_site_extractor",
            reason="Resident extractor registered for retailer",
            url=document.url,
            retailer=detection.retailer.value,
            version=extractor_cls.version,
        )
        try:
            record = extractor_cls().get_product(document)
        except Exception as e:
            self.logger.log_fallback(
                from_source=detection.retailer.value,
                to_source="generic",
                reason=f"Site extractor failed: {type(e).__name__}: {e}",
                url=document.url,
            )
            return None

        return self._accept_retailer_record(document, detection, record)

    async def _extract_remote(
        self,
        document: ProductDocument,
        detection: SiteDetectionResult,
    ) -> Optional[ProductRecord]:
        self.logger.log_decision(
            decision="use_site_parser_boundary",
            reason="No resident extractor for retailer",
            url=document.url,
            retailer=detection.retailer.value,
        )
        try:
            record = await self.site_parser.run(
                detection.retailer,
                url=document.url,
                site_name=self.generic.extract_site_name(document),
            )
        except SiteParserError as e:
            self.logger.log_fallback(
                from_source="site_parser",
                to_source="generic",
                reason=str(e),
                url=document.url,
            )
            return None
        except Exception as e:
            self.logger.log_fallback(
                from_source="site_parser",
                to_source="generic",
                reason=f"Unexpected site parser failure: {type(e).__name__}: {e}",
                url=document.url,
            )
            return None

        return self._accept_retailer_record(document, detection, record)

    def _accept_retailer_record(
        self,
        document: ProductDocument,
        detection: SiteDetectionResult,
        record: ProductRecord,
    ) -> Optional[ProductRecord]:
        if record.title:
            return record
        self.logger.log_fallback(
            from_source=detection.retailer.value,
            to_source="generic",
            reason="Site extractor found no title",
            url=document.url,
        )
        return None

    def _extract_generic(
        self,
        document: ProductDocument,
        detection: SiteDetectionResult,
    ) -> ProductRecord:
        try:
            return self.generic.get_product(document)
        except Exception as e:
            self.logger.log_error(
                error=str(e),
                error_type=type(e).__name__,
                url=document.url,
                retailer=detection.retailer.value,
                stage="generic_extraction",
            )
            return ProductRecord(url=document.url, parsed_by=ParsedBy.UNKNOWN)
