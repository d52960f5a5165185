"""
Site Detection Layer for the Product Scout extraction engine.

Maps a document's hostname to a known retailer identifier. Detection is by
hostname label, so "amazon.co.uk" is Amazon while "notamazon.example" is not.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple

from product_scout.adapters.document import ProductDocument
from product_scout.utils.logger import LayerLogger


class RetailerId(str, Enum):
    """Known retailer identifiers."""
    AMAZON = "amazon"
    WALMART = "walmart"
    TARGET = "target"
    BESTBUY = "bestbuy"
    UNKNOWN = "unknown"


# Path segments that mark a product detail URL, per retailer.
PRODUCT_PATH_MARKERS: Dict[RetailerId, Tuple[str, ...]] = {
    RetailerId.WALMART: ("/ip/", "/product/", "/ip-", "/item/"),
}

# Retailers whose price renders late; a title on one of these paths is enough.
FAST_PATH_MARKERS: Dict[RetailerId, Tuple[str, ...]] = {
    RetailerId.WALMART: ("/ip/",),
}


@dataclass
class SiteDetectionResult:
    """Result of site detection."""
    retailer: RetailerId
    hostname: str
    matched_label: Optional[str] = None
    signals: list = field(default_factory=list)

    @property
    def is_known(self) -> bool:
        return self.retailer != RetailerId.UNKNOWN


def is_product_path(retailer: RetailerId, path: str) -> bool:
    """True if the URL path carries one of the retailer's product segments."""
    path = (path or "").lower()
    return any(marker in path for marker in PRODUCT_PATH_MARKERS.get(retailer, ()))


def is_fast_path(retailer: RetailerId, path: str) -> bool:
    """True if the URL path alone marks a product page for this retailer."""
    path = (path or "").lower()
    return any(marker in path for marker in FAST_PATH_MARKERS.get(retailer, ()))


class SiteDetector:
    """
    Site Detector - hostname to retailer identifier.

    Pure function of the hostname; unknown hosts map to RetailerId.UNKNOWN.
    """

    def __init__(self):
        self.logger = LayerLogger("site_detection")

    def detect_hostname(self, hostname: str) -> SiteDetectionResult:
        hostname = (hostname or "").lower().strip(".")
        labels = hostname.split(".") if hostname else []

        for retailer in RetailerId:
            if retailer == RetailerId.UNKNOWN:
                continue
            if retailer.value in labels:
                self.logger.log_decision(
                    decision="retailer_detected",
                    reason="hostname_label_match",
                    hostname=hostname,
                    retailer=retailer.value,
                )
                return SiteDetectionResult(
                    retailer=retailer,
                    hostname=hostname,
                    matched_label=retailer.value,
                    signals=[f"hostname:{retailer.value}"],
                )

        self.logger.log_decision(
            decision="unknown_site",
            reason="No retailer label in hostname",
            hostname=hostname,
            next_step="generic_extractor",
        )
        return SiteDetectionResult(retailer=RetailerId.UNKNOWN, hostname=hostname)

    def detect(self, document: ProductDocument) -> SiteDetectionResult:
        """Detect the retailer a document belongs to."""
        return self.detect_hostname(document.hostname)
