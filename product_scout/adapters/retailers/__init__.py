"""
Retailer extractor registry.

Maps a detected retailer to its extractor class; selection is a plain
lookup on the SiteDetector's output.
"""
from typing import Dict, Optional, Type

from product_scout.adapters.retailers.amazon import AmazonExtractor
from product_scout.adapters.retailers.base import SiteExtractor
from product_scout.adapters.retailers.bestbuy import BestBuyExtractor
from product_scout.adapters.retailers.target import TargetExtractor
from product_scout.adapters.retailers.walmart import WalmartExtractor
from product_scout.layers.site_detection import RetailerId

RETAILER_EXTRACTORS: Dict[RetailerId, Type[SiteExtractor]] = {
    RetailerId.AMAZON: AmazonExtractor,
    RetailerId.WALMART: WalmartExtractor,
    RetailerId.TARGET: TargetExtractor,
    RetailerId.BESTBUY: BestBuyExtractor,
}


def get_site_extractor(retailer: RetailerId) -> Optional[SiteExtractor]:
    """Return a fresh extractor for the retailer, or None if none is registered."""
    extractor_cls = RETAILER_EXTRACTORS.get(retailer)
    return extractor_cls() if extractor_cls else None


__all__ = [
    "RETAILER_EXTRACTORS",
    "get_site_extractor",
    "SiteExtractor",
    "AmazonExtractor",
    "WalmartExtractor",
    "TargetExtractor",
    "BestBuyExtractor",
]
