"""Adapters package initialization."""
from product_scout.adapters.document import ProductDocument

__all__ = ["ProductDocument"]
