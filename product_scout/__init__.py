"""Product Scout - heuristic product data extraction from e-commerce HTML."""

__version__ = "1.0.0"
