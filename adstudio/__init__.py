"""Product image resolution and product data service for AI ad generation."""

__version__ = "1.0.0"
