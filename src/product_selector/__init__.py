"""
Product Selector - Installable product records for package management.

Describes installable products (name, version, arch, vendor) and forwards
selection and license queries to a pluggable package backend.
"""

__version__ = "1.0.0"


def __getattr__(name: str):
    """Lazy import for backend dependencies."""
    if name == "Product":
        from product_selector.models.product import Product

        return Product
    if name == "ProductReader":
        from product_selector.core.reader import ProductReader

        return ProductReader
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["Product", "ProductReader", "__version__"]
