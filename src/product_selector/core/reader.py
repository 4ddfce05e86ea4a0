"""
Product Reader — Builds Product records from backend data.
"""

import logging
from collections.abc import Callable

from product_selector.backends.base import PackageBackend
from product_selector.models.product import RESOLVABLE_KIND, Product, ProductCategory, ResolvableStatus

logger = logging.getLogger(__name__)


class ProductReader:
    """
    Reads the products known to a backend.

    Every product returned is bound to the same backend, so its selection
    and license queries go straight back to it.
    """

    def __init__(self, backend: PackageBackend, language: Callable[[], str] | None = None):
        self.backend = backend
        self.language = language

    def all_products(self) -> list[Product]:
        """All products, deduplicated by name/version/arch/vendor, in backend order."""
        records = self.backend.resolvable_properties("", RESOLVABLE_KIND, "")
        products = dict.fromkeys(
            Product.from_dict(r, backend=self.backend, language=self.language) for r in records
        )
        logger.debug(f"Read {len(products)} products ({len(records)} resolvables)")
        return list(products)

    def available_base_products(self) -> list[Product]:
        return [p for p in self.all_products() if p.category == ProductCategory.BASE]

    def installed_base_product(self) -> Product | None:
        return next(
            (p for p in self.available_base_products() if p.status == ResolvableStatus.INSTALLED.value),
            None,
        )

    def with_status(self, *statuses: str) -> list[Product]:
        """Products whose reported status is one of `statuses`."""
        wanted = {s.value if isinstance(s, ResolvableStatus) else s for s in statuses}
        return [p for p in self.all_products() if p.status in wanted]

    def selected_base(self) -> Product | None:
        return Product.selected_base(self.available_base_products())
