"""
Product Model — Installable product records.

A Product describes an installable product (name, version, architecture,
vendor) and forwards selection and license queries to a PackageBackend,
which owns the authoritative state.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import TYPE_CHECKING, Any

from product_selector.core.language import current_language

if TYPE_CHECKING:
    from product_selector.backends.base import PackageBackend

logger = logging.getLogger(__name__)


RESOLVABLE_KIND = "product"


class ResolvableStatus(Enum):
    """Status of a resolvable as reported by the backend."""

    INSTALLED = "installed"
    SELECTED = "selected"
    AVAILABLE = "available"
    REMOVED = "removed"
    NONE = "none"


class ProductCategory:
    """Known product categories."""

    BASE = "base"
    ADDON = "addon"


@dataclass(frozen=True)
class Product:
    """
    An installable product.

    Equality and hashing only take name, version, arch and vendor into
    account. The record is immutable; status is a snapshot taken when
    it was built, use ``selected()`` or ``installed()`` to ask the backend.
    """

    name: str
    version: str | None = None
    arch: str | None = None
    vendor: str | None = None
    category: str | None = field(default=None, compare=False)
    status: str | None = field(default=None, compare=False)
    display_name: str | None = field(default=None, compare=False)
    short_name: str | None = field(default=None, compare=False)
    backend: PackageBackend | None = field(default=None, compare=False, repr=False)
    language: Callable[[], str] = field(default=current_language, compare=False, repr=False)

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        backend: PackageBackend | None = None,
        language: Callable[[], str] | None = None,
    ) -> "Product":
        """Build a product from an attribute mapping. Unknown keys are ignored."""
        status = data.get("status")
        if isinstance(status, ResolvableStatus):
            status = status.value
        return cls(
            name=data.get("name", ""),
            version=data.get("version"),
            arch=data.get("arch"),
            vendor=data.get("vendor"),
            category=data.get("category"),
            status=status,
            display_name=data.get("display_name"),
            short_name=data.get("short_name"),
            backend=backend,
            language=language or current_language,
        )

    def to_dict(self) -> dict:
        """Serialize the descriptive attributes."""
        skip = {"backend", "language"}
        return {f.name: getattr(self, f.name) for f in fields(self) if f.name not in skip}

    def label(self) -> str:
        """Name to show to the user."""
        if self.display_name is not None:
            return self.display_name
        if self.short_name is not None:
            return self.short_name
        return self.name

    # ──────────────────────────────────────────────
    # Selection
    # ──────────────────────────────────────────────

    def selected(self) -> bool:
        """Whether the backend reports the product as selected for installation."""
        return self._has_status(ResolvableStatus.SELECTED)

    def installed(self) -> bool:
        """Whether the backend reports the product as installed."""
        return self._has_status(ResolvableStatus.INSTALLED)

    def select(self) -> None:
        """Select the product for installation."""
        logger.debug(f"Selecting product {self.name}")
        self._backend().resolvable_install(self.name, RESOLVABLE_KIND, "")

    def restore(self) -> None:
        """Reset the product to its neutral status."""
        logger.debug(f"Restoring product {self.name}")
        self._backend().resolvable_neutral(self.name, RESOLVABLE_KIND, True)

    @classmethod
    def selected_base(cls, products: Iterable["Product"]) -> "Product | None":
        """Return the first of the given base products which is selected."""
        return next((p for p in products if p.selected()), None)

    # ──────────────────────────────────────────────
    # License
    # ──────────────────────────────────────────────

    def license(self, lang: str | None = None) -> str | None:
        """
        License text to confirm.

        Args:
            lang: Language code (e.g. 'de_DE'). Defaults to the current language.

        Returns:
            The license text, an empty string when there is nothing to
            confirm, or None when the product is unknown to the backend.
        """
        if lang is None:
            lang = self.language()
        logger.debug(f"Fetching license for {self.name} ({lang})")
        return self._backend().license_to_confirm(self.name, lang)

    def has_license(self) -> bool:
        """Whether there is a license text to confirm."""
        return bool(self.license())

    def license_confirmation_required(self) -> bool:
        """Whether the license must be accepted before installing."""
        return self._backend().need_to_accept_license(self.name)

    def license_confirmed(self) -> bool:
        """Whether the license has already been accepted."""
        return self._backend().has_license_confirmed(self.name)

    def confirm_license(self, confirmed: bool) -> None:
        """Accept (True) or reject (False) the license."""
        backend = self._backend()
        if confirmed:
            logger.info(f"License confirmed for {self.name}")
            backend.mark_license_confirmed(self.name)
        else:
            logger.info(f"License not confirmed for {self.name}")
            backend.mark_license_not_confirmed(self.name)

    # ──────────────────────────────────────────────
    # Helpers
    # ──────────────────────────────────────────────

    def _has_status(self, status: ResolvableStatus) -> bool:
        records = self._backend().resolvable_properties(self.name, RESOLVABLE_KIND, "")
        return any(
            isinstance(r, Mapping)
            and r.get("name") == self.name
            and _status_value(r.get("status")) == status.value
            for r in records or []
        )

    def _backend(self) -> PackageBackend:
        if self.backend is None:
            from product_selector.backends.base import BackendError

            raise BackendError(f"Product {self.name!r} has no package backend")
        return self.backend


def _status_value(status: Any) -> Any:
    if isinstance(status, ResolvableStatus):
        return status.value
    return status
