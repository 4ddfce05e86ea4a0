"""
PackageBackend Protocol — Interface to the package-resolution engine.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


class BackendError(Exception):
    """The package backend failed to answer a query or command."""


class BackendUnavailableError(BackendError):
    """The package backend refuses calls (retries exhausted or circuit open)."""


@runtime_checkable
class PackageBackend(Protocol):
    """
    Protocol that all package backends must implement.

    The backend owns the authoritative selection, installation and license
    state of every resolvable. Resolvables are addressed by name and kind
    ("product", "package", "pattern"). An empty repository means any.
    """

    def resolvable_properties(self, name: str, kind: str, repository: str) -> list[dict]:
        """Return records (at least 'name' and 'status') of matching resolvables."""
        ...

    def resolvable_install(self, name: str, kind: str, repository: str) -> bool:
        """Mark a resolvable for installation."""
        ...

    def resolvable_neutral(self, name: str, kind: str, keep_related: bool) -> bool:
        """Reset a resolvable to its neutral status."""
        ...

    def license_to_confirm(self, name: str, lang: str) -> str | None:
        """License text to confirm, '' when there is none, None for unknown products."""
        ...

    def need_to_accept_license(self, name: str) -> bool:
        """Whether the product license must be accepted."""
        ...

    def mark_license_confirmed(self, name: str) -> None:
        """Record that the product license was accepted."""
        ...

    def mark_license_not_confirmed(self, name: str) -> None:
        """Record that the product license was not accepted."""
        ...

    def has_license_confirmed(self, name: str) -> bool:
        """Whether the product license was already accepted."""
        ...
