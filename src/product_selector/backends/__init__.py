"""Package backends answering product queries."""

from product_selector.backends.base import BackendError, BackendUnavailableError, PackageBackend
from product_selector.backends.http import HTTPBackend
from product_selector.backends.memory import MemoryBackend


def get_backend(kind: str, location: str) -> PackageBackend:
    """Factory function to create a backend by kind."""
    from pathlib import Path

    match kind:
        case "memory":
            return MemoryBackend.from_catalog(Path(location))
        case "http":
            return HTTPBackend(base_url=location)
        case _:
            raise ValueError(f"Unknown backend: {kind!r}. Use 'memory' or 'http'.")


__all__ = [
    "PackageBackend",
    "BackendError",
    "BackendUnavailableError",
    "MemoryBackend",
    "HTTPBackend",
    "get_backend",
]
