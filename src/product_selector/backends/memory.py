"""
Memory Backend — In-process resolvable registry.

Keeps resolvables, their license texts and license confirmations in
memory. Catalogs can be loaded from and saved to a JSON file, which lets
the CLI keep selections between runs without a resolver service.

Catalog format:
    {
      "resolvables": [
        {"name": "openSUSE", "kind": "product", "status": "available",
         "category": "base", "license": "...", "licenses": {"de": "..."},
         "confirmation_required": true}
      ],
      "confirmed": ["openSUSE"]
    }
"""

import json
import logging
from pathlib import Path

from product_selector.backends.base import BackendError
from product_selector.models.product import RESOLVABLE_KIND, ResolvableStatus

logger = logging.getLogger(__name__)


# Keys kept by the registry but not reported by resolvable_properties()
PRIVATE_KEYS = ("license", "licenses", "confirmation_required", "initial_status")


class MemoryBackend:
    """
    PackageBackend storing everything in dictionaries.

    Resolvables are keyed by (kind, name). Installing marks a resolvable as
    selected; neutralizing returns it to the status it was registered with
    ("installed" stays installed, anything else becomes "available").
    """

    def __init__(self):
        self.resolvables: dict[tuple[str, str], dict] = {}
        self.confirmed: set[str] = set()

    def add(
        self,
        name: str,
        kind: str = RESOLVABLE_KIND,
        status: str = ResolvableStatus.AVAILABLE.value,
        license: str | None = None,
        licenses: dict[str, str] | None = None,
        confirmation_required: bool = False,
        **attrs,
    ) -> dict:
        """Register a resolvable and return its record."""
        record = {
            **attrs,
            "name": name,
            "kind": kind,
            "status": status,
            "license": license,
            "licenses": dict(licenses or {}),
            "confirmation_required": confirmation_required,
            "initial_status": attrs.get("initial_status", status),
        }
        self.resolvables[(kind, name)] = record
        logger.debug(f"[Memory] Registered {kind}/{name} ({status})")
        return record

    # ──────────────────────────────────────────────
    # Resolvables
    # ──────────────────────────────────────────────

    def resolvable_properties(self, name: str, kind: str, repository: str) -> list[dict]:
        result = []
        for (rec_kind, rec_name), record in self.resolvables.items():
            if rec_kind != kind or (name and rec_name != name):
                continue
            if repository and record.get("repository") != repository:
                continue
            result.append({k: v for k, v in record.items() if k not in PRIVATE_KEYS})
        return result

    def resolvable_install(self, name: str, kind: str, repository: str) -> bool:
        record = self.resolvables.get((kind, name))
        if record is None:
            logger.warning(f"[Memory] Cannot select unknown {kind} {name!r}")
            return False

        if record["status"] != ResolvableStatus.INSTALLED.value:
            record["status"] = ResolvableStatus.SELECTED.value
            logger.info(f"[Memory] Selected {kind}/{name}")
        return True

    def resolvable_neutral(self, name: str, kind: str, keep_related: bool) -> bool:
        record = self.resolvables.get((kind, name))
        if record is None:
            logger.warning(f"[Memory] Cannot restore unknown {kind} {name!r}")
            return False

        if record["initial_status"] == ResolvableStatus.INSTALLED.value:
            record["status"] = ResolvableStatus.INSTALLED.value
        else:
            record["status"] = ResolvableStatus.AVAILABLE.value

        if not keep_related:
            self.confirmed.discard(name)

        logger.info(f"[Memory] Restored {kind}/{name} to {record['status']}")
        return True

    # ──────────────────────────────────────────────
    # Licenses
    # ──────────────────────────────────────────────

    def license_to_confirm(self, name: str, lang: str) -> str | None:
        record = self.resolvables.get((RESOLVABLE_KIND, name))
        if record is None:
            return None

        licenses = record["licenses"]
        for code in (lang, lang.split("_")[0]):
            if licenses.get(code):
                return licenses[code]
        return record["license"] or ""

    def need_to_accept_license(self, name: str) -> bool:
        record = self.resolvables.get((RESOLVABLE_KIND, name))
        return bool(record and record["confirmation_required"])

    def mark_license_confirmed(self, name: str) -> None:
        self.confirmed.add(name)

    def mark_license_not_confirmed(self, name: str) -> None:
        self.confirmed.discard(name)

    def has_license_confirmed(self, name: str) -> bool:
        return name in self.confirmed

    # ──────────────────────────────────────────────
    # Catalog I/O
    # ──────────────────────────────────────────────

    @classmethod
    def from_catalog(cls, path: Path) -> "MemoryBackend":
        """Load a backend from a JSON catalog. A missing file yields an empty backend."""
        backend = cls()
        if not path.exists():
            logger.info(f"[Memory] No catalog at {path}, starting empty")
            return backend

        try:
            with open(path) as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise BackendError(f"Corrupted catalog {path}: {e}") from e

        if not isinstance(data, dict):
            raise BackendError(f"Corrupted catalog {path}: expected an object, got {type(data).__name__}")

        for index, record in enumerate(data.get("resolvables", [])):
            try:
                backend.add(**record)
            except TypeError as e:
                raise BackendError(f"Corrupted catalog {path}: invalid resolvable #{index}: {e}") from e
        backend.confirmed = set(data.get("confirmed", []))

        logger.info(f"[Memory] Loaded {len(backend.resolvables)} resolvables from {path}")
        return backend

    def save_catalog(self, path: Path) -> None:
        """Write the registry, including status changes, to a JSON catalog."""
        data = {
            "resolvables": list(self.resolvables.values()),
            "confirmed": sorted(self.confirmed),
        }
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(data, f, indent=2)
        logger.info(f"[Memory] Saved {len(self.resolvables)} resolvables to {path}")
