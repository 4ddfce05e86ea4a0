"""
Example: Pick a base product and accept its license.

Usage:
    python examples/select_base_product.py ./products.json SLES
"""

import sys
from pathlib import Path

from product_selector import ProductReader
from product_selector.backends.memory import MemoryBackend


def main(catalog: Path, name: str) -> int:
    backend = MemoryBackend.from_catalog(catalog)
    reader = ProductReader(backend)

    product = next((p for p in reader.available_base_products() if p.name == name), None)
    if product is None:
        print(f"{name} is not an available base product")
        return 1

    if product.license_confirmation_required() and product.has_license():
        print(product.license())
        product.confirm_license(input("Accept the license? [y/N] ").lower() == "y")
        if not product.license_confirmed():
            print("License not accepted, nothing selected")
            return 1

    product.select()
    backend.save_catalog(catalog)
    print(f"\n✅ Selected base product: {reader.selected_base().label()}")
    return 0


if __name__ == "__main__":
    sys.exit(main(Path(sys.argv[1]), sys.argv[2]))
