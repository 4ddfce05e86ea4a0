"""
Product Selector CLI — Inspect and select installable products.

Usage:
    product-selector --location ./products.json list --base
    product-selector select openSUSE
    product-selector license openSUSE --lang de_DE
    product-selector confirm-license openSUSE --reject
    product-selector --backend http --location http://resolver:8080 selected-base
"""

import functools
import logging

import click
from rich.console import Console
from rich.table import Table

console = Console()


@click.group()
@click.version_option(package_name="product-selector")
@click.option(
    "--backend",
    "-b",
    type=click.Choice(["memory", "http"]),
    default="memory",
    envvar="PRODUCT_SELECTOR_BACKEND",
    help="Package backend to use.",
)
@click.option(
    "--location",
    "-L",
    type=str,
    default="./products.json",
    envvar="PRODUCT_SELECTOR_LOCATION",
    help="Catalog file (memory) or resolver service URL (http).",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging.")
@click.pass_context
def cli(ctx, backend, location, verbose):
    """Product Selector — Installable products backed by a package resolver."""
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    ctx.obj = {"backend": backend, "location": location}


def _backend_errors(command):
    """Report backend failures as click errors instead of tracebacks."""

    @functools.wraps(command)
    def wrapper(*args, **kwargs):
        from product_selector.backends import BackendError

        try:
            return command(*args, **kwargs)
        except BackendError as e:
            raise click.ClickException(str(e)) from e

    return wrapper


def _open_backend(ctx):
    """Open the configured backend; it is closed when the command finishes."""
    from product_selector.backends import get_backend

    backend = get_backend(ctx.obj["backend"], ctx.obj["location"])
    if hasattr(backend, "close"):
        ctx.call_on_close(backend.close)
    return backend


def _save(ctx, backend) -> None:
    """Persist status changes of the memory backend."""
    from pathlib import Path

    from product_selector.backends.memory import MemoryBackend

    if isinstance(backend, MemoryBackend):
        backend.save_catalog(Path(ctx.obj["location"]))


def _find_product(backend, name):
    from product_selector.core.reader import ProductReader

    for product in ProductReader(backend).all_products():
        if product.name == name:
            return product
    raise click.ClickException(f"Unknown product: {name}")


@cli.command("list")
@click.option("--base", is_flag=True, help="Only list base products.")
@click.option("--status", "-s", "statuses", multiple=True, help="Only list products with this status.")
@click.pass_context
@_backend_errors
def list_products(ctx, base, statuses):
    """List the products known to the backend."""
    from product_selector.core.reader import ProductReader

    reader = ProductReader(_open_backend(ctx))
    products = reader.available_base_products() if base else reader.all_products()
    if statuses:
        products = [p for p in products if p.status in statuses]

    table = Table(title="Products")
    table.add_column("Label", style="bold cyan")
    table.add_column("Name")
    table.add_column("Version")
    table.add_column("Arch")
    table.add_column("Vendor")
    table.add_column("Status", style="green")
    for p in products:
        table.add_row(p.label(), p.name, p.version or "", p.arch or "", p.vendor or "", p.status or "")
    console.print(table)


@cli.command()
@click.argument("name")
@click.pass_context
@_backend_errors
def select(ctx, name):
    """Select a product for installation."""
    backend = _open_backend(ctx)
    product = _find_product(backend, name)
    product.select()
    _save(ctx, backend)
    console.print(f"[green]Selected[/green] {product.label()}")


@cli.command()
@click.argument("name")
@click.pass_context
@_backend_errors
def restore(ctx, name):
    """Reset a product to its neutral status."""
    backend = _open_backend(ctx)
    product = _find_product(backend, name)
    product.restore()
    _save(ctx, backend)
    console.print(f"[yellow]Restored[/yellow] {product.label()}")


@cli.command("license")
@click.argument("name")
@click.option("--lang", "-l", type=str, default=None, help="License language (default: current language).")
@click.pass_context
@_backend_errors
def show_license(ctx, name, lang):
    """Show the license text to confirm for a product."""
    from product_selector.models.product import Product

    product = Product(name=name, backend=_open_backend(ctx))
    text = product.license(lang)
    if text is None:
        raise click.ClickException(f"Unknown product: {name}")
    if not text:
        console.print("No license to confirm")
        return
    click.echo(text)


@cli.command("confirm-license")
@click.argument("name")
@click.option("--reject", is_flag=True, help="Mark the license as not confirmed.")
@click.pass_context
@_backend_errors
def confirm_license(ctx, name, reject):
    """Accept (or reject) the license of a product."""
    backend = _open_backend(ctx)
    product = _find_product(backend, name)
    product.confirm_license(not reject)
    _save(ctx, backend)
    state = "[red]not confirmed[/red]" if reject else "[green]confirmed[/green]"
    console.print(f"License for {product.label()} {state}")


@cli.command("selected-base")
@click.pass_context
@_backend_errors
def selected_base(ctx):
    """Show the base product selected for installation."""
    from product_selector.core.reader import ProductReader

    product = ProductReader(_open_backend(ctx)).selected_base()
    if product is None:
        console.print("No base product selected")
        ctx.exit(1)
    console.print(product.label())


if __name__ == "__main__":
    cli()
