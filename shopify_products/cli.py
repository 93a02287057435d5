"""Command-line interface for listing and creating Shopify products."""

import json
import logging
from pathlib import Path
from contextlib import contextmanager
from typing import Iterator, List, Optional
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.json import JSON

from .client import ShopifyProductClient
from .config import AppConfig, UNLIMITED
from .exceptions import ShopifyProductsError
from .mock_client import MockShopifyStore
from .models.payload import build_payload

app = typer.Typer(
    name="shopify-products",
    help="List and create products in a Shopify store"
)
console = Console()


def setup_logging(verbose: bool = False) -> None:
    """Route package logs through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def load_config(config_path: str) -> AppConfig:
    """Load configuration from JSON file."""
    config_file = Path(config_path)
    if not config_file.exists():
        console.print(f"[red]Error: Config file not found: {config_path}[/red]")
        raise typer.Exit(1)

    with open(config_file) as f:
        config_data = json.load(f)

    return AppConfig(**config_data)


@contextmanager
def open_client(cfg: AppConfig, sandbox: bool) -> Iterator[ShopifyProductClient]:
    if not sandbox:
        with ShopifyProductClient(cfg.shopify) as client:
            yield client
        return
    console.print("[yellow]Sandbox mode: using an in-memory store[/yellow]")
    with MockShopifyStore().client(cfg.shopify) as http:
        yield ShopifyProductClient(cfg.shopify, client=http)


@app.command()
def init(
    output: str = typer.Option("config.json", help="Output configuration file path")
):
    """Initialize a new configuration file with example values."""
    example_config = {
        "shopify": {
            "store": "your-store",
            "credentials": {
                "username": "your_api_key",
                "password": "your_api_password"
            },
            "api_version": None,
            "timeout": 30.0,
            "duplicate_identity": "title"
        },
        "default_result_size": UNLIMITED
    }

    output_path = Path(output)
    with open(output_path, 'w') as f:
        json.dump(example_config, f, indent=2)

    console.print(f"[green]✓[/green] Configuration file created: {output}")
    console.print("\n[yellow]⚠ Please edit the file and add your store credentials![/yellow]")


@app.command()
def validate(
    config: str = typer.Option("config.json", help="Configuration file path"),
):
    """Validate configuration file."""
    try:
        cfg = load_config(config)
        console.print("[green]✓[/green] Configuration is valid!")
        console.print(f"\n[bold]Store:[/bold] {cfg.shopify.base_url}")
        console.print(f"[bold]User:[/bold] {cfg.shopify.credentials.username}")
        console.print(f"[bold]Password:[/bold] {cfg.shopify.credentials.password}")
        console.print(f"[bold]Duplicates by:[/bold] {cfg.shopify.duplicate_identity.value}")
    except Exception as e:
        console.print(f"[red]✗ Configuration error:[/red] {str(e)}")
        raise typer.Exit(1)


@app.command("list")
def list_command(
    config: str = typer.Option("config.json", help="Configuration file path"),
    sku_filter: Optional[str] = typer.Option(None, "--filter", help="Only products with a SKU containing this text"),
    limit: Optional[int] = typer.Option(None, min=1, help="Number of products to fetch (default: all)"),
    output: Optional[str] = typer.Option(None, help="Output file for JSON (optional)"),
    sandbox: bool = typer.Option(False, help="Use an in-memory store instead of Shopify"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every page request"),
):
    """Fetch products from the store."""
    setup_logging(verbose)
    cfg = load_config(config)
    result_size = limit if limit is not None else cfg.default_result_size

    try:
        with open_client(cfg, sandbox) as client:
            products = client.list_products(sku_filter, result_size)
    except ShopifyProductsError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"Products in {cfg.shopify.store}")
    table.add_column("ID", style="cyan")
    table.add_column("Title", style="green")
    table.add_column("Vendor", style="magenta")
    table.add_column("SKUs", style="yellow")

    for product in products:
        table.add_row(
            str(product.id or ""),
            product.title[:50] + "..." if len(product.title) > 50 else product.title,
            product.vendor or "",
            ", ".join(product.skus)
        )

    console.print(table)
    console.print(f"{len(products)} product(s)")

    if output:
        output_path = Path(output)
        with open(output_path, 'w') as f:
            json.dump(
                [p.model_dump(mode='json', exclude_none=True) for p in products],
                f,
                indent=2,
                default=str
            )
        console.print(f"\n[green]✓[/green] Saved to {output}")


@app.command()
def create(
    title: str = typer.Argument(..., help="Product title"),
    config: str = typer.Option("config.json", help="Configuration file path"),
    vendor: Optional[str] = typer.Option(None, help="Vendor name"),
    weight: Optional[float] = typer.Option(None, help="Weight in pounds"),
    product_type: Optional[str] = typer.Option(None, help="Product type"),
    body_html: Optional[str] = typer.Option(None, help="HTML description"),
    published: Optional[bool] = typer.Option(None, "--published/--unpublished", help="Publish the product (omitted: Shopify publishes it)"),
    inventory_quantity: Optional[int] = typer.Option(None, help="Inventory quantity (default 0)"),
    inventory_policy: Optional[str] = typer.Option(None, help="Deny or Continue"),
    inventory_management: Optional[str] = typer.Option(None, help="Inventory management service, e.g. shopify"),
    sku: Optional[str] = typer.Option(None, help="Variant SKU"),
    image: Optional[List[Path]] = typer.Option(None, exists=True, dir_okay=False, help="Image file to attach (repeatable)"),
    sandbox: bool = typer.Option(False, help="Use an in-memory store instead of Shopify"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every page request"),
):
    """Create a product unless it already exists.

    Without --unpublished the product goes live on the store.
    """
    setup_logging(verbose)
    cfg = load_config(config)

    try:
        payload = build_payload(
            title,
            vendor=vendor,
            weight=weight,
            product_type=product_type,
            body_html=body_html,
            published=published,
            inventory_quantity=inventory_quantity,
            inventory_policy=inventory_policy,
            inventory_management=inventory_management,
            sku=sku,
            images=[(path.name, path.read_bytes()) for path in image or []],
        )
        with open_client(cfg, sandbox) as client:
            response = client.submit(payload)
    except ShopifyProductsError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(1)

    if "errors" in response:
        console.print("[red]✗ Shopify rejected the product:[/red]")
        console.print(JSON(json.dumps(response["errors"], default=str)))
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] Created product: {title}")
    console.print(JSON(json.dumps(response, default=str, indent=2)))


@app.command()
def serve(
    config: str = typer.Option("config.json", help="Configuration file path"),
    host: str = typer.Option("0.0.0.0", help="Host to bind to"),
    port: int = typer.Option(8000, help="Port to bind to"),
):
    """Start an HTTP server exposing the list and create operations."""
    from fastapi import FastAPI
    import uvicorn
    from .router import get_products_router
    from .telemetry import init_metrics

    setup_logging()
    init_metrics()
    cfg = load_config(config)
    server_app = FastAPI(title="Shopify Products")
    server_app.include_router(get_products_router(cfg.shopify))

    console.print(f"[green]Starting server on {host}:{port}[/green]")
    console.print(f"[blue]Products endpoint: http://{host}:{port}/products[/blue]")

    uvicorn.run(server_app, host=host, port=port)


if __name__ == "__main__":
    app()
