import json
import logging
import sys
import traceback
from urllib.parse import urlparse

import click
import requests
from tabulate import tabulate

from config.settings import get_settings
from core.errors import ProductPorterError
from core.images.uploader import process_and_upload_images
from core.models import ImageRef, ScrapedProduct
from core.platform.client import WooCommerceClient
from core.platform.uploader import ProductUploader, assemble_payload
from core.scrapers.scraper_factory import scrape_product

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("product-porter")


def is_valid_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def rehost_images(product: ScrapedProduct, settings) -> ScrapedProduct:
    """Replace the product's images with watermark-free copies on our store."""
    if not product.images:
        return product
    uploaded = process_and_upload_images(
        [image.src for image in product.images],
        watermark_options=settings.WATERMARK_OPTIONS,
        settings=settings,
    )
    images = [ImageRef(src=item.get("src") or item["original_url"]) for item in uploaded]
    return product.model_copy(update={"images": images})


def error_tip(message: str) -> str:
    lowered = message.lower()
    if "selector" in lowered:
        return "Tip: Check the selectors in the site scrapers against your site structure."
    if "authentication" in lowered or "credentials" in lowered or ".env" in lowered:
        return "Tip: Verify your WooCommerce API credentials in .env file."
    if "timeout" in lowered:
        return "Tip: The target site may be slow or the selectors may be incorrect."
    return ""


def summary_table(product: ScrapedProduct, product_id=None) -> str:
    rows = [
        ["Product Name", product.name or "(no name)"],
        ["Product ID", product_id if product_id is not None else "(dry run)"],
        ["Price", product.regular_price or "(not set)"],
        ["Sale Price", product.sale_price or "(not set)"],
        ["SKU", product.sku or "(not set)"],
        ["Images", len(product.images)],
        ["Categories", len(product.categories)],
        ["Tags", len(product.tags)],
        ["Features", len(product.features)],
    ]
    return tabulate(rows, tablefmt="simple")


@click.command()
@click.argument("url")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option(
    "--process-images/--no-process-images",
    default=None,
    help="Cover watermarks and re-host images on the store (default: PROCESS_IMAGES)",
)
@click.option("--dry-run", is_flag=True, help="Print the product payload instead of uploading it")
def main(url, verbose, process_images, dry_run):
    """Scrape the product at URL and create it as a draft on WooCommerce."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug("Debug logging enabled")

    if not is_valid_url(url):
        click.echo("Error: Invalid URL format", err=True)
        sys.exit(1)

    settings = get_settings()
    if process_images is None:
        process_images = settings.PROCESS_IMAGES

    click.echo("=" * 60)
    click.echo("Product Scraper & WooCommerce Uploader")
    click.echo("=" * 60)
    click.echo(f"Target URL: {url}")

    try:
        logger.info("Step 1: Scraping product data...")
        product = scrape_product(url, settings.CUSTOM_SITE_BASE_URL)

        uploader = None
        if not dry_run:
            uploader = ProductUploader(WooCommerceClient.from_settings(settings), settings)

        if process_images and not dry_run:
            logger.info("Re-hosting %d images...", len(product.images))
            product = rehost_images(product, settings)

        if dry_run:
            payload = assemble_payload(product, [], product.sku or None, settings)
            click.echo(json.dumps(payload, ensure_ascii=False, indent=2))
            product_id = None
        else:
            logger.info("Step 2: Uploading product to WooCommerce...")
            product_id = uploader.upload(product)
    except ProductPorterError as e:
        fail(e.message, verbose)
    except requests.exceptions.RequestException as e:
        fail(f"Network error: {e}", verbose)
    except Exception as e:  # pylint: disable=broad-exception-caught
        # Last resort so the CLI always exits with a message and status 1
        fail(f"Unexpected error: {e}", verbose)

    click.echo("=" * 60)
    if product_id is not None:
        click.echo("SUCCESS: Product created successfully!")
    else:
        click.echo("DRY RUN: Product was not uploaded")
    click.echo("=" * 60)
    click.echo(summary_table(product, product_id))


def fail(message: str, verbose: bool = False):
    click.echo("=" * 60, err=True)
    click.echo("ERROR: Operation failed", err=True)
    click.echo(f"Error: {message}", err=True)
    tip = error_tip(message)
    if tip:
        click.echo(tip, err=True)
    if verbose:
        click.echo(traceback.format_exc(), err=True)
    sys.exit(1)


if __name__ == "__main__":
    main()
