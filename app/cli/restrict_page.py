# app/cli/restrict_page.py
import asyncio
import logging
import sys
from dataclasses import replace
from pathlib import Path

import click
import httpx

from app.core.config import get_settings
from app.storefront.acquisition import (
    ApiHiddenSetSource,
    DataAttributeSource,
    HiddenSetProvider,
    InlineJsonSource,
    ProductPageJsonSource,
    StaticHiddenSetSource,
)
from app.storefront.config import DEFAULT_CONFIG
from app.storefront.manager import StorefrontVisibilityManager
from app.storefront.page import StorefrontPage

logger = logging.getLogger(__name__)


@click.command()
@click.option('--url', help='Storefront page to fetch and restrict')
@click.option('--file', 'html_file', type=click.Path(exists=True, dir_okay=False), help='Local HTML file to restrict')
@click.option('--endpoint', default=lambda: get_settings().HIDDEN_PRODUCTS_ENDPOINT, help='Hidden products endpoint (absolute, or relative to --url)')
@click.option('--hidden', multiple=True, help='Extra hidden identifier; may be repeated')
@click.option('--output', '-o', type=click.Path(dir_okay=False), help='Write the restricted HTML here instead of stdout')
@click.option('--hide-completely', is_flag=True, help='Hide matched products instead of blurring them')
def restrict_page(url, html_file, endpoint, hidden, output, hide_completely):
    """Restrict hidden products on a storefront page"""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if not url and not html_file:
        raise click.UsageError("Pass --url or --file")

    try:
        html, result = asyncio.run(run_restrict(url, html_file, endpoint, hidden, hide_completely))
    except httpx.HTTPError as e:
        logger.exception("Could not fetch storefront page")
        click.echo(f"Error fetching page: {str(e)}", err=True)
        sys.exit(1)

    if output:
        Path(output).write_text(html, encoding="utf-8")
        click.echo(f"Wrote {output}")
    else:
        click.echo(html)

    click.echo(
        f"Restricted {result.restricted} products"
        f"{' and the product page' if result.page_restricted else ''}",
        err=True,
    )


async def run_restrict(url, html_file, endpoint, hidden, hide_completely=False):
    """Load the page, restrict it once and return (html, ScanResult)."""
    if html_file:
        html = Path(html_file).read_text(encoding="utf-8")
    else:
        async with httpx.AsyncClient(timeout=30.0, follow_redirects=True) as client:
            response = await client.get(url)
            response.raise_for_status()
            html = response.text

    config = DEFAULT_CONFIG
    if hide_completely:
        config = replace(config, hide_completely=True)

    provider = HiddenSetProvider([
        ApiHiddenSetSource(endpoint, base_url=url),
        StaticHiddenSetSource(hidden),
        InlineJsonSource(),
        DataAttributeSource(config.namespace, config.metafield_key),
        ProductPageJsonSource(config.namespace, config.metafield_key),
    ])

    page = StorefrontPage(html, url=url)
    manager = StorefrontVisibilityManager(page, provider=provider, config=config)
    result = await manager.run_once()
    logger.info(f"Hidden identifiers: {manager.get_hidden_products()}")
    return page.render(), result


if __name__ == '__main__':
    restrict_page()
