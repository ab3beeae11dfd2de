# tests/unit/cli/test_restrict_page_cli.py

import pytest
from click.testing import CliRunner

from app.cli.restrict_page import restrict_page, run_restrict
from app.storefront.config import RESTRICTED_CLASS, WRAPPER_CLASS


@pytest.fixture
def runner():
    """Provides a CliRunner instance."""
    return CliRunner()


@pytest.fixture
def page_file(tmp_path, collection_html):
    path = tmp_path / "collection.html"
    path.write_text(collection_html, encoding="utf-8")
    return path


@pytest.mark.asyncio
async def test_run_restrict_from_file(page_file):
    html, result = await run_restrict(None, str(page_file), "/apps/product-visibility/api/hidden-products", ["101"])

    assert result.restricted == 1
    assert RESTRICTED_CLASS in html
    assert WRAPPER_CLASS in html


@pytest.mark.asyncio
async def test_run_restrict_hide_completely(page_file):
    html, result = await run_restrict(None, str(page_file), None, ["101"], hide_completely=True)

    assert result.restricted == 1
    assert "display: none" in html
    assert WRAPPER_CLASS not in html


def test_cli_writes_output(runner, page_file, tmp_path):
    output = tmp_path / "restricted.html"

    result = runner.invoke(restrict_page, ["--file", str(page_file), "--hidden", "101", "--hidden", "303", "-o", str(output)])

    assert result.exit_code == 0, result.output
    assert output.read_text(encoding="utf-8").count(f'class="{WRAPPER_CLASS}"') == 2


def test_cli_requires_source(runner):
    result = runner.invoke(restrict_page, [])

    assert result.exit_code != 0
    assert "Pass --url or --file" in result.output
