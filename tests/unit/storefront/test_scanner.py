from bs4 import BeautifulSoup

from app.storefront.config import BADGE_CLASS, PAGE_OVERLAY_CLASS, RESTRICTED_CLASS, WRAPPER_CLASS
from app.storefront.restrictor import Restrictor
from app.storefront.scanner import MATCHED_ATTR, DomScanner, current_product_handle, find_product_container


def scanner():
    return DomScanner(Restrictor())


def restricted(document):
    return document.select(f".{RESTRICTED_CLASS}")


def test_scan_restricts_matching_card(collection_html):
    document = BeautifulSoup(collection_html, "lxml")

    result = scanner().scan(document, {"101"})

    assert result.restricted == 1
    [element] = restricted(document)
    assert element.get("data-product-id") == "101"
    assert element[MATCHED_ATTR] == "101"
    assert len(document.select(f".{WRAPPER_CLASS}")) == 1


def test_scan_matches_handle_on_outer_card(collection_html):
    document = BeautifulSoup(collection_html, "lxml")

    result = scanner().scan(document, {"gibson-les-paul"})

    assert result.restricted == 1
    [element] = restricted(document)
    assert "grid__item" in element["class"]
    # nothing nested inside the restricted item gets its own overlay
    assert len(element.select(f".{WRAPPER_CLASS}")) == 1


def test_scan_matches_element_id(collection_html):
    document = BeautifulSoup(collection_html, "lxml")

    scanner().scan(document, {"303"})

    [element] = restricted(document)
    assert element.get("id") == "product-303"


def test_rescan_is_idempotent(collection_html):
    document = BeautifulSoup(collection_html, "lxml")
    dom_scanner = scanner()

    dom_scanner.scan(document, {"101", "gibson-les-paul"})
    snapshot = str(document)
    second = dom_scanner.scan(document, {"101", "gibson-les-paul"})

    assert second.changed is False
    assert str(document) == snapshot
    assert len(document.select(f".{WRAPPER_CLASS}")) == 2
    assert len(document.select(f".{BADGE_CLASS}")) == 2


def test_removed_identifier_is_released(collection_html):
    document = BeautifulSoup(collection_html, "lxml")
    dom_scanner = scanner()
    dom_scanner.scan(document, {"101", "gibson-les-paul"})

    result = dom_scanner.scan(document, {"gibson-les-paul"})

    assert result.released == 1
    assert len(restricted(document)) == 1
    card = document.select_one('[data-product-id="101"]')
    assert card.select_one("a")["href"] == "/products/fender-stratocaster"
    assert not card.has_attr(MATCHED_ATTR)


def test_empty_hidden_set_releases_everything(collection_html):
    document = BeautifulSoup(collection_html, "lxml")
    dom_scanner = scanner()
    dom_scanner.scan(document, {"101"})

    result = dom_scanner.scan(document, set())

    assert result.released == 1
    assert restricted(document) == []
    assert document.select(f".{WRAPPER_CLASS}") == []


def test_reference_outside_card_uses_container():
    document = BeautifulSoup(
        '<ul><li class="featured"><span>Deal</span><a href="/products/blue-amp">Blue amp</a></li></ul>',
        "html.parser",
    )

    result = scanner().scan(document, {"blue-amp"})

    assert result.restricted == 1
    assert restricted(document)[0].name == "li"


def test_rerendered_card_is_restricted_again(collection_html):
    document = BeautifulSoup(collection_html, "lxml")
    dom_scanner = scanner()
    dom_scanner.scan(document, {"101"})

    grid = document.select_one(".product-grid")
    grid.clear()
    fresh = BeautifulSoup(
        '<li class="grid__item"><div class="card--product" data-product-id="101">'
        '<a href="/products/fender-stratocaster">Stratocaster</a></div></li>',
        "html.parser",
    )
    grid.append(fresh.li)

    result = dom_scanner.scan(document, {"101"})

    assert result.restricted == 1
    assert len(restricted(document)) == 1


def test_product_page_restricted_by_url():
    document = BeautifulSoup(
        '<html><body><div class="product"><h1>Blue amp</h1></div></body></html>',
        "lxml",
    )

    result = scanner().scan(document, {"blue-amp"}, url="https://shop.example/products/blue-amp")

    assert result.page_restricted is True
    section = document.select_one(".product")
    assert section[MATCHED_ATTR] == "blue-amp"
    assert len(document.select(f".{PAGE_OVERLAY_CLASS}")) == 1

    again = scanner().scan(document, {"blue-amp"}, url="https://shop.example/products/blue-amp")
    assert again.page_restricted is False
    assert len(document.select(f".{PAGE_OVERLAY_CLASS}")) == 1


def test_product_page_released_when_shown():
    document = BeautifulSoup('<div class="product"><h1>Blue amp</h1></div>', "html.parser")
    url = "https://shop.example/products/blue-amp"
    dom_scanner = scanner()
    dom_scanner.scan(document, {"blue-amp"}, url=url)

    result = dom_scanner.scan(document, set(), url=url)

    assert result.released == 1
    assert document.select(f".{PAGE_OVERLAY_CLASS}") == []


def test_current_product_handle():
    assert current_product_handle(BeautifulSoup("", "html.parser"), "https://shop.example/products/blue-amp?v=1") == "blue-amp"
    assert current_product_handle(BeautifulSoup("", "html.parser"), "https://shop.example/collections/all") is None
    document = BeautifulSoup(
        '<head><meta property="og:type" content="product">'
        '<link rel="canonical" href="https://shop.example/products/red-amp"></head>',
        "html.parser",
    )
    assert current_product_handle(document) == "red-amp"


def test_find_product_container_skips_inline_ancestors():
    document = BeautifulSoup('<section><p>See <a href="/products/x">x</a></p></section>', "html.parser")
    assert find_product_container(document.a) is document.section


def test_find_product_container_falls_back_to_element():
    document = BeautifulSoup('<div class="promo">x</div>', "html.parser")
    assert find_product_container(document.div) is document.div


def test_card_with_id_and_handle_matches_handle():
    document = BeautifulSoup(
        '<div class="product-card" data-product-id="101" data-product-handle="blue-amp"><span>Blue</span></div>',
        "html.parser",
    )

    result = scanner().scan(document, {"blue-amp"})

    assert result.restricted == 1
    assert restricted(document)[0][MATCHED_ATTR] == "blue-amp"


def test_inline_product_link_restricts_block_ancestor():
    document = BeautifulSoup('<div><p>See <a href="/products/blue-amp">Blue amp</a></p></div>', "html.parser")

    result = scanner().scan(document, {"blue-amp"})

    assert result.restricted == 1
    [element] = restricted(document)
    assert element.name == "div"
    link = document.find("a", string="Blue amp")
    assert "href" not in link.attrs
    # the call-to-action is never nested inside another link
    cta = document.select_one(".visibility-overlay-link")
    assert all(parent.name != "a" for parent in cta.parents)
