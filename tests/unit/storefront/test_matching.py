import pytest

from app.storefront.identifiers import handle_from_href, id_from_element_id, strip_gid, to_gid
from app.storefront.matching import is_hidden


def test_exact_match():
    assert is_hidden("fender-stratocaster", {"fender-stratocaster"})


def test_gid_forms_match_both_ways():
    assert is_hidden("gid://shopify/Product/123", {"123"})
    assert is_hidden("123", {"gid://shopify/Product/123"})


def test_substring_match_either_direction():
    # theme renders ids with a prefix
    assert is_hidden("product-8812", {"8812"})
    # theme renders a shortened handle
    assert is_hidden("les-paul", {"gibson-les-paul"})


def test_short_member_matches_loosely():
    assert is_hidden("4567", {"5"})


@pytest.mark.parametrize("candidate", ["", None])
def test_empty_candidate_never_hidden(candidate):
    assert is_hidden(candidate, {"123"}) is False


def test_empty_set_never_hidden():
    assert is_hidden("123", set()) is False


def test_unrelated_candidate():
    assert is_hidden("marshall-jcm800", {"fender-stratocaster", "101"}) is False


def test_identifier_helpers():
    assert strip_gid("gid://shopify/Product/9") == "9"
    assert strip_gid("9") == "9"
    assert to_gid("9") == "gid://shopify/Product/9"
    assert to_gid("gid://shopify/Product/9") == "gid://shopify/Product/9"
    assert handle_from_href("/collections/all/products/blue-amp?variant=3#x") == "blue-amp"
    assert handle_from_href("/pages/about") is None
    assert handle_from_href(None) is None
    assert id_from_element_id("Product-12345") == "12345"
    assert id_from_element_id("product_77") == "77"
    assert id_from_element_id("cart-drawer") is None
