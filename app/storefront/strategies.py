"""
Product identification strategies.

Each strategy looks at one nominated element and returns an identifier or
None. They are independent and pure; a miss is expected on most themes.
"""

from typing import Callable, List, Optional, Sequence

from bs4 import Tag

from app.storefront.identifiers import handle_from_href, id_from_element_id

IdentificationStrategy = Callable[[Tag], Optional[str]]


def from_data_product_id(element: Tag) -> Optional[str]:
    return element.get("data-product-id") or None


def from_data_product_handle(element: Tag) -> Optional[str]:
    return element.get("data-product-handle") or None


def from_product_link(element: Tag) -> Optional[str]:
    if element.name == "a" and element.get("href"):
        link = element
    else:
        link = element.select_one('a[href*="/products/"]')
    if link is None:
        return None
    return handle_from_href(link.get("href"))


def from_element_id(element: Tag) -> Optional[str]:
    return id_from_element_id(element.get("id"))


DEFAULT_STRATEGIES: Sequence[IdentificationStrategy] = (
    from_data_product_id,
    from_data_product_handle,
    from_product_link,
    from_element_id,
)


def identify_product(element: Tag, strategies: Sequence[IdentificationStrategy] = DEFAULT_STRATEGIES) -> Optional[str]:
    """First strategy with an answer wins"""
    for strategy in strategies:
        identifier = strategy(element)
        if identifier:
            return identifier
    return None


def candidate_identifiers(element: Tag, strategies: Sequence[IdentificationStrategy] = DEFAULT_STRATEGIES) -> List[str]:
    """Every identifier the strategies yield, in strategy order, without duplicates"""
    candidates: List[str] = []
    for strategy in strategies:
        identifier = strategy(element)
        if identifier and identifier not in candidates:
            candidates.append(identifier)
    return candidates
