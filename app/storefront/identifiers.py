"""Helpers for the three shapes a product identifier takes on a storefront."""

import re
from typing import Optional

from app.core.enums import GID_PRODUCT_PREFIX

PRODUCT_PATH_PATTERN = re.compile(r"/products/([^/?#]+)")
ELEMENT_ID_PATTERN = re.compile(r"product[_-]?(\d+)", re.IGNORECASE)


def strip_gid(identifier: str) -> str:
    return identifier[len(GID_PRODUCT_PREFIX):] if identifier.startswith(GID_PRODUCT_PREFIX) else identifier


def to_gid(identifier: str) -> str:
    return identifier if identifier.startswith(GID_PRODUCT_PREFIX) else f"{GID_PRODUCT_PREFIX}{identifier}"


def handle_from_href(href: Optional[str]) -> Optional[str]:
    if not href:
        return None
    match = PRODUCT_PATH_PATTERN.search(href)
    return match.group(1) if match else None


def id_from_element_id(element_id: Optional[str]) -> Optional[str]:
    if not element_id:
        return None
    match = ELEMENT_ID_PATTERN.search(element_id)
    return match.group(1) if match else None
