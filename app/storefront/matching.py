"""Hidden-set membership test for a candidate identifier."""

from typing import AbstractSet

from app.storefront.identifiers import strip_gid, to_gid


def is_hidden(candidate: str, hidden_set: AbstractSet[str]) -> bool:
    """
    True when the candidate names a hidden product.

    Matches exactly, with or without the Product gid prefix, or by substring in
    either direction. The substring rule is deliberately loose: themes render
    ids and handles inconsistently, and a short member such as "5" will match
    any candidate containing that digit.
    """
    if not candidate:
        return False
    candidate = str(candidate)

    if candidate in hidden_set:
        return True
    if to_gid(candidate) in hidden_set or strip_gid(candidate) in hidden_set:
        return True

    return any(
        member and (member in candidate or candidate in member)
        for member in hidden_set
    )
