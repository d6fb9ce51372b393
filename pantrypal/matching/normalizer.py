"""Ingredient name canonicalization and loose name matching.

Names from the AI service are noisy ("cherry tomatoes", "Fresh Basil "), so two
names are treated as the same ingredient when, after canonicalization, either one
contains the other. A short catalog name such as "egg" therefore also matches
"eggplant".
"""

from typing import Iterable, List


def canonicalize(name: str) -> str:
    """Return the canonical form of an ingredient name (trimmed, lower-case)."""
    if not name:
        return ""
    return name.strip().lower()


def names_match(first: str, second: str) -> bool:
    """Bidirectional substring test between two ingredient names.

    Empty names never match anything.
    """
    a = canonicalize(first)
    b = canonicalize(second)
    if not a or not b:
        return False
    return a in b or b in a


def is_present(catalog_name: str, available_names: Iterable[str]) -> bool:
    """True if catalog_name loosely matches any of the available names."""
    return any(names_match(catalog_name, candidate) for candidate in available_names)


def satisfied_names(catalog_names: Iterable[str], available_names: Iterable[str]) -> List[str]:
    """Catalog names satisfied by the available set, in catalog order.

    Args:
        catalog_names: Recipe-side (catalog) ingredient names.
        available_names: User-side names, e.g. ingredients detected in a photo.

    Returns:
        Canonical catalog names present on the user side. Duplicates in
        catalog_names are reported once.
    """
    available = [name for name in (canonicalize(n) for n in available_names) if name]
    found: List[str] = []
    for name in catalog_names:
        canonical = canonicalize(name)
        if canonical and canonical not in found and is_present(canonical, available):
            found.append(canonical)
    return found
