# app/core/permissions.py

from typing import Mapping, Optional, Set

from app.core.config import settings


def permission_variants(code: str) -> Set[str]:
    """
    Equivalent spellings of a permission code.
    Old underscore codes (INVOICE_VIEW) and dotted codes (INVOICE.VIEW) match each other.
    """
    code = (code or "").strip()
    if not code:
        return set()

    variants = {code}
    if "." in code:
        variants.add(code.replace(".", "_"))
    if "_" in code:
        variants.add(code.replace("_", "."))
    return variants


def has_wildcard(permissions: Mapping[str, bool]) -> bool:
    return permissions.get(settings.PERMISSION_WILDCARD) is True


def has_permission(permissions: Mapping[str, bool], code: Optional[str]) -> bool:
    """
    Check a single permission code against a resolved permission map.

    - Wildcard grants everything when present and true
    - An exact entry wins over its variants (so an override of one spelling is authoritative)
    - Empty code is never granted
    """
    if has_wildcard(permissions):
        return True

    code = (code or "").strip()
    if not code:
        return False

    if code in permissions:
        return bool(permissions[code])

    return any(bool(permissions.get(v)) for v in permission_variants(code))
