# app/services/catalog_service.py

from typing import List, Optional, Union

from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.constants import CATALOG_GROUPS
from app.models.dashboard import CatalogItemRecord
from app.models.enums import CatalogCategory
from app.schemas.catalog import Catalog, CatalogEntry, CatalogItem


def record_to_item(record: CatalogItemRecord) -> CatalogItem:
    return CatalogItem(
        code=record.code,
        title=record.title,
        api=record.api,
        format=record.format,
        chart_types=record.chart_types or None,
        roles=record.roles or [],
        description=record.description,
    )


async def get_catalog(session: AsyncSession) -> Catalog:
    result = await session.execute(
        select(CatalogItemRecord).order_by(
            CatalogItemRecord.category,
            CatalogItemRecord.sequence_order,
            CatalogItemRecord.id,
        )
    )

    grouped = {group: [] for group in CATALOG_GROUPS.values()}
    for record in result.scalars().all():
        try:
            group = CATALOG_GROUPS[CatalogCategory(record.category)]
        except ValueError:
            continue
        grouped[group].append(record_to_item(record))

    return Catalog(**grouped)


def flatten_catalog(catalog: Catalog) -> List[CatalogEntry]:
    """All items tagged with their category, in kpi/chart/table/task/alert order."""
    entries = []
    for category, group in CATALOG_GROUPS.items():
        for item in getattr(catalog, group):
            entries.append(CatalogEntry(**item.model_dump(), category=category))
    return entries


def search_catalog(
    catalog: Catalog,
    query: Optional[str] = None,
    category: Optional[Union[str, CatalogCategory]] = None,
    role: Optional[str] = None,
) -> List[CatalogEntry]:
    """
    Filter the widget library the way the configuration screen does:
    tab (category), free-text over title/code/description/category, and
    optionally only the templates advertised for a role.
    """
    needle = (query or "").strip().lower()
    wanted = CatalogCategory(getattr(category, "value", category)) if category else None

    matches = []
    for entry in flatten_catalog(catalog):
        if wanted and entry.category != wanted:
            continue
        if role and entry.roles and role not in entry.roles:
            continue
        if needle:
            haystack = f"{entry.title} {entry.code} {entry.description or ''} {entry.category.value}".lower()
            if needle not in haystack:
                continue
        matches.append(entry)
    return matches


def find_catalog_entry(catalog: Catalog, code: str) -> Optional[CatalogEntry]:
    for entry in flatten_catalog(catalog):
        if entry.code == code:
            return entry
    return None
