from typing import List, Optional

from pydantic import Field, field_validator

from app.models.enums import CatalogCategory
from app.schemas.dashboard import CamelModel


# ---------------------------------------------------------
# CATALOG ITEM (widget template)
# ---------------------------------------------------------
class CatalogItem(CamelModel):
    code: str
    title: str
    api: str
    format: Optional[str] = None
    chart_types: Optional[List[str]] = None
    roles: List[str] = Field(default_factory=list)
    description: Optional[str] = None

    @field_validator("roles", mode="before")
    @classmethod
    def none_roles(cls, value):
        return value or []


# ---------------------------------------------------------
# CATALOG ENTRY (item + the group it came from)
# ---------------------------------------------------------
class CatalogEntry(CatalogItem):
    category: CatalogCategory


# ---------------------------------------------------------
# CATALOG (grouped response)
# ---------------------------------------------------------
class Catalog(CamelModel):
    kpis: List[CatalogItem] = Field(default_factory=list)
    charts: List[CatalogItem] = Field(default_factory=list)
    tables: List[CatalogItem] = Field(default_factory=list)
    tasks: List[CatalogItem] = Field(default_factory=list)
    alerts: List[CatalogItem] = Field(default_factory=list)
