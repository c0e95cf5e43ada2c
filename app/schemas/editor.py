from typing import Any, Dict, List, Optional, Union

from pydantic import Field, model_validator

from app.models.enums import CatalogCategory, MoveDirection, WidgetType
from app.schemas.catalog import CatalogItem
from app.schemas.dashboard import CamelModel, ComputedPermissions, DashboardConfig
from app.schemas.widget import WidgetDataResult


# ---------------------------------------------------------
# EDITOR REQUESTS (every call returns the new document)
# ---------------------------------------------------------
class AddWidgetRequest(CamelModel):
    config: DashboardConfig
    item: Optional[CatalogItem] = None
    catalog_code: Optional[str] = None  # look the template up in the stored catalog
    widget_type: Optional[Union[CatalogCategory, WidgetType]] = None

    @model_validator(mode="after")
    def item_or_code(self):
        if self.item is None and not self.catalog_code:
            raise ValueError("Either 'item' or 'catalogCode' is required")
        return self


class WidgetRefRequest(CamelModel):
    config: DashboardConfig
    widget_id: str


class UpdateWidgetRequest(WidgetRefRequest):
    changes: Dict[str, Any] = Field(default_factory=dict)


class ReorderWidgetRequest(WidgetRefRequest):
    direction: MoveDirection


class ResizeWidgetRequest(WidgetRefRequest):
    size: Any


# ---------------------------------------------------------
# DASHBOARD VIEW (both render waves)
# ---------------------------------------------------------
class DashboardView(CamelModel):
    role: str
    preview: bool = False
    generation: int
    computed: ComputedPermissions
    widget_data: List[WidgetDataResult] = Field(default_factory=list)
