"""
Dashboard configuration schemas.

The dashboard is rendered dynamically from a role's DashboardConfig plus the
user's UserPermissionOverrides. Documents travel as camelCase JSON (the shape
the dashboard UI reads and writes); Python code uses the snake_case attributes.
"""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from app.core.constants import GRID_UNITS_MAX, GRID_UNITS_MIN
from app.models.enums import ChartType, MenuItemKind, WidgetType


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _role_key(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


# ---------------------------------------------------------
# MENU
# ---------------------------------------------------------
class MenuItem(CamelModel):
    """
    Sidebar menu node.

    ``kind`` is the explicit leaf/branch tag. A branch whose children were all
    filtered away keeps ``kind="branch"`` but carries no ``children`` field.
    """
    id: str
    label: str
    path: str = ""
    icon: str = Field(default="", validation_alias=AliasChoices("icon", "iconKey"))
    permission: Optional[str] = None
    visible: bool = True
    children: Optional[List["MenuItem"]] = None
    kind: MenuItemKind = MenuItemKind.Leaf

    @model_validator(mode="before")
    @classmethod
    def derive_kind(cls, data: Any) -> Any:
        if isinstance(data, dict) and "kind" not in data:
            kind = MenuItemKind.Branch if data.get("children") else MenuItemKind.Leaf
            data = {**data, "kind": kind}
        return data

    @field_validator("children")
    @classmethod
    def empty_children_to_none(cls, value):
        return value or None

    @model_validator(mode="after")
    def children_imply_branch(self):
        if self.children:
            self.kind = MenuItemKind.Branch
        return self

    @property
    def is_branch(self) -> bool:
        return self.kind == MenuItemKind.Branch


MenuItem.model_rebuild()


# ---------------------------------------------------------
# WIDGET PROPS (closed family, selected by widget type)
# ---------------------------------------------------------
class WidgetProps(CamelModel):
    # Unknown keys survive so stored documents round-trip
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class MetricProps(WidgetProps):
    unit: Optional[str] = None
    label: Optional[str] = None
    format: Optional[str] = None


class ChartProps(WidgetProps):
    colors: Optional[List[str]] = None
    stacked: Optional[bool] = None


class TableProps(WidgetProps):
    page_size: Optional[int] = None
    columns: Optional[List[str]] = None


class ListProps(WidgetProps):
    max_items: Optional[int] = None


class CustomProps(WidgetProps):
    component: Optional[str] = None


PROPS_BY_TYPE = {
    WidgetType.Metric: MetricProps,
    WidgetType.Chart: ChartProps,
    WidgetType.Table: TableProps,
    WidgetType.TaskList: ListProps,
    WidgetType.ApprovalQueue: ListProps,
    WidgetType.Alert: ListProps,
    WidgetType.ActivityTimeline: ListProps,
    WidgetType.Custom: CustomProps,
}

AnyWidgetProps = Union[MetricProps, ChartProps, TableProps, ListProps, CustomProps]


# ---------------------------------------------------------
# WIDGET
# ---------------------------------------------------------
class WidgetPermissions(CamelModel):
    view: Optional[str] = None  # Permission code required to view the widget
    actions: Optional[Dict[str, str]] = None  # action -> permission code


class DataSource(CamelModel):
    endpoint: str
    method: Literal["GET", "POST"] = "GET"
    params: Optional[Dict[str, Any]] = None
    refresh_interval: Optional[int] = None  # seconds

    @field_validator("method", mode="before")
    @classmethod
    def upper_method(cls, value):
        if value is None:
            return "GET"
        return str(value).upper()


class ChartConfig(CamelModel):
    type: ChartType = ChartType.Line
    x_axis: Optional[str] = None
    y_axis: Optional[str] = None
    series: Optional[List[str]] = None


class WidgetConfig(CamelModel):
    id: str
    type: WidgetType
    title: str = ""
    description: Optional[str] = None
    # Legacy 4-unit width (1 quarter, 2 half, 4 full). Stored legacy values are clamped, not snapped.
    grid_column: int = 1
    grid_row: Optional[int] = None
    permissions: Optional[WidgetPermissions] = None
    props: Optional[AnyWidgetProps] = None
    data_source: Optional[DataSource] = None
    chart_config: Optional[ChartConfig] = None

    @model_validator(mode="before")
    @classmethod
    def select_props_model(cls, data: Any) -> Any:
        if isinstance(data, dict):
            props = data.get("props")
            if isinstance(props, dict):
                widget_type = data.get("type")
                # Unhashable types are left for the type field to reject
                props_model = PROPS_BY_TYPE.get(widget_type, CustomProps) if isinstance(widget_type, str) else CustomProps
                data = {**data, "props": props_model.model_validate(props)}
        return data

    @field_validator("grid_column", mode="before")
    @classmethod
    def clamp_grid_column(cls, value):
        if value is None or value == "":
            return GRID_UNITS_MIN
        try:
            units = int(value)
        except (TypeError, OverflowError) as e:
            raise ValueError(f"gridColumn must be a number, got {value!r}") from e
        return min(GRID_UNITS_MAX, max(GRID_UNITS_MIN, units))


# ---------------------------------------------------------
# CONFIGURATION DOCUMENT
# ---------------------------------------------------------
class DashboardConfig(CamelModel):
    role: str
    widgets: List[WidgetConfig] = Field(default_factory=list)
    menu_items: List[MenuItem] = Field(default_factory=list)
    permissions: Dict[str, bool] = Field(default_factory=dict)

    @field_validator("role", mode="before")
    @classmethod
    def role_key(cls, value):
        return _role_key(value)

    @model_validator(mode="after")
    def unique_ids(self):
        from app.services.menu_service import ensure_unique_menu_ids

        seen = set()
        for widget in self.widgets:
            if widget.id in seen:
                raise ValueError(f"Duplicate widget id '{widget.id}'")
            seen.add(widget.id)

        ensure_unique_menu_ids(self.menu_items)
        return self

    def widget_ids(self) -> List[str]:
        return [w.id for w in self.widgets]


class UserPermissionOverrides(CamelModel):
    user_id: str
    permissions: Dict[str, bool] = Field(default_factory=dict)
    menu_overrides: Optional[Dict[str, bool]] = None
    widget_overrides: Optional[Dict[str, bool]] = None

    @field_validator("user_id", mode="before")
    @classmethod
    def stringify_user_id(cls, value):
        return str(value)


class ComputedPermissions(CamelModel):
    permissions: Dict[str, bool] = Field(default_factory=dict)
    menu_items: List[MenuItem] = Field(default_factory=list)
    widgets: List[WidgetConfig] = Field(default_factory=list)


class PreviewMode(CamelModel):
    """SuperAdmin 'view dashboard as role' state."""
    enabled: bool = False
    preview_role: Optional[str] = None
    original_role: str

    @field_validator("preview_role", "original_role", mode="before")
    @classmethod
    def role_keys(cls, value):
        return _role_key(value)

    @property
    def current_role(self) -> str:
        if self.enabled and self.preview_role:
            return self.preview_role
        return self.original_role
