# app/services/config_editor.py
"""
Dashboard configuration editor.

Every operation is pure: it takes a DashboardConfig and returns a new one that
shares no objects with the input, so callers can keep history for undo/redo or
apply edits optimistically. Nothing here persists; saving is an explicit step
(see dashboard_service.put_config). "Currently selected widget" is caller state.
"""

import uuid
from typing import Any, List, Mapping, Optional, Union

from loguru import logger
from pydantic import BaseModel, ValidationError
from pydantic.alias_generators import to_camel

from app.core.constants import (
    CATALOG_WIDGET_TYPES,
    DEFAULT_WIDGET_SIZE,
    GRID_COLUMNS,
    GRID_SCALE,
    GRID_UNITS_MAX,
    GRID_UNITS_MIN,
    WIDGET_SIZES,
)
from app.models.enums import CatalogCategory, ChartType, MoveDirection, WidgetType
from app.schemas.catalog import CatalogItem
from app.schemas.dashboard import (
    ChartConfig,
    DashboardConfig,
    DataSource,
    MenuItem,
    WidgetConfig,
)
from app.services.menu_service import menu_item_ids


# ------------------------------------------------------------
# Grid sizing
# ------------------------------------------------------------
def grid_column_span(value: Optional[int]) -> int:
    """Legacy 4-unit width -> 12-column span (1->3, 2->6, 3->9, 4->12)."""
    return min(GRID_COLUMNS, max(1, (value or 1) * GRID_SCALE))


def grid_row_span(value: Optional[int]) -> int:
    return value or 1


def normalize_widget_size(value: Any, current: int = DEFAULT_WIDGET_SIZE) -> int:
    """
    Size policy for editing surfaces: clamp into [1, 4], then round up to the
    next allowed size (quarter, half, full). Non-numeric input keeps ``current``.
    """
    try:
        size = int(float(value))
    except (TypeError, ValueError):
        logger.warning(f"Ignoring non-numeric widget size {value!r}; keeping {current}")
        return current

    size = min(GRID_UNITS_MAX, max(GRID_UNITS_MIN, size))
    return next(allowed for allowed in WIDGET_SIZES if allowed >= size)


# ------------------------------------------------------------
# Helpers
# ------------------------------------------------------------
def _copy_widgets(config: DashboardConfig) -> List[WidgetConfig]:
    return [w.model_copy(deep=True) for w in config.widgets]


def _with_widgets(config: DashboardConfig, widgets: List[WidgetConfig]) -> DashboardConfig:
    return config.model_copy(deep=True, update={"widgets": widgets})


def _index_of(config: DashboardConfig, widget_id: str) -> Optional[int]:
    for index, widget in enumerate(config.widgets):
        if widget.id == widget_id:
            return index
    return None


def generate_widget_id(prefix: str, existing_ids) -> str:
    prefix = (prefix or "widget").strip().lower().replace(" ", "-")
    existing = set(existing_ids)
    while True:
        candidate = f"{prefix}-{uuid.uuid4().hex[:12]}"
        if candidate not in existing:
            return candidate


def resolve_widget_type(widget_type: Union[str, CatalogCategory, WidgetType]) -> WidgetType:
    """Catalog category (kpi/chart/table/task/alert) or widget type -> widget type."""
    value = getattr(widget_type, "value", widget_type)
    try:
        return CATALOG_WIDGET_TYPES[CatalogCategory(value)]
    except ValueError:
        pass
    try:
        return WidgetType(value)
    except ValueError:
        logger.warning(f"Unknown widget type '{value}', defaulting to metric")
        return WidgetType.Metric


def _first_chart_variant(chart_types: Optional[List[str]]) -> Optional[ChartType]:
    # First advertised variant the chart widget can draw; unknown variants are skipped, not taken as-is
    for variant in chart_types or []:
        try:
            return ChartType(variant)
        except ValueError:
            logger.warning(f"Skipping unsupported chart variant '{variant}'")
    return None


def _camel_changes(partial: Union[Mapping[str, Any], BaseModel]) -> dict:
    if isinstance(partial, BaseModel):
        partial = partial.model_dump(by_alias=True, exclude_unset=True)

    changes = {}
    for key, value in partial.items():
        alias = to_camel(key) if key in WidgetConfig.model_fields else key
        changes[alias] = value

    # Widget ids are immutable once created
    changes.pop("id", None)
    return changes


# ------------------------------------------------------------
# Editor operations
# ------------------------------------------------------------
def add_widget_from_catalog(
    config: DashboardConfig,
    item: CatalogItem,
    widget_type: Union[str, CatalogCategory, WidgetType],
) -> DashboardConfig:
    resolved_type = resolve_widget_type(widget_type)

    widget = WidgetConfig(
        id=generate_widget_id(item.code, config.widget_ids()),
        type=resolved_type,
        title=item.title,
        description=item.description,
        grid_column=DEFAULT_WIDGET_SIZE,
        data_source=DataSource(endpoint=item.api, method="GET"),
    )

    if resolved_type == WidgetType.Chart:
        variant = _first_chart_variant(item.chart_types)
        if variant:
            widget.chart_config = ChartConfig(type=variant)

    logger.info(f"Adding widget '{widget.id}' ({resolved_type.value}) to '{config.role}'")
    return _with_widgets(config, _copy_widgets(config) + [widget])


def update_widget(
    config: DashboardConfig,
    widget_id: str,
    partial: Union[Mapping[str, Any], BaseModel],
) -> DashboardConfig:
    """Shallow-merge ``partial`` into a widget. Unknown ids and invalid changes are no-ops."""
    index = _index_of(config, widget_id)
    if index is None:
        logger.debug(f"update_widget: '{widget_id}' not in '{config.role}', ignoring")
        return config.model_copy(deep=True)

    current = config.widgets[index]
    changes = _camel_changes(partial)
    if "gridColumn" in changes:
        changes["gridColumn"] = normalize_widget_size(changes["gridColumn"], current.grid_column)

    merged = {**current.model_dump(by_alias=True, exclude_none=True), **changes}
    try:
        updated = WidgetConfig.model_validate(merged)
    except ValidationError as e:
        logger.warning(f"Rejected update for widget '{widget_id}': {e.errors()}")
        return config.model_copy(deep=True)

    widgets = _copy_widgets(config)
    widgets[index] = updated
    return _with_widgets(config, widgets)


def set_widget_size(config: DashboardConfig, widget_id: str, size: Any) -> DashboardConfig:
    return update_widget(config, widget_id, {"gridColumn": size})


def remove_widget(config: DashboardConfig, widget_id: str) -> DashboardConfig:
    return _with_widgets(config, [w.model_copy(deep=True) for w in config.widgets if w.id != widget_id])


def reorder_widget(
    config: DashboardConfig,
    widget_id: str,
    direction: Union[str, MoveDirection],
) -> DashboardConfig:
    """Swap a widget with its neighbour. No-op at either end or for unknown ids."""
    index = _index_of(config, widget_id)
    if index is None:
        return config.model_copy(deep=True)

    new_index = index - 1 if MoveDirection(direction) == MoveDirection.Up else index + 1
    if new_index < 0 or new_index >= len(config.widgets):
        return config.model_copy(deep=True)

    widgets = _copy_widgets(config)
    widgets[index], widgets[new_index] = widgets[new_index], widgets[index]
    return _with_widgets(config, widgets)


def duplicate_widget(config: DashboardConfig, widget_id: str) -> DashboardConfig:
    """Insert a copy (fresh id) right after the original."""
    index = _index_of(config, widget_id)
    if index is None:
        return config.model_copy(deep=True)

    widgets = _copy_widgets(config)
    clone = widgets[index].model_copy(deep=True)
    clone.id = generate_widget_id(widget_id, config.widget_ids())
    widgets.insert(index + 1, clone)
    return _with_widgets(config, widgets)


# ------------------------------------------------------------
# Lenient normalization (stored / incoming documents)
# ------------------------------------------------------------
def _normalize_widgets(raw_widgets: Any) -> List[WidgetConfig]:
    if not isinstance(raw_widgets, list):
        if raw_widgets is not None:
            logger.warning(f"Widgets field is {type(raw_widgets).__name__}, not a list; resetting")
        return []

    widgets, seen = [], set()
    for entry in raw_widgets:
        if not isinstance(entry, Mapping):
            logger.warning(f"Dropping malformed widget entry: {entry!r}")
            continue
        try:
            widget = WidgetConfig.model_validate(entry)
        except ValidationError as e:
            logger.warning(f"Dropping invalid widget {entry.get('id')!r}: {e.errors()}")
            continue
        if widget.id in seen:
            logger.warning(f"Dropping duplicate widget id '{widget.id}'")
            continue
        seen.add(widget.id)
        widgets.append(widget)
    return widgets


def _normalize_menu(raw_menu: Any) -> List[MenuItem]:
    if not isinstance(raw_menu, list):
        return []

    menu, seen = [], set()
    for entry in raw_menu:
        if not isinstance(entry, Mapping):
            logger.warning(f"Dropping malformed menu entry: {entry!r}")
            continue
        try:
            item = MenuItem.model_validate(entry)
        except ValidationError as e:
            logger.warning(f"Dropping invalid menu entry {entry.get('id')!r}: {e.errors()}")
            continue

        ids = menu_item_ids([item])
        if len(set(ids)) != len(ids) or seen.intersection(ids):
            logger.warning(f"Dropping menu entry '{item.id}' with duplicate ids")
            continue
        seen.update(ids)
        menu.append(item)
    return menu


def normalize_config(raw: Union[Mapping[str, Any], DashboardConfig]) -> DashboardConfig:
    """
    Keep every well-formed part of a configuration document.

    Malformed widgets/menu entries are dropped individually rather than rejecting
    the whole document; non-boolean permission values are discarded.
    """
    if isinstance(raw, DashboardConfig):
        raw = raw.model_dump(by_alias=True, exclude_none=True)
    if not isinstance(raw, Mapping):
        raise ValueError("Dashboard configuration must be an object")

    raw_permissions = raw.get("permissions")
    permissions = {}
    if isinstance(raw_permissions, Mapping):
        for code, allowed in raw_permissions.items():
            if isinstance(allowed, bool):
                permissions[str(code)] = allowed
            else:
                logger.warning(f"Dropping non-boolean permission '{code}': {allowed!r}")

    return DashboardConfig(
        role=raw.get("role"),
        widgets=_normalize_widgets(raw.get("widgets")),
        menu_items=_normalize_menu(raw.get("menuItems", raw.get("menu_items"))),
        permissions=permissions,
    )
