# app/core/constants.py

from app.models.enums import CatalogCategory, WidgetType

# ==========================================================
# GRID LAYOUT
# ==========================================================
# Widgets store a legacy 4-unit width; the UI renders a 12-column grid.
GRID_UNITS_MIN = 1
GRID_UNITS_MAX = 4
GRID_COLUMNS = 12
GRID_SCALE = GRID_COLUMNS // GRID_UNITS_MAX  # 1 -> 3, 2 -> 6, 3 -> 9, 4 -> 12

# Sizes an editing surface may set: quarter, half, full
WIDGET_SIZES = (1, 2, 4)
DEFAULT_WIDGET_SIZE = 2

# ==========================================================
# CATALOG
# ==========================================================
CATALOG_WIDGET_TYPES = {
    CatalogCategory.Kpi: WidgetType.Metric,
    CatalogCategory.Chart: WidgetType.Chart,
    CatalogCategory.Table: WidgetType.Table,
    CatalogCategory.Task: WidgetType.TaskList,
    CatalogCategory.Alert: WidgetType.Alert,
}

# Catalog response groups, keyed by item category
CATALOG_GROUPS = {
    CatalogCategory.Kpi: "kpis",
    CatalogCategory.Chart: "charts",
    CatalogCategory.Table: "tables",
    CatalogCategory.Task: "tasks",
    CatalogCategory.Alert: "alerts",
}

# ==========================================================
# WIDGET DATA
# ==========================================================
LIST_WIDGET_TYPES = (
    WidgetType.TaskList,
    WidgetType.ApprovalQueue,
    WidgetType.Alert,
    WidgetType.ActivityTimeline,
)

TREND_PERIOD_LABEL = "vs previous period"
