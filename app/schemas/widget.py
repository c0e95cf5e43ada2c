from typing import Any, Dict, List, Optional, Union

from pydantic import Field

from app.models.enums import WidgetDataStatus
from app.schemas.dashboard import CamelModel


# ---------------------------------------------------------
# CANONICAL WIDGET DATA SHAPES
# ---------------------------------------------------------
class MetricTrend(CamelModel):
    value: float
    is_positive: bool
    period: Optional[str] = None


class MetricData(CamelModel):
    value: float = 0
    unit: str = ""
    label: str = ""
    trend: Optional[MetricTrend] = None


class ChartData(CamelModel):
    data: List[Dict[str, Any]] = Field(default_factory=list)
    labels: Optional[List[str]] = None


class TableColumn(CamelModel):
    key: str
    label: str


class TableData(CamelModel):
    columns: List[TableColumn] = Field(default_factory=list)
    rows: List[Dict[str, Any]] = Field(default_factory=list)


class ListData(CamelModel):
    """Task-list, approval-queue, alert and activity-timeline payloads."""
    tasks: Optional[List[Any]] = None
    alerts: Optional[List[Any]] = None
    activities: Optional[List[Any]] = None
    items: Optional[List[Any]] = None


WidgetData = Union[MetricData, ChartData, TableData, ListData]


# ---------------------------------------------------------
# FETCH RESULT (tagged with the configuration generation)
# ---------------------------------------------------------
class WidgetDataResult(CamelModel):
    widget_id: str
    generation: int
    status: WidgetDataStatus
    data: Optional[WidgetData] = None
    error: Optional[str] = None
