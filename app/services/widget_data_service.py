# app/services/widget_data_service.py
"""
Widget data service.

Fetches data for widgets from their backend endpoints and maps the responses to
the canonical widget data shapes. Backends do not share one envelope, so every
adapter probes the candidate shapes in the same order:

    1. {"success": ..., "data": <payload>}
    2. the bare payload (object or array)
    3. {"data": <payload>} without a success flag
    4. fall back to empty defaults

Headline numbers (metric, chart) degrade to zero/empty and never raise.
List content (table, task/alert/activity) raises WidgetDataError so the caller
can offer a retry.
"""

import asyncio
from typing import Any, Callable, Dict, List, Optional

import httpx
from loguru import logger

from app.core.config import settings
from app.core.constants import LIST_WIDGET_TYPES, TREND_PERIOD_LABEL
from app.models.enums import WidgetDataStatus, WidgetType
from app.schemas.dashboard import DataSource, WidgetConfig
from app.schemas.widget import (
    ChartData,
    ListData,
    MetricData,
    MetricTrend,
    TableColumn,
    TableData,
    WidgetData,
    WidgetDataResult,
)

API_PREFIX = "/api/v1"


class WidgetDataError(Exception):
    """A widget backend call failed (transport error, non-2xx status or unreadable body)."""


# ------------------------------------------------------------
# Transport
# ------------------------------------------------------------
def build_widget_url(endpoint: str, base_url: Optional[str] = None) -> str:
    base_url = (base_url or settings.WIDGET_API_BASE_URL).rstrip("/")

    if endpoint.startswith("http"):
        return endpoint

    if endpoint.startswith(API_PREFIX):
        # Endpoint already carries the API prefix; join it to the bare host
        root = base_url[: -len(API_PREFIX)] if base_url.endswith(API_PREFIX) else base_url.split(API_PREFIX)[0]
        return f"{root or 'http://localhost:3000'}{endpoint}"

    return f"{base_url}{endpoint}"


def _error_message(response: httpx.Response) -> str:
    message = f"HTTP {response.status_code}: {response.reason_phrase}"
    try:
        body = response.json()
    except ValueError:
        return message

    if isinstance(body, dict):
        detail = body.get("message")
        if isinstance(detail, list):
            return ", ".join(str(part) for part in detail)
        if isinstance(detail, str):
            return detail
    return message


async def request_widget_json(
    client: httpx.AsyncClient,
    data_source: DataSource,
    headers: Optional[Dict[str, str]] = None,
) -> Any:
    url = build_widget_url(data_source.endpoint)
    try:
        if data_source.method == "POST":
            response = await client.post(url, json=data_source.params or {}, headers=headers)
        else:
            response = await client.get(url, params=data_source.params, headers=headers)
    except httpx.HTTPError as e:
        raise WidgetDataError(f"Request to {url} failed: {e}") from e

    if response.is_error:
        raise WidgetDataError(_error_message(response))

    if response.status_code == 204 or not response.content:
        return {}

    try:
        return response.json()
    except ValueError as e:
        raise WidgetDataError(f"Response from {url} is not JSON") from e


# ------------------------------------------------------------
# Envelope probing
# ------------------------------------------------------------
def extract_payload(response: Any, has_shape: Callable[[Any], bool]) -> Any:
    if isinstance(response, dict):
        if "success" in response and response.get("data") is not None:
            return response["data"]
        if has_shape(response):
            return response
        if has_shape(response.get("data")):
            return response["data"]
        return None

    if has_shape(response):
        return response
    return None


def _is_metric(payload: Any) -> bool:
    return isinstance(payload, dict) and ("value" in payload or "label" in payload)


def _is_chart(payload: Any) -> bool:
    return isinstance(payload, list) or (
        isinstance(payload, dict) and "labels" in payload and "data" in payload
    )


def _is_table(payload: Any) -> bool:
    return isinstance(payload, dict) and "columns" in payload and "rows" in payload


def _is_list(payload: Any) -> bool:
    return isinstance(payload, list)


# ------------------------------------------------------------
# Adapters
# ------------------------------------------------------------
def _to_number(value: Any) -> float:
    if isinstance(value, bool) or value is None or value == "":
        return 0
    if isinstance(value, (int, float)):
        return value
    try:
        return float(str(value).strip())
    except ValueError:
        return 0


def normalize_metric(response: Any) -> MetricData:
    kpi = extract_payload(response, _is_metric)
    if not isinstance(kpi, dict):
        kpi = response if isinstance(response, dict) else {}

    trend = None
    raw_trend = kpi.get("trend")
    if isinstance(raw_trend, dict) and "value" in raw_trend:
        trend = MetricTrend(
            value=abs(_to_number(raw_trend.get("value"))),
            is_positive=bool(raw_trend.get("isPositive", _to_number(raw_trend.get("value")) >= 0)),
            period=raw_trend.get("period") or TREND_PERIOD_LABEL,
        )
    elif raw_trend is not None and raw_trend != "":
        change = _to_number(raw_trend)
        trend = MetricTrend(value=abs(change), is_positive=change >= 0, period=TREND_PERIOD_LABEL)

    unit = kpi.get("unit") or (settings.DEFAULT_CURRENCY_UNIT if kpi.get("format") == "currency" else "")
    return MetricData(
        value=_to_number(kpi.get("value")),
        unit=str(unit),
        label=str(kpi.get("label") or ""),
        trend=trend,
    )


def normalize_chart(response: Any) -> ChartData:
    chart = extract_payload(response, _is_chart)
    if chart is None and isinstance(response, dict) and isinstance(response.get("data"), dict):
        chart = response["data"]

    if isinstance(chart, dict) and isinstance(chart.get("labels"), list) and isinstance(chart.get("data"), list):
        values = chart["data"]
        labels = [str(label) for label in chart["labels"]]
        return ChartData(
            labels=labels,
            data=[
                {"label": label, "value": (values[i] if i < len(values) else 0) or 0}
                for i, label in enumerate(labels)
            ],
        )

    if isinstance(chart, list):
        return ChartData(data=[point if isinstance(point, dict) else {"value": point} for point in chart])

    if isinstance(chart, dict) and chart:
        return ChartData(data=[chart])

    return ChartData(data=[])


def _column(column: Any) -> TableColumn:
    if isinstance(column, dict):
        key = str(column.get("key") or column.get("field") or column.get("label") or "")
        return TableColumn(key=key, label=str(column.get("label") or key))
    return TableColumn(key=str(column), label=str(column))


def normalize_table(response: Any) -> TableData:
    table = extract_payload(response, _is_table)
    if not _is_table(table):
        return TableData()

    columns = [_column(c) for c in table.get("columns") or []]
    rows = []
    for row in table.get("rows") or []:
        if not isinstance(row, dict):
            continue
        rows.append({c.key: ("" if row.get(c.key) is None else row.get(c.key)) for c in columns})
    return TableData(columns=columns, rows=rows)


def normalize_list(response: Any, widget_type: Optional[WidgetType] = None, endpoint: str = "") -> ListData:
    records = extract_payload(response, _is_list)
    if not isinstance(records, list):
        return ListData()

    if widget_type in (WidgetType.TaskList, WidgetType.ApprovalQueue):
        return ListData(tasks=records, items=records)
    if widget_type == WidgetType.Alert:
        return ListData(alerts=records)
    if widget_type == WidgetType.ActivityTimeline:
        return ListData(activities=records)

    # No widget type: fall back to the endpoint name
    endpoint = endpoint.lower()
    if "task" in endpoint or "approval" in endpoint:
        return ListData(tasks=records, items=records)
    if "alert" in endpoint:
        return ListData(alerts=records)
    if "activity" in endpoint or "timeline" in endpoint:
        return ListData(activities=records)
    return ListData(tasks=records)


# ------------------------------------------------------------
# Fetchers
# ------------------------------------------------------------
async def fetch_metric_data(client: httpx.AsyncClient, data_source: DataSource, headers=None) -> MetricData:
    """Never raises: failures degrade to a zero metric."""
    try:
        response = await request_widget_json(client, data_source, headers)
        return normalize_metric(response)
    except Exception as e:
        logger.error(f"[widget-data] KPI fetch failed for {data_source.endpoint}: {e}")
        return MetricData(value=0, unit="", label="")


async def fetch_chart_data(client: httpx.AsyncClient, data_source: DataSource, headers=None) -> ChartData:
    """Never raises: failures degrade to an empty chart."""
    try:
        response = await request_widget_json(client, data_source, headers)
        return normalize_chart(response)
    except Exception as e:
        logger.error(f"[widget-data] Chart fetch failed for {data_source.endpoint}: {e}")
        return ChartData(data=[])


async def fetch_table_data(client: httpx.AsyncClient, data_source: DataSource, headers=None) -> TableData:
    response = await request_widget_json(client, data_source, headers)
    return normalize_table(response)


async def fetch_list_data(
    client: httpx.AsyncClient,
    data_source: DataSource,
    widget_type: Optional[WidgetType] = None,
    headers=None,
) -> ListData:
    response = await request_widget_json(client, data_source, headers)
    return normalize_list(response, widget_type, data_source.endpoint)


async def fetch_widget_data(
    client: httpx.AsyncClient,
    widget: WidgetConfig,
    headers: Optional[Dict[str, str]] = None,
) -> Optional[WidgetData]:
    if not widget.data_source or not widget.data_source.endpoint:
        return None

    if widget.type == WidgetType.Metric:
        return await fetch_metric_data(client, widget.data_source, headers)
    if widget.type == WidgetType.Chart:
        return await fetch_chart_data(client, widget.data_source, headers)
    if widget.type == WidgetType.Table:
        return await fetch_table_data(client, widget.data_source, headers)
    if widget.type in LIST_WIDGET_TYPES:
        return await fetch_list_data(client, widget.data_source, widget.type, headers)

    logger.warning(f"[widget-data] No data adapter for widget type '{widget.type.value}' ({widget.id})")
    return None


async def _fetch_result(
    client: httpx.AsyncClient,
    widget: WidgetConfig,
    generation: int,
    headers: Optional[Dict[str, str]],
) -> WidgetDataResult:
    try:
        data = await fetch_widget_data(client, widget, headers)
    except Exception as e:
        logger.error(f"[widget-data] Widget '{widget.id}' ({widget.type.value}) failed: {e}")
        return WidgetDataResult(
            widget_id=widget.id,
            generation=generation,
            status=WidgetDataStatus.Error,
            error=str(e) or e.__class__.__name__,
        )

    status = WidgetDataStatus.Empty if data is None else WidgetDataStatus.Ok
    return WidgetDataResult(widget_id=widget.id, generation=generation, status=status, data=data)


async def fetch_all_widget_data(
    client: httpx.AsyncClient,
    widgets: List[WidgetConfig],
    generation: int,
    headers: Optional[Dict[str, str]] = None,
) -> List[WidgetDataResult]:
    """One concurrent call per widget; a failing widget never affects its siblings."""
    return list(await asyncio.gather(*(
        _fetch_result(client, widget, generation, headers) for widget in widgets
    )))
