import pytest

from app.core.config import settings
from app.core.seeding_logic import default_dashboard_config
from app.models.enums import ChartType, MoveDirection, WidgetType
from app.schemas.catalog import CatalogItem
from app.schemas.dashboard import DashboardConfig, MetricProps
from app.services.config_editor import (
    add_widget_from_catalog,
    duplicate_widget,
    grid_column_span,
    grid_row_span,
    normalize_config,
    normalize_widget_size,
    remove_widget,
    reorder_widget,
    resolve_widget_type,
    set_widget_size,
    update_widget,
)

REVENUE = CatalogItem(code="KPI_REVENUE", title="Revenue", api="/dashboard/kpi/revenue", format="currency")
TREND = CatalogItem(code="CHART_REVENUE_TREND", title="Revenue Trend", api="/dashboard/charts/revenue-trend",
                    chart_types=["area", "bar", "line"])


@pytest.fixture
def config():
    return DashboardConfig.model_validate({
        "role": "manager",
        "widgets": [
            {"id": "w1", "type": "metric", "title": "One", "gridColumn": 1},
            {"id": "w2", "type": "chart", "title": "Two", "gridColumn": 2},
            {"id": "w3", "type": "table", "title": "Three", "gridColumn": 4},
        ],
        "permissions": {"INVOICE_VIEW": True},
    })


def _ids(config):
    return [w.id for w in config.widgets]


def test_add_widget_defaults(config):
    updated = add_widget_from_catalog(config, REVENUE, "kpi")

    widget = updated.widgets[-1]
    assert widget.type == WidgetType.Metric
    assert widget.title == "Revenue"
    assert widget.grid_column == 2
    assert widget.data_source.endpoint == "/dashboard/kpi/revenue"
    assert widget.data_source.method == "GET"
    assert widget.chart_config is None
    assert widget.id.startswith("kpi_revenue-")
    # Input document untouched
    assert len(config.widgets) == 3


def test_add_chart_picks_first_supported_variant(config):
    widget = add_widget_from_catalog(config, TREND, "chart").widgets[-1]
    assert widget.chart_config.type == ChartType.Bar


def test_thousand_adds_never_collide(config):
    current = config
    for _ in range(1000):
        current = add_widget_from_catalog(current, REVENUE, WidgetType.Metric)

    ids = _ids(current)
    assert len(ids) == 1003
    assert len(set(ids)) == len(ids)


def test_remove_then_add_does_not_reuse_id(config):
    added = add_widget_from_catalog(config, REVENUE, "kpi")
    removed_id = added.widgets[-1].id

    again = add_widget_from_catalog(remove_widget(added, removed_id), REVENUE, "kpi")

    assert removed_id not in _ids(again)


def test_remove_unknown_id_is_noop(config):
    assert _ids(remove_widget(config, "ghost")) == ["w1", "w2", "w3"]


@pytest.mark.parametrize("widget_id, direction, expected", [
    ("w1", MoveDirection.Up, ["w1", "w2", "w3"]),
    ("w3", MoveDirection.Down, ["w1", "w2", "w3"]),
    ("w1", "down", ["w2", "w1", "w3"]),
    ("w3", "up", ["w1", "w3", "w2"]),
    ("ghost", "up", ["w1", "w2", "w3"]),
])
def test_reorder(config, widget_id, direction, expected):
    assert _ids(reorder_widget(config, widget_id, direction)) == expected


def test_reorder_returns_independent_copy(config):
    moved = reorder_widget(config, "w1", "down")
    moved.widgets[0].title = "Changed"
    assert config.widgets[1].title == "Two"


@pytest.mark.parametrize("value, expected", [
    (1, 1), (2, 2), (3, 4), (4, 4),
    (0, 1), (-5, 1), (7, 4),
    ("2", 2), (2.5, 2),
])
def test_size_policy_clamps_then_rounds_up(value, expected):
    assert normalize_widget_size(value) == expected


def test_non_numeric_size_keeps_current():
    assert normalize_widget_size("wide", current=4) == 4
    assert normalize_widget_size(None, current=1) == 1


@pytest.mark.parametrize("value, span", [(1, 3), (2, 6), (3, 9), (4, 12), (None, 3)])
def test_grid_column_span(value, span):
    assert grid_column_span(value) == span


def test_grid_row_span():
    assert grid_row_span(None) == 1
    assert grid_row_span(2) == 2


def test_set_widget_size(config):
    updated = set_widget_size(config, "w1", 3)
    assert updated.widgets[0].grid_column == 4


def test_update_widget_merges_and_keeps_id(config):
    updated = update_widget(config, "w1", {"title": "Renamed", "id": "hijack", "props": {"unit": "kg"}})

    widget = updated.widgets[0]
    assert widget.id == "w1"
    assert widget.title == "Renamed"
    assert isinstance(widget.props, MetricProps)
    assert widget.props.unit == "kg"
    assert config.widgets[0].title == "One"


def test_update_widget_accepts_snake_case(config):
    updated = update_widget(config, "w2", {"chart_config": {"type": "bar"}})
    assert updated.widgets[1].chart_config.type == ChartType.Bar


def test_update_unknown_widget_is_noop(config):
    updated = update_widget(config, "ghost", {"title": "x"})
    assert updated.model_dump() == config.model_dump()
    assert updated is not config


def test_invalid_update_is_rejected_without_raising(config):
    updated = update_widget(config, "w1", {"type": "hologram"})
    assert updated.widgets[0].type == WidgetType.Metric


def test_duplicate_widget_inserts_after_original(config):
    updated = duplicate_widget(config, "w2")

    ids = _ids(updated)
    assert len(ids) == 4
    assert ids[:2] == ["w1", "w2"]
    assert ids[2].startswith("w2-")
    assert updated.widgets[2].title == "Two"


def test_resolve_widget_type():
    assert resolve_widget_type("task") == WidgetType.TaskList
    assert resolve_widget_type("alert") == WidgetType.Alert
    assert resolve_widget_type("approval-queue") == WidgetType.ApprovalQueue
    assert resolve_widget_type("unknown") == WidgetType.Metric


def test_normalize_drops_malformed_entries():
    raw = {
        "role": "supervisor",
        "widgets": [
            {"id": "ok", "type": "metric"},
            "garbage",
            {"id": "bad-type", "type": "hologram"},
            {"id": "ok", "type": "chart"},
            {"type": "metric"},
        ],
        "menuItems": [
            {"id": "dashboard", "label": "Dashboard"},
            {"id": "dashboard", "label": "Again"},
            42,
        ],
        "permissions": {"A": True, "B": "yes", "C": False},
    }

    config = normalize_config(raw)

    assert _ids(config) == ["ok"]
    assert [m.id for m in config.menu_items] == ["dashboard"]
    assert config.permissions == {"A": True, "C": False}


def test_normalize_resets_non_list_widgets():
    config = normalize_config({"role": "driver", "widgets": {"id": "x"}})
    assert config.widgets == []


def test_normalize_rejects_non_object():
    with pytest.raises(ValueError):
        normalize_config(["not", "a", "document"])


def test_default_superadmin_config_round_trips():
    config = default_dashboard_config("superadmin")
    assert normalize_config(config).model_dump() == config.model_dump()


@pytest.mark.parametrize("bad_widget", [
    {"id": "bad", "type": "metric", "gridColumn": [2]},
    {"id": "bad", "type": "metric", "gridColumn": {}},
    {"id": "bad", "type": "metric", "gridColumn": float("inf")},
    {"id": "bad", "type": ["metric"], "props": {"unit": "kg"}},
    {"id": "bad", "type": {"kind": "metric"}, "props": {}},
])
def test_normalize_drops_non_scalar_fields(bad_widget):
    config = normalize_config({"role": "manager", "widgets": [{"id": "ok", "type": "metric"}, bad_widget]})
    assert _ids(config) == ["ok"]


@pytest.mark.parametrize("changes", [{"type": {"x": 1}}, {"gridColumn": [4]}, {"type": ["chart"], "props": {}}])
def test_update_with_non_scalar_values_is_noop(config, changes):
    updated = update_widget(config, "w1", changes)
    assert updated.model_dump() == config.model_dump()


def test_superadmin_default_uses_configured_wildcard(monkeypatch):
    monkeypatch.setattr(settings, "PERMISSION_WILDCARD", "ALL")
    assert default_dashboard_config("superadmin").permissions == {"ALL": True}
