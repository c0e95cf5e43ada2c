import pytest

from app.core.seeding_logic import DEFAULT_MENU_ITEMS
from app.models.enums import MenuItemKind
from app.schemas.dashboard import DashboardConfig, MenuItem
from app.services.menu_service import (
    emptied_branches,
    ensure_unique_menu_ids,
    find_menu_item,
    menu_item_ids,
)
from app.services.visibility_service import filter_menu


@pytest.fixture
def menu():
    return [MenuItem.model_validate(item) for item in DEFAULT_MENU_ITEMS]


def test_ids_are_depth_first(menu):
    ids = menu_item_ids(menu)
    assert ids[:4] == ["dashboard", "transaction", "barcode", "finance"]
    assert ids.index("invoice") == ids.index("finance") + 1


def test_find_nested_item(menu):
    assert find_menu_item(menu, "payment").path == "/finance/payment"
    assert find_menu_item(menu, "ghost") is None


def test_kind_is_derived_from_children(menu):
    assert find_menu_item(menu, "finance").kind == MenuItemKind.Branch
    assert find_menu_item(menu, "dashboard").kind == MenuItemKind.Leaf


def test_icon_key_alias():
    item = MenuItem.model_validate({"id": "x", "label": "X", "iconKey": "truck"})
    assert item.icon == "truck"


def test_duplicate_menu_ids_rejected():
    items = [
        MenuItem.model_validate({"id": "a", "label": "A", "children": [{"id": "a", "label": "Nested"}]}),
    ]
    with pytest.raises(ValueError):
        ensure_unique_menu_ids(items)

    with pytest.raises(ValueError):
        DashboardConfig(role="driver", menu_items=items)


def test_emptied_branches():
    items = [
        MenuItem.model_validate({"id": "reports", "label": "Reports", "children": [
            {"id": "gst", "label": "GST", "permission": "REPORT_GST"},
        ]}),
        MenuItem.model_validate({"id": "home", "label": "Home"}),
    ]

    filtered = filter_menu(items, {})

    assert emptied_branches(filtered) == ["reports"]
    assert emptied_branches(items) == []
