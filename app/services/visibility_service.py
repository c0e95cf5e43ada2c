# app/services/visibility_service.py

from typing import List, Mapping, Optional, Tuple

from app.core.permissions import has_permission
from app.schemas.dashboard import MenuItem, UserPermissionOverrides, WidgetConfig


def resolve_visibility(item_id: str, default: bool, overrides: Optional[Mapping[str, bool]]) -> bool:
    if overrides and item_id in overrides:
        return bool(overrides[item_id])
    return default


def _override_menu(items: List[MenuItem], menu_overrides: Mapping[str, bool]) -> List[MenuItem]:
    result = []
    for item in items:
        update = {"visible": resolve_visibility(item.id, item.visible, menu_overrides)}
        if item.children:
            update["children"] = _override_menu(item.children, menu_overrides)
        result.append(item.model_copy(update=update))
    return result


def apply_visibility_overrides(
    menu_items: List[MenuItem],
    widgets: List[WidgetConfig],
    overrides: Optional[UserPermissionOverrides],
) -> Tuple[List[MenuItem], List[WidgetConfig]]:
    """
    Layer a user's menu/widget visibility exceptions over the role configuration.

    Menu overrides replace the ``visible`` flag anywhere in the tree; a widget override
    of ``False`` removes the widget. Unknown ids in the overrides are ignored.
    Permission checks are NOT applied here (see filter_menu / filter_widgets).
    """
    menu_overrides = overrides.menu_overrides if overrides else None
    widget_overrides = overrides.widget_overrides if overrides else None

    menu = _override_menu(menu_items, menu_overrides or {})
    kept = [
        w.model_copy(deep=True)
        for w in widgets
        if resolve_visibility(w.id, True, widget_overrides)
    ]
    return menu, kept


def filter_menu(
    items: List[MenuItem],
    permissions: Mapping[str, bool],
    menu_overrides: Optional[Mapping[str, bool]] = None,
) -> List[MenuItem]:
    """
    Prune the menu tree depth-first, keeping sibling order.

    A node is dropped with its whole subtree when it is not visible, or when it
    requires a permission that is not granted. A branch whose children are all
    dropped loses its ``children`` field but stays a branch.
    """
    filtered = []
    for item in items:
        visible = resolve_visibility(item.id, item.visible, menu_overrides)
        if not visible:
            continue
        if item.permission and not has_permission(permissions, item.permission):
            continue

        children = None
        if item.children:
            children = filter_menu(item.children, permissions, menu_overrides) or None

        filtered.append(item.model_copy(update={"visible": visible, "children": children}))
    return filtered


def filter_widgets(
    widgets: List[WidgetConfig],
    permissions: Mapping[str, bool],
    widget_overrides: Optional[Mapping[str, bool]] = None,
) -> List[WidgetConfig]:
    """
    Keep widgets the user may see, in order.

    An override of ``False`` hides a widget regardless of permissions. An override of
    ``True`` cannot bring back a widget whose ``permissions.view`` is denied.
    Per-action codes are left to the widget's own controls.
    """
    visible = []
    for widget in widgets:
        if widget_overrides and widget_overrides.get(widget.id) is False:
            continue

        view_code = widget.permissions.view if widget.permissions else None
        if view_code and not has_permission(permissions, view_code):
            continue

        visible.append(widget.model_copy(deep=True))
    return visible
