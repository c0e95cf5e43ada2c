# app/services/permission_service.py

from typing import Dict, Mapping, Optional

from app.core.permissions import has_permission
from app.schemas.dashboard import (
    ComputedPermissions,
    DashboardConfig,
    UserPermissionOverrides,
    WidgetConfig,
)
from app.services.visibility_service import (
    apply_visibility_overrides,
    filter_menu,
    filter_widgets,
)


def merge_permissions(
    role_permissions: Mapping[str, bool],
    override_permissions: Optional[Mapping[str, bool]] = None,
) -> Dict[str, bool]:
    """Role permissions with the user's overrides written on top (last write wins)."""
    permissions = dict(role_permissions)
    for code, allowed in (override_permissions or {}).items():
        permissions[code] = bool(allowed)
    return permissions


def resolve_permissions(
    role_config: DashboardConfig,
    overrides: Optional[UserPermissionOverrides] = None,
) -> Dict[str, bool]:
    return merge_permissions(
        role_config.permissions,
        overrides.permissions if overrides else None,
    )


def compute_permissions(
    role_config: DashboardConfig,
    overrides: Optional[UserPermissionOverrides] = None,
) -> ComputedPermissions:
    """
    Final permissions, menu and widgets for one render (role + user overrides).
    Inputs are never mutated; the result shares no objects with them.
    """
    permissions = resolve_permissions(role_config, overrides)
    menu_items, widgets = apply_visibility_overrides(
        role_config.menu_items, role_config.widgets, overrides
    )

    return ComputedPermissions(
        permissions=permissions,
        menu_items=filter_menu(menu_items, permissions),
        widgets=filter_widgets(widgets, permissions),
    )


# ------------------------------------------------------------
# Action-level checks (controls inside a visible widget)
# ------------------------------------------------------------
def widget_action_permissions(widget: WidgetConfig, permissions: Mapping[str, bool]) -> Dict[str, bool]:
    actions = (widget.permissions.actions if widget.permissions else None) or {}
    return {action: has_permission(permissions, code) for action, code in actions.items()}


def can_perform_action(widget: WidgetConfig, action: str, permissions: Mapping[str, bool]) -> bool:
    """Actions without a configured permission code are not gated."""
    actions = (widget.permissions.actions if widget.permissions else None) or {}
    code = actions.get(str(getattr(action, "value", action)))
    if not code:
        return True
    return has_permission(permissions, code)
