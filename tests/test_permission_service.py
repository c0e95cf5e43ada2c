import pytest

from app.core.permissions import has_permission, permission_variants
from app.core.seeding_logic import default_dashboard_config
from app.schemas.dashboard import DashboardConfig, UserPermissionOverrides
from app.services.permission_service import (
    can_perform_action,
    compute_permissions,
    merge_permissions,
    resolve_permissions,
    widget_action_permissions,
)


def _approval_config(**permissions):
    return DashboardConfig.model_validate({
        "role": "manager",
        "permissions": permissions,
        "widgets": [
            {"id": "approval-queue", "type": "approval-queue", "title": "Pending Approvals",
             "dataSource": {"endpoint": "/api/v1/approvals/pending"},
             "permissions": {"view": "APPROVAL_VIEW", "actions": {"approve": "APPROVAL_APPROVE"}}},
        ],
    })


def test_override_keys_win_and_other_keys_survive():
    role = {"INVOICE_VIEW": True, "INVOICE_EDIT": False, "REPORT_VIEW": True}
    override = {"INVOICE_EDIT": True, "REPORT_VIEW": False, "NEW_CODE": True}

    merged = merge_permissions(role, override)

    for code, allowed in override.items():
        assert merged[code] is allowed
    assert merged["INVOICE_VIEW"] is True
    # Inputs untouched
    assert role["INVOICE_EDIT"] is False


def test_no_overrides_equals_empty_overrides():
    config = _approval_config(APPROVAL_VIEW=True, APPROVAL_APPROVE=True)
    empty = UserPermissionOverrides(user_id="7", permissions={})

    assert resolve_permissions(config, None) == resolve_permissions(config, empty)


def test_approve_override_hides_action_but_keeps_widget():
    config = _approval_config(APPROVAL_VIEW=True, APPROVAL_APPROVE=True)
    overrides = UserPermissionOverrides(user_id=42, permissions={"APPROVAL_APPROVE": False})

    computed = compute_permissions(config, overrides)

    assert computed.permissions["APPROVAL_APPROVE"] is False
    assert [w.id for w in computed.widgets] == ["approval-queue"]
    widget = computed.widgets[0]
    assert can_perform_action(widget, "approve", computed.permissions) is False
    assert widget_action_permissions(widget, computed.permissions) == {"approve": False}


def test_action_without_code_is_not_gated():
    config = _approval_config(APPROVAL_VIEW=True)
    widget = config.widgets[0]
    assert can_perform_action(widget, "reject", {}) is True


def test_compute_does_not_mutate_role_config():
    config = default_dashboard_config("superadmin")
    before = config.model_dump()

    compute_permissions(config, UserPermissionOverrides(
        user_id="1", menuOverrides={"finance": False}, widgetOverrides={"approval-queue": False}
    ))

    assert config.model_dump() == before


@pytest.mark.parametrize("permissions, code, expected", [
    ({"*": True}, "ANYTHING", True),
    ({"*": True, "INVOICE_VIEW": False}, "INVOICE_VIEW", True),
    ({"*": False}, "INVOICE_VIEW", False),
    ({"INVOICE_VIEW": True}, "INVOICE.VIEW", True),
    ({"INVOICE.VIEW": True}, "INVOICE_VIEW", True),
    ({"INVOICE_VIEW": False, "INVOICE.VIEW": True}, "INVOICE_VIEW", False),
    ({"INVOICE_VIEW": True}, "", False),
    ({}, "INVOICE_VIEW", False),
])
def test_has_permission(permissions, code, expected):
    assert has_permission(permissions, code) is expected


def test_permission_variants():
    assert permission_variants("A.B_C") == {"A.B_C", "A_B_C", "A.B.C"}
    assert permission_variants("  ") == set()
