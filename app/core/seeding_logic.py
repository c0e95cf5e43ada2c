from copy import deepcopy

from sqlmodel import select
from loguru import logger

from app.models.dashboard import CatalogItemRecord, DashboardConfigRecord
from app.models.enums import KnownRole
from app.schemas.dashboard import DashboardConfig
from app.core.config import settings
from app.core.database import AsyncSessionLocal

# ----------------------------------------------------------------
# 1. DEFINE STATIC DATA
# ----------------------------------------------------------------

DEFAULT_MENU_ITEMS = [
    {"id": "dashboard", "label": "Dashboard", "path": "/dashboard", "icon": "dashboard", "visible": True},
    {"id": "transaction", "label": "Transaction", "path": "/transaction", "icon": "transaction", "visible": True,
     "children": [
         {"id": "barcode", "label": "Barcode Generation", "path": "/transaction/barcode-generation", "icon": "barcode", "visible": True},
     ]},
    {"id": "finance", "label": "Finance", "path": "/finance", "icon": "finance", "visible": True,
     "children": [
         {"id": "invoice", "label": "Invoice Management", "path": "/finance/invoice-management", "icon": "invoice", "visible": True},
         {"id": "payment", "label": "Payment", "path": "/finance/payment", "icon": "payment", "visible": True},
         {"id": "receipt", "label": "Receipt Management", "path": "/finance/receipt-management", "icon": "receipt", "visible": True},
         {"id": "balance", "label": "Financial Balance", "path": "/finance/financial-balance-summary", "icon": "balance", "visible": True},
     ]},
    {"id": "commercial", "label": "Commercial / Agreements", "path": "/commercial-agreements", "icon": "commercial", "visible": True},
    {"id": "compliance", "label": "Compliance & Training", "path": "/compliance-training", "icon": "compliance", "visible": True},
    {"id": "master", "label": "Master", "path": "/master", "icon": "master", "visible": True},
    {"id": "report", "label": "Reports", "path": "/report", "icon": "report", "visible": True},
]

SUPERADMIN_WIDGETS = [
    {"id": "metric-total-users", "type": "metric", "title": "Total Users", "gridColumn": 1,
     "dataSource": {"endpoint": "/api/v1/users/count"}, "props": {"unit": "", "label": "Active users"}},
    {"id": "metric-total-companies", "type": "metric", "title": "Total Companies", "gridColumn": 1,
     "dataSource": {"endpoint": "/api/v1/companies/count"}, "props": {"unit": "", "label": "Registered companies"}},
    {"id": "metric-total-hcfs", "type": "metric", "title": "Total HCFs", "gridColumn": 1,
     "dataSource": {"endpoint": "/api/v1/hcfs/count"}, "props": {"unit": "", "label": "Healthcare facilities"}},
    {"id": "metric-total-invoices", "type": "metric", "title": "Total Invoices", "gridColumn": 1,
     "dataSource": {"endpoint": "/api/v1/invoices/count"}, "props": {"unit": "", "label": "This month"}},
    {"id": "chart-revenue-trend", "type": "chart", "title": "Revenue Trend", "gridColumn": 2, "gridRow": 1,
     "chartConfig": {"type": "line", "xAxis": "month", "yAxis": "revenue"},
     "dataSource": {"endpoint": "/api/v1/reports/revenue"}},
    {"id": "table-recent-activities", "type": "activity-timeline", "title": "Recent Activities", "gridColumn": 2, "gridRow": 1,
     "dataSource": {"endpoint": "/api/v1/activities/recent"}, "props": {"maxItems": 10}},
    {"id": "approval-queue", "type": "approval-queue", "title": "Pending Approvals", "gridColumn": 2,
     "dataSource": {"endpoint": "/api/v1/approvals/pending"},
     "permissions": {"view": "APPROVAL_VIEW", "actions": {"approve": "APPROVAL_APPROVE", "view": "APPROVAL_VIEW"}}},
]

# Widget templates offered by the configuration screen
CATALOG_DATA = [
    {"code": "KPI_TOTAL_COLLECTION", "category": "kpi", "title": "Total Waste Collected", "api": "/dashboard/kpi/total-collection",
     "format": "number", "roles": ["superadmin", "manager", "supervisor", "factory-incharge"],
     "description": "Kilograms collected in the current month"},
    {"code": "KPI_REVENUE", "category": "kpi", "title": "Revenue", "api": "/dashboard/kpi/revenue",
     "format": "currency", "roles": ["superadmin", "manager", "accountant", "ao"],
     "description": "Invoiced revenue for the current month"},
    {"code": "KPI_OUTSTANDING", "category": "kpi", "title": "Outstanding Amount", "api": "/dashboard/kpi/outstanding",
     "format": "currency", "roles": ["superadmin", "accountant", "ao", "audit"]},
    {"code": "KPI_ACTIVE_ROUTES", "category": "kpi", "title": "Active Routes", "api": "/dashboard/kpi/active-routes",
     "format": "number", "roles": ["superadmin", "supervisor", "field-executive", "driver"]},
    {"code": "CHART_COLLECTION_TREND", "category": "chart", "title": "Collection Trend", "api": "/dashboard/charts/collection-trend",
     "chart_types": ["line", "bar"], "roles": ["superadmin", "manager", "supervisor"]},
    {"code": "CHART_REVENUE_TREND", "category": "chart", "title": "Revenue Trend", "api": "/dashboard/charts/revenue-trend",
     "chart_types": ["bar", "line"], "roles": ["superadmin", "manager", "accountant"]},
    {"code": "TABLE_ROUTE_STATUS", "category": "table", "title": "Route Status", "api": "/dashboard/tables/route-status",
     "roles": ["superadmin", "supervisor", "field-executive"]},
    {"code": "TABLE_CONTRACT_RENEWALS", "category": "table", "title": "Contract Renewals", "api": "/dashboard/tables/contract-renewals",
     "roles": ["superadmin", "manager", "ao"]},
    {"code": "TASK_PENDING_APPROVALS", "category": "task", "title": "Pending Approvals", "api": "/dashboard/tasks/approvals",
     "roles": ["superadmin", "manager", "ao"]},
    {"code": "TASK_DATA_ENTRY", "category": "task", "title": "Data Entry Tasks", "api": "/dashboard/tasks/data-entry",
     "roles": ["data-entry", "supervisor"]},
    {"code": "ALERT_MISSED_PICKUPS", "category": "alert", "title": "Missed Pickups", "api": "/dashboard/alerts/missed-pickups",
     "roles": ["superadmin", "supervisor", "manager"]},
    {"code": "ALERT_COMPLIANCE", "category": "alert", "title": "Compliance Alerts", "api": "/dashboard/alerts/compliance",
     "roles": ["superadmin", "audit", "factory-incharge"]},
]


def default_dashboard_config(role: str) -> DashboardConfig:
    """
    Fallback configuration when nothing is stored for a role.
    SuperAdmin works out of the box; other roles only get the Dashboard entry.
    """
    if role == KnownRole.SuperAdmin.value:
        return DashboardConfig.model_validate({
            "role": role,
            "widgets": deepcopy(SUPERADMIN_WIDGETS),
            "menuItems": deepcopy(DEFAULT_MENU_ITEMS),
            "permissions": {settings.PERMISSION_WILDCARD: True},
        })

    return DashboardConfig.model_validate({
        "role": role,
        "widgets": [],
        "menuItems": deepcopy(DEFAULT_MENU_ITEMS[:1]),
        "permissions": {},
    })


# ----------------------------------------------------------------
# 2. SEEDING FUNCTIONS
# ----------------------------------------------------------------

async def seed_all():
    """Master function to run all seeding logic."""
    async with AsyncSessionLocal() as session:
        try:
            await seed_catalog(session)
            await seed_superadmin_config(session)

            await session.commit()
            logger.success("✨ Dashboard seeding complete.")
        except Exception as e:
            logger.error(f"❌ Seeding Failed: {e}")
            await session.rollback()

async def seed_catalog(session):
    for order, item in enumerate(CATALOG_DATA):
        stmt = select(CatalogItemRecord).where(CatalogItemRecord.code == item["code"])
        result = await session.execute(stmt)
        if not result.scalar_one_or_none():
            logger.info(f"🌱 Creating catalog item: {item['code']}")
            session.add(CatalogItemRecord(
                code=item["code"],
                category=item["category"],
                title=item["title"],
                api=item["api"],
                format=item.get("format"),
                description=item.get("description"),
                chart_types=item.get("chart_types", []),
                roles=item.get("roles", []),
                sequence_order=order,
            ))
    await session.flush()

async def seed_superadmin_config(session):
    role_key = KnownRole.SuperAdmin.value
    existing = await session.get(DashboardConfigRecord, role_key)
    if existing:
        logger.info("SuperAdmin dashboard already configured. Skipping.")
        return

    config = default_dashboard_config(role_key)
    session.add(DashboardConfigRecord(
        role_key=role_key,
        document=config.model_dump(mode="json", by_alias=True, exclude_none=True),
    ))
    logger.info("🌱 Seeded SuperAdmin dashboard configuration")
    await session.flush()
