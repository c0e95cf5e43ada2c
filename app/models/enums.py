from enum import Enum

class KnownRole(str, Enum):
    """Roles/departments used in practice. Role keys stay open-ended strings."""
    Driver = "driver"
    Supervisor = "supervisor"
    FieldExecutive = "field-executive"
    Accountant = "accountant"
    FactoryIncharge = "factory-incharge"
    Manager = "manager"
    Audit = "audit"
    AO = "ao"
    SuperAdmin = "superadmin"
    DataEntry = "data-entry"

class WidgetType(str, Enum):
    Metric = "metric"
    Chart = "chart"
    Table = "table"
    TaskList = "task-list"
    ApprovalQueue = "approval-queue"
    Alert = "alert"
    ActivityTimeline = "activity-timeline"
    Custom = "custom"

class ChartType(str, Enum):
    Line = "line"
    Bar = "bar"

class MoveDirection(str, Enum):
    Up = "up"
    Down = "down"

class CatalogCategory(str, Enum):
    Kpi = "kpi"
    Chart = "chart"
    Table = "table"
    Task = "task"
    Alert = "alert"

class MenuItemKind(str, Enum):
    Leaf = "leaf"
    Branch = "branch"

class WidgetDataStatus(str, Enum):
    Ok = "ok"
    Empty = "empty"
    Error = "error"
