# app/models/dashboard.py

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, DateTime, Integer, String, JSON
from typing import Optional, Dict, Any, List
from datetime import datetime


class DashboardConfigRecord(SQLModel, table=True):
    __tablename__ = "dashboard_configs"

    # Role / department key
    role_key: str = Field(
        sa_column=Column(String(64), primary_key=True)
    )

    # Full DashboardConfig document in its camelCase JSON form
    document: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )


class UserOverrideRecord(SQLModel, table=True):
    __tablename__ = "dashboard_user_overrides"

    user_id: str = Field(
        sa_column=Column(String(64), primary_key=True)
    )

    # Stores {"permissions": {...}, "menuOverrides": {...}, "widgetOverrides": {...}}
    document: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )


class CatalogItemRecord(SQLModel, table=True):
    __tablename__ = "dashboard_catalog_items"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, primary_key=True, autoincrement=True)
    )

    code: str = Field(sa_column=Column(String(128), nullable=False, unique=True))

    # kpi | chart | table | task | alert
    category: str = Field(sa_column=Column(String(16), nullable=False, index=True))

    title: str = Field(sa_column=Column(String(255), nullable=False))
    api: str = Field(sa_column=Column(String(512), nullable=False))
    format: Optional[str] = Field(default=None, sa_column=Column(String(32), nullable=True))
    description: Optional[str] = Field(default=None, sa_column=Column(String(1024), nullable=True))

    chart_types: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    roles: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    sequence_order: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, nullable=True)
    )
