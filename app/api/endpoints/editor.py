# app/api/endpoints/editor.py

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db_session
from app.models.enums import WidgetType
from app.schemas.dashboard import DashboardConfig
from app.schemas.editor import (
    AddWidgetRequest,
    ReorderWidgetRequest,
    ResizeWidgetRequest,
    UpdateWidgetRequest,
    WidgetRefRequest,
)
from app.services import config_editor
from app.services.catalog_service import find_catalog_entry, get_catalog

# Editing never persists; the client saves through PUT /api/dashboard/config
router = APIRouter(
    prefix="/api/dashboard/editor",
    tags=["Dashboard Editor"]
)


@router.post("/add-widget", response_model=DashboardConfig, response_model_exclude_none=True)
async def add_widget(
    payload: AddWidgetRequest,
    session: AsyncSession = Depends(get_db_session)
):
    item = payload.item
    widget_type = payload.widget_type

    if payload.catalog_code:
        entry = find_catalog_entry(await get_catalog(session), payload.catalog_code)
        if not entry:
            raise HTTPException(404, f"Catalog item '{payload.catalog_code}' not found")
        item = item or entry
        widget_type = widget_type or entry.category

    return config_editor.add_widget_from_catalog(payload.config, item, widget_type or WidgetType.Metric)


@router.post("/update-widget", response_model=DashboardConfig, response_model_exclude_none=True)
async def update_widget(payload: UpdateWidgetRequest):
    return config_editor.update_widget(payload.config, payload.widget_id, payload.changes)


@router.post("/remove-widget", response_model=DashboardConfig, response_model_exclude_none=True)
async def remove_widget(payload: WidgetRefRequest):
    return config_editor.remove_widget(payload.config, payload.widget_id)


@router.post("/reorder-widget", response_model=DashboardConfig, response_model_exclude_none=True)
async def reorder_widget(payload: ReorderWidgetRequest):
    return config_editor.reorder_widget(payload.config, payload.widget_id, payload.direction)


@router.post("/resize-widget", response_model=DashboardConfig, response_model_exclude_none=True)
async def resize_widget(payload: ResizeWidgetRequest):
    return config_editor.set_widget_size(payload.config, payload.widget_id, payload.size)


@router.post("/duplicate-widget", response_model=DashboardConfig, response_model_exclude_none=True)
async def duplicate_widget(payload: WidgetRefRequest):
    return config_editor.duplicate_widget(payload.config, payload.widget_id)


@router.post("/normalize", response_model=DashboardConfig, response_model_exclude_none=True)
async def normalize(document: Dict[str, Any] = Body(...)):
    try:
        return config_editor.normalize_config(document)
    except (ValidationError, ValueError) as e:
        raise HTTPException(422, f"Invalid dashboard configuration: {e}")
