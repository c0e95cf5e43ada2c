# app/api/endpoints/dashboard.py

from typing import Any, Dict, List, Optional

import httpx
from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from loguru import logger
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db_session, get_forward_headers, get_widget_client
from app.models.enums import CatalogCategory
from app.schemas.catalog import Catalog, CatalogEntry
from app.schemas.dashboard import ComputedPermissions, DashboardConfig, UserPermissionOverrides
from app.schemas.editor import DashboardView
from app.services.catalog_service import get_catalog, search_catalog
from app.services.config_editor import normalize_config
from app.services.dashboard_service import (
    ConfigPersistenceError,
    get_config,
    get_overrides,
    list_roles,
    put_config,
    resolve,
)
from app.services.render_session import DashboardRenderSession
from app.services.widget_data_service import fetch_all_widget_data

router = APIRouter(
    prefix="/api/dashboard",
    tags=["Dashboard Configuration"]
)


# 1️⃣ Configuration for a role / department
@router.get("/config/{role}", response_model=DashboardConfig, response_model_exclude_none=True)
async def read_config(
    role: str,
    session: AsyncSession = Depends(get_db_session)
):
    return await get_config(session, role)


# 2️⃣ Explicit save (never implicit)
@router.put("/config", response_model=DashboardConfig, response_model_exclude_none=True)
async def save_config(
    document: Dict[str, Any] = Body(...),
    session: AsyncSession = Depends(get_db_session)
):
    try:
        config = normalize_config(document)
    except (ValidationError, ValueError) as e:
        raise HTTPException(422, f"Invalid dashboard configuration: {e}")

    try:
        return await put_config(session, config)
    except ConfigPersistenceError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to save dashboard configuration: {e}"
        )


# 3️⃣ Roles available for configuration / preview
@router.get("/roles", response_model=List[str])
async def read_roles(session: AsyncSession = Depends(get_db_session)):
    return await list_roles(session)


# 4️⃣ Widget catalog
@router.get("/catalog", response_model=Catalog, response_model_exclude_none=True)
async def read_catalog(session: AsyncSession = Depends(get_db_session)):
    return await get_catalog(session)


@router.get("/catalog/search", response_model=List[CatalogEntry], response_model_exclude_none=True)
async def search_catalog_items(
    q: Optional[str] = None,
    category: Optional[CatalogCategory] = None,
    role: Optional[str] = None,
    session: AsyncSession = Depends(get_db_session)
):
    catalog = await get_catalog(session)
    return search_catalog(catalog, query=q, category=category, role=role)


# 5️⃣ Per-user overrides (read only)
@router.get("/user-overrides/{user_id}", response_model=UserPermissionOverrides, response_model_exclude_none=True)
async def read_user_overrides(
    user_id: str,
    session: AsyncSession = Depends(get_db_session)
):
    overrides = await get_overrides(session, user_id)
    if not overrides:
        raise HTTPException(404, "No overrides for this user")
    return overrides


# 6️⃣ Resolved permissions, menu and widgets
@router.get("/resolve/{role}", response_model=ComputedPermissions, response_model_exclude_none=True)
async def resolve_dashboard(
    role: str,
    user_id: Optional[str] = None,
    session: AsyncSession = Depends(get_db_session)
):
    return await resolve(session, role, user_id)


# 7️⃣ Full view: resolution first, then widget data
@router.get("/view/{role}", response_model=DashboardView, response_model_exclude_none=True)
async def view_dashboard(
    role: str,
    user_id: Optional[str] = None,
    preview_role: Optional[str] = Query(default=None, description="View the dashboard as another role"),
    session: AsyncSession = Depends(get_db_session),
    client: httpx.AsyncClient = Depends(get_widget_client),
    headers: Dict[str, str] = Depends(get_forward_headers),
):
    async def resolver(active_role: str, active_user: Optional[str]) -> ComputedPermissions:
        return await resolve(session, active_role, active_user)

    async def fetcher(widgets, generation):
        return await fetch_all_widget_data(client, widgets, generation, headers)

    render = DashboardRenderSession(resolver, fetcher, user_role=role, user_id=user_id)
    if preview_role and preview_role != role:
        logger.info(f"Previewing dashboard of '{preview_role}' as '{role}'")
        computed = await render.start_preview(preview_role)
    else:
        computed = await render.activate()

    widget_data = await render.load_widgets()

    return DashboardView(
        role=render.current_role,
        preview=render.preview.enabled,
        generation=render.generation,
        computed=computed,
        widget_data=[widget_data[w.id] for w in computed.widgets if w.id in widget_data],
    )
