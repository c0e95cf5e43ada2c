# app/services/dashboard_service.py

from datetime import datetime
from typing import List, Optional

from loguru import logger
from pydantic import ValidationError
from sqlmodel import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.seeding_logic import default_dashboard_config
from app.models.dashboard import DashboardConfigRecord, UserOverrideRecord
from app.models.enums import KnownRole
from app.schemas.dashboard import (
    ComputedPermissions,
    DashboardConfig,
    PreviewMode,
    UserPermissionOverrides,
)
from app.services.config_editor import normalize_config
from app.services.permission_service import compute_permissions


class ConfigPersistenceError(Exception):
    """Saving a dashboard configuration failed; the message is shown to the operator."""


# ------------------------------------------------------------
# Configuration documents
# ------------------------------------------------------------
async def get_config(session: AsyncSession, role_key: str) -> DashboardConfig:
    record = await session.get(DashboardConfigRecord, role_key)
    if not record:
        logger.info(f"No stored dashboard for '{role_key}', using default configuration")
        return default_dashboard_config(role_key)

    if not isinstance(record.document, dict):
        logger.error(f"Stored dashboard for '{role_key}' is not an object, using default configuration")
        return default_dashboard_config(role_key)

    try:
        return normalize_config({**record.document, "role": role_key})
    except (ValidationError, ValueError) as e:
        logger.error(f"Stored dashboard for '{role_key}' is unreadable: {e}")
        return default_dashboard_config(role_key)


async def put_config(session: AsyncSession, config: DashboardConfig) -> DashboardConfig:
    """Explicit save. Failures propagate as ConfigPersistenceError with the underlying message."""
    normalized = normalize_config(config)
    document = normalized.model_dump(mode="json", by_alias=True, exclude_none=True)

    try:
        record = await session.get(DashboardConfigRecord, normalized.role)
        if record:
            record.document = document
            record.updated_at = datetime.utcnow()
        else:
            record = DashboardConfigRecord(role_key=normalized.role, document=document)

        session.add(record)
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"❌ Failed to save dashboard for '{normalized.role}': {e}")
        raise ConfigPersistenceError(str(e)) from e

    logger.success(f"Saved dashboard '{normalized.role}' ({len(normalized.widgets)} widgets)")
    return normalized


async def list_roles(session: AsyncSession) -> List[str]:
    """Known roles first, then any other role/department keys that have a stored dashboard."""
    roles = [role.value for role in KnownRole]

    result = await session.execute(select(DashboardConfigRecord.role_key))
    for role_key in sorted(result.scalars().all()):
        if role_key not in roles:
            roles.append(role_key)
    return roles


# ------------------------------------------------------------
# User overrides (read only; written by the admin workflow)
# ------------------------------------------------------------
async def get_overrides(session: AsyncSession, user_id: str) -> Optional[UserPermissionOverrides]:
    record = await session.get(UserOverrideRecord, str(user_id))
    if not record:
        return None

    try:
        return UserPermissionOverrides.model_validate({**(record.document or {}), "userId": record.user_id})
    except ValidationError as e:
        logger.error(f"Ignoring unreadable overrides for user '{user_id}': {e}")
        return None


# ------------------------------------------------------------
# Resolution
# ------------------------------------------------------------
def effective_role(preview: Optional[PreviewMode], user_role: str) -> str:
    if preview is None:
        return user_role
    return preview.current_role


async def resolve(session: AsyncSession, role: str, user_id: Optional[str] = None) -> ComputedPermissions:
    """Role config + the user's overrides -> permissions, menu and widgets for one render."""
    config = await get_config(session, role)
    overrides = await get_overrides(session, user_id) if user_id else None
    return compute_permissions(config, overrides)
