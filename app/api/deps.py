# app/api/deps.py

from typing import AsyncGenerator, Dict, Optional

import httpx
from fastapi import Header
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_session


# ------------------------------------------------------------
# DB Session
# ------------------------------------------------------------
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    async for session in get_session():
        yield session


# ------------------------------------------------------------
# HTTP client for widget data backends
# ------------------------------------------------------------
async def get_widget_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient(timeout=settings.WIDGET_FETCH_TIMEOUT) as client:
        yield client


# ------------------------------------------------------------
# Forward the caller's credentials to widget backends untouched
# ------------------------------------------------------------
async def get_forward_headers(
    authorization: Optional[str] = Header(default=None),
) -> Dict[str, str]:
    if not authorization:
        return {}
    return {"Authorization": authorization}
