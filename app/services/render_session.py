# app/services/render_session.py

import asyncio
from typing import Awaitable, Callable, Dict, List, Optional

from loguru import logger

from app.schemas.dashboard import ComputedPermissions, PreviewMode, WidgetConfig
from app.schemas.widget import WidgetDataResult

Resolver = Callable[[str, Optional[str]], Awaitable[ComputedPermissions]]
Fetcher = Callable[[List[WidgetConfig], int], Awaitable[List[WidgetDataResult]]]


class DashboardRenderSession:
    """
    Drives one dashboard view in two waves.

    Wave 1 resolves permissions, menu and widgets for the active role/user; the
    result is renderable on its own. Wave 2 fetches widget data. Every activation
    bumps ``generation``; widget results tagged with an older generation are
    discarded and any in-flight wave is cancelled.
    """

    def __init__(self, resolver: Resolver, fetcher: Fetcher, user_role: str, user_id: Optional[str] = None):
        self._resolver = resolver
        self._fetcher = fetcher
        self._wave: Optional[asyncio.Task] = None

        self.user_id = user_id
        self.preview = PreviewMode(original_role=user_role)
        self.generation = 0
        self.computed: Optional[ComputedPermissions] = None
        self.widget_data: Dict[str, WidgetDataResult] = {}

    @property
    def current_role(self) -> str:
        return self.preview.current_role

    async def activate(self, role: Optional[str] = None, user_id: Optional[str] = None) -> ComputedPermissions:
        """Resolve (again) for a role/user. Supersedes everything issued before."""
        if role is not None and role != self.current_role:
            if role == self.preview.original_role:
                self.preview = PreviewMode(original_role=self.preview.original_role)
            else:
                self.preview = PreviewMode(enabled=True, preview_role=role, original_role=self.preview.original_role)
        if user_id is not None:
            self.user_id = user_id

        self.generation += 1
        self._cancel_wave()
        self.widget_data = {}
        self.computed = None

        generation = self.generation
        computed = await self._resolver(self.current_role, self.user_id)
        if generation != self.generation:
            logger.debug(f"Discarding resolution for generation {generation}; now at {self.generation}")
            return self.computed
        self.computed = computed
        return computed

    async def start_preview(self, role: str) -> ComputedPermissions:
        return await self.activate(role)

    async def exit_preview(self) -> ComputedPermissions:
        return await self.activate(self.preview.original_role)

    def apply(self, result: WidgetDataResult) -> bool:
        if result.generation != self.generation:
            logger.debug(
                f"Discarding stale data for widget '{result.widget_id}' "
                f"(generation {result.generation}, current {self.generation})"
            )
            return False
        self.widget_data[result.widget_id] = result
        return True

    async def load_widgets(self) -> Dict[str, WidgetDataResult]:
        """Second wave: fetch data for every visible widget of the current resolution."""
        if self.computed is None:
            return {}

        self._cancel_wave()
        wave = asyncio.create_task(self._fetcher(self.computed.widgets, self.generation))
        self._wave = wave
        try:
            await asyncio.wait({wave})
        except asyncio.CancelledError:
            wave.cancel()
            raise

        if wave.cancelled():
            logger.debug("Widget wave cancelled by a newer resolution")
            return dict(self.widget_data)

        for result in wave.result():
            self.apply(result)
        return dict(self.widget_data)

    def _cancel_wave(self) -> None:
        if self._wave and not self._wave.done():
            self._wave.cancel()
        self._wave = None
