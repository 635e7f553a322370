"""Per-user resume builder session.

Holds what the browser form used to hold: the draft form, the preview
document, the active view, the rendered page and pending notifications.
"""
from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from functools import partial
from typing import Callable, Dict, List, Optional
import logging
import time

from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from mirai.core.config import settings
from mirai.core.errors import ExportPreconditionError, PdfConversionError
from mirai.db.session import SessionLocal
from mirai.schemas.resume import ResumeFormState, collect_field_errors
from mirai.services import preview_document
from mirai.services.pdf_exporter import Converter, PdfExporter
from mirai.services.persistence_client import PersistenceClient, SaveResult, SaveState
from mirai.services.preview_document import Derived, Overridden, PreviewDocument, PreviewMode
from mirai.services.preview_page import PreviewPage, View
from mirai.services.resume_service import async_save_resume
from mirai.tools.pdf_generator import render_pdf

logger = logging.getLogger(__name__)

VALIDATION_BLOCKED_MESSAGE = "Please fix the highlighted fields before saving"


@dataclass
class Notification:
    level: str
    message: str


class NotificationSchema(BaseModel):
    level: str
    message: str


class BuilderSnapshot(BaseModel):
    """What the client needs to redraw the builder."""
    markdown: str
    mode: PreviewMode
    activeView: View
    errors: Dict[str, str] = Field(default_factory=dict)
    overrideWarning: bool = False
    saveState: SaveState = SaveState.IDLE
    exporting: bool = False
    notifications: List[NotificationSchema] = Field(default_factory=list)


class ResumeBuilder:
    def __init__(
        self,
        user_id: str,
        display_name: str = "",
        session_factory: Callable[[], Session] = SessionLocal,
        converter: Converter = render_pdf,
        persistence: Optional[PersistenceClient] = None,
        exporter: Optional[PdfExporter] = None,
        page: Optional[PreviewPage] = None,
    ):
        self.user_id = user_id
        self.display_name = display_name
        self.form = ResumeFormState()
        self.document: PreviewDocument = Derived(self.form, display_name)
        self.active_view = View.EDIT
        self.errors: Dict[str, str] = {}
        self.notifications: List[Notification] = []
        self.loaded = False
        self.page = page or PreviewPage()
        self.exporter = exporter or PdfExporter(converter)
        self.persistence = persistence or PersistenceClient(
            partial(async_save_resume, user_id, session_factory=session_factory),
            notify=self.notify,
        )

    @property
    def markdown(self) -> str:
        return self.document.markdown

    def notify(self, level: str, message: str) -> None:
        self.notifications.append(Notification(level, message))

    def drain_notifications(self) -> List[Notification]:
        pending, self.notifications = self.notifications, []
        return pending

    async def _render(self) -> None:
        await self.page.render(
            self.markdown,
            self.active_view,
            errors=self.errors,
            overridden=isinstance(self.document, Overridden),
        )

    async def load(self, initial_content: Optional[str]) -> None:
        """Start from the saved resume, if any. The form is not rebuilt from it."""
        if initial_content:
            self.document = preview_document.override(initial_content)
            self.active_view = View.PREVIEW
        self.loaded = True
        await self._render()

    async def update_form(self, state: ResumeFormState) -> None:
        self.form = state
        self.errors = collect_field_errors(state)
        self.document = preview_document.recompute(self.document, state, self.display_name)
        await self._render()

    async def override_markdown(self, text: str) -> None:
        self.document = preview_document.override(text)
        await self._render()

    async def revert_to_form(self) -> None:
        """Discard hand-edited markdown and project the form again."""
        self.document = preview_document.revert_to_form(self.form, self.display_name)
        await self._render()

    async def show(self, view: View) -> None:
        self.active_view = View(view)
        await self._render()

    async def save(self) -> SaveResult:
        # Hand-edited markdown is saved as typed; only form-derived content is gated
        if isinstance(self.document, Derived):
            self.errors = collect_field_errors(self.form)
            if self.errors:
                self.notify("error", VALIDATION_BLOCKED_MESSAGE)
                return SaveResult(ok=False, error=VALIDATION_BLOCKED_MESSAGE, errors=dict(self.errors))
        return await self.persistence.save(self.markdown)

    async def export_pdf(self) -> bytes:
        try:
            return await self.exporter.export(self)
        except (ExportPreconditionError, PdfConversionError) as e:
            self.notify("error", str(e))
            raise

    def snapshot(self, drain: bool = True) -> BuilderSnapshot:
        notifications = self.drain_notifications() if drain else list(self.notifications)
        return BuilderSnapshot(
            markdown=self.markdown,
            mode=self.document.mode,
            activeView=self.active_view,
            errors=self.errors,
            overrideWarning=isinstance(self.document, Overridden),
            saveState=self.persistence.state,
            exporting=self.exporter.in_flight,
            notifications=[NotificationSchema(level=n.level, message=n.message) for n in notifications],
        )


class BuilderRegistry:
    """In-memory builder sessions keyed by local user id.

    Sessions idle for longer than ``idle_seconds`` are dropped, and past
    ``max_sessions`` the least recently used one goes first. A dropped user
    starts again from the saved resume on the next request.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        converter: Converter = render_pdf,
        idle_seconds: float = settings.BUILDER_IDLE_SECONDS,
        max_sessions: int = settings.BUILDER_MAX_SESSIONS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.session_factory = session_factory
        self.converter = converter
        self.idle_seconds = idle_seconds
        self.max_sessions = max_sessions
        self._clock = clock
        # least recently used first
        self._builders: "OrderedDict[str, ResumeBuilder]" = OrderedDict()
        self._last_access: Dict[str, float] = {}

    def __len__(self) -> int:
        return len(self._builders)

    def __contains__(self, user_id: str) -> bool:
        return user_id in self._builders

    def get(self, user_id: str, display_name: str = "") -> ResumeBuilder:
        now = self._clock()
        self._evict_idle(now)

        builder = self._builders.get(user_id)
        if builder is None:
            builder = ResumeBuilder(
                user_id,
                display_name,
                session_factory=self.session_factory,
                converter=self.converter,
            )
            self._builders[user_id] = builder
            logger.info(f"Opened resume builder for user {user_id}")
        self._builders.move_to_end(user_id)
        self._last_access[user_id] = now

        while len(self._builders) > self.max_sessions:
            oldest = next(iter(self._builders))
            logger.info(f"Evicting least recently used resume builder for user {oldest}")
            self.discard(oldest)
        return builder

    def _evict_idle(self, now: float) -> None:
        expired = [uid for uid, seen in self._last_access.items() if now - seen > self.idle_seconds]
        for uid in expired:
            logger.info(f"Evicting idle resume builder for user {uid}")
            self.discard(uid)

    def discard(self, user_id: str) -> None:
        self._builders.pop(user_id, None)
        self._last_access.pop(user_id, None)


registry = BuilderRegistry()


def get_builder_registry() -> BuilderRegistry:
    return registry
