"""HTTP host for highlighting sessions.

Serves a single page that shows the document and forwards browser selection
events to a per-client ``HighlightSession``.  Browser nodes are identified by
their child-index path from the text container; the server resolves those
paths against a selectolax parse of the markup the client is showing.
Offsets from the page are DOM offsets (UTF-16 code units) and are converted
to code points before they reach the session.

Sessions live in memory for the lifetime of the process.  All endpoints are
``async def`` so they run on the event loop thread, one request at a time
per session.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING
from uuid import uuid4

from fastapi import FastAPI, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field

from highlightwords.config import get_settings
from highlightwords.errors import OutOfBoundsSelection
from highlightwords.persistence import SessionState
from highlightwords.selection.content_tree import ContentTree, code_point_offset
from highlightwords.session import HighlightSession, PendingSelection

if TYPE_CHECKING:
    from highlightwords.selection.resolver import TreePosition

logger = logging.getLogger(__name__)

_STATIC_DIR = Path(__file__).parent / "static"

DEFAULT_DOCUMENT = (
    "<p>Select any part of this text to highlight it.</p>"
    "<p>Highlights may run <em>across inline formatting</em> and across "
    "paragraph boundaries.</p>"
)


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------


class SelectStartRequest(BaseModel):
    timestamp: float


class SelectionRequest(BaseModel):
    """Final browser selection: node paths from the text container."""

    anchor: list[int] | None = None
    anchor_offset: int = 0
    focus: list[int] | None = None
    focus_offset: int = 0
    text: str = ""


class ColorRequest(BaseModel):
    color: str = Field(max_length=64)


class SessionView(BaseModel):
    session_id: str
    markup: str
    color: str
    menu_open: bool
    task_description: str | None = None


class ChangeView(BaseModel):
    changed: bool
    markup: str


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _position(
    tree: ContentTree, path: list[int] | None, offset: int
) -> TreePosition | None:
    try:
        return tree.position(path, offset)
    except OutOfBoundsSelection as exc:
        logger.debug("Selection endpoint dropped: %s", exc)
        return None


def _view(session_id: str, session: HighlightSession) -> SessionView:
    return SessionView(
        session_id=session_id,
        markup=session.output_markup,
        color=session.current_color,
        menu_open=session.is_menu_open(),
        task_description=session.task_description,
    )


def _load_document() -> str:
    path = get_settings().app.document_path
    if path is None:
        return DEFAULT_DOCUMENT
    logger.info("Loading document from %s", path)
    return path.read_text(encoding="utf-8")


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------


def create_app(
    markup: str | None = None, *, task_description: str | None = None
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        markup: Document to serve; defaults to ``APP__DOCUMENT_PATH`` or a
            built-in sample.
        task_description: Optional instructions shown above the text.
    """
    document = _load_document() if markup is None else markup
    sessions: dict[str, HighlightSession] = {}

    app = FastAPI(title="highlightwords")

    def _session(session_id: str) -> HighlightSession:
        session = sessions.get(session_id)
        if session is None:
            raise HTTPException(status_code=404, detail="Unknown session")
        return session

    @app.get("/", response_class=HTMLResponse)
    async def index() -> str:
        return (_STATIC_DIR / "index.html").read_text(encoding="utf-8")

    @app.post("/api/sessions")
    async def create_session() -> SessionView:
        session_id = uuid4().hex
        sessions[session_id] = HighlightSession(
            document, task_description=task_description
        )
        logger.info("Created session %s", session_id)
        return _view(session_id, sessions[session_id])

    @app.get("/api/sessions/{session_id}")
    async def get_session(session_id: str) -> SessionView:
        return _view(session_id, _session(session_id))

    @app.post("/api/sessions/{session_id}/select-start")
    async def select_start(session_id: str, body: SelectStartRequest) -> dict:
        accepted = _session(session_id).handle_select_start(body.timestamp)
        return {"accepted": accepted}

    @app.post("/api/sessions/{session_id}/selection")
    async def selection(session_id: str, body: SelectionRequest) -> ChangeView:
        session = _session(session_id)
        tree = ContentTree(session.output_markup)
        session.handle_selection_change(
            PendingSelection(
                anchor=_position(tree, body.anchor, body.anchor_offset),
                focus=_position(tree, body.focus, body.focus_offset),
                text=body.text,
            )
        )
        changed = session.handle_selection_end(tree.root)
        return ChangeView(changed=changed, markup=session.output_markup)

    @app.delete("/api/sessions/{session_id}/selections/{visible_offset}")
    async def remove_selection(session_id: str, visible_offset: int) -> ChangeView:
        """Remove the selection under a container text offset (UTF-16 units)."""
        session = _session(session_id)
        offset = code_point_offset(session.document.visible_text(), visible_offset)
        changed = session.remove_selection_at(offset)
        return ChangeView(changed=changed, markup=session.output_markup)

    @app.post("/api/sessions/{session_id}/color")
    async def change_color(session_id: str, body: ColorRequest) -> SessionView:
        session = _session(session_id)
        session.handle_color_changed(body.color)
        return _view(session_id, session)

    @app.post("/api/sessions/{session_id}/menu")
    async def toggle_menu(session_id: str) -> SessionView:
        session = _session(session_id)
        session.handle_menu_button_clicked()
        return _view(session_id, session)

    @app.get("/api/sessions/{session_id}/state")
    async def get_state(session_id: str) -> SessionState:
        return _session(session_id).snapshot()

    @app.put("/api/sessions/{session_id}/state")
    async def put_state(session_id: str, body: SessionState) -> SessionView:
        session = _session(session_id)
        session.restore(body)
        return _view(session_id, session)

    return app
