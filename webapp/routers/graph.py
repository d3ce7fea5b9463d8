"""Graph API router for ChainScopeWeb.

Endpoints:
- GET    /api/graph/endpoints                        — supported backend queries
- GET    /api/graph/legend                           — node colour legend
- POST   /api/graph/project                          — raw result JSON -> force-graph JSON
- POST   /api/graph/highlight                        — {graph, hovered} -> highlight ids
- GET    /api/graph/query/{endpoint}                 — one-shot backend query -> force-graph JSON

- GET    /api/graph/views/{view_id}/query/{endpoint} — fetch from backend into a view
- GET    /api/graph/views/{view_id}                  — current graph of a view
- POST   /api/graph/views/{view_id}/hover            — {node} -> highlight ids
- DELETE /api/graph/views/{view_id}                  — drop a view
"""

from __future__ import annotations

import logging
import re
import threading
from collections import OrderedDict
from typing import Any, Callable, Dict, Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from backend.analysis_client import AnalysisBackendError, AnalysisClient
from backend.forensics.forcegraph import (
    LEGEND,
    graph_from_force_graph,
    highlight_payload,
    to_force_graph,
)
from backend.forensics.highlight import compute_highlight
from backend.forensics.projector import project
from backend.forensics.results import Endpoint, classify_result
from backend.forensics.session import GraphSession
from backend.settings_store import load_settings

log = logging.getLogger("chainscope.api.graph")

router = APIRouter(prefix="/api/graph", tags=["graph"])

MAX_VIEWS = 256

_client_factory: Callable[[], AnalysisClient] = AnalysisClient


def init(client_factory: Optional[Callable[[], AnalysisClient]] = None) -> None:
    """Inject the backend client factory (tests swap in a mocked transport)."""
    global _client_factory
    _client_factory = client_factory or AnalysisClient


class ViewRegistry:
    """Graph sessions keyed by view id, oldest evicted first."""

    def __init__(self, max_views: int = MAX_VIEWS) -> None:
        self._lock = threading.Lock()
        self._views: "OrderedDict[str, GraphSession]" = OrderedDict()
        self._max_views = max_views

    def get_or_create(self, view_id: str) -> GraphSession:
        with self._lock:
            session = self._views.get(view_id)
            if session is None:
                session = GraphSession(label_length=load_settings().label_length)
                self._views[view_id] = session
                while len(self._views) > self._max_views:
                    evicted, _ = self._views.popitem(last=False)
                    log.info("Evicted graph view %s", evicted)
            else:
                self._views.move_to_end(view_id)
            return session

    def get(self, view_id: str) -> Optional[GraphSession]:
        with self._lock:
            return self._views.get(view_id)

    def drop(self, view_id: str) -> bool:
        with self._lock:
            return self._views.pop(view_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._views.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._views)


views = ViewRegistry()


_NUMBER_RE = re.compile(r"^-?\d+(\.\d+)?$")


def _coerce_param(value: str) -> Any:
    """Query strings arrive as text; JSON bodies want plain numbers."""
    if not _NUMBER_RE.match(value):
        return value
    return float(value) if "." in value else int(value)


def _query_params(ep: Endpoint, request: Request) -> Dict[str, Any]:
    params: Dict[str, Any] = dict(request.query_params)
    if ep.method == "POST":
        params = {k: _coerce_param(v) for k, v in params.items()}
    return params


async def _read_json(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError:
        return None


def _view_payload(view_id: str, session: GraphSession) -> Dict[str, Any]:
    return {
        "view_id": view_id,
        "generation": session.installed_generation,
        "graph": to_force_graph(session.graph),
        "highlight": highlight_payload(session.highlight),
    }


# ============================================================
# STATELESS
# ============================================================

@router.get("/endpoints")
async def graph_endpoints() -> JSONResponse:
    """List backend queries that can feed a graph view."""
    return JSONResponse({"endpoints": [e.describe() for e in Endpoint]})


@router.get("/legend")
async def graph_legend() -> JSONResponse:
    return JSONResponse({"legend": LEGEND})


@router.post("/project")
async def graph_project(request: Request) -> JSONResponse:
    """Project a raw backend result into force-graph JSON."""
    raw = await _read_json(request)
    typed = classify_result(raw)
    graph = project(typed, label_length=load_settings().label_length)
    payload = to_force_graph(graph)
    payload["variant"] = typed.kind
    return JSONResponse(payload)


@router.post("/highlight")
async def graph_highlight(request: Request) -> JSONResponse:
    """Highlight sets for a hovered node over a (possibly rendered) graph."""
    body = await _read_json(request)
    if not isinstance(body, dict):
        body = {}
    graph = graph_from_force_graph(body.get("graph"))
    hovered = body.get("hovered")
    state = compute_highlight(graph, hovered if isinstance(hovered, str) else None)
    return JSONResponse(highlight_payload(state))


@router.get("/query/{endpoint}")
async def graph_query(endpoint: str, request: Request) -> JSONResponse:
    """One-shot backend query, projected without touching any view."""
    try:
        ep = Endpoint.from_slug(endpoint)
    except ValueError as e:
        return JSONResponse({"status": "error", "error": str(e)}, status_code=404)

    try:
        result = await _client_factory().query(ep, **_query_params(ep, request))
    except AnalysisBackendError as e:
        log.warning("Backend query %s failed: %s", ep.slug, e)
        return JSONResponse({"status": "error", "error": str(e)}, status_code=502)
    except Exception as e:
        log.exception("Graph query error")
        return JSONResponse({"status": "error", "error": str(e)}, status_code=500)

    payload = to_force_graph(project(result, label_length=load_settings().label_length))
    payload["variant"] = result.kind
    payload["endpoint"] = ep.slug
    return JSONResponse(payload)


# ============================================================
# VIEWS
# ============================================================

@router.get("/views/{view_id}/query/{endpoint}")
async def view_query(view_id: str, endpoint: str, request: Request) -> JSONResponse:
    """Fetch `endpoint` from the analysis backend and install it in the view.

    A response overtaken by a newer query for the same view is discarded;
    the reply then carries the view's current graph with applied=false.
    """
    try:
        ep = Endpoint.from_slug(endpoint)
    except ValueError as e:
        return JSONResponse({"status": "error", "error": str(e)}, status_code=404)

    params = _query_params(ep, request)
    session = views.get_or_create(view_id)
    client = _client_factory()

    try:
        applied = await session.refresh(lambda: client.query(ep, **params))
    except AnalysisBackendError as e:
        log.warning("Backend query %s failed: %s", ep.slug, e)
        return JSONResponse({"status": "error", "error": str(e)}, status_code=502)
    except Exception as e:
        log.exception("Graph view query error")
        return JSONResponse({"status": "error", "error": str(e)}, status_code=500)

    payload = _view_payload(view_id, session)
    payload["applied"] = applied
    payload["endpoint"] = ep.slug
    return JSONResponse(payload)


@router.get("/views/{view_id}")
async def view_get(view_id: str) -> JSONResponse:
    session = views.get(view_id)
    if session is None:
        return JSONResponse({"error": "view not found"}, status_code=404)
    return JSONResponse(_view_payload(view_id, session))


@router.post("/views/{view_id}/hover")
async def view_hover(view_id: str, request: Request) -> JSONResponse:
    """Pointer entered a node (`{"node": id}`) or left it (`{"node": null}`)."""
    session = views.get(view_id)
    if session is None:
        return JSONResponse({"error": "view not found"}, status_code=404)
    body = await _read_json(request)
    node = body.get("node") if isinstance(body, dict) else None
    state = session.hover(node if isinstance(node, str) else None)
    return JSONResponse(highlight_payload(state))


@router.delete("/views/{view_id}")
async def view_drop(view_id: str) -> JSONResponse:
    if not views.drop(view_id):
        return JSONResponse({"error": "view not found"}, status_code=404)
    return JSONResponse({"status": "ok"})
