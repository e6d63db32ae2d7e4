from __future__ import annotations

import logging
import os
from typing import Any, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from pydantic import BaseModel, Field

from . import channel
from .adapters.files import FileAccessError
from .state import WorkspaceNotSelected, workspace_state
from asearch.app import config

logger = logging.getLogger(__name__)

_LOCAL_UI_TOKEN: Optional[str] = None


def set_local_ui_token(token: Optional[str]) -> None:
    """Register the shared token the desktop shell sends with every request."""
    global _LOCAL_UI_TOKEN
    _LOCAL_UI_TOKEN = token or None


def require_local_ui(request: Request) -> None:
    expected = _LOCAL_UI_TOKEN or os.getenv("ASEARCH_LOCAL_UI_TOKEN")
    if not expected:
        return
    if request.headers.get("x-local-ui-token") != expected:
        raise HTTPException(status_code=401, detail="Missing or invalid local UI token")


class WorkspaceSelectPayload(BaseModel):
    path: str = Field(..., description="Workspace folder to index")


app = FastAPI(title="ASearch Local API", version="0.1.0", dependencies=[Depends(require_local_ui)])


def _rebuild() -> dict:
    try:
        result = workspace_state.rebuild()
    except WorkspaceNotSelected as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except (FileAccessError, OSError) as exc:
        logger.warning("Reindex failed: %s", exc)
        raise HTTPException(status_code=500, detail=f"Failed to index workspace: {exc}") from exc
    return {
        "root": str(workspace_state.get_root()),
        "count": result.count,
        "message": result.message,
    }


@app.get("/api/health")
def health() -> dict:
    return {"ok": True}


@app.post("/api/workspace/select")
def select_workspace(payload: WorkspaceSelectPayload) -> dict:
    try:
        root = workspace_state.set_root(payload.path)
    except FileAccessError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    workspace_state.exclude_patterns = config.load_exclude_patterns()
    logger.info("[API] POST /api/workspace/select root=%s", root)
    return _rebuild()


@app.post("/api/workspace/reindex")
def reindex_workspace() -> dict:
    logger.info("[API] POST /api/workspace/reindex")
    return _rebuild()


@app.get("/api/workspace/status")
def workspace_status() -> dict:
    return workspace_state.status()


@app.get("/api/search")
def api_search(q: Optional[str] = None) -> dict:
    logger.debug("[API] GET /api/search q=%s", q)
    return {"results": workspace_state.search(q or "")}


@app.post("/api/panel/message")
async def panel_message(request: Request) -> dict:
    try:
        payload: Any = await request.json()
    except ValueError:
        payload = None
    return channel.handle_message(workspace_state, payload).to_payload()


def get_app() -> FastAPI:
    return app


if __name__ == "__main__":
    import argparse

    import uvicorn

    parser = argparse.ArgumentParser(description="ASearch API Server")
    parser.add_argument("--host", default=config.load_host())
    parser.add_argument("--port", type=int, default=config.load_port())
    parser.add_argument("--workspace", help="Workspace folder to index at startup")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    if args.workspace:
        workspace_state.set_root(args.workspace)
        workspace_state.exclude_patterns = config.load_exclude_patterns()
        print(workspace_state.rebuild().message)
    uvicorn.run(app, host=args.host, port=args.port, log_level="info")
