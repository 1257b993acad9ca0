# src/sharelink/adapters/web/routes.py
"""
Web Routes - Health, File Serving and Distribution Endpoints

Handlers the engine needs to be reachable and self-verifying:
- the liveness path every reachability probe targets
- the own file route that distribution probes and hands out (not rate limited)
- a rate-limited in-browser view of the same files
- domain inspection / refresh and a publish endpoint for the route layer

Components live on app.state (see sharelink.adapters.web.server).
No `from __future__ import annotations` here: FastAPI resolves the handler
annotations through the rate_limited wrapper.

Files that USE this module:
- sharelink.adapters.web.server (registers the handlers)

Files that this module USES:
- sharelink.adapters.web.governor (rate_limited)
- sharelink.application.health (HealthChecker)
- sharelink.domain.models (RequestContext)
- sharelink.shared.validators (validate_filename)
"""
import logging
import mimetypes
from pathlib import Path
from typing import Any, Dict

from fastapi import HTTPException, Request
from fastapi.responses import FileResponse
from pydantic import BaseModel, Field

from sharelink.adapters.web.governor import rate_limited
from sharelink.application.health import HealthChecker
from sharelink.domain.models import RequestContext
from sharelink.shared.validators import validate_filename

logger = logging.getLogger(__name__)


class PublishBody(BaseModel):
    filename: str = Field(..., min_length=1, max_length=255)


def request_context(request: Request) -> RequestContext:
    """Capture the headers the domain resolver may derive an origin from."""
    return RequestContext(headers=dict(request.headers), scheme=request.url.scheme)


def _served_path(request: Request, filename: str) -> Path:
    """
    Map a file name onto the served directory.

    Raises:
        HTTPException: 400 for unsafe names, 404 for missing files
    """
    if not validate_filename(filename):
        raise HTTPException(status_code=400, detail="Invalid filename")
    base = Path(request.app.state.settings.files_dir).resolve()
    path = (base / filename).resolve()
    if path.parent != base:
        raise HTTPException(status_code=400, detail="Invalid file path")
    if not path.is_file():
        raise HTTPException(status_code=404, detail="File not found")
    return path


def healthcheck() -> Dict[str, str]:
    return {"status": "ok"}


@rate_limited("general")
def health_details(request: Request) -> Dict[str, Any]:
    state = request.app.state
    checker = HealthChecker(
        resolver=state.resolver,
        governor=state.governor,
        files_dir=state.settings.files_dir,
        hint_store=state.hint_store,
    )
    return checker.get_overall_health()


def _inline_file(path: Path, max_age: int) -> FileResponse:
    media_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    return FileResponse(
        path,
        media_type=media_type,
        headers={
            "Content-Disposition": f'inline; filename="{path.name}"',
            "Cache-Control": f"public, max-age={max_age}",
        },
    )


def serve_file(filename: str, request: Request) -> FileResponse:
    """
    Own file route handed out in shared links.

    Not rate limited: distribution verifies each published link by fetching
    it through this route.
    """
    path = _served_path(request, filename)
    logger.info("Serving file %s", path.name)
    return _inline_file(path, max_age=86400)


@rate_limited("file_retrieval")
def view_file(filename: str, request: Request):
    path = _served_path(request, filename)
    logger.info("Viewing file %s", path.name)
    return _inline_file(path, max_age=3600)


@rate_limited("general")
def get_domain(request: Request) -> Dict[str, Any]:
    domain = request.app.state.resolver.resolve_best_domain(request_context(request))
    return domain.to_json()


@rate_limited("auth")
def refresh_domain(request: Request) -> Dict[str, Any]:
    domain = request.app.state.resolver.refresh(request_context(request))
    return domain.to_json()


@rate_limited("form_submission")
def publish_file(body: PublishBody, request: Request) -> Dict[str, Any]:
    path = _served_path(request, body.filename)
    result = request.app.state.chain.publish(path, request_context(request))
    return result.to_json()
