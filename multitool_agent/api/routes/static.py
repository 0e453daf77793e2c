"""Front-end fallback: serves static files, or index.html for any other path."""

import logging
from pathlib import Path

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse

from ...config import config

logger = logging.getLogger(__name__)

router = APIRouter()


def resolve_static_file(path: str, static_dir: Path) -> Path:
    """
    Map a request path onto a file in the static directory.

    Paths that do not name an existing file, or that escape the directory,
    resolve to ``index.html``.
    """
    root = static_dir.resolve()
    candidate = (root / path).resolve()
    if path and candidate.is_file() and candidate.is_relative_to(root):
        return candidate
    return root / "index.html"


@router.get("/{full_path:path}", include_in_schema=False)
def serve_frontend(full_path: str) -> FileResponse:
    """Serve the single-page front end."""
    file_path = resolve_static_file(full_path, config.server.static_dir)
    if not file_path.is_file():
        logger.error(f"Front end not found at {file_path}")
        raise HTTPException(status_code=404, detail="Front end not available")
    return FileResponse(file_path)
