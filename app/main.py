"""Repo-root Uvicorn entrypoint.

Allows running the resume builder backend from the repo root:

    uvicorn app.main:app --reload --port 5000

The FastAPI app itself lives in `backend/app/main.py`; this module only
re-exports it.
"""

from backend.app.main import app  # re-export

__all__ = ["app"]
