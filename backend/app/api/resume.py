import logging
from typing import Any

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..database import get_db
from ..services import resume_store
from ..services.resume_store import serialize_resume
from ..utils.dependencies import AuthContext, get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/resumes", tags=["Resumes"])


class DownloadResponse(BaseModel):
    message: str
    downloads: int


@router.get("")
def list_my_resumes(
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_current_user),
):
    return [serialize_resume(r) for r in resume_store.list_resumes(db, auth.user_id)]


# Declared before /{resume_id} so "public" is never read as an id.
@router.get("/public/{resume_id}")
def get_public_resume(resume_id: int, db: Session = Depends(get_db)):
    return serialize_resume(resume_store.get_public_resume(db, resume_id))


@router.get("/{resume_id}")
def get_resume(
    resume_id: int,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_current_user),
):
    return serialize_resume(resume_store.get_resume(db, resume_id, auth.user_id))


# Raw dict body: shape checks live in validate_resume_payload so that every bad
# field is reported at once, and project technologies can be normalized first.
@router.post("", status_code=201)
def create_resume(
    payload: Any = Body(...),
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_current_user),
):
    return serialize_resume(resume_store.create_resume(db, auth.user_id, payload))


@router.put("/{resume_id}")
def update_resume(
    resume_id: int,
    payload: Any = Body(...),
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_current_user),
):
    return serialize_resume(resume_store.update_resume(db, resume_id, auth.user_id, payload))


@router.delete("/{resume_id}")
def delete_resume(
    resume_id: int,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_current_user),
):
    resume_store.delete_resume(db, resume_id, auth.user_id)
    return {"message": "Resume deleted successfully"}


@router.patch("/{resume_id}/toggle-public")
def toggle_public(
    resume_id: int,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_current_user),
):
    return serialize_resume(resume_store.toggle_public(db, resume_id, auth.user_id))


@router.post("/{resume_id}/download", response_model=DownloadResponse)
def record_download(
    resume_id: int,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_current_user),
):
    downloads = resume_store.record_download(db, resume_id, auth.user_id)
    return {"message": "Download tracked successfully", "downloads": downloads}
