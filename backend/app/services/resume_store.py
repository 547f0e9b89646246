"""
Ownership-scoped persistence for resume documents.

Every lookup filters on both the resume id and the owner id, so a resume that
belongs to somebody else surfaces exactly like one that doesn't exist.
"""
import logging
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from ..models.resume import Resume
from ..schemas.resume import RESUME_SECTIONS
from ..utils.error_handlers import NotFoundError, ValidationError, get_error_message
from ..utils.validation import normalize_projects, validate_resume_payload

logger = logging.getLogger(__name__)

# Keys a client may never set directly.
_IMMUTABLE_KEYS = {"id", "_id", "userId", "user_id", "views", "downloads", "createdAt", "updatedAt"}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def serialize_resume(r: Resume) -> dict:
    return {
        "id": r.id,
        "userId": r.user_id,
        "title": r.title,
        "personalInfo": r.personal_info or {},
        "experience": r.experience or [],
        "education": r.education or [],
        "skills": r.skills or [],
        "projects": r.projects or [],
        "certifications": r.certifications or [],
        "template": r.template,
        "styling": r.styling,
        "isPublic": bool(r.is_public),
        "views": r.views or 0,
        "downloads": r.downloads or 0,
        "createdAt": _iso(r.created_at),
        "updatedAt": _iso(r.updated_at),
    }


def _coerce_section(key: str, value: Any, errors: list[dict]) -> Any:
    _, schema, is_list = RESUME_SECTIONS[key]
    if value is None:
        return [] if is_list else None
    items = value if is_list else [value]
    out = []
    for idx, item in enumerate(items):
        try:
            out.append(schema.model_validate(item).model_dump())
        except PydanticValidationError as e:
            for err in e.errors():
                loc = ".".join(str(p) for p in err.get("loc", ()))
                prefix = f"{key}[{idx}]" if is_list else key
                errors.append({"field": f"{prefix}.{loc}" if loc else prefix, "message": err.get("msg", "Invalid value")})
    return out if is_list else (out[0] if out else None)


def _prepare(payload: dict, *, partial: bool) -> dict:
    """Validate and normalize `payload` into model column values."""
    errors = validate_resume_payload(payload, partial=partial)
    if errors:
        raise ValidationError(get_error_message("invalid_resume"), errors=errors)

    data = {k: v for k, v in payload.items() if k not in _IMMUTABLE_KEYS}
    if isinstance(data.get("projects"), list):
        data["projects"] = normalize_projects(data["projects"])

    values: dict[str, Any] = {}
    if "title" in data:
        values["title"] = data["title"].strip()
    if "template" in data:
        values["template"] = data["template"].strip()
    if "isPublic" in data:
        values["is_public"] = data["isPublic"]

    for key, (column, _, _) in RESUME_SECTIONS.items():
        if key in data:
            values[column] = _coerce_section(key, data[key], errors)

    if errors:
        raise ValidationError(get_error_message("invalid_resume"), errors=errors)
    return values


def _owned(db: Session, resume_id: int, user_id: int) -> Resume:
    resume = (
        db.query(Resume)
        .filter(Resume.id == resume_id, Resume.user_id == user_id)
        .first()
    )
    if not resume:
        raise NotFoundError(get_error_message("resume_not_found"))
    return resume


def list_resumes(db: Session, user_id: int) -> list[Resume]:
    return (
        db.query(Resume)
        .filter(Resume.user_id == user_id)
        .order_by(Resume.updated_at.desc(), Resume.id.desc())
        .all()
    )


def get_resume(db: Session, resume_id: int, user_id: int) -> Resume:
    return _owned(db, resume_id, user_id)


def create_resume(db: Session, user_id: int, payload: dict) -> Resume:
    values = _prepare(payload, partial=False)
    values.setdefault("certifications", [])
    now = _now()
    resume = Resume(user_id=user_id, created_at=now, updated_at=now, **values)
    db.add(resume)
    db.commit()
    db.refresh(resume)
    logger.info("Created resume id=%s user_id=%s", resume.id, user_id)
    return resume


def update_resume(db: Session, resume_id: int, user_id: int, payload: dict) -> Resume:
    resume = _owned(db, resume_id, user_id)
    values = _prepare(payload, partial=True)
    for column, value in values.items():
        setattr(resume, column, value)
    resume.updated_at = _now()
    db.commit()
    db.refresh(resume)
    logger.info("Updated resume id=%s fields=%s", resume.id, sorted(values))
    return resume


def delete_resume(db: Session, resume_id: int, user_id: int) -> None:
    resume = _owned(db, resume_id, user_id)
    db.delete(resume)
    db.commit()
    logger.info("Deleted resume id=%s user_id=%s", resume_id, user_id)


def toggle_public(db: Session, resume_id: int, user_id: int) -> Resume:
    resume = _owned(db, resume_id, user_id)
    resume.is_public = not resume.is_public
    resume.updated_at = _now()
    db.commit()
    db.refresh(resume)
    return resume


def get_public_resume(db: Session, resume_id: int) -> Resume:
    resume = (
        db.query(Resume)
        .filter(Resume.id == resume_id, Resume.is_public.is_(True))
        .first()
    )
    if not resume:
        raise NotFoundError(get_error_message("resume_not_found"))

    # Read-then-write: concurrent viewers may lose an increment.
    resume.views = (resume.views or 0) + 1
    resume.updated_at = _now()
    db.commit()
    db.refresh(resume)
    return resume


def record_download(db: Session, resume_id: int, user_id: int) -> int:
    resume = _owned(db, resume_id, user_id)
    resume.downloads = (resume.downloads or 0) + 1
    resume.updated_at = _now()
    db.commit()
    return resume.downloads
