"""
Validation utilities for input validation and error handling.
"""
import re
from typing import Any
from fastapi import HTTPException


def validate_email(email: str) -> str:
    """Validate email format."""
    if not email or not isinstance(email, str):
        raise HTTPException(status_code=400, detail="Email is required")

    email = email.strip().lower()
    if len(email) > 255:
        raise HTTPException(status_code=400, detail="Email too long (max 255 characters)")

    # Basic email regex
    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    if not re.match(pattern, email):
        raise HTTPException(status_code=400, detail="Invalid email format")

    return email


def validate_password(password: str) -> None:
    """Validate password strength."""
    if not password or not isinstance(password, str):
        raise HTTPException(status_code=400, detail="Password is required")

    if len(password) < 6:
        raise HTTPException(status_code=400, detail="Password must be at least 6 characters")

    if len(password) > 128:
        raise HTTPException(status_code=400, detail="Password too long (max 128 characters)")


def validate_string_field(
    value: Any,
    field_name: str,
    min_length: int = 1,
    max_length: int = 1000,
    required: bool = True,
) -> str | None:
    """Validate a string field with common rules."""
    if value is None:
        if required:
            raise HTTPException(status_code=400, detail=f"{field_name} is required")
        return None

    if not isinstance(value, str):
        raise HTTPException(status_code=400, detail=f"{field_name} must be a string")

    value = value.strip()

    if required and not value:
        raise HTTPException(status_code=400, detail=f"{field_name} cannot be empty")

    if len(value) < min_length:
        raise HTTPException(
            status_code=400,
            detail=f"{field_name} must be at least {min_length} characters"
        )

    if len(value) > max_length:
        raise HTTPException(
            status_code=400,
            detail=f"{field_name} must not exceed {max_length} characters"
        )

    return value


# -------------------- Resume documents --------------------

_REQUIRED_LIST_FIELDS = ("experience", "education", "skills", "projects")


def _field_error(field: str, message: str) -> dict:
    return {"field": field, "message": message}


def validate_resume_payload(payload: Any, *, partial: bool = False) -> list[dict]:
    """
    Check the top-level shape of a resume document.

    Returns every violation as {field, message}; an empty list means valid.
    With partial=True (updates) only the keys present in `payload` are checked.
    """
    if not isinstance(payload, dict):
        return [_field_error("body", "Resume must be a JSON object")]

    errors: list[dict] = []

    def present(key: str) -> bool:
        return key in payload or not partial

    if present("title"):
        title = payload.get("title")
        if not isinstance(title, str) or not title.strip():
            errors.append(_field_error("title", "Title is required"))

    if present("personalInfo") and not isinstance(payload.get("personalInfo"), dict):
        errors.append(_field_error("personalInfo", "personalInfo must be an object"))

    for key in _REQUIRED_LIST_FIELDS:
        if present(key) and not isinstance(payload.get(key), list):
            errors.append(_field_error(key, f"{key} must be an array"))

    # Optional on create; when given they must still have the right shape.
    if payload.get("certifications") is not None and not isinstance(payload["certifications"], list):
        errors.append(_field_error("certifications", "certifications must be an array"))
    if payload.get("styling") is not None and not isinstance(payload["styling"], dict):
        errors.append(_field_error("styling", "styling must be an object"))
    if "template" in payload and not (isinstance(payload["template"], str) and payload["template"].strip()):
        errors.append(_field_error("template", "template must be a non-empty string"))
    if "isPublic" in payload and not isinstance(payload["isPublic"], bool):
        errors.append(_field_error("isPublic", "isPublic must be a boolean"))

    return errors


def normalize_projects(projects: list) -> list:
    """Force each project's `technologies` to a string; anything else becomes ""."""
    out = []
    for project in projects:
        if isinstance(project, dict):
            technologies = project.get("technologies")
            project = {**project, "technologies": technologies if isinstance(technologies, str) else ""}
        out.append(project)
    return out
