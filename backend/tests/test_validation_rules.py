"""
Validation helpers: auth input checks and resume document shape rules.
"""
import pytest
from fastapi import HTTPException

from backend.app.utils.validation import (
    normalize_projects,
    validate_email,
    validate_password,
    validate_resume_payload,
    validate_string_field,
)
from backend.app.utils.error_handlers import (
    NotFoundError,
    UnauthorizedError,
    ValidationError,
    get_error_message,
    handle_database_error,
)


class TestEmailValidation:
    def test_valid_email(self):
        assert validate_email("test@example.com") == "test@example.com"
        assert validate_email("USER@EXAMPLE.COM") == "user@example.com"
        assert validate_email("  test@example.com  ") == "test@example.com"

    def test_invalid_email_format(self):
        with pytest.raises(HTTPException) as exc:
            validate_email("invalid")
        assert exc.value.status_code == 400
        assert "Invalid email format" in str(exc.value.detail)

    def test_empty_email(self):
        with pytest.raises(HTTPException) as exc:
            validate_email("")
        assert exc.value.status_code == 400


class TestPasswordValidation:
    def test_valid_password(self):
        validate_password("123456")

    def test_too_short(self):
        with pytest.raises(HTTPException) as exc:
            validate_password("12345")
        assert "at least 6" in exc.value.detail

    def test_too_long(self):
        with pytest.raises(HTTPException):
            validate_password("a" * 129)


class TestStringField:
    def test_strips(self):
        assert validate_string_field("  Ada  ", "Name") == "Ada"

    def test_blank_required(self):
        with pytest.raises(HTTPException) as exc:
            validate_string_field("   ", "Name")
        assert "cannot be empty" in exc.value.detail

    def test_optional_none(self):
        assert validate_string_field(None, "Name", required=False) is None


class TestResumePayload:
    def _valid(self, **overrides):
        body = {
            "title": "CV",
            "personalInfo": {},
            "experience": [],
            "education": [],
            "skills": [],
            "projects": [],
        }
        body.update(overrides)
        return body

    def test_valid_payload_has_no_errors(self):
        assert validate_resume_payload(self._valid()) == []

    def test_non_object_payload(self):
        assert validate_resume_payload(["not", "a", "dict"]) == [
            {"field": "body", "message": "Resume must be a JSON object"}
        ]

    def test_lists_every_missing_field_on_create(self):
        fields = [e["field"] for e in validate_resume_payload({})]
        assert fields == ["title", "personalInfo", "experience", "education", "skills", "projects"]

    def test_partial_checks_only_present_keys(self):
        assert validate_resume_payload({"template": "classic"}, partial=True) == []
        errors = validate_resume_payload({"skills": {}}, partial=True)
        assert [e["field"] for e in errors] == ["skills"]

    def test_optional_fields_checked_when_present(self):
        errors = validate_resume_payload(
            self._valid(certifications="x", styling=[], template="", isPublic="yes")
        )
        assert {e["field"] for e in errors} == {"certifications", "styling", "template", "isPublic"}

    def test_null_optional_fields_are_allowed(self):
        assert validate_resume_payload(self._valid(certifications=None, styling=None)) == []


class TestNormalizeProjects:
    def test_non_string_technologies_become_empty(self):
        projects = [
            {"name": "a", "technologies": {"x": 1}},
            {"name": "b", "technologies": 42},
            {"name": "c"},
            {"name": "d", "technologies": "Go"},
        ]
        assert [p["technologies"] for p in normalize_projects(projects)] == ["", "", "", "Go"]

    def test_does_not_mutate_input(self):
        projects = [{"name": "a", "technologies": {"x": 1}}]
        normalize_projects(projects)
        assert projects[0]["technologies"] == {"x": 1}

    def test_leaves_non_objects_for_schema_validation(self):
        assert normalize_projects(["oops"]) == ["oops"]


class TestErrorTypes:
    def test_validation_error_carries_field_list(self):
        err = ValidationError("bad", errors=[{"field": "title", "message": "Title is required"}])
        assert err.status_code == 400
        assert err.details["errors"][0]["field"] == "title"

    def test_unauthorized_carries_reason(self):
        err = UnauthorizedError("expired", reason="token_expired")
        assert err.status_code == 401
        assert err.details == {"reason": "token_expired"}

    def test_not_found_default(self):
        assert NotFoundError().status_code == 404

    def test_get_error_message_default(self):
        assert get_error_message("no-such-key") == get_error_message("server_error")

    def test_handle_database_error_unique(self):
        exc = handle_database_error(Exception("UNIQUE constraint failed: users.email"), "insert")
        assert exc.status_code == 409
