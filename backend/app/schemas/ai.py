from typing import Any

from pydantic import BaseModel


class SuggestionRequest(BaseModel):
    # Checked against SECTIONS by the gateway so bad values get the same error shape.
    section: str
    currentContent: dict[str, Any] | None = None


class OptimizeRequest(BaseModel):
    resumeContent: dict[str, Any]
    jobDescription: str


class CoverLetterRequest(BaseModel):
    resumeContent: dict[str, Any]
    jobDescription: str
    companyName: str


class SuggestionResponse(BaseModel):
    suggestions: str
    fromFallback: bool = False


class CoverLetterResponse(BaseModel):
    coverLetter: str
