import logging
from dataclasses import dataclass
from typing import Any

from fastapi import Request

from ..config import (
    AI_COVER_LETTER_TIMEOUT_S,
    AI_LOG_PAYLOADS,
    AI_MAX_RETRIES,
    AI_TIMEOUT_S,
    GEMINI_API_KEY,
    GEMINI_API_VERSION,
    GEMINI_BASE_URL,
    GEMINI_MODEL,
)
from ..utils.error_handlers import AIServiceError, ValidationError, get_error_message
from .ai_client import AIClientError, CompletionClient
from .ai_prompts import (
    ats_system_prompt,
    ats_user_prompt,
    cover_letter_system_prompt,
    cover_letter_user_prompt,
    suggestion_system_prompt,
    suggestion_user_prompt,
)


logger = logging.getLogger(__name__)

SECTIONS = ("personalInfo", "experience", "education", "skills", "projects")

FALLBACK_SUGGESTIONS = {
    "personalInfo": (
        "Results-driven professional with a proven track record of success in [industry]. "
        "Skilled in [skill 1], [skill 2], and [skill 3]. Passionate about delivering "
        "high-quality solutions that drive business growth."
    ),
    "experience": (
        "• Increased department productivity by 20% through implementation of new workflow processes\n"
        "• Led a team of 5 members to successfully deliver project ahead of schedule\n"
        "• Reduced operational costs by 15% through strategic optimizations"
    ),
    "education": (
        "• Dean's List for academic excellence (4 semesters)\n"
        "• Relevant coursework: Advanced Statistics, Data Structures, Machine Learning\n"
        "• Graduated with honors, top 10% of class"
    ),
    "skills": (
        "Technical Skills:\n"
        "• Programming Languages: Python, JavaScript, SQL\n"
        "• Tools & Frameworks: React, Node.js, Docker\n"
        "• Concepts: Agile Development, CI/CD, Data Analysis"
    ),
    "projects": (
        "• Designed and implemented key features that improved user engagement by 35%\n"
        "• Collaborated with cross-functional teams to deliver project under tight deadlines\n"
        "• Implemented automated testing suite that reduced bugs by 40%"
    ),
}

FALLBACK_ATS = (
    "Based on the job description, consider adding more keywords related to required skills. "
    "Quantify your achievements with metrics. Customize your resume summary to match the job description."
)


@dataclass(frozen=True)
class SuggestionResult:
    text: str
    from_fallback: bool = False


class SuggestionGateway:
    """
    Prompt construction plus a single call to the completion provider.

    `client` is None when no API key is configured; suggestion and ATS calls
    then answer from the canned fallbacks, cover letters fail.
    """

    def __init__(self, client: CompletionClient | None, *, cover_letter_timeout_s: float = 30.0):
        self.client = client
        self.cover_letter_timeout_s = cover_letter_timeout_s

    async def suggest(self, section: str, current_content: dict[str, Any] | None = None) -> SuggestionResult:
        if section not in SECTIONS:
            raise ValidationError(
                get_error_message("invalid_section"),
                errors=[{"field": "section", "message": f"section must be one of: {', '.join(SECTIONS)}"}],
            )

        prompt = suggestion_user_prompt(section=section, current_content=current_content or {})
        text = await self._complete_or_none(
            operation=f"suggestions:{section}",
            user_text=prompt,
            system_text=suggestion_system_prompt(),
            max_output_tokens=500,
        )
        if text is None:
            return SuggestionResult(FALLBACK_SUGGESTIONS[section], from_fallback=True)
        return SuggestionResult(text)

    async def optimize_for_job(self, resume_content: dict[str, Any], job_description: str) -> SuggestionResult:
        text = await self._complete_or_none(
            operation="optimize",
            user_text=ats_user_prompt(resume_content=resume_content, job_description=job_description),
            system_text=ats_system_prompt(),
            max_output_tokens=500,
        )
        if text is None:
            return SuggestionResult(FALLBACK_ATS, from_fallback=True)
        return SuggestionResult(text)

    async def generate_cover_letter(self, resume_content: dict[str, Any], job_description: str, company_name: str) -> str:
        if self.client is None:
            raise AIServiceError(get_error_message("cover_letter_failed"), details={"cause": "not_configured"})
        try:
            text, _ = await self.client.complete(
                user_text=cover_letter_user_prompt(
                    resume_content=resume_content,
                    job_description=job_description,
                    company_name=company_name,
                ),
                system_text=cover_letter_system_prompt(),
                max_output_tokens=1000,
                timeout_s=self.cover_letter_timeout_s,
            )
        except AIClientError as e:
            logger.error("Cover letter generation failed: %s", e)
            raise AIServiceError(get_error_message("cover_letter_failed")) from e
        return text

    async def _complete_or_none(self, *, operation: str, user_text: str, system_text: str, max_output_tokens: int) -> str | None:
        if self.client is None:
            logger.info("AI provider not configured; using fallback for %s", operation)
            return None
        try:
            text, _ = await self.client.complete(
                user_text=user_text,
                system_text=system_text,
                max_output_tokens=max_output_tokens,
            )
        except AIClientError as e:
            logger.warning("AI call failed for %s (%s); using fallback", operation, type(e).__name__)
            return None
        return text


def build_suggestion_gateway() -> SuggestionGateway:
    client = None
    if GEMINI_API_KEY:
        client = CompletionClient(
            api_key=GEMINI_API_KEY,
            model=GEMINI_MODEL,
            base_url=GEMINI_BASE_URL,
            api_version=GEMINI_API_VERSION,
            timeout_s=AI_TIMEOUT_S,
            max_retries=AI_MAX_RETRIES,
            log_payloads=AI_LOG_PAYLOADS,
        )
    else:
        logger.warning("GEMINI_API_KEY not configured; AI suggestions will use fallbacks.")
    return SuggestionGateway(client, cover_letter_timeout_s=AI_COVER_LETTER_TIMEOUT_S)


def get_suggestion_gateway(request: Request) -> SuggestionGateway:
    return request.app.state.suggestion_gateway
