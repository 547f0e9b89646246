import logging

from fastapi import APIRouter, Depends

from ..schemas.ai import (
    CoverLetterRequest,
    CoverLetterResponse,
    OptimizeRequest,
    SuggestionRequest,
    SuggestionResponse,
)
from ..services.suggestions import SuggestionGateway, get_suggestion_gateway
from ..utils.dependencies import AuthContext, get_current_user
from ..utils.validation import validate_string_field

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["AI"])


@router.post("/suggestions", response_model=SuggestionResponse)
async def suggestions(
    payload: SuggestionRequest,
    gateway: SuggestionGateway = Depends(get_suggestion_gateway),
    auth: AuthContext = Depends(get_current_user),
):
    result = await gateway.suggest(payload.section, payload.currentContent)
    return {"suggestions": result.text, "fromFallback": result.from_fallback}


@router.post("/optimize", response_model=SuggestionResponse)
async def optimize(
    payload: OptimizeRequest,
    gateway: SuggestionGateway = Depends(get_suggestion_gateway),
    auth: AuthContext = Depends(get_current_user),
):
    job_description = validate_string_field(payload.jobDescription, "jobDescription", max_length=20000)
    result = await gateway.optimize_for_job(payload.resumeContent, job_description)
    return {"suggestions": result.text, "fromFallback": result.from_fallback}


@router.post("/cover-letter", response_model=CoverLetterResponse)
async def cover_letter(
    payload: CoverLetterRequest,
    gateway: SuggestionGateway = Depends(get_suggestion_gateway),
    auth: AuthContext = Depends(get_current_user),
):
    job_description = validate_string_field(payload.jobDescription, "jobDescription", max_length=20000)
    company_name = validate_string_field(payload.companyName, "companyName", max_length=255)
    logger.info("Generating cover letter for user id=%s", auth.user_id)
    text = await gateway.generate_cover_letter(payload.resumeContent, job_description, company_name)
    return {"coverLetter": text}
