import json
from typing import Any


def _dump(value: Any) -> str:
    return json.dumps(value if value is not None else [], ensure_ascii=False)


def suggestion_system_prompt() -> str:
    return (
        "You are a professional resume writer and career coach. "
        "Provide specific, actionable suggestions for improving resume content."
    )


def suggestion_user_prompt(*, section: str, current_content: dict[str, Any]) -> str:
    content = current_content or {}
    if section == "personalInfo":
        return (
            "Improve this professional summary for a resume. Make it concise, impactful, "
            f'and focused on achievements: "{content.get("summary") or ""}"'
        )
    if section == "experience":
        return (
            "Enhance these job descriptions with strong action verbs and quantifiable achievements: "
            f"{_dump(content.get('experience'))}"
        )
    if section == "education":
        return (
            "Suggest achievements and relevant coursework to add to this education section: "
            f"{_dump(content.get('education'))}"
        )
    if section == "skills":
        return (
            "Based on these existing skills, suggest additional relevant skills and optimized descriptions: "
            f"{_dump(content.get('skills'))}"
        )
    if section == "projects":
        return (
            "Improve these project descriptions with impactful bullet points highlighting "
            f"technical skills and achievements: {_dump(content.get('projects'))}"
        )
    raise ValueError(f"Unknown resume section: {section}")


def ats_system_prompt() -> str:
    return (
        "You are an ATS optimization expert. Provide specific suggestions for improving "
        "resume content to pass ATS screening."
    )


def ats_user_prompt(*, resume_content: dict[str, Any], job_description: str) -> str:
    return (
        "Analyze this resume content and job description for ATS optimization.\n\n"
        "Resume:\n"
        "-----\n"
        f"{_dump(resume_content)}\n"
        "-----\n\n"
        "Job description:\n"
        "-----\n"
        f"{job_description or ''}\n"
        "-----\n\n"
        "Provide suggestions for:\n"
        "1. Keyword optimization\n"
        "2. Format improvements\n"
        "3. Content relevance\n"
        "4. Missing important skills or experience\n"
    )


def cover_letter_system_prompt() -> str:
    return "You are a professional cover letter writer."


def cover_letter_user_prompt(*, resume_content: dict[str, Any], job_description: str, company_name: str) -> str:
    return (
        f"Generate a professional cover letter for {company_name} based on the resume and job below.\n\n"
        "Resume:\n"
        "-----\n"
        f"{_dump(resume_content)}\n"
        "-----\n\n"
        "Job description:\n"
        "-----\n"
        f"{job_description or ''}\n"
        "-----\n\n"
        "The cover letter should:\n"
        "1. Be personalized to the company and position\n"
        "2. Highlight relevant experience and skills\n"
        "3. Show enthusiasm and fit for the role\n"
        "4. Be concise and well-structured\n"
    )
