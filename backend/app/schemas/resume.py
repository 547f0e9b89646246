from pydantic import BaseModel, ConfigDict, Field


class _Section(BaseModel):
    # Unknown keys are dropped on write, like a strict document schema.
    model_config = ConfigDict(extra="ignore")


class PersonalInfo(_Section):
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    location: str | None = None
    website: str | None = None
    summary: str | None = None


class ExperienceEntry(_Section):
    company: str | None = None
    position: str | None = None
    startDate: str | None = None
    endDate: str | None = None
    description: str | None = None
    achievements: list[str] = Field(default_factory=list)


class EducationEntry(_Section):
    institution: str | None = None
    degree: str | None = None
    field: str | None = None
    startDate: str | None = None
    endDate: str | None = None
    gpa: str | None = Field(default=None, coerce_numbers_to_str=True)
    achievements: list[str] = Field(default_factory=list)


class SkillCategory(_Section):
    category: str | None = None
    items: list[str] = Field(default_factory=list)


class Project(_Section):
    name: str | None = None
    description: str | None = None
    technologies: str = ""
    startDate: str | None = None
    endDate: str | None = None
    role: str | None = None
    achievements: str | None = None
    link: str | None = None


class Certification(_Section):
    name: str | None = None
    issuer: str | None = None
    date: str | None = None
    expiryDate: str | None = None


class Styling(_Section):
    fontFamily: str | None = None
    fontSize: str | None = None
    colorScheme: str | None = None
    spacing: str | None = None


# Wire key -> (model column, entry schema, is_list)
RESUME_SECTIONS: dict[str, tuple[str, type[BaseModel], bool]] = {
    "personalInfo": ("personal_info", PersonalInfo, False),
    "experience": ("experience", ExperienceEntry, True),
    "education": ("education", EducationEntry, True),
    "skills": ("skills", SkillCategory, True),
    "projects": ("projects", Project, True),
    "certifications": ("certifications", Certification, True),
    "styling": ("styling", Styling, False),
}
