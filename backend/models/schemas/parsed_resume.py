"""Structured output of the resume import pipeline."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field


class SectionType(str, Enum):
    CONTACT = "contact"
    SUMMARY = "summary"
    EXPERIENCE = "experience"
    EDUCATION = "education"
    SKILLS = "skills"
    PROJECTS = "projects"
    CERTIFICATIONS = "certifications"
    LINKS = "links"
    UNKNOWN = "unknown"


class SectionMatch(BaseModel):
    """A labeled region of the source text.

    ``start_index``/``end_index`` are character offsets into the text the
    section was detected in; ``content`` includes the heading line.
    """
    type: SectionType
    start_index: int
    end_index: int
    content: str
    confidence: int = Field(ge=0, le=100)


class ParsedContact(BaseModel):
    email: str | None = None
    phone: str | None = None
    location: str | None = None
    linkedin: str | None = None
    github: str | None = None
    website: str | None = None


class ParsedExperience(BaseModel):
    company: str
    position: str
    start_date: str | None = None  # YYYY-MM
    end_date: str | None = None
    current: bool = False
    description: str = ""
    bullets: list[str] = []


class ParsedEducation(BaseModel):
    institution: str
    degree: str
    field: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    description: str | None = None


class ParsedProject(BaseModel):
    name: str
    role: str | None = None
    url: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    current: bool | None = None
    description: str = ""
    technologies: list[str] | None = None


class ParsedCertification(BaseModel):
    name: str
    issuer: str = "Unknown Issuer"
    issue_date: str | None = None
    expiry_date: str | None = None
    credential_id: str | None = None
    credential_url: str | None = None


class ParseInfo(BaseModel):
    source: Literal["pdf", "docx", "text"]
    file_name: str
    parse_date: str  # ISO-8601, UTC
    confidence: int = Field(ge=0, le=100)
    warnings: list[str] = []


class ParsedResume(BaseModel):
    """Everything recovered from one imported file. Built once, never mutated."""
    full_name: str | None = None
    job_title: str | None = None
    contact: ParsedContact = ParsedContact()
    summary: str | None = None

    experiences: list[ParsedExperience] = []
    education: list[ParsedEducation] = []
    skills: list[str] = []
    projects: list[ParsedProject] = []
    certifications: list[ParsedCertification] = []

    raw_text: str = ""
    parse_info: ParseInfo

    model_config = {"frozen": True}
