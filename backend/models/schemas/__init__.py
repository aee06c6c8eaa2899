"""Pydantic contracts shared by the import pipeline and the ATS scorer."""

from models.schemas.parsed_resume import (
    ParsedCertification,
    ParsedContact,
    ParsedEducation,
    ParsedExperience,
    ParsedProject,
    ParsedResume,
    ParseInfo,
    SectionMatch,
    SectionType,
)
from models.schemas.resume_data import (
    Certification,
    Education,
    Experience,
    ExpertiseArea,
    PersonalInfo,
    ProfileLink,
    Project,
    ResumeData,
)

__all__ = [
    "ParsedCertification",
    "ParsedContact",
    "ParsedEducation",
    "ParsedExperience",
    "ParsedProject",
    "ParsedResume",
    "ParseInfo",
    "SectionMatch",
    "SectionType",
    "Certification",
    "Education",
    "Experience",
    "ExpertiseArea",
    "PersonalInfo",
    "ProfileLink",
    "Project",
    "ResumeData",
]
