"""The application's resume record, as edited in the builder UI and scored."""

from typing import Literal

from pydantic import BaseModel

LinkType = Literal[
    "linkedin", "github", "portfolio", "website",
    "twitter", "dribbble", "behance", "other",
]


class PersonalInfo(BaseModel):
    full_name: str = ""
    job_title: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    summary: str = ""


class Experience(BaseModel):
    id: str
    company: str = ""
    position: str = ""
    start_date: str = ""
    end_date: str = ""
    current: bool = False
    description: str = ""


class Education(BaseModel):
    id: str
    institution: str = ""
    degree: str = ""
    field: str = ""
    start_date: str = ""
    end_date: str = ""
    description: str = ""


class Project(BaseModel):
    id: str
    name: str = ""
    role: str | None = None
    url: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    current: bool | None = None
    description: str = ""
    technologies: list[str] | None = None


class Certification(BaseModel):
    id: str
    name: str = ""
    issuer: str = ""
    issue_date: str | None = None
    expiry_date: str | None = None
    credential_id: str | None = None
    credential_url: str | None = None
    no_expiry: bool | None = None


class ProfileLink(BaseModel):
    id: str
    type: LinkType
    url: str
    label: str | None = None


class ExpertiseArea(BaseModel):
    id: str
    category: str = ""
    keywords: list[str] = []


class ResumeData(BaseModel):
    personal: PersonalInfo = PersonalInfo()
    experiences: list[Experience] = []
    education: list[Education] = []
    skills: list[str] = []
    projects: list[Project] = []
    certifications: list[Certification] = []
    expertise_areas: list[ExpertiseArea] = []
    links: list[ProfileLink] = []
