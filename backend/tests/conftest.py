"""Shared test configuration, pytest markers and resume fixtures."""

import pytest

from models.schemas.resume_data import (
    Certification,
    Education,
    Experience,
    PersonalInfo,
    Project,
    ResumeData,
)
from services.extractors import registry


SCENARIO_TEXT = (
    "Jane Doe\nSoftware Engineer\njane@example.com\n\n"
    "EXPERIENCE\nSenior Engineer at Acme Inc | Jan 2020 - Present\n"
    "- Led migration reducing latency by 40%\n\n"
    "EDUCATION\nBachelor of Science in Computer Science\nState University 2016\n\n"
    "SKILLS\nPython, Go, SQL"
)

FULL_RESUME_TEXT = """John Smith
Senior Software Engineer
john.smith@example.com | (555) 123-4567 | San Francisco, CA
linkedin.com/in/johnsmith | github.com/jsmith | https://johnsmith.dev

PROFESSIONAL SUMMARY
Backend engineer with eight years of experience designing distributed systems, leading small teams and shipping reliable APIs for high traffic consumer products.

EXPERIENCE
Staff Engineer at Globex Corp | Mar 2021 - Present
• Designed event pipeline processing 2M messages per day
• Reduced cloud spend by 30% through autoscaling
Software Engineer, Initech LLC | 06/2017 - 02/2021
• Built REST APIs used by 40 internal teams

EDUCATION
B.S. Computer Science | Stanford University | 2017

SKILLS
Python, Go, PostgreSQL, Docker, Kubernetes, AWS

PROJECTS
Ledger | https://github.com/jsmith/ledger
• Double-entry accounting library with 95% test coverage
Technologies: Python, SQLite

CERTIFICATIONS
AWS Certified Solutions Architect - Amazon Web Services (2022)
"""


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "extractors: exercises the real pdfplumber / python-docx libraries"
    )


@pytest.fixture
def scenario_text() -> str:
    return SCENARIO_TEXT


@pytest.fixture
def full_resume_text() -> str:
    return FULL_RESUME_TEXT


@pytest.fixture
def complete_resume() -> ResumeData:
    """Every completeness check satisfied; scored without a job description."""
    descriptions = [
        "• Led a team of 6 engineers rebuilding the billing platform\n"
        "• Reduced invoice processing time by 45%",
        "• Developed 12 internal services handling 3M requests per day\n"
        "• Improved deployment frequency from weekly to daily",
        "• Built reporting dashboards used by 200 account managers\n"
        "• Increased data freshness from 24 hours to 15 minutes",
    ]
    return ResumeData(
        personal=PersonalInfo(
            full_name="Alex Rivera",
            job_title="Senior Software Engineer",
            email="alex@example.com",
            phone="555-123-4567",
            location="Austin, TX",
            summary="Software engineer with ten years of experience building "
                    "payment systems and developer platforms.",
        ),
        experiences=[
            Experience(
                id=f"exp-{i}",
                company=company,
                position="Software Engineer",
                start_date="2015-01",
                end_date="2018-01",
                description=description,
            )
            for i, (company, description) in enumerate(
                zip(["Globex Corp", "Initech LLC", "Hooli Inc"], descriptions)
            )
        ],
        education=[
            Education(id="edu-0", institution="Stanford University", degree="B.S.",
                      field="Computer Science", end_date="2014-05"),
            Education(id="edu-1", institution="MIT", degree="M.S.",
                      field="Computer Science", end_date="2016-05"),
        ],
        skills=["Python", "Go", "SQL", "Docker", "Kubernetes", "AWS",
                "Terraform", "PostgreSQL", "Redis", "React"],
        projects=[Project(id="proj-0", name="Ledger", description="Accounting library")],
        certifications=[Certification(id="cert-0", name="CKA", issuer="CNCF")],
    )


@pytest.fixture
def empty_resume() -> ResumeData:
    return ResumeData(personal=PersonalInfo(full_name="Alex Rivera"))


@pytest.fixture
def fresh_registry():
    """Start and end each test with no extractors created."""
    registry.clear()
    yield registry
    registry.clear()
