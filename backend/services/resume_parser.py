"""Resume import orchestrator.

Flow:
    ResumeFile
      ├─ registry.extractor_for(file)      → PDF / DOCX extractor (or rejection)
      ├─ extractor.extract(data)           → raw text  (worker thread)
      ├─ detect_sections(text)             → SectionMatch[]
      ├─ header region                     → name, job title
      ├─ extract_contact_info(text)        → ParsedContact
      ├─ per-section content parsers       → entries
      └─ confidence + warnings             → ParsedResume → ImportResult
"""

import asyncio
import logging
from datetime import datetime, timezone

from config import Settings, settings as app_settings
from models.responses import ImportResult
from models.schemas.parsed_resume import (
    ParsedCertification,
    ParsedEducation,
    ParsedExperience,
    ParsedProject,
    ParsedResume,
    ParseInfo,
    SectionType,
)
from models.schemas.resume_data import (
    Certification,
    Education,
    Experience,
    PersonalInfo,
    ProfileLink,
    Project,
    ResumeData,
)
from services.content_parser import (
    parse_certifications,
    parse_education,
    parse_experiences,
    parse_projects,
)
from services.errors import UNEXPECTED_ERROR_MESSAGE, EmptyContentError, ResumeImportError
from services.extractors import registry
from services.extractors.base import ResumeFile
from services.section_detector import (
    detect_sections,
    extract_contact_info,
    extract_job_title,
    extract_name,
    parse_skills,
    strip_heading,
)

logger = logging.getLogger(__name__)

BASE_CONFIDENCE = 50

# Named bonuses added to BASE_CONFIDENCE when the field was found
CONFIDENCE_BONUSES: dict[str, int] = {
    "full_name": 10,
    "job_title": 5,
    "email": 10,
    "experiences": 15,
    "education": 10,
}

# Advisory messages attached when the field came back empty
SOFT_WARNINGS: dict[str, str] = {
    "full_name": "Could not detect name. Please verify personal information.",
    "email": "No email address found.",
    "experiences": "No work experience detected. Check section headers.",
    "education": "No education entries detected. Check section headers.",
    "skills": "No skills section detected.",
}

PAGE_WARNING = "Resume has more than {pages} pages. Consider condensing to 1-2 pages for ATS."


def compute_confidence(found: dict[str, object]) -> int:
    """Sum the bonuses whose field is truthy in ``found``, capped at 100."""
    confidence = BASE_CONFIDENCE + sum(
        points for name, points in CONFIDENCE_BONUSES.items() if found.get(name)
    )
    return min(confidence, 100)


def collect_warnings(found: dict[str, object]) -> list[str]:
    return [message for name, message in SOFT_WARNINGS.items() if not found.get(name)]


def parse_resume_text(
    raw_text: str,
    source: str,
    file_name: str,
    warnings: list[str] | None = None,
    settings: Settings | None = None,
) -> ParsedResume:
    """Run the text half of the pipeline.

    Raises EmptyContentError when the text is too short to be a resume.
    """
    settings = settings or app_settings
    if not raw_text or len(raw_text.strip()) < settings.min_text_length:
        raise EmptyContentError()

    warnings = list(warnings or [])
    sections = detect_sections(raw_text)

    header_text = raw_text[:settings.header_region_chars]
    full_name = extract_name(header_text)
    job_title = extract_job_title(header_text, full_name)
    contact = extract_contact_info(raw_text)

    summary: str | None = None
    experiences: list[ParsedExperience] = []
    education: list[ParsedEducation] = []
    skills: list[str] = []
    projects: list[ParsedProject] = []
    certifications: list[ParsedCertification] = []

    # A resume may repeat a heading (e.g. "Experience" continued on page 2)
    for section in sections:
        if section.type == SectionType.SUMMARY:
            if summary is None:
                summary = strip_heading(section.content, SectionType.SUMMARY) or None
        elif section.type == SectionType.EXPERIENCE:
            experiences.extend(parse_experiences(section.content))
        elif section.type == SectionType.EDUCATION:
            education.extend(parse_education(section.content))
        elif section.type == SectionType.SKILLS:
            skills.extend(s for s in parse_skills(section.content) if s not in skills)
        elif section.type == SectionType.PROJECTS:
            projects.extend(parse_projects(section.content))
        elif section.type == SectionType.CERTIFICATIONS:
            certifications.extend(parse_certifications(section.content))

    found = {
        "full_name": full_name,
        "job_title": job_title,
        "email": contact.email,
        "experiences": experiences,
        "education": education,
        "skills": skills,
    }
    confidence = compute_confidence(found)
    warnings.extend(collect_warnings(found))

    logger.info(
        "Parsed %s: %d experience(s), %d education, %d skill(s), confidence %d",
        file_name, len(experiences), len(education), len(skills), confidence,
    )

    return ParsedResume(
        full_name=full_name,
        job_title=job_title,
        contact=contact,
        summary=summary,
        experiences=experiences,
        education=education,
        skills=skills,
        projects=projects,
        certifications=certifications,
        raw_text=raw_text,
        parse_info=ParseInfo(
            source=source,
            file_name=file_name,
            parse_date=datetime.now(timezone.utc).isoformat(),
            confidence=confidence,
            warnings=warnings,
        ),
    )


def import_resume_text(
    raw_text: str, file_name: str, settings: Settings | None = None
) -> ImportResult:
    """Text pipeline wrapped in the success/failure result."""
    try:
        parsed = parse_resume_text(raw_text, "text", file_name, settings=settings)
    except ResumeImportError as e:
        return ImportResult(success=False, error=e.message)
    return ImportResult(success=True, data=parsed)


async def parse_resume_file(
    file: ResumeFile, settings: Settings | None = None
) -> ImportResult:
    """Parse an uploaded PDF or DOCX. Never raises."""
    settings = settings or app_settings
    warnings: list[str] = []
    try:
        extractor = registry.extractor_for(file)
        extracted = await asyncio.to_thread(extractor.extract, file.data)

        if extracted.pages is not None and extracted.pages > settings.max_recommended_pages:
            warnings.append(PAGE_WARNING.format(pages=settings.max_recommended_pages))
        warnings.extend(extracted.messages)

        parsed = parse_resume_text(
            extracted.text, extractor.source, file.filename, warnings, settings=settings
        )
    except ResumeImportError as e:
        logger.warning("Import of %s failed: %s", file.filename, e.message)
        return ImportResult(success=False, error=e.message)
    except Exception as e:
        logger.exception("Unexpected error while parsing %s", file.filename)
        return ImportResult(success=False, error=str(e) or UNEXPECTED_ERROR_MESSAGE)

    return ImportResult(success=True, data=parsed)


def convert_to_resume_data(parsed: ParsedResume) -> ResumeData:
    """Map a parsed import onto the editable resume record."""
    contact = parsed.contact
    links: list[ProfileLink] = []
    if contact.linkedin:
        links.append(ProfileLink(
            id="imported-link-linkedin", type="linkedin", url=contact.linkedin, label="LinkedIn",
        ))
    if contact.github:
        links.append(ProfileLink(
            id="imported-link-github", type="github", url=contact.github, label="GitHub",
        ))
    if contact.website:
        links.append(ProfileLink(
            id="imported-link-website", type="portfolio", url=contact.website, label="Portfolio",
        ))

    return ResumeData(
        personal=PersonalInfo(
            full_name=parsed.full_name or "",
            job_title=parsed.job_title or "",
            email=contact.email or "",
            phone=contact.phone or "",
            location=contact.location or "",
            summary=parsed.summary or "",
        ),
        experiences=[
            Experience(
                id=f"imported-exp-{i}",
                company=exp.company,
                position=exp.position,
                start_date=exp.start_date or "",
                end_date=exp.end_date or "",
                current=exp.current,
                description=exp.description,
            )
            for i, exp in enumerate(parsed.experiences)
        ],
        education=[
            Education(
                id=f"imported-edu-{i}",
                institution=edu.institution,
                degree=edu.degree,
                field=edu.field or "",
                start_date=edu.start_date or "",
                end_date=edu.end_date or "",
                description=edu.description or "",
            )
            for i, edu in enumerate(parsed.education)
        ],
        skills=list(parsed.skills),
        projects=[
            Project(
                id=f"imported-proj-{i}",
                name=proj.name,
                role=proj.role,
                url=proj.url,
                start_date=proj.start_date,
                end_date=proj.end_date,
                current=proj.current,
                description=proj.description,
                technologies=proj.technologies,
            )
            for i, proj in enumerate(parsed.projects)
        ],
        certifications=[
            Certification(
                id=f"imported-cert-{i}",
                name=cert.name,
                issuer=cert.issuer,
                issue_date=cert.issue_date,
                expiry_date=cert.expiry_date,
                credential_id=cert.credential_id,
                credential_url=cert.credential_url,
            )
            for i, cert in enumerate(parsed.certifications)
        ],
        links=links,
    )


class ImportTracker:
    """Discards import results that were overtaken by a newer import.

    Each ``run`` takes a ticket; when it finishes, its result is only
    accepted if no later ``run`` (or ``begin``) was issued meanwhile.
    """

    def __init__(self) -> None:
        self._ticket = 0
        self.latest: ImportResult | None = None

    def begin(self) -> int:
        self._ticket += 1
        return self._ticket

    def is_current(self, ticket: int) -> bool:
        return ticket == self._ticket

    async def run(
        self, file: ResumeFile, settings: Settings | None = None
    ) -> ImportResult | None:
        ticket = self.begin()
        result = await parse_resume_file(file, settings)
        if not self.is_current(ticket):
            logger.info("Discarding stale import of %s (ticket %d)", file.filename, ticket)
            return None
        self.latest = result
        return result
