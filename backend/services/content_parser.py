"""Line-oriented parsers that turn section text into structured entries.

Experience and education are small state machines: a boundary line (a date
range, a degree keyword) closes the entry being accumulated and opens a new
one; reaching the end of the section closes the last entry.
"""

import logging
import re
from dataclasses import dataclass, field

from models.schemas.parsed_resume import (
    ParsedCertification,
    ParsedEducation,
    ParsedExperience,
    ParsedProject,
    SectionType,
)
from services.section_detector import (
    DATE_RANGE_RE,
    MONTHS,
    URL_RE,
    heading_remainder,
    is_open_ended,
    parse_date,
)

logger = logging.getLogger(__name__)

# Bullet markers: standard + expanded unicode set
BULLET_MARKERS = "•-–—►▪✓*○◆⚫→▸▹◇■□●·"

_PAGE_BREAK_RE = re.compile(r"^-+\s*page break\s*-+$", re.IGNORECASE)
_SEPARATORS = " \t|,-–—"


def _content_lines(content: str, section_type: SectionType) -> list[str]:
    """Trimmed, non-empty lines with the leading heading and page breaks removed.

    Content written inline after the heading ("Certifications: CKA (CNCF)")
    becomes the first line.
    """
    lines = [
        line.strip() for line in content.split("\n")
        if line.strip() and not _PAGE_BREAK_RE.match(line.strip())
    ]
    if lines:
        remainder = heading_remainder(lines[0], section_type)
        if remainder is not None:
            lines = ([remainder] if remainder else []) + lines[1:]
    return lines


def strip_bullet(line: str) -> str | None:
    """Return the line without its bullet marker, or None if it has none."""
    if line and line[0] in BULLET_MARKERS:
        return line.lstrip(BULLET_MARKERS + " \t").strip()
    return None


# ---------------------------------------------------------------------------
# Experience
# ---------------------------------------------------------------------------

ORG_SUFFIX_RE = re.compile(
    r"\b(?:inc|llc|ltd|corp|company|technologies|solutions|group|services)\b", re.IGNORECASE
)
_TITLE_COMPANY_SPLIT_RE = re.compile(r"\s+at\s+|\s*[|,]\s*", re.IGNORECASE)

# Unprefixed lines shorter than this are noise, not description
_MIN_CONTINUATION_LENGTH = 11


def split_title_company(text: str) -> tuple[str, str]:
    """Split "Position at Company" / "Position, Company" / "Position | Company"."""
    parts = [p.strip() for p in _TITLE_COMPANY_SPLIT_RE.split(text) if p.strip()]
    if len(parts) >= 2:
        return parts[0], parts[1]
    return text.strip(), ""


@dataclass
class _ExperienceDraft:
    position: str = ""
    company: str = ""
    start_date: str | None = None
    end_date: str | None = None
    current: bool = False
    bullets: list[str] = field(default_factory=list)

    def add_text(self, text: str) -> None:
        """Unprefixed text continues the last bullet, or starts the first one."""
        if len(text) < _MIN_CONTINUATION_LENGTH:
            return
        if self.bullets:
            self.bullets[-1] = f"{self.bullets[-1]} {text}"
        else:
            self.bullets.append(text)

    def is_identified(self) -> bool:
        return bool(self.company or self.position)

    def finalize(self) -> ParsedExperience:
        return ParsedExperience(
            company=self.company or "Unknown Company",
            position=self.position or "Unknown Position",
            start_date=self.start_date,
            end_date=self.end_date,
            current=self.current,
            description="\n".join(self.bullets),
            bullets=list(self.bullets),
        )


class _ExperienceStateMachine:
    """Accumulates one job at a time; date-range lines are entry boundaries.

    An unprefixed line is held as ``pending`` until the next line decides
    whether it heads a new entry (a date line follows) or continues the
    current one.
    """

    def __init__(self) -> None:
        self.entries: list[ParsedExperience] = []
        self.draft: _ExperienceDraft | None = None
        self.pending: str | None = None

    def feed(self, line: str) -> None:
        match = DATE_RANGE_RE.search(line)
        if match:
            self._open_entry(line, match)
            return

        bullet = strip_bullet(line)
        if bullet is not None:
            self._flush_pending()
            if self.draft and bullet:
                self.draft.bullets.append(bullet)
            return

        self._flush_pending()
        if self.draft and not self.draft.company and ORG_SUFFIX_RE.search(line):
            self.draft.company = line
            return
        self.pending = line

    def finish(self) -> list[ParsedExperience]:
        self._flush_pending()
        self._close_entry()
        return self.entries

    def _flush_pending(self) -> None:
        if self.pending and self.draft:
            self.draft.add_text(self.pending)
        self.pending = None

    def _close_entry(self) -> None:
        if self.draft and self.draft.is_identified():
            self.entries.append(self.draft.finalize())
        elif self.draft:
            logger.debug("Dropping experience entry with no company or position")
        self.draft = None

    def _open_entry(self, line: str, match: re.Match) -> None:
        before = line[:match.start()].strip(_SEPARATORS)
        after = line[match.end():].strip(_SEPARATORS)

        position, company = split_title_company(before) if before else ("", "")
        if after and not company:
            company = after

        if not position and self.pending:
            position, header_company = split_title_company(self.pending)
            company = company or header_company
            self.pending = None
        elif not company and self.pending and ORG_SUFFIX_RE.search(self.pending):
            # "Acme Inc" on the line above "Engineer | 2019 - 2021"
            company = self.pending
            self.pending = None
        else:
            self._flush_pending()
        self._close_entry()

        end_token = match.group("end")
        current = is_open_ended(end_token)
        self.draft = _ExperienceDraft(
            position=position,
            company=company,
            start_date=parse_date(match.group("start")),
            end_date=None if current else parse_date(end_token),
            current=current,
        )


def parse_experiences(content: str) -> list[ParsedExperience]:
    """Parse an experience section into job entries."""
    machine = _ExperienceStateMachine()
    for line in _content_lines(content, SectionType.EXPERIENCE):
        machine.feed(line)
    return machine.finish()


# ---------------------------------------------------------------------------
# Education
# ---------------------------------------------------------------------------

DEGREE_RE = re.compile(
    r"\b(?:bachelor'?s?|master'?s?|ph\.?d\.?|mba|bs|ba|ms|ma|b\.?s\.?|b\.?a\.?|"
    r"m\.?s\.?|m\.?a\.?|associate'?s?|diploma|certificate)(?!\w)",
    re.IGNORECASE,
)
_DEGREE_WITH_SUBJECT_RE = re.compile(
    r"\b(?P<level>bachelor'?s?|master'?s?|ph\.?d\.?|mba|bs|ba|ms|ma|associate'?s?)"
    r"\s+(?:(?P<connector>of|in)\s+)?"
    r"(?P<rest>[A-Za-z][\w&]*(?:\s+[A-Za-z][\w&]*)*)",
    re.IGNORECASE,
)
_FIELD_AFTER_DEGREE_RE = re.compile(r"^[\s.]*(?:in\s+)?([A-Za-z][\w&]*(?:\s+[A-Za-z][\w&]*)*)", re.IGNORECASE)
_IN_RE = re.compile(r"\s+in\s+", re.IGNORECASE)
INSTITUTION_RE = re.compile(r"\b(?:university|college|institute|school|academy)\b", re.IGNORECASE)
_FOUR_DIGIT_RE = re.compile(r"\b(\d{4})\b")
_GRAD_YEAR_RE = re.compile(r"\b(?:19|20)\d{2}\b")

# Graduation month assumed when only a year is given
GRADUATION_MONTH = "05"


def split_degree_field(line: str) -> tuple[str, str]:
    """Pull a (degree, field) pair out of a line containing a degree keyword."""
    match = _DEGREE_WITH_SUBJECT_RE.search(line)
    if match:
        level = match.group("level")
        connector = (match.group("connector") or "").lower()
        rest = match.group("rest").strip()
        parts = _IN_RE.split(rest, maxsplit=1)

        if connector == "in":
            return level, rest
        if len(parts) == 2:
            subject, field_name = parts
            joiner = " of " if connector == "of" else " "
            return f"{level}{joiner}{subject}", field_name
        if connector == "of":
            return f"{level} of {rest}", rest
        return level, rest

    match = find_degree(line)
    if not match:
        return "", ""
    after = _FIELD_AFTER_DEGREE_RE.search(line[match.end():])
    return match.group().strip(), after.group(1) if after else ""


def find_degree(line: str) -> re.Match | None:
    """First degree keyword in the line, ignoring state codes like ", MA"."""
    for match in DEGREE_RE.finditer(line):
        if len(match.group()) == 2 and line[:match.start()].rstrip().endswith(","):
            continue
        return match
    return None


def _institution_from(line: str) -> tuple[str, str | None]:
    """Institution text with its year removed, plus an assumed graduation date."""
    year = _FOUR_DIGIT_RE.search(line)
    institution = _FOUR_DIGIT_RE.sub("", line, count=1).strip(_SEPARATORS + "()")
    end_date = f"{year.group(1)}-{GRADUATION_MONTH}" if year else None
    return institution, end_date


@dataclass
class _EducationDraft:
    degree: str = ""
    field_name: str = ""
    institution: str = ""
    end_date: str | None = None

    def finalize(self) -> ParsedEducation:
        return ParsedEducation(
            institution=self.institution or "Unknown Institution",
            degree=self.degree or "Degree",
            field=self.field_name or None,
            end_date=self.end_date,
        )


class _EducationStateMachine:
    """Accumulates one degree at a time; degree-keyword lines are boundaries.

    An institution line seen while no entry can take it is carried over to
    the next degree.
    """

    def __init__(self) -> None:
        self.entries: list[ParsedEducation] = []
        self.draft: _EducationDraft | None = None
        self.pending_institution: tuple[str, str | None] | None = None

    def feed(self, line: str) -> None:
        if find_degree(line):
            self._open_entry(line)
            return

        if INSTITUTION_RE.search(line):
            if self.draft and not self.draft.institution:
                institution, end_date = _institution_from(line)
                self.draft.institution = institution
                self.draft.end_date = self.draft.end_date or end_date
            else:
                self.pending_institution = _institution_from(line)
            return

        if self.draft and not self.draft.end_date:
            year = _GRAD_YEAR_RE.search(line)
            if year:
                self.draft.end_date = f"{year.group()}-{GRADUATION_MONTH}"

    def finish(self) -> list[ParsedEducation]:
        self._close_entry()
        return self.entries

    def _close_entry(self) -> None:
        if self.draft and (self.draft.institution or self.draft.degree):
            self.entries.append(self.draft.finalize())
        self.draft = None

    def _open_entry(self, line: str) -> None:
        self._close_entry()
        segments = [s.strip() for s in re.split(r"\s*[|,]\s*", line) if s.strip()]
        degree_part = next((s for s in segments if find_degree(s)), line)
        degree, field_name = split_degree_field(degree_part)
        self.draft = _EducationDraft(degree=degree.strip(), field_name=field_name.strip())

        # "B.S. Computer Science | State University | 2019" on one line
        inline = next((s for s in segments if INSTITUTION_RE.search(s) and s != degree_part), None)
        if inline:
            self.draft.institution, self.draft.end_date = _institution_from(inline)
            year = _GRAD_YEAR_RE.search(line)
            if not self.draft.end_date and year:
                self.draft.end_date = f"{year.group()}-{GRADUATION_MONTH}"
        elif self.pending_institution:
            self.draft.institution, self.draft.end_date = self.pending_institution
        self.pending_institution = None


def parse_education(content: str) -> list[ParsedEducation]:
    """Parse an education section into degree entries."""
    machine = _EducationStateMachine()
    for line in _content_lines(content, SectionType.EDUCATION):
        machine.feed(line)
    return machine.finish()


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------

_TECH_LABEL_RE = re.compile(
    r"^(?:built with|technologies|tech stack|tech|stack|using)\s*:\s*(.+)$", re.IGNORECASE
)
_ROLE_LABEL_RE = re.compile(r"^role\s*:\s*(.+)$", re.IGNORECASE)
_MAX_TITLE_LENGTH = 100
_EMPTY_PARENS_RE = re.compile(r"\(\s*\)")


@dataclass
class _ProjectDraft:
    name: str
    url: str | None = None
    role: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    current: bool | None = None
    description: list[str] = field(default_factory=list)
    technologies: list[str] | None = None

    def finalize(self) -> ParsedProject:
        return ParsedProject(
            name=self.name,
            role=self.role,
            url=self.url,
            start_date=self.start_date,
            end_date=self.end_date,
            current=self.current,
            description="\n".join(self.description),
            technologies=self.technologies,
        )


def _project_from_title(line: str) -> _ProjectDraft:
    url = URL_RE.search(line)
    name = line.replace(url.group(), "") if url else line
    draft = _ProjectDraft(name="", url=url.group() if url else None)

    dates = DATE_RANGE_RE.search(name)
    if dates:
        current = is_open_ended(dates.group("end"))
        draft.start_date = parse_date(dates.group("start"))
        draft.end_date = None if current else parse_date(dates.group("end"))
        draft.current = current
        name = name.replace(dates.group(), "")

    # Dates removed from "Chat App (2021 - Present)" leave empty parens
    name = _EMPTY_PARENS_RE.sub("", name).strip(_SEPARATORS).rstrip("(")
    if name.startswith("(") and name.endswith(")") and name.count("(") == 1:
        name = name[1:-1]
    draft.name = name.strip(_SEPARATORS)
    return draft


def parse_projects(content: str) -> list[ParsedProject]:
    """Parse a projects section.

    Short unbulleted lines are titles; bulleted and long lines are
    description. "Technologies: a, b" style lines fill ``technologies``.
    """
    projects: list[ParsedProject] = []
    current: _ProjectDraft | None = None

    for line in _content_lines(content, SectionType.PROJECTS):
        bullet = strip_bullet(line)
        text = line if bullet is None else bullet

        tech = _TECH_LABEL_RE.match(text)
        role = _ROLE_LABEL_RE.match(text)
        is_title = (
            bullet is None
            and not tech
            and not role
            and len(line) < _MAX_TITLE_LENGTH
            and (current is None or current.description)
        )

        if is_title:
            if current and current.name:
                projects.append(current.finalize())
            current = _project_from_title(line)
            continue
        if current is None or not text:
            continue

        url = URL_RE.search(text)
        if url and not current.url:
            current.url = url.group()
        if role:
            current.role = role.group(1).strip()
            continue
        current.description.append(text)
        if tech:
            current.technologies = [t.strip() for t in re.split(r"[,|]", tech.group(1)) if t.strip()]

    if current and current.name:
        projects.append(current.finalize())
    return projects


# ---------------------------------------------------------------------------
# Certifications
# ---------------------------------------------------------------------------

# Tried in order; the first match splits "<name><sep><issuer>"
ISSUER_PATTERNS: list[re.Pattern] = [
    re.compile(r"\s+[-–—]\s+(.+)$"),           # "Cert - Issuer"
    re.compile(r"\s*\((.+)\)\s*$"),             # "Cert (Issuer)"
    re.compile(r"\s+by\s+(.+)$", re.IGNORECASE),    # "Cert by Issuer"
    re.compile(r"\s+from\s+(.+)$", re.IGNORECASE),  # "Cert from Issuer"
]

_CERT_DATE_RE = re.compile(rf"\b{MONTHS}\.?\s*\d{{4}}|\b\d{{4}}\b", re.IGNORECASE)
_CREDENTIAL_ID_RE = re.compile(
    r"(?:\bcredential(?:\s+id)?\b|\bid\b|#)\s*:?\s*([A-Z0-9][A-Z0-9-]*)", re.IGNORECASE
)
_CREDENTIAL_URL_RE = re.compile(r"https?://\S+", re.IGNORECASE)
_TRAILING_DATE_RE = re.compile(rf"[,|(\s]*(?:{MONTHS}\.?\s*)?\d{{4}}\)?\s*$", re.IGNORECASE)
_MIN_CERT_LINE_LENGTH = 5


def _clean_issuer(issuer: str) -> str:
    issuer = _CREDENTIAL_URL_RE.sub("", issuer)
    issuer = _CREDENTIAL_ID_RE.sub("", issuer)
    return _TRAILING_DATE_RE.sub("", issuer).strip(_SEPARATORS + "()")


def parse_certification_line(line: str) -> ParsedCertification | None:
    """Parse one certification line on its own; None for noise."""
    text = strip_bullet(line)
    text = line if text is None else text
    if len(text) < _MIN_CERT_LINE_LENGTH:
        return None

    name, issuer = text, None
    for pattern in ISSUER_PATTERNS:
        match = pattern.search(text)
        if match:
            issuer = _clean_issuer(match.group(1))
            name = text[:match.start()].strip()
            break
    if not name:
        return None

    date = _CERT_DATE_RE.search(text)
    credential_id = _CREDENTIAL_ID_RE.search(text)
    url = _CREDENTIAL_URL_RE.search(text)
    return ParsedCertification(
        name=name,
        issuer=issuer or "Unknown Issuer",
        issue_date=parse_date(date.group()) if date else None,
        credential_id=credential_id.group(1) if credential_id else None,
        credential_url=url.group() if url else None,
    )


def parse_certifications(content: str) -> list[ParsedCertification]:
    """One certification per line; entries never span lines."""
    certifications = []
    for line in _content_lines(content, SectionType.CERTIFICATIONS):
        cert = parse_certification_line(line)
        if cert:
            certifications.append(cert)
    return certifications
