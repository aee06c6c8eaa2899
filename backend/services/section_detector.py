"""Resume section detection, contact extraction and date normalization."""

import logging
import re
from typing import Callable, NamedTuple

from models.schemas.parsed_resume import ParsedContact, SectionMatch, SectionType

logger = logging.getLogger(__name__)

# Section heading alternatives, matched case-insensitively at line start
SECTION_PATTERNS: dict[SectionType, list[str]] = {
    SectionType.CONTACT: [
        r"contact\s*(?:info(?:rmation)?)?|personal\s*(?:info(?:rmation)?|details)?",
        r"address|phone|email|location",
    ],
    SectionType.SUMMARY: [
        r"professional\s*summary|summary|profile|objective|about\s*me|career\s*objective",
        r"executive\s*summary|career\s*summary|personal\s*statement",
    ],
    SectionType.EXPERIENCE: [
        r"professional\s*experience|work\s*experience|experience|employment(?:\s*history)?",
        r"work\s*history|career\s*history|relevant\s*experience",
    ],
    SectionType.EDUCATION: [
        r"education|academic(?:\s*background)?|educational\s*background",
        r"qualifications|academic\s*qualifications|degrees?",
    ],
    SectionType.SKILLS: [
        r"skills|technical\s*skills|core\s*competencies|competencies",
        r"areas?\s*of\s*expertise|key\s*skills|proficiencies|technologies",
    ],
    SectionType.PROJECTS: [
        r"projects?|key\s*projects?|selected\s*projects?|personal\s*projects?",
        r"portfolio|notable\s*projects?",
    ],
    SectionType.CERTIFICATIONS: [
        r"certifications?|licenses?|certifications?\s*(?:&|and)?\s*licenses?",
        r"professional\s*certifications?|credentials?|accreditations?",
    ],
    SectionType.LINKS: [
        r"links?|online\s*profiles?|social\s*media|web\s*presence",
        r"professional\s*links?|portfolio\s*links?",
    ],
}

# A heading may trail a few qualifier words. A bare heading ends the line
# (optional colon); an inline heading carries content after the colon.
_QUALIFIERS = r"(?:[\s&/,()+-]+[\w'.]+){0,4}[\s)]*"
_HEADING_TAIL = _QUALIFIERS + r":?\s*$"
_INLINE_TAIL = _QUALIFIERS + r":\s*(?P<inline>\S.*)$"

# Field labels inside a section ("Technologies: React") are never headings
_FIELD_LABEL_RE = re.compile(
    r"^(?:technologies|tech\s*stack|built\s*with|role|email|phone|address|location|"
    r"portfolio|links?)\s*:\s*\S",
    re.IGNORECASE,
)


def _compile(tail: str) -> dict[SectionType, list[re.Pattern]]:
    return {
        section: [re.compile(rf"^(?:{p})\b{tail}", re.IGNORECASE) for p in patterns]
        for section, patterns in SECTION_PATTERNS.items()
    }


_COMPILED = _compile(_HEADING_TAIL)
_COMPILED_INLINE = _compile(_INLINE_TAIL)

# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

MONTHS = (
    r"(?:jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|jun(?:e)?|"
    r"jul(?:y)?|aug(?:ust)?|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)"
)
_DATE_TOKEN = rf"(?:{MONTHS}\.?\s*\d{{4}}|\d{{1,2}}/\d{{4}}|\d{{4}})"

# "Jan 2020 - Present", "2018 – 2021", "03/2019 - 12/2022", "May 2015 to Jun 2017"
DATE_RANGE_RE = re.compile(
    rf"\b(?P<start>{_DATE_TOKEN})\s*(?:[-–—]|\bto\b)\s*"
    rf"(?P<end>present|current|{_DATE_TOKEN})\b",
    re.IGNORECASE,
)

_MONTH_YEAR_RE = re.compile(rf"\b({MONTHS})\.?\s*(\d{{4}})", re.IGNORECASE)
_MM_YYYY_RE = re.compile(r"\b(\d{1,2})/(\d{4})\b")
_YEAR_RE = re.compile(r"\b(\d{4})\b")
_OPEN_ENDED = {"present", "current"}

_MONTH_CODES = {
    "jan": "01", "feb": "02", "mar": "03", "apr": "04", "may": "05", "jun": "06",
    "jul": "07", "aug": "08", "sep": "09", "oct": "10", "nov": "11", "dec": "12",
}


def is_open_ended(date_str: str) -> bool:
    """True for "Present"/"Current" in any case."""
    return date_str.strip().lower() in _OPEN_ENDED


def parse_date(date_str: str | None) -> str | None:
    """Normalize a resume date to YYYY-MM.

    Accepts "Month YYYY", "MM/YYYY" and bare "YYYY" (month 01). Open-ended
    markers and anything unrecognized return None; callers track the
    "current" flag themselves.
    """
    if not date_str:
        return None
    text = date_str.strip().lower()
    if text in _OPEN_ENDED:
        return None

    match = _MONTH_YEAR_RE.search(text)
    if match:
        return f"{match.group(2)}-{_MONTH_CODES[match.group(1)[:3]]}"

    match = _MM_YYYY_RE.search(text)
    if match:
        month = int(match.group(1))
        if 1 <= month <= 12:
            return f"{match.group(2)}-{month:02d}"
        return None

    match = _YEAR_RE.search(text)
    if match:
        return f"{match.group(1)}-01"

    return None


# ---------------------------------------------------------------------------
# Section detection
# ---------------------------------------------------------------------------

BASE_CONFIDENCE = 70

URL_RE = re.compile(r"https?://[^\s<>\"{}|\\^`\[\]]+", re.IGNORECASE)
LINKEDIN_RE = re.compile(r"linkedin\.com/in/[\w-]+", re.IGNORECASE)
GITHUB_RE = re.compile(r"github\.com/[\w-]+", re.IGNORECASE)

_COMPANY_SUFFIX_RE = re.compile(r"\b(?:inc|llc|ltd|corp|company|technologies|solutions)\b", re.IGNORECASE)
_DEGREE_HINT_RE = re.compile(
    r"\b(?:bachelor|master|phd|mba|bs|ba|ms|ma|degree|university|college|institute)\b", re.IGNORECASE
)
_PROFICIENCY_RE = re.compile(r"\b(?:proficient|experienced|expert|advanced|intermediate)\b", re.IGNORECASE)
_CERT_HINT_RE = re.compile(r"\b(?:certified|certificate|certification|license|credential)\b", re.IGNORECASE)


class ConfidenceRule(NamedTuple):
    section: SectionType
    name: str
    points: int
    applies: Callable[[str], bool]


def _summary_length_ok(content: str) -> bool:
    word_count = len(content.split())
    return 20 < word_count < 200


CONFIDENCE_RULES: list[ConfidenceRule] = [
    ConfidenceRule(SectionType.EXPERIENCE, "date_range", 15, lambda c: bool(DATE_RANGE_RE.search(c))),
    ConfidenceRule(SectionType.EXPERIENCE, "company_suffix", 10, lambda c: bool(_COMPANY_SUFFIX_RE.search(c))),
    ConfidenceRule(SectionType.EDUCATION, "degree_keywords", 20, lambda c: bool(_DEGREE_HINT_RE.search(c))),
    ConfidenceRule(SectionType.SKILLS, "comma_list", 15, lambda c: c.count(",") > 3),
    ConfidenceRule(SectionType.SKILLS, "proficiency_terms", 10, lambda c: bool(_PROFICIENCY_RE.search(c))),
    ConfidenceRule(SectionType.CERTIFICATIONS, "certification_terms", 20, lambda c: bool(_CERT_HINT_RE.search(c))),
    ConfidenceRule(
        SectionType.PROJECTS, "links", 15,
        lambda c: bool(URL_RE.search(c) or GITHUB_RE.search(c)),
    ),
    ConfidenceRule(SectionType.SUMMARY, "paragraph_length", 15, _summary_length_ok),
]


def calculate_confidence(section_type: SectionType, content: str) -> int:
    """Base heading confidence plus every matching rule for the section type."""
    confidence = BASE_CONFIDENCE + sum(
        rule.points
        for rule in CONFIDENCE_RULES
        if rule.section == section_type and rule.applies(content)
    )
    return min(confidence, 100)


def heading_types(line: str) -> list[SectionType]:
    """All section types whose heading patterns match the (trimmed) line."""
    stripped = line.strip()
    if not stripped:
        return []
    inline_ok = not _FIELD_LABEL_RE.match(stripped)
    return [
        section
        for section, patterns in _COMPILED.items()
        if any(p.match(stripped) for p in patterns)
        or (inline_ok and any(p.match(stripped) for p in _COMPILED_INLINE[section]))
    ]


def is_heading(line: str, section_type: SectionType | None = None) -> bool:
    types = heading_types(line)
    if section_type is None:
        return bool(types)
    return section_type in types


def heading_remainder(line: str, section_type: SectionType) -> str | None:
    """Content that follows a heading on its own line.

    "" for a bare heading ("Skills"), the text after the colon for an
    inline one ("Skills: Python, Go"), None if the line is not a heading
    of the given type.
    """
    stripped = line.strip()
    if not is_heading(stripped, section_type):
        return None
    for pattern in _COMPILED_INLINE[section_type]:
        match = pattern.match(stripped)
        if match:
            return match.group("inline").strip()
    return ""


def strip_heading(content: str, section_type: SectionType) -> str:
    """Drop the leading heading of the given type, keeping any inline content."""
    lines = content.strip().split("\n")
    remainder = heading_remainder(lines[0], section_type)
    if remainder is not None:
        lines = ([remainder] if remainder else []) + lines[1:]
    return "\n".join(lines).strip()


def _find_section_end(lines: list[str], start_line: int) -> int:
    for i in range(start_line + 1, len(lines)):
        if is_heading(lines[i]):
            return i - 1
    return len(lines) - 1


def resolve_overlaps(sections: list[SectionMatch]) -> list[SectionMatch]:
    """Keep non-overlapping sections; a contested region goes to the
    strictly more confident match, otherwise to the earlier one."""
    ordered = sorted(sections, key=lambda s: s.start_index)
    if len(ordered) <= 1:
        return ordered

    resolved = [ordered[0]]
    for current in ordered[1:]:
        previous = resolved[-1]
        if current.start_index > previous.end_index:
            resolved.append(current)
        elif current.confidence > previous.confidence:
            resolved[-1] = current
    return resolved


def detect_sections(text: str) -> list[SectionMatch]:
    """Locate headed sections in resume text.

    Each heading line opens a section that runs until the line before the
    next heading of any type. Returns matches ordered by start offset with
    overlaps resolved by confidence.
    """
    lines = text.split("\n")
    sections: list[SectionMatch] = []
    offset = 0

    for i, line in enumerate(lines):
        for section_type in heading_types(line):
            end_line = _find_section_end(lines, i)
            content = "\n".join(lines[i:end_line + 1])
            sections.append(SectionMatch(
                type=section_type,
                start_index=offset,
                end_index=offset + len(content),
                content=content,
                confidence=calculate_confidence(section_type, content),
            ))
        offset += len(line) + 1

    resolved = resolve_overlaps(sections)
    logger.debug(
        "Detected sections: %s",
        ", ".join(f"{s.type.value}({s.confidence})" for s in resolved),
    )
    return resolved


# ---------------------------------------------------------------------------
# Contact / header extraction
# ---------------------------------------------------------------------------

EMAIL_RE = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")

# Tried in order; the first pattern that matches anywhere wins
PHONE_PATTERNS: list[re.Pattern] = [
    re.compile(r"(?<!\w)(?:\+?1[-. ]?)?\(?\d{3}\)?[-. ]?\d{3}[-. ]?\d{4}\b"),  # US
    re.compile(r"(?<!\w)\+?\d{1,3}[-. ]?\d{2,4}[-. ]?\d{3,4}[-. ]?\d{3,4}\b"),  # international
]

LOCATION_RE = re.compile(r"\b([A-Z][a-z]+(?:\s[A-Z][a-z]+)*),\s*([A-Z]{2})\b")

_NAME_RE = re.compile(r"^[A-Z][a-z]+(?:\s+[A-Z][a-z]+){1,3}$")
_NAME_LABEL_RE = re.compile(r"^name:\s*(.+)$", re.IGNORECASE)

TITLE_KEYWORDS = (
    "engineer", "developer", "manager", "designer", "analyst", "consultant",
    "specialist", "lead", "director", "architect", "administrator",
    "coordinator", "executive",
)


def _first_match(patterns: list[re.Pattern], text: str) -> str | None:
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match.group().strip()
    return None


def _profile_url(pattern: re.Pattern, text: str) -> str | None:
    match = pattern.search(text)
    return f"https://{match.group()}" if match else None


def _website(text: str) -> str | None:
    for match in URL_RE.finditer(text):
        url = match.group().rstrip(".,;")
        lower = url.lower()
        if "linkedin.com" not in lower and "github.com" not in lower:
            return url
    return None


def extract_contact_info(text: str) -> ParsedContact:
    """Sweep the text for contact details; the first hit of each kind wins."""
    email = EMAIL_RE.search(text)
    location = LOCATION_RE.search(text)
    return ParsedContact(
        email=email.group() if email else None,
        phone=_first_match(PHONE_PATTERNS, text),
        location=location.group() if location else None,
        linkedin=_profile_url(LINKEDIN_RE, text),
        github=_profile_url(GITHUB_RE, text),
        website=_website(text),
    )


def _non_empty_lines(text: str) -> list[str]:
    return [line.strip() for line in text.split("\n") if line.strip()]


def extract_name(header_text: str) -> str | None:
    """Accept the first non-empty line as a name if it looks like one."""
    lines = _non_empty_lines(header_text)
    if not lines:
        return None
    first = lines[0]
    if _NAME_RE.match(first):
        return first
    labelled = _NAME_LABEL_RE.match(first)
    if labelled:
        return labelled.group(1).strip()
    return None


def extract_job_title(header_text: str, name: str | None = None) -> str | None:
    """Return the first of the three lines after the name that reads like a title."""
    lines = _non_empty_lines(header_text)
    start = 0
    if name:
        lowered = name.lower()
        for i, line in enumerate(lines):
            if lowered in line.lower():
                start = i + 1
                break

    for line in lines[start:start + 3]:
        if is_heading(line):
            continue
        lower = line.lower()
        if any(keyword in lower for keyword in TITLE_KEYWORDS):
            return line
    return None


# ---------------------------------------------------------------------------
# Skills
# ---------------------------------------------------------------------------

# Priority order matters only for ties: a later delimiter must produce
# strictly more tokens to replace an earlier one
SKILL_DELIMITERS = [",", "|", "•", "·", "\n", ";"]

_SKILL_HEADER_RE = re.compile(r"^(?:skills|technical|core|areas)", re.IGNORECASE)


def _split_skills(body: str, delimiter: str) -> list[str]:
    items = (item.strip() for item in body.split(delimiter))
    return [
        item for item in items
        if 1 < len(item) < 50 and not _SKILL_HEADER_RE.match(item)
    ]


def parse_skills(content: str) -> list[str]:
    """Split a skills section on whichever delimiter yields the most tokens.

    Output is de-duplicated in first-seen order.
    """
    body = strip_heading(content, SectionType.SKILLS)
    best: list[str] = []
    for delimiter in SKILL_DELIMITERS:
        if delimiter not in body:
            continue
        candidates = _split_skills(body, delimiter)
        if len(candidates) > len(best):
            best = candidates
    if not best:
        # single skill, no delimiter at all
        best = _split_skills(body, "\n")
    return list(dict.fromkeys(best))
