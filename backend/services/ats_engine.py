"""ATS-safe text utilities: character sanitizing, bullet and contact
normalization, and the plain-text rendering used for copy-paste into
application forms."""

import logging
import math
import re

from models.responses import ATSAnalysis, ATSIssue
from models.schemas.resume_data import ResumeData

logger = logging.getLogger(__name__)

# Characters that commonly break ATS parsers
ATS_UNSAFE_CHARS = (
    "•", "→", "←", "↓", "↑", "★", "☆", "■", "□", "●", "○", "◆", "◇", "►",
    "▼", "✓", "✔", "✕", "✖", "✗", "✘", "♦", "♣", "♠", "♥", "©", "®", "™",
    "℠", "…", "“", "”", "‘", "’", "–", "—", "×", "÷",
)

# Ordered: each (pattern, replacement) runs on the previous output
_REPLACEMENTS: list[tuple[re.Pattern, str]] = [
    (re.compile("[“”]"), '"'),
    (re.compile("[‘’]"), "'"),
    (re.compile("[–—]"), "-"),
    (re.compile("…"), "..."),
    (re.compile("[•●○◆◇►▼■□★☆♦♣♠♥✓✔✕✖✗✘]"), "-"),
    (re.compile("→"), "->"),
    (re.compile("←"), "<-"),
    (re.compile("[©®™℠×÷]"), ""),
    (re.compile(r"[^\S\n]+"), " "),
]

_BULLET_PREFIX_RE = re.compile(r"^[-*•●○◆►▼]\s*")
_DESCRIPTION_SPLIT_RE = re.compile(r"[\n;]|\d+\.\s")

RULE = "-" * 40
SCANNING_WORDS_PER_MINUTE = 500
MIN_SUMMARY_CHARS = 50
MAX_SUMMARY_CHARS = 500
MIN_DESCRIPTION_CHARS = 30
MIN_SKILLS = 5


def sanitize_for_ats(text: str) -> str:
    """Replace typographic characters with plain ASCII equivalents.

    Line breaks are kept; runs of other whitespace collapse to one space
    and every line is trimmed.
    """
    if not text:
        return ""
    for pattern, replacement in _REPLACEMENTS:
        text = pattern.sub(replacement, text)
    return "\n".join(line.strip() for line in text.split("\n")).strip()


def find_unsafe_characters(text: str) -> list[str]:
    return [char for char in ATS_UNSAFE_CHARS if char in text]


def has_unsafe_characters(text: str) -> bool:
    return any(char in text for char in ATS_UNSAFE_CHARS)


def format_bullet_points(text: str, bullet_char: str = "-") -> str:
    """Prefix every non-empty line with one consistent bullet."""
    if not text:
        return ""
    bullets = []
    for line in text.split("\n"):
        trimmed = line.strip()
        if trimmed:
            bullets.append(f"{bullet_char} {_BULLET_PREFIX_RE.sub('', trimmed)}")
    return "\n".join(bullets)


def parse_description_to_bullets(description: str) -> list[str]:
    """Split a description on newlines, semicolons and "1. " style numbering."""
    if not description:
        return []
    sanitized = sanitize_for_ats(description)
    parts = (_BULLET_PREFIX_RE.sub("", p.strip()) for p in _DESCRIPTION_SPLIT_RE.split(sanitized))
    return [part for part in parts if part]


def format_phone_for_ats(phone: str) -> str:
    """Normalize US numbers to (XXX) XXX-XXXX; anything else is returned as-is."""
    if not phone:
        return ""
    digits = re.sub(r"\D", "", phone)
    if len(digits) == 10:
        return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"
    if len(digits) == 11 and digits.startswith("1"):
        return f"+1 ({digits[1:4]}) {digits[4:7]}-{digits[7:]}"
    return phone


def format_email_for_ats(email: str | None) -> str:
    return (email or "").strip().lower()


def generate_plain_text_resume(resume: ResumeData) -> str:
    personal = resume.personal
    lines: list[str] = [personal.full_name.upper()]
    if personal.job_title:
        lines.append(personal.job_title)
    lines.append("")

    contact = []
    if personal.email:
        contact.append(format_email_for_ats(personal.email))
    if personal.phone:
        contact.append(format_phone_for_ats(personal.phone))
    if personal.location:
        contact.append(personal.location)
    if contact:
        lines += [" | ".join(contact), ""]

    if personal.summary:
        lines += ["PROFESSIONAL SUMMARY", RULE, sanitize_for_ats(personal.summary), ""]

    if resume.experiences:
        lines += ["PROFESSIONAL EXPERIENCE", RULE]
        for exp in resume.experiences:
            end = "Present" if exp.current else (exp.end_date or "Present")
            lines += [exp.position, exp.company, f"{exp.start_date} - {end}"]
            lines += [f"- {bullet}" for bullet in parse_description_to_bullets(exp.description)]
            lines.append("")

    if resume.education:
        lines += ["EDUCATION", RULE]
        for edu in resume.education:
            lines.append(f"{edu.degree} in {edu.field}" if edu.field else edu.degree)
            lines.append(edu.institution)
            if edu.end_date:
                lines.append(edu.end_date)
            lines.append("")

    if resume.skills:
        lines += ["SKILLS", RULE, ", ".join(resume.skills)]

    return "\n".join(lines)


def _word_count(text: str) -> int:
    return len(re.split(r"\s+", text))


def count_resume_words(resume: ResumeData) -> int:
    count = 0
    if resume.personal.summary:
        count += _word_count(resume.personal.summary)
    for exp in resume.experiences:
        count += _word_count(f"{exp.position} {exp.company}")
        if exp.description:
            count += _word_count(exp.description)
    for edu in resume.education:
        count += _word_count(f"{edu.degree} {edu.institution}")
    return count + len(resume.skills)


def estimate_reading_time(word_count: int) -> int:
    """Seconds a recruiter needs to scan this many words."""
    return math.ceil(word_count / SCANNING_WORDS_PER_MINUTE * 60)


def analyze_ats_compatibility(resume: ResumeData) -> ATSAnalysis:
    """Check a resume for fields and characters that trip up ATS parsers.

    Starts at 100 and deducts per problem: missing name -20, email -15,
    phone -5, job title -10, summary missing or short -5, no experience
    -15 (else per role: thin description -3, unsafe characters -2), no
    skills -10 or fewer than five -5, no education -5. Clamped to 0-100.
    """
    personal = resume.personal
    issues: list[ATSIssue] = []
    suggestions: list[str] = []
    score = 100

    if not personal.full_name:
        issues.append(ATSIssue(type="error", field="full_name", message="Name is required"))
        score -= 20
    if not personal.email:
        issues.append(ATSIssue(type="error", field="email",
                               message="Email is required for ATS contact info"))
        score -= 15
    if not personal.phone:
        issues.append(ATSIssue(type="warning", field="phone",
                               message="Phone number helps recruiters contact you"))
        score -= 5
    if not personal.job_title:
        issues.append(ATSIssue(type="warning", field="job_title",
                               message="Job title helps ATS categorize your resume"))
        score -= 10

    if not personal.summary:
        suggestions.append("Add a professional summary to improve ATS matching")
        score -= 5
    elif len(personal.summary) < MIN_SUMMARY_CHARS:
        issues.append(ATSIssue(type="warning", field="summary",
                               message="Summary is too short for optimal ATS matching"))
        score -= 5
    elif len(personal.summary) > MAX_SUMMARY_CHARS:
        issues.append(ATSIssue(type="info", field="summary",
                               message="Consider shortening summary for better readability"))

    if not resume.experiences:
        issues.append(ATSIssue(type="error", field="experience",
                               message="Add work experience for ATS to analyze"))
        score -= 15
    for index, exp in enumerate(resume.experiences):
        field = f"experience.{index}"
        if len(exp.description) < MIN_DESCRIPTION_CHARS:
            issues.append(ATSIssue(
                type="warning", field=field,
                message=f'Add more detail to "{exp.position}" role for better keyword matching',
            ))
            score -= 3
        if has_unsafe_characters(exp.description):
            issues.append(ATSIssue(
                type="warning", field=field,
                message=f'"{exp.position}" description contains characters that may not parse correctly',
            ))
            score -= 2

    if not resume.skills:
        issues.append(ATSIssue(type="warning", field="skills",
                               message="Add skills for ATS keyword matching"))
        score -= 10
    elif len(resume.skills) < MIN_SKILLS:
        suggestions.append("Add more skills to improve keyword matching")
        score -= 5

    if not resume.education:
        issues.append(ATSIssue(type="info", field="education",
                               message="Education section helps with role requirements"))
        score -= 5

    score = max(0, min(100, score))
    logger.debug("ATS compatibility %d with %d issues", score, len(issues))
    return ATSAnalysis(score=score, issues=issues, suggestions=suggestions)
