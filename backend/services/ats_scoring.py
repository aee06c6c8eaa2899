"""ATS compatibility scoring.

Four independent sub-scores combined into one weighted 0-100 score:

    completeness  additive checklist of sections/fields      weight 0.35
    keywords      job-description keyword match rate         weight 0.30
    formatting    deductions for unstructured descriptions   weight 0.20
    content       deductions for thin content                weight 0.15

All functions are pure: the same resume and job description always give
the same ATSScore.
"""

import logging
import re

from models.responses import ATSScore, ScoreBreakdown, Suggestion
from models.schemas.resume_data import ResumeData
from services.keyword_extractor import analyze_keywords, extract_resume_text, round_half_up

logger = logging.getLogger(__name__)

WEIGHTS = {
    "completeness": 0.35,
    "keywords": 0.30,
    "formatting": 0.20,
    "content": 0.15,
}

# Used when no job description is supplied
DEFAULT_KEYWORD_SCORE = 70

CATEGORY_PRIORITY = {"critical": 0, "important": 1, "optional": 2}

SCORE_LABELS: list[tuple[int, str]] = [
    (90, "Excellent"),
    (80, "Very Good"),
    (70, "Good"),
    (60, "Fair"),
    (50, "Needs Work"),
]

ACTION_VERBS = (
    "led", "managed", "developed", "created", "implemented", "designed",
    "built", "improved", "increased", "reduced", "achieved", "launched",
    "delivered", "drove", "spearheaded", "orchestrated", "streamlined",
    "optimized",
)

MIN_SUMMARY_LENGTH = 50
MAX_SUMMARY_LENGTH = 500
MIN_DESCRIPTION_LENGTH = 50
MIN_AVERAGE_DESCRIPTION_LENGTH = 100

_NUMBER_RE = re.compile(r"\d+%?")

_PERSONAL = "Personal Info"
_GO_PERSONAL = "Go to Personal Info section"

ScoreResult = tuple[int, list[Suggestion]]


def calculate_completeness_score(resume: ResumeData) -> ScoreResult:
    """Additive checklist, capped at 100.

    Personal fields 5 each (summary 5, or 2 when under 50 characters),
    experience count up to 15, experience descriptions up to 15,
    education 15, skills up to 25.
    """
    suggestions: list[Suggestion] = []
    score = 0
    personal = resume.personal

    # (field value, id, category, message)
    checks = [
        (personal.full_name, "personal-name", "critical", "Add your full name"),
        (personal.email, "personal-email", "critical", "Add your email address"),
        (personal.phone, "personal-phone", "important", "Add your phone number"),
        (personal.location, "personal-location", "optional", "Add your location (city/state)"),
        (personal.job_title, "personal-title", "important", "Add your job title"),
    ]
    for value, suggestion_id, category, message in checks:
        if value:
            score += 5
        else:
            suggestions.append(Suggestion(
                id=suggestion_id, category=category, section=_PERSONAL,
                message=message, action=_GO_PERSONAL,
            ))

    if len(personal.summary) >= MIN_SUMMARY_LENGTH:
        score += 5
    elif personal.summary:
        score += 2
        suggestions.append(Suggestion(
            id="personal-summary-short", category="important", section=_PERSONAL,
            message="Expand your professional summary (aim for 50+ characters)",
            action=_GO_PERSONAL,
        ))
    else:
        suggestions.append(Suggestion(
            id="personal-summary", category="important", section=_PERSONAL,
            message="Add a professional summary", action=_GO_PERSONAL,
        ))

    experiences = resume.experiences
    if len(experiences) >= 2:
        score += 15
    elif len(experiences) == 1:
        score += 8
        suggestions.append(Suggestion(
            id="experience-more", category="optional", section="Experience",
            message="Consider adding more work experience",
            action="Go to Experience section",
        ))
    else:
        suggestions.append(Suggestion(
            id="experience-none", category="critical", section="Experience",
            message="Add at least one work experience",
            action="Go to Experience section",
        ))

    described = [e for e in experiences if len(e.description) >= MIN_DESCRIPTION_LENGTH]
    if experiences and len(described) == len(experiences):
        score += 15
    elif described:
        score += 8
        suggestions.append(Suggestion(
            id="experience-descriptions", category="important", section="Experience",
            message="Add detailed descriptions to all work experiences",
            action="Include achievements and quantified results",
        ))

    if resume.education:
        score += 15
    else:
        suggestions.append(Suggestion(
            id="education-none", category="important", section="Education",
            message="Add your education history", action="Go to Education section",
        ))

    skill_count = len(resume.skills)
    if skill_count >= 8:
        score += 25
    elif skill_count >= 5:
        score += 18
        suggestions.append(Suggestion(
            id="skills-more", category="optional", section="Skills",
            message="Add more relevant skills (aim for 8+)", action="Go to Skills section",
        ))
    elif skill_count >= 1:
        score += 10
        suggestions.append(Suggestion(
            id="skills-few", category="important", section="Skills",
            message="Add more skills to showcase your expertise", action="Go to Skills section",
        ))
    else:
        suggestions.append(Suggestion(
            id="skills-none", category="critical", section="Skills",
            message="Add your technical and soft skills", action="Go to Skills section",
        ))

    return min(score, 100), suggestions


def calculate_formatting_score(resume: ResumeData) -> ScoreResult:
    """Start at 100 and deduct for structural problems; floor at 0."""
    suggestions: list[Suggestion] = []
    score = 100
    experiences = resume.experiences

    if len(resume.personal.summary) > MAX_SUMMARY_LENGTH:
        score -= 10
        suggestions.append(Suggestion(
            id="format-summary-long", category="optional", section="Formatting",
            message="Consider shortening your summary (recommended: 200-500 characters)",
        ))

    has_bullets = any(
        "\n" in e.description or "•" in e.description or "-" in e.description
        for e in experiences
    )
    if experiences and not has_bullets:
        score -= 15
        suggestions.append(Suggestion(
            id="format-bullets", category="important", section="Formatting",
            message="Use bullet points in experience descriptions for better readability",
            action="Start each achievement on a new line",
        ))

    has_numbers = any(_NUMBER_RE.search(e.description) for e in experiences)
    if experiences and not has_numbers:
        score -= 20
        suggestions.append(Suggestion(
            id="format-quantify", category="important", section="Content",
            message='Add quantified achievements (e.g., "increased sales by 25%")',
            action="Include metrics and numbers in your experience descriptions",
        ))

    resume_text = extract_resume_text(resume).lower()
    has_action_verbs = any(verb in resume_text for verb in ACTION_VERBS)
    if experiences and not has_action_verbs:
        score -= 15
        suggestions.append(Suggestion(
            id="format-action-verbs", category="important", section="Content",
            message="Start bullet points with strong action verbs",
            action='Use words like "Led", "Developed", "Achieved", "Implemented"',
        ))

    return max(score, 0), suggestions


def calculate_content_score(resume: ResumeData) -> ScoreResult:
    """Start at 100 and deduct for thin or repetitive content; floor at 0."""
    suggestions: list[Suggestion] = []
    score = 100
    experiences = resume.experiences

    if experiences:
        average = sum(len(e.description) for e in experiences) / len(experiences)
        if average < MIN_AVERAGE_DESCRIPTION_LENGTH:
            score -= 20
            suggestions.append(Suggestion(
                id="content-short-desc", category="important", section="Experience",
                message="Expand your job descriptions with more detail",
                action="Include 3-5 bullet points per role highlighting achievements",
            ))

    skills = resume.skills
    if skills and len({s.lower() for s in skills}) != len(skills):
        score -= 10
        suggestions.append(Suggestion(
            id="content-duplicate-skills", category="optional", section="Skills",
            message="Remove duplicate skills",
        ))

    if not resume.projects and not resume.certifications:
        score -= 10
        suggestions.append(Suggestion(
            id="content-extras", category="optional", section="General",
            message="Consider adding projects or certifications to stand out",
            action="Add relevant side projects or professional certifications",
        ))

    return max(score, 0), suggestions


def calculate_keyword_score(
    resume: ResumeData, job_description: str | None = None
) -> tuple[int, list[Suggestion], list[str], list[str]]:
    """Keyword match rate against the job description.

    Returns (score, suggestions, matched, missing). Without a job
    description the score is DEFAULT_KEYWORD_SCORE and nothing is matched.
    """
    if not job_description or not job_description.strip():
        return DEFAULT_KEYWORD_SCORE, [], [], []

    analysis = analyze_keywords(resume, job_description)
    rate = analysis.match_rate
    suggestions: list[Suggestion] = []
    if rate < 50:
        suggestions.append(Suggestion(
            id="keywords-low", category="critical", section="Keywords",
            message=f"Low keyword match ({rate}%) - Add more relevant skills and terms",
            action=f"Consider adding: {', '.join(analysis.missing[:5])}",
        ))
    elif rate < 70:
        suggestions.append(Suggestion(
            id="keywords-medium", category="important", section="Keywords",
            message=f"Moderate keyword match ({rate}%) - Room for improvement",
            action=f"Missing keywords: {', '.join(analysis.missing[:3])}",
        ))
    return rate, suggestions, analysis.matched, analysis.missing


def get_score_label(score: int) -> str:
    for threshold, label in SCORE_LABELS:
        if score >= threshold:
            return label
    return "Poor"


def calculate_ats_score(resume: ResumeData, job_description: str | None = None) -> ATSScore:
    """Score a resume, optionally against a job description."""
    completeness, completeness_tips = calculate_completeness_score(resume)
    formatting, formatting_tips = calculate_formatting_score(resume)
    content, content_tips = calculate_content_score(resume)
    keywords, keyword_tips, matched, missing = calculate_keyword_score(resume, job_description)

    overall = round_half_up(
        completeness * WEIGHTS["completeness"]
        + keywords * WEIGHTS["keywords"]
        + formatting * WEIGHTS["formatting"]
        + content * WEIGHTS["content"]
    )

    suggestions = sorted(
        completeness_tips + formatting_tips + content_tips + keyword_tips,
        key=lambda s: CATEGORY_PRIORITY[s.category],
    )

    logger.debug(
        "ATS score %d (completeness=%d keywords=%d formatting=%d content=%d)",
        overall, completeness, keywords, formatting, content,
    )
    return ATSScore(
        overall=overall,
        label=get_score_label(overall),
        breakdown=ScoreBreakdown(
            completeness=completeness,
            keywords=keywords,
            formatting=formatting,
            content=content,
        ),
        suggestions=suggestions,
        matched_keywords=matched,
        missing_keywords=missing,
    )
