"""Keyword extraction and matching for resume-JD analysis.

Tokenizes free text against a stop-word list, promotes terms found in a
curated technical/soft-skill vocabulary, and ranks job-description
keywords by frequency so the most repeated requirements come first.
"""

import logging
import re

from pydantic import BaseModel

from models.schemas.resume_data import ResumeData

logger = logging.getLogger(__name__)

# Filler words that carry no signal for matching
STOP_WORDS: frozenset[str] = frozenset({
    "a", "an", "and", "are", "as", "at", "be", "by", "for", "from", "has",
    "have", "in", "is", "it", "of", "on", "or", "that", "the", "to", "was",
    "were", "will", "with", "you", "your", "we", "our", "their", "they",
    "this", "these", "those", "can", "could", "would", "should", "may",
    "might", "must", "shall", "need", "about", "above", "after", "before",
    "between", "into", "through", "during", "under", "again", "further",
    "then", "once", "here", "there", "when", "where", "why", "how", "all",
    "each", "few", "more", "most", "other", "some", "such", "no", "nor",
    "not", "only", "own", "same", "so", "than", "too", "very", "just",
    "but", "if", "because", "until", "while", "also", "both", "either",
    "neither",
    # Generic JD filler
    "experience", "work", "working", "worked", "job", "position", "role",
    "team", "company", "years", "year", "etc", "including", "include",
    "includes",
})

# Curated vocabulary ranked ahead of everything else
TECH_KEYWORDS: frozenset[str] = frozenset({
    # Programming languages
    "javascript", "typescript", "python", "java", "c++", "c#", "ruby", "go",
    "rust", "swift", "kotlin", "php", "scala", "r", "matlab", "sql", "html",
    "css", "sass",
    # Frameworks & libraries
    "react", "angular", "vue", "node", "express", "django", "flask",
    "spring", "rails", "laravel", "nextjs", "gatsby", "nuxt", "svelte",
    "jquery", "bootstrap", "tailwind", "redux", "graphql", "rest", "api",
    "microservices",
    # Cloud & DevOps
    "aws", "azure", "gcp", "docker", "kubernetes", "jenkins", "terraform",
    "ansible", "ci/cd", "devops", "linux", "unix", "git", "github",
    "gitlab", "bitbucket",
    # Databases
    "mysql", "postgresql", "mongodb", "redis", "elasticsearch", "dynamodb",
    "oracle", "sqlite", "cassandra", "firebase", "supabase",
    # Data & AI
    "machine learning", "deep learning", "ai", "tensorflow", "pytorch",
    "pandas", "numpy", "scikit-learn", "nlp", "computer vision",
    "data science", "analytics",
    # Soft skills & methodologies
    "leadership", "communication", "collaboration", "problem-solving",
    "analytical", "strategic", "agile", "scrum", "kanban",
    "project management", "stakeholder",
})

MAX_JOB_KEYWORDS = 50
MAX_MISSING_KEYWORDS = 20
TECH_BONUS = 10

# Anything outside word chars, whitespace and - / + # . splits tokens
_TOKEN_SPLIT_RE = re.compile(r"[^\w\s\-/+#.]")
_SENTENCE_END_RE = re.compile(r"\.(\s|$)")


class KeywordAnalysis(BaseModel):
    extracted: list[str] = []
    matched: list[str] = []
    missing: list[str] = []
    match_rate: int = 0


def _tokenize(text: str) -> list[str]:
    # Strip sentence-ending periods but keep dots in tech terms like "node.js"
    text = _SENTENCE_END_RE.sub(" ", text.lower())
    normalized = _TOKEN_SPLIT_RE.sub(" ", text)
    return normalized.split()


def extract_keywords(text: str) -> list[str]:
    """Extract candidate keywords from text.

    Single tokens of two or more characters that are not stop words, plus
    adjacent word pairs that appear in the curated vocabulary. Curated
    terms come first; order is otherwise first-seen.
    """
    if not text:
        return []

    words = _tokenize(text)
    keywords: dict[str, None] = {}
    for word in words:
        if len(word) >= 2 and word not in STOP_WORDS:
            keywords[word] = None
    for first, second in zip(words, words[1:]):
        bigram = f"{first} {second}"
        if bigram in TECH_KEYWORDS:
            keywords[bigram] = None

    return sorted(keywords, key=lambda k: k not in TECH_KEYWORDS)


def extract_job_keywords(job_description: str) -> list[str]:
    """Rank job-description keywords by frequency plus curated relevance.

    A keyword's frequency is the number of whitespace-separated words in the
    description that contain it or are contained by it. Curated terms get a
    flat bonus. Returns the top MAX_JOB_KEYWORDS.
    """
    keywords = extract_keywords(job_description)
    words = job_description.lower().split()

    def weight(keyword: str) -> int:
        count = sum(1 for word in words if keyword in word or word in keyword)
        return count + (TECH_BONUS if keyword in TECH_KEYWORDS else 0)

    ranked = sorted(keywords, key=weight, reverse=True)
    return ranked[:MAX_JOB_KEYWORDS]


def extract_resume_text(resume: ResumeData) -> str:
    """Flatten every text field of a resume into one string."""
    parts: list[str | None] = [
        resume.personal.full_name,
        resume.personal.job_title,
        resume.personal.summary,
    ]
    for exp in resume.experiences:
        parts += [exp.company, exp.position, exp.description]
    for edu in resume.education:
        parts += [edu.institution, edu.degree, edu.field, edu.description]
    parts.append(" ".join(resume.skills))
    for proj in resume.projects:
        parts += [proj.name, proj.description]
        if proj.technologies:
            parts.append(" ".join(proj.technologies))
    for cert in resume.certifications:
        parts += [cert.name, cert.issuer]
    for area in resume.expertise_areas:
        parts += [area.category, " ".join(area.keywords)]
    return " ".join(p for p in parts if p)


def analyze_keywords(resume: ResumeData, job_description: str) -> KeywordAnalysis:
    """Match job-description keywords against the resume."""
    if not job_description.strip():
        return KeywordAnalysis()

    job_keywords = extract_job_keywords(job_description)
    resume_text = extract_resume_text(resume).lower()
    resume_keywords = set(extract_keywords(resume_text))

    matched: list[str] = []
    missing: list[str] = []
    for keyword in job_keywords:
        if keyword in resume_text or keyword in resume_keywords:
            matched.append(keyword)
        else:
            missing.append(keyword)

    match_rate = 0
    if job_keywords:
        match_rate = round_half_up(len(matched) / len(job_keywords) * 100)

    logger.debug("Keyword match: %d/%d (%d%%)", len(matched), len(job_keywords), match_rate)
    return KeywordAnalysis(
        extracted=job_keywords,
        matched=matched,
        missing=missing[:MAX_MISSING_KEYWORDS],
        match_rate=match_rate,
    )


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values (Python's round is banker's)."""
    return int(value + 0.5)
