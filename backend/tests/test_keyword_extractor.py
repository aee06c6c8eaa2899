import pytest

from models.schemas.resume_data import ExpertiseArea, PersonalInfo, ResumeData
from services.keyword_extractor import (
    MAX_JOB_KEYWORDS,
    MAX_MISSING_KEYWORDS,
    KeywordAnalysis,
    analyze_keywords,
    extract_job_keywords,
    extract_keywords,
    extract_resume_text,
    round_half_up,
)


def _widgets(n: int) -> list[str]:
    # Fixed width so no keyword is a substring of another
    return [f"widget{i:03d}" for i in range(n)]


def test_extract_keywords():
    jd = "We need a Python developer with experience in React and Docker."
    keywords = extract_keywords(jd)
    assert "python" in keywords
    assert "react" in keywords
    assert "docker" in keywords


def test_extract_keywords_drops_stop_words_and_short_tokens():
    keywords = extract_keywords("We need a team with experience in R")
    assert keywords == []


def test_extract_keywords_curated_first_and_bigrams():
    keywords = extract_keywords("Python developer with React and machine learning experience")
    assert keywords == [
        "python", "react", "machine learning", "developer", "machine", "learning",
    ]


def test_extract_keywords_keeps_symbols_in_tech_terms():
    keywords = extract_keywords("Strong C++, C# and node.js skills.")
    assert keywords[:2] == ["c++", "c#"]
    assert "node.js" in keywords
    assert "skills" in keywords


def test_extract_keywords_empty():
    assert extract_keywords("") == []


def test_extract_job_keywords_ranks_curated_and_frequent_terms():
    jd = "We need python and docker. Documentation documentation documentation."
    assert extract_job_keywords(jd) == ["python", "docker", "documentation"]


def test_extract_job_keywords_frequency_breaks_ties():
    jd = "billing reports billing invoices billing reports"
    assert extract_job_keywords(jd) == ["billing", "reports", "invoices"]


def test_extract_job_keywords_capped():
    jd = " ".join(_widgets(80))
    assert len(extract_job_keywords(jd)) == MAX_JOB_KEYWORDS


def test_extract_resume_text_includes_expertise_areas():
    resume = ResumeData(
        personal=PersonalInfo(full_name="Jane Doe"),
        expertise_areas=[ExpertiseArea(id="area-0", category="Cloud", keywords=["Terraform", "Helm"])],
    )
    assert extract_resume_text(resume) == "Jane Doe Cloud Terraform Helm"


class TestAnalyzeKeywords:
    def test_empty_job_description(self, complete_resume):
        assert analyze_keywords(complete_resume, "   ") == KeywordAnalysis()

    def test_partial_match(self):
        resume = ResumeData(skills=["Python"])
        analysis = analyze_keywords(resume, "python docker")
        assert analysis.extracted == ["python", "docker"]
        assert analysis.matched == ["python"]
        assert analysis.missing == ["docker"]
        assert analysis.match_rate == 50

    def test_match_rate_rounds_half_up(self):
        resume = ResumeData(skills=["Python"])
        jd = "python " + " ".join(_widgets(7))
        analysis = analyze_keywords(resume, jd)
        assert len(analysis.extracted) == 8
        assert analysis.match_rate == 13  # 12.5

    def test_missing_capped(self, empty_resume):
        analysis = analyze_keywords(empty_resume, " ".join(_widgets(30)))
        assert len(analysis.extracted) == 30
        assert len(analysis.missing) == MAX_MISSING_KEYWORDS
        assert analysis.match_rate == 0

    def test_substring_of_resume_text_counts(self):
        resume = ResumeData(personal=PersonalInfo(summary="Built dashboards in PostgreSQL"))
        analysis = analyze_keywords(resume, "postgresql dashboards")
        assert analysis.match_rate == 100


@pytest.mark.parametrize("value, expected", [
    (0.0, 0), (2.5, 3), (84.5, 85), (84.49, 84), (100.0, 100),
])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected
