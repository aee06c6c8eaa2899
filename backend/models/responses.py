from typing import Literal

from pydantic import BaseModel

from models.schemas.parsed_resume import ParsedResume


class ImportResult(BaseModel):
    success: bool
    data: ParsedResume | None = None
    error: str | None = None


class ScoreBreakdown(BaseModel):
    completeness: int = 0
    keywords: int = 0
    formatting: int = 0
    content: int = 0


class Suggestion(BaseModel):
    id: str
    category: Literal["critical", "important", "optional"]
    section: str
    message: str
    action: str | None = None


class ATSScore(BaseModel):
    overall: int = 0
    label: str = ""
    breakdown: ScoreBreakdown = ScoreBreakdown()
    suggestions: list[Suggestion] = []
    matched_keywords: list[str] = []
    missing_keywords: list[str] = []


class PlainTextExport(BaseModel):
    text: str = ""
    word_count: int = 0
    reading_time_seconds: int = 0
    unsafe_characters: list[str] = []


class ATSIssue(BaseModel):
    type: Literal["error", "warning", "info"]
    field: str
    message: str


class ATSAnalysis(BaseModel):
    score: int = 100
    issues: list[ATSIssue] = []
    suggestions: list[str] = []
