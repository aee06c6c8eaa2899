from pydantic import BaseModel, Field

from models.schemas.resume_data import ResumeData


class TextImportRequest(BaseModel):
    raw_text: str = Field(..., max_length=50000, description="Plain text resume content")
    file_name: str = Field("pasted-resume.txt", max_length=255)


class ScoreRequest(BaseModel):
    resume: ResumeData
    job_description: str | None = Field(None, max_length=10000, description="Job description text")


class ExportRequest(BaseModel):
    resume: ResumeData
