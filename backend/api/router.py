from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from slowapi import Limiter
from slowapi.util import get_remote_address

from api.dependencies import get_settings
from config import Settings
from models.requests import ExportRequest, ScoreRequest, TextImportRequest
from models.responses import ATSAnalysis, ATSScore, ImportResult, PlainTextExport
from models.schemas.parsed_resume import ParsedResume
from models.schemas.resume_data import ResumeData
from services import ats_engine, ats_scoring, resume_parser
from services.extractors import registry
from services.extractors.base import ResumeFile

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)


@router.get("/health")
async def health():
    return {
        "status": "ok",
        "extractors": registry.loaded(),
    }


@router.post("/import", response_model=ImportResult)
@limiter.limit("10/minute")
async def import_resume(
    request: Request,
    resume_file: UploadFile = File(...),
    settings: Settings = Depends(get_settings),
):
    # Read and validate size
    content = await resume_file.read()
    max_bytes = settings.max_upload_size_mb * 1024 * 1024
    if len(content) > max_bytes:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Max size: {settings.max_upload_size_mb}MB",
        )

    # Format and content problems come back as success=false, not HTTP errors
    file = ResumeFile(
        filename=resume_file.filename or "",
        content_type=resume_file.content_type or "",
        data=content,
    )
    return await resume_parser.parse_resume_file(file, settings)


@router.post("/import/text", response_model=ImportResult)
@limiter.limit("30/minute")
async def import_text(
    request: Request,
    body: TextImportRequest,
    settings: Settings = Depends(get_settings),
):
    return resume_parser.import_resume_text(body.raw_text, body.file_name, settings)


@router.post("/import/convert", response_model=ResumeData)
async def convert(parsed: ParsedResume):
    return resume_parser.convert_to_resume_data(parsed)


@router.post("/score", response_model=ATSScore)
@limiter.limit("30/minute")
async def score(request: Request, body: ScoreRequest):
    return ats_scoring.calculate_ats_score(body.resume, body.job_description)


@router.post("/export/plain-text", response_model=PlainTextExport)
async def export_plain_text(body: ExportRequest):
    text = ats_engine.generate_plain_text_resume(body.resume)
    word_count = ats_engine.count_resume_words(body.resume)
    return PlainTextExport(
        text=text,
        word_count=word_count,
        reading_time_seconds=ats_engine.estimate_reading_time(word_count),
        unsafe_characters=ats_engine.find_unsafe_characters(text),
    )


@router.post("/analyze/ats", response_model=ATSAnalysis)
@limiter.limit("30/minute")
async def analyze_ats(request: Request, body: ExportRequest):
    return ats_engine.analyze_ats_compatibility(body.resume)
