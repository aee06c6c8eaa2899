"""Tests for the import orchestrator: text pipeline, file pipeline,
conversion to the resume record and stale-result handling."""

import asyncio
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from config import Settings
from models.responses import ImportResult
from services import resume_parser
from services.errors import EmptyContentError, ExtractionError
from services.extractors.base import ExtractionResult, ResumeFile
from services.resume_parser import (
    CONFIDENCE_BONUSES,
    ImportTracker,
    SOFT_WARNINGS,
    compute_confidence,
    convert_to_resume_data,
    import_resume_text,
    parse_resume_file,
    parse_resume_text,
)


class TestParseResumeText:
    def test_end_to_end_scenario(self, scenario_text):
        parsed = parse_resume_text(scenario_text, "text", "jane.txt")
        assert parsed.full_name == "Jane Doe"
        assert parsed.job_title == "Software Engineer"
        assert parsed.contact.email == "jane@example.com"

        [exp] = parsed.experiences
        assert "Acme Inc" in exp.company
        assert exp.current is True
        assert exp.start_date == "2020-01"
        assert len(exp.bullets) == 1
        assert "40%" in exp.bullets[0]

        [edu] = parsed.education
        assert "Bachelor" in edu.degree
        assert "Computer Science" in edu.field

        assert set(parsed.skills) == {"Python", "Go", "SQL"}
        assert parsed.parse_info.source == "text"
        assert parsed.parse_info.file_name == "jane.txt"
        assert parsed.parse_info.confidence == 100
        assert parsed.parse_info.warnings == []

    def test_full_resume(self, full_resume_text):
        parsed = parse_resume_text(full_resume_text, "pdf", "john.pdf")
        assert parsed.summary.startswith("Backend engineer")
        assert len(parsed.experiences) == 2
        assert parsed.education[0].institution == "Stanford University"
        assert parsed.skills[0] == "Python"
        assert parsed.projects[0].name == "Ledger"
        assert parsed.certifications[0].issuer == "Amazon Web Services"
        assert parsed.contact.github == "https://github.com/jsmith"
        assert parsed.raw_text == full_resume_text

    def test_short_input_is_empty_content(self):
        with pytest.raises(EmptyContentError):
            parse_resume_text("short doc", "text", "x.txt")

    def test_whitespace_does_not_count(self):
        with pytest.raises(EmptyContentError):
            parse_resume_text("   " + "a" * 49 + "\n\n   ", "text", "x.txt")

    def test_minimum_length_is_configurable(self):
        settings = Settings(min_text_length=5)
        parsed = parse_resume_text("hello world", "text", "x.txt", settings=settings)
        assert parsed.full_name is None

    def test_soft_warnings_for_unstructured_text(self):
        text = "this is a long block of text that has no resume structure at all whatsoever"
        parsed = parse_resume_text(text, "text", "notes.txt")
        assert parsed.parse_info.warnings == list(SOFT_WARNINGS.values())
        assert parsed.parse_info.confidence == 50

    def test_caller_warnings_kept_first(self, scenario_text):
        warnings = ["from extractor"]
        parsed = parse_resume_text(scenario_text, "docx", "cv.docx", warnings)
        assert parsed.parse_info.warnings == ["from extractor"]
        assert warnings == ["from extractor"]

    def test_result_is_immutable(self, scenario_text):
        parsed = parse_resume_text(scenario_text, "text", "jane.txt")
        with pytest.raises(ValidationError):
            parsed.full_name = "Someone Else"

    def test_repeated_sections_are_merged(self):
        text = (
            "Jane Doe\njane@example.com\n\nSkills\nPython, Go\n\n"
            "Experience\nEngineer at Acme Inc | 2019 - 2020\n- Built a payments API\n\n"
            "Skills\nRust, Go"
        )
        parsed = parse_resume_text(text, "text", "jane.txt")
        assert parsed.skills == ["Python", "Go", "Rust"]

    def test_inline_headings(self):
        text = (
            "Jane Doe\njane@example.com\n"
            "Summary: Backend engineer with ten years of experience\n\n"
            "Skills: Python, Go, SQL, Docker"
        )
        parsed = parse_resume_text(text, "text", "jane.txt")
        assert parsed.summary == "Backend engineer with ten years of experience"
        assert parsed.job_title is None
        assert parsed.skills == ["Python", "Go", "SQL", "Docker"]
        assert SOFT_WARNINGS["skills"] not in parsed.parse_info.warnings


class TestConfidence:
    def test_base(self):
        assert compute_confidence({}) == 50

    @pytest.mark.parametrize("name, points", list(CONFIDENCE_BONUSES.items()))
    def test_each_bonus(self, name, points):
        assert compute_confidence({name: "x"}) == 50 + points

    def test_capped(self):
        found = {name: True for name in CONFIDENCE_BONUSES}
        assert compute_confidence(found) == 100

    def test_empty_list_earns_nothing(self):
        assert compute_confidence({"experiences": []}) == 50


class TestImportResumeText:
    def test_success(self, scenario_text):
        result = import_resume_text(scenario_text, "pasted.txt")
        assert result.success is True
        assert result.data.full_name == "Jane Doe"

    def test_failure(self):
        result = import_resume_text("short doc", "pasted.txt")
        assert result.success is False
        assert result.data is None
        assert "Could not extract text" in result.error


class TestParseResumeFile:
    @pytest.mark.asyncio
    async def test_legacy_doc(self):
        result = await parse_resume_file(ResumeFile(filename="cv.doc", data=b"x"))
        assert result.success is False
        assert result.error == "Legacy .doc format is not supported. Please convert to .docx or .pdf"

    @pytest.mark.asyncio
    async def test_unsupported(self):
        result = await parse_resume_file(ResumeFile(filename="cv.png", content_type="image/png"))
        assert result.success is False
        assert result.error == "Unsupported file format. Please upload a PDF or DOCX file."

    @pytest.mark.asyncio
    async def test_pdf_page_warning(self, full_resume_text):
        extracted = ExtractionResult(text=full_resume_text, pages=5)
        with patch(
            "services.extractors.pdf_extractor.PDFExtractor.extract", return_value=extracted
        ):
            result = await parse_resume_file(ResumeFile(filename="cv.pdf", data=b"%PDF"))
        assert result.success is True
        assert result.data.parse_info.source == "pdf"
        assert result.data.parse_info.warnings[0] == (
            "Resume has more than 3 pages. Consider condensing to 1-2 pages for ATS."
        )

    @pytest.mark.asyncio
    async def test_docx_messages_become_warnings(self, full_resume_text):
        extracted = ExtractionResult(text=full_resume_text, messages=["Document contains 1 table(s)"])
        with patch(
            "services.extractors.docx_extractor.DOCXExtractor.extract", return_value=extracted
        ):
            result = await parse_resume_file(ResumeFile(filename="cv.docx", data=b"PK"))
        assert result.success is True
        assert result.data.parse_info.source == "docx"
        assert result.data.parse_info.warnings[0] == "Document contains 1 table(s)"

    @pytest.mark.asyncio
    async def test_image_only_pdf(self):
        extracted = ExtractionResult(text="   ", pages=1)
        with patch(
            "services.extractors.pdf_extractor.PDFExtractor.extract", return_value=extracted
        ):
            result = await parse_resume_file(ResumeFile(filename="scan.pdf", data=b"%PDF"))
        assert result.success is False
        assert "image-based" in result.error

    @pytest.mark.asyncio
    async def test_extraction_error_message_surfaces(self):
        with patch(
            "services.extractors.pdf_extractor.PDFExtractor.extract",
            side_effect=ExtractionError("Invalid PDF structure"),
        ):
            result = await parse_resume_file(ResumeFile(filename="cv.pdf", data=b"%PDF"))
        assert result == ImportResult(success=False, error="Invalid PDF structure")

    @pytest.mark.asyncio
    async def test_unexpected_error_never_raises(self):
        with patch(
            "services.extractors.pdf_extractor.PDFExtractor.extract",
            side_effect=RuntimeError(),
        ):
            result = await parse_resume_file(ResumeFile(filename="cv.pdf", data=b"%PDF"))
        assert result.success is False
        assert result.error == "An unexpected error occurred while parsing the resume."


class TestConvertToResumeData:
    def test_round_trip_ids(self, full_resume_text):
        parsed = parse_resume_text(full_resume_text, "text", "john.txt")
        data = convert_to_resume_data(parsed)
        assert len(data.experiences) == len(parsed.experiences)
        ids = [exp.id for exp in data.experiences]
        assert ids == ["imported-exp-0", "imported-exp-1"]
        assert data.education[0].id == "imported-edu-0"
        assert data.projects[0].id == "imported-proj-0"
        assert data.certifications[0].id == "imported-cert-0"

    def test_stable_across_calls(self, full_resume_text):
        parsed = parse_resume_text(full_resume_text, "text", "john.txt")
        assert convert_to_resume_data(parsed) == convert_to_resume_data(parsed)

    def test_personal_and_links(self, full_resume_text):
        data = convert_to_resume_data(parse_resume_text(full_resume_text, "text", "john.txt"))
        assert data.personal.full_name == "John Smith"
        assert data.personal.location == "San Francisco, CA"
        assert [(link.id, link.type, link.label) for link in data.links] == [
            ("imported-link-linkedin", "linkedin", "LinkedIn"),
            ("imported-link-github", "github", "GitHub"),
            ("imported-link-website", "portfolio", "Portfolio"),
        ]

    def test_absent_values_default_to_empty(self, scenario_text):
        data = convert_to_resume_data(parse_resume_text(scenario_text, "text", "jane.txt"))
        assert data.personal.phone == ""
        assert data.personal.summary == ""
        assert data.experiences[0].end_date == ""
        assert data.links == []


class TestImportTracker:
    @pytest.mark.asyncio
    async def test_stale_result_discarded(self, scenario_text):
        release_first = asyncio.Event()
        first_ok = import_resume_text(scenario_text, "first.txt")
        second_ok = import_resume_text(scenario_text, "second.txt")

        async def fake_parse(file, settings=None):
            if file.filename == "first.pdf":
                await release_first.wait()
                return first_ok
            return second_ok

        tracker = ImportTracker()
        with patch.object(resume_parser, "parse_resume_file", fake_parse):
            first = asyncio.create_task(tracker.run(ResumeFile(filename="first.pdf")))
            await asyncio.sleep(0)
            second = await tracker.run(ResumeFile(filename="second.pdf"))
            release_first.set()
            stale = await first

        assert second is second_ok
        assert stale is None
        assert tracker.latest is second_ok

    @pytest.mark.asyncio
    async def test_latest_accepted_when_uncontested(self, scenario_text):
        ok = import_resume_text(scenario_text, "only.txt")

        async def fake_parse(file, settings=None):
            return ok

        tracker = ImportTracker()
        with patch.object(resume_parser, "parse_resume_file", fake_parse):
            assert await tracker.run(ResumeFile(filename="only.pdf")) is ok
        assert tracker.latest is ok

    def test_begin_invalidates_earlier_tickets(self):
        tracker = ImportTracker()
        ticket = tracker.begin()
        assert tracker.is_current(ticket)
        tracker.begin()
        assert not tracker.is_current(ticket)
