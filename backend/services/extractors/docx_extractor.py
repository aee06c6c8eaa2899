"""DOCX text extraction via python-docx."""

import io
import logging
import re

from services.errors import ExtractionError
from services.extractors.base import BaseExtractor, ExtractionResult, ResumeFile, is_docx

logger = logging.getLogger(__name__)


def clean_extracted_text(text: str) -> str:
    """Normalize line endings and whitespace while keeping paragraph breaks."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = re.sub(r"[ \t]+", " ", text)
    text = "\n".join(line.strip() for line in text.split("\n"))
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def _table_lines(table) -> list[str]:
    lines = []
    for row in table.rows:
        cells: list[str] = []
        for cell in row.cells:
            value = cell.text.strip()
            # merged cells are reported once per grid column
            if value and (not cells or cells[-1] != value):
                cells.append(value)
        if cells:
            lines.append(" | ".join(cells))
    return lines


class DOCXExtractor(BaseExtractor):
    source = "docx"

    def __init__(self) -> None:
        self._document_cls = None

    def accepts(self, file: ResumeFile) -> bool:
        return is_docx(file)

    def load(self) -> None:
        from docx import Document

        self._document_cls = Document

    def extract(self, data: bytes) -> ExtractionResult:
        self.ensure_loaded()
        messages: list[str] = []
        try:
            doc = self._document_cls(io.BytesIO(data))
            parts = [p.text for p in doc.paragraphs]

            if doc.tables:
                for table in doc.tables:
                    parts.extend(_table_lines(table))
                messages.append(
                    f"Document contains {len(doc.tables)} table(s); "
                    "table text was appended after the body text."
                )

            image_count = len(doc.inline_shapes)
        except Exception as e:
            raise ExtractionError(str(e) or None) from e

        if image_count:
            messages.append(
                f"Document contains {image_count} embedded image(s); "
                "text inside images cannot be extracted."
            )

        text = clean_extracted_text("\n".join(parts))
        logger.info("Extracted %d characters from DOCX", len(text))
        return ExtractionResult(text=text, messages=messages)
