"""PDF text extraction with line reconstruction from positioned words."""

import io
import logging
from typing import NamedTuple

from services.errors import ExtractionError
from services.extractors.base import BaseExtractor, ExtractionResult, ResumeFile, is_pdf

logger = logging.getLogger(__name__)

PAGE_BREAK = "\n\n--- Page Break ---\n\n"

# Fragments whose baselines differ by no more than this share a line
LINE_TOLERANCE = 5

_METADATA_KEYS = {"Title": "title", "Author": "author", "Subject": "subject", "Creator": "creator"}


class TextFragment(NamedTuple):
    text: str
    x: float
    y: float  # bottom-origin page space: larger is higher on the page


def group_fragments_into_lines(
    fragments: list[TextFragment], tolerance: float = LINE_TOLERANCE
) -> str:
    """Rebuild reading-order text from positioned fragments.

    Lines run top to bottom (y descending); fragments within a line run
    left to right and are joined by single spaces.
    """
    ordered = sorted(
        (f for f in fragments if f.text.strip()), key=lambda f: -f.y
    )
    lines: list[list[TextFragment]] = []
    anchor_y: int | None = None
    for fragment in ordered:
        y = round(fragment.y)
        if anchor_y is None or abs(y - anchor_y) > tolerance:
            lines.append([fragment])
            anchor_y = y
        else:
            lines[-1].append(fragment)

    return "\n".join(
        " ".join(f.text for f in sorted(line, key=lambda f: f.x)) for line in lines
    )


def _read_metadata(pdf) -> dict[str, str]:
    try:
        info = pdf.metadata or {}
    except Exception as e:  # malformed info dictionaries are not fatal
        logger.debug("Could not read PDF metadata: %s", e)
        return {}
    return {
        ours: str(info[theirs])
        for theirs, ours in _METADATA_KEYS.items()
        if info.get(theirs)
    }


class PDFExtractor(BaseExtractor):
    source = "pdf"

    def __init__(self) -> None:
        self._pdfplumber = None

    def accepts(self, file: ResumeFile) -> bool:
        return is_pdf(file)

    def load(self) -> None:
        import pdfplumber

        self._pdfplumber = pdfplumber

    def extract(self, data: bytes) -> ExtractionResult:
        self.ensure_loaded()
        try:
            with self._pdfplumber.open(io.BytesIO(data)) as pdf:
                metadata = _read_metadata(pdf)
                page_texts = []
                for page in pdf.pages:
                    words = page.extract_words(keep_blank_chars=True, use_text_flow=False)
                    height = float(page.height)
                    fragments = [
                        TextFragment(w["text"], float(w["x0"]), height - float(w["bottom"]))
                        for w in words
                    ]
                    page_texts.append(group_fragments_into_lines(fragments))
                page_count = len(pdf.pages)
        except Exception as e:
            raise ExtractionError(str(e) or None) from e

        logger.info("Extracted %d page(s) from PDF", page_count)
        return ExtractionResult(
            text=PAGE_BREAK.join(page_texts),
            pages=page_count,
            metadata=metadata,
        )
