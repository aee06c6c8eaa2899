"""Abstract base class for document text extractors."""

from abc import ABC, abstractmethod
import logging

from pydantic import BaseModel

from services.errors import LegacyFormatError, UnsupportedFormatError

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
LEGACY_DOC_MIME = "application/msword"


class ResumeFile(BaseModel):
    """An uploaded file: name, declared MIME type and raw bytes."""
    filename: str
    content_type: str = ""
    data: bytes = b""


class ExtractionResult(BaseModel):
    text: str
    pages: int | None = None
    messages: list[str] = []
    metadata: dict[str, str] = {}


def _has_extension(file: ResumeFile, ext: str) -> bool:
    return file.filename.lower().endswith(ext)


def is_pdf(file: ResumeFile) -> bool:
    return file.content_type == PDF_MIME or _has_extension(file, ".pdf")


def is_docx(file: ResumeFile) -> bool:
    return file.content_type == DOCX_MIME or _has_extension(file, ".docx")


def is_legacy_doc(file: ResumeFile) -> bool:
    return file.content_type == LEGACY_DOC_MIME or _has_extension(file, ".doc")


class BaseExtractor(ABC):
    """Base class for format-specific text extractors.

    Subclasses must implement:
        - source: identifier recorded in ParseInfo.source
        - accepts(file): MIME/extension check
        - load(): import and configure the backing document library
        - extract(data): return an ExtractionResult for the raw bytes
    """

    source: str = ""
    _loaded: bool = False

    @abstractmethod
    def accepts(self, file: ResumeFile) -> bool:
        """Return True if the file is in this extractor's format."""

    @abstractmethod
    def load(self) -> None:
        """One-time library setup. Called once by the extractor registry."""

    @abstractmethod
    def extract(self, data: bytes) -> ExtractionResult:
        """Extract text. Blocking; callers run it off the event loop."""

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def ensure_loaded(self) -> None:
        """Load the document library if not already loaded."""
        if not self._loaded:
            logger.info("Loading extractor: %s", self.source)
            self.load()
            self._loaded = True

    def validate(self, file: ResumeFile) -> None:
        """Reject files this extractor cannot read, before touching the bytes."""
        if is_legacy_doc(file):
            raise LegacyFormatError()
        if not self.accepts(file):
            raise UnsupportedFormatError()
