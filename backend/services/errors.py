"""Error types raised by the resume import pipeline."""

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred while parsing the resume."


class ResumeImportError(Exception):
    """Base class for import failures that carry a user-facing message."""

    default_message = UNEXPECTED_ERROR_MESSAGE

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class UnsupportedFormatError(ResumeImportError):
    default_message = "Unsupported file format. Please upload a PDF or DOCX file."


class LegacyFormatError(UnsupportedFormatError):
    default_message = "Legacy .doc format is not supported. Please convert to .docx or .pdf"


class EmptyContentError(ResumeImportError):
    default_message = (
        "Could not extract text from file. "
        "The file may be empty, corrupted, or image-based."
    )


class ExtractionError(ResumeImportError):
    """The underlying document library failed while reading the file."""
