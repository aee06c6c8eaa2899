"""Lazy-loading registry of document extractors.

Extractors are created and their libraries imported on first use (or by
``preload`` at startup), never as an import side effect.
"""

import logging

from services.errors import LegacyFormatError, UnsupportedFormatError
from services.extractors.base import BaseExtractor, ResumeFile, is_legacy_doc

logger = logging.getLogger(__name__)

EXTRACTOR_NAMES = ("pdf", "docx")

_registry: dict[str, BaseExtractor] = {}


def _create_extractor(name: str) -> BaseExtractor:
    """Factory: create an extractor by name with deferred imports."""
    if name == "pdf":
        from services.extractors.pdf_extractor import PDFExtractor
        return PDFExtractor()
    elif name == "docx":
        from services.extractors.docx_extractor import DOCXExtractor
        return DOCXExtractor()
    else:
        raise ValueError(f"Unknown extractor: {name}")


def get_extractor(name: str) -> BaseExtractor:
    """Get an extractor by name, creating and loading it on first access."""
    if name not in _registry:
        _registry[name] = _create_extractor(name)
    extractor = _registry[name]
    extractor.ensure_loaded()
    return extractor


def extractor_for(file: ResumeFile) -> BaseExtractor:
    """Pick the extractor for a file, rejecting legacy and unknown formats."""
    if is_legacy_doc(file):
        raise LegacyFormatError()
    for name in EXTRACTOR_NAMES:
        extractor = get_extractor(name)
        if extractor.accepts(file):
            extractor.validate(file)
            return extractor
    raise UnsupportedFormatError()


def preload(*names: str) -> None:
    """Pre-load extractors (e.g. at startup). Defaults to all of them."""
    for name in names or EXTRACTOR_NAMES:
        get_extractor(name)


def loaded() -> list[str]:
    return sorted(name for name, ext in _registry.items() if ext.is_loaded)


def clear() -> None:
    """Drop all extractors. Useful for testing."""
    _registry.clear()
