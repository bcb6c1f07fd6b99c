"""
Picks the extractor for a resume by its file extension.
"""

from pathlib import PurePosixPath
from typing import Optional

from .base import BaseExtractor, ExtractionResult
from .docx_extractor import DOCXExtractor
from .pdf_extractor import PDFExtractor
from .text_extractor import TextExtractor


class ExtractorFactory:
    """Registry of the extractors for every supported resume format."""

    _extractors: tuple[BaseExtractor, ...] = (
        PDFExtractor(),
        DOCXExtractor(),
        TextExtractor(),
    )

    @classmethod
    def get_extractor(cls, filename: str) -> Optional[BaseExtractor]:
        for extractor in cls._extractors:
            if extractor.can_extract(filename):
                return extractor
        return None

    @classmethod
    def is_supported(cls, filename: str) -> bool:
        return cls.get_extractor(filename) is not None

    @classmethod
    def extract_from_bytes(cls, content: bytes, filename: str) -> ExtractionResult:
        """Extract text, or a failed result for an unsupported format."""
        extractor = cls.get_extractor(filename)
        if extractor is None:
            suffix = PurePosixPath(filename).suffix or "(none)"
            return ExtractionResult.failed("none", ValueError(f"Unsupported file format: {suffix}"))
        return extractor.extract(content, filename)
