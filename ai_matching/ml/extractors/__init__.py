"""
Resume text extractors for the supported document formats (PDF, DOCX, TXT).
"""

from .base import BaseExtractor, ExtractionResult
from .pdf_extractor import PDFExtractor
from .docx_extractor import DOCXExtractor
from .text_extractor import TextExtractor
from .extractor_factory import ExtractorFactory

__all__ = [
    "BaseExtractor",
    "ExtractionResult",
    "PDFExtractor",
    "DOCXExtractor",
    "TextExtractor",
    "ExtractorFactory",
]
