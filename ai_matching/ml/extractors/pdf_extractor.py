"""
PDF resume extractor.

pdfplumber keeps the reading order of multi-column resumes better; pypdf
is the fallback when pdfplumber finds little or no text.
"""

import io

import pdfplumber
from pypdf import PdfReader

from ai_matching.utils.logger import get_logger

from .base import BaseExtractor, ExtractionResult

logger = get_logger(__name__)

# Below this many characters the pdfplumber pass counts as a miss
MIN_PRIMARY_TEXT = 50


class PDFExtractor(BaseExtractor):
    name = "pdf"
    extensions = (".pdf",)

    def _extract(self, content: bytes) -> ExtractionResult:
        pages = self._pages_with_pdfplumber(content)
        text = "\n".join(pages)
        if len(text.strip()) > MIN_PRIMARY_TEXT:
            return ExtractionResult(text=text, extractor="pdfplumber", page_count=len(pages))

        # Raises on bytes that are not a PDF at all
        reader = PdfReader(io.BytesIO(content))
        fallback = [page.extract_text() or "" for page in reader.pages]
        return ExtractionResult(
            text="\n".join(part for part in fallback if part),
            extractor="pypdf",
            page_count=len(reader.pages),
            warnings=["pdfplumber found little text, used pypdf"],
        )

    @staticmethod
    def _pages_with_pdfplumber(content: bytes) -> list[str]:
        try:
            with pdfplumber.open(io.BytesIO(content)) as pdf:
                return [page.extract_text() or "" for page in pdf.pages]
        except Exception as e:
            logger.debug(f"pdfplumber failed, falling back to pypdf: {e}")
            return []
