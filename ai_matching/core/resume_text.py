"""
Resume text extraction for scoring.

Fetches the candidate's resume from the document store and returns plain
text bounded to a fixed length. Missing resume text lowers score quality
but never blocks scoring, so every failure yields an empty string.
"""

import asyncio
from pathlib import PurePosixPath
from typing import Optional

from ai_matching.ml.extractors import ExtractorFactory
from ai_matching.data.document_store import DocumentStore, resolve_resume_reference
from ai_matching.utils.constants import RESUME_MAX_CHARS
from ai_matching.utils.logger import LoggerMixin


class ResumeTextExtractor(LoggerMixin):
    """Turns a resume reference into bounded plain text."""

    def __init__(
        self,
        store: DocumentStore,
        bucket: str = "resumes",
        max_chars: int = RESUME_MAX_CHARS,
    ):
        self.store = store
        self.bucket = bucket
        self.max_chars = max_chars

    async def extract(self, reference: Optional[str]) -> str:
        """
        Extract resume text for a reference.

        Returns "" when there is no reference, it cannot be resolved, the
        store is unavailable, the format is unsupported or extraction fails.
        """
        if not reference:
            return ""

        path = resolve_resume_reference(reference, self.bucket)
        if path is None:
            self.logger.warning(f"Unrecognized resume reference, scoring without resume: {reference}")
            return ""

        if not ExtractorFactory.is_supported(path):
            self.logger.warning(f"Unsupported resume format, scoring without resume: {path}")
            return ""

        try:
            content = await self.store.fetch(path)
        except Exception as e:
            self.logger.warning(f"Could not fetch resume {path}: {e}")
            return ""

        try:
            result = await asyncio.to_thread(
                ExtractorFactory.extract_from_bytes, content, PurePosixPath(path).name
            )
        except Exception as e:
            self.logger.warning(f"Resume extraction crashed for {path}: {e}")
            return ""

        if not result.success:
            self.logger.warning(f"Resume extraction failed for {path}: {result.error_message}")
            return ""
        for warning in result.warnings:
            self.logger.debug(f"{path}: {warning}")

        return result.text[: self.max_chars]
