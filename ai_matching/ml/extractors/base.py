"""
Common interface for resume format extractors.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Optional

from ai_matching.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ExtractionResult:
    """Plain text pulled out of one resume document."""

    text: str
    extractor: str = ""
    page_count: int = 1
    warnings: list[str] = field(default_factory=list)
    error_message: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error_message is None

    @property
    def is_empty(self) -> bool:
        return not self.text.strip()

    @classmethod
    def failed(cls, extractor: str, error: Exception) -> "ExtractionResult":
        return cls(text="", extractor=extractor, page_count=0, error_message=str(error))


class BaseExtractor(ABC):
    """
    Turns the raw bytes of one document format into text.

    Subclasses implement ``_extract``; ``extract`` converts any parser
    failure into a failed ExtractionResult so a bad upload never raises.
    """

    name: str = "base"
    extensions: tuple[str, ...] = ()

    def can_extract(self, filename: str) -> bool:
        return PurePosixPath(filename).suffix.lower() in self.extensions

    def extract(self, content: bytes, filename: str = "document") -> ExtractionResult:
        try:
            result = self._extract(content)
        except Exception as e:
            logger.error(f"{self.name} could not read {filename}: {e}")
            return ExtractionResult.failed(self.name, e)

        if result.is_empty:
            result.warnings.append("No text found; the document may be scanned or image-only")
        return result

    @abstractmethod
    def _extract(self, content: bytes) -> ExtractionResult:
        """Parse ``content``; may raise on malformed input."""
