"""
Plain text and Markdown resume extractor.
"""

from .base import BaseExtractor, ExtractionResult

# latin-1 accepts any byte sequence, so decoding always succeeds
ENCODINGS = ("utf-8-sig", "utf-16", "cp1252", "latin-1")


class TextExtractor(BaseExtractor):
    name = "text"
    extensions = (".txt", ".text", ".md")

    def _extract(self, content: bytes) -> ExtractionResult:
        if content[:2] in (b"\xff\xfe", b"\xfe\xff"):
            encodings = ("utf-16",)
        else:
            encodings = tuple(e for e in ENCODINGS if e != "utf-16")

        for encoding in encodings:
            try:
                text = content.decode(encoding)
            except UnicodeDecodeError:
                continue
            return ExtractionResult(text=text, extractor=f"text/{encoding}")
        raise ValueError("Could not decode text document")
