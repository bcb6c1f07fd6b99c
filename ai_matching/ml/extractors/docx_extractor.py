"""
Word (.docx) resume extractor built on python-docx.
"""

import io

from docx import Document

from .base import BaseExtractor, ExtractionResult


class DOCXExtractor(BaseExtractor):
    name = "docx"
    extensions = (".docx",)

    def _extract(self, content: bytes) -> ExtractionResult:
        doc = Document(io.BytesIO(content))
        lines: list[str] = []

        # Contact details often live in the page header
        for section in doc.sections:
            lines.extend(p.text.strip() for p in section.header.paragraphs)

        lines.extend(p.text.strip() for p in doc.paragraphs)

        # Skills and employment dates are often laid out as tables
        for table in doc.tables:
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells]
                lines.append(" | ".join(c for c in dict.fromkeys(cells) if c))

        return ExtractionResult(
            text="\n".join(line for line in lines if line),
            extractor="python-docx",
            page_count=len(doc.sections) or 1,
        )
