"""
Tests for resume text extraction: reference resolution, stores and
the never-raising ResumeTextExtractor.
"""

import io
from unittest.mock import AsyncMock, MagicMock

import pytest
from docx import Document

from ai_matching.core.resume_text import ResumeTextExtractor
from ai_matching.data.document_store import LocalDocumentStore, resolve_resume_reference
from ai_matching.ml.extractors import ExtractorFactory


PUBLIC_URL = "https://abc.storage.example.com/storage/v1/object/public/resumes/org-1/cand-1/jane%20smith.txt"


# ── resolve_resume_reference ─────────────────────────────────────────────────


class TestResolveResumeReference:
    def test_public_url(self):
        assert resolve_resume_reference(PUBLIC_URL, "resumes") == "org-1/cand-1/jane smith.txt"

    def test_public_url_other_bucket(self):
        url = PUBLIC_URL.replace("/resumes/", "/avatars/")
        assert resolve_resume_reference(url, "resumes") is None

    def test_unknown_url_shape(self):
        assert resolve_resume_reference("https://example.com/files/cv.pdf", "resumes") is None

    def test_bare_path(self):
        assert resolve_resume_reference("org-1/cand-1/cv.pdf", "resumes") == "org-1/cand-1/cv.pdf"

    def test_bare_path_with_bucket_prefix(self):
        assert resolve_resume_reference("/resumes/org-1/cv.pdf", "resumes") == "org-1/cv.pdf"

    def test_other_scheme(self):
        assert resolve_resume_reference("s3://bucket/cv.pdf", "resumes") is None

    def test_blank(self):
        assert resolve_resume_reference("  ", "resumes") is None


# ── LocalDocumentStore ───────────────────────────────────────────────────────


class TestLocalDocumentStore:
    @pytest.mark.asyncio
    async def test_reads_file(self, tmp_path):
        (tmp_path / "org-1").mkdir()
        (tmp_path / "org-1" / "cv.txt").write_bytes(b"hello")
        store = LocalDocumentStore(tmp_path)
        assert await store.fetch("org-1/cv.txt") == b"hello"

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path):
        store = LocalDocumentStore(tmp_path)
        with pytest.raises(FileNotFoundError):
            await store.fetch("nope.txt")

    @pytest.mark.asyncio
    async def test_path_traversal_is_refused(self, tmp_path):
        store = LocalDocumentStore(tmp_path / "root")
        with pytest.raises(ValueError):
            await store.fetch("../secret.txt")


# ── ExtractorFactory ─────────────────────────────────────────────────────────


class TestExtractorFactory:
    @pytest.mark.parametrize("filename", ["cv.pdf", "CV.PDF", "cv.docx", "cv.txt"])
    def test_supported(self, filename):
        assert ExtractorFactory.is_supported(filename)

    @pytest.mark.parametrize("filename", ["cv.doc", "cv.png", "cv"])
    def test_unsupported(self, filename):
        assert not ExtractorFactory.is_supported(filename)

    def test_text_decoding(self):
        result = ExtractorFactory.extract_from_bytes("Café résumé".encode("utf-8"), "cv.txt")
        assert result.success
        assert result.text == "Café résumé"

    def test_docx_paragraphs_and_tables(self):
        document = Document()
        document.add_paragraph("Jane Smith")
        document.add_paragraph("Python developer")
        table = document.add_table(rows=1, cols=2)
        table.rows[0].cells[0].text = "Skills"
        table.rows[0].cells[1].text = "Django"
        buffer = io.BytesIO()
        document.save(buffer)

        result = ExtractorFactory.extract_from_bytes(buffer.getvalue(), "cv.docx")

        assert result.success
        assert "Jane Smith" in result.text
        assert "Python developer" in result.text
        assert "Django" in result.text

    def test_corrupt_pdf_is_an_error_result(self):
        result = ExtractorFactory.extract_from_bytes(b"not a pdf", "cv.pdf")
        assert not result.success

    def test_text_with_bom_and_utf16(self):
        assert ExtractorFactory.extract_from_bytes(b"\xef\xbb\xbfHello", "cv.txt").text == "Hello"
        assert ExtractorFactory.extract_from_bytes("Hello".encode("utf-16"), "cv.md").text == "Hello"

    def test_cp1252_fallback(self):
        result = ExtractorFactory.extract_from_bytes("naïve".encode("cp1252"), "cv.txt")
        assert result.text == "naïve"
        assert result.extractor == "text/cp1252"

    def test_unsupported_format_result(self):
        result = ExtractorFactory.extract_from_bytes(b"...", "cv.png")
        assert not result.success
        assert "Unsupported" in result.error_message

    def test_empty_document_warns(self):
        result = ExtractorFactory.extract_from_bytes(b"   ", "cv.txt")
        assert result.success
        assert result.is_empty
        assert result.warnings


# ── ResumeTextExtractor ──────────────────────────────────────────────────────


class TestResumeTextExtractor:
    @pytest.mark.asyncio
    async def test_extracts_text_from_public_url(self, make_document_store):
        store = make_document_store({"org-1/cand-1/jane smith.txt": b"Ten years of Python."})
        extractor = ResumeTextExtractor(store)
        assert await extractor.extract(PUBLIC_URL) == "Ten years of Python."

    @pytest.mark.asyncio
    async def test_truncates_to_max_chars(self, make_document_store):
        store = make_document_store({"cv.txt": b"x" * 9000})
        extractor = ResumeTextExtractor(store)
        text = await extractor.extract("cv.txt")
        assert len(text) == 8000

    @pytest.mark.asyncio
    async def test_custom_limit(self, make_document_store):
        store = make_document_store({"cv.txt": b"abcdef"})
        extractor = ResumeTextExtractor(store, max_chars=3)
        assert await extractor.extract("cv.txt") == "abc"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("reference", [None, "", "https://example.com/cv.txt", "ftp://x/cv.txt"])
    async def test_unusable_reference_gives_empty(self, make_document_store, reference):
        store = make_document_store()
        assert await ResumeTextExtractor(store).extract(reference) == ""
        assert store.fetched == []

    @pytest.mark.asyncio
    async def test_unsupported_format_is_not_fetched(self, make_document_store):
        store = make_document_store({"cv.png": b"\x89PNG"})
        assert await ResumeTextExtractor(store).extract("cv.png") == ""
        assert store.fetched == []

    @pytest.mark.asyncio
    async def test_missing_document_gives_empty(self, make_document_store):
        assert await ResumeTextExtractor(make_document_store()).extract("cv.pdf") == ""

    @pytest.mark.asyncio
    async def test_store_failure_gives_empty(self):
        store = MagicMock()
        store.fetch = AsyncMock(side_effect=ConnectionError("storage down"))
        assert await ResumeTextExtractor(store).extract("cv.txt") == ""

    @pytest.mark.asyncio
    async def test_corrupt_document_gives_empty(self, make_document_store):
        store = make_document_store({"cv.pdf": b"garbage bytes"})
        assert await ResumeTextExtractor(store).extract("cv.pdf") == ""
