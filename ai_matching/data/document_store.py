"""
Resume document stores.

A resume reference on a candidate is either a public storage URL such as
``https://host/storage/v1/object/public/resumes/<org>/<candidate>/cv.pdf``
or a bare path relative to the store. ``resolve_resume_reference`` turns
either form into a store path; stores turn a path into bytes.
"""

import asyncio
import re
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable
from urllib.parse import unquote, urlparse

from motor.motor_asyncio import AsyncIOMotorDatabase, AsyncIOMotorGridFSBucket

from ai_matching.utils.config import StorageSettings
from ai_matching.utils.logger import get_logger

logger = get_logger(__name__)

PUBLIC_OBJECT_PATH = re.compile(r"/storage/v1/object/public/(?P<bucket>[^/]+)/(?P<path>.+)")

# Resumes are small documents; anything bigger is not a resume
MAX_DOCUMENT_BYTES = 50 * 1024 * 1024


@runtime_checkable
class DocumentStore(Protocol):
    """Anything that can turn a store path into raw bytes."""

    async def fetch(self, path: str) -> bytes:
        ...


def resolve_resume_reference(reference: str, bucket: str) -> Optional[str]:
    """
    Map a resume reference to a path inside ``bucket``.

    Returns None when the reference is a URL of an unknown shape or points
    at another bucket.
    """
    reference = (reference or "").strip()
    if not reference:
        return None

    parsed = urlparse(reference)
    if parsed.scheme in ("http", "https"):
        match = PUBLIC_OBJECT_PATH.search(parsed.path)
        if not match or match.group("bucket") != bucket:
            return None
        return unquote(match.group("path"))

    if parsed.scheme:
        return None

    path = unquote(reference).lstrip("/")
    # Tolerate references that repeat the bucket name as their first segment
    prefix = f"{bucket}/"
    if path.startswith(prefix):
        path = path[len(prefix):]
    return path or None


class LocalDocumentStore:
    """Serves documents from a directory on the local filesystem."""

    def __init__(self, root: Path | str):
        self.root = Path(root).resolve()

    def _resolve(self, path: str) -> Path:
        """Resolve a store path, refusing anything outside the root."""
        candidate = (self.root / path).resolve()
        if candidate != self.root and self.root not in candidate.parents:
            raise ValueError(f"Access denied: {path}")
        return candidate

    def _read(self, path: str) -> bytes:
        file_path = self._resolve(path)
        if not file_path.is_file():
            raise FileNotFoundError(f"Document not found: {path}")
        size = file_path.stat().st_size
        if size > MAX_DOCUMENT_BYTES:
            raise ValueError(f"Document too large: {size} bytes (max: {MAX_DOCUMENT_BYTES})")
        return file_path.read_bytes()

    async def fetch(self, path: str) -> bytes:
        return await asyncio.to_thread(self._read, path)


class GridFSDocumentStore:
    """Serves documents from a MongoDB GridFS bucket, looked up by filename."""

    def __init__(self, database: AsyncIOMotorDatabase, bucket: str):
        self._bucket = AsyncIOMotorGridFSBucket(database, bucket_name=bucket)

    async def fetch(self, path: str) -> bytes:
        stream = await self._bucket.open_download_stream_by_name(path)
        if stream.length > MAX_DOCUMENT_BYTES:
            raise ValueError(f"Document too large: {stream.length} bytes (max: {MAX_DOCUMENT_BYTES})")
        return await stream.read()


def create_document_store(
    storage: StorageSettings,
    database: Optional[AsyncIOMotorDatabase] = None,
) -> DocumentStore:
    """Build the document store selected by configuration."""
    if storage.backend == "gridfs":
        if database is None:
            raise ValueError("GridFS document store requires a database")
        logger.info(f"Using GridFS document store (bucket={storage.bucket})")
        return GridFSDocumentStore(database, storage.bucket)

    logger.info(f"Using local document store at {storage.local_root}")
    return LocalDocumentStore(storage.local_root)
