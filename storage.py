"""
Blob storage for logos and product images.

Files are kept base64-encoded in the "upload" collection under a generated
path and served back by GET /api/uploads/{path}.
"""
import base64
import os
import re
import time
from typing import Optional

from pymongo.errors import PyMongoError

from errors import NotFound, TransientIOError
from schemas import Upload

UPLOAD_COLLECTION = "upload"
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "").rstrip("/")


def _timestamp_ms() -> int:
    return int(time.time() * 1000)


def _safe_name(name: str) -> str:
    return re.sub(r"[^A-Za-z0-9._-]+", "_", name).strip("_") or "file"


def logo_path(filename: str, timestamp: Optional[int] = None) -> str:
    return f"site/logo/{timestamp or _timestamp_ms()}_{_safe_name(filename)}"


def product_image_path(product_name: str, timestamp: Optional[int] = None) -> str:
    return f"products/{_safe_name(product_name)}-{timestamp or _timestamp_ms()}"


def public_url(path: str) -> str:
    return f"{PUBLIC_BASE_URL}/api/uploads/{path}"


def save_upload(database, path: str, filename: str, content_type: str, content: bytes) -> str:
    """Store a blob at `path` and return its public URL."""
    if database is None:
        raise TransientIOError("Database not configured")
    doc = Upload(
        path=path,
        filename=filename,
        content_type=content_type or "application/octet-stream",
        size=len(content),
        data_b64=base64.b64encode(content).decode("utf-8"),
    )
    try:
        database[UPLOAD_COLLECTION].replace_one({"path": path}, doc.model_dump(), upsert=True)
    except PyMongoError as e:
        raise TransientIOError(f"Failed to store {path}: {e}") from e
    return public_url(path)


def load_upload(database, path: str) -> Upload:
    if database is None:
        raise TransientIOError("Database not configured")
    try:
        doc = database[UPLOAD_COLLECTION].find_one({"path": path})
    except PyMongoError as e:
        raise TransientIOError(f"Failed to read {path}: {e}") from e
    if not doc:
        raise NotFound(f"Upload not found: {path}")
    doc.pop("_id", None)
    return Upload(**doc)


def decode(upload: Upload) -> bytes:
    return base64.b64decode(upload.data_b64)
