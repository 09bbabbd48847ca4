"""
File Upload Utility - validate resume uploads.

Supported format: PDF (.pdf, application/pdf) only
Max file size: 5MB (settings.max_resume_size_mb)
"""

import secrets
from typing import Optional

from fastapi import UploadFile

from jobboard.core.errors import BadRequest

PDF_CONTENT_TYPE = "application/pdf"
PDF_MAGIC = b"%PDF-"
# nanoid-length random names: 12 random bytes -> 16 url-safe characters
STORAGE_NAME_BYTES = 12


async def read_resume_upload(file: Optional[UploadFile], max_size_mb: int = 5) -> Optional[bytes]:
    """
    Read and validate an uploaded resume.

    Returns None when no file was sent (callers decide whether that
    is an error). Raises BadRequest for non-PDF or oversized files.
    """
    if file is None or not file.filename:
        return None

    if (file.content_type or "").lower() != PDF_CONTENT_TYPE:
        raise BadRequest("Only PDF files are allowed")

    max_bytes = max_size_mb * 1024 * 1024
    # Read one byte past the limit so oversized files are detected
    content = await file.read(max_bytes + 1)
    if len(content) > max_bytes:
        raise BadRequest(f"File too large. Maximum size: {max_size_mb}MB")

    if not content.startswith(PDF_MAGIC):
        raise BadRequest("Only PDF files are allowed")

    return content


def resume_storage_path(user_id: str) -> str:
    """Collision-resistant storage path scoped by user id."""
    return f"resumes/{user_id}/{secrets.token_urlsafe(STORAGE_NAME_BYTES)}.pdf"
