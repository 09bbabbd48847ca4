"""
File Routes

GET /files/{path}?token=... - Download a resume through a signed link
"""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from jobboard.api.deps import get_resume_storage
from jobboard.core.errors import InvalidToken, Unauthenticated
from jobboard.services.resume_storage import ResumeStorage

router = APIRouter(prefix="/files", tags=["Files"])


@router.get("/{path:path}")
async def download_file(
    path: str,
    token: str = Query(..., description="Signed link token"),
    storage: ResumeStorage = Depends(get_resume_storage),
):
    """Serve a stored resume when the signed link is valid and unexpired."""
    try:
        storage.verify_signed_path(token, path)
    except InvalidToken:
        raise Unauthenticated("Invalid or expired link")

    content, content_type = await storage.download(path)
    filename = path.rsplit("/", 1)[-1]
    return Response(
        content=content,
        media_type=content_type,
        headers={"Content-Disposition": f'inline; filename="{filename}"'},
    )
