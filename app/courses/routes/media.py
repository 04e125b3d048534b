import logging

from fastapi import APIRouter, Query
from fastapi.responses import FileResponse

from app.core import security
from app.core.config import settings
from app.core.exceptions import ForbiddenError, NotFoundError
from app.core.storage import get_local_storage

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{path:path}")
async def serve_media(path: str, token: str = Query(...)) -> FileResponse:
    """Stream a locally stored object to holders of a valid signed token."""
    if settings.STORAGE_BACKEND != "local":
        raise NotFoundError("Media not found", resource="media")
    if not security.verify_media_token(token, path):
        raise ForbiddenError("Invalid or expired media token")

    try:
        full_path = get_local_storage().resolve(path)
    except ValueError as e:
        logger.warning("Rejected media path %s: %s", path, e)
        raise NotFoundError("Media not found", resource="media") from e
    if not full_path.is_file():
        raise NotFoundError("Media not found", resource="media")
    return FileResponse(full_path)
