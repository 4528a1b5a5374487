import mimetypes
from pathlib import Path
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.responses import FileResponse

from dlna_catalog.domain.catalog.errors import AlbumArtNotFound
from dlna_catalog.service import CatalogService
from ..deps import get_service

router = APIRouter()

IMAGE_MIME_TYPES: dict[str, str] = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".bmp": "image/bmp",
}


def get_mime_type(file_path: Path) -> str:
    """Pure function - deterministic MIME type detection."""
    mime = IMAGE_MIME_TYPES.get(file_path.suffix.lower())
    if mime:
        return mime
    guessed, _ = mimetypes.guess_type(str(file_path))
    return guessed or "application/octet-stream"


def art_etag(filename: str) -> str:
    """Pure function - entity tag for a cached art file."""
    return f'"{quote(filename)}-art"'


@router.get("/album-art/{filename}")
async def get_album_art(
    filename: str, request: Request, service: CatalogService = Depends(get_service)
):
    try:
        path = service.art_cache.open(filename)
    except AlbumArtNotFound:
        raise HTTPException(404, "No album art found")

    etag = art_etag(filename)
    if request.headers.get("if-none-match") == etag:
        return Response(status_code=304, headers={"ETag": etag})

    return FileResponse(
        path,
        media_type=get_mime_type(path),
        headers={"ETag": etag, "Cache-Control": "public, max-age=86400"},
    )
