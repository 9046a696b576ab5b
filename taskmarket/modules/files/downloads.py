import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import quote, unquote, urlparse

import httpx
from fastapi import HTTPException
from fastapi.responses import RedirectResponse, Response

from taskmarket.config import settings
from taskmarket.modules.files.cloudinary import (
    fallback_directory, get_mime_type, is_cloudinary_url, is_local_url, sanitize_filename
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DownloadResult:
    filename: str
    content: Optional[bytes] = None
    media_type: str = "application/octet-stream"
    fallback_url: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.content is None


def attachment_url(url: str) -> str:
    """Hosted files are asked to come back as an attachment."""
    if is_cloudinary_url(url):
        return f"{url.split('?')[0]}?fl_attachment"
    return url


def resolve_local_file(url: str, root: Optional[Path] = None) -> Path:
    """Path behind a file:// URL, only if it is an existing file under root."""
    root = (root or fallback_directory()).resolve()
    path = Path(unquote(urlparse(url).path)).resolve()
    if not path.is_relative_to(root) or not path.is_file():
        logger.warning(f"Refusing local download outside upload fallback dir: {path}")
        raise HTTPException(status_code=404, detail="File not found")
    return path


async def fetch_download(
    url: str,
    filename: str,
    client: Optional[httpx.AsyncClient] = None,
    local_root: Optional[Path] = None,
) -> DownloadResult:
    """Resolve url to bytes for a forced download.

    Local fallback uploads are read from disk, but only from the upload
    fallback directory. Only Cloudinary URLs are proxied; any other URL,
    or a hosted fetch that fails, yields a result carrying just
    fallback_url so the caller can send the user to the original location.
    """
    filename = sanitize_filename(filename or "download")
    media_type = get_mime_type(filename)
    logger.info(f"Starting download: url={url} file={filename}")

    if is_local_url(url):
        path = resolve_local_file(url, local_root)
        try:
            content = path.read_bytes()
        except OSError as e:
            logger.error(f"Local file unavailable: {e}")
            raise HTTPException(status_code=404, detail="File not found")
        return DownloadResult(filename=filename, content=content, media_type=media_type)

    if not is_cloudinary_url(url):
        return DownloadResult(filename=filename, media_type=media_type, fallback_url=url)

    final_url = attachment_url(url)
    try:
        if client is not None:
            response = await client.get(final_url)
        else:
            async with httpx.AsyncClient(timeout=settings.http_timeout_seconds, follow_redirects=True) as http:
                response = await http.get(final_url)
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.error(f"Download failed: {e}")
        return DownloadResult(filename=filename, media_type=media_type, fallback_url=url)

    return DownloadResult(
        filename=filename,
        content=response.content,
        media_type=response.headers.get("content-type", media_type),
    )


def to_response(result: DownloadResult) -> Response:
    if result.is_fallback:
        return RedirectResponse(result.fallback_url, status_code=307)
    disposition = f"attachment; filename*=UTF-8''{quote(result.filename)}"
    return Response(
        content=result.content,
        media_type=result.media_type,
        headers={"Content-Disposition": disposition},
    )
