"""
Message media loaded from a URL.

Downloads the payload with httpx and keeps the raw bytes together with
the MIME type and file name the client needs for sending.
"""

import logging
import mimetypes
import re
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Optional
from urllib.parse import unquote, urlparse

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 30.0

_FILENAME_RE = re.compile(r'filename\*?=(?:UTF-8\'\')?"?([^";]+)"?', re.IGNORECASE)


class MediaError(Exception):
    """Media could not be loaded."""
    pass


@dataclass(frozen=True)
class MessageMedia:
    """Media attachment ready to be sent."""

    mimetype: str
    data: bytes
    filename: Optional[str] = None
    filesize: Optional[int] = None

    @classmethod
    async def from_url(
        cls,
        url: str,
        unsafe_mime: bool = False,
        filename: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT_S,
        client: Optional[httpx.AsyncClient] = None,
    ) -> "MessageMedia":
        """
        Download media from a URL.

        Args:
            url: Remote resource
            unsafe_mime: Download even when the URL does not reveal a MIME
                type, trusting the server's Content-Type header
            filename: Override for the attachment name
            timeout: Request timeout in seconds
            client: Optional shared httpx client

        Returns:
            MessageMedia with the downloaded bytes

        Raises:
            MediaError: MIME type unknown, HTTP error, or empty payload
        """
        path = unquote(urlparse(url).path)
        guessed_mime, _ = mimetypes.guess_type(path)

        if not guessed_mime and not unsafe_mime:
            raise MediaError(
                "Unable to determine MIME type using URL. "
                "Set unsafe_mime to True to download it anyway."
            )

        try:
            if client is None:
                async with httpx.AsyncClient(follow_redirects=True) as owned:
                    response = await owned.get(url, timeout=timeout)
            else:
                response = await client.get(url, timeout=timeout)
        except httpx.RequestError as e:
            raise MediaError(f"Failed to fetch media: {e}") from e

        if response.status_code >= 400:
            raise MediaError(
                f"Media URL returned {response.status_code}"
            )

        content_type = response.headers.get("content-type", "").split(";")[0].strip()
        mimetype = (content_type if unsafe_mime else guessed_mime) or guessed_mime or content_type
        if not mimetype:
            mimetype = "application/octet-stream"

        data = response.content
        if not data:
            raise MediaError("Media URL returned an empty body")

        if filename is None:
            filename = _filename_from_headers(response.headers) or PurePosixPath(path).name or None

        logger.debug(
            "Media loaded",
            extra={"url": url, "mimetype": mimetype, "size": len(data)},
        )

        return cls(
            mimetype=mimetype,
            data=data,
            filename=filename,
            filesize=len(data),
        )


def _filename_from_headers(headers: httpx.Headers) -> Optional[str]:
    disposition = headers.get("content-disposition")
    if not disposition:
        return None
    match = _FILENAME_RE.search(disposition)
    return unquote(match.group(1)) if match else None
