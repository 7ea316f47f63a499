from __future__ import annotations

import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urljoin, urlsplit, urlunsplit

import httpx
from pydantic import ValidationError as PydanticValidationError

from direct_upload.client.errors import (
    AuthError,
    MalformedSigningResponse,
    NetworkError,
    SigningFailure,
    TooLarge,
    UploadRejected,
    ValidationError,
    WrongFileType,
)
from direct_upload.schemas import SigningResponse

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "image/jpeg"
DEFAULT_MAX_UPLOAD_BYTES = 1_000_000


@dataclass(frozen=True)
class SelectedFile:
    """A validated file held in memory until it is uploaded."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


def object_url(upload_url: str) -> str:
    """Return the public URL of the object a capability URL writes to."""
    parts = urlsplit(upload_url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


def _check_type(filename: str, declared_type: str | None, content_type: str) -> None:
    declared = declared_type or mimetypes.guess_type(filename)[0]
    if declared != content_type:
        raise WrongFileType(declared, content_type)


def select_file(
    filename: str,
    data: bytes,
    declared_type: str | None = None,
    *,
    content_type: str = DEFAULT_CONTENT_TYPE,
    max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
) -> SelectedFile:
    _check_type(filename, declared_type, content_type)
    if len(data) > max_bytes:
        raise TooLarge(len(data), max_bytes)
    return SelectedFile(filename=filename, content_type=content_type, data=data)


def select_path(
    path: str | Path,
    declared_type: str | None = None,
    *,
    content_type: str = DEFAULT_CONTENT_TYPE,
    max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
) -> SelectedFile:
    path = Path(path)
    _check_type(path.name, declared_type, content_type)
    try:
        size = path.stat().st_size
        if size > max_bytes:
            raise TooLarge(size, max_bytes)
        data = path.read_bytes()
    except OSError as exc:
        raise ValidationError(f"Cannot read {path}: {exc.strerror or exc}") from exc
    return select_file(
        path.name,
        data,
        content_type,
        content_type=content_type,
        max_bytes=max_bytes,
    )


class UploadClient:
    """Requests capability URLs from the signing service and uploads through them.

    Example:
        async with UploadClient("https://api.example.com", token=token) as client:
            selected = client.select_file("cat.jpg", data)
            url = await client.upload(selected)
    """

    def __init__(
        self,
        service_url: str,
        *,
        uploads_path: str = "/uploads",
        content_type: str = DEFAULT_CONTENT_TYPE,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
        token: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.signing_url = urljoin(service_url.rstrip("/") + "/", uploads_path.lstrip("/"))
        self.content_type = content_type
        self.max_upload_bytes = max_upload_bytes
        self.token = token
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(transport=transport)

    async def __aenter__(self) -> UploadClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    def select_file(
        self, filename: str, data: bytes, declared_type: str | None = None
    ) -> SelectedFile:
        return select_file(
            filename,
            data,
            declared_type,
            content_type=self.content_type,
            max_bytes=self.max_upload_bytes,
        )

    def select_path(self, path: str | Path, declared_type: str | None = None) -> SelectedFile:
        return select_path(
            path,
            declared_type,
            content_type=self.content_type,
            max_bytes=self.max_upload_bytes,
        )

    async def request_signing(self) -> SigningResponse:
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        try:
            response = await self._http.get(self.signing_url, headers=headers)
        except httpx.TransportError as exc:
            raise NetworkError(f"Could not reach the signing service: {exc}") from exc

        if response.status_code in (401, 403):
            raise AuthError(response.status_code)
        if not response.is_success:
            raise SigningFailure(
                f"Signing service answered HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            signed = SigningResponse.model_validate(response.json())
        except (ValueError, PydanticValidationError) as exc:
            raise MalformedSigningResponse(
                "Signing service returned an unexpected body",
                status_code=response.status_code,
            ) from exc

        if urlsplit(signed.upload_url).scheme not in ("http", "https"):
            raise MalformedSigningResponse(
                f"Upload URL is not an absolute http(s) URL: {signed.upload_url}",
                status_code=response.status_code,
            )
        return signed

    async def upload(self, selected: SelectedFile) -> str:
        signed = await self.request_signing()
        try:
            response = await self._http.put(
                signed.upload_url,
                content=selected.data,
                headers={"Content-Type": self.content_type},
            )
        except httpx.TransportError as exc:
            raise NetworkError(f"Upload of {signed.key} failed: {exc}") from exc

        if not response.is_success:
            logger.warning(
                "Store rejected upload of %s with HTTP %d", signed.key, response.status_code
            )
            raise UploadRejected(response.status_code, response.text)

        url = object_url(signed.upload_url)
        logger.info("Uploaded %d bytes to %s", selected.size, url)
        return url
