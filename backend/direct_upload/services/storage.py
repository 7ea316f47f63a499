import asyncio
import logging
import mimetypes
import secrets
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Final, Protocol
from urllib.parse import quote, urlencode
from uuid import uuid4

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from direct_upload.core.config import Settings
from direct_upload.core.security import (
    TokenError,
    create_capability_token,
    decode_capability_token,
)

logger = logging.getLogger(__name__)

LOCAL_URL_PREFIX: Final[str] = "local://store/"

_CLIENT_METHODS: Final[dict[str, str]] = {
    "PUT": "put_object",
    "GET": "get_object",
}


class SigningError(Exception):
    """Raised when a capability URL cannot be obtained from the store."""


class CapabilityError(Exception):
    """Raised when the local store refuses a request made with a capability URL."""


class Signer(Protocol):
    def sign(
        self,
        bucket: str,
        key: str,
        method: str,
        content_type: str,
        expires_in: int,
    ) -> str: ...


def generate_upload_key(settings: Settings) -> str:
    if settings.upload_key_strategy == "token":
        identifier = secrets.token_urlsafe(16)
    else:
        identifier = uuid4().hex
    return f"{settings.upload_key_prefix}{identifier}{settings.key_extension}"


class S3Signer:
    """Presigns requests against an S3-compatible store."""

    def __init__(self, settings: Settings, client=None) -> None:
        self.settings = settings
        if client is None:
            session = boto3.session.Session()
            client = session.client(
                "s3",
                endpoint_url=str(settings.s3_endpoint) if settings.s3_endpoint else None,
                aws_access_key_id=settings.s3_access_key,
                aws_secret_access_key=settings.s3_secret_key,
                region_name=settings.s3_region,
                config=Config(
                    signature_version="s3v4",
                    s3={"addressing_style": settings.s3_addressing_style},
                ),
            )
        self.client = client

    def sign(
        self,
        bucket: str,
        key: str,
        method: str,
        content_type: str,
        expires_in: int,
    ) -> str:
        method = method.upper()
        try:
            client_method = _CLIENT_METHODS[method]
        except KeyError:
            raise SigningError(f"Unsupported method {method}") from None

        params = {"Bucket": bucket, "Key": key}
        if method == "PUT":
            params["ContentType"] = content_type
        try:
            return self.client.generate_presigned_url(
                client_method,
                Params=params,
                ExpiresIn=expires_in,
                HttpMethod=method,
            )
        except (BotoCoreError, ClientError) as exc:
            raise SigningError(f"Could not presign {method} for {bucket}/{key}: {exc}") from exc


class LocalObjectStore:
    """Filesystem object store intended for development and integration tests.

    Capability URLs use the ``local://store/`` scheme; routers translate them
    into real URLs pointing at the ``/store`` routes of the running service.
    """

    def __init__(
        self,
        settings: Settings,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.settings = settings
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.base_path = Path(settings.local_storage_dir).resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _key_path(self, bucket: str, key: str) -> Path:
        # Prevent directory traversal by resolving inside base path
        if not bucket or bucket in (".", "..") or "/" in bucket:
            raise CapabilityError("Invalid bucket name")
        bucket_path = self.base_path / bucket
        candidate = bucket_path.joinpath(*Path(key).parts).resolve()
        if candidate == bucket_path or not candidate.is_relative_to(bucket_path):
            raise CapabilityError("Invalid storage key")
        return candidate

    def sign(
        self,
        bucket: str,
        key: str,
        method: str,
        content_type: str,
        expires_in: int,
    ) -> str:
        try:
            self._key_path(bucket, key)
        except CapabilityError as exc:
            raise SigningError(f"Cannot sign {bucket}/{key}: {exc}") from exc
        token = create_capability_token(
            self.settings,
            subject=f"{bucket}/{key}",
            method=method,
            content_type=content_type,
            expires_in=expires_in,
            issued_at=self.clock(),
        )
        query = urlencode({"token": token})
        return f"{LOCAL_URL_PREFIX}{quote(bucket)}/{quote(key)}?{query}"

    def verify(
        self,
        bucket: str,
        key: str,
        token: str | None,
        method: str,
        content_type: str | None,
    ) -> None:
        if not token:
            raise CapabilityError("Missing capability token")
        try:
            claims = decode_capability_token(self.settings, token)
        except TokenError as exc:
            raise CapabilityError(str(exc)) from exc

        if claims.get("sub") != f"{bucket}/{key}":
            raise CapabilityError("Token was not issued for this object")
        if claims.get("method") != method.upper():
            raise CapabilityError("Token was not issued for this method")
        if claims.get("content_type") != content_type:
            raise CapabilityError("Content-Type does not match the signed value")

    async def save(self, bucket: str, key: str, data: bytes) -> None:
        target = self._key_path(bucket, key)
        target.parent.mkdir(parents=True, exist_ok=True)

        def _write() -> None:
            target.write_bytes(data)

        await asyncio.to_thread(_write)
        logger.info("Stored %d bytes at %s/%s", len(data), bucket, key)

    def open_for_download(self, bucket: str, key: str) -> Path:
        path = self._key_path(bucket, key)
        if not path.is_file():
            raise FileNotFoundError(key)
        return path

    @staticmethod
    def media_type_for(key: str) -> str:
        return mimetypes.guess_type(key)[0] or "application/octet-stream"


def create_signer(settings: Settings) -> S3Signer | LocalObjectStore:
    if settings.storage_backend == "local":
        return LocalObjectStore(settings)
    return S3Signer(settings)
