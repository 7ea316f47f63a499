from __future__ import annotations

import logging

from direct_upload.core.config import Settings
from direct_upload.schemas import SigningResponse
from direct_upload.services.storage import Signer, SigningError, generate_upload_key

logger = logging.getLogger(__name__)

__all__ = ["SigningError", "SigningService"]


class SigningService:
    """Issues single-object PUT capabilities for the configured bucket."""

    def __init__(self, signer: Signer, settings: Settings) -> None:
        self.signer = signer
        self.settings = settings

    def handle(self) -> SigningResponse:
        key = generate_upload_key(self.settings)
        try:
            upload_url = self.signer.sign(
                self.settings.upload_bucket,
                key,
                "PUT",
                self.settings.upload_content_type,
                self.settings.url_expiration_seconds,
            )
        except SigningError:
            logger.exception(
                "Signing failed for %s/%s", self.settings.upload_bucket, key
            )
            raise

        logger.info(
            "Issued upload URL for %s/%s (expires in %ss)",
            self.settings.upload_bucket,
            key,
            self.settings.url_expiration_seconds,
        )
        return SigningResponse(upload_url=upload_url, key=key)
