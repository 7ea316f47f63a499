from fastapi import HTTPException, Request, status

from direct_upload.core.config import Settings
from direct_upload.services.signing import SigningService
from direct_upload.services.storage import LocalObjectStore


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_signing_service(request: Request) -> SigningService:
    return request.app.state.signing_service


def get_local_store(request: Request) -> LocalObjectStore:
    signer = request.app.state.signing_service.signer
    if not isinstance(signer, LocalObjectStore):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return signer
