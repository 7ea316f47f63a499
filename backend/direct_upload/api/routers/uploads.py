from urllib.parse import unquote

from fastapi import APIRouter, Depends, HTTPException, Request, status

from direct_upload.api.deps import get_signing_service
from direct_upload.schemas import SigningResponse
from direct_upload.services.signing import SigningError, SigningService
from direct_upload.services.storage import LOCAL_URL_PREFIX

router = APIRouter(tags=["uploads"])


def _resolve_local_url(request: Request, upload_url: str) -> str:
    target, _, query = upload_url.removeprefix(LOCAL_URL_PREFIX).partition("?")
    bucket, _, key = target.partition("/")
    url = request.url_for("put_object", bucket=unquote(bucket), object_path=unquote(key))
    return f"{url}?{query}" if query else str(url)


@router.get("", response_model=SigningResponse)
async def create_upload_url(
    request: Request,
    service: SigningService = Depends(get_signing_service),
) -> SigningResponse:
    try:
        response = service.handle()
    except SigningError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not create upload URL",
        ) from exc

    if response.upload_url.startswith(LOCAL_URL_PREFIX):
        response.upload_url = _resolve_local_url(request, response.upload_url)
    return response
