import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import FileResponse

from direct_upload.api.deps import get_app_settings, get_local_store
from direct_upload.core.config import Settings
from direct_upload.schemas import StoredObject
from direct_upload.services.storage import CapabilityError, LocalObjectStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/store", tags=["store"])


def _too_large() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        detail="Your proposed upload exceeds the maximum allowed size",
    )


@router.put("/{bucket}/{object_path:path}", response_model=StoredObject, name="put_object")
async def put_object(
    bucket: str,
    object_path: str,
    request: Request,
    token: str | None = None,
    store: LocalObjectStore = Depends(get_local_store),
    settings: Settings = Depends(get_app_settings),
) -> StoredObject:
    try:
        store.verify(
            bucket,
            object_path,
            token,
            request.method,
            request.headers.get("content-type"),
        )
    except CapabilityError as exc:
        logger.warning("Rejected upload to %s/%s: %s", bucket, object_path, exc)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc

    declared_length = request.headers.get("content-length")
    if declared_length and declared_length.isdigit() and int(declared_length) > settings.max_upload_bytes:
        raise _too_large()

    data = bytearray()
    async for chunk in request.stream():
        data.extend(chunk)
        if len(data) > settings.max_upload_bytes:
            raise _too_large()

    await store.save(bucket, object_path, bytes(data))
    return StoredObject(Key=object_path, Size=len(data))


@router.get("/{bucket}/{object_path:path}", name="get_object")
async def get_object(
    bucket: str,
    object_path: str,
    store: LocalObjectStore = Depends(get_local_store),
):
    try:
        path = store.open_for_download(bucket, object_path)
    except (FileNotFoundError, CapabilityError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Object not found") from None
    return FileResponse(path, media_type=store.media_type_for(object_path))
