from fastapi import APIRouter, Depends

from direct_upload.api.deps import get_app_settings
from direct_upload.core.config import Settings
from direct_upload.schemas import HealthStatus

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthStatus)
async def health(settings: Settings = Depends(get_app_settings)) -> HealthStatus:
    return HealthStatus(storage_backend=settings.storage_backend)
