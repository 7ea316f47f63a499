from direct_upload.schemas.health import HealthStatus
from direct_upload.schemas.storage import SigningResponse, StoredObject

__all__ = [
    "HealthStatus",
    "SigningResponse",
    "StoredObject",
]
