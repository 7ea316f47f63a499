import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from direct_upload.api.routers import health as health_router
from direct_upload.api.routers import store as store_router
from direct_upload.api.routers import uploads as uploads_router
from direct_upload.core.config import Settings, get_settings
from direct_upload.services.signing import SigningService
from direct_upload.services.storage import create_signer

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(
        debug=settings.debug,
        title="Direct Upload API",
    )
    app.state.settings = settings
    app.state.signing_service = SigningService(create_signer(settings), settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["GET", "PUT", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    app.include_router(health_router.router)
    app.include_router(uploads_router.router, prefix=settings.uploads_path)
    app.include_router(store_router.router)

    logger.info(
        "Signing uploads for bucket %s via %s backend at %s",
        settings.upload_bucket,
        settings.storage_backend,
        settings.uploads_path,
    )
    return app


app = create_app()
