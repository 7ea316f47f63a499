import os
import sys
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Ensure project root is on sys.path
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from direct_upload.core.config import Settings, get_settings
from direct_upload.main import create_app
from direct_upload.services.signing import SigningService
from direct_upload.services.storage import SigningError


class FakeSigner:
    """Records sign() calls and returns predictable URLs."""

    def __init__(self, error: Exception | None = None) -> None:
        self.calls: list[tuple[str, str, str, str, int]] = []
        self.error = error

    def sign(self, bucket: str, key: str, method: str, content_type: str, expires_in: int) -> str:
        self.calls.append((bucket, key, method, content_type, expires_in))
        if self.error is not None:
            raise self.error
        return (
            f"https://{bucket}.store.example.com/{key}"
            f"?X-Expires={expires_in}&X-Content-Type={content_type}&X-Signature=abc123"
        )


class FailingSigner(FakeSigner):
    def __init__(self) -> None:
        super().__init__(error=SigningError("AccessDenied"))


@pytest.fixture(scope="session", autouse=True)
def configure_environment():
    os.environ["ENV"] = "test"
    os.environ["STORAGE_BACKEND"] = "s3"
    os.environ["UPLOAD_BUCKET"] = "test-bucket"
    os.environ["S3_ACCESS_KEY"] = "test"
    os.environ["S3_SECRET_KEY"] = "test"
    os.environ["S3_REGION"] = "us-east-1"
    get_settings.cache_clear()


@pytest.fixture
def local_settings(tmp_path) -> Settings:
    return Settings(
        ENV="test",
        STORAGE_BACKEND="local",
        UPLOAD_BUCKET="test-bucket",
        LOCAL_STORAGE_DIR=str(tmp_path / "store"),
        LOCAL_SIGNING_KEY="test-signing-key",
    )


@pytest.fixture
def local_app(local_settings):
    return create_app(local_settings)


@pytest.fixture
def fake_signer() -> FakeSigner:
    return FakeSigner()


@pytest.fixture
def fake_app(fake_signer):
    settings = Settings(ENV="test", UPLOAD_BUCKET="test-bucket")
    app = create_app(settings)
    app.state.signing_service = SigningService(fake_signer, settings)
    return app


@pytest_asyncio.fixture
async def client(local_app):
    transport = ASGITransport(app=local_app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest_asyncio.fixture
async def fake_client(fake_app):
    transport = ASGITransport(app=fake_app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
