import mimetypes
from functools import lru_cache
from typing import Literal

from pydantic import Field, HttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        protected_namespaces=(),
    )

    env: Literal["local", "prod", "test"] = Field(default="local", alias="ENV")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    upload_bucket: str = Field(default="direct-uploads", alias="UPLOAD_BUCKET")
    url_expiration_seconds: int = Field(default=300, gt=0, alias="URL_EXPIRATION_SECONDS")
    upload_content_type: str = Field(default="image/jpeg", alias="UPLOAD_CONTENT_TYPE")
    max_upload_bytes: int = Field(default=1_000_000, gt=0, alias="MAX_UPLOAD_BYTES")

    upload_key_prefix: str = Field(default="uploads/", alias="UPLOAD_KEY_PREFIX")
    upload_key_extension: str | None = Field(default=None, alias="UPLOAD_KEY_EXTENSION")
    upload_key_strategy: Literal["uuid", "token"] = Field(
        default="uuid", alias="UPLOAD_KEY_STRATEGY"
    )

    uploads_path: str = Field(default="/uploads", pattern=r"^/.*[^/]$", alias="UPLOADS_PATH")
    cors_allow_origins: list[str] = Field(default=["*"], alias="CORS_ALLOW_ORIGINS")

    storage_backend: Literal["s3", "local"] = Field(default="s3", alias="STORAGE_BACKEND")

    s3_endpoint: HttpUrl | None = Field(default=None, alias="S3_ENDPOINT_URL")
    s3_access_key: str | None = Field(default=None, alias="S3_ACCESS_KEY")
    s3_secret_key: str | None = Field(default=None, alias="S3_SECRET_KEY")
    s3_region: str | None = Field(default=None, alias="S3_REGION")
    s3_addressing_style: Literal["auto", "virtual", "path"] = Field(
        default="virtual", alias="S3_ADDRESSING_STYLE"
    )

    local_storage_dir: str = Field(default=".local-store", alias="LOCAL_STORAGE_DIR")
    local_signing_key: str = Field(
        default="local-signing-key-change-me",
        alias="LOCAL_SIGNING_KEY",
    )
    local_signing_algorithm: str = Field(default="HS256", alias="LOCAL_SIGNING_ALGORITHM")

    @property
    def key_extension(self) -> str:
        """Extension appended to generated keys, e.g. ``.jpg``."""
        ext = self.upload_key_extension
        if ext is None:
            # image/jpeg maps to .jpe on some interpreters
            if self.upload_content_type == "image/jpeg":
                return ".jpg"
            ext = mimetypes.guess_extension(self.upload_content_type) or ""
        if ext and not ext.startswith("."):
            ext = f".{ext}"
        return ext


@lru_cache
def get_settings() -> Settings:
    return Settings()
