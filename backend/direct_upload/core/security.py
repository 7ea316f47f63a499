from datetime import datetime, timedelta, timezone
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt

from direct_upload.core.config import Settings


class TokenError(Exception):
    """Raised when capability token validation fails."""


def create_capability_token(
    settings: Settings,
    *,
    subject: str,
    method: str,
    content_type: str,
    expires_in: int,
    issued_at: datetime | None = None,
) -> str:
    issued = issued_at or datetime.now(timezone.utc)
    to_encode: dict[str, Any] = {
        "sub": subject,
        "method": method.upper(),
        "content_type": content_type,
        "iat": issued,
        "exp": issued + timedelta(seconds=expires_in),
    }
    return jwt.encode(
        to_encode,
        settings.local_signing_key,
        algorithm=settings.local_signing_algorithm,
    )


def decode_capability_token(settings: Settings, token: str) -> dict[str, Any]:
    try:
        return jwt.decode(
            token,
            settings.local_signing_key,
            algorithms=[settings.local_signing_algorithm],
        )
    except ExpiredSignatureError as exc:
        raise TokenError("Request has expired") from exc
    except JWTError as exc:
        raise TokenError("Invalid signature") from exc
