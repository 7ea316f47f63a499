"""Failures surfaced by the upload client.

Every error is raised to the caller; the client never retries on its own.
"""


class UploadError(Exception):
    """Base class for all upload client failures."""


class ValidationError(UploadError):
    """The selected file was rejected before any network call."""


class WrongFileType(ValidationError):
    def __init__(self, declared_type: str | None, expected_type: str):
        self.declared_type = declared_type
        self.expected_type = expected_type
        super().__init__(
            f"Wrong file type: expected {expected_type}, got {declared_type or 'unknown'}"
        )


class TooLarge(ValidationError):
    def __init__(self, size: int, max_bytes: int):
        self.size = size
        self.max_bytes = max_bytes
        super().__init__(f"File too large: {size} bytes exceeds the {max_bytes} byte limit")


class AuthError(UploadError):
    """The signing endpoint refused the bearer token."""

    def __init__(self, status_code: int):
        self.status_code = status_code
        super().__init__(f"Not authorized to request an upload URL (HTTP {status_code})")


class SigningFailure(UploadError):
    """The signing endpoint could not issue an upload URL."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class MalformedSigningResponse(SigningFailure):
    """The signing endpoint answered with something other than ``{uploadURL, Key}``."""


class UploadRejected(UploadError):
    """The object store refused the PUT."""

    def __init__(self, status_code: int, body: str = ""):
        self.status_code = status_code
        self.body = body
        message = f"Upload rejected by the store (HTTP {status_code})"
        if body:
            message = f"{message}: {body}"
        super().__init__(message)


class NetworkError(UploadError):
    """A transport failure interrupted the signing request or the upload."""
