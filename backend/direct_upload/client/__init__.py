from direct_upload.client.errors import (
    AuthError,
    MalformedSigningResponse,
    NetworkError,
    SigningFailure,
    TooLarge,
    UploadError,
    UploadRejected,
    ValidationError,
    WrongFileType,
)
from direct_upload.client.uploader import (
    SelectedFile,
    UploadClient,
    object_url,
    select_file,
    select_path,
)

__all__ = [
    "AuthError",
    "MalformedSigningResponse",
    "NetworkError",
    "SelectedFile",
    "SigningFailure",
    "TooLarge",
    "UploadClient",
    "UploadError",
    "UploadRejected",
    "ValidationError",
    "WrongFileType",
    "object_url",
    "select_file",
    "select_path",
]
