"""Exception hierarchy for OCR Pro.

Every error raised by the service derives from :class:`OCRProError`, which
carries the HTTP status and a short machine-readable code used by the API
layer when rendering the failure.
"""

from collections.abc import Iterable


class OCRProError(Exception):
    """Base class for all service errors."""

    http_status = 500
    error_code = "INTERNAL_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"message": self.message, "code": self.error_code}


class InvalidInput(OCRProError):
    """The caller sent something it can correct (bad type, bad size)."""

    http_status = 400
    error_code = "INVALID_INPUT"


class UnsupportedMediaType(InvalidInput):
    """The upload's declared media type is not one we process."""

    error_code = "UNSUPPORTED_MEDIA_TYPE"

    def __init__(self, media_type: str | None, accepted: Iterable[str]) -> None:
        self.media_type = media_type
        self.accepted = tuple(accepted)
        super().__init__(
            f"Unsupported file type: {media_type or 'unknown'}. "
            f"Please upload one of: {', '.join(self.accepted)}."
        )


class FileTooLarge(InvalidInput):
    error_code = "FILE_TOO_LARGE"

    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(
            f"File size must be less than {limit // (1024 * 1024)}MB "
            f"(got {size} bytes)"
        )


class AccessDenied(OCRProError):
    http_status = 403
    error_code = "ACCESS_DENIED"

    def __init__(
        self, message: str = "Please purchase access to use the OCR feature"
    ) -> None:
        super().__init__(message)


class UpstreamProtocolError(OCRProError):
    """The OCR service did not behave as its API contract says."""

    error_code = "UPSTREAM_PROTOCOL_ERROR"


class RecognitionFailed(OCRProError):
    """The recognition job reached a terminal status other than succeeded."""

    error_code = "RECOGNITION_FAILED"

    def __init__(self, status: str) -> None:
        self.status = status
        super().__init__(f"OCR operation failed with status: {status}")


class RecognitionTimeout(OCRProError):
    error_code = "RECOGNITION_TIMEOUT"

    def __init__(self, attempts: int) -> None:
        self.attempts = attempts
        super().__init__(
            "OCR processing timed out. Please try with a smaller file "
            "or simpler document."
        )


class InvalidSignature(OCRProError):
    """A webhook payload could not be authenticated."""

    http_status = 400
    error_code = "INVALID_SIGNATURE"


class ConfigurationError(OCRProError):
    """A required integration credential is missing."""

    error_code = "NOT_CONFIGURED"


class CombineError(OCRProError):
    """Combining text files failed; no partial output is produced."""

    http_status = 400
    error_code = "COMBINE_FAILED"


class AuthenticationRequired(OCRProError):
    http_status = 401
    error_code = "UNAUTHORIZED"

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)
