"""Upload dispatch: media-type routing, submission, polling and formatting.

Plain text is decoded and returned as-is. PDFs and images go to the Read
API, the returned job is polled to completion and the result flattened
into text.
"""

from dataclasses import dataclass
from enum import StrEnum

from ocrpro.errors import FileTooLarge, InvalidInput, UnsupportedMediaType
from ocrpro.utils.config import OCRConfig
from ocrpro.utils.logger import get_logger

from .normalizer import NormalizedText, normalize_result
from .poller import JobPoller
from .read_client import ReadApiClient

logger = get_logger(__name__)

NO_TEXT_MESSAGE = (
    "No text could be extracted from this document. The image may not "
    "contain readable text or the scan quality may be too low."
)


class MediaType(StrEnum):
    """Upload media types the service accepts."""

    PDF = "application/pdf"
    PNG = "image/png"
    JPEG = "image/jpeg"
    TEXT = "text/plain"

    @classmethod
    def parse(cls, value: str | None) -> "MediaType":
        """Resolve a declared content type, ignoring parameters like charset.

        Raises:
            UnsupportedMediaType: For anything outside the accepted set.
        """
        base = (value or "").split(";", 1)[0].strip().lower()
        base = _ALIASES.get(base, base)
        try:
            return cls(base)
        except ValueError:
            raise UnsupportedMediaType(value, ACCEPTED_TYPES) from None

    @property
    def upstream_content_type(self) -> str:
        """Content type sent to the Read API for this upload type."""
        if self is MediaType.PDF:
            return "application/pdf"
        return "application/octet-stream"


_ALIASES = {"image/jpg": MediaType.JPEG.value}
ACCEPTED_TYPES = ("PDF", "PNG", "JPG", "TXT")


@dataclass
class Upload:
    """One uploaded file, alive only for the request that carries it."""

    data: bytes
    media_type: str | None
    filename: str = "document"


@dataclass
class ExtractionResult:
    """Text returned to the caller for one upload."""

    text: str
    pages: int
    filename: str


class SubmissionDispatcher:
    """Routes an upload to the right extraction path.

    Args:
        config: OCR section of the application configuration.
        client: Read API client; built from ``config`` when omitted.
        poller: Job poller; built from ``config`` when omitted.
    """

    def __init__(
        self,
        config: OCRConfig,
        client: ReadApiClient | None = None,
        poller: JobPoller | None = None,
    ) -> None:
        self.config = config
        self.client = client or ReadApiClient(config)
        self.poller = poller or JobPoller(
            self.client,
            max_attempts=config.max_poll_attempts,
            interval=config.poll_interval_seconds,
        )

    def validate(self, upload: Upload) -> MediaType:
        """Check type and size before anything leaves the process."""
        media_type = MediaType.parse(upload.media_type)
        size = len(upload.data)
        if size == 0:
            raise InvalidInput("No file uploaded")
        if size > self.config.max_upload_bytes:
            raise FileTooLarge(size, self.config.max_upload_bytes)
        return media_type

    def recognize(self, data: bytes, media_type: MediaType) -> NormalizedText:
        """Submit bytes to the Read API and wait for the flattened result."""
        handle = self.client.submit(data, media_type.upstream_content_type)
        outcome = self.poller.wait(handle)
        return normalize_result(outcome.payload)

    def process(self, upload: Upload) -> ExtractionResult:
        """Extract text from an upload.

        Raises:
            InvalidInput: Unsupported type, empty or oversized upload.
            UpstreamProtocolError: The Read API broke its contract.
            RecognitionFailed: The job ended without succeeding.
            RecognitionTimeout: The job never finished.
        """
        media_type = self.validate(upload)
        logger.info(
            "Processing %s (%s, %d bytes)",
            upload.filename,
            media_type.value,
            len(upload.data),
        )

        if media_type is MediaType.TEXT:
            text = upload.data.decode("utf-8", errors="replace")
            pages = 1
        else:
            normalized = self.recognize(upload.data, media_type)
            text, pages = normalized.text, normalized.pages

        if not text:
            text = NO_TEXT_MESSAGE

        logger.info("Extracted %d characters from %s", len(text), upload.filename)
        return ExtractionResult(text=text, pages=pages, filename=upload.filename)
