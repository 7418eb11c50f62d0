"""HTTP client for the Azure Computer Vision Read API.

Two calls make up the protocol: a POST of the raw document bytes, which
answers ``202 Accepted`` with the job URL in the ``Operation-Location``
header, and a GET on that URL, which answers with the job status and,
once succeeded, the recognition result.
"""

from typing import Any

import httpx

from ocrpro.errors import ConfigurationError, UpstreamProtocolError
from ocrpro.utils.config import OCRConfig
from ocrpro.utils.logger import get_logger

logger = get_logger(__name__)

SUBSCRIPTION_KEY_HEADER = "Ocp-Apim-Subscription-Key"
OPERATION_LOCATION_HEADER = "Operation-Location"


def _vendor_message(response: httpx.Response) -> str:
    """Pull ``error.message`` out of an Azure error body if there is one."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        error = body.get("error") or {}
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return response.reason_phrase


class ReadApiClient:
    """Thin wrapper around the two Read API calls.

    Args:
        config: OCR section of the application configuration.
        client: Optional pre-built ``httpx.Client``; tests pass one backed
            by ``httpx.MockTransport``.
    """

    def __init__(
        self, config: OCRConfig, client: httpx.Client | None = None
    ) -> None:
        self.config = config
        self._client = client or httpx.Client()

    @property
    def analyze_url(self) -> str:
        if not self.config.configured:
            raise ConfigurationError(
                "Azure Cognitive Services credentials are not configured"
            )
        return self.config.endpoint.rstrip("/") + self.config.api_path

    def submit(self, data: bytes, content_type: str) -> str:
        """Send a document for analysis and return its job handle.

        Raises:
            UpstreamProtocolError: On a non-2xx answer or when the
                ``Operation-Location`` header is missing.
        """
        try:
            response = self._client.post(
                self.analyze_url,
                content=data,
                headers={
                    SUBSCRIPTION_KEY_HEADER: self.config.api_key,
                    "Content-Type": content_type,
                },
                timeout=self.config.submit_timeout_seconds,
            )
        except httpx.HTTPError as exc:
            raise UpstreamProtocolError(f"OCR submission failed: {exc}") from exc

        if response.is_error:
            raise UpstreamProtocolError(_vendor_message(response))

        location = response.headers.get(OPERATION_LOCATION_HEADER)
        if not location:
            raise UpstreamProtocolError("Failed to get operation location from Azure")

        logger.debug("Submitted %d bytes as %s", len(data), content_type)
        return location

    def get_status(self, handle: str) -> dict[str, Any]:
        """Fetch the current state of a job.

        Raises:
            UpstreamProtocolError: On a non-2xx answer or a body that is
                not a JSON object.
        """
        try:
            response = self._client.get(
                handle,
                headers={SUBSCRIPTION_KEY_HEADER: self.config.api_key or ""},
                timeout=self.config.poll_timeout_seconds,
            )
        except httpx.HTTPError as exc:
            raise UpstreamProtocolError(f"OCR status query failed: {exc}") from exc

        if response.is_error:
            raise UpstreamProtocolError(_vendor_message(response))

        try:
            body = response.json()
        except ValueError as exc:
            raise UpstreamProtocolError("OCR status response is not JSON") from exc
        if not isinstance(body, dict):
            raise UpstreamProtocolError("OCR status response is not a JSON object")
        return body

    def close(self) -> None:
        self._client.close()
