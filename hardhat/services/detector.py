"""
Client for the hosted Roboflow object-detection model.
"""
import json
import time
from typing import Any, Dict, Optional, Union
from urllib.parse import quote

import httpx
from pydantic import ValidationError as PydanticValidationError

from hardhat.core.config import settings
from hardhat.core.exceptions import ConfigurationError, DependencyError, DependencyTimeout
from hardhat.core.logging import logger, mask_secret
from hardhat.models.schemas.common import DetectorStatus
from hardhat.models.schemas.inference import InferenceResponse


DEFAULT_FILENAME = "upload.jpg"
DEFAULT_CONTENT_TYPE = "image/jpeg"


def safe_json(text: str) -> Union[Dict[str, Any], list, str]:
    """Decode ``text`` as JSON, falling back to the raw string."""
    try:
        return json.loads(text)
    except ValueError:
        return text


class RoboflowDetector:
    """
    Forwards images to the hosted detector.

    Calls are never retried here; every outbound request is bounded by
    the configured timeout.
    """

    def __init__(
        self,
        api_key: str,
        model_id: str,
        version: str = "1",
        confidence: float = 0.4,
        overlap: float = 0.5,
        infer_url: str = "https://detect.roboflow.com",
        api_url: str = "https://api.roboflow.com",
        timeout: float = 30.0,
        connect_timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.api_key = api_key
        self.model_id = model_id
        self.version = version
        self.confidence = confidence
        self.overlap = overlap
        self.infer_url = infer_url.rstrip("/")
        self.api_url = api_url.rstrip("/")
        self.timeout = httpx.Timeout(timeout, connect=connect_timeout)
        self._transport = transport

    @classmethod
    def from_settings(cls, transport: Optional[httpx.AsyncBaseTransport] = None) -> "RoboflowDetector":
        """
        Build a detector from application settings.

        Raises:
            ConfigurationError: API key or model id is not configured
        """
        if not settings.ROBOFLOW_API_KEY or not settings.ROBOFLOW_MODEL_ID:
            raise ConfigurationError("Missing ROBOFLOW_API_KEY or ROBOFLOW_MODEL_ID")

        return cls(
            api_key=settings.ROBOFLOW_API_KEY,
            model_id=settings.ROBOFLOW_MODEL_ID,
            version=settings.ROBOFLOW_MODEL_VERSION,
            confidence=settings.ROBOFLOW_CONFIDENCE,
            overlap=settings.ROBOFLOW_OVERLAP,
            infer_url=settings.ROBOFLOW_INFER_URL,
            api_url=settings.ROBOFLOW_API_URL,
            timeout=settings.DETECTOR_TIMEOUT,
            connect_timeout=settings.DETECTOR_CONNECT_TIMEOUT,
            transport=transport
        )

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    def _model_path(self) -> str:
        return f"{quote(self.model_id, safe='')}/{quote(self.version, safe='')}"

    def _redact(self, url: Union[str, httpx.URL]) -> str:
        if not self.api_key:
            return str(url)
        return str(url).replace(self.api_key, "***")

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            async with self._client() as client:
                return await client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            logger.error(f"Timed out calling {self._redact(url)}")
            raise DependencyTimeout(f"Request to {self._redact(url)} timed out") from e
        except httpx.RequestError as e:
            logger.error(f"Request error calling {self._redact(url)}: {str(e)}")
            raise DependencyError(f"Failed to reach {self._redact(url)}: {str(e)}") from e

    async def infer(
        self,
        image: bytes,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
        confidence: Optional[float] = None,
        overlap: Optional[float] = None
    ) -> InferenceResponse:
        """
        Run detection on one image.

        Args:
            image: Raw image bytes
            filename: Original file name, forwarded to the detector
            content_type: MIME type, defaults to image/jpeg
            confidence: Override of the configured confidence threshold
            overlap: Override of the configured overlap threshold

        Returns:
            Predictions and detector timing

        Raises:
            DependencyError: detector returned a non-success status or bad JSON
            DependencyTimeout: detector did not answer in time
        """
        filename = filename or DEFAULT_FILENAME
        params = {
            "api_key": self.api_key,
            "format": "json",
            "confidence": self.confidence if confidence is None else confidence,
            "overlap": self.overlap if overlap is None else overlap,
            "name": filename,
        }
        url = f"{self.infer_url}/{self._model_path()}"
        files = {"file": (filename, image, content_type or DEFAULT_CONTENT_TYPE)}

        logger.debug(
            f"Inference request model={self.model_id} version={self.version} "
            f"key={mask_secret(self.api_key)} file={filename} ({len(image)} bytes)"
        )
        started = time.perf_counter()
        response = await self._request("POST", url, params=params, files=files)
        logger.debug(
            f"Roboflow responded {response.status_code} for {filename} "
            f"in {(time.perf_counter() - started) * 1000:.0f}ms"
        )

        if not response.is_success:
            raise DependencyError(
                "Roboflow error",
                upstream_status=response.status_code,
                detail=safe_json(response.text)
            )

        try:
            return InferenceResponse.model_validate(response.json())
        except (ValueError, PydanticValidationError) as e:
            raise DependencyError(
                "Roboflow returned an unexpected payload",
                upstream_status=response.status_code,
                detail=safe_json(response.text)
            ) from e

    async def fetch_image(self, url: str) -> bytes:
        """
        Download an image to validate against, following redirects.

        Raises:
            DependencyError: image host returned a non-success status
            DependencyTimeout: image host did not answer in time
        """
        response = await self._request("GET", url, follow_redirects=True)
        if not response.is_success:
            raise DependencyError(
                f"Failed to fetch image from {url}",
                upstream_status=response.status_code,
                detail=safe_json(response.text)
            )
        return response.content

    async def check_connectivity(self) -> DetectorStatus:
        """Probe the model metadata endpoint and time the round trip."""
        url = f"{self.api_url}/{self._model_path()}"
        started = time.perf_counter()
        try:
            response = await self._request(
                "GET",
                url,
                params={"api_key": self.api_key},
                headers={"Accept": "application/json"}
            )
        except DependencyError as e:
            return DetectorStatus(
                connected=False,
                response_time_ms=int((time.perf_counter() - started) * 1000),
                error=e.message
            )

        status = DetectorStatus(
            connected=response.is_success,
            response_time_ms=int((time.perf_counter() - started) * 1000)
        )
        if not response.is_success:
            status.error = f"HTTP {response.status_code}: {response.reason_phrase}"
        return status


class MockDetector:
    """Offline stand-in returning canned predictions."""

    PREDICTIONS = [
        {"x": 320, "y": 220, "width": 180, "height": 160, "class": "helmet", "confidence": 0.91},
        {"x": 315, "y": 360, "width": 220, "height": 240, "class": "vest", "confidence": 0.84},
    ]

    async def infer(self, image: bytes, filename: Optional[str] = None, **kwargs) -> InferenceResponse:
        logger.debug(f"Mock inference for {filename or DEFAULT_FILENAME}")
        return InferenceResponse.model_validate({"time": 42, "predictions": self.PREDICTIONS})

    async def fetch_image(self, url: str) -> bytes:
        return b""

    async def check_connectivity(self) -> DetectorStatus:
        return DetectorStatus(connected=True, response_time_ms=0)


Detector = Union[RoboflowDetector, MockDetector]


def get_detector() -> Detector:
    """
    Dependency returning the configured detector.

    Raises:
        ConfigurationError: credentials are missing and mock mode is off
    """
    if settings.MOCK_INFER:
        return MockDetector()
    return RoboflowDetector.from_settings()


def get_optional_detector() -> Optional[Detector]:
    """Like ``get_detector`` but returns None instead of raising when unconfigured."""
    try:
        return get_detector()
    except ConfigurationError:
        return None
