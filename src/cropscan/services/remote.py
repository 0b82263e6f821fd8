"""Client for the remote classification workflow API."""
from __future__ import annotations

import asyncio
import base64
import math
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx

from ..utils.logger import get_logger
from .errors import RemoteError
from .schemas import ClassScore, RawResult

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 30.0


def _extract_predictions(payload: Any) -> List[Dict[str, Any]]:
    """Find the prediction objects in either response shape."""
    if isinstance(payload, dict):
        if "outputs" in payload or "predictions" in payload:
            container = payload.get("outputs") or payload.get("predictions") or []
        elif "class" in payload or "predicted_class" in payload:
            container = payload
        else:
            container = []
    else:
        container = payload

    if isinstance(container, dict):
        container = [container]
    if not isinstance(container, list):
        raise RemoteError(f"Unexpected response body type: {type(container).__name__}")
    for item in container:
        if not isinstance(item, dict):
            raise RemoteError(f"Unexpected prediction entry: {item!r}")
    return container


def _class_of(prediction: Dict[str, Any]) -> str:
    return str(prediction.get("class") or prediction.get("predicted_class") or "unknown")


def _confidence_of(prediction: Dict[str, Any]) -> float:
    value = prediction.get("confidence")
    if value is None:
        value = prediction.get("score")
    if value is None:
        return 0.0
    try:
        confidence = float(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise RemoteError(f"Non-numeric confidence: {value!r}") from exc
    if not math.isfinite(confidence):
        raise RemoteError(f"Non-finite confidence: {value!r}")
    return confidence * 100


def parse_response(payload: Any) -> RawResult:
    """Normalize a loosely structured workflow response into a raw result."""
    predictions = _extract_predictions(payload)
    if not predictions:
        return RawResult(detected=False, label="healthy", confidence=0.0)

    scores = [ClassScore(label=_class_of(item), confidence=_confidence_of(item)) for item in predictions]
    top = scores[0]
    return RawResult(
        detected=True,
        label=top.label,
        confidence=top.confidence,
        predictions=scores,
        raw_top_score=top.confidence / 100,
    )


class RemoteClassificationClient:
    def __init__(
        self,
        url: str,
        api_key: Optional[str] = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _build_payload(self, image_base64: str) -> Dict[str, Any]:
        return {
            "api_key": self.api_key,
            "inputs": {"image": {"type": "base64", "value": image_base64}},
        }

    async def classify(self, image_path: str | Path) -> RawResult:
        """Send the image to the workflow endpoint and parse its predictions."""
        if not self.is_configured():
            raise RemoteError("not configured")

        try:
            image_bytes = await asyncio.to_thread(Path(image_path).read_bytes)
        except OSError as exc:
            raise RemoteError(f"Cannot read image {image_path}: {exc}") from exc
        payload = self._build_payload(base64.b64encode(image_bytes).decode("ascii"))

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.url, json=payload)
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.error("Remote classification rejected", status=status, url=self.url)
            raise RemoteError("Remote analysis failed", status_code=status) from exc
        except httpx.HTTPError as exc:
            logger.error("Remote classification transport error", error=str(exc), url=self.url)
            raise RemoteError(f"Remote analysis failed: {exc}") from exc
        except ValueError as exc:
            raise RemoteError(
                f"Malformed response body: {exc}", status_code=response.status_code
            ) from exc

        return parse_response(body)


__all__ = ["RemoteClassificationClient", "parse_response", "DEFAULT_TIMEOUT"]
