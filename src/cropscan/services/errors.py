"""Error taxonomy for the inference pipeline."""
from __future__ import annotations

from typing import Optional


class CropScanError(Exception):
    """Base class for every error raised by the inference services."""


class DecodeError(CropScanError):
    """The image could not be read or decoded.

    Every tier works from the same image, so this is never escalated and is the
    only error the resolver lets through to its caller.
    """


class InferenceError(CropScanError):
    """The local model tier failed to produce a result."""


class ModelUnavailableError(InferenceError):
    """No local model session could be created."""


class RemoteError(CropScanError):
    """The remote classification tier failed."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    def __str__(self) -> str:
        message = super().__str__()
        if self.status_code is not None:
            return f"{message} (HTTP {self.status_code})"
        return message


class ResolverExhaustedError(CropScanError):
    """Reserved: every tier failed. The mock tier cannot fail, so this is never raised."""


__all__ = [
    "CropScanError",
    "DecodeError",
    "InferenceError",
    "ModelUnavailableError",
    "RemoteError",
    "ResolverExhaustedError",
]
