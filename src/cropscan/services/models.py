"""Process-wide service instances built from settings."""
from __future__ import annotations

import random
from functools import lru_cache

from ..config import settings
from .remote import RemoteClassificationClient
from .resolver import InferenceResolver
from .vision import LocalModelRunner


@lru_cache(maxsize=1)
def get_local_runner() -> LocalModelRunner:
    return LocalModelRunner(
        model_path=settings.model_path,
        input_size=settings.model_input_size,
        serialize_execution=settings.serialize_inference,
    )


@lru_cache(maxsize=1)
def get_remote_client() -> RemoteClassificationClient:
    return RemoteClassificationClient(
        url=settings.remote_url,
        api_key=settings.remote_api_key,
        timeout=settings.remote_timeout,
    )


@lru_cache(maxsize=1)
def get_resolver() -> InferenceResolver:
    rng = random.Random(settings.mock_seed) if settings.mock_seed is not None else None
    return InferenceResolver(
        local_runner=get_local_runner() if settings.local_model_enabled else None,
        remote_client=get_remote_client(),
        local_enabled=settings.local_model_enabled,
        rng=rng,
    )


__all__ = ["get_local_runner", "get_remote_client", "get_resolver"]
