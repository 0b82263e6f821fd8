"""Tiered inference: local model, then remote workflow, then mock catalog."""
from __future__ import annotations

import asyncio
import random
from enum import Enum
from pathlib import Path
from typing import Optional, Sequence

from ..utils.logger import get_logger
from .catalog import DISEASE_CATALOG, CatalogEntry, mock_record
from .errors import InferenceError, RemoteError
from .normalizer import to_record
from .preprocess import load_image
from .remote import RemoteClassificationClient
from .schemas import PredictionRecord, RawResult, Source
from .vision import LocalModelRunner

logger = get_logger(__name__)


class ResolverState(str, Enum):
    TRY_OFFLINE = "try_offline"
    TRY_ONLINE = "try_online"
    MOCK = "mock"
    DONE = "done"


def is_offline_non_result(raw: RawResult) -> bool:
    """Only a total absence of signal sends an offline result to the next tier."""
    return not raw.detected and raw.raw_top_score == 0.0


class InferenceResolver:
    """Runs the tiers in order and always returns a prediction record.

    ``DecodeError`` from the upfront image check is the only exception that
    leaves ``resolve``.
    """

    def __init__(
        self,
        local_runner: Optional[LocalModelRunner],
        remote_client: Optional[RemoteClassificationClient],
        *,
        local_enabled: bool = False,
        catalog: Sequence[CatalogEntry] = DISEASE_CATALOG,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.local_runner = local_runner
        self.remote_client = remote_client
        self.local_enabled = local_enabled and local_runner is not None
        self.catalog = tuple(catalog)
        self._rng = rng or random.Random()

    async def _try_offline(
        self, runner: LocalModelRunner, image_path: Path
    ) -> Optional[PredictionRecord]:
        try:
            raw = await runner.predict(image_path)
        except InferenceError as exc:
            logger.warning("Offline tier failed, escalating", error=str(exc))
            return None
        if is_offline_non_result(raw):
            logger.info("Offline tier returned no signal, escalating")
            return None
        return to_record(raw, Source.OFFLINE)

    async def _try_online(self, image_path: Path) -> Optional[PredictionRecord]:
        if self.remote_client is None:
            return None
        try:
            raw = await self.remote_client.classify(image_path)
        except RemoteError as exc:
            logger.warning(
                "Online tier failed, escalating", error=str(exc), status=exc.status_code
            )
            return None
        return to_record(raw, Source.ONLINE)

    def _mock(self) -> PredictionRecord:
        return mock_record(self._rng, self.catalog)

    async def resolve(self, image_path: str | Path) -> PredictionRecord:
        path = Path(image_path)
        await asyncio.to_thread(load_image, path)

        runner = self.local_runner if self.local_enabled else None
        state = ResolverState.TRY_OFFLINE if runner is not None else ResolverState.TRY_ONLINE
        while state is not ResolverState.DONE:
            logger.debug("Resolver state", state=state.value, image=str(path))
            if state is ResolverState.TRY_OFFLINE:
                record = await self._try_offline(runner, path) if runner is not None else None
                next_state = ResolverState.TRY_ONLINE
            elif state is ResolverState.TRY_ONLINE:
                record = await self._try_online(path)
                next_state = ResolverState.MOCK
            else:
                record = self._mock()
                next_state = ResolverState.DONE

            if record is not None:
                logger.info(
                    "Resolved prediction",
                    source=record.source.value,
                    disease=record.disease_id,
                    confidence=record.confidence_percent,
                )
                return record
            state = next_state
        return self._mock()


__all__ = ["InferenceResolver", "ResolverState", "is_offline_non_result"]
