"""Local classifier backed by a lazily created ONNX Runtime session."""
from __future__ import annotations

import asyncio
import json
import threading
from pathlib import Path
from typing import Any, Callable, List, Sequence

import numpy as np
import onnxruntime as ort

from ..utils.logger import get_logger
from .errors import DecodeError, InferenceError, ModelUnavailableError
from .normalizer import DEFAULT_CLASS_LABELS, format_scores
from .preprocess import preprocess
from .schemas import RawResult

logger = get_logger(__name__)

SessionFactory = Callable[[str], Any]


def create_session(model_path: str) -> ort.InferenceSession:
    options = ort.SessionOptions()
    options.graph_optimization_level = ort.GraphOptimizationLevel.ORT_ENABLE_ALL
    return ort.InferenceSession(
        model_path,
        sess_options=options,
        providers=["CPUExecutionProvider"],
    )


class LocalModelRunner:
    """Owns the process-wide inference session for one model artifact.

    The session is created at most once, on first use, under ``_init_lock``.
    ONNX Runtime documents ``InferenceSession.run`` as safe for concurrent
    calls, so execution is only serialized when ``serialize_execution`` is set.
    """

    def __init__(
        self,
        model_path: str | Path,
        input_size: int = 640,
        class_labels: Sequence[str] | None = None,
        *,
        session_factory: SessionFactory = create_session,
        serialize_execution: bool = False,
    ) -> None:
        self.model_path = Path(model_path)
        self._input_size = int(input_size)
        self._class_labels: List[str] = list(class_labels) if class_labels else list(DEFAULT_CLASS_LABELS)
        self._session_factory = session_factory
        self._session: Any = None
        self._input_name: str | None = None
        self._output_name: str | None = None
        self._init_lock = threading.Lock()
        self._run_lock = threading.Lock() if serialize_execution else None

    @property
    def input_size(self) -> int:
        return self._input_size

    @property
    def class_labels(self) -> List[str]:
        return list(self._class_labels)

    @property
    def input_name(self) -> str | None:
        return self._input_name

    @property
    def output_name(self) -> str | None:
        return self._output_name

    def is_available(self) -> bool:
        return self._session is not None

    def set_class_labels(self, labels: Sequence[str] | None) -> None:
        if labels:
            self._class_labels = [str(label) for label in labels]
            logger.info("Updated class labels", labels=self._class_labels)

    @property
    def metadata_path(self) -> Path:
        return self.model_path.parent / "metadata.json"

    def load_metadata(self) -> None:
        """Apply ``classes`` and ``inputSize`` from metadata.json when present."""
        path = self.metadata_path
        if not path.exists():
            return
        try:
            metadata = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(metadata, dict):
                raise ValueError("metadata must be a JSON object")
            classes = metadata.get("classes")
            if isinstance(classes, list):
                self.set_class_labels(classes)
            input_size = metadata.get("inputSize")
            if input_size is not None:
                self._input_size = int(input_size)
            logger.info("Loaded model metadata", path=str(path), input_size=self._input_size)
        except (OSError, ValueError, TypeError) as exc:
            logger.warning("Could not load model metadata", path=str(path), error=str(exc))

    def initialize(self) -> bool:
        """Create the session if needed. Returns False when no model is usable."""
        if self._session is not None:
            return True
        with self._init_lock:
            if self._session is not None:
                return True
            if not self.model_path.exists():
                logger.warning("Model file not found", path=str(self.model_path))
                return False
            self.load_metadata()
            try:
                session = self._session_factory(str(self.model_path))
                input_name = session.get_inputs()[0].name
                output_name = session.get_outputs()[0].name
            except Exception as exc:  # onnxruntime raises its own untyped errors
                logger.error("Failed to initialise local model", path=str(self.model_path), error=str(exc))
                return False
            self._input_name = input_name
            self._output_name = output_name
            self._session = session
        logger.info(
            "Local model loaded",
            path=str(self.model_path),
            input_name=self._input_name,
            output_name=self._output_name,
        )
        return True

    def _execute(self, tensor: np.ndarray) -> np.ndarray:
        if self._run_lock is None:
            outputs = self._session.run([self._output_name], {self._input_name: tensor})
        else:
            with self._run_lock:
                outputs = self._session.run([self._output_name], {self._input_name: tensor})
        return np.asarray(outputs[0]).reshape(-1)

    def predict_sync(self, image_path: str | Path) -> RawResult:
        if not self.initialize():
            raise ModelUnavailableError("model unavailable")
        tensor = preprocess(image_path, self._input_size)
        try:
            scores = self._execute(tensor)
        except Exception as exc:
            raise InferenceError(f"Offline inference failed: {exc}") from exc
        if not np.all(np.isfinite(scores)):
            raise InferenceError("Offline inference produced non-finite scores")
        return format_scores(scores, self._class_labels)

    async def predict(self, image_path: str | Path) -> RawResult:
        """Classify an image without blocking the event loop.

        Raises ``DecodeError`` for unreadable images and ``InferenceError`` for
        any failure of the model itself.
        """
        try:
            return await asyncio.to_thread(self.predict_sync, image_path)
        except (DecodeError, InferenceError):
            raise
        except Exception as exc:
            raise InferenceError(f"Offline inference failed: {exc}") from exc


__all__ = ["LocalModelRunner", "create_session"]
