"""Endpoints for image-based disease identification."""
from __future__ import annotations

import asyncio
import uuid
from datetime import datetime, timezone
from pathlib import Path

from fastapi import APIRouter, File, Form, HTTPException, UploadFile, status

from ..config import settings
from ..services import catalog, models
from ..services.errors import DecodeError

router = APIRouter()

ALLOWED_SUFFIXES = {".jpg", ".jpeg", ".png"}


def _upload_path(filename: str | None) -> Path:
    suffix = Path(filename or "").suffix.lower() or ".jpg"
    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    return upload_dir / f"plant-{uuid.uuid4().hex}{suffix}"


@router.post("/diagnose", status_code=status.HTTP_200_OK)
async def diagnose_leaf(file: UploadFile = File(...), language: str = Form("en")) -> dict:
    """Identify the disease shown in an uploaded leaf image."""
    suffix = Path(file.filename or "").suffix.lower()
    if suffix and suffix not in ALLOWED_SUFFIXES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only image files (JPEG, JPG, PNG) are allowed",
        )
    contents = await file.read(settings.max_upload_bytes + 1)
    if len(contents) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Image exceeds the {settings.max_upload_bytes} byte upload limit",
        )
    image_path = _upload_path(file.filename)
    await asyncio.to_thread(image_path.write_bytes, contents)
    try:
        record = await models.get_resolver().resolve(image_path)
    except DecodeError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc
    finally:
        image_path.unlink(missing_ok=True)

    return {
        **record.to_dict(),
        "language": language,
        "analyzedAt": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/diseases")
async def list_diseases() -> dict:
    return {"diseases": [entry.to_dict() for entry in catalog.DISEASE_CATALOG]}


@router.get("/status")
async def inference_status() -> dict:
    resolver = models.get_resolver()
    runner = resolver.local_runner
    return {
        "localEnabled": resolver.local_enabled,
        "localAvailable": bool(runner and runner.is_available()),
        "remoteConfigured": bool(resolver.remote_client and resolver.remote_client.is_configured()),
    }
