"""FastAPI entrypoint for the CropScan backend service."""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .config import settings
from .routes import image

app = FastAPI(title="CropScan Disease Identification API", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(image.router, prefix="/vision", tags=["vision"])


@app.get("/health", tags=["system"])
async def healthcheck() -> dict[str, str]:
    """Simple readiness endpoint for orchestration and CI checks."""
    return {"status": "ok"}
