"""Configuration management for CropScan backend."""
from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    cors_origins_raw: str = Field(
        "http://localhost:5173,http://localhost:3000", alias="CORS_ORIGINS"
    )
    local_model_enabled: bool = Field(False, alias="LOCAL_MODEL_ENABLED")
    model_path: str = Field("models/crop-disease-model.onnx", alias="MODEL_PATH")
    model_input_size: int = Field(640, alias="MODEL_INPUT_SIZE")
    serialize_inference: bool = Field(False, alias="SERIALIZE_INFERENCE")
    remote_api_key: Optional[str] = Field(None, alias="REMOTE_API_KEY")
    remote_endpoint: str = Field(
        "https://serverless.roboflow.com", alias="REMOTE_ENDPOINT"
    )
    remote_workspace: str = Field("kart-app-dev", alias="REMOTE_WORKSPACE")
    remote_workflow_id: str = Field("detect-and-classify", alias="REMOTE_WORKFLOW_ID")
    remote_timeout: float = Field(30.0, alias="REMOTE_TIMEOUT")
    upload_dir: str = Field("uploads/plants", alias="CROPSCAN_UPLOAD_DIR")
    max_upload_bytes: int = Field(10 * 1024 * 1024, alias="CROPSCAN_MAX_UPLOAD_BYTES")
    log_dir: str = Field("logs", alias="CROPSCAN_LOG_DIR")
    mock_seed: Optional[int] = Field(None, alias="CROPSCAN_MOCK_SEED")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        populate_by_name = True
        extra = "ignore"
        protected_namespaces = ()

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins_raw.split(",") if origin]

    @property
    def remote_url(self) -> str:
        base = self.remote_endpoint.rstrip("/")
        return f"{base}/{self.remote_workspace}/{self.remote_workflow_id}"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]


settings = get_settings()
