"""Download an ONNX model export for the local classification tier."""
from __future__ import annotations

import argparse
import json
from pathlib import Path

import requests

from cropscan.services.normalizer import DEFAULT_CLASS_LABELS

EXPORT_URL = "https://api.roboflow.com/{workspace}/{project}/{version}/onnx"


def download_file(url: str, destination: Path, params: dict | None = None) -> None:
    destination.parent.mkdir(parents=True, exist_ok=True)
    response = requests.get(url, params=params, timeout=30)
    response.raise_for_status()
    destination.write_bytes(response.content)


def write_example_metadata(destination: Path, input_size: int = 640) -> Path:
    """Write a metadata.json the local runner reads next to the model."""
    destination.parent.mkdir(parents=True, exist_ok=True)
    metadata = {
        "classes": list(DEFAULT_CLASS_LABELS),
        "inputSize": input_size,
        "description": "Class order must match the model output vector",
    }
    destination.write_text(json.dumps(metadata, indent=2), encoding="utf-8")
    return destination


def main() -> None:
    parser = argparse.ArgumentParser(description="Download a CropScan ONNX model export")
    parser.add_argument("--api-key", required=True, help="Remote workflow API key")
    parser.add_argument("--workspace", required=True)
    parser.add_argument("--project", required=True)
    parser.add_argument("--version", default="1")
    parser.add_argument("--models-dir", type=Path, default=Path("models"))
    parser.add_argument("--input-size", type=int, default=640)
    args = parser.parse_args()

    url = EXPORT_URL.format(workspace=args.workspace, project=args.project, version=args.version)
    archive = args.models_dir / "model-download.zip"
    download_file(url, archive, params={"api_key": args.api_key})
    print(f"Saved model export to {archive}")
    print("Extract the .onnx file and rename it to crop-disease-model.onnx")

    metadata = write_example_metadata(args.models_dir / "example-metadata.json", args.input_size)
    print(f"Wrote example metadata to {metadata}")


if __name__ == "__main__":
    main()
