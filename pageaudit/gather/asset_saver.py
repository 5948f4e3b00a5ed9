"""Save and load artifact bags for gather-only and audit-only runs."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ..errors import ArtifactError

ARTIFACTS_FILENAME = "artifacts.json"
_ERROR_KEY = "$artifactError"


def encode_artifacts(artifacts: dict[str, Any]) -> dict[str, Any]:
    """Replace error markers with JSON-safe stand-ins."""
    encoded = {}
    for name, value in artifacts.items():
        if isinstance(value, ArtifactError):
            encoded[name] = {_ERROR_KEY: {"message": str(value), "artifactName": value.artifact_name or name}}
        else:
            encoded[name] = value
    return encoded


def decode_artifacts(data: dict[str, Any]) -> dict[str, Any]:
    """Inverse of encode_artifacts."""
    decoded = {}
    for name, value in data.items():
        if isinstance(value, dict) and set(value) == {_ERROR_KEY}:
            error = value[_ERROR_KEY]
            decoded[name] = ArtifactError(error["message"], artifact_name=error.get("artifactName", name))
        else:
            decoded[name] = value
    return decoded


def save_artifacts(artifacts: dict[str, Any], base_dir: Path | str) -> Path:
    """
    Save an artifact bag to `<base_dir>/artifacts.json`.

    Traces and protocol logs stay nested under their pass names.

    Returns:
        Path to the saved file
    """
    base_dir = Path(base_dir)
    base_dir.mkdir(parents=True, exist_ok=True)
    save_path = base_dir / ARTIFACTS_FILENAME

    with open(save_path, "w") as f:
        json.dump(encode_artifacts(artifacts), f, indent=2)

    return save_path


def load_artifacts(base_dir: Path | str) -> dict[str, Any]:
    """
    Load an artifact bag saved by save_artifacts.

    Raises:
        FileNotFoundError: if the directory has no artifacts.json
    """
    load_path = Path(base_dir) / ARTIFACTS_FILENAME
    if not load_path.exists():
        raise FileNotFoundError(f"No saved artifacts found at {load_path}")

    with open(load_path) as f:
        data = json.load(f)

    return decode_artifacts(data)


__all__ = ["ARTIFACTS_FILENAME", "decode_artifacts", "encode_artifacts", "load_artifacts", "save_artifacts"]
