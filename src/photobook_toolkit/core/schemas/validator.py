"""
Snapshot Validation Utilities

Validates album snapshot JSON before it is turned into model objects.

Two layers:
- Basic checks (required fields, template ids are strings, photo lists
  are lists) that always run and give precise error paths
- Full JSON Schema validation via jsonschema in strict mode
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema


# Version written inside the export wrapper
SNAPSHOT_WRAPPER_VERSION = 1

# Marker key of the export wrapper
SNAPSHOT_MARKER = "_knigodar"

_SCHEMAS: dict[str, dict] = {}


def _load_schema(name: str) -> dict:
    """Load a schema from the schemas directory."""
    if name not in _SCHEMAS:
        schema_path = Path(__file__).parent / f"{name}.schema.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")
        with open(schema_path, "r", encoding="utf-8") as f:
            _SCHEMAS[name] = json.load(f)
    return _SCHEMAS[name]


class ValidationError(Exception):
    """Raised when data fails schema validation."""

    def __init__(self, message: str, path: str = "", errors: list[str] | None = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or []


def is_wrapped_snapshot(data: Any) -> bool:
    """True if ``data`` is the export wrapper rather than a bare album."""
    return isinstance(data, dict) and data.get(SNAPSHOT_MARKER) is True and "album" in data


def validate_album(data: dict[str, Any], *, strict: bool = False) -> None:
    """
    Validate a bare album dictionary.

    Args:
        data: Album dictionary (camelCase keys)
        strict: Also run full JSON Schema validation

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError("Album must be a JSON object")

    required = ["id", "spreads"]
    missing = [f for f in required if f not in data]
    if missing:
        raise ValidationError(
            f"Missing required fields: {missing}",
            path="",
            errors=[f"Missing field: {f}" for f in missing],
        )

    spreads = data["spreads"]
    if not isinstance(spreads, list):
        raise ValidationError("spreads must be a list", path="spreads")

    for i, spread in enumerate(spreads):
        _validate_spread(spread, f"spreads[{i}]")

    if strict:
        schema = _load_schema("album")
        try:
            jsonschema.validate(data, schema)
        except jsonschema.ValidationError as e:
            raise ValidationError(
                f"Schema validation failed: {e.message}",
                path=".".join(str(p) for p in e.absolute_path),
                errors=[e.message],
            ) from e


def validate_snapshot(data: dict[str, Any], *, strict: bool = False) -> None:
    """
    Validate a snapshot that may be wrapped or bare.

    Raises:
        ValidationError: If the wrapper or the album is invalid
    """
    if is_wrapped_snapshot(data):
        version = data.get("version")
        if version != SNAPSHOT_WRAPPER_VERSION:
            raise ValidationError(
                f"Unsupported snapshot version: {version} (expected {SNAPSHOT_WRAPPER_VERSION})",
                path="version",
            )
        validate_album(data["album"], strict=strict)
    else:
        validate_album(data, strict=strict)


def _validate_spread(data: Any, path: str) -> None:
    """Validate one spread entry."""
    if not isinstance(data, dict):
        raise ValidationError("Spread must be an object", path=path)

    missing = [f for f in ("id", "templateId") if f not in data]
    if missing:
        raise ValidationError(
            f"Spread missing required fields: {missing}",
            path=path,
            errors=[f"Missing field: {f}" for f in missing],
        )

    if not isinstance(data["templateId"], str):
        raise ValidationError(
            f"Invalid templateId: {data['templateId']!r}",
            path=f"{path}.templateId",
        )

    for key in ("leftPhotos", "rightPhotos"):
        photos = data.get(key, [])
        if not isinstance(photos, list):
            raise ValidationError(f"{key} must be a list", path=f"{path}.{key}")
        for j, photo in enumerate(photos):
            if photo is not None:
                _validate_photo(photo, f"{path}.{key}[{j}]")

    bubbles = data.get("bubbles", [])
    if not isinstance(bubbles, list):
        raise ValidationError("bubbles must be a list", path=f"{path}.bubbles")
    for j, bubble in enumerate(bubbles):
        _validate_bubble(bubble, f"{path}.bubbles[{j}]")


def _validate_photo(data: Any, path: str) -> None:
    if not isinstance(data, dict) or "id" not in data:
        raise ValidationError("Photo must be an object with an id", path=path)

    crop = data.get("cropArea")
    if crop is not None:
        for key in ("x", "y", "width", "height"):
            if not isinstance(crop.get(key), (int, float)):
                raise ValidationError(
                    f"cropArea.{key} must be a number",
                    path=f"{path}.cropArea.{key}",
                )
        if crop["width"] <= 0 or crop["height"] <= 0:
            raise ValidationError(
                f"cropArea must have positive size: {crop['width']}x{crop['height']}",
                path=f"{path}.cropArea",
            )


def _validate_bubble(data: Any, path: str) -> None:
    if not isinstance(data, dict):
        raise ValidationError("Bubble must be an object", path=path)

    for key in ("x", "y"):
        value = data.get(key)
        if not isinstance(value, (int, float)) or not 0 <= value <= 100:
            raise ValidationError(
                f"Invalid bubble {key}: {value!r} (must be 0-100)",
                path=f"{path}.{key}",
            )
