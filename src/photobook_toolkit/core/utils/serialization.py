"""
Serialization Utilities

Album snapshot import/export and image-source decoding.

A snapshot file is either the bare album object or the export wrapper
``{"_knigodar": true, "version": 1, "exportedAt": ..., "album": {...}}``.
Both are accepted on load; export always writes the wrapper.

Image sources inside a snapshot are data URIs. Plain file paths are also
accepted so hand-written snapshots can point at files on disk.
"""

from __future__ import annotations

import base64
import binascii
import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Union

from ..models.album import Album
from ..schemas.validator import (
    SNAPSHOT_MARKER,
    SNAPSHOT_WRAPPER_VERSION,
    ValidationError,
    is_wrapped_snapshot,
    validate_snapshot,
)

_DATA_URI_RE = re.compile(r"^data:(?P<mime>[\w/+.-]*)(?P<params>(;[^;,]*)*?),(?P<payload>.*)$", re.DOTALL)

# Characters kept in export file names; everything else becomes "_"
_FILENAME_UNSAFE_RE = re.compile(r"[^\w\-]", re.UNICODE)

SNAPSHOT_SUFFIX = ".knigodar.json"


class SnapshotError(ValidationError):
    """Snapshot file cannot be read or does not describe an album."""
    pass


# ─────────────────────────────────────────────────────────────────────────────
# Album Snapshots
# ─────────────────────────────────────────────────────────────────────────────

def unwrap_snapshot(data: dict[str, Any]) -> dict[str, Any]:
    """Return the bare album dict from a wrapped or bare snapshot."""
    if is_wrapped_snapshot(data):
        return data["album"]
    return data


def deserialize_album(
    data: dict[str, Any],
    *,
    validate: bool = True,
    strict: bool = False,
) -> Album:
    """
    Build an Album from a snapshot dictionary.

    Args:
        data: Wrapped or bare snapshot
        validate: Run validation first
        strict: Also run full JSON Schema validation

    Returns:
        Album instance with ISO dates restored to datetimes

    Raises:
        ValidationError: If validate=True and data is invalid
        SnapshotError: If the data cannot be turned into models
    """
    if validate:
        validate_snapshot(data, strict=strict)

    raw = unwrap_snapshot(data)
    try:
        return Album.from_dict(raw)
    except (KeyError, TypeError, ValueError) as e:
        raise SnapshotError(f"Invalid album data: {e}", errors=[str(e)]) from e


def export_album(album: Album, *, exported_at: datetime | None = None) -> dict[str, Any]:
    """
    Serialize an album into the export wrapper.

    Args:
        album: Album to export
        exported_at: Export timestamp (defaults to now, UTC)
    """
    if exported_at is None:
        exported_at = datetime.now(timezone.utc)
    return {
        SNAPSHOT_MARKER: True,
        "version": SNAPSHOT_WRAPPER_VERSION,
        "exportedAt": exported_at.isoformat(),
        "album": album.to_dict(),
    }


def load_album(
    source: Union[Path, str, dict],
    *,
    validate: bool = True,
    strict: bool = False,
) -> Album:
    """
    Load an album from a snapshot file or an already-parsed dict.

    Args:
        source: Path to a ``.json`` snapshot, or its parsed content
        validate: Validate before building models
        strict: Also run full JSON Schema validation

    Raises:
        FileNotFoundError: If the snapshot file doesn't exist
        SnapshotError: If the file is not valid JSON or not an album
        ValidationError: If validation fails
    """
    if isinstance(source, dict):
        return deserialize_album(source, validate=validate, strict=strict)

    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(f"Album snapshot not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise SnapshotError(
            f"Snapshot is not valid JSON: {e}",
            path=str(path),
            errors=[str(e)],
        ) from e

    if not isinstance(data, dict):
        raise SnapshotError("Snapshot must be a JSON object", path=str(path))
    return deserialize_album(data, validate=validate, strict=strict)


def export_filename(title: str) -> str:
    """File name for an exported album, derived from its title."""
    safe = _FILENAME_UNSAFE_RE.sub("_", title) or "album"
    return f"{safe}{SNAPSHOT_SUFFIX}"


def save_album(album: Album, path: Path) -> Path:
    """
    Write the export wrapper for an album.

    Args:
        album: Album to export
        path: Output file, or a directory to place ``export_filename()`` in

    Returns:
        Path of the written file
    """
    if path.is_dir():
        path = path / export_filename(album.title)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(export_album(album), f, indent=2, ensure_ascii=False)
    return path


# ─────────────────────────────────────────────────────────────────────────────
# Image Sources
# ─────────────────────────────────────────────────────────────────────────────

def is_data_uri(source: str) -> bool:
    return source.startswith("data:")


def decode_data_uri(uri: str) -> bytes:
    """
    Decode the payload of a ``data:`` URI.

    Raises:
        ValueError: If the URI is malformed or the payload is not base64
    """
    match = _DATA_URI_RE.match(uri)
    if match is None:
        raise ValueError("Malformed data URI")
    payload = match.group("payload")
    if ";base64" not in match.group("params"):
        raise ValueError("Only base64 data URIs are supported")
    try:
        return base64.b64decode(payload, validate=False)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid base64 payload: {e}") from e


def encode_data_uri(data: bytes, mime: str = "image/png") -> str:
    """Encode bytes as a base64 ``data:`` URI."""
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def read_image_source(source: str, base_dir: Path | None = None) -> bytes:
    """
    Read the raw bytes behind an image source string.

    Args:
        source: Data URI or file path
        base_dir: Directory relative file paths are resolved against

    Raises:
        ValueError: If a data URI is malformed
        FileNotFoundError: If a file path doesn't exist
    """
    if is_data_uri(source):
        return decode_data_uri(source)

    path = Path(source)
    if not path.is_absolute() and base_dir is not None:
        path = base_dir / path
    if not path.exists():
        raise FileNotFoundError(f"Image not found: {path}")
    return path.read_bytes()
