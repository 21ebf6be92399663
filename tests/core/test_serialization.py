"""
Unit Tests for snapshot serialization.

Tests wrapped/bare snapshot loading, export, and image-source decoding.
"""

import json
from datetime import datetime, timezone

import pytest

from photobook_toolkit.core.models import BubbleType, PageSide
from photobook_toolkit.core.schemas import ValidationError
from photobook_toolkit.core.utils import (
    SnapshotError,
    decode_data_uri,
    deserialize_album,
    encode_data_uri,
    export_album,
    export_filename,
    load_album,
    read_image_source,
    save_album,
    unwrap_snapshot,
)


class TestDeserializeAlbum:
    """Tests for deserialize_album()."""

    def test_bare_snapshot_builds_models(self, album_dict):
        # Act
        album = deserialize_album(album_dict)

        # Assert
        assert album.id == "album-1"
        assert album.title == "Summer Trip"
        assert len(album.spreads) == 1
        spread = album.spreads[0]
        assert spread.template_id == "classic"
        assert spread.photo_at(PageSide.RIGHT, 1) is None
        assert spread.photo_at(PageSide.RIGHT, 0).caption == "Beach"
        assert spread.bubbles[0].type is BubbleType.SPEECH
        assert album.photo_count == 3

    def test_iso_dates_restored(self, album_dict):
        album = deserialize_album(album_dict)
        assert album.created_at == datetime(2025, 6, 1, 10, 0, tzinfo=timezone.utc)

    def test_wrapped_snapshot_unwrapped(self, album_dict):
        wrapped = {"_knigodar": True, "version": 1, "exportedAt": "2025-06-03T00:00:00Z", "album": album_dict}
        assert deserialize_album(wrapped).id == "album-1"

    def test_unsupported_wrapper_version_rejected(self, album_dict):
        wrapped = {"_knigodar": True, "version": 2, "album": album_dict}
        with pytest.raises(ValidationError):
            deserialize_album(wrapped)

    def test_unknown_bubble_type_raises_snapshot_error(self, album_dict):
        album_dict["spreads"][0]["bubbles"][0]["type"] = "shout"
        with pytest.raises(SnapshotError):
            deserialize_album(album_dict)


class TestExport:
    """Tests for export_album() and save_album()."""

    def test_export_wraps_album(self, album_dict):
        # Arrange
        album = deserialize_album(album_dict)
        stamp = datetime(2025, 7, 1, tzinfo=timezone.utc)

        # Act
        data = export_album(album, exported_at=stamp)

        # Assert
        assert data["_knigodar"] is True
        assert data["version"] == 1
        assert data["exportedAt"] == stamp.isoformat()
        assert unwrap_snapshot(data)["id"] == "album-1"

    def test_export_then_load_preserves_album(self, album_dict, tmp_path):
        album = deserialize_album(album_dict)
        path = save_album(album, tmp_path)
        assert path.name == "Summer_Trip.knigodar.json"
        assert load_album(path) == album

    def test_export_filename_fallback(self):
        assert export_filename("") == "album.knigodar.json"


class TestLoadAlbum:
    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_album(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(SnapshotError):
            load_album(path)

    def test_non_object_json(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text(json.dumps([1, 2]), encoding="utf-8")
        with pytest.raises(SnapshotError):
            load_album(path)


class TestImageSources:
    def test_data_uri_round_trip(self):
        uri = encode_data_uri(b"\x89PNGdata", "image/png")
        assert uri.startswith("data:image/png;base64,")
        assert decode_data_uri(uri) == b"\x89PNGdata"

    def test_non_base64_data_uri_rejected(self):
        with pytest.raises(ValueError):
            decode_data_uri("data:text/plain,hello")

    def test_relative_path_resolved_against_base_dir(self, sample_image):
        data = read_image_source(sample_image.name, sample_image.parent)
        assert data == sample_image.read_bytes()

    def test_missing_path_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_image_source("missing.png", tmp_path)
