"""
Utils Package

Snapshot serialization and image-source decoding.
"""

from .serialization import (
    SnapshotError,
    decode_data_uri,
    deserialize_album,
    encode_data_uri,
    export_album,
    export_filename,
    is_data_uri,
    load_album,
    read_image_source,
    save_album,
    unwrap_snapshot,
)

__all__ = [
    "SnapshotError",
    "decode_data_uri",
    "deserialize_album",
    "encode_data_uri",
    "export_album",
    "export_filename",
    "is_data_uri",
    "load_album",
    "read_image_source",
    "save_album",
    "unwrap_snapshot",
]
