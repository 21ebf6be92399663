import base64
import io
import sys
from pathlib import Path

import pytest
from PIL import Image

# Add src to sys.path so we can import photobook_toolkit
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())


def png_data_uri(image: Image.Image) -> str:
    """Encode a PIL image as a PNG data URI."""
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


def gradient_image(width: int, height: int) -> Image.Image:
    """RGB image whose red channel encodes x and green channel encodes y."""
    img = Image.new("RGB", (width, height))
    px = img.load()
    for x in range(width):
        for y in range(height):
            px[x, y] = (x * 255 // max(1, width - 1), y * 255 // max(1, height - 1), 128)
    return img


# Common test fixtures
@pytest.fixture
def sample_image(tmp_path: Path):
    """Create a simple test image on disk."""
    img = Image.new("RGB", (200, 100), color="white")
    img_path = tmp_path / "sample.png"
    img.save(img_path)
    return img_path


@pytest.fixture
def data_uri():
    """Factory for solid-colour PNG data URIs."""
    def make(size=(80, 60), color=(200, 30, 30)):
        return png_data_uri(Image.new("RGB", size, color=color))
    return make


@pytest.fixture
def album_dict(data_uri):
    """Minimal valid bare album snapshot: one classic spread, one bubble."""
    return {
        "id": "album-1",
        "title": "Summer Trip",
        "withGaps": True,
        "createdAt": "2025-06-01T10:00:00.000Z",
        "updatedAt": "2025-06-02T12:30:00.000Z",
        "cover": {"frontImage": None, "backImage": None},
        "spreads": [
            {
                "id": "s1",
                "templateId": "classic",
                "leftPhotos": [{"id": "p1", "url": data_uri((60, 60))}],
                "rightPhotos": [
                    {"id": "p2", "url": data_uri((90, 30)), "caption": "Beach"},
                    None,
                    {"id": "p3", "url": data_uri((90, 30))},
                ],
                "bubbles": [
                    {"id": "b1", "x": 50, "y": 50, "text": "Hello!", "type": "speech"},
                ],
            }
        ],
    }


@pytest.fixture
def gradient():
    """Factory for gradient_image()."""
    return gradient_image


@pytest.fixture
def to_data_uri():
    """Factory for png_data_uri()."""
    return png_data_uri
