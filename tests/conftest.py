import io
import sys
from pathlib import Path

import pytest
from PIL import Image
from pypdf import PdfWriter

# Add the repo root to sys.path so we can import pdf_mitra without installing
ROOT_PATH = Path(__file__).resolve().parent.parent
if ROOT_PATH.as_posix() not in sys.path:
    sys.path.insert(0, ROOT_PATH.as_posix())

from pdf_mitra.transcoder import SourceImage  # noqa: E402


def encode_image(width: int, height: int, fmt: str = "PNG", mode: str = "RGB", color=(200, 30, 30)) -> bytes:
    img = Image.new(mode, (width, height), color=color)
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


def blank_pdf(pages: int, width: float = 612, height: float = 792) -> bytes:
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=width, height=height)
    buf = io.BytesIO()
    writer.write(buf)
    return buf.getvalue()


@pytest.fixture
def make_source():
    """Factory for in-memory SourceImage objects."""
    def _make(width: int, height: int, fmt: str = "PNG", mode: str = "RGB", name: str | None = None, **kwargs):
        mime = "image/png" if fmt == "PNG" else "image/jpeg"
        data = encode_image(width, height, fmt=fmt, mode=mode, **kwargs)
        return SourceImage(name or f"{width}x{height}.{fmt.lower()}", data, mime)
    return _make


@pytest.fixture
def make_pdf():
    """Factory for blank PDFs with a given page count."""
    return blank_pdf


@pytest.fixture
def broken_source():
    return SourceImage("broken.png", b"this is not an image", "image/png")
