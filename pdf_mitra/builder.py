"""
Document Builder: a thin pikepdf wrapper for image pages.

JPEG data is embedded as-is (``/DCTDecode``), so nothing is re-encoded a
second time. PNG data is unpacked to raw pixels and stored with
``/FlateDecode``; an alpha channel becomes a soft mask.
"""

from __future__ import annotations

import io
import logging
import zlib
from dataclasses import dataclass

import pikepdf
from PIL import Image

from .layout import DEFAULT_PAGE_SIZE

logger = logging.getLogger(__name__)


@dataclass
class EmbeddedImage:
    """Handle to an image XObject inside one document."""

    ref: pikepdf.Object
    width: int
    height: int


class DocumentBuilder:
    """
    Build a PDF page by page.

    Usage
    -----
        with DocumentBuilder() as doc:
            handle = doc.embed_image(jpeg_bytes)
            page = doc.add_page()
            doc.draw_image(page, handle, x, y, w, h)
            pdf_bytes = doc.save()
    """

    def __init__(self, page_size: tuple[float, float] = DEFAULT_PAGE_SIZE):
        self.page_size = page_size
        self.pdf = pikepdf.Pdf.new()

    def __enter__(self) -> "DocumentBuilder":
        return self

    def __exit__(self, *exc_info):
        self.close()

    def close(self):
        self.pdf.close()

    @property
    def page_count(self) -> int:
        return len(self.pdf.pages)

    # -- embedding ------------------------------------------------------------

    def embed_image(self, data: bytes) -> EmbeddedImage:
        """Embed JPEG or PNG bytes, dispatching on the stream's own format."""
        with Image.open(io.BytesIO(data)) as img:
            fmt = img.format
        if fmt == "JPEG":
            return self.embed_jpeg(data)
        if fmt == "PNG":
            return self.embed_png(data)
        raise ValueError(f"Only JPEG and PNG can be embedded, got {fmt}")

    def embed_jpeg(self, data: bytes) -> EmbeddedImage:
        with Image.open(io.BytesIO(data)) as img:
            width, height = img.size
            mode = img.mode

        if mode == "L":
            color_space = pikepdf.Name.DeviceGray
        elif mode == "CMYK":
            color_space = pikepdf.Name.DeviceCMYK
        else:
            color_space = pikepdf.Name.DeviceRGB

        image_obj = pikepdf.Stream(self.pdf, data)
        image_obj["/Type"] = pikepdf.Name.XObject
        image_obj["/Subtype"] = pikepdf.Name.Image
        image_obj["/Width"] = width
        image_obj["/Height"] = height
        image_obj["/ColorSpace"] = color_space
        image_obj["/BitsPerComponent"] = 8
        image_obj["/Filter"] = pikepdf.Name.DCTDecode
        if mode == "CMYK":
            # Adobe CMYK JPEGs are stored inverted
            image_obj["/Decode"] = pikepdf.Array([1, 0, 1, 0, 1, 0, 1, 0])
        return EmbeddedImage(self.pdf.make_indirect(image_obj), width, height)

    def embed_png(self, data: bytes) -> EmbeddedImage:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            has_alpha = "A" in img.mode or "transparency" in img.info
            if img.mode in ("L", "LA"):
                base = img.convert("L")
                color_space = pikepdf.Name.DeviceGray
            else:
                base = img.convert("RGB")
                color_space = pikepdf.Name.DeviceRGB
            alpha = img.convert("RGBA").getchannel("A") if has_alpha else None
            width, height = img.size

        image_obj = pikepdf.Stream(self.pdf, zlib.compress(base.tobytes()))
        image_obj["/Type"] = pikepdf.Name.XObject
        image_obj["/Subtype"] = pikepdf.Name.Image
        image_obj["/Width"] = width
        image_obj["/Height"] = height
        image_obj["/ColorSpace"] = color_space
        image_obj["/BitsPerComponent"] = 8
        image_obj["/Filter"] = pikepdf.Name.FlateDecode

        if alpha is not None:
            mask = pikepdf.Stream(self.pdf, zlib.compress(alpha.tobytes()))
            mask["/Type"] = pikepdf.Name.XObject
            mask["/Subtype"] = pikepdf.Name.Image
            mask["/Width"] = width
            mask["/Height"] = height
            mask["/ColorSpace"] = pikepdf.Name.DeviceGray
            mask["/BitsPerComponent"] = 8
            mask["/Filter"] = pikepdf.Name.FlateDecode
            image_obj["/SMask"] = self.pdf.make_indirect(mask)

        return EmbeddedImage(self.pdf.make_indirect(image_obj), width, height)

    # -- pages ----------------------------------------------------------------

    def add_page(self) -> pikepdf.Page:
        """Append a blank page of the document's default size."""
        return self.pdf.add_blank_page(page_size=self.page_size)

    @staticmethod
    def page_dimensions(page: pikepdf.Page) -> tuple[float, float]:
        x0, y0, x1, y1 = (float(v) for v in page.obj["/MediaBox"])
        return x1 - x0, y1 - y0

    def draw_image(
        self,
        page: pikepdf.Page,
        image: EmbeddedImage,
        x: float,
        y: float,
        width: float,
        height: float,
    ):
        """Paint *image* into the rectangle (x, y, width, height), PDF points."""
        if "/Resources" not in page.obj:
            page.obj["/Resources"] = pikepdf.Dictionary()
        resources = page.obj["/Resources"]
        if "/XObject" not in resources:
            resources["/XObject"] = pikepdf.Dictionary()
        xobjects = resources["/XObject"]
        name = f"/Im{len(xobjects.keys())}"
        xobjects[name] = image.ref

        content = f"q {width:.4f} 0 0 {height:.4f} {x:.4f} {y:.4f} cm {name} Do Q\n"
        stream = self.pdf.make_indirect(pikepdf.Stream(self.pdf, content.encode()))

        existing = page.obj.get("/Contents")
        if existing is None:
            page.obj["/Contents"] = stream
        elif isinstance(existing, pikepdf.Array):
            existing.append(stream)
        else:
            page.obj["/Contents"] = pikepdf.Array([existing, stream])

    # -- output ---------------------------------------------------------------

    def save(self) -> bytes:
        out = io.BytesIO()
        self.pdf.save(out, object_stream_mode=pikepdf.ObjectStreamMode.generate)
        logger.debug("Serialised %d-page PDF (%d bytes)", self.page_count, out.tell())
        return out.getvalue()
