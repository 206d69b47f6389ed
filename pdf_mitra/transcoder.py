"""
Raster Transcoder: decode uploaded images and re-encode them for embedding.

Every image is decoded with Pillow, shrunk to fit the configured cap (never
enlarged) and written back out. Under the default policy the output is
always a baseline JPEG; alpha is flattened onto white first. With
``preserve_png`` enabled, PNG input is written back out as PNG instead.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass

from PIL import Image, ImageOps, UnidentifiedImageError

from .config import ComposerSettings
from .errors import DecodeFailure, EncodeFailure
from .layout import downscaled_size

logger = logging.getLogger(__name__)

JPEG = "JPEG"
PNG = "PNG"


@dataclass
class SourceImage:
    """One uploaded image. Not persisted."""

    name: str
    data: bytes
    mime_type: str = "application/octet-stream"


@dataclass
class NormalizedImage:
    """A decoded, size-capped and re-encoded image ready to embed."""

    width: int
    height: int
    data: bytes
    format: str = JPEG


def flatten_for_jpeg(img: Image.Image) -> Image.Image:
    """Return an RGB/L image; transparent areas become white."""
    if img.mode == "CMYK":
        img = img.convert("RGB")
    if img.mode in ("RGBA", "P", "LA", "PA"):
        if img.mode == "P":
            img = img.convert("RGBA")
        if "A" in img.mode:
            background = Image.new("RGB", img.size, (255, 255, 255))
            background.paste(img, mask=img.split()[-1])
            return background
    if img.mode not in ("RGB", "L"):
        return img.convert("RGB")
    return img


class RasterTranscoder:
    """Decode + downscale + re-encode, one image at a time."""

    def __init__(self, settings: ComposerSettings | None = None):
        self.settings = settings or ComposerSettings()

    def normalize(self, source: SourceImage) -> NormalizedImage:
        s = self.settings
        with self._open(source) as img:
            keep_png = s.preserve_png and img.format == PNG
            # exif_transpose returns a copy when it rotates; close it as well
            oriented = ImageOps.exif_transpose(img)
            try:
                src_w, src_h = oriented.size
                size = downscaled_size(src_w, src_h, s.max_width, s.max_height)
                try:
                    if size != (src_w, src_h):
                        resized = oriented.resize(size, Image.LANCZOS)
                    else:
                        resized = oriented
                    data = self._encode(resized, PNG if keep_png else JPEG)
                except (OSError, ValueError) as exc:
                    raise EncodeFailure(f"Could not re-encode {source.name}: {exc}", source.name) from exc
            finally:
                if oriented is not img:
                    oriented.close()

        fmt = PNG if keep_png else JPEG
        logger.debug("Normalised %s: %dx%d -> %dx%d %s (%d bytes)",
                     source.name, src_w, src_h, size[0], size[1], fmt, len(data))
        return NormalizedImage(width=size[0], height=size[1], data=data, format=fmt)

    # -- helpers ------------------------------------------------------------

    @staticmethod
    def _open(source: SourceImage) -> Image.Image:
        img = None
        try:
            img = Image.open(io.BytesIO(source.data))
            img.load()
        except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as exc:
            if img is not None:
                img.close()
            raise DecodeFailure(f"Could not decode {source.name}: {exc}", source.name) from exc
        return img

    def _encode(self, img: Image.Image, fmt: str) -> bytes:
        buf = io.BytesIO()
        if fmt == PNG:
            if img.mode not in ("RGB", "RGBA", "L", "LA"):
                has_alpha = "transparency" in img.info or "A" in img.mode
                img = img.convert("RGBA" if has_alpha else "RGB")
            img.save(buf, format=PNG, optimize=False, compress_level=6)
        else:
            # Baseline JPEG: 4:4:4 chroma, standard Huffman tables
            img = flatten_for_jpeg(img)
            img.save(
                buf,
                format=JPEG,
                quality=self.settings.pillow_quality,
                subsampling=0,
                progressive=False,
                optimize=False,
            )
        return buf.getvalue()
