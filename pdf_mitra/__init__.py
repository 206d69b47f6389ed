"""
PDF Mitra: simple PDF tools behind a Streamlit page.

Operations:
  • Merge      several PDFs → merged.pdf
  • Split      one PDF → split-pages.zip (page-1.pdf, page-2.pdf, …)
  • Images     JPEG/PNG images → images.pdf, one image per page, fitted and centred

Pipeline (images):
  Upload → Raster Transcoder (Pillow) → Document Builder (pikepdf) → Page Layout → PDF bytes
"""

from .builder import DocumentBuilder, EmbeddedImage
from .composer import CompositionResult, PageComposer, compose_images, try_compose_images
from .config import ComposerSettings, load_settings
from .documents import format_size, merge_pdfs, split_pdf, split_pdf_to_zip
from .errors import (
    CompositionError,
    DecodeFailure,
    DocumentError,
    EncodeFailure,
    FailureKind,
    PdfMitraError,
    SerializationFailure,
)
from .layout import PageLayout, compute_page_layout, downscale_ratio
from .transcoder import NormalizedImage, RasterTranscoder, SourceImage

__all__ = [
    "PageComposer",
    "compose_images",
    "try_compose_images",
    "CompositionResult",
    "ComposerSettings",
    "load_settings",
    "RasterTranscoder",
    "SourceImage",
    "NormalizedImage",
    "DocumentBuilder",
    "EmbeddedImage",
    "PageLayout",
    "compute_page_layout",
    "downscale_ratio",
    "merge_pdfs",
    "split_pdf",
    "split_pdf_to_zip",
    "format_size",
    "PdfMitraError",
    "CompositionError",
    "DecodeFailure",
    "EncodeFailure",
    "SerializationFailure",
    "FailureKind",
    "DocumentError",
]
