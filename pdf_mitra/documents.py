"""Merge and split whole PDFs with pypdf. Pages are cloned, never re-encoded."""

from __future__ import annotations

import io
import logging
import zipfile
from typing import Sequence

from pypdf import PdfReader, PdfWriter
from pypdf.errors import PyPdfError

from .errors import DocumentError

logger = logging.getLogger(__name__)

MERGED_FILENAME = "merged.pdf"
SPLIT_FILENAME = "split-pages.zip"
IMAGES_FILENAME = "images.pdf"


def format_size(size_bytes: int) -> str:
    """Format byte count to human-readable string."""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.2f} KB"
    else:
        return f"{size_bytes / (1024 * 1024):.2f} MB"


def read_pdf(data: bytes, name: str = "document") -> PdfReader:
    try:
        reader = PdfReader(io.BytesIO(data))
        # Force the page tree to load so broken files fail here
        len(reader.pages)
    except (PyPdfError, ValueError, KeyError, OSError) as exc:
        raise DocumentError(f"Could not read {name}: {exc}") from exc
    return reader


def _write(writer: PdfWriter) -> bytes:
    # Deduplicate shared resources before writing, like object-stream packing
    writer.compress_identical_objects(remove_identicals=True, remove_orphans=True)
    buf = io.BytesIO()
    writer.write(buf)
    return buf.getvalue()


def merge_pdfs(sources: Sequence[bytes], names: Sequence[str] | None = None) -> bytes:
    """Merge multiple PDFs into a single PDF, keeping source and page order."""
    if len(sources) < 2:
        raise ValueError("At least two PDFs are needed to merge.")
    names = list(names) if names else [f"file {i + 1}" for i in range(len(sources))]

    writer = PdfWriter()
    total_pages = 0
    for data, name in zip(sources, names):
        reader = read_pdf(data, name)
        for page in reader.pages:
            writer.add_page(page)
            total_pages += 1
        logger.info("Merged %s (%d pages)", name, len(reader.pages))

    result = _write(writer)
    logger.info("Merged %d PDFs into %d pages (%s)", len(sources), total_pages, format_size(len(result)))
    return result


def split_pdf(data: bytes, name: str = "document") -> list[tuple[str, bytes]]:
    """Split a PDF into single-page PDFs. Returns ``(filename, bytes)`` pairs."""
    reader = read_pdf(data, name)
    total_pages = len(reader.pages)
    if total_pages == 0:
        raise DocumentError(f"{name} has no pages.")

    results = []
    for idx in range(total_pages):
        writer = PdfWriter()
        writer.add_page(reader.pages[idx])
        results.append((f"page-{idx + 1}.pdf", _write(writer)))
    logger.info("Split %s into %d pages", name, total_pages)
    return results


def create_zip(files: Sequence[tuple[str, bytes]]) -> bytes:
    """Package ``(filename, bytes)`` pairs into a ZIP file."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, 'w', zipfile.ZIP_DEFLATED) as zf:
        for filename, payload in files:
            zf.writestr(filename, payload)
    return buf.getvalue()


def split_pdf_to_zip(data: bytes, name: str = "document") -> bytes:
    return create_zip(split_pdf(data, name))
