"""
Page Composer: turn a batch of images into a PDF, one image per page.

    SourceImage ──► decode + cap to 1600 px ──► JPEG (q 0.8)
                                                    │
                                                    ▼
                            embed ──► new Letter page ──► fit inside 36 pt margin, centre
                                                    │
                                  (next image, strictly one at a time)
                                                    ▼
                                               PDF bytes

Images are processed sequentially so only one decoded raster is held at a
time and page order always matches input order. Any failure aborts the
batch and nothing partial is returned.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

import pikepdf

from .builder import DocumentBuilder
from .config import ComposerSettings
from .errors import CompositionError, EncodeFailure, FailureKind, SerializationFailure
from .layout import DEFAULT_PAGE_SIZE, PageLayout, compute_page_layout
from .transcoder import RasterTranscoder, SourceImage

logger = logging.getLogger(__name__)


@dataclass
class CompositionResult:
    """Outcome of :func:`try_compose_images`."""

    ok: bool
    data: Optional[bytes] = None
    page_count: int = 0
    error_kind: Optional[FailureKind] = None
    message: str = ""
    layouts: List[PageLayout] = field(default_factory=list)


class PageComposer:
    """Compose images into a multi-page PDF."""

    def __init__(
        self,
        settings: ComposerSettings | None = None,
        page_size: tuple[float, float] = DEFAULT_PAGE_SIZE,
    ):
        self.settings = settings or ComposerSettings()
        self.page_size = page_size
        if 2 * self.settings.margin >= min(page_size):
            raise ValueError(f"Margin {self.settings.margin} leaves no content area on a {page_size} page")
        self.transcoder = RasterTranscoder(self.settings)
        self.layouts: List[PageLayout] = []

    def compose(
        self,
        images: Sequence[SourceImage],
        progress_cb: Callable[[int, int], None] | None = None,
    ) -> bytes:
        """
        Build the document and return its bytes.

        Raises a :class:`CompositionError` subclass on the first failure.
        ``self.layouts`` holds the geometry of every page placed by the last
        successful call.
        """
        total = len(images)
        layouts: List[PageLayout] = []

        with DocumentBuilder(self.page_size) as doc:
            for idx, source in enumerate(images):
                normalized = self.transcoder.normalize(source)
                try:
                    handle = doc.embed_image(normalized.data)
                except (OSError, ValueError, pikepdf.PdfError) as exc:
                    raise EncodeFailure(f"Could not embed {source.name}: {exc}", source.name) from exc

                try:
                    page = doc.add_page()
                    page_w, page_h = doc.page_dimensions(page)
                    layout = compute_page_layout(
                        handle.width, handle.height, page_w, page_h, self.settings.margin
                    )
                    doc.draw_image(page, handle, layout.x, layout.y, layout.width, layout.height)
                except (ValueError, pikepdf.PdfError) as exc:
                    raise EncodeFailure(f"Could not place {source.name}: {exc}", source.name) from exc
                layouts.append(layout)

                logger.info(
                    "Page %d/%d: %s %dx%d -> %.1fx%.1f pt at (%.1f, %.1f)",
                    idx + 1, total, source.name, handle.width, handle.height,
                    layout.width, layout.height, layout.x, layout.y,
                )
                if progress_cb:
                    progress_cb(idx + 1, total)

            try:
                data = doc.save()
            except (OSError, pikepdf.PdfError) as exc:
                raise SerializationFailure(f"Could not write PDF: {exc}") from exc

        self.layouts = layouts
        logger.info("Created %d-page PDF (%d bytes)", len(layouts), len(data))
        return data


def compose_images(
    images: Sequence[SourceImage],
    settings: ComposerSettings | None = None,
    progress_cb: Callable[[int, int], None] | None = None,
) -> Optional[bytes]:
    """Compose *images* into PDF bytes. Empty input is a no-op returning ``None``."""
    if not images:
        return None
    return PageComposer(settings).compose(images, progress_cb)


def try_compose_images(
    images: Sequence[SourceImage],
    settings: ComposerSettings | None = None,
    progress_cb: Callable[[int, int], None] | None = None,
) -> CompositionResult:
    """Like :func:`compose_images` but reports failure as a tagged result."""
    if not images:
        return CompositionResult(ok=True)

    composer = PageComposer(settings)
    try:
        data = composer.compose(images, progress_cb)
    except CompositionError as exc:
        logger.error("Image composition failed (%s): %s", exc.kind.value, exc)
        return CompositionResult(ok=False, error_kind=exc.kind, message=str(exc))
    return CompositionResult(
        ok=True,
        data=data,
        page_count=len(composer.layouts),
        layouts=composer.layouts,
    )
