"""Fit-to-page geometry for image pages."""

from __future__ import annotations

import math
from dataclasses import dataclass

# US Letter in PDF points, the default page of a new document.
DEFAULT_PAGE_SIZE = (612.0, 792.0)


@dataclass(frozen=True)
class PageLayout:
    """Where one image lands on its page (PDF points, origin bottom-left)."""

    page_width: float
    page_height: float
    margin: float
    x: float
    y: float
    width: float
    height: float

    @property
    def content_width(self) -> float:
        return self.page_width - 2 * self.margin

    @property
    def content_height(self) -> float:
        return self.page_height - 2 * self.margin


def downscale_ratio(width: int, height: int, max_width: int, max_height: int) -> float:
    """Uniform shrink factor that fits ``width`` x ``height`` into the cap. Never above 1."""
    return min(max_width / width, max_height / height, 1.0)


def downscaled_size(width: int, height: int, max_width: int, max_height: int) -> tuple[int, int]:
    """Capped pixel size. Halves round up, and each side is at least 1 px."""
    ratio = downscale_ratio(width, height, max_width, max_height)
    return max(1, math.floor(width * ratio + 0.5)), max(1, math.floor(height * ratio + 0.5))


def compute_page_layout(
    image_width: float,
    image_height: float,
    page_width: float = DEFAULT_PAGE_SIZE[0],
    page_height: float = DEFAULT_PAGE_SIZE[1],
    margin: float = 36.0,
) -> PageLayout:
    """
    Scale an image to fill the margin-bounded content area and centre it.

    Unlike :func:`downscale_ratio` the fit scale is not capped at 1, so small
    images are enlarged. The draw size is clamped to at least 1 pt and to at
    most the content area, which also absorbs floating-point overshoot.
    """
    if image_width <= 0 or image_height <= 0:
        raise ValueError(f"Image size must be positive, got {image_width}x{image_height}")

    max_w = page_width - 2 * margin
    max_h = page_height - 2 * margin
    if max_w <= 0 or max_h <= 0:
        raise ValueError(f"Margin {margin} leaves no content area on a {page_width}x{page_height} page")

    scale = min(max_w / image_width, max_h / image_height)
    draw_w = max(1.0, min(max_w, image_width * scale))
    draw_h = max(1.0, min(max_h, image_height * scale))

    return PageLayout(
        page_width=page_width,
        page_height=page_height,
        margin=margin,
        x=(page_width - draw_w) / 2,
        y=(page_height - draw_h) / 2,
        width=draw_w,
        height=draw_h,
    )
