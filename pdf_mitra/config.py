"""
Composer settings.

The image-to-PDF policy (downscale cap, JPEG quality, page margin) lives
here as named fields with documented defaults. Values can be overridden
through environment variables, optionally loaded from a ``.env`` file:

    PDF_MITRA_MAX_IMAGE_WIDTH    longest allowed raster width   (1600 px)
    PDF_MITRA_MAX_IMAGE_HEIGHT   longest allowed raster height  (1600 px)
    PDF_MITRA_JPEG_QUALITY       JPEG quality, 0 < q <= 1       (0.8)
    PDF_MITRA_PAGE_MARGIN        margin on every side, points   (36 = 0.5 in)
    PDF_MITRA_PRESERVE_PNG       keep PNG input lossless        (false)
    PDF_MITRA_LOG_LEVEL          logging level for the web app  (INFO)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

ENV_PREFIX = "PDF_MITRA_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class ComposerSettings:
    """Policy used when turning images into PDF pages."""

    max_width: int = 1600
    max_height: int = 1600
    jpeg_quality: float = 0.8
    margin: float = 36.0          # 0.5 inch at 72 pt/inch
    preserve_png: bool = False    # False: every input is re-encoded as JPEG

    def __post_init__(self):
        if self.max_width < 1 or self.max_height < 1:
            raise ValueError("max_width and max_height must be >= 1")
        if not 0 < self.jpeg_quality <= 1:
            raise ValueError("jpeg_quality must be in (0, 1]")
        if self.margin < 0:
            raise ValueError("margin must be >= 0")

    @property
    def pillow_quality(self) -> int:
        """JPEG quality on Pillow's 1-100 scale."""
        return max(1, min(100, round(self.jpeg_quality * 100)))


def _parse_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from None


def _parse_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be a number, got {raw!r}") from None


def _parse_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(ENV_PREFIX + name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{ENV_PREFIX}{name} must be true/false, got {raw!r}")


def load_settings(env: Optional[Mapping[str, str]] = None) -> ComposerSettings:
    """Build settings from *env* (defaults to ``os.environ`` after ``load_dotenv``)."""
    if env is None:
        load_dotenv()
        env = os.environ

    defaults = ComposerSettings()
    settings = ComposerSettings(
        max_width=_parse_int(env, "MAX_IMAGE_WIDTH", defaults.max_width),
        max_height=_parse_int(env, "MAX_IMAGE_HEIGHT", defaults.max_height),
        jpeg_quality=_parse_float(env, "JPEG_QUALITY", defaults.jpeg_quality),
        margin=_parse_float(env, "PAGE_MARGIN", defaults.margin),
        preserve_png=_parse_bool(env, "PRESERVE_PNG", defaults.preserve_png),
    )
    if settings != defaults:
        logger.info("Composer settings overridden from environment: %s", settings)
    return settings


def log_level(env: Optional[Mapping[str, str]] = None) -> int:
    """Logging level named by ``PDF_MITRA_LOG_LEVEL`` (INFO when unset or unknown)."""
    env = os.environ if env is None else env
    name = (env.get(ENV_PREFIX + "LOG_LEVEL") or "INFO").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO
