"""Exception types raised by the PDF Mitra engine."""

from __future__ import annotations

from enum import Enum


class FailureKind(str, Enum):
    """Which stage of image composition failed."""

    DECODE = "decode"
    ENCODE = "encode"
    SERIALIZE = "serialize"


class PdfMitraError(Exception):
    pass


class CompositionError(PdfMitraError):
    """Image-to-PDF composition failed; the whole batch is discarded."""

    kind: FailureKind = FailureKind.ENCODE

    def __init__(self, message: str, source_name: str | None = None):
        super().__init__(message)
        self.source_name = source_name


class DecodeFailure(CompositionError):
    kind = FailureKind.DECODE


class EncodeFailure(CompositionError):
    kind = FailureKind.ENCODE


class SerializationFailure(CompositionError):
    kind = FailureKind.SERIALIZE


class DocumentError(PdfMitraError):
    """An input PDF could not be read."""
