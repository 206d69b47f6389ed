"""
Tests for pdf_mitra.composer.

Checks the one-page-per-image invariant, page geometry, the empty-input
no-op and whole-batch failure.
"""

import io

import pikepdf
import pytest

from pdf_mitra.composer import PageComposer, compose_images, try_compose_images
from pdf_mitra.config import ComposerSettings
from pdf_mitra.errors import DecodeFailure, FailureKind
from tests.test_builder import draw_ops


def open_pdf(data: bytes) -> pikepdf.Pdf:
    return pikepdf.open(io.BytesIO(data))


class TestPageComposer:
    """Tests for PageComposer.compose()."""

    def test_compose_when_three_images_then_three_pages_in_order(self, make_source):
        sources = [make_source(100, 50), make_source(50, 100), make_source(30, 30, fmt="JPEG")]
        data = PageComposer().compose(sources)

        with open_pdf(data) as pdf:
            assert len(pdf.pages) == 3
            widths = []
            for page in pdf.pages:
                xobj = page.obj["/Resources"]["/XObject"]["/Im0"]
                widths.append((int(xobj["/Width"]), int(xobj["/Height"])))
                assert [float(v) for v in page.obj["/MediaBox"]] == [0, 0, 612, 792]
            assert widths == [(100, 50), (50, 100), (30, 30)]

    def test_compose_when_large_image_then_embedded_downscaled_jpeg(self, make_source):
        data = PageComposer().compose([make_source(3200, 1600)])

        with open_pdf(data) as pdf:
            xobj = pdf.pages[0].obj["/Resources"]["/XObject"]["/Im0"]
            assert (int(xobj["/Width"]), int(xobj["/Height"])) == (1600, 800)
            assert xobj["/Filter"] == pikepdf.Name.DCTDecode
            assert draw_ops(pdf.pages[0]) == [[540.0, 0.0, 0.0, 270.0, 36.0, 261.0]]

    def test_compose_when_tiny_image_then_upscaled_to_content_width(self, make_source):
        composer = PageComposer()
        composer.compose([make_source(10, 10)])

        layout = composer.layouts[0]
        assert layout.width == pytest.approx(540)
        assert layout.height == pytest.approx(540)

    def test_compose_when_png_then_always_jpeg_by_default(self, make_source):
        data = PageComposer().compose([make_source(20, 20, mode="RGBA", color=(0, 0, 0, 0))])

        with open_pdf(data) as pdf:
            xobj = pdf.pages[0].obj["/Resources"]["/XObject"]["/Im0"]
            assert xobj["/Filter"] == pikepdf.Name.DCTDecode
            assert "/SMask" not in xobj

    def test_compose_when_preserve_png_then_lossless_with_mask(self, make_source):
        settings = ComposerSettings(preserve_png=True)
        data = PageComposer(settings).compose([make_source(20, 20, mode="RGBA", color=(0, 0, 0, 0))])

        with open_pdf(data) as pdf:
            xobj = pdf.pages[0].obj["/Resources"]["/XObject"]["/Im0"]
            assert xobj["/Filter"] == pikepdf.Name.FlateDecode
            assert "/SMask" in xobj

    def test_compose_when_custom_margin_then_layout_uses_it(self, make_source):
        composer = PageComposer(ComposerSettings(margin=72))
        composer.compose([make_source(100, 100)])
        layout = composer.layouts[0]
        assert layout.width == pytest.approx(468)
        assert layout.x == pytest.approx(72)

    def test_compose_twice_then_identical_geometry(self, make_source):
        sources = [make_source(640, 480), make_source(1700, 2000, fmt="JPEG")]
        first, second = PageComposer(), PageComposer()
        a = first.compose(sources)
        b = second.compose(sources)

        assert first.layouts == second.layouts
        with open_pdf(a) as pdf_a, open_pdf(b) as pdf_b:
            assert len(pdf_a.pages) == len(pdf_b.pages) == 2
            for page_a, page_b in zip(pdf_a.pages, pdf_b.pages):
                assert draw_ops(page_a) == draw_ops(page_b)

    def test_compose_when_second_image_broken_then_whole_batch_fails(self, make_source, broken_source):
        composer = PageComposer()
        sources = [make_source(10, 10), broken_source, make_source(10, 10)]

        with pytest.raises(DecodeFailure):
            composer.compose(sources)
        assert composer.layouts == []

    def test_compose_reports_progress_per_image(self, make_source):
        calls = []
        PageComposer().compose([make_source(5, 5), make_source(6, 6)], lambda done, total: calls.append((done, total)))
        assert calls == [(1, 2), (2, 2)]

    def test_init_when_margin_swallows_page_then_raises_error(self):
        with pytest.raises(ValueError, match="no content area"):
            PageComposer(ComposerSettings(margin=400))


class TestComposeImages:
    """Tests for the compose_images() / try_compose_images() entry points."""

    def test_compose_images_when_empty_then_none(self):
        assert compose_images([]) is None

    def test_compose_images_returns_pdf_bytes(self, make_source):
        data = compose_images([make_source(10, 20)])
        assert data.startswith(b"%PDF-")

    def test_try_compose_when_empty_then_ok_without_data(self):
        result = try_compose_images([])
        assert result.ok
        assert result.data is None
        assert result.page_count == 0

    def test_try_compose_when_valid_then_ok_with_layouts(self, make_source):
        result = try_compose_images([make_source(1600, 800), make_source(10, 10)])
        assert result.ok
        assert result.page_count == 2
        assert len(result.layouts) == 2
        assert result.error_kind is None

    def test_try_compose_when_decode_fails_then_tagged_failure(self, make_source, broken_source):
        result = try_compose_images([make_source(10, 10), broken_source])
        assert not result.ok
        assert result.data is None
        assert result.error_kind is FailureKind.DECODE
        assert "broken.png" in result.message

    def test_try_compose_when_drawing_fails_then_tagged_encode_failure(self, make_source, monkeypatch):
        def fail_draw(self, *args, **kwargs):
            raise pikepdf.PdfError("content stream rejected")

        monkeypatch.setattr("pdf_mitra.builder.DocumentBuilder.draw_image", fail_draw)
        result = try_compose_images([make_source(10, 10, name="photo.png")])

        assert not result.ok
        assert result.error_kind is FailureKind.ENCODE
        assert "photo.png" in result.message
