"""Tests for the PyMuPDF raster adapter."""

import pytest

from conftest import A4_PORTRAIT, RED, WHITE
from pdf_imposer.errors import DocumentOpenFailure, PageOutOfRange
from pdf_imposer.rasterize import open_document, rasterize_page


class TestOpenDocument:
    def test_open_when_valid_pdf_then_reports_page_count(self, make_pdf):
        data = make_pdf(A4_PORTRAIT, A4_PORTRAIT)

        with open_document(data) as doc:
            assert doc.page_count == 2

    @pytest.mark.parametrize("data", [b"", b"not a pdf at all"])
    def test_open_when_unparseable_then_raises_document_open_failure(self, data):
        with pytest.raises(DocumentOpenFailure, match="input.pdf"):
            with open_document(data, "input.pdf"):
                pass


class TestRasterizePage:
    def test_rasterize_when_scaled_then_size_follows_scale(self, make_pdf):
        data = make_pdf((200, 100, WHITE))

        with open_document(data) as doc:
            image = rasterize_page(doc, 1, 2.0)

        assert image.shape == (200, 400, 3)
        assert image.dtype.name == "uint8"

    def test_rasterize_when_page_filled_then_colors_preserved(self, make_pdf):
        data = make_pdf((100, 100, WHITE), (100, 100, RED))

        with open_document(data) as doc:
            image = rasterize_page(doc, 2, 1.0)

        assert tuple(image[50, 50]) == (255, 0, 0)

    @pytest.mark.parametrize("page_number", [0, 3, -1])
    def test_rasterize_when_page_out_of_range_then_raises(self, make_pdf, page_number):
        data = make_pdf(A4_PORTRAIT, A4_PORTRAIT)

        with open_document(data) as doc:
            with pytest.raises(PageOutOfRange):
                rasterize_page(doc, page_number, 1.0)
