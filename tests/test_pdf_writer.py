"""Tests for assembling sheets into a PDF with pikepdf."""

import io

import numpy as np
import pikepdf
import pytest

from pdf_imposer.compression import compress_sheet
from pdf_imposer.errors import EncodingFailure
from pdf_imposer.pdf_writer import PDFWriter


def compressed(color, width_pts, height_pts, sheet_num=1):
    sheet = np.zeros((40, 30, 3), dtype=np.uint8)
    sheet[...] = color
    return compress_sheet(sheet, sheet_num, width_pts, height_pts)


class TestPDFWriter:
    def test_to_bytes_when_sheets_added_then_one_page_each(self):
        writer = PDFWriter()
        writer.add_sheet(compressed((255, 0, 0), 595.28, 841.89, 1))
        writer.add_sheet(compressed((0, 0, 255), 841.89, 595.28, 2))

        data = writer.to_bytes()
        writer.close()

        with pikepdf.open(io.BytesIO(data)) as pdf:
            assert len(pdf.pages) == 2
            first, second = (page.mediabox for page in pdf.pages)
            assert float(first[2]) == pytest.approx(595.28)
            assert float(first[3]) == pytest.approx(841.89)
            assert float(second[2]) == pytest.approx(841.89)
            assert float(second[3]) == pytest.approx(595.28)

    def test_add_sheet_when_color_then_embeds_rgb_dct_image(self):
        writer = PDFWriter()
        writer.add_sheet(compressed((255, 0, 0), 595.28, 841.89))

        with pikepdf.open(io.BytesIO(writer.to_bytes())) as pdf:
            image = pdf.pages[0].Resources.XObject["/Im0"]
            assert image.Filter == pikepdf.Name.DCTDecode
            assert image.ColorSpace == pikepdf.Name.DeviceRGB
            assert int(image.Width) == 30
            assert int(image.Height) == 40

    def test_add_sheet_when_gray_then_embeds_device_gray(self):
        writer = PDFWriter()
        writer.add_sheet(compressed((77, 77, 77), 595.28, 841.89))

        with pikepdf.open(io.BytesIO(writer.to_bytes())) as pdf:
            image = pdf.pages[0].Resources.XObject["/Im0"]
            assert image.ColorSpace == pikepdf.Name.DeviceGray

    def test_to_bytes_when_no_sheets_then_valid_empty_pdf(self):
        writer = PDFWriter()

        with pikepdf.open(io.BytesIO(writer.to_bytes())) as pdf:
            assert len(pdf.pages) == 0

    def test_add_sheet_when_added_then_content_scales_image_to_page(self):
        writer = PDFWriter()
        writer.add_sheet(compressed((0, 255, 0), 841.89, 595.28))

        with pikepdf.open(io.BytesIO(writer.to_bytes())) as pdf:
            content = pdf.pages[0].Contents.read_bytes()
            assert b"841.8900 0 0 595.2800 0.0000 0.0000 cm" in content
            assert b"/Im0 Do" in content

    def test_add_sheet_when_added_then_counts_sheets(self):
        writer = PDFWriter()
        writer.add_sheet(compressed((0, 0, 0), 595.28, 841.89, 1))
        writer.add_sheet(compressed((0, 0, 0), 595.28, 841.89, 2))

        assert writer.sheet_count == 2

    def test_to_bytes_when_save_fails_then_raises_encoding_failure(self):
        class FailingPdf:
            def save(self, *args, **kwargs):
                raise OSError("disk full")

        writer = PDFWriter()
        writer.pdf = FailingPdf()

        with pytest.raises(EncodingFailure, match="disk full"):
            writer.to_bytes()
