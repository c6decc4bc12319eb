"""Tests for JPEG sheet compression."""

import io

import numpy as np
import pytest
from PIL import Image

from pdf_imposer.compression import JPEG_QUALITY, compress_jpeg, compress_sheet, is_grayscale_image
from pdf_imposer.errors import EncodingFailure


def sheet_of(color, width=64, height=48):
    sheet = np.zeros((height, width, 3), dtype=np.uint8)
    sheet[...] = color
    return sheet


class TestIsGrayscaleImage:
    def test_is_grayscale_when_channels_equal_then_true(self):
        assert is_grayscale_image(sheet_of((90, 90, 90))) is True

    def test_is_grayscale_when_slightly_tinted_then_false(self):
        assert is_grayscale_image(sheet_of((90, 90, 91))) is False

    def test_is_grayscale_when_single_channel_then_true(self):
        assert is_grayscale_image(np.zeros((4, 4), dtype=np.uint8)) is True


class TestCompressSheet:
    def test_compress_when_color_sheet_then_rgb_jpeg(self):
        result = compress_sheet(sheet_of((200, 10, 10)), 1, 595.28, 841.89)

        assert result.image_data[:2] == b"\xff\xd8"
        assert result.is_color is True
        assert (result.width, result.height) == (64, 48)
        assert Image.open(io.BytesIO(result.image_data)).mode == "RGB"

    def test_compress_when_gray_sheet_then_single_channel_jpeg(self):
        result = compress_sheet(sheet_of((128, 128, 128)), 2, 841.89, 595.28)

        assert result.is_color is False
        assert Image.open(io.BytesIO(result.image_data)).mode == "L"

    def test_compress_when_done_then_keeps_page_size_and_number(self):
        result = compress_sheet(sheet_of((255, 255, 255)), 3, 841.89, 595.28)

        assert result.sheet_num == 3
        assert (result.page_width_pts, result.page_height_pts) == (841.89, 595.28)
        assert result.total_size == len(result.image_data)

    def test_compress_when_decoded_then_colors_close_to_source(self):
        result = compress_sheet(sheet_of((200, 40, 90)), 1, 595.28, 841.89)

        decoded = np.asarray(Image.open(io.BytesIO(result.image_data)))

        assert JPEG_QUALITY == 95
        assert np.abs(decoded.astype(int) - (200, 40, 90)).max() <= 6

    def test_compress_when_encoder_fails_then_raises_encoding_failure(self, monkeypatch):
        def failing_save(self, *args, **kwargs):
            raise OSError("encoder error -2")

        monkeypatch.setattr(Image.Image, "save", failing_save)

        with pytest.raises(EncodingFailure, match="encoder error"):
            compress_jpeg(sheet_of((10, 20, 30)))
