"""Unit tests for the image output stage."""

import io

import numpy as np
import pytest
from PIL import Image as PILImage

from pathtracer.preview.export import (
    gamma_correct,
    image_to_uint8,
    quantize,
    save_image,
    save_png,
    write_ppm,
)


class TestGammaAndQuantize:
    """Tests for gamma correction and quantization."""

    def test_gamma_correct_is_square_root(self):
        """Test gamma 2 correction."""
        result = gamma_correct(np.array([0.0, 0.25, 1.0, 4.0]))
        np.testing.assert_array_equal(result, [0.0, 0.5, 1.0, 2.0])

    def test_gamma_correct_clamps_negative(self):
        """Test negative values become 0 instead of NaN."""
        assert gamma_correct(np.array([-0.5]))[0] == 0.0

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(-1.0, 0), (0.0, 0), (0.5, 128), (0.998, 255), (0.999, 255), (1.0, 255), (7.5, 255)],
    )
    def test_quantize(self, value, expected):
        """Test floor(256 * clamp(v, 0, 0.999))."""
        assert quantize(np.array([value]))[0] == expected

    def test_quantize_dtype(self):
        """Test quantized pixels are uint8."""
        assert quantize(np.zeros((2, 2, 3))).dtype == np.uint8

    def test_image_to_uint8(self):
        """Test linear 0.25 maps to 128 after gamma and quantization."""
        image = np.full((1, 1, 3), 0.25)
        assert image_to_uint8(image).tolist() == [[[128, 128, 128]]]

    def test_image_to_uint8_rejects_bad_shape(self):
        """Test that non-RGB arrays raise ValueError."""
        with pytest.raises(ValueError):
            image_to_uint8(np.zeros((4, 4)))


class TestWriters:
    """Tests for PPM and PNG output."""

    def test_write_ppm_stream(self):
        """Test the P3 header and one pixel triple per line, top row first."""
        image = np.array(
            [
                [[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]],
                [[0.0, 0.0, 1.0], [0.25, 0.25, 0.25]],
            ]
        )
        out = io.StringIO()
        write_ppm(image, out)
        assert out.getvalue().splitlines() == [
            "P3",
            "2 2",
            "255",
            "255 0 0",
            "0 255 0",
            "0 0 255",
            "128 128 128",
        ]

    def test_write_ppm_file(self, tmp_path):
        """Test writing a PPM to a path."""
        path = tmp_path / "out.ppm"
        write_ppm(np.zeros((3, 4, 3)), path)
        lines = path.read_text().splitlines()
        assert lines[:3] == ["P3", "4 3", "255"]
        assert len(lines) == 3 + 12

    def test_save_png(self, tmp_path):
        """Test the PNG holds the quantized pixels."""
        path = tmp_path / "out.png"
        image = np.zeros((2, 3, 3))
        image[0, 0] = (1.0, 0.25, 0.0)
        save_png(image, path)

        with PILImage.open(path) as png:
            assert png.size == (3, 2)
            assert png.mode == "RGB"
            assert png.getpixel((0, 0)) == (255, 128, 0)
            assert png.getpixel((2, 1)) == (0, 0, 0)

    def test_save_image_dispatches_on_suffix(self, tmp_path):
        """Test save_image picks the writer from the suffix."""
        image = np.zeros((2, 2, 3))
        save_image(image, tmp_path / "a.ppm")
        save_image(image, tmp_path / "b.PNG")
        assert (tmp_path / "a.ppm").read_text().startswith("P3")
        assert (tmp_path / "b.PNG").exists()
        with pytest.raises(ValueError):
            save_image(image, tmp_path / "c.jpg")
