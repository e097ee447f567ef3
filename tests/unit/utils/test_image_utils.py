"""图片工具单元测试."""

import pytest
from PIL import Image, ImageDraw

from post_composer.utils.exceptions import (
    ImageDecodeError,
    ImageNotFoundError,
    UnsupportedImageFormatError,
)
from post_composer.utils.image_utils import (
    bytes_to_data_url,
    bytes_to_image,
    content_hash,
    cover_fit,
    data_url_to_bytes,
    draw_dashed_rectangle,
    file_to_data_url,
    image_to_data_url,
    is_data_url,
    validate_image_file,
)


class TestDataUrl:
    """data URL 测试类."""

    def test_bytes_round_trip(self, red_png_bytes):
        data_url = bytes_to_data_url(red_png_bytes)
        assert is_data_url(data_url)
        assert data_url_to_bytes(data_url) == red_png_bytes

    def test_plain_base64(self):
        assert data_url_to_bytes("aGVsbG8=") == b"hello"

    def test_not_base64_header(self):
        with pytest.raises(ImageDecodeError):
            data_url_to_bytes("data:text/plain,hello")

    def test_invalid_payload(self):
        with pytest.raises(ImageDecodeError):
            data_url_to_bytes("data:image/png;base64,@@@")

    def test_image_to_data_url(self):
        data_url = image_to_data_url(Image.new("RGB", (3, 3)))
        assert bytes_to_image(data_url_to_bytes(data_url)).size == (3, 3)

    def test_content_hash(self):
        assert content_hash(b"a") == content_hash(b"a")
        assert content_hash(b"a") != content_hash(b"b")


class TestFiles:
    """图片文件测试类."""

    def test_missing(self, tmp_path):
        with pytest.raises(ImageNotFoundError):
            validate_image_file(tmp_path / "x.png")

    def test_unsupported(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("x")
        with pytest.raises(UnsupportedImageFormatError):
            validate_image_file(path)

    def test_jpeg_mime(self, tmp_path):
        path = tmp_path / "photo.jpg"
        Image.new("RGB", (4, 4)).save(path)
        assert file_to_data_url(path).startswith("data:image/jpeg;base64,")

    def test_corrupt_bytes(self):
        with pytest.raises(ImageDecodeError):
            bytes_to_image(b"not an image")


class TestCoverFit:
    """cover_fit 测试类."""

    def test_wide_image_cropped(self):
        """测试宽图按高度缩放并裁掉两侧."""
        image = Image.new("RGB", (400, 100), (255, 0, 0))
        ImageDraw.Draw(image).rectangle([0, 0, 49, 99], fill=(0, 0, 255))

        fitted = cover_fit(image, (100, 100))

        assert fitted.size == (100, 100)
        assert fitted.getpixel((0, 50)) == (255, 0, 0)

    def test_upscale(self):
        fitted = cover_fit(Image.new("RGB", (10, 20)), (100, 100))
        assert fitted.size == (100, 100)


class TestDashedRectangle:
    """虚线矩形测试类."""

    def test_gaps(self):
        image = Image.new("RGBA", (100, 100), (0, 0, 0, 0))
        draw_dashed_rectangle(ImageDraw.Draw(image), (10, 10, 90, 90), (255, 0, 0, 255), dash=(10, 5))

        assert image.getpixel((15, 10))[3] == 255
        assert image.getpixel((22, 10))[3] == 0
