"""图片工具函数模块.

提供图片读取、data URL 编解码、铺满裁剪和虚线绘制等工具函数。
"""

from __future__ import annotations

import base64
import hashlib
import io
import mimetypes
from pathlib import Path
from typing import Sequence, Tuple

from PIL import Image, ImageDraw

from post_composer.utils.constants import MAX_IMAGE_FILE_SIZE, SUPPORTED_IMAGE_FORMATS
from post_composer.utils.exceptions import (
    ImageDecodeError,
    ImageNotFoundError,
    ImageProcessError,
    UnsupportedImageFormatError,
)
from post_composer.utils.logger import setup_logger

logger = setup_logger(__name__)

DATA_URL_PREFIX = "data:"

Color = Tuple[int, int, int, int]


def validate_image_file(path: Path | str) -> None:
    """验证图片文件.

    Args:
        path: 图片文件路径

    Raises:
        ImageNotFoundError: 文件不存在
        UnsupportedImageFormatError: 不支持的格式
        ImageProcessError: 文件过大
    """
    path = Path(path)

    if not path.is_file():
        raise ImageNotFoundError(str(path))

    ext = path.suffix.lower()
    if ext not in SUPPORTED_IMAGE_FORMATS:
        raise UnsupportedImageFormatError(ext or path.name)

    size = path.stat().st_size
    if size > MAX_IMAGE_FILE_SIZE:
        raise ImageProcessError(
            f"图片文件过大 ({size / 1024 / 1024:.1f}MB)，"
            f"最大允许 {MAX_IMAGE_FILE_SIZE / 1024 / 1024:.0f}MB"
        )


def bytes_to_image(data: bytes, source: str = "<bytes>") -> Image.Image:
    """字节数据转图片（完全载入内存）.

    Raises:
        ImageDecodeError: 数据无法解码
    """
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
        return image
    except Exception as e:
        logger.error(f"解码图片失败: {source}, {e}")
        raise ImageDecodeError(source, str(e)) from e


def image_to_bytes(image: Image.Image, format: str = "PNG") -> bytes:
    """图片转字节数据."""
    buffer = io.BytesIO()
    if format.upper() in ("JPEG", "JPG") and image.mode not in ("RGB", "L"):
        image = image.convert("RGB")
    image.save(buffer, format=format.upper())
    return buffer.getvalue()


def guess_mime_type(path: Path | str) -> str:
    """根据扩展名推断 MIME 类型，未知时返回 image/png."""
    mime, _ = mimetypes.guess_type(str(path))
    return mime if mime and mime.startswith("image/") else "image/png"


def bytes_to_data_url(data: bytes, mime_type: str = "image/png") -> str:
    """把图片字节编码为自包含的 data URL."""
    b64 = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{b64}"


def file_to_data_url(path: Path | str) -> str:
    """读取图片文件并编码为 data URL.

    Raises:
        ImageNotFoundError: 文件不存在
        UnsupportedImageFormatError: 不支持的格式
    """
    validate_image_file(path)
    data = Path(path).read_bytes()
    return bytes_to_data_url(data, guess_mime_type(path))


def image_to_data_url(image: Image.Image) -> str:
    """把已解码的图片编码为 PNG data URL."""
    return bytes_to_data_url(image_to_bytes(image, "PNG"), "image/png")


def data_url_to_bytes(data_url: str) -> bytes:
    """解析 data URL（也接受不带前缀的纯 Base64）.

    Raises:
        ImageDecodeError: 内容不是合法的 Base64
    """
    payload = data_url
    if payload.startswith(DATA_URL_PREFIX):
        header, _, payload = payload.partition(",")
        if ";base64" not in header:
            raise ImageDecodeError("data URL", "仅支持 base64 编码")
    try:
        return base64.b64decode(payload, validate=True)
    except (ValueError, TypeError) as e:
        raise ImageDecodeError("data URL", str(e)) from e


def is_data_url(value: str) -> bool:
    """是否为 data URL."""
    return value.startswith(DATA_URL_PREFIX)


def content_hash(data: bytes) -> str:
    """图片内容指纹，用于去重."""
    return hashlib.sha1(data).hexdigest()


def ensure_rgba(image: Image.Image) -> Image.Image:
    """确保图片为 RGBA 模式."""
    if image.mode != "RGBA":
        return image.convert("RGBA")
    return image


def cover_fit(image: Image.Image, target_size: Tuple[int, int]) -> Image.Image:
    """等比缩放铺满目标区域并居中裁剪.

    Args:
        image: 原图片
        target_size: 目标尺寸 (width, height)

    Returns:
        与目标尺寸一致的图片
    """
    target_w, target_h = target_size
    img_w, img_h = image.size
    if img_w <= 0 or img_h <= 0:
        raise ImageProcessError("图片尺寸无效")

    scale = max(target_w / img_w, target_h / img_h)
    # 只缩放可见部分，避免放大后再裁剪
    crop_w = target_w / scale
    crop_h = target_h / scale
    left = (img_w - crop_w) / 2
    top = (img_h - crop_h) / 2
    return image.resize(
        (target_w, target_h),
        Image.Resampling.LANCZOS,
        box=(left, top, left + crop_w, top + crop_h),
    )


def draw_dashed_rectangle(
    draw: ImageDraw.ImageDraw,
    bounds: Sequence[float],
    color: Color,
    width: int = 1,
    dash: Tuple[int, int] = (10, 5),
) -> None:
    """绘制虚线矩形.

    Args:
        draw: ImageDraw 对象
        bounds: (left, top, right, bottom)
        color: 线条颜色
        width: 线宽
        dash: (线段长度, 间隔长度)
    """
    left, top, right, bottom = bounds
    dash_length, gap_length = dash
    step = dash_length + gap_length

    def _dashed(x0: float, y0: float, x1: float, y1: float) -> None:
        length = max(abs(x1 - x0), abs(y1 - y0))
        if length <= 0:
            return
        dx = (x1 - x0) / length
        dy = (y1 - y0) / length
        pos = 0.0
        while pos < length:
            end = min(pos + dash_length, length)
            draw.line(
                [(x0 + dx * pos, y0 + dy * pos), (x0 + dx * end, y0 + dy * end)],
                fill=color,
                width=width,
            )
            pos += step

    _dashed(left, top, right, top)
    _dashed(right, top, right, bottom)
    _dashed(right, bottom, left, bottom)
    _dashed(left, bottom, left, top)


def load_image_file(path: Path | str) -> Image.Image:
    """验证并加载图片文件."""
    validate_image_file(path)
    return bytes_to_image(Path(path).read_bytes(), str(path))
