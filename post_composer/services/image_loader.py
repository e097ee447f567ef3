"""图片解码服务.

背景图和商品图各占一个槽位。每次请求解码都带上该槽位的请求序号，解码完成
后由控制器比较序号，只接受最新一次请求的结果。

Features:
    - 本地文件和 data URL 两种来源
    - 在线程池中解码，不阻塞事件循环
    - 解码失败以结果形式返回，不抛出到调用方
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from PIL import Image

from post_composer.utils.exceptions import ImageProcessError
from post_composer.utils.image_utils import (
    bytes_to_image,
    data_url_to_bytes,
    ensure_rgba,
    file_to_data_url,
    is_data_url,
)
from post_composer.utils.logger import setup_logger

logger = setup_logger(__name__)


class ImageSlot(str, Enum):
    """图片槽位."""

    BACKGROUND = "background"
    PRODUCT = "product"


@dataclass(frozen=True)
class DecodeRequest:
    """解码请求.

    Attributes:
        slot: 目标槽位
        sequence: 该槽位的请求序号，越大越新
        source: data URL
    """

    slot: ImageSlot
    sequence: int
    source: str


@dataclass(frozen=True)
class DecodeResult:
    """解码结果.

    Attributes:
        slot: 目标槽位
        sequence: 对应请求的序号
        source: 对应请求的 data URL
        image: 解码得到的图片，失败时为 None
        error: 失败原因
    """

    slot: ImageSlot
    sequence: int
    source: str
    image: Optional[Image.Image] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.image is not None


def source_to_data_url(source: str | Path) -> str:
    """把文件路径或 data URL 统一为 data URL.

    Raises:
        ImageNotFoundError: 文件不存在
        UnsupportedImageFormatError: 不支持的格式
    """
    if isinstance(source, str) and is_data_url(source):
        return source
    return file_to_data_url(source)


def decode_data_url(data_url: str) -> Image.Image:
    """同步解码 data URL 为 RGBA 图片.

    Raises:
        ImageDecodeError: 数据无效
    """
    data = data_url_to_bytes(data_url)
    image = bytes_to_image(data, source=data_url[:32])
    return ensure_rgba(image)


class ImageDecoder:
    """异步图片解码器."""

    async def decode(self, request: DecodeRequest) -> DecodeResult:
        """解码一个请求.

        Args:
            request: 解码请求

        Returns:
            解码结果，失败时 image 为 None 并带上 error
        """
        loop = asyncio.get_running_loop()
        try:
            image = await loop.run_in_executor(None, decode_data_url, request.source)
        except ImageProcessError as e:
            logger.warning(f"图片解码失败: slot={request.slot.value}, {e}")
            return DecodeResult(
                slot=request.slot,
                sequence=request.sequence,
                source=request.source,
                error=e.message,
            )

        logger.debug(
            f"图片解码完成: slot={request.slot.value} seq={request.sequence} size={image.size}"
        )
        return DecodeResult(
            slot=request.slot,
            sequence=request.sequence,
            source=request.source,
            image=image,
        )

    async def decode_all(self, requests: list[DecodeRequest]) -> list[DecodeResult]:
        """并发解码多个请求，结果顺序与请求一致."""
        return list(await asyncio.gather(*(self.decode(r) for r in requests)))
