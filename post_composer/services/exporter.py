"""导出服务.

以画布完整逻辑分辨率渲染（不含辅助线），保存为 PNG。
文件名带有精确到微秒的时间戳，连续导出不会互相覆盖。
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional

from PIL import Image

from post_composer.models.layout import LayoutModel
from post_composer.services.renderer import render_composition
from post_composer.utils.constants import EXPORT_FILE_PREFIX
from post_composer.utils.exceptions import ImageProcessError
from post_composer.utils.logger import setup_logger

logger = setup_logger(__name__)


def export_filename(timestamp: Optional[datetime] = None) -> str:
    """导出文件名，例如 post_20250101_120000_000000.png."""
    timestamp = timestamp or datetime.now()
    return f"{EXPORT_FILE_PREFIX}_{timestamp.strftime('%Y%m%d_%H%M%S_%f')}.png"


def export_composition(
    layout: LayoutModel,
    directory: Path | str,
    background: Optional[Image.Image] = None,
    product: Optional[Image.Image] = None,
    timestamp: Optional[datetime] = None,
) -> Path:
    """导出画布.

    Args:
        layout: 版面
        directory: 输出目录（不存在时自动创建）
        background: 背景图
        product: 商品图
        timestamp: 文件名时间戳，默认当前时间

    Returns:
        输出文件路径

    Raises:
        ImageProcessError: 写入失败
    """
    image = render_composition(layout, background, product, export_mode=True)
    output = Path(directory) / export_filename(timestamp)

    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        image.save(output, format="PNG")
    except OSError as e:
        logger.error(f"导出失败: {output}, {e}")
        raise ImageProcessError(f"导出失败: {e}") from e

    logger.info(f"已导出: {output} ({image.width}x{image.height})")
    return output
