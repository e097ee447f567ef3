"""文字测量.

渲染器和命中检测共用这里的字体解析与测量函数，两边对同一图层得到的
文字宽度和命中框始终一致。

Features:
    - 按字体名在系统字体目录中查找（含粗体变体）
    - 找不到时回退到 Pillow 内置的可缩放字体
    - 按 (字体, 字号, 粗细) 缓存
"""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Optional, Union

from PIL import ImageFont

from post_composer.core.geometry import Rect
from post_composer.models.layout import TextLayer
from post_composer.utils.constants import TEXT_HIT_MARGIN_BELOW, TEXT_HIT_MARGIN_X
from post_composer.utils.logger import setup_logger

logger = setup_logger(__name__)

AnyFont = Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]

# 字体搜索路径
FONT_SEARCH_PATHS = [
    "/System/Library/Fonts/",
    "/System/Library/Fonts/Supplemental/",
    "/Library/Fonts/",
    "~/Library/Fonts/",
    "C:/Windows/Fonts/",
    "~/.fonts/",
    "~/.local/share/fonts/",
    "/usr/share/fonts/",
    "/usr/share/fonts/truetype/",
    "/usr/share/fonts/truetype/msttcorefonts/",
]

# 常见字体名到文件名的映射（Windows 文件名与字体名不一致）
FONT_FILE_ALIASES = {
    "arial": ["arial.ttf", "Arial.ttf"],
    "arial black": ["ariblk.ttf", "Arial Black.ttf", "Arial_Black.ttf"],
    "impact": ["impact.ttf", "Impact.ttf"],
    "verdana": ["verdana.ttf", "Verdana.ttf"],
    "tahoma": ["tahoma.ttf", "Tahoma.ttf"],
    "georgia": ["georgia.ttf", "Georgia.ttf"],
    "courier new": ["cour.ttf", "Courier New.ttf", "Courier_New.ttf"],
}

FONT_FILE_ALIASES_BOLD = {
    "arial": ["arialbd.ttf", "Arial Bold.ttf"],
    "verdana": ["verdanab.ttf", "Verdana Bold.ttf"],
    "tahoma": ["tahomabd.ttf", "Tahoma Bold.ttf"],
    "georgia": ["georgiab.ttf", "Georgia Bold.ttf"],
    "courier new": ["courbd.ttf", "Courier New Bold.ttf"],
}


def font_pixel_size(font_size: float) -> int:
    """逻辑字号换算为整数像素字号（Pillow 需要整数）."""
    return max(1, int(round(font_size)))


def _candidate_files(font_family: str, bold: bool) -> list[str]:
    """粗体只返回粗体文件名，常规体返回常规文件名."""
    key = font_family.strip().lower()
    compact = font_family.replace(" ", "")

    if bold:
        return FONT_FILE_ALIASES_BOLD.get(key, []) + [
            f"{font_family} Bold.ttf",
            f"{font_family}-Bold.ttf",
            f"{compact}-Bold.ttf",
            f"{compact}-Bold.otf",
        ]

    candidates = list(FONT_FILE_ALIASES.get(key, []))
    candidates.extend([
        font_family,
        f"{font_family}.ttf",
        f"{font_family}.otf",
        f"{font_family}.ttc",
        f"{compact}.ttf",
        f"{compact}-Regular.ttf",
        f"{compact}-Regular.otf",
    ])
    return candidates


def _search_font_file(font_family: str, bold: bool) -> Optional[str]:
    """在字体目录中查找字体文件路径."""
    candidates = _candidate_files(font_family, bold)
    for search_path in FONT_SEARCH_PATHS:
        directory = os.path.expanduser(search_path)
        if not os.path.isdir(directory):
            continue
        for name in candidates:
            path = os.path.join(directory, name)
            if os.path.isfile(path):
                return path
    return None


def _load_font_file(path: Optional[str], size: int) -> Optional[ImageFont.FreeTypeFont]:
    if not path:
        return None
    try:
        return ImageFont.truetype(path, size)
    except OSError as e:
        logger.debug(f"字体文件无法加载: {path}, {e}")
        return None


def _load_default(size: int) -> AnyFont:
    try:
        return ImageFont.load_default(size=size)
    except (TypeError, OSError):
        # FreeType 不可用时只有固定尺寸的位图字体
        return ImageFont.load_default()


@lru_cache(maxsize=128)
def resolve_font(font_family: str, size: int, bold: bool = False) -> AnyFont:
    """解析字体.

    Args:
        font_family: 字体名称
        size: 像素字号
        bold: 是否粗体

    Returns:
        Pillow 字体对象，找不到时返回内置默认字体
    """
    if font_family:
        # 粗体优先使用粗体文件，找不到时退回常规字重
        if bold:
            font = _load_font_file(_search_font_file(font_family, bold=True), size)
            if font is not None:
                return font

        try:
            return ImageFont.truetype(font_family, size)
        except OSError:
            pass

        font = _load_font_file(_search_font_file(font_family, bold=False), size)
        if font is not None:
            return font

    logger.debug(f"字体 '{font_family}' 未找到，使用默认字体")
    return _load_default(size)


def font_for_layer(layer: TextLayer) -> AnyFont:
    """图层当前字体."""
    return resolve_font(layer.font_family, font_pixel_size(layer.font_size), layer.bold)


def measure_text_width(layer: TextLayer) -> float:
    """测量图层渲染文本（大写）的宽度."""
    text = layer.display_text
    if not text:
        return 0.0
    return float(font_for_layer(layer).getlength(text))


def text_hit_box(layer: TextLayer) -> Rect:
    """图层的命中框，也是选中时绘制的虚线框.

    水平方向以锚点为中心、宽度为文本宽度加两侧边距；竖直方向从基线上方
    一个字号到基线下方固定边距。
    """
    width = measure_text_width(layer)
    return Rect(
        left=layer.x - width / 2 - TEXT_HIT_MARGIN_X,
        top=layer.y - layer.font_size,
        right=layer.x + width / 2 + TEXT_HIT_MARGIN_X,
        bottom=layer.y + TEXT_HIT_MARGIN_BELOW,
    )


def clear_font_cache() -> None:
    """清空字体缓存（字体目录变化后调用）."""
    resolve_font.cache_clear()
