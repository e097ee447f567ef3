"""Pytest 配置和共享 fixtures."""

from __future__ import annotations

import io
import os
from pathlib import Path

import pytest
from PIL import Image

# 无显示环境下运行 Qt 测试
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from post_composer.core.geometry import RenderedBox
from post_composer.models.layout import Frame, LayoutModel, TextLayer
from post_composer.utils.image_utils import bytes_to_data_url


@pytest.fixture
def layout() -> LayoutModel:
    """默认版面（商品框 200,300,680,500，带一个标题图层）."""
    return LayoutModel.default()


@pytest.fixture
def bare_layout() -> LayoutModel:
    """没有文字图层的版面."""
    return LayoutModel(frame=Frame(x=200, y=300, width=680, height=500))


@pytest.fixture
def identity_box() -> RenderedBox:
    """显示尺寸与 1080×1080 画布一致，显示坐标即画布坐标."""
    return RenderedBox(left=0, top=0, width=1080, height=1080)


@pytest.fixture
def fixed_hit_box():
    """与字体无关的命中框：锚点左右各 100，基线上方一个字号到下方 10."""
    from post_composer.core.geometry import Rect

    def _hit_box(layer: TextLayer) -> Rect:
        return Rect(layer.x - 100, layer.y - layer.font_size, layer.x + 100, layer.y + 10)

    return _hit_box


def _png_bytes(size: tuple[int, int], color) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGBA", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def red_png_bytes() -> bytes:
    return _png_bytes((40, 20), (255, 0, 0, 255))


@pytest.fixture
def red_data_url(red_png_bytes: bytes) -> str:
    return bytes_to_data_url(red_png_bytes)


@pytest.fixture
def blue_data_url() -> str:
    return bytes_to_data_url(_png_bytes((10, 10), (0, 0, 255, 255)))


@pytest.fixture
def sample_image_path(tmp_path: Path) -> Path:
    """示例商品图文件."""
    path = tmp_path / "product.png"
    Image.new("RGBA", (200, 100), (30, 160, 90, 255)).save(path)
    return path
