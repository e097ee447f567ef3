"""集成测试共享 fixtures."""

import shutil
import tempfile
from pathlib import Path

import pytest
from PIL import Image


@pytest.fixture
def temp_dir():
    """创建临时目录."""
    temp = tempfile.mkdtemp()
    yield Path(temp)
    shutil.rmtree(temp, ignore_errors=True)


@pytest.fixture
def background_path(temp_dir):
    """示例背景图."""
    path = temp_dir / "background.jpg"
    Image.new("RGB", (1600, 900), (20, 40, 160)).save(path, "JPEG")
    return path


@pytest.fixture
def product_path(temp_dir):
    """示例商品图（半透明边缘）."""
    path = temp_dir / "product.png"
    image = Image.new("RGBA", (300, 300), (0, 0, 0, 0))
    image.paste((230, 200, 20, 255), (50, 50, 250, 250))
    image.save(path)
    return path
