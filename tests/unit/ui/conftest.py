"""UI 测试共享 fixtures."""

import pytest
from PyQt6.QtWidgets import QApplication


@pytest.fixture(scope="module")
def app():
    """创建 QApplication 实例."""
    instance = QApplication.instance()
    if instance is None:
        instance = QApplication([])
    yield instance
