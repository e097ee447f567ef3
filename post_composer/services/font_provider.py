"""字体列表.

字体来源有两种实现，启动时选定一次：

- SystemFontProvider: 通过 Qt 字体数据库读取系统字体
- StaticFontListProvider: 内置的常用字体列表

调用方只依赖 ``list_fonts()``。
"""

from __future__ import annotations

from typing import Iterable, Optional, Protocol, runtime_checkable

from post_composer.utils.constants import STANDARD_FONTS
from post_composer.utils.error_messages import Notice
from post_composer.utils.exceptions import FontEnumerationError
from post_composer.utils.logger import setup_logger

logger = setup_logger(__name__)


@runtime_checkable
class FontProvider(Protocol):
    """字体来源."""

    def list_fonts(self) -> list[str]:
        ...


class StaticFontListProvider:
    """内置字体列表."""

    def __init__(self, fonts: Iterable[str] = STANDARD_FONTS) -> None:
        self._fonts = list(fonts)

    def list_fonts(self) -> list[str]:
        return list(self._fonts)


class SystemFontProvider:
    """系统字体（需要已创建 QGuiApplication）."""

    @staticmethod
    def is_available() -> bool:
        try:
            from PyQt6.QtGui import QGuiApplication
        except ImportError:
            return False
        return QGuiApplication.instance() is not None

    def list_fonts(self) -> list[str]:
        """读取系统字体族.

        Raises:
            FontEnumerationError: 当前环境无法读取系统字体
        """
        if not self.is_available():
            raise FontEnumerationError()

        from PyQt6.QtGui import QFontDatabase

        families = [f for f in QFontDatabase.families() if not QFontDatabase.isPrivateFamily(f)]
        if not families:
            raise FontEnumerationError("未读取到任何系统字体")
        logger.debug(f"读取到 {len(families)} 个系统字体")
        return families


def select_font_provider() -> tuple[FontProvider, Optional[Notice]]:
    """选择字体来源.

    Returns:
        (字体来源, 降级时的提示)
    """
    if SystemFontProvider.is_available():
        return SystemFontProvider(), None

    logger.warning("系统字体不可用，使用内置字体列表")
    return StaticFontListProvider(), Notice.warning(
        "无法读取系统字体", "已使用内置的常用字体列表"
    )


class FontCatalog:
    """可选字体目录.

    常用字体在前，其后是发现的系统字体（去重并排序）。
    """

    def __init__(self, standard: Iterable[str] = STANDARD_FONTS) -> None:
        self._standard = list(dict.fromkeys(standard))
        self._system: list[str] = []

    @property
    def fonts(self) -> list[str]:
        return self._standard + self._system

    def scan(self, provider: FontProvider) -> tuple[list[str], Notice]:
        """从字体来源扫描并合并.

        Returns:
            (合并后的字体列表, 提示)
        """
        try:
            discovered = provider.list_fonts()
        except FontEnumerationError as e:
            logger.warning(f"扫描系统字体失败: {e}")
            return self.fonts, Notice.warning("无法读取系统字体", e.message)

        known = {name.lower() for name in self._standard}
        extra = {name for name in discovered if name and name.lower() not in known}
        self._system = sorted(extra, key=str.lower)
        logger.info(f"字体扫描完成: 新增 {len(self._system)} 个系统字体")
        return self.fonts, Notice.success("字体扫描完成", f"发现 {len(self._system)} 个系统字体")
