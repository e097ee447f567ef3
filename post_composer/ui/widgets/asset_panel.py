"""素材面板.

选择背景图和商品图、复位商品图位置，以及最近使用的商品图。
"""

from __future__ import annotations

from typing import Optional

from PyQt6.QtCore import QSize, Qt, pyqtSignal
from PyQt6.QtGui import QIcon, QPixmap
from PyQt6.QtWidgets import (
    QFileDialog,
    QGroupBox,
    QLabel,
    QListView,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from post_composer.services.workspace_service import RecentImage
from post_composer.utils.constants import SUPPORTED_IMAGE_FORMATS
from post_composer.utils.exceptions import ImageDecodeError
from post_composer.utils.image_utils import data_url_to_bytes
from post_composer.utils.logger import setup_logger

logger = setup_logger(__name__)

THUMBNAIL_SIZE = 56
IMAGE_FILTER = "图片文件 ({})".format(" ".join(f"*{ext}" for ext in sorted(SUPPORTED_IMAGE_FORMATS)))


class AssetPanel(QGroupBox):
    """素材面板.

    Signals:
        background_selected: 选择了背景图文件 (路径)
        product_selected: 选择了商品图文件 (路径)
        recent_selected: 选择了最近使用的商品图 (data URL, 名称)
        reset_alignment_requested: 商品图复位
    """

    background_selected = pyqtSignal(str)
    product_selected = pyqtSignal(str)
    recent_selected = pyqtSignal(str, str)
    reset_alignment_requested = pyqtSignal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__("素材", parent)
        self._setup_ui()

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)

        self._bg_btn = QPushButton("选择背景图…")
        self._bg_btn.clicked.connect(lambda: self._pick_file(self.background_selected))
        layout.addWidget(self._bg_btn)

        self._product_btn = QPushButton("选择商品图…")
        self._product_btn.clicked.connect(lambda: self._pick_file(self.product_selected))
        layout.addWidget(self._product_btn)

        self._reset_btn = QPushButton("商品图复位")
        self._reset_btn.clicked.connect(self.reset_alignment_requested.emit)
        layout.addWidget(self._reset_btn)

        layout.addWidget(QLabel("最近使用的商品图"))
        self._recent = QListWidget()
        self._recent.setViewMode(QListView.ViewMode.IconMode)
        self._recent.setIconSize(QSize(THUMBNAIL_SIZE, THUMBNAIL_SIZE))
        self._recent.setResizeMode(QListView.ResizeMode.Adjust)
        self._recent.setMovement(QListView.Movement.Static)
        self._recent.setFixedHeight(THUMBNAIL_SIZE * 2 + 24)
        self._recent.itemClicked.connect(self._on_recent_clicked)
        layout.addWidget(self._recent)

    @property
    def recent_count(self) -> int:
        return self._recent.count()

    def _pick_file(self, signal) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "选择图片", "", IMAGE_FILTER)
        if path:
            signal.emit(path)

    def set_recent_images(self, images: list[RecentImage]) -> None:
        """刷新最近使用的商品图（最新的在前）."""
        self._recent.clear()
        for image in images:
            pixmap = QPixmap()
            try:
                pixmap.loadFromData(data_url_to_bytes(image.data_url))
            except ImageDecodeError as e:
                logger.debug(f"缩略图加载失败: {image.name}, {e}")
            item = QListWidgetItem(QIcon(pixmap), "")
            item.setToolTip(image.name or image.content_hash[:8])
            item.setData(Qt.ItemDataRole.UserRole, (image.data_url, image.name))
            self._recent.addItem(item)

    def _on_recent_clicked(self, item: QListWidgetItem) -> None:
        data_url, name = item.data(Qt.ItemDataRole.UserRole)
        self.recent_selected.emit(data_url, name)
