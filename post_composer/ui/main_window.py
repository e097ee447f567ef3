"""编辑器主窗口.

布局结构:
    ┌──────────────┬──────────────────────────────┬──────────────┐
    │  素材面板     │  工具栏（缩放 / 加文字 / 尺寸） │  图层属性     │
    │  模板面板     │           画布                │              │
    │              │  导出 / 保存状态               │              │
    └──────────────┴──────────────────────────────┴──────────────┘
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QCloseEvent, QResizeEvent
from PyQt6.QtWidgets import (
    QComboBox,
    QFileDialog,
    QFrame,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QSlider,
    QVBoxLayout,
    QWidget,
)

from post_composer.core.background_worker import BackgroundRunner
from post_composer.core.config_manager import ConfigManager
from post_composer.core.editor_controller import EditorController
from post_composer.models.layout import AspectPreset
from post_composer.services.exporter import export_composition
from post_composer.services.font_provider import FontCatalog, FontProvider
from post_composer.services.image_loader import DecodeResult, ImageSlot, source_to_data_url
from post_composer.services.template_codec import from_template
from post_composer.services.template_library import SyncOutcome, TemplateLibrary
from post_composer.services.workspace_service import RecentImageGallery, WorkspaceRepository
from post_composer.ui.widgets.asset_panel import AssetPanel
from post_composer.ui.widgets.composition_canvas import CompositionCanvas
from post_composer.ui.widgets.layer_property_panel import LayerPropertyPanel
from post_composer.ui.widgets.template_panel import TemplatePanel
from post_composer.ui.widgets.toast_notification import ToastManager
from post_composer.utils.constants import (
    APP_NAME,
    DEFAULT_EXPORT_DIR,
    MAX_PRODUCT_SCALE,
    MIN_PRODUCT_SCALE,
)
from post_composer.utils.error_messages import ErrorSeverity, Notice, notice_from_exception
from post_composer.utils.exceptions import (
    AppException,
    DatabaseError,
    ImageProcessError,
    InvalidInputError,
)
from post_composer.utils.logger import setup_logger

logger = setup_logger(__name__)

# 缩放滑块以百分比表示
SCALE_SLIDER_FACTOR = 100

STYLESHEET = """
QMainWindow, QWidget { background-color: #0a0a0a; color: #e0e0e0; }
QGroupBox {
    background-color: #141414; border: 1px solid #222; border-radius: 10px;
    margin-top: 14px; padding: 10px; font-weight: bold;
}
QGroupBox::title { subcontrol-origin: margin; left: 12px; color: #888; }
QPushButton {
    background-color: #1f1f1f; border: 1px solid #333; border-radius: 6px; padding: 5px 10px;
}
QPushButton:hover { background-color: #2a2a2a; }
QPushButton:disabled { color: #555; }
QPushButton#primary { background-color: #d32f2f; border-color: #d32f2f; color: white; }
QLineEdit, QComboBox, QListWidget {
    background-color: #1a1a1a; border: 1px solid #333; border-radius: 6px; padding: 4px;
}
"""


@dataclass
class EditorServices:
    """主窗口依赖的服务."""

    config: ConfigManager
    library: TemplateLibrary
    workspace: WorkspaceRepository
    gallery: RecentImageGallery
    fonts: FontCatalog
    font_provider: FontProvider


class EditorWindow(QMainWindow):
    """编辑器主窗口."""

    def __init__(
        self,
        services: EditorServices,
        controller: Optional[EditorController] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self._services = services
        self._controller = controller or EditorController()
        self._runner = BackgroundRunner(self)
        self._toast_manager = ToastManager(self)

        self._setup_window()
        self._setup_central_widget()
        self._connect_signals()

        self._sync_from_controller()
        self._property_panel.set_fonts(services.fonts.fonts)
        self._asset_panel.set_recent_images(services.gallery.recent())

    # ========================
    # 属性
    # ========================

    @property
    def controller(self) -> EditorController:
        return self._controller

    @property
    def canvas(self) -> CompositionCanvas:
        return self._canvas

    @property
    def runner(self) -> BackgroundRunner:
        return self._runner

    @property
    def toast_manager(self) -> ToastManager:
        return self._toast_manager

    # ========================
    # 界面
    # ========================

    def _setup_window(self) -> None:
        self.setWindowTitle(APP_NAME)
        self.setMinimumSize(1100, 720)
        self.resize(1440, 900)
        self.setStyleSheet(STYLESHEET)

    def _setup_central_widget(self) -> None:
        central = QWidget()
        layout = QHBoxLayout(central)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(12)

        layout.addWidget(self._create_left_panel())
        layout.addWidget(self._create_center_panel(), 1)
        layout.addWidget(self._create_right_panel())

        self.setCentralWidget(central)

    def _create_left_panel(self) -> QFrame:
        panel = QFrame()
        panel.setFixedWidth(300)
        layout = QVBoxLayout(panel)
        layout.setContentsMargins(0, 0, 0, 0)

        self._asset_panel = AssetPanel()
        layout.addWidget(self._asset_panel)
        self._template_panel = TemplatePanel()
        layout.addWidget(self._template_panel, 1)
        return panel

    def _create_center_panel(self) -> QFrame:
        panel = QFrame()
        layout = QVBoxLayout(panel)
        layout.setContentsMargins(0, 0, 0, 0)

        toolbar = QHBoxLayout()
        toolbar.addWidget(QLabel("缩放"))
        self._scale_slider = QSlider(Qt.Orientation.Horizontal)
        self._scale_slider.setRange(
            int(MIN_PRODUCT_SCALE * SCALE_SLIDER_FACTOR),
            int(MAX_PRODUCT_SCALE * SCALE_SLIDER_FACTOR),
        )
        self._scale_slider.setFixedWidth(220)
        toolbar.addWidget(self._scale_slider)
        self._scale_label = QLabel()
        self._scale_label.setFixedWidth(48)
        toolbar.addWidget(self._scale_label)

        toolbar.addStretch()
        self._add_text_btn = QPushButton("添加文字")
        toolbar.addWidget(self._add_text_btn)

        self._aspect_combo = QComboBox()
        for preset in AspectPreset:
            self._aspect_combo.addItem(preset.label, preset.value)
        toolbar.addWidget(self._aspect_combo)
        layout.addLayout(toolbar)

        self._canvas = CompositionCanvas(self._controller)
        layout.addWidget(self._canvas, 1)

        hint = QLabel("拖动商品图调整位置 · 按住 Shift 拖动商品框 · 滚轮缩放商品图")
        hint.setStyleSheet("color: #666; font-size: 11px;")
        hint.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(hint)

        actions = QHBoxLayout()
        self._export_btn = QPushButton("导出图片")
        self._export_btn.setObjectName("primary")
        self._save_state_btn = QPushButton("保存状态")
        actions.addWidget(self._export_btn, 1)
        actions.addWidget(self._save_state_btn)
        layout.addLayout(actions)
        return panel

    def _create_right_panel(self) -> QFrame:
        panel = QFrame()
        panel.setFixedWidth(300)
        layout = QVBoxLayout(panel)
        layout.setContentsMargins(0, 0, 0, 0)
        self._property_panel = LayerPropertyPanel()
        layout.addWidget(self._property_panel)
        layout.addStretch()
        return panel

    def _connect_signals(self) -> None:
        self._runner.decode_ready.connect(self._on_decoded)

        self._canvas.layout_changed.connect(self._sync_scale)
        self._canvas.selection_changed.connect(lambda _: self._sync_property_panel())

        self._asset_panel.background_selected.connect(
            lambda path: self._load_image_file(ImageSlot.BACKGROUND, path)
        )
        self._asset_panel.product_selected.connect(
            lambda path: self._load_image_file(ImageSlot.PRODUCT, path)
        )
        self._asset_panel.recent_selected.connect(self._on_recent_selected)
        self._asset_panel.reset_alignment_requested.connect(self._on_reset_alignment)

        self._template_panel.save_requested.connect(self._on_save_template)
        self._template_panel.apply_requested.connect(self._on_apply_template)
        self._template_panel.delete_requested.connect(self._on_delete_template)
        self._template_panel.refresh_requested.connect(self.refresh_templates)

        self._scale_slider.valueChanged.connect(self._on_scale_slider)
        self._add_text_btn.clicked.connect(self._on_add_text)
        self._aspect_combo.currentIndexChanged.connect(self._on_aspect_changed)
        self._export_btn.clicked.connect(self._on_export)
        self._save_state_btn.clicked.connect(self._on_save_state)

        self._property_panel.changes_requested.connect(self._on_layer_changes)
        self._property_panel.delete_requested.connect(self._on_delete_layer)
        self._property_panel.scan_fonts_requested.connect(self._on_scan_fonts)

    # ========================
    # 同步显示
    # ========================

    def _sync_from_controller(self) -> None:
        """按控制器状态刷新全部控件."""
        self._aspect_combo.blockSignals(True)
        self._aspect_combo.setCurrentIndex(
            self._aspect_combo.findData(self._controller.layout.aspect_preset.value)
        )
        self._aspect_combo.blockSignals(False)
        self._sync_scale()
        self._sync_property_panel()
        self._canvas.refresh()

    def _sync_scale(self) -> None:
        scale = self._controller.layout.placement.scale
        self._scale_slider.blockSignals(True)
        self._scale_slider.setValue(round(scale * SCALE_SLIDER_FACTOR))
        self._scale_slider.blockSignals(False)
        self._scale_label.setText(f"{scale:.2f}×")

    def _sync_property_panel(self) -> None:
        self._property_panel.set_layer(self._controller.active_layer)

    # ========================
    # 提示
    # ========================

    def show_notice(self, notice: Optional[Notice]) -> None:
        if notice is not None:
            self._toast_manager.show_notice(notice)

    def handle_exception(self, exception: Exception) -> None:
        """记录异常并以提示显示."""
        if isinstance(exception, InvalidInputError):
            logger.info(f"输入无效: {exception}")
        else:
            logger.error(f"操作失败: {exception}")
        self.show_notice(notice_from_exception(exception))

    # ========================
    # 图片
    # ========================

    def _load_image_file(self, slot: ImageSlot, path: str) -> None:
        try:
            data_url = source_to_data_url(path)
        except ImageProcessError as e:
            self.handle_exception(e)
            return

        self._request_image(slot, data_url)
        if slot == ImageSlot.PRODUCT:
            self._remember_product(data_url, Path(path).name)

    def _request_image(self, slot: ImageSlot, data_url: str) -> None:
        request = self._controller.request_image(slot, data_url)
        self._runner.decode([request])
        self._canvas.refresh()

    def _remember_product(self, data_url: str, name: str) -> None:
        try:
            images = self._services.gallery.add(data_url, name)
        except (DatabaseError, ImageProcessError) as e:
            self.handle_exception(e)
            return
        self._asset_panel.set_recent_images(images)

    def _on_recent_selected(self, data_url: str, name: str) -> None:
        self._request_image(ImageSlot.PRODUCT, data_url)
        self._remember_product(data_url, name)

    def _on_decoded(self, result: DecodeResult) -> None:
        is_latest = result.sequence == self._controller.slot(result.slot).sequence
        self._controller.apply_decode_result(result)
        if is_latest and not result.ok:
            self.show_notice(Notice.error("图片无法读取", result.error or ""))
        self._canvas.refresh()

    def _on_reset_alignment(self) -> None:
        self._controller.reset_product_alignment()
        self._canvas.refresh()

    # ========================
    # 画布工具栏
    # ========================

    def _on_scale_slider(self, value: int) -> None:
        self._controller.set_product_scale(value / SCALE_SLIDER_FACTOR)
        self._sync_scale()
        self._canvas.refresh()

    def _on_add_text(self) -> None:
        self._controller.add_text_layer()
        self._sync_property_panel()
        self._canvas.refresh()

    def _on_aspect_changed(self, index: int) -> None:
        value = self._aspect_combo.itemData(index)
        if value is None:
            return
        preset = AspectPreset(value)
        self._controller.set_aspect_preset(preset)
        self._save_preference("last_aspect_preset", preset.value)
        self._canvas.refresh()

    # ========================
    # 图层属性
    # ========================

    def _on_layer_changes(self, changes: dict[str, Any]) -> None:
        try:
            self._controller.update_active_layer(**changes)
        except InvalidInputError as e:
            self.handle_exception(e)
        self._sync_property_panel()
        self._canvas.refresh()

    def _on_delete_layer(self) -> None:
        if self._controller.delete_active_layer():
            self._sync_property_panel()
            self._canvas.refresh()

    def _on_scan_fonts(self) -> None:
        fonts, notice = self._services.fonts.scan(self._services.font_provider)
        self._property_panel.set_fonts(fonts)
        self.show_notice(notice)

    # ========================
    # 模板
    # ========================

    def refresh_templates(self) -> None:
        """后台重新加载模板库."""
        self._runner.submit(
            self._services.library.refresh,
            on_success=self._on_sync_outcome,
            on_failure=self.handle_exception,
        )

    def _on_sync_outcome(self, outcome: SyncOutcome) -> None:
        self._template_panel.set_templates(outcome.templates)
        if not outcome.synced or outcome.notice.severity != ErrorSeverity.INFO:
            self.show_notice(outcome.notice)

    def _on_save_template(self, name: str, overwrite: bool) -> None:
        controller = self._controller
        try:
            template = self._services.library.create_template(
                controller.layout,
                name,
                background_image=controller.image_reference(ImageSlot.BACKGROUND),
                product_image=controller.image_reference(ImageSlot.PRODUCT),
                template_id=controller.current_template_id if overwrite else None,
            )
        except InvalidInputError as e:
            self.handle_exception(e)
            return

        controller.current_template_id = template.id
        self._template_panel.clear_name()
        self._template_panel.set_current_template(template.name)
        self._runner.submit(
            lambda: self._services.library.save(template),
            on_success=self._on_sync_outcome,
            on_failure=self.handle_exception,
        )

    def _on_apply_template(self, template_id: str) -> None:
        template = self._services.library.get(template_id)
        if template is None:
            self.show_notice(Notice.warning("模板不存在", "请刷新模板列表后重试"))
            return

        requests = self._controller.apply_template(from_template(template))
        self._runner.decode(requests)
        self._template_panel.set_current_template(template.name)
        self._sync_from_controller()
        self.show_notice(Notice.success("模板已应用", f"已应用模板“{template.name}”"))

    def _on_delete_template(self, template_id: str) -> None:
        if self._controller.current_template_id == template_id:
            self._controller.current_template_id = None
            self._template_panel.set_current_template(None)
        self._runner.submit(
            lambda: self._services.library.delete(template_id),
            on_success=self._on_sync_outcome,
            on_failure=self.handle_exception,
        )

    # ========================
    # 导出与保存
    # ========================

    def _save_preference(self, key: str, value: Any) -> None:
        try:
            self._services.config.set_user_config(key, value)
        except AppException as e:
            logger.warning(f"保存偏好失败: {e}")

    def _on_export(self) -> None:
        start_dir = self._services.config.get_user_config("last_export_dir", str(DEFAULT_EXPORT_DIR))
        directory = QFileDialog.getExistingDirectory(self, "选择导出目录", start_dir)
        if not directory:
            return
        self.export_to(directory)

    def export_to(self, directory: str | Path) -> Optional[Path]:
        """导出到指定目录."""
        controller = self._controller
        try:
            path = export_composition(
                controller.layout,
                directory,
                background=controller.background_image,
                product=controller.product_image,
            )
        except ImageProcessError as e:
            self.handle_exception(e)
            return None

        self._save_preference("last_export_dir", str(directory))
        self.show_notice(Notice.success("导出完成", str(path)))
        return path

    def _on_save_state(self) -> None:
        try:
            self._services.workspace.save_layout(self._controller.layout)
        except DatabaseError as e:
            self.handle_exception(e)
            return
        self.show_notice(Notice.success("状态已保存", "下次启动时自动恢复当前版面"))

    # ========================
    # 窗口事件
    # ========================

    def resizeEvent(self, event: QResizeEvent) -> None:
        super().resizeEvent(event)
        self._toast_manager.update_position()

    def closeEvent(self, event: QCloseEvent) -> None:
        self._runner.shutdown()
        logger.info("主窗口关闭")
        event.accept()
