"""画布组件.

显示渲染结果（等比居中缩放），把鼠标事件转交给编辑器控制器。
每个鼠标事件都按当前控件尺寸重新计算画布的显示区域。
"""

from __future__ import annotations

from typing import Optional

from PIL import Image
from PyQt6.QtCore import QRectF, Qt, pyqtSignal
from PyQt6.QtGui import (
    QColor,
    QImage,
    QKeyEvent,
    QMouseEvent,
    QPainter,
    QPaintEvent,
    QWheelEvent,
)
from PyQt6.QtWidgets import QSizePolicy, QWidget

from post_composer.core.editor_controller import EditorController
from post_composer.core.geometry import PointerEvent, RenderedBox, fit_box
from post_composer.core.hit_testing import TargetKind
from post_composer.services.renderer import render_composition
from post_composer.utils.exceptions import GeometryError
from post_composer.utils.logger import setup_logger

logger = setup_logger(__name__)

BACKDROP_COLOR = QColor(10, 10, 10)

CURSORS = {
    TargetKind.RESIZE_HANDLE: Qt.CursorShape.SizeFDiagCursor,
    TargetKind.TEXT_LAYER: Qt.CursorShape.SizeAllCursor,
    TargetKind.FRAME_BODY: Qt.CursorShape.OpenHandCursor,
    TargetKind.EMPTY: Qt.CursorShape.ArrowCursor,
}


def pil_to_qimage(image: Image.Image) -> QImage:
    """PIL 图片转 QImage（复制像素数据）."""
    rgba = image if image.mode == "RGBA" else image.convert("RGBA")
    data = rgba.tobytes("raw", "RGBA")
    qimage = QImage(data, rgba.width, rgba.height, rgba.width * 4, QImage.Format.Format_RGBA8888)
    return qimage.copy()


class CompositionCanvas(QWidget):
    """画布组件.

    Signals:
        layout_changed: 版面被拖拽或滚轮修改
        selection_changed: 选中图层变化 (Optional[str])
    """

    layout_changed = pyqtSignal()
    selection_changed = pyqtSignal(object)

    def __init__(self, controller: EditorController, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._controller = controller
        self._frame_image: Optional[QImage] = None

        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.FocusPolicy.ClickFocus)
        self.setMinimumSize(320, 320)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)

    @property
    def controller(self) -> EditorController:
        return self._controller

    def set_controller(self, controller: EditorController) -> None:
        self._controller = controller
        self.refresh()

    def rendered_box(self) -> RenderedBox:
        """画布当前在控件中的显示区域."""
        return fit_box(self._controller.canvas_size, self.width(), self.height())

    def refresh(self) -> None:
        """重新渲染并重绘."""
        controller = self._controller
        image = render_composition(
            controller.layout,
            controller.background_image,
            controller.product_image,
            selected_layer_id=controller.selected_layer_id,
            export_mode=False,
        )
        self._frame_image = pil_to_qimage(image)
        self.update()

    # ========================
    # 绘制
    # ========================

    def paintEvent(self, event: QPaintEvent) -> None:
        painter = QPainter(self)
        painter.fillRect(self.rect(), BACKDROP_COLOR)
        if self._frame_image is not None:
            box = self.rendered_box()
            painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
            painter.drawImage(QRectF(box.left, box.top, box.width, box.height), self._frame_image)
        painter.end()

    # ========================
    # 鼠标事件
    # ========================

    def _pointer(self, event: QMouseEvent) -> PointerEvent:
        pos = event.position()
        shift = bool(event.modifiers() & Qt.KeyboardModifier.ShiftModifier)
        return PointerEvent(pos.x(), pos.y(), shift=shift)

    def mousePressEvent(self, event: QMouseEvent) -> None:
        if event.button() != Qt.MouseButton.LeftButton:
            super().mousePressEvent(event)
            return

        previous = self._controller.selected_layer_id
        try:
            self._controller.pointer_down(self._pointer(event), self.rendered_box())
        except GeometryError as e:
            logger.debug(f"忽略按下事件: {e}")
            return

        if self._controller.selected_layer_id != previous:
            self.selection_changed.emit(self._controller.selected_layer_id)
        self.refresh()
        event.accept()

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        box = self.rendered_box()
        try:
            if self._controller.drag.is_dragging:
                if self._controller.pointer_move(self._pointer(event), box):
                    self.refresh()
                    self.layout_changed.emit()
            else:
                self._update_cursor(event, box)
        except GeometryError as e:
            logger.debug(f"忽略移动事件: {e}")
        event.accept()

    def _update_cursor(self, event: QMouseEvent, box: RenderedBox) -> None:
        target = self._controller.target_at(self._pointer(event), box)
        self.setCursor(CURSORS[target.kind])

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        self._controller.pointer_up()
        event.accept()

    def leaveEvent(self, event) -> None:
        self._controller.pointer_leave()
        self.unsetCursor()
        super().leaveEvent(event)

    def wheelEvent(self, event: QWheelEvent) -> None:
        if self._controller.wheel(event.angleDelta().y()):
            self.refresh()
            self.layout_changed.emit()
        event.accept()

    def keyPressEvent(self, event: QKeyEvent) -> None:
        if event.key() in (Qt.Key.Key_Delete, Qt.Key.Key_Backspace):
            if self._controller.delete_active_layer():
                self.selection_changed.emit(None)
                self.refresh()
                self.layout_changed.emit()
            event.accept()
            return
        super().keyPressEvent(event)
