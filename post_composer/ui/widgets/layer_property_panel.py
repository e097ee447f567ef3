"""文字图层属性面板.

编辑当前选中图层的内容、字号、颜色、字体和粗细。面板只发出修改请求，
校验和应用由编辑器控制器完成，输入无效时图层保持不变。
"""

from __future__ import annotations

from typing import Any, Optional

from PyQt6.QtCore import pyqtSignal
from PyQt6.QtGui import QColor
from PyQt6.QtWidgets import (
    QCheckBox,
    QColorDialog,
    QComboBox,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from post_composer.models.layout import TextLayer


class ColorButton(QPushButton):
    """颜色选择按钮."""

    color_changed = pyqtSignal(str)  # #rrggbb

    def __init__(self, color: str = "#ffffff", parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._color = color
        self.setFixedHeight(26)
        self._update_style()
        self.clicked.connect(self._pick_color)

    @property
    def color(self) -> str:
        return self._color

    def set_color(self, color: str) -> None:
        self._color = color
        self._update_style()

    def _update_style(self) -> None:
        qcolor = QColor(self._color)
        brightness = (qcolor.red() * 299 + qcolor.green() * 587 + qcolor.blue() * 114) / 1000
        text_color = "#000" if brightness > 128 else "#fff"
        self.setStyleSheet(
            f"QPushButton {{ background-color: {self._color}; color: {text_color};"
            f" border: 1px solid #444; border-radius: 4px; }}"
        )
        self.setText(self._color)

    def _pick_color(self) -> None:
        color = QColorDialog.getColor(QColor(self._color), self, "选择颜色")
        if color.isValid():
            self.set_color(color.name())
            self.color_changed.emit(self._color)


class LayerPropertyPanel(QGroupBox):
    """图层属性面板.

    Signals:
        changes_requested: 请求修改当前图层 (dict)
        delete_requested: 请求删除当前图层
        scan_fonts_requested: 请求扫描系统字体
    """

    changes_requested = pyqtSignal(dict)
    delete_requested = pyqtSignal()
    scan_fonts_requested = pyqtSignal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__("图层属性", parent)
        self._layer: Optional[TextLayer] = None
        self._setup_ui()
        self.set_layer(None)

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setSpacing(10)

        self._empty_hint = QLabel("在画布上点击文字以编辑")
        self._empty_hint.setStyleSheet("color: #777;")
        layout.addWidget(self._empty_hint)

        self._editor = QWidget()
        form = QFormLayout(self._editor)
        form.setContentsMargins(0, 0, 0, 0)

        self._content = QLineEdit()
        self._content.setMaxLength(500)
        self._content.editingFinished.connect(
            lambda: self._request(content=self._content.text())
        )
        form.addRow("内容", self._content)

        self._font_size = QLineEdit()
        self._font_size.editingFinished.connect(
            lambda: self._request(font_size=self._font_size.text())
        )
        form.addRow("字号", self._font_size)

        self._color = ColorButton()
        self._color.color_changed.connect(lambda color: self._request(color=color))
        form.addRow("颜色", self._color)

        font_row = QHBoxLayout()
        self._font_family = QComboBox()
        self._font_family.setEditable(True)
        self._font_family.textActivated.connect(lambda name: self._request(font_family=name))
        font_row.addWidget(self._font_family, 1)
        self._scan_btn = QPushButton("扫描系统字体")
        self._scan_btn.clicked.connect(self.scan_fonts_requested.emit)
        font_row.addWidget(self._scan_btn)
        form.addRow("字体", font_row)

        self._bold = QCheckBox("粗体")
        self._bold.toggled.connect(lambda checked: self._request(bold=checked))
        form.addRow("", self._bold)

        self._delete_btn = QPushButton("删除图层")
        self._delete_btn.setStyleSheet("QPushButton { color: #ff6b6b; }")
        self._delete_btn.clicked.connect(self.delete_requested.emit)
        form.addRow("", self._delete_btn)

        layout.addWidget(self._editor)
        layout.addStretch()

    @property
    def layer(self) -> Optional[TextLayer]:
        return self._layer

    def set_fonts(self, fonts: list[str]) -> None:
        """更新可选字体，保留当前输入."""
        current = self._font_family.currentText()
        self._font_family.blockSignals(True)
        self._font_family.clear()
        self._font_family.addItems(fonts)
        self._font_family.setCurrentText(current)
        self._font_family.blockSignals(False)

    def set_layer(self, layer: Optional[TextLayer]) -> None:
        """显示图层属性，None 表示未选中."""
        self._layer = layer
        self._empty_hint.setVisible(layer is None)
        self._editor.setVisible(layer is not None)
        if layer is None:
            return

        widgets = (self._content, self._font_size, self._font_family, self._bold)
        for widget in widgets:
            widget.blockSignals(True)
        self._content.setText(layer.content)
        self._font_size.setText(f"{layer.font_size:g}")
        self._font_family.setCurrentText(layer.font_family)
        self._bold.setChecked(layer.bold)
        self._color.set_color(layer.color)
        for widget in widgets:
            widget.blockSignals(False)

    def _request(self, **changes: Any) -> None:
        if self._layer is None:
            return
        # 值未变化时不发出请求
        current = self._layer.model_dump()
        if all(str(current.get(k)) == str(v) for k, v in changes.items()):
            return
        self.changes_requested.emit(changes)
