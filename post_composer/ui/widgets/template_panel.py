"""模板面板.

输入名称保存当前版面为模板；列表中的模板可以应用或删除。
"""

from __future__ import annotations

from typing import Optional

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QCheckBox,
    QGroupBox,
    QHBoxLayout,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from post_composer.models.template import Template


class TemplatePanel(QGroupBox):
    """模板面板.

    Signals:
        save_requested: 保存 (名称, 是否覆盖当前模板)
        apply_requested: 应用 (模板ID)
        delete_requested: 删除 (模板ID)
        refresh_requested: 重新加载模板库
    """

    save_requested = pyqtSignal(str, bool)
    apply_requested = pyqtSignal(str)
    delete_requested = pyqtSignal(str)
    refresh_requested = pyqtSignal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__("模板", parent)
        self._setup_ui()

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)

        name_row = QHBoxLayout()
        self._name_edit = QLineEdit()
        self._name_edit.setPlaceholderText("模板名称")
        self._name_edit.setMaxLength(100)
        self._name_edit.returnPressed.connect(self._on_save)
        name_row.addWidget(self._name_edit, 1)
        self._save_btn = QPushButton("保存")
        self._save_btn.clicked.connect(self._on_save)
        name_row.addWidget(self._save_btn)
        layout.addLayout(name_row)

        self._overwrite = QCheckBox("覆盖当前模板")
        self._overwrite.setEnabled(False)
        layout.addWidget(self._overwrite)

        self._list = QListWidget()
        self._list.itemDoubleClicked.connect(
            lambda item: self.apply_requested.emit(item.data(Qt.ItemDataRole.UserRole))
        )
        self._list.currentItemChanged.connect(lambda *_: self._update_buttons())
        layout.addWidget(self._list, 1)

        actions = QHBoxLayout()
        self._apply_btn = QPushButton("应用")
        self._apply_btn.clicked.connect(self._on_apply)
        self._delete_btn = QPushButton("删除")
        self._delete_btn.clicked.connect(self._on_delete)
        self._refresh_btn = QPushButton("刷新")
        self._refresh_btn.clicked.connect(self.refresh_requested.emit)
        actions.addWidget(self._apply_btn)
        actions.addWidget(self._delete_btn)
        actions.addStretch()
        actions.addWidget(self._refresh_btn)
        layout.addLayout(actions)

        self._update_buttons()

    @property
    def template_count(self) -> int:
        return self._list.count()

    def selected_template_id(self) -> Optional[str]:
        item = self._list.currentItem()
        return item.data(Qt.ItemDataRole.UserRole) if item else None

    def set_templates(self, templates: list[Template]) -> None:
        """刷新列表，尽量保持原来的选中项."""
        selected = self.selected_template_id()
        self._list.clear()
        for template in templates:
            label = template.name
            if template.has_images:
                label += "  🖼"
            item = QListWidgetItem(label)
            item.setData(Qt.ItemDataRole.UserRole, template.id)
            item.setToolTip(f"{template.name}\n更新于 {template.updated_at:%Y-%m-%d %H:%M}")
            self._list.addItem(item)
            if template.id == selected:
                self._list.setCurrentItem(item)
        self._update_buttons()

    def set_current_template(self, name: Optional[str]) -> None:
        """记录最近应用的模板，允许覆盖保存."""
        self._overwrite.setEnabled(name is not None)
        self._overwrite.setChecked(False)
        self._overwrite.setText(f"覆盖“{name}”" if name else "覆盖当前模板")

    def clear_name(self) -> None:
        self._name_edit.clear()

    def _update_buttons(self) -> None:
        has_selection = self._list.currentItem() is not None
        self._apply_btn.setEnabled(has_selection)
        self._delete_btn.setEnabled(has_selection)

    def _on_save(self) -> None:
        overwrite = self._overwrite.isEnabled() and self._overwrite.isChecked()
        self.save_requested.emit(self._name_edit.text(), overwrite)

    def _on_apply(self) -> None:
        template_id = self.selected_template_id()
        if template_id:
            self.apply_requested.emit(template_id)

    def _on_delete(self) -> None:
        template_id = self.selected_template_id()
        if template_id:
            self.delete_requested.emit(template_id)
