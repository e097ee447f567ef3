"""Toast 提示组件.

编辑器的所有操作反馈（模板同步失败、输入无效、字体降级等）都以 Toast 形式
显示在窗口右上角，不弹出模态对话框，不打断画布上的拖拽。
"""

from __future__ import annotations

from typing import Optional

from PyQt6.QtCore import QEasingCurve, QPropertyAnimation, Qt, QTimer, pyqtSignal
from PyQt6.QtWidgets import (
    QFrame,
    QGraphicsOpacityEffect,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from post_composer.utils.error_messages import ErrorSeverity, Notice, get_severity_color

TOAST_WIDTH = 340

# 深色主题下的背景和边框
TOAST_STYLES = {
    ErrorSeverity.SUCCESS: {"background": "#16241a", "border": "#2f5c39", "icon": "✓"},
    ErrorSeverity.INFO: {"background": "#142130", "border": "#29507a", "icon": "ℹ"},
    ErrorSeverity.WARNING: {"background": "#2b2414", "border": "#7a5f1f", "icon": "⚠"},
    ErrorSeverity.ERROR: {"background": "#2d1616", "border": "#7a2b2b", "icon": "✕"},
}


class ToastNotification(QFrame):
    """单条提示.

    Signals:
        closed: 提示关闭时发出
    """

    closed = pyqtSignal()

    def __init__(
        self,
        notice: Notice,
        duration: int = 4000,
        parent: Optional[QWidget] = None,
    ) -> None:
        """初始化.

        Args:
            notice: 提示内容
            duration: 显示时长（毫秒，从 start 开始计时），0 表示不自动关闭
            parent: 父组件
        """
        super().__init__(parent)
        self._notice = notice
        self._duration = duration
        self._fade_animation: Optional[QPropertyAnimation] = None

        self._setup_ui()

    @property
    def notice(self) -> Notice:
        return self._notice

    def start(self) -> None:
        """显示并开始计时."""
        self.show()
        if self._duration > 0:
            QTimer.singleShot(self._duration, self._start_fade_out)

    def _setup_ui(self) -> None:
        self.setFixedWidth(TOAST_WIDTH)
        style = TOAST_STYLES[self._notice.severity]
        accent = get_severity_color(self._notice.severity)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(14, 10, 14, 10)
        layout.setSpacing(10)

        icon_label = QLabel(style["icon"])
        icon_label.setFixedWidth(20)
        icon_label.setStyleSheet(f"font-size: 16px; color: {accent};")
        layout.addWidget(icon_label, 0, Qt.AlignmentFlag.AlignTop)

        content = QVBoxLayout()
        content.setSpacing(2)
        title_label = QLabel(self._notice.title)
        title_label.setWordWrap(True)
        title_label.setStyleSheet("font-weight: bold; font-size: 13px; color: #f0f0f0;")
        content.addWidget(title_label)
        if self._notice.message:
            message_label = QLabel(self._notice.message)
            message_label.setWordWrap(True)
            message_label.setStyleSheet("font-size: 12px; color: #a0a0a0;")
            content.addWidget(message_label)
        layout.addLayout(content, 1)

        close_btn = QPushButton("×")
        close_btn.setFixedSize(18, 18)
        close_btn.setCursor(Qt.CursorShape.PointingHandCursor)
        close_btn.setStyleSheet(
            "QPushButton { border: none; background: transparent; color: #808080; font-size: 15px; }"
            "QPushButton:hover { color: #e0e0e0; }"
        )
        close_btn.clicked.connect(self._start_fade_out)
        layout.addWidget(close_btn, 0, Qt.AlignmentFlag.AlignTop)

        self.setStyleSheet(
            f"ToastNotification {{ background-color: {style['background']};"
            f" border: 1px solid {style['border']}; border-radius: 8px; }}"
        )

        self._opacity_effect = QGraphicsOpacityEffect(self)
        self._opacity_effect.setOpacity(1.0)
        self.setGraphicsEffect(self._opacity_effect)

    def _start_fade_out(self) -> None:
        if self._fade_animation is not None:
            return
        self._fade_animation = QPropertyAnimation(self._opacity_effect, b"opacity")
        self._fade_animation.setDuration(250)
        self._fade_animation.setStartValue(1.0)
        self._fade_animation.setEndValue(0.0)
        self._fade_animation.setEasingCurve(QEasingCurve.Type.OutCubic)
        self._fade_animation.finished.connect(self._on_fade_finished)
        self._fade_animation.start()

    def _on_fade_finished(self) -> None:
        self.closed.emit()
        self.deleteLater()


class ToastManager(QWidget):
    """提示管理器，在父窗口右上角纵向排列提示.

    Example:
        >>> toasts = ToastManager(window)
        >>> toasts.show_notice(Notice.warning("全局同步失败", "模板已保存在本地"))
    """

    MAX_VISIBLE = 4

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._notifications: list[ToastNotification] = []
        self._pending: list[ToastNotification] = []

        self.setAttribute(Qt.WidgetAttribute.WA_TranslucentBackground)
        self._layout = QVBoxLayout(self)
        self._layout.setContentsMargins(0, 0, 0, 0)
        self._layout.setSpacing(8)
        self._layout.addStretch()
        self.hide()

    @property
    def visible_count(self) -> int:
        return len(self._notifications)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def show_notice(self, notice: Notice) -> ToastNotification:
        """显示提示，错误类提示停留更久."""
        duration = 6000 if notice.severity == ErrorSeverity.ERROR else 4000
        toast = ToastNotification(notice, duration=duration, parent=self)
        if len(self._notifications) >= self.MAX_VISIBLE:
            toast.hide()
            self._pending.append(toast)
        else:
            self._add_toast(toast)
        return toast

    def _add_toast(self, toast: ToastNotification) -> None:
        toast.closed.connect(lambda: self._remove_toast(toast))
        self._notifications.append(toast)
        self._layout.insertWidget(self._layout.count() - 1, toast)
        toast.start()
        self.update_position()
        self.show()
        self.raise_()

    def _remove_toast(self, toast: ToastNotification) -> None:
        if toast in self._notifications:
            self._notifications.remove(toast)
            self._layout.removeWidget(toast)

        if self._pending and len(self._notifications) < self.MAX_VISIBLE:
            self._add_toast(self._pending.pop(0))

        if not self._notifications:
            self.hide()
        else:
            self.update_position()

    def update_position(self) -> None:
        """贴在父窗口右上角."""
        parent = self.parentWidget()
        if parent is None:
            return
        height = sum(t.sizeHint().height() for t in self._notifications)
        height += 8 * max(0, len(self._notifications) - 1) + 8
        self.setGeometry(parent.width() - TOAST_WIDTH - 20, 20, TOAST_WIDTH, max(height, 40))
