"""图层属性面板单元测试."""

import pytest
from PyQt6.QtCore import Qt

from post_composer.models.layout import TextLayer
from post_composer.ui.widgets.layer_property_panel import ColorButton, LayerPropertyPanel


@pytest.fixture
def panel(app, qtbot):
    widget = LayerPropertyPanel()
    qtbot.addWidget(widget)
    return widget


@pytest.fixture
def layer():
    return TextLayer(content="Sale", font_size=48, font_family="Impact", color="#ff0000", bold=True)


class TestLayerPropertyPanel:
    """LayerPropertyPanel 测试类."""

    def test_empty_state(self, panel):
        assert panel.layer is None
        assert panel._editor.isHidden()
        assert not panel._empty_hint.isHidden()

    def test_shows_layer(self, panel, layer):
        panel.set_layer(layer)

        assert not panel._editor.isHidden()
        assert panel._content.text() == "Sale"
        assert panel._font_size.text() == "48"
        assert panel._font_family.currentText() == "Impact"
        assert panel._bold.isChecked()
        assert panel._color.color == "#ff0000"

    def test_set_layer_emits_nothing(self, panel, layer, qtbot):
        with qtbot.assertNotEmitted(panel.changes_requested):
            panel.set_layer(layer)

    def test_content_edit(self, panel, layer, qtbot):
        panel.set_layer(layer)
        panel._content.setText("Big Sale")

        with qtbot.waitSignal(panel.changes_requested, timeout=1000) as blocker:
            panel._content.editingFinished.emit()

        assert blocker.args == [{"content": "Big Sale"}]

    def test_font_size_sent_as_text(self, panel, layer, qtbot):
        """测试字号原样发出，由控制器校验."""
        panel.set_layer(layer)
        panel._font_size.setText("abc")

        with qtbot.waitSignal(panel.changes_requested, timeout=1000) as blocker:
            panel._font_size.editingFinished.emit()

        assert blocker.args == [{"font_size": "abc"}]

    def test_unchanged_value_not_sent(self, panel, layer, qtbot):
        panel.set_layer(layer)
        with qtbot.assertNotEmitted(panel.changes_requested):
            panel._content.editingFinished.emit()

    def test_bold_toggle(self, panel, layer, qtbot):
        panel.set_layer(layer)
        with qtbot.waitSignal(panel.changes_requested, timeout=1000) as blocker:
            panel._bold.setChecked(False)
        assert blocker.args == [{"bold": False}]

    def test_font_choice(self, panel, layer, qtbot):
        panel.set_layer(layer)
        panel.set_fonts(["Impact", "Verdana"])
        with qtbot.waitSignal(panel.changes_requested, timeout=1000) as blocker:
            panel._font_family.textActivated.emit("Verdana")
        assert blocker.args == [{"font_family": "Verdana"}]

    def test_set_fonts_keeps_text(self, panel, layer):
        panel.set_layer(layer)
        panel.set_fonts(["Verdana", "Tahoma"])
        assert panel._font_family.currentText() == "Impact"
        assert panel._font_family.count() == 2

    def test_delete_and_scan(self, panel, layer, qtbot):
        panel.set_layer(layer)
        with qtbot.waitSignal(panel.delete_requested, timeout=1000):
            qtbot.mouseClick(panel._delete_btn, Qt.MouseButton.LeftButton)
        with qtbot.waitSignal(panel.scan_fonts_requested, timeout=1000):
            qtbot.mouseClick(panel._scan_btn, Qt.MouseButton.LeftButton)


class TestColorButton:
    """ColorButton 测试类."""

    def test_set_color(self, app, qtbot):
        button = ColorButton("#000000")
        qtbot.addWidget(button)
        button.set_color("#ffffff")
        assert button.color == "#ffffff"
        assert button.text() == "#ffffff"
