"""素材面板单元测试."""

from datetime import datetime

import pytest

from post_composer.services.workspace_service import RecentImage
from post_composer.ui.widgets.asset_panel import AssetPanel


@pytest.fixture
def panel(app, qtbot):
    widget = AssetPanel()
    qtbot.addWidget(widget)
    return widget


class TestAssetPanel:
    """AssetPanel 测试类."""

    def test_recent_images(self, panel, red_data_url, qtbot):
        images = [
            RecentImage("hash-1", "a.png", red_data_url, datetime.now()),
            RecentImage("hash-2", "", "broken", datetime.now()),
        ]
        panel.set_recent_images(images)
        assert panel.recent_count == 2

        with qtbot.waitSignal(panel.recent_selected, timeout=1000) as blocker:
            panel._recent.itemClicked.emit(panel._recent.item(0))
        assert blocker.args == [red_data_url, "a.png"]

    def test_reset_alignment(self, panel, qtbot):
        with qtbot.waitSignal(panel.reset_alignment_requested, timeout=1000):
            panel._reset_btn.click()
