"""拖拽状态机单元测试."""

import pytest

from post_composer.core.drag_controller import DragController, DragMode
from post_composer.core.geometry import CanvasPoint
from post_composer.core.hit_testing import Target
from post_composer.models.layout import Frame, LayoutModel, TextLayer
from post_composer.utils.constants import MAX_PRODUCT_SCALE, MIN_FRAME_SIZE, MIN_PRODUCT_SCALE


@pytest.fixture
def drag():
    return DragController()


@pytest.fixture
def layout():
    return LayoutModel(
        frame=Frame(x=200, y=300, width=680, height=500),
        text_layers=[TextLayer(content="Sale", x=540, y=540)],
    )


# ===================
# 状态转换
# ===================


class TestDragTransitions:
    """状态转换测试类."""

    def test_initial_idle(self, drag):
        assert drag.mode == DragMode.IDLE
        assert not drag.is_dragging

    def test_move_while_idle_does_nothing(self, drag, layout):
        """测试空闲时移动不修改版面."""
        before = layout.model_dump()
        assert drag.move(CanvasPoint(10, 10), layout) is False
        assert layout.model_dump() == before

    @pytest.mark.parametrize(
        "target,modifier,expected",
        [
            (Target.resize_handle(), False, DragMode.RESIZE_HANDLE),
            (Target.frame_body(), True, DragMode.FRAME),
            (Target.frame_body(), False, DragMode.PRODUCT),
            (Target.empty(), False, DragMode.IDLE),
            (Target.empty(), True, DragMode.IDLE),
        ],
    )
    def test_begin_modes(self, drag, layout, target, modifier, expected):
        """测试按命中目标和修饰键进入对应状态."""
        mode = drag.begin(target, CanvasPoint(300, 400), layout, frame_modifier=modifier)
        assert mode == expected

    def test_begin_text(self, drag, layout):
        layer = layout.text_layers[0]
        mode = drag.begin(Target.text_layer(layer.id), CanvasPoint(540, 530), layout)
        assert mode == DragMode.TEXT
        assert drag.state.layer_id == layer.id
        assert drag.state.offset == CanvasPoint(0, -10)

    def test_begin_unknown_layer_stays_idle(self, drag, layout):
        mode = drag.begin(Target.text_layer("text-missing"), CanvasPoint(1, 1), layout)
        assert mode == DragMode.IDLE

    def test_end_returns_idle(self, drag, layout):
        drag.begin(Target.frame_body(), CanvasPoint(300, 400), layout)
        drag.end()
        assert drag.mode == DragMode.IDLE
        assert drag.move(CanvasPoint(0, 0), layout) is False


# ===================
# 拖动
# ===================


class TestDragMove:
    """拖动测试类."""

    def test_resize_from_handle(self, drag, layout):
        """测试从 (870,795) 拖到 (1000,900) 后框尺寸为 800×600."""
        drag.begin(Target.resize_handle(), CanvasPoint(870, 795), layout)
        assert drag.move(CanvasPoint(1000, 900), layout) is True

        assert layout.frame.width == 800
        assert layout.frame.height == 600
        assert (layout.frame.x, layout.frame.y) == (200, 300)

    def test_resize_minimum(self, drag, layout):
        """测试缩放不会小于最小尺寸."""
        drag.begin(Target.resize_handle(), CanvasPoint(870, 795), layout)
        drag.move(CanvasPoint(100, 100), layout)

        assert layout.frame.width == MIN_FRAME_SIZE
        assert layout.frame.height == MIN_FRAME_SIZE

    def test_text_drag_absolute(self, drag, layout):
        """测试拖动文字按偏移计算锚点绝对位置."""
        layer = layout.text_layers[0]
        drag.begin(Target.text_layer(layer.id), CanvasPoint(540, 530), layout)

        drag.move(CanvasPoint(560, 520), layout)
        drag.move(CanvasPoint(590, 510), layout)

        assert (layer.x, layer.y) == (590, 520)

    def test_frame_drag(self, drag, layout):
        drag.begin(Target.frame_body(), CanvasPoint(300, 400), layout, frame_modifier=True)
        drag.move(CanvasPoint(350, 380), layout)

        assert (layout.frame.x, layout.frame.y) == (250, 280)
        assert (layout.frame.width, layout.frame.height) == (680, 500)

    def test_product_drag_keeps_frame(self, drag, layout):
        """测试拖动商品图只修改偏移."""
        layout.placement.move_to(10, 20)
        drag.begin(Target.frame_body(), CanvasPoint(300, 400), layout)
        drag.move(CanvasPoint(330, 390), layout)

        assert (layout.placement.offset_x, layout.placement.offset_y) == (40, 10)
        assert (layout.frame.x, layout.frame.y) == (200, 300)

    def test_deleted_layer_ends_drag(self, drag, layout):
        """测试拖动中图层被删除时结束拖拽."""
        layer = layout.text_layers[0]
        drag.begin(Target.text_layer(layer.id), CanvasPoint(540, 530), layout)
        layout.remove_layer(layer.id)

        assert drag.move(CanvasPoint(600, 600), layout) is False
        assert drag.mode == DragMode.IDLE


# ===================
# 滚轮
# ===================


class TestWheel:
    """滚轮缩放测试类."""

    def test_wheel_without_product(self, layout):
        assert DragController.wheel(layout, 1, has_product=False) is False
        assert layout.placement.scale == 1.0

    def test_wheel_steps(self, layout):
        assert DragController.wheel(layout, 2, has_product=True) is True
        assert layout.placement.scale == pytest.approx(1.1)

        DragController.wheel(layout, -4, has_product=True)
        assert layout.placement.scale == pytest.approx(0.9)

    def test_wheel_clamped(self, layout):
        """测试缩放限制在允许范围内."""
        DragController.wheel(layout, -1000, has_product=True)
        assert layout.placement.scale == MIN_PRODUCT_SCALE

        DragController.wheel(layout, 10000, has_product=True)
        assert layout.placement.scale == MAX_PRODUCT_SCALE
        assert DragController.wheel(layout, 1, has_product=True) is False

    def test_wheel_independent_of_drag(self, drag, layout):
        drag.begin(Target.frame_body(), CanvasPoint(300, 400), layout, frame_modifier=True)
        DragController.wheel(layout, 1, has_product=True)
        assert drag.mode == DragMode.FRAME
