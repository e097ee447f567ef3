"""命中检测单元测试."""

from post_composer.core.geometry import CanvasPoint
from post_composer.core.hit_testing import (
    Target,
    TargetKind,
    hit_test,
    hit_test_layers,
    resize_hotspot,
)
from post_composer.models.layout import Frame, LayoutModel, TextLayer


def make_layout(*layers: TextLayer) -> LayoutModel:
    return LayoutModel(frame=Frame(x=200, y=300, width=680, height=500), text_layers=list(layers))


class TestResizeHotspot:
    """缩放手柄热区测试类."""

    def test_hotspot_bounds(self):
        """测试热区为右下角向内 20、向外 10."""
        rect = resize_hotspot(Frame(x=200, y=300, width=680, height=500))
        assert rect.as_tuple() == (860, 780, 890, 810)

    def test_hit_inside_and_outside_frame(self, fixed_hit_box):
        """测试框内外的热区都能命中手柄."""
        layout = make_layout()
        assert hit_test(CanvasPoint(870, 795), layout, fixed_hit_box).kind == TargetKind.RESIZE_HANDLE
        assert hit_test(CanvasPoint(885, 805), layout, fixed_hit_box).kind == TargetKind.RESIZE_HANDLE

    def test_hotspot_exclusive_edge(self, fixed_hit_box):
        """测试热区右下边不包含."""
        layout = make_layout()
        assert hit_test(CanvasPoint(890, 795), layout, fixed_hit_box).kind == TargetKind.EMPTY


class TestHitTestPriority:
    """命中优先级测试类."""

    def test_handle_beats_text(self, fixed_hit_box):
        """测试文字与手柄重叠时手柄优先."""
        layer = TextLayer(content="A", x=870, y=800, font_size=50)
        layout = make_layout(layer)

        target = hit_test(CanvasPoint(870, 795), layout, fixed_hit_box)

        assert target == Target.resize_handle()

    def test_text_beats_frame(self, fixed_hit_box):
        """测试框内的文字优先于商品框."""
        layer = TextLayer(content="A", x=540, y=540, font_size=50)
        layout = make_layout(layer)

        target = hit_test(CanvasPoint(540, 520), layout, fixed_hit_box)

        assert target == Target.text_layer(layer.id)

    def test_topmost_layer_wins(self, fixed_hit_box):
        """测试重叠图层时最后插入的优先."""
        bottom = TextLayer(content="A", x=540, y=540)
        top = TextLayer(content="B", x=560, y=540)
        layout = make_layout(bottom, top)

        target = hit_test(CanvasPoint(550, 530), layout, fixed_hit_box)

        assert target.layer_id == top.id

    def test_frame_body(self, fixed_hit_box):
        layout = make_layout()
        assert hit_test(CanvasPoint(300, 400), layout, fixed_hit_box) == Target.frame_body()

    def test_empty(self, fixed_hit_box):
        layout = make_layout()
        assert hit_test(CanvasPoint(50, 50), layout, fixed_hit_box) == Target.empty()

    def test_frame_edges_half_open(self, fixed_hit_box):
        """测试商品框左上边包含、右边不包含."""
        layout = make_layout()
        assert hit_test(CanvasPoint(200, 300), layout, fixed_hit_box).kind == TargetKind.FRAME_BODY
        assert hit_test(CanvasPoint(880, 400), layout, fixed_hit_box).kind == TargetKind.EMPTY


class TestHitTestLayers:
    """hit_test_layers 测试类."""

    def test_no_layers(self, fixed_hit_box):
        assert hit_test_layers(CanvasPoint(0, 0), [], fixed_hit_box) is None

    def test_vertical_bounds(self, fixed_hit_box):
        """测试命中框从基线上方一个字号到下方 10."""
        layer = TextLayer(x=540, y=540, font_size=50)
        assert hit_test_layers(CanvasPoint(540, 490), [layer], fixed_hit_box) is layer
        assert hit_test_layers(CanvasPoint(540, 489), [layer], fixed_hit_box) is None
        assert hit_test_layers(CanvasPoint(540, 549), [layer], fixed_hit_box) is layer
        assert hit_test_layers(CanvasPoint(540, 550), [layer], fixed_hit_box) is None

    def test_default_hit_box_covers_anchor(self):
        """测试默认命中框（按实际字体测量）包含锚点附近."""
        layer = TextLayer(content="Hello", x=540, y=540, font_size=40)
        assert hit_test_layers(CanvasPoint(540, 535), [layer]) is layer
        assert hit_test_layers(CanvasPoint(540, 600), [layer]) is None
