"""渲染引擎单元测试."""

import pytest
from PIL import Image, ImageChops

from post_composer.models.layout import AspectPreset, Frame, LayoutModel, TextLayer
from post_composer.services.renderer import CompositionRenderer, render_composition

GREEN = (0, 200, 0, 255)
RED = (255, 0, 0, 255)


@pytest.fixture
def renderer():
    return CompositionRenderer()


def differs(a: Image.Image, b: Image.Image) -> bool:
    return ImageChops.difference(a, b).getbbox() is not None


class TestCanvas:
    """画布测试类."""

    @pytest.mark.parametrize("preset", list(AspectPreset))
    def test_size_follows_preset(self, renderer, preset):
        layout = LayoutModel(aspect_preset=preset)
        image = renderer.render(layout)
        assert image.size == preset.size
        assert image.mode == "RGBA"

    def test_background_cover(self, renderer, bare_layout):
        """测试背景图铺满画布."""
        background = Image.new("RGB", (200, 100), (255, 0, 0))
        image = renderer.render(bare_layout, background=background)
        assert image.getpixel((5, 5)) == RED
        assert image.getpixel((1075, 1075)) == RED

    def test_render_is_pure(self, renderer, layout):
        before = layout.model_dump()
        product = Image.new("RGBA", (50, 50), GREEN)
        renderer.render(layout, product=product, selected_layer_id=layout.text_layers[0].id)
        assert layout.model_dump() == before
        assert product.size == (50, 50)


class TestProduct:
    """商品图绘制测试类."""

    def test_centered_in_frame(self, renderer, bare_layout):
        product = Image.new("RGBA", (100, 100), GREEN)
        image = renderer.render(bare_layout, product=product, export_mode=True)

        assert image.getpixel((540, 550)) == GREEN
        assert image.getpixel((540, 620)) != GREEN

    def test_scale_and_offset(self, renderer, bare_layout):
        bare_layout.placement.scale = 2.0
        bare_layout.placement.move_to(-200, 0)
        product = Image.new("RGBA", (100, 100), GREEN)

        image = renderer.render(bare_layout, product=product, export_mode=True)

        assert image.getpixel((340, 550)) == GREEN
        assert image.getpixel((430, 550)) == GREEN
        assert image.getpixel((540, 550)) != GREEN

    def test_clipped_to_frame(self, renderer, bare_layout):
        """测试超出商品框的部分不绘制."""
        product = Image.new("RGBA", (3000, 3000), GREEN)
        image = renderer.render(bare_layout, product=product, export_mode=True)

        assert image.getpixel((205, 305)) == GREEN
        assert image.getpixel((875, 795)) == GREEN
        assert image.getpixel((195, 500)) != GREEN
        assert image.getpixel((540, 805)) != GREEN

    def test_frame_outside_canvas(self, renderer):
        """测试商品框部分超出画布时不报错."""
        layout = LayoutModel(frame=Frame(x=-100, y=900, width=400, height=400))
        product = Image.new("RGBA", (1000, 1000), GREEN)
        image = renderer.render(layout, product=product, export_mode=True)
        assert image.getpixel((0, 1079)) == GREEN

    def test_product_moved_out_of_frame(self, renderer, bare_layout):
        bare_layout.placement.move_to(5000, 5000)
        product = Image.new("RGBA", (10, 10), GREEN)
        image = renderer.render(bare_layout, product=product, export_mode=True)
        assert image.getpixel((540, 550)) != GREEN


class TestGuides:
    """辅助线测试类."""

    def test_export_hides_handle(self, renderer, bare_layout):
        """测试导出模式不绘制缩放手柄."""
        preview = renderer.render(bare_layout)
        exported = renderer.render(bare_layout, export_mode=True)

        assert preview.getpixel((875, 795)) != exported.getpixel((875, 795))
        assert exported.getpixel((875, 795)) == exported.getpixel((300, 700))

    def test_placeholder_in_export(self, renderer, bare_layout):
        """测试没有商品图时导出也保留占位区域."""
        exported = renderer.render(bare_layout, export_mode=True)
        assert exported.getpixel((300, 700)) != exported.getpixel((100, 100))

    def test_selection_outline(self, renderer):
        layer = TextLayer(content="Sale", x=540, y=200, font_size=50)
        layout = LayoutModel(text_layers=[layer])

        plain = renderer.render(layout)
        selected = renderer.render(layout, selected_layer_id=layer.id)
        exported = renderer.render(layout, selected_layer_id=layer.id, export_mode=True)

        assert differs(plain, selected)
        assert not differs(exported, renderer.render(layout, export_mode=True))

    def test_unknown_selection_ignored(self, renderer, layout):
        plain = renderer.render(layout)
        assert not differs(plain, renderer.render(layout, selected_layer_id="text-missing"))


class TestTextLayers:
    """文字绘制测试类."""

    def test_text_drawn(self, renderer, bare_layout):
        with_text = bare_layout.model_copy(deep=True)
        with_text.add_layer(TextLayer(content="Sale", x=540, y=150, font_size=60, color="#ffff00"))

        assert differs(renderer.render(bare_layout), renderer.render(with_text))

    def test_empty_text_skipped(self, renderer, bare_layout):
        with_empty = bare_layout.model_copy(deep=True)
        with_empty.add_layer(TextLayer(content="", x=540, y=150))
        assert not differs(renderer.render(bare_layout), renderer.render(with_empty))

    def test_module_function(self, layout):
        assert render_composition(layout, export_mode=True).size == (1080, 1080)
