"""模板转换单元测试."""

from datetime import datetime

from post_composer.models.layout import AspectPreset, LayoutModel, TextLayer
from post_composer.models.template import Template
from post_composer.services.template_codec import from_template, to_template


class TestToTemplate:
    """版面转模板测试类."""

    def test_snapshot(self, layout):
        layout.aspect_preset = AspectPreset.PORTRAIT
        template = to_template(layout, "促销", product_image="data:image/png;base64,AAAA")

        assert template.name == "促销"
        assert template.frame == layout.frame
        assert template.text_layers == layout.text_layers
        assert template.aspect_preset == AspectPreset.PORTRAIT
        assert template.product_image == "data:image/png;base64,AAAA"
        assert template.background_image is None

    def test_deep_copy(self, layout):
        """测试保存后修改版面不影响模板."""
        template = to_template(layout, "促销")

        layout.text_layers[0].move_to(1, 1)
        layout.text_layers[0].content = "changed"
        layout.frame.move_to(0, 0)

        assert template.text_layers[0].x == 540
        assert template.text_layers[0].content == "ENGINE OIL FILTER"
        assert template.frame.x == 200

    def test_keeps_id_and_created_at(self, layout):
        created = datetime(2024, 1, 1, 12, 0, 0)
        template = to_template(layout, "促销", template_id="tpl-abc", created_at=created)
        assert template.id == "tpl-abc"
        assert template.created_at == created


class TestFromTemplate:
    """模板转版面修改测试类."""

    def test_fresh_layer_ids(self):
        template = Template(name="促销", text_layers=[TextLayer(content="A"), TextLayer(content="B")])

        first = from_template(template)
        second = from_template(template)

        template_ids = {l.id for l in template.text_layers}
        first_ids = {l.id for l in first.text_layers}
        second_ids = {l.id for l in second.text_layers}
        assert first_ids.isdisjoint(template_ids)
        assert first_ids.isdisjoint(second_ids)
        assert [l.content for l in first.text_layers] == ["A", "B"]

    def test_patch_is_independent(self):
        template = Template(name="促销", text_layers=[TextLayer(content="A")])
        patch = from_template(template)

        patch.text_layers[0].content = "changed"
        patch.frame.move_to(0, 0)

        assert template.text_layers[0].content == "A"
        assert template.frame.x == 200

    def test_pending_images(self):
        template = Template(name="促销", background_image="data:image/png;base64,AAAA")
        patch = from_template(template)
        assert patch.pending_images == 1
        assert patch.product_image is None

    def test_round_trip_geometry(self, layout):
        patch = from_template(to_template(layout, "促销"))
        applied = LayoutModel(frame=patch.frame, text_layers=patch.text_layers)

        assert applied.frame == layout.frame
        assert [(l.content, l.x, l.y) for l in applied.text_layers] == [
            (l.content, l.x, l.y) for l in layout.text_layers
        ]
