"""模板编解码.

- 保存：从当前版面生成模板，文字图层深拷贝，图片以 data URL 内嵌
- 应用：商品框几何原样复制，每个文字图层都重新分配 ID，
  内嵌图片交给解码流程异步填充
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from post_composer.models.layout import AspectPreset, Frame, LayoutModel, TextLayer
from post_composer.models.template import Template
from post_composer.utils.logger import setup_logger

logger = setup_logger(__name__)


@dataclass
class TemplatePatch:
    """应用模板时对版面的修改.

    几何部分立即生效；图片部分是待解码的 data URL，为 None 表示该槽位保持不变。
    """

    template_id: str
    name: str
    frame: Frame
    text_layers: list[TextLayer] = field(default_factory=list)
    aspect_preset: Optional[AspectPreset] = None
    background_image: Optional[str] = None
    product_image: Optional[str] = None

    @property
    def pending_images(self) -> int:
        return sum(1 for ref in (self.background_image, self.product_image) if ref)


def to_template(
    layout: LayoutModel,
    name: str,
    background_image: Optional[str] = None,
    product_image: Optional[str] = None,
    template_id: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> Template:
    """从版面生成模板.

    Args:
        layout: 当前版面
        name: 模板名称
        background_image: 背景图 data URL
        product_image: 商品图 data URL
        template_id: 覆盖保存时沿用的模板ID，为 None 时生成新ID
        created_at: 覆盖保存时沿用的创建时间

    Returns:
        与版面不共享任何可变对象的模板

    Raises:
        pydantic.ValidationError: 名称为空
    """
    data = {
        "name": name,
        "frame": layout.frame.model_copy(deep=True),
        "text_layers": [layer.model_copy(deep=True) for layer in layout.text_layers],
        "aspect_preset": layout.aspect_preset,
        "background_image": background_image,
        "product_image": product_image,
    }
    if template_id:
        data["id"] = template_id
    if created_at:
        data["created_at"] = created_at
    return Template(**data)


def from_template(template: Template) -> TemplatePatch:
    """把模板转换为版面修改.

    每个文字图层都分配新ID，同一模板多次应用得到的图层ID互不相同。
    """
    patch = TemplatePatch(
        template_id=template.id,
        name=template.name,
        frame=template.frame.model_copy(deep=True),
        text_layers=[layer.with_new_id() for layer in template.text_layers],
        aspect_preset=template.aspect_preset,
        background_image=template.background_image,
        product_image=template.product_image,
    )
    logger.debug(
        f"模板转换: {template.name}, 图层 {len(patch.text_layers)} 个, "
        f"待解码图片 {patch.pending_images} 张"
    )
    return patch
