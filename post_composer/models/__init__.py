"""数据模型模块."""

from post_composer.models.layout import (
    AspectPreset,
    Frame,
    LayoutModel,
    ProductPlacement,
    TextLayer,
    generate_layer_id,
)
from post_composer.models.template import Template, generate_template_id

__all__ = [
    "AspectPreset",
    "Frame",
    "LayoutModel",
    "ProductPlacement",
    "TextLayer",
    "generate_layer_id",
    "Template",
    "generate_template_id",
]
