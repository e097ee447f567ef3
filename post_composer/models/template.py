"""模板数据模型.

模板是命名的版面快照：商品框几何、文字图层（深拷贝）以及可选的内嵌图片。
图片以 data URL 形式内嵌，模板不依赖任何外部文件。
"""

from __future__ import annotations

import json
import uuid
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from post_composer.models.layout import AspectPreset, Frame, TextLayer

# 旧版文档（扁平字段、驼峰命名）到当前字段的映射
_LEGACY_FRAME_KEYS = {"frameX": "x", "frameY": "y", "frameW": "width", "frameH": "height"}
_LEGACY_LAYER_KEYS = {"fontSize": "font_size", "fontFamily": "font_family"}


def generate_template_id() -> str:
    """生成唯一的模板ID."""
    return f"tpl-{uuid.uuid4().hex[:12]}"


def _upgrade_layer(data: Any) -> Any:
    if not isinstance(data, dict):
        return data
    upgraded = dict(data)
    for old, new in _LEGACY_LAYER_KEYS.items():
        if old in upgraded and new not in upgraded:
            upgraded[new] = upgraded.pop(old)
    return upgraded


class Template(BaseModel):
    """模板.

    Attributes:
        id: 模板ID，创建时生成，编辑后保持不变（用于按ID覆盖保存）
        name: 显示名称
        frame: 商品框几何
        text_layers: 文字图层副本
        aspect_preset: 保存时的画布预设
        background_image: 背景图 data URL
        product_image: 商品图 data URL
        created_at: 创建时间
        updated_at: 最近保存时间
    """

    id: str = Field(default_factory=generate_template_id, description="模板ID")
    name: str = Field(max_length=100, description="模板名称")
    frame: Frame = Field(default_factory=Frame)
    text_layers: list[TextLayer] = Field(default_factory=list)
    aspect_preset: Optional[AspectPreset] = Field(default=None)
    background_image: Optional[str] = Field(default=None, description="背景图 data URL")
    product_image: Optional[str] = Field(default=None, description="商品图 data URL")
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("模板名称不能为空")
        return v

    @model_validator(mode="before")
    @classmethod
    def upgrade_legacy_document(cls, data: Any) -> Any:
        """兼容扁平 frameX/frameY/frameW/frameH 和 textLayers 的旧文档."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if "frame" not in data and any(key in data for key in _LEGACY_FRAME_KEYS):
            data["frame"] = {
                new: data.pop(old) for old, new in _LEGACY_FRAME_KEYS.items() if old in data
            }
        if "text_layers" not in data and "textLayers" in data:
            data["text_layers"] = data.pop("textLayers")
        if isinstance(data.get("text_layers"), list):
            data["text_layers"] = [_upgrade_layer(layer) for layer in data["text_layers"]]
        return data

    @property
    def has_images(self) -> bool:
        return bool(self.background_image or self.product_image)

    def to_document(self) -> dict[str, Any]:
        """转换为可 JSON 序列化的文档."""
        return self.model_dump(mode="json")

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> "Template":
        """从文档创建模板.

        Raises:
            ValueError: 文档字段无效
        """
        return cls.model_validate(data)

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_document(), ensure_ascii=False, indent=indent)
