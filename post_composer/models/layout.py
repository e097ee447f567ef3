"""版面数据模型.

编辑器中唯一的权威状态：商品框、商品图摆放、文字图层列表和画布尺寸预设。

Features:
    - 商品框最小尺寸约束
    - 商品图缩放范围约束
    - 文字图层按插入顺序绘制（后插入的在上层）
    - JSON 序列化/反序列化（工作区保存）
"""

from __future__ import annotations

import json
import uuid
from enum import Enum
from typing import Optional

from PIL import ImageColor
from pydantic import BaseModel, ConfigDict, Field, field_validator

from post_composer.utils.constants import (
    DEFAULT_FRAME,
    DEFAULT_LAYER_COLOR,
    DEFAULT_LAYER_CONTENT,
    DEFAULT_LAYER_FONT_FAMILY,
    DEFAULT_LAYER_FONT_SIZE,
    DEFAULT_TITLE_COLOR,
    DEFAULT_TITLE_CONTENT,
    DEFAULT_TITLE_FONT_FAMILY,
    DEFAULT_TITLE_FONT_SIZE,
    DEFAULT_TITLE_POSITION,
    MAX_PRODUCT_SCALE,
    MIN_FRAME_SIZE,
    MIN_PRODUCT_SCALE,
)


# ===================
# 辅助函数
# ===================


def generate_layer_id() -> str:
    """生成唯一的图层ID.

    每次调用都返回新值，图层 ID 不会被复用。
    """
    return f"text-{uuid.uuid4().hex[:12]}"


def normalize_color(value: str) -> str:
    """校验颜色并统一为小写的 #rrggbb.

    Raises:
        ValueError: 无法解析的颜色
    """
    try:
        rgb = ImageColor.getrgb(value.strip())
    except (ValueError, AttributeError) as e:
        raise ValueError(f"无效的颜色值: {value!r}") from e
    return "#{:02x}{:02x}{:02x}".format(*rgb[:3])


def clamp_scale(value: float) -> float:
    """把缩放比例限制在允许范围内."""
    return max(MIN_PRODUCT_SCALE, min(MAX_PRODUCT_SCALE, value))


# ===================
# 枚举定义
# ===================


class AspectPreset(str, Enum):
    """画布尺寸预设（逻辑分辨率）."""

    SQUARE = "1:1"
    PORTRAIT = "4:5"
    STORY = "9:16"
    LANDSCAPE = "16:9"

    @property
    def size(self) -> tuple[int, int]:
        """逻辑分辨率 (width, height)."""
        return ASPECT_PRESET_SIZES[self]

    @property
    def label(self) -> str:
        """显示名称."""
        width, height = self.size
        return f"{self.value} ({width}×{height})"


ASPECT_PRESET_SIZES: dict[AspectPreset, tuple[int, int]] = {
    AspectPreset.SQUARE: (1080, 1080),
    AspectPreset.PORTRAIT: (1080, 1350),
    AspectPreset.STORY: (1080, 1920),
    AspectPreset.LANDSCAPE: (1920, 1080),
}


# ===================
# 商品框
# ===================


class Frame(BaseModel):
    """商品框（商品图的裁剪区域）.

    Attributes:
        x: 左上角 X（画布逻辑坐标）
        y: 左上角 Y
        width: 宽度，不小于最小尺寸
        height: 高度，不小于最小尺寸
    """

    model_config = ConfigDict(validate_assignment=True)

    x: float = Field(default=DEFAULT_FRAME[0], description="左上角X")
    y: float = Field(default=DEFAULT_FRAME[1], description="左上角Y")
    width: float = Field(default=DEFAULT_FRAME[2], ge=MIN_FRAME_SIZE, description="宽度")
    height: float = Field(default=DEFAULT_FRAME[3], ge=MIN_FRAME_SIZE, description="高度")

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> tuple[float, float]:
        """框中心点."""
        return (self.x + self.width / 2, self.y + self.height / 2)

    def contains(self, x: float, y: float) -> bool:
        """点是否落在框内（左上闭、右下开）."""
        return self.x <= x < self.right and self.y <= y < self.bottom

    def move_to(self, x: float, y: float) -> None:
        """移动左上角到指定位置."""
        self.x = x
        self.y = y

    def resize(self, width: float, height: float) -> None:
        """调整尺寸，低于最小尺寸时取最小值."""
        width = max(MIN_FRAME_SIZE, width)
        height = max(MIN_FRAME_SIZE, height)
        self.width = width
        self.height = height


# ===================
# 商品图摆放
# ===================


class ProductPlacement(BaseModel):
    """商品图在商品框内的摆放.

    偏移量相对于商品框中心，与商品框尺寸无关。
    """

    model_config = ConfigDict(validate_assignment=True)

    scale: float = Field(
        default=1.0,
        ge=MIN_PRODUCT_SCALE,
        le=MAX_PRODUCT_SCALE,
        description="缩放比例",
    )
    offset_x: float = Field(default=0.0, description="X偏移")
    offset_y: float = Field(default=0.0, description="Y偏移")

    def set_scale(self, value: float) -> float:
        """设置缩放（自动限制范围），返回实际生效的值."""
        self.scale = clamp_scale(value)
        return self.scale

    def move_to(self, offset_x: float, offset_y: float) -> None:
        self.offset_x = offset_x
        self.offset_y = offset_y

    def reset_offset(self) -> None:
        """复位到商品框中心."""
        self.offset_x = 0.0
        self.offset_y = 0.0


# ===================
# 文字图层
# ===================


class TextLayer(BaseModel):
    """文字图层.

    (x, y) 为锚点：x 是水平中心，y 是基线。内容按原样保存，
    只在渲染和测量时转为大写。

    Example:
        >>> layer = TextLayer(content="Sale", x=540, y=540)
        >>> layer.display_text
        'SALE'
    """

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(default_factory=generate_layer_id, description="图层唯一ID")
    content: str = Field(default=DEFAULT_LAYER_CONTENT, max_length=500, description="文字内容")
    x: float = Field(default=540.0, description="水平中心")
    y: float = Field(default=540.0, description="基线")
    font_size: float = Field(default=DEFAULT_LAYER_FONT_SIZE, gt=0, le=1000, description="字号")
    font_family: str = Field(default=DEFAULT_LAYER_FONT_FAMILY, min_length=1, description="字体")
    color: str = Field(default=DEFAULT_LAYER_COLOR, description="填充颜色")
    bold: bool = Field(default=True, description="粗体")

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        return normalize_color(v)

    @property
    def display_text(self) -> str:
        """渲染用文本（大写）."""
        return self.content.upper()

    def move_to(self, x: float, y: float) -> None:
        """移动锚点."""
        self.x = x
        self.y = y

    def with_new_id(self) -> "TextLayer":
        """深拷贝并分配新ID."""
        return self.model_copy(update={"id": generate_layer_id()}, deep=True)

    @classmethod
    def create_title(cls) -> "TextLayer":
        """默认标题图层."""
        return cls(
            content=DEFAULT_TITLE_CONTENT,
            x=DEFAULT_TITLE_POSITION[0],
            y=DEFAULT_TITLE_POSITION[1],
            font_size=DEFAULT_TITLE_FONT_SIZE,
            font_family=DEFAULT_TITLE_FONT_FAMILY,
            color=DEFAULT_TITLE_COLOR,
            bold=True,
        )


# ===================
# 版面
# ===================


class LayoutModel(BaseModel):
    """版面（聚合根）.

    text_layers 的顺序即绘制顺序和命中优先级：越靠后越在上层。

    Attributes:
        frame: 商品框
        placement: 商品图摆放
        text_layers: 文字图层列表
        aspect_preset: 画布尺寸预设
    """

    frame: Frame = Field(default_factory=Frame)
    placement: ProductPlacement = Field(default_factory=ProductPlacement)
    text_layers: list[TextLayer] = Field(default_factory=list)
    aspect_preset: AspectPreset = Field(default=AspectPreset.SQUARE)

    @property
    def canvas_size(self) -> tuple[int, int]:
        """画布逻辑分辨率."""
        return self.aspect_preset.size

    @property
    def canvas_width(self) -> int:
        return self.canvas_size[0]

    @property
    def canvas_height(self) -> int:
        return self.canvas_size[1]

    @property
    def layer_count(self) -> int:
        return len(self.text_layers)

    def get_layer(self, layer_id: Optional[str]) -> Optional[TextLayer]:
        """根据ID获取图层，不存在返回None."""
        if layer_id is None:
            return None
        for layer in self.text_layers:
            if layer.id == layer_id:
                return layer
        return None

    def add_layer(self, layer: TextLayer) -> None:
        """添加图层到最上层."""
        self.text_layers.append(layer)

    def remove_layer(self, layer_id: str) -> bool:
        """删除图层，返回是否删除成功."""
        for i, layer in enumerate(self.text_layers):
            if layer.id == layer_id:
                self.text_layers.pop(i)
                return True
        return False

    def replace_layer(self, layer: TextLayer) -> bool:
        """用同ID的新图层整体替换，保持原有顺序."""
        for i, existing in enumerate(self.text_layers):
            if existing.id == layer.id:
                self.text_layers[i] = layer
                return True
        return False

    def set_aspect_preset(self, preset: AspectPreset) -> None:
        """切换画布尺寸预设.

        只改变画布的逻辑分辨率，商品框和图层坐标保持原值。
        """
        self.aspect_preset = preset

    @classmethod
    def default(cls) -> "LayoutModel":
        """默认版面（带一个标题图层）."""
        return cls(text_layers=[TextLayer.create_title()])

    def to_json(self, indent: int = 2) -> str:
        """序列化为JSON字符串."""
        return json.dumps(self.model_dump(mode="json"), ensure_ascii=False, indent=indent)

    @classmethod
    def from_json(cls, json_str: str) -> "LayoutModel":
        """从JSON字符串反序列化.

        Raises:
            ValueError: JSON 格式或字段无效（含 pydantic.ValidationError）
        """
        return cls.model_validate(json.loads(json_str))
