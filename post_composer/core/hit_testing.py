"""命中检测.

按固定优先级判断画布上的一点落在哪个可交互目标上：

1. 商品框右下角的缩放手柄（热区比可见手柄更大）
2. 文字图层，从最上层到最下层
3. 商品框内部
4. 空白
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from post_composer.core.geometry import CanvasPoint, Rect
from post_composer.models.layout import Frame, LayoutModel, TextLayer
from post_composer.services.text_metrics import text_hit_box
from post_composer.utils.constants import RESIZE_HOTSPOT_INSET, RESIZE_HOTSPOT_OUTSET

# 命中框计算函数，默认与渲染器共用 text_hit_box
HitBoxFn = Callable[[TextLayer], Rect]


class TargetKind(str, Enum):
    """命中目标类型."""

    RESIZE_HANDLE = "resize_handle"
    TEXT_LAYER = "text_layer"
    FRAME_BODY = "frame_body"
    EMPTY = "empty"


@dataclass(frozen=True)
class Target:
    """命中结果.

    Attributes:
        kind: 目标类型
        layer_id: 命中文字图层时的图层ID
    """

    kind: TargetKind
    layer_id: Optional[str] = None

    @classmethod
    def resize_handle(cls) -> "Target":
        return cls(TargetKind.RESIZE_HANDLE)

    @classmethod
    def text_layer(cls, layer_id: str) -> "Target":
        return cls(TargetKind.TEXT_LAYER, layer_id)

    @classmethod
    def frame_body(cls) -> "Target":
        return cls(TargetKind.FRAME_BODY)

    @classmethod
    def empty(cls) -> "Target":
        return cls(TargetKind.EMPTY)


def resize_hotspot(frame: Frame) -> Rect:
    """缩放手柄热区：以右下角为基准向内 20、向外 10."""
    return Rect(
        left=frame.right - RESIZE_HOTSPOT_INSET,
        top=frame.bottom - RESIZE_HOTSPOT_INSET,
        right=frame.right + RESIZE_HOTSPOT_OUTSET,
        bottom=frame.bottom + RESIZE_HOTSPOT_OUTSET,
    )


def hit_test_layers(
    point: CanvasPoint,
    layers: list[TextLayer],
    hit_box: HitBoxFn = text_hit_box,
) -> Optional[TextLayer]:
    """从最上层开始查找命中的文字图层."""
    for layer in reversed(layers):
        if hit_box(layer).contains(point):
            return layer
    return None


def hit_test(
    point: CanvasPoint,
    layout: LayoutModel,
    hit_box: HitBoxFn = text_hit_box,
) -> Target:
    """命中检测.

    Args:
        point: 画布逻辑坐标
        layout: 当前版面
        hit_box: 文字命中框函数

    Returns:
        命中目标，未命中任何元素时为 EMPTY
    """
    if resize_hotspot(layout.frame).contains(point):
        return Target.resize_handle()

    layer = hit_test_layers(point, layout.text_layers, hit_box)
    if layer is not None:
        return Target.text_layer(layer.id)

    if layout.frame.contains(point.x, point.y):
        return Target.frame_body()

    return Target.empty()
