"""指针坐标到画布逻辑坐标的变换.

画布以固定的逻辑分辨率绘制，再按任意比例缩放显示。每个指针事件都要用
当时的显示区域重新计算，显示区域不跨事件缓存。
"""

from __future__ import annotations

from dataclasses import dataclass

from post_composer.utils.exceptions import GeometryError


@dataclass(frozen=True)
class PointerEvent:
    """指针事件（显示坐标）.

    Attributes:
        client_x: 指针 X（显示像素）
        client_y: 指针 Y（显示像素）
        shift: 按下时是否按住 Shift
    """

    client_x: float
    client_y: float
    shift: bool = False


@dataclass(frozen=True)
class RenderedBox:
    """画布当前在屏幕上的显示区域（显示像素）."""

    left: float
    top: float
    width: float
    height: float


@dataclass(frozen=True)
class CanvasPoint:
    """画布逻辑坐标."""

    x: float
    y: float

    def __sub__(self, other: "CanvasPoint") -> "CanvasPoint":
        return CanvasPoint(self.x - other.x, self.y - other.y)


@dataclass(frozen=True)
class Rect:
    """轴对齐矩形，左上闭、右下开."""

    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    def contains(self, point: CanvasPoint) -> bool:
        return self.left <= point.x < self.right and self.top <= point.y < self.bottom

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.left, self.top, self.right, self.bottom)


def to_canvas_space(
    event: PointerEvent,
    box: RenderedBox,
    canvas_size: tuple[int, int],
) -> CanvasPoint:
    """把指针位置换算为画布逻辑坐标.

    Args:
        event: 指针事件
        box: 画布当前的显示区域
        canvas_size: 画布逻辑分辨率 (width, height)

    Returns:
        画布逻辑坐标

    Raises:
        GeometryError: 显示区域宽或高不为正
    """
    if box.width <= 0 or box.height <= 0:
        raise GeometryError(f"画布显示区域无效: {box.width}x{box.height}")

    canvas_width, canvas_height = canvas_size
    x = (event.client_x - box.left) * (canvas_width / box.width)
    y = (event.client_y - box.top) * (canvas_height / box.height)
    return CanvasPoint(x, y)


def fit_box(
    canvas_size: tuple[int, int],
    available_width: float,
    available_height: float,
) -> RenderedBox:
    """在可用区域内等比居中放置画布，返回显示区域."""
    canvas_width, canvas_height = canvas_size
    if available_width <= 0 or available_height <= 0:
        return RenderedBox(0, 0, 0, 0)

    scale = min(available_width / canvas_width, available_height / canvas_height)
    width = canvas_width * scale
    height = canvas_height * scale
    left = (available_width - width) / 2
    top = (available_height - height) / 2
    return RenderedBox(left, top, width, height)
