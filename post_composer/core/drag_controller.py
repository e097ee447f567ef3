"""拖拽状态机.

状态: IDLE / RESIZE_HANDLE / TEXT / FRAME / PRODUCT，初始为 IDLE。

- 只有指针按下才会离开 IDLE，进入哪个状态由命中检测结果决定。
- 拖动文字、商品框、商品图时记录「指针 - 参考点」的偏移，之后每次移动
  都按 ``指针 - 偏移`` 计算参考点的绝对位置。
- 缩放手柄不记录偏移，宽高直接取 ``指针 - 框左上角``，不小于最小尺寸。
- 指针抬起或离开画布无条件回到 IDLE。
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from post_composer.core.geometry import CanvasPoint
from post_composer.core.hit_testing import Target, TargetKind
from post_composer.models.layout import LayoutModel
from post_composer.utils.constants import WHEEL_SCALE_STEP
from post_composer.utils.logger import setup_logger

logger = setup_logger(__name__)


class DragMode(str, Enum):
    """拖拽状态."""

    IDLE = "idle"
    RESIZE_HANDLE = "resize_handle"
    TEXT = "text"
    FRAME = "frame"
    PRODUCT = "product"


@dataclass(frozen=True)
class DragState:
    """当前拖拽状态.

    Attributes:
        mode: 拖拽模式
        layer_id: 拖动文字时的图层ID
        offset: 按下时「指针 - 参考点」的偏移
    """

    mode: DragMode = DragMode.IDLE
    layer_id: Optional[str] = None
    offset: Optional[CanvasPoint] = None

    @property
    def is_idle(self) -> bool:
        return self.mode == DragMode.IDLE


IDLE = DragState()


class DragController:
    """拖拽控制器.

    每次指针移动只对版面做一处修改，具体修改由当前状态决定。

    Example:
        >>> drag = DragController()
        >>> drag.begin(Target.frame_body(), CanvasPoint(300, 400), layout, frame_modifier=True)
        <DragMode.FRAME: 'frame'>
        >>> drag.move(CanvasPoint(320, 410), layout)
        True
        >>> drag.end()
    """

    def __init__(self) -> None:
        self._state: DragState = IDLE

    @property
    def state(self) -> DragState:
        return self._state

    @property
    def mode(self) -> DragMode:
        return self._state.mode

    @property
    def is_dragging(self) -> bool:
        return not self._state.is_idle

    def begin(
        self,
        target: Target,
        point: CanvasPoint,
        layout: LayoutModel,
        frame_modifier: bool = False,
    ) -> DragMode:
        """指针按下，根据命中目标进入拖拽状态.

        Args:
            target: 命中检测结果
            point: 按下位置（画布坐标）
            layout: 当前版面
            frame_modifier: 按下时修饰键是否成立（移动商品框而不是商品图）

        Returns:
            进入的拖拽模式
        """
        if target.kind == TargetKind.RESIZE_HANDLE:
            self._state = DragState(DragMode.RESIZE_HANDLE)

        elif target.kind == TargetKind.TEXT_LAYER:
            layer = layout.get_layer(target.layer_id)
            if layer is None:
                self._state = IDLE
            else:
                self._state = DragState(
                    DragMode.TEXT,
                    layer_id=layer.id,
                    offset=CanvasPoint(point.x - layer.x, point.y - layer.y),
                )

        elif target.kind == TargetKind.FRAME_BODY:
            if frame_modifier:
                frame = layout.frame
                self._state = DragState(
                    DragMode.FRAME,
                    offset=CanvasPoint(point.x - frame.x, point.y - frame.y),
                )
            else:
                placement = layout.placement
                self._state = DragState(
                    DragMode.PRODUCT,
                    offset=CanvasPoint(point.x - placement.offset_x, point.y - placement.offset_y),
                )

        else:
            self._state = IDLE

        if not self._state.is_idle:
            logger.debug(f"开始拖拽: {self._state.mode.value} @ ({point.x:.1f}, {point.y:.1f})")
        return self._state.mode

    def move(self, point: CanvasPoint, layout: LayoutModel) -> bool:
        """指针移动.

        Returns:
            版面是否被修改
        """
        state = self._state
        if state.is_idle:
            return False

        if state.mode == DragMode.RESIZE_HANDLE:
            frame = layout.frame
            frame.resize(point.x - frame.x, point.y - frame.y)
            return True

        target = point - state.offset  # type: ignore[operator]

        if state.mode == DragMode.TEXT:
            layer = layout.get_layer(state.layer_id)
            if layer is None:
                # 拖动过程中图层被删除
                self.end()
                return False
            layer.move_to(target.x, target.y)
        elif state.mode == DragMode.FRAME:
            layout.frame.move_to(target.x, target.y)
        elif state.mode == DragMode.PRODUCT:
            layout.placement.move_to(target.x, target.y)

        return True

    def end(self) -> None:
        """指针抬起或离开画布，回到 IDLE."""
        if not self._state.is_idle:
            logger.debug(f"结束拖拽: {self._state.mode.value}")
        self._state = IDLE

    @staticmethod
    def wheel(layout: LayoutModel, notches: float, has_product: bool) -> bool:
        """滚轮调整商品图缩放，与拖拽状态无关.

        Args:
            layout: 当前版面
            notches: 滚轮刻度数（向上为正）
            has_product: 是否已加载商品图

        Returns:
            缩放是否变化
        """
        if not has_product or notches == 0:
            return False
        before = layout.placement.scale
        after = layout.placement.set_scale(before + notches * WHEEL_SCALE_STEP)
        return after != before
