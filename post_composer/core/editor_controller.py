"""编辑器控制器.

持有唯一的版面、当前选中图层、拖拽状态和两个图片槽位。所有交互都经由这里
修改版面，每个操作要么完整生效，要么不做任何修改。

Features:
    - 指针按下/移动/抬起/离开与滚轮
    - 文字图层增删改和选中
    - 商品图复位、缩放和画布预设切换
    - 图片解码请求与过期结果丢弃
    - 应用模板
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from PIL import Image
from pydantic import ValidationError

from post_composer.core.drag_controller import DragController
from post_composer.core.geometry import PointerEvent, RenderedBox, to_canvas_space
from post_composer.core.hit_testing import HitBoxFn, Target, TargetKind, hit_test
from post_composer.models.layout import AspectPreset, LayoutModel, TextLayer
from post_composer.services.image_loader import DecodeRequest, DecodeResult, ImageSlot
from post_composer.services.template_codec import TemplatePatch
from post_composer.services.text_metrics import text_hit_box
from post_composer.utils.constants import (
    DEFAULT_LAYER_COLOR,
    DEFAULT_LAYER_CONTENT,
    DEFAULT_LAYER_FONT_FAMILY,
    DEFAULT_LAYER_FONT_SIZE,
    WHEEL_NOTCH_DELTA,
)
from post_composer.utils.exceptions import InvalidInputError, LayerNotFoundError
from post_composer.utils.logger import setup_logger

logger = setup_logger(__name__)

# 允许通过属性面板修改的图层字段
EDITABLE_LAYER_FIELDS = ("content", "font_size", "font_family", "color", "bold")


@dataclass
class SlotState:
    """图片槽位状态.

    Attributes:
        reference: 当前图片的 data URL
        image: 解码后的图片，解码完成前为 None
        sequence: 最近一次请求的序号
    """

    reference: Optional[str] = None
    image: Optional[Image.Image] = None
    sequence: int = 0

    @property
    def pending(self) -> bool:
        """已有引用但尚未解码完成."""
        return self.reference is not None and self.image is None


def parse_font_size(value: Any) -> float:
    """解析字号输入.

    Raises:
        InvalidInputError: 不是数字或不为正
    """
    if isinstance(value, bool):
        raise InvalidInputError("字号必须是数字", field="font_size")
    if isinstance(value, str):
        value = value.strip()
    try:
        size = float(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f"字号必须是数字: {value!r}", field="font_size") from None
    if not size > 0:
        raise InvalidInputError("字号必须大于 0", field="font_size")
    return size


class EditorController:
    """编辑器控制器.

    Example:
        >>> editor = EditorController()
        >>> layer = editor.add_text_layer()
        >>> editor.update_active_layer(content="Sale", font_size="64")
        >>> editor.active_layer.font_size
        64.0
    """

    def __init__(
        self,
        layout: Optional[LayoutModel] = None,
        hit_box: HitBoxFn = text_hit_box,
    ) -> None:
        """初始化控制器.

        Args:
            layout: 初始版面，默认使用带标题的默认版面
            hit_box: 文字命中框函数
        """
        self.layout = layout if layout is not None else LayoutModel.default()
        self.drag = DragController()
        self.current_template_id: Optional[str] = None
        self._hit_box = hit_box
        self._selected_layer_id: Optional[str] = None
        self._slots: dict[ImageSlot, SlotState] = {slot: SlotState() for slot in ImageSlot}

    # ========================
    # 状态查询
    # ========================

    @property
    def selected_layer_id(self) -> Optional[str]:
        return self._selected_layer_id

    @property
    def active_layer(self) -> Optional[TextLayer]:
        """当前选中的图层."""
        return self.layout.get_layer(self._selected_layer_id)

    @property
    def canvas_size(self) -> tuple[int, int]:
        return self.layout.canvas_size

    def slot(self, slot: ImageSlot) -> SlotState:
        return self._slots[slot]

    def image(self, slot: ImageSlot) -> Optional[Image.Image]:
        """槽位中已解码的图片."""
        return self._slots[slot].image

    def image_reference(self, slot: ImageSlot) -> Optional[str]:
        """槽位当前的 data URL."""
        return self._slots[slot].reference

    @property
    def background_image(self) -> Optional[Image.Image]:
        return self.image(ImageSlot.BACKGROUND)

    @property
    def product_image(self) -> Optional[Image.Image]:
        return self.image(ImageSlot.PRODUCT)

    @property
    def has_product(self) -> bool:
        """商品图是否已加载."""
        return self.product_image is not None

    # ========================
    # 指针事件
    # ========================

    def target_at(self, event: PointerEvent, box: RenderedBox) -> Target:
        """指针下方的目标（只查询，不修改任何状态）."""
        point = to_canvas_space(event, box, self.canvas_size)
        return hit_test(point, self.layout, self._hit_box)

    def pointer_down(self, event: PointerEvent, box: RenderedBox) -> Target:
        """指针按下：命中检测、更新选中并进入拖拽状态.

        缩放手柄不改变选中；命中文字则选中该图层；
        命中商品框或空白则清除选中。
        """
        point = to_canvas_space(event, box, self.canvas_size)
        target = hit_test(point, self.layout, self._hit_box)

        if target.kind == TargetKind.TEXT_LAYER:
            self._selected_layer_id = target.layer_id
        elif target.kind in (TargetKind.FRAME_BODY, TargetKind.EMPTY):
            self._selected_layer_id = None

        self.drag.begin(target, point, self.layout, frame_modifier=event.shift)
        return target

    def pointer_move(self, event: PointerEvent, box: RenderedBox) -> bool:
        """指针移动，返回版面是否被修改."""
        if not self.drag.is_dragging:
            return False
        point = to_canvas_space(event, box, self.canvas_size)
        return self.drag.move(point, self.layout)

    def pointer_up(self) -> None:
        self.drag.end()

    def pointer_leave(self) -> None:
        self.drag.end()

    def wheel(self, angle_delta: float) -> bool:
        """滚轮缩放商品图.

        Args:
            angle_delta: 滚轮角度增量，一个刻度为 120

        Returns:
            缩放是否变化
        """
        notches = angle_delta / WHEEL_NOTCH_DELTA
        return self.drag.wheel(self.layout, notches, self.has_product)

    # ========================
    # 文字图层
    # ========================

    def add_text_layer(self) -> TextLayer:
        """在画布中心添加默认文字图层并选中."""
        width, height = self.canvas_size
        layer = TextLayer(
            content=DEFAULT_LAYER_CONTENT,
            x=width / 2,
            y=height / 2,
            font_size=DEFAULT_LAYER_FONT_SIZE,
            font_family=DEFAULT_LAYER_FONT_FAMILY,
            color=DEFAULT_LAYER_COLOR,
            bold=True,
        )
        self.layout.add_layer(layer)
        self._selected_layer_id = layer.id
        logger.debug(f"添加图层: {layer.id}")
        return layer

    def delete_active_layer(self) -> bool:
        """删除当前选中的图层，未选中时不做任何事."""
        layer_id = self._selected_layer_id
        if layer_id is None:
            return False
        if self.drag.state.layer_id == layer_id:
            self.drag.end()
        removed = self.layout.remove_layer(layer_id)
        self._selected_layer_id = None
        if removed:
            logger.debug(f"删除图层: {layer_id}")
        return removed

    def update_active_layer(self, **changes: Any) -> TextLayer:
        """修改当前选中图层的属性.

        所有字段一起校验，任一字段无效时图层保持不变。

        Args:
            **changes: content / font_size / font_family / color / bold

        Returns:
            修改后的图层

        Raises:
            InvalidInputError: 未选中图层或字段无效
        """
        layer = self.active_layer
        if layer is None:
            raise InvalidInputError("请先选择一个文字图层")

        unknown = set(changes) - set(EDITABLE_LAYER_FIELDS)
        if unknown:
            raise InvalidInputError(f"不支持修改的字段: {', '.join(sorted(unknown))}")

        if "font_size" in changes:
            changes["font_size"] = parse_font_size(changes["font_size"])
        if "font_family" in changes and isinstance(changes["font_family"], str):
            changes["font_family"] = changes["font_family"].strip()

        data = layer.model_dump()
        data.update(changes)
        try:
            updated = TextLayer.model_validate(data)
        except ValidationError as e:
            error = e.errors()[0]
            field = str(error["loc"][0]) if error.get("loc") else None
            raise InvalidInputError(f"图层属性无效: {error['msg']}", field=field) from e

        self.layout.replace_layer(updated)
        return updated

    def select_layer(self, layer_id: str) -> TextLayer:
        """选中图层.

        Raises:
            LayerNotFoundError: 图层不存在
        """
        layer = self.layout.get_layer(layer_id)
        if layer is None:
            raise LayerNotFoundError(layer_id)
        self._selected_layer_id = layer_id
        return layer

    def clear_selection(self) -> None:
        self._selected_layer_id = None

    # ========================
    # 商品图与画布
    # ========================

    def reset_product_alignment(self) -> None:
        """商品图回到商品框中心."""
        self.layout.placement.reset_offset()

    def set_product_scale(self, value: float) -> float:
        """设置商品图缩放，返回限制范围后的实际值."""
        return self.layout.placement.set_scale(value)

    def set_aspect_preset(self, preset: AspectPreset) -> None:
        """切换画布预设，坐标保持不变."""
        if preset == self.layout.aspect_preset:
            return
        self.drag.end()
        self.layout.set_aspect_preset(preset)
        logger.info(f"画布尺寸切换为 {preset.label}")

    def load_layout(self, layout: LayoutModel) -> None:
        """替换整个版面（恢复工作区）."""
        self.drag.end()
        self.layout = layout
        self._selected_layer_id = None

    # ========================
    # 图片槽位
    # ========================

    def request_image(self, slot: ImageSlot, source: str) -> DecodeRequest:
        """登记一次解码请求.

        槽位引用立即切换到新图片，解码完成前该槽位按未加载处理。

        Args:
            slot: 目标槽位
            source: 图片 data URL

        Returns:
            带最新序号的解码请求
        """
        state = self._slots[slot]
        state.sequence += 1
        state.reference = source
        state.image = None
        return DecodeRequest(slot=slot, sequence=state.sequence, source=source)

    def apply_decode_result(self, result: DecodeResult) -> bool:
        """应用解码结果.

        序号不是该槽位最新请求的结果会被丢弃。

        Returns:
            结果是否被采用
        """
        state = self._slots[result.slot]
        if result.sequence != state.sequence:
            logger.debug(
                f"丢弃过期解码结果: slot={result.slot.value} "
                f"seq={result.sequence} latest={state.sequence}"
            )
            return False

        if not result.ok:
            state.reference = None
            state.image = None
            return False

        state.image = result.image
        return True

    def clear_image(self, slot: ImageSlot) -> None:
        """清空槽位，进行中的解码结果也会被丢弃."""
        state = self._slots[slot]
        state.sequence += 1
        state.reference = None
        state.image = None

    # ========================
    # 模板
    # ========================

    def apply_template(self, patch: TemplatePatch) -> list[DecodeRequest]:
        """应用模板.

        商品框、图层和画布预设立即生效；模板内嵌的图片返回为解码请求，
        没有内嵌的槽位保持原图。

        Returns:
            需要解码的请求列表
        """
        self.drag.end()
        self.layout.frame = patch.frame.model_copy(deep=True)
        self.layout.text_layers = [layer.model_copy(deep=True) for layer in patch.text_layers]
        if patch.aspect_preset is not None:
            self.layout.aspect_preset = patch.aspect_preset
        self._selected_layer_id = None
        self.current_template_id = patch.template_id

        requests = []
        if patch.background_image:
            requests.append(self.request_image(ImageSlot.BACKGROUND, patch.background_image))
        if patch.product_image:
            requests.append(self.request_image(ImageSlot.PRODUCT, patch.product_image))

        logger.info(f"应用模板: {patch.name}")
        return requests
