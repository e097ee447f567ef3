"""画布渲染引擎.

把版面和两张图片绘制成画布逻辑分辨率的 RGBA 图片。

绘制顺序:
    1. 背景图（等比铺满、居中裁剪），没有时用纯色填充
    2. 商品图（裁剪到商品框内，按缩放和偏移摆放），没有时绘制占位
    3. 商品框虚线边框和缩放手柄（辅助线）
    4. 文字图层（按插入顺序，大写，水平居中于锚点，y 为基线）
    5. 选中图层的虚线框（辅助线）

导出模式下不绘制辅助线。
"""

from __future__ import annotations

from typing import Optional

from PIL import Image, ImageDraw, ImageFont

from post_composer.models.layout import Frame, LayoutModel, TextLayer
from post_composer.services.text_metrics import font_for_layer, resolve_font, text_hit_box
from post_composer.utils.constants import CANVAS_FALLBACK_COLOR, RESIZE_HANDLE_SIZE
from post_composer.utils.image_utils import cover_fit, draw_dashed_rectangle, ensure_rgba
from post_composer.utils.logger import setup_logger

logger = setup_logger(__name__)


# ===================
# 样式常量
# ===================

FRAME_BORDER_COLOR = (211, 47, 47, 102)
FRAME_BORDER_WIDTH = 2
FRAME_BORDER_DASH = (10, 5)

HANDLE_COLOR = (211, 47, 47, 204)

PLACEHOLDER_FILL = (255, 255, 255, 13)
PLACEHOLDER_TEXT = "PRODUCT AREA"
PLACEHOLDER_TEXT_COLOR = (255, 255, 255, 51)
PLACEHOLDER_FONT_FAMILY = "Arial"
PLACEHOLDER_FONT_SIZE = 20

SELECTION_COLOR = (255, 255, 255, 128)
SELECTION_DASH = (5, 5)


def _draw_centered_text(
    draw: ImageDraw.ImageDraw,
    x: float,
    baseline: float,
    text: str,
    font: ImageFont.FreeTypeFont | ImageFont.ImageFont,
    fill,
) -> None:
    """以 (x, baseline) 为锚点水平居中绘制单行文字."""
    if isinstance(font, ImageFont.FreeTypeFont):
        draw.text((x, baseline), text, font=font, fill=fill, anchor="ms")
        return

    # 位图字体不支持 anchor，按包围盒手动对齐
    left, _, right, bottom = font.getbbox(text)
    draw.text((x - (right - left) / 2, baseline - bottom), text, font=font, fill=fill)


class CompositionRenderer:
    """画布渲染器.

    渲染是纯函数：不修改版面和图片，每次返回新图片。

    Example:
        >>> renderer = CompositionRenderer()
        >>> preview = renderer.render(layout, background, product, selected_layer_id="text-1")
        >>> exported = renderer.render(layout, background, product, export_mode=True)
    """

    def render(
        self,
        layout: LayoutModel,
        background: Optional[Image.Image] = None,
        product: Optional[Image.Image] = None,
        selected_layer_id: Optional[str] = None,
        export_mode: bool = False,
    ) -> Image.Image:
        """渲染画布.

        Args:
            layout: 版面
            background: 背景图，未加载时为 None
            product: 商品图，未加载时为 None
            selected_layer_id: 选中图层ID
            export_mode: 导出模式，不绘制辅助线

        Returns:
            画布逻辑分辨率的 RGBA 图片
        """
        canvas = self._render_background(layout.canvas_size, background)

        if product is not None:
            self._render_product(canvas, layout, product)
        else:
            self._render_placeholder(canvas, layout.frame)

        if not export_mode:
            self._render_frame_guides(canvas, layout.frame)

        for layer in layout.text_layers:
            try:
                self._render_text_layer(canvas, layer)
            except (OSError, ValueError) as e:
                logger.error(f"渲染图层失败: {layer.id}, 错误: {e}")

        if not export_mode and selected_layer_id is not None:
            layer = layout.get_layer(selected_layer_id)
            if layer is not None:
                self._render_selection(canvas, layer)

        return canvas

    def _render_background(
        self,
        canvas_size: tuple[int, int],
        background: Optional[Image.Image],
    ) -> Image.Image:
        if background is None:
            return Image.new("RGBA", canvas_size, CANVAS_FALLBACK_COLOR)

        canvas = Image.new("RGBA", canvas_size, CANVAS_FALLBACK_COLOR)
        fitted = ensure_rgba(cover_fit(ensure_rgba(background), canvas_size))
        canvas.alpha_composite(fitted)
        return canvas

    def _render_product(
        self,
        canvas: Image.Image,
        layout: LayoutModel,
        product: Image.Image,
    ) -> None:
        """绘制商品图，只绘制落在商品框和画布内的部分."""
        frame = layout.frame
        placement = layout.placement
        scale = placement.scale

        draw_w = product.width * scale
        draw_h = product.height * scale
        center_x, center_y = frame.center
        dest_x = center_x - draw_w / 2 + placement.offset_x
        dest_y = center_y - draw_h / 2 + placement.offset_y

        # 可见区域 = 商品图 ∩ 商品框 ∩ 画布
        left = max(dest_x, frame.x, 0)
        top = max(dest_y, frame.y, 0)
        right = min(dest_x + draw_w, frame.right, canvas.width)
        bottom = min(dest_y + draw_h, frame.bottom, canvas.height)

        px_left, px_top = int(round(left)), int(round(top))
        px_right, px_bottom = int(round(right)), int(round(bottom))
        if px_right <= px_left or px_bottom <= px_top:
            return

        # 取整后的像素边界可能略超出原图，resize 的 box 必须落在原图内
        source_box = (
            max(0.0, (px_left - dest_x) / scale),
            max(0.0, (px_top - dest_y) / scale),
            min(float(product.width), (px_right - dest_x) / scale),
            min(float(product.height), (px_bottom - dest_y) / scale),
        )
        piece = ensure_rgba(product).resize(
            (px_right - px_left, px_bottom - px_top),
            Image.Resampling.LANCZOS,
            box=source_box,
        )
        canvas.alpha_composite(piece, dest=(px_left, px_top))

    def _render_placeholder(self, canvas: Image.Image, frame: Frame) -> None:
        overlay = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(overlay)
        draw.rectangle([frame.x, frame.y, frame.right, frame.bottom], fill=PLACEHOLDER_FILL)

        center_x, center_y = frame.center
        font = resolve_font(PLACEHOLDER_FONT_FAMILY, PLACEHOLDER_FONT_SIZE)
        _draw_centered_text(draw, center_x, center_y, PLACEHOLDER_TEXT, font, PLACEHOLDER_TEXT_COLOR)

        # 占位内容不超出商品框
        clip = Image.new("L", canvas.size, 0)
        ImageDraw.Draw(clip).rectangle(
            [frame.x, frame.y, frame.right - 1, frame.bottom - 1], fill=255
        )
        empty = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        canvas.alpha_composite(Image.composite(overlay, empty, clip))

    def _render_frame_guides(self, canvas: Image.Image, frame: Frame) -> None:
        overlay = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(overlay)
        draw_dashed_rectangle(
            draw,
            (frame.x, frame.y, frame.right, frame.bottom),
            FRAME_BORDER_COLOR,
            width=FRAME_BORDER_WIDTH,
            dash=FRAME_BORDER_DASH,
        )
        draw.rectangle(
            [
                frame.right - RESIZE_HANDLE_SIZE,
                frame.bottom - RESIZE_HANDLE_SIZE,
                frame.right,
                frame.bottom,
            ],
            fill=HANDLE_COLOR,
        )
        canvas.alpha_composite(overlay)

    def _render_text_layer(self, canvas: Image.Image, layer: TextLayer) -> None:
        text = layer.display_text
        if not text:
            return
        draw = ImageDraw.Draw(canvas)
        _draw_centered_text(draw, layer.x, layer.y, text, font_for_layer(layer), layer.color)

    def _render_selection(self, canvas: Image.Image, layer: TextLayer) -> None:
        """选中框与命中框使用同一个矩形."""
        overlay = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(overlay)
        draw_dashed_rectangle(
            draw,
            text_hit_box(layer).as_tuple(),
            SELECTION_COLOR,
            width=1,
            dash=SELECTION_DASH,
        )
        canvas.alpha_composite(overlay)


_renderer = CompositionRenderer()


def render_composition(
    layout: LayoutModel,
    background: Optional[Image.Image] = None,
    product: Optional[Image.Image] = None,
    selected_layer_id: Optional[str] = None,
    export_mode: bool = False,
) -> Image.Image:
    """渲染画布（便捷函数）."""
    return _renderer.render(layout, background, product, selected_layer_id, export_mode)
