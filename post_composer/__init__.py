"""海报合成编辑器.

在背景图上摆放可缩放的商品框与多个文字图层，并导出合成后的图片。
"""

__version__ = "0.3.1"
