"""应用常量定义."""

from pathlib import Path

# ===================
# 应用信息
# ===================
APP_NAME = "Post Composer"
APP_VERSION = "0.3.1"
APP_ORGANIZATION = "post-composer"

# ===================
# 路径常量
# ===================
# 应用数据目录
APP_DATA_DIR = Path.home() / ".post-composer"

# 数据库文件路径（工作区状态、最近使用的商品图）
DATABASE_PATH = APP_DATA_DIR / "workspace.db"

# 本地模板缓存 / 默认全局模板库
TEMPLATES_FILE = APP_DATA_DIR / "templates.json"
TEMPLATE_CACHE_FILE = APP_DATA_DIR / "templates_cache.json"

# 日志目录
LOG_DIR = APP_DATA_DIR / "logs"

# 默认导出目录
DEFAULT_EXPORT_DIR = Path.home() / "Pictures"

# ===================
# 画布
# ===================
DEFAULT_CANVAS_WIDTH = 1080
DEFAULT_CANVAS_HEIGHT = 1080

# 背景图缺失时的填充色
CANVAS_FALLBACK_COLOR = "#1e1e1e"

# ===================
# 商品框
# ===================
DEFAULT_FRAME = (200.0, 300.0, 680.0, 500.0)  # x, y, width, height
MIN_FRAME_SIZE = 50.0

# 右下角缩放手柄：可见 15px，热区向内 20px、向外 10px
RESIZE_HANDLE_SIZE = 15
RESIZE_HOTSPOT_INSET = 20
RESIZE_HOTSPOT_OUTSET = 10

# ===================
# 商品图缩放
# ===================
MIN_PRODUCT_SCALE = 0.01
MAX_PRODUCT_SCALE = 10.0
WHEEL_SCALE_STEP = 0.05  # 每个滚轮刻度
WHEEL_NOTCH_DELTA = 120  # Qt angleDelta 一个刻度的值

# ===================
# 文字图层
# ===================
DEFAULT_LAYER_CONTENT = "NEW TEXT"
DEFAULT_LAYER_FONT_SIZE = 50.0
DEFAULT_LAYER_FONT_FAMILY = "Arial Black"
DEFAULT_LAYER_COLOR = "#ffffff"

# 默认标题图层
DEFAULT_TITLE_CONTENT = "ENGINE OIL FILTER"
DEFAULT_TITLE_POSITION = (540.0, 180.0)
DEFAULT_TITLE_FONT_SIZE = 70.0
DEFAULT_TITLE_FONT_FAMILY = "Impact"
DEFAULT_TITLE_COLOR = "#cc0000"

# 文字命中框边距
TEXT_HIT_MARGIN_X = 10
TEXT_HIT_MARGIN_BELOW = 10

# ===================
# 字体
# ===================
STANDARD_FONTS = (
    "Impact",
    "Arial Black",
    "Verdana",
    "Tahoma",
    "Georgia",
    "Courier New",
    "Roboto",
    "Montserrat",
    "Oswald",
    "Inter",
)

# ===================
# 最近使用的商品图
# ===================
RECENT_GALLERY_SIZE = 8

# ===================
# 模板库
# ===================
TEMPLATE_STORE_TIMEOUT = 10  # 秒
TEMPLATE_STORE_MAX_RETRIES = 2

# ===================
# 图片
# ===================
SUPPORTED_IMAGE_FORMATS = {".jpg", ".jpeg", ".png", ".webp", ".bmp", ".gif"}
MAX_IMAGE_FILE_SIZE = 50 * 1024 * 1024

# 导出文件名前缀
EXPORT_FILE_PREFIX = "post"
