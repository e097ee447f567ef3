"""自定义异常类."""

from __future__ import annotations


class AppException(Exception):
    """应用基础异常类.

    Attributes:
        message: 错误消息
        code: 错误代码
    """

    def __init__(self, message: str, code: str = "UNKNOWN") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


# ===================
# 配置相关异常
# ===================
class ConfigError(AppException):
    """配置错误异常."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "CONFIG_ERROR")


class InvalidConfigValueError(ConfigError):
    """配置值无效异常."""

    def __init__(self, key: str, value: str, reason: str = "") -> None:
        msg = f"配置项 '{key}' 的值 '{value}' 无效"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


# ===================
# 用户输入
# ===================
class InvalidInputError(AppException):
    """用户输入无效，模型保持不变."""

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message, "INVALID_INPUT")


class LayerNotFoundError(InvalidInputError):
    """图层不存在."""

    def __init__(self, layer_id: str) -> None:
        super().__init__(f"图层不存在: {layer_id}", field="layer_id")


# ===================
# 模板库相关异常
# ===================
class TemplateStoreError(AppException):
    """模板库读写错误."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "TEMPLATE_STORE_ERROR")


class TemplateSyncError(TemplateStoreError):
    """全局模板库同步失败（网络或服务端错误）."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        if status_code:
            message = f"模板库请求失败 (HTTP {status_code}): {message}"
        super().__init__(message)


# ===================
# 图片处理相关异常
# ===================
class ImageProcessError(AppException):
    """图片处理错误异常."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "IMAGE_PROCESS_ERROR")


class ImageNotFoundError(ImageProcessError):
    """图片文件未找到异常."""

    def __init__(self, path: str) -> None:
        super().__init__(f"图片文件未找到: {path}")


class UnsupportedImageFormatError(ImageProcessError):
    """不支持的图片格式异常."""

    def __init__(self, format: str) -> None:
        super().__init__(f"不支持的图片格式: {format}")


class ImageDecodeError(ImageProcessError):
    """图片解码失败."""

    def __init__(self, source: str, reason: str = "") -> None:
        msg = f"图片解码失败: {source}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


# ===================
# 字体
# ===================
class FontEnumerationError(AppException):
    """当前环境不支持枚举系统字体."""

    def __init__(self, message: str = "当前环境不支持读取系统字体") -> None:
        super().__init__(message, "FONT_ENUMERATION_ERROR")


# ===================
# 坐标变换
# ===================
class GeometryError(AppException):
    """画布显示区域无效（宽或高为 0）."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "GEOMETRY_ERROR")


# ===================
# 数据库相关异常
# ===================
class DatabaseError(AppException):
    """数据库错误异常."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "DATABASE_ERROR")
