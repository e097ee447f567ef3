"""用户提示信息.

将异常转换为面向操作者的提示，并定义编辑器向界面传递的 Notice。
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from post_composer.utils.exceptions import (
    AppException,
    ConfigError,
    DatabaseError,
    FontEnumerationError,
    ImageDecodeError,
    ImageNotFoundError,
    ImageProcessError,
    InvalidInputError,
    TemplateStoreError,
    TemplateSyncError,
    UnsupportedImageFormatError,
)


class ErrorSeverity(str, Enum):
    """提示严重级别."""

    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    """一条展示给操作者的提示.

    Attributes:
        severity: 严重级别
        title: 标题
        message: 内容
    """

    severity: ErrorSeverity
    title: str
    message: str = ""

    @classmethod
    def success(cls, title: str, message: str = "") -> "Notice":
        return cls(ErrorSeverity.SUCCESS, title, message)

    @classmethod
    def info(cls, title: str, message: str = "") -> "Notice":
        return cls(ErrorSeverity.INFO, title, message)

    @classmethod
    def warning(cls, title: str, message: str = "") -> "Notice":
        return cls(ErrorSeverity.WARNING, title, message)

    @classmethod
    def error(cls, title: str, message: str = "") -> "Notice":
        return cls(ErrorSeverity.ERROR, title, message)


@dataclass
class UserFriendlyError:
    """用户友好的错误信息."""

    title: str
    message: str
    suggestion: str
    severity: ErrorSeverity
    error_code: str
    details: Optional[str] = None

    def to_notice(self) -> Notice:
        """转换为界面提示."""
        text = self.message
        if self.suggestion:
            text = f"{text}\n{self.suggestion}"
        return Notice(self.severity, self.title, text)


ERROR_MESSAGES = {
    "INVALID_INPUT": UserFriendlyError(
        title="输入无效",
        message="输入的值无法使用，画布未做任何修改。",
        suggestion="请检查输入后重试。",
        severity=ErrorSeverity.WARNING,
        error_code="INVALID_INPUT",
    ),
    "TEMPLATE_SYNC_FAILED": UserFriendlyError(
        title="全局同步失败",
        message="无法连接模板库，本次修改只保存在本机。",
        suggestion="请检查网络连接，稍后重新保存以同步。",
        severity=ErrorSeverity.WARNING,
        error_code="TEMPLATE_SYNC_FAILED",
    ),
    "TEMPLATE_STORE_ERROR": UserFriendlyError(
        title="模板库读写失败",
        message="读取或写入模板时发生错误。",
        suggestion="请检查模板文件是否可写。",
        severity=ErrorSeverity.ERROR,
        error_code="TEMPLATE_STORE_ERROR",
    ),
    "IMAGE_NOT_FOUND": UserFriendlyError(
        title="找不到图片",
        message="指定的图片文件不存在或已被移动。",
        suggestion="请重新选择图片。",
        severity=ErrorSeverity.ERROR,
        error_code="IMAGE_NOT_FOUND",
    ),
    "UNSUPPORTED_FORMAT": UserFriendlyError(
        title="不支持的图片格式",
        message="该图片格式不受支持。",
        suggestion="请使用 JPG、PNG 或 WebP 格式的图片。",
        severity=ErrorSeverity.ERROR,
        error_code="UNSUPPORTED_FORMAT",
    ),
    "IMAGE_DECODE_FAILED": UserFriendlyError(
        title="图片无法读取",
        message="图片数据已损坏或无法解码。",
        suggestion="请尝试重新导出该图片后再上传。",
        severity=ErrorSeverity.ERROR,
        error_code="IMAGE_DECODE_FAILED",
    ),
    "FONT_ENUMERATION": UserFriendlyError(
        title="无法读取系统字体",
        message="当前环境不支持枚举系统字体，已使用内置字体列表。",
        suggestion="",
        severity=ErrorSeverity.INFO,
        error_code="FONT_ENUMERATION",
    ),
    "CONFIG_ERROR": UserFriendlyError(
        title="配置错误",
        message="应用配置存在问题。",
        suggestion="请检查 .env 或配置文件。",
        severity=ErrorSeverity.ERROR,
        error_code="CONFIG_ERROR",
    ),
    "DATABASE_ERROR": UserFriendlyError(
        title="本地存储失败",
        message="工作区数据读写失败。",
        suggestion="请检查数据目录的磁盘空间和权限。",
        severity=ErrorSeverity.ERROR,
        error_code="DATABASE_ERROR",
    ),
    "UNKNOWN_ERROR": UserFriendlyError(
        title="操作失败",
        message="发生了未知错误。",
        suggestion="请稍后重试。",
        severity=ErrorSeverity.ERROR,
        error_code="UNKNOWN_ERROR",
    ),
}


def get_user_friendly_error(
    exception: Exception,
    include_details: bool = False,
) -> UserFriendlyError:
    """将异常转换为用户友好的错误信息.

    Args:
        exception: 异常对象
        include_details: 是否包含详细技术信息

    Returns:
        UserFriendlyError 对象
    """
    details = str(exception) if include_details else None

    if isinstance(exception, InvalidInputError):
        error = ERROR_MESSAGES["INVALID_INPUT"]
        # 输入错误直接展示具体原因
        return UserFriendlyError(
            title=error.title,
            message=exception.message,
            suggestion="",
            severity=error.severity,
            error_code=error.error_code,
            details=details,
        )
    elif isinstance(exception, TemplateSyncError):
        error = ERROR_MESSAGES["TEMPLATE_SYNC_FAILED"]
    elif isinstance(exception, TemplateStoreError):
        error = ERROR_MESSAGES["TEMPLATE_STORE_ERROR"]
    elif isinstance(exception, ImageNotFoundError):
        error = ERROR_MESSAGES["IMAGE_NOT_FOUND"]
    elif isinstance(exception, UnsupportedImageFormatError):
        error = ERROR_MESSAGES["UNSUPPORTED_FORMAT"]
    elif isinstance(exception, (ImageDecodeError, ImageProcessError)):
        error = ERROR_MESSAGES["IMAGE_DECODE_FAILED"]
    elif isinstance(exception, FontEnumerationError):
        error = ERROR_MESSAGES["FONT_ENUMERATION"]
    elif isinstance(exception, ConfigError):
        error = ERROR_MESSAGES["CONFIG_ERROR"]
    elif isinstance(exception, DatabaseError):
        error = ERROR_MESSAGES["DATABASE_ERROR"]
    elif isinstance(exception, AppException):
        error = UserFriendlyError(
            title=ERROR_MESSAGES["UNKNOWN_ERROR"].title,
            message=exception.message,
            suggestion="",
            severity=ErrorSeverity.ERROR,
            error_code=exception.code,
        )
    else:
        error = ERROR_MESSAGES["UNKNOWN_ERROR"]

    return UserFriendlyError(
        title=error.title,
        message=error.message,
        suggestion=error.suggestion,
        severity=error.severity,
        error_code=error.error_code,
        details=details,
    )


def notice_from_exception(exception: Exception) -> Notice:
    """把异常转换为界面提示."""
    return get_user_friendly_error(exception).to_notice()


def get_severity_color(severity: ErrorSeverity) -> str:
    """获取提示级别对应的颜色."""
    colors = {
        ErrorSeverity.SUCCESS: "#52c41a",
        ErrorSeverity.INFO: "#1890ff",
        ErrorSeverity.WARNING: "#faad14",
        ErrorSeverity.ERROR: "#ff4d4f",
    }
    return colors.get(severity, "#666666")
