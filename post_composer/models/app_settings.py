"""应用设置模型."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from post_composer.models.layout import AspectPreset
from post_composer.utils.constants import (
    DATABASE_PATH,
    RECENT_GALLERY_SIZE,
    TEMPLATE_CACHE_FILE,
    TEMPLATE_STORE_MAX_RETRIES,
    TEMPLATE_STORE_TIMEOUT,
    TEMPLATES_FILE,
)


class Settings(BaseSettings):
    """应用设置.

    支持从环境变量（前缀 POST_COMPOSER_）和 .env 文件加载。

    Attributes:
        log_level: 日志级别
        template_store_url: 全局模板库地址，未设置时使用本地 JSON 文件
        template_store_timeout: 模板库请求超时（秒）
        template_store_retries: 连接失败时的重试次数
        templates_file: 本地全局模板库文件
        template_cache_file: 模板本地缓存文件
        database_path: 工作区数据库路径
        recent_gallery_size: 最近使用商品图的最大数量
        default_aspect_preset: 启动时的画布预设
        debug: 调试模式
    """

    model_config = SettingsConfigDict(
        env_prefix="POST_COMPOSER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = Field(default="INFO", description="日志级别")

    template_store_url: Optional[str] = Field(default=None, description="全局模板库地址")
    template_store_timeout: float = Field(
        default=TEMPLATE_STORE_TIMEOUT,
        gt=0,
        le=120,
        description="模板库请求超时",
    )
    template_store_retries: int = Field(
        default=TEMPLATE_STORE_MAX_RETRIES,
        ge=0,
        le=5,
        description="模板库重试次数",
    )
    templates_file: Path = Field(default=TEMPLATES_FILE, description="本地模板库文件")
    template_cache_file: Path = Field(default=TEMPLATE_CACHE_FILE, description="模板缓存文件")

    database_path: Optional[Path] = Field(default=None, description="数据库文件路径")

    recent_gallery_size: int = Field(
        default=RECENT_GALLERY_SIZE,
        ge=1,
        le=50,
        description="最近使用商品图数量",
    )
    default_aspect_preset: AspectPreset = Field(
        default=AspectPreset.SQUARE,
        description="默认画布预设",
    )

    debug: bool = Field(default=False, description="调试模式")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """验证日志级别."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(f"无效的日志级别: {v}，有效值: {valid_levels}")
        return upper_v

    @field_validator("template_store_url")
    @classmethod
    def validate_store_url(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"模板库地址必须以 http:// 或 https:// 开头: {v}")
        return v.rstrip("/")

    @property
    def db_path(self) -> Path:
        """获取数据库路径."""
        return self.database_path or DATABASE_PATH

    @property
    def uses_remote_store(self) -> bool:
        return self.template_store_url is not None
