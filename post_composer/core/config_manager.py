"""配置管理器模块."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from post_composer.models.app_settings import Settings
from post_composer.utils.constants import APP_DATA_DIR
from post_composer.utils.exceptions import ConfigError
from post_composer.utils.logger import setup_logger

logger = setup_logger(__name__)

# 用户配置文件（界面偏好：最近导出目录、画布预设等）
USER_CONFIG_FILE = APP_DATA_DIR / "config.json"


class ConfigManager:
    """配置管理器.

    应用设置来自环境变量和 .env，界面偏好保存在用户配置文件中。
    两者都在首次访问时加载。

    Attributes:
        settings: 应用设置
        config_file: 用户配置文件路径
    """

    def __init__(self, config_file: Optional[Path] = None) -> None:
        """初始化配置管理器.

        Args:
            config_file: 用户配置文件路径，默认在应用数据目录下
        """
        self.config_file = Path(config_file or USER_CONFIG_FILE)
        self._settings: Optional[Settings] = None
        self._user_config: Optional[dict[str, Any]] = None

    @property
    def settings(self) -> Settings:
        """获取应用设置."""
        if self._settings is None:
            self._settings = self._load_settings()
        return self._settings

    def _load_settings(self) -> Settings:
        """加载应用设置.

        Raises:
            ConfigError: 环境变量或 .env 中的值无效
        """
        try:
            settings = Settings()
        except ValidationError as e:
            logger.error(f"加载应用设置失败: {e}")
            raise ConfigError(f"加载应用设置失败: {e}") from e
        logger.debug(f"应用设置加载完成: log_level={settings.log_level}")
        return settings

    def _load_user_config(self) -> dict[str, Any]:
        """加载用户配置文件，损坏时按空配置处理."""
        if self._user_config is not None:
            return self._user_config

        config: dict[str, Any] = {}
        if self.config_file.exists():
            try:
                data = json.loads(self.config_file.read_text(encoding="utf-8"))
                if isinstance(data, dict):
                    config = data
                else:
                    logger.warning(f"用户配置格式无效，已忽略: {self.config_file}")
            except (OSError, ValueError) as e:
                logger.warning(f"加载用户配置文件失败: {e}")
        self._user_config = config
        return config

    def save_user_config(self, config: dict[str, Any]) -> None:
        """合并保存用户配置.

        Raises:
            ConfigError: 写入失败
        """
        merged = dict(self._load_user_config())
        merged.update(config)
        try:
            self.config_file.parent.mkdir(parents=True, exist_ok=True)
            self.config_file.write_text(
                json.dumps(merged, indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
        except OSError as e:
            logger.error(f"保存用户配置失败: {e}")
            raise ConfigError(f"保存用户配置失败: {e}") from e
        self._user_config = merged
        logger.debug("用户配置已保存")

    def get_user_config(self, key: str, default: Any = None) -> Any:
        return self._load_user_config().get(key, default)

    def set_user_config(self, key: str, value: Any) -> None:
        self.save_user_config({key: value})

    def reload(self) -> None:
        """重新加载所有配置."""
        self._settings = None
        self._user_config = None
        logger.info("配置已重新加载")


_config_manager: Optional[ConfigManager] = None


def get_config() -> ConfigManager:
    """获取全局配置管理器（首次调用时创建）."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager
