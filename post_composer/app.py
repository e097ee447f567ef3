"""应用初始化和管理."""

from __future__ import annotations

from typing import Optional

from post_composer.core.config_manager import ConfigManager
from post_composer.core.editor_controller import EditorController
from post_composer.models.app_settings import Settings
from post_composer.models.layout import AspectPreset, LayoutModel
from post_composer.services.database_service import DatabaseService
from post_composer.services.font_provider import FontCatalog, select_font_provider
from post_composer.services.template_client import HttpTemplateStore
from post_composer.services.template_library import TemplateLibrary
from post_composer.services.template_store import JsonTemplateStore, TemplateStore
from post_composer.services.workspace_service import RecentImageGallery, WorkspaceRepository
from post_composer.utils.constants import APP_DATA_DIR
from post_composer.utils.logger import set_log_level, setup_logger

logger = setup_logger(__name__)


def build_template_library(settings: Settings) -> TemplateLibrary:
    """按设置创建模板列表.

    配置了模板库地址时以远程模板库为准，否则使用本地 JSON 文件；
    两种情况都带本地缓存。
    """
    remote: TemplateStore
    if settings.uses_remote_store:
        remote = HttpTemplateStore(
            settings.template_store_url,
            timeout=settings.template_store_timeout,
            max_retries=settings.template_store_retries,
        )
        logger.info(f"全局模板库: {settings.template_store_url}")
    else:
        remote = JsonTemplateStore(settings.templates_file)
        logger.info(f"全局模板库: {settings.templates_file}")
    return TemplateLibrary(remote, JsonTemplateStore(settings.template_cache_file))


def initial_layout(
    workspace: WorkspaceRepository,
    config: ConfigManager,
) -> LayoutModel:
    """启动时的版面：优先恢复已保存的工作区."""
    layout = workspace.load_layout()
    if layout is not None:
        logger.info("已恢复上次保存的工作区")
        return layout

    layout = LayoutModel.default()
    preset_value = config.get_user_config("last_aspect_preset")
    try:
        preset = AspectPreset(preset_value) if preset_value else config.settings.default_aspect_preset
    except ValueError:
        preset = config.settings.default_aspect_preset
    layout.set_aspect_preset(preset)
    return layout


class Application:
    """应用管理类.

    负责配置加载、数据库和服务的初始化，以及主窗口的创建。
    """

    def __init__(self, config: Optional[ConfigManager] = None) -> None:
        self._config = config or ConfigManager()
        self._db_service: Optional[DatabaseService] = None
        self._main_window = None
        self._initialized = False

    @property
    def config(self) -> ConfigManager:
        return self._config

    @property
    def main_window(self):
        return self._main_window

    def initialize(self) -> None:
        """初始化数据目录、配置和数据库."""
        if self._initialized:
            logger.warning("应用已初始化，跳过重复初始化")
            return

        logger.info("开始初始化应用...")
        APP_DATA_DIR.mkdir(parents=True, exist_ok=True)

        settings = self._config.settings
        set_log_level(settings.log_level)

        self._db_service = DatabaseService(settings.db_path)
        self._db_service.init_db()

        self._initialized = True
        logger.info("应用初始化完成")

    def show_main_window(self) -> None:
        """创建并显示主窗口（需要已创建 QApplication）."""
        from post_composer.ui.main_window import EditorServices, EditorWindow

        if not self._initialized:
            self.initialize()

        if self._main_window is None:
            settings = self._config.settings
            workspace = WorkspaceRepository(self._db_service)
            font_provider, font_notice = select_font_provider()
            services = EditorServices(
                config=self._config,
                library=build_template_library(settings),
                workspace=workspace,
                gallery=RecentImageGallery(self._db_service, settings.recent_gallery_size),
                fonts=FontCatalog(),
                font_provider=font_provider,
            )
            controller = EditorController(initial_layout(workspace, self._config))
            self._main_window = EditorWindow(services, controller)
            self._main_window.show_notice(font_notice)
            self._main_window.refresh_templates()

        self._main_window.show()
        logger.info("主窗口已显示")

    def cleanup(self) -> None:
        """清理应用资源."""
        if self._db_service:
            self._db_service.close()
        logger.info("应用资源清理完成")
