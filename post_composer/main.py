"""Post Composer 应用入口."""

from __future__ import annotations

import sys


def main() -> int:
    """应用主入口函数.

    Returns:
        退出码，0 表示正常退出
    """
    from PyQt6.QtWidgets import QApplication

    from post_composer.app import Application
    from post_composer.utils.constants import APP_NAME, APP_ORGANIZATION, APP_VERSION
    from post_composer.utils.exceptions import AppException
    from post_composer.utils.logger import setup_logger

    logger = setup_logger("post_composer.main")
    logger.info(f"启动 {APP_NAME} {APP_VERSION}")

    qt_app = QApplication(sys.argv)
    qt_app.setApplicationName(APP_NAME)
    qt_app.setApplicationVersion(APP_VERSION)
    qt_app.setOrganizationName(APP_ORGANIZATION)

    app = Application()
    try:
        app.initialize()
        app.show_main_window()
        exit_code = qt_app.exec()
    except AppException as e:
        logger.exception(f"应用启动失败: {e}")
        return 1
    finally:
        app.cleanup()

    logger.info(f"应用正常退出，退出码: {exit_code}")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
