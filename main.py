# main.py
import sys
import argparse
import logging
from typing import List, Optional

from PyQt6.QtWidgets import QApplication, QMainWindow, QMessageBox, QWidget

from app.core.config import get_config, BoardConfig
from app.core.logger_config import setup_logging
from app.core.threading import get_task_manager, TaskManager
from app.services.integrations.identity_service import IdentityService
from app.services.integrations.line_item_service import LineItemService, create_line_item_service
from app.views.modules.line_item_board_view import LineItemBoardView

# Configured properly after setup_logging()
logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """Hosts one LineItemBoardView and owns the shutdown of its services."""

    def __init__(self,
                 config: BoardConfig,
                 task_manager: TaskManager,
                 line_item_service: LineItemService,
                 identity_service: IdentityService,
                 opportunity_id: str,
                 parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.config = config
        self.task_manager = task_manager
        self.line_item_service = line_item_service
        self.identity_service = identity_service
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

        self.setWindowTitle(f"{config.app_name} - v{config.app_version}")
        self.resize(config.window_width, config.window_height)

        self.board_view = LineItemBoardView(
            opportunity_id,
            config=config,
            line_item_service=line_item_service,
            identity_service=identity_service,
            task_manager=task_manager,
            main_window=self,
        )
        self.setCentralWidget(self.board_view)
        self.statusBar().showMessage("Ready")

        self.board_view.mount()
        self.logger.info(f"{config.app_name} window ready for opportunity {opportunity_id}")

    def closeEvent(self, event):
        try:
            self.logger.info("MainWindow closing. Performing cleanup...")
            self.board_view.teardown()
            self.task_manager.run_coroutine_sync(self.identity_service.close(), timeout=5)
            self.task_manager.run_coroutine_sync(self.line_item_service.close(), timeout=5)
        except Exception as e:
            self.logger.error(f"Error during application shutdown: {e}", exc_info=True)
        finally:
            self.task_manager.shutdown()
            event.accept()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Opportunity line item board")
    parser.add_argument("--opportunity-id", dest="opportunity_id",
                        help="Opportunity whose line items are shown (defaults to LINEITEMBOARD_OPPORTUNITY_ID)")
    parser.add_argument("--user-id", dest="user_id",
                        help="Current user id used to resolve the profile (defaults to LINEITEMBOARD_CURRENT_USER_ID)")
    return parser.parse_args(argv)


def run_application(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    config = get_config()
    if args.user_id:
        config.current_user_id = args.user_id
    if args.opportunity_id:
        config.opportunity_id = args.opportunity_id

    setup_logging(config)
    logger.info(f"Starting {config.app_name} v{config.app_version} ({config.environment.value})")
    logger.debug(f"Effective configuration: {config.export_config()}")

    if not config.opportunity_id:
        logger.error("No opportunity id given. Use --opportunity-id or LINEITEMBOARD_OPPORTUNITY_ID.")
        return 2

    qt_app = QApplication(sys.argv)
    qt_app.setApplicationName(config.app_name)
    qt_app.setApplicationVersion(config.app_version)

    task_manager = get_task_manager()
    task_manager.start()
    line_item_service = task_manager.run_coroutine_sync(create_line_item_service(config), timeout=config.api_timeout)
    if not line_item_service.is_operational:
        logger.warning("Line item API is not configured; loading will report an error.")
    identity_service = IdentityService(config)

    main_window = MainWindow(
        config,
        task_manager,
        line_item_service,
        identity_service,
        config.opportunity_id,
    )
    main_window.show()
    return qt_app.exec()


def main():
    """Main entry point for the application"""
    # Basic logging for pre-config errors
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - PRE_CONFIG - %(message)s'
    )

    try:
        sys.exit(run_application())
    except KeyboardInterrupt:
        logger.info("Application interrupted by user")
        sys.exit(0)
    except Exception as e:
        critical_logger = logging.getLogger("critical_launch_error")
        critical_logger.critical(f"Unhandled exception during application launch: {e}", exc_info=True)

        try:
            app_temp = QApplication.instance() or QApplication(sys.argv)
            QMessageBox.critical(
                None,
                "Critical Application Failure",
                f"An unhandled error occurred:\n\n{e}\n\n"
                "Please check logs and restart the application."
            )
        except Exception as dialog_error:
            print(f"CRITICAL ERROR: {e}", file=sys.stderr)
            print(f"Failed to show error dialog: {dialog_error}", file=sys.stderr)

        sys.exit(1)


if __name__ == '__main__':
    main()
