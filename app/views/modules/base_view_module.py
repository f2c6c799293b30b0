# app/views/modules/base_view_module.py
import logging
from PyQt6.QtWidgets import QWidget, QVBoxLayout, QHBoxLayout, QLabel, QFrame, QSizePolicy

logger = logging.getLogger(__name__)  # Configured by setup_logging at startup


class BaseViewModule(QWidget):
    """
    Base class for the application's view modules.
    Provides config, logger and main_window references plus a header / content / footer frame.
    """

    def __init__(self, module_name="BaseModule", config=None, logger_instance=None, main_window=None, parent=None):
        """
        Initialize the BaseViewModule.

        Args:
            module_name (str): The name of the module, used for logging and the header title.
            config (BoardConfig, optional): The application's configuration object.
            logger_instance (logging.Logger, optional): Logger to use. Defaults to a child of this module's logger.
            main_window (QMainWindow, optional): Reference to the main application window.
            parent (QWidget, optional): The parent widget.
        """
        super().__init__(parent)

        self.module_name = module_name
        self.config = config
        self.main_window = main_window
        self.logger = logger_instance or logging.getLogger(f"{__name__}.{self.module_name}")

        if not self.config:
            self.logger.warning(f"{self.module_name}: BoardConfig object was not provided during initialization.")

        self._init_base_ui()
        self.logger.info(f"{self.module_name} initialized.")

    def _init_base_ui(self):
        self.base_main_layout = QVBoxLayout(self)
        self.base_main_layout.setContentsMargins(0, 0, 0, 0)
        self.base_main_layout.setSpacing(0)

        self._header_widget = QFrame(self)
        self._header_widget.setObjectName("BaseViewModule_Header")
        header_layout = QHBoxLayout(self._header_widget)
        header_layout.setContentsMargins(10, 5, 10, 5)
        header_layout.setSpacing(10)

        self.module_title_label = QLabel(self.module_name)
        title_font = self.module_title_label.font()
        title_font.setPointSize(14)
        title_font.setBold(True)
        self.module_title_label.setFont(title_font)
        header_layout.addWidget(self.module_title_label)
        header_layout.addStretch()
        self.base_main_layout.addWidget(self._header_widget)

        # Subclasses put their own layout on this container
        self._content_container = QWidget(self)
        self._content_container.setObjectName("BaseViewModule_ContentContainer")
        self._content_container.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self.base_main_layout.addWidget(self._content_container, 1)

        self._footer_widget = QFrame(self)
        self._footer_widget.setObjectName("BaseViewModule_Footer")
        footer_layout = QHBoxLayout(self._footer_widget)
        footer_layout.setContentsMargins(10, 5, 10, 5)
        self.status_label_base = QLabel("Ready")
        footer_layout.addWidget(self.status_label_base)
        footer_layout.addStretch()
        self.base_main_layout.addWidget(self._footer_widget)

    def get_content_container(self) -> QWidget:
        return self._content_container

    def set_status(self, text: str):
        self.status_label_base.setText(text)

    def load_module_data(self):
        """Subclasses override this to load their data when the module becomes active."""
        self.logger.debug(f"{self.module_name} - load_module_data called (base implementation).")

    def refresh_module_data(self):
        self.logger.debug(f"{self.module_name} - refresh_module_data called (base implementation).")
        self.load_module_data()
