# app/views/dialogs/confirm_delete_dialog.py
import logging

from PyQt6.QtWidgets import QDialog, QVBoxLayout, QHBoxLayout, QPushButton, QLabel

from app.utils import constants

logger = logging.getLogger(__name__)


class ConfirmDeleteDialog(QDialog):
    """Window-modal confirmation shown before a line item is deleted."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setWindowTitle(constants.MESSAGE_CONFIRM_DELETE_TITLE)
        self.setModal(True)

        layout = QVBoxLayout(self)
        self.message_label = QLabel(constants.MESSAGE_CONFIRM_DELETE)
        self.message_label.setWordWrap(True)
        layout.addWidget(self.message_label)

        buttons = QHBoxLayout()
        buttons.addStretch()
        self.cancel_button = QPushButton("Annuler")
        self.cancel_button.clicked.connect(self.reject)
        buttons.addWidget(self.cancel_button)

        self.confirm_button = QPushButton(constants.LABEL_DELETE)
        self.confirm_button.setObjectName("ConfirmDeleteButton")
        self.confirm_button.setStyleSheet("background-color: #C23934; color: white; padding: 4px 12px;")
        self.confirm_button.clicked.connect(self.accept)
        buttons.addWidget(self.confirm_button)
        layout.addLayout(buttons)

    def ask(self, product_name: str = ""):
        """Opens the dialog without blocking; listen to accepted / rejected."""
        if product_name:
            self.message_label.setText(f"{constants.MESSAGE_CONFIRM_DELETE}\n{product_name}")
        else:
            self.message_label.setText(constants.MESSAGE_CONFIRM_DELETE)
        logger.debug(f"Asking delete confirmation for '{product_name}'")
        self.open()
