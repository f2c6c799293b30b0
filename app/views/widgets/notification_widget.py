# app/views/widgets/notification_widget.py
import logging
from typing import List, Optional

from PyQt6.QtWidgets import QWidget, QLabel, QVBoxLayout, QHBoxLayout, QPushButton, QFrame, QStyle
from PyQt6.QtCore import Qt, QTimer, QPropertyAnimation, QAbstractAnimation, QEasingCurve, QPoint, pyqtSignal
from PyQt6.QtGui import QFont

logger = logging.getLogger(__name__)

# level -> (icon, background, border, title colour)
LEVEL_STYLES = {
    "info": (QStyle.StandardPixmap.SP_MessageBoxInformation, "#DCEBFA", "#7DA4C5", "#00529B"),
    "success": (QStyle.StandardPixmap.SP_DialogApplyButton, "#DCFADC", "#5F9C5F", "#277727"),
    "warning": (QStyle.StandardPixmap.SP_MessageBoxWarning, "#FFF5C8", "#D4A017", "#9F6000"),
    "error": (QStyle.StandardPixmap.SP_MessageBoxCritical, "#FFDCDC", "#D8000C", "#D8000C"),
}


class NotificationWidget(QFrame):
    """
    Non-modal toast shown at the top-right corner of its parent.
    Closes itself after `duration` ms, or stays until clicked when duration <= 0.
    """
    closed = pyqtSignal()

    def __init__(self, title: str, message: str, level: str = "info", duration: int = 5000, parent: QWidget = None):
        super().__init__(parent)
        self.setObjectName("NotificationWidget")

        self.title_text = title
        self.message_text = message
        self.level = level.lower() if level.lower() in LEVEL_STYLES else "info"
        self.duration = duration
        self.animation: Optional[QPropertyAnimation] = None

        self._init_ui()
        self._apply_level_styling()

        self.auto_close_timer = QTimer(self)
        self.auto_close_timer.setSingleShot(True)
        self.auto_close_timer.timeout.connect(self.do_close_animation)

        self.setWindowFlags(Qt.WindowType.FramelessWindowHint | Qt.WindowType.Tool | Qt.WindowType.WindowStaysOnTopHint)
        self.setAttribute(Qt.WidgetAttribute.WA_DeleteOnClose)

    def _init_ui(self):
        layout = QHBoxLayout(self)
        layout.setContentsMargins(10, 8, 10, 8)
        layout.setSpacing(10)

        self.icon_label = QLabel()
        self.icon_label.setFixedSize(24, 24)
        self.icon_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.icon_label)

        text_layout = QVBoxLayout()
        text_layout.setSpacing(2)
        self.title_label = QLabel(self.title_text)
        self.title_label.setObjectName("NotificationTitleLabel")
        title_font = QFont()
        title_font.setBold(True)
        title_font.setPointSize(10)
        self.title_label.setFont(title_font)

        self.message_label = QLabel(self.message_text)
        self.message_label.setObjectName("NotificationMessageLabel")
        self.message_label.setWordWrap(True)

        text_layout.addWidget(self.title_label)
        text_layout.addWidget(self.message_label)
        layout.addLayout(text_layout, 1)

        self.close_button = QPushButton()
        self.close_button.setIcon(self.style().standardIcon(QStyle.StandardPixmap.SP_TitleBarCloseButton))
        self.close_button.setFixedSize(20, 20)
        self.close_button.setFlat(True)
        self.close_button.setObjectName("NotificationCloseButton")
        self.close_button.setToolTip("Fermer")
        self.close_button.clicked.connect(self.do_close_animation)
        layout.addWidget(self.close_button)

        self.setMinimumWidth(300)
        self.setMaximumWidth(450)

    def _apply_level_styling(self):
        icon, background, border, title_color = LEVEL_STYLES[self.level]
        self.icon_label.setPixmap(self.style().standardIcon(icon).pixmap(20, 20))
        self.setStyleSheet(f"""
            #NotificationWidget {{
                background-color: {background};
                border: 1px solid {border};
                border-radius: 5px;
            }}
            #NotificationTitleLabel {{ color: {title_color}; }}
            #NotificationMessageLabel {{ color: #333333; }}
            #NotificationCloseButton {{ border: none; background-color: transparent; }}
        """)

    def show_notification(self):
        """Shows the toast with a short fade-in and starts the auto-close timer."""
        self.adjustSize()
        if self.parent() is not None:
            parent = self.parent()
            target = parent.mapToGlobal(QPoint(parent.width() - self.width() - 10, 10))
            self.move(target)
        else:
            logger.warning("NotificationWidget has no parent, showing at default position.")

        self.setWindowOpacity(0.0)
        self.show()
        self.animation = QPropertyAnimation(self, b"windowOpacity")
        self.animation.setDuration(300)
        self.animation.setStartValue(0.0)
        self.animation.setEndValue(0.95)
        self.animation.setEasingCurve(QEasingCurve.Type.InOutQuad)
        self.animation.start()

        if self.duration > 0:
            self.auto_close_timer.start(self.duration)

    def do_close_animation(self):
        if self.animation and self.animation.state() == QAbstractAnimation.State.Running:
            self.animation.stop()
        self.auto_close_timer.stop()

        self.animation = QPropertyAnimation(self, b"windowOpacity")
        self.animation.setDuration(300)
        self.animation.setStartValue(self.windowOpacity())
        self.animation.setEndValue(0.0)
        self.animation.setEasingCurve(QEasingCurve.Type.InOutQuad)
        self.animation.finished.connect(self.close_and_emit)
        self.animation.start()

    def close_and_emit(self):
        self.closed.emit()
        self.close()


class ToastNotifier:
    """
    Notification sink used by the board: notifier(title, message, severity).
    Fire-and-forget; keeps a reference to each open toast until it closes.
    """

    def __init__(self, parent: QWidget, duration: int = 5000):
        self.parent = parent
        self.duration = duration
        self._open: List[NotificationWidget] = []

    def __call__(self, title: str, message: str, severity: str) -> None:
        logger.info(f"Toast [{severity}] {title}: {message}")
        toast = NotificationWidget(title, message, severity, self.duration, parent=self.parent)
        toast.closed.connect(lambda t=toast: self._forget(t))
        self._open.append(toast)
        toast.show_notification()

    def _forget(self, toast: NotificationWidget):
        if toast in self._open:
            self._open.remove(toast)
