# app/views/modules/line_item_board_view.py
import logging
import webbrowser
from typing import Optional, Set, Tuple

from PyQt6.QtWidgets import (
    QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QTableWidget, QTableWidgetItem,
    QHeaderView, QAbstractItemView, QStyle
)
from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtGui import QColor, QFont

from app.core.config import BoardConfig
from app.core.exceptions import BoardException
from app.core.result import Result
from app.core.threading import TaskManager
from app.models.line_item import ViewRow
from app.models.line_item_board import ColumnDescriptor, ColumnType, LineItemBoardModel
from app.services.integrations.identity_service import IdentityService, ProfileSubscription
from app.services.integrations.line_item_service import LineItemService
from app.utils import constants
from app.utils.formatting import format_currency, format_number
from app.views.dialogs.confirm_delete_dialog import ConfirmDeleteDialog
from app.views.modules.base_view_module import BaseViewModule
from app.views.widgets.notification_widget import ToastNotifier

logger = logging.getLogger(__name__)

# style class -> (foreground, background, bold)
CELL_STYLES = {
    constants.STYLE_QUANTITY_ERROR: ("#C23934", None, True),
    constants.STYLE_QUANTITY_OK: ("#027E46", None, True),
    constants.STYLE_CELL_WARNING: (None, "#FFB75D", False),
    constants.STYLE_DELETE_WARNING: (None, "#FFB75D", False),
}


def cell_style(class_name: str) -> Tuple[Optional[str], Optional[str], bool]:
    return CELL_STYLES.get(class_name, (None, None, False))


def cell_text(column: ColumnDescriptor, row: ViewRow) -> str:
    value = getattr(row, column.field)
    if column.column_type == ColumnType.CURRENCY:
        return format_currency(value)
    if column.column_type == ColumnType.NUMBER:
        return format_number(value)
    return "" if value is None else str(value)


class LineItemBoardView(BaseViewModule):
    """
    Line items of one opportunity with overstock highlighting and a
    confirmed delete. Remote calls run on the TaskManager loop; every
    result comes back to this thread and is applied to the model.
    """
    profile_resolved = pyqtSignal(object)

    def __init__(self,
                 opportunity_id: str,
                 config: BoardConfig,
                 line_item_service: LineItemService,
                 identity_service: IdentityService,
                 task_manager: TaskManager,
                 notifier=None,
                 navigator=None,
                 main_window=None,
                 parent=None):
        super().__init__(
            module_name="Produits de l'opportunité",
            config=config,
            main_window=main_window,
            parent=parent
        )
        self.line_item_service = line_item_service
        self.identity_service = identity_service
        self.task_manager = task_manager
        self.profile_subscription: Optional[ProfileSubscription] = None
        self._task_ids: Set[str] = set()

        self.model = LineItemBoardModel(
            opportunity_id,
            line_item_service=line_item_service,
            notifier=notifier or ToastNotifier(self, config.notification_duration_ms),
            navigator=navigator or webbrowser.open_new_tab,
            record_base_url=config.record_base_url,
        )
        self.model.add_listener(self._render)
        self.profile_resolved.connect(self.model.apply_profile)

        self.confirm_dialog = ConfirmDeleteDialog(self)
        self.confirm_dialog.accepted.connect(self._on_confirm_accepted)
        self.confirm_dialog.rejected.connect(self._on_confirm_rejected)

        self._init_ui()
        self._render(self.model)

    def _init_ui(self):
        main_layout = QVBoxLayout()
        main_layout.setContentsMargins(10, 10, 10, 10)
        main_layout.setSpacing(8)

        self.banner_label = QLabel()
        self.banner_label.setObjectName("OverstockBanner")
        self.banner_label.setWordWrap(True)
        self.banner_label.setStyleSheet(
            "background-color: #FFB75D; color: #080707; padding: 8px; border-radius: 4px;"
        )
        self.banner_label.hide()
        main_layout.addWidget(self.banner_label)

        toolbar = QHBoxLayout()
        toolbar.addStretch()
        self.refresh_button = QPushButton(constants.LABEL_REFRESH)
        self.refresh_button.clicked.connect(self.refresh_module_data)
        toolbar.addWidget(self.refresh_button)
        main_layout.addLayout(toolbar)

        self.lines_table = QTableWidget()
        self.lines_table.setObjectName("LineItemTable")
        self.lines_table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        self.lines_table.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self.lines_table.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        self.lines_table.verticalHeader().setVisible(False)
        self.lines_table.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeMode.Interactive)
        self.lines_table.horizontalHeader().setStretchLastSection(True)
        main_layout.addWidget(self.lines_table)

        self.empty_label = QLabel(constants.MESSAGE_NO_LINES)
        self.empty_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.empty_label.setStyleSheet("color: #706E6B; padding: 12px;")
        main_layout.addWidget(self.empty_label)

        self.get_content_container().setLayout(main_layout)

    # --- lifecycle ---

    def mount(self):
        """Resolve the profile and load the lines. Call once after construction."""
        self._run(
            self.identity_service.subscribe,
            self.config.current_user_id,
            self.profile_resolved.emit,
            task_name="subscribe-profile",
            on_result=self._on_subscribed,
            on_error=self._on_subscribe_failed,
        )
        self.load_module_data()

    def teardown(self):
        for task_id in list(self._task_ids):
            self.task_manager.cancel_task(task_id)
        self._task_ids.clear()
        if self.profile_subscription is not None:
            self.profile_subscription.unsubscribe()
            self.profile_subscription = None
        self.model.dispose()
        self.logger.info(f"{self.module_name} torn down.")

    def closeEvent(self, event):
        self.teardown()
        super().closeEvent(event)

    def _run(self, async_fn, *args, task_name=None, on_result=None, on_error=None):
        self._task_ids = {t for t in self._task_ids if t in self.task_manager.active_tasks}
        task_id = self.task_manager.run_async_task(
            async_fn, *args, task_name=task_name, on_result=on_result, on_error=on_error
        )
        self._task_ids.add(task_id)
        return task_id

    # --- identity ---

    def _on_subscribed(self, subscription: ProfileSubscription):
        if self.model.disposed:
            subscription.unsubscribe()
            return
        self.profile_subscription = subscription

    def _on_subscribe_failed(self, error):
        self.model.apply_profile(Result.failure(error))

    # --- loading ---

    def load_module_data(self):
        self.set_status("Chargement…")
        self._run(
            self.line_item_service.fetch_line_items,
            self.model.opportunity_id,
            task_name=f"fetch-lines-{self.model.opportunity_id}",
            on_result=self._on_lines_fetched,
            on_error=self._on_lines_crashed,
        )

    def _on_lines_fetched(self, result):
        if result.is_success():
            self.model.apply_line_items(result.value)
        else:
            self.model.apply_load_error(result.error)
        self.set_status("Ready")

    def _on_lines_crashed(self, error):
        self.model.apply_load_error(BoardException(str(error)))
        self.set_status("Ready")

    # --- row actions ---

    def _on_row_action(self, action: str, row: ViewRow):
        self.model.handle_row_action(action, row)

    def _on_confirm_accepted(self):
        line_id = self.model.begin_confirm()
        if line_id is None:
            return
        self.set_status("Suppression…")
        try:
            self._run(
                self.line_item_service.delete_line_item,
                line_id,
                task_name=f"delete-line-{line_id}",
                on_result=self._on_delete_settled,
                on_error=self._on_delete_crashed,
            )
        except Exception as e:
            self.logger.error(f"Could not start delete of line {line_id}: {e}", exc_info=True)
            self._on_delete_settled(Result.failure(BoardException(f"Suppression impossible : {e}")))

    def _on_confirm_rejected(self):
        self.model.cancel_delete()

    def _on_delete_settled(self, result):
        self.set_status("Ready")
        if self.model.finish_confirm(result):
            self.load_module_data()

    def _on_delete_crashed(self, error):
        self._on_delete_settled(Result.failure(BoardException(str(error))))

    # --- rendering ---

    def _render(self, model: LineItemBoardModel):
        self.banner_label.setText(model.error_message)
        self.banner_label.setVisible(model.has_error)
        self.empty_label.setVisible(not model.has_lines)
        self.lines_table.setVisible(model.has_lines)
        self._populate_table(model)

        if model.is_modal_open and not model.is_confirm_in_flight and not self.confirm_dialog.isVisible():
            row = next((r for r in model.rows if r.id == model.line_to_delete), None)
            self.confirm_dialog.ask(row.product_name if row else "")

    def _populate_table(self, model: LineItemBoardModel):
        columns = model.columns
        self.lines_table.clear()
        self.lines_table.setColumnCount(len(columns))
        self.lines_table.setHorizontalHeaderLabels(
            ["" if c.column_type == ColumnType.BUTTON_ICON else c.label for c in columns]
        )
        self.lines_table.setRowCount(len(model.rows))

        for i, row in enumerate(model.rows):
            for j, column in enumerate(columns):
                style_class = getattr(row, column.class_field) if column.class_field else ""
                if column.is_action:
                    self.lines_table.setCellWidget(i, j, self._action_button(column, row, style_class))
                    continue

                item = QTableWidgetItem(cell_text(column, row))
                if column.column_type in (ColumnType.CURRENCY, ColumnType.NUMBER):
                    item.setTextAlignment(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)
                foreground, background, bold = cell_style(style_class)
                if foreground:
                    item.setForeground(QColor(foreground))
                if background:
                    item.setBackground(QColor(background))
                if bold:
                    font = QFont()
                    font.setBold(True)
                    item.setFont(font)
                self.lines_table.setItem(i, j, item)

        for j, column in enumerate(columns):
            if column.fixed_width:
                self.lines_table.setColumnWidth(j, column.fixed_width)

    def _action_button(self, column: ColumnDescriptor, row: ViewRow, style_class: str) -> QPushButton:
        if column.column_type == ColumnType.BUTTON_ICON:
            button = QPushButton()
            button.setIcon(self.style().standardIcon(QStyle.StandardPixmap.SP_DialogDiscardButton))
            button.setToolTip(column.label)
            button.setFlat(True)
        else:
            button = QPushButton(column.label)
            button.setStyleSheet("background-color: #0176D3; color: white; padding: 2px 8px;")

        _, background, _ = cell_style(style_class)
        if background:
            button.setAutoFillBackground(True)
            button.setStyleSheet(f"background-color: {background};")

        button.clicked.connect(lambda _checked=False, a=column.action, r=row: self._on_row_action(a, r))
        return button
