# app/models/line_item_board.py
"""
State container behind the line item board.

LineItemBoardModel owns every piece of state the view renders (rows, warning
banner, profile-derived columns, delete confirmation) and exposes one change
notification path. It knows nothing about Qt: remote calls are injected as a
LineItemService, toasts as a notifier callable and browser navigation as a
navigator callable, so the same model runs headless in tests.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from app.core.exceptions import BoardException, ValidationError
from app.core.result import Result
from app.models.line_item import (
    DeletionIntent, ErrorBanner, LineItem, UserProfile, ViewRow, build_view_rows
)
from app.utils import constants

logger = logging.getLogger(__name__)

Notifier = Callable[[str, str, str], None]
Navigator = Callable[[str], None]
ChangeListener = Callable[["LineItemBoardModel"], None]


class ColumnType(str, Enum):
    TEXT = "text"
    CURRENCY = "currency"
    NUMBER = "number"
    BUTTON_ICON = "button-icon"
    BUTTON = "button"


@dataclass(frozen=True)
class ColumnDescriptor:
    label: str
    column_type: ColumnType
    field: Optional[str] = None
    class_field: Optional[str] = None
    action: Optional[str] = None
    fixed_width: Optional[int] = None

    @property
    def is_action(self) -> bool:
        return self.action is not None


def build_columns(user_profile: Optional[str]) -> List[ColumnDescriptor]:
    """Column layout for the given profile name. Only System Administrator gets viewProduct."""
    columns = [
        ColumnDescriptor(constants.LABEL_PRODUCT_NAME, ColumnType.TEXT, field="product_name"),
        ColumnDescriptor(constants.LABEL_UNIT_PRICE, ColumnType.CURRENCY, field="unit_price"),
        ColumnDescriptor(constants.LABEL_TOTAL_PRICE, ColumnType.CURRENCY, field="total_price"),
        ColumnDescriptor(constants.LABEL_QUANTITY, ColumnType.NUMBER, field="quantity",
                         class_field="quantity_style"),
        ColumnDescriptor(constants.LABEL_STOCK, ColumnType.NUMBER, field="stock",
                         class_field="stock_warning"),
        ColumnDescriptor(constants.LABEL_DELETE, ColumnType.BUTTON_ICON, class_field="delete_style",
                         action=constants.ACTION_DELETE, fixed_width=40),
    ]
    if user_profile == constants.PROFILE_SYSTEM_ADMINISTRATOR:
        columns.append(
            ColumnDescriptor(constants.LABEL_VIEW_PRODUCT, ColumnType.BUTTON,
                             action=constants.ACTION_VIEW_PRODUCT)
        )
    return columns


class LineItemBoardModel:

    def __init__(self,
                 opportunity_id: str,
                 line_item_service=None,
                 notifier: Optional[Notifier] = None,
                 navigator: Optional[Navigator] = None,
                 record_base_url: str = ""):
        if not opportunity_id:
            raise ValidationError("opportunity_id", "an opportunity id is required", opportunity_id)

        self.opportunity_id = opportunity_id
        self.line_item_service = line_item_service
        self.notifier = notifier
        self.navigator = navigator
        self.record_base_url = record_base_url.rstrip('/')

        self.rows: List[ViewRow] = []
        self.banner: ErrorBanner = ErrorBanner.clear()
        self.user_profile: Optional[str] = None
        self.is_admin_or_commercial: bool = False
        self.columns: List[ColumnDescriptor] = build_columns(None)
        self.deletion: DeletionIntent = DeletionIntent.idle()

        self._confirm_in_flight = False
        self._disposed = False
        self._listeners: List[ChangeListener] = []

    # --- observable state ---

    def add_listener(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def _changed(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    @property
    def has_lines(self) -> bool:
        return len(self.rows) > 0

    @property
    def has_error(self) -> bool:
        return self.banner.has_error

    @property
    def error_message(self) -> str:
        return self.banner.message

    @property
    def is_modal_open(self) -> bool:
        return self.deletion.is_modal_open

    @property
    def line_to_delete(self) -> Optional[str]:
        return self.deletion.line_to_delete

    @property
    def is_confirm_in_flight(self) -> bool:
        return self._confirm_in_flight

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        """Detach from the view. Results arriving afterwards are dropped."""
        self._disposed = True
        self._listeners.clear()
        logger.debug(f"Board for opportunity {self.opportunity_id} disposed.")

    def _notify(self, title: str, message: str, severity: str) -> None:
        if self.notifier is None:
            logger.info(f"[{severity}] {title}: {message}")
            return
        self.notifier(title, message, severity)

    # --- identity ---

    def apply_profile(self, result: Result[UserProfile, BoardException]) -> None:
        if self._disposed:
            logger.debug("Profile result arrived after teardown, ignored.")
            return

        if result.is_success():
            profile = result.value
            self.user_profile = profile.display_name
            self.is_admin_or_commercial = profile.is_admin_or_commercial
        else:
            logger.warning(f"Could not resolve the current user's profile: {result.error}")
            self.user_profile = None
            self.is_admin_or_commercial = False

        self.columns = build_columns(self.user_profile)
        self._changed()

    # --- loading ---

    def apply_line_items(self, items: List[LineItem]) -> None:
        if self._disposed:
            logger.debug("Line items arrived after teardown, ignored.")
            return

        self.rows = build_view_rows(items)
        self.banner = ErrorBanner.from_rows(self.rows)
        logger.info(
            f"Loaded {len(self.rows)} line items for {self.opportunity_id} (overstock warning: {self.banner.has_error})"
        )
        self._changed()

    def apply_load_error(self, error: BoardException) -> None:
        if self._disposed:
            return
        logger.error(f"Loading line items for {self.opportunity_id} failed: {error}")
        self._notify(constants.TOAST_TITLE_ERROR, _message_of(error), constants.SEVERITY_ERROR)

    async def load(self) -> None:
        result = await self.line_item_service.fetch_line_items(self.opportunity_id)
        if result.is_success():
            self.apply_line_items(result.value)
        else:
            self.apply_load_error(result.error)

    # --- row actions ---

    def handle_row_action(self, action: str, row: ViewRow) -> None:
        if action == constants.ACTION_DELETE:
            self.request_delete(row.id)
        elif action == constants.ACTION_VIEW_PRODUCT:
            self.view_product(row)
        else:
            logger.warning(f"Unknown row action '{action}' on line {row.id}")

    def view_product(self, row: ViewRow) -> None:
        if self.user_profile != constants.PROFILE_SYSTEM_ADMINISTRATOR:
            logger.warning(f"viewProduct refused for profile {self.user_profile!r}")
            return
        if not row.product_id:
            logger.warning(f"Line {row.id} has no linked product.")
            return
        url = self.product_url(row.product_id)
        logger.info(f"Opening product {row.product_id}: {url}")
        if self.navigator:
            self.navigator(url)

    def product_url(self, product_id: str) -> str:
        return f"{self.record_base_url}/{product_id}"

    def request_delete(self, line_id: str) -> None:
        if self.deletion.is_modal_open or self._confirm_in_flight:
            logger.debug(f"Delete of {line_id} ignored, confirmation already pending for {self.line_to_delete}")
            return
        self.deletion = DeletionIntent.confirming(line_id)
        self._changed()

    def cancel_delete(self) -> None:
        if self._confirm_in_flight:
            logger.debug("Cancel ignored while the delete call is outstanding.")
            return
        self.deletion = DeletionIntent.idle()
        self._changed()

    def begin_confirm(self) -> Optional[str]:
        """Marks the delete call as outstanding and returns the id to delete, or None when nothing is pending."""
        if not self.deletion.is_modal_open or self._confirm_in_flight:
            return None
        self._confirm_in_flight = True
        return self.deletion.line_to_delete

    def finish_confirm(self, result: Result[None, BoardException]) -> bool:
        """Settles an outstanding delete. Returns True when the rows must be reloaded."""
        reload_needed = False
        try:
            if self._disposed:
                return False
            if result.is_success():
                self._notify(constants.TOAST_TITLE_SUCCESS, constants.MESSAGE_LINE_DELETED,
                             constants.SEVERITY_SUCCESS)
                reload_needed = True
            else:
                self._notify(constants.TOAST_TITLE_ERROR, _message_of(result.error), constants.SEVERITY_ERROR)
        finally:
            self._confirm_in_flight = False
            self.deletion = DeletionIntent.idle()
            if not self._disposed:
                self._changed()
        return reload_needed

    async def confirm_delete(self) -> None:
        line_id = self.begin_confirm()
        if line_id is None:
            return

        result = Result.failure(BoardException("Delete did not complete."))
        try:
            result = await self.line_item_service.delete_line_item(line_id)
        finally:
            reload_needed = self.finish_confirm(result)
        if reload_needed:
            await self.load()


def _message_of(error) -> str:
    if isinstance(error, BoardException):
        return error.message
    return str(error)
