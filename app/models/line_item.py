# app/models/line_item.py
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from app.core.exceptions import ValidationError
from app.utils import constants


def _number(record: Dict[str, Any], key: str) -> Optional[float]:
    value = record.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(key, "expected a number", value)
    return value


@dataclass(frozen=True)
class LineItem:
    """One opportunity line item as returned by the fetch endpoint."""
    id: str
    opportunity_id: Optional[str]
    product_id: Optional[str]
    product_name: str
    unit_price: Optional[float]
    total_price: Optional[float]
    quantity: Optional[float]
    stock: Optional[float]

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "LineItem":
        """
        Build a LineItem from the wire shape
        {Id, OpportunityId, Product2Id, Product2: {Name, QuantityInStock__c}, UnitPrice, TotalPrice, Quantity}.
        """
        if not isinstance(record, dict):
            raise ValidationError("record", "expected an object", record)
        line_id = record.get("Id")
        if not line_id:
            raise ValidationError("Id", "line item has no identifier", record)

        product = record.get("Product2")
        if product is None:
            product = {}
        elif not isinstance(product, dict):
            raise ValidationError("Product2", "expected an object", product)
        stock = product.get("QuantityInStock__c", product.get("QuantityInStock"))
        if stock is not None and (isinstance(stock, bool) or not isinstance(stock, (int, float))):
            raise ValidationError("QuantityInStock__c", "expected a number", stock)

        return cls(
            id=line_id,
            opportunity_id=record.get("OpportunityId"),
            product_id=record.get("Product2Id"),
            product_name=product.get("Name") or "",
            unit_price=_number(record, "UnitPrice"),
            total_price=_number(record, "TotalPrice"),
            quantity=_number(record, "Quantity"),
            stock=stock,
        )


@dataclass(frozen=True)
class ViewRow:
    id: str
    product_id: Optional[str]
    product_name: str
    unit_price: Optional[float]
    total_price: Optional[float]
    quantity: Optional[float]
    stock: Optional[float]
    quantity_style: str
    stock_warning: str
    delete_style: str

    @property
    def is_overstock(self) -> bool:
        return _greater(self.quantity, self.stock)

    @classmethod
    def from_line_item(cls, item: LineItem) -> "ViewRow":
        overstock = _greater(item.quantity, item.stock)
        return cls(
            id=item.id,
            product_id=item.product_id,
            product_name=item.product_name,
            unit_price=item.unit_price,
            total_price=item.total_price,
            quantity=item.quantity,
            stock=item.stock,
            quantity_style=constants.STYLE_QUANTITY_ERROR if overstock else constants.STYLE_QUANTITY_OK,
            stock_warning=constants.STYLE_CELL_WARNING if overstock else "",
            delete_style=constants.STYLE_DELETE_WARNING if overstock else "",
        )


def _greater(left: Optional[float], right: Optional[float]) -> bool:
    # Unknown stock or quantity is never flagged
    if left is None or right is None:
        return False
    return left > right


def build_view_rows(items: Iterable[LineItem]) -> List[ViewRow]:
    return [ViewRow.from_line_item(item) for item in items]


@dataclass(frozen=True)
class UserProfile:
    display_name: Optional[str] = None

    @property
    def is_admin_or_commercial(self) -> bool:
        return self.display_name in constants.PRIVILEGED_PROFILES

    @property
    def is_system_administrator(self) -> bool:
        return self.display_name == constants.PROFILE_SYSTEM_ADMINISTRATOR


@dataclass(frozen=True)
class DeletionIntent:
    """Pending delete confirmation. Use idle() / confirming() rather than the constructor."""
    is_modal_open: bool = False
    line_to_delete: Optional[str] = None

    @classmethod
    def idle(cls) -> "DeletionIntent":
        return cls(is_modal_open=False, line_to_delete=None)

    @classmethod
    def confirming(cls, line_id: str) -> "DeletionIntent":
        if not line_id:
            raise ValidationError("line_id", "a line item id is required to confirm a delete", line_id)
        return cls(is_modal_open=True, line_to_delete=line_id)


@dataclass(frozen=True)
class ErrorBanner:
    has_error: bool = False
    message: str = ""

    @classmethod
    def clear(cls) -> "ErrorBanner":
        return cls(has_error=False, message="")

    @classmethod
    def from_rows(cls, rows: Iterable[ViewRow], message: str = constants.MESSAGE_OVERSTOCK_WARNING) -> "ErrorBanner":
        # stock < quantity here, quantity > stock for the row styling
        has_error = any(
            row.stock is not None and row.quantity is not None and row.stock < row.quantity
            for row in rows
        )
        return cls(has_error=has_error, message=message if has_error else "")
