"""
Optimistic stock edits.

Server data stays the last confirmed truth. Unconfirmed quantities live in a
separate overlay keyed by (variant_id, location_id) and are only used for display.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from core.errors import DomainError, EditInProgressError, TransportError, ValidationError
from core.logging import get_logger

logger = get_logger(__name__)

StockKey = Tuple[int, int]
StockWriter = Callable[[int, int, int], Dict[str, Any]]


@dataclass
class EditSession:
    variant_id: int
    location_id: int
    value: str = ""

    @property
    def key(self) -> StockKey:
        return (self.variant_id, self.location_id)


def parse_quantity(value: Any) -> int:
    """Parse operator input as a non-negative integer."""
    if isinstance(value, bool):
        raise ValidationError("Please enter a valid quantity")
    if isinstance(value, int):
        quantity = value
    else:
        text = str(value if value is not None else "").strip()
        if not text:
            raise ValidationError("Please enter a quantity")
        try:
            quantity = int(text)
        except ValueError:
            raise ValidationError(f"Please enter a valid quantity (got {text!r})")
    if quantity < 0:
        raise ValidationError("Quantity must be zero or more")
    return quantity


class EditTracker:
    """
    Tracks one active editing cell and the pending (optimistic) quantities.

    `writer(variant_id, location_id, quantity)` performs the remote write and
    raises TransportError / DomainError on failure.
    """

    def __init__(self, products: List[dict], writer: StockWriter):
        self.products = products
        self.writer = writer
        self.pending: Dict[StockKey, int] = {}
        self.session: Optional[EditSession] = None
        self._in_flight = False

    def refresh(self, products: List[dict]) -> None:
        self.products = products

    def _record(self, variant_id: int, location_id: int) -> dict:
        for product in self.products:
            for variant in product.get("variants") or []:
                if variant.get("id") != variant_id:
                    continue
                for record in variant.get("inventory_by_location") or []:
                    if record.get("location_id") == location_id:
                        return record
        raise KeyError(f"No stock record for variant {variant_id} at location {location_id}")

    def confirmed_stock(self, variant_id: int, location_id: int) -> Optional[int]:
        return self._record(variant_id, location_id).get("available")

    def displayed_stock(self, variant_id: int, location_id: int) -> Optional[int]:
        key = (variant_id, location_id)
        if key in self.pending:
            return self.pending[key]
        return self.confirmed_stock(variant_id, location_id)

    def is_editing(self, variant_id: int, location_id: int) -> bool:
        return self.session is not None and self.session.key == (variant_id, location_id)

    @property
    def is_submitting(self) -> bool:
        return self._in_flight

    def begin_edit(self, variant_id: int, location_id: int) -> EditSession:
        if self.session is not None:
            if self.session.key == (variant_id, location_id):
                return self.session
            raise EditInProgressError(
                f"Already editing variant {self.session.variant_id} at location {self.session.location_id}"
            )
        current = self.displayed_stock(variant_id, location_id)
        self.session = EditSession(variant_id, location_id, "" if current is None else str(current))
        return self.session

    def set_value(self, value: str) -> None:
        self._require_session().value = value

    def step(self, delta: int) -> str:
        """Nudge the edited value up or down, never below zero."""
        session = self._require_session()
        try:
            current = int(session.value.strip() or "0")
        except ValueError:
            current = 0
        session.value = str(max(0, current + delta))
        return session.value

    def cancel_edit(self) -> None:
        if self._in_flight:
            raise EditInProgressError("A stock update is in progress")
        self.session = None

    def submit_edit(self, value: Any = None) -> Dict[str, Any]:
        session = self._require_session()
        if self._in_flight:
            raise EditInProgressError("A stock update is in progress")

        quantity = parse_quantity(session.value if value is None else value)
        key = session.key
        self.pending[key] = quantity
        self._in_flight = True
        try:
            result = self.writer(session.variant_id, session.location_id, quantity)
        except (TransportError, DomainError) as e:
            logger.warning(
                "Stock update failed, reverting",
                variant_id=session.variant_id,
                location_id=session.location_id,
                error=str(e),
            )
            raise
        finally:
            self.pending.pop(key, None)
            self._in_flight = False

        confirmed = result.get("newQuantity", quantity) if isinstance(result, dict) else quantity
        self._record(session.variant_id, session.location_id)["available"] = confirmed
        self.session = None
        logger.info(
            "Stock update confirmed",
            variant_id=key[0],
            location_id=key[1],
            quantity=confirmed,
        )
        return result

    def _require_session(self) -> EditSession:
        if self.session is None:
            raise EditInProgressError("No stock cell is being edited")
        return self.session
