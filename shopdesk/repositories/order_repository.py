"""Order repository for data access."""

from collections.abc import Iterable

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from shopdesk.core.sorting import apply_order_by
from shopdesk.models.order import PENDING_PAYMENT_WORDS, Order
from shopdesk.models.shared import NEGATING_WORDS, SettlementState
from shopdesk.schemas.order import OrderCreate, OrderUpdate


class OrderRepository:
    """Repository for Order model."""

    def __init__(self, db: Session):
        self.db = db

    def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        payment_status: str | None = None,
        order_by: str | None = None,
    ) -> list[Order]:
        query = self.db.query(Order)
        if payment_status is not None:
            query = query.filter(func.lower(Order.payment_status) == payment_status.lower())
        query = apply_order_by(query, Order, order_by, default_field="date")
        return query.offset(skip).limit(limit).all()

    def count(self) -> int:
        return self.db.query(Order).count()

    def get_by_order_id(self, order_id: str) -> Order | None:
        return self.db.query(Order).filter(Order.order_id == order_id).first()

    def get_by_bill_number(self, bill_number: str) -> Order | None:
        return self.db.query(Order).filter(Order.bill_number == bill_number).first()

    def list_pending_payment(self, limit: int = 20) -> list[Order]:
        """Newest orders whose payment status reads as pending."""
        status = func.lower(Order.payment_status)
        # Substring prefilter; payment_state makes the final whole-word call.
        candidates = (
            self.db.query(Order)
            .filter(or_(*[status.contains(w) for w in PENDING_PAYMENT_WORDS | NEGATING_WORDS]))
            .order_by(Order.date.desc())
            .all()
        )
        return [o for o in candidates if o.payment_state == SettlementState.PENDING][:limit]

    def list_settled(self, order_ids: Iterable[str]) -> list[Order]:
        """Orders among ``order_ids`` whose payment status reads as settled."""
        ids = list(order_ids)
        if not ids:
            return []
        orders = self.db.query(Order).filter(Order.order_id.in_(ids)).all()
        return [o for o in orders if o.payment_state == SettlementState.SETTLED]

    def create(self, data: OrderCreate) -> Order:
        values = data.model_dump(exclude_none=True)
        values["payment_mode"] = data.payment_mode.value
        order = Order(**values)
        self.db.add(order)
        self.db.commit()
        self.db.refresh(order)
        return order

    def update(self, order_id: str, data: OrderUpdate) -> Order | None:
        order = self.get_by_order_id(order_id)
        if not order:
            return None

        update_data = data.model_dump(exclude_unset=True)
        if data.payment_mode is not None:
            update_data["payment_mode"] = data.payment_mode.value
        for key, value in update_data.items():
            setattr(order, key, value)

        self.db.commit()
        self.db.refresh(order)
        return order

    def set_payment_status(self, order_id: str, payment_status: str) -> Order | None:
        order = self.get_by_order_id(order_id)
        if not order:
            return None
        order.payment_status = payment_status  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(order)
        return order

    def delete(self, order_id: str) -> bool:
        order = self.get_by_order_id(order_id)
        if not order:
            return False

        self.db.delete(order)
        self.db.commit()
        return True
