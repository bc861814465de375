"""Repository for stock adjustments and their audit log."""

from uuid import UUID

from sqlalchemy.orm import Session

from shopdesk.models.product import Product
from shopdesk.models.stock_movement import MovementType, StockMovement


class StockMovementRepository:
    def __init__(self, db: Session):
        self.db = db

    def adjust(
        self,
        product: Product,
        movement_type: MovementType,
        quantity: int,
        reason: str | None = None,
        performed_by: str = "system",
    ) -> StockMovement:
        """Apply a stock change to the product and log it in one commit.

        Removals never take stock below zero.
        """
        previous = int(product.stock)
        if not reason:
            reason = "Stock added" if movement_type == MovementType.ADD else "Stock removed"
        if movement_type == MovementType.ADD:
            new_stock = previous + quantity
        else:
            new_stock = max(0, previous - quantity)

        product.stock = new_stock  # type: ignore[assignment]
        movement = StockMovement(
            product_id=product.id,
            movement_type=movement_type.value,
            quantity=quantity,
            previous_stock=previous,
            new_stock=new_stock,
            reason=reason,
            performed_by=performed_by,
        )
        self.db.add(movement)
        self.db.commit()
        self.db.refresh(product)
        self.db.refresh(movement)
        return movement

    def get_for_product(
        self, product_id: UUID, skip: int = 0, limit: int = 50
    ) -> list[StockMovement]:
        return (
            self.db.query(StockMovement)
            .filter(StockMovement.product_id == product_id)
            .order_by(StockMovement.created_at.desc(), StockMovement.id)
            .offset(skip)
            .limit(limit)
            .all()
        )
