"""Product repository for data access."""

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy.orm import Session

from shopdesk.core.sorting import apply_order_by
from shopdesk.models.product import Product, StockStatus
from shopdesk.schemas.product import ProductCreate, ProductUpdate


class ProductRepository:
    """Repository for Product model."""

    def __init__(self, db: Session):
        self.db = db

    def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        category: str | None = None,
        stock_status: StockStatus | None = None,
        search: str | None = None,
        order_by: str | None = None,
    ) -> list[Product]:
        query = self.db.query(Product)
        if category is not None:
            query = query.filter(Product.category == category)
        if search:
            pattern = f"%{search}%"
            query = query.filter(Product.name.ilike(pattern) | Product.sku.ilike(pattern))
        if stock_status == StockStatus.OUT_OF_STOCK:
            query = query.filter(Product.stock <= 0)
        elif stock_status == StockStatus.LOW_STOCK:
            query = query.filter(Product.stock > 0, Product.stock <= Product.min_stock)
        elif stock_status == StockStatus.IN_STOCK:
            query = query.filter(Product.stock > Product.min_stock)
        query = apply_order_by(
            query, Product, order_by, default_field="name", default_direction="asc"
        )
        return query.offset(skip).limit(limit).all()

    def count(self) -> int:
        return self.db.query(Product).count()

    def get_by_id(self, product_id: UUID) -> Product | None:
        return self.db.query(Product).filter(Product.id == product_id).first()

    def get_by_ids(self, product_ids: Iterable[UUID]) -> list[Product]:
        ids = list(product_ids)
        if not ids:
            return []
        return self.db.query(Product).filter(Product.id.in_(ids)).all()

    def get_by_sku(self, sku: str) -> Product | None:
        return self.db.query(Product).filter(Product.sku == sku).first()

    def list_below_minimum(self, limit: int = 20) -> list[Product]:
        """Products at or below their minimum stock level, emptiest first."""
        return (
            self.db.query(Product)
            .filter(Product.stock <= Product.min_stock)
            .order_by(Product.stock.asc(), Product.name.asc())
            .limit(limit)
            .all()
        )

    def create(self, data: ProductCreate) -> Product:
        product = Product(**data.model_dump())
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        return product

    def update(self, product_id: UUID, data: ProductUpdate) -> Product | None:
        product = self.get_by_id(product_id)
        if not product:
            return None

        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(product, key, value)

        self.db.commit()
        self.db.refresh(product)
        return product

    def delete(self, product_id: UUID) -> bool:
        product = self.get_by_id(product_id)
        if not product:
            return False

        self.db.delete(product)
        self.db.commit()
        return True
