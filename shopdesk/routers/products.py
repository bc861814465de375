"""Product API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from shopdesk.core.database import get_db
from shopdesk.models.product import Product, StockStatus
from shopdesk.models.stock_movement import MovementType, StockMovement
from shopdesk.repositories.product_repository import ProductRepository
from shopdesk.repositories.stock_movement_repository import StockMovementRepository
from shopdesk.schemas.product import (
    ProductCreate,
    ProductResponse,
    ProductUpdate,
    StockAdjustRequest,
    StockAdjustResponse,
    StockMovementResponse,
)
from shopdesk.services.alert_generators import StockAlertGenerator

router = APIRouter()


@router.post(
    "/",
    response_model=ProductResponse,
    status_code=201,
    summary="Create product",
    responses={409: {"description": "Product with this SKU already exists"}},
)
async def create_product(
    data: ProductCreate,
    db: Session = Depends(get_db),
) -> Product:
    repo = ProductRepository(db)
    if repo.get_by_sku(data.sku):
        raise HTTPException(status_code=409, detail="Product with this SKU already exists")
    return repo.create(data)


@router.get(
    "/",
    response_model=list[ProductResponse],
    summary="List products",
)
async def list_products(
    response: Response,
    category: str | None = None,
    stock_status: StockStatus | None = None,
    search: str | None = Query(default=None, max_length=100),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    order_by: str | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[Product]:
    repo = ProductRepository(db)
    response.headers["X-Total-Count"] = str(repo.count())
    return repo.get_all(
        skip=skip,
        limit=limit,
        category=category,
        stock_status=stock_status,
        search=search,
        order_by=order_by,
    )


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Get product",
    responses={404: {"description": "Product not found"}},
)
async def get_product(
    product_id: UUID,
    db: Session = Depends(get_db),
) -> Product:
    product = ProductRepository(db).get_by_id(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Update product",
    responses={404: {"description": "Product not found"}},
)
async def update_product(
    product_id: UUID,
    data: ProductUpdate,
    db: Session = Depends(get_db),
) -> Product:
    """Update product details; a changed minimum re-evaluates the stock alert."""
    product = ProductRepository(db).update(product_id, data)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    if data.min_stock is not None:
        StockAlertGenerator(db).check_stock(
            str(product.id), str(product.name), int(product.stock), int(product.min_stock)
        )
    return product


@router.delete(
    "/{product_id}",
    status_code=204,
    summary="Delete product",
    responses={404: {"description": "Product not found"}},
)
async def delete_product(
    product_id: UUID,
    db: Session = Depends(get_db),
) -> None:
    if not ProductRepository(db).delete(product_id):
        raise HTTPException(status_code=404, detail="Product not found")
    StockAlertGenerator(db).resolve_product_alerts(str(product_id), "Product deleted")


@router.post(
    "/{product_id}/stock",
    response_model=StockAdjustResponse,
    summary="Adjust product stock",
    responses={404: {"description": "Product not found"}},
)
async def adjust_stock(
    product_id: UUID,
    data: StockAdjustRequest,
    db: Session = Depends(get_db),
) -> StockAdjustResponse:
    """Add or remove stock, log the movement and update the product's stock alert."""
    product = ProductRepository(db).get_by_id(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    movement = StockMovementRepository(db).adjust(
        product,
        MovementType(data.movement_type),
        data.quantity,
        reason=data.reason,
        performed_by=data.performed_by,
    )
    outcome = StockAlertGenerator(db).check_stock(
        str(product.id), str(product.name), int(product.stock), int(product.min_stock)
    )
    return StockAdjustResponse(
        product=ProductResponse.model_validate(product),
        movement=StockMovementResponse.model_validate(movement),
        alert_status=outcome.status,
    )


@router.get(
    "/{product_id}/stock_movements",
    response_model=list[StockMovementResponse],
    summary="List stock movements",
    responses={404: {"description": "Product not found"}},
)
async def list_stock_movements(
    product_id: UUID,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=500),
    db: Session = Depends(get_db),
) -> list[StockMovement]:
    if not ProductRepository(db).get_by_id(product_id):
        raise HTTPException(status_code=404, detail="Product not found")
    return StockMovementRepository(db).get_for_product(product_id, skip=skip, limit=limit)
