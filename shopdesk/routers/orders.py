"""Order API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from shopdesk.core.database import get_db
from shopdesk.models.order import Order
from shopdesk.repositories.order_repository import OrderRepository
from shopdesk.schemas.order import (
    OrderCreate,
    OrderResponse,
    OrderUpdate,
    PaymentStatusUpdate,
)

router = APIRouter()


@router.post(
    "/",
    response_model=OrderResponse,
    status_code=201,
    summary="Create order",
    responses={409: {"description": "Order or bill number already exists"}},
)
async def create_order(
    data: OrderCreate,
    db: Session = Depends(get_db),
) -> Order:
    repo = OrderRepository(db)
    if repo.get_by_order_id(data.order_id):
        raise HTTPException(status_code=409, detail="Order with this ID already exists")
    if repo.get_by_bill_number(data.bill_number):
        raise HTTPException(status_code=409, detail="Order with this bill number already exists")
    return repo.create(data)


@router.get(
    "/",
    response_model=list[OrderResponse],
    summary="List orders",
)
async def list_orders(
    response: Response,
    payment_status: str | None = None,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    order_by: str | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[Order]:
    repo = OrderRepository(db)
    response.headers["X-Total-Count"] = str(repo.count())
    return repo.get_all(
        skip=skip, limit=limit, payment_status=payment_status, order_by=order_by
    )


@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    summary="Get order",
    responses={404: {"description": "Order not found"}},
)
async def get_order(
    order_id: str,
    db: Session = Depends(get_db),
) -> Order:
    order = OrderRepository(db).get_by_order_id(order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.put(
    "/{order_id}",
    response_model=OrderResponse,
    summary="Update order",
    responses={404: {"description": "Order not found"}},
)
async def update_order(
    order_id: str,
    data: OrderUpdate,
    db: Session = Depends(get_db),
) -> Order:
    order = OrderRepository(db).update(order_id, data)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.put(
    "/{order_id}/payment_status",
    response_model=OrderResponse,
    summary="Update payment status",
    responses={404: {"description": "Order not found"}},
)
async def update_payment_status(
    order_id: str,
    data: PaymentStatusUpdate,
    db: Session = Depends(get_db),
) -> Order:
    """Set the payment status; settled orders lose their payment alert on the next refresh."""
    order = OrderRepository(db).set_payment_status(order_id, data.payment_status)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.delete(
    "/{order_id}",
    status_code=204,
    summary="Delete order",
    responses={404: {"description": "Order not found"}},
)
async def delete_order(
    order_id: str,
    db: Session = Depends(get_db),
) -> None:
    if not OrderRepository(db).delete(order_id):
        raise HTTPException(status_code=404, detail="Order not found")
