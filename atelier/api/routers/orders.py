# atelier/api/routers/orders.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from atelier.api.deps import get_actor
from atelier.api.errors import http_errors
from atelier.data.database import get_db
from atelier.domain.actor import Actor
from atelier.domain.enums import OrderStatus
from atelier.domain.schemas import OrderCreate, OrderListOut, OrderOut, OrderStatusUpdate
from atelier.services.notification_service import NotificationService
from atelier.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(db: Session):
    return OrderService(db, notifier=NotificationService())


@router.post("", response_model=OrderOut, status_code=201)
def create_order(
    payload: OrderCreate,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """
    Checkout: turns the caller's cart into an order and empties the cart.
    Notification goes out asynchronously.
    """
    with http_errors():
        return get_service(db).create_order(
            actor,
            shipping_address_id=payload.shipping_address_id,
            billing_address_id=payload.billing_address_id,
            payment_plan=payload.payment_plan,
            notes=payload.notes,
        )


@router.get("", response_model=OrderListOut)
def list_my_orders(
    status: Optional[OrderStatus] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    with http_errors():
        return get_service(db).list_user_orders(actor, status=status, page=page, limit=limit)


@router.get("/admin/all", response_model=OrderListOut)
def list_all_orders(
    status: Optional[OrderStatus] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    with http_errors():
        return get_service(db).list_all_orders(actor, status=status, page=page, limit=limit)


@router.get("/number/{order_number}", response_model=OrderOut)
def get_order_by_number(order_number: str, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    with http_errors():
        return get_service(db).get_order_by_number(actor, order_number)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(order_id: str, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    with http_errors():
        return get_service(db).get_order(actor, order_id)


@router.patch("/{order_id}/status", response_model=OrderOut)
def update_status(
    order_id: str,
    payload: OrderStatusUpdate,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Admin only. Moves the order along the status workflow."""
    with http_errors():
        return get_service(db).update_status(actor, order_id, payload.status, payload.note)


@router.post("/{order_id}/cancel", response_model=OrderOut)
def cancel_order(order_id: str, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    with http_errors():
        return get_service(db).cancel_order(actor, order_id)
