# atelier/api/routers/carts.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from atelier.api.deps import get_actor
from atelier.api.errors import http_errors
from atelier.data.database import get_db
from atelier.domain.actor import Actor
from atelier.domain.schemas import CartItemIn, CartItemUpdate, CartOut
from atelier.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


def get_service(db: Session):
    return CartService(db)


@router.get("", response_model=CartOut)
def get_cart(actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    """Current user's cart, created on first access."""
    with http_errors():
        return get_service(db).get_cart(actor.user_id)


@router.post("/items", response_model=CartOut)
def add_item(
    payload: CartItemIn,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Same product + same configuration merges into the existing line."""
    with http_errors():
        return get_service(db).add_item(
            user_id=actor.user_id,
            product_id=payload.product_id,
            configuration=payload.configuration,
            quantity=payload.quantity,
        )


@router.patch("/items/{item_id}", response_model=CartOut)
def update_item(
    item_id: str,
    payload: CartItemUpdate,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    with http_errors():
        return get_service(db).update_item(actor.user_id, item_id, payload.quantity)


@router.delete("/items/{item_id}", response_model=CartOut)
def remove_item(item_id: str, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    with http_errors():
        return get_service(db).remove_item(actor.user_id, item_id)


@router.delete("", response_model=CartOut)
def clear_cart(actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    with http_errors():
        return get_service(db).clear(actor.user_id)
