# atelier/api/routers/payments.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from atelier.api.deps import get_actor
from atelier.api.errors import http_errors
from atelier.data.database import get_db
from atelier.domain.actor import Actor
from atelier.domain.schemas import PaymentCreate, PaymentOut, PaymentScheduleOut, PaymentStatusUpdate
from atelier.services.payment_service import PaymentService

router = APIRouter(prefix="/payments", tags=["payments"])


@router.get("/orders/{order_id}/schedule", response_model=PaymentScheduleOut)
def payment_schedule(order_id: str, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    with http_errors():
        return PaymentService(db).schedule(actor, order_id)


@router.post("/orders/{order_id}", response_model=PaymentOut, status_code=201)
def record_payment(
    order_id: str,
    payload: PaymentCreate,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    with http_errors():
        return PaymentService(db).record_payment(
            actor,
            order_id,
            amount=payload.amount,
            method=payload.method,
            provider=payload.provider,
            provider_ref=payload.provider_ref,
        )


@router.patch("/{payment_id}/status", response_model=PaymentOut)
def update_payment_status(
    payment_id: str,
    payload: PaymentStatusUpdate,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    with http_errors():
        return PaymentService(db).update_payment_status(
            actor, payment_id, payload.status, payload.failure_reason
        )
