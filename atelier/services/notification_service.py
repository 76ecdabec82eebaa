# atelier/services/notification_service.py
from typing import Optional

from atelier.celery_worker import celery_app
from atelier.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Order notifications, dispatched through Celery so the request
    never waits on delivery. Called after commit: a broker outage is
    logged and must not undo an order that is already stored.
    """

    def order_placed(self, user_id: str, order_number: str, total: str) -> None:
        self._dispatch(user_id, order_number, "PENDING_PAYMENT", f"Order placed, total {total}")

    def status_changed(self, user_id: str, order_number: str, status: str, note: Optional[str] = None) -> None:
        self._dispatch(user_id, order_number, status, note)

    @staticmethod
    def _dispatch(user_id: str, order_number: str, status: str, note: Optional[str]) -> None:
        try:
            send_order_notification_task.delay(user_id, order_number, status, note)
        except Exception:
            logger.exception(f"Could not queue notification for order {order_number}")


@celery_app.task(name="atelier.services.notification_service.send_order_notification_task")
def send_order_notification_task(user_id: str, order_number: str, status: str, note: Optional[str] = None):
    """
    Delivery channel (email/SMS/push) is not wired up yet, the task only logs.
    """
    logger.info(f"[NOTIFICATION] User {user_id}: order {order_number} is now {status} ({note or '-'})")

    return {"user_id": user_id, "order_number": order_number, "status": status, "sent": True}
