# app/services/notification_service.py
from app.celery_worker import celery_app
from app.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Serwis do wysylania powiadomien.
    Uzywa Celery do asynchronicznego przetwarzania, blad kolejki nie psuje
    zakonczonej juz transakcji - tylko warning w logach.
    """

    @staticmethod
    def _enqueue(task, *args):
        try:
            task.delay(*args)
        except Exception as e:
            logger.warning(f"Failed to enqueue {task.name}{args}: {e}")

    def send_order_notification(self, user_id: int, order_id: int):
        self._enqueue(send_order_notification_task, user_id, order_id)

    def send_sale_notification(self, seller_id: int, purchase_id: int):
        self._enqueue(send_sale_notification_task, seller_id, purchase_id)

    def send_status_notification(self, user_id: int, kind: str, record_id: int, status: str):
        self._enqueue(send_status_notification_task, user_id, kind, record_id, status)


@celery_app.task(name="app.services.notification_service.send_order_notification_task")
def send_order_notification_task(user_id: int, order_id: int):
    """
    Celery task - w prawdziwym systemie wyslalby email/SMS/push.
    Teraz tylko loguje.
    """
    logger.info(f"[NOTIFICATION] User {user_id}: Order {order_id} placed")
    return {"user_id": user_id, "order_id": order_id, "status": "sent"}


@celery_app.task(name="app.services.notification_service.send_sale_notification_task")
def send_sale_notification_task(seller_id: int, purchase_id: int):
    logger.info(f"[NOTIFICATION] Seller {seller_id}: new purchase {purchase_id}")
    return {"seller_id": seller_id, "purchase_id": purchase_id, "status": "sent"}


@celery_app.task(name="app.services.notification_service.send_status_notification_task")
def send_status_notification_task(user_id: int, kind: str, record_id: int, status: str):
    logger.info(f"[NOTIFICATION] User {user_id}: {kind} {record_id} is now {status}")
    return {"user_id": user_id, "kind": kind, "record_id": record_id, "status": status}
