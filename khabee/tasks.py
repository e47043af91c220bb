"""
Celery Tasks
Background work triggered by order changes.
"""

import logging
import time

from khabee.celery_worker import celery_app
from khabee.services.notifications import get_notification_service

logger = logging.getLogger(__name__)


@celery_app.task(
    bind=True,
    max_retries=3,
    default_retry_delay=5,
    autoretry_for=(ConnectionError,),
    retry_backoff=True
)
def notify_order_status(self, order_data: dict) -> dict:
    """
    Text the customer that their order changed status.

    Args:
        order_data: order_id, customer_phone, kitchen_name, status, total_price

    Returns:
        dict: Result of the send
    """
    task_id = self.request.id
    order_id = order_data.get("order_id", "unknown")

    logger.info(f"Task {task_id}: notifying order {order_id} -> {order_data.get('status')}")
    start_time = time.time()

    if not order_data.get("customer_phone"):
        logger.warning(f"Task {task_id}: order {order_id} has no customer phone")
        return {"success": False, "order_id": order_id, "message": "No phone number"}

    service = get_notification_service()
    result = service.send_order_status_update(
        order_id=order_id,
        customer_phone=order_data["customer_phone"],
        kitchen_name=order_data.get("kitchen_name", "your kitchen"),
        status=order_data["status"],
        total_price=float(order_data.get("total_price", 0.0)),
    )

    elapsed = round(time.time() - start_time, 3)
    if result.success:
        logger.info(f"Task {task_id}: order {order_id} notified in {elapsed}s")
    else:
        logger.warning(f"Task {task_id}: order {order_id} not notified - {result.error_message}")

    return {
        "success": result.success,
        "order_id": order_id,
        "message_id": result.message_id,
        "message": result.error_message or "sent",
        "task_id": task_id,
        "processing_time_seconds": elapsed,
    }
