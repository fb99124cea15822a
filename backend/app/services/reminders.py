"""
Order completion reminders.

The scheduler only records reminders; delivering them is left to whatever
notification channel consumes `pending`. Reminder ids are derived from the
order id, so rescheduling an order replaces its previous reminder.
"""
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, Optional

from app.models.stock import utcnow

logger = logging.getLogger(__name__)

REMINDER_ID_PREFIX = "order_reminder_"


@dataclass
class ScheduledReminder:
    notification_id: str
    order_id: uuid.UUID
    fire_at: datetime
    title: str
    body: str
    user_info: Dict[str, str] = field(default_factory=dict)


class ReminderScheduler:
    def __init__(self, authorized: bool = False):
        self.authorized = authorized
        self.pending: Dict[str, ScheduledReminder] = {}

    @staticmethod
    def notification_id(order_id: uuid.UUID) -> str:
        return f"{REMINDER_ID_PREFIX}{order_id}"

    def schedule_order_completion_reminder(
        self,
        order_id: uuid.UUID,
        order_reference: Optional[str],
        customer_name: Optional[str],
        completion_date: datetime,
        time_before_completion: int,
        now: Optional[datetime] = None,
    ) -> Optional[str]:
        """
        Schedule a reminder `time_before_completion` seconds before completion_date.
        Returns the notification id, or None when notifications are not
        authorised or the reminder time has already passed.
        """
        if not self.authorized:
            logger.info("Notifications not authorised; reminder for order %s skipped", order_id)
            return None

        fire_at = completion_date - timedelta(seconds=time_before_completion)
        if fire_at <= (now or utcnow()):
            logger.info("Reminder time for order %s is in the past; skipped", order_id)
            return None

        notification_id = self.notification_id(order_id)
        display_name = customer_name or order_reference or "Unknown Order"
        self.pending[notification_id] = ScheduledReminder(
            notification_id=notification_id,
            order_id=order_id,
            fire_at=fire_at,
            title="Order Completion Reminder",
            body=f"Order for {display_name} is due to complete on {completion_date:%d %b %Y %H:%M}",
            user_info={"orderId": str(order_id), "type": "order_completion"},
        )
        logger.info("Scheduled reminder for order %s at %s", order_id, fire_at)
        return notification_id

    def cancel_reminder(self, notification_id: str) -> None:
        if self.pending.pop(notification_id, None) is not None:
            logger.info("Cancelled reminder %s", notification_id)

    def cancel_all_order_reminders(self, order_id: uuid.UUID) -> None:
        self.cancel_reminder(self.notification_id(order_id))

    def close(self) -> None:
        self.pending.clear()
