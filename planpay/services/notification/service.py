"""E-mail notification queue backed by the `email_notifications` table."""

from sqlalchemy.exc import SQLAlchemyError

from planpay.common.errors import NotificationError
from planpay.common.logging import logger
from planpay.services.notification.models import EmailNotification
from planpay.services.payment.schemas import EmailNotificationFields


class EmailNotificationService:
    """Queues confirmation e-mails; delivery happens outside this service."""

    def __init__(self, session_factory) -> None:
        self.session_factory = session_factory

    async def send(self, fields: EmailNotificationFields) -> EmailNotification:
        """Persist the e-mail with its initial status and return the stored row."""

        try:
            with self.session_factory() as db:
                notification = EmailNotification(
                    recipient=fields.recipient,
                    subject=fields.subject,
                    content=fields.content,
                    status=fields.status.value,
                    user_id=fields.user_id,
                    payment_id=fields.payment_id,
                )
                db.add(notification)
                db.commit()
        except SQLAlchemyError as exc:
            raise NotificationError(f"could not queue e-mail for payment {fields.payment_id}") from exc
        logger.info(
            "email_notification_queued id=%s payment_id=%s status=%s",
            notification.id,
            notification.payment_id,
            notification.status,
        )
        return notification
