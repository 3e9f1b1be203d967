#!/usr/bin/env python3
"""
Notification Channels - one sender per delivery channel

Every sender implements the same ``send(reminder, user, now=None) -> ChannelResult``
contract, so the dispatcher can treat them interchangeably and new channels
can be added without touching it.

Usage:
    from notification.channels import EmailSender

    sender = EmailSender(gateway, builder)
    result = sender.send(reminder, user)
    if not result.success:
        print(result.detail)
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
import logging

from core.utils import ensure_utc, mask_email, utcnow
from database.models import ChannelType, NotificationPriority, Reminder, User
from database.uow import UnitOfWorkFactory
from notification.gateways import EmailGateway, PushGateway
from notification.message_builder import NotificationMessageBuilder
from notification.schemas import ChannelResult

logger = logging.getLogger(__name__)

NOT_CONFIGURED = "not configured"


class ReminderSender(ABC):
    """
    Abstract base class for all reminder channels.

    ``send`` reports failures through ChannelResult; the dispatcher still
    guards against senders that raise.
    """

    @property
    @abstractmethod
    def channel_type(self) -> ChannelType:
        """Return the channel this sender delivers on."""
        pass

    @abstractmethod
    def send(self, reminder: Reminder, user: User, now: Optional[datetime] = None) -> ChannelResult:
        """Deliver one reminder; ``now`` is the clock the caller evaluated it against."""
        pass


class EmailSender(ReminderSender):
    """Email channel; renders HTML and hands it to an EmailGateway."""

    def __init__(self, gateway: EmailGateway, builder: Optional[NotificationMessageBuilder] = None):
        self.gateway = gateway
        self.builder = builder or NotificationMessageBuilder()

    @property
    def channel_type(self) -> ChannelType:
        return ChannelType.EMAIL

    def send(self, reminder: Reminder, user: User, now: Optional[datetime] = None) -> ChannelResult:
        # Reminder's own address wins over the account email
        email_to = reminder.notification_email or user.email
        if not email_to:
            logger.error(f"No destination email address for reminder {reminder.id}")
            return ChannelResult.failed("no destination email address")

        message = self.builder.build_email(reminder, user)
        return self._deliver(email_to, message.subject, message.html_body)

    def send_test_email(self, email_to: str) -> ChannelResult:
        """Send a fixed message to verify SMTP settings end to end."""
        message = self.builder.build_test_email()
        return self._deliver(email_to, message.subject, message.html_body)

    def _deliver(self, email_to: str, subject: str, html_body: str) -> ChannelResult:
        try:
            response = self.gateway.send(email_to, subject, html_body)
        except Exception as e:
            logger.error(f"Failed to send email to {mask_email(email_to)}: {e}")
            return ChannelResult.failed(str(e), attempted_email=email_to)

        message_id = response.get('message_id')
        logger.info(f"Email sent to {mask_email(email_to)} (message id {message_id})")
        return ChannelResult.ok(message_id, message_id=message_id, sent_to=email_to)


class PushSender(ReminderSender):
    """Push channel; a missing or unconfigured gateway is reported, not raised."""

    def __init__(self, gateway: Optional[PushGateway], builder: Optional[NotificationMessageBuilder] = None):
        self.gateway = gateway
        self.builder = builder or NotificationMessageBuilder()

    @property
    def channel_type(self) -> ChannelType:
        return ChannelType.PUSH

    def send(self, reminder: Reminder, user: User, now: Optional[datetime] = None) -> ChannelResult:
        if self.gateway is None or not self.gateway.is_configured:
            logger.info("Push provider not configured, skipping push notification")
            return ChannelResult.failed(NOT_CONFIGURED)

        message = self.builder.build_push(reminder)
        try:
            response = self.gateway.send(str(user.id), message.title, message.body, message.payload)
        except Exception as e:
            logger.error(f"Failed to send push for reminder {reminder.id}: {e}")
            return ChannelResult.failed(str(e))

        logger.info(f"Push notification sent for reminder {reminder.id}")
        return ChannelResult.ok(response.get('id') or response.get('message_id'), **response)


class InAppSender(ReminderSender):
    """In-app channel; stores a Notification row in its own unit of work."""

    def __init__(self, uow: UnitOfWorkFactory, builder: Optional[NotificationMessageBuilder] = None):
        self.uow = uow
        self.builder = builder or NotificationMessageBuilder()

    @property
    def channel_type(self) -> ChannelType:
        return ChannelType.IN_APP

    def send(self, reminder: Reminder, user: User, now: Optional[datetime] = None) -> ChannelResult:
        now = ensure_utc(now) if now else utcnow()
        message = self.builder.build_in_app(reminder)
        priority = NotificationPriority.HIGH if reminder.is_overdue(now) else NotificationPriority.NORMAL

        try:
            with self.uow() as store:
                notification = store.notifications.create(
                    user_id=user.id,
                    notification_type='reminder',
                    title=message.title,
                    message=message.message,
                    related_id=reminder.id,
                    related_type='Reminder',
                    priority=priority.value,
                )
                notification_id = str(notification.id)
        except Exception as e:
            logger.error(f"Failed to create in-app notification for reminder {reminder.id}: {e}")
            return ChannelResult.failed(str(e))

        logger.info(f"In-app notification {notification_id} created for reminder {reminder.id}")
        return ChannelResult.ok(notification_id, notification_id=notification_id)
