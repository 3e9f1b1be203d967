#!/usr/bin/env python3
"""
Notification Dispatcher - fans one reminder out to its enabled channels

Usage:
    from notification.dispatcher import NotificationDispatcher

    dispatcher = NotificationDispatcher([email_sender, push_sender, in_app_sender])
    result = dispatcher.dispatch(reminder, user, now=now)
"""

import logging
from datetime import datetime
from typing import Dict, Iterable, Optional

from database.models import ChannelType, Reminder, User
from notification.channels import ReminderSender
from notification.schemas import ChannelResult, DispatchResult

logger = logging.getLogger(__name__)

# Field on DispatchResult that holds each channel's result
RESULT_FIELDS = {
    ChannelType.EMAIL: 'email',
    ChannelType.PUSH: 'push',
    ChannelType.IN_APP: 'in_app',
}


class NotificationDispatcher:
    """
    Sends a reminder through every channel it has enabled.

    Channel failures never stop sibling channels. ``overall_success`` is
    False only when the dispatch itself breaks down.
    """

    def __init__(self, senders: Iterable[ReminderSender]):
        self.senders: Dict[ChannelType, ReminderSender] = {
            sender.channel_type: sender for sender in senders
        }

    def register_sender(self, sender: ReminderSender) -> None:
        self.senders[sender.channel_type] = sender

    def dispatch(self, reminder: Reminder, user: User, now: Optional[datetime] = None) -> DispatchResult:
        """Send on every enabled channel; ``now`` is forwarded to each sender."""
        result = DispatchResult()
        try:
            # Stable order: email, push, in-app
            channels = [c for c in RESULT_FIELDS if c in reminder.enabled_channels]
            for channel in channels:
                setattr(result, RESULT_FIELDS[channel], self._send_one(channel, reminder, user, now))
            result.overall_success = True
        except Exception as e:
            logger.error(f"Dispatch failed for reminder {reminder.id}: {e}", exc_info=True)
            result.error = str(e)
            result.overall_success = False
            return result

        delivered = result.delivered_channels()
        logger.info(
            f"Reminder {reminder.id} dispatched on {len(channels)} channel(s), "
            f"delivered: {', '.join(delivered) or 'none'}"
        )
        return result

    def _send_one(self, channel: ChannelType, reminder: Reminder, user: User,
                  now: Optional[datetime]) -> ChannelResult:
        sender = self.senders.get(channel)
        if sender is None:
            logger.warning(f"No sender registered for channel {channel.value}")
            return ChannelResult.failed(f"no sender for channel {channel.value}")
        try:
            return sender.send(reminder, user, now=now)
        except Exception as e:
            logger.error(f"{channel.value} sender raised for reminder {reminder.id}: {e}", exc_info=True)
            return ChannelResult.failed(str(e))
