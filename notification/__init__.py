"""
Notification Module

Reminder delivery over email, push and in-app channels.

Usage:
    from notification import NotificationDispatcher, EmailSender, PushSender, InAppSender

    dispatcher = NotificationDispatcher([
        EmailSender(email_gateway, builder),
        PushSender(push_gateway, builder),
        InAppSender(uow, builder),
    ])
    result = dispatcher.dispatch(reminder, user)
"""

from notification.schemas import ChannelResult, DispatchResult

from notification.gateways import (
    GatewayError,
    EmailGateway,
    SmtpEmailGateway,
    PushGateway,
    OneSignalGateway,
    FcmGateway,
    build_push_gateway,
)

from notification.message_builder import NotificationMessageBuilder

from notification.channels import (
    ReminderSender,
    EmailSender,
    PushSender,
    InAppSender,
)

from notification.tracker import SuppressionGuard, GuardDecision

from notification.dispatcher import NotificationDispatcher

__all__ = [
    # Results
    'ChannelResult',
    'DispatchResult',
    # Gateways
    'GatewayError',
    'EmailGateway',
    'SmtpEmailGateway',
    'PushGateway',
    'OneSignalGateway',
    'FcmGateway',
    'build_push_gateway',
    # Channels
    'NotificationMessageBuilder',
    'ReminderSender',
    'EmailSender',
    'PushSender',
    'InAppSender',
    # Guard
    'SuppressionGuard',
    'GuardDecision',
    # Dispatch
    'NotificationDispatcher',
]
