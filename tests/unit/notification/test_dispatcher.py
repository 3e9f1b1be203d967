#!/usr/bin/env python3
"""
Tests for NotificationDispatcher: channel selection and failure isolation.
"""

import unittest
import uuid
from unittest.mock import Mock, PropertyMock, patch

import pytest

from database.models import ChannelType, Reminder
from notification.channels import EmailSender, PushSender, InAppSender, ReminderSender
from notification.dispatcher import NotificationDispatcher
from notification.schemas import ChannelResult
from tests.fixtures.reminder_fixtures import NOW, ReminderDbTestCase, make_gateway_mock, make_reminder, make_user


def fake_sender(channel: ChannelType, result=None, error=None) -> Mock:
    sender = Mock(spec=ReminderSender)
    sender.channel_type = channel
    if error is not None:
        sender.send.side_effect = error
    else:
        sender.send.return_value = result or ChannelResult.ok(f"{channel.value}-ok")
    return sender


class TestNotificationDispatcher(unittest.TestCase):

    def setUp(self):
        self.user = make_user(id=uuid.uuid4())
        self.email = fake_sender(ChannelType.EMAIL)
        self.push = fake_sender(ChannelType.PUSH)
        self.in_app = fake_sender(ChannelType.IN_APP)
        self.dispatcher = NotificationDispatcher([self.email, self.push, self.in_app])

    def test_only_enabled_channels_are_used(self):
        reminder = make_reminder(self.user.id, notify_email=True, notify_push=False, notify_in_app=True)

        result = self.dispatcher.dispatch(reminder, self.user)

        self.assertTrue(result.overall_success)
        self.assertTrue(result.email.success)
        self.assertIsNone(result.push)
        self.assertTrue(result.in_app.success)
        self.push.send.assert_not_called()
        self.assertEqual(result.delivered_channels(), ['email', 'in_app'])

    def test_no_enabled_channels(self):
        reminder = make_reminder(self.user.id, notify_email=False, notify_push=False, notify_in_app=False)

        result = self.dispatcher.dispatch(reminder, self.user)

        self.assertTrue(result.overall_success)
        self.assertEqual(result.channel_results(), {})

    def test_scan_time_is_forwarded_to_senders(self):
        reminder = make_reminder(self.user.id, notify_email=True, notify_push=False, notify_in_app=True)

        self.dispatcher.dispatch(reminder, self.user, now=NOW)

        self.email.send.assert_called_once_with(reminder, self.user, now=NOW)
        self.in_app.send.assert_called_once_with(reminder, self.user, now=NOW)

    def test_raising_sender_does_not_stop_siblings(self):
        self.email.send.side_effect = RuntimeError('boom')
        reminder = make_reminder(self.user.id, notify_email=True, notify_push=True, notify_in_app=True)

        result = self.dispatcher.dispatch(reminder, self.user)

        self.assertTrue(result.overall_success)
        self.assertFalse(result.email.success)
        self.assertEqual(result.email.detail, 'boom')
        self.assertTrue(result.push.success)
        self.assertTrue(result.in_app.success)

    def test_channel_failure_keeps_overall_success(self):
        self.push.send.return_value = ChannelResult.failed('not configured')
        reminder = make_reminder(self.user.id, notify_email=True, notify_push=True)

        result = self.dispatcher.dispatch(reminder, self.user)

        self.assertTrue(result.overall_success)
        self.assertFalse(result.push.success)
        self.assertIsNone(result.error)

    def test_missing_sender_is_failed_result(self):
        dispatcher = NotificationDispatcher([self.email])
        reminder = make_reminder(self.user.id, notify_email=True, notify_push=True)

        result = dispatcher.dispatch(reminder, self.user)

        self.assertTrue(result.overall_success)
        self.assertTrue(result.email.success)
        self.assertFalse(result.push.success)

    def test_orchestration_failure_sets_error(self):
        reminder = make_reminder(self.user.id)
        with patch.object(Reminder, 'enabled_channels', new_callable=PropertyMock) as channels:
            channels.side_effect = ValueError('corrupt channel flags')
            result = self.dispatcher.dispatch(reminder, self.user)

        self.assertFalse(result.overall_success)
        self.assertEqual(result.error, 'corrupt channel flags')
        self.email.send.assert_not_called()

    def test_register_sender_replaces_existing(self):
        replacement = fake_sender(ChannelType.EMAIL, ChannelResult.ok('replacement'))
        self.dispatcher.register_sender(replacement)
        reminder = make_reminder(self.user.id)

        result = self.dispatcher.dispatch(reminder, self.user)

        self.assertEqual(result.email.detail, 'replacement')
        self.email.send.assert_not_called()


@pytest.mark.db
class TestDispatcherWithRealSenders(ReminderDbTestCase):

    def setUp(self):
        super().setUp()
        self.user = self.add_user()

    def test_email_ok_and_in_app_store_failing(self):
        email_gateway = make_gateway_mock()
        broken_uow = Mock(side_effect=RuntimeError('disk I/O error'))
        dispatcher = NotificationDispatcher([
            EmailSender(email_gateway),
            PushSender(None),
            InAppSender(broken_uow),
        ])
        reminder = self.add_reminder(self.user, notify_email=True, notify_in_app=True)

        result = dispatcher.dispatch(reminder, self.user)

        self.assertTrue(result.overall_success)
        self.assertTrue(result.email.success)
        self.assertFalse(result.in_app.success)
        self.assertEqual(result.in_app.detail, 'disk I/O error')
        self.assertIsNone(result.push)

    def test_unconfigured_push_does_not_block_other_channels(self):
        email_gateway = make_gateway_mock()
        dispatcher = NotificationDispatcher([
            EmailSender(email_gateway),
            PushSender(None),
            InAppSender(self.uow),
        ])
        reminder = self.add_reminder(self.user, notify_email=True, notify_push=True, notify_in_app=True)

        result = dispatcher.dispatch(reminder, self.user)

        self.assertTrue(result.overall_success)
        self.assertFalse(result.push.success)
        self.assertEqual(result.push.detail, 'not configured')
        self.assertTrue(result.email.success)
        self.assertTrue(result.in_app.success)
        email_gateway.send.assert_called_once()
        self.assertEqual(self.count_notifications(), 1)


if __name__ == '__main__':
    unittest.main()
