import unittest
import uuid
from datetime import timedelta

from notification.tracker import SuppressionGuard
from tests.fixtures.reminder_fixtures import NOW, make_reminder


class TestMinutesUntilDue(unittest.TestCase):

    def test_floors_partial_minutes(self):
        self.assertEqual(SuppressionGuard.minutes_until_due(NOW + timedelta(minutes=90, seconds=59), NOW), 90)

    def test_negative_when_overdue(self):
        # floor(-0.5) is -1
        self.assertEqual(SuppressionGuard.minutes_until_due(NOW - timedelta(seconds=30), NOW), -1)
        self.assertEqual(SuppressionGuard.minutes_until_due(NOW - timedelta(hours=2), NOW), -120)

    def test_naive_values_treated_as_utc(self):
        due = (NOW + timedelta(minutes=10)).replace(tzinfo=None)
        self.assertEqual(SuppressionGuard.minutes_until_due(due, NOW), 10)


class TestSuppressionGuard(unittest.TestCase):

    def setUp(self):
        self.guard = SuppressionGuard(cooldown_hours=12)
        self.user_id = uuid.uuid4()

    def test_lead_time_longer_than_remaining_time_notifies(self):
        reminder = make_reminder(self.user_id, due_date=NOW + timedelta(minutes=90), reminder_lead_minutes=180)
        decision = self.guard.evaluate(reminder, NOW)
        self.assertEqual(decision.minutes_until_due, 90)
        self.assertTrue(decision.should_notify)
        self.assertTrue(decision.allowed)

    def test_lead_time_shorter_than_remaining_time_waits(self):
        reminder = make_reminder(self.user_id, due_date=NOW + timedelta(minutes=90), reminder_lead_minutes=60)
        decision = self.guard.evaluate(reminder, NOW)
        self.assertFalse(decision.should_notify)
        self.assertFalse(decision.allowed)

    def test_lead_time_boundary_is_inclusive(self):
        reminder = make_reminder(self.user_id, due_date=NOW + timedelta(minutes=60), reminder_lead_minutes=60)
        self.assertTrue(self.guard.evaluate(reminder, NOW).should_notify)

    def test_notified_six_hours_ago_is_suppressed(self):
        reminder = make_reminder(self.user_id, last_notified_at=NOW - timedelta(hours=6))
        decision = self.guard.evaluate(reminder, NOW)
        self.assertTrue(decision.should_notify)
        self.assertTrue(decision.suppressed)
        self.assertFalse(decision.allowed)

    def test_notified_thirteen_hours_ago_proceeds(self):
        reminder = make_reminder(self.user_id, last_notified_at=NOW - timedelta(hours=13))
        decision = self.guard.evaluate(reminder, NOW)
        self.assertFalse(decision.suppressed)
        self.assertTrue(decision.allowed)

    def test_exactly_at_cooldown_proceeds(self):
        self.assertFalse(self.guard.is_suppressed(NOW - timedelta(hours=12), NOW))

    def test_never_notified_is_not_suppressed(self):
        self.assertFalse(self.guard.is_suppressed(None, NOW))

    def test_overdue_reminder_still_notifies(self):
        reminder = make_reminder(self.user_id, due_date=NOW - timedelta(minutes=15))
        decision = self.guard.evaluate(reminder, NOW)
        self.assertEqual(decision.minutes_until_due, -15)
        self.assertTrue(decision.allowed)

    def test_uses_next_due_date(self):
        reminder = make_reminder(self.user_id, due_date=NOW - timedelta(days=30),
                                 next_due_date=NOW + timedelta(days=3), reminder_lead_minutes=1440)
        self.assertFalse(self.guard.evaluate(reminder, NOW).should_notify)

    def test_custom_cooldown(self):
        guard = SuppressionGuard(cooldown_hours=1)
        self.assertFalse(guard.is_suppressed(NOW - timedelta(hours=2), NOW))
        self.assertTrue(guard.is_suppressed(NOW - timedelta(minutes=30), NOW))


if __name__ == '__main__':
    unittest.main()
