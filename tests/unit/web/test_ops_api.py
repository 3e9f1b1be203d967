#!/usr/bin/env python3
"""
Unit tests for the ops API: health, scheduler status and manual triggers.
"""

import unittest
from datetime import timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from core.app_context import AppContext
from core.config_loader import AppConfig
from core.utils import utcnow
from database.database import build_engine
from database.init_db import init_db
from database.models import Notification, Reminder, User
from tests.fixtures.reminder_fixtures import make_gateway_mock
from web.backend.app import create_app
from web.backend.routers.scheduler import limiter


@pytest.mark.db
class TestOpsApi(unittest.TestCase):

    def setUp(self):
        limiter.reset()
        self.engine = build_engine("sqlite://")
        init_db(self.engine)
        self.email_gateway = make_gateway_mock()
        config = AppConfig(scheduler={'timezone': 'UTC'})
        self.ctx = AppContext.build(config, engine=self.engine, email_gateway=self.email_gateway)
        self.client = TestClient(create_app(self.ctx, start_scheduler=False))

    def tearDown(self):
        self.ctx.scheduler.stop()
        self.engine.dispose()

    def test_health(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {
            "status": "healthy",
            "service": "duewatch",
            "scheduler_running": False,
        })

    def test_status_when_stopped(self):
        response = self.client.get("/api/scheduler/status")
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertFalse(data["running"])
        self.assertEqual(data["jobs"], [])
        self.assertIsNone(data["last_scan"])

    def test_manual_scan_sends_due_reminder(self):
        with self.ctx.uow() as store:
            user = store.users.add(User(display_name="Asha", email="asha@example.com"))
            store.reminders.add(Reminder(
                user_id=user.id, title="Rent", amount=Decimal("25000"),
                due_date=utcnow() + timedelta(minutes=60), reminder_lead_minutes=120,
                notify_email=True, notify_push=False, notify_in_app=True,
            ))

        response = self.client.post("/api/scheduler/scan")

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertTrue(data["success"])
        self.assertEqual(data["report"]["found"], 1)
        self.assertEqual(data["report"]["notified"], 1)
        self.email_gateway.send.assert_called_once()
        with self.ctx.session_factory() as session:
            self.assertEqual(session.query(Notification).count(), 1)

        status = self.client.get("/api/scheduler/status").json()
        self.assertEqual(status["last_scan"]["notified"], 1)

    def test_manual_cleanup(self):
        with self.ctx.uow() as store:
            user = store.users.add(User(display_name="Asha", email="asha@example.com"))
            store.notifications.create(user_id=user.id, title="Old", message="Old",
                                       is_read=True, read_at=utcnow() - timedelta(days=45))

        response = self.client.post("/api/scheduler/cleanup")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"success": True, "deleted": 1})

    def test_unknown_route_uses_error_format(self):
        response = self.client.get("/api/nope")
        self.assertEqual(response.status_code, 404)
        self.assertFalse(response.json()["success"])

    def test_lifespan_starts_and_stops_scheduler(self):
        app = create_app(self.ctx, start_scheduler=True)
        with TestClient(app) as client:
            self.assertTrue(client.get("/health").json()["scheduler_running"])
            jobs = client.get("/api/scheduler/status").json()["jobs"]
            self.assertEqual(len(jobs), 2)
        self.assertFalse(self.ctx.scheduler.is_running)


if __name__ == '__main__':
    unittest.main()
