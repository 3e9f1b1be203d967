#!/usr/bin/env python3
"""
Tests for the command line entry point.

Each test points DATABASE_URL at a throwaway SQLite file and uses an empty
config file, so only defaults and the environment apply.
"""

import json
import os
import tempfile
import unittest
from unittest.mock import patch

import main
from core.config_loader import AppConfig, ENV_OVERRIDES

OVERRIDE_VARS = [name for names in ENV_OVERRIDES.values() for name in names]


class TestMainCli(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        db_path = os.path.join(self.tmpdir.name, 'cli.db')
        env = {k: v for k, v in os.environ.items() if k not in OVERRIDE_VARS}
        env['DATABASE_URL'] = f"sqlite:///{db_path}"
        self.env_patch = patch.dict(os.environ, env, clear=True)
        self.env_patch.start()
        self.config_path = os.path.join(self.tmpdir.name, 'config.yaml')
        with open(self.config_path, 'w') as f:
            f.write('{}\n')

    def tearDown(self):
        self.env_patch.stop()
        self.tmpdir.cleanup()

    def run_cli(self, *args):
        return main.main(['--config', self.config_path, *args])

    def test_init_db_then_scan_now(self):
        self.assertEqual(self.run_cli('init-db'), 0)

        with patch('builtins.print') as mock_print:
            exit_code = self.run_cli('scan-now')

        self.assertEqual(exit_code, 0)
        report = json.loads(mock_print.call_args[0][0])
        self.assertEqual(report['found'], 0)
        self.assertIsNone(report['error'])

    def test_scan_now_without_tables_fails(self):
        with patch('builtins.print') as mock_print:
            exit_code = self.run_cli('scan-now')

        self.assertEqual(exit_code, 1)
        report = json.loads(mock_print.call_args[0][0])
        self.assertIsNotNone(report['error'])

    def test_cleanup(self):
        self.run_cli('init-db')
        with patch('builtins.print') as mock_print:
            self.assertEqual(self.run_cli('cleanup'), 0)
        self.assertEqual(json.loads(mock_print.call_args[0][0]), {'deleted': 0})

    @patch('notification.gateways.SmtpEmailGateway.send')
    def test_test_email(self, mock_send):
        mock_send.return_value = {'message_id': '<t@example.com>'}
        with patch('builtins.print') as mock_print:
            exit_code = self.run_cli('test-email', 'ops@example.com')

        self.assertEqual(exit_code, 0)
        self.assertEqual(mock_send.call_args[0][0], 'ops@example.com')
        self.assertEqual(json.loads(mock_print.call_args[0][0]),
                         {'success': True, 'detail': '<t@example.com>'})

    def test_test_email_unconfigured_smtp_fails(self):
        with patch('builtins.print') as mock_print:
            exit_code = self.run_cli('test-email', 'ops@example.com')
        self.assertEqual(exit_code, 1)
        self.assertFalse(json.loads(mock_print.call_args[0][0])['success'])

    def test_serve_with_scheduler_disabled_returns(self):
        with patch('main.load_config') as mock_load:
            mock_load.return_value = AppConfig(scheduler={'enabled': False})
            self.assertEqual(self.run_cli('serve'), 0)

    def test_command_is_required(self):
        with self.assertRaises(SystemExit):
            main.main([])


if __name__ == '__main__':
    unittest.main()
