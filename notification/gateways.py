"""
Notification Gateways - transport adapters for email and push providers.

Senders in notification.channels decide *what* to send; gateways only know
*how* to hand a rendered message to an external service. Each gateway either
returns the provider's response or raises GatewayError.

Usage:
    from notification.gateways import SmtpEmailGateway, build_push_gateway

    email = SmtpEmailGateway(config.email)
    email.send("user@example.com", "Subject", "<p>Body</p>")

    push = build_push_gateway(config.push)
    if push.is_configured:
        push.send("user-id", "Title", "Body", {"type": "reminder"})
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional
import logging
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from email.utils import formataddr, make_msgid

import requests

from core.config_loader import EmailConfig, PushConfig
from core.utils import mask_email

logger = logging.getLogger(__name__)


class GatewayError(Exception):
    """Raised when an external provider rejects or fails a delivery."""
    pass


class EmailGateway(ABC):
    @abstractmethod
    def send(self, to: str, subject: str, html_body: str) -> Dict[str, Any]:
        """Deliver one HTML email. Returns {"message_id": ...}."""
        pass


class SmtpEmailGateway(EmailGateway):
    """Email delivery over SMTP with optional STARTTLS."""

    def __init__(self, config: EmailConfig):
        self.config = config

    @property
    def sender_address(self) -> Optional[str]:
        return self.config.from_email or self.config.smtp_username

    def validate_config(self) -> bool:
        return bool(self.config.smtp_server and self.config.smtp_username
                    and self.config.smtp_password and self.sender_address)

    def send(self, to: str, subject: str, html_body: str) -> Dict[str, Any]:
        if not self.validate_config():
            raise GatewayError("SMTP is not configured (server, username and password are required)")

        msg = MIMEMultipart('alternative')
        msg['From'] = formataddr((self.config.from_name, self.sender_address))
        msg['To'] = to
        msg['Subject'] = subject
        msg['Message-ID'] = make_msgid(domain=self.sender_address.rsplit('@', 1)[-1])
        msg.attach(MIMEText(html_body, 'html', 'utf-8'))

        try:
            with smtplib.SMTP(self.config.smtp_server, self.config.smtp_port,
                              timeout=self.config.timeout_seconds) as server:
                if self.config.use_tls:
                    server.starttls()
                server.login(self.config.smtp_username, self.config.smtp_password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise GatewayError(f"SMTP delivery failed: {e}") from e

        logger.debug(f"SMTP accepted message {msg['Message-ID']} for {mask_email(to)}")
        return {'message_id': msg['Message-ID']}


class PushGateway(ABC):
    """
    Push provider contract.

    ``is_configured`` False is a normal state (credentials absent) and must
    be checked before ``send``.
    """

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        pass

    @abstractmethod
    def send(self, user_routing_tag: str, title: str, body: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Deliver one push message to every device tagged with user_routing_tag."""
        pass


class OneSignalGateway(PushGateway):
    """OneSignal REST API; devices are targeted by their ``userId`` tag."""

    def __init__(self, config: PushConfig):
        self.app_id = config.onesignal_app_id
        self.api_key = config.onesignal_api_key
        self.api_url = config.onesignal_api_url
        self.timeout = config.request_timeout_seconds

    @property
    def is_configured(self) -> bool:
        return bool(self.app_id and self.api_key)

    def send(self, user_routing_tag: str, title: str, body: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        request_body = {
            'app_id': self.app_id,
            'filters': [
                {'field': 'tag', 'key': 'userId', 'relation': '=', 'value': user_routing_tag},
            ],
            'headings': {'en': title},
            'contents': {'en': body},
            'data': payload,
        }
        headers = {
            'Content-Type': 'application/json',
            'Authorization': f'Basic {self.api_key}',
        }

        try:
            response = requests.post(self.api_url, json=request_body, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise GatewayError(f"OneSignal request failed: {e}") from e

        # OneSignal answers 200 with an "errors" entry when no device matched
        if data.get('errors'):
            raise GatewayError(f"OneSignal rejected notification: {data['errors']}")
        return data


class FcmGateway(PushGateway):
    """Firebase Cloud Messaging legacy HTTP API; one topic per user."""

    def __init__(self, config: PushConfig):
        self.server_key = config.fcm_server_key
        self.api_url = config.fcm_api_url
        self.topic_prefix = config.fcm_topic_prefix
        self.timeout = config.request_timeout_seconds

    @property
    def is_configured(self) -> bool:
        return bool(self.server_key)

    def send(self, user_routing_tag: str, title: str, body: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        request_body = {
            'to': f'/topics/{self.topic_prefix}{user_routing_tag}',
            'notification': {'title': title, 'body': body},
            # FCM data values must be strings
            'data': {key: str(value) for key, value in payload.items()},
        }
        headers = {
            'Content-Type': 'application/json',
            'Authorization': f'key={self.server_key}',
        }

        try:
            response = requests.post(self.api_url, json=request_body, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise GatewayError(f"FCM request failed: {e}") from e

        if data.get('failure'):
            raise GatewayError(f"FCM rejected notification: {data.get('results')}")
        return data


def build_push_gateway(config: PushConfig) -> Optional[PushGateway]:
    """Gateway for the configured provider, or None when push is disabled."""
    if config.provider == 'onesignal':
        return OneSignalGateway(config)
    if config.provider == 'fcm':
        return FcmGateway(config)
    return None
