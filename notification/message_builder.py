import html
from typing import Any, Dict, Optional

from pydantic import BaseModel

from core.formatting import DisplayFormatter
from database.models import Reminder, User


class EmailMessage(BaseModel):
    subject: str
    html_body: str


class PushMessage(BaseModel):
    title: str
    body: str
    payload: Dict[str, Any]


class InAppMessage(BaseModel):
    title: str
    message: str


PUSH_TITLE = "💰 Payment Reminder"
REMINDERS_PATH = "/reminders"


class NotificationMessageBuilder:
    """Renders reminder content for each channel using an injected formatter."""

    def __init__(self, formatter: Optional[DisplayFormatter] = None,
                 frontend_url: str = "http://localhost:3000", app_name: str = "Expense Manager"):
        self.formatter = formatter or DisplayFormatter()
        self.frontend_url = frontend_url.rstrip('/')
        self.app_name = app_name

    @property
    def reminders_url(self) -> str:
        return f"{self.frontend_url}{REMINDERS_PATH}"

    def build_email(self, reminder: Reminder, user: User) -> EmailMessage:
        amount = self.formatter.format_amount(reminder.amount)
        due = self.formatter.format_datetime(reminder.effective_due_date)
        subject = f"💰 Reminder: {reminder.title} - {amount} due soon"
        return EmailMessage(subject=subject, html_body=self._build_html_body(reminder, user, amount, due))

    def _build_html_body(self, reminder: Reminder, user: User, amount: str, due: str) -> str:
        """Build HTML email body for a reminder. All user-supplied text is escaped."""
        safe_title = html.escape(reminder.title)
        safe_type = html.escape((reminder.reminder_type or 'bill').upper())
        safe_name = html.escape(user.display_name or '')
        safe_url = html.escape(self.reminders_url, quote=True)
        safe_app = html.escape(self.app_name)

        extra_lines = ""
        if reminder.notes:
            extra_lines += f'                <p><strong>Notes:</strong> {html.escape(reminder.notes)}</p>\n'
        if reminder.is_recurring:
            repeat = html.escape(reminder.repeat or 'yes')
            extra_lines += f'                <p>🔄 Recurring: {repeat}</p>\n'

        return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <style>
        body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
        .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
        .header {{ background: linear-gradient(135deg, #14B8A6 0%, #06B6D4 100%); color: white; padding: 30px; text-align: center; border-radius: 10px 10px 0 0; }}
        .content {{ background: #f9f9f9; padding: 30px; border-radius: 0 0 10px 10px; }}
        .reminder-card {{ background: white; padding: 20px; border-radius: 8px; margin: 20px 0; }}
        .amount {{ font-size: 28px; font-weight: bold; color: #14B8A6; }}
        .due-date {{ font-size: 18px; color: #666; margin: 10px 0; }}
        .type-badge {{ display: inline-block; padding: 5px 15px; background: #06B6D4; color: white; border-radius: 20px; font-size: 12px; }}
        .button {{ display: inline-block; padding: 12px 30px; background: #14B8A6; color: white; text-decoration: none; border-radius: 5px; }}
        .footer {{ text-align: center; padding: 20px; color: #666; font-size: 12px; }}
    </style>
</head>
<body>
    <div class="container">
        <div class="header">
            <h1>💰 Payment Reminder</h1>
        </div>
        <div class="content">
            <div class="reminder-card">
                <h2>{safe_title}</h2>
                <span class="type-badge">{safe_type}</span>
                <div class="amount">{html.escape(amount)}</div>
                <div class="due-date">📅 Due: {html.escape(due)}</div>
{extra_lines}            </div>
            <p>Hello {safe_name},</p>
            <p>This is a friendly reminder that you have an upcoming payment.</p>
            <p>Please ensure you have sufficient funds available to avoid any late fees or service disruptions.</p>
            <a href="{safe_url}" class="button">View Reminders</a>
        </div>
        <div class="footer">
            <p>This is an automated reminder from {safe_app}</p>
        </div>
    </div>
</body>
</html>"""

    def build_test_email(self) -> EmailMessage:
        safe_app = html.escape(self.app_name)
        html_body = f"""<div style="font-family: Arial, sans-serif; padding: 20px; max-width: 600px; margin: 0 auto;">
    <h2 style="color: #14B8A6;">✅ Email Setup Complete!</h2>
    <p>Your email notifications are now configured and working correctly.</p>
    <p>You'll receive reminders for upcoming bills, EMIs, and other payments.</p>
    <hr style="border: 1px solid #eee; margin: 20px 0;">
    <p style="color: #666; font-size: 12px;">This is a test email from {safe_app}</p>
</div>"""
        return EmailMessage(subject="✅ Email Notifications Configured Successfully", html_body=html_body)

    def build_push(self, reminder: Reminder) -> PushMessage:
        amount = self.formatter.format_amount(reminder.amount)
        due = self.formatter.format_date(reminder.effective_due_date)
        return PushMessage(
            title=PUSH_TITLE,
            body=f"{reminder.title} - {amount} due on {due}",
            payload={
                'type': 'reminder',
                'reminder_id': str(reminder.id),
                'url': REMINDERS_PATH,
            },
        )

    def build_in_app(self, reminder: Reminder) -> InAppMessage:
        amount = self.formatter.format_amount(reminder.amount)
        due = self.formatter.format_date(reminder.effective_due_date)
        return InAppMessage(
            title=f"Payment Reminder: {reminder.title}",
            message=f"{reminder.title} ({amount}) is due on {due}",
        )
