"""Outbound email for notifications."""
import html
import logging
import re
import smtplib
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Protocol

from bridge_lfu.config import Settings, get_settings
from bridge_lfu.models.notification import Notification, NotificationType

logger = logging.getLogger(__name__)


class EmailSender(Protocol):
    """Anything able to deliver a notification to one address.

    Returns True on success; False or an exception means the delivery failed.
    """

    def send(self, notification: Notification, recipient_address: str, display_name: str) -> bool:
        ...


@dataclass(frozen=True)
class EmailContent:
    subject: str
    text: str
    html: str


# type -> (heading, recommended action, dashboard path, link label)
_EMAIL_LAYOUTS = {
    NotificationType.LICENSE_EXPIRY.value: (
        "License expiry alert",
        "Check and renew your license before it expires.",
        "/dashboard/licenses",
        "View my licenses",
    ),
    NotificationType.EQUIPMENT_OBSOLESCENCE.value: (
        "Equipment obsolescence alert",
        "Plan the replacement or upgrade of this equipment.",
        "/dashboard/equipment",
        "View my equipment",
    ),
    NotificationType.GENERAL.value: (
        "New notification",
        None,
        "/dashboard",
        "Open the dashboard",
    ),
    NotificationType.NEW_UNVERIFIED_USER.value: (
        "Account awaiting validation",
        "Review the new account and assign it a role.",
        "/dashboard/users",
        "Review users",
    ),
}


def build_notification_email(
    notification: Notification,
    display_name: str,
    app_url: str,
    app_name: str = "Bridge LFU",
) -> EmailContent:
    """Render subject, plain text and HTML bodies for a notification."""
    layout = _EMAIL_LAYOUTS.get(notification.type)
    title = html.escape(notification.title)
    message = html.escape(notification.message)
    preferences_url = f"{app_url}/dashboard/notifications"
    # Subject must stay on one line
    subject_title = " ".join(notification.title.split())

    if layout is None:
        return EmailContent(
            subject=f"{app_name} - Notification - {subject_title}",
            text=f"{notification.title}\n\n{notification.message}",
            html=f"<div><h2>{title}</h2><p>{message}</p></div>",
        )

    heading, action, path, link_label = layout
    link = f"{app_url}{path}"
    subject = f"{app_name} - {heading} - {subject_title}"

    action_html = ""
    action_text = ""
    if action and notification.related_id:
        action_html = f"""
            <div style="margin: 20px 0; padding: 15px; background: #fef3c7; border-left: 4px solid #f59e0b;">
                <p style="margin: 0;"><strong>Recommended action:</strong> {html.escape(action)}</p>
            </div>
        """
        action_text = f"Recommended action: {action}\n\n"

    html_body = f"""
    <html>
    <body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
        <h1 style="color: #dc2626;">{html.escape(heading)}</h1>
        <p>Hello {html.escape(display_name)},</p>
        <h2 style="color: #374151;">{title}</h2>
        <p style="color: #6b7280; line-height: 1.6;">{message}</p>
        {action_html}
        <p style="margin: 30px 0;">
            <a href="{link}" style="background: #3b82f6; color: white; padding: 12px 24px; text-decoration: none; border-radius: 6px;">{html.escape(link_label)}</a>
        </p>
        <p style="margin-top: 24px; padding-top: 16px; border-top: 1px solid #e5e7eb; color: #6b7280; font-size: 12px;">
            You're receiving this because you have email notifications enabled in {html.escape(app_name)}.<br>
            <a href="{preferences_url}">Manage my preferences</a>
        </p>
    </body>
    </html>
    """

    text_body = (
        f"{heading.upper()}\n\n"
        f"Hello {display_name},\n\n"
        f"{notification.title}\n\n"
        f"{notification.message}\n\n"
        f"{action_text}"
        f"{link_label}: {link}\n\n"
        "---\n"
        f"You're receiving this because you have email notifications enabled in {app_name}.\n"
        f"Manage your preferences: {preferences_url}\n"
    )

    return EmailContent(subject=subject, text=text_body, html=html_body)


def html_to_text(html_content: str) -> str:
    """Plain text fallback for an HTML body."""
    plain_text = html_content.replace("<br>", "\n").replace("</p>", "\n\n")
    return re.sub(r"<[^>]+>", "", plain_text)


class SmtpEmailSender:
    """Deliver notification emails over SMTP."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    @property
    def enabled(self) -> bool:
        return bool(self.settings.smtp_enabled and self.settings.smtp_host)

    def send(self, notification: Notification, recipient_address: str, display_name: str) -> bool:
        if not self.enabled:
            logger.info("SMTP not configured, skipping email for notification %s", notification.id)
            return False

        content = build_notification_email(
            notification, display_name, self.settings.app_url, self.settings.app_name
        )
        return self.send_email(recipient_address, content.subject, content.html, content.text)

    def send_email(self, to_email: str, subject: str, html_content: str, plain_text: str | None = None) -> bool:
        settings = self.settings

        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{settings.smtp_from_name} <{settings.smtp_from_email}>"
        msg["To"] = to_email
        msg.attach(MIMEText(plain_text or html_to_text(html_content), "plain"))
        msg.attach(MIMEText(html_content, "html"))

        try:
            if settings.smtp_port == 465:
                server = smtplib.SMTP_SSL(settings.smtp_host, settings.smtp_port, timeout=30)
            else:
                server = smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=30)
            with server:
                if settings.smtp_port != 465:
                    server.starttls()
                if settings.smtp_user and settings.smtp_password:
                    server.login(settings.smtp_user, settings.smtp_password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError):
            logger.exception("Failed to send email to %s", to_email)
            return False

        logger.info("Email sent to %s", to_email)
        return True
