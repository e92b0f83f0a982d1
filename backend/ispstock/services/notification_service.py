# Overview: Domain events emitted after commit and the background email worker that consumes them.

"""
Notification Service

Services publish domain events *after* their database transaction has
committed. The dispatcher renders each event into one email per recipient
and hands delivery to a thread pool, so the HTTP request never waits on
SMTP. Delivery failures are logged and dropped: the operation that emitted
the event has already succeeded.

Senders:
- SmtpEmailSender: smtplib, used when MAIL_SERVER is configured
- LogEmailSender: writes the message summary to the log (development)
"""
from __future__ import annotations

import logging
import smtplib
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from email.message import EmailMessage

from flask import current_app
from jinja2 import Environment

logger = logging.getLogger(__name__)

_templates = Environment(autoescape=True, trim_blocks=True, lstrip_blocks=True)


# =============================================================================
# DOMAIN EVENTS
# =============================================================================

@dataclass(frozen=True)
class TransactionCreated:
    transaction_id: str
    type: str
    staff_name: str
    created_at: str
    notes: str
    items: tuple  # ({"name", "quantity", "unit"}, ...)

    @classmethod
    def from_transaction(cls, transaction) -> "TransactionCreated":
        return cls(
            transaction_id=transaction.id,
            type=transaction.type,
            staff_name=transaction.staff.name if transaction.staff else "",
            created_at=(transaction.created_at.date().isoformat() if transaction.created_at else ""),
            notes=transaction.notes,
            items=tuple(
                {
                    "name": item.stock_item.name if item.stock_item else item.stock_id,
                    "quantity": item.quantity,
                    "unit": item.stock_item.unit if item.stock_item else "",
                }
                for item in transaction.items
            ),
        )


@dataclass(frozen=True)
class LowStockDetected:
    items: tuple  # ({"name", "quantity", "min_stock", "unit", "location"}, ...)

    @classmethod
    def from_stock_items(cls, stock_items) -> "LowStockDetected":
        return cls(items=tuple(
            {
                "name": item.name,
                "quantity": item.quantity,
                "min_stock": item.min_stock,
                "unit": item.unit,
                "location": item.location,
            }
            for item in stock_items
        ))


# =============================================================================
# TEMPLATES
# =============================================================================

_FOOTER = (
    '<hr style="margin: 20px 0;">'
    '<p style="font-size: 12px; color: #9ca3af;">'
    "This is an automated message from ISP Inventory Management System."
    "</p>"
)

TRANSACTION_APPROVAL_TEMPLATE = _templates.from_string(
    """
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #2563eb;">Transaction Approval Required</h2>
  <div style="background-color: #f8fafc; padding: 15px; border-radius: 8px; margin: 20px 0;">
    <h3>Transaction Details</h3>
    <p><strong>ID:</strong> #{{ event.transaction_id }}</p>
    <p><strong>Type:</strong> {{ event.type | capitalize }}</p>
    <p><strong>Staff:</strong> {{ event.staff_name }}</p>
    <p><strong>Date:</strong> {{ event.created_at }}</p>
    <p><strong>Notes:</strong> {{ event.notes }}</p>
  </div>
  <h3>Items:</h3>
  <ul>
  {% for item in event.items %}
    <li>{{ item.name }} - Quantity: {{ item.quantity }} {{ item.unit }}</li>
  {% endfor %}
  </ul>
  <div style="margin: 30px 0; text-align: center;">
    <a href="{{ frontend_url }}/transactions"
       style="background-color: #2563eb; color: white; padding: 12px 24px; text-decoration: none; border-radius: 6px; display: inline-block;">
      Review Transaction
    </a>
  </div>
  {{ footer | safe }}
</div>
"""
)

LOW_STOCK_TEMPLATE = _templates.from_string(
    """
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #dc2626;">Low Stock Alert</h2>
  <p>The following items are running low on stock:</p>
  <table style="width: 100%; border-collapse: collapse; margin: 20px 0;">
    <thead>
      <tr style="background-color: #f3f4f6;">
        <th style="border: 1px solid #d1d5db; padding: 8px; text-align: left;">Item</th>
        <th style="border: 1px solid #d1d5db; padding: 8px; text-align: left;">Current Stock</th>
        <th style="border: 1px solid #d1d5db; padding: 8px; text-align: left;">Minimum Stock</th>
        <th style="border: 1px solid #d1d5db; padding: 8px; text-align: left;">Location</th>
      </tr>
    </thead>
    <tbody>
    {% for item in event.items %}
      <tr>
        <td style="border: 1px solid #d1d5db; padding: 8px;">{{ item.name }}</td>
        <td style="border: 1px solid #d1d5db; padding: 8px; color: #dc2626; font-weight: bold;">{{ item.quantity }} {{ item.unit }}</td>
        <td style="border: 1px solid #d1d5db; padding: 8px;">{{ item.min_stock }} {{ item.unit }}</td>
        <td style="border: 1px solid #d1d5db; padding: 8px;">{{ item.location }}</td>
      </tr>
    {% endfor %}
    </tbody>
  </table>
  <p style="color: #6b7280;">Please restock these items as soon as possible.</p>
  {{ footer | safe }}
</div>
"""
)


def render_event(event, frontend_url: str) -> tuple[str, str]:
    """Return (subject, html) for a domain event."""
    if isinstance(event, TransactionCreated):
        subject = f"Transaction Approval Required - #{event.transaction_id}"
        html = TRANSACTION_APPROVAL_TEMPLATE.render(event=event, frontend_url=frontend_url, footer=_FOOTER)
        return subject, html
    if isinstance(event, LowStockDetected):
        subject = "Low Stock Alert - ISP Inventory System"
        html = LOW_STOCK_TEMPLATE.render(event=event, footer=_FOOTER)
        return subject, html
    raise TypeError(f"No template for event {type(event).__name__}")


# =============================================================================
# SENDERS
# =============================================================================

class LogEmailSender:
    """Development sender: logs instead of delivering."""

    def send(self, recipient: str, subject: str, html: str) -> None:
        logger.info("Email (not sent, MAIL_SERVER unset) to=%s subject=%r", recipient, subject)


class SmtpEmailSender:
    def __init__(
        self,
        host: str,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        sender: str = "no-reply@localhost",
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.sender = sender
        self.timeout = timeout

    @classmethod
    def from_config(cls, config) -> "SmtpEmailSender":
        return cls(
            host=config["MAIL_SERVER"],
            port=config.get("MAIL_PORT", 587),
            username=config.get("MAIL_USERNAME"),
            password=config.get("MAIL_PASSWORD"),
            use_tls=config.get("MAIL_USE_TLS", True),
            sender=config.get("MAIL_FROM", "no-reply@localhost"),
        )

    def send(self, recipient: str, subject: str, html: str) -> None:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = recipient
        msg["Subject"] = subject
        msg.set_content("This message requires an HTML capable email client.")
        msg.add_alternative(html, subtype="html")

        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
            if self.use_tls:
                server.starttls()
            if self.username and self.password:
                server.login(self.username, self.password)
            server.send_message(msg)

        logger.info("Email sent to %s: %s", recipient, subject)


# =============================================================================
# DISPATCHER
# =============================================================================

class NotificationDispatcher:
    """
    Consumes domain events and delivers one email per recipient.

    async_mode=True: delivery runs on a private thread pool and publish()
    returns immediately. async_mode=False: delivery runs inline (tests, CLI).
    In both modes a failing delivery is logged and never raised.
    """

    def __init__(self, sender, *, frontend_url: str = "", async_mode: bool = True, max_workers: int = 2):
        self.sender = sender
        self.frontend_url = frontend_url.rstrip("/")
        self.async_mode = async_mode
        self._executor = (
            ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="notify")
            if async_mode else None
        )

    def publish(self, event, recipients: list[str]) -> int:
        """Queue delivery of event to every recipient. Returns the recipient count."""
        if not recipients:
            return 0
        if self._executor is not None:
            self._executor.submit(self._deliver_all, event, tuple(recipients))
        else:
            self._deliver_all(event, tuple(recipients))
        return len(recipients)

    def _deliver_all(self, event, recipients: tuple) -> None:
        try:
            subject, html = render_event(event, self.frontend_url)
        except Exception:
            logger.exception("Failed to render %s notification", type(event).__name__)
            return

        for recipient in recipients:
            try:
                self.sender.send(recipient, subject, html)
            except Exception:
                logger.exception("Failed to send %s notification to %s", type(event).__name__, recipient)

    def shutdown(self, wait: bool = True) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=wait)


def build_dispatcher(config) -> NotificationDispatcher:
    sender = config.get("NOTIFICATION_SENDER")
    if sender is None:
        sender = SmtpEmailSender.from_config(config) if config.get("MAIL_SERVER") else LogEmailSender()
    return NotificationDispatcher(
        sender,
        frontend_url=config.get("FRONTEND_URL", ""),
        async_mode=config.get("NOTIFICATIONS_ASYNC", True),
        max_workers=config.get("NOTIFICATION_WORKERS", 2),
    )


def get_dispatcher() -> NotificationDispatcher:
    return current_app.extensions["notifications"]


def emit(event, recipients: list[str]) -> int:
    """
    Publish event from a request after its transaction has committed.

    Never raises: a notification problem must not turn a successful
    operation into a failed response.
    """
    try:
        return get_dispatcher().publish(event, recipients)
    except Exception:
        current_app.logger.exception("Failed to publish %s notification", type(event).__name__)
        return 0
