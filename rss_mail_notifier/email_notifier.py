"""Render the notification mail and deliver it over SMTP."""

import logging
import os
import smtplib
import ssl
from abc import ABC, abstractmethod
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Any, Dict, Optional, Sequence

from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

from .config import Config
from .errors import MailError, from_smtp_error, from_template_error
from .models import Item

logger = logging.getLogger(__name__)

MAIL_TEMPLATE = "mail.html"
TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "templates")
SMTP_TIMEOUT = 30


class TemplateRenderer(ABC):
    """Abstract base class for template engines."""

    @abstractmethod
    def render(self, template: str, context: Dict[str, Any]) -> str:
        """
        Render ``template`` with ``context``.

        Raises:
            RenderError: If the template cannot be found or fails to render.
        """
        pass


class MailTransport(ABC):
    """Abstract base class for mail transports."""

    @abstractmethod
    def send(self, message: MIMEText, config: Config) -> None:
        """
        Deliver ``message`` using the server and credentials in ``config``.

        Raises:
            MailError: If connecting, authenticating or sending fails.
        """
        pass


class JinjaTemplateRenderer(TemplateRenderer):
    """TemplateRenderer backed by a jinja2 file-system environment."""

    def __init__(self, template_dir: Optional[str] = None):
        self.template_dir = template_dir or TEMPLATE_DIR
        self.env = Environment(
            loader=FileSystemLoader(self.template_dir),
            autoescape=select_autoescape(["html"]),
        )

    def render(self, template: str, context: Dict[str, Any]) -> str:
        try:
            tmpl = self.env.get_template(template)
            return tmpl.render(**context)
        except TemplateError as e:
            raise from_template_error(e, template) from e


class SmtpMailTransport(MailTransport):
    """
    MailTransport backed by ``smtplib``.

    Uses STARTTLS when the server offers it and always authenticates with
    the PLAIN mechanism.
    """

    def __init__(self, timeout: float = SMTP_TIMEOUT):
        self.timeout = timeout

    def send(self, message: MIMEText, config: Config) -> None:
        logger.debug(f"Connecting to SMTP server: {config.server}:{config.smtp_port}")
        try:
            server = smtplib.SMTP(config.server, config.smtp_port, timeout=self.timeout)
        except (smtplib.SMTPException, OSError) as e:
            raise from_smtp_error(e, config.server) from e

        try:
            server.ehlo()
            if server.has_extn("starttls"):
                server.starttls(context=ssl.create_default_context())
                server.ehlo()
            # auth_plain reads the credentials from these attributes
            server.user = config.from_addr
            server.password = config.password
            server.auth("PLAIN", server.auth_plain)
            refused = server.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            server.close()
            raise from_smtp_error(e, config.server) from e

        # the message is accepted at this point; a failing QUIT is not a failed send
        try:
            server.quit()
        except (smtplib.SMTPException, OSError) as e:
            logger.warning(f"SMTP QUIT failed after the message was accepted: {e}")
            server.close()

        logger.info(f"Email sent successfully to {config.to_addr} (refused: {refused or 'none'})")


def build_message(config: Config, body: str) -> MIMEText:
    """
    Build the HTML notification message.

    Raises:
        MailError: If a header or the body cannot be encoded.
    """
    try:
        msg = MIMEText(body, "html", "utf-8")
        msg["Subject"] = config.subject
        msg["From"] = config.from_addr
        msg["To"] = formataddr((config.to_name, config.to_addr))
        # serialise once so bad headers fail here rather than mid-transfer
        msg.as_string()
    except (ValueError, TypeError, UnicodeError) as e:
        raise MailError(f"cannot build message: {e}", {"subject": config.subject}) from e
    return msg


class Notifier:
    """Renders new items into a mail body and sends it."""

    def __init__(self, renderer: TemplateRenderer, transport: MailTransport):
        self.renderer = renderer
        self.transport = transport

    def render(self, payload: Sequence[Item]) -> str:
        """Render ``payload`` into the mail body, bound as ``items``."""
        body = self.renderer.render(MAIL_TEMPLATE, {"items": list(payload)})
        logger.debug(f"Rendered {MAIL_TEMPLATE} ({len(body)} chars)")
        return body

    def send(self, config: Config, body: str) -> None:
        """
        Send ``body`` to the configured recipient.

        Delivery is attempted exactly once; a failed send is never retried
        since a duplicate mail is worse than a missed run.
        """
        message = build_message(config, body)
        logger.info(f"Sending email notification from {config.from_addr} to {config.to_addr}...")
        self.transport.send(message, config)
