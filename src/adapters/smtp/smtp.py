"""
SMTP email sender adapter - Implements EmailSender protocol.

Delivers multipart (text + HTML) messages through an SMTP relay with
smtplib. STARTTLS and login are optional and driven by settings; a
local postfix on port 25 needs neither.
"""

import logging
import ssl
from email.message import EmailMessage
from smtplib import SMTP

logger = logging.getLogger(__name__)


class SmtpEmailSender:
    """
    Implements EmailSender protocol via an SMTP relay.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Opens one connection per message; transport errors propagate to the
    caller, which decides whether delivery failure matters.
    """

    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        username: str | None = None,
        password: str | None = None,
        starttls: bool = False,
        timeout: float = 10.0,
    ) -> None:
        self.host = host
        self.port = port
        self.sender = sender
        self.username = username
        self.password = password
        self.starttls = starttls
        self.timeout = timeout

    def build_message(self, to: str, subject: str, text: str, html: str) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = self.sender
        message["To"] = to
        message.set_content(text)
        message.add_alternative(html, subtype="html")
        return message

    def send_mail(self, to: str, subject: str, text: str, html: str) -> None:
        message = self.build_message(to, subject, text, html)

        with SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            if self.starttls:
                smtp.starttls(context=ssl.create_default_context())

            if self.username and self.password:
                smtp.login(self.username, self.password)

            smtp.send_message(message)

        logger.info("Sent '%s' to %s via %s:%s", subject, to, self.host, self.port)
