"""
Console email sender adapter - Implements EmailSender protocol.

This module provides a console-based implementation of the domain's
email sender port, logging outgoing mail for local development
(EMAIL_BACKEND=console).
"""

import logging

logger = logging.getLogger(__name__)


class ConsoleEmailSender:
    """
    Implements EmailSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Only the plain text body is logged; it carries the verification link.
    """

    def send_mail(self, to: str, subject: str, text: str, html: str) -> None:
        """
        Log the message to console (simulates email delivery).

        Logged at INFO level to be visible in docker-compose logs.

        Args:
            to: Recipient email address
            subject: Subject line
            text: Plain text body
            html: HTML body (not logged)
        """
        logger.info("[EMAIL] To: %s Subject: %s Body: %s", to, subject, text)
