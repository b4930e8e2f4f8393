"""
Console email notifier adapter - Implements EmailNotifier protocol.

This module provides a console-based implementation of the domain's
email notifier port, logging outgoing messages for local development.
"""

import logging
import re

logger = logging.getLogger(__name__)

_TAG = re.compile(r"<[^>]+>")
_SPACE = re.compile(r"\s+")


def strip_tags(html_body: str) -> str:
    """Collapse an HTML body to a single line of text."""
    return _SPACE.sub(" ", _TAG.sub(" ", html_body)).strip()


class ConsoleEmailNotifier:
    """
    Implements EmailNotifier protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For demo/development purposes - prints messages (and OTP codes) to the log.
    """

    def send(self, to: str, subject: str, html_body: str) -> None:
        """
        Log the message to console (simulates email delivery).

        The message is logged at INFO level to be visible in docker-compose logs.

        Args:
            to: Recipient email address
            subject: Message subject
            html_body: Rendered HTML body
        """
        logger.info("[EMAIL] To: %s Subject: %s Body: %s", to, subject, strip_tags(html_body))
