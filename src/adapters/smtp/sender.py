"""
SMTP email notifier adapter - Implements EmailNotifier protocol.

Delivers HTML email through an SMTP relay. Secure mode (port 465) uses
implicit TLS; otherwise the connection is upgraded with STARTTLS whenever
the relay offers it. Credentials are never sent over an un-upgraded
connection.
"""

import logging
import smtplib
import ssl
from email.message import EmailMessage

from src.domain.exceptions import NotifierFailure

logger = logging.getLogger(__name__)


class SmtpEmailNotifier:
    """
    Implements EmailNotifier protocol via smtplib.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(
        self,
        host: str,
        port: int = 587,
        secure: bool = False,
        user: str | None = None,
        password: str | None = None,
        sender_name: str = "ApizRace",
        sender_address: str | None = None,
        starttls: bool = True,
        timeout: float = 30.0,
    ) -> None:
        """
        Raises:
            ValueError: If neither sender_address nor user gives a From address
        """
        address = sender_address or user
        if not address:
            raise ValueError("SMTP notifier needs a sender address (sender_address or user)")
        self._host = host
        self._port = port
        self._secure = secure
        self._starttls = starttls
        self._user = user
        self._password = password
        self._sender_name = sender_name
        self._sender_address = address
        self._timeout = timeout

    @property
    def from_address(self) -> str:
        return f'"{self._sender_name}" <{self._sender_address}>'

    def _build_message(self, to: str, subject: str, html_body: str) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.from_address
        msg["To"] = to
        msg.set_content("This message requires an HTML-capable email client.")
        msg.add_alternative(html_body, subtype="html")
        return msg

    def _connect(self) -> smtplib.SMTP:
        context = ssl.create_default_context()
        if self._secure:
            return smtplib.SMTP_SSL(self._host, self._port, context=context, timeout=self._timeout)
        smtp = smtplib.SMTP(self._host, self._port, timeout=self._timeout)
        try:
            smtp.ehlo()
            if self._starttls and smtp.has_extn("starttls"):
                smtp.starttls(context=context)
                smtp.ehlo()
            elif self._user:
                raise smtplib.SMTPNotSupportedError(
                    "STARTTLS unavailable; refusing to send credentials in plaintext"
                )
        except smtplib.SMTPException:
            smtp.close()
            raise
        return smtp

    def send(self, to: str, subject: str, html_body: str) -> None:
        """
        Send an HTML email.

        Raises:
            NotifierFailure: If the relay could not be reached or refused the message
        """
        msg = self._build_message(to, subject, html_body)
        try:
            with self._connect() as smtp:
                if self._user and self._password:
                    smtp.login(self._user, self._password)
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("SMTP send error to %s: %s", to, e)
            raise NotifierFailure(str(e)) from e

        logger.info("Email '%s' sent to %s via SMTP", subject, to)
