"""
Mail Manager

Sends verification emails over SMTP. Delivery is best effort: failures are
logged and reported as False, never raised to the caller.
"""
import asyncio
import logging
import smtplib
from email.message import EmailMessage
from html import escape

from config import MAIL_SENDER_NAME, MAIL_TIMEOUT


class MailManager:
    """Sends verification links via an SMTP relay"""

    def __init__(self, host: str, port: int, user: str, password: str,
                 sender_name: str = MAIL_SENDER_NAME, timeout: int = MAIL_TIMEOUT):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender_name = sender_name
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.host and self.user and self.password)

    def build_verification_message(self, recipient: str, link: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = f'"{self.sender_name}" <{self.user}>'
        message["To"] = recipient
        message["Subject"] = "Verify your email to get your referral link"
        message.set_content(f"Click here to verify: {link}")
        safe_link = escape(link, quote=True)
        message.add_alternative(
            f'<p>Click here to verify: <a href="{safe_link}">{safe_link}</a></p>',
            subtype="html",
        )
        return message

    def _send(self, message: EmailMessage) -> None:
        if self.port == 465:
            with smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout) as smtp:
                smtp.login(self.user, self.password)
                smtp.send_message(message)
        else:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                smtp.starttls()
                smtp.login(self.user, self.password)
                smtp.send_message(message)

    async def send_verification(self, recipient: str, link: str) -> bool:
        """Send the verification link. Returns True if the relay accepted it."""
        if not self.configured:
            logging.warning(f"SMTP not configured, verification link for {recipient}: {link}")
            return False

        try:
            # Header injection attempts surface here as ValueError
            message = self.build_verification_message(recipient, link)
            await asyncio.to_thread(self._send, message)
            logging.info(f"Verification email sent to {recipient}")
            return True
        except (smtplib.SMTPException, OSError, ValueError) as e:
            logging.error(f"Failed to send verification email to {recipient}: {e}")
            return False
