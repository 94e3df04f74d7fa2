# storefront/services/mail.py
# Outbound mail over SMTP with retries on transient connection errors.
import logging
import smtplib
from email.message import EmailMessage

from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from storefront.core.config import settings

logger = logging.getLogger(__name__)


def smtp_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.3, min=0.3, max=3),
        retry=retry_if_exception_type(
            (smtplib.SMTPConnectError, smtplib.SMTPServerDisconnected, ConnectionError)
        ),
    )


def make_email_body(text: str) -> str:
    return f"""
    <div class="email" style="
        border: 1px solid black;
        padding: 20px;
        font-family: sans-serif;
        line-height: 2;
        font-size: 20px;
    ">
        <h2>Hello There!</h2>
        <p>{text}</p>
        <p>The Storefront Team</p>
    </div>
    """


class Mailer:
    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        user: str | None = None,
        password: str | None = None,
        sender: str | None = None,
        timeout: int = 10,
    ):
        self.host = host or settings.MAIL_HOST
        self.port = port or settings.MAIL_PORT
        self.user = user if user is not None else settings.MAIL_USER
        self.password = password if password is not None else settings.MAIL_PASS
        self.sender = sender or settings.MAIL_FROM
        self.timeout = timeout

    @smtp_retry()
    def send_mail(self, to: str, subject: str, html: str) -> None:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(html, subtype="html")

        logger.info(f"Sending mail '{subject}' via {self.host}:{self.port}")
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            if self.user:
                smtp.login(self.user, self.password)
            smtp.send_message(msg)
