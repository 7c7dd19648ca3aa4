# app/services/mailer.py
import smtplib
from email.message import EmailMessage

from app.utils import settings
from app.utils.logging import get_logger
from app.utils.retry import smtp_retry

logger = get_logger(__name__)


class Mailer:
    """
    Cienka warstwa na smtplib.
    Bez SMTP_HOST nic nie wysyla, tylko loguje tresc maila (dev / testy).
    """

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        user: str | None = None,
        password: str | None = None,
        sender: str | None = None,
        timeout: int = 10,
    ):
        self.host = host if host is not None else settings.SMTP_HOST
        self.port = port or settings.SMTP_PORT
        self.user = user if user is not None else settings.SMTP_USER
        self.password = password if password is not None else settings.SMTP_PASS
        self.sender = sender or settings.SMTP_FROM
        self.timeout = timeout

    def build_message(self, to: str, subject: str, body: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(body)
        return msg

    @smtp_retry()
    def _deliver(self, msg: EmailMessage):
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            smtp.starttls()
            if self.user:
                smtp.login(self.user, self.password or "")
            smtp.send_message(msg)

    def send(self, to: str, subject: str, body: str) -> bool:
        if not self.host:
            logger.warning("SMTP configuration missing. Email not sent.")
            logger.info(f"EMAIL MOCK to={to} subject={subject!r}\n{body}")
            return False

        self._deliver(self.build_message(to, subject, body))
        logger.info(f"Email sent to {to}: {subject}")
        return True
