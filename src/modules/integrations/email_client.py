import logging
import smtplib
import time
from contextlib import contextmanager
from email import encoders
from email.mime.base import MIMEBase
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

# (filename, content)
Attachment = Tuple[str, bytes]


class EmailDeliveryError(Exception):
    """Raised when a message could not be delivered after every retry."""


class EmailClient:
    """Reusable SMTP email client with retries."""

    def __init__(
        self,
        smtp_host: str,
        smtp_port: int,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_ssl: bool = False,
        max_retries: int = 3,
        retry_delay: int = 3,
        timeout: float = 30.0,
    ):
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.username = username
        self.password = password
        self.use_ssl = use_ssl
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.timeout = timeout

    @contextmanager
    def _connection(self):
        """Context-managed SMTP connection."""
        server = None
        try:
            if self.use_ssl:
                server = smtplib.SMTP_SSL(self.smtp_host, self.smtp_port, timeout=self.timeout)
            else:
                server = smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout)
                server.starttls()
            if self.username and self.password:
                server.login(self.username, self.password)
            yield server
        finally:
            if server:
                try:
                    server.quit()
                except smtplib.SMTPException as e:
                    logger.warning("Error closing SMTP connection: %s", e)

    def _build_message(
        self,
        sender: str,
        recipients: List[str],
        subject: str,
        text_body: str,
        html_body: Optional[str] = None,
        attachments: Optional[List[Attachment]] = None,
    ) -> MIMEMultipart:
        """Construct MIME message with in-memory attachments."""
        msg = MIMEMultipart("mixed")
        msg["From"] = sender
        msg["To"] = ", ".join(recipients)
        msg["Subject"] = subject

        body = MIMEMultipart("alternative")
        body.attach(MIMEText(text_body or "", "plain", "utf-8"))
        if html_body:
            body.attach(MIMEText(html_body, "html", "utf-8"))
        msg.attach(body)

        for filename, content in attachments or []:
            part = MIMEBase("application", "pdf" if filename.lower().endswith(".pdf") else "octet-stream")
            part.set_payload(content)
            encoders.encode_base64(part)
            part.add_header("Content-Disposition", f'attachment; filename="{filename}"')
            msg.attach(part)

        return msg

    def send(
        self,
        sender: str,
        recipients: List[str],
        subject: str,
        text_body: str,
        html_body: Optional[str] = None,
        attachments: Optional[List[Attachment]] = None,
    ) -> None:
        """Send an email, retrying transient failures. Raises EmailDeliveryError."""
        if not recipients:
            raise EmailDeliveryError("No recipients given")

        msg = self._build_message(sender, recipients, subject, text_body, html_body, attachments)

        last_error = None
        for attempt in range(1, self.max_retries + 1):
            try:
                with self._connection() as server:
                    server.sendmail(sender, recipients, msg.as_string())
                logger.info("Email '%s' sent to %s", subject, ", ".join(recipients))
                return
            except smtplib.SMTPAuthenticationError as e:
                logger.error("SMTP authentication failed, check username/password")
                raise EmailDeliveryError("SMTP authentication failed") from e
            except (smtplib.SMTPException, OSError) as e:
                last_error = e
                logger.warning("Email attempt %d/%d failed: %s", attempt, self.max_retries, e)
                if attempt < self.max_retries:
                    time.sleep(self.retry_delay)

        raise EmailDeliveryError(
            f"Failed to send email after {self.max_retries} attempts: {last_error}"
        )
