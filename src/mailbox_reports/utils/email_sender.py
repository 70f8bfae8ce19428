import logging
import smtplib
from email.message import EmailMessage
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class TransportError(RuntimeError):
    """The SMTP relay refused or could not be reached."""


class EmailConfig(BaseSettings):
    """
    Configuration model for email settings, loaded from environment variables.
    Command-line values (--mail-server, --mail-from) are passed as overrides.
    Recipients are not part of the config; they are given per send.
    """
    model_config = SettingsConfigDict(env_file='.env', env_ignore_empty=True, extra='ignore')

    smtp_server: str
    smtp_port: int = 25
    sender_email: str
    smtp_user: Optional[str] = None  # Optional if the relay is anonymous
    smtp_password: Optional[str] = None  # Optional if the relay is anonymous


def send_email(
    config: EmailConfig,
    subject: str,
    body: str,
    recipients: List[str],
    html_body: Optional[str] = None,
) -> None:
    """
    Sends an email with the specified subject, plain text body and optional HTML body.

    :param config: Email configuration instance.
    :param subject: The subject of the email.
    :param body: The plain text body of the email (fallback if HTML not provided).
    :param recipients: List of recipient email addresses.
    :param html_body: Optional HTML version of the body (the coloured report).
    :raises ValueError: If no recipients were given.
    :raises TransportError: If the SMTP conversation fails.
    """
    if not recipients:
        raise ValueError("No email recipients given.")

    msg = EmailMessage()
    msg["From"] = config.sender_email
    msg["To"] = ", ".join(recipients)
    msg["Subject"] = subject
    msg.set_content(body)

    if html_body:
        msg.add_alternative(html_body, subtype='html')

    try:
        with smtplib.SMTP(config.smtp_server, config.smtp_port) as server:
            if config.smtp_user and config.smtp_password:
                server.login(config.smtp_user, config.smtp_password)
            server.send_message(msg)
        logger.info("Email sent successfully to: %s", ", ".join(recipients))
    except smtplib.SMTPException as e:
        logger.error("SMTP error occurred: %s", e)
        raise TransportError(f"SMTP error sending to {config.smtp_server}: {e}") from e
    except OSError as e:
        logger.error("Could not reach SMTP server %s: %s", config.smtp_server, e)
        raise TransportError(f"Could not reach SMTP server {config.smtp_server}: {e}") from e
