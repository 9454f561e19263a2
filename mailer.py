import logging
import smtplib
from email.message import EmailMessage

import config

logger = logging.getLogger(__name__)


class Mailer:
    def send(self, to: str, subject: str, text: str) -> None:
        msg = EmailMessage()
        msg["From"] = f"{config.FROM_NAME} <{config.FROM_EMAIL}>"
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(text)

        with smtplib.SMTP(config.SMTP_HOST, config.SMTP_PORT, timeout=30) as smtp:
            if config.SMTP_USERNAME:
                smtp.starttls()
                smtp.login(config.SMTP_USERNAME, config.SMTP_PASSWORD or "")
            smtp.send_message(msg)
        logger.info("Sent %r to %s", subject, to)


def get_mailer() -> Mailer:
    return Mailer()
