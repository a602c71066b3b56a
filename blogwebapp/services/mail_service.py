# blogwebapp/services/mail_service.py
import logging
from typing import Optional
from urllib.parse import quote

import requests
from flask import Flask

BREVO_SEND_URL = "https://api.brevo.com/v3/smtp/email"

MAGIC_LINK_HTML = """\
<!DOCTYPE html>
<html lang="en">
  <body style="margin:0;padding:0;background-color:#ffffff;color:#111827;font-family:Helvetica,Arial,sans-serif;">
    <div style="max-width:600px;margin:40px auto;padding:30px;text-align:center;">
      <h1 style="font-size:22px;margin-bottom:8px;">Welcome to {app_name}!</h1>
      <p style="font-size:16px;color:#4B5563;margin-bottom:30px;">Here is your secure magic link to log in.</p>
      <a href="{link}" target="_blank" style="display:inline-block;padding:14px 28px;background-color:#111827;color:#ffffff;border-radius:9999px;text-decoration:none;font-weight:bold;">Log in to {app_name}</a>
      <p style="margin-top:20px;color:#6B7280;font-size:14px;">
        This link will expire in {minutes} minutes.<br/>
        If you didn't request this, feel free to ignore it.
      </p>
    </div>
  </body>
</html>
"""


class MailDeliveryError(Exception):
    """The email provider rejected the message or could not be reached."""


class MailService:
    """
    Sends transactional email through the Brevo HTTP API.
    Configured from the app config in init_app.
    """

    def __init__(self):
        self.api_key: Optional[str] = None
        self.sender_email: Optional[str] = None
        self.sender_name: str = "Blogwebapp"
        self.timeout = 10

    def init_app(self, app: Flask):
        self.api_key = app.config.get('BREVO_API_KEY')
        self.sender_email = app.config.get('EMAIL_FROM')
        self.sender_name = app.config.get('EMAIL_FROM_NAME', self.sender_name)
        if not self.api_key or not self.sender_email:
            logging.warning("MailService: BREVO_API_KEY or EMAIL_FROM missing, emails cannot be sent.")
        else:
            logging.info("MailService: Brevo mail service initialized.")

    def send_magic_link(self, to: str, link: str, expires_minutes: int):
        """Emails a login link. Raises MailDeliveryError on failure."""
        if not self.api_key or not self.sender_email:
            raise MailDeliveryError("Mail service is not configured.")

        payload = {
            "sender": {"email": self.sender_email, "name": self.sender_name},
            "to": [{"email": to}],
            "subject": f"Login to {self.sender_name} - Your Magic Link",
            "htmlContent": MAGIC_LINK_HTML.format(
                app_name=self.sender_name, link=quote(link, safe=":/?=&"), minutes=expires_minutes
            ),
            "textContent": f"Login to {self.sender_name} using this link: {link}",
        }
        try:
            response = requests.post(
                BREVO_SEND_URL,
                json=payload,
                headers={"api-key": self.api_key, "accept": "application/json"},
                timeout=self.timeout
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logging.error(f"Magic link email failed (to: {to}): {e}", exc_info=True)
            raise MailDeliveryError("Email sending failed") from e

        logging.info(f"Magic link sent to: {to}")
