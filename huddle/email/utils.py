import logging
from fastapi_mail import FastMail, MessageSchema, ConnectionConfig
from huddle.core.config import (
    APP_DOMAIN,
    MAIL_USERNAME,
    MAIL_PASSWORD,
    MAIL_FROM,
    MAIL_PORT,
    MAIL_SERVER,
    MAIL_STARTTLS,
    MAIL_SSL_TLS,
    MAIL_FROM_NAME,
    USE_CREDENTIALS,
)
from typing import List

_mailer = None


def get_mailer():
    """Build the FastMail client on first use; None when mail is not configured."""
    global _mailer
    if _mailer is None and MAIL_SERVER and MAIL_FROM:
        conf = ConnectionConfig(
            MAIL_USERNAME=MAIL_USERNAME or "",
            MAIL_PASSWORD=MAIL_PASSWORD or "",
            MAIL_FROM=MAIL_FROM,
            MAIL_PORT=MAIL_PORT,
            MAIL_SERVER=MAIL_SERVER,
            MAIL_STARTTLS=MAIL_STARTTLS,
            MAIL_SSL_TLS=MAIL_SSL_TLS,
            USE_CREDENTIALS=USE_CREDENTIALS,
            MAIL_FROM_NAME=MAIL_FROM_NAME,
        )
        _mailer = FastMail(conf)
    return _mailer


async def _send(subject: str, recipients: List[str], body: str):
    mailer = get_mailer()
    if mailer is None:
        logging.info(f"✉️ Mail not configured, skipped '{subject}' to {len(recipients)} recipients")
        return
    if not recipients:
        return
    message = MessageSchema(subject=subject, recipients=recipients, body=body, subtype="html")
    await mailer.send_message(message)


# ------------------------------
# Invitation Email
# ------------------------------
async def send_invitation_emails(
    recipients: List[str],
    organizer: str,
    meeting_id: int,
    title: str,
    description: str,
    start_dt,
    location: str = None,
):
    """
    Sends a meeting suggestion to every invited participant.
    """
    link = f"{APP_DOMAIN}/meetings/{meeting_id}"
    location_html = f"<strong>📍 Location:</strong> {location}<br>" if location else ""
    body = f"""
<html>
  <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #222;">
    <p>Hello 👋,</p>
    <p><b>{organizer}</b> suggested a meeting and would like your answer.</p>

    <p><strong>📝 Description:</strong> {description or '-'}<br>
       <strong>🕒 Proposed Time (UTC):</strong> {start_dt}<br>
       {location_html}
       <strong>🔗 Respond:</strong> <a href="{link}" style="color:#1a73e8;">Accept, reject or propose another time</a>
    </p>

    <p style="margin-top: 25px;">Best regards,<br><b>Huddle</b></p>
  </body>
</html>
"""
    await _send(f"📅 Meeting Suggestion: {title}", recipients, body)


# ------------------------------
# Reminder Email
# ------------------------------
async def send_meeting_reminder(
    recipients: List[str],
    organizer: str,
    meeting_id: int,
    title: str,
    start_dt,
):
    """
    Sends a reminder shortly before the proposed time.
    """
    link = f"{APP_DOMAIN}/meetings/{meeting_id}"
    body = f"""
<html>
  <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #222;">
    <p>Hello 👋,</p>
    <p>This is a friendly reminder for your upcoming meeting.</p>

    <p><strong>🧑‍💼 Organizer:</strong> {organizer}<br>
       <strong>🕒 Start Time (UTC):</strong> {start_dt}<br>
       <strong>🔗 Details:</strong> <a href="{link}" style="color:#1a73e8;">Open meeting</a>
    </p>

    <p style="margin-top: 25px;">Best regards,<br><b>Huddle</b></p>
  </body>
</html>
"""
    await _send(f"⏰ Reminder: {title} starts soon!", recipients, body)
