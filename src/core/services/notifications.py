"""Invitation email delivery through Amazon SES."""

import logging
from html import escape
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    """SES rejected or could not accept the message."""


def render_invite_email(invite_link: str, trip_name: str, inviter_name: str, ttl_days: int = 7) -> tuple[str, str]:
    """Return ``(html, text)`` bodies for an invitation email."""
    link = escape(invite_link, quote=True)
    html = f"""<!DOCTYPE html>
<html>
  <head><meta charset="utf-8"></head>
  <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
    <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
      <h2>You're invited to a trip</h2>
      <p><strong>{escape(inviter_name)}</strong> invited you to <strong>{escape(trip_name)}</strong>.</p>
      <p><a href="{link}">Accept invitation</a></p>
      <p>Or copy this link:</p>
      <p style="color: #666; word-break: break-all;">{link}</p>
      <p style="margin-top: 30px; font-size: 12px; color: #666;">This invitation expires in {ttl_days} days.</p>
    </div>
  </body>
</html>"""
    text = (
        f"{inviter_name} invited you to {trip_name}.\n\n"
        f"Accept the invitation: {invite_link}\n\n"
        f"This invitation expires in {ttl_days} days.\n"
    )
    return html, text


def send_invite_email(
    ses_client: Any,
    sender: str,
    to_email: str,
    invite_link: str,
    trip_name: str,
    inviter_email: str,
    ttl_days: int = 7,
) -> str:
    """Send the invitation and return the SES message id."""
    inviter = inviter_email or "A fellow traveller"
    html, text = render_invite_email(invite_link, trip_name, inviter, ttl_days)
    try:
        response = ses_client.send_email(
            Source=sender,
            Destination={"ToAddresses": [to_email]},
            Message={
                "Subject": {"Data": f"{inviter} invited you to {trip_name}", "Charset": "UTF-8"},
                "Body": {
                    "Html": {"Data": html, "Charset": "UTF-8"},
                    "Text": {"Data": text, "Charset": "UTF-8"},
                },
            },
        )
    except (ClientError, BotoCoreError) as e:
        logger.error("Failed to send invitation email to %s: %s", to_email, e)
        raise EmailDeliveryError(str(e)) from e

    message_id = response["MessageId"]
    logger.info("Invitation email sent to %s (message %s)", to_email, message_id)
    return message_id
