"""Order notification email. Best effort: callers log and ignore failures."""
import html
import json
import logging
import os
import smtplib
from email.message import EmailMessage
from typing import List, Optional, Tuple

from orders import CONTACT_EMAIL

logger = logging.getLogger(__name__)

SMTP_HOST = os.getenv("SMTP_HOST", "smtp.gmail.com")
SMTP_PORT = int(os.getenv("SMTP_PORT", 465))
ORDER_NOTIFY_EMAIL = os.getenv("ORDER_NOTIFY_EMAIL", CONTACT_EMAIL)

# (filename, content_type, content)
Attachment = Tuple[str, str, bytes]


def product_label(product_type: str) -> str:
    return (product_type or "").upper().replace("-", " ", 1)


def render_order_email(order_id: str, product_type: str, order_details: str, whatsapp: str) -> str:
    details = json.loads(order_details)
    pricing = details.get("pricing") or {}

    def na(key):
        value = pricing.get(key)
        return html.escape(str(value)) if value not in (None, "") else "N/A"

    pretty = html.escape(json.dumps(details, indent=2, ensure_ascii=False))
    return f"""
      <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
        <h2 style="color: #F9B234;">New Order Received</h2>
        <p><strong>Order ID:</strong> {html.escape(order_id)}</p>
        <p><strong>Product Type:</strong> {html.escape(product_label(product_type))}</p>
        <h3>Order Details:</h3>
        <div style="background: #f5f5f5; padding: 15px; border-radius: 5px;">
          <pre style="white-space: pre-wrap;">{pretty}</pre>
        </div>
        <h3>Pricing:</h3>
        <p><strong>Total Price:</strong> ₹{na("totalPrice")}</p>
        <p><strong>Quantity:</strong> {na("quantity")}</p>
        <p><strong>Paper Type:</strong> {na("paperType")}</p>
        <p><strong>Estimated Delivery:</strong> {na("estimatedDelivery")}</p>
        <hr>
        <p style="color: #666;">Check your WhatsApp ({html.escape(whatsapp)}) for customer contact.</p>
      </div>
    """


def send_order_notification(order_id: str, product_type: str, order_details: str, whatsapp: str,
                            attachments: Optional[List[Attachment]] = None) -> bool:
    """
    Email the business about a new order. Returns False when SMTP is not configured.

    Raises on malformed order details or transport errors.
    """
    user = os.getenv("EMAIL_USER")
    password = os.getenv("EMAIL_PASSWORD")
    if not user or not password:
        logger.info("Email credentials not configured, skipping email")
        return False

    msg = EmailMessage()
    msg["Subject"] = f"New SIRAQ Order - {order_id}"
    msg["From"] = user
    msg["To"] = ORDER_NOTIFY_EMAIL
    msg.set_content(f"New order {order_id} ({product_type}). View this message as HTML for details.")
    msg.add_alternative(render_order_email(order_id, product_type, order_details, whatsapp), subtype="html")
    for filename, content_type, content in attachments or []:
        maintype, _, subtype = (content_type or "application/octet-stream").partition("/")
        msg.add_attachment(content, maintype=maintype, subtype=subtype or "octet-stream", filename=filename)

    with smtplib.SMTP_SSL(SMTP_HOST, SMTP_PORT) as smtp:
        smtp.login(user, password)
        smtp.send_message(msg)
    logger.info("Order notification sent for %s", order_id)
    return True
