from __future__ import annotations

import json
from typing import Optional
from urllib.parse import quote

import google.generativeai as genai

from ..config import get_config
from ..logger import get_logger
from ..models.order_models import EmailDraft, Order
from .invoice_service import format_amount, format_quantity

logger = get_logger(__name__)

_DATE_FORMAT = "%Y-%m-%d"
_ATTACHMENT_NOTE = "(Please attach the PDF saved from the invoice preview.)"


def fallback_draft(order: Order) -> EmailDraft:
    order_date = order.order_date.strftime(_DATE_FORMAT)
    return EmailDraft(
        subject=f"[Shipment Notice] {order.store_name} - {order_date}",
        body=f"Hello, attached is your order summary. Total: {format_amount(order.total_amount)}.",
        generated=False,
    )


def draft_email(order: Order) -> EmailDraft:
    """Ask Gemini for a notification email; fall back to a fixed template on any failure."""
    config = get_config()
    if not config.gemini_api_key:
        logger.debug("No Gemini API key configured; using fallback email draft")
        return fallback_draft(order)

    try:
        genai.configure(api_key=config.gemini_api_key)
        model = genai.GenerativeModel(config.gemini_model)
        response = model.generate_content(
            _build_prompt(order),
            generation_config={"response_mime_type": "application/json"},
        )
        draft = _parse_draft(response.text)
    except Exception as exc:  # noqa: BLE001
        logger.warning("Email draft generation failed for {}: {}", order.order_id, exc)
        return fallback_draft(order)

    if draft is None:
        logger.warning("Email draft for {} was empty or malformed", order.order_id)
        return fallback_draft(order)
    return draft


def build_mailto_url(order: Order, draft: EmailDraft) -> str:
    body = f"{draft.body}\n\n{_ATTACHMENT_NOTE}"
    return "mailto:{to}?subject={subject}&body={body}".format(
        to=quote(order.email, safe="@"),
        subject=quote(draft.subject, safe=""),
        body=quote(body, safe=""),
    )


def _build_prompt(order: Order) -> str:
    item_lines = "\n".join(
        f"- {item.name} ({format_quantity(item.quantity)} {item.unit})" for item in order.items
    )
    order_date = order.order_date.strftime(_DATE_FORMAT)
    return (
        "Write a professional notification email for the following sales order.\n"
        f"Store name: {order.store_name}\n"
        f"Order date: {order_date}\n"
        f"Total amount: {format_amount(order.total_amount)}\n"
        f"Items:\n{item_lines}\n\n"
        "The email should contain:\n"
        f"1. A subject about the shipment on {order_date}.\n"
        "2. A body thanking the store for the order, mentioning the attached invoice and listing the key items.\n"
        'Respond only with JSON containing the fields "subject" and "body".'
    )


def _parse_draft(text: Optional[str]) -> Optional[EmailDraft]:
    cleaned = (text or "").strip()
    if not cleaned:
        return None
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError:
        return None
    if not isinstance(payload, dict):
        return None

    subject = str(payload.get("subject") or "").strip()
    body = str(payload.get("body") or "").strip()
    if not subject or not body:
        return None
    return EmailDraft(subject=subject, body=body, generated=True)
