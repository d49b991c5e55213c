"""Gmail API JSON parser for MailMessage conversion.

This module parses raw Gmail API message JSON (format="full") into MailMessage objects.
Handles header extraction, base64 body decoding and multipart handling.

Usage:
    from rsvp_sheets.ingestion.gmail import parse_gmail_message

    raw = gmail_api.users().messages().get(userId='me', id='...', format='full').execute()
    message = parse_gmail_message(raw)
"""

import base64
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any

from rsvp_sheets.models import MailMessage


def parse_gmail_message(raw_json: dict[str, Any]) -> MailMessage:
    """Parse Gmail API message JSON into MailMessage.

    The body is the text/plain part when present, otherwise the text/html
    part (whose "<br />" breaks the line parser strips).

    Args:
        raw_json: Full Gmail API message response (format="full")

    Returns:
        MailMessage populated from the message

    Raises:
        ValueError: If required fields (id, threadId, payload) are missing,
            or the message carries no usable timestamp
    """
    if not raw_json:
        raise ValueError("Empty message JSON")

    message_id = raw_json.get("id")
    thread_id = raw_json.get("threadId")

    if not message_id:
        raise ValueError("Missing message id")
    if not thread_id:
        raise ValueError("Missing threadId")

    payload = raw_json.get("payload")
    if not payload:
        raise ValueError("Missing payload")

    headers = _extract_headers(payload.get("headers", []))
    subject = headers.get("Subject", headers.get("subject"))
    date_header = headers.get("Date", headers.get("date", ""))

    timestamp = _parse_timestamp(raw_json.get("internalDate"), date_header)
    if timestamp is None:
        raise ValueError(f"Message {message_id} has no usable timestamp")

    html_body, text_body = _extract_body(payload)

    return MailMessage(
        message_id=message_id,
        thread_id=thread_id,
        subject=subject,
        body=text_body or html_body or "",
        timestamp=timestamp,
    )


def _extract_headers(headers: list[dict[str, str]]) -> dict[str, str]:
    """Convert Gmail API headers array to dict.

    Gmail API returns headers as: [{"name": "From", "value": "..."}]
    Converts to: {"From": "..."}
    """
    result = {}
    for header in headers:
        name = header.get("name", "")
        value = header.get("value", "")
        if name:
            result[name] = value
    return result


def _parse_timestamp(internal_date: str | None, date_header: str) -> datetime | None:
    """Resolve when a message was received, in local time.

    Gmail's internalDate (epoch milliseconds, as a string) is preferred;
    it is what the Gmail UI shows. The RFC 2822 Date header is the fallback.
    Returns None when neither can be parsed.
    """
    if internal_date:
        try:
            millis = int(internal_date)
        except (TypeError, ValueError):
            millis = None
        if millis is not None:
            return datetime.fromtimestamp(millis / 1000, tz=timezone.utc).astimezone()

    if not date_header:
        return None

    try:
        parsed = parsedate_to_datetime(date_header)
    except (ValueError, TypeError):
        # Malformed date
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone()


def _extract_body(payload: dict[str, Any]) -> tuple[str | None, str | None]:
    """Extract HTML and plain text body from payload.

    Handles:
    - Simple messages with body.data in payload
    - multipart/alternative with text/plain and text/html parts
    - Nested multipart structures

    Returns:
        Tuple of (html_body, text_body), either can be None
    """
    html_body = None
    text_body = None

    mime_type = payload.get("mimeType", "")

    body = payload.get("body", {})
    body_data = body.get("data")

    if body_data and not payload.get("parts"):
        decoded = _decode_body_data(body_data)
        if "text/html" in mime_type:
            html_body = decoded
        else:
            # text/plain or unclear mime type
            text_body = decoded

    for part in payload.get("parts", []):
        part_mime = part.get("mimeType", "")
        part_body = part.get("body", {})
        part_data = part_body.get("data")

        # Skip attachments (they have a filename or attachmentId)
        if part_body.get("attachmentId") or part.get("filename"):
            continue

        if part_data:
            decoded = _decode_body_data(part_data)
            if "text/html" in part_mime:
                html_body = decoded
            elif "text/plain" in part_mime:
                text_body = decoded

        if part.get("parts"):
            nested_html, nested_text = _extract_body(part)
            if nested_html and not html_body:
                html_body = nested_html
            if nested_text and not text_body:
                text_body = nested_text

    return html_body, text_body


def _decode_body_data(data: str) -> str:
    """Decode base64url-encoded body data.

    Gmail API uses URL-safe base64 encoding, sometimes without padding.
    """
    if not data:
        return ""

    padded = data + "=" * (-len(data) % 4)
    try:
        decoded_bytes = base64.urlsafe_b64decode(padded)
    except (ValueError, TypeError):
        return ""
    return decoded_bytes.decode("utf-8", errors="replace")
