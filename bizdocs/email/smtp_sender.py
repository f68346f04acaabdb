# bizdocs/email/smtp_sender.py
from __future__ import annotations

import logging
import os
import re
import smtplib
import ssl
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Iterable, Optional, Sequence, Tuple

from bizdocs import settings

log = logging.getLogger("bizdocs.email")


@dataclass
class EmailAttachment:
    filename: str
    content_type: str  # e.g. "application/pdf"
    data: bytes


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _parse_email_from(value: str) -> Tuple[str, str]:
    """
    Accepts either:
      - 'Acme Builders <office@acme.test>'
      - 'office@acme.test'
    Returns (display_name, email_address); display_name may be "".

    Tolerates a missing trailing '>' in env values.
    """
    v = (value or "").strip().strip('"')

    m = re.match(r"^(.*)<([^>]+)>?$", v)
    if m:
        name = (m.group(1) or "").strip().strip('"')
        email = (m.group(2) or "").strip().rstrip(">")
        return (name, email)

    return ("", v)


def _format_address(name: str, email: str) -> str:
    return f"{name} <{email}>" if name else email


def send_email(
    *,
    to_email: str,
    subject: str,
    html_body: str,
    text_body: str,
    from_email: Optional[str] = None,
    cc_emails: Optional[Iterable[str]] = None,
    attachments: Sequence[EmailAttachment] = (),
) -> None:
    """
    Sends an email over SMTP.

    Required env:
      SMTP_HOST
    Optional env:
      SMTP_PORT (587), SMTP_USER, SMTP_PASSWORD, SMTP_STARTTLS (on),
      EMAIL_FROM, EMAIL_REPLY_TO

    EMAIL_FROM wins over from_email: most relays only accept the
    authenticated mailbox as envelope sender. from_email is then used as Reply-To.
    """
    host = os.getenv("SMTP_HOST")
    if not host:
        raise RuntimeError("SMTP_HOST is not set; email delivery is not configured.")
    port = int(os.getenv("SMTP_PORT", "587"))
    user = os.getenv("SMTP_USER")
    password = os.getenv("SMTP_PASSWORD") or ""

    configured_from = os.getenv("EMAIL_FROM")
    from_name, from_addr = _parse_email_from(configured_from or from_email or settings.DEFAULT_SENDER_EMAIL)

    reply_to = os.getenv("EMAIL_REPLY_TO")
    if not reply_to and configured_from and from_email:
        reply_to = _parse_email_from(from_email)[1]
    # Reply-To should be a real mailbox (no trailing dot)
    reply_to = (reply_to or "").strip().rstrip(".")

    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = _format_address(from_name, from_addr)
    msg["To"] = to_email
    if reply_to and reply_to != from_addr:
        msg["Reply-To"] = reply_to

    # CC list (also used for SMTP envelope recipients)
    cc_list = [e.strip() for e in (cc_emails or []) if e and e.strip()]
    if cc_list:
        msg["Cc"] = ", ".join(cc_list)

    msg.set_content(text_body or "")
    msg.add_alternative(html_body or "", subtype="html")

    for att in attachments:
        if not att.content_type or "/" not in att.content_type:
            maintype, subtype = "application", "octet-stream"
        else:
            maintype, subtype = att.content_type.split("/", 1)

        msg.add_attachment(
            att.data,
            maintype=maintype,
            subtype=subtype,
            filename=att.filename,
        )

    with smtplib.SMTP(host, port, timeout=30) as server:
        server.ehlo()
        if _env_flag("SMTP_STARTTLS", True):
            server.starttls(context=ssl.create_default_context())
            server.ehlo()
        if user:
            server.login(user, password)

        to_addrs = [to_email] + cc_list
        server.send_message(msg, from_addr=from_addr, to_addrs=to_addrs)

    log.info(
        "Email sent to %s (%d attachment(s))",
        to_email,
        len(attachments),
    )
