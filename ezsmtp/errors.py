"""Exceptions raised while composing and sending messages.

Every error carries an :class:`ErrorKind` tag and a ``context`` dict with the
offending field, key or path, so callers can branch on ``error.kind`` instead
of parsing the message text.

Errors coming from the SMTP session itself (``smtplib.SMTPException``) or
from reading an attachment (``OSError``) are not wrapped and reach the caller
unchanged.
"""

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    MALFORMED_ADDRESS = "malformed_address"
    DUPLICATE_HEADER = "duplicate_header"
    MISSING_SENDER = "missing_sender"
    MISSING_RECIPIENT = "missing_recipient"
    MISSING_ATTACHMENT = "missing_attachment"
    AUTH = "auth"


class EzSMTPError(Exception):
    """Base class for all ezsmtp errors."""

    kind: ErrorKind

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.context = context


class MalformedAddress(EzSMTPError, ValueError):
    kind = ErrorKind.MALFORMED_ADDRESS

    def __init__(self, text: str, field: str | None = None):
        super().__init__(f"Malformed address list: {text!r}", text=text, field=field)
        self.text = text
        self.field = field


class DuplicateHeader(EzSMTPError):
    kind = ErrorKind.DUPLICATE_HEADER

    def __init__(self, key: str):
        super().__init__(f"Header already present: {key}", key=key)
        self.key = key


class MissingSender(EzSMTPError):
    kind = ErrorKind.MISSING_SENDER

    def __init__(self):
        super().__init__("Sender address must be set before sending.", field="from")


class MissingRecipient(EzSMTPError):
    kind = ErrorKind.MISSING_RECIPIENT

    def __init__(self):
        super().__init__("At least one 'To' recipient is required.", field="to")


class MissingAttachment(EzSMTPError):
    kind = ErrorKind.MISSING_ATTACHMENT

    def __init__(self, filename: str, path: str):
        super().__init__(f"Attachment not found: {path}", filename=filename, path=path)
        self.filename = filename
        self.path = path


class AuthError(EzSMTPError):
    """Raised when the client refuses to authenticate against the server."""

    kind = ErrorKind.AUTH

    def __init__(self, mechanism: str, reason: str):
        super().__init__(f"{mechanism} authentication refused: {reason}", mechanism=mechanism, reason=reason)
        self.mechanism = mechanism
        self.reason = reason
