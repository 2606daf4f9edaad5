"""EZSMTP package initialization module.

This package builds outbound email messages (headers, a plain-text or HTML
body and file attachments) and delivers them to an SMTP relay with AUTH
PLAIN or CRAM-MD5 authentication.

Modules:
    core (module): The server profile and message builder.
    address (module): Mailbox parsing and formatting.
    transport (module): The SMTP session and authentication strategies.
    errors (module): Structured exceptions.
    config (module): INI file loading.
    utils (module): Encoded-word and base64 helpers and config validators.
    logger (module): Logger lookup; handlers are left to the application.

Example:
    from ezsmtp import EzServer

    server = EzServer.plain("smtp.domain.com", 587, "me@domain.com", "secret")

    message = server.new_message("Hello!", "This is a test email.")
    message.set_from("Me <me@domain.com>")
    message.add_to("recipient@domain.com")
    message.send()
"""

from .address import Mailbox, parse_address_list
from .config import load_server
from .core import DEFAULT_BOUNDARY, EzMessage, EzServer
from .errors import (
    AuthError,
    DuplicateHeader,
    ErrorKind,
    EzSMTPError,
    MalformedAddress,
    MissingAttachment,
    MissingRecipient,
    MissingSender,
)
from .transport import CramMD5Auth, PlainAuth, SMTPTransport

__all__ = [
    "AuthError",
    "CramMD5Auth",
    "DEFAULT_BOUNDARY",
    "DuplicateHeader",
    "ErrorKind",
    "EzMessage",
    "EzSMTPError",
    "EzServer",
    "Mailbox",
    "MalformedAddress",
    "MissingAttachment",
    "MissingRecipient",
    "MissingSender",
    "PlainAuth",
    "SMTPTransport",
    "load_server",
    "parse_address_list",
]
