"""Mailbox parsing and formatting.

A :class:`Mailbox` is a display name plus an email address. Address lists are
parsed with the RFC 5322 parser behind :mod:`email.headerregistry`, which
keeps quoted local parts (``"john doe"@example.com``) and domain literals
(``user@[192.168.0.1]``) and decodes encoded-word display names.
"""

from dataclasses import dataclass
from email.headerregistry import HeaderRegistry
from typing import Iterable

from .errors import MalformedAddress
from .utils import encode_word


_registry = HeaderRegistry()


@dataclass(frozen=True)
class Mailbox:
    """One parsed address entry."""

    name: str = ""
    address: str = ""

    def __str__(self) -> str:
        angle = f"<{self.address}>"
        if not self.name:
            return angle
        if all(" " <= ch <= "~" or ch == "\t" for ch in self.name):
            quoted = self.name.replace("\\", "\\\\").replace('"', '\\"')
            return f'"{quoted}" {angle}'
        return f"{encode_word(self.name)} {angle}"


def parse_address_list(text: str, field: str | None = None) -> list[Mailbox]:
    """Parses a comma-separated list of RFC 5322 mailboxes.

    Args:
        text (str): Address list, e.g. ``'Ann <ann@x.com>, bob@y.com'``.
        field (str, optional): Name of the message field being set, recorded
            on the error for context.

    Returns:
        list[Mailbox]: The entries in the order they appear. Addresses are in
        their canonical form, with the local part quoted only when needed.

    Raises:
        MalformedAddress: If the text is empty, contains a line break, names a
            group, or any entry lacks a local part or a domain.
    """
    if not isinstance(text, str) or not text.strip() or "\r" in text or "\n" in text:
        raise MalformedAddress(str(text), field)

    header = _registry("To", text)
    if header.defects or any(group.display_name is not None for group in header.groups):
        raise MalformedAddress(text, field)

    mailboxes = []
    for address in header.addresses:
        if not address.username or not address.domain:
            raise MalformedAddress(text, field)
        mailboxes.append(Mailbox(address.display_name, address.addr_spec))
    return mailboxes


def join_addresses(mailboxes: Iterable[Mailbox]) -> str:
    """Renders mailboxes for a To or Cc header, comma-separated."""
    return ",".join(str(mailbox) for mailbox in mailboxes)
