"""Validation and encoding helpers shared by the ezsmtp modules."""

from base64 import b64encode
from os.path import isfile
from typing import Any


ENCODED_WORD = "=?UTF-8?B?{}?="
LINE_LENGTH = 76


def encode_word(text: str) -> str:
    """Wraps ``text`` in a UTF-8 base64 RFC 2047 encoded-word.

    The text is always encoded, even when it is plain ASCII.

    Example:
        >>> encode_word("Hello")
        '=?UTF-8?B?SGVsbG8=?='
    """
    return ENCODED_WORD.format(b64encode(text.encode("utf-8")).decode("ascii"))


def wrap_base64(data: bytes, width: int = LINE_LENGTH) -> list[str]:
    """Base64-encodes ``data`` and splits the result into lines of ``width`` characters."""
    encoded = b64encode(data).decode("ascii")
    return [encoded[i:i + width] for i in range(0, len(encoded), width)]


def validate_protocol_config(config: dict) -> None:
    """Checks an SMTP server configuration dict.

    Args:
        config (dict): Must contain a non-empty ``server`` string and an
            integer ``port`` between 0 and 65535.

    Raises:
        ValueError: If a key is missing or holds an invalid value.
    """
    if not isinstance(config, dict):
        raise ValueError("Server configuration must be a dict.")
    for key in ("server", "port"):
        if key not in config:
            raise ValueError(f"Server configuration is missing '{key}'.")
    validate_host(config["server"])
    validate_port(config["port"])


def validate_account(account: dict) -> None:
    """Checks an account dict holding SMTP credentials.

    Args:
        account (dict): Must contain ``username`` and exactly one of
            ``password`` or ``secret``. ``identity`` is optional.

    Raises:
        ValueError: If the credentials are incomplete or ambiguous.
    """
    if not isinstance(account, dict):
        raise ValueError("Account configuration must be a dict.")
    if "username" not in account:
        raise ValueError("Account configuration is missing 'username'.")
    has_password = bool(account.get("password"))
    has_secret = bool(account.get("secret"))
    if has_password == has_secret:
        raise ValueError("Account configuration needs exactly one of 'password' or 'secret'.")
    if has_secret and account.get("identity"):
        raise ValueError("'identity' is only used with password authentication.")


def validate_host(host: Any) -> None:
    if not isinstance(host, str) or not host.strip():
        raise ValueError("SMTP host must be a non-empty string.")


def validate_port(port: Any) -> None:
    if isinstance(port, bool) or not isinstance(port, int) or not 0 <= port <= 65535:
        raise ValueError(f"SMTP port must be an integer between 0 and 65535, got {port!r}.")


def validate_template(file: str) -> None:
    """Checks that ``file`` points to an existing HTML or text template.

    Raises:
        ValueError: If the path is not a string or has an unsupported extension.
        FileNotFoundError: If the file does not exist.
    """
    if not isinstance(file, str):
        raise ValueError("Template path must be a string.")
    if not file.lower().endswith((".html", ".htm", ".txt", ".j2", ".jinja")):
        raise ValueError(f"Unsupported template file: {file}")
    if not isfile(file):
        raise FileNotFoundError(f"Template not found: {file}")
