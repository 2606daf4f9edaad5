"""SMTP session used to deliver serialized messages.

The transport opens one connection per delivery, upgrades it with STARTTLS
when the server offers it, authenticates with the strategy chosen by the
server profile and hands the raw message bytes to the relay. TLS
connections verify the server certificate and host name.

Example:
    transport = SMTPTransport(timeout=10)
    transport.send_mail(
        "smtp.domain.com:587",
        PlainAuth("", "me@domain.com", "secret", "smtp.domain.com"),
        "me@domain.com",
        ["you@domain.com"],
        raw_bytes,
    )
"""

import ssl
from base64 import b64decode, b64encode
from dataclasses import dataclass, field
from hmac import HMAC
from smtplib import (
    SMTP,
    SMTP_SSL,
    SMTPAuthenticationError,
    SMTPDataError,
    SMTPRecipientsRefused,
    SMTPSenderRefused,
)
from typing import ClassVar, Iterable, Union

from .errors import AuthError
from .logger import get_logger


logger = get_logger("ezsmtp.transport")

LOCALHOSTS = ("localhost", "127.0.0.1", "::1")


def _b64(text: str) -> str:
    return b64encode(text.encode("utf-8")).decode("ascii")


@dataclass(frozen=True)
class PlainAuth:
    """AUTH PLAIN credentials bound to the host they were issued for."""

    mechanism: ClassVar[str] = "PLAIN"

    identity: str
    username: str
    password: str = field(repr=False)
    host: str

    def check(self, host: str, encrypted: bool) -> None:
        """Refuses to send the password in clear text or to a different host.

        Raises:
            AuthError: If the channel is unencrypted and the server is not
                local, or if ``host`` differs from the configured host.
        """
        if not encrypted and host not in LOCALHOSTS:
            raise AuthError(self.mechanism, "unencrypted connection")
        if host != self.host:
            raise AuthError(self.mechanism, "wrong host name")

    def response(self) -> str:
        return f"{self.identity}\0{self.username}\0{self.password}"

    def authenticate(self, smtp: SMTP) -> None:
        """Sends ``AUTH PLAIN`` with the UTF-8 credentials as initial response.

        Raises:
            smtplib.SMTPAuthenticationError: If the server does not reply 235.
        """
        token = _b64(self.response())
        code, resp = smtp.docmd("AUTH", f"{self.mechanism} {token}")
        if code == 334:
            code, resp = smtp.docmd(token)
        if code != 235:
            raise SMTPAuthenticationError(code, resp)


@dataclass(frozen=True)
class CramMD5Auth:
    """AUTH CRAM-MD5 credentials; the secret never leaves the client."""

    mechanism: ClassVar[str] = "CRAM-MD5"

    username: str
    secret: str = field(repr=False)

    def check(self, host: str, encrypted: bool) -> None:
        pass

    def response(self, challenge: bytes) -> str:
        digest = HMAC(self.secret.encode("utf-8"), challenge, "md5").hexdigest()
        return f"{self.username} {digest}"

    def authenticate(self, smtp: SMTP) -> None:
        """Answers the server challenge with the keyed MD5 digest.

        Raises:
            smtplib.SMTPAuthenticationError: If the server does not send a
                challenge or rejects the answer.
        """
        code, resp = smtp.docmd("AUTH", self.mechanism)
        if code != 334:
            raise SMTPAuthenticationError(code, resp)
        code, resp = smtp.docmd(_b64(self.response(b64decode(resp))))
        if code != 235:
            raise SMTPAuthenticationError(code, resp)


Auth = Union[PlainAuth, CramMD5Auth]


def split_address(address: str) -> tuple[str, int]:
    """Splits ``"host:port"`` (or ``"[v6]:port"``) into its parts."""
    host, sep, port = address.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise ValueError(f"Invalid server address: {address!r}")
    return host.strip("[]"), int(port)


def _check_line(value: str) -> None:
    if "\r" in value or "\n" in value:
        raise ValueError("SMTP envelope addresses must not contain CR or LF.")


class SMTPTransport:
    """Delivers raw message bytes to an SMTP relay.

    Port 465 is treated as implicit TLS; any other port connects in plain
    text and upgrades with STARTTLS when the server advertises it. Both use
    ``context``, which defaults to ``ssl.create_default_context()`` and so
    verifies the server certificate and host name.
    """

    def __init__(
        self,
        timeout: float = 30,
        local_hostname: str | None = None,
        context: ssl.SSLContext | None = None,
    ):
        self.timeout = timeout
        self.local_hostname = local_hostname
        self.context = context if context is not None else ssl.create_default_context()

    def _connect(self, host: str, port: int) -> Union[SMTP, SMTP_SSL]:
        if port == 465:
            return SMTP_SSL(host, port, local_hostname=self.local_hostname, timeout=self.timeout, context=self.context)
        return SMTP(host, port, local_hostname=self.local_hostname, timeout=self.timeout)

    def send_mail(
        self,
        address: str,
        auth: Auth | None,
        from_addr: str,
        recipients: Iterable[str],
        raw: bytes,
    ) -> None:
        """Runs one complete SMTP session.

        Args:
            address (str): Relay as ``"host:port"``.
            auth (PlainAuth | CramMD5Auth | None): Authentication strategy, or
                None to skip AUTH.
            from_addr (str): Envelope sender (MAIL FROM).
            recipients (Iterable[str]): Envelope recipients (RCPT TO), in order.
            raw (bytes): The serialized message.

        Raises:
            AuthError: If the server does not offer AUTH or the strategy
                refuses the connection.
            ssl.SSLError: If the server certificate or host name does not verify.
            smtplib.SMTPException: Any rejection from the relay, unchanged.
            OSError: Connection failures, unchanged.
        """
        recipients = list(recipients)
        _check_line(from_addr)
        for rcpt in recipients:
            _check_line(rcpt)

        host, port = split_address(address)
        logger.debug("Connecting to %s:%d for %d recipient(s)", host, port, len(recipients))

        with self._connect(host, port) as smtp:
            encrypted = isinstance(smtp, SMTP_SSL)
            smtp.ehlo()
            if not encrypted and smtp.has_extn("starttls"):
                smtp.starttls(context=self.context)
                smtp.ehlo()
                encrypted = True

            if auth is not None:
                if not smtp.has_extn("auth"):
                    raise AuthError(auth.mechanism, "server doesn't support AUTH")
                auth.check(host, encrypted)
                auth.authenticate(smtp)
                logger.debug("Authenticated with %s as %s", auth.mechanism, auth.username)

            code, resp = smtp.mail(from_addr)
            if code != 250:
                raise SMTPSenderRefused(code, resp, from_addr)

            for rcpt in recipients:
                code, resp = smtp.rcpt(rcpt)
                if code not in (250, 251):
                    raise SMTPRecipientsRefused({rcpt: (code, resp)})

            code, resp = smtp.data(raw)
            if code != 250:
                raise SMTPDataError(code, resp)

        logger.debug("Message accepted by %s:%d", host, port)
