from dataclasses import dataclass, field
from email.utils import formatdate
from mimetypes import guess_type
from os.path import basename, isfile
from uuid import uuid4

from jinja2 import Template  # type: ignore

from .address import Mailbox, join_addresses, parse_address_list
from .errors import DuplicateHeader, MissingAttachment, MissingRecipient, MissingSender
from .logger import get_logger
from .transport import Auth, CramMD5Auth, PlainAuth, SMTPTransport
from .utils import encode_word, validate_account, validate_host, validate_port, validate_protocol_config, validate_template, wrap_base64


logger = get_logger("ezsmtp")

DEFAULT_BOUNDARY = "0141caffe046497"


@dataclass(frozen=True)
class EzServer:
    """Connection and authentication settings for one SMTP relay.

    A server is immutable once created and acts as the factory for the
    messages sent through it. Authentication uses CRAM-MD5 when a ``secret``
    is configured and AUTH PLAIN with the password otherwise.

    Example:
        server = EzServer.plain("smtp.domain.com", 587, "me@domain.com", "secret")
        message = server.new_message("Welcome!", "Hello there.")
        message.set_from("Me <me@domain.com>")
        message.add_to("user@domain.com")
        message.attach("reports/monthly_report.pdf")
        message.send()
    """

    host: str
    port: int
    username: str = ""
    password: str = field(default="", repr=False)
    secret: str = field(default="", repr=False)
    identity: str = ""
    transport: SMTPTransport = field(default_factory=SMTPTransport, repr=False, compare=False)

    def __post_init__(self):
        validate_host(self.host)
        validate_port(self.port)

    @classmethod
    def plain(
        cls,
        host: str,
        port: int,
        username: str,
        password: str,
        identity: str = "",
        transport: SMTPTransport | None = None,
    ) -> "EzServer":
        """Creates a server that authenticates with AUTH PLAIN.

        Args:
            host (str): SMTP server hostname or IP.
            port (int): SMTP server port.
            username (str): Login name.
            password (str): Login password.
            identity (str, optional): Authorization identity, usually empty.
            transport (SMTPTransport, optional): Transport to deliver with.
        """
        extra = {"transport": transport} if transport is not None else {}
        return cls(host, port, username, password=password, identity=identity, **extra)

    @classmethod
    def cram_md5(
        cls,
        host: str,
        port: int,
        username: str,
        secret: str,
        transport: SMTPTransport | None = None,
    ) -> "EzServer":
        """Creates a server that authenticates with CRAM-MD5 using ``secret``."""
        extra = {"transport": transport} if transport is not None else {}
        return cls(host, port, username, secret=secret, **extra)

    @classmethod
    def from_config(cls, smtp: dict, account: dict, transport: SMTPTransport | None = None) -> "EzServer":
        """Creates a server from configuration dicts.

        Args:
            smtp (dict): SMTP configuration with keys:
                - `server` (str): SMTP server hostname or IP.
                - `port` (int): SMTP server port.
            account (dict): Credentials with keys:
                - `username` (str): Login name.
                - `password` (str): Password for AUTH PLAIN, or
                - `secret` (str): Shared secret for CRAM-MD5.
                - `identity` (str, optional): AUTH PLAIN identity.

        Raises:
            ValueError: If either dict is incomplete or invalid.
        """
        validate_protocol_config(smtp)
        validate_account(account)

        if account.get("secret"):
            return cls.cram_md5(smtp["server"], smtp["port"], account["username"], account["secret"], transport)
        return cls.plain(
            smtp["server"],
            smtp["port"],
            account["username"],
            account["password"],
            account.get("identity", ""),
            transport,
        )

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    @property
    def auth(self) -> Auth:
        """The authentication strategy used when sending; the secret wins over the password."""
        if self.secret:
            return CramMD5Auth(self.username, self.secret)
        return PlainAuth(self.identity, self.username, self.password, self.host)

    def new_message(self, subject: str, body: str) -> "EzMessage":
        """Creates a plain-text message bound to this server."""
        return EzMessage(self, subject, body, "text/plain")

    def new_html_message(self, subject: str, body: str) -> "EzMessage":
        """Creates an HTML message bound to this server."""
        return EzMessage(self, subject, body, "text/html")

    def easy_send(self, sender: str, to: str, subject: str, body: str) -> None:
        """Builds a plain-text message and sends it in one call.

        Raises:
            MalformedAddress: If ``sender`` or ``to`` cannot be parsed.
            EzSMTPError: Any error ``EzMessage.send`` raises.

        Example:
            server.easy_send("me@domain.com", "you@domain.com", "Hi", "Test")
        """
        message = self.new_message(subject, body)
        message.set_from(sender)
        message.add_to(to)
        message.send()


class EzMessage:
    """An outgoing message under construction.

    Messages are created by :class:`EzServer`, filled through the setters and
    delivered with :meth:`send`. Nothing is checked against the network or
    the filesystem until the message is serialized.

    Attributes:
        boundary (str | None): Multipart boundary. When None (the default) a
            fresh one is generated on every serialization; set it to
            ``DEFAULT_BOUNDARY`` or any token for reproducible output.
    """

    def __init__(self, server: EzServer, subject: str, body: str, content_type: str = "text/plain"):
        self.server = server
        self.sender = Mailbox()
        self.to: list[Mailbox] = []
        self.cc: list[Mailbox] = []
        self.bcc: list[Mailbox] = []
        self.reply_to = Mailbox()
        self.subject = subject
        self.body = body
        self.content_type = content_type
        self.headers: dict[str, str] = {}
        self.attachments: dict[str, str] = {}
        self.boundary: str | None = None

    def set_from(self, sender: str) -> None:
        """Sets the sender.

        Only the first mailbox is kept when ``sender`` lists several.

        Raises:
            MalformedAddress: If ``sender`` cannot be parsed; the message is left unchanged.
        """
        self.sender = parse_address_list(sender, "from")[0]

    def add_to(self, to: str) -> None:
        """Appends every mailbox in ``to`` to the To recipients.

        Example:
            add_to("Ann <ann@domain.com>, bob@domain.com")
        """
        self.to.extend(parse_address_list(to, "to"))

    def add_cc(self, cc: str) -> None:
        self.cc.extend(parse_address_list(cc, "cc"))

    def add_bcc(self, bcc: str) -> None:
        self.bcc.extend(parse_address_list(bcc, "bcc"))

    def set_reply_to(self, reply_to: str) -> None:
        """Sets the Reply-To mailbox; like :meth:`set_from`, only the first entry is kept."""
        self.reply_to = parse_address_list(reply_to, "reply_to")[0]

    def add_header(self, key: str, value: str) -> None:
        """Adds a custom header.

        Raises:
            DuplicateHeader: If ``key`` was already added; the first value is kept.
        """
        if key in self.headers:
            raise DuplicateHeader(key)
        self.headers[key] = value

    def set_header(self, key: str, value: str) -> None:
        """Adds or replaces a custom header."""
        self.headers[key] = value

    def attach(self, path: str) -> None:
        """Attaches the file at ``path`` under its base name.

        Attaching another file with the same base name replaces the earlier
        one. The file must exist when the message is sent, not now.
        """
        self.attachments[basename(path)] = path

    def clear_attachments(self) -> None:
        self.attachments = {}

    def use_template(self, file: str, **variables) -> None:
        """Renders a Jinja2 template file and uses the result as the body.

        Args:
            file (str): Path to the template file.
            **variables: Values for the template placeholders.

        Raises:
            ValueError: If the file is not a supported template.
            FileNotFoundError: If the file does not exist.

        Example:
            use_template("templates/welcome.html", name="John", version="1.0.0")
        """
        validate_template(file)

        with open(file, "r", encoding="utf-8") as f:
            self.body = Template(f.read()).render(**variables)

    def envelope_recipients(self) -> list[str]:
        """Addresses for RCPT TO: To, then Cc, then Bcc."""
        return [mailbox.address for mailbox in (*self.to, *self.cc, *self.bcc)]

    def as_bytes(self) -> bytes:
        """Serializes the message into its wire form.

        Headers are written in the order From, Date, To, Cc, Subject,
        Reply-To and then the custom headers. With attachments the body
        becomes the first part of a multipart/mixed envelope and each file
        follows base64-encoded in 76 character lines.

        Returns:
            bytes: The message with CRLF line endings.

        Raises:
            MissingSender: If no sender address is set.
            MissingRecipient: If there is no To recipient.
            MissingAttachment: If an attached file does not exist.
            OSError: If an attached file cannot be read.
        """
        buf = []
        write = buf.append

        if not self.sender.address:
            raise MissingSender()
        write(f"From: {self.sender}\r\n")
        write(f"Date: {formatdate(localtime=True)}\r\n")

        if not self.to:
            raise MissingRecipient()
        write(f"To: {join_addresses(self.to)}\r\n")

        if self.cc:
            write(f"Cc: {join_addresses(self.cc)}\r\n")

        write(f"Subject: {encode_word(self.subject)}\r\n")

        if self.reply_to.address:
            write(f"Reply-To: {self.reply_to}\r\n")

        for key, value in self.headers.items():
            write(f"{key}: {value}\r\n")

        boundary = self.boundary or uuid4().hex
        if self.attachments:
            write(f"Content-Type: multipart/mixed; boundary={boundary}\r\n")
            write(f"\r\n--{boundary}\r\n")

        write(f"Content-Type: {self.content_type}; charset=utf-8\r\n\r\n")
        write(self.body)
        write("\r\n")

        if self.attachments:
            for filename, path in self.attachments.items():
                if not isfile(path):
                    raise MissingAttachment(filename, path)

                write(f"\r\n\r\n--{boundary}\r\n")

                mime_type, _ = guess_type(filename)
                write(f"Content-Type: {mime_type or 'application/octet-stream'}\r\n")
                write("Content-Transfer-Encoding: base64\r\n")
                write(f'Content-Disposition: attachment; filename="{encode_word(filename)}"\r\n\r\n')

                with open(path, "rb") as f:
                    write("\r\n".join(wrap_base64(f.read())))

            write(f"\r\n--{boundary}--")

        data = "".join(buf).encode("utf-8")
        logger.debug("Serialized message %r (%d bytes, %d attachment(s))", self.subject, len(data), len(self.attachments))
        return data

    def send(self) -> None:
        """Serializes the message and delivers it through the server's transport.

        Nothing touches the network until the whole message has been built,
        so a validation or attachment error never results in a partial send.

        Raises:
            MissingSender, MissingRecipient, MissingAttachment: See :meth:`as_bytes`.
            AuthError: If authentication is refused client-side.
            smtplib.SMTPException: Relay errors, unchanged.
            OSError: File or connection errors, unchanged.
        """
        data = self.as_bytes()
        server = self.server
        server.transport.send_mail(
            server.address,
            server.auth,
            self.sender.address,
            self.envelope_recipients(),
            data,
        )

    def __repr__(self) -> str:
        return f"<EzMessage from={self.sender.address!r} subject={self.subject!r} attachments={len(self.attachments)}>"
