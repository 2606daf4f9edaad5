import pytest

from ezsmtp import ErrorKind, Mailbox, MalformedAddress, parse_address_list
from ezsmtp.address import join_addresses


def test_parse_single_bare_address():
    assert parse_address_list("a@x.com") == [Mailbox("", "a@x.com")]


def test_parse_list_preserves_order_and_names():
    mailboxes = parse_address_list("Ann <ann@x.com>, bob@y.com, \"Lee, Carl\" <carl@z.org>")

    assert mailboxes == [
        Mailbox("Ann", "ann@x.com"),
        Mailbox("", "bob@y.com"),
        Mailbox("Lee, Carl", "carl@z.org"),
    ]


@pytest.mark.parametrize("text", ["", "   ", "not an address", "user@", "@domain.com", "a@x.com, nobody"])
def test_parse_rejects_malformed_input(text):
    with pytest.raises(MalformedAddress) as exc:
        parse_address_list(text, "to")

    assert exc.value.kind is ErrorKind.MALFORMED_ADDRESS
    assert exc.value.context["field"] == "to"


def test_malformed_address_is_a_value_error():
    with pytest.raises(ValueError):
        parse_address_list("nope")


def test_format_without_name_uses_angle_brackets():
    assert str(Mailbox("", "a@x.com")) == "<a@x.com>"


def test_format_quotes_ascii_names():
    assert str(Mailbox("Ann Lee", "ann@x.com")) == '"Ann Lee" <ann@x.com>'
    assert str(Mailbox('Say "hi"', "s@x.com")) == '"Say \\"hi\\"" <s@x.com>'


def test_format_encodes_non_ascii_names():
    assert str(Mailbox("Jürgen", "j@x.de")) == "=?UTF-8?B?SsO8cmdlbg==?= <j@x.de>"


@pytest.mark.parametrize(
    "mailbox",
    [
        Mailbox("", "a@x.com"),
        Mailbox("Ann Lee", "ann@x.com"),
        Mailbox("Lee, Ann", "lee@x.com"),
        Mailbox("Jürgen Müller", "jm@x.de"),
        Mailbox("山田太郎", "taro@example.jp"),
    ],
)
def test_format_then_parse_round_trips(mailbox):
    assert parse_address_list(str(mailbox)) == [mailbox]


def test_join_addresses_uses_bare_commas():
    joined = join_addresses([Mailbox("", "a@x.com"), Mailbox("Bob", "b@y.com")])

    assert joined == '<a@x.com>,"Bob" <b@y.com>'


def test_parse_keeps_quoted_local_part():
    assert parse_address_list('"john doe"@example.com') == [Mailbox("", '"john doe"@example.com')]


def test_parse_quoted_local_part_with_name():
    mailboxes = parse_address_list('Ann <"a.b"@example.com>, "Lee" <"j d"@example.com>')

    assert mailboxes == [Mailbox("Ann", "a.b@example.com"), Mailbox("Lee", '"j d"@example.com')]


def test_parse_domain_literal():
    assert parse_address_list("user@[192.168.0.1]") == [Mailbox("", "user@[192.168.0.1]")]


@pytest.mark.parametrize(
    "mailbox",
    [
        Mailbox("", '"john doe"@example.com'),
        Mailbox("John Doe", '"john doe"@example.com'),
        Mailbox("", "user@[192.168.0.1]"),
        Mailbox("Ops", "ops@[192.168.0.1]"),
    ],
)
def test_quoted_and_literal_addresses_round_trip(mailbox):
    assert parse_address_list(str(mailbox)) == [mailbox]


@pytest.mark.parametrize("text", ["a@x.com\r\nBcc: evil@x.com", "team: a@x.com, b@x.com;"])
def test_parse_rejects_line_breaks_and_groups(text):
    with pytest.raises(MalformedAddress):
        parse_address_list(text)
