import pytest

from ezsmtp import EzServer


FIXED_DATE = "Mon, 02 Jan 2006 15:04:05 -0700"


class FakeTransport:
    """Records deliveries instead of opening a connection."""

    def __init__(self):
        self.calls = []

    def send_mail(self, address, auth, from_addr, recipients, raw):
        self.calls.append({
            "address": address,
            "auth": auth,
            "from": from_addr,
            "to": list(recipients),
            "raw": raw,
        })


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def server(transport):
    return EzServer.plain("smtp.example.com", 587, "u", "p", transport=transport)


@pytest.fixture
def fixed_date(monkeypatch):
    monkeypatch.setattr("ezsmtp.core.formatdate", lambda localtime=True: FIXED_DATE)
    return FIXED_DATE
