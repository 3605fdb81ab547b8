import pytest
import requests
from django.core.cache import cache


@pytest.fixture(autouse=True)
def _ical_settings(settings):
    settings.ICAL_ALLOWED_HOSTS = ["calendar.avantio.pro", "feeds.example.com"]
    settings.ICAL_FETCH_TIMEOUT = 10
    settings.ICAL_CACHE_TTL = 300
    cache.clear()
    yield settings
    cache.clear()


def make_ics(*events):
    """Feed mínimo; cada evento es una lista de líneas 'PROP:valor'."""
    lines = ["BEGIN:VCALENDAR", "VERSION:2.0", "PRODID:-//Test//Feed//EN"]
    for i, props in enumerate(events):
        lines += ["BEGIN:VEVENT", f"UID:event-{i}@test"] + list(props) + ["END:VEVENT"]
    lines.append("END:VCALENDAR")
    return ("\r\n".join(lines) + "\r\n").encode("utf-8")


def all_day(start, end):
    return [f"DTSTART;VALUE=DATE:{start}", f"DTEND;VALUE=DATE:{end}", "SUMMARY:Reserved"]


class FakeResponse:
    def __init__(self, content=b"", status_code=200):
        self.content = content
        self.status_code = status_code

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def iter_content(self, chunk_size=1):
        for i in range(0, len(self.content), chunk_size):
            yield self.content[i:i + chunk_size]

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error", response=self)


class FeedStub:
    """Sustituye requests.get: guarda las URLs pedidas y devuelve lo configurado."""

    def __init__(self):
        self.content = make_ics()
        self.status_code = 200
        self.error = None
        self.calls = []

    def __call__(self, url, timeout=None, headers=None, stream=False):
        self.calls.append({"url": url, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return FakeResponse(self.content, self.status_code)


@pytest.fixture
def feed(monkeypatch):
    stub = FeedStub()
    monkeypatch.setattr("villas.utils.ical.requests.get", stub)
    return stub


@pytest.fixture
def ics():
    return make_ics


@pytest.fixture
def event():
    return all_day
