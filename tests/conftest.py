import sys
from pathlib import Path

import pytest
import requests

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import rifme


def rhyme_page(*words: str) -> str:
    items = "\n".join(f'<li class="riLi" data-w="{word}">{word}</li>' for word in words)
    return f"<html><body><ul>{items}</ul></body></html>"


def cookie_value(cookie: str, key: str):
    for pair in cookie.split(";"):
        name, _, value = pair.partition("=")
        if name == key:
            return value
    return None


class FakeResponse:
    def __init__(self, text: str, status_code: int = 200, url: str = ""):
        self.text = text
        self.status_code = status_code
        self.url = url

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error for {self.url}", response=self)


class FakeSession:
    """Session stub that routes every GET through ``handler(url, cookie)``."""

    def __init__(self, handler):
        self.handler = handler
        self.headers = {}
        self.calls = []

    def get(self, url, headers=None, timeout=None):
        cookie = (headers or {}).get("Cookie", "")
        self.calls.append((url, cookie, timeout))
        result = self.handler(url, cookie)
        if isinstance(result, FakeResponse):
            result.url = url
            return result
        return FakeResponse(result, url=url)


@pytest.fixture
def make_scraper():
    """Build a scraper whose HTTP session is replaced by ``FakeSession(handler)``."""

    def factory(handler):
        scraper = rifme.RifmeScraper()
        scraper.session = FakeSession(handler)
        return scraper

    return factory
