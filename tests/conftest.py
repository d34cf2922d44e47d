import copy
from types import SimpleNamespace

import pytest
import requests


SAMPLE_FEED = {
    "tfa": {"title": "Ignored featured article"},
    "onthisday": [
        {
            "text": "Apollo 11's lunar module Eagle lands on the Moon.",
            "year": 1969,
            "pages": [
                {
                    "normalizedtitle": "Apollo 11",
                    "extract": "Apollo 11 was the first crewed Moon landing.",
                    "content_urls": {
                        "desktop": {"page": "https://en.wikipedia.org/wiki/Apollo_11"}
                    },
                    "thumbnail": {"source": "https://upload.example.org/apollo.jpg"},
                },
                {
                    "normalizedtitle": "Apollo Lunar Module",
                    "extract": "The lunar lander of the Apollo program.",
                    "content_urls": {
                        "desktop": {
                            "page": "https://en.wikipedia.org/wiki/Apollo_Lunar_Module"
                        }
                    },
                },
            ],
        },
        {
            "text": "The Treaty of Example is signed.",
            "year": 1402,
            "pages": [],
        },
        {
            "text": "A later event.",
            "year": 2001,
            "pages": [
                {
                    "normalizedtitle": "Example",
                    "extract": "An example page.",
                    "content_urls": {
                        "desktop": {"page": "https://en.wikipedia.org/wiki/Example"}
                    },
                    "thumbnail": None,
                }
            ],
        },
    ],
}


class FakeResponse:
    def __init__(self, payload=None, status_code=200, json_error=None):
        self._payload = payload
        self.status_code = status_code
        self._json_error = json_error

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self):
        if self._json_error is not None:
            raise self._json_error
        return self._payload


class FakeSession:
    """Records requests and replays queued responses or exceptions."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def get(self, url, headers=None, timeout=None):
        self.calls.append(SimpleNamespace(url=url, headers=headers, timeout=timeout))
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def feed_payload():
    return copy.deepcopy(SAMPLE_FEED)
