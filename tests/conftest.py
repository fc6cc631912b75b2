"""Shared fixtures: an in-memory stand-in for requests.Session and RYM CSV text.

No test touches the network. ``FakeSession`` replays a scripted list of
responses (or exceptions) and records every GET it receives.
"""

from __future__ import annotations

import pytest

RYM_HEADER = (
    "RYM Album,First Name,Last Name,First Name localized,Last Name localized,"
    "Title,Release_Date,Rating,Ownership,Purchase Date,Media Type,Review"
)


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else str(payload)

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []
        self.headers = {}
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.closed = True

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({
            "url": url,
            "params": dict(params or {}),
            "headers": dict(headers or {}),
            "timeout": timeout,
        })
        resp = self.responses.pop(0)
        if isinstance(resp, Exception):
            raise resp
        return resp


def make_items(count: int, start: int = 0) -> list[dict]:
    return [
        {
            "Id": f"jf{i}",
            "Name": f"Album {i}",
            "AlbumArtist": "Artist",
            "ProductionYear": 2000,
            "Overview": "",
            "PrimaryImageTag": f"tag{i}",
        }
        for i in range(start, start + count)
    ]


def page(items: list[dict], total: int, start: int = 0) -> FakeResponse:
    return FakeResponse(200, {"Items": items, "TotalRecordCount": total, "StartIndex": start})


@pytest.fixture
def fake_session():
    """Factory: ``fake_session([resp, ...])`` -> FakeSession."""
    return FakeSession


@pytest.fixture
def items():
    return make_items


@pytest.fixture
def items_page():
    return page


@pytest.fixture
def rym_csv_text():
    def build(*rows: str) -> str:
        return "\n".join([RYM_HEADER, *rows]) + "\n"

    return build


@pytest.fixture
def fake_response():
    return FakeResponse
