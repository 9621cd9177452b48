# tests/test_fetcher.py
"""RequestsFetcher with a fake requests session."""

import asyncio
import threading

import pytest
import requests

from limit_orders.errors import FetchAbortedError, FetcherError, is_fetcher_error
from limit_orders.helpers.fetcher import RequestsFetcher

URL = "https://api.test/ft/orders/1/maker/0xabc"


class FakeResponse:
    def __init__(self, status_code=200, body=None, text="", reason="OK"):
        self.status_code = status_code
        self._body = body
        self.text = text
        self.reason = reason

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._body is None:
            raise ValueError("No JSON object could be decoded")
        return self._body


class FakeSession:
    def __init__(self, response=None, error=None, gate=None):
        self.response = response
        self.error = error
        self.gate = gate
        self.calls = []

    def request(self, method, url, json=None, headers=None, timeout=None):
        self.calls.append({"method": method, "url": url, "json": json, "headers": headers, "timeout": timeout})
        if self.gate is not None:
            self.gate.wait(5)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.mark.asyncio
async def test_fetch_returns_json_body():
    session = FakeSession(FakeResponse(body={"orders": []}))
    fetcher = RequestsFetcher(session=session, timeout=3, headers={"X-Partner": "sdk"})

    body = await fetcher.fetch(URL)

    assert body == {"orders": []}
    assert session.calls == [
        {"method": "GET", "url": URL, "json": None, "headers": {"X-Partner": "sdk"}, "timeout": 3}
    ]


@pytest.mark.asyncio
async def test_fetch_posts_json_payload():
    session = FakeSession(FakeResponse(status_code=201, body={"order": {"orderHash": "0x1"}}))
    fetcher = RequestsFetcher(session=session)

    body = await fetcher.fetch(URL, "POST", data={"maker": "0xabc"}, headers={"Content-Type": "application/json"})

    assert body == {"order": {"orderHash": "0x1"}}
    assert session.calls[0]["json"] == {"maker": "0xabc"}
    assert session.calls[0]["headers"] == {"Content-Type": "application/json"}


@pytest.mark.asyncio
async def test_http_error_keeps_status_and_payload():
    payload = {"error": "Order not found"}
    session = FakeSession(FakeResponse(status_code=404, body=payload, reason="Not Found"))

    with pytest.raises(FetcherError) as exc_info:
        await RequestsFetcher(session=session).fetch(URL)

    error = exc_info.value
    assert error.status == 404
    assert error.payload == payload
    assert error.url == URL
    assert str(error) == f"HTTP 404: Order not found [{URL}]"
    assert is_fetcher_error(error)


@pytest.mark.asyncio
async def test_http_error_with_text_body():
    session = FakeSession(FakeResponse(status_code=502, text="Bad gateway", reason="Bad Gateway"))

    with pytest.raises(FetcherError) as exc_info:
        await RequestsFetcher(session=session).fetch(URL)

    assert exc_info.value.payload == "Bad gateway"
    assert exc_info.value.msg == "Bad Gateway"


@pytest.mark.asyncio
async def test_transport_error_is_wrapped():
    session = FakeSession(error=requests.ConnectionError("connection refused"))

    with pytest.raises(FetcherError) as exc_info:
        await RequestsFetcher(session=session).fetch(URL)

    assert exc_info.value.status is None
    assert isinstance(exc_info.value.__cause__, requests.ConnectionError)


@pytest.mark.asyncio
async def test_invalid_json_is_a_fetcher_error():
    session = FakeSession(FakeResponse(body=None, text="<html>"))

    with pytest.raises(FetcherError, match="not valid JSON"):
        await RequestsFetcher(session=session).fetch(URL)


@pytest.mark.asyncio
async def test_already_aborted_signal_skips_the_request():
    session = FakeSession(FakeResponse(body={}))
    signal = asyncio.Event()
    signal.set()

    with pytest.raises(FetchAbortedError):
        await RequestsFetcher(session=session).fetch(URL, signal=signal)

    assert session.calls == []


@pytest.mark.asyncio
async def test_signal_aborts_a_pending_request():
    gate = threading.Event()
    session = FakeSession(FakeResponse(body={}), gate=gate)
    signal = asyncio.Event()
    fetcher = RequestsFetcher(session=session)

    async def abort_soon():
        while not session.calls:
            await asyncio.sleep(0.01)
        signal.set()

    try:
        with pytest.raises(FetchAbortedError) as exc_info:
            await asyncio.gather(fetcher.fetch(URL, signal=signal), abort_soon())
    finally:
        gate.set()

    assert is_fetcher_error(exc_info.value)


@pytest.mark.asyncio
async def test_unfired_signal_does_not_interfere():
    session = FakeSession(FakeResponse(body=[1, 2]))
    signal = asyncio.Event()

    assert await RequestsFetcher(session=session).fetch(URL, signal=signal) == [1, 2]
    assert not signal.is_set()
