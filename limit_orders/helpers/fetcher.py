"""
Off-chain transport for the limit orders API.

requests is blocking, so every request runs in the loop's default executor.
A cancellation signal (asyncio.Event) aborts waiting for the response.
"""

import asyncio
import functools
import logging
from typing import Any, Dict, Mapping, Optional, Protocol

import requests

from ..errors import FetchAbortedError, FetcherError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class Fetcher(Protocol):
    async def fetch(
        self,
        url: str,
        method: str = "GET",
        data: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        signal: Optional[asyncio.Event] = None,
    ) -> Any:
        ...


class RequestsFetcher:
    """Fetcher backed by a requests.Session."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
        headers: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.session = session or requests.Session()
        self.timeout = timeout
        self.headers: Dict[str, str] = dict(headers or {})

    def _request(
        self,
        url: str,
        method: str,
        data: Any,
        headers: Optional[Mapping[str, str]],
    ) -> Any:
        merged_headers = {**self.headers, **(headers or {})}
        try:
            res = self.session.request(
                method,
                url,
                json=data,
                headers=merged_headers or None,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise FetcherError(f"Request failed: {e}", url=url) from e

        if not res.ok:
            try:
                payload = res.json()
            except ValueError:
                payload = res.text
            message = payload.get("error", res.reason) if isinstance(payload, dict) else res.reason
            raise FetcherError(str(message), url=url, status=res.status_code, payload=payload)

        try:
            return res.json()
        except ValueError as e:
            raise FetcherError("Response is not valid JSON", url=url, status=res.status_code) from e

    async def fetch(
        self,
        url: str,
        method: str = "GET",
        data: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        signal: Optional[asyncio.Event] = None,
    ) -> Any:
        if signal is not None and signal.is_set():
            raise FetchAbortedError("Request aborted", url=url)

        logger.debug("fetch: %s %s", method, url)
        loop = asyncio.get_running_loop()
        request = loop.run_in_executor(
            None, functools.partial(self._request, url, method, data, headers)
        )
        if signal is None:
            return await request

        aborted = asyncio.ensure_future(signal.wait())
        try:
            done, _ = await asyncio.wait({request, aborted}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            aborted.cancel()

        if request in done:
            return request.result()

        # the worker thread keeps running, its result is dropped
        request.cancel()
        raise FetchAbortedError("Request aborted", url=url)
