# tests/conftest.py
"""
Shared fakes for the limit order tests.

FakeContractCaller and FakeFetcher stand in for the on-chain and off-chain
transports, recording every call so tests can assert on batching.
"""

import asyncio
import os
import sys
from typing import Any, Dict, List, Mapping, Optional

import pytest

# Make sure the project root (the directory containing `limit_orders/`) is on sys.path
PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from limit_orders.enums import EVENT_ORDER_CANCELLED, EVENT_ORDER_FILLED  # noqa: E402
from limit_orders.methods.get_orders import ORDER_CANCELLED_TOPIC, ORDER_FILLED_TOPIC  # noqa: E402
from limit_orders.models import OrderLog, RawLimitOrder  # noqa: E402

CHAIN_ID = 1
NOW = 1_700_000_000

MAKER_A = "0x1111111111111111111111111111111111111111"
MAKER_B = "0x2222222222222222222222222222222222222222"
MAKER_C = "0x3333333333333333333333333333333333333333"
TAKER = "0x4444444444444444444444444444444444444444"
TOKEN_X = "0x6B175474E89094C44Da98b954EedeAC495271d0F"
TOKEN_Y = "0x2b591e99afE9f32eAA6214f7B7629768c40Eeb39"

API_URL = "https://api.test"


def order_hash(n: int) -> str:
    return "0x" + format(n, "064x")


def tx_hash(n: int) -> str:
    return "0x" + format(0xABC000 + n, "064x")


def make_order(
    hash_: str,
    maker: str = MAKER_A,
    maker_amount: str = "10",
    expiry: int = NOW + 3600,
    **extra: Any,
) -> RawLimitOrder:
    payload = {
        "orderHash": hash_,
        "maker": maker,
        "taker": "0x0000000000000000000000000000000000000000",
        "makerAsset": TOKEN_X,
        "takerAsset": TOKEN_Y,
        "makerAmount": maker_amount,
        "takerAmount": "20",
        "nonceAndMeta": str(7 << 160),
        "expiry": expiry,
        "chainId": CHAIN_ID,
        "signature": "0x" + "00" * 65,
        "type": "LIMIT",
    }
    payload.update(extra)
    return RawLimitOrder.model_validate(payload)


def filled_log(hash_: str, tx: str, taker_amount: int, maker: str = MAKER_A) -> OrderLog:
    return OrderLog(
        event=EVENT_ORDER_FILLED,
        topic=ORDER_FILLED_TOPIC,
        args={
            "orderHash": hash_,
            "maker": maker.lower(),
            "makerAsset": TOKEN_X.lower(),
            "makerAmount": taker_amount,
            "taker": TAKER.lower(),
            "takerAsset": TOKEN_Y.lower(),
            "takerAmount": taker_amount,
        },
        transaction_hash=tx,
    )


def cancelled_log(hash_: str, tx: str, maker: str = MAKER_A) -> OrderLog:
    return OrderLog(
        event=EVENT_ORDER_CANCELLED,
        topic=ORDER_CANCELLED_TOPIC,
        args={"orderHash": hash_, "maker": maker.lower()},
        transaction_hash=tx,
    )


class FakeContractCaller:
    """
    In-memory settlement contract.

    balances: lowercased order hash -> remaining balance (missing means 0)
    logs:     every log the contract ever emitted
    """

    def __init__(
        self,
        balances: Optional[Mapping[str, int]] = None,
        logs: Optional[List[OrderLog]] = None,
        static_error: Optional[Exception] = None,
        logs_error: Optional[Exception] = None,
    ) -> None:
        self.balances = {k.lower(): v for k, v in (balances or {}).items()}
        self.logs = list(logs or [])
        self.static_error = static_error
        self.logs_error = logs_error
        self.static_calls: List[Dict[str, Any]] = []
        self.log_calls: List[Dict[str, Any]] = []
        self.transactions: List[Dict[str, Any]] = []

    async def static_call(self, address, abi, method, args, overrides=None):
        self.static_calls.append(
            {"address": address, "method": method, "args": args, "overrides": overrides}
        )
        # yield so per-maker calls really interleave
        await asyncio.sleep(0)
        if self.static_error is not None:
            raise self.static_error
        maker, hashes = args
        return [self.balances.get(h.lower(), 0) for h in hashes]

    async def get_logs_call(self, address, abi, filter):
        self.log_calls.append({"address": address, "filter": filter})
        await asyncio.sleep(0)
        if self.logs_error is not None:
            raise self.logs_error
        wanted = {h.lower() for h in filter["topics"][1]}
        return [log for log in self.logs if log.order_hash.lower() in wanted]

    async def transact_call(self, address, abi, method, args, overrides=None):
        self.transactions.append(
            {"address": address, "method": method, "args": args, "overrides": overrides}
        )
        return tx_hash(len(self.transactions))


class FakeFetcher:
    """Maps (method, url) -> JSON body, or an exception to raise."""

    def __init__(self, responses: Optional[Mapping[Any, Any]] = None) -> None:
        self.responses = dict(responses or {})
        self.requests: List[Dict[str, Any]] = []

    async def fetch(self, url, method="GET", data=None, headers=None, signal=None):
        self.requests.append({"url": url, "method": method, "data": data, "signal": signal})
        response = self.responses[(method, url)]
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def clock():
    return lambda: NOW
