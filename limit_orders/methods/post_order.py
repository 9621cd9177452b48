# methods/post_order.py
import asyncio
import logging
from typing import Any, Dict, Optional

from ..enums import ORDER_TYPE_LIMIT
from ..helpers.fetcher import Fetcher
from ..helpers.misc import construct_base_fetch_url_getter
from ..models import RawLimitOrder
from .build_order import OrderData

logger = logging.getLogger(__name__)


class LimitOrderToSend(OrderData):
    signature: str


def order_payload(order: LimitOrderToSend) -> Dict[str, Any]:
    return order.model_dump(by_alias=True)


async def post_limit_order(
    fetcher: Fetcher,
    api_url: str,
    chain_id: int,
    order: LimitOrderToSend,
    order_type: str = ORDER_TYPE_LIMIT,
    signal: Optional[asyncio.Event] = None,
) -> RawLimitOrder:
    """Submit a signed order, returns the order as stored by the API."""
    url = construct_base_fetch_url_getter(api_url, chain_id)(order_type) + "/"
    body = await fetcher.fetch(url, "POST", data=order_payload(order), signal=signal)

    # the API wraps the stored order in {"order": ...}
    stored = body.get("order", body) if isinstance(body, dict) else body
    posted = RawLimitOrder.model_validate(stored)
    logger.info("Posted limit order: order_hash=%s maker=%s", posted.order_hash, posted.maker)
    return posted
