# limit_orders/enums.py
"""
Basic constants for limit order state.
Mostly string-based, centralized here for consistency with the API payloads.
"""

from typing import FrozenSet

# Order type, decides which API collection an order lives in
ORDER_TYPE_LIMIT = "LIMIT"
ORDER_TYPE_P2P = "P2P"

# Reconciled order status
ORDER_STATUS_OPEN = "open"
ORDER_STATUS_EXPIRED = "expired"
ORDER_STATUS_FILLED = "filled"
ORDER_STATUS_CANCELED = "canceled"
ORDER_STATUS_PARTIALLY_FILLED = "partiallyFilled"
ORDER_STATUS_UNKNOWN = "unknown"

# Statuses that can only be reached through on-chain activity,
# such orders always carry the transaction hashes that produced them
ONCHAIN_STATUSES: FrozenSet[str] = frozenset(
    {
        ORDER_STATUS_FILLED,
        ORDER_STATUS_CANCELED,
        ORDER_STATUS_PARTIALLY_FILLED,
    }
)

# Contract events
EVENT_ORDER_FILLED = "OrderFilled"
EVENT_ORDER_CANCELLED = "OrderCancelled"

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

DEFAULT_API_URL = "https://apiv5.paraswap.io"
