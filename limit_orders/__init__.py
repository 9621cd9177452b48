"""Client SDK for AugustusRFQ limit orders: build, sign, post, fetch, reconcile, fill, cancel."""

from functools import lru_cache

from .errors import (
    ContractCallError,
    ContractNotAvailableError,
    FetchAbortedError,
    FetcherError,
    LimitOrderError,
    ReconciliationInvariantError,
    is_fetcher_error,
)
from .helpers import AsyncWeb3ContractCaller, RequestsFetcher, Web3ContractCaller, construct_contract_caller
from .methods import LimitOrderHandlers, LimitOrdersClient, OrderStatusReconciler, resolve_order_status
from .models import (
    LimitOrder,
    LimitOrderExtra,
    LimitOrdersResult,
    OrderLog,
    OrderRef,
    RawLimitOrder,
    ReconciledOrders,
    UnknownLimitOrder,
    UnknownStatusOrders,
)
from .sdk import construct_limit_order_handlers
from .settings import Settings


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached SDK settings instance."""
    return Settings()


__all__ = [
    "Settings",
    "get_settings",
    "construct_limit_order_handlers",
    "LimitOrderHandlers",
    "LimitOrdersClient",
    "OrderStatusReconciler",
    "resolve_order_status",
    "RequestsFetcher",
    "Web3ContractCaller",
    "AsyncWeb3ContractCaller",
    "construct_contract_caller",
    "OrderRef",
    "RawLimitOrder",
    "OrderLog",
    "LimitOrderExtra",
    "LimitOrder",
    "UnknownLimitOrder",
    "ReconciledOrders",
    "UnknownStatusOrders",
    "LimitOrdersResult",
    "LimitOrderError",
    "ContractNotAvailableError",
    "ReconciliationInvariantError",
    "FetcherError",
    "FetchAbortedError",
    "ContractCallError",
    "is_fetcher_error",
]
