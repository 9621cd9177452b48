# limit_orders/errors.py
from typing import Any, Optional


class LimitOrderError(Exception):
    """Base limit order SDK error."""
    def __init__(self, msg: str = ""):
        super().__init__(msg)
        self.msg = msg

    def __str__(self):
        return self.msg or self.__class__.__name__


class ContractNotAvailableError(LimitOrderError):
    """No settlement contract is registered for the requested chain."""

    def __init__(self, chain_id: int):
        super().__init__(f"AugustusRFQ contract for Limit Orders not available on chain {chain_id}")
        self.chain_id = chain_id


class ReconciliationInvariantError(LimitOrderError, AssertionError):
    """On-chain data contradicts itself, e.g. a touched order without events."""


class FetcherError(LimitOrderError):
    """Off-chain API request failed."""

    def __init__(
        self,
        msg: str,
        *,
        url: str = "",
        status: Optional[int] = None,
        payload: Any = None,
    ):
        super().__init__(msg)
        self.url = url
        self.status = status
        self.payload = payload

    def __str__(self):
        base = super().__str__()
        if self.status is not None:
            return f"HTTP {self.status}: {base} [{self.url}]"
        return base


class FetchAbortedError(FetcherError):
    """Cancellation signal fired before the response arrived."""


class ContractCallError(LimitOrderError):
    """Wrapper for failures of view calls, log queries and transactions."""

    def __init__(self, msg: str, *, address: str = "", method: str = ""):
        super().__init__(msg)
        self.address = address
        self.method = method


def is_fetcher_error(error: BaseException) -> bool:
    return isinstance(error, FetcherError)
