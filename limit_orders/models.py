import re
from typing import Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .enums import (
    EVENT_ORDER_CANCELLED,
    EVENT_ORDER_FILLED,
    ONCHAIN_STATUSES,
    ORDER_TYPE_LIMIT,
    ZERO_ADDRESS,
)

# Extra keyword arguments for view calls, e.g. {"from": ..., "block": "latest"}
StaticCallOverrides = Dict[str, Any]

OrderStatus = Literal["open", "expired", "filled", "canceled", "partiallyFilled"]
OrderType = Literal["LIMIT", "P2P"]

_DECIMAL_RE = re.compile(r"[0-9]+")


def to_amount_string(value: Any) -> str:
    """Amounts travel as decimal strings, ints are accepted and converted."""
    if isinstance(value, bool):
        raise ValueError("amount must be an unsigned integer")
    if isinstance(value, int):
        if value < 0:
            raise ValueError("amount must be an unsigned integer")
        return str(value)
    if isinstance(value, str) and _DECIMAL_RE.fullmatch(value):
        return value
    raise ValueError(f"amount must be a decimal string, got {value!r}")


def _check_transaction_hashes(status: str, transaction_hashes: Optional[Tuple[str, ...]]) -> None:
    if status in ONCHAIN_STATUSES:
        if not transaction_hashes:
            raise ValueError(f"status {status!r} requires at least one transaction hash")
    elif transaction_hashes is not None:
        raise ValueError(f"status {status!r} cannot carry transaction hashes")


class _ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class OrderRef(_ApiModel):
    """Minimal order terms needed to reconcile an order's status."""

    order_hash: str
    maker: str
    taker: str = ZERO_ADDRESS
    expiry: int
    maker_amount: str

    @field_validator("maker_amount", mode="before")
    @classmethod
    def _amount(cls, value: Any) -> str:
        return to_amount_string(value)


class RawLimitOrder(OrderRef):
    """
    Limit order as returned by the off-chain API.

    Fields the SDK does not know about are kept, so merging extras into a
    raw order never loses API data.
    """

    model_config = ConfigDict(extra="allow")

    maker_asset: str
    taker_asset: str
    taker_amount: str
    nonce_and_meta: str = "0"
    signature: Optional[str] = None
    chain_id: Optional[int] = None
    order_type: OrderType = Field(default=ORDER_TYPE_LIMIT, alias="type")

    @field_validator("taker_amount", "nonce_and_meta", mode="before")
    @classmethod
    def _amounts(cls, value: Any) -> str:
        return to_amount_string(value)

    @property
    def nonce(self) -> int:
        # lower 160 bits of nonceAndMeta hold the taker address
        return int(self.nonce_and_meta) >> 160

    @property
    def is_open_to_any_taker(self) -> bool:
        return self.taker.lower() == ZERO_ADDRESS


class LimitOrdersApiResponse(_ApiModel):
    model_config = ConfigDict(extra="allow")

    orders: List[RawLimitOrder] = Field(default_factory=list)


class LimitOrdersUserParams(_ApiModel):
    """Select orders by exactly one of maker / taker."""

    maker: Optional[str] = None
    taker: Optional[str] = None
    order_type: OrderType = Field(default=ORDER_TYPE_LIMIT, alias="type")

    @model_validator(mode="after")
    def _one_role(self) -> "LimitOrdersUserParams":
        if (self.maker is None) == (self.taker is None):
            raise ValueError("exactly one of maker or taker must be given")
        return self

    @property
    def url_part(self) -> str:
        if self.maker is not None:
            return f"maker/{self.maker}"
        return f"taker/{self.taker}"


class OrderLog(_ApiModel):
    """Decoded OrderFilled / OrderCancelled log entry."""

    event: str
    topic: str
    args: Dict[str, Any]
    transaction_hash: str
    block_number: Optional[int] = None
    log_index: Optional[int] = None

    @property
    def order_hash(self) -> str:
        return self.args["orderHash"]

    @property
    def is_cancelled(self) -> bool:
        return self.event == EVENT_ORDER_CANCELLED

    @property
    def is_filled(self) -> bool:
        return self.event == EVENT_ORDER_FILLED

    @property
    def taker_amount(self) -> Optional[int]:
        if not self.is_filled:
            return None
        return int(self.args["takerAmount"])


class LimitOrderExtra(_ApiModel):
    """
    Reconciled on-chain state of one order.

    transaction_hashes is present and non-empty exactly when the status was
    produced by on-chain activity (filled / canceled / partiallyFilled).
    """

    status: OrderStatus
    amount_filled: str
    transaction_hashes: Optional[Tuple[str, ...]] = None

    @model_validator(mode="after")
    def _hashes(self) -> "LimitOrderExtra":
        _check_transaction_hashes(self.status, self.transaction_hashes)
        return self


class LimitOrder(RawLimitOrder):
    """Raw order enriched with its reconciled status."""

    status: OrderStatus
    amount_filled: str
    transaction_hashes: Optional[Tuple[str, ...]] = None

    @model_validator(mode="after")
    def _hashes(self) -> "LimitOrder":
        _check_transaction_hashes(self.status, self.transaction_hashes)
        return self

    @classmethod
    def from_parts(cls, order: RawLimitOrder, extra: LimitOrderExtra) -> "LimitOrder":
        return cls.model_validate(
            {**order.model_dump(by_alias=True), **extra.model_dump(by_alias=True)}
        )


class UnknownLimitOrder(RawLimitOrder):
    """Raw order whose on-chain state could not be reconciled."""

    status: Literal["unknown"] = "unknown"

    @classmethod
    def from_raw(cls, order: RawLimitOrder) -> "UnknownLimitOrder":
        return cls.model_validate({**order.model_dump(by_alias=True), "status": "unknown"})


class ReconciledOrders(BaseModel):
    kind: Literal["reconciled"] = "reconciled"
    orders: Tuple[LimitOrder, ...] = ()


class UnknownStatusOrders(BaseModel):
    kind: Literal["unknown"] = "unknown"
    orders: Tuple[UnknownLimitOrder, ...] = ()
    reason: str = ""


LimitOrdersResult = Union[ReconciledOrders, UnknownStatusOrders]


__all__ = [
    "StaticCallOverrides",
    "OrderStatus",
    "OrderType",
    "OrderRef",
    "RawLimitOrder",
    "LimitOrdersApiResponse",
    "LimitOrdersUserParams",
    "OrderLog",
    "LimitOrderExtra",
    "LimitOrder",
    "UnknownLimitOrder",
    "ReconciledOrders",
    "UnknownStatusOrders",
    "LimitOrdersResult",
]
