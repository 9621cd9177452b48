# methods/get_orders.py
"""
Fetching limit orders and reconciling their on-chain status.

The API knows which orders exist, but only the AugustusRFQ contract knows
what happened to them. The contract keeps one remaining-balance slot per
order hash, stored per maker:

- 0     -> the order was never touched on-chain (open, or expired unfilled)
- 1     -> the order is done: fully filled or cancelled. Only the
           OrderFilled / OrderCancelled logs tell which.
- other -> partially filled, the value is the remaining maker balance

Reconciliation combines the remaining balances (one view call per maker)
with the order logs (one log query for all orders) into a LimitOrderExtra
per order. The enrichment entry point, get_limit_orders, never fails on the
on-chain part: it falls back to status "unknown" for the whole batch.
"""

import asyncio
import logging
import time
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from eth_utils import encode_hex, event_abi_to_log_topic
from web3 import Web3

from ..abis import OrderEventsABI, RemainingBalanceABI
from ..chains import get_deployed_block, require_verifying_contract
from ..enums import (
    DEFAULT_API_URL,
    EVENT_ORDER_CANCELLED,
    EVENT_ORDER_FILLED,
    ORDER_STATUS_CANCELED,
    ORDER_STATUS_EXPIRED,
    ORDER_STATUS_FILLED,
    ORDER_STATUS_OPEN,
    ORDER_STATUS_PARTIALLY_FILLED,
)
from ..errors import ReconciliationInvariantError
from ..helpers.contract_caller import ContractCaller
from ..helpers.fetcher import Fetcher
from ..helpers.misc import construct_base_fetch_url_getter, find_event_abi, gather_objects_by_prop
from ..models import (
    LimitOrder,
    LimitOrderExtra,
    LimitOrdersApiResponse,
    LimitOrdersResult,
    LimitOrdersUserParams,
    OrderLog,
    OrderRef,
    RawLimitOrder,
    ReconciledOrders,
    StaticCallOverrides,
    UnknownLimitOrder,
    UnknownStatusOrders,
)

logger = logging.getLogger(__name__)

ORDER_FILLED_TOPIC = encode_hex(
    event_abi_to_log_topic(find_event_abi(OrderEventsABI, EVENT_ORDER_FILLED))
)
ORDER_CANCELLED_TOPIC = encode_hex(
    event_abi_to_log_topic(find_event_abi(OrderEventsABI, EVENT_ORDER_CANCELLED))
)

REMAINING_BALANCE_METHOD = "getRemainingOrderBalance"

BALANCE_UNTOUCHED = 0
BALANCE_FILLED_OR_CANCELLED = 1


# -----------------------------------------------------------------------------
# Status resolution (pure)
# -----------------------------------------------------------------------------

def index_events_by_order_hash(logs: Iterable[OrderLog]) -> Dict[str, List[OrderLog]]:
    """Map lowercased order hash -> its logs in arrival order."""
    grouped = gather_objects_by_prop(logs, lambda log: log.order_hash.lower())
    return {order_hash: [log for _, log in entries] for order_hash, entries in grouped.items()}


def sum_filled_amount(order_events: Optional[Sequence[OrderLog]]) -> Optional[str]:
    """
    Sum of takerAmount over the OrderFilled logs of one order.

    None when there are no fills, or they add up to zero.
    """
    fills = [log.taker_amount for log in order_events or () if log.is_filled]
    if not fills:
        return None
    total = sum(fills)
    return str(total) if total else None


def resolve_order_status(
    order: OrderRef,
    remaining_balance: Union[int, str],
    *,
    was_cancelled: bool,
    amount_filled: Optional[str] = None,
    order_events: Optional[Sequence[OrderLog]] = None,
    now: Optional[float] = None,
) -> LimitOrderExtra:
    remaining = int(remaining_balance)

    # the API returned the order, so 0 means it exists but was never touched
    if remaining == BALANCE_UNTOUCHED:
        if now is None:
            now = time.time()
        # expired means it expired without being filled, not even partially
        status = ORDER_STATUS_EXPIRED if now > order.expiry else ORDER_STATUS_OPEN
        return LimitOrderExtra(status=status, amount_filled="0")

    if not order_events:
        raise ReconciliationInvariantError(
            f"there should be events for cancelled, filled and partiallyFilled order {order.order_hash}"
        )

    transaction_hashes = tuple(log.transaction_hash for log in order_events)

    if remaining == BALANCE_FILLED_OR_CANCELLED:
        # a cancelled order may carry fills from before the cancellation.
        # Without them it reports makerAmount, same as a filled order.
        return LimitOrderExtra(
            status=ORDER_STATUS_CANCELED if was_cancelled else ORDER_STATUS_FILLED,
            amount_filled=amount_filled if was_cancelled and amount_filled else order.maker_amount,
            transaction_hashes=transaction_hashes,
        )

    maker_amount = int(order.maker_amount)
    if remaining > maker_amount:
        logger.warning(
            "Order %s: remaining balance %s exceeds makerAmount %s, amount filled is negative",
            order.order_hash,
            remaining,
            maker_amount,
        )

    return LimitOrderExtra(
        status=ORDER_STATUS_PARTIALLY_FILLED,
        amount_filled=str(maker_amount - remaining),
        transaction_hashes=transaction_hashes,
    )


# -----------------------------------------------------------------------------
# On-chain reconciliation
# -----------------------------------------------------------------------------

class OrderStatusReconciler:
    """
    Resolves status and filled amount for batches of orders on one chain.

    Every call fetches fresh on-chain state, nothing is cached. Errors
    propagate to the caller: use LimitOrdersClient.get_limit_orders for the
    variant that degrades to status "unknown".
    """

    def __init__(
        self,
        contract_caller: ContractCaller,
        chain_id: int,
        *,
        verifying_contracts: Optional[Mapping[int, str]] = None,
        deployed_blocks: Optional[Mapping[int, int]] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.contract_caller = contract_caller
        self.chain_id = chain_id
        self.verifying_contracts = verifying_contracts
        self.deployed_blocks = deployed_blocks
        self.clock = clock

    @property
    def verifying_contract(self) -> str:
        return require_verifying_contract(self.chain_id, self.verifying_contracts)

    @property
    def deployed_block(self) -> int:
        return get_deployed_block(self.chain_id, self.deployed_blocks)

    async def fetch_remaining_balances(
        self,
        orders: Sequence[OrderRef],
        overrides: Optional[StaticCallOverrides] = None,
    ) -> List[Optional[int]]:
        """
        Remaining balance per order, aligned by index with `orders`.

        getRemainingOrderBalance takes a single maker, so orders are grouped by
        maker and each group is one call. All calls run concurrently and the
        first failure fails the whole fetch.
        """
        verifying_contract = self.verifying_contract
        remaining_balances: List[Optional[int]] = [None] * len(orders)
        orders_by_maker = gather_objects_by_prop(orders, lambda order: order.maker.lower())

        async def fetch_for_maker(entries) -> None:
            maker = Web3.to_checksum_address(entries[0][1].maker)
            order_hashes = [order.order_hash for _, order in entries]
            logger.debug(
                "getRemainingOrderBalance: maker=%s order_count=%d", maker, len(order_hashes)
            )
            balances = await self.contract_caller.static_call(
                verifying_contract,
                RemainingBalanceABI,
                REMAINING_BALANCE_METHOD,
                [maker, order_hashes],
                overrides,
            )
            if len(balances) != len(entries):
                raise ReconciliationInvariantError(
                    f"Got {len(balances)} remaining balances for {len(entries)} orders of maker {maker}"
                )
            for (index, _), balance in zip(entries, balances):
                remaining_balances[index] = int(balance)

        await asyncio.gather(*(fetch_for_maker(entries) for entries in orders_by_maker.values()))
        return remaining_balances

    async def fetch_order_events(
        self,
        order_hashes: Sequence[str],
        from_block: Optional[int] = None,
    ) -> List[OrderLog]:
        """OrderFilled and OrderCancelled logs for any of `order_hashes`, in one query."""
        verifying_contract = self.verifying_contract
        log_filter = {
            "address": verifying_contract,
            "topics": [[ORDER_FILLED_TOPIC, ORDER_CANCELLED_TOPIC], list(order_hashes)],
            # without a known deployment block the node decides what fromBlock 0 means
            "fromBlock": self.deployed_block if from_block is None else from_block,
        }
        logger.debug(
            "getLogs: contract=%s order_count=%d from_block=%s",
            verifying_contract,
            len(order_hashes),
            log_filter["fromBlock"],
        )
        return await self.contract_caller.get_logs_call(verifying_contract, OrderEventsABI, log_filter)

    async def get_orders_status_and_amount_filled(
        self,
        orders: Sequence[OrderRef],
        overrides: Optional[StaticCallOverrides] = None,
    ) -> List[LimitOrderExtra]:
        # fail before any call when the chain has no settlement contract
        require_verifying_contract(self.chain_id, self.verifying_contracts)
        if not orders:
            return []

        order_hashes = [order.order_hash for order in orders]
        remaining_balances, logs = await asyncio.gather(
            self.fetch_remaining_balances(orders, overrides),
            self.fetch_order_events(order_hashes),
        )
        events_by_order = index_events_by_order_hash(logs)
        now = self.clock()

        extras: List[LimitOrderExtra] = []
        for order, remaining_balance in zip(orders, remaining_balances):
            if remaining_balance is None:
                raise ReconciliationInvariantError(
                    f"Failed to get remainingBalance for order {order.order_hash}"
                )
            # can have none, or OrderFilled * n + OrderCancelled
            order_events = events_by_order.get(order.order_hash.lower())
            extra = resolve_order_status(
                order,
                remaining_balance,
                was_cancelled=any(log.is_cancelled for log in order_events or ()),
                amount_filled=sum_filled_amount(order_events),
                order_events=order_events,
                now=now,
            )
            logger.debug(
                "Order %s: remaining_balance=%s status=%s amount_filled=%s",
                order.order_hash,
                remaining_balance,
                extra.status,
                extra.amount_filled,
            )
            extras.append(extra)
        return extras

    async def get_order_status_and_amount_filled(
        self,
        order: OrderRef,
        overrides: Optional[StaticCallOverrides] = None,
    ) -> LimitOrderExtra:
        extras = await self.get_orders_status_and_amount_filled([order], overrides)
        if len(extras) != 1:
            raise ReconciliationInvariantError(f"Failed to get status for order {order.order_hash}")
        return extras[0]


# -----------------------------------------------------------------------------
# API client
# -----------------------------------------------------------------------------

class LimitOrdersClient:
    """
    Reads limit orders from the API and enriches them with on-chain status.

    Parameters
    ----------
    chain_id:
        EVM chain id the orders live on.
    fetcher:
        Off-chain transport, e.g. RequestsFetcher.
    contract_caller:
        On-chain transport, e.g. Web3ContractCaller.
    api_url:
        Base URL of the limit orders API.
    """

    def __init__(
        self,
        chain_id: int,
        fetcher: Fetcher,
        contract_caller: ContractCaller,
        api_url: str = DEFAULT_API_URL,
        *,
        verifying_contracts: Optional[Mapping[int, str]] = None,
        deployed_blocks: Optional[Mapping[int, int]] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.chain_id = chain_id
        self.fetcher = fetcher
        self.api_url = api_url.rstrip("/")
        self.reconciler = OrderStatusReconciler(
            contract_caller,
            chain_id,
            verifying_contracts=verifying_contracts,
            deployed_blocks=deployed_blocks,
            clock=clock,
        )
        self._get_base_fetch_url = construct_base_fetch_url_getter(self.api_url, chain_id)

    async def get_raw_limit_orders(
        self,
        user_params: Union[LimitOrdersUserParams, Mapping[str, str]],
        signal: Optional[asyncio.Event] = None,
    ) -> List[RawLimitOrder]:
        """Orders exactly as the API returns them, no on-chain calls."""
        params = LimitOrdersUserParams.model_validate(user_params)
        url = f"{self._get_base_fetch_url(params.order_type)}/{params.url_part}"
        body = await self.fetcher.fetch(url, "GET", signal=signal)
        return list(LimitOrdersApiResponse.model_validate(body).orders)

    async def get_limit_order_by_hash(
        self, order_hash: str, signal: Optional[asyncio.Event] = None
    ) -> RawLimitOrder:
        url = f"{self.api_url}/limit/order/{self.chain_id}/{order_hash}"
        body = await self.fetcher.fetch(url, "GET", signal=signal)
        return RawLimitOrder.model_validate(body)

    async def get_limit_orders_status_and_amount_filled(
        self,
        orders: Sequence[OrderRef],
        overrides: Optional[StaticCallOverrides] = None,
    ) -> List[LimitOrderExtra]:
        return await self.reconciler.get_orders_status_and_amount_filled(orders, overrides)

    async def get_limit_order_status_and_amount_filled(
        self,
        order: OrderRef,
        overrides: Optional[StaticCallOverrides] = None,
    ) -> LimitOrderExtra:
        return await self.reconciler.get_order_status_and_amount_filled(order, overrides)

    async def get_limit_orders(
        self,
        user_params: Union[LimitOrdersUserParams, Mapping[str, str]],
        signal: Optional[asyncio.Event] = None,
    ) -> LimitOrdersResult:
        """
        Orders for a maker or taker, enriched with their on-chain status.

        API errors propagate. Any failure of the on-chain part (no contract on
        this chain, RPC errors, inconsistent on-chain data) turns into
        UnknownStatusOrders carrying every order with status "unknown".
        """
        orders = await self.get_raw_limit_orders(user_params, signal)

        try:
            extras = await self.reconciler.get_orders_status_and_amount_filled(orders)
            if len(extras) != len(orders):
                raise ReconciliationInvariantError(
                    f"Got {len(extras)} statuses for {len(orders)} orders"
                )
            return ReconciledOrders(
                orders=tuple(LimitOrder.from_parts(order, extra) for order, extra in zip(orders, extras))
            )
        except Exception as e:
            logger.warning("Error fetching Orders status onchain: %s", e, exc_info=True)
            return UnknownStatusOrders(
                orders=tuple(UnknownLimitOrder.from_raw(order) for order in orders),
                reason=str(e),
            )


__all__ = [
    "ORDER_FILLED_TOPIC",
    "ORDER_CANCELLED_TOPIC",
    "index_events_by_order_hash",
    "sum_filled_amount",
    "resolve_order_status",
    "OrderStatusReconciler",
    "LimitOrdersClient",
]
