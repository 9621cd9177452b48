"""
Limit order methods, bundled around one fetcher and one contract caller.

Each module can be used on its own; LimitOrderHandlers only binds the chain,
the transports and the registry overrides once.
"""

import asyncio
from typing import Any, Mapping, Optional, Sequence, Union

from ..enums import DEFAULT_API_URL, ORDER_TYPE_LIMIT, ZERO_ADDRESS
from ..helpers.contract_caller import ContractCaller
from ..helpers.fetcher import Fetcher
from ..models import RawLimitOrder
from .build_order import OrderData, SignableOrderData, build_limit_order
from .cancel_order import cancel_limit_order, cancel_limit_orders
from .fill_order import AnyOrder, fill_limit_order, partial_fill_limit_order
from .get_orders import LimitOrdersClient, OrderStatusReconciler, resolve_order_status
from .post_order import LimitOrderToSend, post_limit_order
from .sign_order import compute_order_hash, recover_order_signer, sign_limit_order


class LimitOrderHandlers(LimitOrdersClient):
    """Every limit order operation for one chain."""

    def __init__(
        self,
        chain_id: int,
        fetcher: Fetcher,
        contract_caller: ContractCaller,
        api_url: str = DEFAULT_API_URL,
        *,
        private_key: Optional[str] = None,
        verifying_contracts: Optional[Mapping[int, str]] = None,
        deployed_blocks: Optional[Mapping[int, int]] = None,
    ) -> None:
        super().__init__(
            chain_id,
            fetcher,
            contract_caller,
            api_url,
            verifying_contracts=verifying_contracts,
            deployed_blocks=deployed_blocks,
        )
        self.contract_caller = contract_caller
        self.private_key = private_key
        self.verifying_contracts = verifying_contracts

    def build_limit_order(
        self,
        *,
        maker: str,
        maker_asset: str,
        taker_asset: str,
        maker_amount: Union[int, str],
        taker_amount: Union[int, str],
        expiry: int = 0,
        nonce: Optional[int] = None,
        taker: str = ZERO_ADDRESS,
    ) -> SignableOrderData:
        return build_limit_order(
            self.chain_id,
            maker=maker,
            maker_asset=maker_asset,
            taker_asset=taker_asset,
            maker_amount=maker_amount,
            taker_amount=taker_amount,
            expiry=expiry,
            nonce=nonce,
            taker=taker,
            verifying_contracts=self.verifying_contracts,
        )

    def sign_limit_order(self, typed_data: SignableOrderData, private_key: Optional[str] = None) -> str:
        key = private_key or self.private_key
        if not key:
            raise ValueError("A private key is required to sign orders (PK is not set)")
        return sign_limit_order(typed_data, key)

    async def submit_limit_order(
        self,
        typed_data: SignableOrderData,
        order_type: str = ORDER_TYPE_LIMIT,
        signal: Optional[asyncio.Event] = None,
    ) -> RawLimitOrder:
        """Sign and post in one go."""
        signature = self.sign_limit_order(typed_data)
        order = LimitOrderToSend(**typed_data.data.model_dump(), signature=signature)
        return await self.post_limit_order(order, order_type, signal)

    async def post_limit_order(
        self,
        order: LimitOrderToSend,
        order_type: str = ORDER_TYPE_LIMIT,
        signal: Optional[asyncio.Event] = None,
    ) -> RawLimitOrder:
        return await post_limit_order(self.fetcher, self.api_url, self.chain_id, order, order_type, signal)

    async def cancel_limit_order(self, order_hash: str, overrides: Optional[Mapping[str, Any]] = None) -> str:
        return await cancel_limit_order(
            self.contract_caller, self.chain_id, order_hash, overrides, self.verifying_contracts
        )

    async def cancel_limit_orders(
        self, order_hashes: Sequence[str], overrides: Optional[Mapping[str, Any]] = None
    ) -> str:
        return await cancel_limit_orders(
            self.contract_caller, self.chain_id, order_hashes, overrides, self.verifying_contracts
        )

    async def fill_limit_order(
        self, order: AnyOrder, signature: str, overrides: Optional[Mapping[str, Any]] = None
    ) -> str:
        return await fill_limit_order(
            self.contract_caller, self.chain_id, order, signature, overrides, self.verifying_contracts
        )

    async def partial_fill_limit_order(
        self,
        order: AnyOrder,
        signature: str,
        taker_token_fill_amount: Union[int, str],
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> str:
        return await partial_fill_limit_order(
            self.contract_caller,
            self.chain_id,
            order,
            signature,
            taker_token_fill_amount,
            overrides,
            self.verifying_contracts,
        )


__all__ = [
    "LimitOrderHandlers",
    "LimitOrdersClient",
    "OrderStatusReconciler",
    "resolve_order_status",
    "OrderData",
    "SignableOrderData",
    "LimitOrderToSend",
    "build_limit_order",
    "sign_limit_order",
    "compute_order_hash",
    "recover_order_signer",
    "post_limit_order",
    "cancel_limit_order",
    "cancel_limit_orders",
    "fill_limit_order",
    "partial_fill_limit_order",
]
