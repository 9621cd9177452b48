# methods/fill_order.py
"""Taker side: filling orders directly on AugustusRFQ."""

import logging
from typing import Any, Mapping, Optional, Tuple, Union

from eth_utils import to_bytes
from web3 import Web3

from ..abis import FillOrderABI
from ..chains import require_verifying_contract
from ..helpers.contract_caller import ContractCaller
from ..models import RawLimitOrder
from .build_order import OrderData

logger = logging.getLogger(__name__)

AnyOrder = Union[OrderData, RawLimitOrder]


def order_struct(order: AnyOrder) -> Tuple[Any, ...]:
    """Order as the contract's Order tuple, field order matters."""
    return (
        int(order.nonce_and_meta),
        int(order.expiry),
        Web3.to_checksum_address(order.maker_asset),
        Web3.to_checksum_address(order.taker_asset),
        Web3.to_checksum_address(order.maker),
        Web3.to_checksum_address(order.taker),
        int(order.maker_amount),
        int(order.taker_amount),
    )


async def fill_limit_order(
    contract_caller: ContractCaller,
    chain_id: int,
    order: AnyOrder,
    signature: str,
    overrides: Optional[Mapping[str, Any]] = None,
    verifying_contracts: Optional[Mapping[int, str]] = None,
) -> str:
    verifying_contract = require_verifying_contract(chain_id, verifying_contracts)
    tx_hash = await contract_caller.transact_call(
        verifying_contract,
        FillOrderABI,
        "fillOrder",
        [order_struct(order), to_bytes(hexstr=signature)],
        overrides,
    )
    logger.info("fillOrder sent: maker=%s tx=%s", order.maker, tx_hash)
    return tx_hash


async def partial_fill_limit_order(
    contract_caller: ContractCaller,
    chain_id: int,
    order: AnyOrder,
    signature: str,
    taker_token_fill_amount: Union[int, str],
    overrides: Optional[Mapping[str, Any]] = None,
    verifying_contracts: Optional[Mapping[int, str]] = None,
) -> str:
    fill_amount = int(taker_token_fill_amount)
    if not 0 < fill_amount <= int(order.taker_amount):
        raise ValueError(
            f"taker_token_fill_amount must be in (0, {order.taker_amount}], got {fill_amount}"
        )

    verifying_contract = require_verifying_contract(chain_id, verifying_contracts)
    tx_hash = await contract_caller.transact_call(
        verifying_contract,
        FillOrderABI,
        "partialFillOrder",
        [order_struct(order), to_bytes(hexstr=signature), fill_amount],
        overrides,
    )
    logger.info(
        "partialFillOrder sent: maker=%s fill_amount=%s tx=%s", order.maker, fill_amount, tx_hash
    )
    return tx_hash
