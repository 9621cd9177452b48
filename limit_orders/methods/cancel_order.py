# methods/cancel_order.py
import logging
from typing import Any, Mapping, Optional, Sequence

from ..abis import CancelOrderABI
from ..chains import require_verifying_contract
from ..helpers.contract_caller import ContractCaller

logger = logging.getLogger(__name__)


async def cancel_limit_order(
    contract_caller: ContractCaller,
    chain_id: int,
    order_hash: str,
    overrides: Optional[Mapping[str, Any]] = None,
    verifying_contracts: Optional[Mapping[int, str]] = None,
) -> str:
    """Cancel one order on-chain, returns the transaction hash."""
    verifying_contract = require_verifying_contract(chain_id, verifying_contracts)
    tx_hash = await contract_caller.transact_call(
        verifying_contract, CancelOrderABI, "cancelOrder", [order_hash], overrides
    )
    logger.info("cancelOrder sent: order_hash=%s tx=%s", order_hash, tx_hash)
    return tx_hash


async def cancel_limit_orders(
    contract_caller: ContractCaller,
    chain_id: int,
    order_hashes: Sequence[str],
    overrides: Optional[Mapping[str, Any]] = None,
    verifying_contracts: Optional[Mapping[int, str]] = None,
) -> str:
    """Cancel several orders of the sender in one transaction."""
    verifying_contract = require_verifying_contract(chain_id, verifying_contracts)
    tx_hash = await contract_caller.transact_call(
        verifying_contract, CancelOrderABI, "cancelOrders", [list(order_hashes)], overrides
    )
    logger.info("cancelOrders sent: order_count=%d tx=%s", len(order_hashes), tx_hash)
    return tx_hash
