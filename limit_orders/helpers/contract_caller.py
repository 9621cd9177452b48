"""
On-chain transport.

ContractCaller is the capability the limit order methods depend on. Two
interchangeable backends implement it:
- Web3ContractCaller: synchronous web3.Web3, blocking calls run in the executor
- AsyncWeb3ContractCaller: native web3.AsyncWeb3

Logs are decoded with web3's contract event API against the ABI handed in
by the caller, so both backends return the same OrderLog records.
"""

import asyncio
import functools
import logging
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple, Union

from eth_utils import encode_hex, event_abi_to_log_topic
from web3 import AsyncHTTPProvider, AsyncWeb3, HTTPProvider, Web3
from web3.middleware import ExtraDataToPOAMiddleware

from ..chains import POA_CHAINS
from ..errors import ContractCallError
from ..models import OrderLog, StaticCallOverrides

logger = logging.getLogger(__name__)

Abi = Sequence[Mapping[str, Any]]


class ContractCaller(Protocol):
    async def static_call(
        self,
        address: str,
        abi: Abi,
        method: str,
        args: Sequence[Any],
        overrides: Optional[StaticCallOverrides] = None,
    ) -> Any:
        ...

    async def get_logs_call(self, address: str, abi: Abi, filter: Mapping[str, Any]) -> List[OrderLog]:
        ...

    async def transact_call(
        self,
        address: str,
        abi: Abi,
        method: str,
        args: Sequence[Any],
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> str:
        ...


# -----------------------------------------------------------------------------
# Shared helpers
# -----------------------------------------------------------------------------

def _to_bytes(value: Union[str, bytes]) -> bytes:
    if isinstance(value, str):
        return bytes.fromhex(value[2:] if value.startswith("0x") else value)
    return bytes(value)


def _to_hex(value: Union[str, bytes]) -> str:
    if isinstance(value, str):
        return value if value.startswith("0x") else "0x" + value
    return "0x" + bytes(value).hex()


def _split_overrides(
    overrides: Optional[StaticCallOverrides],
) -> Tuple[Optional[Dict[str, Any]], Any]:
    """Split overrides into (transaction params, block identifier)."""
    params = dict(overrides or {})
    block = params.pop("block", params.pop("blockTag", "latest"))
    return (params or None), block


def _filter_params(filter: Mapping[str, Any]) -> Dict[str, Any]:
    params: Dict[str, Any] = {
        "address": Web3.to_checksum_address(filter["address"]),
        "topics": filter.get("topics", []),
        "fromBlock": filter.get("fromBlock", 0),
        "toBlock": filter.get("toBlock", "latest"),
    }
    return params


def _events_by_topic(abi: Abi) -> Dict[str, str]:
    return {
        encode_hex(event_abi_to_log_topic(e)): e["name"] for e in abi if e.get("type") == "event"
    }


def _normalize(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return _to_hex(value)
    return value


def decode_log(
    contract: Any,
    raw_log: Mapping[str, Any],
    events_by_topic: Optional[Mapping[str, str]] = None,
) -> Optional[OrderLog]:
    """
    Decode one raw log entry with the events of a web3 contract.

    Returns None for logs whose topic0 matches no event in the contract ABI.
    """
    if events_by_topic is None:
        events_by_topic = _events_by_topic(contract.abi)

    topics = [_to_bytes(t) for t in raw_log["topics"]]
    if not topics:
        return None
    topic0 = _to_hex(topics[0]).lower()
    event_name = events_by_topic.get(topic0)
    if event_name is None:
        logger.debug("Skipping log with unknown topic %s", topic0)
        return None

    try:
        event = getattr(contract.events, event_name)().process_log({**raw_log, "topics": topics})
    except Exception as e:
        raise ContractCallError(
            f"Cannot decode {event_name} log: {e}", address=raw_log.get("address", ""), method=event_name
        ) from e

    return OrderLog(
        event=event["event"],
        topic=topic0,
        args={k: _normalize(v) for k, v in event["args"].items()},
        transaction_hash=_to_hex(event["transactionHash"]),
        block_number=event.get("blockNumber"),
        log_index=event.get("logIndex"),
    )


def decode_logs(contract: Any, raw_logs: Sequence[Mapping[str, Any]]) -> List[OrderLog]:
    events_by_topic = _events_by_topic(contract.abi)
    decoded = (decode_log(contract, raw, events_by_topic) for raw in raw_logs)
    return [log for log in decoded if log is not None]


# -----------------------------------------------------------------------------
# Backends
# -----------------------------------------------------------------------------

class Web3ContractCaller:
    """ContractCaller over a synchronous Web3 instance."""

    def __init__(self, web3: Web3, account: Optional[str] = None) -> None:
        self.web3 = web3
        self.account = account

    def _contract(self, address: str, abi: Abi):
        return self.web3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)

    async def _run(self, fn, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(fn, *args))

    def _static_call_sync(self, address, abi, method, args, overrides):
        tx_params, block = _split_overrides(overrides)
        contract = self._contract(address, abi)
        try:
            return getattr(contract.functions, method)(*args).call(tx_params, block)
        except Exception as e:
            raise ContractCallError(
                f"{method} call failed: {e}", address=address, method=method
            ) from e

    def _get_logs_sync(self, address, abi, filter):
        params = _filter_params(filter)
        try:
            raw_logs = self.web3.eth.get_logs(params)
        except Exception as e:
            raise ContractCallError(f"Log query failed: {e}", address=address, method="getLogs") from e
        return decode_logs(self._contract(address, abi), raw_logs)

    def _transact_sync(self, address, abi, method, args, overrides):
        tx = {**({"from": self.account} if self.account else {}), **(overrides or {})}
        contract = self._contract(address, abi)
        try:
            tx_hash = getattr(contract.functions, method)(*args).transact(tx)
        except Exception as e:
            raise ContractCallError(
                f"{method} transaction failed: {e}", address=address, method=method
            ) from e
        return _to_hex(tx_hash)

    async def static_call(self, address, abi, method, args, overrides=None):
        return await self._run(self._static_call_sync, address, abi, method, args, overrides)

    async def get_logs_call(self, address, abi, filter):
        return await self._run(self._get_logs_sync, address, abi, filter)

    async def transact_call(self, address, abi, method, args, overrides=None):
        return await self._run(self._transact_sync, address, abi, method, args, overrides)


class AsyncWeb3ContractCaller:
    """ContractCaller over AsyncWeb3, no executor involved."""

    def __init__(self, web3: AsyncWeb3, account: Optional[str] = None) -> None:
        self.web3 = web3
        self.account = account

    def _contract(self, address: str, abi: Abi):
        return self.web3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)

    async def static_call(self, address, abi, method, args, overrides=None):
        tx_params, block = _split_overrides(overrides)
        contract = self._contract(address, abi)
        try:
            return await getattr(contract.functions, method)(*args).call(tx_params, block)
        except Exception as e:
            raise ContractCallError(
                f"{method} call failed: {e}", address=address, method=method
            ) from e

    async def get_logs_call(self, address, abi, filter):
        params = _filter_params(filter)
        try:
            raw_logs = await self.web3.eth.get_logs(params)
        except Exception as e:
            raise ContractCallError(f"Log query failed: {e}", address=address, method="getLogs") from e
        return decode_logs(self._contract(address, abi), raw_logs)

    async def transact_call(self, address, abi, method, args, overrides=None):
        tx = {**({"from": self.account} if self.account else {}), **(overrides or {})}
        contract = self._contract(address, abi)
        try:
            tx_hash = await getattr(contract.functions, method)(*args).transact(tx)
        except Exception as e:
            raise ContractCallError(
                f"{method} transaction failed: {e}", address=address, method=method
            ) from e
        return _to_hex(tx_hash)


def construct_contract_caller(
    rpc_url: str,
    chain_id: Optional[int] = None,
    account: Optional[str] = None,
    use_async: bool = False,
) -> Union[Web3ContractCaller, AsyncWeb3ContractCaller]:
    """Connect to `rpc_url` and wrap the connection in a ContractCaller."""
    if use_async:
        web3 = AsyncWeb3(AsyncHTTPProvider(rpc_url))
    else:
        web3 = Web3(HTTPProvider(rpc_url))

    if chain_id in POA_CHAINS:
        web3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)

    if use_async:
        return AsyncWeb3ContractCaller(web3, account)
    return Web3ContractCaller(web3, account)
