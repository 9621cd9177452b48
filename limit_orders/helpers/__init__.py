"""Transports and small utilities shared by the limit order methods."""

from .contract_caller import (
    AsyncWeb3ContractCaller,
    ContractCaller,
    Web3ContractCaller,
    construct_contract_caller,
    decode_log,
    decode_logs,
)
from .fetcher import Fetcher, RequestsFetcher
from .misc import construct_base_fetch_url_getter, find_event_abi, gather_objects_by_prop

__all__ = [
    "AsyncWeb3ContractCaller",
    "ContractCaller",
    "Web3ContractCaller",
    "construct_contract_caller",
    "decode_log",
    "decode_logs",
    "Fetcher",
    "RequestsFetcher",
    "construct_base_fetch_url_getter",
    "find_event_abi",
    "gather_objects_by_prop",
]
