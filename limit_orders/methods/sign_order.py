# methods/sign_order.py
from typing import Any, Dict, Union

from eth_account import Account
from eth_account.messages import encode_typed_data
from eth_utils import keccak
from web3 import Web3

from .build_order import SignableOrderData

TypedData = Union[SignableOrderData, Dict[str, Any]]


def _full_message(typed_data: TypedData) -> Dict[str, Any]:
    if isinstance(typed_data, SignableOrderData):
        return typed_data.to_typed_data()
    return typed_data


def sign_limit_order(typed_data: TypedData, private_key: str) -> str:
    """Sign order typed data with a raw private key, returns 0x-prefixed signature."""
    signed = Account.sign_typed_data(private_key, full_message=_full_message(typed_data))
    return Web3.to_hex(signed.signature)


def compute_order_hash(typed_data: TypedData) -> str:
    """EIP-712 digest of the order, the orderHash the contract and the API use."""
    message = encode_typed_data(full_message=_full_message(typed_data))
    return Web3.to_hex(keccak(b"\x19" + message.version + message.header + message.body))


def recover_order_signer(typed_data: TypedData, signature: str) -> str:
    message = encode_typed_data(full_message=_full_message(typed_data))
    return Account.recover_message(message, signature=signature)
