# methods/build_order.py
"""
EIP-712 typed data for AugustusRFQ orders.

nonceAndMeta packs the nonce above the lowest 160 bits, which hold the
taker address (zero for orders anyone can fill).
"""

import secrets
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel
from web3 import Web3

from ..chains import require_verifying_contract
from ..enums import ZERO_ADDRESS
from ..models import to_amount_string

DOMAIN_NAME = "AUGUSTUS RFQ"
DOMAIN_VERSION = "1"

EIP712_DOMAIN_TYPE: List[Dict[str, str]] = [
    {"name": "name", "type": "string"},
    {"name": "version", "type": "string"},
    {"name": "chainId", "type": "uint256"},
    {"name": "verifyingContract", "type": "address"},
]

ORDER_EIP_712_TYPES: Dict[str, List[Dict[str, str]]] = {
    "Order": [
        {"name": "nonceAndMeta", "type": "uint256"},
        {"name": "expiry", "type": "uint128"},
        {"name": "makerAsset", "type": "address"},
        {"name": "takerAsset", "type": "address"},
        {"name": "maker", "type": "address"},
        {"name": "taker", "type": "address"},
        {"name": "makerAmount", "type": "uint256"},
        {"name": "takerAmount", "type": "uint256"},
    ]
}


class OrderData(BaseModel):
    """Order struct as signed by the maker and passed to the contract."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    nonce_and_meta: str
    expiry: int
    maker_asset: str
    taker_asset: str
    maker: str
    taker: str
    maker_amount: str
    taker_amount: str

    @field_validator("nonce_and_meta", "maker_amount", "taker_amount", mode="before")
    @classmethod
    def _amounts(cls, value: Any) -> str:
        return to_amount_string(value)

    def to_message(self) -> Dict[str, Any]:
        return {
            "nonceAndMeta": int(self.nonce_and_meta),
            "expiry": self.expiry,
            "makerAsset": self.maker_asset,
            "takerAsset": self.taker_asset,
            "maker": self.maker,
            "taker": self.taker,
            "makerAmount": int(self.maker_amount),
            "takerAmount": int(self.taker_amount),
        }


class SignableOrderData(BaseModel):
    model_config = ConfigDict(frozen=True)

    domain: Dict[str, Any]
    types: Dict[str, List[Dict[str, str]]]
    data: OrderData

    def to_typed_data(self) -> Dict[str, Any]:
        """Full EIP-712 message, as accepted by eth_account."""
        return {
            "types": {"EIP712Domain": EIP712_DOMAIN_TYPE, **self.types},
            "primaryType": "Order",
            "domain": dict(self.domain),
            "message": self.data.to_message(),
        }


def pack_nonce_and_meta(nonce: int, taker: str = ZERO_ADDRESS) -> str:
    return str((nonce << 160) + int(taker, 16))


def build_limit_order(
    chain_id: int,
    *,
    maker: str,
    maker_asset: str,
    taker_asset: str,
    maker_amount: Union[int, str],
    taker_amount: Union[int, str],
    expiry: int = 0,
    nonce: Optional[int] = None,
    taker: str = ZERO_ADDRESS,
    verifying_contracts: Optional[Mapping[int, str]] = None,
) -> SignableOrderData:
    """
    Build the typed data a maker signs to create a limit order.

    A random 64-bit nonce is used when none is given.
    """
    verifying_contract = require_verifying_contract(chain_id, verifying_contracts)
    if nonce is None:
        nonce = secrets.randbits(64)

    data = OrderData(
        nonce_and_meta=pack_nonce_and_meta(nonce, taker),
        expiry=expiry,
        maker_asset=Web3.to_checksum_address(maker_asset),
        taker_asset=Web3.to_checksum_address(taker_asset),
        maker=Web3.to_checksum_address(maker),
        taker=Web3.to_checksum_address(taker),
        maker_amount=maker_amount,
        taker_amount=taker_amount,
    )
    domain = {
        "name": DOMAIN_NAME,
        "version": DOMAIN_VERSION,
        "chainId": chain_id,
        "verifyingContract": Web3.to_checksum_address(verifying_contract),
    }
    return SignableOrderData(domain=domain, types=ORDER_EIP_712_TYPES, data=data)
