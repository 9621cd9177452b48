"""
Per-chain registry of the AugustusRFQ settlement contract.

Entries can be overridden (or added) through Settings.verifying_contracts
and Settings.contract_deployed_blocks.
"""

from typing import Dict, Mapping, Optional

from .errors import ContractNotAvailableError

CHAIN_ID_MAINNET = 1
CHAIN_ID_ROPSTEN = 3
CHAIN_ID_BSC = 56
CHAIN_ID_POLYGON = 137

chain_id_to_verifying_contract: Dict[int, str] = {
    CHAIN_ID_MAINNET: "0xe92b586627ccA7a83dC919cc7127196d70f55a06",
    CHAIN_ID_ROPSTEN: "0x34268C38fcbC798814b058656bC0156C7511c0E4",
    CHAIN_ID_BSC: "0x8DcDfe88EF0351f27437284D0710cD65b64F1eAD",
    CHAIN_ID_POLYGON: "0xF3CD476C3C4D3Ac5cA2724767f269070CA09A043",
}

# Unknown deployment block means log queries start from genesis
chain_id_to_deployed_block: Dict[int, int] = {}

# Chains whose blocks carry extra data that web3 must be told about
POA_CHAINS = frozenset({CHAIN_ID_BSC, CHAIN_ID_POLYGON})


def get_verifying_contract(
    chain_id: int, overrides: Optional[Mapping[int, str]] = None
) -> Optional[str]:
    if overrides and chain_id in overrides:
        return overrides[chain_id]
    return chain_id_to_verifying_contract.get(chain_id)


def require_verifying_contract(
    chain_id: int, overrides: Optional[Mapping[int, str]] = None
) -> str:
    address = get_verifying_contract(chain_id, overrides)
    if not address:
        raise ContractNotAvailableError(chain_id)
    return address


def get_deployed_block(chain_id: int, overrides: Optional[Mapping[int, int]] = None) -> int:
    if overrides and chain_id in overrides:
        return overrides[chain_id]
    return chain_id_to_deployed_block.get(chain_id, 0)
