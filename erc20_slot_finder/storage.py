"""
Solidity mapping storage slots

For a mapping declared at storage index N:
  storage_slot = keccak256(abi.encode(key, N))

Where:
  - key is the mapping key (an address, left-padded to 32 bytes)
  - N is the declaration index (uint256, 32 bytes big-endian)
"""

from typing import Optional

from eth_abi import encode
from eth_utils import keccak

from .models import MAPPING_INDEX_SEARCH_LIMIT


def mapping_slot(holder: str, mapping_index: int) -> bytes:
    """
    Calculate the storage slot of holder's entry in a mapping(address => ...).

    Args:
        holder: The mapping key address
        mapping_index: Declaration index of the mapping

    Returns:
        The 32-byte storage slot
    """
    data = encode(['address', 'uint256'], [holder, mapping_index])
    return keccak(data)


def recover_mapping_index(holder: str, slot: bytes,
                          limit: int = MAPPING_INDEX_SEARCH_LIMIT) -> Optional[int]:
    """Find the declaration index in [0, limit) that produces slot, or None"""
    for i in range(limit):
        if mapping_slot(holder, i) == slot:
            return i
    return None
