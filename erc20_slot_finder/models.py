"""
Data types shared by the slot finder: storage locations, execution results
and the resolved balance slot.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Set

# Sentinel value written into candidate cells during disambiguation.
# Assumed larger than any real balance under test, small enough to survive
# uint256 arithmetic inside balanceOf.
FAKE_BALANCE = 2**96 - 1

# keccak-derived keys are overwhelmingly likely to be above this
MIN_MAPPING_KEY = 1 << 128

MAPPING_INDEX_SEARCH_LIMIT = 20

# Non-zero caller used for every synthetic balanceOf call
SENTINEL_CALLER = "0x0000000000000000000000000000000000000001"

TouchedState = Dict[str, Set[int]]
MappingSlotCache = Dict[str, int]


def key_to_bytes32(key: int) -> bytes:
    """Render a storage key as 32 bytes, big-endian"""
    return key.to_bytes(32, byteorder='big')


def key_to_hex(key: int) -> str:
    return '0x' + key_to_bytes32(key).hex()


@dataclass(frozen=True, order=True)
class StorageLocation:
    """One storage cell: (contract address, storage key)"""
    address: str
    key: int

    def __str__(self) -> str:
        return f"{self.address}:{key_to_hex(self.key)}"


Candidate = StorageLocation


class CallOutcome(Enum):
    SUCCESS = "success"
    REVERTED = "reverted"
    FAILED = "failed"


@dataclass
class ExecutionResult:
    """Result of one contract call: outcome, return data and touched storage"""
    outcome: CallOutcome
    output: bytes = b''
    touched: TouchedState = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.outcome is CallOutcome.SUCCESS


@dataclass(frozen=True)
class ResolvedSlot:
    """
    Storage cell holding a holder's token balance.

    Attributes:
        address: contract owning the cell (the token, or the storage contract
            it forwards to)
        slot: 32-byte big-endian storage key
        mapping_slot: declaration index of the balances mapping, if known
    """
    address: str
    slot: bytes
    mapping_slot: Optional[int] = None

    @property
    def key(self) -> int:
        return int.from_bytes(self.slot, byteorder='big')

    @property
    def location(self) -> StorageLocation:
        return StorageLocation(self.address, self.key)

    def to_dict(self) -> dict:
        return {
            'address': self.address,
            'slot': '0x' + self.slot.hex(),
            'mapping_slot': self.mapping_slot,
        }

    def state_override(self, balance: int) -> dict:
        """
        Build an eth_call state override that sets the holder's balance.

        Returns:
            {address: {"stateDiff": {slot: value}}} with 32-byte hex strings
        """
        if balance < 0 or balance >= 2**256:
            raise ValueError("balance must fit in uint256")
        return {
            self.address: {
                'stateDiff': {'0x' + self.slot.hex(): key_to_hex(balance)}
            }
        }
