"""
Chain-state snapshots

A StateProvider hands out read-only snapshots of chain state; a snapshot can
derive a copy with one storage cell overridden, leaving itself untouched.
The JSON-RPC implementation pins a block number and carries the overrides as
an eth_call state-override object.
"""

import logging
from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Dict, Mapping, Optional

import requests
from eth_utils import to_checksum_address
from web3 import Web3
from web3.exceptions import Web3Exception

from .errors import StateUnavailableError
from .models import key_to_hex

logger = logging.getLogger(__name__)


class StateSnapshot(ABC):

    @abstractmethod
    def override_cell(self, address: str, key: int, value: int) -> "StateSnapshot":
        """Return a new snapshot with storage[address][key] = value"""


class StateProvider(ABC):

    @abstractmethod
    def latest_state(self) -> StateSnapshot:
        """Return an unmodified snapshot of the latest state"""


class RpcSnapshot(StateSnapshot):
    """Block number plus storage overrides, rendered for eth_call/debug_traceCall"""

    def __init__(self, block_number: int,
                 overrides: Optional[Mapping[str, Mapping[int, int]]] = None):
        self.block_number = block_number
        self._overrides = MappingProxyType({
            address: MappingProxyType(dict(cells))
            for address, cells in (overrides or {}).items()
        })

    @property
    def overrides(self) -> Mapping[str, Mapping[int, int]]:
        return self._overrides

    @property
    def block_identifier(self) -> str:
        return hex(self.block_number)

    def override_cell(self, address: str, key: int, value: int) -> "RpcSnapshot":
        address = to_checksum_address(address)
        overrides: Dict[str, Dict[int, int]] = {
            addr: dict(cells) for addr, cells in self._overrides.items()
        }
        overrides.setdefault(address, {})[key] = value
        return RpcSnapshot(self.block_number, overrides)

    def state_override(self) -> dict:
        """Render overrides as {address: {"stateDiff": {key: value}}}"""
        return {
            address: {
                'stateDiff': {key_to_hex(key): key_to_hex(value) for key, value in cells.items()}
            }
            for address, cells in self._overrides.items()
        }

    def __repr__(self) -> str:
        return f"RpcSnapshot(block={self.block_number}, overrides={len(self._overrides)})"


class RpcStateProvider(StateProvider):
    """
    Snapshots backed by a JSON-RPC node.

    Args:
        w3: Connected Web3 instance
        block: Pin every snapshot to this block; None follows the chain head
    """

    def __init__(self, w3: Web3, block: Optional[int] = None):
        self.w3 = w3
        self.block = block

    def latest_state(self) -> RpcSnapshot:
        if self.block is not None:
            return RpcSnapshot(self.block)
        try:
            block_number = self.w3.eth.block_number
        except (requests.RequestException, Web3Exception, ValueError) as e:
            raise StateUnavailableError(f"Failed to fetch latest block: {e}") from e
        logger.debug(f"Latest state at block {block_number}")
        return RpcSnapshot(block_number)
