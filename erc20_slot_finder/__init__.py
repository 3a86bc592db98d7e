"""
Locate the storage slot holding an ERC20 holder's balance.

Example:
    from erc20_slot_finder import Config, get_erc20_balance_slot

    slot = get_erc20_balance_slot(Config.from_env(), token, holder)
    overrides = slot.state_override(10**24)
"""

from .cache import load_mapping_cache, save_mapping_cache
from .config import Config, get_erc20_balance_slot
from .errors import AmbiguousSlotError, SlotFinderError, StateUnavailableError
from .executor import Executor, RpcExecutor
from .models import (
    FAKE_BALANCE,
    SENTINEL_CALLER,
    CallOutcome,
    Candidate,
    ExecutionResult,
    MappingSlotCache,
    ResolvedSlot,
    StorageLocation,
)
from .resolver import BalanceSlotResolver
from .state import RpcSnapshot, RpcStateProvider, StateProvider, StateSnapshot
from .storage import mapping_slot, recover_mapping_index

__all__ = [
    "AmbiguousSlotError",
    "BalanceSlotResolver",
    "CallOutcome",
    "Candidate",
    "Config",
    "ExecutionResult",
    "Executor",
    "FAKE_BALANCE",
    "MappingSlotCache",
    "ResolvedSlot",
    "RpcExecutor",
    "RpcSnapshot",
    "RpcStateProvider",
    "SENTINEL_CALLER",
    "SlotFinderError",
    "StateProvider",
    "StateSnapshot",
    "StateUnavailableError",
    "StorageLocation",
    "get_erc20_balance_slot",
    "load_mapping_cache",
    "mapping_slot",
    "recover_mapping_index",
    "save_mapping_cache",
]
