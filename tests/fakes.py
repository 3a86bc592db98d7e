"""In-memory state provider and executor simulating a simple ERC20"""

import threading
from typing import Dict, Iterable, Optional, Set, Tuple

from eth_abi import encode

from erc20_slot_finder.executor import Executor
from erc20_slot_finder.models import CallOutcome, ExecutionResult
from erc20_slot_finder.state import StateProvider, StateSnapshot

Cell = Tuple[str, int]


class FakeSnapshot(StateSnapshot):

    def __init__(self, overrides: Optional[Dict[Cell, int]] = None):
        self.overrides = dict(overrides or {})

    def override_cell(self, address, key, value):
        overrides = dict(self.overrides)
        overrides[(address, key)] = value
        return FakeSnapshot(overrides)


class FakeStateProvider(StateProvider):

    def __init__(self):
        self.calls = 0

    def latest_state(self):
        self.calls += 1
        return FakeSnapshot()


class FakeExecutor(Executor):
    """
    balanceOf reads balance_cell (or returns `balance` when it's not
    overridden) and reports `touched` as accessed storage. Overriding a cell
    in revert_cells makes the call revert.
    """

    def __init__(self, touched: Dict[str, Set[int]], balance_cell: Optional[Cell] = None,
                 balance: int = 0, revert_cells: Iterable[Cell] = ()):
        self.touched = touched
        self.balance_cell = balance_cell
        self.balance = balance
        self.revert_cells = set(revert_cells)
        self.calls = []
        self._lock = threading.Lock()

    @property
    def trials(self):
        return [call for call in self.calls if call[3].overrides]

    def call(self, caller, target, calldata, snapshot):
        with self._lock:
            self.calls.append((caller, target, calldata, snapshot))

        touched = {address: set(keys) for address, keys in self.touched.items()}
        if self.revert_cells & set(snapshot.overrides):
            return ExecutionResult(CallOutcome.REVERTED, b'', touched)

        value = snapshot.overrides.get(self.balance_cell, self.balance)
        return ExecutionResult(CallOutcome.SUCCESS, encode(['uint256'], [value]), touched)
