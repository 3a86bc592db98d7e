"""
ERC20 balance slot resolution

Finds the storage cell that backs balanceOf(holder) for a token:

1. Cached mapping index: the slot is keccak256(abi.encode(holder, index)),
   no execution needed.
2. Otherwise run balanceOf(holder) once and collect the touched storage cells
   whose keys look hash-derived (>= 2**128).
3. A single candidate is the answer. With zero or several, override each
   candidate with a fake balance on its own snapshot, re-run balanceOf, and
   keep the candidate that produced the largest output.
4. Try to recover the mapping index from the slot so the caller can cache it.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from eth_utils import to_checksum_address

from .abi import decode_uint256, encode_balance_of
from .errors import AmbiguousSlotError
from .executor import Executor
from .models import (
    FAKE_BALANCE,
    MIN_MAPPING_KEY,
    SENTINEL_CALLER,
    Candidate,
    MappingSlotCache,
    ResolvedSlot,
    StorageLocation,
    TouchedState,
    key_to_bytes32,
)
from .state import StateProvider
from .storage import mapping_slot, recover_mapping_index

logger = logging.getLogger(__name__)


def lookup_mapping_index(cache: Optional[MappingSlotCache], token: str) -> Optional[int]:
    if not cache:
        return None
    if token in cache:
        return cache[token]
    return cache.get(token.lower())


def cached_balance_slot(token: str, holder: str,
                        cache: Optional[MappingSlotCache]) -> Optional[ResolvedSlot]:
    """Fast path: derive the slot from a known mapping index, or None on miss"""
    mapping_index = lookup_mapping_index(cache, token)
    if mapping_index is None:
        return None
    return ResolvedSlot(
        address=token,
        slot=mapping_slot(holder, mapping_index),
        mapping_slot=mapping_index,
    )


def filter_candidates(touched: TouchedState) -> List[Candidate]:
    """Keep cells whose key could be mapping-derived, in a stable order"""
    return sorted(
        StorageLocation(address, key)
        for address, keys in touched.items()
        for key in keys
        if key >= MIN_MAPPING_KEY
    )


class BalanceSlotResolver:
    """
    Resolve the balance storage slot of (token, holder) pairs.

    Args:
        state_provider: Source of latest-state snapshots
        executor: Runs balanceOf against a snapshot
        caller: Sender for every synthetic call
        max_workers: Threads used for disambiguation trials
    """

    def __init__(self, state_provider: StateProvider, executor: Executor,
                 caller: str = SENTINEL_CALLER, max_workers: int = 1):
        self.state_provider = state_provider
        self.executor = executor
        self.caller = to_checksum_address(caller)
        self.max_workers = max(1, max_workers)

    def resolve(self, token: str, holder: str,
                cache: Optional[MappingSlotCache] = None) -> ResolvedSlot:
        token = to_checksum_address(token)
        holder = to_checksum_address(holder)

        cached = cached_balance_slot(token, holder, cache)
        if cached is not None:
            return cached

        candidates = self.scan(token, holder)
        if len(candidates) == 1:
            winner = candidates[0]
        else:
            winner = self.disambiguate(token, holder, candidates)

        slot = key_to_bytes32(winner.key)
        mapping_index = recover_mapping_index(holder, slot)
        if mapping_index is None:
            logger.info(f"Resolved {token} slot {winner} for {holder}, mapping index unknown")
        else:
            logger.info(f"Resolved {token} slot {winner} for {holder}, mapping index {mapping_index}")

        return ResolvedSlot(address=winner.address, slot=slot, mapping_slot=mapping_index)

    def scan(self, token: str, holder: str) -> List[Candidate]:
        """Run balanceOf once and return the hash-like storage cells it touched"""
        snapshot = self.state_provider.latest_state()
        result = self.executor.call(self.caller, token, encode_balance_of(holder), snapshot)
        candidates = filter_candidates(result.touched)
        logger.debug(f"Scan of {token} for {holder}: {len(candidates)} candidate(s)")
        return candidates

    def trial(self, token: str, holder: str, candidate: Candidate) -> int:
        """balanceOf(holder) with only the candidate cell set to FAKE_BALANCE"""
        snapshot = self.state_provider.latest_state().override_cell(
            candidate.address, candidate.key, FAKE_BALANCE
        )
        result = self.executor.call(self.caller, token, encode_balance_of(holder), snapshot)
        balance = decode_uint256(result.output) if result.succeeded else 0
        logger.debug(f"Trial {candidate}: {result.outcome.value}, balance {balance}")
        return balance

    def disambiguate(self, token: str, holder: str,
                     candidates: List[Candidate]) -> Candidate:
        """
        Pick the candidate whose override produces the largest balanceOf.

        Raises:
            AmbiguousSlotError: No trial returned a positive balance
        """
        if self.max_workers > 1 and len(candidates) > 1:
            with ThreadPoolExecutor(max_workers=min(self.max_workers, len(candidates))) as pool:
                balances = list(pool.map(lambda c: self.trial(token, holder, c), candidates))
        else:
            balances = [self.trial(token, holder, c) for c in candidates]

        best: Optional[Candidate] = None
        best_balance = 0
        for candidate, balance in zip(candidates, balances):
            if balance > best_balance:
                best, best_balance = candidate, balance

        if best is None:
            raise AmbiguousSlotError(token, holder, candidates)
        return best
