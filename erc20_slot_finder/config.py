"""
Configuration from environment / .env

  RPC_URL                 node with eth_call state overrides and debug_traceCall
  SLOT_FINDER_BLOCK       pin snapshots to this block (default: follow latest)
  SLOT_FINDER_TIMEOUT     HTTP request timeout in seconds
  SLOT_FINDER_GAS_LIMIT   gas ceiling for each balanceOf call
  SLOT_FINDER_WORKERS     threads for disambiguation trials
  SLOT_FINDER_CALLER      sentinel caller address
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv
from eth_utils import to_checksum_address
from web3 import Web3

from .executor import DEFAULT_GAS_LIMIT, RpcExecutor
from .models import MappingSlotCache, ResolvedSlot, SENTINEL_CALLER
from .resolver import BalanceSlotResolver
from .state import RpcSnapshot, RpcStateProvider


@dataclass
class Config:
    rpc_url: str = "http://localhost:8545"
    block: Optional[int] = None
    request_timeout: float = 30
    gas_limit: int = DEFAULT_GAS_LIMIT
    max_workers: int = 1
    caller: str = SENTINEL_CALLER

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Config":
        if dotenv:
            load_dotenv()
        block = os.getenv("SLOT_FINDER_BLOCK")
        return cls(
            rpc_url=os.getenv("RPC_URL", cls.rpc_url),
            block=int(block, 0) if block else None,
            request_timeout=float(os.getenv("SLOT_FINDER_TIMEOUT", cls.request_timeout)),
            gas_limit=int(os.getenv("SLOT_FINDER_GAS_LIMIT", cls.gas_limit)),
            max_workers=int(os.getenv("SLOT_FINDER_WORKERS", cls.max_workers)),
            caller=to_checksum_address(os.getenv("SLOT_FINDER_CALLER", cls.caller)),
        )

    def connect(self) -> Web3:
        return Web3(Web3.HTTPProvider(self.rpc_url, request_kwargs={"timeout": self.request_timeout}))

    def state_provider(self, w3: Optional[Web3] = None) -> RpcStateProvider:
        return RpcStateProvider(w3 or self.connect(), block=self.block)

    def get_latest_state(self) -> RpcSnapshot:
        return self.state_provider().latest_state()

    def resolver(self) -> BalanceSlotResolver:
        w3 = self.connect()
        return BalanceSlotResolver(
            self.state_provider(w3),
            RpcExecutor(w3, gas_limit=self.gas_limit),
            caller=self.caller,
            max_workers=self.max_workers,
        )


def get_erc20_balance_slot(config: Config, token: str, holder: str,
                           cache: Optional[MappingSlotCache] = None) -> ResolvedSlot:
    """One-shot resolution with a resolver built from config"""
    return config.resolver().resolve(token, holder, cache)
