"""
Contract execution against a state snapshot

RpcExecutor runs a call twice on the node: eth_call (with the snapshot's state
override) for the return data, and debug_traceCall with prestateTracer for
the storage cells the call read or wrote.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import requests
from eth_utils import to_bytes, to_checksum_address
from web3 import Web3
from web3.exceptions import Web3Exception

from .models import CallOutcome, ExecutionResult, TouchedState
from .state import RpcSnapshot, StateSnapshot

logger = logging.getLogger(__name__)

DEFAULT_GAS_LIMIT = 30_000_000


class Executor(ABC):

    @abstractmethod
    def call(self, caller: str, target: str, calldata: bytes,
             snapshot: StateSnapshot) -> ExecutionResult:
        """Run the call to completion and report output and touched storage"""


def _classify_error(error) -> CallOutcome:
    message = str(error.get('message', '')) if isinstance(error, dict) else str(error)
    code = error.get('code') if isinstance(error, dict) else None
    if code == 3 or 'revert' in message.lower():
        return CallOutcome.REVERTED
    return CallOutcome.FAILED


class RpcExecutor(Executor):
    """
    Executor over JSON-RPC.

    Args:
        w3: Connected Web3 instance (its HTTP timeout bounds each request)
        gas_limit: Gas ceiling for every call
    """

    def __init__(self, w3: Web3, gas_limit: int = DEFAULT_GAS_LIMIT):
        self.w3 = w3
        self.gas_limit = gas_limit

    def _request(self, method: str, params: list) -> dict:
        try:
            response = self.w3.provider.make_request(method, params)
        except (requests.RequestException, Web3Exception, ValueError) as e:
            return {'error': {'message': f"{type(e).__name__}: {e}"}}
        if not isinstance(response, dict):
            return {'error': {'message': f"Unexpected response type {type(response)}"}}
        return response

    def _transaction(self, caller: str, target: str, calldata: bytes) -> dict:
        return {
            'from': caller,
            'to': target,
            'data': '0x' + calldata.hex(),
            'gas': hex(self.gas_limit),
        }

    def call(self, caller: str, target: str, calldata: bytes,
             snapshot: RpcSnapshot) -> ExecutionResult:
        tx = self._transaction(caller, target, calldata)
        overrides = snapshot.state_override()

        params = [tx, snapshot.block_identifier]
        if overrides:
            params.append(overrides)
        response = self._request('eth_call', params)

        if 'error' in response:
            outcome = _classify_error(response['error'])
            logger.debug(f"eth_call {target} {outcome.value}: {response['error']}")
            output = b''
        else:
            outcome = CallOutcome.SUCCESS
            output = to_bytes(hexstr=response.get('result') or '0x')

        touched = self.trace_storage(tx, snapshot)
        return ExecutionResult(outcome, output, touched)

    def trace_storage(self, tx: dict, snapshot: RpcSnapshot) -> TouchedState:
        """Collect every storage cell accessed by the call, per contract"""
        tracer_config = {'tracer': 'prestateTracer'}
        overrides = snapshot.state_override()
        if overrides:
            tracer_config['stateOverrides'] = overrides

        response = self._request('debug_traceCall', [tx, snapshot.block_identifier, tracer_config])
        if 'error' in response:
            logger.warning(f"debug_traceCall failed, no touched storage: {response['error']}")
            return {}

        prestate: Optional[dict] = response.get('result')
        if not isinstance(prestate, dict):
            logger.warning(f"debug_traceCall returned no prestate: {prestate!r}")
            return {}

        touched: TouchedState = {}
        for address, account in prestate.items():
            storage = (account or {}).get('storage') or {}
            if not storage:
                continue
            touched.setdefault(to_checksum_address(address), set()).update(
                int(slot_hex, 16) for slot_hex in storage
            )
        return touched
