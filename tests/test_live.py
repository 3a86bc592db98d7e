import os

import pytest

from erc20_slot_finder import Config, mapping_slot

_RPC_URL = os.getenv("RPC_URL")

WETH = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"
HOLDER = "0x2f0b23f53734252bda2277357e97e1517d6b042a"


@pytest.mark.skipif(
    _RPC_URL is None,
    reason="Mainnet node with debug_traceCall required. Please set `RPC_URL` env variable.",
)
def test_weth_balance_slot():
    resolver = Config.from_env(dotenv=False).resolver()

    result = resolver.resolve(WETH, HOLDER)

    # WETH9: balanceOf is the fourth state variable
    assert result.address == WETH
    assert result.mapping_slot == 3
    assert result.slot == mapping_slot(HOLDER, 3)
