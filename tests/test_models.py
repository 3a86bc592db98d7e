import json

from eth_utils import to_checksum_address

from erc20_slot_finder import (
    Config,
    ResolvedSlot,
    StorageLocation,
    load_mapping_cache,
    save_mapping_cache,
)

TOKEN = to_checksum_address("0x" + "11" * 20)
WETH = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"


def test_resolved_slot_views():
    slot = ResolvedSlot(TOKEN, (2**130).to_bytes(32, 'big'), 3)

    assert slot.key == 2**130
    assert slot.location == StorageLocation(TOKEN, 2**130)
    assert slot.to_dict() == {
        'address': TOKEN,
        'slot': '0x' + (2**130).to_bytes(32, 'big').hex(),
        'mapping_slot': 3,
    }
    json.dumps(slot.to_dict())


def test_resolved_slot_state_override():
    slot = ResolvedSlot(TOKEN, b'\x01' * 32)
    override = slot.state_override(10**18)

    assert override == {
        TOKEN: {'stateDiff': {'0x' + '01' * 32: '0x' + (10**18).to_bytes(32, 'big').hex()}}
    }


def test_mapping_cache_round_trip(tmp_path):
    path = tmp_path / "slots.json"
    assert load_mapping_cache(path) == {}

    save_mapping_cache({WETH: 3, TOKEN: 0}, path)
    assert load_mapping_cache(path) == {WETH: 3, TOKEN: 0}


def test_mapping_cache_normalizes_addresses(tmp_path):
    path = tmp_path / "slots.json"
    path.write_text(json.dumps({WETH.lower(): "3"}))
    assert load_mapping_cache(path) == {WETH: 3}


def test_config_from_env(monkeypatch):
    monkeypatch.setenv("RPC_URL", "http://reth:8545")
    monkeypatch.setenv("SLOT_FINDER_BLOCK", "0x10")
    monkeypatch.setenv("SLOT_FINDER_TIMEOUT", "5")
    monkeypatch.setenv("SLOT_FINDER_WORKERS", "8")
    monkeypatch.delenv("SLOT_FINDER_GAS_LIMIT", raising=False)
    monkeypatch.delenv("SLOT_FINDER_CALLER", raising=False)

    config = Config.from_env(dotenv=False)

    assert config.rpc_url == "http://reth:8545"
    assert config.block == 16
    assert config.request_timeout == 5.0
    assert config.max_workers == 8
    assert config.gas_limit == 30_000_000
    assert config.caller == "0x0000000000000000000000000000000000000001"


def test_config_builds_resolver():
    config = Config(rpc_url="http://localhost:1", block=5, max_workers=3)
    resolver = config.resolver()

    assert resolver.max_workers == 3
    assert resolver.state_provider.latest_state().block_number == 5
    assert resolver.executor.gas_limit == config.gas_limit
