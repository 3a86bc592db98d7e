#!/usr/bin/env python3
"""
Find the storage slot holding an ERC20 balance

Prints the resolved slot as JSON. With --cache-file, a known mapping index is
used for the fast path and a newly recovered index is written back.

Usage:
  python find_balance_slot.py <token> <holder> [--cache-file slots.json] [--balance N]
"""

import argparse
import json
import logging
import sys

from eth_utils import is_address, to_checksum_address

from erc20_slot_finder import (
    AmbiguousSlotError,
    Config,
    SlotFinderError,
    load_mapping_cache,
    save_mapping_cache,
)


def main():
    ap = argparse.ArgumentParser(description="Find the storage slot of an ERC20 holder's balance")
    ap.add_argument("token", help="ERC20 token address (0x...)")
    ap.add_argument("holder", help="Holder address (0x...)")
    ap.add_argument("--cache-file", help="JSON {token: mapping_index} cache, updated on recovery")
    ap.add_argument("--balance", type=int, help="Also print a state override forging this balance")
    ap.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = ap.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    for addr in (args.token, args.holder):
        if not is_address(addr):
            print(f"✗ Invalid address: {addr}", file=sys.stderr)
            return 2

    token = to_checksum_address(args.token)
    cache = load_mapping_cache(args.cache_file) if args.cache_file else {}

    config = Config.from_env()
    try:
        result = config.resolver().resolve(token, args.holder, cache)
    except AmbiguousSlotError as e:
        print(f"✗ {e}", file=sys.stderr)
        for candidate in e.candidates:
            print(f"  candidate: {candidate}", file=sys.stderr)
        return 1
    except SlotFinderError as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1

    print(json.dumps(result.to_dict(), indent=2))

    if args.balance is not None:
        print(json.dumps(result.state_override(args.balance), indent=2))

    # the fast path assumes the balance lives in the token's own storage
    if (args.cache_file and result.mapping_slot is not None
            and result.address == token and token not in cache):
        cache[token] = result.mapping_slot
        save_mapping_cache(cache, args.cache_file)
        print(f"✓ Recorded mapping index {result.mapping_slot} for {token} in {args.cache_file}",
              file=sys.stderr)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
