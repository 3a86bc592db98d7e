#!/usr/bin/env python3
"""
Benchmark: ERC20 balance slot resolution for random holders

Resolves the balance slot of N random addresses against one token and reports
per-call timing and the average over successful calls.

Without a mapping index every call goes through the balanceOf scan (and
disambiguation when needed). With --mapping-index (or a --cache-file that
knows the token) every call takes the cached fast path.

Usage:
  RPC_URL=http://localhost:8545 python benchmark_find_slot.py
  python benchmark_find_slot.py --token 0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2 --mapping-index 3
"""

import argparse
import logging
import secrets
import time

from eth_utils import to_checksum_address

from erc20_slot_finder import Config, SlotFinderError, load_mapping_cache

USDC = "0xA0b86991c6218b36c1d19d4a2e9eB0cE3606eB48"


def random_address() -> str:
    return to_checksum_address("0x" + secrets.token_hex(20))


def main():
    ap = argparse.ArgumentParser(description="Benchmark ERC20 balance slot resolution")
    ap.add_argument("--token", default=USDC, help="ERC20 token address (default: USDC)")
    ap.add_argument("--iterations", type=int, default=100, help="Number of random holders")
    ap.add_argument("--mapping-index", type=int, help="Known balances mapping index (fast path)")
    ap.add_argument("--cache-file", help="JSON {token: mapping_index} cache")
    ap.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = ap.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    config = Config.from_env()
    token = to_checksum_address(args.token)

    cache = load_mapping_cache(args.cache_file) if args.cache_file else {}
    if args.mapping_index is not None:
        cache[token] = args.mapping_index

    print("=" * 80)
    print("ERC20 Balance Slot Benchmark")
    print("=" * 80)
    print(f"\nRPC URL: {config.rpc_url}")
    print(f"Token: {token}")
    print(f"Mapping index: {cache.get(token, 'unknown')}")
    print(f"Iterations: {args.iterations}\n")

    resolver = config.resolver()
    total_duration = 0.0
    successful = 0

    for i in range(args.iterations):
        holder = random_address()

        start_t = time.perf_counter()
        try:
            resolver.resolve(token, holder, cache)
        except SlotFinderError as e:
            print(f"#{i:03} error: {e}")
            continue
        elapsed = time.perf_counter() - start_t

        print(f"#{i:03} time taken: {elapsed * 1000:.3f}ms")
        total_duration += elapsed
        successful += 1

    if successful > 0:
        avg = total_duration / successful
        print(f"\n✓ Successful queries: {successful}/{args.iterations}")
        print(f"Total time: {total_duration:.4f}s")
        print(f"Average time per successful call: {avg * 1000:.3f}ms")
    else:
        print(f"\n✗ No successful queries")

    print("\n" + "=" * 80)


if __name__ == "__main__":
    main()
