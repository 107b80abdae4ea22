"""Main CLI entry point"""

import sys
import json
import time
import logging
import argparse
from pathlib import Path

from ..core.config import Config
from ..core.connection import SolanaManager
from ..operations import PoolSession, PoolQuery, PositionQuery, LiquidityManager, SwapManager
from ..operations.positions import summarize_position
from ..keeper.client import KeeperClient
from ..api.server import run as run_server

CLEANUP_DELAY_SECONDS = 5


def get_results_dir():
    """Get results directory, create if needed"""
    results_dir = Path.cwd() / "results"
    results_dir.mkdir(exist_ok=True)
    return results_dir


def save_result(filename, data):
    """Save result to JSON file in results directory"""
    filepath = get_results_dir() / filename
    with open(filepath, "w") as f:
        json.dump(data, f, indent=2, default=str)
    return filepath


def print_result(filename, data):
    print(json.dumps(data, indent=2, default=str))
    filepath = save_result(filename, data)
    print(f"\nSaved to {filepath}", file=sys.stderr)


def open_pool(pool_address, require_signer=False):
    """Connect, load the pool and return (manager, session)"""
    manager = SolanaManager(require_signer=require_signer)
    session = PoolSession(manager)
    print(f"Initializing pool {pool_address}...", file=sys.stderr)
    session.ensure_initialized(pool_address)
    return manager, session


def parse_strategy_params(pairs):
    """Parse KEY=VALUE strategy parameters, numbers as ints"""
    params = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep:
            raise ValueError(f"Invalid strategy parameter: {pair}. Expected KEY=VALUE")
        try:
            params[key] = int(value)
        except ValueError:
            params[key] = value
    return params


# ── Queries ────────────────────────────────────────────────────────────

def cmd_pool_info(args):
    """Query pool information"""
    _, session = open_pool(args.pool)
    result = PoolQuery(session).get_pool_info(args.pool)
    print_result(f"pool_{args.pool[:10]}.json", result)


def cmd_active_bin(args):
    """Query the pool's active bin"""
    _, session = open_pool(args.pool)
    result = PoolQuery(session).get_active_bin(args.pool)
    print(f"Active bin: {result['bin_id']}")


def cmd_positions(args):
    """Query a user's positions in a pool"""
    manager, session = open_pool(args.pool, require_signer=not args.address)
    address = args.address or manager.address
    positions = PositionQuery(session).get_positions_summary(args.pool, address)

    print(f"Found {len(positions)} positions for {address}", file=sys.stderr)
    print_result(f"positions_{address[:10]}.json", {
        "pool": args.pool,
        "address": address,
        "positions": positions,
    })


def cmd_balance(args):
    """Query SOL balance, or an SPL token account balance"""
    if args.token_account:
        manager = SolanaManager()
        balance = manager.get_token_balance(args.token_account)
        print(f"Token account {args.token_account}: {balance}")
        return

    manager = SolanaManager(require_signer=not args.address)
    address = args.address or manager.address
    balance = manager.get_balance(address)
    print(f"Balance for {address}: {balance} SOL")


def cmd_airdrop(args):
    """Request a devnet/testnet airdrop"""
    manager = SolanaManager(require_signer=not args.address)
    address = args.address or manager.address
    print(f"Requesting {args.lamports} lamports for {address}...")

    signature = manager.request_airdrop(args.lamports, address)
    print(f"Airdrop confirmed: {signature}")
    print(f"New balance: {manager.get_balance(address)} SOL")


# ── Liquidity ──────────────────────────────────────────────────────────

def cmd_add(args):
    """Add liquidity around the active bin"""
    manager, session = open_pool(args.pool, require_signer=True)
    manager_ops = LiquidityManager(session)

    print(f"Adding liquidity to {args.pool} (+/- {args.bin_range} bins, {args.strategy})")
    result = manager_ops.add_liquidity(
        manager.keypair,
        args.pool,
        args.decimals,
        x_amount=args.x_amount,
        y_amount=args.y_amount,
        bin_range=args.bin_range,
        strategy_type=args.strategy,
        strategy_params=parse_strategy_params(args.param),
        existing_position=args.position,
    )
    print(f"\n{result}")


def cmd_add_balanced(args):
    """Create a balanced position"""
    manager, session = open_pool(args.pool, require_signer=True)
    result = LiquidityManager(session).create_balanced_position(
        manager.keypair,
        args.pool,
        args.decimals,
        x_amount=args.x_amount,
        bin_range=args.bin_range,
        strategy_type=args.strategy,
    )
    print(f"\n{result}")


def cmd_add_imbalanced(args):
    """Create an imbalanced position"""
    manager, session = open_pool(args.pool, require_signer=True)
    result = LiquidityManager(session).create_imbalanced_position(
        manager.keypair,
        args.pool,
        args.decimals,
        x_amount=args.x_amount,
        y_amount=args.y_amount,
        bin_range=args.bin_range,
        strategy_type=args.strategy,
    )
    print(f"\n{result}")


def cmd_add_one_sided(args):
    """Create a one-sided position"""
    manager, session = open_pool(args.pool, require_signer=True)
    side = "Y" if args.y_side else "X"
    print(f"Creating {side}-side position ({args.bin_range} bins, offset {args.offset})")

    result = LiquidityManager(session).create_one_sided_position(
        manager.keypair,
        args.pool,
        args.decimals,
        amount=args.amount,
        bin_range=args.bin_range,
        is_x_side=not args.y_side,
        offset=args.offset,
    )
    print(f"\n{result}")


def cmd_remove(args):
    """Remove liquidity from positions"""
    manager, session = open_pool(args.pool, require_signer=True)
    targets = args.position or None
    scope = f"{len(targets)} position(s)" if targets else "all positions"

    print(f"Removing {args.bps / 100:.2f}% liquidity from {scope} in {args.pool}")
    result = LiquidityManager(session).remove_liquidity(
        manager.keypair,
        args.pool,
        target_positions=targets,
        bps_to_remove=args.bps,
        should_claim_and_close=not args.no_close,
    )
    print(f"\n{result or 'No positions to remove'}")


def cmd_move(args):
    """Move liquidity between pools"""
    manager = SolanaManager(require_signer=True)
    session = PoolSession(manager)
    session.ensure_initialized(args.from_pool)
    session.ensure_initialized(args.to_pool)

    remove_options = {
        "bps_to_remove": args.bps,
        "should_claim_and_close": not args.no_close,
    }
    add_options = {
        "x_amount": args.x_amount,
        "y_amount": args.y_amount,
        "bin_range": args.bin_range,
        "strategy_type": args.strategy,
    }

    print(f"Moving funds from {args.from_pool} to {args.to_pool}")
    result = LiquidityManager(session).move_funds(
        manager.keypair,
        args.from_pool,
        args.to_pool,
        args.decimals,
        remove_options=remove_options,
        add_options=add_options,
    )
    print(f"\n{result['message']}")


def cmd_claim_fees(args):
    """Claim swap fees"""
    manager, session = open_pool(args.pool, require_signer=True)
    result = LiquidityManager(session).claim_swap_fees(
        manager.keypair, args.pool, args.position or None
    )
    print(f"\n{result or 'No positions to claim from'}")


def cmd_close(args):
    """Close positions"""
    manager, session = open_pool(args.pool, require_signer=True)
    result = LiquidityManager(session).close_positions(
        manager.keypair, args.pool, args.position or None
    )
    print(f"\n{result or 'No positions to close'}")


def cmd_cleanup(args):
    """Remove all liquidity and close every position in a pool"""
    print("=" * 60)
    print("DLMM Position Cleanup Utility")
    print("=" * 60)

    manager, session = open_pool(args.pool, require_signer=True)
    print(f"Using keypair: {manager.address}")
    print(f"Pool address: {args.pool}")

    query = PositionQuery(session)
    positions = query.get_user_positions(args.pool, manager.pubkey)
    print(f"Found {len(positions)} positions to clean up")

    if not positions:
        print("No positions to clean up")
        return

    for index, position in enumerate(positions, start=1):
        summary = summarize_position(position)
        print(f"Position {index}: {summary['public_key']}")
        print(f"  Bins: {', '.join(str(b) for b in summary['bin_ids'])}")

    if not args.yes:
        print("\nWARNING: This will remove ALL liquidity and close ALL positions!")
        print(f"Press Ctrl+C now to abort, or wait {CLEANUP_DELAY_SECONDS} seconds to continue...")
        time.sleep(CLEANUP_DELAY_SECONDS)

    print("\nProceeding with cleanup...")
    LiquidityManager(session).remove_liquidity(
        manager.keypair,
        args.pool,
        bps_to_remove=10000,
        should_claim_and_close=True,
    )
    print("Successfully removed all liquidity and closed positions")

    remaining = query.get_user_positions(args.pool, manager.pubkey)
    print(f"Positions remaining after cleanup: {len(remaining)}")
    print("=" * 60)
    print("Cleanup complete! All funds should now be back in your wallet.")
    print("=" * 60)


# ── Swap ───────────────────────────────────────────────────────────────

def cmd_quote(args):
    """Get swap quote without executing"""
    _, session = open_pool(args.pool)
    result = SwapManager(session).quote(
        args.pool, args.amount, not args.y_to_x, slippage_bps=args.slippage_bps
    )
    direction = "Y -> X" if args.y_to_x else "X -> Y"
    print(f"Quote ({direction}): {result['in_amount']} in, min {result['min_out_amount']} out")
    print(json.dumps(result, indent=2, default=str))


def cmd_swap(args):
    """Execute a swap"""
    manager, session = open_pool(args.pool, require_signer=True)
    direction = "Y -> X" if args.y_to_x else "X -> Y"
    print(f"Swapping {args.amount} ({direction}), slippage {args.slippage_bps} bps")

    signature = SwapManager(session).swap(
        manager.keypair, args.pool, args.amount, not args.y_to_x, slippage_bps=args.slippage_bps
    )
    print(f"\nSuccess! Tx: {signature}")


# ── Analytics ──────────────────────────────────────────────────────────

def cmd_metrics(args):
    """Protocol metrics from the analytics API"""
    print_result("protocol_metrics.json", KeeperClient().get_protocol_metrics())


def cmd_pairs(args):
    """All pairs from the analytics API"""
    pairs = KeeperClient().get_all_pairs(include_unknown=not args.exclude_unknown)
    print_result("pairs.json", pairs)


def cmd_pair(args):
    """One pair from the analytics API"""
    print_result(f"pair_{args.address[:10]}.json", KeeperClient().get_pair(args.address))


def cmd_serve(args):
    """Run the HTTP API"""
    run_server(host=args.host, port=args.port)


def _add_pool_arg(parser, default):
    parser.add_argument("pool", nargs="?", default=default, help=f"Pool address (default: {default})")


def _add_strategy_args(parser):
    parser.add_argument("--bin-range", type=int, default=10, help="Bins on each side of the active bin")
    parser.add_argument("--strategy", default="Spot", choices=["Spot", "Curve", "BidAsk"], help="Liquidity shape")


def main():
    config = Config()
    default_pool = config.default_pool_address

    parser = argparse.ArgumentParser(
        prog="dlmm-manager",
        description="DLMM Manager - Manage Meteora DLMM liquidity on Solana",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""examples:
  dlmm-manager pool-info                                   # Default pool details
  dlmm-manager positions --address <WALLET>                # Positions in default pool
  dlmm-manager airdrop 1000000000                          # 1 SOL on devnet (SOLANA_RPC_URL)
  dlmm-manager add <POOL> 9 --x-amount 1000000 --bin-range 5
  dlmm-manager add-one-sided <POOL> 9 --amount 1000000 --offset -2
  dlmm-manager remove <POOL> --bps 5000 --no-close         # Withdraw half, keep positions
  dlmm-manager move <FROM> <TO> 9                          # Remove everything, re-add in TO
  dlmm-manager swap <POOL> 1000000 --slippage-bps 50
  dlmm-manager cleanup                                     # Empty and close all positions
  dlmm-manager serve --port 3000

configuration:
  SOLANA_RPC_URL     RPC endpoint (.env)
  KEYPAIR_PATH       Signer key file, JSON byte array (default ./id.json)
  DLMM_POOL_LOADER   SDK pool factory, module:attribute
  DLMM_API_URL       Analytics API origin
""",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Command")

    # ── Queries ────────────────────────────────────────────────────────
    p = subparsers.add_parser("pool-info", help="Pool details")
    _add_pool_arg(p, default_pool)
    p.set_defaults(func=cmd_pool_info)

    p = subparsers.add_parser("active-bin", help="Pool active bin")
    _add_pool_arg(p, default_pool)
    p.set_defaults(func=cmd_active_bin)

    p = subparsers.add_parser("positions", help="User positions in a pool")
    _add_pool_arg(p, default_pool)
    p.add_argument("--address", help="Owner address (default: keypair)")
    p.set_defaults(func=cmd_positions)

    p = subparsers.add_parser("balance", help="SOL or token account balance")
    p.add_argument("--address", help="Address to query (default: keypair)")
    p.add_argument("--token-account", help="SPL token account to query instead of SOL")
    p.set_defaults(func=cmd_balance)

    p = subparsers.add_parser("airdrop", help="Request SOL on devnet/testnet")
    p.add_argument("lamports", type=int, help="Amount in lamports (1 SOL = 1000000000)")
    p.add_argument("--address", help="Recipient (default: keypair)")
    p.set_defaults(func=cmd_airdrop)

    # ── Liquidity ──────────────────────────────────────────────────────
    p = subparsers.add_parser("add", help="Add liquidity around the active bin")
    p.add_argument("pool", help="Pool address")
    p.add_argument("decimals", type=int, help="Token X decimals")
    p.add_argument("--x-amount", type=int, help="Token X in base units (default: 100 tokens)")
    p.add_argument("--y-amount", type=int, help="Token Y in base units (default: 0)")
    p.add_argument("--param", action="append", metavar="KEY=VALUE", help="Extra strategy parameter")
    p.add_argument("--position", help="Existing position to deposit into")
    _add_strategy_args(p)
    p.set_defaults(func=cmd_add)

    p = subparsers.add_parser("add-balanced", help="Balanced position around current price")
    p.add_argument("pool", help="Pool address")
    p.add_argument("decimals", type=int, help="Token X decimals")
    p.add_argument("--x-amount", type=int, help="Token X in base units (default: 100 tokens)")
    _add_strategy_args(p)
    p.set_defaults(func=cmd_add_balanced)

    p = subparsers.add_parser("add-imbalanced", help="Position with explicit X and Y amounts")
    p.add_argument("pool", help="Pool address")
    p.add_argument("decimals", type=int, help="Token X decimals")
    p.add_argument("--x-amount", type=int, help="Token X in base units")
    p.add_argument("--y-amount", type=int, help="Token Y in base units")
    _add_strategy_args(p)
    p.set_defaults(func=cmd_add_imbalanced)

    p = subparsers.add_parser("add-one-sided", help="Single-token position on one side of the price")
    p.add_argument("pool", help="Pool address")
    p.add_argument("decimals", type=int, help="Token X decimals")
    p.add_argument("--amount", type=int, help="Deposit in base units (required with --y-side)")
    p.add_argument("--bin-range", type=int, default=10, help="Width of the window in bins")
    p.add_argument("--offset", type=int, default=0, help="Shift of the window from the active bin")
    p.add_argument("--y-side", action="store_true", help="Deposit token Y above the price")
    p.set_defaults(func=cmd_add_one_sided)

    p = subparsers.add_parser("remove", help="Remove liquidity")
    p.add_argument("pool", help="Pool address")
    p.add_argument("--position", action="append", help="Position to remove from (repeatable, default: all)")
    p.add_argument("--bps", type=int, default=10000, help="Basis points to remove per bin (default: 10000)")
    p.add_argument("--no-close", action="store_true", help="Keep positions open")
    p.set_defaults(func=cmd_remove)

    p = subparsers.add_parser("move", help="Move liquidity to another pool")
    p.add_argument("from_pool", help="Source pool address")
    p.add_argument("to_pool", help="Destination pool address")
    p.add_argument("decimals", type=int, help="Destination token X decimals")
    p.add_argument("--bps", type=int, default=10000, help="Basis points to remove per bin")
    p.add_argument("--no-close", action="store_true", help="Keep source positions open")
    p.add_argument("--x-amount", type=int, help="Token X to add in base units")
    p.add_argument("--y-amount", type=int, help="Token Y to add in base units")
    _add_strategy_args(p)
    p.set_defaults(func=cmd_move)

    p = subparsers.add_parser("claim-fees", help="Claim swap fees")
    p.add_argument("pool", help="Pool address")
    p.add_argument("--position", action="append", help="Position to claim from (repeatable, default: all)")
    p.set_defaults(func=cmd_claim_fees)

    p = subparsers.add_parser("close", help="Close positions")
    p.add_argument("pool", help="Pool address")
    p.add_argument("--position", action="append", help="Position to close (repeatable, default: all)")
    p.set_defaults(func=cmd_close)

    p = subparsers.add_parser("cleanup", help="Remove all liquidity and close all positions")
    _add_pool_arg(p, default_pool)
    p.add_argument("-y", "--yes", action="store_true", help="Skip the abort window")
    p.set_defaults(func=cmd_cleanup)

    # ── Swap ───────────────────────────────────────────────────────────
    for name, func, help_text in (
        ("quote", cmd_quote, "Swap quote (read-only)"),
        ("swap", cmd_swap, "Execute a swap"),
    ):
        p = subparsers.add_parser(name, help=help_text)
        p.add_argument("pool", help="Pool address")
        p.add_argument("amount", type=int, help="Input amount in base units")
        p.add_argument("--y-to-x", action="store_true", help="Sell token Y (default: sell token X)")
        p.add_argument("--slippage-bps", type=int, default=100, help="Slippage tolerance (default: 100 = 1%%)")
        p.set_defaults(func=func)

    # ── Analytics ──────────────────────────────────────────────────────
    p = subparsers.add_parser("metrics", help="Protocol metrics")
    p.set_defaults(func=cmd_metrics)

    p = subparsers.add_parser("pairs", help="All pairs")
    p.add_argument("--exclude-unknown", action="store_true", help="Skip pools with unverified tokens")
    p.set_defaults(func=cmd_pairs)

    p = subparsers.add_parser("pair", help="Pair details")
    p.add_argument("address", help="Pair address")
    p.set_defaults(func=cmd_pair)

    # ── Server ─────────────────────────────────────────────────────────
    p = subparsers.add_parser("serve", help="Run the HTTP API")
    p.add_argument("--host", default="0.0.0.0", help="Bind address")
    p.add_argument("--port", type=int, default=config.port, help="Port (default: PORT or 3000)")
    p.set_defaults(func=cmd_serve)

    # ── Parse and dispatch ─────────────────────────────────────────────
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        args.func(args)
    except KeyboardInterrupt:
        print("\nCancelled.")
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
