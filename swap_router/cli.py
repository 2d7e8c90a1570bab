"""Command line entry point: route one trade against a snapshot file.

Example:
  swap-route --snapshot pools.json \\
      --token-in 0xc02a...:18:WETH --token-out 0xa0b8...:6:USDC \\
      --amount 1.5 --recipient 0x1111... --slippage 1/200
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

import structlog
from pydantic import ValidationError

from swap_router.config import RouterConfig
from swap_router.engine import RoutingEngine
from swap_router.errors import RoutingError
from swap_router.logging_config import configure_logging
from swap_router.models.plan import TradePlanResponse
from swap_router.models.request import RouteRequest, TokenInfo
from swap_router.routing.types import TradeType
from swap_router.sources import FixedGasPriceSource, StaticPoolSource

logger = structlog.get_logger()


def parse_token(value: str) -> dict[str, object]:
    """Parse ``address:decimals[:symbol]``."""
    parts = value.split(":")
    if len(parts) not in (2, 3):
        raise argparse.ArgumentTypeError(f"Expected address:decimals[:symbol], got '{value}'")
    try:
        decimals = int(parts[1])
    except ValueError:
        raise argparse.ArgumentTypeError(f"Decimals must be an integer: '{parts[1]}'") from None
    token: dict[str, object] = {"address": parts[0], "decimals": decimals}
    if len(parts) == 3:
        token["symbol"] = parts[2]
    return token


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="swap-route",
        description="Compute the best swap route and trade plan for a pool snapshot",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--snapshot", type=Path, required=True, help="Pool snapshot JSON file")
    parser.add_argument("--token-in", type=parse_token, required=True, help="address:decimals[:symbol]")
    parser.add_argument("--token-out", type=parse_token, required=True, help="address:decimals[:symbol]")

    amount = parser.add_mutually_exclusive_group(required=True)
    amount.add_argument("--amount", help="Human-readable amount of the fixed side, e.g. 1.5")
    amount.add_argument("--amount-raw", help="Raw amount of the fixed side in base units")

    parser.add_argument(
        "--exact-output",
        action="store_true",
        help="Fix the output amount instead of the input amount",
    )
    parser.add_argument("--recipient", required=True, help="Address receiving the output")
    parser.add_argument("--slippage", default=None, help="Slippage tolerance, e.g. 1/200 or 0.005")
    parser.add_argument("--deadline", type=int, default=None, help="Deadline offset in seconds")
    parser.add_argument(
        "--gas-price",
        type=int,
        default=0,
        help="Native gas price in wei (default: 0, ignore gas)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the CLI. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        snapshot_data = json.loads(args.snapshot.read_text())
    except (OSError, json.JSONDecodeError) as err:
        print(f"Error: cannot read snapshot {args.snapshot}: {err}", file=sys.stderr)
        return 1

    try:
        request = RouteRequest(
            token_in=TokenInfo(**args.token_in),
            token_out=TokenInfo(**args.token_out),
            amount=args.amount_raw,
            amount_decimal=args.amount,
            trade_type=TradeType.EXACT_OUTPUT if args.exact_output else TradeType.EXACT_INPUT,
            recipient=args.recipient,
            slippage_tolerance=args.slippage,
            deadline_offset=args.deadline,
        )
        config = RouterConfig.from_env()
    except (ValidationError, ValueError) as err:
        print(f"Error: invalid request: {err}", file=sys.stderr)
        return 2

    try:
        pool_source = StaticPoolSource.from_json(snapshot_data)
        with RoutingEngine(
            config,
            pool_source=pool_source,
            gas_price_source=FixedGasPriceSource(args.gas_price),
        ) as engine:
            plan = engine.route(request)
    except RoutingError as err:
        logger.warning("routing_failed", error=err.kind, params=err.params)
        print(json.dumps(err.to_dict(), indent=2))
        return 1
    except ValueError as err:
        print(f"Error: {err}", file=sys.stderr)
        return 2

    response = TradePlanResponse.from_plan(
        plan,
        token_in=request.token_in.to_token(config.chain_id),
        token_out=request.token_out.to_token(config.chain_id),
    )
    print(response.model_dump_json(by_alias=True, exclude_none=True, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
