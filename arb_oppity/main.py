"""Command-line entry point.

``python -m arb_oppity.main <command>`` runs one query against the Replay
Labs API and prints the JSON result to stdout:

* ``analyze``  build profiles for markets and write ``spread_analysis_*.json``
* ``classify`` current regime (with multi-timeframe confirmation)
* ``check``    current regime on one venue plus time-of-day advice
* ``predict``  next thin window, best hours/days, current percentile
* ``scan``     rank cross-venue opportunities over configured pairs
* ``arb``      fee-adjusted analysis of one configured pair
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Sequence

import yaml

from arb_oppity.config.loader import load_app_config
from arb_oppity.config.models import AppConfig
from arb_oppity.core.enums import Category, Venue
from arb_oppity.core.errors import ConfigurationError, CoreError, InsufficientData
from arb_oppity.data_feed.fees import ScheduleFeeService
from arb_oppity.data_feed.replay_client import ReplayLabsClient
from arb_oppity.service.liquidity_service import LiquidityService
from arb_oppity.telemetry import ReportStorage, configure_logging, default_storage

LOGGER = logging.getLogger("arb_oppity.main")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="arb-oppity", description="Liquidity regime analysis for prediction markets")
    parser.add_argument("--settings", default="config/settings.yml", help="Path to settings.yml")
    parser.add_argument("--markets", default="config/markets.yml", help="Path to markets.yml")
    parser.add_argument("--log-level", default=None, help="Override telemetry.log_level")
    sub = parser.add_subparsers(dest="command", required=True)

    analyze = sub.add_parser("analyze", help="Build historical profiles and write reports")
    analyze.add_argument("market_ids", nargs="*", help="Markets to profile (default: all configured pairs)")
    analyze.add_argument("--days", type=int, default=None, help="History length in days")

    classify = sub.add_parser("classify", help="Classify the current liquidity regime")
    classify.add_argument("market_id")
    classify.add_argument("--no-confirm", action="store_true", help="Skip multi-timeframe confirmation")

    check = sub.add_parser("check", help="Check liquidity on one venue")
    check.add_argument("market_id")
    check.add_argument("--venue", choices=[venue.value for venue in Venue], default=Venue.KALSHI.value)

    predict = sub.add_parser("predict", help="Forecast the next thin-liquidity window")
    predict.add_argument("market_id")
    predict.add_argument("--hours-ahead", type=int, default=None, help="Prediction horizon in hours")

    scan = sub.add_parser("scan", help="Scan configured pairs for cross-venue opportunities")
    scan.add_argument("market_ids", nargs="*", help="Pairs to scan (default: all configured pairs)")
    scan.add_argument("--min-spread-pct", type=float, default=None)
    scan.add_argument("--min-net-profit-usd", type=float, default=None)
    scan.add_argument("--size-usd", type=float, default=None)

    arb = sub.add_parser("arb", help="Fee-adjusted analysis of one configured pair")
    arb.add_argument("market_id")
    arb.add_argument("--size-usd", type=float, default=None)
    arb.add_argument("--min-net-profit-pct", type=float, default=None)
    return parser


def run_command(
    args: argparse.Namespace,
    service: LiquidityService,
    config: AppConfig,
    storage: ReportStorage,
) -> Dict[str, Any]:
    """Dispatch one parsed command and return its JSON-ready result."""

    if args.command == "analyze":
        market_ids: List[str] = list(args.market_ids) or [pair.id for pair in config.markets]
        reports = {}
        for market_id in market_ids:
            profile = service.build_profile(market_id, days=args.days)
            if not profile.has_baseline:
                raise InsufficientData(f"No observations to report for {market_id}")
            reports[market_id] = str(storage.write_profile_report(profile))
        return {"mode": "analyze", "reports": reports}
    if args.command == "classify":
        payload = service.classify(args.market_id).to_dict()
        if not args.no_confirm:
            payload["confirmation"] = service.confirm(args.market_id).to_dict()
        return payload
    if args.command == "check":
        return service.check_liquidity(args.market_id, Venue(args.venue)).to_dict()
    if args.command == "predict":
        return service.forecast(args.market_id, args.hours_ahead).to_dict()
    if args.command == "scan":
        return service.scan_and_rank(
            args.market_ids or None,
            min_spread_pct=args.min_spread_pct,
            min_net_profit_usd=args.min_net_profit_usd,
            size_usd=args.size_usd,
        ).to_dict()
    if args.command == "arb":
        return service.analyze_arb(args.market_id, args.size_usd, args.min_net_profit_pct).to_dict()
    raise ValueError(f"Unknown command: {args.command}")


def _report_error(exc: CoreError) -> int:
    print(json.dumps({"error": type(exc).__name__, "message": str(exc)}), file=sys.stderr)
    return 1


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = load_app_config(settings_path=args.settings, markets_path=args.markets)
    except (OSError, TypeError, ValueError, yaml.YAMLError) as exc:
        # pydantic ValidationError is a ValueError
        return _report_error(ConfigurationError(str(exc)))
    telemetry_root = Path(config.telemetry.reports_dir)
    configure_logging(log_dir=telemetry_root / "logs", level=args.log_level or config.telemetry.log_level)
    storage = default_storage(telemetry_root)
    categories = {pair.kalshi_ticker: pair.category for pair in config.markets if pair.category is not Category.OTHER}

    with ReplayLabsClient(config.replay_labs, categories=categories) as client:
        service = LiquidityService(config, client, ScheduleFeeService(config.fees), storage=storage)
        try:
            result = run_command(args, service, config, storage)
        except CoreError as exc:
            LOGGER.error("Command failed", extra={"command": args.command, "error": str(exc)})
            return _report_error(exc)
    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
