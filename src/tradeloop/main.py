"""Main entry point for the trading engine."""

import argparse
import asyncio
import signal
import sys

import structlog

from tradeloop.bootstrap import build_engine, create_exchange
from tradeloop.config import load_settings
from tradeloop.engines.trading_engine import TradingEngine
from tradeloop.monitoring.logger import setup_logging
from tradeloop.monitoring.telegram import TelegramNotifier

logger = structlog.get_logger()


def register_telegram_commands(notifier: TelegramNotifier, engine: TradingEngine) -> None:
    """Register Telegram bot commands for remote control."""

    async def cmd_stop() -> str:
        engine.shutdown()
        return "Shutdown requested. The engine stops after the current trade cycle."

    async def cmd_status() -> str:
        status = engine.get_status_dict()
        lines = [
            f"State: {status['state']}",
            f"Exchange: {status['exchange']}",
            f"Cycles: {status['cycle_count']} ({status['failed_cycle_count']} failed)",
            f"Emergency stop: {status['emergency_stop_balance']} "
            f"{status['emergency_stop_currency']}",
        ]
        lines.extend(f"- {s['id']}: {s['strategy']} on {s['market']}" for s in status["strategies"])
        return "\n".join(lines)

    notifier.register_command("stop", cmd_stop)
    notifier.register_command("status", cmd_status)


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(description="Trading engine with emergency stop")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to the YAML config file. Default: config.yaml",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Override the configured log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    return parser


async def main(args: argparse.Namespace | None = None) -> None:
    """Run the trading engine until it stops."""
    overrides = {}
    if args is not None and args.log_level:
        overrides["log_level"] = args.log_level
    settings = load_settings(args.config if args is not None else None, **overrides)
    setup_logging(settings.log_level)

    exchange = create_exchange(settings)
    notifier = TelegramNotifier(
        bot_token=settings.telegram_bot_token,
        chat_id=settings.telegram_chat_id,
    )
    try:
        engine = build_engine(settings, exchange=exchange, alert_sink=notifier)

        # Setup signal handlers
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, engine.shutdown)

        register_telegram_commands(notifier, engine)
        await notifier.start_command_polling()
        try:
            await engine.start()
        finally:
            await notifier.stop_command_polling()
    finally:
        await exchange.close()


def cli() -> None:
    parser = build_parser()
    parsed_args = parser.parse_args()
    try:
        asyncio.run(main(parsed_args))
    except KeyboardInterrupt:
        print("\nShutdown requested. Exiting.")
        sys.exit(0)


if __name__ == "__main__":
    cli()
