#!/usr/bin/env python3
"""Entry point for the slip bot."""

import argparse
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from config.settings import ExchangeToggles, Settings, load_settings
from slipbot.api.exceptions import ConfigurationError
from slipbot.core.bot import create_bot
from slipbot.models import ExchangeName


def setup_logging(log_level: str, log_file: Path) -> None:
    """Configure logging for the application."""
    # Create log directory if needed
    log_file.parent.mkdir(parents=True, exist_ok=True)

    # Root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))

    # Console handler
    console_format = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(console_format)
    root_logger.addHandler(console_handler)

    # File handler (rotating)
    file_format = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5,
    )
    file_handler.setFormatter(file_format)
    root_logger.addHandler(file_handler)

    # Trade logger (separate file)
    trade_logger = logging.getLogger("trades")
    trade_file = log_file.parent / "trades.log"
    trade_handler = RotatingFileHandler(
        trade_file,
        maxBytes=10 * 1024 * 1024,
        backupCount=10,
    )
    trade_format = logging.Formatter(
        "%(asctime)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    trade_handler.setFormatter(trade_format)
    trade_logger.addHandler(trade_handler)
    trade_logger.setLevel(logging.INFO)

    # Reduce noise from libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)


def parse_exchanges(value: str) -> List[ExchangeName]:
    """Parse a comma-separated exchange list such as ``max,bito``."""
    by_key = {name.value.lower(): name for name in ExchangeName}
    selected = []
    for item in value.split(","):
        key = item.strip().lower()
        if not key:
            continue
        if key not in by_key:
            raise argparse.ArgumentTypeError(
                f"Unknown exchange '{item.strip()}' (choose from {', '.join(by_key)})"
            )
        selected.append(by_key[key])
    return selected


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Round-trip slip across MAX, BitoPro and Hoya",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/run_slip.py                       # Exchanges from ENABLE_* settings
  python scripts/run_slip.py --exchanges max,bito  # Override the enabled set
  python scripts/run_slip.py --log-level DEBUG     # Log request/response bodies
        """,
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=Path("config/config.yaml"),
        help="Path to config file (default: config/config.yaml)",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override log level from config",
    )

    parser.add_argument(
        "--exchanges",
        type=parse_exchanges,
        help="Comma-separated exchanges to run, overriding ENABLE_* settings",
    )

    return parser.parse_args(argv)


def apply_exchange_override(settings: Settings, exchanges: List[ExchangeName]) -> None:
    """Replace the ENABLE_* toggles with an explicit selection."""
    settings.exchanges = ExchangeToggles(
        **{name.name.lower(): name in exchanges for name in ExchangeName}
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    # Load settings
    try:
        settings = load_settings(args.config)
    except Exception as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        return 1

    if args.exchanges is not None:
        apply_exchange_override(settings, args.exchanges)

    # Override log level if specified
    log_level = args.log_level or settings.logging.level

    # Setup logging
    setup_logging(log_level, settings.logging.file)
    logger = logging.getLogger(__name__)

    # Create bot
    try:
        bot = create_bot(settings)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1
    except Exception as e:
        logger.exception(f"Failed to create bot: {e}")
        return 1

    # Run bot; per-exchange failures are in the summary, not the exit code
    try:
        bot.run()
        return 0
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
        return 1
    except Exception as e:
        logger.exception(f"Bot crashed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
