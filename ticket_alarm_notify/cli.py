"""Command-line interface for the Ticket Alarm Notifier."""
import argparse
import asyncio
import logging
import sys
from typing import List, Optional

import uvicorn

from ticket_alarm_notify.api import create_app
from ticket_alarm_notify.app import AlarmServer, load_config
from ticket_alarm_notify.models import AppConfig


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments.

    Options left unset do not override the environment configuration.

    Args:
        args: List of command line arguments. If None, uses sys.argv[1:].

    Returns:
        Parsed arguments.
    """
    parser = argparse.ArgumentParser(
        description="Poll event seat availability and push alarm notifications to registered devices.",
    )

    server_group = parser.add_argument_group('Server')
    server_group.add_argument('--host', type=str, help='interface to bind (default: 0.0.0.0)')
    server_group.add_argument('--port', type=int, help='port to listen on (default: 3000)')

    interval_group = parser.add_argument_group('Check Interval')
    interval_group.add_argument(
        '--interval',
        type=float,
        help='seconds between availability sweeps (default: 30)',
    )

    browser_group = parser.add_argument_group('Browser Configuration')
    browser_group.add_argument(
        '--headless',
        action='store_true',
        default=None,
        help='Run browser in headless mode',
    )
    browser_group.add_argument(
        '--no-headless',
        dest='headless',
        action='store_false',
        help='Run browser with GUI',
    )
    browser_group.add_argument(
        '--browser-path',
        type=str,
        help='path to a Chromium executable to use instead of the bundled one',
    )

    log_group = parser.add_argument_group('Logging')
    log_group.add_argument(
        '--log-level',
        type=str,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Logging level',
    )
    log_group.add_argument(
        '--verbose', '-v',
        action='store_const',
        const='DEBUG',
        dest='log_level',
        help='Enable verbose output (same as --log-level DEBUG)',
    )

    parser.add_argument(
        '--version',
        action='version',
        version='%(prog)s 0.1.0',
        help='show version and exit',
    )

    if args is None:
        args = sys.argv[1:]
    return parser.parse_args(args)


def apply_args(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    """Override configuration with explicitly given command line options."""
    if args.host:
        config.host = args.host
    if args.port:
        config.port = args.port
    if args.interval and args.interval > 0:
        config.check_interval = args.interval
    if args.headless is not None:
        config.session.headless = args.headless
    if args.browser_path:
        config.session.executable_path = args.browser_path
    if args.log_level:
        config.log_level = args.log_level
    return config


def configure_logging(level: str = 'INFO') -> None:
    """Configure logging for the application.

    Args:
        level: Logging level as a string (e.g., 'INFO', 'DEBUG').
    """
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(),
        ]
    )

    # Reduce noise from third-party clients
    logging.getLogger('playwright').setLevel(logging.WARNING)
    logging.getLogger('httpx').setLevel(logging.WARNING)


def print_config(config: AppConfig) -> None:
    """Print the current configuration."""
    print("\n=== Ticket Alarm Notifier ===")
    print("\nEvents:")
    for event in config.events:
        print(f"  - {event.code}: {event.name}")

    print(f"\nCheck Interval: {config.check_interval:g} seconds")
    print(f"Listening on: {config.host}:{config.port}")

    print("\nBrowser Configuration:")
    print(f"  Headless: {'enabled' if config.session.headless else 'disabled'}")
    print(f"  Executable: {config.session.executable_path or 'bundled Chromium'}")

    print(f"\nLog Level: {config.log_level}")
    print("=" * 29 + "\n")


async def async_main() -> int:
    """Async entry point for the CLI."""
    args = parse_args()

    config = apply_args(load_config(), args)

    configure_logging(level=config.log_level)
    logger = logging.getLogger(__name__)

    try:
        print_config(config)

        app = create_app(AlarmServer(config))
        server = uvicorn.Server(uvicorn.Config(
            app,
            host=config.host,
            port=config.port,
            log_level=config.log_level.lower(),
        ))
        logger.info(f"🚀 Server running on port {config.port}")
        await server.serve()

    except KeyboardInterrupt:
        logger.info("👋 Received keyboard interrupt, shutting down...")
    except Exception as e:
        logger.critical(f"Fatal error: {e}", exc_info=True)
        return 1

    return 0


def main() -> int:
    """Main entry point for CLI."""
    try:
        return asyncio.run(async_main())
    except KeyboardInterrupt:
        print("\n👋 Operation cancelled by user")
        return 0


if __name__ == "__main__":
    sys.exit(main())
