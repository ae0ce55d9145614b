"""Ticket Alarm Notifier

Polls event seat availability and pushes alarm notifications to registered devices.
"""
import logging
import sys


def main() -> int:
    """Main entry point that runs the CLI with proper asyncio setup."""
    try:
        # Import here to avoid circular imports
        from ticket_alarm_notify.cli import main as cli_main

        return cli_main()

    except Exception as e:
        logging.error(f"Unexpected error: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
