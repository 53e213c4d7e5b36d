"""Main entry point with CLI."""
import argparse
import asyncio
import logging
import sys

import httpx

from cageots.config import LEGACY_ACCEPTED_STATUSES, config, Config
from cageots.errors import AuthenticationError, ConfigError
from cageots.jobs.runner import KonnectorRunner
from cageots.logging_conf import setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Les P'tits Cageots invoice connector")

    parser.add_argument(
        "--login",
        default=None,
        help="Account e-mail (default: LOGIN env var)",
    )
    parser.add_argument(
        "--dev",
        action="store_true",
        help="Development mode (verbose logs, outputs saved to data/dev/)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Extract only, save nothing to the bill store",
    )
    parser.add_argument(
        "--store-html",
        action="store_true",
        help="Store the compressed order history page in DEV / dry-run mode",
    )

    statuses = parser.add_mutually_exclusive_group()
    statuses.add_argument(
        "--status",
        action="append",
        default=None,
        help="Accepted order status, repeatable (default: ACCEPTED_STATUSES)",
    )
    statuses.add_argument(
        "--legacy-statuses",
        action="store_true",
        help=f"Accept {' and '.join(repr(s) for s in LEGACY_ACCEPTED_STATUSES)}",
    )
    parser.add_argument(
        "--identifier",
        action="append",
        default=None,
        help="Bank operation keyword for matching bills, repeatable",
    )

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    setup_logging()
    args = parse_args(argv)

    if args.dev:
        logging.getLogger().setLevel(logging.DEBUG)
    if args.login:
        Config.LOGIN = args.login

    try:
        Config.validate(require_supabase=False)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    if args.legacy_statuses:
        accepted = LEGACY_ACCEPTED_STATUSES
    else:
        accepted = tuple(args.status or config.ACCEPTED_STATUSES)

    logger.info("=" * 60)
    logger.info("Les P'tits Cageots connector starting")
    logger.info(f"Mode: {'DEV' if args.dev else 'PROD'}")
    logger.info(f"Accepted statuses: {', '.join(accepted)}")
    logger.info(f"Dry-run: {args.dry_run}")
    logger.info(f"Supabase mirror: {config.supabase_enabled() and not args.dry_run}")
    logger.info("=" * 60)

    runner = KonnectorRunner(
        login=config.LOGIN,
        password=config.PASSWORD,
        accepted_statuses=accepted,
        identifiers=args.identifier,
        dry_run=args.dry_run,
        dev_mode=args.dev,
        store_html=args.store_html,
    )
    try:
        asyncio.run(runner.run())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(1)
    except AuthenticationError as e:
        logger.error(f"{e}")
        sys.exit(1)
    except httpx.HTTPError as e:
        logger.error(f"Could not reach {config.BASE_URL}: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
