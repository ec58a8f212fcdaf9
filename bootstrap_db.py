#!/usr/bin/env python3
"""
Database Bootstrap Script - Namespace, Collection and Seed Data

Connects to the PostgreSQL container on a freshly provisioned node,
waiting for it to come up, then creates the namespace and collection if
absent, loads the seed records without duplicating existing ones, and
prints what the collection now holds. Safe to run any number of times.

Usage:
    python bootstrap_db.py
    python bootstrap_db.py --provisioning-output outputs.json
    python bootstrap_db.py --json
    python bootstrap_db.py --validate-only

Environment Variables:
    DB_HOST or PROVISIONING_OUTPUT, DB_USER (required)
    DB_PORT, DB_PASSWORD, DB_NAME, DB_NAMESPACE, DB_CONNECT_TIMEOUT,
    BOOTSTRAP_MAX_ATTEMPTS, BOOTSTRAP_RETRY_DELAY_SECONDS, SEED_FILE,
    LOG_FORMAT, DEBUG_LOGGING

Exit codes:
    0  run completed
    1  run failed or finished with errors
    2  configuration invalid, nothing attempted
"""

import argparse
import json
import sys

from config import BootstrapConfig
from config.env_validation import get_validation_summary, log_validation_results
from core.models import RunOutcome
from exceptions import ConfigurationError
from services import BootstrapRunController, print_table
from util_logger import LoggerFactory, ComponentType, log_exceptions

logger = LoggerFactory.create_logger(ComponentType.TRIGGER, "BootstrapCLI")

EXIT_OK = 0
EXIT_RUN_FAILED = 1
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Bootstrap a freshly provisioned PostgreSQL node with a schema and seed data",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Address from the environment
  DB_HOST=203.0.113.10 DB_USER=postgres python bootstrap_db.py

  # Address from the provisioning engine
  terraform output -json > outputs.json
  DB_USER=postgres python bootstrap_db.py --provisioning-output outputs.json

  # Machine-readable result
  python bootstrap_db.py --json > run.json

  # Check configuration only
  python bootstrap_db.py --validate-only
        """,
    )
    parser.add_argument(
        "--provisioning-output", type=str, default=None,
        help="Provisioning output JSON to read the node address from (overrides PROVISIONING_OUTPUT)",
    )
    parser.add_argument(
        "--seed-file", type=str, default=None,
        help="JSON seed dataset replacing the built-in users records (overrides SEED_FILE)",
    )
    parser.add_argument(
        "--json", action="store_true",
        help="Print the run result as JSON instead of the table",
    )
    parser.add_argument(
        "--validate-only", action="store_true",
        help="Validate environment variables and exit",
    )
    return parser


@log_exceptions(logger=logger)
def main(argv=None) -> int:
    """Run one bootstrap and return the process exit code."""
    args = build_parser().parse_args(argv)

    if args.validate_only:
        valid = log_validation_results(logger)
        if args.json:
            print(json.dumps(get_validation_summary(), indent=2))
        return EXIT_OK if valid else EXIT_CONFIG_ERROR

    try:
        config = BootstrapConfig.from_environment(
            provisioning_output=args.provisioning_output,
            seed_file=args.seed_file,
        )
    except ConfigurationError as e:
        logger.error(f"❌ Configuration error: {e}")
        log_validation_results(logger)
        return EXIT_CONFIG_ERROR

    LoggerFactory.configure(log_format=config.log_format, debug=config.debug_logging)
    logger.debug(f"Configuration: {config.debug_dict()}")

    result = BootstrapRunController(config).run()

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, default=str))
    else:
        print_table(config.seed.collection.field_names, result.rows)

    return EXIT_OK if result.outcome == RunOutcome.COMPLETED else EXIT_RUN_FAILED


if __name__ == "__main__":
    sys.exit(main())
