#!/usr/bin/env python3
"""
Update a coin's supply history and the dashboard snapshot document.

    stablecoin-update --coin usdc
    stablecoin-update --coin usdt --data-dir ./site --console-logs

Exit codes:
    0  success
    1  unexpected error
    2  usage error
    3  provider failure that may succeed on a later run
    4  provider failure that will not succeed without changes
    5  data validation failure
    6  history or snapshot file could not be read or written
"""

import argparse
import asyncio
import sys

from stablecoin_supply.config.state import ConfigState, get_config
from stablecoin_supply.infrastructure.observability import (
    get_pipeline_logger,
    setup_logging,
)
from stablecoin_supply.ingestion.exceptions import (
    ErrorCategory,
    ProviderChainError,
    SupplyPipelineError,
)
from stablecoin_supply.orchestration.container import SupplyDependencyContainer
from stablecoin_supply.orchestration.workflows.update_workflow import WorkflowResult

EXIT_OK = 0
EXIT_UNEXPECTED = 1
EXIT_USAGE = 2
EXIT_PROVIDER_RETRYABLE = 3
EXIT_PROVIDER_PERMANENT = 4
EXIT_VALIDATION = 5
EXIT_FILESYSTEM = 6

DATA_ERROR_CATEGORIES = (ErrorCategory.VALIDATION, ErrorCategory.PARSE)


def exit_code_for(error: BaseException) -> int:
    """Map a raised error to the process exit code."""
    if not isinstance(error, SupplyPipelineError):
        return EXIT_UNEXPECTED
    if isinstance(error, ProviderChainError):
        # every provider answered, but with unusable data
        if error.errors and all(e.category in DATA_ERROR_CATEGORIES for e in error.errors):
            return EXIT_VALIDATION
        return EXIT_PROVIDER_RETRYABLE if error.retryable else EXIT_PROVIDER_PERMANENT
    if error.category in (ErrorCategory.NETWORK, ErrorCategory.HTTP):
        return EXIT_PROVIDER_RETRYABLE if error.retryable else EXIT_PROVIDER_PERMANENT
    if error.category is ErrorCategory.FILESYSTEM:
        return EXIT_FILESYSTEM
    if error.category in DATA_ERROR_CATEGORIES:
        return EXIT_VALIDATION
    return EXIT_UNEXPECTED


def build_parser(coins: list[str]) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stablecoin-update",
        description="Fetch stablecoin supply data and update history and snapshot files",
    )
    parser.add_argument("--coin", required=True, choices=coins, help="Coin to update")
    parser.add_argument("--config-dir", default=None, help="Configuration directory")
    parser.add_argument("--data-dir", default=None, help="Override data directory")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Override log level",
    )
    parser.add_argument(
        "--console-logs",
        action="store_true",
        help="Human-readable logs instead of JSON",
    )
    return parser


def _peek_config_dir(argv: list[str]) -> str | None:
    peek = argparse.ArgumentParser(add_help=False)
    peek.add_argument("--config-dir", default=None)
    known, _ = peek.parse_known_args(argv)
    return known.config_dir


async def run_update(config: ConfigState, coin: str) -> WorkflowResult:
    async with SupplyDependencyContainer(config) as container:
        return await container.update_workflow(coin).run()


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv

    try:
        config = get_config(_peek_config_dir(argv))
    except Exception as e:
        print(f"ERROR: invalid configuration: {e}", file=sys.stderr)
        return EXIT_USAGE

    parser = build_parser(sorted(config.coins))
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        return EXIT_OK if e.code == 0 else EXIT_USAGE

    overrides = {}
    if args.data_dir:
        overrides["data_dir"] = args.data_dir
    if args.log_level:
        overrides["logging"] = config.logging.model_copy(update={"level": args.log_level})
    if overrides:
        config = config.model_copy(update=overrides)

    setup_logging(
        level=config.logging.level,
        json_logs=config.logging.json_logs and not args.console_logs,
    )
    log = get_pipeline_logger("cli", coin=args.coin)

    try:
        result = asyncio.run(run_update(config, args.coin))
    except Exception as e:
        code = exit_code_for(e)
        log.error(
            "update_aborted",
            error_type=type(e).__name__,
            error=str(e),
            exit_code=code,
        )
        return code

    log.info("update_succeeded", **result.to_dict())
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
