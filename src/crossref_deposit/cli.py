"""Command-line interface for crossref-deposit."""

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from crossref_deposit.clients import CrossrefDepositClient
from crossref_deposit.export import ConfigurationError, ExportArchiver
from crossref_deposit.pipeline import BatchOrchestrator
from crossref_deposit.registry import DepositStatusTracker, JsonDoiRegistry
from schemas.batch import DepositBatch

DEFAULT_EXPORT_DIR = Path("./workspace/exports")
DEFAULT_DEPOSIT_DIR = Path("./workspace/deposits")
DEFAULT_REGISTRY_PATH = Path("./workspace/dois.json")
SANDBOX_ENV_VAR = "CROSSREF_DEPOSIT_SANDBOX"


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the CLI."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def sandbox_from_env() -> bool:
    """Whether the sandbox environment variable is set to a true value."""
    return os.environ.get(SANDBOX_ENV_VAR, "").strip().lower() in ("1", "true", "yes", "on")


def load_batch(path: Path) -> DepositBatch:
    """Load and validate a batch file."""
    data = json.loads(path.read_text())
    return DepositBatch.model_validate(data)


def export_batch(args: argparse.Namespace) -> int:
    """Execute the export command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    batch_path = args.batch.resolve()
    if not batch_path.exists():
        logger.error(f"Batch file not found: {batch_path}")
        return 1

    try:
        batch = load_batch(batch_path)
        if not batch.submissions:
            logger.error(f"Batch file has no submissions: {batch_path}")
            return 1

        orchestrator = BatchOrchestrator(
            context=batch.context,
            archiver=ExportArchiver(args.output),
        )
        result = orchestrator.export(batch.submissions)

        logger.info(f"Exported {len(batch.submissions)} submission(s)")
        logger.info(f"  Output: {result.path}")

        if result.validation_errors:
            logger.warning(f"  Errors: {len(result.validation_errors)}")
            for error in result.validation_errors:
                logger.warning(f"    - {error.message}")

        return 0

    except ConfigurationError as e:
        logger.error(f"Cannot export: {e.message}")
        return 1
    except Exception as e:
        logger.error(f"Failed to export batch: {e}")
        return 1


def deposit_batch(args: argparse.Namespace) -> int:
    """Execute the deposit command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    batch_path = args.batch.resolve()
    if not batch_path.exists():
        logger.error(f"Batch file not found: {batch_path}")
        return 1

    config = {
        "timeout": args.timeout,
        "sandbox": args.sandbox or sandbox_from_env(),
        "headers": {
            "User-Agent": "crossref-deposit/1.0",
        },
    }

    try:
        batch = load_batch(batch_path)
        registry = JsonDoiRegistry(args.registry)
        for submission in batch.submissions:
            registry.register_submission(submission)

        with CrossrefDepositClient(config) as client:
            orchestrator = BatchOrchestrator(
                context=batch.context,
                archiver=ExportArchiver(args.export_dir),
                client=client,
                tracker=DepositStatusTracker(registry),
            )
            result = orchestrator.deposit(batch.submissions)

    except Exception as e:
        logger.error(f"Failed to deposit batch: {e}")
        return 1

    if result.errors_occurred:
        logger.error(f"Deposit failed: {result.message}")
        return 1

    logger.info(f"Deposited {len(batch.submissions)} submission(s)")
    logger.info(f"  Registry: {args.registry}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = argparse.ArgumentParser(
        prog="crossref-deposit",
        description="Export and deposit monograph metadata with Crossref",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
    )

    export_parser = subparsers.add_parser(
        "export",
        help="Write Crossref XML for a batch of submissions",
        description="Build Crossref 4.3.7 XML for every submission in a batch file. Several submissions are bundled into one .tar.gz archive.",
    )
    export_parser.add_argument(
        "--batch",
        type=Path,
        required=True,
        help="Path to the batch JSON file",
    )
    export_parser.add_argument(
        "--output",
        type=Path,
        default=DEFAULT_EXPORT_DIR,
        help=f"Output directory for exports (default: {DEFAULT_EXPORT_DIR})",
    )
    export_parser.set_defaults(func=export_batch)

    deposit_parser = subparsers.add_parser(
        "deposit",
        help="Deposit a batch of submissions with Crossref",
        description="Build Crossref XML for every submission in a batch file, deposit each one and record the outcome on its DOIs.",
    )
    deposit_parser.add_argument(
        "--batch",
        type=Path,
        required=True,
        help="Path to the batch JSON file",
    )
    deposit_parser.add_argument(
        "--registry",
        type=Path,
        default=DEFAULT_REGISTRY_PATH,
        help=f"DOI registry JSON file (default: {DEFAULT_REGISTRY_PATH})",
    )
    deposit_parser.add_argument(
        "--export-dir",
        type=Path,
        default=DEFAULT_DEPOSIT_DIR,
        help=f"Directory for temporary deposit files (default: {DEFAULT_DEPOSIT_DIR})",
    )
    deposit_parser.add_argument(
        "--timeout",
        type=float,
        default=30,
        help="Request timeout in seconds (default: 30)",
    )
    deposit_parser.add_argument(
        "--sandbox",
        action="store_true",
        help=f"Never contact Crossref (also enabled by {SANDBOX_ENV_VAR}=1)",
    )
    deposit_parser.set_defaults(func=deposit_batch)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
