#!/usr/bin/env python3
"""Generate a sample loan portfolio and export its loan report.

This script seeds an in-memory ledger with synthetic borrowers, loans and
payments, prints the dashboard metrics and writes the CSV loan report,
which can be fed back through ``LoanLedgerStore.import_csv``.
"""

import argparse
import sys
from datetime import date
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from loan_ledger.config import LedgerConfig, ScenarioConfig
from loan_ledger.logging import get_logger, setup_logging
from loan_ledger.scenarios import SamplePortfolioScenario
from loan_ledger.sinks import CsvFileSink
from loan_ledger.sinks.serialization import dataclass_to_dict

logger = get_logger(__name__)


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Generate a sample loan portfolio and export it as CSV"
    )
    parser.add_argument(
        "--borrowers",
        type=int,
        default=5,
        help="Number of borrowers to generate (default: 5)",
    )
    parser.add_argument(
        "--loans-per-borrower",
        type=int,
        default=2,
        help="Maximum loans per borrower (default: 2)",
    )
    parser.add_argument(
        "--payments-per-loan",
        type=int,
        default=3,
        help="Maximum partial payments per loan (default: 3)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducibility (default: SEED env var)",
    )
    parser.add_argument(
        "--as-of",
        type=date.fromisoformat,
        default=None,
        help="Portfolio date in YYYY-MM-DD (default: today)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("output"),
        help="Directory for the CSV report (default: output)",
    )
    parser.add_argument(
        "--log-format",
        choices=["standard", "json"],
        default="standard",
        help="Log output format (default: standard)",
    )

    args = parser.parse_args()

    ledger_config = LedgerConfig.from_env()
    setup_logging(ledger_config.log_level, args.log_format)
    logger.info("Ledger settings: %s", ledger_config.to_dict())

    scenario = SamplePortfolioScenario(
        seed=args.seed if args.seed is not None else ledger_config.seed,
        config=ScenarioConfig(
            num_borrowers=args.borrowers,
            loans_per_borrower=args.loans_per_borrower,
            payments_per_loan=args.payments_per_loan,
            as_of=args.as_of,
        ),
        ledger_config=ledger_config,
    )
    store = scenario.generate()

    metrics = store.calculate_metrics()
    logger.info("Dashboard metrics (%s): %s", ledger_config.currency, dataclass_to_dict(metrics))

    sink = CsvFileSink(args.output_dir)
    path = sink.write_loans(store)
    sink.close()
    logger.info("Loan report: %s", path)


if __name__ == "__main__":
    main()
