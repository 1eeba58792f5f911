"""Table-size sweep reporting empirical versus theoretical false-positive rates.

For every table size the hash count is derived from the bits available per
inserted item, a fresh filter is analyzed, and one row is reported.

Run with:

    python -m bf_prime.sweep --items 10000 --start 10000 --stop 100000
"""
from __future__ import annotations

import argparse
import logging
import random
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence

from .analyzer import FalsePositiveAnalyzer, expected_false_positive_rate, optimal_hash_count
from .config import AnalyzerConfig, SweepConfig
from .errors import ConfigurationError
from .membership_filter import MembershipFilter

logger = logging.getLogger(__name__)


@dataclass
class SweepRow:
    table_size: int
    num_hashes: int
    false_positives: int
    num_probes: int
    empirical_rate: float
    expected_rate: float


def run_sweep(config: SweepConfig, rng: Optional[random.Random] = None) -> Iterator[SweepRow]:
    """Analyze one filter per table size in ``config`` and yield a row for each."""
    if rng is None:
        rng = random.Random(config.seed)

    for table_size in config.table_sizes():
        k = optimal_hash_count(table_size, config.num_items)
        bloom = MembershipFilter(table_size, k, rng=rng)
        analyzer = FalsePositiveAnalyzer(
            bloom, config.num_items, config.num_probes, rng=rng, config=config.analyzer
        )
        rate = analyzer.analyze()
        logger.debug("Analyzed table_size=%d\n%s", table_size, analyzer.verbose_results())

        yield SweepRow(
            table_size=table_size,
            num_hashes=k,
            false_positives=analyzer.false_positive_count,
            num_probes=analyzer.num_probes,
            empirical_rate=rate,
            expected_rate=expected_false_positive_rate(table_size, k, config.num_items),
        )


def format_table(rows: Sequence[SweepRow]) -> str:
    """Render sweep rows as a fixed-width table."""
    header = (
        f"{'Table size':>12}{'k':>5}{'False pos.':>14}"
        f"{'Empirical':>14}{'Expected':>14}{'Diff (%)':>12}"
    )
    out: List[str] = [header, "-" * len(header)]
    for row in rows:
        if row.expected_rate > 0:
            diff = f"{(row.empirical_rate - row.expected_rate) / row.expected_rate * 100:+.2f}%"
        else:
            diff = "N/A"
        out.append(
            f"{row.table_size:>12}{row.num_hashes:>5}"
            f"{f'{row.false_positives}/{row.num_probes}':>14}"
            f"{row.empirical_rate:>14.6f}{row.expected_rate:>14.6f}{diff:>12}"
        )
    return "\n".join(out)


def build_parser() -> argparse.ArgumentParser:
    defaults = SweepConfig()
    parser = argparse.ArgumentParser(
        prog="bf_prime.sweep",
        description="Measure false-positive rates across Bloom filter table sizes.",
    )
    parser.add_argument("--items", type=int, default=defaults.num_items,
                        help="strings inserted into each filter")
    parser.add_argument("--probes", type=int, default=defaults.num_probes,
                        help="strings checked against each filter")
    parser.add_argument("--start", type=int, default=defaults.start, help="first table size")
    parser.add_argument("--stop", type=int, default=defaults.stop,
                        help="last table size (inclusive)")
    parser.add_argument("--step", type=int, default=defaults.step, help="table size increment")
    parser.add_argument("--length", type=int, default=defaults.analyzer.string_length,
                        help="characters per generated string")
    parser.add_argument("--seed", type=int, default=None, help="seed for reproducible runs")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        config = SweepConfig(
            num_items=args.items,
            num_probes=args.probes,
            start=args.start,
            stop=args.stop,
            step=args.step,
            seed=args.seed,
            analyzer=AnalyzerConfig(string_length=args.length),
        )
    except ConfigurationError as exc:
        parser.error(str(exc))

    print("=" * 60)
    print(f"False-positive sweep: {config.num_items} items, {config.num_probes} probes")
    print("=" * 60)
    print()
    print(format_table(list(run_sweep(config))))
    print()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
