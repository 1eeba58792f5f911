"""Empirical false-positive measurement for :class:`MembershipFilter`.

The analyzer draws two disjoint collections of random strings, inserts the
first into a filter and queries the filter with the second. Every probe the
filter reports present is a false positive by construction.
"""
from __future__ import annotations

import logging
import math
import random
from typing import AbstractSet, List, Optional, Tuple

from .config import AnalyzerConfig
from .errors import ConfigurationError, GenerationError
from .membership_filter import PRIME_BASES, MembershipFilter

logger = logging.getLogger(__name__)


def random_string(rng: random.Random, length: int, alphabet_size: int) -> str:
    """Return ``length`` characters drawn from code points ``0 .. alphabet_size - 1``."""
    return "".join(chr(rng.randrange(alphabet_size)) for _ in range(length))


def generate_strings_not_in(
    excluded: AbstractSet[str],
    count: int,
    rng: random.Random,
    config: AnalyzerConfig,
) -> List[str]:
    """Generate ``count`` distinct random strings, none of them in ``excluded``.

    The result is sorted so that a seeded run does not depend on set ordering.

    Raises:
        GenerationError: If the sample space cannot hold ``count`` strings
            outside ``excluded``, or ``config.max_attempts`` draws were not enough.
    """
    reachable = sum(
        1 for s in excluded
        if len(s) == config.string_length and all(ord(c) < config.alphabet_size for c in s)
    )
    available = config.sample_space - reachable
    if count > available:
        raise GenerationError(
            f"cannot generate {count} distinct strings of length "
            f"{config.string_length}: only {available} available"
        )

    found: set = set()
    attempts = 0
    while len(found) < count:
        if config.max_attempts is not None and attempts >= config.max_attempts:
            raise GenerationError(
                f"generated only {len(found)} of {count} strings "
                f"in {attempts} attempts"
            )
        attempts += 1
        candidate = random_string(rng, config.string_length, config.alphabet_size)
        if candidate not in excluded:
            found.add(candidate)

    logger.debug("Generated %d strings in %d attempts", count, attempts)
    return sorted(found)


def generate_strings(count: int, rng: random.Random, config: AnalyzerConfig) -> List[str]:
    """Generate ``count`` distinct random strings, sorted."""
    return generate_strings_not_in(frozenset(), count, rng, config)


def expected_false_positive_rate(table_size: int, num_hashes: int, num_items: int) -> float:
    """Theoretical false-positive rate ``(1 - e^(-kn/m))^k``."""
    return (1.0 - math.exp(-num_hashes * num_items / table_size)) ** num_hashes


def optimal_hash_count(table_size: int, num_items: int) -> int:
    """Hash count ``floor(floor(m / n) * ln 2)``, clamped to ``1 .. len(PRIME_BASES)``."""
    bits_per_item = table_size // num_items if num_items else table_size
    k = int(bits_per_item * math.log(2))
    return min(len(PRIME_BASES), max(1, k))


class FalsePositiveAnalyzer:
    """Measures the false-positive rate of one filter.

    Args:
        bloom: Filter under test; the analyzer inserts into it.
        num_insert: Number of distinct strings to insert.
        num_probe: Number of distinct strings, disjoint from the inserted
            ones, to check.
        rng: Random source for string generation.
        config: String generation settings.
    """

    def __init__(
        self,
        bloom: MembershipFilter,
        num_insert: int,
        num_probe: int,
        *,
        rng: Optional[random.Random] = None,
        config: Optional[AnalyzerConfig] = None,
    ) -> None:
        if num_insert < 0:
            raise ConfigurationError("num_insert must not be negative")
        if num_probe <= 0:
            raise ConfigurationError("num_probe must be positive")
        if rng is None:
            rng = random.Random()
        if config is None:
            config = AnalyzerConfig()

        self._filter = bloom
        self._config = config

        inserted = generate_strings(num_insert, rng, config)
        probes = generate_strings_not_in(frozenset(inserted), num_probe, rng, config)
        self._inserted: Tuple[str, ...] = tuple(inserted)
        self._probes: Tuple[str, ...] = tuple(probes)
        self._false_positives: Optional[int] = None

    def analyze(self) -> float:
        """Insert the inserted set, check the probes and return the false-positive rate."""
        self._filter.insert(self._inserted)
        self._false_positives = self._filter.contains(self._probes)

        rate = self._false_positives / len(self._probes)
        logger.info(
            "table_size=%d k=%d items=%d: %d/%d false positives (%.6f)",
            self._filter.table_size,
            self._filter.num_hash_functions,
            len(self._inserted),
            self._false_positives,
            len(self._probes),
            rate,
        )
        return rate

    @property
    def filter(self) -> MembershipFilter:
        return self._filter

    @property
    def inserted_items(self) -> Tuple[str, ...]:
        return self._inserted

    @property
    def probe_items(self) -> Tuple[str, ...]:
        return self._probes

    @property
    def num_inserted(self) -> int:
        return len(self._inserted)

    @property
    def num_probes(self) -> int:
        return len(self._probes)

    @property
    def false_positive_count(self) -> Optional[int]:
        """False positives seen by the last :meth:`analyze`, or None before any run."""
        return self._false_positives

    @property
    def false_positive_rate(self) -> Optional[float]:
        """False positives over probes checked, or None before any run."""
        if self._false_positives is None:
            return None
        return self._false_positives / len(self._probes)

    def expected_rate(self) -> float:
        """Theoretical rate for this filter's size, hash count and insert count."""
        return expected_false_positive_rate(
            self._filter.table_size,
            self._filter.num_hash_functions,
            len(self._inserted),
        )

    def verbose_results(self) -> str:
        """Human-readable summary of the filter and the last run."""
        lines = [
            f"Array length: {self._filter.table_size}",
            f"Num items: {len(self._inserted)}",
            f"Prime bases: {list(self._filter.hash_bases)}",
        ]
        if self._false_positives is None:
            lines.append("False positives: not analyzed")
        else:
            lines.append(
                f"False positives: {self._false_positives}/{len(self._probes)}"
                f" = {self.false_positive_rate:.6f}"
            )
        lines.append(f"Expected rate: {self.expected_rate():.6f}")
        lines.append(f"Filter digest: {self._filter.digest()}")
        return "\n".join(lines)
