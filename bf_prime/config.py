"""Tunable parameters for false-positive analysis runs."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .errors import ConfigurationError


@dataclass
class AnalyzerConfig:
    """How the analyzer synthesizes its random strings.

    Attributes:
        string_length: Characters per generated string
        alphabet_size: Characters are drawn from code points ``0 .. alphabet_size - 1``
        max_attempts: Cap on draws per generated collection, None for no cap
    """

    string_length: int = 5
    alphabet_size: int = 255
    max_attempts: Optional[int] = None

    def __post_init__(self) -> None:
        if self.string_length < 0:
            raise ConfigurationError("string_length must not be negative")
        if self.alphabet_size <= 0:
            raise ConfigurationError("alphabet_size must be positive")
        if self.max_attempts is not None and self.max_attempts <= 0:
            raise ConfigurationError("max_attempts must be positive when set")

    @property
    def sample_space(self) -> int:
        """Number of distinct strings that can be generated."""
        return self.alphabet_size ** self.string_length


@dataclass
class SweepConfig:
    """Parameters for a table-size sweep.

    Attributes:
        num_items: Strings inserted into every filter
        num_probes: Strings checked against every filter
        start: First table size
        stop: Last table size (inclusive)
        step: Table size increment
        seed: Seed for the shared random source, None for an unseeded run
        analyzer: String generation settings
    """

    num_items: int = 10_000
    num_probes: int = 10_000
    start: int = 10_000
    stop: int = 100_000
    step: int = 10_000
    seed: Optional[int] = None
    analyzer: AnalyzerConfig = field(default_factory=AnalyzerConfig)

    def __post_init__(self) -> None:
        if self.num_items <= 0:
            raise ConfigurationError("num_items must be positive")
        if self.num_probes <= 0:
            raise ConfigurationError("num_probes must be positive")
        if self.start <= 0 or self.step <= 0:
            raise ConfigurationError("start and step must be positive")
        if self.stop < self.start:
            raise ConfigurationError("stop must not be smaller than start")
        if self.num_items + self.num_probes > self.analyzer.sample_space:
            raise ConfigurationError(
                f"{self.num_items + self.num_probes} distinct strings requested but only "
                f"{self.analyzer.sample_space} exist of length {self.analyzer.string_length}"
            )

    def table_sizes(self) -> range:
        return range(self.start, self.stop + 1, self.step)
