"""Exception hierarchy for the Bloom filter analysis package."""

from __future__ import annotations


class BloomAnalysisError(Exception):
    """Base exception for all filter and analyzer errors."""
    pass


class ConfigurationError(BloomAnalysisError, ValueError):
    """Raised when a filter, analyzer or sweep is built with invalid parameters."""
    pass


class GenerationError(BloomAnalysisError):
    """Raised when the requested random strings cannot be generated."""
    pass
