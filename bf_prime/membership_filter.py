"""Bloom filter over strings using polynomial rolling hashes.

Each of the ``k`` hash functions is the same polynomial rolling hash evaluated
with a different prime base. The bases are drawn without replacement from a
fixed pool of 64 primes between 7 and 349, so a filter supports at most 64
hash functions. Arithmetic wraps at 64 bits like a signed machine integer.
"""
from __future__ import annotations

import logging
import random
from typing import Iterable, Iterator, Optional, Sequence, Tuple, Union

import xxhash

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

PRIME_BASES: Tuple[int, ...] = (
    7, 11, 13, 17, 19, 23, 29, 31, 37, 41, 47, 53,
    59, 61, 67, 71, 83, 89, 97, 101, 103, 107, 109, 113,
    127, 131, 137, 139, 149, 151, 157, 163, 167, 173, 179, 181, 191, 193,
    197, 199, 211, 223, 227, 229, 233, 239, 241, 251, 257, 263, 269, 271,
    277, 281, 283, 293, 307, 311, 313, 317, 331, 337, 347, 349,
)

_MASK64 = (1 << 64) - 1
_SIGN64 = 1 << 63


def polynomial_hash(item: str, base: int) -> int:
    """Return the 64-bit signed polynomial rolling hash of ``item``.

    ``hash = hash * base + ord(c)`` for every character, wrapping on overflow.
    """
    h = 0
    for ch in item:
        h = (h * base + ord(ch)) & _MASK64
    return h - (1 << 64) if h & _SIGN64 else h


def select_bases(count: int, rng: random.Random) -> Tuple[int, ...]:
    """Pick ``count`` distinct primes from :data:`PRIME_BASES`."""
    if count <= 0:
        raise ConfigurationError("num_hash_functions must be positive")
    if count > len(PRIME_BASES):
        raise ConfigurationError(
            f"too many hash functions requested: {count} > {len(PRIME_BASES)}"
        )
    return tuple(rng.sample(PRIME_BASES, count))


class MembershipFilter:
    """Fixed-size Bloom filter backed by a bytearray bitset.

    Bits are only ever set, never cleared, so an inserted item is always
    reported present. :meth:`digest` fingerprints the bit array so the state
    of two filters, e.g. from two seeded runs, can be compared cheaply.
    """

    def __init__(
        self,
        table_size: int,
        num_hash_functions: int,
        *,
        rng: Optional[random.Random] = None,
    ) -> None:
        """Initialize an empty filter.

        Args:
            table_size: Number of bits in the filter.
            num_hash_functions: Number of prime bases to draw (1..64).
            rng: Random source for base selection. A fresh unseeded
                ``random.Random`` is used when omitted.

        Raises:
            ConfigurationError: If either argument is not positive or more
                hash functions are requested than there are primes.
        """
        if table_size <= 0:
            raise ConfigurationError("table_size must be positive")
        if rng is None:
            rng = random.Random()
        self._setup(table_size, select_bases(num_hash_functions, rng))

    def _setup(self, table_size: int, bases: Tuple[int, ...]) -> None:
        self._table_size = table_size
        self._bases = bases
        self._bit_array = bytearray((table_size + 7) // 8)

        logger.debug(
            "MembershipFilter created: table_size=%d, bases=%s",
            table_size,
            bases,
        )

    @classmethod
    def from_bases(cls, table_size: int, bases: Sequence[int]) -> MembershipFilter:
        """Build a filter that hashes with exactly ``bases``."""
        bases = tuple(bases)
        if table_size <= 0:
            raise ConfigurationError("table_size must be positive")
        if not bases:
            raise ConfigurationError("at least one base is required")
        if len(bases) > len(PRIME_BASES):
            raise ConfigurationError(
                f"too many hash functions requested: {len(bases)} > {len(PRIME_BASES)}"
            )
        if len(set(bases)) != len(bases):
            raise ConfigurationError(f"bases must be distinct: {bases}")
        unknown = [b for b in bases if b not in PRIME_BASES]
        if unknown:
            raise ConfigurationError(f"bases not in the prime pool: {unknown}")

        bloom = cls.__new__(cls)
        bloom._setup(table_size, bases)
        return bloom

    # -- single items -------------------------------------------------------

    def add(self, item: str) -> None:
        """Insert ``item`` into the filter."""
        for bit_index in self.positions(item):
            self._bit_array[bit_index >> 3] |= 1 << (bit_index & 7)

    def update(self, items: Iterable[str]) -> None:
        """Insert all ``items`` into the filter."""
        for item in items:
            self.add(item)

    def __contains__(self, item: str) -> bool:
        """Return True if ``item`` may be present, False if definitely absent."""
        for bit_index in self.positions(item):
            if not (self._bit_array[bit_index >> 3] & (1 << (bit_index & 7))):
                return False
        return True

    def positions(self, item: str) -> Iterator[int]:
        """Yield the bit index for ``item`` under each base, in base order."""
        for base in self._bases:
            yield polynomial_hash(item, base) % self._table_size

    # -- single or batch ----------------------------------------------------

    def insert(self, items: Union[str, Iterable[str]]) -> None:
        """Insert one string or every string of an iterable."""
        if isinstance(items, str):
            self.add(items)
        else:
            self.update(items)

    def contains(self, items: Union[str, Iterable[str]]) -> Union[bool, int]:
        """Check one string (bool) or count how many of ``items`` may be present."""
        if isinstance(items, str):
            return items in self
        return sum(1 for item in items if item in self)

    # -- diagnostics --------------------------------------------------------

    @property
    def table_size(self) -> int:
        return self._table_size

    @property
    def num_hash_functions(self) -> int:
        return len(self._bases)

    @property
    def hash_bases(self) -> Tuple[int, ...]:
        """The prime bases chosen for this filter, in selection order."""
        return self._bases

    @property
    def bit_array(self) -> bytearray:
        """Expose the underlying bit array (primarily for inspection)."""
        return self._bit_array

    def bits_set(self) -> int:
        return sum(bin(byte).count("1") for byte in self._bit_array)

    def fill_ratio(self) -> float:
        """Fraction of the table's bits that are set."""
        return self.bits_set() / self._table_size

    def digest(self) -> str:
        """xxHash64 hex digest of the bit array."""
        return xxhash.xxh64(bytes(self._bit_array)).hexdigest()

    def __repr__(self) -> str:
        return (
            f"MembershipFilter(table_size={self._table_size}, "
            f"hash_bases={list(self._bases)})"
        )
