"""Small-prime generation and trial-division rejection.

The search never proves primality itself. The sieve here only exists to
reject obviously composite candidates before paying for an oracle call.
"""

from __future__ import annotations

import math
from typing import Iterable

import numpy as np


def _numpy_sieve(limit: int) -> np.ndarray:
    """NumPy-based Sieve of Eratosthenes.

    Args:
        limit: Upper bound for prime generation.

    Returns:
        Array of prime numbers up to limit.
    """
    if limit < 2:
        return np.array([], dtype=np.int64)

    is_prime = np.ones(limit + 1, dtype=bool)
    is_prime[0] = False
    is_prime[1] = False

    for i in range(2, int(np.sqrt(limit)) + 1):
        if is_prime[i]:
            is_prime[i*i::i] = False

    return np.nonzero(is_prime)[0].astype(np.int64)


def generate_primes(limit: int) -> np.ndarray:
    """Generate all prime numbers up to and including limit.

    Args:
        limit: Upper bound for prime generation (inclusive).

    Returns:
        Array of prime numbers up to limit.

    Raises:
        ValueError: If limit is less than 2.
    """
    if limit < 2:
        raise ValueError(f"Limit must be >= 2, got {limit}")

    return _numpy_sieve(limit)


def generate_n_primes(n: int) -> np.ndarray:
    """Generate the first n prime numbers, ascending.

    Uses the prime number theorem to estimate upper bound, then generates
    primes up to that bound and returns the first n.

    Args:
        n: Number of primes to generate.

    Returns:
        Array of the first n prime numbers.

    Raises:
        ValueError: If n is less than 1.
    """
    if n < 1:
        raise ValueError(f"n must be >= 1, got {n}")

    if n == 1:
        return np.array([2], dtype=np.int64)

    upper_bound = max(100, int(n * (np.log(n) + np.log(np.log(n + 1)) + 2)))

    primes = generate_primes(upper_bound)
    while len(primes) < n:
        upper_bound = int(upper_bound * 1.5)
        primes = generate_primes(upper_bound)

    return primes[:n]


class SmallPrimeSieve:
    """Fixed rejection set built from the first ``count`` primes.

    ``is_possibly_prime`` answers "not divisible by any sieve prime". It
    never rejects a prime larger than the sieve range, but happily accepts
    composites whose factors are all large.
    """

    def __init__(self, count: int = 2000, primes: Iterable[int] | None = None):
        if primes is None:
            primes = generate_n_primes(count)
        self.primes: tuple[int, ...] = tuple(int(p) for p in primes)
        if not self.primes:
            raise ValueError("sieve needs at least one prime")
        # One gcd against the primorial replaces len(primes) modulo operations
        # on candidates that run to hundreds of digits.
        self._product = math.prod(self.primes)

    def __len__(self) -> int:
        return len(self.primes)

    @property
    def largest(self) -> int:
        return self.primes[-1]

    def is_possibly_prime(self, candidate: int | str) -> bool:
        """Return False if candidate is divisible by any sieve prime."""
        n = int(candidate)
        return math.gcd(n, self._product) == 1
