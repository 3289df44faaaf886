"""Core prime generation utilities."""

from picto_prime.core.sieve import SmallPrimeSieve, generate_n_primes, generate_primes

__all__ = [
    "SmallPrimeSieve",
    "generate_n_primes",
    "generate_primes",
]
