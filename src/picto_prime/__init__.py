"""picto_prime - find primes that look like pictures."""

__version__ = "0.1.0"

from picto_prime.core.sieve import SmallPrimeSieve, generate_n_primes
from picto_prime.search.config import SearchConfig
from picto_prime.search.controller import PrimeSearch, SearchResult, find_prime

__all__ = [
    "SmallPrimeSieve",
    "generate_n_primes",
    "SearchConfig",
    "PrimeSearch",
    "SearchResult",
    "find_prime",
]
