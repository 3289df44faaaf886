"""Visually constrained randomized prime search."""

from picto_prime.search.config import SearchConfig
from picto_prime.search.controller import PrimeSearch, SearchResult, SearchState, find_prime
from picto_prime.search.errors import (
    NoEligiblePositionError,
    OracleError,
    OracleUnavailableError,
    PictoPrimeError,
)
from picto_prime.search.generator import CandidateGenerator, TestedSet, fingerprint
from picto_prime.search.oracle import (
    OracleClient,
    Verdict,
    VerdictStatus,
    extract_value,
    parse_verdict,
)
from picto_prime.search.sophie import find_almost_sophie_germain, sophie_germain_multipliers
from picto_prime.search.substitution import DEFAULT_SUBSTITUTIONS, DigitSubstitutions
from picto_prime.search.thresholds import Passes

__all__ = [
    # Controller
    'PrimeSearch',
    'SearchConfig',
    'SearchResult',
    'SearchState',
    'find_prime',
    # Generation
    'CandidateGenerator',
    'TestedSet',
    'fingerprint',
    'DigitSubstitutions',
    'DEFAULT_SUBSTITUTIONS',
    'Passes',
    # Oracle
    'OracleClient',
    'Verdict',
    'VerdictStatus',
    'extract_value',
    'parse_verdict',
    # Companion search
    'find_almost_sophie_germain',
    'sophie_germain_multipliers',
    # Errors
    'PictoPrimeError',
    'OracleError',
    'OracleUnavailableError',
    'NoEligiblePositionError',
]
