"""Search controller: drives generation, oracle batches and anchor adaptation.

The search walks outward from a seed digit string one look-alike digit at a
time:

1. Generate a batch of unseen single-digit mutations of the keyframe.
2. Send the batch to the primality oracle, one process per candidate.
3. Stop at the first prime (in submission order).
4. Otherwise adapt the anchor:
   - rekey: every ``len(seed)`` distinct candidates (or after an empty
     batch), drift the keyframe by one more digit;
   - restart: every ``restart_factor * len(seed)`` distinct candidates,
     snap the keyframe back to a mutation of the original;
   - degenerate: every ``degenerate_every`` empty batches, replace both the
     keyframe and the original with a mutation drawn from all ten digits.

The loop has no timeout. It ends with a prime or with an oracle failure.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, List, Optional

import numpy as np
from tqdm import tqdm

from picto_prime.core.sieve import SmallPrimeSieve
from picto_prime.search.config import SearchConfig
from picto_prime.search.errors import NoEligiblePositionError
from picto_prime.search.generator import CandidateGenerator, TestedSet
from picto_prime.search.oracle import OracleClient, Verdict
from picto_prime.search.sophie import find_almost_sophie_germain
from picto_prime.search.substitution import DEFAULT_SUBSTITUTIONS, DigitSubstitutions
from picto_prime.search.thresholds import Passes

logger = logging.getLogger(__name__)


class SearchState(Enum):
    INITIALIZING = "initializing"
    SEARCHING = "searching"
    FOUND = "found"
    COMPANION_SEARCH = "companion_search"
    COMPLETED = "completed"


@dataclass(frozen=True)
class SearchResult:
    """Outcome of a successful search."""
    prime: str
    attempts: int
    simultaneous: int
    distinct_tested: int
    sophie_germain: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            'prime': self.prime,
            'attempts': self.attempts,
            'simultaneous': self.simultaneous,
            'distinct_tested': self.distinct_tested,
        }
        if self.sophie_germain is not None:
            d['sophie_germain'] = self.sophie_germain
        return d


def validate_seed(seed: str) -> str:
    seed = seed.strip()
    if not seed.isdigit() or not seed.isascii():
        raise ValueError(f"seed must be a string of decimal digits, got {seed!r}")
    if len(seed) < 3:
        raise ValueError(f"seed must have at least 3 digits, got {len(seed)}")
    return seed


class PrimeSearch:
    """Search for a prime that looks like ``seed``.

    Args:
        seed: Digit string to start from.
        config: Search configuration.
        oracle: Primality oracle; anything with ``test_batch(candidates)``.
            Defaults to an ``OracleClient`` built from the config.
        substitutions: Digit tables. Defaults to the built-in look-alikes.
        rng: NumPy random generator. Defaults to one seeded from the config.
        sieve: Small-prime sieve. Defaults to the first
            ``config.sieve_size`` primes.
    """

    def __init__(
        self,
        seed: str,
        config: Optional[SearchConfig] = None,
        oracle=None,
        substitutions: DigitSubstitutions = DEFAULT_SUBSTITUTIONS,
        rng: Optional[np.random.Generator] = None,
        sieve: Optional[SmallPrimeSieve] = None,
    ):
        self.state = SearchState.INITIALIZING
        self.config = config or SearchConfig()
        self.oracle = oracle if oracle is not None else OracleClient(
            self.config.oracle_command, timeout=self.config.oracle_timeout,
        )
        self.substitutions = substitutions
        self.rng = rng if rng is not None else np.random.default_rng(self.config.seed)

        self.generator = CandidateGenerator(
            substitutions,
            sieve=sieve if sieve is not None else SmallPrimeSieve(self.config.sieve_size),
            rng=self.rng,
            max_generation_attempts=self.config.max_generation_attempts,
            max_index_retries=self.config.max_index_retries,
        )

        self.original = substitutions.fix_last_digit(validate_seed(seed))
        self.keyframe = self.original
        self.tested = TestedSet()
        self.attempts = 0
        self.failed_viable = 0
        self.simultaneous = self.config.resolve_simultaneous()

        self.rekey_at = len(self.keyframe)
        self.rekey_check = Passes(self.rekey_at)
        self.restart_check = Passes(self.rekey_at * self.config.restart_factor)
        self.degenerate_check = Passes(self.config.degenerate_every)

    def _replace_anchor(self, anchor: str, pool: Optional[str] = None) -> Optional[str]:
        """Pick a new anchor one substitution away from ``anchor``.

        An untested candidate is preferred. When the whole neighbourhood has
        been tested the anchor still moves, onto an already tested neighbour.
        Returns None only if ``anchor`` has nothing to substitute.
        """
        candidate = self.generator.generate_unique(
            self.tested,
            anchor,
            pool=pool,
            max_attempts=self.config.max_generation_attempts,
            record=False,
        )
        if candidate is not None:
            return candidate
        try:
            return self.generator.mutate(anchor, pool)
        except NoEligiblePositionError:
            return None

    def rekey(self) -> None:
        """Drift the keyframe by one more substitution."""
        keyframe = self._replace_anchor(self.keyframe)
        if keyframe is not None:
            logger.debug("Rekey %s -> %s", self.keyframe, keyframe)
            self.keyframe = keyframe

    def restart(self) -> None:
        """Move the keyframe back to a single substitution of the original."""
        keyframe = self._replace_anchor(self.original)
        if keyframe is not None:
            logger.debug("Restart from original, keyframe %s", keyframe)
            self.keyframe = keyframe

    def degenerate(self) -> None:
        """Escape a stuck neighbourhood using the full digit pool."""
        anchor = self._replace_anchor(self.original, pool=self.config.degenerate_pool)
        if anchor is not None:
            logger.info(
                "No viable candidates after %d batches, new anchor %s",
                self.failed_viable, anchor,
            )
            self.original = anchor
            self.keyframe = anchor

    def adapt(self, batch_empty: bool) -> None:
        """Apply every anchor change whose threshold fired."""
        if self.rekey_check(len(self.tested)) or batch_empty:
            self.rekey()
        if self.restart_check(len(self.tested)):
            self.restart()
        if self.degenerate_check(self.failed_viable):
            self.degenerate()

    def step(self) -> List[Verdict]:
        """Run one generate/test/adapt iteration.

        Returns:
            The prime verdicts of the batch in submission order. Anchors are
            only adapted when the list is empty.
        """
        batch = self.generator.generate_batch(self.tested, self.keyframe, self.simultaneous)

        verdicts: List[Verdict] = self.oracle.test_batch(batch) if batch else []
        primes = [v for v in verdicts if v.is_prime]
        if primes:
            return primes

        self.attempts += 1
        if not batch:
            self.failed_viable += 1
        self.adapt(batch_empty=not batch)
        return []

    def _result(self, verdict: Verdict) -> SearchResult:
        return SearchResult(
            prime=verdict.value,
            attempts=self.attempts,
            simultaneous=self.simultaneous,
            distinct_tested=len(self.tested),
        )

    def _with_companion(self, primes: List[Verdict]) -> Optional[SearchResult]:
        self.state = SearchState.COMPANION_SEARCH
        for verdict in primes:
            companion = find_almost_sophie_germain(
                verdict.value, self.oracle, self.simultaneous, progress=self.config.progress,
            )
            if companion is not None:
                self.state = SearchState.COMPLETED
                return replace(self._result(verdict), sophie_germain=companion)
        return None

    def run(self) -> SearchResult:
        """Search until a prime (and, in Sophie mode, its companion) is found."""
        self.state = SearchState.SEARCHING
        logger.info(
            "Starting process, rekey at %d distinct candidates, with %d checks each attempt.",
            self.rekey_at, self.simultaneous,
        )

        with tqdm(desc="Searching", unit="batch", leave=False,
                  disable=not self.config.progress) as pbar:
            while True:
                primes = self.step()
                pbar.update(1)
                pbar.set_postfix(tested=len(self.tested), failed=self.failed_viable)

                if not primes:
                    logger.debug("Attempt %d, %d distinct tested", self.attempts, len(self.tested))
                    continue

                self.state = SearchState.FOUND
                logger.info("Found prime after %d attempts", self.attempts)

                if not self.config.sophie:
                    return self._result(primes[0])

                result = self._with_companion(primes)
                if result is not None:
                    return result

                # No companion for any prime in the batch: keep searching.
                self.state = SearchState.SEARCHING
                self.attempts += 1
                self.adapt(batch_empty=False)


def find_prime(
    seed: str,
    sophie: bool = False,
    config: Optional[SearchConfig] = None,
    **kwargs,
) -> SearchResult:
    """Convenience wrapper: run a PrimeSearch for seed and return its result."""
    config = config or SearchConfig()
    if sophie:
        config = replace(config, sophie=True)
    return PrimeSearch(seed, config=config, **kwargs).run()
