"""Candidate generation by single-digit substitution.

Every candidate is the keyframe with exactly one digit swapped for a
visually similar one. A running set of SHA-256 fingerprints makes sure no
digit string is ever sent to the oracle twice during a search.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Iterable, List, Optional

import numpy as np

from picto_prime.core.sieve import SmallPrimeSieve
from picto_prime.search.errors import NoEligiblePositionError
from picto_prime.search.substitution import DEFAULT_SUBSTITUTIONS, DigitSubstitutions

logger = logging.getLogger(__name__)


def fingerprint(digits: str) -> bytes:
    """Fixed-size digest of a digit string."""
    return hashlib.sha256(digits.encode('ascii')).digest()


class TestedSet:
    """Append-only set of fingerprints of every candidate generated."""

    __test__ = False  # not a pytest test class

    def __init__(self, candidates: Iterable[str] = ()):
        self._digests: set[bytes] = set()
        for candidate in candidates:
            self.add(candidate)

    def add(self, candidate: str) -> None:
        self._digests.add(fingerprint(candidate))

    def __contains__(self, candidate: object) -> bool:
        if not isinstance(candidate, str):
            return False
        return fingerprint(candidate) in self._digests

    def __len__(self) -> int:
        return len(self._digests)

    def __repr__(self) -> str:
        return f"TestedSet(size={len(self)})"


class CandidateGenerator:
    """Produce novel digit strings from a keyframe.

    Args:
        substitutions: Digit tables used for every mutation.
        sieve: Small-prime sieve applied to single-candidate batches.
        rng: NumPy random generator (``np.random.default_rng(seed)``).
        max_generation_attempts: Inner iterations a whole batch may spend
            looking for unseen candidates before giving up.
        max_index_retries: Random index draws before falling back to a scan
            of the eligible positions.
    """

    def __init__(
        self,
        substitutions: DigitSubstitutions = DEFAULT_SUBSTITUTIONS,
        sieve: Optional[SmallPrimeSieve] = None,
        rng: Optional[np.random.Generator] = None,
        max_generation_attempts: int = 256,
        max_index_retries: int = 64,
    ):
        if max_generation_attempts < 1:
            raise ValueError(
                f"max_generation_attempts must be >= 1, got {max_generation_attempts}"
            )
        self.substitutions = substitutions
        self.sieve = sieve
        self.rng = rng if rng is not None else np.random.default_rng()
        self.max_generation_attempts = max_generation_attempts
        self.max_index_retries = max_index_retries

    def _eligible(self, digit: str, pool: Optional[str]) -> bool:
        if pool is not None:
            return any(p != digit for p in pool)
        return self.substitutions.can_replace(digit)

    def find_index(self, keyframe: str, pool: Optional[str] = None) -> int:
        """Pick a random position the mutation is allowed to touch.

        The last two positions are never eligible.

        Raises:
            NoEligiblePositionError: If no position qualifies.
        """
        upper = len(keyframe) - 2
        if upper < 1:
            raise NoEligiblePositionError(keyframe)

        for _ in range(self.max_index_retries):
            index = int(self.rng.integers(upper))
            if self._eligible(keyframe[index], pool):
                return index

        eligible = [i for i in range(upper) if self._eligible(keyframe[i], pool)]
        if not eligible:
            raise NoEligiblePositionError(keyframe)
        return eligible[int(self.rng.integers(len(eligible)))]

    def mutate(self, keyframe: str, pool: Optional[str] = None) -> str:
        """Return keyframe with one digit replaced.

        Replacements come from the substitution table, or from ``pool``
        (minus the digit being replaced) when one is given.
        """
        index = self.find_index(keyframe, pool)
        current = keyframe[index]
        if pool is None:
            choices = self.substitutions.replacements(current)
        else:
            choices = tuple(p for p in dict.fromkeys(pool) if p != current)
        replacement = choices[int(self.rng.integers(len(choices)))]
        return keyframe[:index] + replacement + keyframe[index + 1:]

    def _unique(
        self,
        tested: TestedSet,
        keyframe: str,
        pool: Optional[str],
        budget: Optional[int],
    ) -> tuple[Optional[str], int]:
        candidate = keyframe
        spent = 0
        while candidate in tested:
            if budget is not None and spent >= budget:
                return None, spent
            try:
                candidate = self.mutate(keyframe, pool)
            except NoEligiblePositionError:
                logger.debug("Keyframe %s has no substitutable digit", keyframe)
                return None, spent
            spent += 1
        return candidate, spent

    def generate_unique(
        self,
        tested: TestedSet,
        keyframe: str,
        pool: Optional[str] = None,
        max_attempts: Optional[int] = None,
        record: bool = True,
    ) -> Optional[str]:
        """Find a candidate near keyframe that was never generated before.

        The keyframe itself comes back when it has not been tested yet.
        Otherwise ``mutate`` is repeated until its result is unseen.

        Args:
            tested: Fingerprints of everything generated so far.
            keyframe: Anchor digit string.
            pool: Optional replacement pool overriding the substitution table.
            max_attempts: Give up after this many mutations. ``None`` means
                no bound.
            record: Add the result to ``tested``.

        Returns:
            The candidate, or None if the attempt budget ran out or the
            keyframe has no substitutable digit.
        """
        candidate, _ = self._unique(tested, keyframe, pool, max_attempts)
        if candidate is not None and record:
            tested.add(candidate)
        return candidate

    def generate_batch(self, tested: TestedSet, keyframe: str, count: int) -> List[str]:
        """Generate up to ``count`` distinct, never-seen candidates.

        Every slot is recorded in ``tested`` as soon as it is produced. The
        whole batch shares ``max_generation_attempts`` inner iterations, so
        an exhausted neighbourhood yields a short or empty batch rather than
        a stall. A batch of one is additionally run through the sieve and
        comes back empty when the candidate is obviously composite.
        """
        batch: List[str] = []
        budget = self.max_generation_attempts

        for _ in range(count):
            candidate, spent = self._unique(tested, keyframe, None, budget)
            budget -= spent
            if candidate is None:
                logger.debug(
                    "Generation budget exhausted after %d of %d candidates",
                    len(batch), count,
                )
                break
            tested.add(candidate)
            batch.append(candidate)

        if count == 1 and batch and self.sieve is not None:
            if not self.sieve.is_possibly_prime(batch[0]):
                return []

        return batch
