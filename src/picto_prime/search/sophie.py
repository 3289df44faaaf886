"""Search for an "almost" Sophie Germain companion of a found prime.

A Sophie Germain prime p has 2p + 1 prime as well. Here the multiplier is
allowed to grow, so the search looks for any prime of the form m * p + 1
for a short, fixed list of multipliers m. Such primes are handy for
discrete-log cryptography since the group order has a large prime factor.
"""

from __future__ import annotations

import logging
from itertools import islice
from typing import Iterator, Optional

from tqdm import tqdm

logger = logging.getLogger(__name__)


def sophie_germain_multipliers() -> Iterator[int]:
    """Yield 2, 4, 6, 8, then d * 10**e for e in 1..9 and d in 1..10."""
    yield from (2, 4, 6, 8)
    for exponent in range(1, 10):
        for digit in range(1, 11):
            yield digit * 10 ** exponent


MULTIPLIER_COUNT = sum(1 for _ in sophie_germain_multipliers())


def find_almost_sophie_germain(
    prime: str,
    oracle,
    simultaneous: int,
    progress: bool = False,
) -> Optional[str]:
    """Test m * prime + 1 for each multiplier, a batch at a time.

    Args:
        prime: Decimal string of the prime already found.
        oracle: Object with a ``test_batch(candidates)`` method.
        simultaneous: Candidates per oracle batch.
        progress: Show a tqdm progress bar.

    Returns:
        Decimal string of the first companion prime, or None once every
        multiplier has been tried.
    """
    if simultaneous < 1:
        raise ValueError(f"simultaneous must be >= 1, got {simultaneous}")

    p = int(prime)
    multipliers = sophie_germain_multipliers()

    with tqdm(total=MULTIPLIER_COUNT, desc="Sophie Germain", leave=False,
              disable=not progress) as pbar:
        while True:
            batch = [str(m * p + 1) for m in islice(multipliers, simultaneous)]
            if not batch:
                break

            verdicts = oracle.test_batch(batch)
            pbar.update(len(batch))

            for verdict in verdicts:
                if verdict.is_prime:
                    logger.info("Found companion prime %s", verdict.value)
                    return verdict.value

    logger.info("No companion prime found for %s", prime)
    return None
