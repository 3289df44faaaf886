"""Configuration for a prime search."""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Tuple

from picto_prime.search.oracle import DEFAULT_ORACLE_COMMAND
from picto_prime.search.substitution import DIGITS


@dataclass
class SearchConfig:
    """Configuration for the visually constrained prime search."""

    # Parallelism (None = number of CPUs on the host)
    simultaneous: Optional[int] = None

    # Companion search for an (almost) Sophie Germain prime
    sophie: bool = False

    # Candidate generation
    sieve_size: int = 2000
    max_generation_attempts: int = 256
    max_index_retries: int = 64

    # Anchor adaptation
    restart_factor: int = 4      # restart every restart_factor * len(seed) candidates
    degenerate_every: int = 160  # failed batches before escaping with the full digit set
    degenerate_pool: str = DIGITS

    # Oracle
    oracle_command: Tuple[str, ...] = DEFAULT_ORACLE_COMMAND
    oracle_timeout: Optional[float] = None

    # Reproducibility and output
    seed: Optional[int] = None
    progress: bool = False

    def __post_init__(self):
        self.oracle_command = tuple(self.oracle_command)
        if self.simultaneous is not None and self.simultaneous < 1:
            raise ValueError(f"simultaneous must be >= 1, got {self.simultaneous}")
        if self.restart_factor < 1:
            raise ValueError(f"restart_factor must be >= 1, got {self.restart_factor}")
        if self.degenerate_every < 1:
            raise ValueError(f"degenerate_every must be >= 1, got {self.degenerate_every}")

    def resolve_simultaneous(self) -> int:
        return self.simultaneous or os.cpu_count() or 1

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d['oracle_command'] = list(self.oracle_command)
        return d
