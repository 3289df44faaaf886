"""Shared fixtures: scripted primality oracles."""

import sys
import textwrap

import pytest

from picto_prime.search.oracle import Verdict, VerdictStatus

TRIAL_DIVISION_ORACLE = textwrap.dedent('''
    import sys

    n = int(sys.argv[1])
    is_prime = n > 1 and all(n % d for d in range(2, int(n ** 0.5) + 1))
    print(f"{n:X} ({n}) is {'prime' if is_prime else 'not prime'}")
''')


class ScriptedOracle:
    """In-process oracle that declares a fixed set of numbers prime."""

    def __init__(self, primes=()):
        self.primes = {str(p) for p in primes}
        self.batches = []

    def test_batch(self, candidates):
        self.batches.append(list(candidates))
        return [
            Verdict(c, VerdictStatus.PRIME, value=c, output=f"{c} is prime")
            if c in self.primes
            else Verdict(c, VerdictStatus.NOT_PRIME, output=f"{c} is not prime")
            for c in candidates
        ]

    @property
    def seen(self):
        return [c for batch in self.batches for c in batch]


@pytest.fixture
def scripted_oracle():
    return ScriptedOracle


@pytest.fixture
def oracle_script(tmp_path):
    """Path to a small oracle program that answers like `openssl prime`."""
    path = tmp_path / "oracle.py"
    path.write_text(TRIAL_DIVISION_ORACLE)
    return path


@pytest.fixture
def oracle_command(oracle_script):
    return (sys.executable, str(oracle_script))
