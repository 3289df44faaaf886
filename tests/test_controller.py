"""Tests for the search controller."""

import numpy as np
import pytest

from picto_prime.core.sieve import SmallPrimeSieve
from picto_prime.search.config import SearchConfig
from picto_prime.search.controller import PrimeSearch, SearchResult, SearchState, find_prime
from picto_prime.search.errors import OracleError
from picto_prime.search.oracle import Verdict, VerdictStatus
from picto_prime.search.substitution import DigitSubstitutions

SEED = "1234567890123"
TARGET = "7234567890123"  # first digit swapped 1 -> 7


def make_search(seed, oracle, **config_kwargs):
    config_kwargs.setdefault('simultaneous', 4)
    return PrimeSearch(
        seed,
        config=SearchConfig(**config_kwargs),
        oracle=oracle,
        rng=np.random.default_rng(2024),
        sieve=SmallPrimeSieve(50),
    )


class PositionalOracle:
    """Declares candidates prime by their position in the batch."""

    def __init__(self, prime_positions):
        self.prime_positions = prime_positions
        self.batches = []

    def test_batch(self, candidates):
        self.batches.append(list(candidates))
        return [
            Verdict(c, VerdictStatus.PRIME if i in self.prime_positions else VerdictStatus.NOT_PRIME,
                    value=c if i in self.prime_positions else None)
            for i, c in enumerate(candidates)
        ]


class FailingOracle:
    def test_batch(self, candidates):
        raise OracleError("boom")


class TestInitialization:
    """Tests for PrimeSearch construction."""

    def test_last_digit_fixed(self, scripted_oracle):
        """Test a seed ending in 0 gets a 3."""
        search = make_search("1234567890", scripted_oracle())
        assert search.original == "1234567893"
        assert search.keyframe == "1234567893"

    def test_last_digit_kept(self, scripted_oracle):
        """Test a seed ending in 1 is left alone."""
        search = make_search("1234567891", scripted_oracle())
        assert search.original == "1234567891"

    def test_thresholds(self, scripted_oracle):
        """Test rekey and restart cadence follow the seed length."""
        search = make_search(SEED, scripted_oracle())
        assert search.rekey_at == 13
        assert search.rekey_check.step == 13
        assert search.restart_check.step == 52
        assert search.degenerate_check.step == 160
        assert search.state is SearchState.INITIALIZING

    def test_default_parallelism(self, scripted_oracle):
        """Test batch size defaults to the CPU count."""
        search = make_search(SEED, scripted_oracle(), simultaneous=None)
        assert search.simultaneous >= 1

    def test_invalid_seeds(self, scripted_oracle):
        """Test seeds that are not digit strings or too short."""
        for seed in ("", "12", "12a45", "-12345"):
            with pytest.raises(ValueError):
                make_search(seed, scripted_oracle())


class TestRun:
    """Tests for PrimeSearch.run."""

    def test_seed_itself_prime(self, scripted_oracle):
        """Test the seed is the first candidate tested."""
        oracle = scripted_oracle(primes=[SEED])
        search = make_search(SEED, oracle)

        result = search.run()

        assert result == SearchResult(prime=SEED, attempts=0, simultaneous=4, distinct_tested=4)
        assert oracle.batches[0][0] == SEED
        assert search.state is SearchState.FOUND

    def test_finds_crafted_mutation(self, scripted_oracle):
        """Test the search reaches a one-digit neighbour declared prime."""
        oracle = scripted_oracle(primes=[TARGET])
        search = make_search(SEED, oracle)

        result = search.run()

        assert result.prime == TARGET
        assert result.simultaneous == 4
        assert result.attempts == len(oracle.batches) - 1
        assert result.distinct_tested == len(oracle.seen)
        assert len(set(oracle.seen)) == len(oracle.seen)
        assert result.sophie_germain is None

    def test_first_prime_in_submission_order(self):
        """Test that the earliest prime in a batch wins."""
        oracle = PositionalOracle(prime_positions={1, 3})
        result = make_search(SEED, oracle).run()

        assert result.prime == oracle.batches[0][1]
        assert result.attempts == 0

    def test_oracle_failure_propagates(self):
        """Test that an oracle fault aborts the search."""
        search = make_search(SEED, FailingOracle())
        with pytest.raises(OracleError):
            search.run()

    def test_no_duplicate_candidates(self, scripted_oracle):
        """Test that nothing is sent to the oracle twice across rekeys."""
        oracle = scripted_oracle()
        search = make_search(SEED, oracle)

        for _ in range(60):
            assert search.step() == []

        assert len(set(oracle.seen)) == len(oracle.seen)
        assert len(search.tested) == len(oracle.seen)
        assert search.attempts == 60
        assert all(len(c) == len(SEED) and c.endswith("3") for c in oracle.seen)


class TestAnchorAdaptation:
    """Tests for rekey, restart and degenerate."""

    def test_rekey_moves_keyframe(self, scripted_oracle):
        """Test a rekey drifts the keyframe by one substitution."""
        search = make_search(SEED, scripted_oracle())
        search.step()
        search.rekey()
        diffs = [i for i, (a, b) in enumerate(zip(SEED, search.keyframe)) if a != b]
        assert len(diffs) == 1
        assert search.original == SEED

    def test_rekey_threshold(self, scripted_oracle):
        """Test the rekey tracker advances once enough candidates are tested."""
        search = make_search(SEED, scripted_oracle())
        while len(search.tested) <= search.rekey_at:
            search.step()
        assert search.rekey_check.next > search.rekey_at

    def test_rekey_forced_on_empty_batch(self, scripted_oracle):
        """Test an empty batch triggers a rekey."""
        search = make_search("1233", scripted_oracle())
        search.step()  # tests 1233 and 7233
        assert search.failed_viable == 0
        search.step()  # nothing left near 1233
        assert search.failed_viable == 1
        assert search.keyframe == "7233"

    def test_restart_returns_near_original(self, scripted_oracle):
        """Test a restart anchors one substitution away from the original."""
        search = make_search(SEED, scripted_oracle())
        search.step()
        search.keyframe = "7294567890123"
        search.restart()
        diffs = [i for i, (a, b) in enumerate(zip(SEED, search.keyframe)) if a != b]
        assert len(diffs) == 1

    def test_degenerate_escape(self, scripted_oracle):
        """Test the full digit pool rescues a seed with nothing to substitute."""
        seed = "2222222222223"
        oracle = scripted_oracle()
        search = PrimeSearch(
            seed,
            config=SearchConfig(simultaneous=2, degenerate_every=5),
            oracle=oracle,
            substitutions=DigitSubstitutions(allowed={'5': ('6',)}),
            rng=np.random.default_rng(5),
            sieve=SmallPrimeSieve(50),
        )

        search.step()  # the seed itself
        for _ in range(5):
            search.step()
        assert search.failed_viable == 5
        assert search.original == seed

        search.step()
        assert search.failed_viable == 6
        assert search.original != seed
        assert search.keyframe == search.original
        diffs = [i for i, (a, b) in enumerate(zip(seed, search.original)) if a != b]
        assert len(diffs) == 1
        assert diffs[0] < len(seed) - 2

        search.step()
        assert oracle.batches[-1][0] == search.original

    def test_restart_fires_inside_loop(self, scripted_oracle, monkeypatch):
        """Test step() restarts once the tested set passes four seed lengths."""
        search = make_search(SEED, scripted_oracle())
        fired = []
        restart = search.restart

        def recording_restart():
            fired.append(len(search.tested))
            restart()

        monkeypatch.setattr(search, "restart", recording_restart)
        while not fired and search.attempts < 500:
            search.step()

        assert len(fired) == 1
        assert 52 < fired[0] <= 56
        assert search.restart_check.next == 104
        diffs = [i for i, (a, b) in enumerate(zip(SEED, search.keyframe)) if a != b]
        assert len(diffs) == 1

    def test_all_adaptations_in_one_iteration(self, scripted_oracle, monkeypatch):
        """Test rekey, restart and degenerate fire together, degenerate last."""
        seed = "10001"
        search = make_search(seed, scripted_oracle(), restart_factor=1, degenerate_every=1)
        calls = []
        for name in ("rekey", "restart", "degenerate"):
            method = getattr(search, name)
            monkeypatch.setattr(
                search, name,
                lambda method=method, name=name: (calls.append(name), method()),
            )

        search.step()  # seed and three of its five neighbours
        assert calls == []

        search.failed_viable = 2
        search.step()  # last two neighbours
        assert len(search.tested) == 6
        assert calls == ["rekey", "restart", "degenerate"]

        assert search.keyframe == search.original
        assert search.original not in search.tested
        diffs = [i for i, (a, b) in enumerate(zip(seed, search.original)) if a != b]
        assert len(diffs) == 1
        assert diffs[0] < len(seed) - 2


class TestSophieMode:
    """Tests for the companion search inside the controller."""

    def test_companion_found(self, scripted_oracle):
        """Test a prime with 2p + 1 also prime."""
        companion = str(2 * int(SEED) + 1)
        oracle = scripted_oracle(primes=[SEED, companion])
        search = make_search(SEED, oracle, sophie=True)

        result = search.run()

        assert result.prime == SEED
        assert result.sophie_germain == companion
        assert result.to_dict()['sophie_germain'] == companion
        assert search.state is SearchState.COMPLETED

    def test_keeps_searching_without_companion(self, scripted_oracle):
        """Test a prime without companion is skipped."""
        companion = str(2 * int(TARGET) + 1)
        oracle = scripted_oracle(primes=[SEED, TARGET, companion])
        search = make_search(SEED, oracle, sophie=True)

        result = search.run()

        assert result.prime == TARGET
        assert result.sophie_germain == companion

    def test_find_prime_wrapper(self, scripted_oracle):
        """Test the convenience function."""
        companion = str(2 * int(SEED) + 1)
        config = SearchConfig(simultaneous=2, seed=1, sieve_size=20)
        result = find_prime(
            SEED, sophie=True, config=config,
            oracle=scripted_oracle(primes=[SEED, companion]),
        )
        assert result.sophie_germain == companion
        assert config.sophie is False


class TestSearchResult:
    """Tests for SearchResult."""

    def test_to_dict_without_companion(self):
        """Test dictionary conversion."""
        result = SearchResult(prime="13", attempts=2, simultaneous=4, distinct_tested=9)
        assert result.to_dict() == {
            'prime': "13",
            'attempts': 2,
            'simultaneous': 4,
            'distinct_tested': 9,
        }
