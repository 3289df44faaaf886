"""Client for the external primality oracle.

The oracle is any program that takes a single decimal integer argument and
reports on stdout whether it is prime. ``openssl prime`` is the default::

    $ openssl prime 17
    11 (17) is prime

One process is launched per candidate and a batch is always joined as a
whole: results are only looked at once every process has exited.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

from picto_prime.search.errors import OracleError, OracleUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_ORACLE_COMMAND = ("openssl", "prime")


class VerdictStatus(Enum):
    PRIME = "prime"
    NOT_PRIME = "not-prime"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class Verdict:
    """Oracle answer for one candidate."""
    candidate: str
    status: VerdictStatus
    value: Optional[str] = None
    output: str = ""

    @property
    def is_prime(self) -> bool:
        return self.status is VerdictStatus.PRIME


def _parenthesised(text: str) -> Optional[str]:
    """Return the text between the first '(' and its matching ')'."""
    start = text.find('(')
    if start < 0:
        return None
    depth = 0
    for i in range(start, len(text)):
        if text[i] == '(':
            depth += 1
        elif text[i] == ')':
            depth -= 1
            if depth == 0:
                return text[start + 1:i]
    return None


def _canonical(token: str) -> Optional[str]:
    token = token.strip()
    try:
        if token[:2].lower() == '0x':
            return str(int(token, 16))
        return str(int(token, 10))
    except ValueError:
        return None


def extract_value(output: str) -> Optional[str]:
    """Pull the tested number out of oracle output as a decimal string.

    A parenthesised value wins over the leading token. Hexadecimal values
    must carry a ``0x`` prefix.
    """
    inner = _parenthesised(output)
    if inner is not None:
        return _canonical(inner)
    tokens = output.split()
    if not tokens:
        return None
    return _canonical(tokens[0])


def parse_verdict(candidate: str, output: str) -> Verdict:
    """Classify one oracle output.

    Anything that says neither "not prime" nor "is prime" is malformed and
    treated as not prime by the search.
    """
    if "not prime" in output:
        return Verdict(candidate, VerdictStatus.NOT_PRIME, output=output)
    if "is prime" in output:
        value = extract_value(output)
        if value is None:
            logger.warning("Could not extract a value from oracle output %r", output)
            return Verdict(candidate, VerdictStatus.MALFORMED, output=output)
        return Verdict(candidate, VerdictStatus.PRIME, value=value, output=output)
    logger.debug("Malformed oracle output for %s: %r", candidate, output)
    return Verdict(candidate, VerdictStatus.MALFORMED, output=output)


class OracleClient:
    """Run the primality oracle as one subprocess per candidate.

    Args:
        command: Program and leading arguments; the candidate is appended.
        timeout: Seconds to wait for each process, None to wait forever.
    """

    def __init__(
        self,
        command: Sequence[str] = DEFAULT_ORACLE_COMMAND,
        timeout: Optional[float] = None,
    ):
        if not command:
            raise ValueError("oracle command must not be empty")
        self.command = tuple(command)
        self.timeout = timeout

    def ensure_available(self) -> None:
        """Raise OracleUnavailableError if the oracle program is not on PATH."""
        if shutil.which(self.command[0]) is None:
            raise OracleUnavailableError(
                f"You must have {self.command[0]} in your path for this program to work."
            )

    def _launch(self, candidate: str) -> subprocess.Popen:
        return subprocess.Popen(
            [*self.command, candidate],
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
        )

    def _join(self, processes: List[subprocess.Popen]) -> List[tuple]:
        results = []
        failure: Optional[OracleError] = None
        for process in processes:
            try:
                stdout, stderr = process.communicate(timeout=self.timeout)
            except subprocess.TimeoutExpired:
                process.kill()
                stdout, stderr = process.communicate()
                if failure is None:
                    failure = OracleError(
                        f"oracle timed out after {self.timeout}s on {process.args[-1]}"
                    )
            results.append((process, stdout, stderr))
        if failure is not None:
            raise failure
        return results

    def test_batch(self, candidates: Sequence[str]) -> List[Verdict]:
        """Test every candidate in parallel and return verdicts in order.

        Raises:
            OracleUnavailableError: If a process could not be launched.
            OracleError: If a process exits non-zero or times out.
        """
        processes: List[subprocess.Popen] = []
        try:
            for candidate in candidates:
                processes.append(self._launch(candidate))
        except OSError as exc:
            for process in processes:
                process.communicate()
            raise OracleUnavailableError(
                f"could not launch oracle {' '.join(self.command)}: {exc}"
            ) from exc

        verdicts = []
        for candidate, (process, stdout, stderr) in zip(candidates, self._join(processes)):
            if process.returncode != 0:
                raise OracleError(
                    f"oracle exited with status {process.returncode} on {candidate}: "
                    f"{stderr.strip()}"
                )
            verdicts.append(parse_verdict(candidate, stdout))
        return verdicts
