"""Exceptions raised by the search engine."""


class PictoPrimeError(Exception):
    """Base class for all picto_prime errors."""


class OracleError(PictoPrimeError):
    """The primality oracle failed while testing a batch."""


class OracleUnavailableError(OracleError):
    """The primality oracle program could not be launched."""


class NoEligiblePositionError(PictoPrimeError, ValueError):
    """A keyframe has no character that the substitution table can replace."""

    def __init__(self, keyframe: str):
        self.keyframe = keyframe
        super().__init__(
            f"no substitutable digit before the last two positions of {keyframe!r}"
        )
