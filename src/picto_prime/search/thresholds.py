"""Threshold trackers that fire once per multiple of a step."""

from __future__ import annotations


class Passes:
    """Report when a growing value passes the next multiple of ``step``.

    The tracker fires once per crossing. When a single update jumps past
    several multiples it still fires only once, and the next trigger moves to
    the first multiple above the new value::

        >>> check = Passes(10)
        >>> check(0), check(25), check(29), check(31)
        (False, True, False, True)
    """

    def __init__(self, step: int):
        if step < 1:
            raise ValueError(f"step must be >= 1, got {step}")
        self.step = step
        self.next = step

    def __call__(self, value: int) -> bool:
        if value <= self.next:
            return False
        self.next = self.step + (value // self.step) * self.step
        return True

    def __repr__(self) -> str:
        return f"Passes(step={self.step}, next={self.next})"
