"""Visually similar digit substitutions.

Two tables drive every mutation the search makes:

``allowed``
    Which digits may be swapped for which look-alike digits. A ``0`` can
    become an ``8`` or a ``9`` without changing the picture much, a ``1``
    can become a ``7``, and so on.

``last_digit``
    A one-off fix applied to the final digit of the seed so the number does
    not trivially end in an even digit or a 5.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple

DIGITS = "0123456789"

DEFAULT_ALLOWED: Dict[str, Tuple[str, ...]] = {
    '0': ('8', '9'),
    '1': ('7',),
    '7': ('1',),
    '8': ('0', '9'),
    '9': ('4',),
    '4': ('9',),
}

DEFAULT_LAST_DIGIT: Dict[str, str] = {
    '0': '3',
    '2': '3',
    '4': '9',
    '6': '9',
    '8': '9',
    '5': '3',
}


def _freeze_allowed(allowed: Mapping[str, Any]) -> Mapping[str, Tuple[str, ...]]:
    frozen = {}
    for digit, replacements in allowed.items():
        if digit not in DIGITS or len(digit) != 1:
            raise ValueError(f"substitution key must be a single digit, got {digit!r}")
        replacements = tuple(dict.fromkeys(str(r) for r in replacements))
        if not replacements:
            raise ValueError(f"digit {digit!r} has no replacements")
        for r in replacements:
            if r not in DIGITS or len(r) != 1:
                raise ValueError(f"replacement for {digit!r} must be a digit, got {r!r}")
            if r == digit:
                raise ValueError(f"digit {digit!r} cannot be replaced by itself")
        frozen[digit] = replacements
    return MappingProxyType(frozen)


def _freeze_last_digit(last_digit: Mapping[str, Any]) -> Mapping[str, str]:
    frozen = {}
    for digit, replacement in last_digit.items():
        replacement = str(replacement)
        if digit not in DIGITS or len(digit) != 1:
            raise ValueError(f"last-digit key must be a single digit, got {digit!r}")
        if replacement not in DIGITS or len(replacement) != 1:
            raise ValueError(f"last-digit replacement must be a digit, got {replacement!r}")
        frozen[digit] = replacement
    return MappingProxyType(frozen)


@dataclass(frozen=True)
class DigitSubstitutions:
    """Read-only substitution and last-digit tables for one search."""

    allowed: Mapping[str, Tuple[str, ...]] = field(
        default_factory=lambda: dict(DEFAULT_ALLOWED)
    )
    last_digit: Mapping[str, str] = field(
        default_factory=lambda: dict(DEFAULT_LAST_DIGIT)
    )

    def __post_init__(self):
        # Frozen dataclass: bypass __setattr__ to store the read-only views.
        object.__setattr__(self, 'allowed', _freeze_allowed(self.allowed))
        object.__setattr__(self, 'last_digit', _freeze_last_digit(self.last_digit))

    def can_replace(self, digit: str) -> bool:
        return digit in self.allowed

    def replacements(self, digit: str) -> Tuple[str, ...]:
        return self.allowed[digit]

    def fix_last_digit(self, seed: str) -> str:
        """Swap the final digit of seed using the last-digit table.

        Seeds whose final digit has no entry are returned unchanged.
        """
        if not seed:
            return seed
        replacement = self.last_digit.get(seed[-1])
        if replacement is None:
            return seed
        return seed[:-1] + replacement

    def to_dict(self) -> Dict[str, Any]:
        return {
            'allowed': {k: list(v) for k, v in self.allowed.items()},
            'last_digit': dict(self.last_digit),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'DigitSubstitutions':
        """Build tables from a dict; missing sections fall back to defaults."""
        return cls(
            allowed=d.get('allowed', DEFAULT_ALLOWED),
            last_digit=d.get('last_digit', DEFAULT_LAST_DIGIT),
        )

    @classmethod
    def from_json(cls, path: str | Path) -> 'DigitSubstitutions':
        with open(path) as f:
            return cls.from_dict(json.load(f))


DEFAULT_SUBSTITUTIONS = DigitSubstitutions()
