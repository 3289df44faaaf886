"""Utility modules for picto_prime."""

from picto_prime.utils.log import setup_logger

__all__ = [
    "setup_logger",
]
