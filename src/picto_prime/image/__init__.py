"""Picture to digit-string conversion."""

from picto_prime.image.ascii import (
    DEFAULT_PIXELS,
    format_digit_picture,
    image_to_digits,
    luminance_to_digits,
)

__all__ = [
    "DEFAULT_PIXELS",
    "format_digit_picture",
    "image_to_digits",
    "luminance_to_digits",
]
