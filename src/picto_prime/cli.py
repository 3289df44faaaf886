"""Command-line interface for picto_prime."""

from __future__ import annotations

import argparse
import json
import logging
import shlex
import sys
from pathlib import Path

from picto_prime import __version__

logger = logging.getLogger("picto_prime.cli")


def _seed_from_args(args: argparse.Namespace) -> tuple[str, int]:
    """Return the seed digits and the picture width to print them at."""
    if args.image:
        from picto_prime.image.ascii import image_to_digits

        digits = image_to_digits(
            args.image,
            pixels=args.pixels,
            width=args.width,
            contrast=args.contrast,
        )
        return digits.replace("\n", ""), args.width

    return args.number, args.width


def cmd_search(args: argparse.Namespace) -> int:
    """Search for a prime that looks like the given number or image."""
    from picto_prime.image.ascii import format_digit_picture
    from picto_prime.search.config import SearchConfig
    from picto_prime.search.controller import PrimeSearch
    from picto_prime.search.errors import OracleError, OracleUnavailableError
    from picto_prime.search.oracle import OracleClient
    from picto_prime.search.substitution import DEFAULT_SUBSTITUTIONS, DigitSubstitutions

    if not args.number and not args.image:
        logger.error("Either a number or an image must be specified.")
        return 1

    config = SearchConfig(
        simultaneous=args.simultaneous,
        sophie=args.sophie,
        oracle_command=tuple(shlex.split(args.oracle)),
        oracle_timeout=args.timeout,
        seed=args.seed,
        progress=args.progress,
    )

    oracle = OracleClient(config.oracle_command, timeout=config.oracle_timeout)
    try:
        oracle.ensure_available()
    except OracleUnavailableError as exc:
        logger.error(str(exc))
        return 2

    substitutions = DEFAULT_SUBSTITUTIONS
    if args.substitutions:
        substitutions = DigitSubstitutions.from_json(args.substitutions)

    try:
        seed, width = _seed_from_args(args)
    except (OSError, ValueError) as exc:
        logger.error(f"Cannot read image {args.image}: {exc}")
        return 1

    try:
        search = PrimeSearch(seed, config=config, oracle=oracle, substitutions=substitutions)
    except ValueError as exc:
        logger.error(str(exc))
        return 1

    try:
        result = search.run()
    except OracleUnavailableError as exc:
        logger.error(str(exc))
        return 2
    except OracleError as exc:
        logger.error(f"Oracle failed: {exc}")
        return 3

    record = result.to_dict()
    print(json.dumps(record, indent=2))

    if args.picture:
        print()
        print(format_digit_picture(result.prime, width))

    if args.output:
        output = Path(args.output)
        with open(output, "w") as f:
            json.dump({
                "result": record,
                "config": config.to_dict(),
                "substitutions": substitutions.to_dict(),
            }, f, indent=2)
        logger.info(f"Saved to {output}")

    return 0


def cmd_ascii(args: argparse.Namespace) -> int:
    """Print the digit picture an image would be searched from."""
    from picto_prime.image.ascii import image_to_digits

    print(image_to_digits(
        args.image,
        pixels=args.pixels,
        width=args.width,
        contrast=args.contrast,
    ))
    return 0


def _add_image_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--pixels", default="7772299408",
                        help="Digits used to draw the picture; left side is lighter, right side is darker")
    parser.add_argument("--width", type=int, default=32, help="Digits per row")
    parser.add_argument("--contrast", type=float, default=0.1,
                        help="Additional contrast to apply between -1.0 and 1.0")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pictoprime",
        description="Find picture-esque primes. Requires a primality oracle such as openssl.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log every attempt")
    parser.add_argument("--log-file", default=None, help="Also write a timestamped log here")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    search_parser = subparsers.add_parser("search", help="Search for a picture-esque prime")
    source = search_parser.add_mutually_exclusive_group()
    source.add_argument("--number", "-n", default=None, help="The number to be transformed into a prime")
    source.add_argument("--image", "-i", default=None, help="Use an image to find primes")
    _add_image_options(search_parser)
    search_parser.add_argument("--sophie", "-s", action="store_true",
                               help="Also search for an (almost) Sophie Germain prime")
    search_parser.add_argument("--oracle", default="openssl prime",
                               help="Primality oracle command; the candidate is appended")
    search_parser.add_argument("--timeout", type=float, default=None,
                               help="Seconds to wait for each oracle process")
    search_parser.add_argument("--simultaneous", type=int, default=None,
                               help="Candidates tested in parallel (default: CPU count)")
    search_parser.add_argument("--seed", type=int, default=None, help="Random seed")
    search_parser.add_argument("--substitutions", default=None,
                               help="JSON file with 'allowed' and 'last_digit' tables")
    search_parser.add_argument("--picture", action="store_true",
                               help="Print the prime wrapped at --width")
    search_parser.add_argument("--progress", action="store_true", help="Show a progress bar")
    search_parser.add_argument("--output", "-o", default=None, help="Save result as JSON")

    ascii_parser = subparsers.add_parser("ascii", help="Print an image as digits")
    ascii_parser.add_argument("image", help="Image file")
    _add_image_options(ascii_parser)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    from picto_prime.utils.log import setup_logger

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    setup_logger(Path(args.log_file) if args.log_file else None, verbose=args.verbose)

    commands = {
        "search": cmd_search,
        "ascii": cmd_ascii,
    }

    return commands[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
