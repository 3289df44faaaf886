"""Quick start example for picto_prime.

Searches for a prime that looks like a small digit picture. Requires
openssl on the PATH.
"""

from picto_prime import PrimeSearch, SearchConfig
from picto_prime.image.ascii import format_digit_picture
from picto_prime.search.oracle import OracleClient

PICTURE = (
    "77777777"
    "70000007"
    "70888807"
    "70888807"
    "70000007"
    "77777771"
)
WIDTH = 8


def main():
    print("Picto Prime - Quick Start Demo")
    print("=" * 50)

    print("\nSeed picture:")
    print(format_digit_picture(PICTURE, WIDTH))

    oracle = OracleClient()
    oracle.ensure_available()

    config = SearchConfig(sophie=True, seed=42, progress=True)
    search = PrimeSearch(PICTURE, config=config, oracle=oracle)
    result = search.run()

    print(f"\nFound after {result.attempts} attempts "
          f"({result.distinct_tested} distinct candidates, {result.simultaneous} at a time):")
    print(format_digit_picture(result.prime, WIDTH))

    if result.sophie_germain:
        print(f"\nAlmost Sophie Germain companion:\n{result.sophie_germain}")


if __name__ == "__main__":
    main()
