"""
Module entry point for: python -m qbank_parser

Allows running the parser directly as a module:
    python -m qbank_parser parse <path> [options]
    python -m qbank_parser classify <path>
    python -m qbank_parser serve [options]
"""

from .cli import cli


def main():
    cli()


if __name__ == "__main__":
    main()
