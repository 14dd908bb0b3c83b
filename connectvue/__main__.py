# File: connectvue/__main__.py
"""
protoc-gen-connect-vue — Module entry point.

Allows running the generator without protoc via::

    python -m connectvue --descriptor tickets.yaml --output ./src/api

This module simply delegates to the CLI entry point defined in ``connectvue.cli``.
"""

from __future__ import annotations


def main() -> None:
    """Delegate to the CLI main function."""
    from connectvue.cli import cli_main
    cli_main()


if __name__ == "__main__":
    main()
