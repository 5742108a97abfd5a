# File: featureforge/__main__.py
"""
featureforge - Module entry point.

Allows running the CLI directly via::

    python -m featureforge matrix -l rust

This module simply delegates to the CLI entry point defined in ``featureforge.cli``.
"""

from __future__ import annotations


def main() -> None:
    """Delegate to the CLI main function."""
    from featureforge.cli import cli_main
    cli_main()


if __name__ == "__main__":
    main()
