# File: autocrud/__main__.py
"""
AutoCRUD — Module entry point.

Allows running the generator directly via::

    python -m autocrud Product --schema-file schema.yaml

This module simply delegates to the CLI entry point defined in ``autocrud.cli``.
"""

from __future__ import annotations


def main() -> None:
    """Delegate to the CLI main function."""
    from autocrud.cli import cli_main
    cli_main()


if __name__ == "__main__":
    main()
