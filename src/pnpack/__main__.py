"""Allow ``python -m pnpack`` invocation.

Delegates to the CLI error-boundary entry point so that
``python -m pnpack`` behaves identically to the ``pnpack`` console
script.
"""

from __future__ import annotations

from pnpack.cli.app import cli

if __name__ == "__main__":
    cli()
