"""pnpack — package a pnpm workspace project into a deployable ZIP.

Resolves the project's dependency closure through pnpm and streams every
reported path into a single archive under a bounded number of concurrent
add operations.
"""

from pnpack.version import __version__

__all__: list[str] = ["__version__"]
