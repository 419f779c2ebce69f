"""CLI console helpers with optional Rich support.

This module intentionally avoids module-level imports of optional UI
dependencies so bootstrap paths (``--help``, ``--version``) remain
functional even when Rich is not installed.

:class:`ConsoleLogger` is the CLI's implementation of the core
``Logger`` protocol; everything it prints goes to stderr.
"""

from __future__ import annotations

import re
import sys
from typing import Any

from pnpack.exceptions import EnvironmentError

_MARKUP = re.compile(r"\[/?(?:bold )?(?:bold|dim|red|green|yellow|blue|cyan)\]")


def _load_rich_console_class() -> type[Any]:
	"""Return ``rich.console.Console`` class or raise ``EnvironmentError``."""
	try:
		from rich.console import Console
	except ModuleNotFoundError as exc:
		raise EnvironmentError(
			"rich is not installed. Install with: pip install rich",
		) from exc
	return Console


def get_rich_console() -> Any:
	"""Create a Rich console instance targeting stderr."""
	console_class = _load_rich_console_class()
	return console_class(stderr=True)


class _ConsoleProxy:
	"""Minimal ``print``-compatible proxy with Rich fallback."""

	def print(self, *objects: object) -> None:
		"""Render with Rich when available, else plain stderr print."""
		try:
			rich_console = get_rich_console()
		except EnvironmentError:
			print(*(_strip_markup(obj) for obj in objects), file=sys.stderr)
			return
		rich_console.print(*objects)


def _strip_markup(obj: object) -> object:
	if isinstance(obj, str):
		return _MARKUP.sub("", obj)
	return obj


console = _ConsoleProxy()


class ConsoleLogger:
	"""Leveled logger rendering through :data:`console`.

	Messages are escaped so paths containing ``[...]`` are not read as
	Rich markup.  *target* may be any object with a ``print`` method,
	e.g. the console of an active progress display.
	"""

	def __init__(self, target: Any = None) -> None:
		self.target: Any = target if target is not None else console

	def info(self, message: str) -> None:
		self.target.print(f"[dim]{_escape(message)}[/dim]")

	def warn(self, message: str) -> None:
		self.target.print(f"[yellow]Warning:[/yellow] {_escape(message)}")

	def error(self, message: str) -> None:
		self.target.print(f"[red]Error:[/red] {_escape(message)}")


def _escape(message: str) -> str:
	try:
		from rich.markup import escape
	except ModuleNotFoundError:
		return message
	return escape(message)
