# src/querymod/core/logging.py
"""Logging facade used across querymod, rendered through rich."""

import logging
from contextlib import contextmanager
from typing import Callable, Dict, Iterator

from rich.logging import RichHandler
from rich.markup import escape

LOGGER_NAME = "querymod"


def _style(style: str) -> Callable[[object], str]:
    """Return a function wrapping a value in rich markup for the given style."""

    def apply(value: object) -> str:
        return f"[{style}]{escape(str(value))}[/{style}]"

    return apply


# * Markup helpers for the things the modifiers talk about
color_palette: Dict[str, Callable[[object], str]] = {
    "field": _style("cyan"),
    "relation": _style("blue"),
    "operator": _style("yellow"),
    "value": lambda value: f"[green]{escape(repr(value))}[/green]",
    "modifier": _style("bold magenta"),
    "model": _style("bold cyan"),
}


class Logger:
    """Thin wrapper over a stdlib logger with section and indent helpers."""

    def __init__(self, name: str = LOGGER_NAME):
        self._logger = logging.getLogger(name)
        self._depth = 0
        if not self._logger.handlers:
            handler = RichHandler(markup=True, show_path=False, rich_tracebacks=True)
            handler.setFormatter(logging.Formatter("%(message)s"))
            self._logger.addHandler(handler)
            self._logger.setLevel(logging.WARNING)

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def set_level(self, level: int | str) -> None:
        self._logger.setLevel(level)

    def _emit(self, level: int, message: str) -> None:
        if self._logger.isEnabledFor(level):
            self._logger.log(level, "  " * self._depth + message)

    def debug(self, message: str) -> None:
        self._emit(logging.DEBUG, message)

    def info(self, message: str) -> None:
        self._emit(logging.INFO, message)

    def success(self, message: str) -> None:
        self._emit(logging.INFO, f"[green]✓[/green] {message}")

    def warn(self, message: str) -> None:
        self._emit(logging.WARNING, message)

    def error(self, message: str) -> None:
        self._emit(logging.ERROR, f"[bold red]{message}[/bold red]")

    def section(self, title: str) -> None:
        self._emit(logging.DEBUG, f"[bold]── {title} ──[/bold]")

    @contextmanager
    def indented(self) -> Iterator[None]:
        """Indent every message logged inside the block."""
        self._depth += 1
        try:
            yield
        finally:
            self._depth -= 1


log = Logger()
