"""Console output for the CLI and the dial engine, styled with Rich."""

from __future__ import annotations

from rich.console import Console
from rich.theme import Theme

THEME = Theme(
    {
        "log.info": "blue",
        "log.ok": "green",
        "log.warn": "yellow",
        "log.error": "bold red",
        "log.debug": "dim",
    }
)

console = Console(highlight=False, theme=THEME)
_err_console = Console(highlight=False, stderr=True, theme=THEME)

_verbose = False


def set_verbose(enabled: bool) -> None:
    global _verbose
    _verbose = enabled


def _tagged(tag: str, style: str, msg: str) -> str:
    return f"[{style}]\\[{tag}][/{style}] {msg}"


def info(msg: str) -> None:
    console.print(_tagged("INFO", "log.info", msg))


def success(msg: str) -> None:
    console.print(_tagged("OK", "log.ok", msg))


def warn(msg: str) -> None:
    console.print(_tagged("WARN", "log.warn", msg))


def error(msg: str) -> None:
    """Errors go to stderr so SVG written to stdout stays clean."""
    _err_console.print(_tagged("ERROR", "log.error", msg))


def debug(msg: str) -> None:
    if _verbose:
        console.print(f"[log.debug]\\[DEBUG] {msg}[/log.debug]")
