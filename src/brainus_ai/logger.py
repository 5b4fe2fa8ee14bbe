"""Console output for the brainus command line.

Results go to stdout; diagnostics (warnings, errors, the request spinner) go to
stderr so `--json` output stays pipeable.
"""

from collections.abc import Iterator
from contextlib import contextmanager

from rich.console import Console
from rich.status import Status

_out: Console | None = None
_err: Console | None = None
_no_color: bool = False


def init_console(no_color: bool = False) -> None:
    """Create the stdout and stderr consoles."""
    global _out, _err, _no_color
    _no_color = no_color
    _out = Console(no_color=no_color, highlight=False)
    _err = Console(stderr=True, no_color=no_color, highlight=False)


def get_console() -> Console:
    """Console for command results (stdout)."""
    if _out is None:
        init_console()
    assert _out is not None  # noqa: S101
    return _out


def get_err_console() -> Console:
    """Console for diagnostics (stderr)."""
    if _err is None:
        init_console()
    assert _err is not None  # noqa: S101
    return _err


def info(message: str) -> None:
    get_console().print(message)


def dim(message: str) -> None:
    get_console().print(f"[dim]{message}[/dim]")


def warning(message: str) -> None:
    get_err_console().print(f"[yellow]{message}[/yellow]")


def error(message: str) -> None:
    get_err_console().print(f"[bold red]Error:[/bold red] {message}")


@contextmanager
def spinner(message: str) -> Iterator[Status | None]:
    """Show a stderr spinner while a request and its retries are in flight."""
    if _no_color:
        yield None
    else:
        with get_err_console().status(message, spinner="dots") as status:
            yield status
