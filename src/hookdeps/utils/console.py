"""
Console and Logging Output.

Every message the analyzer prints goes through one Rich console, and the root
logger writes to that same console through a `RichHandler`. The module-level
`console` is a proxy, so the CLI tests can swap in a recording console with
`set_console` without re-importing any handler.

Attributes:
    console (_ConsoleProxy): Stable reference to the active Rich console.
"""

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

# Sits between INFO and WARNING; used for the clean-run summary line.
SUCCESS_LEVEL_NUM = 25
logging.addLevelName(SUCCESS_LEVEL_NUM, "SUCCESS")

_THEME = Theme({"logging.level.success": "green"})


class _ConsoleProxy:
  """
  Forwards printing to a replaceable Rich console.

  Replacing the backend also moves the root logger's `RichHandler`, so log
  records and printed tables always land in the same place.
  """

  def __init__(self) -> None:
    self._backend: Console = Console(theme=_THEME)
    self._attach_handler()

  def set_backend(self, new_console: Console) -> None:
    """
    Switches output to another console.

    Args:
        new_console: The console that receives all further output.
    """
    self._backend = new_console
    self._attach_handler()

  def reset(self) -> None:
    """Switches output back to a fresh stdout console."""
    self.set_backend(Console(theme=_THEME))

  def _attach_handler(self) -> None:
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
      if isinstance(handler, RichHandler):
        root_logger.removeHandler(handler)

    root_logger.addHandler(
      RichHandler(
        console=self._backend,
        show_time=False,
        show_path=False,
        markup=True,
        rich_tracebacks=True,
      )
    )
    if root_logger.level == logging.NOTSET or root_logger.level > logging.INFO:
      root_logger.setLevel(logging.INFO)

  def print(self, *args: Any, **kwargs: Any) -> None:
    """Prints renderables on the active console."""
    self._backend.print(*args, **kwargs)


console = _ConsoleProxy()


def set_console(new_console: Console) -> None:
  """
  Routes printing and logging to the given console.

  Args:
      new_console: Console to use from now on.
  """
  console.set_backend(new_console)


def reset_console() -> None:
  """Routes printing and logging back to stdout."""
  console.reset()


class _NullWriter:
  """File-like sink for recording consoles."""

  def write(self, text: str) -> int:
    return len(text)

  def flush(self) -> None:
    pass


def make_capture_console(width: int = 200) -> Console:
  """
  Builds a recording console that prints nothing.

  Args:
      width: Render width in columns.

  Returns:
      Console: Read its output back with ``export_text()``.
  """
  return Console(theme=_THEME, record=True, width=width, file=_NullWriter())


def log_info(msg: str) -> None:
  """
  Logs an informational message.

  Args:
      msg (str): The message. Rich markup is rendered.
  """
  logging.info(f"ℹ️  {msg}", extra={"markup": True})


def log_success(msg: str) -> None:
  logging.log(SUCCESS_LEVEL_NUM, f"✅ {msg}", extra={"markup": True})


def log_warning(msg: str) -> None:
  logging.warning(f"⚠️  {msg}", extra={"markup": True})


def log_error(msg: str) -> None:
  """Logs an error message; handlers call this before returning a failing exit code."""
  logging.error(f"❌ {msg}", extra={"markup": True})
