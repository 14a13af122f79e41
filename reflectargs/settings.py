"""
Reflectargs settings shared by every command of a tree.

Fields
- auto_help: bool (default True)
  Intercept `--help` / `--help=true` tokens and render help for the command
  reached so far. When False, those tokens are parsed like any other option.
- log_info: Callable[[str], Any]
  Sink for help text and hints. Defaults to a rich console on stdout.
- log_error: Callable[[str], Any]
  Sink for error messages. Defaults to a rich console on stderr.
- colorful: bool (default False)
  Style the default sinks' output. The palette can be overridden by defining
  a __styles__ mapping in __main__ (keys: "info", "error").

Adding a child to a command hands the parent's settings to the child's whole
subtree, so one Settings instance governs one tree.
"""
from collections import defaultdict

from rich.console import Console
from rich.text import Text

from .utils import IntrospectableType, Unset, coalesce, rename


def _printer(name, /, *, stderr, settings):
    """
    Build a default sink printing whole lines through a rich console.

    Markup and highlighting are disabled so help text like "[--flag]" or
    "<name>" is printed literally; soft wrapping keeps aligned columns intact.
    """
    console = Console(stderr=stderr, markup=False, highlight=False, emoji=False)

    @rename(name)
    def printer(message, /):
        styles = defaultdict(str, {
            "info": "",
            "error": "bold #FF4DA6",  # friendly pinky error line
        } | getattr(__import__("__main__"), "__styles__", {}))
        style = styles[name.removeprefix("log_")] if settings.colorful else ""
        console.print(Text(str(message), style=style), soft_wrap=True)

    return printer


class Settings(metaclass=IntrospectableType):
    __introspectable__ = (
        "auto_help",
        "log_info",
        "log_error",
        "colorful",
    )

    def __new__(cls, auto_help=True, log_info=Unset, log_error=Unset, *, colorful=False):
        """
        Construct validated settings.

        Raises
        - TypeError: when a provided sink is not callable.
        """
        if log_info is not Unset and not callable(log_info):
            raise TypeError(f"{cls.__typename__} 'log_info' must be callable")
        if log_error is not Unset and not callable(log_error):
            raise TypeError(f"{cls.__typename__} 'log_error' must be callable")

        self = super().__new__(cls)
        self._auto_help = bool(auto_help)
        self._colorful = bool(colorful)
        self._log_info = coalesce(log_info, _printer("log_info", stderr=False, settings=self))
        self._log_error = coalesce(log_error, _printer("log_error", stderr=True, settings=self))
        return self


__all__ = (
    "Settings",
)
