"""
Argfold faults (parse errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing parse
  failure. Codes are grouped by domain to keep logs/searches predictable.
- ParseException: base type carrying message + options; knows how to render
  itself with rich (plain lines or a panel) and how to surface itself (raise, or
  print and exit in shell mode).
- UnknownParameterError / UnknownSubCommandError / CombinatorMismatchError: the
  three fatal outcomes of a parse call.
- trigger(): central entry point to surface any fault with runtime options.

Message contract
- str(fault) is exactly the user-visible message, e.g.
  "unknown parameter: --format" or "expected value for: -f".
- titles and hints are extra context shown by the rich renderer only.

Integration
- the engine builds a fault, then calls trigger(fault, shell=..., fancy=..., ...).
- non-shell mode (the default) raises the exception; shell mode prints it to
  stderr through rich and exits with status 1.
- hosts may customise rendering through attributes of __main__:
  __prog__ (program name), __styles__ (style overrides), __codes__ (code labels).
"""
import os.path
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping (by high-level domain)
    - routing (1110x)
      • UNKNOWN_SUBCOMMAND
    - parameters (1111x)
      • UNKNOWN_PARAMETER, UNEXPECTED_KEY
    - combinators (1112x/1113x)
      • EXPECTED_VALUE, EXPECTED_ONE_OF, MISSING_KEY, COMBINATOR_MISMATCH

    COMBINATOR_MISMATCH covers rejection reasons of custom reducers.
    """
    # --- routing errors (11xxx) ---
    UNKNOWN_SUBCOMMAND  = 11102

    # --- parameter errors (11xxx) ---
    UNKNOWN_PARAMETER   = 11112
    UNEXPECTED_KEY      = 11113

    # --- combinator errors (11xxx) ---
    EXPECTED_VALUE      = 11122
    EXPECTED_ONE_OF     = 11124
    MISSING_KEY         = 11125
    COMBINATOR_MISMATCH = 11131

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))

    @classmethod
    def of(cls, reason, /):
        """
        map a combinator rejection reason to its code.
        """
        return {
            "expected value": cls.EXPECTED_VALUE,
            "expected one-of": cls.EXPECTED_ONE_OF,
            "missing key": cls.MISSING_KEY,
            "unexpected key": cls.UNEXPECTED_KEY,
        }.get(reason, cls.COMBINATOR_MISMATCH)


class ParseException(Exception):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message) if self.message is not Unset else ""

    def __rich__(self):
        main = __import__("__main__")
        options = self.options

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        colorful = options.get("colorful", True)

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            return Text(str(fragment), styles[style])

        prog = getattr(main, "__prog__", options.get("prog") or os.path.basename(sys.argv[0]) or "argfold")
        code = options.get("code", FaultCode.COMBINATOR_MISMATCH)

        header = Text.assemble(
            "[ ",
            text(prog, "prog-name"),
            " — ",
            text(code.normalize(), "code"),
            " | ",
            text(str(options.get("title", "parse error")).title(), "error-title"),
            " ]"
        )
        message = text(self, "error-message")
        parts = [message]
        if hint := options.get("hint"):
            parts.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))

        if options.get("fancy", False):
            return Panel(Group(*parts), title=header, title_align="left")

        return Group(header, *parts)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnknownParameterError(ParseException): ...
class UnknownSubCommandError(ParseException): ...
class CombinatorMismatchError(ParseException): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see ParseException).
    - options are merged into a copy of the fault via __replace__(**options) before
      triggering; the original fault is left untouched.
    - in shell mode, rendering happens via the rich console; otherwise the fault is raised.

    typical options
    - shell, fancy, colorful, prog, title, code, hint, token, reason, path.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


__all__ = (
    "FaultCode",
    "ParseException",
    "UnknownParameterError",
    "UnknownSubCommandError",
    "CombinatorMismatchError",
    "trigger",
)
