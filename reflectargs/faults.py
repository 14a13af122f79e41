"""
Reflectargs faults (binding and parsing errors).

Scope
- FaultCode: canonical, stable numeric identifiers for every fault. Codes are
  grouped by domain so logs and searches stay predictable.
- CommandException: base type carrying a message plus context options
  (command, code, hint, index, token, ...).
- BindingError: programmer errors raised while a command tree is built
  (unsupported types, misplaced multi-valued parameters, invalid topology or
  names). Never caught by the package.
- ParsingError: end-user errors raised while a token stream is dispatched.
  The driver (Command.handle) reports them with a "see '<path> --help'" hint
  and turns them into a non-zero status.

UX goals
- Position-first messages: parse errors name the ordinal position of the
  offending token ("at third position") so users can learn by trying.
- Soft but technical language: one-sentence bodies, a single
  clear hint.
"""
from enum import IntEnum
from types import MappingProxyType

from .utils import Unset


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping (by high-level domain)
    - binding (101xx / 102xx)
      • UNSUPPORTED_TYPE, MULTIPLE_VALUES_MISPLACED, INVALID_TOPOLOGY,
        AMBIGUOUS_NAME, INVALID_NAME
    - routing (1110x)
      • UNKNOWN_COMMAND, NO_COMMAND_SPECIFIED
    - options (1111x)
      • OPTION_SYNTAX, UNKNOWN_OPTION, FLAG_TYPE, DUPLICATE_OPTION
    - positionals (1112x)
      • TOO_MANY_ARGUMENTS, TOO_FEW_ARGUMENTS
    - values (1113x)
      • VALUE_PARSE
    """
    # --- binding errors (10xxx) ---
    UNSUPPORTED_TYPE          = 10101
    MULTIPLE_VALUES_MISPLACED = 10102
    INVALID_TOPOLOGY          = 10111
    AMBIGUOUS_NAME            = 10121
    INVALID_NAME              = 10122

    # --- routing errors (11xxx) ---
    UNKNOWN_COMMAND           = 11101
    NO_COMMAND_SPECIFIED      = 11102

    # --- option errors (11xxx) ---
    OPTION_SYNTAX             = 11111
    UNKNOWN_OPTION            = 11112
    FLAG_TYPE                 = 11113
    DUPLICATE_OPTION          = 11115

    # --- positional errors (11xxx) ---
    TOO_MANY_ARGUMENTS        = 11121
    TOO_FEW_ARGUMENTS         = 11125

    # --- value errors (11xxx) ---
    VALUE_PARSE               = 11131


class CommandException(Exception):
    """
    Base of every reflectargs fault.

    Parameters
    - message: str
      One-sentence description, shown to the user as-is.
    - options: context carried alongside the message. Recognized keys:
      command (the Command at which the fault occurred), code (FaultCode),
      hint, index (1-based token position), token, suggestions.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message) if self.message is not Unset else ""

    @property
    def command(self):
        return self.options.get("command")

    @property
    def code(self):
        return self.options.get("code")

    @property
    def index(self):
        return self.options.get("index")

    @property
    def token(self):
        return self.options.get("token")

    @property
    def path(self):
        """
        Names from the root command to the failing command ("git", "remote").
        Empty when the fault is not tied to a command.
        """
        if (command := self.command) is None:
            return ()
        return command.path

    @property
    def fullname(self):
        return " ".join(self.path)

    @property
    def hint(self):
        """
        The explicit hint when one was given, otherwise a pointer to the
        failing command's help.
        """
        if hint := self.options.get("hint"):
            return hint
        if not self.path:
            return ""
        return "see '%s --help' for more information" % self.fullname


class BindingError(CommandException): ...
class UnsupportedTypeError(BindingError, TypeError): ...
class MultipleValuesMisplacedError(BindingError, TypeError): ...
class InvalidTopologyError(BindingError, ValueError): ...
class AmbiguousNameError(BindingError, ValueError): ...
class InvalidNameError(BindingError, ValueError): ...


class ParsingError(CommandException): ...
class UnknownCommandError(ParsingError): ...
class UnknownOptionError(ParsingError): ...
class OptionSyntaxError(ParsingError): ...
class FlagTypeError(ParsingError): ...
class DuplicateOptionError(ParsingError): ...
class ValueParseError(ParsingError): ...
class TooManyArgumentsError(ParsingError): ...
class TooFewArgumentsError(ParsingError): ...
class NoCommandSpecifiedError(ParsingError): ...


__all__ = (
    "FaultCode",
    "CommandException",
    "BindingError",
    "UnsupportedTypeError",
    "MultipleValuesMisplacedError",
    "InvalidTopologyError",
    "AmbiguousNameError",
    "InvalidNameError",
    "ParsingError",
    "UnknownCommandError",
    "UnknownOptionError",
    "OptionSyntaxError",
    "FlagTypeError",
    "DuplicateOptionError",
    "ValueParseError",
    "TooManyArgumentsError",
    "TooFewArgumentsError",
    "NoCommandSpecifiedError",
)
