"""
Reflectargs dispatcher: the token-stream state machine.

A Dispatcher walks one command level. It consumes tokens from the front of a
shared deque, delegates the rest of the stream to a child Dispatcher when a
token names a sub-command, and otherwise accumulates typed values for the
command's positionals and --options.

Per token, in order
1. `--help` / `--help=true` (when auto help is on): show help for the command
   reached so far and stop.
2. Unbound command and no child of that name: UnknownCommandError.
3. Child of that name: delegate the remaining stream.
4. `--name` / `--name=value`: option (OptionSyntaxError, UnknownOptionError,
   FlagTypeError, ValueParseError, DuplicateOptionError).
5. Anything else: next positional (TooManyArgumentsError, ValueParseError);
   a trailing multi-valued positional keeps absorbing tokens.

After the stream: defaults are installed for options never given, then
TooFewArgumentsError / NoCommandSpecifiedError are checked.

A help token anywhere in the remaining stream also wins over a parse error
raised earlier in that stream.
"""
import difflib
from inspect import Parameter
from typing import NamedTuple

from .faults import *
from .help import Help
from .logger import logger
from .utils import ordinal

HELP_TOKENS = ("--help", "--help=true")


class Invocation(NamedTuple):
    """
    A resolved call: the target command and its ordered values (positionals
    in declaration order, then named parameters in declaration order).
    """
    command: object
    values: list

    def arguments(self):
        """
        Map the values back onto the callable's signature.

        Returns
        - (args, kwargs): positional-only and positional-or-keyword parameters
          are passed positionally, `*args` is spread, keyword-only parameters
          are passed by keyword.
        """
        command = self.command
        mapping = dict(zip((parameter.name for parameter in command.positionals + command.named), self.values))

        args = []
        kwargs = {}
        for parameter in command.parameters:
            value = mapping[parameter.name]
            match parameter.passing:
                case Parameter.VAR_POSITIONAL:
                    args.extend(value)
                case Parameter.KEYWORD_ONLY:
                    kwargs[parameter.name] = value
                case _:
                    args.append(value)
        return args, kwargs

    def __call__(self):
        args, kwargs = self.arguments()
        return self.command.callback(*args, **kwargs)


class Dispatcher:
    """
    Per-call, per-level parse state for one command.

    Attributes
    - command: the command being parsed.
    - index: 1-based position of the next token in the whole stream.
    - values: positional values, one entry per filled slot (a list for a
      multi-valued slot).
    - named: option values keyed by parameter name.
    """

    def __init__(self, command, /, index=1):
        self.command = command
        self.index = index
        self.values = []
        self.named = {}
        self._positionals = command.positionals
        self._options = {parameter.display: parameter for parameter in command.named}
        self._children = {child.name: child for child in command.children}

    def dispatch(self, tokens, /):
        """
        Consume tokens and resolve the call.

        Parameters
        - tokens: collections.deque[str], consumed from the left.

        Returns
        - Invocation on success, or None when help was shown.

        Raises
        - ParsingError subclasses, tagged with the command they occurred at.
        """
        try:
            return self._dispatch(tokens)
        except ParsingError:
            if self.command.settings.auto_help and any(token in HELP_TOKENS for token in tokens):
                logger.debug("help requested after a parse error at %r", self.command.fullname)
                Help(self.command).show()
                return None
            raise

    def _dispatch(self, tokens):
        command = self.command
        settings = command.settings

        while tokens:
            token = tokens.popleft()
            index = self.index
            self.index += 1
            logger.debug("token %r at position %d under %r", token, index, command.fullname)

            if settings.auto_help and token in HELP_TOKENS:
                Help(command).show()
                return None

            if not command.bound and token not in self._children:
                raise self._unknown_command(token, index)

            if (child := self._children.get(token)) is not None:
                return Dispatcher(child, self.index).dispatch(tokens)

            if token.startswith("--"):
                self._option(token, index)
            else:
                self._positional(token, index)

        return self._finalize()

    def _route(self):
        return " ".join(self.command.path)

    def _unknown_command(self, token, index):
        suggestions = difflib.get_close_matches(token, self._children.keys(), 5)
        kind = "sub-command" if self.command.parent else "command"
        try:
            hint = "did you mean %r? you can also run '%s --help' to see available %ss" % (
                suggestions[0], self._route(), kind
            )
        except IndexError:
            hint = "run '%s --help' to see available %ss" % (self._route(), kind)
        return UnknownCommandError(
            "no such %s in %r: %r at %s position" % (kind, self._route(), token, ordinal(index)),
            code=FaultCode.UNKNOWN_COMMAND,
            command=self.command,
            index=index,
            token=token,
            suggestions=suggestions,
            hint=hint,
        )

    def _option(self, token, index):
        name, *rest = parts = token[2:].split("=")

        if len(parts) > 2:
            raise OptionSyntaxError(
                "bad form of option %r at %s position, expected --option=VALUE or --flag" % (token, ordinal(index)),
                code=FaultCode.OPTION_SYNTAX,
                command=self.command,
                index=index,
                token=token,
            )

        if (parameter := self._options.get(name)) is None:
            suggestions = difflib.get_close_matches("--" + name, ["--" + x for x in self._options], 5)
            try:
                hint = "did you mean %r? you can also run '%s --help' to see all options" % (
                    suggestions[0], self._route()
                )
            except IndexError:
                hint = "run '%s --help' to see all available options" % self._route()
            raise UnknownOptionError(
                "no such option: '--%s' at %s position" % (name, ordinal(index)),
                code=FaultCode.UNKNOWN_OPTION,
                command=self.command,
                index=index,
                token=token,
                suggestions=suggestions,
                hint=hint,
            )

        if not rest:
            if not parameter.flag:
                raise FlagTypeError(
                    "option '--%s' at %s position is not a boolean and can not be specified as a flag" % (
                        name, ordinal(index)
                    ),
                    code=FaultCode.FLAG_TYPE,
                    command=self.command,
                    index=index,
                    token=token,
                    hint="use '--%s=<%s>' instead" % (name, parameter.typename),
                )
            value = True
        else:
            value = parameter.parse(rest[0], command=self.command, index=index)

        if parameter.many:
            self.named.setdefault(parameter.name, []).append(value)
        elif parameter.name in self.named:
            raise DuplicateOptionError(
                "option '--%s' at %s position has already been specified" % (name, ordinal(index)),
                code=FaultCode.DUPLICATE_OPTION,
                command=self.command,
                index=index,
                token=token,
            )
        else:
            self.named[parameter.name] = value

    def _positional(self, token, index):
        filled = len(self.values)

        if self._positionals and self._positionals[-1].many and filled == len(self._positionals):
            # the trailing multi-valued slot keeps absorbing tokens
            parameter = self._positionals[-1]
            self.values[-1].append(parameter.parse(token, command=self.command, index=index))
            return

        if filled >= len(self._positionals):
            raise TooManyArgumentsError(
                "too many arguments for %r at %s position, expected %d" % (
                    self.command.name, ordinal(index), len(self._positionals)
                ),
                code=FaultCode.TOO_MANY_ARGUMENTS,
                command=self.command,
                index=index,
                token=token,
            )

        parameter = self._positionals[filled]
        value = parameter.parse(token, command=self.command, index=index)
        self.values.append([value] if parameter.many else value)

    def _finalize(self):
        command = self.command

        for parameter in command.named:
            if parameter.name not in self.named:
                self.named[parameter.name] = parameter.default

        if len(self.values) < len(self._positionals):
            raise TooFewArgumentsError(
                "too few arguments for %r, expected %d but got %d" % (
                    command.name, len(self._positionals), len(self.values)
                ),
                code=FaultCode.TOO_FEW_ARGUMENTS,
                command=command,
            )

        if not command.bound:
            raise NoCommandSpecifiedError(
                "No sub-command specified" if command.parent else "No command specified",
                code=FaultCode.NO_COMMAND_SPECIFIED,
                command=command,
                hint="run '%s --help' to see available commands" % self._route(),
            )

        logger.debug("resolved %r with %d values", command.fullname, len(self.values) + len(self.named))
        return Invocation(command, self.values + [self.named[parameter.name] for parameter in command.named])


__all__ = (
    "Dispatcher",
    "Invocation",
    "HELP_TOKENS",
)
