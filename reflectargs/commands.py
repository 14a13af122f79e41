"""
Reflectargs command layer: build, compose, and run command trees.

What this module provides
- Command: a named node of a command tree, optionally bound to a Python
  callable whose signature defines the node's positional arguments and
  --options.
  • bind(callable): derive and validate parameters (atomically).
  • add_command(child) / command(...): compose sub-commands.
  • invoke / ainvoke: dispatch a token stream and call the target.
  • handle / ahandle: the same, reporting parse errors and returning an
    exit status instead of raising.

- Factories and helpers:
  • command(...): create a bound Command or a decorator that produces one.
  • invoke(obj, prompt): convenience runner for Commands or plain callables.

Quick start
    from reflectargs import command

    @command
    def git():
        \"\"\"The stupid content tracker\"\"\"

    @git.command
    def clone(repo: str, recursive: bool = False):
        ...

    if __name__ == "__main__":
        raise SystemExit(git.handle())   # e.g. `git clone repo1 --recursive`

Design notes
- Positional parameters are the ones without defaults; everything with a
  default is an --option. Boolean options may be given as bare --flags.
- A command with positional parameters cannot have sub-commands.
- Paths are shown space-separated ("git remote add") in help and hints.
"""
import asyncio
import copy
import inspect
import shlex
import sys
import typing
import weakref
from collections import deque
from collections.abc import Iterable

from .dispatch import Dispatcher
from .faults import *
from .help import Help
from .logger import logger
from .parameters import Parameter
from .settings import Settings
from .utils import *
from .utils import IntrospectableType


def _process_name(cls, name):
    """
    Validate a command name: a non-empty string over [A-Za-z0-9_-].
    """
    if not isinstance(name, str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    if not name or not isvalidname(name):
        raise InvalidNameError(
            f"{cls.__typename__} name {name!r} is not valid, use letters, digits, '_' and '-' only",
            code=FaultCode.INVALID_NAME,
        )
    return name


def _process_hints(callback, command):
    """
    Resolve the callback's type hints, keeping Annotated metadata.

    A forward reference naming an unknown type raises UnsupportedTypeError.
    Objects typing cannot inspect fall back to the raw signature annotations.
    """
    try:
        return typing.get_type_hints(callback, include_extras=True)
    except NameError as error:
        raise UnsupportedTypeError(
            "unsupported argument type, annotation %r of %r could not be resolved" % (
                error.name, getattr(callback, "__qualname__", callback)
            ),
            code=FaultCode.UNSUPPORTED_TYPE,
            command=command,
        ) from error
    except TypeError:
        return {}


def _derive_name(source, hint):
    """
    Derive a command name from a callable.

    Order
    - the callable's __name__, kebab-cased ("remoteAdd" -> "remote-add");
    - else the last dot-separated segment of hint, kebab-cased;
    - else AmbiguousNameError.
    """
    if (name := kebabcase(getattr(source, "__name__", ""))) and isvalidname(name):
        return name
    if isinstance(hint, str) and (name := kebabcase(hint.split(".")[-1])) and isvalidname(name):
        return name
    raise AmbiguousNameError(
        "name of %r could not be determined, please specify one" % (source,),
        code=FaultCode.AMBIGUOUS_NAME,
    )


async def _wait(awaitable):
    return await awaitable


class Command(metaclass=IntrospectableType):
    """
    A node of a command tree.

    Responsibilities
    - Identity: a validated name and a one-line description.
    - Composition: ordered children (sub-commands) and a non-owning back
      reference to the parent, used for paths in messages and help.
    - Binding: an optional callable whose signature is split into
      positionals (no default) and named options (with default).
    - Invocation: token streams are dispatched by reflectargs.dispatch and the
      resulting call is made here; awaitable results are awaited.

    Invariants
    - A command with positionals has no children, and vice versa.
    - Child names are unique within a parent.
    - A command is bound at most once; a failed bind leaves it unbound.
    - Every command of a tree shares the root's Settings.
    """

    __introspectable__ = (
        "name",
        "descr",
        "children",
        "parameters",
        "positionals",
        "named",
        "callback",
        "settings",
    )

    __displayable__ = (
        "name",
        "descr",
        "positionals",
        "named",
        "children",
    )

    def __new__(cls, name, descr=Unset, /, settings=Unset):
        """
        Construct an unbound command.

        Parameters
        - name: str
          Non-empty, letters/digits/'_'/'-' only.
        - descr: str | Unset
          One-line description shown in help titles and command listings.
        - settings: Settings | Unset
          Settings for this command (and, when it is a root, for its tree).

        Raises
        - InvalidNameError: when name is empty or outside the name alphabet.
        - TypeError: on wrongly typed arguments.
        """
        _process_name(cls, name)
        if not isinstance(descr, str | Unset):
            raise TypeError(f"{cls.__typename__} 'descr' must be a string")
        if not isinstance(settings, Settings | Unset):
            raise TypeError(f"{cls.__typename__} 'settings' must be a settings instance")

        self = super().__new__(cls)
        self._name = name
        self._descr = coalesce(descr, "").strip()
        self._settings = coalesce(settings) or Settings()
        self._parent = None
        self._children = []
        self._parameters = []
        self._positionals = []
        self._named = []
        self._callback = None
        return self

    @property
    def parent(self):
        """
        The parent command, or None for a root.

        Held as a weak reference: once the rest of the tree is garbage
        collected, a surviving child reports itself as a root and its path
        shrinks to its own name.
        """
        return self._parent() if self._parent is not None else None

    @property
    def root(self):
        child, parent = self, self.parent
        while parent:
            child, parent = parent, parent.parent
        return child

    @property
    def path(self):
        """
        Names from the root to this command, e.g. ("git", "remote", "add").
        """
        path = [(command := self).name]
        while command := command.parent:
            path.append(command.name)
        return tuple(reversed(path))

    @property
    def fullname(self):
        return " ".join(self.path)

    @property
    def bound(self):
        return self._callback is not None

    def _walk(self):
        yield self
        for child in self._children:
            yield from child._walk()

    def bind(self, callback, /):
        """
        Bind a callable to this command.

        Steps
        - Derive one Parameter per signature entry, in declaration order;
          descriptions recorded by @describe are attached.
        - Reject unsupported element types (UnsupportedTypeError), `**kwargs`
          (UnsupportedTypeError), a multi-valued positional that is not the
          last positional (MultipleValuesMisplacedError), positionals on a
          command that already has children (InvalidTopologyError), and two
          parameters sharing one command-line spelling (AmbiguousNameError).
        - Only then store the result: a failed bind leaves the command unbound.

        Returns
        - self, for chaining.
        """
        typename = type(self).__typename__
        if self._callback is not None:
            raise TypeError(f"{typename} {self._name!r} is already bound")
        if not callable(callback):
            raise TypeError(f"{typename} 'callback' must be callable")
        try:
            signature = inspect.signature(callback)
        except (TypeError, ValueError):
            raise TypeError(f"{typename} 'callback' must be an inspectable callable") from None

        hints = _process_hints(callback, self)
        descriptions = getattr(callback, "__descriptions__", {})
        for name in descriptions.keys() - signature.parameters.keys():
            raise TypeError(f"{typename} 'callback' has no parameter {name!r} to describe")

        parameters = []
        for name, parameter in signature.parameters.items():
            if parameter.kind is inspect.Parameter.VAR_KEYWORD:
                raise UnsupportedTypeError(
                    "unsupported argument type for parameter %r, keyword variadics cannot be mapped" % name,
                    code=FaultCode.UNSUPPORTED_TYPE,
                    command=self,
                )
            parameters.append(Parameter.from_signature(
                parameter,
                hints.get(name, Unset),
                descriptions.get(name, Unset),
            ))

        for parameter in parameters:
            if parameter.datatype is None:
                raise UnsupportedTypeError(
                    "unsupported argument type %r for parameter %r" % (parameter.typename, parameter.name),
                    code=FaultCode.UNSUPPORTED_TYPE,
                    command=self,
                )
            if not parameter.display or not isvalidname(parameter.display):
                raise InvalidNameError(
                    "parameter %r cannot be spelled on the command line" % parameter.name,
                    code=FaultCode.INVALID_NAME,
                    command=self,
                )

        positionals = [parameter for parameter in parameters if parameter.positional]
        named = [parameter for parameter in parameters if not parameter.positional]

        if any(parameter.many for parameter in positionals[:-1]):
            raise MultipleValuesMisplacedError(
                "Only the last argument may accept many values",
                code=FaultCode.MULTIPLE_VALUES_MISPLACED,
                command=self,
            )
        if positionals and self._children:
            raise InvalidTopologyError(
                "can't bind arguments to a command with sub-commands",
                code=FaultCode.INVALID_TOPOLOGY,
                command=self,
            )
        seen = set()
        for parameter in named:
            if parameter.display in seen:
                raise AmbiguousNameError(
                    "option '--%s' is declared more than once" % parameter.display,
                    code=FaultCode.AMBIGUOUS_NAME,
                    command=self,
                )
            seen.add(parameter.display)

        self._parameters = parameters
        self._positionals = positionals
        self._named = named
        self._callback = callback
        logger.debug(
            "bound %r to %s (%d positional, %d named)",
            self.fullname, getattr(callback, "__qualname__", callback), len(positionals), len(named)
        )
        return self

    def __describe__(self, descriptions, /):
        """
        Attach descriptions to already bound parameters (see describe()).
        """
        if self._callback is None:
            raise TypeError(f"{type(self).__typename__} {self._name!r} is not bound")
        for name in descriptions.keys() - {parameter.name for parameter in self._parameters}:
            raise TypeError(f"{type(self).__typename__} has no parameter {name!r} to describe")

        self._parameters = [
            copy.replace(parameter, descr=descriptions[parameter.name]) if parameter.name in descriptions else parameter
            for parameter in self._parameters
        ]
        self._positionals = [parameter for parameter in self._parameters if parameter.positional]
        self._named = [parameter for parameter in self._parameters if not parameter.positional]

    def add_command(self, child, /):
        """
        Attach an existing command as a sub-command of this one.

        The child (and its whole subtree) adopts this command's settings.

        Raises
        - InvalidTopologyError: when this command has positional arguments,
          when the child already has a parent or would create a cycle, or
          when a sibling with the same name exists.

        Returns
        - self, for chaining.
        """
        if not isinstance(child, Command):
            raise TypeError(f"{type(self).__typename__} 'child' must be a command")

        def failure(message):
            return InvalidTopologyError(
                message,
                code=FaultCode.INVALID_TOPOLOGY,
                command=self,
            )

        if self._positionals:
            raise failure("can't add sub-command to a command with arguments")
        if child.parent is not None:
            raise failure("command %r is already a sub-command of %r" % (child.name, child.parent.fullname))
        if child is self.root:
            raise failure("command %r cannot be its own sub-command" % child.name)
        if any(sibling.name == child.name for sibling in self._children):
            raise failure("sub-command name %r is already in use" % child.name)

        self._children.append(child)
        child._parent = weakref.ref(self)
        for command in child._walk():
            command._settings = self._settings
        logger.debug("added %r under %r", child.name, self.fullname)
        return self

    def command(self, source=Unset, /, descr=Unset, *, name=Unset, hint=Unset):
        """
        Create a sub-command from a callable and attach it here.

        Modes
        - Direct: parent.command(func, "descr", name="x") -> Command
        - Decorator: @parent.command or @parent.command(name="x")

        Returns
        - The new child Command in direct mode, or a decorator.
        """
        @rename("command")
        def wrapper(source, /):
            child = command(source, descr, name=name, hint=hint, settings=self._settings)
            self.add_command(child)
            return child

        return wrapper(source) if source is not Unset else wrapper

    def __call__(self, *args, **kwargs):
        """
        Call the bound callable directly, bypassing the command line.
        """
        if self._callback is None:
            raise TypeError(f"{type(self).__typename__} {self._name!r} is not bound")
        return self._callback(*args, **kwargs)

    def help(self):
        """
        Emit this command's help text through settings.log_info.
        """
        Help(self).show()

    @staticmethod
    def _tokenize(prompt):
        """
        Normalize a prompt into a deque of tokens.

        - Unset: sys.argv[1:].
        - str: split like a shell would (shlex.split).
        - Iterable[str]: taken as-is, each item must be a string.
        """
        if prompt is Unset:
            return deque(sys.argv[1:])
        if isinstance(prompt, str):
            return deque(shlex.split(prompt))
        if isinstance(prompt, Iterable):
            tokens = deque(prompt)
            if not all(isinstance(token, str) for token in tokens):
                raise TypeError("invoke() argument must be a string or an iterable of strings")
            return tokens
        raise TypeError("invoke() argument must be a string or an iterable of strings")

    def invoke(self, prompt=Unset, /):
        """
        Dispatch a token stream and call the target command.

        Returns
        - The target callable's result (awaitables are run to completion with
          asyncio.run), or None when help was shown.

        Raises
        - ParsingError subclasses for malformed token streams.
        """
        if (invocation := Dispatcher(self).dispatch(self._tokenize(prompt))) is None:
            return None
        if inspect.isawaitable(result := invocation()):
            return asyncio.run(_wait(result))
        return result

    async def ainvoke(self, prompt=Unset, /):
        """
        Like invoke(), awaiting an awaitable result inside the running loop.
        """
        if (invocation := Dispatcher(self).dispatch(self._tokenize(prompt))) is None:
            return None
        if inspect.isawaitable(result := invocation()):
            return await result
        return result

    def _report(self, error):
        """
        Report a parse error through the failing command's settings sinks.
        """
        settings = error.command.settings if error.command is not None else self._settings
        settings.log_error(error.message)
        if settings.auto_help:
            settings.log_info(error.hint)

    def handle(self, prompt=Unset, /):
        """
        Run invoke() as a program entry point.

        Returns
        - 0 on success (including when help was shown).
        - 1 after reporting a ParsingError: its message goes to log_error and,
          when auto help is on, a "see '<path> --help'" hint to log_info.

        Binding errors and exceptions raised by the callable propagate.
        """
        try:
            self.invoke(prompt)
        except ParsingError as error:
            logger.debug("parse error %s at %r", error.code, error.fullname)
            self._report(error)
            return 1
        return 0

    async def ahandle(self, prompt=Unset, /):
        """
        Asynchronous counterpart of handle().
        """
        try:
            await self.ainvoke(prompt)
        except ParsingError as error:
            logger.debug("parse error %s at %r", error.code, error.fullname)
            self._report(error)
            return 1
        return 0


def command(source=Unset, /, descr=Unset, *, name=Unset, hint=Unset, settings=Unset):
    """
    Create a bound Command from a callable, or return a decorator that does.

    Modes
    - Direct: cmd = command(func, "descr", name="x")
    - Decorator: @command / @command(name="x")

    Parameters
    - descr: str | Unset
      Defaults to the first line of the callable's docstring.
    - name: str | Unset
      Defaults to the callable's kebab-cased __name__; when that is not a
      valid name (e.g. a lambda), to the kebab-cased last segment of hint.
    - hint: str | Unset
      A dotted name to derive the command name from, e.g. "Git.remoteAdd".
    - settings: Settings | Unset

    Raises
    - AmbiguousNameError: when no valid name can be derived.
    - Any binding error raised by Command.bind.
    """
    @rename("command")
    def wrapper(source, /):
        if not callable(source) or isinstance(source, Command):
            raise TypeError("@command() must be applied to a callable")
        text = coalesce(descr, (inspect.getdoc(source) or "").partition("\n")[0])
        label = coalesce(name) or _derive_name(source, hint)
        return Command(label, text, settings=settings).bind(source)

    return wrapper(source) if source is not Unset else wrapper


def invoke(object, prompt=Unset, /):
    """
    Convenience runner for commands or plain callables.

    A plain callable is wrapped with command() first. Returns the callable's
    result; parse errors are raised.
    """
    if isinstance(object, Command):
        return object.invoke(prompt)
    if callable(object):
        return command(object).invoke(prompt)
    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must be a command or a callable")


__all__ = (
    "Command",
    "command",
    "invoke",
)
