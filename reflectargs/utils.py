"""
Reflectargs utilities (naming rules and internal helpers).

Scope
- Name rules shared by commands, parameters and help:
  • kebabcase(text): derive the command-line spelling of a Python identifier.
  • isvalidname(text): check a command/option name against the allowed alphabet.
- Core building blocks used across the package for consistent semantics:
  • UnsetType / Unset: sentinel for "not provided" (distinct from None).
  • coalesce(value, default=None): materialize Unset into a concrete default.
  • rename(callable, name) / @rename("name"): stable __name__/__qualname__.
  • mirror("attr"): read-only property over a private backing field.
  • ordinal(number): "first", "second", ..., "11th" for position-aware messages.

Internal helpers
- IntrospectableType: metaclass deriving __typename__, mirrored properties and
  __repr__/__rich_repr__ from __introspectable__ / __displayable__.
- _immortalize(object): recursively copy containers (used by mirror()).

Quick examples
    >>> kebabcase("intArg")
    'int-arg'
    >>> kebabcase("string_arg")
    'string-arg'
    >>> kebabcase(kebabcase("HTTPServer"))
    'httpserver'
    >>> isvalidname("remote-add"), isvalidname("<lambda>")
    (True, False)
"""
import builtins
import functools
import operator
import re
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset".
    - Non-subclassable and a per-process singleton.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in isinstance checks (e.g., str | Unset).
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()
"""
Internal sentinel for "not provided".

Use Unset as a default when None is a valid, user-meaningful value but you
still need to distinguish "no input" from "explicitly passed None".
"""


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Falsey values like None, 0, "" or [] are preserved as-is; only Unset is
    replaced.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - rename(callable, name) -> callable
    - rename(name) -> decorator

    Raises
    - TypeError on wrong arity, non-callable targets, non-string names, or
      callables whose metadata cannot be updated (e.g., built-ins).
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _immortalize(object):
    """
    Recursively copy container values.

    - Sequence (non-string): new list, tuples included.
    - Mapping: new dict with the same keys.
    - Set: new set.
    - Anything else: returned as-is.
    """
    if isinstance(object, Sequence) and not isinstance(object, str):
        return list(map(_immortalize, object))
    elif isinstance(object, Mapping):
        return dict(zip(object.keys(), map(_immortalize, object.values())))
    elif isinstance(object, Set):
        return set(map(_immortalize, object))
    else:
        return object


def mirror(name, /):
    """
    Define a read-only property that mirrors the private attribute "_{name}".

    Containers are returned as fresh copies so callers cannot mutate the
    backing state through the public API.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _immortalize(getattr(self, "_" + name))

    return property(getter)


class IntrospectableType(type):
    """
    Metaclass for the package's metadata-carrying objects.

    Responsibilities
    - Derive __typename__ from the class name (camel-case split with hyphens),
      used as the subject of validation messages ("command 'name' ...").
    - Publish every name in __introspectable__ as a read-only property over its
      "_name" backing field (see mirror()).
    - Provide __repr__/__rich_repr__ from __displayable__ (falls back to
      __introspectable__).
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


@functools.cache
def ordinal(number, /):
    """
    Return a human-friendly ordinal label for a 1-based position.

    - 1..10 are rendered as words ("first" ... "tenth").
    - Other numbers use numeric ordinals with English suffixes ("11th", "22nd").
    """
    try:
        return {
            1: "first",
            2: "second",
            3: "third",
            4: "fourth",
            5: "fifth",
            6: "sixth",
            7: "seventh",
            8: "eighth",
            9: "ninth",
            10: "tenth",
        }[number]
    except KeyError:
        pass

    # 11th, 12th, 13th (and 111th, 112th, ...)
    if 10 < number % 100 < 20:
        return f"{number}th"

    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


def kebabcase(text, /):
    """
    Convert an identifier-like string into its kebab-case spelling.

    Behavior
    - A hyphen is inserted before every uppercase letter that is not the first
      character and does not follow another uppercase letter or a separator,
      so acronyms stay glued together ("HTTPServer" -> "httpserver",
      "intArg" -> "int-arg", "Remote_Add" -> "remote-add").
    - Leading/trailing underscores are dropped and runs of underscores become a
      single hyphen ("string_arg" -> "string-arg", "_private" -> "private").
    - The result is lowercased.

    Properties
    - Total over strings and idempotent: kebabcase(kebabcase(s)) == kebabcase(s).
    - Characters outside the name alphabet are left in place; check the result
      with isvalidname() where a valid name is required.
    """
    if not isinstance(text, str):
        raise TypeError("kebabcase() argument must be a string")

    text = re.sub(r"(?<=[^A-Z_\-])(?=[A-Z])", "-", text.strip("_"))
    return re.sub(r"_+", "-", text).lower()


def isvalidname(text, /):
    """
    Return True when every character of text is an ASCII letter, a digit,
    an underscore or a hyphen. The empty string is valid (callers that need a
    non-empty name check that separately).
    """
    if not isinstance(text, str):
        raise TypeError("isvalidname() argument must be a string")
    return re.fullmatch(r"[A-Za-z0-9_\-]*", text) is not None


__all__ = (
    # Functions
    "kebabcase",
    "isvalidname",
    "coalesce",
    "rename",
    "mirror",
    "ordinal",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
