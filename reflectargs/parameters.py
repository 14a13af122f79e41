"""
Reflectargs parameter specifications.

Overview
- ParameterKind: POSITIONAL (no default declared, filled by bare tokens) or
  NAMED (default declared, filled by --name=value / --flag tokens).
- Parameter: one parameter of a bound callable, derived once at binding time
  from the callable's signature and type hints. Immutable; fields are exposed
  as read-only properties.
- describe(**descriptions): attach free-text descriptions to parameters of a
  callable (or of an already built command).

Shape rules (Parameter.from_signature)
- `T | None` and `Optional[T]` unwrap to `T`.
- `list[T]` (or bare `list`) and `*args: T` are multi-valued with element `T`.
- Missing annotations fall back to the type of a non-None default, else `str`.
- The element annotation resolves to a DataType; unsupported annotations leave
  `datatype` as None and the owning command rejects them when binding.
"""
import enum
import inspect
import types
import typing

from .datatypes import DataType, resolve
from .faults import FaultCode, ValueParseError
from .utils import IntrospectableType, Unset, coalesce, kebabcase, ordinal


class ParameterKind(enum.Enum):
    POSITIONAL = "positional"
    NAMED = "named"


def _unwrap(annotation):
    """
    Return (element, many) for an annotation, stripping Optional and list.
    """
    if typing.get_origin(annotation) in (typing.Union, types.UnionType):
        if len(arguments := [x for x in typing.get_args(annotation) if x is not type(None)]) == 1:
            annotation, = arguments

    if annotation is list:
        return str, True
    if typing.get_origin(annotation) is list:
        return next(iter(typing.get_args(annotation)), str), True
    return annotation, False


class Parameter(metaclass=IntrospectableType):
    """
    Description of one parameter of a bound callable.

    Properties
    - name: the Python identifier.
    - display: the kebab-cased spelling used on the command line and in help.
    - kind: ParameterKind.POSITIONAL or ParameterKind.NAMED.
    - type: the element type object (e.g. int, an Enum subclass).
    - datatype: the resolved DataType, or None when the type is unsupported.
    - many: True for list-shaped and variadic parameters.
    - default: the declared default (meaningful for NAMED only).
    - descr: free-text description ("" when absent).
    - passing: how the callable receives the value (an inspect.Parameter kind).
    """

    __introspectable__ = (
        "name",
        "display",
        "kind",
        "type",
        "datatype",
        "many",
        "descr",
        "passing",
    )

    __displayable__ = (
        "name",
        "kind",
        "datatype",
        "many",
        "default",
    )

    def __new__(
            cls,
            name,
            /,
            kind=ParameterKind.POSITIONAL,
            type=str,
            many=False,
            default=None,
            descr=Unset,
            *,
            passing=inspect.Parameter.POSITIONAL_OR_KEYWORD
    ):
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        elif not name:
            raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
        if not isinstance(kind, ParameterKind):
            raise TypeError(f"{cls.__typename__} 'kind' must be a parameter-kind")
        if not isinstance(descr, str | Unset):
            raise TypeError(f"{cls.__typename__} 'descr' must be a string")

        self = super().__new__(cls)
        self._name = name
        self._display = kebabcase(name)
        self._kind = kind
        self._type = type
        self._datatype = resolve(type)
        self._many = bool(many)
        self._default = default if kind is ParameterKind.NAMED else None
        self._descr = coalesce(descr, "").strip()
        self._passing = passing
        return self

    @classmethod
    def from_signature(cls, parameter, /, annotation=Unset, descr=Unset):
        """
        Build a Parameter from an inspect.Parameter.

        Parameters
        - parameter: inspect.Parameter
          One entry of inspect.signature(callable).parameters.
        - annotation: Any | Unset
          The resolved type hint (typing.get_type_hints output); when Unset,
          the raw annotation of the signature is used.
        - descr: str | Unset
          Optional description for help.

        Notes
        - `*args` parameters are positional and multi-valued; every other
          parameter is NAMED exactly when it declares a default.
        - `**kwargs` parameters are not representable and must be rejected by
          the caller before reaching this point.
        """
        annotation = coalesce(annotation, parameter.annotation)
        default = parameter.default

        if annotation is inspect.Parameter.empty:
            if default is not inspect.Parameter.empty and default is not None:
                annotation = default.__class__
            else:
                annotation = str

        if parameter.kind is inspect.Parameter.VAR_POSITIONAL:
            type, many = _unwrap(annotation)[0], True
            kind = ParameterKind.POSITIONAL
        else:
            type, many = _unwrap(annotation)
            kind = ParameterKind.POSITIONAL if default is inspect.Parameter.empty else ParameterKind.NAMED

        return cls(
            parameter.name,
            kind,
            type,
            many,
            default if kind is ParameterKind.NAMED else None,
            descr,
            passing=parameter.kind
        )

    @property
    def default(self):
        # Not mirrored: defaults are handed to the callable verbatim.
        return self._default

    @property
    def positional(self):
        return self._kind is ParameterKind.POSITIONAL

    @property
    def flag(self):
        """
        True when the parameter may be given as a bare --name token.
        """
        return self._datatype is DataType.BOOL

    @property
    def typename(self):
        """
        Help label of the element type ("int64", "string", enum class name...).
        """
        if self._datatype is None:
            return getattr(self._type, "__name__", repr(self._type))
        return self._datatype.describe(self._type)

    def parse(self, token, /, command=None, index=None):
        """
        Convert one raw token into a value of this parameter's element type.

        Raises
        - ValueParseError: carrying the display name, the position (when
          known) and the underlying conversion failure.
        """
        try:
            return self._datatype.convert(token, self._type)
        except ValueError as exception:
            position = " at %s position" % ordinal(index) if index else ""
            raise ValueParseError(
                "error when parsing argument %r%s: %s" % (self._display, position, exception),
                code=FaultCode.VALUE_PARSE,
                command=command,
                index=index,
                token=token,
            ) from exception

    def __replace__(self, **overrides):
        return type(self)(
            overrides.get("name", self._name),
            overrides.get("kind", self._kind),
            overrides.get("type", self._type),
            overrides.get("many", self._many),
            overrides.get("default", self._default),
            overrides.get("descr", self._descr),
            passing=overrides.get("passing", self._passing),
        )


def describe(**descriptions):
    """
    Attach descriptions to the parameters of a callable or command.

    Usage
        @command
        @describe(repo="repository to clone", recursive="clone submodules too")
        def clone(repo: str, recursive: bool = False): ...

    Behavior
    - On a plain callable, the descriptions are recorded in __descriptions__
      and picked up when a command binds it.
    - On an object implementing __describe__ (e.g. an already built Command),
      the descriptions are forwarded to it, so decorator order is irrelevant.

    Raises
    - TypeError: when a description is not a string, or when applied to a
      non-callable.
    """
    for name, descr in descriptions.items():
        if not isinstance(descr, str):
            raise TypeError(f"describe() argument {name!r} must be a string")

    def wrapper(source, /):
        if hasattr(source, "__describe__") and callable(source.__describe__):
            source.__describe__(descriptions)
            return source
        if not callable(source):
            raise TypeError("@describe() must be applied to a callable")
        source.__descriptions__ = getattr(source, "__descriptions__", {}) | descriptions
        return source

    return wrapper


__all__ = (
    # Types
    "ParameterKind",
    "Parameter",

    # Functions
    "describe",
)
