"""
Reflectargs data types: the closed set of scalar types a parameter may declare.

Overview
- DataType: one member per supported scalar (fixed-width signed/unsigned
  integers, string, boolean, enumeration). Every bound parameter resolves to
  exactly one member at binding time; anything else is rejected by the command.
- Annotation aliases (Int8 ... UInt64): typing.Annotated forms that pin a
  fixed-width integer type on an `int` parameter.
- resolve(annotation): map an element annotation to its DataType (or None).

Conversion rules (DataType.convert)
- integers: optional sign followed by decimal digits, surrounding whitespace
  ignored, value must fit the member's bounds. No partial parsing: "3abc",
  "1_000" and "0x10" are rejected.
- BOOL: "true" / "false", case-insensitive.
- STRING: the token unchanged.
- ENUM: exact, case-sensitive member name of the declared enumeration.

Failures raise ValueError with a lowercase, one-sentence description; the
parameter layer wraps it into a ValueParseError carrying the display name.
"""
import enum
import re
import typing
from typing import Annotated


class DataType(enum.Enum):
    """
    supported scalar types of command parameters.

    each member carries (label, minimum, maximum); bounds are None for
    non-integer members. the label is what help output shows for the type.
    """
    INT8   = ("int8", -2 ** 7, 2 ** 7 - 1)
    INT16  = ("int16", -2 ** 15, 2 ** 15 - 1)
    INT32  = ("int32", -2 ** 31, 2 ** 31 - 1)
    INT64  = ("int64", -2 ** 63, 2 ** 63 - 1)
    UINT8  = ("uint8", 0, 2 ** 8 - 1)
    UINT16 = ("uint16", 0, 2 ** 16 - 1)
    UINT32 = ("uint32", 0, 2 ** 32 - 1)
    UINT64 = ("uint64", 0, 2 ** 64 - 1)
    STRING = ("string", None, None)
    BOOL   = ("bool", None, None)
    ENUM   = ("enum", None, None)

    @property
    def label(self):
        return self.value[0]

    @property
    def bounds(self):
        return self.value[1:]

    @property
    def integral(self):
        return self.value[1] is not None

    def describe(self, type, /):
        """
        Return the help label for this member; enumerations show their own
        class name instead of the generic label.
        """
        if self is DataType.ENUM:
            return type.__name__
        return self.label

    def convert(self, token, type=None, /):
        """
        Convert a raw token into a value of this data type.

        Parameters
        - token: str
          The raw command-line text.
        - type: type | None
          The declared element type; required for ENUM (the enumeration class).

        Returns
        - int | str | bool | enum.Enum

        Raises
        - ValueError: when the token does not denote a value of this type.
        """
        if not isinstance(token, str):
            raise TypeError("convert() argument must be a string")

        match self:
            case DataType.STRING:
                return token
            case DataType.BOOL:
                match token.strip().lower():
                    case "true":
                        return True
                    case "false":
                        return False
                raise ValueError("%r is not a valid boolean, expected 'true' or 'false'" % token)
            case DataType.ENUM:
                try:
                    return type[token]
                except KeyError:
                    raise ValueError("%r is not a member of %s, expected one of: %s" % (
                        token, type.__name__, ", ".join(type.__members__)
                    )) from None

        if not re.fullmatch(r"\s*[+-]?[0-9]+\s*", token):
            raise ValueError("%r is not a valid integer" % token)
        minimum, maximum = self.bounds
        if not minimum <= (value := int(token)) <= maximum:
            raise ValueError("%r is out of range for %s (%d to %d)" % (token, self.label, minimum, maximum))
        return value


Int8 = Annotated[int, DataType.INT8]
Int16 = Annotated[int, DataType.INT16]
Int32 = Annotated[int, DataType.INT32]
Int64 = Annotated[int, DataType.INT64]
UInt8 = Annotated[int, DataType.UINT8]
UInt16 = Annotated[int, DataType.UINT16]
UInt32 = Annotated[int, DataType.UINT32]
UInt64 = Annotated[int, DataType.UINT64]


def resolve(annotation, /):
    """
    Map an element annotation to its DataType.

    - Annotated[int, DataType.X] -> X for integer members (the first one wins),
      other Annotated forms resolve through their origin
    - bool -> BOOL (checked before int, bool being an int subclass)
    - int -> INT64
    - str -> STRING
    - enum.Enum subclasses -> ENUM
    - anything else -> None
    """
    if hasattr(annotation, "__metadata__"):
        for metadata in annotation.__metadata__:
            if isinstance(metadata, DataType) and metadata.integral and annotation.__origin__ is int:
                return metadata
        annotation = annotation.__origin__

    if typing.get_origin(annotation) is not None or not isinstance(annotation, type):
        return None
    if issubclass(annotation, enum.Enum):
        return DataType.ENUM
    if annotation is bool:
        return DataType.BOOL
    if annotation is int:
        return DataType.INT64
    if annotation is str:
        return DataType.STRING
    return None


__all__ = (
    # Types
    "DataType",

    # Aliases
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",

    # Functions
    "resolve",
)
