"""
Mapping between protobuf field type tags and JSON token representations. Every
non-message field value goes through emit_scalar on the way out and
parse_scalar on the way in.
"""

# Standard
from typing import Any, Callable, Dict
import base64
import binascii
import enum
import math

# Third Party
from google.protobuf import descriptor as _descriptor

# First Party
import alog

# Local
from .errors import SchemaError, SemanticParseError
from .json_writer import JsonWriter
from .token_stream import BOOLEAN, NUMBER, STRING, TokenStream

log = alog.use_channel("PJCOE")

_FD = _descriptor.FieldDescriptor


class ValueKind(enum.Enum):
    """The closed set of shapes a single (non-repeated) field value can take"""

    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    STRING = "string"
    BINARY = "binary"
    ENUM = "enum"
    MESSAGE = "message"


_CPP_TYPE_KINDS = {
    _FD.CPPTYPE_INT32: ValueKind.INTEGER,
    _FD.CPPTYPE_INT64: ValueKind.INTEGER,
    _FD.CPPTYPE_UINT32: ValueKind.INTEGER,
    _FD.CPPTYPE_UINT64: ValueKind.INTEGER,
    _FD.CPPTYPE_FLOAT: ValueKind.FLOAT,
    _FD.CPPTYPE_DOUBLE: ValueKind.FLOAT,
    _FD.CPPTYPE_BOOL: ValueKind.BOOLEAN,
    _FD.CPPTYPE_STRING: ValueKind.STRING,
    _FD.CPPTYPE_ENUM: ValueKind.ENUM,
    _FD.CPPTYPE_MESSAGE: ValueKind.MESSAGE,
}

# JSON has no literal for these, so they travel as strings
_NON_FINITE_NAMES = {"NaN": math.nan, "Infinity": math.inf, "-Infinity": -math.inf}

_URLSAFE_TO_STANDARD = str.maketrans("-_", "+/")


def value_kind(field: _descriptor.FieldDescriptor) -> ValueKind:
    """Classify a field by its type tag"""
    # bytes and string share a cpp type
    if field.type == _FD.TYPE_BYTES:
        return ValueKind.BINARY
    kind = _CPP_TYPE_KINDS.get(field.cpp_type)
    if kind is None:
        raise SchemaError(f"Unsupported type {field.type} for field {field.full_name}")
    return kind


## Writing #####################################################################


def emit_scalar(
    field: _descriptor.FieldDescriptor,
    value: Any,
    writer: JsonWriter,
) -> bool:
    """Write a single non-message value for the given field

    Returns:
        handled:  bool
            False if the value does not match the field's kind, in which case
            nothing has been written
    """
    return _EMITTERS[value_kind(field)](field, value, writer)


def _emit_integer(_, value: Any, writer: JsonWriter) -> bool:
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    writer.write_number(value)
    return True


def _emit_float(_, value: Any, writer: JsonWriter) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if math.isfinite(value):
        writer.write_number(float(value))
    elif math.isnan(value):
        writer.write_string("NaN")
    else:
        writer.write_string("Infinity" if value > 0 else "-Infinity")
    return True


def _emit_boolean(_, value: Any, writer: JsonWriter) -> bool:
    if not isinstance(value, bool):
        return False
    writer.write_boolean(value)
    return True


def _emit_string(_, value: Any, writer: JsonWriter) -> bool:
    if not isinstance(value, str):
        return False
    writer.write_string(value)
    return True


def _emit_binary(_, value: Any, writer: JsonWriter) -> bool:
    if not isinstance(value, bytes):
        return False
    writer.write_binary(value)
    return True


def _emit_enum(field: _descriptor.FieldDescriptor, value: Any, writer: JsonWriter) -> bool:
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    enum_value = field.enum_type.values_by_number.get(value)
    if enum_value is None:
        log.debug2("No name for %s value %d", field.enum_type.full_name, value)
        return False
    writer.write_string(enum_value.name)
    return True


def _emit_unhandled(*_) -> bool:
    return False


_EMITTERS: Dict[ValueKind, Callable[[_descriptor.FieldDescriptor, Any, JsonWriter], bool]] = {
    ValueKind.INTEGER: _emit_integer,
    ValueKind.FLOAT: _emit_float,
    ValueKind.BOOLEAN: _emit_boolean,
    ValueKind.STRING: _emit_string,
    ValueKind.BINARY: _emit_binary,
    ValueKind.ENUM: _emit_enum,
    # Messages are written by the writer itself
    ValueKind.MESSAGE: _emit_unhandled,
}


## Reading #####################################################################


def parse_scalar(field: _descriptor.FieldDescriptor, stream: TokenStream) -> Any:
    """Read the current token as a single non-message value for the given
    field. The stream is not advanced.
    """
    return _PARSERS[value_kind(field)](field, stream)


def _unexpected(field: _descriptor.FieldDescriptor, stream: TokenStream, what: str):
    found = "end of input" if stream.token is None else stream.token
    return SemanticParseError(
        f"{what} expected for field {field.full_name}, found {found}",
        stream.position,
    )


def _parse_integer(field: _descriptor.FieldDescriptor, stream: TokenStream) -> int:
    if stream.token != NUMBER:
        raise _unexpected(field, stream, "Number")
    value = stream.value
    if isinstance(value, int):
        return value
    if math.isfinite(value) and int(value) == value:
        return int(value)
    raise SemanticParseError(
        f"Integral number expected for field {field.full_name}, found {value}",
        stream.position,
    )


def _parse_float(field: _descriptor.FieldDescriptor, stream: TokenStream) -> float:
    if stream.token == NUMBER:
        return float(stream.value)
    if stream.token == STRING and stream.value in _NON_FINITE_NAMES:
        return _NON_FINITE_NAMES[stream.value]
    raise _unexpected(field, stream, "Number")


def _parse_boolean(field: _descriptor.FieldDescriptor, stream: TokenStream) -> bool:
    if stream.token != BOOLEAN:
        raise _unexpected(field, stream, "Boolean")
    return stream.value


def _parse_string(field: _descriptor.FieldDescriptor, stream: TokenStream) -> str:
    if stream.token != STRING:
        raise _unexpected(field, stream, "String")
    return stream.value


def _parse_binary(field: _descriptor.FieldDescriptor, stream: TokenStream) -> bytes:
    """Accept standard and URL-safe base64, with or without padding"""
    if stream.token != STRING:
        raise _unexpected(field, stream, "Base64 string")
    encoded = stream.value + "=" * (-len(stream.value) % 4)
    try:
        # URL-safe input is mapped onto the standard alphabet so that both
        # are validated the same way
        encoded = encoded.translate(_URLSAFE_TO_STANDARD)
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as err:
        raise SemanticParseError(
            f"Invalid base64 value for field {field.full_name}: {err}",
            stream.position,
        ) from err


def _parse_enum(field: _descriptor.FieldDescriptor, stream: TokenStream) -> int:
    """Enums are accepted by numeric code or by name"""
    if stream.token == NUMBER:
        value = stream.value
        enum_value = None
        if isinstance(value, int) or (math.isfinite(value) and int(value) == value):
            enum_value = field.enum_type.values_by_number.get(int(value))
    elif stream.token == STRING:
        enum_value = field.enum_type.values_by_name.get(stream.value)
    else:
        raise SemanticParseError(
            f"Unexpected value for enum field {field.full_name}", stream.position
        )

    if enum_value is None:
        raise SemanticParseError(
            f"Unknown enum value {stream.value!r} for {field.enum_type.full_name}",
            stream.position,
        )
    return enum_value.number


def _parse_unhandled(field: _descriptor.FieldDescriptor, stream: TokenStream):
    raise SchemaError(f"Field {field.full_name} is not a scalar field", stream.position)


_PARSERS: Dict[ValueKind, Callable[[_descriptor.FieldDescriptor, TokenStream], Any]] = {
    ValueKind.INTEGER: _parse_integer,
    ValueKind.FLOAT: _parse_float,
    ValueKind.BOOLEAN: _parse_boolean,
    ValueKind.STRING: _parse_string,
    ValueKind.BINARY: _parse_binary,
    ValueKind.ENUM: _parse_enum,
    # Messages are read by the reader itself
    ValueKind.MESSAGE: _parse_unhandled,
}
