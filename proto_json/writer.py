"""
Serialize protobuf messages as JSON by walking their field descriptors
"""

# Standard
from typing import Any

# Third Party
from google.protobuf import descriptor as _descriptor
from google.protobuf import message as _message

# First Party
import alog

# Local
from .coercion import ValueKind, emit_scalar, value_kind
from .compat import is_map_field, is_repeated, is_required
from .config import DEFAULT_MAX_DEPTH
from .errors import SerializationError
from .json_writer import JsonWriter

log = alog.use_channel("PJWRT")


def write_json(
    message: _message.Message,
    writer: JsonWriter,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
):
    """Write the message as one JSON object.

    Fields are written in declaration order. Optional fields that are not set
    are omitted, while repeated and required fields are always written.
    Enums are written by name.

    Args:
        message:  _message.Message
            The message to serialize
        writer:  JsonWriter
            The token sink to write to

    Kwargs:
        max_depth:  int
            The deepest message nesting that will be written

    Raises:
        SerializationError if a field holds a value that cannot be written or
        the nesting is too deep. Tokens already written are left in the sink.
    """
    _write_message(message, writer, max_depth, 1)


def write_value(
    field: _descriptor.FieldDescriptor,
    value: Any,
    writer: JsonWriter,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    depth: int = 1,
) -> bool:
    """Write the full value of one field: a sequence as an array, a map as an
    array of key/value entry objects, anything else as a single value.

    Returns:
        handled:  bool
            False if the value matches no kind the field can hold
    """
    if is_map_field(field):
        key_field = field.message_type.fields_by_name["key"]
        value_field = field.message_type.fields_by_name["value"]
        writer.start_array()
        for key in sorted(value):
            writer.start_object()
            writer.field_name(key_field.name)
            if not _write_single(key_field, key, writer, max_depth, depth + 1):
                return False
            writer.field_name(value_field.name)
            if not _write_single(value_field, value[key], writer, max_depth, depth + 1):
                return False
            writer.end_object()
        writer.end_array()
        return True

    if is_repeated(field):
        writer.start_array()
        for element in value:
            if not _write_single(field, element, writer, max_depth, depth):
                return False
        writer.end_array()
        return True

    return _write_single(field, value, writer, max_depth, depth)


## Implementation Details ######################################################


def _write_message(
    message: _message.Message,
    writer: JsonWriter,
    max_depth: int,
    depth: int,
):
    descriptor = message.DESCRIPTOR
    if depth > max_depth:
        raise SerializationError(
            f"Maximum nesting depth {max_depth} exceeded writing {descriptor.full_name}"
        )
    log.debug3("Writing %s at depth %d", descriptor.full_name, depth)

    set_fields = {field.name for field, _ in message.ListFields()}
    writer.start_object()
    for field in descriptor.fields:
        if not (is_repeated(field) or is_required(field) or field.name in set_fields):
            continue

        writer.field_name(field.name)
        value = getattr(message, field.name)
        if not write_value(field, value, writer, max_depth=max_depth, depth=depth):
            raise SerializationError(
                f"Unable to serialize field '{field.name}' in "
                f"{descriptor.full_name}: unhandled field value"
            )
    writer.end_object()


def _write_single(
    field: _descriptor.FieldDescriptor,
    value: Any,
    writer: JsonWriter,
    max_depth: int,
    depth: int,
) -> bool:
    if value_kind(field) is ValueKind.MESSAGE:
        if not isinstance(value, _message.Message):
            return False
        _write_message(value, writer, max_depth, depth + 1)
        return True
    return emit_scalar(field, value, writer)
