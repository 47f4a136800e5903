"""
Parse JSON token streams into protobuf messages by recursive descent over the
target message's field descriptors
"""

# Standard
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple

# Third Party
from google.protobuf import descriptor as _descriptor
from google.protobuf import message as _message

# First Party
import alog

# Local
from .coercion import ValueKind, parse_scalar, value_kind
from .compat import is_map_field, is_repeated
from .config import DEFAULT_MAX_DEPTH
from .errors import SemanticParseError, StructuralParseError
from .registry import MessageRegistry, TargetType, default_registry
from .skipper import skip_value
from .token_stream import (
    END_ARRAY,
    END_OBJECT,
    FIELD_NAME,
    NULL,
    START_ARRAY,
    START_OBJECT,
    STRUCT_END,
    TokenStream,
)

log = alog.use_channel("PJRDR")


def read_json(
    target: TargetType,
    stream: TokenStream,
    *,
    registry: Optional[MessageRegistry] = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
    check_required: bool = True,
) -> _message.Message:
    """Read one JSON object from the stream into a new message of the target
    type.

    If the stream has not been advanced yet, it is advanced once to reach the
    first token. Otherwise the current token must be the start of the object.
    On return the current token is the object's closing token.

    Field names are matched exactly against the target's fields. Unknown names
    are skipped along with their value, whatever its shape. If a field appears
    more than once, the last occurrence wins. Enum fields accept either the
    value name or its number.

    Args:
        target:  TargetType
            The message class, message Descriptor or full message name to read
        stream:  TokenStream
            The token stream positioned at (or just before) the object

    Kwargs:
        registry:  Optional[MessageRegistry]
            The registry used to create the target and nested messages.
            Defaults to the registry for the default descriptor pool.
        max_depth:  int
            The deepest message nesting that will be read
        check_required:  bool
            Whether to reject messages with unset required fields

    Returns:
        message:  _message.Message
            The populated message

    Raises:
        StructuralParseError for tokens that are out of place for the parser
            state, malformed or truncated input, and nesting beyond max_depth
        SemanticParseError for values that are invalid for their field
        SchemaError if a message class cannot be produced for the target or a
            nested message type
    """
    context = _ReadContext(
        registry=registry or default_registry(),
        max_depth=max_depth,
        check_required=check_required,
    )
    builder = context.registry.new_message(target)
    if not stream.started:
        stream.advance()
    return _read_message(builder, stream, context, 1)


## Implementation Details ######################################################


@dataclass(frozen=True)
class _ReadContext:
    registry: MessageRegistry
    max_depth: int
    check_required: bool


def _read_message(
    builder: _message.Message,
    stream: TokenStream,
    context: _ReadContext,
    depth: int,
) -> _message.Message:
    descriptor = builder.DESCRIPTOR
    _check_depth(descriptor, stream, context, depth)
    stream.expect(START_OBJECT, what="Object")
    log.debug3("Reading %s at depth %d", descriptor.full_name, depth)

    while stream.advance() != END_OBJECT:
        stream.expect(FIELD_NAME, what="Field name")
        field_name = stream.value
        stream.advance()

        field = descriptor.fields_by_name.get(field_name)
        if field is None:
            log.debug2("Skipping unknown field %s in %s", field_name, descriptor.full_name)
            skip_value(stream)
            continue
        _read_field(builder, field, stream, context, depth)

    if context.check_required and not builder.IsInitialized():
        raise SemanticParseError(
            f"Missing required fields in {descriptor.full_name}: "
            + ", ".join(builder.FindInitializationErrors()),
            stream.position,
        )
    return builder


def _read_field(
    builder: _message.Message,
    field: _descriptor.FieldDescriptor,
    stream: TokenStream,
    context: _ReadContext,
    depth: int,
):
    """Read the value at the current token and assign it to the field,
    replacing any earlier value
    """
    if stream.token == NULL:
        builder.ClearField(field.name)
        return

    if is_map_field(field):
        entries = _read_array(
            field,
            stream,
            lambda: _read_map_entry(field.message_type, stream, context, depth + 1),
        )
        _assign(field, stream, lambda: _set_map(builder, field, entries))
        return

    if is_repeated(field):
        values = _read_array(
            field, stream, lambda: _read_single(field, stream, context, depth)
        )
        _assign(field, stream, lambda: _set_repeated(builder, field, values))
        return

    value = _read_single(field, stream, context, depth)
    if value_kind(field) is ValueKind.MESSAGE:
        _assign(field, stream, lambda: getattr(builder, field.name).CopyFrom(value))
    else:
        _assign(field, stream, lambda: setattr(builder, field.name, value))


def _read_array(
    field: _descriptor.FieldDescriptor,
    stream: TokenStream,
    read_element: Callable[[], Any],
) -> List[Any]:
    stream.expect(START_ARRAY, what=f"Array for field {field.full_name}")
    elements = []
    while stream.advance() != END_ARRAY:
        elements.append(read_element())
    return elements


def _read_single(
    field: _descriptor.FieldDescriptor,
    stream: TokenStream,
    context: _ReadContext,
    depth: int,
) -> Any:
    """Read exactly one non-repeated value for the field"""
    if stream.token is None or stream.token in STRUCT_END or stream.token == FIELD_NAME:
        stream.expect(what="Value")

    if value_kind(field) is ValueKind.MESSAGE:
        nested = context.registry.new_message(field.message_type)
        return _read_message(nested, stream, context, depth + 1)
    return parse_scalar(field, stream)


def _read_map_entry(
    entry_descriptor: _descriptor.Descriptor,
    stream: TokenStream,
    context: _ReadContext,
    depth: int,
) -> Tuple[Any, Any]:
    """Read one {"key": ..., "value": ...} object. A missing or null key or
    value takes its default.
    """
    _check_depth(entry_descriptor, stream, context, depth)
    stream.expect(START_OBJECT, what="Map entry object")
    key_field = entry_descriptor.fields_by_name["key"]
    value_field = entry_descriptor.fields_by_name["value"]

    key = value = None
    while stream.advance() != END_OBJECT:
        stream.expect(FIELD_NAME, what="Field name")
        field_name = stream.value
        stream.advance()
        if field_name == key_field.name:
            key = None if stream.token == NULL else _read_single(key_field, stream, context, depth)
        elif field_name == value_field.name:
            value = (
                None
                if stream.token == NULL
                else _read_single(value_field, stream, context, depth)
            )
        else:
            skip_value(stream)

    if key is None:
        key = key_field.default_value
    if value is None and value_kind(value_field) is not ValueKind.MESSAGE:
        value = value_field.default_value
    return key, value


def _set_repeated(
    builder: _message.Message,
    field: _descriptor.FieldDescriptor,
    values: List[Any],
):
    builder.ClearField(field.name)
    getattr(builder, field.name).extend(values)


def _set_map(
    builder: _message.Message,
    field: _descriptor.FieldDescriptor,
    entries: List[Tuple[Any, Any]],
):
    builder.ClearField(field.name)
    container = getattr(builder, field.name)
    value_field = field.message_type.fields_by_name["value"]
    for key, value in entries:
        if value_kind(value_field) is ValueKind.MESSAGE:
            # Touching the key creates an empty entry when there is no value
            entry = container[key]
            if value is not None:
                entry.CopyFrom(value)
        else:
            container[key] = value


def _assign(
    field: _descriptor.FieldDescriptor,
    stream: TokenStream,
    setter: Callable[[], Any],
):
    """Run the setter, reporting values protobuf rejects (out of range, wrong
    type) as parse errors
    """
    try:
        setter()
    except (TypeError, ValueError) as err:
        raise SemanticParseError(
            f"Invalid value for field {field.full_name}: {err}", stream.position
        ) from err


def _check_depth(
    descriptor: _descriptor.Descriptor,
    stream: TokenStream,
    context: _ReadContext,
    depth: int,
):
    if depth > context.max_depth:
        raise StructuralParseError(
            f"Maximum nesting depth {context.max_depth} exceeded reading "
            f"{descriptor.full_name}",
            stream.position,
        )
