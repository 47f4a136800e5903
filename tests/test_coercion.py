"""
Tests for type tag classification and scalar coercion
"""

# Third Party
import pytest

# Local
from proto_json import ObjectWriter, SemanticParseError, TokenStream
from proto_json.coercion import ValueKind, emit_scalar, parse_scalar, value_kind


@pytest.mark.parametrize(
    "name,kind",
    [
        ("i32", ValueKind.INTEGER),
        ("u64", ValueKind.INTEGER),
        ("s32", ValueKind.INTEGER),
        ("f64", ValueKind.INTEGER),
        ("f", ValueKind.FLOAT),
        ("d", ValueKind.FLOAT),
        ("b", ValueKind.BOOLEAN),
        ("s", ValueKind.STRING),
        ("raw", ValueKind.BINARY),
        ("color", ValueKind.ENUM),
        ("inner", ValueKind.MESSAGE),
        ("ints", ValueKind.INTEGER),
    ],
)
def test_value_kind(Everything, name, kind):
    """Make sure every type tag maps to its value kind"""
    assert value_kind(Everything.DESCRIPTOR.fields_by_name[name]) is kind


def _stream_at(value):
    stream = TokenStream.from_object([value])
    stream.advance()
    stream.advance()
    return stream


def test_parse_scalar_does_not_advance(Everything):
    """Make sure parsing leaves the cursor on the value"""
    stream = _stream_at(5)
    assert parse_scalar(Everything.DESCRIPTOR.fields_by_name["i32"], stream) == 5
    assert stream.position == 2


def test_parse_scalar_bool_is_not_integer(Everything):
    """Make sure booleans never pass as numbers"""
    with pytest.raises(SemanticParseError):
        parse_scalar(Everything.DESCRIPTOR.fields_by_name["i32"], _stream_at(True))


def test_emit_scalar_bool_is_not_integer(Everything):
    """Make sure booleans are not written into integer fields"""
    writer = ObjectWriter()
    assert not emit_scalar(Everything.DESCRIPTOR.fields_by_name["i32"], True, writer)
    assert emit_scalar(Everything.DESCRIPTOR.fields_by_name["b"], True, writer)
    assert writer.value is True
