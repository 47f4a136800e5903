"""
Common test helpers
"""

# Standard
import os

# Third Party
from google.protobuf import descriptor_pb2, descriptor_pool
import pytest

# First Party
import alog

# Local
from proto_json.registry import MessageRegistry

# Global logging config
alog.configure(
    default_level=os.environ.get("LOG_LEVEL", "info"),
    filters=os.environ.get("LOG_FILTERS", ""),
    formatter="json" if os.environ.get("LOG_JSON", "").lower() == "true" else "pretty",
    thread_id=os.environ.get("LOG_THREAD_ID", "").lower() == "true",
)

_FDP = descriptor_pb2.FieldDescriptorProto


def _field(name, number, field_type, label=_FDP.LABEL_OPTIONAL, **kwargs):
    return _FDP(name=name, number=number, type=field_type, label=label, **kwargs)


def _map_entry(name, key_type, value_type, value_type_name=None):
    # An empty type_name still counts as set, which scalar fields reject
    value_kwargs = {"type_name": value_type_name} if value_type_name else {}
    return descriptor_pb2.DescriptorProto(
        name=name,
        field=[
            _field("key", 1, key_type),
            _field("value", 2, value_type, **value_kwargs),
        ],
        options=descriptor_pb2.MessageOptions(map_entry=True),
    )


def addressbook_file() -> descriptor_pb2.FileDescriptorProto:
    """proto2 address book with required, optional and repeated fields"""
    return descriptor_pb2.FileDescriptorProto(
        name="addressbook.proto",
        package="test.addressbook",
        syntax="proto2",
        message_type=[
            descriptor_pb2.DescriptorProto(
                name="Person",
                field=[
                    _field("name", 1, _FDP.TYPE_STRING, _FDP.LABEL_REQUIRED),
                    _field("id", 2, _FDP.TYPE_INT32, _FDP.LABEL_REQUIRED),
                    _field("email", 3, _FDP.TYPE_STRING),
                    _field(
                        "phone",
                        4,
                        _FDP.TYPE_MESSAGE,
                        _FDP.LABEL_REPEATED,
                        type_name=".test.addressbook.Person.PhoneNumber",
                    ),
                ],
                nested_type=[
                    descriptor_pb2.DescriptorProto(
                        name="PhoneNumber",
                        field=[
                            _field("number", 1, _FDP.TYPE_STRING, _FDP.LABEL_REQUIRED),
                            _field(
                                "type",
                                2,
                                _FDP.TYPE_ENUM,
                                type_name=".test.addressbook.Person.PhoneType",
                                default_value="HOME",
                            ),
                        ],
                    ),
                ],
                enum_type=[
                    descriptor_pb2.EnumDescriptorProto(
                        name="PhoneType",
                        value=[
                            descriptor_pb2.EnumValueDescriptorProto(name="MOBILE", number=0),
                            descriptor_pb2.EnumValueDescriptorProto(name="HOME", number=1),
                            descriptor_pb2.EnumValueDescriptorProto(name="WORK", number=2),
                        ],
                    ),
                ],
            ),
        ],
    )


def everything_file() -> descriptor_pb2.FileDescriptorProto:
    """proto3 messages covering every field kind, maps, oneofs and recursion"""
    pkg = ".test.everything"
    return descriptor_pb2.FileDescriptorProto(
        name="everything.proto",
        package="test.everything",
        syntax="proto3",
        message_type=[
            descriptor_pb2.DescriptorProto(
                name="Everything",
                field=[
                    _field("i32", 1, _FDP.TYPE_INT32),
                    _field("i64", 2, _FDP.TYPE_INT64),
                    _field("u32", 3, _FDP.TYPE_UINT32),
                    _field("u64", 4, _FDP.TYPE_UINT64),
                    _field("s32", 5, _FDP.TYPE_SINT32),
                    _field("f64", 6, _FDP.TYPE_FIXED64),
                    _field("f", 7, _FDP.TYPE_FLOAT),
                    _field("d", 8, _FDP.TYPE_DOUBLE),
                    _field("b", 9, _FDP.TYPE_BOOL),
                    _field("s", 10, _FDP.TYPE_STRING),
                    _field("raw", 11, _FDP.TYPE_BYTES),
                    _field(
                        "color", 12, _FDP.TYPE_ENUM, type_name=f"{pkg}.Everything.Color"
                    ),
                    _field(
                        "inner", 13, _FDP.TYPE_MESSAGE, type_name=f"{pkg}.Everything.Inner"
                    ),
                    _field("ints", 14, _FDP.TYPE_INT32, _FDP.LABEL_REPEATED),
                    _field(
                        "colors",
                        15,
                        _FDP.TYPE_ENUM,
                        _FDP.LABEL_REPEATED,
                        type_name=f"{pkg}.Everything.Color",
                    ),
                    _field(
                        "inners",
                        16,
                        _FDP.TYPE_MESSAGE,
                        _FDP.LABEL_REPEATED,
                        type_name=f"{pkg}.Everything.Inner",
                    ),
                    _field(
                        "counts",
                        17,
                        _FDP.TYPE_MESSAGE,
                        _FDP.LABEL_REPEATED,
                        type_name=f"{pkg}.Everything.CountsEntry",
                    ),
                    _field(
                        "inner_by_id",
                        18,
                        _FDP.TYPE_MESSAGE,
                        _FDP.LABEL_REPEATED,
                        type_name=f"{pkg}.Everything.InnerByIdEntry",
                    ),
                    _field("blobs", 19, _FDP.TYPE_BYTES, _FDP.LABEL_REPEATED),
                    _field("text", 20, _FDP.TYPE_STRING, oneof_index=0),
                    _field(
                        "detail",
                        21,
                        _FDP.TYPE_MESSAGE,
                        type_name=f"{pkg}.Everything.Inner",
                        oneof_index=0,
                    ),
                ],
                nested_type=[
                    descriptor_pb2.DescriptorProto(
                        name="Inner",
                        field=[
                            _field("label", 1, _FDP.TYPE_STRING),
                            _field("tags", 2, _FDP.TYPE_STRING, _FDP.LABEL_REPEATED),
                        ],
                    ),
                    _map_entry("CountsEntry", _FDP.TYPE_STRING, _FDP.TYPE_INT32),
                    _map_entry(
                        "InnerByIdEntry",
                        _FDP.TYPE_INT32,
                        _FDP.TYPE_MESSAGE,
                        f"{pkg}.Everything.Inner",
                    ),
                ],
                enum_type=[
                    descriptor_pb2.EnumDescriptorProto(
                        name="Color",
                        value=[
                            descriptor_pb2.EnumValueDescriptorProto(
                                name="COLOR_UNSET", number=0
                            ),
                            descriptor_pb2.EnumValueDescriptorProto(name="RED", number=1),
                            descriptor_pb2.EnumValueDescriptorProto(name="GREEN", number=2),
                        ],
                    ),
                ],
                oneof_decl=[descriptor_pb2.OneofDescriptorProto(name="choice")],
            ),
            descriptor_pb2.DescriptorProto(
                name="Node",
                field=[
                    _field("name", 1, _FDP.TYPE_STRING),
                    _field("child", 2, _FDP.TYPE_MESSAGE, type_name=f"{pkg}.Node"),
                ],
            ),
        ],
    )


@pytest.fixture
def temp_dpool():
    """Fixture to isolate the descriptor pool used in each test"""
    yield descriptor_pool.DescriptorPool()


@pytest.fixture
def registry(temp_dpool):
    """Registry holding the address book and everything test schemas"""
    registry = MessageRegistry(temp_dpool)
    registry.add_file(addressbook_file())
    registry.add_file(everything_file())
    yield registry


@pytest.fixture
def Person(registry):
    return registry.get_message_class("test.addressbook.Person")


@pytest.fixture
def PhoneNumber(registry):
    return registry.get_message_class("test.addressbook.Person.PhoneNumber")


@pytest.fixture
def Everything(registry):
    return registry.get_message_class("test.everything.Everything")


@pytest.fixture
def Inner(registry):
    return registry.get_message_class("test.everything.Everything.Inner")


@pytest.fixture
def Node(registry):
    return registry.get_message_class("test.everything.Node")


HOME = 1
WORK = 2
RED = 1
GREEN = 2


@pytest.fixture
def person(Person, PhoneNumber):
    """The person used throughout the reader tests"""
    return Person(
        id=1,
        name="n",
        email="e",
        phone=[PhoneNumber(type=HOME, number="111")],
    )


# JSON for the person fixture without the closing brace
PERSON_JSON_HEAD = (
    '{"name":"n","id":1,"email":"e","phone":[{"number":"111","type":"HOME"}]'
)
