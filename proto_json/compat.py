"""
Compatibility module for API changes between different versions of protobuf
"""

# Standard
from typing import Type

# Third Party
from google.protobuf import descriptor as _descriptor
from google.protobuf import message as _message
from google.protobuf import message_factory

# protobuf >= 4.22
try:  # pragma: no cover
    from google.protobuf.message_factory import GetMessageClass

    def get_message_class(descriptor: _descriptor.Descriptor) -> Type[_message.Message]:
        return GetMessageClass(descriptor)

# protobuf < 4.22
except ImportError:  # pragma: no cover
    _FACTORY = message_factory.MessageFactory()

    def get_message_class(descriptor: _descriptor.Descriptor) -> Type[_message.Message]:
        return _FACTORY.GetPrototype(descriptor)


def is_repeated(field: _descriptor.FieldDescriptor) -> bool:
    """Newer releases deprecate FieldDescriptor.label in favor of is_repeated"""
    try:
        return field.is_repeated
    except AttributeError:  # pragma: no cover
        return field.label == _descriptor.FieldDescriptor.LABEL_REPEATED


def is_required(field: _descriptor.FieldDescriptor) -> bool:
    """Newer releases deprecate FieldDescriptor.label in favor of is_required"""
    try:
        return field.is_required
    except AttributeError:  # pragma: no cover
        return field.label == _descriptor.FieldDescriptor.LABEL_REQUIRED


def is_map_field(field: _descriptor.FieldDescriptor) -> bool:
    """Map fields are repeated fields of a synthesized *Entry message type"""
    return (
        field.message_type is not None
        and is_repeated(field)
        and field.message_type.GetOptions().map_entry
    )
