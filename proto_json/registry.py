"""
Explicit registry of message classes keyed by the full name of their message
type. The reader uses it to get a fresh message (builder) for the target type
and for each nested message field without reflecting over generated modules.
"""

# Standard
from typing import Dict, Iterable, Optional, Type, Union

# Third Party
from google.protobuf import descriptor as _descriptor
from google.protobuf import descriptor_pb2
from google.protobuf import descriptor_pool as _descriptor_pool
from google.protobuf import message as _message

# First Party
import alog

# Local
from .compat import get_message_class
from .errors import SchemaError

log = alog.use_channel("PJREG")

# Anything that can name a message type
TargetType = Union[Type[_message.Message], _descriptor.Descriptor, str]


class MessageRegistry:
    __doc__ = __doc__

    def __init__(
        self,
        descriptor_pool: Optional[_descriptor_pool.DescriptorPool] = None,
    ):
        """
        Args:
            descriptor_pool:  Optional[_descriptor_pool.DescriptorPool]
                The pool used to resolve full names that have not been
                registered explicitly. Defaults to the global default pool.
        """
        if descriptor_pool is None:
            log.debug2("Using default descriptor pool")
            descriptor_pool = _descriptor_pool.Default()
        self.descriptor_pool = descriptor_pool
        self._classes: Dict[str, Type[_message.Message]] = {}

    ## Registration ############################################################

    def register(
        self,
        message_class: Type[_message.Message],
    ) -> Type[_message.Message]:
        """Register a message class under its full name. Returns the class so
        that this can be used as a decorator.
        """
        descriptor = getattr(message_class, "DESCRIPTOR", None)
        if not isinstance(descriptor, _descriptor.Descriptor):
            raise SchemaError(f"Not a protobuf message class: {message_class}")
        log.debug2("Registering %s", descriptor.full_name)
        self._classes[descriptor.full_name] = message_class
        return message_class

    def add_file(
        self,
        fd_proto: descriptor_pb2.FileDescriptorProto,
    ) -> Dict[str, Type[_message.Message]]:
        """Add a FileDescriptorProto to this registry's pool and register a
        class for every message type it declares.

        Adding a file that is already in the pool is a no-op if the content
        matches and a SchemaError otherwise.

        Args:
            fd_proto:  descriptor_pb2.FileDescriptorProto
                The file to add

        Returns:
            message_classes:  Dict[str, Type[_message.Message]]
                Mapping from full name to class for the messages in the file
        """
        try:
            existing_fd = self.descriptor_pool.FindFileByName(fd_proto.name)
            existing_proto = descriptor_pb2.FileDescriptorProto()
            existing_fd.CopyToProto(existing_proto)
            if not _are_same_files(fd_proto, existing_proto):
                raise SchemaError(
                    f"Cannot add file {fd_proto.name}: "
                    "file already exists with different content"
                )
            log.debug2("File %s already in pool", fd_proto.name)
            file_descriptor = existing_fd
        except KeyError:
            log.debug("Adding file %s to pool", fd_proto.name)
            try:
                self.descriptor_pool.AddSerializedFile(fd_proto.SerializeToString())
                file_descriptor = self.descriptor_pool.FindFileByName(fd_proto.name)
            except (TypeError, KeyError) as err:
                raise SchemaError(
                    f"Failed to add {fd_proto.name} to descriptor pool: {err}"
                ) from err

        message_classes = {}
        for descriptor in _walk_messages(file_descriptor.message_types_by_name.values()):
            message_classes[descriptor.full_name] = self.get_message_class(descriptor)
        return message_classes

    ## Lookup ##################################################################

    def get_message_class(self, target: TargetType) -> Type[_message.Message]:
        """Resolve a message class from a class, a Descriptor or a full name"""
        if isinstance(target, type) and issubclass(target, _message.Message):
            return target

        if isinstance(target, str):
            message_class = self._classes.get(target)
            if message_class is not None:
                return message_class
            try:
                descriptor = self.descriptor_pool.FindMessageTypeByName(target)
            except KeyError as err:
                raise SchemaError(f"Unknown message type: {target}") from err
        elif isinstance(target, _descriptor.Descriptor):
            descriptor = target
        else:
            raise SchemaError(f"Cannot resolve a message type from {target!r}")

        # The same full name may come from another pool, so a cached class is
        # only reused for the exact descriptor it was built from
        message_class = self._classes.get(descriptor.full_name)
        if message_class is not None and message_class.DESCRIPTOR is descriptor:
            return message_class

        log.debug3("Building class for %s", descriptor.full_name)
        try:
            message_class = get_message_class(descriptor)
        except (TypeError, KeyError) as err:
            raise SchemaError(
                f"Unable to create a message class for {descriptor.full_name}"
            ) from err
        self._classes.setdefault(descriptor.full_name, message_class)
        return message_class

    def new_message(self, target: TargetType) -> _message.Message:
        """Create an empty message of the target type"""
        return self.get_message_class(target)()


_DEFAULT_REGISTRY: Optional[MessageRegistry] = None


def default_registry() -> MessageRegistry:
    """Get the shared registry backed by the default descriptor pool"""
    global _DEFAULT_REGISTRY
    if _DEFAULT_REGISTRY is None:
        _DEFAULT_REGISTRY = MessageRegistry()
    return _DEFAULT_REGISTRY


## Implementation Details ######################################################


def _walk_messages(
    descriptors: Iterable[_descriptor.Descriptor],
) -> Iterable[_descriptor.Descriptor]:
    for descriptor in descriptors:
        # Map entries are never addressed directly
        if descriptor.GetOptions().map_entry:
            continue
        yield descriptor
        yield from _walk_messages(descriptor.nested_types)


def _are_same_files(
    d1: descriptor_pb2.FileDescriptorProto, d2: descriptor_pb2.FileDescriptorProto
) -> bool:
    """Two files are the same if they share a package and dependencies and
    declare the same messages and enums
    """
    return (
        d1.package == d2.package
        and list(d1.dependency) == list(d2.dependency)
        and _are_same_enums(d1.enum_type, d2.enum_type)
        and _are_same_messages(d1.message_type, d2.message_type)
    )


def _are_same_enums(d1_enums, d2_enums) -> bool:
    d1_values = {
        enum.name: [(val.name, val.number) for val in enum.value] for enum in d1_enums
    }
    d2_values = {
        enum.name: [(val.name, val.number) for val in enum.value] for enum in d2_enums
    }
    return d1_values == d2_values


def _are_same_messages(d1_messages, d2_messages) -> bool:
    d1_msg_map = {msg.name: msg for msg in d1_messages}
    d2_msg_map = {msg.name: msg for msg in d2_messages}
    if d1_msg_map.keys() != d2_msg_map.keys():
        return False
    for name, d1_msg in d1_msg_map.items():
        d2_msg = d2_msg_map[name]
        if _field_signatures(d1_msg) != _field_signatures(d2_msg):
            return False
        if not _are_same_enums(d1_msg.enum_type, d2_msg.enum_type):
            return False
        if not _are_same_messages(d1_msg.nested_type, d2_msg.nested_type):
            return False
    return True


def _field_signatures(msg: descriptor_pb2.DescriptorProto) -> dict:
    """Pools fill in the label and fully qualify type names when copying a file
    back out, so both are normalized here
    """
    return {
        field.name: (
            field.number,
            field.label or descriptor_pb2.FieldDescriptorProto.LABEL_OPTIONAL,
            field.type,
            field.type_name.rsplit(".", 1)[-1],
        )
        for field in msg.field
    }
