"""
This library converts between protobuf messages and JSON token streams by
walking the messages' descriptors, so no per-type marshalling code is needed.

Example:

```
import proto_json

# Write a message as JSON text
text = proto_json.to_json(person)

# Read it back, ignoring any fields Person does not declare
person = proto_json.from_json(Person, text)

# Stream from a file handle opened in binary mode
with open("person.json", "rb") as handle:
    person = proto_json.read_json(Person, proto_json.TokenStream.from_file(handle))
```
"""

# Local
from .convert import dict_to_message, from_json, message_to_dict, to_json
from .errors import (
    ParseError,
    ProtoJsonError,
    SchemaError,
    SemanticParseError,
    SerializationError,
    StructuralParseError,
)
from .json_writer import JsonTextWriter, JsonWriter, ObjectWriter
from .reader import read_json
from .registry import MessageRegistry, default_registry
from .skipper import skip_value
from .token_stream import TokenStream
from .writer import write_json, write_value
