"""
One-call conversions between messages and JSON text or decoded JSON objects
"""

# Standard
from typing import Any, Union
import io

# Third Party
from google.protobuf import message as _message

# Local
from .json_writer import JsonTextWriter, ObjectWriter
from .reader import read_json
from .registry import TargetType
from .token_stream import TokenStream
from .writer import write_json


def to_json(message: _message.Message, **kwargs) -> str:
    """Serialize the message to a compact JSON string"""
    handle = io.StringIO()
    write_json(message, JsonTextWriter(handle), **kwargs)
    return handle.getvalue()


def from_json(
    target: TargetType, text: Union[str, bytes], **kwargs
) -> _message.Message:
    """Parse a JSON document into a message of the target type. Keyword
    arguments are passed through to read_json.
    """
    return read_json(target, TokenStream.from_text(text), **kwargs)


def message_to_dict(message: _message.Message, **kwargs) -> dict:
    """Convert the message to the dict its JSON form decodes to"""
    writer = ObjectWriter()
    write_json(message, writer, **kwargs)
    return writer.value


def dict_to_message(target: TargetType, obj: Any, **kwargs) -> _message.Message:
    """Populate a message of the target type from a decoded JSON object"""
    return read_json(target, TokenStream.from_object(obj), **kwargs)
