"""
Typed failures raised while converting between protobuf messages and JSON
token streams
"""

# Standard
from typing import Optional


class ProtoJsonError(Exception):
    """Base class for all conversion failures. The position, when known, is the
    ordinal of the token the stream was positioned on when the error occurred.
    """

    def __init__(self, message: str, position: Optional[int] = None):
        self.position = position
        if position is not None:
            message = f"{message} (at token {position})"
        super().__init__(message)


class ParseError(ProtoJsonError, ValueError):
    """The JSON input could not be converted to the target message"""


class StructuralParseError(ParseError):
    """The current token is not the kind required by the parser state"""


class SemanticParseError(ParseError):
    """The token kind is acceptable, but its value is not valid for the field"""


class SchemaError(ProtoJsonError, TypeError):
    """The target type cannot produce a message instance"""


class SerializationError(ProtoJsonError, ValueError):
    """A field value could not be written"""
