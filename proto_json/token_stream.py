"""
Cursor over a stream of JSON tokens. The reader only ever looks at the current
token and advances one token at a time, so any source of (event, value) pairs
in the ijson vocabulary can back a TokenStream.
"""

# Standard
from typing import Any, BinaryIO, Iterable, Iterator, Optional, Tuple, Union
import io

# Third Party
import ijson

# First Party
import alog

# Local
from .errors import StructuralParseError

log = alog.use_channel("PJTOK")

## Token kinds #################################################################

START_OBJECT = "start_map"
END_OBJECT = "end_map"
START_ARRAY = "start_array"
END_ARRAY = "end_array"
FIELD_NAME = "map_key"
STRING = "string"
NUMBER = "number"
BOOLEAN = "boolean"
NULL = "null"

STRUCT_START = frozenset([START_OBJECT, START_ARRAY])
STRUCT_END = frozenset([END_OBJECT, END_ARRAY])

# Some ijson backends split numbers into these two events
_NUMBER_EVENTS = frozenset(["integer", "double"])

TokenEvent = Tuple[str, Any]


class TokenStream:
    __doc__ = __doc__

    def __init__(self, events: Iterable[TokenEvent]):
        """
        Args:
            events:  Iterable[TokenEvent]
                The (event, value) pairs to walk
        """
        self._events: Iterator[TokenEvent] = iter(events)
        self.token: Optional[str] = None
        self.value: Any = None
        self.position = 0

    @classmethod
    def from_text(cls, text: Union[str, bytes]) -> "TokenStream":
        """Tokenize an in-memory JSON document"""
        if isinstance(text, str):
            text = text.encode("utf-8")
        return cls.from_file(io.BytesIO(text))

    @classmethod
    def from_file(cls, handle: BinaryIO) -> "TokenStream":
        """Tokenize a JSON document incrementally from a file handle opened in
        binary mode
        """
        return cls(ijson.basic_parse(handle))

    @classmethod
    def from_object(cls, obj: Any) -> "TokenStream":
        """Walk an already-decoded JSON value (dicts, lists, str, int, float,
        bool, None) as a token stream
        """
        return cls(_object_events(obj))

    @property
    def started(self) -> bool:
        """Whether advance has been called at least once"""
        return self.position > 0

    def advance(self) -> Optional[str]:
        """Move to the next token and return its kind. At the end of the input
        the token is None.
        """
        try:
            self.token, self.value = next(self._events)
        except StopIteration:
            self.token, self.value = None, None
        except ijson.JSONError as err:
            raise StructuralParseError(
                f"Malformed JSON: {err}", self.position + 1
            ) from err
        self.position += 1
        if self.token in _NUMBER_EVENTS:
            self.token = NUMBER
        log.debug4("Token %d: %s %r", self.position, self.token, self.value)
        return self.token

    def expect(self, *kinds: str, what: Optional[str] = None):
        """Raise a StructuralParseError unless the current token is one of the
        given kinds
        """
        if self.token not in kinds:
            found = "end of input" if self.token is None else self.token
            raise StructuralParseError(
                f"{what or ' or '.join(kinds)} expected, found {found}",
                self.position,
            )


## Implementation Details ######################################################


def _object_events(obj: Any) -> Iterator[TokenEvent]:
    if isinstance(obj, dict):
        yield START_OBJECT, None
        for key, val in obj.items():
            yield FIELD_NAME, key
            yield from _object_events(val)
        yield END_OBJECT, None
    elif isinstance(obj, (list, tuple)):
        yield START_ARRAY, None
        for val in obj:
            yield from _object_events(val)
        yield END_ARRAY, None
    elif obj is None:
        yield NULL, None
    # bool must be checked before int
    elif isinstance(obj, bool):
        yield BOOLEAN, obj
    elif isinstance(obj, (int, float)):
        yield NUMBER, obj
    elif isinstance(obj, str):
        yield STRING, obj
    else:
        raise ijson.JSONError(f"Not a JSON value: {obj!r}")
