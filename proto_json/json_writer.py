"""
Token sinks for the message writer. Each JsonWriter turns the same sequence of
emission calls into a different output: JSON text on a handle, or a decoded
Python object.
"""

# Standard
from typing import Any, List, TextIO
import abc
import base64
import json

# Third Party
import ijson

# Local
from .token_stream import (
    BOOLEAN,
    END_ARRAY,
    END_OBJECT,
    FIELD_NAME,
    NULL,
    NUMBER,
    START_ARRAY,
    START_OBJECT,
    STRING,
)


class JsonWriter(abc.ABC):
    """Common emission interface. Concrete writers implement _emit for the
    (event, value) pairs in the same vocabulary the TokenStream reads.
    """

    @abc.abstractmethod
    def _emit(self, event: str, value: Any):
        """Write a single token"""

    def start_object(self):
        self._emit(START_OBJECT, None)

    def end_object(self):
        self._emit(END_OBJECT, None)

    def start_array(self):
        self._emit(START_ARRAY, None)

    def end_array(self):
        self._emit(END_ARRAY, None)

    def field_name(self, name: str):
        self._emit(FIELD_NAME, name)

    def write_string(self, value: str):
        self._emit(STRING, value)

    def write_number(self, value: Any):
        self._emit(NUMBER, value)

    def write_boolean(self, value: bool):
        self._emit(BOOLEAN, value)

    def write_null(self):
        self._emit(NULL, None)

    def write_binary(self, value: bytes):
        """Binary payloads travel as standard padded base64 strings"""
        self.write_string(base64.b64encode(value).decode("ascii"))


class JsonTextWriter(JsonWriter):
    """Write compact JSON text to a text handle"""

    def __init__(self, handle: TextIO):
        self.handle = handle
        # One entry per open container: True once it holds an element
        self._has_items: List[bool] = []
        self._after_key = False

    def _emit(self, event: str, value: Any):
        if event in (END_OBJECT, END_ARRAY):
            self._has_items.pop()
            self.handle.write("}" if event == END_OBJECT else "]")
            return

        if self._after_key:
            self._after_key = False
        elif self._has_items:
            if self._has_items[-1]:
                self.handle.write(",")
            self._has_items[-1] = True

        if event == FIELD_NAME:
            self.handle.write(json.dumps(value, ensure_ascii=False))
            self.handle.write(":")
            self._after_key = True
        elif event == START_OBJECT:
            self.handle.write("{")
            self._has_items.append(False)
        elif event == START_ARRAY:
            self.handle.write("[")
            self._has_items.append(False)
        else:
            self.handle.write(json.dumps(value, ensure_ascii=False, allow_nan=False))


class ObjectWriter(JsonWriter):
    """Build the decoded Python object (dicts, lists and scalars) that the
    emitted JSON would decode to
    """

    def __init__(self):
        self._builder = ijson.ObjectBuilder()

    def _emit(self, event: str, value: Any):
        self._builder.event(event, value)

    @property
    def value(self) -> Any:
        return self._builder.value
