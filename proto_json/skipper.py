"""
Discard a JSON value whose field name has no match in the target message
"""

# First Party
import alog

# Local
from .errors import StructuralParseError
from .token_stream import FIELD_NAME, STRUCT_END, STRUCT_START, TokenStream

log = alog.use_channel("PJSKP")


def skip_value(stream: TokenStream):
    """Consume the value at the current token, whatever its shape.

    Nested structures are skipped by counting structure-start and structure-end
    tokens rather than by recursion, so arbitrarily deep values cost no stack.
    On return the cursor rests on the last token of the value; the next
    advance() yields the token following it.
    """
    token = stream.token
    if token is None or token in STRUCT_END or token == FIELD_NAME:
        stream.expect(what="Value")
    if token not in STRUCT_START:
        # Primitive values are a single token
        return

    nesting = 1
    while nesting:
        token = stream.advance()
        if token is None:
            raise StructuralParseError("Unterminated structure", stream.position)
        if token in STRUCT_START:
            nesting += 1
        elif token in STRUCT_END:
            nesting -= 1
    log.debug4("Skipped structure ending at token %d", stream.position)
