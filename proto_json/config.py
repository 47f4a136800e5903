"""
Library-wide defaults. Each default may be overridden per call with the
matching keyword argument.
"""

# Standard
import os

# Maximum message nesting depth for both reading and writing. This matches the
# default recursion limit of the protobuf binary parser.
DEFAULT_MAX_DEPTH = int(os.environ.get("PROTO_JSON_MAX_DEPTH", 100))
