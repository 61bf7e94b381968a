"""secureenv reads environment variables once and removes them from the process.

- [`env`][secureenv.env]: Accessors that consume and parse environment variables
- [`parse`][secureenv.parse]: Per-type parsing grammar and the `Kind` descriptors
- [`exception`][secureenv.exception]: Exception classes
"""

import logging

from secureenv.env import (
    Lookup,
    assign,
    consume,
    fetch,
    get,
    get_bool,
    get_float32,
    get_float64,
    get_int,
    get_int8,
    get_int16,
    get_int32,
    get_int64,
    get_string,
    get_uint,
    get_uint8,
    get_uint16,
    get_uint32,
    get_uint64,
)
from secureenv.exception import ParseError, SecureEnvBaseError
from secureenv.parse import (
    BOOL,
    FLOAT32,
    FLOAT64,
    INT,
    INT8,
    INT16,
    INT32,
    INT64,
    NATIVE_INT_BITS,
    STRING,
    UINT,
    UINT8,
    UINT16,
    UINT32,
    UINT64,
    Kind,
)

__version__ = "0.1.0"

# Add NullHandler to prevent "No handler found" warnings when secureenv is used as a library.
# Applications should configure logging via logging.basicConfig() or by
# setting up handlers on the root logger.
logging.getLogger(__name__).addHandler(logging.NullHandler())
