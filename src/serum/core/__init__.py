"""Core of serum: templates, capability accessors, the canonical value, constructors.

- Template/parse/interpolate: `{{ name }}` message templates that never fail
- code/message/details/detail/cause: accessors over any error-like value
- ErrorValue/ErrorData: the canonical, raisable error record
- errorf/error/with_*: constructors; standardize: coercion of foreign errors
- is_equivalent/chain_contains: logical-equivalence checks
"""

from .capabilities import (
    BEST_GUESS_PREFIX,
    EMPTY_CODE,
    Details,
    SerumError,
    SerumErrorWithCause,
    SerumErrorWithDetails,
    SerumErrorWithMessage,
    best_guess_code,
    cause,
    code,
    detail,
    details,
    details_map,
    is_serum,
    message,
    synthesize_string,
)
from .constructors import (
    CauseLink,
    DetailEntry,
    ErrorOption,
    LiteralMessage,
    TemplatedMessage,
    error,
    errorf,
    standardize,
    with_cause,
    with_detail,
    with_message_literal,
    with_message_template,
)
from .template import Segment, Template, interpolate, parse, quote
from .value import ErrorData, ErrorValue, chain_contains, is_equivalent

__all__ = [
    # Template
    "Segment", "Template", "parse", "interpolate", "quote",
    # Capabilities
    "SerumError", "SerumErrorWithMessage", "SerumErrorWithDetails", "SerumErrorWithCause",
    "Details", "EMPTY_CODE", "BEST_GUESS_PREFIX",
    "is_serum", "code", "best_guess_code", "message", "details", "details_map", "detail", "cause",
    "synthesize_string",
    # Value
    "ErrorData", "ErrorValue", "is_equivalent", "chain_contains",
    # Constructors
    "errorf", "error", "standardize",
    "ErrorOption", "LiteralMessage", "TemplatedMessage", "DetailEntry", "CauseLink",
    "with_message_literal", "with_message_template", "with_detail", "with_cause",
]
