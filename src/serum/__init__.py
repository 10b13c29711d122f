"""serum - structured, serializable errors following the Serum Errors Convention.

A serum error has a stable machine-readable code, an optional message,
optional ordered key/value details and an optional cause. Nothing requires a
shared concrete type: any value with a `code()` method is a serum error, and
the accessors here feature-detect the rest.

Quick Start:
    >>> import serum
    >>>
    >>> err = serum.errorf("app-foobar", "freetext goes here (%s)", "X")
    >>> str(err)
    'app-foobar: freetext goes here (X)'
    >>> serum.to_json(err)
    b'{"code":"app-foobar","message":"freetext goes here (X)"}'

Templated messages built from details:
    >>> err = serum.error(
    ...     "app-job-not-found",
    ...     serum.with_message_template("job ID {{ID}} not found"),
    ...     serum.with_detail("ID", "12"),
    ... )
    >>> serum.message(err), serum.detail(err, "ID")
    ('job ID 12 not found', '12')

Foreign errors:
    >>> try:
    ...     int("x")
    ... except ValueError as exc:
    ...     wrapped = serum.error("app-bad-input", serum.with_cause(exc))
    >>> serum.code(wrapped.unwrap())
    'bestguess-python-builtins-ValueError'

Wire format:
    >>> serum.from_json(b'{"code":"app-x","details":{"b":"2","a":"1"}}').details()
    (('b', '2'), ('a', '1'))
"""

from __future__ import annotations

__version__ = "0.1.0"

# Core
from .core import (
    BEST_GUESS_PREFIX,
    EMPTY_CODE,
    CauseLink,
    DetailEntry,
    Details,
    ErrorData,
    ErrorOption,
    ErrorValue,
    LiteralMessage,
    Segment,
    SerumError,
    SerumErrorWithCause,
    SerumErrorWithDetails,
    SerumErrorWithMessage,
    Template,
    TemplatedMessage,
    best_guess_code,
    cause,
    chain_contains,
    code,
    detail,
    details,
    details_map,
    error,
    errorf,
    interpolate,
    is_equivalent,
    is_serum,
    message,
    parse,
    quote,
    standardize,
    synthesize_string,
    with_cause,
    with_detail,
    with_message_literal,
    with_message_template,
)

# Config
from .foundation import SerumSettings, clear_settings_cache, get_settings

# Serialization
from .io import DecodeError, decode_details, encode_details, from_json, same_content, to_json

# Logging
from .observability import configure_logging, get_logger

__all__ = [
    "__version__",
    # Canonical value
    "ErrorValue", "ErrorData", "Details",
    # Constructors
    "errorf", "error", "standardize",
    "with_message_literal", "with_message_template", "with_detail", "with_cause",
    "ErrorOption", "LiteralMessage", "TemplatedMessage", "DetailEntry", "CauseLink",
    # Accessors
    "code", "message", "details", "details_map", "detail", "cause", "synthesize_string",
    "is_serum", "best_guess_code", "EMPTY_CODE", "BEST_GUESS_PREFIX",
    "SerumError", "SerumErrorWithMessage", "SerumErrorWithDetails", "SerumErrorWithCause",
    # Equality
    "is_equivalent", "chain_contains", "same_content",
    # Templates
    "Template", "Segment", "parse", "interpolate", "quote",
    # Serialization
    "to_json", "from_json", "encode_details", "decode_details", "DecodeError",
    # Config & logging
    "SerumSettings", "get_settings", "clear_settings_cache", "configure_logging", "get_logger",
]
