"""JSON wire format for serum errors.

    {"code": "...", "message": "...", "details": {"k": "v", ...}, "cause": {...}}

Keys are always written in that order; message, details and cause are left
out when empty. Details keep their pair order, duplicates included, which a
dict-based encoder cannot do, so objects are assembled here and orjson only
encodes the strings.

Any error-like value can be encoded. Values that are not serum errors are
fudged into the same shape: best-guess code, `str()` as message, and their
`__cause__` encoded by this same procedure.

Decoding always produces the canonical ErrorValue and never inspects types.

Usage:
    >>> from serum.io import to_json, from_json
    >>> raw = to_json(err)
    >>> err2 = from_json(raw)
"""

from __future__ import annotations

import json
from collections.abc import Iterable

import orjson

from serum.core.capabilities import Details, cause, code, details, is_serum, message
from serum.core.value import ErrorData, ErrorValue
from serum.foundation.config import get_settings
from serum.observability import get_logger

_log = get_logger("serum.codec")


class DecodeError(ValueError):
    """Wire input did not have the serum error shape.

    Attributes:
        path: Location of the offending value, e.g. "/cause/details/ID".
        shape: JSON type found there ("array", "number", ...).
    """

    def __init__(self, reason: str, *, path: str = "/", shape: str = "") -> None:
        self.reason = reason
        self.path = path or "/"
        self.shape = shape
        detail = f" (at {self.path}, found {shape})" if shape else f" (at {self.path})"
        super().__init__(f"deserializing a serum error: {reason}{detail}")


# ═══════════════════════════════════════════════════════════════════════════════
# Encoding
# ═══════════════════════════════════════════════════════════════════════════════


def to_json(err: object) -> bytes:
    """Encode any error-like value as compact JSON bytes.

    Strings that are not valid UTF-8 (lone surrogates) are written with
    `\\u` escapes, so the output is always well-formed JSON.
    """
    buf = bytearray()
    _encode_into(buf, err, get_settings().max_cause_depth)
    return bytes(buf)


def _encode_into(buf: bytearray, err: object, budget: int) -> None:
    ecode = code(err)
    if not is_serum(err):
        _log.debug("best-guess error code synthesized", code=ecode)
    buf += b'{"code":'
    buf += _string(ecode)
    if msg := message(err):
        buf += b',"message":'
        buf += _string(msg)
    if pairs := details(err):
        buf += b',"details":'
        _encode_details_into(buf, pairs)
    if (c := cause(err)) is not None:
        if budget > 1:
            buf += b',"cause":'
            _encode_into(buf, c, budget - 1)
        else:
            _log.warning("cause chain truncated during encode", code=ecode,
                         max_depth=get_settings().max_cause_depth)
    buf += b"}"


def encode_details(pairs: Iterable[tuple[str, str]]) -> bytes:
    """Encode ordered pairs as a JSON object, keeping order and duplicate keys."""
    buf = bytearray()
    _encode_details_into(buf, pairs)
    return bytes(buf)


def _encode_details_into(buf: bytearray, pairs: Iterable[tuple[str, str]]) -> None:
    buf += b"{"
    for i, (key, value) in enumerate(pairs):
        if i:
            buf += b","
        buf += _string(key)
        buf += b":"
        buf += _string(value)
    buf += b"}"


def _string(value: object) -> bytes:
    text = "" if value is None else str(value)
    try:
        return orjson.dumps(text)
    except orjson.JSONEncodeError:
        return json.dumps(text).encode()


def same_content(a: object, b: object) -> bool:
    """Full-content equality: byte-identical encodings, details and cause included.

    Stricter than is_equivalent(), which ignores details not folded into the message.
    """
    return to_json(a) == to_json(b)


# ═══════════════════════════════════════════════════════════════════════════════
# Decoding
# ═══════════════════════════════════════════════════════════════════════════════


class _Object(list):
    """A JSON object as its ordered (key, value) pairs."""

    __slots__ = ()


def _parse(data: bytes | bytearray | str) -> object:
    try:
        return json.loads(data, object_pairs_hook=_Object)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        _log.debug("rejected serum error input", reason=str(exc))
        raise DecodeError(f"invalid JSON: {exc}", shape="text") from exc
    except RecursionError as exc:
        _log.debug("rejected serum error input", reason="nesting too deep")
        raise DecodeError("input nested too deeply", shape="text") from exc


def from_json(data: bytes | bytearray | str) -> ErrorValue:
    """Decode a serum error.

    Raises:
        DecodeError: the input is not JSON, the top level (or a cause) is not
            an object, a field has the wrong type, a details value is not a
            string, or the cause chain is deeper than SERUM_MAX_CAUSE_DEPTH.
    """
    return _decode_error(_parse(data), "", get_settings().max_cause_depth)


def decode_details(data: bytes | bytearray | str) -> Details:
    """Decode a JSON object of string values into ordered pairs."""
    return _decode_details(_parse(data), "")


def _decode_error(node: object, path: str, budget: int) -> ErrorValue:
    if not isinstance(node, _Object):
        raise _reject("a serum error must be a JSON object", path, node)
    fields: dict[str, object] = {"code": "", "message": "", "details": (), "cause": None}
    for key, value in node:
        match key:
            case "code" | "message":
                if value is not None and not isinstance(value, str):
                    raise _reject(f"{key} must be a string", f"{path}/{key}", value)
                fields[key] = value or ""
            case "details":
                fields["details"] = () if value is None else _decode_details(value, f"{path}/details")
            case "cause":
                if value is None:
                    fields["cause"] = None
                    continue
                if budget <= 1:
                    raise _reject(f"cause chain deeper than {get_settings().max_cause_depth}", f"{path}/cause", value)
                fields["cause"] = _decode_error(value, f"{path}/cause", budget - 1)
    return ErrorValue(ErrorData.model_construct(**fields))


def _decode_details(node: object, path: str) -> Details:
    if not isinstance(node, _Object):
        raise _reject("details field must be a map", path, node)
    pairs: list[tuple[str, str]] = []
    for key, value in node:
        if not isinstance(value, str):
            raise _reject("only strings are permitted in details map values", f"{path}/{key}", value)
        pairs.append((key, value))
    return tuple(pairs)


def _reject(reason: str, path: str, node: object) -> DecodeError:
    err = DecodeError(reason, path=path, shape=_shape(node))
    _log.debug("rejected serum error input", reason=reason, path=err.path, shape=err.shape)
    return err


def _shape(node: object) -> str:
    match node:
        case _Object(): return "object"
        case list(): return "array"
        case str(): return "string"
        case bool(): return "boolean"
        case int() | float(): return "number"
        case None: return "null"
        case _: return type(node).__name__
