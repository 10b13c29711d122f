"""Capability detection and accessors for Serum-style errors.

Any value may stand in for a serum error as long as it exposes a `code()`
method. Message, details and cause are each optional on top of that, and the
accessors here feature-detect them, so calling code never has to know which
concrete type it holds:

    >>> code(err), message(err), details(err), cause(err)

Values with no code capability at all (plain Python exceptions) still get
answers: a best-guess code derived from the type name, and their `str()` form
as the message.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from operator import itemgetter
from typing import Protocol, TypeAlias, runtime_checkable

from serum.observability import get_logger

_log = get_logger("serum.capabilities")

Details: TypeAlias = tuple[tuple[str, str], ...]

#: Returned by code() when a value reports an empty code.
EMPTY_CODE = "?!"
#: Prefix of every synthesized code. Never stable; never compare against it.
BEST_GUESS_PREFIX = "bestguess-python-"

_NO_DETAILS: Details = ()


# ═══════════════════════════════════════════════════════════════════════════════
# Capability Protocols
# ═══════════════════════════════════════════════════════════════════════════════


@runtime_checkable
class SerumError(Protocol):
    """The one mandatory capability: a stable machine-readable code."""

    def code(self) -> str: ...


@runtime_checkable
class SerumErrorWithMessage(SerumError, Protocol):
    def message(self) -> str: ...


@runtime_checkable
class SerumErrorWithDetails(SerumError, Protocol):
    """Details as ordered `(key, value)` pairs, or as a key->value Mapping."""

    def details(self) -> Iterable[tuple[str, str]] | Mapping[str, str]: ...


@runtime_checkable
class SerumErrorWithCause(SerumError, Protocol):
    def unwrap(self) -> object | None: ...


def _has(err: object, proto: type, method: str) -> bool:
    # runtime_checkable only tests attribute presence; SystemExit.code is an int.
    return isinstance(err, proto) and callable(getattr(err, method, None))


def is_serum(err: object) -> bool:
    """True if the value exposes a callable `code()`."""
    return err is not None and _has(err, SerumError, "code")


# ═══════════════════════════════════════════════════════════════════════════════
# Accessors
# ═══════════════════════════════════════════════════════════════════════════════


def code(err: object) -> str:
    """Return the error code of any value.

    Serum errors report their own code ("?!" if it is empty). Anything else
    gets a best-guess code built from its type; see best_guess_code().
    """
    if is_serum(err):
        value = err.code()  # type: ignore[union-attr]
        return str(value) if value else EMPTY_CODE
    return best_guess_code(err)


def best_guess_code(err: object) -> str:
    """Invent a code from the value's type: bestguess-python-<module>-<type>.

    Meant to help find the code that raised an unconventional error. The
    format is not stable and must not be used for comparisons.
    """
    tp = type(err)
    module = (tp.__module__ or "").rpartition(".")[2]
    return f"{BEST_GUESS_PREFIX}{module}-{tp.__qualname__}"


def message(err: object) -> str:
    """Return the human-readable message.

    Serum errors without the message capability have an empty message; values
    that are not serum errors at all use their `str()` form.
    """
    if err is None:
        return ""
    if not is_serum(err):
        return str(err)
    if _has(err, SerumErrorWithMessage, "message"):
        return err.message() or ""  # type: ignore[union-attr]
    return ""


def _raw_details(err: object) -> object:
    if is_serum(err) and _has(err, SerumErrorWithDetails, "details"):
        return err.details()  # type: ignore[union-attr]
    return None


def details(err: object) -> Details:
    """Return details as ordered pairs of strings.

    Ordered details keep their order. Mapping details are sorted by key so the
    result is deterministic. No details capability means an empty tuple.

    Keys and values go through `str()` (None becomes ""), and entries that are
    not pairs are skipped, so the result is always safe to serialize.
    """
    raw = _raw_details(err)
    if not raw:
        return _NO_DETAILS
    if isinstance(raw, Mapping):
        return tuple(sorted(((_text(k), _text(v)) for k, v in raw.items()), key=itemgetter(0)))
    if isinstance(raw, tuple) and all(type(p) is tuple and len(p) == 2 and type(p[0]) is str
                                      and type(p[1]) is str for p in raw):
        return raw
    return _as_pairs(raw)


def _text(value: object) -> str:
    return "" if value is None else str(value)


def _as_pairs(raw: object) -> Details:
    try:
        items = iter(raw)  # type: ignore[call-overload]
    except TypeError:
        _log.debug("details are not iterable", found=type(raw).__name__)
        return _NO_DETAILS
    pairs: list[tuple[str, str]] = []
    for item in items:
        entry = tuple(item) if isinstance(item, Iterable) and not isinstance(item, (str, bytes)) else ()
        if len(entry) != 2:
            _log.debug("malformed detail entry skipped", entry=repr(item))
            continue
        pairs.append((_text(entry[0]), _text(entry[1])))
    return tuple(pairs)


def details_map(err: object) -> dict[str, str]:
    """Return details as a dict. Later duplicate keys win."""
    return dict(details(err))


def detail(err: object, key: str) -> str:
    """Return the first detail value stored under key, or "" if absent."""
    for k, v in details(err):
        if k == key:
            return v
    return ""


def cause(err: object) -> object | None:
    """Return the next error in the chain.

    Uses `unwrap()` when the value has it, else the exception's explicit
    `__cause__` (from `raise ... from ...`). Implicit `__context__` is ignored.
    """
    if err is None:
        return None
    if is_serum(err) and _has(err, SerumErrorWithCause, "unwrap"):
        return err.unwrap()  # type: ignore[union-attr]
    if isinstance(err, BaseException):
        return err.__cause__
    return None


def synthesize_string(err: object) -> str:
    """Build the display string "{code}[: {message}][: caused by: {cause}]".

    Details are left out; by convention they are folded into the message via
    templating. The cause contributes its own `str()`, not its raw fields.
    Suitable as the `__str__` of a serum error type.
    """
    parts = [code(err)]
    if msg := message(err):
        parts.append(msg)
    if (c := cause(err)) is not None:
        parts.append(f"caused by: {c}")
    return ": ".join(parts)
