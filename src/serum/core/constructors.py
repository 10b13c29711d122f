"""Constructors for serum errors, and coercion of foreign errors.

Two styles:
    >>> errorf("app-foobar", "freetext goes here (%s)", "X")
    >>> error("app-job-not-found",
    ...       with_message_template("job ID {{ID}} not found"),
    ...       with_detail("ID", "12"))

Every cause attached through either style is standardized on the spot, so
any value returned here serializes as a well-formed chain.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import ClassVar, Protocol, runtime_checkable

from serum.foundation.config import get_settings
from serum.observability import get_logger

from .capabilities import cause, code, details, is_serum, message
from .template import Template
from .value import ErrorData, ErrorValue

_log = get_logger("serum.constructors")


# ═══════════════════════════════════════════════════════════════════════════════
# Standardize
# ═══════════════════════════════════════════════════════════════════════════════


def standardize(other: object | None) -> ErrorValue | None:
    """Return a canonical ErrorValue for any error-like value.

    None stays None and an ErrorValue is returned unchanged. Anything else is
    copied through the accessors into a new ErrorValue, and so is every link of
    its cause chain, so the whole result is canonical. Chains longer than
    SERUM_MAX_CAUSE_DEPTH are cut off with a warning.
    """
    return _standardize(other, get_settings().max_cause_depth)


def _standardize(other: object | None, budget: int) -> ErrorValue | None:
    if other is None:
        return None
    if isinstance(other, ErrorValue):
        return other
    ecode = code(other)
    if not is_serum(other):
        _log.debug("best-guess error code synthesized", code=ecode)
    next_cause = cause(other)
    if next_cause is not None and budget <= 1:
        _log.warning("cause chain truncated during standardize", code=ecode,
                     max_depth=get_settings().max_cause_depth)
        next_cause = None
    return ErrorValue(ErrorData.model_construct(
        code=ecode,
        message=message(other),
        details=details(other),
        cause=_standardize(next_cause, budget - 1),
    ))


def _is_error_like(value: object) -> bool:
    return isinstance(value, BaseException) or is_serum(value)


# ═══════════════════════════════════════════════════════════════════════════════
# errorf
# ═══════════════════════════════════════════════════════════════════════════════

# printf-style conversion: %[(key)][flags][width][.precision][length]type
_DIRECTIVE = re.compile(
    r"%(?:\((?P<key>[^)]*)\))?[#0+ \-]*(?P<width>\*|\d+)?(?:\.(?P<prec>\*|\d*))?[hlL]?(?P<conv>.)?",
    re.DOTALL,
)


@dataclass(slots=True)
class _Wrap:
    """Where the %w argument sits: a positional index or a mapping key."""

    index: int | None = None
    key: str | None = None


def _rewrite_wrap(pattern: str) -> tuple[str, _Wrap | None]:
    """Turn every %w into %s and locate the argument of the first one."""
    pieces: list[str] = []
    wrap: _Wrap | None = None
    pos = arg = 0
    for m in _DIRECTIVE.finditer(pattern):
        conv = m.group("conv")
        if conv == "%":
            continue
        if m.group("width") == "*":
            arg += 1
        if m.group("prec") == "*":
            arg += 1
        if conv == "w":
            if wrap is None:
                wrap = _Wrap(key=m.group("key")) if m.group("key") is not None else _Wrap(index=arg)
            pieces.append(pattern[pos:m.start("conv")])
            pieces.append("s")
            pos = m.end("conv")
        arg += 1
    pieces.append(pattern[pos:])
    return "".join(pieces), wrap


def errorf(ecode: str, pattern: str, *args: object) -> ErrorValue:
    """Build an ErrorValue whose message is printf-formatted.

    `pattern` uses %-formatting; a single mapping argument enables `%(name)s`
    keys. The extra `%w` conversion formats like `%s` and also attaches that
    argument as the cause, standardized immediately, when it is an error.
    Only the first `%w` wraps.

    A pattern that does not fit its arguments is not an error: the message is
    the raw pattern followed by a `%!(...)` marker describing the mismatch.
    """
    rewritten, wrap = _rewrite_wrap(pattern)
    mapping_mode = len(args) == 1 and isinstance(args[0], Mapping)
    try:
        msg = rewritten % (args[0] if mapping_mode else args)
    except (TypeError, ValueError, KeyError) as exc:
        _log.debug("error message pattern did not format", code=ecode, pattern=pattern, reason=str(exc))
        msg = f"{pattern}%!({type(exc).__name__}={exc})"

    wrapped: object = None
    if wrap is not None:
        if wrap.key is not None and mapping_mode:
            wrapped = args[0].get(wrap.key)  # type: ignore[union-attr]
        elif wrap.index is not None and wrap.index < len(args):
            wrapped = args[wrap.index]
    return ErrorValue(ErrorData.model_construct(
        code=ecode,
        message=msg,
        details=(),
        cause=standardize(wrapped) if _is_error_like(wrapped) else None,
    ))


# ═══════════════════════════════════════════════════════════════════════════════
# error + options
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(slots=True)
class _Draft:
    """Mutable state while options are applied."""

    code: str
    message: str = ""
    details: list[tuple[str, str]] = field(default_factory=list)
    cause: ErrorValue | None = None


@runtime_checkable
class ErrorOption(Protocol):
    """Something that can be passed to error()."""

    deferred: ClassVar[bool]

    def apply(self, draft: _Draft) -> None: ...


@dataclass(frozen=True, slots=True)
class LiteralMessage:
    text: str
    deferred: ClassVar[bool] = False

    def apply(self, draft: _Draft) -> None:
        draft.message = self.text


@dataclass(frozen=True, slots=True)
class TemplatedMessage:
    """Message rendered from the details once all other options are applied."""

    template: Template
    deferred: ClassVar[bool] = True

    def apply(self, draft: _Draft) -> None:
        draft.message = self.template.render(draft.details)


@dataclass(frozen=True, slots=True)
class DetailEntry:
    key: str
    value: str
    deferred: ClassVar[bool] = False

    def apply(self, draft: _Draft) -> None:
        draft.details.append((self.key, self.value))


@dataclass(frozen=True, slots=True)
class CauseLink:
    cause: ErrorValue | None
    deferred: ClassVar[bool] = False

    def apply(self, draft: _Draft) -> None:
        draft.cause = self.cause


def with_message_literal(text: str) -> LiteralMessage:
    """Set the message verbatim. `{{...}}` markers are not interpreted."""
    return LiteralMessage(text)


def with_message_template(template: str | Template) -> TemplatedMessage:
    """Set the message from a template over the error's details.

    The template is parsed here, once, and rendered after every other option,
    so it can refer to details given before or after it.
    """
    return TemplatedMessage(template if isinstance(template, Template) else Template(template))


def with_detail(key: str, value: str) -> DetailEntry:
    """Append a detail. Repeating a key keeps both entries."""
    return DetailEntry(key, value)


def with_cause(err: object | None) -> CauseLink:
    """Attach a cause, standardized now."""
    return CauseLink(standardize(err))


def error(ecode: str, *options: ErrorOption) -> ErrorValue:
    """Build an ErrorValue from a code and options.

    Options apply in the order given, except templated messages, which apply
    last (in their own order, so the final one wins).
    """
    draft = _Draft(ecode)
    for opt in options:
        if not opt.deferred:
            opt.apply(draft)
    for opt in options:
        if opt.deferred:
            opt.apply(draft)
    return ErrorValue(ErrorData.model_construct(
        code=draft.code,
        message=draft.message,
        details=tuple(draft.details),
        cause=draft.cause,
    ))
