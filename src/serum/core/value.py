"""The canonical serum error value.

ErrorData is the frozen record (code, message, ordered details, cause) and
ErrorValue is the raisable exception that carries it, in the same way a
structured error model is wrapped by an exception for raising.

Most code should not need the concrete types: the accessors in
serum.core.capabilities work on any error-like value. ErrorValue is what the
constructors return and what standardize() coerces foreign errors into.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .capabilities import Details, cause, code, synthesize_string

if TYPE_CHECKING:
    from collections.abc import Iterable


class ErrorData(BaseModel):
    """Body of an ErrorValue.

    Attributes:
        code: Machine-readable, stable identifier. Empty only by mistake.
        message: Human-readable text, may be empty.
        details: Ordered (key, value) pairs; duplicate keys are kept.
        cause: The next canonical error in the chain, if any.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        arbitrary_types_allowed=True,
        revalidate_instances="never",
        json_schema_extra={
            "title": "Serum Error",
            "examples": [{"code": "demo-error-job-not-found", "message": "job ID 12 not found",
                          "details": [["ID", "12"]]}],
        },
    )

    code: str
    message: str = ""
    details: Details = Field(default=(), repr=True)
    cause: ErrorValue | None = Field(default=None, repr=False)

    @field_validator("details", mode="before")
    @classmethod
    def _ordered_details(cls, v: object) -> object:
        """Accept a mapping (insertion order kept) or any iterable of pairs."""
        if v is None:
            return ()
        if isinstance(v, Mapping):
            return tuple(v.items())
        if isinstance(v, (list, tuple)):
            return tuple(tuple(p) for p in v)
        return v


class ErrorValue(Exception):
    """Concrete serum error. Raise it, chain it, serialize it.

    Fields live on `data` and must not be mutated after construction. The
    accessor methods below are what the capability protocols look for; the
    cause is mirrored into `__cause__` so tracebacks show the chain.

    Example:
        >>> err = ErrorValue.create("demo-error", "something broke", details={"ID": "7"})
        >>> str(err)
        'demo-error: something broke'
        >>> err.to_json()
        b'{"code":"demo-error","message":"something broke","details":{"ID":"7"}}'
    """

    __slots__ = ("data",)

    def __init__(self, data: ErrorData) -> None:
        self.data = data
        super().__init__(data)
        self.__cause__ = data.cause

    @classmethod
    def create(
        cls,
        code: str,
        message: str = "",
        *,
        details: Mapping[str, str] | Iterable[tuple[str, str]] = (),
        cause: BaseException | None = None,
    ) -> Self:
        """Validated construction. A non-canonical cause is standardized."""
        from .constructors import standardize

        return cls(ErrorData(code=code, message=message, details=details, cause=standardize(cause)))

    # ─── Capabilities ────────────────────────────────────────────────

    def code(self) -> str:
        """Raw code. Use serum.code() to access this without the concrete type."""
        return self.data.code

    def message(self) -> str:
        return self.data.message

    def details(self) -> Details:
        return self.data.details

    def unwrap(self) -> ErrorValue | None:
        return self.data.cause

    # ─── Comparison ──────────────────────────────────────────────────

    def matches(self, target: object) -> bool:
        """Single-level equivalence with any error-like value; see is_equivalent()."""
        return is_equivalent(self, target)

    # ─── Serialization ───────────────────────────────────────────────

    def to_json(self) -> bytes:
        from serum.io.codec import to_json

        return to_json(self)

    @classmethod
    def from_json(cls, data: bytes | bytearray | str) -> ErrorValue:
        from serum.io.codec import from_json

        return from_json(data)

    def __str__(self) -> str:
        return synthesize_string(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.data!r})"


ErrorData.model_rebuild()


def is_equivalent(a: object, b: object) -> bool:
    """Whether two error-like values describe the same logical error.

    Codes and synthesized display strings must match. Details only count as
    far as they were templated into the message, and the cause chain is not
    walked; chain_contains() does that one link at a time.
    """
    if a is b:
        return True
    if a is None or b is None:
        return False
    return code(a) == code(b) and synthesize_string(a) == synthesize_string(b)


def chain_contains(err: object, target: object, *, max_depth: int | None = None) -> bool:
    """Walk err's cause chain looking for target.

    A link matches when it is target itself, or when it is an ErrorValue that
    matches() target. Foreign links only match by identity.
    """
    if err is None or target is None:
        return err is target
    if max_depth is None:
        from serum.foundation.config import get_settings

        max_depth = get_settings().max_cause_depth
    node: object | None = err
    for _ in range(max_depth):
        if node is None:
            return False
        if node is target or (isinstance(node, ErrorValue) and node.matches(target)):
            return True
        node = cause(node)
    return False
