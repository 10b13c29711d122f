"""Tests for errorf(), error() with options, and standardize()."""

from __future__ import annotations

import pytest

import serum
from serum import (
    ErrorData,
    ErrorValue,
    error,
    errorf,
    standardize,
    with_cause,
    with_detail,
    with_message_literal,
    with_message_template,
)


class Foreign(Exception):
    """Serum-style error that is not the canonical type."""

    def __init__(self, inner: object = None) -> None:
        super().__init__("foreign")
        self._inner = inner

    def code(self) -> str:
        return "ext-foreign"

    def message(self) -> str:
        return "from elsewhere"

    def details(self) -> dict[str, str]:
        return {"b": "2", "a": "1"}

    def unwrap(self) -> object:
        return self._inner


def _raised_chain() -> RuntimeError:
    """RuntimeError('wrap') raised from ValueError('root')."""
    try:
        try:
            raise ValueError("root")
        except ValueError as exc:
            raise RuntimeError("wrap") from exc
    except RuntimeError as outer:
        return outer


# ═════════════════════════════════════════════════════════════════════════════
# errorf
# ═════════════════════════════════════════════════════════════════════════════


def test_errorf_formats_message() -> None:
    err = errorf("app-foobar", "freetext goes here (%s)", "X")
    assert isinstance(err, ErrorValue)
    assert err.code() == "app-foobar"
    assert err.message() == "freetext goes here (X)"
    assert err.details() == ()
    assert err.unwrap() is None
    assert str(err) == "app-foobar: freetext goes here (X)"


def test_errorf_without_args_keeps_pattern() -> None:
    assert errorf("c", "plain text").message() == "plain text"
    assert errorf("c", "100%%").message() == "100%"


def test_errorf_mapping_args() -> None:
    assert errorf("c", "%(n)d items in %(where)s", {"n": 3, "where": "cart"}).message() == "3 items in cart"


def test_errorf_wrap_verb_attaches_standardized_cause() -> None:
    root = KeyError("missing")
    err = errorf("app-lookup", "lookup of %s failed: %w", "user", root)
    assert err.message() == f"lookup of user failed: {root}"
    c = err.unwrap()
    assert isinstance(c, ErrorValue)
    assert c.code() == "bestguess-python-builtins-KeyError"
    assert c.message() == str(root)
    assert err.__cause__ is c


def test_errorf_wrap_counts_star_arguments() -> None:
    inner = ValueError("inner")
    err = errorf("c", "%*d then %w", 4, 7, inner)
    assert err.message() == "   7 then inner"
    assert err.unwrap().message() == "inner"  # type: ignore[union-attr]


def test_errorf_wrap_by_key() -> None:
    inner = ValueError("inner")
    err = errorf("c", "failed: %(why)w", {"why": inner})
    assert err.message() == "failed: inner"
    assert err.unwrap() is not None


def test_errorf_only_first_wrap_is_cause() -> None:
    a, b = ValueError("a"), ValueError("b")
    err = errorf("c", "%w and %w", a, b)
    assert err.message() == "a and b"
    assert err.unwrap().message() == "a"  # type: ignore[union-attr]


def test_errorf_wrap_of_non_error_formats_only() -> None:
    err = errorf("c", "value %w", "just a string")
    assert err.message() == "value just a string"
    assert err.unwrap() is None


def test_errorf_canonical_cause_kept_by_identity() -> None:
    inner = error("inner-code")
    assert errorf("outer", "wrapped: %w", inner).unwrap() is inner


def test_errorf_wrapped_chain_is_deep_copied() -> None:
    err = errorf("outer", "%w", _raised_chain())
    mid = err.unwrap()
    assert mid is not None and mid.code() == "bestguess-python-builtins-RuntimeError"
    root = mid.unwrap()
    assert isinstance(root, ErrorValue)
    assert root.code() == "bestguess-python-builtins-ValueError"
    assert root.message() == "root"


@pytest.mark.parametrize(
    ("pattern", "args"),
    [("%d", ("not a number",)), ("%s %s", ("one",)), ("no verbs", ("extra",)), ("trailing %", ()), ("%(k)s", ({},))],
)
def test_errorf_bad_pattern_never_raises(pattern: str, args: tuple[object, ...]) -> None:
    err = errorf("c", pattern, *args)
    assert err.message().startswith(pattern)
    assert "%!(" in err.message()


# ═════════════════════════════════════════════════════════════════════════════
# error + options
# ═════════════════════════════════════════════════════════════════════════════


def test_error_code_only() -> None:
    err = error("test")
    assert (err.code(), err.message(), err.details(), err.unwrap()) == ("test", "", (), None)


def test_error_template_after_detail() -> None:
    err = error("demo-error-job-not-found", with_message_template("job ID {{ID}} not found"), with_detail("ID", "12"))
    assert err.message() == "job ID 12 not found"
    assert err.details() == (("ID", "12"),)
    assert str(err) == "demo-error-job-not-found: job ID 12 not found"


def test_error_template_sees_details_in_any_order() -> None:
    a = error("c", with_detail("x", "1"), with_message_template("{{x}}-{{y}}"), with_detail("y", "2"))
    assert a.message() == "1-2"


def test_error_template_wins_over_literal() -> None:
    err = error("c", with_message_template("t {{k}}"), with_message_literal("lit"), with_detail("k", "v"))
    assert err.message() == "t v"


def test_error_last_template_wins() -> None:
    err = error("c", with_message_template("first"), with_message_template("second"))
    assert err.message() == "second"


def test_error_literal_is_not_interpolated() -> None:
    err = error("c", with_message_literal("the thing is {{foo}}"), with_detail("foo", "bar"))
    assert err.message() == "the thing is {{foo}}"


def test_error_last_literal_wins() -> None:
    assert error("c", with_message_literal("a"), with_message_literal("b")).message() == "b"


def test_error_duplicate_details_kept() -> None:
    err = error("c", with_detail("k", "1"), with_detail("k", "2"))
    assert err.details() == (("k", "1"), ("k", "2"))
    assert serum.detail(err, "k") == "1"


def test_error_missing_template_key_is_visible() -> None:
    assert error("c", with_message_template("id={{ID}}")).message() == "id={{ID}}"


def test_error_template_object_reused() -> None:
    t = serum.Template("{{n}} left")
    assert error("c", with_message_template(t), with_detail("n", "3")).message() == "3 left"
    assert error("c", with_message_template(t), with_detail("n", "4")).message() == "4 left"


def test_with_cause_standardizes_immediately() -> None:
    opt = with_cause(ValueError("boom"))
    assert isinstance(opt.cause, ErrorValue)
    err = error("outer", opt)
    assert err.unwrap() is opt.cause
    assert err.__cause__ is opt.cause


def test_with_cause_none() -> None:
    assert error("c", with_cause(None)).unwrap() is None


def test_error_is_raisable() -> None:
    with pytest.raises(ErrorValue) as info:
        raise error("app-failure", with_message_literal("nope"))
    assert serum.code(info.value) == "app-failure"


# ═════════════════════════════════════════════════════════════════════════════
# ErrorValue.create
# ═════════════════════════════════════════════════════════════════════════════


def test_create_accepts_mapping_details_in_insertion_order() -> None:
    err = ErrorValue.create("c", "m", details={"b": "2", "a": "1"})
    assert err.details() == (("b", "2"), ("a", "1"))


def test_create_standardizes_cause() -> None:
    err = ErrorValue.create("c", cause=ValueError("v"))
    assert isinstance(err.unwrap(), ErrorValue)


def test_error_data_is_frozen() -> None:
    data = ErrorData(code="c")
    with pytest.raises(Exception):  # pydantic ValidationError on frozen instance
        data.code = "other"  # type: ignore[misc]


# ═════════════════════════════════════════════════════════════════════════════
# standardize
# ═════════════════════════════════════════════════════════════════════════════


def test_standardize_none() -> None:
    assert standardize(None) is None


def test_standardize_canonical_is_identity() -> None:
    err = error("c")
    assert standardize(err) is err


@pytest.mark.parametrize(
    "make",
    [lambda: error("canon"), lambda: ValueError("x"), lambda: Foreign(), lambda: _raised_chain()],
    ids=["canonical", "builtin", "foreign-serum", "raised-chain"],
)
def test_standardize_idempotent(make) -> None:
    once = standardize(make())
    assert standardize(once) is once


def test_standardize_foreign_serum_error() -> None:
    std = standardize(Foreign())
    assert isinstance(std, ErrorValue)
    assert std.code() == "ext-foreign"
    assert std.message() == "from elsewhere"
    assert std.details() == (("a", "1"), ("b", "2"))  # mapping source -> sorted


def test_standardize_recurses_through_foreign_chain() -> None:
    std = standardize(Foreign(Foreign(ValueError("bottom"))))
    chain = []
    node = std
    while node is not None:
        assert isinstance(node, ErrorValue)
        chain.append(node.code())
        node = node.unwrap()
    assert chain == ["ext-foreign", "ext-foreign", "bestguess-python-builtins-ValueError"]


def test_standardize_stops_at_canonical_link() -> None:
    canonical = error("mid", with_cause(ValueError("x")))
    std = standardize(Foreign(canonical))
    assert std is not None and std.unwrap() is canonical


def test_standardize_truncates_long_chains(max_depth, captured_logs) -> None:
    max_depth(2)
    std = standardize(Foreign(Foreign(Foreign())))
    assert std is not None
    assert std.unwrap() is not None
    assert std.unwrap().unwrap() is None  # type: ignore[union-attr]
    assert "cause chain truncated during standardize" in captured_logs.events()


def test_standardize_survives_cyclic_foreign_chain(max_depth) -> None:
    max_depth(5)
    a, b = Foreign(), Foreign()
    a._inner, b._inner = b, a
    std = standardize(a)
    depth = 0
    node = std
    while node is not None:
        depth += 1
        node = node.unwrap()
    assert depth == 5


class LooseForeign(Exception):
    def code(self) -> str:
        return "ext-loose"

    def details(self) -> list[object]:
        return [(1, 2), ("k", None), ("only-one",)]


def test_standardize_stringifies_loose_details() -> None:
    std = standardize(LooseForeign())
    assert std is not None
    assert std.details() == (("1", "2"), ("k", ""))
    assert all(type(k) is str and type(v) is str for k, v in std.details())
