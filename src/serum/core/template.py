"""Minimal interpolation templates for error messages.

Only `{{ name }}` lookups and the `{{ name | q }}` quoting directive exist.
No conditionals, loops or calls: a message built from a template can never
drift from the details it was built from.

There are no errors. Questionably-formed templates produce questionably-formed
strings; lookups for keys that aren't in the table come back as the marker
text itself. Failing inside error reporting is worse than odd output.

Lookup tables are ordered `(key, value)` pairs scanned linearly; they are
expected to hold a handful of entries.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass

import orjson

from serum.observability import get_logger

_log = get_logger("serum.template")

_OPEN = "{{"
_CLOSE = "}}"
_UNKNOWN_DIRECTIVE = "{{?!|"

Table = Sequence[tuple[str, str]]


@dataclass(frozen=True, slots=True)
class Segment:
    """One parsed piece of a template.

    `literal` set: emitted verbatim. `interp` set: the lookup key, with
    `process` naming a directive to apply to the found value.
    """

    literal: str = ""
    interp: str = ""
    process: str = ""


def parse(text: str) -> list[Segment]:
    """Split template text into literal and interpolation segments.

    The scan is not recursive: the first `}}` after an opener closes it, no
    matter how many openers sit between them.

    >>> parse("a {{ b | q }}")
    [Segment(literal='a ', interp='', process=''), Segment(literal='', interp='b', process='q')]
    """
    result: list[Segment] = []
    s = text
    while True:
        start = s.find(_OPEN)
        if start < 0:
            result.append(Segment(literal=s))
            return result
        end = s.find(_CLOSE, start + 2)
        if end < 0:
            result.append(Segment(literal=s))
            return result
        end -= start + 2  # body length
        if start > 0:
            result.append(Segment(literal=s[:start]))
        if end > 0:
            name, _, process = s[start + 2:start + 2 + end].partition("|")
            result.append(Segment(interp=name.strip(), process=process.strip()))
        else:
            # "{{}}" is kept as literal text
            result.append(Segment(literal=s[start:start + 4]))
        s = s[start + end + 4:]
        if not s:
            return result


def interpolate(segments: Sequence[Segment], table: Table) -> str:
    """Render parsed segments against an ordered lookup table. Never raises."""
    out: list[str] = []
    for seg in segments:
        if seg.literal:
            out.append(seg.literal)
        if not seg.interp:
            continue
        for key, value in table:
            if key == seg.interp:
                out.append(_apply(value, seg.process))
                break
        else:
            out.append(f"{_OPEN}{seg.interp}{_CLOSE}")
    return "".join(out)


def quote(value: str) -> str:
    """Double-quote a value with JSON string escaping.

    Strings orjson refuses (lone surrogates) are escaped to ASCII instead, so
    the result is always valid JSON text.
    """
    try:
        return orjson.dumps(value).decode()
    except orjson.JSONEncodeError:
        return json.dumps(value)


def _apply(value: str, process: str) -> str:
    match process:
        case "":
            return value
        case "q":
            return quote(value)
        case _:
            _log.debug("unknown template directive", directive=process)
            return f"{value}{_UNKNOWN_DIRECTIVE}{process}{_CLOSE}"


class Template:
    """A template parsed once and rendered any number of times.

    Example:
        >>> t = Template("job ID {{ID}} not found")
        >>> t.render([("ID", "12")])
        'job ID 12 not found'
    """

    __slots__ = ("text", "segments")

    def __init__(self, text: str) -> None:
        self.text = text
        self.segments: tuple[Segment, ...] = tuple(parse(text))

    @property
    def variables(self) -> tuple[str, ...]:
        """Lookup keys in order of first appearance."""
        return tuple(dict.fromkeys(s.interp for s in self.segments if s.interp))

    def render(self, table: Table) -> str:
        return interpolate(self.segments, table)

    def __repr__(self) -> str:
        return f"Template({self.text!r})"
