"""Path templates — compile, match, and render.

A template mixes literal text with ``{name}`` placeholders::

    "/items/{id}"               -> one capture, no slashes
    "/files/{name}.{ext}"       -> two captures inside one segment
    "/static/{filepath:path}"   -> greedy capture, slashes included

Compiling a template yields a ``PathPattern``. Matching returns the
captured strings in template order; rendering performs the inverse
substitution for reverse routing.
"""

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from switchboard.errors import CompileError, RenderError

# placeholder suffix -> regex for the captured text
PLACEHOLDER_PATTERNS: dict[str, str] = {
    "str": r"[^/]+",
    "path": r".+",
}


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed piece of a path template.

    Literal:  ``/users/``   (is_param=False)
    Param:    ``{id}``      (is_param=True, param_name="id")
    Greedy:   ``{rest:path}`` (is_param=True, param_name="rest", greedy=True)
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    greedy: bool = False


def parse_template(template: str) -> list[PathSegment]:
    """Parse a path template into literal and placeholder segments.

    Examples::

        "/users"            -> [PathSegment("/users")]
        "/users/{id}"       -> [PathSegment("/users/"),
                                PathSegment("{id}", is_param=True, param_name="id")]
        "/f/{p:path}"       -> [PathSegment("/f/"),
                                PathSegment("{p:path}", is_param=True, param_name="p",
                                            greedy=True)]

    Raises ``CompileError`` for unmatched or nested braces, invalid or
    duplicate placeholder names, unknown suffixes, and a greedy
    placeholder that is not the last segment.
    """
    segments: list[PathSegment] = []
    seen: set[str] = set()
    pos = 0
    length = len(template)

    while pos < length:
        open_at = template.find("{", pos)
        close_at = template.find("}", pos)

        if open_at == -1:
            if close_at != -1:
                raise CompileError(template, f"unmatched '}}' at offset {close_at}")
            segments.append(PathSegment(value=template[pos:]))
            break

        if close_at != -1 and close_at < open_at:
            raise CompileError(template, f"unmatched '}}' at offset {close_at}")
        if open_at > pos:
            segments.append(PathSegment(value=template[pos:open_at]))

        end = template.find("}", open_at + 1)
        if end == -1:
            raise CompileError(template, f"unmatched '{{' at offset {open_at}")
        inner = template[open_at + 1 : end]
        if "{" in inner:
            raise CompileError(template, f"nested '{{' at offset {open_at}")

        segments.append(_parse_placeholder(template, inner, seen))
        pos = end + 1

    for seg in segments[:-1]:
        if seg.greedy:
            msg = f"greedy placeholder {{{seg.param_name}:path}} must be the last segment"
            raise CompileError(template, msg)

    return segments


def _parse_placeholder(template: str, inner: str, seen: set[str]) -> PathSegment:
    name, _, suffix = inner.partition(":")
    suffix = suffix or "str"
    if not name.isidentifier():
        raise CompileError(template, f"invalid placeholder name {name!r}")
    if suffix not in PLACEHOLDER_PATTERNS:
        raise CompileError(template, f"unknown placeholder type {suffix!r} for {name!r}")
    if name in seen:
        raise CompileError(template, f"duplicate placeholder {name!r}")
    seen.add(name)
    return PathSegment(
        value=f"{{{inner}}}",
        is_param=True,
        param_name=name,
        greedy=suffix == "path",
    )


@dataclass(frozen=True, slots=True)
class PathPattern:
    """A compiled path template.

    Usage::

        pattern = PathPattern.compile("/items/{id}")
        pattern.match("/items/42")           # ("/items/42", "42")
        pattern.render({"id": "42"})          # "/items/42"
    """

    template: str
    regex: re.Pattern[str]
    segments: tuple[PathSegment, ...]
    param_names: tuple[str, ...]
    prefix: bool = False

    @classmethod
    def compile(cls, template: str, *, prefix: bool = False) -> "PathPattern":
        """Compile *template* into a matcher.

        Exact patterns must consume the whole path. Prefix patterns only
        anchor the start; a prefix that does not end in ``/`` stops at a
        segment boundary so ``/api`` never matches ``/apix``.
        """
        segments = parse_template(template)
        parts: list[str] = []
        for seg in segments:
            if seg.is_param:
                parts.append(f"({PLACEHOLDER_PATTERNS['path' if seg.greedy else 'str']})")
            else:
                parts.append(re.escape(seg.value))

        body = "".join(parts)
        if not prefix:
            source = f"^{body}$"
        elif template.endswith("/"):
            source = f"^{body}"
        else:
            source = f"^{body}(?=/|$)"

        return cls(
            template=template,
            regex=re.compile(source),
            segments=tuple(segments),
            param_names=tuple(s.param_name for s in segments if s.param_name),
            prefix=prefix,
        )

    @property
    def greedy(self) -> bool:
        """True if the template ends in a greedy placeholder."""
        return bool(self.segments) and self.segments[-1].greedy

    def match(self, path: str) -> tuple[str, ...] | None:
        """Match *path*, returning ``(whole_match, *captures)`` or ``None``."""
        m = self.regex.match(path)
        if m is None:
            return None
        return (m.group(0), *m.groups())

    def params(self, captures: Sequence[str]) -> dict[str, str]:
        """Name the captures returned by ``match()`` (whole match excluded)."""
        return dict(zip(self.param_names, captures[1:], strict=True))

    def render(self, values: Mapping[str, object]) -> str:
        """Substitute every placeholder with ``str(values[name])``.

        Raises ``RenderError`` if a name is missing, a value is empty,
        or a non-greedy value contains ``/`` (the result would not match
        this pattern).
        """
        out: list[str] = []
        for seg in self.segments:
            if not seg.is_param:
                out.append(seg.value)
                continue
            name = seg.param_name or ""
            if name not in values:
                msg = f"Missing value for {{{name}}} in {self.template!r}"
                raise RenderError(msg)
            text = str(values[name])
            if not text:
                msg = f"Empty value for {{{name}}} in {self.template!r}"
                raise RenderError(msg)
            if not seg.greedy and "/" in text:
                msg = f"Value {text!r} for {{{name}}} contains '/'; use {{{name}:path}}"
                raise RenderError(msg)
            out.append(text)
        return "".join(out)

    def __str__(self) -> str:
        return self.template
