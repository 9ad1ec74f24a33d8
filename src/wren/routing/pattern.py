"""Route template compilation.

A template is ``/`` or one or more ``/segment`` parts. A segment is a
lowercase literal like ``users`` or ``a-b-c1``; wrapping it in braces
(``{user-id}``) turns it into a named variable::

    "/users/{user-id}/posts"
        -> variables: (PathVariable(position=1, name="user-id"),)
        -> matcher:   ^/users/([a-zA-Z0-9_-]+)/posts$

Compiled patterns are frozen and hold only a compiled ``re.Pattern``, so
they are safe to share across concurrent requests without locking.
"""

import re
from dataclasses import dataclass

from wren.errors import InvalidPathError

# One literal segment: lowercase alphanumerics, single hyphens between runs
SEGMENT = r"[a-z0-9]+(?:-[a-z0-9]+)*"

_TEMPLATE_RE = re.compile(rf"(?:/(?:\{{{SEGMENT}\}}|{SEGMENT}))+")

# What a variable segment accepts in a concrete request path
VARIABLE_TOKEN = r"([a-zA-Z0-9_-]+)"


@dataclass(frozen=True, slots=True)
class PathVariable:
    """A named variable segment of a route template.

    ``position`` is the zero-based segment index, counted from the first
    segment after the leading slash.
    """

    position: int
    name: str


@dataclass(frozen=True, slots=True)
class RoutePattern:
    """A compiled route template.

    ``matcher.groups`` always equals ``len(variables)``.
    """

    template: str
    matcher: re.Pattern[str]
    variables: tuple[PathVariable, ...] = ()

    def matches(self, path: str) -> bool:
        """Return True if *path* matches the whole template."""
        return self.matcher.fullmatch(path) is not None

    def extract(self, path: str) -> dict[str, str]:
        """Pull variable values out of a path this pattern already matched.

        Splitting ``/a/b`` on ``/`` yields a leading empty string, so each
        value sits at ``position + 1``.
        """
        parts = path.split("/")
        return {var.name: parts[var.position + 1] for var in self.variables}


def is_valid_path(template: str) -> bool:
    """Return True if *template* follows the route template grammar.

    >>> is_valid_path("/")
    True
    >>> is_valid_path("")
    False
    >>> is_valid_path("/{}")
    False
    >>> is_valid_path("/a/{mo-ck1}/bbb/{m-o-ck2}/a-b-c1/{mock3}")
    True
    """
    if template == "/":
        return True
    return _TEMPLATE_RE.fullmatch(template) is not None


def _is_variable(segment: str) -> bool:
    return segment.startswith("{") and segment.endswith("}")


def extract_variables(template: str) -> tuple[PathVariable, ...]:
    """List the variable segments of *template*, left to right."""
    segments = template.split("/")[1:]
    return tuple(
        PathVariable(position=index, name=segment[1:-1])
        for index, segment in enumerate(segments)
        if _is_variable(segment)
    )


def to_matcher(template: str) -> re.Pattern[str]:
    """Build the anchored regex for *template*."""
    if template == "/":
        return re.compile(r"^/$")
    parts = [
        VARIABLE_TOKEN if _is_variable(segment) else re.escape(segment)
        for segment in template.split("/")[1:]
    ]
    return re.compile("^/" + "/".join(parts) + "$")


def compile_path(template: str) -> RoutePattern:
    """Validate and compile *template*.

    Raises ``InvalidPathError`` if the template breaks the grammar.
    """
    if not is_valid_path(template):
        raise InvalidPathError(template)
    return RoutePattern(
        template=template,
        matcher=to_matcher(template),
        variables=extract_variables(template),
    )
