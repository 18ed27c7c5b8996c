"""Path pattern compilation.

A template is a ``/``-separated path whose segments are literals or
``:name`` placeholders::

    "/users"              -> matches "/users" only
    "/user/:name"         -> matches "/user/alice", captures {"name": "alice"}
    "*"                   -> matches every path (the fallback route)

Patterns are anchored at both ends; a placeholder captures one segment.
"""

import re
from dataclasses import dataclass

from edgerouter.errors import InvalidPatternError

WILDCARD_PATH = "*"

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


@dataclass(frozen=True, slots=True)
class PathPattern:
    """A compiled path template.

    ``display`` normalizes placeholders to brackets (``/user/{name}``);
    it is the key the route table stores the route under.
    """

    template: str
    display: str
    params: tuple[str, ...]
    regex: re.Pattern[str] | None

    @property
    def is_wildcard(self) -> bool:
        """True for the all-paths ``*`` pattern."""
        return self.regex is None

    def match(self, path: str) -> dict[str, str] | None:
        """Return captured placeholders if *path* matches, else ``None``."""
        if self.regex is None:
            return {}
        m = self.regex.fullmatch(path)
        if m is None:
            return None
        return m.groupdict()


def compile_pattern(template: str) -> PathPattern:
    """Compile a path template into a ``PathPattern``.

    Raises ``InvalidPatternError`` for a placeholder that is not a valid
    identifier or a name used twice in one template.
    """
    if template == WILDCARD_PATH:
        return PathPattern(template=template, display=WILDCARD_PATH, params=(), regex=None)

    params: list[str] = []
    display_parts: list[str] = []
    regex_parts: list[str] = []

    for segment in template.split("/"):
        if segment.startswith(":"):
            name = segment[1:]
            if not _IDENTIFIER.fullmatch(name):
                msg = f"Invalid placeholder {segment!r} in path {template!r}."
                raise InvalidPatternError(msg)
            if name in params:
                msg = f"Placeholder {name!r} appears more than once in path {template!r}."
                raise InvalidPatternError(msg)
            params.append(name)
            display_parts.append(f"{{{name}}}")
            regex_parts.append(f"(?P<{name}>[^/]+)")
        else:
            display_parts.append(segment)
            regex_parts.append(re.escape(segment))

    return PathPattern(
        template=template,
        display="/".join(display_parts),
        params=tuple(params),
        regex=re.compile("/".join(regex_parts)),
    )
