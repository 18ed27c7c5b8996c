"""Cookie header parsing.

The ``Cookie`` header is a ``; ``-separated list of ``name=value`` pairs.
When a name repeats, the first occurrence wins, matching browser ordering
(most specific path first).
"""


def parse_cookies(header: str | None) -> dict[str, str]:
    """Parse a ``Cookie`` header value into a name-value dict.

    Returns an empty dict for empty or missing headers. Pairs without
    ``=`` are skipped.
    """
    if not header:
        return {}
    cookies: dict[str, str] = {}
    for pair in header.split("; "):
        if "=" not in pair:
            continue
        key, _, value = pair.partition("=")
        cookies.setdefault(key.strip(), value)
    return cookies


def get_cookie(header: str | None, name: str) -> str | None:
    """Return the first value of cookie *name*, or ``None``."""
    return parse_cookies(header).get(name)
