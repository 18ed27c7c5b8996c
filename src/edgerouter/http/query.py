"""Query string parsing for argument binding.

Pairs split on ``&`` then on the first ``=``. Values stay percent-encoded;
the binder decodes where a type asks for it. A repeated key keeps its
last value.
"""


def parse_query(query: str) -> dict[str, str]:
    """Parse a raw query string into a name-value dict.

    Examples::

        parse_query("a=1&b=2")   -> {"a": "1", "b": "2"}
        parse_query("a=1&a=2")   -> {"a": "2"}
        parse_query("flag")      -> {"flag": ""}
    """
    params: dict[str, str] = {}
    if not query:
        return params
    for pair in query.split("&"):
        if not pair:
            continue
        key, _, value = pair.partition("=")
        params[key] = value
    return params
