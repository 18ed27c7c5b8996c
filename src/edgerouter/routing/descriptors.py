"""Parameter descriptors and handler metadata extraction.

A handler documents its parameters with tags in its docstring::

    async def get_user(name, verbose):
        \"""Fetch one user.

        @param where:path type:string name:name | The user name
        @param where:query type:boolean name:verbose optional | Include details
        @category users
        \"""

The same contract can be given explicitly at registration with
``param(...)`` descriptors, which take precedence over the docstring.
Extraction runs once, at registration time.
"""

from __future__ import annotations

import inspect
import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, replace
from typing import Any, Literal

from edgerouter.errors import InvalidAttributeError

type Location = Literal["path", "query", "header", "cookie", "body"]
type DataType = Literal["string", "number", "boolean", "object"]

LOCATIONS: frozenset[str] = frozenset({"path", "query", "header", "cookie", "body"})
DATA_TYPES: frozenset[str] = frozenset({"string", "number", "boolean", "object"})

# Type of a parameter present in the signature but absent from the metadata
ANY_TYPE = "any"

DEFAULT_CATEGORY = "default"

_NAMED_ATTRIBUTES = frozenset({"name", "type", "where", "contentType"})
_FLAG_ATTRIBUTES = frozenset({"optional", "deprecated"})

# A tag starts a line and runs to the end of that line
_TAG_RE = re.compile(r"^[ \t]*@(?P<tag>[a-zA-Z]+)[ \t]*(?P<value>[^\n]*)", re.MULTILINE)


@dataclass(frozen=True, slots=True)
class ParameterDescriptor:
    """The typed contract for one handler parameter.

    ``location`` is ``None`` for an undocumented parameter; the binder
    then falls back to the reserved ``request`` name or binds ``None``.
    """

    name: str
    location: Location | None = None
    type: DataType | str = ANY_TYPE
    optional: bool = False
    deprecated: bool = False
    description: str = ""
    content_type: str | None = None

    @property
    def documented(self) -> bool:
        """True when the descriptor says where the value comes from."""
        return self.location is not None


@dataclass(frozen=True, slots=True)
class HandlerMetadata:
    """Everything registration learns about a handler.

    ``parameters`` is the handler's declared parameter order, which is
    the order arguments are bound in.
    """

    parameters: tuple[str, ...] = ()
    descriptors: tuple[ParameterDescriptor, ...] = ()
    category: str = DEFAULT_CATEGORY
    deprecated: bool = False
    summary: str = ""

    def descriptor(self, name: str) -> ParameterDescriptor | None:
        """Return the descriptor for *name*, if any."""
        for descriptor in self.descriptors:
            if descriptor.name == name:
                return descriptor
        return None


def param(
    name: str,
    where: Location,
    type: DataType = "string",  # noqa: A002
    *,
    optional: bool = False,
    deprecated: bool = False,
    description: str = "",
    content_type: str | None = None,
) -> ParameterDescriptor:
    """Build a validated descriptor for explicit registration.

    Usage::

        router.get("/search", search, params=[param("age", "query", "number")])
    """
    descriptor = ParameterDescriptor(
        name=name,
        location=where,
        type=type,
        optional=optional,
        deprecated=deprecated,
        description=description,
        content_type=content_type,
    )
    validate_descriptor(descriptor)
    return descriptor


def validate_descriptor(descriptor: ParameterDescriptor, context: str = "") -> None:
    """Raise ``InvalidAttributeError`` unless *descriptor* is well formed."""
    where = f" in {context}" if context else ""
    if descriptor.location not in LOCATIONS:
        msg = (
            f"Invalid where: {descriptor.location} for parameter {descriptor.name!r}{where}. "
            f"Should be one of {', '.join(sorted(LOCATIONS))}"
        )
        raise InvalidAttributeError(msg)
    if descriptor.type not in DATA_TYPES:
        msg = (
            f"Invalid type: {descriptor.type} for parameter {descriptor.name!r}{where}. "
            f"Should be one of {', '.join(sorted(DATA_TYPES))}"
        )
        raise InvalidAttributeError(msg)
    if descriptor.location == "path" and descriptor.optional:
        msg = f"Path parameters cannot be optional: {descriptor.name!r}{where}."
        raise InvalidAttributeError(msg)


def _parse_param_tag(value: str, context: str) -> ParameterDescriptor:
    """Parse the body of one ``@param`` tag."""
    spec, _, description = value.partition("|")
    named: dict[str, str] = {}
    flags: set[str] = set()

    for attribute in spec.split():
        if ":" in attribute:
            key, _, attr_value = attribute.partition(":")
            if key not in _NAMED_ATTRIBUTES:
                msg = f"Invalid named attribute {attribute!r} for 'param' tag in {context}"
                raise InvalidAttributeError(msg)
            named[key] = attr_value
        elif attribute in _FLAG_ATTRIBUTES and attribute not in flags:
            flags.add(attribute)
        else:
            msg = f"Invalid attribute {attribute!r} for 'param' tag in {context}"
            raise InvalidAttributeError(msg)

    if not all(named.get(key) for key in ("name", "type", "where")):
        msg = f"Missing name, type, or where attribute for '@param {value.strip()}' in {context}"
        raise InvalidAttributeError(msg)

    descriptor = ParameterDescriptor(
        name=named["name"],
        location=named["where"],  # type: ignore[arg-type]
        type=named["type"],
        optional="optional" in flags,
        deprecated="deprecated" in flags,
        description=description.strip(),
        content_type=named.get("contentType"),
    )
    validate_descriptor(descriptor, context)
    return descriptor


def extract(
    metadata: str,
    declared: Sequence[str],
    *,
    context: str = "handler",
) -> HandlerMetadata:
    """Turn handler metadata text into descriptors, category, and deprecation.

    One descriptor is produced per declared parameter, in declared order;
    undocumented parameters get ``type="any"`` and no location.
    Parameters documented but not declared follow, so the documentation
    still lists them.

    Raises ``InvalidAttributeError`` for unknown attributes, bad values,
    or an optional path parameter.
    """
    documented: dict[str, ParameterDescriptor] = {}
    category = DEFAULT_CATEGORY
    deprecated = False

    for m in _TAG_RE.finditer(metadata):
        tag, value = m.group("tag"), m.group("value")
        if tag == "param":
            descriptor = _parse_param_tag(value, context)
            documented[descriptor.name] = descriptor
        elif tag == "category":
            category = value.split()[0] if value.split() else DEFAULT_CATEGORY
        elif tag == "deprecated":
            deprecated = True

    return HandlerMetadata(
        parameters=tuple(declared),
        descriptors=_ordered(declared, documented),
        category=category,
        deprecated=deprecated,
        summary=_summary(metadata),
    )


def _ordered(
    declared: Sequence[str],
    documented: dict[str, ParameterDescriptor],
) -> tuple[ParameterDescriptor, ...]:
    result = [documented.get(name) or ParameterDescriptor(name=name) for name in declared]
    result.extend(d for name, d in documented.items() if name not in declared)
    return tuple(result)


def _summary(metadata: str) -> str:
    """First non-tag line of the metadata text."""
    for line in metadata.splitlines():
        line = line.strip()
        if line and not line.startswith("@"):
            return line
    return ""


def declared_parameters(handler: Callable[..., Any]) -> tuple[str, ...]:
    """Names of the positional-or-keyword parameters *handler* declares."""
    sig = inspect.signature(handler)
    return tuple(
        name
        for name, p in sig.parameters.items()
        if p.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
    )


def describe_handler(
    handler: Callable[..., Any],
    *,
    params: Iterable[ParameterDescriptor] = (),
    category: str | None = None,
    deprecated: bool | None = None,
) -> HandlerMetadata:
    """Build a handler's metadata from its docstring plus explicit overrides."""
    context = f"function {getattr(handler, '__name__', repr(handler))!r}"
    declared = declared_parameters(handler)
    meta = extract(inspect.getdoc(handler) or "", declared, context=context)

    explicit = {d.name: d for d in params}
    for descriptor in explicit.values():
        validate_descriptor(descriptor, context)

    if explicit:
        documented = {d.name: d for d in meta.descriptors if d.documented}
        documented.update(explicit)
        meta = replace(meta, descriptors=_ordered(declared, documented))
    if category is not None:
        meta = replace(meta, category=category)
    if deprecated is not None:
        meta = replace(meta, deprecated=deprecated)
    return meta
