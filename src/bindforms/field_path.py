"""String paths addressing fields inside the form subject.

Paths use dotted names and bracketed indexes (``address.city``, ``items[2].name``). They
are opaque keys: two paths are the same field only when their strings are equal, and
no canonicalization is applied.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any
from uuid import uuid4

UNBOUND_FIELD_SUFFIX = "__UNBOUND_FIELD__"

_DEEP_PATH = re.compile(r"""\.|\[(?:[^\[\]]*|(["'])(?:(?!\1)[^\\]|\\.)*?\1)\]""")
_SEGMENT = re.compile(
    r"""[^.\[\]]+"""
    r"""|\[(?:(?P<bare>[^"'][^\[]*)|(?P<quote>["'])(?P<quoted>(?:(?!(?P=quote))[^\\]|\\.)*?)(?P=quote))\]"""
    r"""|(?=(?:\.|\[\])(?:\.|\[\]|$))""",
)
_ESCAPE = re.compile(r"\\(\\)?")
_INDEX = re.compile(r"[0-9]+")

Segment = str | int


def unbound_path(seed: str | None = None) -> str:
    """Synthesize a path for a field without an explicit binding.

    Args:
        seed: Optional stable prefix; a random one is used otherwise.

    Returns:
        str: Path carrying the unbound marker.
    """
    return f"{seed or uuid4().hex[:12]}{UNBOUND_FIELD_SUFFIX}"


def is_unbound(path: str) -> bool:
    """Return whether a path (or its last key) carries the unbound marker."""
    return path.endswith(UNBOUND_FIELD_SUFFIX)


def resolve(binding_name: str | None, parent_path: str | None = None, index: int | None = None) -> str:
    """Resolve the path of a field.

    Args:
        binding_name: The field's own binding; empty or missing means unbound, or the
            whole element when the field sits under a repeating parent.
        parent_path: Path of the enclosing repeating group, if any.
        index: Position of the enclosing item inside the parent collection.

    Returns:
        str: The field path.
    """
    name = binding_name.strip() if binding_name else ""
    if parent_path is None:
        return binding_name if name else unbound_path()

    if index is not None:
        element = f"{parent_path}[{index}]"
        return f"{element}.{binding_name}" if name else element

    return f"{parent_path}.{binding_name if name else unbound_path()}"


def _segment(match: re.Match[str], *, preceded: bool) -> Segment:
    if match.group("quote") is not None:
        return _ESCAPE.sub(lambda escaped: escaped.group(1) or "", match.group("quoted"))
    bare = match.group("bare")
    if bare is not None:
        key = bare.strip()
        return int(key) if _INDEX.fullmatch(key) else key
    name = match.group(0)
    return int(name) if preceded and _INDEX.fullmatch(name) else name


def split_path(path: str) -> list[Segment]:
    """Split a path into name and index segments.

    A path without dots or closed brackets is a single key. Otherwise empty names between
    dots are kept as empty keys, brackets hold an index, a bare key or a quoted key, and a
    digit-only name after the first segment is an index.

    Args:
        path: Field path.

    Returns:
        list[Segment]: Segments; empty only for an empty path.
    """
    if not path:
        return []
    if _DEEP_PATH.search(path) is None:
        return [path]
    segments: list[Segment] = [""] if path.startswith(".") else []
    for match in _SEGMENT.finditer(path):
        segments.append(_segment(match, preceded=bool(segments)))
    return segments or [path]


def _child(container: Any, segment: Segment) -> tuple[bool, Any]:
    if isinstance(container, Mapping):
        if segment in container:
            return True, container[segment]
        if isinstance(segment, int) and str(segment) in container:
            return True, container[str(segment)]
        return False, None
    if isinstance(container, list | tuple) and isinstance(segment, int):
        if 0 <= segment < len(container):
            return True, container[segment]
    return False, None


def read(subject: Any, path: str, default: Any = None) -> Any:
    """Read the value stored at a path.

    Args:
        subject: Root data structure.
        path: Field path.
        default: Value returned when the path does not resolve.

    Returns:
        Any: Stored value or ``default``.
    """
    segments = split_path(path)
    if not segments:
        return default
    node = subject
    for segment in segments:
        found, node = _child(node, segment)
        if not found:
            return default
    return node


def _empty_container(next_segment: Segment) -> dict[str, Any] | list[Any]:
    return [] if isinstance(next_segment, int) else {}


def _holds(node: Any, segment: Segment) -> bool:
    return isinstance(node, dict) or (isinstance(node, list) and isinstance(segment, int))


def _set_in(container: Any, segment: Segment, value: Any) -> None:
    if isinstance(container, list) and isinstance(segment, int):
        if segment >= len(container):
            container.extend([None] * (segment + 1 - len(container)))
        container[segment] = value
    else:
        container[segment] = value


def write(subject: dict[str, Any], path: str, value: Any) -> dict[str, Any]:
    """Write a value at a path in place, creating missing containers.

    A missing container becomes a list when the next segment is an index and a mapping
    otherwise. A list met with a name segment is replaced by a mapping. An empty path
    leaves the subject untouched.

    Args:
        subject: Root mapping, mutated in place.
        path: Field path.
        value: Value to store.

    Returns:
        dict[str, Any]: The same subject, for chaining.
    """
    segments = split_path(path)
    if not segments:
        return subject
    node: Any = subject
    for segment, next_segment in zip(segments, segments[1:], strict=False):
        found, child = _child(node, segment)
        if not found or not _holds(child, next_segment):
            child = _empty_container(next_segment)
            _set_in(node, segment, child)
        node = child
    _set_in(node, segments[-1], value)
    return subject


def _copy_container(node: Any, next_segment: Segment) -> dict[str, Any] | list[Any]:
    if isinstance(node, dict):
        return dict(node)
    if isinstance(node, list | tuple) and isinstance(next_segment, int):
        return list(node)
    return _empty_container(next_segment)


def with_value(subject: dict[str, Any], path: str, value: Any) -> dict[str, Any]:
    """Return a new subject with ``value`` stored at ``path``.

    Only the containers along the path are copied; every other branch is shared with
    ``subject``, which is left untouched.

    Args:
        subject: Root mapping.
        path: Field path.
        value: Value to store.

    Returns:
        dict[str, Any]: Updated root mapping.
    """
    segments = split_path(path)
    if not segments:
        return subject
    root = dict(subject)
    node: Any = root
    for segment, next_segment in zip(segments, segments[1:], strict=False):
        _, child = _child(node, segment)
        child = _copy_container(child, next_segment)
        _set_in(node, segment, child)
        node = child
    _set_in(node, segments[-1], value)
    return root


def without_unbound(subject: Any) -> Any:
    """Strip keys carrying the unbound marker, at any depth.

    Args:
        subject: Subject tree.

    Returns:
        Any: A cleaned copy suitable as submission payload.
    """
    if isinstance(subject, Mapping):
        return {
            key: without_unbound(value)
            for key, value in subject.items()
            if not (isinstance(key, str) and is_unbound(key))
        }
    if isinstance(subject, list | tuple):
        return [without_unbound(item) for item in subject]
    return subject
