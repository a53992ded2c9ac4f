"""Helpers for JSON-like trees addressed by slash-separated paths."""

from __future__ import annotations

import copy
from typing import Any, Mapping, Tuple

Segments = Tuple[str, ...]


def split_path(path: str) -> Segments:
    """``"/sensors/a"`` -> ``("sensors", "a")``; the root path is ``()``."""
    stripped = path.strip()
    if not stripped.strip("/"):
        return ()
    segments = tuple(stripped.strip("/").split("/"))
    if any(not segment.strip() for segment in segments):
        raise ValueError(f"Invalid data path {path!r}: empty segment.")
    return segments


def join_path(segments: Segments) -> str:
    return "/" + "/".join(segments)


def is_related(first: Segments, second: Segments) -> bool:
    """True when one path is an ancestor of (or equal to) the other."""
    shortest = min(len(first), len(second))
    return first[:shortest] == second[:shortest]


def get_at(root: Any, segments: Segments) -> Any:
    node = root
    for segment in segments:
        if not isinstance(node, Mapping):
            return None
        node = node.get(segment)
        if node is None:
            return None
    return copy.deepcopy(node)


def set_at(root: Any, segments: Segments, value: Any) -> Any:
    """Return ``root`` with ``value`` stored at ``segments``.

    ``None`` deletes the node; parents left empty are pruned, the way a
    realtime database drops empty branches.
    """
    if not segments:
        return _prune(copy.deepcopy(value))

    head, rest = segments[0], segments[1:]
    node = dict(root) if isinstance(root, Mapping) else {}
    child = set_at(node.get(head), rest, value)
    if child is None:
        node.pop(head, None)
    else:
        node[head] = child
    return node or None


def update_at(root: Any, segments: Segments, changes: Mapping[str, Any]) -> Any:
    """Apply a shallow multi-key update below ``segments``."""
    for key, value in changes.items():
        root = set_at(root, segments + split_path(key), value)
    return root


def _prune(value: Any) -> Any:
    if isinstance(value, Mapping):
        pruned = {key: _prune(child) for key, child in value.items()}
        pruned = {key: child for key, child in pruned.items() if child is not None}
        return pruned or None
    return value
