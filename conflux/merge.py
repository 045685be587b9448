"""
Key normalization and deep merge.

Fragments are normalized (every mapping key trimmed and lower-cased at every
depth) before they are merged, so ``Server.Host`` from one source and
``server.host`` from another land on the same leaf.
"""

import copy
from typing import Any, Dict, Iterable, Mapping, Optional

from conflux.core.exceptions import MergeError


def normalize_key(key: Any) -> str:
    return str(key).strip().lower()


def normalize_keys(value: Any) -> Any:
    """
    Return a copy of ``value`` with every mapping key normalized.

    Scalars pass through unchanged; lists and tuples are normalized
    element-wise. Keys that collide after normalization inside one mapping
    are merged like two sources, the later key winning.
    """
    if isinstance(value, Mapping):
        normalized: Dict[str, Any] = {}
        for key, item in value.items():
            nkey = normalize_key(key)
            item = normalize_keys(item)
            if nkey in normalized and isinstance(normalized[nkey], dict) and isinstance(item, dict):
                normalized[nkey] = deep_merge(normalized[nkey], item)
            else:
                normalized[nkey] = item
        return normalized
    if isinstance(value, (list, tuple)):
        return [normalize_keys(item) for item in value]
    return value


def deep_merge(base: Mapping[str, Any], incoming: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Merge ``incoming`` over ``base`` and return a new mapping.

    Keys are unioned. When both sides hold a mapping the merge recurses;
    otherwise the incoming value replaces the base value entirely (lists are
    never merged element-wise). Neither argument is modified.
    """
    merged = dict(base)
    for key, value in incoming.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def merge_fragments(fragments: Iterable[Optional[Any]], labels: Optional[Iterable[str]] = None) -> Dict[str, Any]:
    """
    Normalize and merge fragments left to right into a new aggregate.

    ``None`` and empty fragments contribute nothing. A fragment that is not
    a mapping raises ``MergeError``.
    """
    labels = list(labels) if labels is not None else None
    aggregate: Dict[str, Any] = {}
    for index, fragment in enumerate(fragments):
        if fragment is None:
            continue
        if not isinstance(fragment, Mapping):
            label = labels[index] if labels else f"source[{index}]"
            raise MergeError(
                label, "merge",
                TypeError(f"expected a mapping, got {type(fragment).__name__}"))
        aggregate = deep_merge(aggregate, normalize_keys(fragment))
    return aggregate
