"""
Gap detection and merging for nested i18n resource trees.

A resource tree is the parsed content of one JSON file: a dict whose values
are strings, other JSON scalars, lists or nested dicts. The gap between a base
tree and a target tree is the part of the base the target still lacks.
"""

from __future__ import annotations

import copy
from typing import Any, Optional

Tree = dict[str, Any]


def diff_objects(base: Tree, target: Tree) -> Tree:
    """
    Return the subset of `base` whose keys are missing or empty in `target`.

    Keys whose values are equal on both sides are skipped. Nested dicts are
    compared recursively and only kept when something below them is missing.
    A key the target already holds with a different, non-empty value counts
    as translated and is skipped too.
    """
    result: Tree = {}
    for key, value in base.items():
        other = target.get(key)
        if value == other:
            continue
        if isinstance(value, dict) and isinstance(other, dict):
            nested = diff_objects(value, other)
            if nested:
                result[key] = nested
        elif not other:
            result[key] = copy.deepcopy(value)
    return result


def merge_translations(
    translated: Tree,
    original: Tree,
    order: Optional[Tree] = None,
) -> Tree:
    """
    Merge freshly translated leaves into the original target content.

    Values already present in `original` win, except empty ones (`""`, None,
    0) that a translation now fills. Keys follow the order of
    `order` (usually the base tree), then whatever only `original` has.
    """
    merged: Tree = dict(translated)
    for key, value in original.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            nested_order = order.get(key) if order else None
            merged[key] = merge_translations(
                current, value, nested_order if isinstance(nested_order, dict) else None
            )
        elif key in merged and not value:
            continue
        else:
            merged[key] = value

    if not order:
        return merged
    ordered: Tree = {key: merged[key] for key in order if key in merged}
    for key in original:
        ordered.setdefault(key, merged[key])
    for key in merged:
        ordered.setdefault(key, merged[key])
    return ordered


def strip_value(tree: Tree, value: Any) -> Tree:
    """Copy of `tree` without any leaf equal to `value`."""
    result: Tree = {}
    for key, item in tree.items():
        if isinstance(item, dict):
            result[key] = strip_value(item, value)
        elif item != value:
            result[key] = item
    return result


def count_leaves(tree: Tree) -> int:
    """Number of string leaves in `tree`."""
    total = 0
    for item in tree.values():
        if isinstance(item, dict):
            total += count_leaves(item)
        elif isinstance(item, str):
            total += 1
    return total
