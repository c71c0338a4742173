"""Transposition of per-field view/tag declarations into per-view tag maps."""

from collections.abc import Iterable
from typing import Any


def build_tag_map(
    declarations: Iterable[tuple[str, Iterable[tuple[str, Any]]]],
) -> dict[str, dict[str, Any]]:
    """Turn per-field (view, tag) declarations into view -> (field -> tag).

    Views are created on demand; fields without declarations contribute
    nothing. Within a view, fields keep their declaration order.

    >>> build_tag_map([("x", [("assoc", "field_x"), ("full", "x")]), ("y", [])])
    {'assoc': {'x': 'field_x'}, 'full': {'x': 'x'}}

    Args:
        declarations: (field name, [(view, tag), ...]) in field order

    Returns:
        Mapping of view name to that view's field -> tag mapping
    """
    view_map: dict[str, dict[str, Any]] = {}
    for field_name, pairs in declarations:
        for view, tag in pairs:
            view_map.setdefault(view, {})[field_name] = tag
    return view_map
