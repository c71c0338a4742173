"""Field declarations and the host object accessors used by the engine.

Marshalable classes are dataclasses. A field is *bound* on an instance when
its value is anything other than the ``ABSENT`` sentinel; ``@marshalable``
gives every field without a declared default ``ABSENT`` as its default, so a
freshly created instance starts with those fields unbound.
"""

import types
import typing
from collections.abc import Callable, Mapping
from dataclasses import MISSING, Field, field, fields
from typing import Any, Protocol, runtime_checkable

MARSHAL_KEY = "marshal"
TYPE_KEY = "marshal_type"


class _Absent:
    """Singleton marking an unbound field or a tag missing from a blob."""

    _instance = None

    def __new__(cls) -> "_Absent":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> "_Absent":
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> "_Absent":
        return self


ABSENT = _Absent()


@runtime_checkable
class Marshalable(Protocol):
    """Methods added to every class decorated with @marshalable."""

    def marshal(self, view: str) -> Any: ...


def marshal_field(
    default: Any = ABSENT,
    *,
    default_factory: Callable[[], Any] | None = None,
    type: type | None = None,
    views: Mapping[str, Any] | None = None,
    **tags: Any,
) -> Any:
    """Declare the tags a field is exposed under, one per view.

    Usage:
        @marshalable
        class Point:
            x: int = marshal_field(assoc="field_x", full="x")
            y: int = marshal_field(views={"assoc": "field_y"})

    Args:
        default: Default value; unbound (ABSENT) if not given
        default_factory: Factory function for a default value
        type: Nested class to unmarshal into, overriding the annotation
        views: Mapping of view name to tag, for view names that are not
            valid keyword arguments
        **tags: View name to tag

    Returns:
        A dataclass field carrying the view/tag declarations
    """
    declared = list((views or {}).items()) + list(tags.items())
    metadata: dict[str, Any] = {MARSHAL_KEY: tuple(declared)}
    if type is not None:
        metadata[TYPE_KEY] = type

    if default_factory is not None:
        return field(default_factory=default_factory, metadata=metadata)
    return field(default=default, metadata=metadata)


def view_tags(f: Field) -> tuple[tuple[str, Any], ...]:
    """Return the (view, tag) pairs declared on a dataclass field."""
    return tuple(f.metadata.get(MARSHAL_KEY, ()))


def declared_type(f: Field) -> Any:
    """Return the explicit nested type of a field, if one was declared."""
    return f.metadata.get(TYPE_KEY)


def declared_fields(cls: type) -> tuple[Field, ...]:
    """Return the dataclass fields of a class in declaration order."""
    return fields(cls)


def is_bound(obj: Any, name: str) -> bool:
    """Check whether a field currently holds a value on an instance."""
    return getattr(obj, name, ABSENT) is not ABSENT


def has_default(f: Field) -> bool:
    return f.default is not MISSING or f.default_factory is not MISSING


def nested_class(annotation: Any) -> type | None:
    """Pick the class out of an annotation, unwrapping Optional[...]."""
    if isinstance(annotation, type) and not typing.get_args(annotation):
        return annotation
    if typing.get_origin(annotation) in (typing.Union, types.UnionType):
        args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(args) == 1 and isinstance(args[0], type):
            return args[0]
    return None


def evaluate_annotation(
    annotation: Any, globalns: Mapping[str, Any], localns: Mapping[str, Any]
) -> Any:
    """Evaluate a string annotation, as postponed evaluation leaves them.

    Returns:
        The evaluated annotation (non-strings are returned as is), or ABSENT
        if it names something that is not defined (yet)
    """
    if not isinstance(annotation, str):
        return annotation
    try:
        return eval(annotation, dict(globalns), dict(localns))
    except (NameError, AttributeError, SyntaxError, TypeError):
        return ABSENT
