"""The @marshalable class decorator.

Usage:
    @marshalable
    class Point:
        x: int = marshal_field(assoc="field_x")
        y: int = marshal_field(assoc="field_y")

    @marshalable(namespace="billing")
    class Invoice:
        total: int = marshal_field(full="total", short="t")
"""

import dataclasses
import logging
import sys
import typing
from typing import Any

from tagmarshal.engine import marshal, unmarshal
from tagmarshal.fields import (
    ABSENT,
    declared_fields,
    declared_type,
    evaluate_annotation,
    has_default,
    nested_class,
    view_tags,
)
from tagmarshal.registry import Namespace, register_class

logger = logging.getLogger(__name__)


def _is_classvar(annotation: Any) -> bool:
    if isinstance(annotation, str):
        return annotation.startswith(("ClassVar", "typing.ClassVar"))
    return typing.get_origin(annotation) is typing.ClassVar or annotation is typing.ClassVar


def _default_unbound(cls: type) -> None:
    """Give every own field without a default the ABSENT default."""
    annotations = cls.__dict__.get("__annotations__", {})
    for name, annotation in annotations.items():
        if _is_classvar(annotation):
            continue
        if name not in cls.__dict__:
            setattr(cls, name, ABSENT)
            continue
        value = cls.__dict__[name]
        if isinstance(value, dataclasses.Field) and not has_default(value):
            value.default = ABSENT


def _register(cls: type, namespace: "Namespace | str | None", scope: dict[str, Any]) -> type:
    if not dataclasses.is_dataclass(cls) or "__dataclass_fields__" not in cls.__dict__:
        _default_unbound(cls)
        cls = dataclasses.dataclass(cls)

    # Resolve annotations field by field; names that are not defined yet
    # (forward references) are resolved on first use instead
    module = sys.modules.get(cls.__module__)
    globalns = vars(module) if module is not None else {}
    localns = {**scope, cls.__name__: cls}

    declarations = []
    nested_types: dict[str, type | None] = {}
    type_refs: dict[str, str] = {}
    for f in declared_fields(cls):
        declarations.append((f.name, view_tags(f)))
        explicit = declared_type(f)
        if explicit is not None:
            nested_types[f.name] = explicit
            continue
        annotation = evaluate_annotation(f.type, globalns, localns)
        if annotation is ABSENT:
            logger.debug(f"Deferring type {f.type!r} of {cls.__qualname__}.{f.name}")
            type_refs[f.name] = f.type
        else:
            nested_types[f.name] = nested_class(annotation)

    register_class(
        cls,
        declarations,
        nested_types,
        namespace=namespace,
        type_refs=type_refs,
        type_scope=scope,
    )

    # Convenience methods, unless the class brings its own
    if "marshal" not in cls.__dict__:

        def marshal_method(self: Any, view: str, *, strict: bool = False) -> Any:
            """Marshal this object under a view."""
            return marshal(self, view, strict=strict)

        cls.marshal = marshal_method  # type: ignore

    if "unmarshal" not in cls.__dict__:

        def unmarshal_method(klass: type, blob: Any, view: str, *, strict: bool = False) -> Any:
            """Create an instance of this class from a blob."""
            return unmarshal(klass, blob, view, strict=strict)

        cls.unmarshal = classmethod(unmarshal_method)  # type: ignore

    return cls


def marshalable(
    cls: type | None = None, *, namespace: "Namespace | str | None" = None
) -> Any:
    """Register a class for tag-directed marshalling.

    The class is made a dataclass if it isn't already, with unbound (ABSENT)
    as the default of every field that declares none. Its field tags and
    nested types are recorded once, here.

    Args:
        cls: Class to decorate (when used without arguments)
        namespace: Namespace, or namespace name, whose drivers this class
            uses; inherited from a registered base class when omitted,
            otherwise the global namespace

    Returns:
        The decorated class, or a decorator when called with arguments
    """

    # Names local to the declaring function, for annotations naming them
    frame = sys._getframe(1)
    scope = {} if frame.f_locals is frame.f_globals else dict(frame.f_locals)
    del frame

    def wrapper(klass: type) -> type:
        return _register(klass, namespace, scope)

    if cls is None:
        return wrapper
    return wrapper(cls)

