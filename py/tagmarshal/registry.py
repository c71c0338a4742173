"""Class metadata and driver namespaces.

Registration happens once, when a class is declared; after that the
metadata is read-only and shared by every instance. Drivers are looked up
per view in the namespace the class was registered under, so independent
class hierarchies can bind the same view name to different drivers.

Nothing here is locked: finish registering classes and drivers before
marshalling from several threads.
"""

import logging
import sys
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from tagmarshal.drivers import AssocDriver, Driver
from tagmarshal.errors import DriverNotFoundError, NotMarshalableError
from tagmarshal.fields import ABSENT, evaluate_annotation, nested_class
from tagmarshal.tagmap import build_tag_map

logger = logging.getLogger(__name__)

GLOBAL = "global"


class Namespace:
    """Named table of view -> driver class."""

    def __init__(self, name: str, drivers: Mapping[str, type[Driver]] | None = None) -> None:
        self.name = name
        self._drivers: dict[str, type[Driver]] = dict(drivers or {})

    def register(self, view: str, driver_cls: type[Driver]) -> None:
        """Bind a view to a driver class, replacing any previous binding."""
        if not (isinstance(driver_cls, type) and issubclass(driver_cls, Driver)):
            raise TypeError(f"{driver_cls!r} is not a Driver subclass")
        previous = self._drivers.get(view)
        self._drivers[view] = driver_cls
        if previous is not None and previous is not driver_cls:
            logger.debug(
                f"Namespace '{self.name}': view '{view}' rebound "
                f"from {previous.__name__} to {driver_cls.__name__}"
            )
        else:
            logger.debug(f"Namespace '{self.name}': view '{view}' -> {driver_cls.__name__}")

    def lookup(self, view: str) -> type[Driver] | None:
        return self._drivers.get(view)

    def views(self) -> dict[str, type[Driver]]:
        return dict(self._drivers)

    def __repr__(self) -> str:
        return f"Namespace({self.name!r}, views={sorted(self._drivers)})"


_NAMESPACES: dict[str, Namespace] = {
    GLOBAL: Namespace(GLOBAL, {AssocDriver.name: AssocDriver}),
}
GLOBAL_NAMESPACE = _NAMESPACES[GLOBAL]


def get_namespace(name: str) -> Namespace:
    """Return the namespace with the given name, creating it if needed."""
    namespace = _NAMESPACES.get(name)
    if namespace is None:
        namespace = _NAMESPACES[name] = Namespace(name)
        logger.debug(f"Created namespace '{name}'")
    return namespace


@dataclass(frozen=True)
class ClassMetadata:
    """Per-class marshalling metadata, built once at registration.

    Nested types whose annotations could not be evaluated when the class was
    declared (forward references, classes local to a function) are kept as
    references and resolved the first time they are needed.

    Attributes:
        cls: The registered class
        fields: Field names in declaration order
        view_map: view -> (field -> tag)
        namespace: Namespace drivers are looked up in
        types: field -> nested class, None for fields known to have none
        type_refs: field -> annotation still to be resolved
        type_scope: names visible where the class was declared
    """

    cls: type
    fields: tuple[str, ...]
    view_map: Mapping[str, Mapping[str, Any]]
    namespace: Namespace
    types: dict[str, type | None] = field(default_factory=dict, repr=False)
    type_refs: Mapping[str, str] = field(default_factory=dict, repr=False)
    type_scope: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)
    _unresolved: set[str] = field(default_factory=set, repr=False, compare=False)

    @property
    def type_map(self) -> Mapping[str, type]:
        """field -> nested class, for the fields resolved so far."""
        return MappingProxyType({k: v for k, v in self.types.items() if v is not None})

    def nested_type(self, name: str) -> type | None:
        """Return the nested class of a field, resolving deferred annotations."""
        if name in self.types:
            return self.types[name]
        ref = self.type_refs.get(name)
        if ref is None:
            return None

        # Later declarations: module globals as they are now, then classes
        # registered from the same module (covers function-local classes)
        module = sys.modules.get(self.cls.__module__)
        localns = {
            klass.__name__: klass
            for klass in _METADATA
            if klass.__module__ == self.cls.__module__
        }
        localns.update(self.type_scope)
        evaluated = evaluate_annotation(ref, vars(module) if module else {}, localns)
        if evaluated is ABSENT:
            if name not in self._unresolved:
                self._unresolved.add(name)
                logger.warning(
                    f"Cannot resolve type {ref!r} of {self.cls.__qualname__}.{name}, "
                    f"its values are not unmarshalled recursively"
                )
            return None

        nested = self.types[name] = nested_class(evaluated)
        logger.debug(f"Resolved type of {self.cls.__qualname__}.{name} to {evaluated!r}")
        return nested


_METADATA: dict[type, ClassMetadata] = {}


def metadata_for(cls: type) -> ClassMetadata | None:
    """Find the metadata of a class or of its closest registered ancestor."""
    for klass in cls.__mro__:
        meta = _METADATA.get(klass)
        if meta is not None:
            return meta
    return None


def is_marshalable(obj: Any) -> bool:
    """Check whether a class, or the class of an object, is registered."""
    cls = obj if isinstance(obj, type) else type(obj)
    return metadata_for(cls) is not None


def _resolve_namespace(namespace: "Namespace | str | None", cls: type) -> Namespace:
    if isinstance(namespace, Namespace):
        return namespace
    if isinstance(namespace, str):
        return get_namespace(namespace)
    # Inherit from the closest registered base class
    for base in cls.__mro__[1:]:
        meta = _METADATA.get(base)
        if meta is not None:
            return meta.namespace
    return GLOBAL_NAMESPACE


def register_class(
    cls: type,
    declarations: Iterable[tuple[str, Iterable[tuple[str, Any]]]],
    types: Mapping[str, type | None],
    namespace: "Namespace | str | None" = None,
    type_refs: Mapping[str, str] | None = None,
    type_scope: Mapping[str, Any] | None = None,
) -> ClassMetadata:
    """Build and store the metadata of a class.

    Args:
        cls: Class being registered
        declarations: (field name, [(view, tag), ...]) for every declared
            field, in declaration order
        types: field name -> nested class (or None), for the fields whose
            annotation could be evaluated
        namespace: Namespace (or its name) to look drivers up in; inherited
            from the closest registered base class when omitted
        type_refs: field name -> annotation to resolve on first use
        type_scope: Local names to resolve those annotations with

    Returns:
        The stored metadata
    """
    declarations = [(name, tuple(pairs)) for name, pairs in declarations]
    view_map = build_tag_map(declarations)
    meta = ClassMetadata(
        cls=cls,
        fields=tuple(name for name, _ in declarations),
        view_map=MappingProxyType({v: MappingProxyType(m) for v, m in view_map.items()}),
        namespace=_resolve_namespace(namespace, cls),
        types=dict(types),
        type_refs=MappingProxyType(dict(type_refs or {})),
        type_scope=MappingProxyType(dict(type_scope or {})),
    )
    if cls in _METADATA:
        logger.debug(f"Re-registering {cls.__qualname__}")
    _METADATA[cls] = meta
    logger.debug(
        f"Registered {cls.__qualname__} in namespace '{meta.namespace.name}' "
        f"with views {sorted(view_map)}"
    )
    return meta


def register_driver(target: "Namespace | str | type", view: str, driver_cls: type[Driver]) -> None:
    """Bind a view to a driver in a namespace.

    Args:
        target: A Namespace, a namespace name, or a registered class (meaning
            the namespace that class uses)
        view: View name
        driver_cls: Driver class to instantiate for that view

    Raises:
        NotMarshalableError: If target is a class that was never registered
        TypeError: If driver_cls is not a Driver subclass
    """
    if isinstance(target, Namespace):
        namespace = target
    elif isinstance(target, str):
        namespace = get_namespace(target)
    else:
        meta = metadata_for(target)
        if meta is None:
            raise NotMarshalableError(f"{target!r} is not a marshalable class")
        namespace = meta.namespace
    namespace.register(view, driver_cls)


def get_driver(obj: Any, view: str, strict: bool = False) -> Driver:
    """Create a fresh driver for marshalling an object under a view.

    Unregistered views fall back to the no-op base Driver, so writes are
    discarded and reads find nothing.

    Raises:
        NotMarshalableError: If obj is not marshalable
        DriverNotFoundError: If strict and no driver is registered
    """
    cls = obj if isinstance(obj, type) else type(obj)
    meta = metadata_for(cls)
    if meta is None:
        raise NotMarshalableError(f"{cls.__qualname__} is not marshalable")

    driver_cls = meta.namespace.lookup(view)
    if driver_cls is None:
        if strict:
            raise DriverNotFoundError(meta.namespace.name, view)
        logger.warning(
            f"No driver for view '{view}' in namespace '{meta.namespace.name}', "
            f"{cls.__qualname__} falls back to the no-op driver"
        )
        driver_cls = Driver
    return driver_cls()
