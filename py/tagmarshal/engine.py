"""Recursive marshal and unmarshal.

Both walks visit the declared fields of a class in order and hand each
tagged value to a driver. Values that are not marshalable pass through
unchanged. A failure part-way leaves whatever was already written or set.
"""

import logging
from typing import Any

from tagmarshal.errors import NotMarshalableError, UnknownViewError
from tagmarshal.fields import ABSENT, is_bound
from tagmarshal.registry import ClassMetadata, get_driver, metadata_for

logger = logging.getLogger(__name__)


def marshal(obj: Any, view: str, *, strict: bool = False) -> Any:
    """Produce the blob of an object under a view.

    Args:
        obj: Object to marshal; returned as is if it is not marshalable
        view: View name selecting fields, tags and driver
        strict: Raise instead of degrading on unknown views or drivers

    Returns:
        Whatever the driver's last write returned, or None if nothing was
        written or the class has no fields under the view

    Raises:
        UnknownViewError: If strict and the class declares nothing for view
        DriverNotFoundError: If strict and the view has no driver
    """
    meta = metadata_for(type(obj))
    if meta is None:
        return obj

    field_map = _field_map(meta, view, strict)
    if field_map is None:
        return None
    driver = get_driver(obj, view, strict=strict)

    blob = None
    for name in meta.fields:
        if name not in field_map:
            continue
        tag = field_map[name]
        if not is_bound(obj, name):
            logger.trace(f"{meta.cls.__qualname__}.{name} unbound, skipped")  # type: ignore
            continue
        value = marshal(getattr(obj, name), view, strict=strict)
        logger.trace(f"{meta.cls.__qualname__}.{name} -> {tag!r}")  # type: ignore
        blob = driver.write(tag, value)
    return blob


def unmarshal(target: Any, blob: Any, view: str, *, strict: bool = False) -> Any:
    """Populate an object from a blob under a view.

    Args:
        target: Marshalable class (a fresh instance is created) or an
            existing instance (updated in place)
        blob: Blob produced by the view's driver
        view: View name selecting fields, tags and driver
        strict: Raise instead of degrading on unknown views or drivers

    Returns:
        The populated instance

    Raises:
        NotMarshalableError: If target is not marshalable
        UnknownViewError: If strict and the class declares nothing for view
        DriverNotFoundError: If strict and the view has no driver
    """
    cls = target if isinstance(target, type) else type(target)
    meta = metadata_for(cls)
    if meta is None:
        raise NotMarshalableError(f"{cls.__qualname__} is not marshalable")
    instance = target() if isinstance(target, type) else target

    field_map = _field_map(meta, view, strict)
    if field_map is None:
        return instance
    driver = get_driver(instance, view, strict=strict)

    for name in meta.fields:
        if name not in field_map:
            continue
        tag = field_map[name]
        raw = driver.read(tag, blob)
        if raw is ABSENT:
            logger.trace(f"{meta.cls.__qualname__}.{name}: {tag!r} not in blob")  # type: ignore
            setattr(instance, name, ABSENT)
            continue
        setattr(instance, name, _unmarshal_value(instance, name, raw, meta, view, strict))
    return instance


def _unmarshal_value(
    instance: Any, name: str, raw: Any, meta: ClassMetadata, view: str, strict: bool
) -> Any:
    nested_type = meta.nested_type(name)
    if nested_type is None or metadata_for(nested_type) is None:
        return raw

    current = getattr(instance, name, ABSENT)
    if isinstance(current, nested_type):
        logger.trace(f"{meta.cls.__qualname__}.{name}: updating nested instance")  # type: ignore
        return unmarshal(current, raw, view, strict=strict)
    return unmarshal(nested_type, raw, view, strict=strict)


def _field_map(meta: ClassMetadata, view: str, strict: bool) -> Any:
    field_map = meta.view_map.get(view)
    if field_map is None:
        if strict:
            raise UnknownViewError(meta.cls, view)
        logger.debug(f"{meta.cls.__qualname__} declares no fields for view '{view}'")
    return field_map
