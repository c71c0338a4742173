"""Exceptions raised by tagmarshal.

By default the engine degrades to missing data instead of raising; these are
raised for caller errors, in strict mode, and by driver byte encodings.
"""


class MarshalError(Exception):
    """Base class for all tagmarshal errors."""


class NotMarshalableError(MarshalError, TypeError):
    """The given class or object was never registered with @marshalable."""


class UnknownViewError(MarshalError, LookupError):
    """A class has no fields declared under the requested view (strict mode)."""

    def __init__(self, cls: type, view: str) -> None:
        super().__init__(f"{cls.__name__} declares no fields for view '{view}'")
        self.cls = cls
        self.view = view


class DriverNotFoundError(MarshalError, LookupError):
    """No driver is registered for a view in the class's namespace (strict mode)."""

    def __init__(self, namespace: str, view: str) -> None:
        super().__init__(f"No driver registered for view '{view}' in namespace '{namespace}'")
        self.namespace = namespace
        self.view = view


class EncodeError(MarshalError, ValueError):
    """A blob could not be encoded to bytes."""


class DecodeError(MarshalError, ValueError):
    """Bytes could not be decoded into a blob."""


class ConfigError(MarshalError, ValueError):
    """The configuration file is malformed or references an unknown driver."""
