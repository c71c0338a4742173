"""tagmarshal - tag-directed object marshalling.

Classes declare, per named view, the tag each field is exposed under; the
engine walks those declarations to produce or consume blobs, delegating the
concrete encoding to pluggable drivers:
- @marshalable and marshal_field() for declaring classes
- marshal() / unmarshal() for converting objects
- Namespaces binding view names to drivers (assoc, JSON, msgpack)
"""

from tagmarshal import log  # noqa: F401  (registers the TRACE level)
from tagmarshal.decorators import marshalable
from tagmarshal.drivers import (
    AssocDriver,
    Driver,
    EncodingDriver,
    JsonDriver,
    MappingDriver,
    MsgpackDriver,
)
from tagmarshal.engine import marshal, unmarshal
from tagmarshal.errors import (
    ConfigError,
    DecodeError,
    DriverNotFoundError,
    EncodeError,
    MarshalError,
    NotMarshalableError,
    UnknownViewError,
)
from tagmarshal.fields import ABSENT, Marshalable, is_bound, marshal_field
from tagmarshal.registry import (
    GLOBAL_NAMESPACE,
    ClassMetadata,
    Namespace,
    get_driver,
    get_namespace,
    is_marshalable,
    metadata_for,
    register_driver,
)

__version__ = "0.1.0"

__all__ = [
    # Declaring classes
    "marshalable",
    "marshal_field",
    "Marshalable",
    "ABSENT",
    "is_bound",
    # Engine
    "marshal",
    "unmarshal",
    # Registry
    "ClassMetadata",
    "Namespace",
    "GLOBAL_NAMESPACE",
    "get_namespace",
    "get_driver",
    "register_driver",
    "metadata_for",
    "is_marshalable",
    # Drivers
    "Driver",
    "EncodingDriver",
    "AssocDriver",
    "MappingDriver",
    "JsonDriver",
    "MsgpackDriver",
    # Errors
    "MarshalError",
    "NotMarshalableError",
    "UnknownViewError",
    "DriverNotFoundError",
    "EncodeError",
    "DecodeError",
    "ConfigError",
]
