"""Drivers translating tag/value pairs to and from concrete blobs."""

from tagmarshal.drivers.assoc import AssocDriver
from tagmarshal.drivers.base import Driver, EncodingDriver
from tagmarshal.drivers.mapping import JsonDriver, MappingDriver, MsgpackDriver

# Drivers addressable by name from configuration files
BUILTIN_DRIVERS: dict[str, type[Driver]] = {
    driver.name: driver for driver in (Driver, AssocDriver, JsonDriver, MsgpackDriver)
}

__all__ = [
    "BUILTIN_DRIVERS",
    "AssocDriver",
    "Driver",
    "EncodingDriver",
    "JsonDriver",
    "MappingDriver",
    "MsgpackDriver",
]
