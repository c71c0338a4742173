"""Association-list driver.

Blobs are lists of (tag, value) pairs; nested composite values are nested
lists. This is the driver the global namespace ships with under view
``assoc``.
"""

from collections.abc import Iterable
from typing import Any

from tagmarshal.drivers.base import EncodingDriver
from tagmarshal.drivers.mapping import decode_json, encode_json
from tagmarshal.fields import ABSENT


class AssocDriver(EncodingDriver):
    """Reference driver accumulating an association list."""

    name = "assoc"

    def __init__(self) -> None:
        self.result: list[tuple[Any, Any]] = []

    def write(self, tag: Any, value: Any) -> list[tuple[Any, Any]]:
        self.result.insert(0, (tag, value))
        return self.result

    def read(self, tag: Any, blob: Any) -> Any:
        if isinstance(blob, (str, bytes)) or not isinstance(blob, Iterable):
            return ABSENT
        for entry in blob:
            # Pairs decoded from JSON come back as two-element lists
            if isinstance(entry, (list, tuple)) and len(entry) == 2 and entry[0] == tag:
                return entry[1]
        return ABSENT

    @classmethod
    def dump(cls, blob: Any) -> bytes:
        """Encode as a JSON array of [tag, value] pairs."""
        return encode_json(blob)

    @classmethod
    def load(cls, data: bytes) -> Any:
        return decode_json(data)
