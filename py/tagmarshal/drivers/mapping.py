"""Mapping-based drivers.

Both drivers here accumulate fields into a dict keyed by tag and differ
only in their byte encoding: JSON is human-readable and useful for
debugging, msgpack is compact binary.
"""

import base64
import json
from collections.abc import Mapping
from typing import Any

import msgpack

from tagmarshal.drivers.base import EncodingDriver
from tagmarshal.errors import DecodeError, EncodeError
from tagmarshal.fields import ABSENT


# JSON has no bytes type: they travel as {"__bytes__": "<base64>"}
BYTES_KEY = "__bytes__"


def _bytes_to_json(obj: Any) -> Any:
    if isinstance(obj, (bytes, bytearray)):
        return {BYTES_KEY: base64.b64encode(obj).decode("ascii")}
    raise TypeError(f"{type(obj).__name__} values have no JSON form")


def _bytes_from_json(obj: dict[str, Any]) -> Any:
    if obj.keys() == {BYTES_KEY}:
        return base64.b64decode(obj[BYTES_KEY])
    return obj


def encode_json(blob: Any) -> bytes:
    """Encode a blob as compact UTF-8 JSON.

    Raises:
        EncodeError: If the blob holds values JSON cannot represent
    """
    try:
        return json.dumps(blob, default=_bytes_to_json, separators=(",", ":")).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise EncodeError(f"Cannot encode JSON blob: {e}") from e


def decode_json(data: bytes) -> Any:
    """Decode UTF-8 JSON produced by encode_json.

    Raises:
        DecodeError: If data is not valid UTF-8 JSON
    """
    try:
        return json.loads(data.decode("utf-8"), object_hook=_bytes_from_json)
    except (UnicodeDecodeError, ValueError) as e:
        raise DecodeError(f"Invalid JSON blob: {e}") from e


class MappingDriver(EncodingDriver):
    """Driver accumulating a dict of tag -> value."""

    def __init__(self) -> None:
        self.result: dict[Any, Any] = {}

    def write(self, tag: Any, value: Any) -> dict[Any, Any]:
        self.result[tag] = value
        return self.result

    def read(self, tag: Any, blob: Any) -> Any:
        if not isinstance(blob, Mapping):
            return ABSENT
        return blob.get(tag, ABSENT)


class JsonDriver(MappingDriver):
    """JSON object driver."""

    name = "json"

    @classmethod
    def dump(cls, blob: Any) -> bytes:
        return encode_json(blob)

    @classmethod
    def load(cls, data: bytes) -> Any:
        return decode_json(data)


class MsgpackDriver(MappingDriver):
    """Msgpack map driver."""

    name = "msgpack"

    @classmethod
    def dump(cls, blob: Any) -> bytes:
        try:
            return msgpack.packb(blob, use_bin_type=True)  # type: ignore
        except (TypeError, ValueError, OverflowError) as e:
            raise EncodeError(f"Cannot encode msgpack blob: {e}") from e

    @classmethod
    def load(cls, data: bytes) -> Any:
        try:
            return msgpack.unpackb(data, raw=False)
        except (msgpack.exceptions.UnpackException, ValueError) as e:
            raise DecodeError(f"Invalid msgpack blob: {e}") from e
