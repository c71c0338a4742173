"""Driver interface.

A driver translates between (tag, value) pairs and a concrete blob. The
engine creates a fresh driver for every marshal/unmarshal call and feeds it
one pair at a time, so the driver owns the only accumulator for that call.
"""

from abc import ABC, abstractmethod
from typing import Any

from tagmarshal.fields import ABSENT


class Driver:
    """Base driver.

    Discards every write and finds nothing on read. This is what a view
    without a registered driver falls back to.
    """

    name = "base"

    def write(self, tag: Any, value: Any) -> Any:
        """Record one tag/value association.

        Args:
            tag: External key of the field
            value: Already-marshalled value (a nested blob for composites)

        Returns:
            The accumulator's current state
        """
        return None

    def read(self, tag: Any, blob: Any) -> Any:
        """Extract the raw value stored under a tag.

        Args:
            tag: External key of the field
            blob: Blob previously produced by this kind of driver

        Returns:
            The raw value, or ABSENT if the tag is not present
        """
        return ABSENT


class EncodingDriver(Driver, ABC):
    """Driver whose blobs also have a byte encoding.

    Implementations provide ``dump``/``load`` so finished blobs can be
    written to and read from files or the network.
    """

    @classmethod
    @abstractmethod
    def dump(cls, blob: Any) -> bytes:
        """Encode a finished blob to bytes.

        Raises:
            EncodeError: If the blob cannot be encoded
        """

    @classmethod
    @abstractmethod
    def load(cls, data: bytes) -> Any:
        """Decode bytes produced by ``dump`` back into a blob.

        Raises:
            DecodeError: If the data is malformed
        """
