"""
Splitting of command streams into BLE write units.

A GATT write carries at most one ATT payload, so a command stream is sent
as a series of slices no larger than the negotiated write size. Slices
must reach the printer in offset order.
"""

from dataclasses import dataclass
from typing import Iterator

from .errors import InvalidConfigurationError


@dataclass(frozen=True)
class Chunk:
    """A slice of a command stream and where it starts."""
    offset: int
    data: bytes

    @property
    def end(self) -> int:
        """Offset of the first byte after this chunk."""
        return self.offset + len(self.data)

    def __len__(self) -> int:
        return len(self.data)


class ChunkSequence:
    """
    Ordered chunks of one stream.

    Chunks are cut lazily on iteration. Iterating again starts over from
    offset 0, so a failed send can simply re-chunk the same stream.
    """

    def __init__(self, stream: bytes, max_bytes: int):
        self.stream = bytes(stream)
        self.max_bytes = max_bytes

    def __iter__(self) -> Iterator[Chunk]:
        for offset in range(0, len(self.stream), self.max_bytes):
            yield Chunk(offset, self.stream[offset:offset + self.max_bytes])

    def __len__(self) -> int:
        return (len(self.stream) + self.max_bytes - 1) // self.max_bytes

    def __repr__(self) -> str:
        return f"ChunkSequence({len(self.stream)} bytes, max_bytes={self.max_bytes})"


def chunk(stream: bytes, max_bytes: int) -> ChunkSequence:
    """
    Split a command stream into chunks of at most ``max_bytes``.

    Every chunk except the last is exactly ``max_bytes`` long.

    Raises:
        InvalidConfigurationError: If max_bytes is less than 1
    """
    if max_bytes < 1:
        raise InvalidConfigurationError(f"Chunk size must be >= 1, got {max_bytes}")
    return ChunkSequence(stream, max_bytes)
