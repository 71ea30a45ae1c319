# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
RIFF chunk model

A RIFF file is a tree of chunks. A chunk is either a leaf holding raw
bytes (DataChunk) or a list holding a form type and child chunks
(ListChunk). On the wire every chunk is:

    fourcc (4) | payload length, little-endian (4) | payload | pad byte if odd

The pad byte is always zero and is never counted in the length field.

Copyright 2025 DNAi inc.
"""

import struct
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple, Union

from png2webp.exceptions import ContainerParseError, ContainerWriteError

RIFF_ID = b'RIFF'

CHUNK_HEADER_SIZE = 8
MAX_CHUNK_SIZE = 0xFFFFFFFF


@dataclass(frozen=True)
class DataChunk:
    """Leaf chunk: a fourcc and opaque payload bytes."""
    fourcc: bytes
    payload: bytes

    @property
    def payload_size(self) -> int:
        return len(self.payload)

    @property
    def size(self) -> int:
        """Full on-wire size including header and pad byte."""
        return CHUNK_HEADER_SIZE + padded(self.payload_size)

    def to_bytes(self) -> bytes:
        return _frame(self.fourcc, self.payload)


@dataclass(frozen=True)
class ListChunk:
    """Container chunk: a fourcc (RIFF), a form type and child chunks."""
    fourcc: bytes
    form_type: bytes
    children: Tuple['Chunk', ...]

    @property
    def payload_size(self) -> int:
        return 4 + sum(child.size for child in self.children)

    @property
    def size(self) -> int:
        return CHUNK_HEADER_SIZE + padded(self.payload_size)

    def find(self, *fourccs: bytes) -> Optional['Chunk']:
        """Return the first child whose fourcc is one of fourccs."""
        for child in self.children:
            if child.fourcc in fourccs:
                return child
        return None

    def to_bytes(self) -> bytes:
        data = bytearray()
        data.extend(self.fourcc)
        data.extend(b'\x00\x00\x00\x00')  # backpatched below
        data.extend(self.form_type)
        for child in self.children:
            data.extend(child.to_bytes())
        payload_size = len(data) - CHUNK_HEADER_SIZE
        _check_size(self.fourcc, payload_size)
        data[4:8] = struct.pack('<I', payload_size)
        if payload_size % 2 == 1:
            data.append(0)
        return bytes(data)


Chunk = Union[DataChunk, ListChunk]


def padded(length: int) -> int:
    """Round a payload length up to the next even number."""
    return length + (length & 1)


def _check_size(fourcc: bytes, length: int) -> None:
    if length > MAX_CHUNK_SIZE:
        raise ContainerWriteError(f"{fourcc!r} chunk of {length} bytes exceeds the 32-bit length field")


def _frame(fourcc: bytes, payload: bytes) -> bytes:
    if len(fourcc) != 4:
        raise ContainerWriteError(f"Chunk identifier must be 4 bytes, got {fourcc!r}")
    _check_size(fourcc, len(payload))
    chunk = bytearray()
    chunk.extend(fourcc)
    chunk.extend(struct.pack('<I', len(payload)))
    chunk.extend(payload)
    # Align to even boundary
    if len(payload) % 2 == 1:
        chunk.append(0)
    return bytes(chunk)


def iter_chunks(data: bytes, offset: int = 0, end: Optional[int] = None) -> Iterator[DataChunk]:
    """
    Yield leaf chunks stored back to back in data[offset:end].

    Raises:
        ContainerParseError: If a chunk header or payload runs past end
    """
    if end is None:
        end = len(data)
    while offset < end:
        if offset + CHUNK_HEADER_SIZE > end:
            raise ContainerParseError(f"Truncated chunk header at offset {offset}")
        fourcc, chunk_size = struct.unpack('<4sI', data[offset:offset + CHUNK_HEADER_SIZE])
        offset += CHUNK_HEADER_SIZE
        if offset + chunk_size > end:
            raise ContainerParseError(f"{fourcc!r} chunk at offset {offset - 8} runs past the container")
        yield DataChunk(fourcc, bytes(data[offset:offset + chunk_size]))
        offset += padded(chunk_size)


def read_riff(data: bytes, form_type: Optional[bytes] = None) -> ListChunk:
    """
    Parse a RIFF file into a ListChunk of leaf chunks.

    Args:
        data: Complete RIFF file data
        form_type: Expected form type (e.g. b'WEBP'), or None to accept any

    Raises:
        ContainerParseError: If the data is not a well-formed RIFF file
    """
    if len(data) < 12 or data[:4] != RIFF_ID:
        raise ContainerParseError("Data does not start with a RIFF header")
    riff_size = struct.unpack('<I', data[4:8])[0]
    if riff_size < 4 or CHUNK_HEADER_SIZE + riff_size > len(data):
        raise ContainerParseError(f"RIFF length {riff_size} does not match {len(data)} bytes of data")
    actual_form = data[8:12]
    if form_type is not None and actual_form != form_type:
        raise ContainerParseError(f"Expected {form_type!r} form, got {actual_form!r}")
    children = tuple(iter_chunks(data, 12, CHUNK_HEADER_SIZE + riff_size))
    return ListChunk(RIFF_ID, actual_form, children)
