# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
WebP extended-format writer

This module turns a simple-format WebP (RIFF header + one VP8/VP8L
bitstream chunk) into an extended-format WebP carrying an EXIF chunk:

    RIFF <size> WEBP
        VP8X  flags, canvas width - 1, canvas height - 1
        VP8L  bitstream, copied byte for byte (or 'VP8 ')
        EXIF  TIFF block

The bitstream is never decoded or re-encoded, only relocated.

Copyright 2025 DNAi inc.
"""

import logging

from png2webp.exceptions import ContainerWriteError, UnsupportedBitstreamFormatError
from png2webp.riff import RIFF_ID, DataChunk, ListChunk, read_riff

logger = logging.getLogger(__name__)

WEBP_ID = b'WEBP'

# WebP chunk types
CHUNK_VP8 = b'VP8 '  # VP8 image data
CHUNK_VP8L = b'VP8L'  # VP8L image data
CHUNK_VP8X = b'VP8X'  # Extended format
CHUNK_EXIF = b'EXIF'  # EXIF data

BITSTREAM_CHUNKS = (CHUNK_VP8, CHUNK_VP8L)

# VP8X flags byte; alpha, ICC, XMP and animation bits are never set
FLAG_EXIF = 0x08

VP8X_PAYLOAD_SIZE = 10
MAX_CANVAS_DIMENSION = 1 << 24


def build_vp8x_payload(width: int, height: int, flags: int = FLAG_EXIF) -> bytes:
    """
    Build a VP8X chunk payload with the provided flags and canvas size.

    Only the EXIF bit is set by default; alpha, ICC, XMP and animation
    are left clear even when the bitstream carries alpha.

    Raises:
        ContainerWriteError: If a dimension is outside 1..2^24
    """
    if not (1 <= width <= MAX_CANVAS_DIMENSION and 1 <= height <= MAX_CANVAS_DIMENSION):
        raise ContainerWriteError(f"Invalid canvas dimensions for VP8X chunk: {width}x{height}")
    payload = bytearray(VP8X_PAYLOAD_SIZE)
    payload[0] = flags & 0xFF
    payload[1:4] = b'\x00\x00\x00'
    payload[4:7] = (width - 1).to_bytes(3, 'little')
    payload[7:10] = (height - 1).to_bytes(3, 'little')
    return bytes(payload)


def find_bitstream_chunk(webp_data: bytes) -> DataChunk:
    """
    Return the first VP8/VP8L chunk of an encoded WebP file.

    Raises:
        ContainerParseError: If webp_data is not a well-formed RIFF/WEBP file
        UnsupportedBitstreamFormatError: If no VP8/VP8L chunk is present
    """
    root = read_riff(webp_data, form_type=WEBP_ID)
    bitstream = root.find(*BITSTREAM_CHUNKS)
    if bitstream is None:
        found = b', '.join(child.fourcc for child in root.children).decode('latin-1')
        raise UnsupportedBitstreamFormatError(f"No VP8/VP8L bitstream found (chunks: {found or 'none'})")
    return bitstream


def build_extended_webp(bitstream: DataChunk, width: int, height: int, exif: bytes) -> ListChunk:
    """
    Build the chunk tree of an extended WebP holding bitstream and exif.

    Raises:
        UnsupportedBitstreamFormatError: If bitstream is not a VP8/VP8L chunk
        ContainerWriteError: If the canvas size cannot be represented
    """
    if bitstream.fourcc not in BITSTREAM_CHUNKS:
        raise UnsupportedBitstreamFormatError(f"Unsupported bitstream chunk {bitstream.fourcc!r}")
    return ListChunk(RIFF_ID, WEBP_ID, (
        DataChunk(CHUNK_VP8X, build_vp8x_payload(width, height)),
        DataChunk(bitstream.fourcc, bitstream.payload),
        DataChunk(CHUNK_EXIF, exif),
    ))


def assemble_webp(bitstream: DataChunk, width: int, height: int, exif: bytes) -> bytes:
    """
    Write an extended WebP file: VP8X, the bitstream chunk, then EXIF.

    Args:
        bitstream: VP8 or VP8L chunk taken from the encoder output
        width: Canvas width in pixels
        height: Canvas height in pixels
        exif: TIFF block for the EXIF chunk

    Returns:
        Complete WebP file as bytes
    """
    container = build_extended_webp(bitstream, width, height, exif)
    webp_data = container.to_bytes()
    logger.debug("assembled %d byte WebP (%s %d bytes, EXIF %d bytes)",
                 len(webp_data), bitstream.fourcc.decode('latin-1'), bitstream.payload_size, len(exif))
    return webp_data
