# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
PNG text metadata reader

This module reads uncompressed tEXt chunks from the PNG metadata table,
which is where Stable Diffusion front-ends store their generation
parameters under the keyword "parameters".

Only the chunks in front of the first IDAT are read, the same header pass
a PNG decoder makes before it starts inflating pixel data.

Copyright 2025 DNAi inc.
"""

import logging
import struct
import zlib
from typing import Iterator, List, Optional, Tuple

from png2webp.exceptions import SourceDecodeError

logger = logging.getLogger(__name__)

PNG_SIGNATURE = b'\x89PNG\r\n\x1a\n'

DEFAULT_KEYWORD = 'parameters'


class PNGTextReader:
    """
    Reads tEXt annotations from PNG data.

    Example:
        >>> reader = PNGTextReader(file_data=png_bytes)
        >>> reader.read_text('parameters')
        'masterpiece, 1girl\\nSteps: 20, Sampler: Euler a'
    """

    CHUNK_IHDR = b'IHDR'
    CHUNK_IDAT = b'IDAT'
    CHUNK_IEND = b'IEND'
    CHUNK_TEXT = b'tEXt'

    def __init__(self, file_data: bytes):
        self.file_data = file_data

    def iter_chunks(self) -> Iterator[Tuple[bytes, bytes]]:
        """
        Yield (chunk_type, chunk_data) for every chunk before the first IDAT.

        Raises:
            SourceDecodeError: If the signature, framing, CRC or IHDR placement is invalid
        """
        data = self.file_data
        if not data.startswith(PNG_SIGNATURE):
            raise SourceDecodeError("Invalid PNG signature")

        offset = len(PNG_SIGNATURE)
        first = True
        while True:
            if offset + 8 > len(data):
                raise SourceDecodeError(f"Truncated chunk header at offset {offset}")
            chunk_length, chunk_type = struct.unpack('>I4s', data[offset:offset + 8])
            if chunk_length > 0x7FFFFFFF:
                raise SourceDecodeError(f"Invalid chunk length {chunk_length} at offset {offset}")

            data_start = offset + 8
            data_end = data_start + chunk_length
            if data_end + 4 > len(data):
                raise SourceDecodeError(f"Truncated {chunk_type!r} chunk at offset {offset}")
            chunk_data = data[data_start:data_end]

            expected_crc = struct.unpack('>I', data[data_end:data_end + 4])[0]
            # CRC covers the chunk type and data, not the length
            if zlib.crc32(chunk_type + chunk_data) & 0xFFFFFFFF != expected_crc:
                raise SourceDecodeError(f"CRC mismatch in {chunk_type!r} chunk at offset {offset}")

            if first and chunk_type != self.CHUNK_IHDR:
                raise SourceDecodeError("IHDR is not the first chunk")
            first = False

            if chunk_type == self.CHUNK_IDAT:
                return
            if chunk_type == self.CHUNK_IEND:
                raise SourceDecodeError("IEND reached before any image data")

            yield chunk_type, chunk_data
            offset = data_end + 4

    def text_chunks(self) -> List[Tuple[str, str]]:
        """
        Return (keyword, text) pairs of every tEXt chunk, in file order.

        tEXt format: keyword (1-79 Latin-1 bytes) + NUL + Latin-1 text
        """
        texts = []
        for chunk_type, chunk_data in self.iter_chunks():
            if chunk_type != self.CHUNK_TEXT:
                continue
            null_pos = chunk_data.find(b'\x00')
            if null_pos < 1 or null_pos > 79:
                raise SourceDecodeError("Malformed tEXt chunk keyword")
            keyword = chunk_data[:null_pos].decode('latin-1')
            text = chunk_data[null_pos + 1:].decode('latin-1')
            texts.append((keyword, text))
        return texts

    def read_text(self, keyword: str = DEFAULT_KEYWORD) -> Optional[str]:
        """
        Return the text of the first tEXt chunk stored under keyword.

        Args:
            keyword: Exact (case-sensitive) tEXt keyword

        Returns:
            The annotation text, or None when no chunk carries the keyword
        """
        for chunk_keyword, text in self.text_chunks():
            if chunk_keyword == keyword:
                return text
        return None


def read_text_annotation(data: bytes, keyword: str = DEFAULT_KEYWORD) -> Optional[str]:
    """
    Read the first tEXt annotation stored under keyword in PNG data.

    Raises:
        SourceDecodeError: If the PNG metadata table cannot be parsed
    """
    text = PNGTextReader(file_data=data).read_text(keyword)
    if text is None:
        logger.debug("no %r text chunk found", keyword)
    else:
        logger.debug("found %r text chunk (%d characters)", keyword, len(text))
    return text
